from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import List, TypedDict

import typer
import yaml

from .cache import SentenceCache
from .colors import ColorScheme
from .config import OpenAISettings, WritersLensConfig, load_config
from .engine import LensEngine
from .highlights import highlight_to_dict
from .llm import OpenAISpanClient
from .session import WritingSession
from .span_finding import NoOpSpanFinder, OpenAISpanFinder, SpanFinder

logger = logging.getLogger(__name__)

app = typer.Typer(help="Writers Lens CLI.", no_args_is_help=True)


class LensResult(TypedDict):
    lens_id: str
    highlights: List[dict[str, object]]


@app.command()
def lenses(
    config: Path | None = typer.Option(None, "--config", "-c"),
) -> None:
    """List the available lenses as JSON."""
    cfg = load_config(config)
    engine = LensEngine.from_config(cfg)
    typer.echo(
        json.dumps(
            {"lenses": [lens.describe() for lens in engine.available_lenses]}, indent=2
        )
    )


@app.command()
def analyze(
    input_path: Path = typer.Option(
        ..., exists=True, readable=True, dir_okay=False, file_okay=True
    ),
    lens: List[str] = typer.Option(
        [], "--lens", "-l", help="Lens id to run; repeat for several lenses."
    ),
    config: Path | None = typer.Option(None, "--config", "-c"),
    color_scheme: str | None = typer.Option(
        None, "--color-scheme", help="Palette to use: 'light' or 'dark'."
    ),
    spacy_model: str | None = typer.Option(
        None, "--spacy-model", help="spaCy pipeline used for tagging."
    ),
    cache_path: Path | None = typer.Option(
        None, "--cache-path", help="Sentence cache JSON to restore and update."
    ),
    render: bool = typer.Option(
        False, "--render/--raw", help="Resolve overlaps the way the editor renders."
    ),
    openai_enabled: bool | None = typer.Option(
        None,
        "--openai-enabled/--openai-disabled",
        help="Toggle the OpenAI backend for AI lenses.",
    ),
    openai_model: str | None = typer.Option(
        None, "--openai-model", help="OpenAI model identifier (e.g., gpt-4.1-mini)."
    ),
    openai_api_key: str | None = typer.Option(
        None, "--openai-api-key", help="Explicit OpenAI API key (prefer env vars)."
    ),
    openai_base_url: str | None = typer.Option(
        None, "--openai-base-url", help="Custom OpenAI base URL (Azure, proxy, etc.)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Run lenses over a text file and emit the highlights as JSON."""
    _configure_logging(verbose)
    cfg = load_config(config)
    if color_scheme:
        cfg.color_scheme = color_scheme
    if spacy_model:
        cfg.spacy_model = spacy_model
    if cache_path:
        cfg.cache_path = str(cache_path)
    _apply_openai_overrides(
        cfg.openai, openai_enabled, openai_model, openai_api_key, openai_base_url
    )
    try:
        ColorScheme(cfg.color_scheme)
    except ValueError as exc:
        raise typer.BadParameter(f"Unknown color scheme '{cfg.color_scheme}'.") from exc

    engine = LensEngine.from_config(cfg, _build_span_finder(cfg))
    lens_ids = lens or cfg.enabled_lenses
    unknown = [lens_id for lens_id in lens_ids if engine.get_lens(lens_id) is None]
    if unknown:
        raise typer.BadParameter(f"Unknown lens id(s): {', '.join(unknown)}")
    if not cfg.openai.enabled and any(
        engine.get_lens(lens_id).requires_ai for lens_id in lens_ids  # type: ignore[union-attr]
    ):
        typer.echo(
            "AI lens requested but no LLM backend configured; it will find nothing.",
            err=True,
        )

    text = input_path.read_text(encoding="utf-8")
    results = asyncio.run(_run_lenses(engine, cfg, text, lens_ids, render))
    typer.echo(json.dumps({"document": input_path.name, "lenses": results}, indent=2))


@app.command("print-config")
def print_config() -> None:
    """Print the default configuration as YAML."""
    cfg = WritersLensConfig()
    typer.echo(yaml.safe_dump(cfg.to_dict(), sort_keys=False))


def main() -> None:
    app()


async def _run_lenses(
    engine: LensEngine,
    config: WritersLensConfig,
    text: str,
    lens_ids: List[str],
    render: bool,
) -> List[LensResult]:
    """Drive a session through each lens and collect its settled highlights."""
    cache = SentenceCache.load(config.cache_path) if config.cache_path else None
    session = WritingSession(engine, config, cache)
    session.update_text(text)
    results: List[LensResult] = []
    try:
        for lens_id in lens_ids:
            session.select_lens(lens_id)
            await session.settle()
            highlights = (
                session.rendered_highlights() if render else list(session.highlights)
            )
            results.append(
                {
                    "lens_id": lens_id,
                    "highlights": [highlight_to_dict(h) for h in highlights],
                }
            )
    finally:
        session.close()
    if config.cache_path:
        if config.openai.enabled:
            session.save_cache(config.cache_path)
        else:
            # Empty results from the no-op backend would mask real analysis later.
            logger.info("No LLM backend configured; leaving %s untouched", config.cache_path)
    return results


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _apply_openai_overrides(
    settings: OpenAISettings,
    openai_enabled: bool | None,
    openai_model: str | None,
    openai_api_key: str | None,
    openai_base_url: str | None,
) -> None:
    """Override OpenAI settings from CLI flags."""
    if openai_enabled is not None:
        settings.enabled = openai_enabled
    if openai_model:
        settings.model = openai_model
    if openai_api_key:
        settings.api_key = openai_api_key
    if openai_base_url:
        settings.base_url = openai_base_url


def _build_span_finder(config: WritersLensConfig) -> SpanFinder:
    """Instantiate the generative backend for AI lenses."""
    if not config.openai.enabled:
        return NoOpSpanFinder()
    api_key = _resolve_openai_api_key(config.openai)
    client = OpenAISpanClient(config.openai, api_key=api_key)
    return OpenAISpanFinder(client)


def _resolve_openai_api_key(settings: OpenAISettings) -> str:
    """Resolve the API key from explicit config or the configured environment variable."""
    if settings.api_key:
        return settings.api_key
    env_name = settings.api_key_env or "OPENAI_API_KEY"
    if env_name in os.environ:
        return os.environ[env_name]
    raise typer.BadParameter(
        "OpenAI API key not provided. Use --openai-api-key or set the configured environment variable."
    )


if __name__ == "__main__":
    main()
