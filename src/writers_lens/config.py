from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, List, Mapping, MutableMapping

import yaml


@dataclass(slots=True)
class OpenAISettings:
    """Configuration block for the OpenAI-backed AI lenses."""

    enabled: bool = False
    model: str = "gpt-4.1-mini"
    api_key: str | None = None
    api_key_env: str = "OPENAI_API_KEY"
    base_url: str | None = None
    organization: str | None = None
    temperature: float = 0.0
    max_output_tokens: int = 400
    top_p: float = 1.0
    request_timeout: float = 60.0
    max_attempts: int = 1


@dataclass(slots=True)
class WritersLensConfig:
    """Configuration options for the analysis session."""

    spacy_model: str | None = "en_core_web_sm"
    color_scheme: str = "light"
    debounce_seconds: float = 0.5
    enabled_lenses: List[str] = field(
        default_factory=lambda: ["pos", "filler", "sentence-length"]
    )
    repetition_threshold: int = 3
    rhythm_window: int = 5
    cache_path: str | None = None
    openai: OpenAISettings = field(default_factory=OpenAISettings)

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable dictionary representation of the configuration."""
        return dict(asdict(self))


def _build_kwargs(data: Mapping[str, Any]) -> dict[str, Any]:
    allowed = {field.name for field in fields(WritersLensConfig)}
    kwargs = {key: data[key] for key in data if key in allowed}
    if "openai" in data:
        openai_value = data["openai"]
        if isinstance(openai_value, OpenAISettings):
            kwargs["openai"] = openai_value
        elif isinstance(openai_value, Mapping):
            kwargs["openai"] = _build_openai_settings(openai_value)
        else:
            kwargs.pop("openai")
    return kwargs


def _build_openai_settings(data: Mapping[str, Any]) -> OpenAISettings:
    openai_allowed = {field.name for field in fields(OpenAISettings)}
    filtered = {key: data[key] for key in data if key in openai_allowed}
    return OpenAISettings(**filtered)


def config_from_dict(data: Mapping[str, Any] | None) -> WritersLensConfig:
    """Build a WritersLensConfig from a dictionary-like input."""
    if data is None:
        return WritersLensConfig()
    return WritersLensConfig(**_build_kwargs(data))


def config_from_yaml(path: str | Path) -> WritersLensConfig:
    """Load configuration from a YAML file."""
    contents = Path(path).read_text(encoding="utf-8")
    parsed = yaml.safe_load(contents) or {}
    if not isinstance(parsed, MutableMapping):
        raise ValueError("Configuration YAML must define a mapping.")
    return config_from_dict(parsed)


def load_config(path: str | Path | None = None) -> WritersLensConfig:
    """Load configuration from YAML when provided, otherwise return defaults."""
    if path is None:
        return WritersLensConfig()
    return config_from_yaml(path)
