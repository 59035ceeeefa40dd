from __future__ import annotations

import importlib
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, cast

from ..config import OpenAISettings

logger = logging.getLogger(__name__)

OpenAI: Callable[..., Any] | None = None


@dataclass(slots=True)
class SpanRequestMetadata:
    """Metadata about the sentence being analysed, used for logging."""

    lens_id: str
    char_count: int | None = None


class OpenAISpanClient:
    """Sends one span-finding prompt at a time to the OpenAI Responses API.

    The model session is not safe for concurrent use, so requests from
    different threads are serialized on a lock.
    """

    def __init__(self, settings: OpenAISettings, api_key: str) -> None:
        if not api_key:
            raise ValueError("OpenAI API key is required when AI lenses are enabled.")
        self._settings = settings
        self._api_key = api_key
        self._client_factory: Callable[..., Any] = _load_openai_factory()
        self._client: Any | None = None
        self._lock = threading.Lock()

    def complete(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        metadata: SpanRequestMetadata,
    ) -> str:
        """Return the raw text answer of the model for one sentence."""
        attempts = max(1, self._settings.max_attempts)
        attempt = 1
        while True:
            try:
                with self._lock:
                    response = self._responses().create(
                        model=self._settings.model,
                        instructions=system_prompt,
                        input=user_prompt,
                        temperature=self._settings.temperature,
                        max_output_tokens=self._settings.max_output_tokens,
                        top_p=self._settings.top_p,
                        timeout=self._settings.request_timeout,
                    )
                return response_text(response)
            except Exception as exc:  # pragma: no cover - network-related
                logger.warning(
                    "Span request failed for lens=%s chars=%s (attempt %s/%s): %s",
                    metadata.lens_id,
                    metadata.char_count,
                    attempt,
                    attempts,
                    exc,
                )
                if attempt >= attempts:
                    raise RuntimeError("OpenAI span request failed.") from exc
            time.sleep(min(2 ** (attempt - 1), 5))
            attempt += 1

    def _responses(self) -> Any:
        if self._client is None:
            self._client = self._client_factory(
                api_key=self._api_key,
                base_url=self._settings.base_url,
                organization=self._settings.organization,
            )
        return self._client.responses


def response_text(response: Any) -> str:
    """Collect the text of a Responses API result.

    Uses the SDK's ``output_text`` shortcut when present, otherwise joins the
    text segments of every output message.
    """
    text = getattr(response, "output_text", None)
    if isinstance(text, str) and text:
        return text
    parts: list[str] = []
    for item in getattr(response, "output", None) or []:
        for segment in _field(item, "content") or []:
            segment_text = _field(segment, "text")
            if isinstance(segment_text, str):
                parts.append(segment_text)
    if not parts:
        raise RuntimeError("OpenAI response contains no text output.")
    return "".join(parts)


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def _load_openai_factory() -> Callable[..., Any]:
    """Import the OpenAI client factory lazily so the core runs without it."""
    global OpenAI
    if OpenAI is not None:
        return OpenAI
    try:  # pragma: no cover - import guard
        module = importlib.import_module("openai")
    except ImportError as exc:  # pragma: no cover - handled at runtime
        raise RuntimeError(
            "openai package is not installed. Install extras via 'pip install .[llm-openai]'."
        ) from exc
    openai_cls = getattr(module, "OpenAI", None)
    if openai_cls is None:  # pragma: no cover
        raise RuntimeError(
            "openai.OpenAI client class is unavailable in this environment."
        )
    OpenAI = cast(Callable[..., Any], openai_cls)
    return OpenAI
