from __future__ import annotations

import asyncio
import inspect
import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Union

from .llm.openai_client import OpenAISpanClient, SpanRequestMetadata

logger = logging.getLogger(__name__)

ADJECTIVE_INSTRUCTIONS = (
    "Your job is to find all adjectives in the provided text.\n"
    "Return each adjective with its exact starting position in the text.\n"
    "The position should be 0-indexed (first character is position 0).\n"
    "Only identify true adjectives (descriptive words that modify nouns).\n"
    "Be precise about the position - count characters from the beginning.\n"
    'Respond with JSON only, shaped as {"matches": [{"text": "...", "start": 0}]}.'
)

USER_PROMPT_TEMPLATE = "Find all adjectives in this text and their positions:\n{text}"

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class SpanParseError(ValueError):
    """Raised when model output cannot be read as a list of span matches."""


@dataclass(frozen=True, slots=True)
class SpanMatch:
    """A span reported by the generative backend."""

    text: str
    start: int


class SpanFinder(ABC):
    """Capability interface for the generative backend.

    Implementations may take arbitrarily long and may raise; callers are
    expected to invoke them one at a time.
    """

    @abstractmethod
    async def find_spans(self, text: str) -> List[SpanMatch]:
        """Return the spans found in ``text``."""
        raise NotImplementedError


class NoOpSpanFinder(SpanFinder):
    """Finds nothing. Used when no backend is configured."""

    async def find_spans(self, text: str) -> List[SpanMatch]:
        return []


SpanCallable = Callable[[str], Union[List[SpanMatch], Awaitable[List[SpanMatch]]]]


class CallableSpanFinder(SpanFinder):
    """Adapt a plain or async callable into the SpanFinder interface."""

    def __init__(self, func: SpanCallable) -> None:
        self._func = func

    async def find_spans(self, text: str) -> List[SpanMatch]:
        result = self._func(text)
        if inspect.isawaitable(result):
            result = await result
        return list(result)


class OpenAISpanFinder(SpanFinder):
    """SpanFinder backed by the OpenAI Responses API."""

    def __init__(
        self,
        client: OpenAISpanClient,
        *,
        lens_id: str = "adjectives",
        instructions: str = ADJECTIVE_INSTRUCTIONS,
        user_prompt_template: str = USER_PROMPT_TEMPLATE,
    ) -> None:
        self._client = client
        self._lens_id = lens_id
        self._instructions = instructions
        self._user_prompt_template = user_prompt_template

    async def find_spans(self, text: str) -> List[SpanMatch]:
        metadata = SpanRequestMetadata(lens_id=self._lens_id, char_count=len(text))
        # The client blocks on network I/O; keep the event loop responsive.
        raw = await asyncio.to_thread(
            self._client.complete,
            system_prompt=self._instructions,
            user_prompt=self._user_prompt_template.format(text=text),
            metadata=metadata,
        )
        return parse_span_matches(raw)


def parse_span_matches(raw: str) -> List[SpanMatch]:
    """Parse the JSON answer of the model into span matches.

    Accepts either ``{"matches": [...]}`` or a bare list, optionally wrapped in
    a Markdown code fence. Entries need a string ``text`` (``word`` is also
    accepted) and an integer ``start`` (or ``startIndex``).
    """
    cleaned = _FENCE_RE.sub("", raw.strip())
    try:
        payload: Any = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise SpanParseError(f"Model output is not valid JSON: {exc}") from exc
    if isinstance(payload, dict):
        payload = payload.get("matches", payload.get("adjectives"))
    if not isinstance(payload, list):
        raise SpanParseError("Model output does not contain a list of matches.")

    matches: List[SpanMatch] = []
    for item in payload:
        if not isinstance(item, dict):
            raise SpanParseError(f"Unexpected match entry: {item!r}")
        text = item.get("text", item.get("word"))
        start = item.get("start", item.get("startIndex"))
        if not isinstance(text, str) or not isinstance(start, int) or isinstance(start, bool):
            raise SpanParseError(f"Match entry is missing text/start: {item!r}")
        matches.append(SpanMatch(text=text, start=start))
    logger.debug("Parsed %s span matches", len(matches))
    return matches
