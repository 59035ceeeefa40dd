from __future__ import annotations

import logging
from typing import List

from ..colors import ColorScheme, accent
from ..models import Highlight, TextDocument
from ..span_finding import SpanFinder, SpanMatch
from .base import Lens

logger = logging.getLogger(__name__)


class AdjectiveLens(Lens):
    """Asks the generative backend for adjectives.

    Reported offsets are checked against the text; a wrong offset falls back
    to the first occurrence of the word and unknown words are dropped.
    """

    id = "adjectives"
    name = "AI Adjectives"
    description = "Uses a language model to find descriptive adjectives"
    category = "AI Analysis"
    requires_ai = True

    def __init__(self, span_finder: SpanFinder) -> None:
        self.span_finder = span_finder

    async def analyze(
        self, document: TextDocument, color_scheme: ColorScheme
    ) -> List[Highlight]:
        text = document.text
        if not text.strip():
            return []
        matches = await self.span_finder.find_spans(text)
        color = accent("yellow", color_scheme)
        highlights: List[Highlight] = []
        for match in matches:
            start = locate_match(text, match)
            if start is None:
                logger.debug("Dropping unlocatable match %r", match.text)
                continue
            highlights.append(
                Highlight(start, start + len(match.text), color, "adjective", priority=1)
            )
        return highlights


def locate_match(text: str, match: SpanMatch) -> int | None:
    if not match.text:
        return None
    if 0 <= match.start and text[match.start : match.start + len(match.text)] == match.text:
        return match.start
    found = text.find(match.text)
    return found if found >= 0 else None
