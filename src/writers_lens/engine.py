from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Sequence

from .colors import ColorScheme
from .config import WritersLensConfig
from .lenses import Lens, build_default_lenses
from .models import Highlight, RelativeHighlight
from .span_finding import SpanFinder
from .tokenization import Tokenizer

logger = logging.getLogger(__name__)


class LensEngine:
    """Dispatches lenses over freshly tokenized text.

    Fast lenses fan out concurrently over the whole document. AI lenses run
    one after another and never overlap across callers, because the model
    session behind them handles a single request at a time. The engine keeps
    no cache.
    """

    def __init__(self, lenses: Sequence[Lens], tokenizer: Tokenizer | None = None) -> None:
        ids = [lens.id for lens in lenses]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate lens ids in registry: {ids}")
        self._lenses = list(lenses)
        self.tokenizer = tokenizer or Tokenizer()
        self._ai_lock: asyncio.Lock | None = None
        self._ai_lock_loop: asyncio.AbstractEventLoop | None = None

    @classmethod
    def from_config(
        cls, config: WritersLensConfig, span_finder: SpanFinder | None = None
    ) -> "LensEngine":
        lenses = build_default_lenses(
            span_finder,
            repetition_threshold=config.repetition_threshold,
            rhythm_window=config.rhythm_window,
        )
        return cls(lenses, Tokenizer(config.spacy_model))

    def _lock_for_running_loop(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if self._ai_lock is None or self._ai_lock_loop is not loop:
            self._ai_lock = asyncio.Lock()
            self._ai_lock_loop = loop
        return self._ai_lock

    @property
    def available_lenses(self) -> List[Lens]:
        return list(self._lenses)

    def get_lens(self, lens_id: str) -> Lens | None:
        return next((lens for lens in self._lenses if lens.id == lens_id), None)

    def _select(self, enabled_lens_ids: Iterable[str], requires_ai: bool) -> List[Lens]:
        enabled = set(enabled_lens_ids)
        return [
            lens
            for lens in self._lenses
            if lens.id in enabled and lens.requires_ai == requires_ai
        ]

    async def analyze(
        self,
        text: str,
        enabled_lens_ids: Iterable[str],
        color_scheme: ColorScheme = ColorScheme.LIGHT,
    ) -> List[Highlight]:
        """Tokenize once and run the enabled fast lenses concurrently."""
        fast_lenses = self._select(enabled_lens_ids, requires_ai=False)
        if not fast_lenses:
            return []
        document = self.tokenizer.tokenize(text)
        results = await asyncio.gather(
            *(lens.analyze(document, color_scheme) for lens in fast_lenses)
        )
        highlights: List[Highlight] = []
        for lens_highlights in results:
            highlights.extend(lens_highlights)
        return highlights

    async def analyze_with_ai(
        self,
        text: str,
        enabled_lens_ids: Iterable[str],
        color_scheme: ColorScheme = ColorScheme.LIGHT,
    ) -> List[Highlight]:
        """Run the enabled AI lenses over ``text`` (one sentence), in sequence."""
        ai_lenses = self._select(enabled_lens_ids, requires_ai=True)
        if not ai_lenses:
            return []
        document = self.tokenizer.tokenize(text)
        highlights: List[Highlight] = []
        async with self._lock_for_running_loop():
            for lens in ai_lenses:
                logger.debug("Running AI lens %s on %d chars", lens.id, len(text))
                highlights.extend(await lens.analyze(document, color_scheme))
        return highlights

    async def analyze_sentence(
        self,
        sentence_text: str,
        lens_id: str,
        color_scheme: ColorScheme = ColorScheme.LIGHT,
    ) -> List[RelativeHighlight]:
        """AI-analyse one sentence and express the result relative to its start."""
        highlights = await self.analyze_with_ai(sentence_text, [lens_id], color_scheme)
        return to_relative(highlights, sentence_text)


def to_relative(highlights: Iterable[Highlight], sentence_text: str) -> List[RelativeHighlight]:
    return [
        RelativeHighlight(
            offset=highlight.start_char,
            length=highlight.length,
            color=highlight.color,
            match_text=sentence_text[highlight.start_char : highlight.end_char],
        )
        for highlight in highlights
    ]
