from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Sequence

from .analysis_queue import AnalysisQueue
from .cache import SentenceCache
from .colors import ColorScheme
from .config import WritersLensConfig
from .diffing import (
    PRIORITY_EDIT,
    PRIORITY_TYPING,
    classify_edit,
    pending_sentences,
    segment_sentences,
    sweep_priority,
)
from .engine import LensEngine
from .highlights import resolve_overlaps
from .lenses import Lens
from .models import Highlight, RelativeHighlight, Sentence

logger = logging.getLogger(__name__)


class WritingSession:
    """State for one open document: text, selected lens, cache and queue.

    Every method runs on one event loop, so the cache and the pending list are
    never touched concurrently. Methods that schedule work (``select_lens``,
    ``update_text``) must be called while that loop is running.
    """

    def __init__(
        self,
        engine: LensEngine,
        config: WritersLensConfig | None = None,
        cache: SentenceCache | None = None,
    ) -> None:
        self.engine = engine
        self.config = config or WritersLensConfig()
        self.color_scheme = ColorScheme(self.config.color_scheme)
        self.cache = cache or SentenceCache()
        self.queue = AnalysisQueue(engine, self._on_analysis_complete, self.color_scheme)
        self.text = ""
        self.selected_lens_id: str | None = None
        self.highlights: List[Highlight] = []
        self._fast_task: asyncio.Task[None] | None = None
        self._debounce_task: asyncio.Task[None] | None = None
        self._debounce_key: str | None = None

    @property
    def selected_lens(self) -> Lens | None:
        if self.selected_lens_id is None:
            return None
        return self.engine.get_lens(self.selected_lens_id)

    def select_lens(self, lens_id: str | None) -> None:
        self.queue.clear()
        self._cancel_debounce()
        self._cancel(self._fast_task)
        if lens_id is None:
            self.selected_lens_id = None
            self.highlights = []
            return
        lens = self.engine.get_lens(lens_id)
        if lens is None:
            raise ValueError(f"Unknown lens '{lens_id}'.")
        self.selected_lens_id = lens_id
        logger.info("Selected lens %s", lens_id)
        if not lens.requires_ai:
            self._schedule_fast_analysis()
            return

        sentences = segment_sentences(self.text, self.engine.tokenizer)
        self._rebuild(sentences)
        uncached = pending_sentences(sentences, self.cache, lens_id)
        for sentence in uncached:
            self._enqueue(sentence, lens_id, PRIORITY_TYPING)
        logger.info("Queued %s/%s sentences for analysis", len(uncached), len(sentences))

    def update_text(self, new_text: str) -> None:
        old_text, self.text = self.text, new_text
        lens = self.selected_lens
        if lens is None:
            self.highlights = []
            return
        if not lens.requires_ai:
            self._schedule_fast_analysis()
            return

        old_sentences = segment_sentences(old_text, self.engine.tokenizer)
        new_sentences = segment_sentences(new_text, self.engine.tokenizer)
        edit = classify_edit(old_sentences, new_sentences)
        edited = edit.edited_sentence
        if edited is not None:
            logger.debug("Sentence edited (%s): %r", edit.kind.value, edited.key[:50])
            self.cache.invalidate(lens.id, edited.key)
            self._rebuild(new_sentences)
            self._schedule_reanalysis(edited, lens.id)
            return

        priority = sweep_priority(old_sentences, new_sentences)
        for sentence in pending_sentences(new_sentences, self.cache, lens.id):
            # The debounce timer owns the sentence it is waiting on.
            if self._is_debouncing(sentence.key):
                continue
            self._enqueue(sentence, lens.id, priority)
        self._rebuild(new_sentences)

    def rendered_highlights(self) -> List[Highlight]:
        return resolve_overlaps(self.highlights)

    async def settle(self) -> None:
        """Wait until fast analysis, the debounce timer and the queue are done."""
        while True:
            tasks = [
                task
                for task in (self._fast_task, self._debounce_task)
                if task is not None and not task.done()
            ]
            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)
                continue
            await self.queue.wait_idle()
            if not self.queue.pending:
                return

    def close(self) -> None:
        self.queue.clear()
        self._cancel(self._fast_task)
        self._cancel_debounce()

    def save_cache(self, path: str | Path) -> None:
        self.cache.save(path)

    def load_cache(self, path: str | Path) -> None:
        self.cache = SentenceCache.load(path)
        lens = self.selected_lens
        if lens is not None and lens.requires_ai:
            self._rebuild(segment_sentences(self.text, self.engine.tokenizer))

    def _on_analysis_complete(
        self, sentence_text: str, lens_id: str, highlights: List[RelativeHighlight]
    ) -> None:
        self.cache.put(lens_id, sentence_text, highlights)
        logger.debug("Cached highlights for [%s]: %r", lens_id, sentence_text[:50])
        if lens_id == self.selected_lens_id:
            self._rebuild(segment_sentences(self.text, self.engine.tokenizer))

    def _rebuild(self, sentences: Sequence[Sentence]) -> None:
        if self.selected_lens_id is None:
            self.highlights = []
            return
        self.highlights = self.cache.project(
            sentences, self.selected_lens_id, len(self.text)
        )

    def _enqueue(self, sentence: Sentence, lens_id: str, priority: int) -> None:
        self.queue.enqueue(
            sentence.key, (sentence.start_char, sentence.end_char), lens_id, priority
        )

    def _schedule_fast_analysis(self) -> None:
        self._cancel(self._fast_task)
        self._fast_task = asyncio.get_running_loop().create_task(
            self._run_fast_analysis(self.text, self.selected_lens_id)
        )

    async def _run_fast_analysis(self, text: str, lens_id: str | None) -> None:
        if lens_id is None:
            return
        highlights = await self.engine.analyze(text, [lens_id], self.color_scheme)
        if lens_id == self.selected_lens_id and text == self.text:
            self.highlights = highlights

    def _schedule_reanalysis(self, sentence: Sentence, lens_id: str) -> None:
        self._cancel_debounce()
        self._debounce_key = sentence.key
        self._debounce_task = asyncio.get_running_loop().create_task(
            self._debounced_enqueue(sentence, lens_id)
        )

    def _cancel_debounce(self) -> None:
        self._cancel(self._debounce_task)
        self._debounce_key = None

    def _is_debouncing(self, sentence_key: str) -> bool:
        task = self._debounce_task
        return task is not None and not task.done() and self._debounce_key == sentence_key

    async def _debounced_enqueue(self, sentence: Sentence, lens_id: str) -> None:
        await asyncio.sleep(self.config.debounce_seconds)
        if lens_id != self.selected_lens_id:
            return
        if self.cache.contains(lens_id, sentence.key):
            logger.debug("Edited sentence already analysed: %r", sentence.key[:50])
            return
        logger.debug("Re-analysing edited sentence %r", sentence.key[:50])
        self._enqueue(sentence, lens_id, PRIORITY_EDIT)

    @staticmethod
    def _cancel(task: asyncio.Task[None] | None) -> None:
        if task is not None and not task.done():
            task.cancel()
