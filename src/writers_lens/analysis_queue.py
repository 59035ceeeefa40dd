from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Tuple

from .colors import ColorScheme
from .engine import LensEngine
from .models import RelativeHighlight

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[str, str, List[RelativeHighlight]], None]


class QueueState(str, Enum):
    IDLE = "idle"
    DRAINING = "draining"


@dataclass(frozen=True, slots=True)
class AnalysisRequest:
    sentence_text: str
    sentence_range: Tuple[int, int]
    lens_id: str
    priority: int  # 0=edit, 1=typing, 2=paste

    @property
    def key(self) -> Tuple[str, str]:
        return self.sentence_text, self.lens_id


class AnalysisQueue:
    """Deduplicating, priority-ordered, single-flight queue of AI analyses.

    ``enqueue`` must be called from inside a running event loop; the first
    request starts a drain task that works through the pending requests one at
    a time, lowest priority value first and FIFO among equals. Failed analyses
    are logged and dropped.
    """

    def __init__(
        self,
        engine: LensEngine,
        on_complete: CompletionCallback,
        color_scheme: ColorScheme = ColorScheme.LIGHT,
    ) -> None:
        self._engine = engine
        self._on_complete = on_complete
        self.color_scheme = color_scheme
        self._pending: List[AnalysisRequest] = []
        self._in_flight: AnalysisRequest | None = None
        self._state = QueueState.IDLE
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> QueueState:
        return self._state

    @property
    def pending(self) -> Tuple[AnalysisRequest, ...]:
        return tuple(self._pending)

    @property
    def in_flight(self) -> AnalysisRequest | None:
        return self._in_flight

    def enqueue(
        self,
        sentence_text: str,
        sentence_range: Tuple[int, int],
        lens_id: str,
        priority: int = 1,
    ) -> None:
        request = AnalysisRequest(sentence_text, sentence_range, lens_id, priority)
        if self._in_flight is not None and self._in_flight.key == request.key:
            logger.debug("Already analysing %r for %s", sentence_text[:50], lens_id)
            return
        # A newer request for the same sentence and lens replaces the old one.
        self._pending = [item for item in self._pending if item.key != request.key]
        self._pending.append(request)
        logger.debug(
            "Queued %r for %s (priority %s, %s pending)",
            sentence_text[:50],
            lens_id,
            priority,
            len(self._pending),
        )
        if self._state is QueueState.IDLE:
            self._state = QueueState.DRAINING
            self._task = asyncio.get_running_loop().create_task(self._drain())

    def clear(self) -> None:
        """Drop every request that has not started yet."""
        if self._pending:
            logger.debug("Dropping %s pending analyses", len(self._pending))
        self._pending.clear()

    async def wait_idle(self) -> None:
        while self._task is not None and not self._task.done():
            await self._task

    def _next_request(self) -> AnalysisRequest:
        index = min(range(len(self._pending)), key=lambda i: self._pending[i].priority)
        return self._pending.pop(index)

    async def _drain(self) -> None:
        try:
            while self._pending:
                request = self._next_request()
                self._in_flight = request
                try:
                    highlights = await self._engine.analyze_sentence(
                        request.sentence_text, request.lens_id, self.color_scheme
                    )
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    logger.warning(
                        "AI analysis failed for lens=%s sentence=%r: %s",
                        request.lens_id,
                        request.sentence_text[:50],
                        exc,
                    )
                    continue
                finally:
                    self._in_flight = None
                self._on_complete(request.sentence_text, request.lens_id, highlights)
        finally:
            self._state = QueueState.IDLE
