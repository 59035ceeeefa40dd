from __future__ import annotations

from bisect import bisect_left, insort
from typing import Iterable, List, Tuple

from .models import Highlight


def resolve_overlaps(highlights: Iterable[Highlight]) -> List[Highlight]:
    """Flatten highlights into non-overlapping spans for rendering.

    Higher priority wins any overlap; at equal priority the highlight that
    starts first wins. Empty spans are dropped. The result is ordered by start.
    """
    ordered = sorted(
        (h for h in highlights if h.end_char > h.start_char),
        key=lambda h: (-h.priority, h.start_char),
    )
    taken: List[Tuple[int, int]] = []
    accepted: List[Highlight] = []
    for highlight in ordered:
        if _overlaps(taken, highlight.start_char, highlight.end_char):
            continue
        insort(taken, (highlight.start_char, highlight.end_char))
        accepted.append(highlight)
    accepted.sort(key=lambda h: h.start_char)
    return accepted


def _overlaps(taken: List[Tuple[int, int]], start: int, end: int) -> bool:
    index = bisect_left(taken, (start, end))
    if index > 0 and taken[index - 1][1] > start:
        return True
    return index < len(taken) and taken[index][0] < end


def highlight_to_dict(highlight: Highlight) -> dict[str, object]:
    return {
        "start": highlight.start_char,
        "end": highlight.end_char,
        "color": highlight.color.to_dict(),
        "category": highlight.category,
        "priority": highlight.priority,
    }
