from __future__ import annotations

import math
from collections import Counter
from enum import Enum
from typing import List, Sequence

from ..colors import Color, ColorScheme, accent
from ..models import Highlight, TextDocument
from .base import Lens

MAX_ENTROPY = math.log2(4)
HIGH_VARIETY = 0.6
LOW_VARIETY = 0.3


class RhythmCategory(str, Enum):
    VERY_SHORT = "very-short"
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"

    @classmethod
    def for_word_count(cls, count: int) -> "RhythmCategory":
        if count <= 5:
            return cls.VERY_SHORT
        if count <= 10:
            return cls.SHORT
        if count <= 20:
            return cls.MEDIUM
        return cls.LONG


# (warm, cool) accent per bucket
_PALETTE = {
    RhythmCategory.VERY_SHORT: ("red", "purple"),
    RhythmCategory.SHORT: ("orange", "blue"),
    RhythmCategory.MEDIUM: ("yellow", "cyan"),
    RhythmCategory.LONG: ("magenta", "green"),
}


def shannon_entropy(categories: Sequence[RhythmCategory]) -> float:
    """H = -sum(p * log2 p) over the observed categories."""
    if not categories:
        return 0.0
    total = float(len(categories))
    entropy = 0.0
    for count in Counter(categories).values():
        probability = count / total
        entropy -= probability * math.log2(probability)
    return entropy


def rhythm_color(
    category: RhythmCategory, entropy: float, scheme: ColorScheme
) -> Color:
    warm_name, cool_name = _PALETTE[category]
    normalized = min(entropy / MAX_ENTROPY, 1.0)
    if normalized > HIGH_VARIETY:
        return accent(cool_name, scheme)
    if normalized < LOW_VARIETY:
        return accent(warm_name, scheme)
    fraction = (normalized - LOW_VARIETY) / (HIGH_VARIETY - LOW_VARIETY)
    return accent(warm_name, scheme).blended(fraction, accent(cool_name, scheme))


class RhythmLens(Lens):
    """Colors sentences by how varied the lengths around them are.

    Cool colors mean varied rhythm, warm colors mean monotony.
    """

    id = "rhythm"
    name = "Rhythm"
    description = (
        "Shows writing rhythm - cool colors indicate variety, warm colors indicate monotony"
    )
    category = "Style"

    def __init__(self, window_size: int = 5) -> None:
        self.window_size = max(1, window_size)

    async def analyze(
        self, document: TextDocument, color_scheme: ColorScheme
    ) -> List[Highlight]:
        categories = [
            RhythmCategory.for_word_count(len(sentence.tokens))
            for sentence in document.sentences
        ]
        half = self.window_size // 2
        highlights: List[Highlight] = []
        for index, sentence in enumerate(document.sentences):
            window = categories[max(0, index - half) : index + half + 1]
            category = categories[index]
            highlights.append(
                Highlight(
                    sentence.start_char,
                    sentence.end_char,
                    rhythm_color(category, shannon_entropy(window), color_scheme),
                    f"rhythm-{category.value}",
                    priority=0,
                )
            )
        return highlights
