from __future__ import annotations

from typing import List

from ..colors import ColorScheme, cycled_color, cycling_palette
from ..models import Highlight, TextDocument
from .base import Lens


class RepetitionLens(Lens):
    id = "repetition"
    name = "Word Repetition"
    description = "Highlights words used 3+ times to vary vocabulary"
    category = "Style"

    def __init__(self, threshold: int = 3) -> None:
        self.threshold = threshold

    async def analyze(
        self, document: TextDocument, color_scheme: ColorScheme
    ) -> List[Highlight]:
        repeated = sorted(
            lemma
            for lemma, tokens in document.tokens_by_lemma.items()
            if len(tokens) >= self.threshold
        )
        palette = cycling_palette(color_scheme)
        highlights: List[Highlight] = []
        for index, lemma in enumerate(repeated):
            color = cycled_color(index, palette)
            for token in document.tokens_by_lemma[lemma]:
                highlights.append(
                    Highlight(
                        token.start_char,
                        token.end_char,
                        color,
                        f"repetition-{lemma}",
                        priority=2,
                    )
                )
        return highlights
