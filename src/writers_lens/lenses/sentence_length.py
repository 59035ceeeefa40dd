from __future__ import annotations

from typing import List

from ..colors import ColorScheme, accent
from ..models import Highlight, SentenceLength, TextDocument
from .base import Lens

_BUCKET_COLORS = {
    SentenceLength.SHORT: "green",
    SentenceLength.MEDIUM: "yellow",
    SentenceLength.LONG: "red",
}


class SentenceLengthLens(Lens):
    id = "sentence-length"
    name = "Sentence Length"
    description = "Shows sentence variety: green (short), yellow (medium), red (long)"
    category = "Readability"

    async def analyze(
        self, document: TextDocument, color_scheme: ColorScheme
    ) -> List[Highlight]:
        return [
            Highlight(
                sentence.start_char,
                sentence.end_char,
                accent(_BUCKET_COLORS[sentence.length], color_scheme),
                f"sentence-{sentence.length.value}",
                priority=0,
            )
            for sentence in document.sentences
        ]
