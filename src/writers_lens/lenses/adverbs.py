from __future__ import annotations

from typing import List

from ..colors import ColorScheme, accent
from ..models import Highlight, LexicalClass, TextDocument
from .base import Lens


class AdverbLens(Lens):
    id = "adverbs"
    name = "Adverb Overuse"
    description = "Highlights adverbs and -ly words for concise writing"
    category = "Style"

    async def analyze(
        self, document: TextDocument, color_scheme: ColorScheme
    ) -> List[Highlight]:
        color = accent("orange", color_scheme)
        return [
            Highlight(token.start_char, token.end_char, color, "adverb", priority=2)
            for token in document.tokens
            # The suffix check catches adverbs the tagger missed.
            if token.lexical_class is LexicalClass.ADVERB or token.text.endswith("ly")
        ]
