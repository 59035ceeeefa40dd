from __future__ import annotations

from typing import Dict, List

from ..colors import Color, ColorScheme, accent
from ..models import Highlight, LexicalClass, TextDocument
from .base import Lens


class PartsOfSpeechLens(Lens):
    id = "pos"
    name = "Parts of Speech"
    description = "Colors nouns (blue), verbs (orange), adjectives (yellow)"
    category = "Grammar"

    def color_map(self, scheme: ColorScheme) -> Dict[LexicalClass, Color]:
        return {
            LexicalClass.NOUN: accent("blue", scheme),
            LexicalClass.VERB: accent("orange", scheme),
            LexicalClass.ADJECTIVE: accent("yellow", scheme),
        }

    async def analyze(
        self, document: TextDocument, color_scheme: ColorScheme
    ) -> List[Highlight]:
        colors = self.color_map(color_scheme)
        highlights: List[Highlight] = []
        for token in document.tokens:
            if token.lexical_class is None or token.lexical_class not in colors:
                continue
            highlights.append(
                Highlight(
                    token.start_char,
                    token.end_char,
                    colors[token.lexical_class],
                    token.lexical_class.value,
                    priority=1,
                )
            )
        return highlights
