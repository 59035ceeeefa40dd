from __future__ import annotations

from typing import FrozenSet, List

from ..colors import ColorScheme, accent
from ..models import Highlight, LexicalClass, TextDocument
from .base import Lens

BE_VERBS: FrozenSet[str] = frozenset(
    {"am", "is", "are", "was", "were", "be", "been", "being"}
)
LOOKAHEAD = 3


class PassiveVoiceLens(Lens):
    """Flags a be-verb followed, within three tokens, by a verb.

    Adverbs between the two are skipped ("was quickly written"); any other
    word ends the lookahead without a match.
    """

    id = "passive"
    name = "Passive Voice"
    description = "Highlights passive constructions to encourage active voice"
    category = "Style"

    async def analyze(
        self, document: TextDocument, color_scheme: ColorScheme
    ) -> List[Highlight]:
        color = accent("blue", color_scheme)
        tokens = document.tokens
        highlights: List[Highlight] = []
        for index, token in enumerate(tokens):
            if token.text.lower() not in BE_VERBS:
                continue
            for ahead in tokens[index + 1 : index + 1 + LOOKAHEAD]:
                if ahead.lexical_class is LexicalClass.ADVERB:
                    continue
                if ahead.lexical_class is LexicalClass.VERB:
                    highlights.append(
                        Highlight(
                            token.start_char,
                            ahead.end_char,
                            color,
                            "passive-voice",
                            priority=2,
                        )
                    )
                break
        return highlights
