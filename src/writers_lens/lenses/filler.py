from __future__ import annotations

from collections import defaultdict
from typing import Dict, FrozenSet, List

from ..colors import ColorScheme, cycled_color, cycling_palette
from ..models import Highlight, TextDocument, Token
from .base import Lens

FILLER_WORDS: FrozenSet[str] = frozenset(
    {
        # core fillers
        "very", "really", "just", "actually", "basically",
        "literally", "definitely", "probably", "somewhat",
        # hedges
        "kind", "sort", "rather", "quite", "fairly", "pretty",
        # intensifiers
        "extremely", "incredibly", "absolutely", "totally",
        "completely", "utterly", "entirely",
        # vague qualifiers
        "thing", "stuff", "something", "somehow", "someplace",
        # discourse markers
        "well", "so", "now", "then", "like", "mean",
        # redundant adverbs
        "simply", "merely", "only", "essentially",
        "fundamentally", "particularly",
        # softeners
        "perhaps", "possibly", "maybe", "seemingly", "apparently",
        # time fillers
        "currently", "presently",
    }
)  # fmt: skip


class FillerLens(Lens):
    """Flags hedge and filler words.

    Each distinct filler gets its own color, assigned by the word's position
    in sorted order so a word keeps its color while the text changes around it.
    """

    id = "filler"
    name = "Filler Words"
    description = "Identifies unnecessary words like 'very', 'really', 'just', 'actually'"
    category = "Clarity"

    def __init__(self, vocabulary: FrozenSet[str] = FILLER_WORDS) -> None:
        self.vocabulary = vocabulary

    async def analyze(
        self, document: TextDocument, color_scheme: ColorScheme
    ) -> List[Highlight]:
        groups: Dict[str, List[Token]] = defaultdict(list)
        for token in document.tokens:
            word = token.text.lower()
            if word in self.vocabulary:
                groups[word].append(token)

        palette = cycling_palette(color_scheme)
        highlights: List[Highlight] = []
        for index, word in enumerate(sorted(groups)):
            color = cycled_color(index, palette)
            for token in groups[word]:
                highlights.append(
                    Highlight(
                        token.start_char,
                        token.end_char,
                        color,
                        f"filler-{word}",
                        priority=3,
                    )
                )
        return highlights
