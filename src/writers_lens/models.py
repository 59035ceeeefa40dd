from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

from .colors import Color


class LexicalClass(str, Enum):
    """Coarse word class assigned by the tagger."""

    NOUN = "noun"
    VERB = "verb"
    ADJECTIVE = "adjective"
    ADVERB = "adverb"
    PRONOUN = "pronoun"
    PREPOSITION = "preposition"
    OTHER = "other"


class SentenceLength(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


SENTENCE_TERMINATORS = (".", "!", "?")


@dataclass(frozen=True, slots=True)
class Token:
    """A word token with inclusive-exclusive character offsets."""

    text: str
    start_char: int
    end_char: int
    lexical_class: LexicalClass | None = None
    lemma: str | None = None


@dataclass(frozen=True, slots=True)
class Sentence:
    """A sentence span of the source text and the word tokens inside it."""

    text: str
    start_char: int
    end_char: int
    tokens: Tuple[Token, ...] = ()

    @property
    def length(self) -> SentenceLength:
        count = len(self.tokens)
        if count < 10:
            return SentenceLength.SHORT
        if count < 20:
            return SentenceLength.MEDIUM
        return SentenceLength.LONG

    @property
    def key(self) -> str:
        """Identity used for diffing and caching: the text minus trailing whitespace."""
        return self.text.rstrip()

    @property
    def is_complete(self) -> bool:
        return self.text.strip().endswith(SENTENCE_TERMINATORS)


@dataclass(frozen=True, slots=True)
class TextDocument:
    """Tokenized snapshot of a text. Rebuilt from scratch on every pass."""

    text: str
    tokens: Tuple[Token, ...] = ()
    sentences: Tuple[Sentence, ...] = ()
    tokens_by_lemma: Dict[str, List[Token]] = field(default_factory=dict)
    word_frequency: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Highlight:
    """A colored span. Priority 0 is background, 3 wins every overlap."""

    start_char: int
    end_char: int
    color: Color
    category: str
    priority: int = 0

    @property
    def length(self) -> int:
        return self.end_char - self.start_char


@dataclass(frozen=True, slots=True)
class RelativeHighlight:
    """Highlight stored relative to the start of its sentence."""

    offset: int
    length: int
    color: Color
    match_text: str

    def to_dict(self) -> dict[str, object]:
        return {
            "offsetFromSentenceStart": self.offset,
            "length": self.length,
            "color": self.color.to_dict(),
            "matchText": self.match_text,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "RelativeHighlight":
        color_data = data["color"]
        if not isinstance(color_data, dict):
            raise ValueError("Cached highlight color must be a mapping.")
        return cls(
            offset=int(data["offsetFromSentenceStart"]),  # type: ignore[arg-type]
            length=int(data["length"]),  # type: ignore[arg-type]
            color=Color.from_dict(color_data),
            match_text=str(data.get("matchText", "")),
        )
