"""Sentence-level change detection between two versions of a text."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

from .cache import SentenceCache
from .models import Sentence
from .tokenization import Tokenizer

PRIORITY_EDIT = 0
PRIORITY_TYPING = 1
PRIORITY_PASTE = 2


class EditKind(str, Enum):
    UNCHANGED = "unchanged"
    EDIT_IN_PLACE = "edit_in_place"
    APPEND = "append"
    STRUCTURAL = "structural"


@dataclass(frozen=True, slots=True)
class EditClassification:
    kind: EditKind
    edited_sentence: Sentence | None = None


def segment_sentences(text: str, tokenizer: Tokenizer) -> List[Sentence]:
    """Split ``text`` into sentences; the whole text is re-segmented every time."""
    return tokenizer.sentences(text)


def is_blank(sentence: Sentence) -> bool:
    return not sentence.key.strip()


def classify_edit(
    old_sentences: Sequence[Sentence], new_sentences: Sequence[Sentence]
) -> EditClassification:
    """Compare two segmentations position by position.

    The first differing position is an in-place edit; with no difference but
    more new sentences the last one was appended. The edited sentence is only
    reported once it is complete, so half-typed sentences are left alone.
    """
    for old, new in zip(old_sentences, new_sentences):
        if old.key != new.key:
            return EditClassification(EditKind.EDIT_IN_PLACE, _reportable(new))

    if len(new_sentences) > len(old_sentences):
        return EditClassification(EditKind.APPEND, _reportable(new_sentences[-1]))
    if len(new_sentences) == len(old_sentences):
        return EditClassification(EditKind.UNCHANGED)
    return EditClassification(EditKind.STRUCTURAL)


def _reportable(sentence: Sentence) -> Sentence | None:
    if is_blank(sentence) or not sentence.is_complete:
        return None
    return sentence


def sweep_priority(
    old_sentences: Sequence[Sentence], new_sentences: Sequence[Sentence]
) -> int:
    """More than one new sentence at once means a paste."""
    if len(new_sentences) - len(old_sentences) > 1:
        return PRIORITY_PASTE
    return PRIORITY_TYPING


def pending_sentences(
    sentences: Sequence[Sentence], cache: SentenceCache, lens_id: str
) -> List[Sentence]:
    """Complete, non-blank sentences with no cache entry for ``lens_id``."""
    return [
        sentence
        for sentence in sentences
        if sentence.is_complete
        and not is_blank(sentence)
        and not cache.contains(lens_id, sentence.key)
    ]
