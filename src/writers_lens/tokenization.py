"""Sentence and word segmentation with part-of-speech tags, backed by spaCy."""

from __future__ import annotations

import logging
from collections import defaultdict
from functools import lru_cache
from typing import Dict, List, Sequence

import spacy
from spacy.language import Language
from spacy.tokens import Doc

from .models import LexicalClass, Sentence, TextDocument, Token

logger = logging.getLogger(__name__)

DEFAULT_SPACY_MODEL = "en_core_web_sm"

_POS_TO_CLASS: Dict[str, LexicalClass] = {
    "NOUN": LexicalClass.NOUN,
    "PROPN": LexicalClass.NOUN,
    "VERB": LexicalClass.VERB,
    "AUX": LexicalClass.VERB,
    "ADJ": LexicalClass.ADJECTIVE,
    "ADV": LexicalClass.ADVERB,
    "PRON": LexicalClass.PRONOUN,
    "ADP": LexicalClass.PREPOSITION,
}


@lru_cache(maxsize=4)
def get_nlp(model: str | None = DEFAULT_SPACY_MODEL) -> Language:
    """Return a cached spaCy pipeline that always yields sentence boundaries."""
    if model is None:
        nlp = spacy.blank("en")
    else:
        try:
            nlp = spacy.load(model)
        except OSError:
            logger.warning(
                "spaCy model '%s' is not installed; falling back to a blank English "
                "pipeline without tags. Install via `python -m spacy download %s`.",
                model,
                model,
            )
            nlp = spacy.blank("en")
    if not {"parser", "senter", "sentencizer"} & set(nlp.pipe_names):
        nlp.add_pipe("sentencizer")
    return nlp


def lexical_class_for(pos: str) -> LexicalClass | None:
    if not pos:
        return None
    return _POS_TO_CLASS.get(pos, LexicalClass.OTHER)


class Tokenizer:
    """Turns raw text into a :class:`TextDocument`.

    Sentence ranges partition the input: each sentence runs up to the start of
    the next one, so trailing whitespace belongs to the sentence before it.
    """

    def __init__(self, model: str | None = DEFAULT_SPACY_MODEL) -> None:
        self.model = model

    def tokenize(self, text: str) -> TextDocument:
        if not text:
            return TextDocument(text=text)
        try:
            doc = get_nlp(self.model)(text)
        except Exception as exc:  # pragma: no cover - pipeline failures are rare
            logger.warning("Tokenization failed, returning untagged text: %s", exc)
            return TextDocument(
                text=text, sentences=(Sentence(text, 0, len(text)),)
            )

        words = [_make_token(token) for token in doc if _is_word(token)]
        boundaries = _sentence_boundaries(doc)
        sentences = _build_sentences(text, boundaries, words)
        return _assemble(text, words, sentences)

    def sentences(self, text: str) -> List[Sentence]:
        return list(self.tokenize(text).sentences)


def _is_word(token) -> bool:
    return not token.is_space and not token.is_punct


def _make_token(token) -> Token:
    lemma = token.lemma_.lower() if token.lemma_ else None
    return Token(
        text=token.text,
        start_char=token.idx,
        end_char=token.idx + len(token.text),
        lexical_class=lexical_class_for(token.pos_),
        lemma=lemma,
    )


def _sentence_boundaries(doc: Doc) -> List[int]:
    starts: set[int] = set()
    for span in doc.sents:
        first = next((token for token in span if not token.is_space), None)
        if first is not None:
            starts.add(first.idx)
    # Blank lines always close a sentence, even without terminal punctuation.
    for token in doc[:-1]:
        if token.is_space and "\n\n" in token.text:
            following = next(
                (t for t in doc[token.i + 1 :] if not t.is_space), None
            )
            if following is not None:
                starts.add(following.idx)
    ordered = sorted(starts)
    if not ordered:
        return [0]
    # Leading whitespace belongs to the first sentence.
    ordered[0] = 0
    return ordered


def _build_sentences(
    text: str, boundaries: Sequence[int], words: Sequence[Token]
) -> List[Sentence]:
    sentences: List[Sentence] = []
    word_idx = 0
    for position, start in enumerate(boundaries):
        end = boundaries[position + 1] if position + 1 < len(boundaries) else len(text)
        if end <= start:
            continue
        members: List[Token] = []
        while word_idx < len(words) and words[word_idx].start_char < end:
            members.append(words[word_idx])
            word_idx += 1
        sentences.append(Sentence(text[start:end], start, end, tuple(members)))
    return sentences


def _assemble(
    text: str, words: Sequence[Token], sentences: Sequence[Sentence]
) -> TextDocument:
    lemma_map: Dict[str, List[Token]] = defaultdict(list)
    frequency: Dict[str, int] = defaultdict(int)
    for token in words:
        if token.lemma:
            lemma_map[token.lemma].append(token)
        frequency[token.text.lower()] += 1
    return TextDocument(
        text=text,
        tokens=tuple(words),
        sentences=tuple(sentences),
        tokens_by_lemma=dict(lemma_map),
        word_frequency=dict(frequency),
    )
