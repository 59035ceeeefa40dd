from __future__ import annotations

import re
from typing import Dict, List, Mapping, Sequence

from writers_lens.models import LexicalClass, Sentence, TextDocument, Token
from writers_lens.tokenization import _assemble

TOKEN_PATTERN = re.compile(r"\w+(?:'\w+)?", re.UNICODE)
SENTENCE_END = re.compile(r"[.!?]+\s*")


def tagged_document(
    text: str,
    tags: Mapping[str, LexicalClass] | None = None,
    lemmas: Mapping[str, str] | None = None,
) -> TextDocument:
    """Build a TextDocument by hand so lens tests do not need a spaCy model.

    ``tags`` and ``lemmas`` are keyed by lowercased surface word. Words default
    to their lowercased form as lemma and to no lexical class.
    """
    tags = tags or {}
    lemmas = lemmas or {}
    tokens = [
        Token(
            text=match.group(),
            start_char=match.start(),
            end_char=match.end(),
            lexical_class=tags.get(match.group().lower()),
            lemma=lemmas.get(match.group().lower(), match.group().lower()),
        )
        for match in TOKEN_PATTERN.finditer(text)
    ]
    boundaries = [0] + [m.end() for m in SENTENCE_END.finditer(text) if m.end() < len(text)]
    sentences: List[Sentence] = []
    for index, start in enumerate(boundaries):
        end = boundaries[index + 1] if index + 1 < len(boundaries) else len(text)
        if end <= start:
            continue
        members = tuple(t for t in tokens if start <= t.start_char < end)
        sentences.append(Sentence(text[start:end], start, end, members))
    return _assemble(text, tokens, sentences)


def sentences_from(texts: Sequence[str]) -> List[Sentence]:
    """Lay out sentence texts back to back, as a segmentation of their concatenation."""
    sentences: List[Sentence] = []
    offset = 0
    for text in texts:
        sentences.append(Sentence(text, offset, offset + len(text)))
        offset += len(text)
    return sentences


def words_sentence(count: int, start: int = 0) -> Sentence:
    """A sentence with ``count`` word tokens."""
    words = [f"w{i}" for i in range(count)]
    text = " ".join(words) + "."
    tokens: List[Token] = []
    cursor = start
    for word in words:
        tokens.append(Token(word, cursor, cursor + len(word)))
        cursor += len(word) + 1
    return Sentence(text, start, start + len(text), tuple(tokens))


def document_from_sentences(sentences: Sequence[Sentence]) -> TextDocument:
    text = "".join(s.text for s in sentences)
    tokens = [t for s in sentences for t in s.tokens]
    return _assemble(text, tokens, sentences)


TAGS: Dict[str, LexicalClass] = {
    "the": LexicalClass.OTHER,
    "a": LexicalClass.OTHER,
    "ball": LexicalClass.NOUN,
    "boy": LexicalClass.NOUN,
    "sky": LexicalClass.NOUN,
    "letter": LexicalClass.NOUN,
    "was": LexicalClass.VERB,
    "is": LexicalClass.VERB,
    "being": LexicalClass.VERB,
    "thrown": LexicalClass.VERB,
    "written": LexicalClass.VERB,
    "by": LexicalClass.PREPOSITION,
    "blue": LexicalClass.ADJECTIVE,
    "quickly": LexicalClass.ADVERB,
    "very": LexicalClass.ADVERB,
    "she": LexicalClass.PRONOUN,
}
