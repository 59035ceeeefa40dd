from tests.utils import sentences_from
from writers_lens.cache import SentenceCache
from writers_lens.diffing import (
    PRIORITY_PASTE,
    PRIORITY_TYPING,
    EditKind,
    classify_edit,
    pending_sentences,
    segment_sentences,
    sweep_priority,
)
from writers_lens.tokenization import Tokenizer


def test_complete_edit_in_place_is_reported():
    old = sentences_from(["Hi. ", "Bye."])
    new = sentences_from(["Hi there. ", "Bye."])
    result = classify_edit(old, new)

    assert result.kind is EditKind.EDIT_IN_PLACE
    assert result.edited_sentence is not None
    assert result.edited_sentence.key == "Hi there."


def test_incomplete_edit_in_place_waits():
    old = sentences_from(["Hi. ", "Bye."])
    new = sentences_from(["Hi there ", "Bye."])
    result = classify_edit(old, new)

    assert result.kind is EditKind.EDIT_IN_PLACE
    assert result.edited_sentence is None


def test_incomplete_appended_sentence_is_not_reported():
    old = sentences_from(["Hi. ", "Bye."])
    new = sentences_from(["Hi. ", "Bye. ", "New one"])
    result = classify_edit(old, new)

    assert result.kind is EditKind.APPEND
    assert result.edited_sentence is None


def test_complete_appended_sentence_is_reported():
    old = sentences_from(["Hi. ", "Bye."])
    new = sentences_from(["Hi. ", "Bye. ", "New one."])
    result = classify_edit(old, new)

    assert result.kind is EditKind.APPEND
    assert result.edited_sentence.key == "New one."


def test_trailing_whitespace_is_not_an_edit():
    old = sentences_from(["Hi."])
    new = sentences_from(["Hi. "])
    assert classify_edit(old, new).kind is EditKind.UNCHANGED


def test_deletion_is_structural():
    old = sentences_from(["Hi. ", "Bye. ", "Again."])
    new = sentences_from(["Hi. ", "Bye."])
    result = classify_edit(old, new)

    assert result.kind is EditKind.STRUCTURAL
    assert result.edited_sentence is None


def test_whitespace_only_sentence_is_never_reported():
    old = sentences_from(["Hi."])
    new = sentences_from(["Hi.", "   "])
    assert classify_edit(old, new).edited_sentence is None


def test_sweep_priority_detects_paste():
    old = sentences_from(["Hi."])
    assert sweep_priority(old, sentences_from(["Hi.", "Yo."])) == PRIORITY_TYPING
    assert sweep_priority(old, sentences_from(["Hi.", "Yo.", "Ok."])) == PRIORITY_PASTE


def test_pending_sentences_skips_cached_incomplete_and_blank():
    cache = SentenceCache()
    cache.put("adjectives", "Cached.", [])
    sentences = sentences_from(["Cached. ", "Fresh! ", "Half done", "  "])

    pending = pending_sentences(sentences, cache, "adjectives")
    assert [s.key for s in pending] == ["Fresh!"]
    assert [s.key for s in pending_sentences(sentences, cache, "other")] == [
        "Cached.",
        "Fresh!",
    ]


def test_segment_sentences_uses_tokenizer():
    sentences = segment_sentences("Hi. Bye. New one", Tokenizer(model=None))
    assert [s.key for s in sentences] == ["Hi.", "Bye.", "New one"]
