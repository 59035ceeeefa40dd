import asyncio
from pathlib import Path
from typing import List

import pytest

from writers_lens.cache import SentenceCache
from writers_lens.config import WritersLensConfig
from writers_lens.engine import LensEngine
from writers_lens.lenses import build_default_lenses
from writers_lens.session import WritingSession
from writers_lens.span_finding import CallableSpanFinder, SpanMatch
from writers_lens.tokenization import Tokenizer


class RecordingFinder:
    """Finds the words red and blue; raises on sentences starting with 'Bad'."""

    def __init__(self) -> None:
        self.calls: List[str] = []

    async def __call__(self, text: str) -> List[SpanMatch]:
        self.calls.append(text)
        await asyncio.sleep(0)
        if text.startswith("Bad"):
            raise RuntimeError("backend failed")
        return [SpanMatch(word, text.find(word)) for word in ("red", "blue") if word in text]


def make_session(finder: RecordingFinder, cache: SentenceCache | None = None) -> WritingSession:
    config = WritersLensConfig(spacy_model=None, debounce_seconds=0.01)
    engine = LensEngine(
        build_default_lenses(CallableSpanFinder(finder)), Tokenizer(model=None)
    )
    return WritingSession(engine, config, cache)


def spans(session: WritingSession):
    return [(h.start_char, h.end_char) for h in session.rendered_highlights()]


def test_typed_sentences_are_analysed_once_each():
    finder = RecordingFinder()
    session = make_session(finder)

    async def scenario() -> None:
        session.select_lens("adjectives")
        session.update_text("A red cup.")
        await session.settle()
        session.update_text("A red cup. A blue hat.")
        await session.settle()

    asyncio.run(scenario())
    assert finder.calls == ["A red cup.", "A blue hat."]
    assert spans(session) == [(2, 5), (13, 17)]
    assert session.cache.contains("adjectives", "A red cup.")


def test_incomplete_sentence_is_not_sent():
    finder = RecordingFinder()
    session = make_session(finder)

    async def scenario() -> None:
        session.select_lens("adjectives")
        session.update_text("A red cup")
        await session.settle()

    asyncio.run(scenario())
    assert finder.calls == []
    assert session.queue.pending == ()
    assert session.highlights == []


def test_edit_in_place_shifts_later_highlights_immediately():
    finder = RecordingFinder()
    session = make_session(finder)

    async def scenario() -> None:
        session.select_lens("adjectives")
        session.update_text("A red cup.")
        await session.settle()
        session.update_text("A red cup. A blue hat.")
        await session.settle()

        session.update_text("A big red cup. A blue hat.")
        assert spans(session) == [(17, 21)]
        await session.settle()

    asyncio.run(scenario())
    assert finder.calls == ["A red cup.", "A blue hat.", "A big red cup."]
    assert spans(session) == [(6, 9), (17, 21)]


def test_rapid_edits_coalesce_into_one_request():
    finder = RecordingFinder()
    session = make_session(finder)

    async def scenario() -> None:
        session.select_lens("adjectives")
        session.update_text("Red.")
        session.update_text("Red!")
        session.update_text("Red?")
        await session.settle()

    asyncio.run(scenario())
    assert finder.calls == ["Red?"]


def test_typing_past_a_finished_sentence_sends_it_once():
    finder = RecordingFinder()
    session = make_session(finder)

    async def scenario() -> None:
        session.select_lens("adjectives")
        session.update_text("A red cup")
        session.update_text("A red cup.")
        session.update_text("A red cup. A")
        session.update_text("A red cup. A b")
        assert session.queue.pending == ()
        await session.settle()

    asyncio.run(scenario())
    assert finder.calls == ["A red cup."]
    assert spans(session) == [(2, 5)]


def test_switching_lens_releases_debounced_sentence():
    finder = RecordingFinder()
    session = make_session(finder)

    async def scenario() -> None:
        session.select_lens("adjectives")
        session.update_text("A red cup.")
        session.select_lens("adjectives")
        await session.settle()

    asyncio.run(scenario())
    assert finder.calls == ["A red cup."]


def test_backend_failure_leaves_sentence_uncached():
    finder = RecordingFinder()
    session = make_session(finder)

    async def scenario() -> None:
        session.select_lens("adjectives")
        session.update_text("Bad red.")
        await session.settle()
        session.update_text("Bad red. A blue hat.")
        await session.settle()

    asyncio.run(scenario())
    assert finder.calls == ["Bad red.", "A blue hat."]
    assert not session.cache.contains("adjectives", "Bad red.")
    assert spans(session) == [(11, 15)]


def test_selecting_ai_lens_sweeps_existing_text():
    finder = RecordingFinder()
    session = make_session(finder)

    async def scenario() -> None:
        session.update_text("A red cup. A blue hat. Unfinished")
        assert session.highlights == []
        session.select_lens("adjectives")
        await session.settle()

    asyncio.run(scenario())
    assert finder.calls == ["A red cup.", "A blue hat."]
    assert spans(session) == [(2, 5), (13, 17)]


def test_fast_lens_reanalyses_whole_text():
    finder = RecordingFinder()
    session = make_session(finder)

    async def scenario() -> None:
        session.select_lens("filler")
        session.update_text("It is very good.")
        await session.settle()

    asyncio.run(scenario())
    assert finder.calls == []
    assert [(h.start_char, h.end_char, h.category) for h in session.highlights] == [
        (6, 10, "filler-very")
    ]


def test_cache_survives_save_and_load(tmp_path: Path):
    path = tmp_path / "cache.json"
    finder = RecordingFinder()
    session = make_session(finder)

    async def first() -> None:
        session.select_lens("adjectives")
        session.update_text("A red cup.")
        await session.settle()
        session.save_cache(path)

    asyncio.run(first())

    second_finder = RecordingFinder()
    restored = make_session(second_finder)

    async def second() -> None:
        restored.update_text("A red cup.")
        restored.load_cache(path)
        restored.select_lens("adjectives")
        await restored.settle()

    asyncio.run(second())
    assert second_finder.calls == []
    assert spans(restored) == [(2, 5)]


def test_deselecting_and_unknown_lens():
    finder = RecordingFinder()
    session = make_session(finder)

    async def scenario() -> None:
        session.select_lens("adjectives")
        session.update_text("A red cup.")
        await session.settle()
        assert session.highlights
        session.select_lens(None)

    asyncio.run(scenario())
    assert session.highlights == []
    with pytest.raises(ValueError):
        session.select_lens("missing")
