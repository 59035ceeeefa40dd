import asyncio
from typing import List

import pytest

from writers_lens.colors import ColorScheme
from writers_lens.config import WritersLensConfig
from writers_lens.engine import LensEngine
from writers_lens.lenses import AdjectiveLens, build_default_lenses
from writers_lens.span_finding import CallableSpanFinder, SpanFinder, SpanMatch
from writers_lens.tokenization import Tokenizer


def find_colors(text: str) -> List[SpanMatch]:
    return [
        SpanMatch(word, text.find(word)) for word in ("red", "blue") if word in text
    ]


def make_engine(span_finder: SpanFinder | None = None) -> LensEngine:
    return LensEngine(build_default_lenses(span_finder), Tokenizer(model=None))


def test_analyze_runs_only_enabled_fast_lenses():
    engine = make_engine(CallableSpanFinder(find_colors))
    text = "It is very very good. Really red."
    highlights = asyncio.run(
        engine.analyze(text, ["filler", "sentence-length", "adjectives"])
    )

    categories = sorted(h.category for h in highlights)
    assert categories == [
        "filler-really",
        "filler-very",
        "filler-very",
        "sentence-short",
        "sentence-short",
    ]


def test_analyze_with_ai_ignores_fast_lenses():
    engine = make_engine(CallableSpanFinder(find_colors))
    sentence = "A red kite."
    highlights = asyncio.run(engine.analyze_with_ai(sentence, ["filler", "adjectives"]))

    assert [(h.start_char, h.end_char, h.category) for h in highlights] == [
        (2, 5, "adjective")
    ]


def test_unknown_lens_ids_are_ignored():
    engine = make_engine()
    assert asyncio.run(engine.analyze("Very.", ["nope"])) == []


def test_analyze_sentence_is_independent_of_document_position():
    engine = make_engine(CallableSpanFinder(find_colors))
    sentence = "The blue door is red."
    alone = asyncio.run(engine.analyze_sentence(sentence, "adjectives"))

    document = "Some other words here. " + sentence
    start = document.index(sentence)
    segment = document[start:]
    again = asyncio.run(engine.analyze_sentence(segment, "adjectives"))

    assert alone == again
    assert [(h.offset, h.length, h.match_text) for h in alone] == [
        (17, 3, "red"),
        (4, 4, "blue"),
    ]


def test_ai_lenses_never_overlap():
    active = {"now": 0, "max": 0}

    async def slow_finder(text: str) -> List[SpanMatch]:
        active["now"] += 1
        active["max"] = max(active["max"], active["now"])
        await asyncio.sleep(0.01)
        active["now"] -= 1
        return []

    class SecondAILens(AdjectiveLens):
        id = "adjectives-2"

    finder = CallableSpanFinder(slow_finder)
    engine = LensEngine(
        [AdjectiveLens(finder), SecondAILens(finder)], Tokenizer(model=None)
    )

    async def scenario() -> None:
        await asyncio.gather(
            engine.analyze_with_ai("One.", ["adjectives", "adjectives-2"]),
            engine.analyze_with_ai("Two.", ["adjectives", "adjectives-2"]),
        )

    asyncio.run(scenario())
    assert active["max"] == 1


def test_backend_errors_propagate_from_engine():
    def broken(text: str) -> List[SpanMatch]:
        raise RuntimeError("backend down")

    engine = make_engine(CallableSpanFinder(broken))
    with pytest.raises(RuntimeError):
        asyncio.run(engine.analyze_with_ai("Hello.", ["adjectives"]))


def test_adjective_lens_repairs_or_drops_bad_offsets():
    def sloppy(text: str) -> List[SpanMatch]:
        return [
            SpanMatch("red", 0),  # wrong offset, text exists
            SpanMatch("green", 3),  # not in the text
        ]

    engine = make_engine(CallableSpanFinder(sloppy))
    highlights = asyncio.run(engine.analyze_sentence("A red cup.", "adjectives"))
    assert [(h.offset, h.match_text) for h in highlights] == [(2, "red")]


def test_duplicate_lens_ids_are_rejected():
    lenses = build_default_lenses()
    with pytest.raises(ValueError):
        LensEngine(lenses + [lenses[0]], Tokenizer(model=None))


def test_from_config_uses_config_values():
    config = WritersLensConfig(spacy_model=None, repetition_threshold=2, rhythm_window=3)
    engine = LensEngine.from_config(config)

    assert engine.tokenizer.model is None
    assert engine.get_lens("repetition").threshold == 2
    assert engine.get_lens("rhythm").window_size == 3


def test_dark_scheme_is_passed_to_lenses():
    engine = make_engine()
    light = asyncio.run(engine.analyze("Very.", ["filler"], ColorScheme.LIGHT))
    dark = asyncio.run(engine.analyze("Very.", ["filler"], ColorScheme.DARK))
    assert light[0].color != dark[0].color
