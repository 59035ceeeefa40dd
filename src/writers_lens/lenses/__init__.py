from __future__ import annotations

from typing import List

from ..span_finding import NoOpSpanFinder, SpanFinder
from .adjectives import AdjectiveLens
from .adverbs import AdverbLens
from .base import Lens
from .filler import FILLER_WORDS, FillerLens
from .parts_of_speech import PartsOfSpeechLens
from .passive_voice import PassiveVoiceLens
from .repetition import RepetitionLens
from .rhythm import RhythmLens
from .sentence_length import SentenceLengthLens

__all__ = [
    "Lens",
    "AdjectiveLens",
    "AdverbLens",
    "FillerLens",
    "FILLER_WORDS",
    "PartsOfSpeechLens",
    "PassiveVoiceLens",
    "RepetitionLens",
    "RhythmLens",
    "SentenceLengthLens",
    "LENS_IDS",
    "create_lens",
    "build_default_lenses",
]

LENS_IDS = (
    "pos",
    "adverbs",
    "passive",
    "filler",
    "sentence-length",
    "repetition",
    "rhythm",
    "adjectives",
)


def create_lens(
    name: str,
    *,
    span_finder: SpanFinder | None = None,
    repetition_threshold: int = 3,
    rhythm_window: int = 5,
) -> Lens:
    """Factory for building lenses by id."""
    normalized = name.lower().strip()
    if normalized == "pos":
        return PartsOfSpeechLens()
    if normalized == "adverbs":
        return AdverbLens()
    if normalized == "passive":
        return PassiveVoiceLens()
    if normalized == "filler":
        return FillerLens()
    if normalized == "sentence-length":
        return SentenceLengthLens()
    if normalized == "repetition":
        return RepetitionLens(threshold=repetition_threshold)
    if normalized == "rhythm":
        return RhythmLens(window_size=rhythm_window)
    if normalized == "adjectives":
        return AdjectiveLens(span_finder or NoOpSpanFinder())
    raise ValueError(f"Unknown lens '{name}'.")


def build_default_lenses(
    span_finder: SpanFinder | None = None,
    *,
    repetition_threshold: int = 3,
    rhythm_window: int = 5,
) -> List[Lens]:
    """Build the full lens registry in display order."""
    return [
        create_lens(
            lens_id,
            span_finder=span_finder,
            repetition_threshold=repetition_threshold,
            rhythm_window=rhythm_window,
        )
        for lens_id in LENS_IDS
    ]
