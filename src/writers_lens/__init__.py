"""
writers_lens exports the incremental sentence-level analysis pipeline.
"""

from __future__ import annotations

from .analysis_queue import AnalysisQueue, QueueState
from .cache import CACHE_VERSION, SentenceCache
from .colors import Color, ColorScheme
from .config import WritersLensConfig, config_from_dict, config_from_yaml, load_config
from .diffing import EditKind, classify_edit
from .engine import LensEngine
from .lenses import build_default_lenses, create_lens
from .session import WritingSession
from .tokenization import Tokenizer

__all__ = [
    "AnalysisQueue",
    "QueueState",
    "CACHE_VERSION",
    "SentenceCache",
    "Color",
    "ColorScheme",
    "WritersLensConfig",
    "config_from_dict",
    "config_from_yaml",
    "load_config",
    "EditKind",
    "classify_edit",
    "LensEngine",
    "build_default_lenses",
    "create_lens",
    "WritingSession",
    "Tokenizer",
]

__version__ = "0.1.0"
