"""Per-lens cache of sentence-relative highlights, keyed by exact sentence text."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from .models import Highlight, RelativeHighlight, Sentence

logger = logging.getLogger(__name__)

CACHE_VERSION = 2


class SentenceCache:
    def __init__(self) -> None:
        self._entries: Dict[str, Dict[str, List[RelativeHighlight]]] = {}

    def get(self, lens_id: str, sentence_text: str) -> List[RelativeHighlight] | None:
        entry = self._entries.get(lens_id, {}).get(sentence_text)
        return list(entry) if entry is not None else None

    def contains(self, lens_id: str, sentence_text: str) -> bool:
        return sentence_text in self._entries.get(lens_id, {})

    def put(
        self,
        lens_id: str,
        sentence_text: str,
        highlights: Iterable[RelativeHighlight],
    ) -> None:
        """Store the highlights for a sentence, replacing any previous entry."""
        self._entries.setdefault(lens_id, {})[sentence_text] = list(highlights)

    def invalidate(self, lens_id: str, sentence_text: str) -> bool:
        return self._entries.get(lens_id, {}).pop(sentence_text, None) is not None

    def clear(self, lens_id: str | None = None) -> None:
        if lens_id is None:
            self._entries.clear()
        else:
            self._entries.pop(lens_id, None)

    def lens_ids(self) -> List[str]:
        return sorted(self._entries)

    def sentence_count(self, lens_id: str | None = None) -> int:
        if lens_id is not None:
            return len(self._entries.get(lens_id, {}))
        return sum(len(entries) for entries in self._entries.values())

    def __len__(self) -> int:
        return self.sentence_count()

    def project(
        self,
        sentences: Sequence[Sentence],
        lens_id: str,
        text_length: int | None = None,
        priority: int = 1,
        category: str | None = None,
    ) -> List[Highlight]:
        """Turn cached entries into absolute highlights in document order.

        Cached entries carry no category or priority of their own, so every
        projected highlight gets ``priority`` and ``category`` (the lens id
        unless given). A direct lens run may label the same span differently,
        e.g. ``adjective`` rather than ``adjectives``.

        Entries that do not fit inside their sentence or the document are
        dropped.
        """
        label = category or lens_id
        entries = self._entries.get(lens_id, {})
        projected: List[Highlight] = []
        for sentence in sentences:
            cached = entries.get(sentence.key)
            if not cached:
                continue
            for item in cached:
                if (
                    item.offset < 0
                    or item.length < 0
                    or item.offset + item.length > len(sentence.key)
                ):
                    logger.debug(
                        "Dropping cached highlight outside its sentence: %r", item
                    )
                    continue
                start = sentence.start_char + item.offset
                end = start + item.length
                if text_length is not None and end > text_length:
                    logger.debug("Dropping cached highlight past end of text: %r", item)
                    continue
                projected.append(Highlight(start, end, item.color, label, priority))
        return projected

    def to_payload(self) -> dict[str, Any]:
        return {
            "sentenceCaches": {
                lens_id: {
                    sentence: [item.to_dict() for item in highlights]
                    for sentence, highlights in entries.items()
                }
                for lens_id, entries in self._entries.items()
            },
            "lensVersion": CACHE_VERSION,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> "SentenceCache":
        """Restore a cache; anything but a well-formed current record is a cold start."""
        cache = cls()
        if not isinstance(payload, Mapping):
            return cache
        version = payload.get("lensVersion")
        if version != CACHE_VERSION:
            logger.warning(
                "Cache version mismatch (v%s vs v%s), discarding cache",
                version,
                CACHE_VERSION,
            )
            return cache
        try:
            entries = {
                str(lens_id): {
                    str(sentence): [RelativeHighlight.from_dict(item) for item in items]
                    for sentence, items in sentences.items()
                }
                for lens_id, sentences in payload["sentenceCaches"].items()
            }
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Malformed sentence cache, discarding it: %s", exc)
            return cache
        cache._entries = entries
        logger.info(
            "Restored %s lens caches with %s total sentences",
            len(entries),
            cache.sentence_count(),
        )
        return cache

    def save(self, path: str | Path) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(self.to_payload(), indent=2), encoding="utf-8")

    @classmethod
    def load(cls, path: str | Path) -> "SentenceCache":
        source = Path(path)
        if not source.exists():
            return cls()
        try:
            payload = json.loads(source.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Could not read sentence cache %s: %s", source, exc)
            return cls()
        return cls.from_payload(payload)
