from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from ..colors import ColorScheme
from ..models import Highlight, TextDocument


class Lens(ABC):
    """Analyzer that maps a tokenized document to colored highlights.

    Lenses hold no per-document state. AI lenses receive a document built from
    a single sentence and may suspend while the backend answers.
    """

    id: str = ""
    name: str = ""
    description: str = ""
    category: str = ""
    requires_ai: bool = False

    @abstractmethod
    async def analyze(
        self, document: TextDocument, color_scheme: ColorScheme
    ) -> List[Highlight]:
        """Return highlights with ranges relative to ``document.text``."""
        raise NotImplementedError

    def describe(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "requires_ai": self.requires_ai,
        }
