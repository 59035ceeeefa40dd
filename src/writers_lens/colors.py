"""
Flexoki accent palette (https://github.com/kepano/flexoki) and the color
helpers shared by the lenses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Tuple


class ColorScheme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


@dataclass(frozen=True, slots=True)
class Color:
    """RGBA color with every component in the 0..1 range."""

    red: float
    green: float
    blue: float
    alpha: float = 1.0

    @classmethod
    def from_hex(cls, value: str, alpha: float = 1.0) -> "Color":
        value = value.lstrip("#")
        if len(value) != 6:
            raise ValueError(f"Expected a 6 digit hex color, got '{value}'.")
        red, green, blue = (int(value[i : i + 2], 16) / 255.0 for i in (0, 2, 4))
        return cls(red, green, blue, alpha)

    def with_alpha(self, alpha: float) -> "Color":
        return Color(self.red, self.green, self.blue, alpha)

    def blended(self, fraction: float, other: "Color") -> "Color":
        """Linear blend toward ``other``; fraction 0 keeps self, 1 yields other."""
        fraction = min(max(fraction, 0.0), 1.0)
        keep = 1.0 - fraction
        return Color(
            self.red * keep + other.red * fraction,
            self.green * keep + other.green * fraction,
            self.blue * keep + other.blue * fraction,
            self.alpha * keep + other.alpha * fraction,
        )

    def to_dict(self) -> dict[str, float]:
        return {"r": self.red, "g": self.green, "b": self.blue, "a": self.alpha}

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "Color":
        components = []
        for key in ("r", "g", "b", "a"):
            value = float(data[key])  # type: ignore[arg-type]
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Color component '{key}' out of range: {value}")
            components.append(value)
        return cls(*components)


# Light mode uses the 600 values, dark mode the 400 values.
_ACCENTS: Dict[ColorScheme, Dict[str, str]] = {
    ColorScheme.LIGHT: {
        "red": "AF3029",
        "orange": "BC5215",
        "yellow": "AD8301",
        "green": "66800B",
        "cyan": "24837B",
        "blue": "205EA6",
        "purple": "5E409D",
        "magenta": "A02F6F",
    },
    ColorScheme.DARK: {
        "red": "D14D41",
        "orange": "DA702C",
        "yellow": "D0A215",
        "green": "879A39",
        "cyan": "3AA99F",
        "blue": "4385BE",
        "purple": "8B7EC8",
        "magenta": "CE5D97",
    },
}

CYCLE_ORDER = ("red", "orange", "yellow", "green", "cyan", "blue", "purple", "magenta")
OPACITY_LEVELS: Tuple[float, ...] = (1.0, 0.7, 0.5)


def accent(name: str, scheme: ColorScheme | str = ColorScheme.LIGHT) -> Color:
    """Return the named Flexoki accent for the given scheme."""
    palette = _ACCENTS[ColorScheme(scheme)]
    try:
        return Color.from_hex(palette[name])
    except KeyError as exc:
        raise ValueError(f"Unknown accent color '{name}'.") from exc


def cycling_palette(scheme: ColorScheme | str = ColorScheme.LIGHT) -> List[Color]:
    return [accent(name, scheme) for name in CYCLE_ORDER]


def palette_slot(index: int, palette_size: int, opacity_levels: int) -> Tuple[int, int]:
    """Map the index of a distinct word onto (palette index, opacity index)."""
    return index % palette_size, (index // palette_size) % opacity_levels


def cycled_color(
    index: int,
    palette: List[Color],
    opacities: Tuple[float, ...] = OPACITY_LEVELS,
) -> Color:
    color_index, opacity_index = palette_slot(index, len(palette), len(opacities))
    return palette[color_index].with_alpha(opacities[opacity_index])
