# color.py
from typing import Any, NamedTuple


class RGB(NamedTuple):
    """Flat fill color, channels in 0..1."""
    r: float = 0.0
    g: float = 0.0
    b: float = 0.0


BLACK = RGB()


def parse_fill(value: Any) -> RGB:
    """
    '#RRGGBB' to channel fractions. Anything else (None, non-string, no '#',
    short or non-hex digits) is black.
    """
    if not isinstance(value, str) or not value.startswith("#"):
        return BLACK
    digits = value[1:]
    try:
        return RGB(
            int(digits[0:2], 16) / 255,
            int(digits[2:4], 16) / 255,
            int(digits[4:6], 16) / 255,
        )
    except ValueError:
        return BLACK
