"""
Hex color handling.

Every fill and stroke on the report pages goes through ``parse_hex_color``;
a malformed string raises ``InvalidColorError`` instead of silently
drawing black.
"""

import re
from typing import Tuple

RGB = Tuple[int, int, int]

_HEX_COLOR_RE = re.compile(r'^#[0-9a-fA-F]{6}$')


class InvalidColorError(ValueError):
    """Color string is not ``#`` followed by exactly 6 hex digits."""


def parse_hex_color(color: str) -> RGB:
    """Decompose ``#RRGGBB`` into three 0–255 channels.

    Raises:
        InvalidColorError: if ``color`` is not a 6-digit hex color.
    """
    if not isinstance(color, str) or not _HEX_COLOR_RE.match(color):
        raise InvalidColorError(f"Invalid color {color!r}: expected '#RRGGBB'")
    return int(color[1:3], 16), int(color[3:5], 16), int(color[5:7], 16)


def to_hex(rgb: RGB) -> str:
    """Inverse of :func:`parse_hex_color` (lower-case digits)."""
    r, g, b = rgb
    return f"#{r:02x}{g:02x}{b:02x}"


def lighten(rgb: RGB, delta: int) -> RGB:
    """Add ``delta`` to every channel, clamped to 255."""
    return tuple(min(255, c + delta) for c in rgb)  # type: ignore[return-value]


def darken(rgb: RGB, delta: int) -> RGB:
    """Subtract ``delta`` from every channel, clamped to 0."""
    return tuple(max(0, c - delta) for c in rgb)  # type: ignore[return-value]
