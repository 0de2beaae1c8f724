"""Theme color slots and RGB565 helpers.

Colors travel over the wire as 16-bit RGB565 integers and are passed
through opaquely; the only conversions done here are building the
default palette and reading/writing the hex notation the client uses
for ``ThemeColors``/``SetThemeColor``/``ThemeColor``.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

WHITE: int = 0xFFFF

# Reported for slots known neither to the session nor to the defaults
FALLBACK_COLOR: int = WHITE


def rgb565(r: int, g: int, b: int) -> int:
    """Pack 8-bit RGB components into a 16-bit RGB565 value."""
    return ((r & 0xF8) << 8) | ((g & 0xFC) << 3) | (b >> 3)


THEME_DEFAULTS: Mapping[str, int] = MappingProxyType({
    "bg": rgb565(245, 245, 255),
    "text": rgb565(2, 2, 4),
    "primary": rgb565(255, 240, 255),
    "accent": rgb565(30, 144, 255),
    "accent2": rgb565(220, 220, 250),
    "accent3": rgb565(180, 180, 255),
    "accentText": WHITE,
    "pressed": rgb565(30, 144, 255),
    "danger": rgb565(255, 150, 150),
    "placeholder": rgb565(200, 200, 200),
})


def default_theme() -> dict[str, int]:
    """A fresh, mutable copy of the default palette."""
    return dict(THEME_DEFAULTS)


def parse_hex(text: str) -> int | None:
    """Parse a 16-bit color written in hex.

    Accepts an optional ``0x``/``0X``/``#`` prefix. Returns None when the
    text is not hexadecimal or does not fit in 16 bits.
    """
    value = text.strip()
    if value[:2] in ("0x", "0X"):
        value = value[2:]
    elif value.startswith("#"):
        value = value[1:]
    if not value:
        return None
    try:
        color = int(value, 16)
    except ValueError:
        return None
    if color < 0 or color > 0xFFFF:
        return None
    return color


def format_hex(color: int) -> str:
    """Lowercase hex without prefix, as the client prints colors."""
    return format(color & 0xFFFF, "x")
