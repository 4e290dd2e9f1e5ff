"""
Colour helpers shared by the marker, landmark and pattern renderers.

None of these raise: a malformed colour degrades to FALLBACK_COLOR.
"""

import re
from typing import Optional, Tuple

FALLBACK_COLOR = "#666666"

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def parse_hex_color(color: Optional[str]) -> Optional[Tuple[int, int, int]]:
    """Parse '#rrggbb' or '#rgb' into an (r, g, b) tuple.

    Returns:
        The channels, or None for anything else
    """
    if not isinstance(color, str):
        return None
    match = _HEX_RE.match(color.strip())
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    value = int(digits, 16)
    return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF


def to_hex(r: int, g: int, b: int) -> str:
    return f"#{r:02x}{g:02x}{b:02x}"


def shade_color(color: Optional[str], delta: int) -> str:
    """Add delta to every channel, clamped to [0, 255]."""
    rgb = parse_hex_color(color)
    if rgb is None:
        return FALLBACK_COLOR
    return to_hex(*(max(0, min(255, c + delta)) for c in rgb))


def darken_color(color: Optional[str], amount: int = 40) -> str:
    """Border colour: subtract amount from each channel (clamped at 0)."""
    return shade_color(color, -amount)


def darken_fraction(color: Optional[str], fraction: float = 0.2) -> str:
    """Darken by a fraction of full scale (0.2 -> 51 per channel)."""
    return shade_color(color, -round(255 * fraction))


def lighten_fraction(color: Optional[str], fraction: float = 0.2) -> str:
    """Lighten by a fraction of full scale (0.2 -> 51 per channel)."""
    return shade_color(color, round(255 * fraction))


def brightness(color: Optional[str]) -> float:
    """Perceived brightness 0-255 (0.299 R + 0.587 G + 0.114 B)."""
    rgb = parse_hex_color(color) or parse_hex_color(FALLBACK_COLOR)
    r, g, b = rgb
    return (r * 299 + g * 587 + b * 114) / 1000


def get_text_color(background: Optional[str]) -> str:
    """Black text on bright backgrounds (brightness > 128), white otherwise."""
    return "#000000" if brightness(background) > 128 else "#ffffff"
