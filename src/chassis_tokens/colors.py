"""
Color parsing and platform encodings.

Parsing is delegated to Pillow's ``ImageColor`` (hex with or without
alpha, ``rgb()``, ``hsl()``, named colors). Two CSS spellings that Pillow
does not read are handled first: ``rgba()`` with a fractional alpha, and
the ``rgba(#hex, alpha)`` form exported by Tokens Studio.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from PIL import ImageColor

_RGB_FUNCTION = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*(\d*\.?\d+)(%?)\s*)?\)$",
    re.IGNORECASE,
)
_HEX_WITH_ALPHA = re.compile(
    r"^rgba\(\s*(#[0-9a-f]{3,8})\s*,\s*(\d*\.?\d+)(%?)\s*\)$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class Rgba:
    """An sRGB color with 0-255 channels and a 0-1 alpha."""

    red: int
    green: int
    blue: int
    alpha: float = 1.0

    @property
    def hex8(self) -> str:
        """``rrggbbaa`` in lowercase, without the leading ``#``."""
        return f"{self.red:02x}{self.green:02x}{self.blue:02x}{round(self.alpha * 255):02x}"


def _alpha(raw: str, percent: str) -> float:
    value = float(raw) / 100 if percent else float(raw)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"Alpha out of range: {raw}{percent}")
    return value


def parse_color(value: object) -> Rgba:
    """Parse a color string.

    Raises:
        ValueError: If ``value`` is not a color Pillow or the CSS forms above understand.
    """
    if not isinstance(value, str):
        raise ValueError(f"Color must be a string, got {type(value).__name__}")
    text = value.strip()

    match = _HEX_WITH_ALPHA.match(text)
    if match:
        base = parse_color(match.group(1))
        return Rgba(base.red, base.green, base.blue, _alpha(match.group(2), match.group(3)))

    match = _RGB_FUNCTION.match(text)
    if match:
        channels = [int(match.group(i)) for i in (1, 2, 3)]
        if any(c > 255 for c in channels):
            raise ValueError(f"Color channel out of range: {value}")
        alpha = _alpha(match.group(4), match.group(5)) if match.group(4) else 1.0
        return Rgba(*channels, alpha=alpha)

    rgb = ImageColor.getrgb(text)
    if len(rgb) == 4:
        return Rgba(rgb[0], rgb[1], rgb[2], rgb[3] / 255)
    return Rgba(rgb[0], rgb[1], rgb[2])


def is_valid_color(value: object) -> bool:
    try:
        parse_color(value)
    except ValueError:
        return False
    return True


def _format_fraction(value: float, places: int) -> str:
    text = f"{value:.{places}f}".rstrip("0").rstrip(".")
    return text or "0"


# =============================================================================
# Encodings
# =============================================================================


def to_css_rgba(color: Rgba) -> str:
    """``rgba(255, 0, 0, 0.5)``"""
    return f"rgba({color.red}, {color.green}, {color.blue}, {_format_fraction(color.alpha, 2)})"


def to_uicolor(color: Rgba) -> str:
    """``UIColor(red: 1.000, green: 0.000, blue: 0.000, alpha: 0.5)``"""
    return (
        f"UIColor(red: {color.red / 255:.3f}, green: {color.green / 255:.3f}, "
        f"blue: {color.blue / 255:.3f}, alpha: {_format_fraction(color.alpha, 3)})"
    )


def to_android_argb(color: Rgba) -> str:
    """``#80ff0000``: the alpha channel moved in front of the color channels."""
    hex8 = color.hex8
    return f"#{hex8[6:]}{hex8[:6]}"
