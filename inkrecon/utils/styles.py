"""
Style declaration decoding for ink descriptions.

Provides:
- Color and Style data classes
- Decoding of `key:value;key:value` style declarations
- Canonical re-encoding of a Style
"""

import logging
from dataclasses import dataclass, field
from typing import Tuple

from ..config import PEN_WIDTH_KEY, COLOR_KEY
from .errors import MalformedStyle, InvalidPenWidth, InvalidColor

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class Color:
    """RGBA color with 8-bit channels."""
    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 0

    @classmethod
    def from_tuple(cls, rgba: Tuple[int, int, int, int]) -> 'Color':
        return cls(*rgba)

    def to_tuple(self) -> Tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)

    def opaque(self) -> 'Color':
        return Color(self.r, self.g, self.b, 255)

    @property
    def alpha(self) -> float:
        return self.a / 255.0

    def to_floats(self) -> Tuple[float, float, float, float]:
        return (self.r / 255.0, self.g / 255.0, self.b / 255.0, self.a / 255.0)

    def to_hex(self, with_alpha: bool = True) -> str:
        hex_str = f"#{self.r:02X}{self.g:02X}{self.b:02X}"
        if with_alpha:
            hex_str += f"{self.a:02X}"
        return hex_str

    def to_bgr(self) -> Tuple[int, int, int]:
        """Channel order expected by OpenCV drawing calls."""
        return (self.b, self.g, self.r)


BLACK = Color(0, 0, 0, 255)
WHITE = Color(255, 255, 255, 255)


@dataclass(frozen=True)
class Style:
    """Pen width and color decoded from a style declaration."""
    pen_width: float = 0.0
    color: Color = field(default_factory=Color)


# ============================================================================
# Decoding
# ============================================================================

def parse_color(value: str) -> Color:
    """
    Decode a `#RRGGBBAA` color literal.

    Args:
        value: Color literal, exactly 9 characters

    Returns:
        Decoded Color

    Raises:
        InvalidColor: On wrong length, missing '#' or non-hex digits
    """
    if len(value) != 9 or not value.startswith("#"):
        raise InvalidColor(f"Could not parse color: {value!r}")

    channels = []
    for start in range(1, 9, 2):
        pair = value[start:start + 2]
        # int(..., 16) also accepts signs and whitespace
        if not all(c in "0123456789abcdefABCDEF" for c in pair):
            raise InvalidColor(f"Could not parse color: {value!r}")
        channels.append(int(pair, 16))

    return Color(*channels)


def parse_style(declaration: str) -> Style:
    """
    Decode a semicolon-delimited style declaration.

    Recognized keys are the pen width marker and `color`; anything else is
    ignored. Keys that are absent keep the Style defaults.

    Args:
        declaration: Style string, e.g. "-myscript-pen-width:2;color:#11223344"

    Returns:
        Decoded Style

    Raises:
        MalformedStyle: If a segment has no ':' separator
        InvalidPenWidth: If the pen width is not a float
        InvalidColor: If the color is not a #RRGGBBAA literal
    """
    pen_width = 0.0
    color = Color()

    for segment in declaration.split(";"):
        if not segment.strip():
            continue

        parts = segment.split(":", 1)
        if len(parts) < 2:
            raise MalformedStyle(f"Could not parse style segment: {segment!r}")

        name = parts[0].strip()
        value = parts[1].strip()

        if name == PEN_WIDTH_KEY:
            try:
                pen_width = float(value)
            except ValueError:
                raise InvalidPenWidth(f"Could not parse pen width: {value!r}")
        elif name == COLOR_KEY:
            color = parse_color(value)
        else:
            logger.debug(f"Ignoring style attribute {name!r}")

    return Style(pen_width=pen_width, color=color)


def format_style(style: Style) -> str:
    """Encode a Style back into canonical declaration form."""
    return f"{PEN_WIDTH_KEY}:{style.pen_width!r};{COLOR_KEY}:{style.color.to_hex()}"
