"""
Stroke reconstruction from ink items.

Provides:
- StrokeDrawable (scaled, pressured point path + width + color)
- Freehand stroke reconstruction from parallel X/Y/F arrays
- Two-point strokes for straight line items
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from ..config import AlphaPolicy, GeometryConfig, USER_LAYER
from .errors import DegeneratePath, EmptyOrMismatchedArrays, MissingStyleForLine
from .styles import BLACK, Color, Style

logger = logging.getLogger(__name__)

FULL_PRESSURE = 1.0


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class StrokeDrawable:
    """A reconstructed stroke ready for the output document."""
    points: np.ndarray  # (N, 3): x, y, pressure
    width: float
    color: Color
    timestamps: Optional[np.ndarray] = None
    source: str = "stroke"
    layer: Optional[int] = USER_LAYER

    @property
    def num_points(self) -> int:
        return int(self.points.shape[0])

    @property
    def xy(self) -> np.ndarray:
        return self.points[:, :2]

    @property
    def pressures(self) -> np.ndarray:
        return self.points[:, 2]

    def bounds(self) -> Tuple[float, float, float, float]:
        """(min_x, min_y, max_x, max_y) of the path, padded by half the width."""
        half = self.width / 2.0
        mins = self.xy.min(axis=0)
        maxs = self.xy.max(axis=0)
        return (
            float(mins[0] - half), float(mins[1] - half),
            float(maxs[0] + half), float(maxs[1] + half)
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "kind": "stroke",
            "source": self.source,
            "layer": self.layer,
            "width": self.width,
            "color": self.color.to_hex(),
            "points": self.points,
        }
        if self.timestamps is not None:
            result["timestamps"] = self.timestamps
        return result


# ============================================================================
# Helpers
# ============================================================================

def _as_array(values: Optional[Sequence[float]]) -> np.ndarray:
    if values is None:
        raise EmptyOrMismatchedArrays("Stroke is missing a coordinate or pressure array")
    try:
        array = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError):
        raise EmptyOrMismatchedArrays("Stroke arrays must contain only numbers")
    if array.ndim != 1:
        raise EmptyOrMismatchedArrays("Stroke arrays must be one-dimensional")
    return array


def _stroke_color(color: Color, policy: str) -> Color:
    if policy == AlphaPolicy.PRESERVE:
        return color
    return color.opaque()


def _line_color(color: Color, policy: str) -> Color:
    if policy == AlphaPolicy.OPAQUE:
        return color.opaque()
    return color


def _check_path(points: np.ndarray, min_points: int) -> None:
    if points.shape[0] < max(min_points, 1):
        raise DegeneratePath(
            f"Path has {points.shape[0]} point(s), at least {min_points} required"
        )
    if not np.all(np.isfinite(points)):
        raise DegeneratePath("Path contains non-finite coordinates or pressures")


# ============================================================================
# Reconstruction
# ============================================================================

def build_stroke(
    xs: Optional[Sequence[float]],
    ys: Optional[Sequence[float]],
    pressures: Optional[Sequence[float]],
    style: Optional[Style],
    geometry: Optional[GeometryConfig] = None,
    timestamps: Optional[Sequence[float]] = None
) -> StrokeDrawable:
    """
    Rebuild a freehand stroke from parallel coordinate and pressure arrays.

    Args:
        xs: X coordinates in capture units
        ys: Y coordinates in capture units
        pressures: Pressure per point, kept unchanged
        style: Resolved span style, or None to use the default pen
        geometry: Scale factors and alpha policy
        timestamps: Optional capture time per point

    Returns:
        StrokeDrawable with scaled coordinates

    Raises:
        EmptyOrMismatchedArrays: If arrays are missing, empty or unequal in length
        DegeneratePath: If the path has too few points or non-finite values
    """
    geometry = geometry or GeometryConfig()

    x = _as_array(xs)
    y = _as_array(ys)
    f = _as_array(pressures)

    if len(x) == 0 or not (len(x) == len(y) == len(f)):
        raise EmptyOrMismatchedArrays(
            f"Stroke arrays have lengths X={len(x)}, Y={len(y)}, F={len(f)}"
        )

    times = None
    if timestamps is not None:
        times = _as_array(timestamps)
        if len(times) != len(x):
            raise EmptyOrMismatchedArrays(
                f"Stroke timestamps have length {len(times)}, expected {len(x)}"
            )

    scale = geometry.coordinate_scale
    points = np.column_stack((x * scale, y * scale, f))
    _check_path(points, geometry.min_path_points)

    if style is None:
        width = geometry.default_stroke_width
        color = BLACK
    else:
        width = style.pen_width * geometry.width_scale
        color = _stroke_color(style.color, geometry.alpha_policy)
        if style.color.a < 10:
            logger.debug(f"Nearly transparent stroke color {style.color.to_hex()}")

    return StrokeDrawable(
        points=points,
        width=width,
        color=color,
        timestamps=times,
        source="stroke"
    )


def build_line(
    start: Tuple[float, float],
    end: Tuple[float, float],
    style: Optional[Style],
    geometry: Optional[GeometryConfig] = None
) -> StrokeDrawable:
    """
    Build a two-point stroke for a straight line item.

    The width is the decoded pen width without the width scale.

    Raises:
        MissingStyleForLine: If the owning element has no style
        DegeneratePath: If an endpoint is not finite
    """
    if style is None:
        raise MissingStyleForLine()

    geometry = geometry or GeometryConfig()
    scale = geometry.coordinate_scale

    points = np.array([
        [start[0] * scale, start[1] * scale, FULL_PRESSURE],
        [end[0] * scale, end[1] * scale, FULL_PRESSURE],
    ], dtype=np.float64)
    _check_path(points, 2)

    return StrokeDrawable(
        points=points,
        width=style.pen_width,
        color=_line_color(style.color, geometry.alpha_policy),
        source="line"
    )
