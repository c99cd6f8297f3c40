"""
Image element placement for the ink reconstruction pipeline.

Provides:
- Placement rectangles in the shared stroke/image coordinate space
- Asset loading and decoding (OpenCV)
- ImageDrawable construction
- Compositing of decoded images onto a raster canvas
"""

import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

from ..config import GeometryConfig
from .errors import AssetDecodeFailed, AssetNotFound, MalformedInkData

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned rectangle given by two corners."""
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @classmethod
    def from_corners(cls, a: Tuple[float, float], b: Tuple[float, float]) -> 'Rectangle':
        return cls(min(a[0], b[0]), min(a[1], b[1]), max(a[0], b[0]), max(a[1], b[1]))

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x1, self.y1, self.x2, self.y2)


@dataclass
class ImageDrawable:
    """A placed raster asset."""
    rectangle: Rectangle
    data: bytes
    pixel_size: Tuple[int, int]  # (width, height) of the decoded image
    filename: str = ""
    image: Optional[np.ndarray] = None
    layer: Optional[int] = None

    @property
    def mime_type(self) -> str:
        guessed, _ = mimetypes.guess_type(self.filename)
        return guessed or "image/png"

    def bounds(self) -> Tuple[float, float, float, float]:
        return self.rectangle.to_tuple()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "image",
            "layer": self.layer,
            "filename": self.filename,
            "rectangle": self.rectangle.to_tuple(),
            "pixel_size": self.pixel_size,
            "mime_type": self.mime_type,
        }


# ============================================================================
# Asset Loading
# ============================================================================

def read_asset(asset_path: Union[str, Path]) -> bytes:
    """
    Read raw asset bytes.

    Raises:
        AssetNotFound: If the file does not exist or cannot be read
    """
    asset_path = Path(asset_path)
    if not asset_path.is_file():
        raise AssetNotFound(f"Could not find the image at path {asset_path}")
    try:
        return asset_path.read_bytes()
    except OSError as e:
        raise AssetNotFound(f"Could not read the image at path {asset_path}: {e}")


def decode_image(data: bytes, name: str = "") -> np.ndarray:
    """
    Decode image bytes, keeping an alpha channel if present.

    Raises:
        AssetDecodeFailed: If OpenCV cannot decode the bytes
    """
    import cv2

    buffer = np.frombuffer(data, dtype=np.uint8)
    image = None
    if buffer.size:
        try:
            image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
        except cv2.error as e:
            raise AssetDecodeFailed(f"Could not decode image {name!r}: {e}")

    if image is None:
        raise AssetDecodeFailed(f"Could not decode image {name!r}")

    logger.debug(f"Decoded image {name!r}, shape: {image.shape}")
    return image


def place_image(
    filename: str,
    position: Tuple[float, float],
    size: Tuple[float, float],
    asset_dir: Union[str, Path],
    geometry: Optional[GeometryConfig] = None
) -> ImageDrawable:
    """
    Resolve, decode and place an image element.

    Args:
        filename: Asset file name relative to the asset directory
        position: (x, y) of the top-left corner in capture units
        size: (width, height) in capture units
        asset_dir: Directory holding the collection's assets
        geometry: Scale settings shared with strokes

    Returns:
        ImageDrawable whose rectangle spans scaled(position) to
        scaled(position + size)

    Raises:
        MalformedInkData: If the position or size is not finite
        AssetNotFound: If the asset file is missing
        AssetDecodeFailed: If the asset is not a decodable image
    """
    geometry = geometry or GeometryConfig()
    scale = geometry.coordinate_scale

    x, y = position
    width, height = size
    if not np.all(np.isfinite([x, y, width, height])):
        raise MalformedInkData(
            f"Image {filename!r} has a non-finite placement: "
            f"position={position}, size={size}"
        )

    data = read_asset(Path(asset_dir) / filename)
    image = decode_image(data, filename)

    rectangle = Rectangle.from_corners(
        (x * scale, y * scale),
        ((x + width) * scale, (y + height) * scale)
    )

    h, w = image.shape[:2]
    return ImageDrawable(
        rectangle=rectangle,
        data=data,
        pixel_size=(int(w), int(h)),
        filename=filename,
        image=image
    )


# ============================================================================
# Compositing
# ============================================================================

def to_bgr(image: np.ndarray) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Split an image into a BGR array and an optional alpha mask in [0, 1].
    """
    import cv2

    if len(image.shape) == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR), None
    if image.shape[2] == 4:
        alpha = image[:, :, 3].astype(np.float32) / 255.0
        return np.ascontiguousarray(image[:, :, :3]), alpha
    if image.shape[2] == 1:
        return cv2.cvtColor(image.squeeze(axis=2), cv2.COLOR_GRAY2BGR), None
    return image, None


def composite_image(
    canvas: np.ndarray,
    image: np.ndarray,
    rectangle: Tuple[int, int, int, int]
) -> np.ndarray:
    """
    Resize `image` into the pixel rectangle (x1, y1, x2, y2) of `canvas`.

    Parts falling outside the canvas are clipped. The canvas is modified
    in place and returned.
    """
    import cv2

    x1, y1, x2, y2 = rectangle
    width, height = x2 - x1, y2 - y1
    if width <= 0 or height <= 0:
        return canvas

    if image.dtype != np.uint8:
        image = cv2.convertScaleAbs(image, alpha=255.0 / max(float(image.max()), 1.0))
    bgr, alpha = to_bgr(image)
    resized = cv2.resize(bgr, (width, height), interpolation=cv2.INTER_AREA)
    if alpha is not None:
        alpha = cv2.resize(alpha, (width, height), interpolation=cv2.INTER_AREA)

    canvas_h, canvas_w = canvas.shape[:2]
    cx1, cy1 = max(x1, 0), max(y1, 0)
    cx2, cy2 = min(x2, canvas_w), min(y2, canvas_h)
    if cx1 >= cx2 or cy1 >= cy2:
        return canvas

    src = resized[cy1 - y1:cy2 - y1, cx1 - x1:cx2 - x1]
    if alpha is None:
        canvas[cy1:cy2, cx1:cx2] = src
    else:
        mask = alpha[cy1 - y1:cy2 - y1, cx1 - x1:cx2 - x1][:, :, np.newaxis]
        region = canvas[cy1:cy2, cx1:cx2].astype(np.float64)
        blended = src.astype(np.float64) * mask + region * (1.0 - mask)
        canvas[cy1:cy2, cx1:cx2] = blended.astype(np.uint8)

    return canvas
