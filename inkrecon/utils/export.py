"""
Export module for reconstructed pages.

Provides:
- JSON export (page document envelope)
- SVG export (vector document, images embedded as data URIs)
- PNG export (OpenCV raster preview, pressure-aware stroke widths)
- Multi-format exporter used as the page sink
"""

import base64
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union
import xml.etree.ElementTree as ET

import numpy as np

from ..config import ExportConfig
from .assembler import PageDocument, PatternStyle
from .errors import ExportFailed
from .images import ImageDrawable, composite_image
from .io import save_json
from .strokes import StrokeDrawable

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("json", "svg", "png")


def canvas_bounds(
    document: PageDocument,
    margin: float
) -> Tuple[float, float, float, float]:
    """(x, y, width, height) of the canvas around a page's drawables."""
    bounds = document.bounds() or (0.0, 0.0, 0.0, 0.0)
    x1, y1, x2, y2 = bounds
    return (x1 - margin, y1 - margin, (x2 - x1) + 2 * margin, (y2 - y1) + 2 * margin)


def _fmt(value: float) -> str:
    return f"{value:.3f}".rstrip("0").rstrip(".")


# ============================================================================
# JSON Exporter
# ============================================================================

class JsonExporter:
    """Export a page document as JSON."""

    def export(self, document: PageDocument, output_path: Union[str, Path]) -> Path:
        output_path = save_json(document.to_dict(), output_path)
        logger.info(f"Exported JSON to: {output_path}")
        return output_path


# ============================================================================
# SVG Exporter
# ============================================================================

class SvgExporter:
    """Export a page document as a standalone SVG file."""

    def __init__(self, margin: float = 64.0):
        self.margin = margin

    def export(self, document: PageDocument, output_path: Union[str, Path]) -> Path:
        """
        Export document to SVG file.

        Args:
            document: Assembled page document
            output_path: Output file path

        Returns:
            Path to the generated SVG file
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        root = self.build(document)
        ET.ElementTree(root).write(str(output_path), encoding="utf-8", xml_declaration=True)

        logger.info(f"Exported SVG to: {output_path}")
        return output_path

    def build(self, document: PageDocument) -> ET.Element:
        """Build the SVG element tree for a page."""
        x, y, width, height = canvas_bounds(document, self.margin)
        config = document.config

        root = ET.Element("svg", {
            "xmlns": "http://www.w3.org/2000/svg",
            "xmlns:xlink": "http://www.w3.org/1999/xlink",
            "width": _fmt(width),
            "height": _fmt(height),
            "viewBox": f"{_fmt(x)} {_fmt(y)} {_fmt(width)} {_fmt(height)}",
        })
        ET.SubElement(root, "title").text = document.title

        background = ET.SubElement(root, "rect", {
            "x": _fmt(x), "y": _fmt(y), "width": _fmt(width), "height": _fmt(height),
            "fill": config.background_color.to_hex(with_alpha=False),
        })
        if config.background_color.a < 255:
            background.set("fill-opacity", _fmt(config.background_color.alpha))

        if config.pattern == PatternStyle.GRID:
            self._add_grid(root, document, (x, y, width, height))

        if config.show_borders and document.entries:
            bx1, by1, bx2, by2 = document.bounds()
            ET.SubElement(root, "rect", {
                "x": _fmt(bx1), "y": _fmt(by1),
                "width": _fmt(bx2 - bx1), "height": _fmt(by2 - by1),
                "fill": "none", "stroke": "#808080", "stroke-dasharray": "8 4",
            })

        for drawable, layer in document.entries:
            if isinstance(drawable, ImageDrawable):
                self._add_image(root, drawable)
            elif isinstance(drawable, StrokeDrawable):
                self._add_stroke(root, drawable, layer)

        return root

    def _add_grid(self, root: ET.Element, document: PageDocument, canvas: Tuple[float, float, float, float]):
        config = document.config
        size_x, size_y = config.pattern_size
        defs = ET.SubElement(root, "defs")
        pattern = ET.SubElement(defs, "pattern", {
            "id": "grid",
            "x": "0", "y": "0",
            "width": _fmt(size_x), "height": _fmt(size_y),
            "patternUnits": "userSpaceOnUse",
        })
        ET.SubElement(pattern, "path", {
            "d": f"M {_fmt(size_x)} 0 L 0 0 0 {_fmt(size_y)}",
            "fill": "none",
            "stroke": config.pattern_color.to_hex(with_alpha=False),
            "stroke-width": "1",
        })
        x, y, width, height = canvas
        ET.SubElement(root, "rect", {
            "x": _fmt(x), "y": _fmt(y), "width": _fmt(width), "height": _fmt(height),
            "fill": "url(#grid)",
        })

    def _add_image(self, root: ET.Element, image: ImageDrawable):
        rect = image.rectangle
        encoded = base64.b64encode(image.data).decode("ascii")
        href = f"data:{image.mime_type};base64,{encoded}"
        ET.SubElement(root, "image", {
            "x": _fmt(rect.x1), "y": _fmt(rect.y1),
            "width": _fmt(rect.width), "height": _fmt(rect.height),
            "preserveAspectRatio": "none",
            "href": href,
            "xlink:href": href,
        })

    def _add_stroke(self, root: ET.Element, stroke: StrokeDrawable, layer: Optional[int]):
        xy = stroke.xy
        commands = [f"M {_fmt(xy[0, 0])} {_fmt(xy[0, 1])}"]
        if len(xy) == 1:
            # A zero-length segment renders as a dot with round caps
            commands.append(f"L {_fmt(xy[0, 0])} {_fmt(xy[0, 1])}")
        else:
            commands.extend(f"L {_fmt(px)} {_fmt(py)}" for px, py in xy[1:])

        attrs = {
            "d": " ".join(commands),
            "fill": "none",
            "stroke": stroke.color.to_hex(with_alpha=False),
            "stroke-width": _fmt(stroke.width),
            "stroke-linecap": "round",
            "stroke-linejoin": "round",
        }
        if stroke.color.a < 255:
            attrs["stroke-opacity"] = _fmt(stroke.color.alpha)
        if layer is not None:
            attrs["data-layer"] = str(layer)
        ET.SubElement(root, "path", attrs)


# ============================================================================
# PNG Exporter
# ============================================================================

class PngExporter:
    """Rasterize a page document with OpenCV."""

    def __init__(self, margin: float = 64.0, max_side: int = 4096, min_thickness: int = 1):
        self.margin = margin
        self.max_side = max_side
        self.min_thickness = min_thickness

    def export(self, document: PageDocument, output_path: Union[str, Path]) -> Path:
        import cv2

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        canvas = self.render(document)
        if not cv2.imwrite(str(output_path), canvas):
            raise IOError(f"Could not write PNG: {output_path}")

        logger.info(f"Exported PNG to: {output_path}")
        return output_path

    def render(self, document: PageDocument) -> np.ndarray:
        """
        Render a page to a BGR image.

        Coordinates are shifted so the canvas starts at the page bounds minus
        the margin, and scaled down if the canvas exceeds `max_side`.
        """
        x, y, width, height = canvas_bounds(document, self.margin)
        factor = min(1.0, self.max_side / max(width, height, 1.0))
        # round first so float noise cannot push a side past max_side
        canvas_w = max(int(np.ceil(round(width * factor, 6))), 1)
        canvas_h = max(int(np.ceil(round(height * factor, 6))), 1)

        config = document.config
        canvas = np.empty((canvas_h, canvas_w, 3), dtype=np.uint8)
        canvas[:, :] = config.background_color.to_bgr()

        def to_pixels(points: np.ndarray) -> np.ndarray:
            return np.rint((points - np.array([x, y])) * factor).astype(np.int32)

        if config.pattern == PatternStyle.GRID:
            self._draw_grid(canvas, config.pattern_size, config.pattern_color.to_bgr(), (x, y), factor)

        for drawable, _ in document.entries:
            if isinstance(drawable, ImageDrawable):
                if drawable.image is None:
                    continue
                rect = drawable.rectangle
                corners = to_pixels(np.array([[rect.x1, rect.y1], [rect.x2, rect.y2]]))
                composite_image(canvas, drawable.image, tuple(corners.flatten().tolist()))
            elif isinstance(drawable, StrokeDrawable):
                self._draw_stroke(canvas, drawable, to_pixels(drawable.xy), factor)

        return canvas

    def _draw_grid(self, canvas, size, color, origin, factor):
        import cv2

        h, w = canvas.shape[:2]
        step_x, step_y = size[0] * factor, size[1] * factor
        if step_x < 2 or step_y < 2:
            return
        # Align lines with multiples of the pattern size in page coordinates
        start_x = (np.ceil(origin[0] / size[0]) * size[0] - origin[0]) * factor
        start_y = (np.ceil(origin[1] / size[1]) * size[1] - origin[1]) * factor
        for gx in np.arange(start_x, w, step_x):
            cv2.line(canvas, (int(gx), 0), (int(gx), h - 1), color, 1)
        for gy in np.arange(start_y, h, step_y):
            cv2.line(canvas, (0, int(gy)), (w - 1, int(gy)), color, 1)

    def _draw_stroke(self, canvas, stroke: StrokeDrawable, pixels: np.ndarray, factor: float):
        import cv2

        color = stroke.color.to_bgr()
        target = canvas if stroke.color.a >= 255 else canvas.copy()
        pressures = stroke.pressures

        if len(pixels) == 1:
            radius = max(int(round(stroke.width * factor * pressures[0] / 2)), self.min_thickness)
            cv2.circle(target, tuple(pixels[0].tolist()), radius, color, -1, cv2.LINE_AA)
        else:
            for i in range(len(pixels) - 1):
                pressure = (pressures[i] + pressures[i + 1]) / 2.0
                thickness = max(int(round(stroke.width * factor * pressure)), self.min_thickness)
                cv2.line(
                    target,
                    tuple(pixels[i].tolist()),
                    tuple(pixels[i + 1].tolist()),
                    color,
                    thickness,
                    cv2.LINE_AA
                )

        if target is not canvas:
            cv2.addWeighted(target, stroke.color.alpha, canvas, 1.0 - stroke.color.alpha, 0, dst=canvas)


# ============================================================================
# Multi-Format Exporter
# ============================================================================

class DocumentExporter:
    """Page sink writing one file per requested format."""

    def __init__(
        self,
        output_dir: Union[str, Path],
        formats: Optional[List[str]] = None,
        config: Optional[ExportConfig] = None
    ):
        self.output_dir = Path(output_dir)
        self.config = config or ExportConfig()

        formats = list(formats or self.config.formats)
        if "all" in formats:
            formats = list(SUPPORTED_FORMATS)
        unknown = [f for f in formats if f not in SUPPORTED_FORMATS]
        if unknown:
            raise ValueError(f"Unknown export format(s): {', '.join(unknown)}")
        self.formats = formats

        self.json_exporter = JsonExporter()
        self.svg_exporter = SvgExporter(margin=self.config.svg_margin)
        self.png_exporter = PngExporter(
            margin=self.config.svg_margin,
            max_side=self.config.png_max_side,
            min_thickness=self.config.png_min_thickness
        )

    def export(self, document: PageDocument) -> Dict[str, Path]:
        """
        Export a page document to every configured format.

        Either every format is written or none is: files produced before a
        failure are removed again.

        Returns:
            Dictionary mapping format to output path

        Raises:
            ExportFailed: If any format cannot be rendered or written
        """
        import cv2

        base = self.output_dir / document.output_name
        exporters = {
            "json": self.json_exporter,
            "svg": self.svg_exporter,
            "png": self.png_exporter,
        }

        results = {}
        attempted = []
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            for fmt in SUPPORTED_FORMATS:
                if fmt not in self.formats:
                    continue
                path = base.with_name(f"{base.name}.{fmt}")
                attempted.append(path)
                results[fmt] = exporters[fmt].export(document, path)
        except (OSError, ValueError, cv2.error) as e:
            _discard(attempted)
            raise ExportFailed(f"Could not export {document.output_name!r}: {e}")

        return results


def _discard(paths: List[Path]) -> None:
    for path in paths:
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.warning(f"Could not remove partial output {path}: {e}")
        else:
            logger.debug(f"Removed partial output {path}")
