#!/usr/bin/env python
"""
Generate a synthetic handwriting export for trying out the pipeline.

This script creates one collection with:
- A titled page with pressure-varying strokes in two colors
- An untitled page with a diagram (lines plus a text glyph)
- A page embedding an image asset

Usage:
    python examples/generate_sample_export.py
    python -m inkrecon.cli --input examples/sample_export --output examples/sample_output --format all
"""

import json
from pathlib import Path

import numpy as np

BLUE = "-myscript-pen-width:0.4;color:#1F3A93FF"
RED = "-myscript-pen-width:0.8;color:#C0392BCC"


def create_wave_stroke(x0: float, y0: float, length: float, amplitude: float) -> dict:
    """Create a sine-shaped stroke with pressure rising then falling."""
    t = np.linspace(0.0, 1.0, 40)
    xs = x0 + t * length
    ys = y0 + amplitude * np.sin(t * 2 * np.pi)
    pressures = 0.3 + 0.6 * np.sin(t * np.pi)
    timestamps = 1000 + np.arange(len(t)) * 8
    return {
        "type": "stroke",
        "X": xs.round(3).tolist(),
        "Y": ys.round(3).tolist(),
        "F": pressures.round(3).tolist(),
        "T": timestamps.tolist(),
    }


def create_handwriting_page() -> list:
    """Three strokes, the last one covered by a second span."""
    return [{
        "type": "Raw Content",
        "items": [
            create_wave_stroke(10, 20, 60, 4),
            create_wave_stroke(10, 35, 60, 2),
            create_wave_stroke(10, 50, 60, 6),
        ],
        "spans": [
            {"last-item": 1, "style": BLUE},
            {"last-item": 2, "style": RED},
        ],
    }]


def create_diagram_page() -> list:
    """A box drawn with lines, plus a glyph that is skipped on import."""
    corners = [(10, 10), (60, 10), (60, 40), (10, 40)]
    lines = []
    for (x1, y1), (x2, y2) in zip(corners, corners[1:] + corners[:1]):
        lines.append({"type": "line", "x1": x1, "y1": y1, "x2": x2, "y2": y2})
    return [
        {"type": "Node", "style": BLUE, "items": lines},
        {"type": "Raw Content", "items": [{"type": "glyph", "label": "A"}]},
    ]


def create_image_page(asset_name: str) -> list:
    return [
        {"type": "Image", "url": asset_name, "x": 10, "y": 10, "width": 40, "height": 20},
        {
            "type": "Raw Content",
            "items": [create_wave_stroke(10, 40, 40, 3)],
            "spans": [{"last-item": 0, "style": RED}],
        },
    ]


def create_asset_image() -> np.ndarray:
    """Gradient test image with a circle."""
    import cv2

    img = np.zeros((100, 200, 3), dtype=np.uint8)
    img[:, :, 0] = np.linspace(60, 255, 200, dtype=np.uint8)[np.newaxis, :]
    img[:, :, 1] = 180
    cv2.circle(img, (100, 50), 30, (0, 0, 255), -1)
    return img


def write_page(pages_dir: Path, page_id: str, elements: list, title: str = None):
    page_dir = pages_dir / page_id
    page_dir.mkdir(parents=True, exist_ok=True)

    meta = {"backgroundPattern": "grid"}
    if title is not None:
        meta["pageTitle"] = title
    with open(page_dir / "meta.json", 'w') as f:
        json.dump(meta, f, indent=2)
    with open(page_dir / f"{page_id}.jiix", 'w') as f:
        json.dump({"type": "Raw Content", "elements": elements}, f, indent=2)
    print(f"Created: {page_dir}")


def main():
    import cv2

    collection_dir = Path(__file__).parent / "sample_export" / "Sample Notes.nebo"
    pages_dir = collection_dir / "pages"
    objects_dir = collection_dir / "objects"
    objects_dir.mkdir(parents=True, exist_ok=True)

    asset_name = "gradient.png"
    cv2.imwrite(str(objects_dir / asset_name), create_asset_image())
    print(f"Created: {objects_dir / asset_name}")

    write_page(pages_dir, "page-01", create_handwriting_page(), title="Handwriting")
    write_page(pages_dir, "page-02", create_diagram_page())
    write_page(pages_dir, "page-03", create_image_page(asset_name), title="With image")

    print("\nSample export complete!")


if __name__ == "__main__":
    main()
