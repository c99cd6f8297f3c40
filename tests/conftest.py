"""
Shared fixtures: synthetic export trees and image assets.
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import pytest

# Make the package importable without installation
sys.path.insert(0, str(Path(__file__).parent.parent))


def stroke_item(xs, ys, fs, **extra) -> Dict[str, Any]:
    item = {"type": "stroke", "X": list(xs), "Y": list(ys), "F": list(fs)}
    item.update(extra)
    return item


def line_item(x1, y1, x2, y2) -> Dict[str, Any]:
    return {"type": "line", "x1": x1, "y1": y1, "x2": x2, "y2": y2}


def span(last_item: int, style: str) -> Dict[str, Any]:
    return {"last-item": last_item, "style": style}


class ExportBuilder:
    """Writes a collection/page tree the way the capture app exports it."""

    def __init__(self, root: Path):
        self.root = root

    def collection_dir(self, collection: str) -> Path:
        path = self.root / f"{collection}.nebo"
        (path / "pages").mkdir(parents=True, exist_ok=True)
        return path

    def add_page(
        self,
        collection: str,
        page_id: str,
        elements: List[Dict[str, Any]],
        title: Optional[str] = None,
        pattern: str = "grid"
    ) -> Path:
        page_dir = self.collection_dir(collection) / "pages" / page_id
        page_dir.mkdir(parents=True, exist_ok=True)

        meta = {"backgroundPattern": pattern}
        if title is not None:
            meta["pageTitle"] = title
        (page_dir / "meta.json").write_text(json.dumps(meta), encoding="utf-8")
        (page_dir / f"{page_id}.jiix").write_text(
            json.dumps({"type": "Raw Content", "elements": elements}),
            encoding="utf-8"
        )
        return page_dir

    def add_asset(self, collection: str, name: str, data: bytes) -> Path:
        objects = self.collection_dir(collection) / "objects"
        objects.mkdir(parents=True, exist_ok=True)
        path = objects / name
        path.write_bytes(data)
        return path


@pytest.fixture
def export_builder(tmp_path):
    """Builder for an export tree below a temporary root."""
    root = tmp_path / "export"
    root.mkdir()
    return ExportBuilder(root)


@pytest.fixture
def png_bytes():
    """A small red PNG (20x10 pixels)."""
    import cv2

    img = np.zeros((10, 20, 3), dtype=np.uint8)
    img[:, :] = (0, 0, 255)
    ok, encoded = cv2.imencode(".png", img)
    assert ok
    return encoded.tobytes()


@pytest.fixture
def single_stroke_elements():
    """One content group holding one styled stroke."""
    return [{
        "type": "Raw Content",
        "items": [stroke_item([0, 1], [0, 1], [0.5, 0.5])],
        "spans": [span(0, "-myscript-pen-width:2;color:#11223344")],
    }]
