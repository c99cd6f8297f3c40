"""
Tests for image placement and compositing.
"""

import pytest
import numpy as np


class TestRectangle:
    """Test rectangle helpers."""

    def test_from_corners_normalizes(self):
        from inkrecon.utils.images import Rectangle

        rect = Rectangle.from_corners((10, 5), (2, 8))

        assert rect.to_tuple() == (2, 5, 10, 8)
        assert rect.width == 8
        assert rect.height == 3


class TestPlaceImage:
    """Test image element placement."""

    def test_placement_scaled(self, tmp_path, png_bytes):
        """Test the rectangle runs from scaled origin to scaled origin + size."""
        from inkrecon.utils.images import place_image

        (tmp_path / "a.png").write_bytes(png_bytes)

        image = place_image("a.png", (10, 20), (30, 15), tmp_path)

        assert image.rectangle.to_tuple() == pytest.approx((70.0, 140.0, 280.0, 245.0))
        assert image.pixel_size == (20, 10)
        assert image.data == png_bytes
        assert image.mime_type == "image/png"

    def test_negative_size(self, tmp_path, png_bytes):
        """Test a negative extent still yields an ordered rectangle."""
        from inkrecon.utils.images import place_image

        (tmp_path / "a.png").write_bytes(png_bytes)

        image = place_image("a.png", (10, 10), (-5, -5), tmp_path)

        assert image.rectangle.to_tuple() == pytest.approx((35.0, 35.0, 70.0, 70.0))

    def test_missing_asset(self, tmp_path):
        from inkrecon.utils.images import place_image
        from inkrecon.utils.errors import AssetNotFound

        with pytest.raises(AssetNotFound):
            place_image("missing.png", (0, 0), (1, 1), tmp_path)

    def test_undecodable_asset(self, tmp_path):
        from inkrecon.utils.images import place_image
        from inkrecon.utils.errors import AssetDecodeFailed

        (tmp_path / "bad.png").write_bytes(b"not an image at all")

        with pytest.raises(AssetDecodeFailed):
            place_image("bad.png", (0, 0), (1, 1), tmp_path)

    def test_empty_asset(self, tmp_path):
        from inkrecon.utils.images import decode_image
        from inkrecon.utils.errors import AssetDecodeFailed

        with pytest.raises(AssetDecodeFailed):
            decode_image(b"", "empty.png")


class TestCompositing:
    """Test raster compositing used by the PNG preview."""

    def test_opaque_image(self):
        from inkrecon.utils.images import composite_image

        canvas = np.full((20, 20, 3), 255, dtype=np.uint8)
        image = np.zeros((4, 4, 3), dtype=np.uint8)

        composite_image(canvas, image, (5, 5, 15, 15))

        assert canvas[10, 10].tolist() == [0, 0, 0]
        assert canvas[2, 2].tolist() == [255, 255, 255]

    def test_clipped_to_canvas(self):
        from inkrecon.utils.images import composite_image

        canvas = np.full((10, 10, 3), 255, dtype=np.uint8)
        image = np.zeros((4, 4, 3), dtype=np.uint8)

        composite_image(canvas, image, (-5, -5, 5, 5))

        assert canvas[0, 0].tolist() == [0, 0, 0]
        assert canvas[8, 8].tolist() == [255, 255, 255]

    def test_transparent_image_keeps_canvas(self):
        from inkrecon.utils.images import composite_image

        canvas = np.full((10, 10, 3), 255, dtype=np.uint8)
        image = np.zeros((4, 4, 4), dtype=np.uint8)

        composite_image(canvas, image, (0, 0, 10, 10))

        assert canvas[5, 5].tolist() == [255, 255, 255]

    def test_grayscale_image(self):
        from inkrecon.utils.images import to_bgr

        bgr, alpha = to_bgr(np.zeros((3, 3), dtype=np.uint8))

        assert bgr.shape == (3, 3, 3)
        assert alpha is None


class TestAssetErrors:
    """Test asset problems surface as page-fatal asset errors."""

    @pytest.mark.parametrize("position,size", [
        ((float("nan"), 0), (1, 1)),
        ((0, 0), (float("inf"), 1)),
    ])
    def test_non_finite_placement(self, tmp_path, png_bytes, position, size):
        from inkrecon.utils.images import place_image
        from inkrecon.utils.errors import MalformedInkData

        (tmp_path / "a.png").write_bytes(png_bytes)

        with pytest.raises(MalformedInkData):
            place_image("a.png", position, size, tmp_path)

    def test_unreadable_asset(self, tmp_path, monkeypatch):
        from pathlib import Path
        from inkrecon.utils.images import read_asset
        from inkrecon.utils.errors import AssetNotFound

        asset = tmp_path / "locked.png"
        asset.write_bytes(b"\x89PNG")

        def denied(self):
            raise PermissionError("permission denied")

        monkeypatch.setattr(Path, "read_bytes", denied)

        with pytest.raises(AssetNotFound):
            read_asset(asset)
