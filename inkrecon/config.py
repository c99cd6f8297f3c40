"""
Configuration and constants for the ink reconstruction pipeline.

This module provides:
- Global logging setup
- Geometry settings (coordinate scale, stroke widths, alpha policy)
- Per-page document defaults (background, grid, layout)
- Export settings
"""

import os
from dataclasses import dataclass, field
from typing import List, Tuple
import logging

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("inkrecon")


# ============================================================================
# Source Format Constants
# ============================================================================

# Empirically inferred factor that makes the capture grid line up with the
# output canvas grid. Not exact, but close.
COORDINATE_SCALE = 7.0
WIDTH_SCALE = 7.0

# Width/color used when no style span covers a stroke item
DEFAULT_STROKE_WIDTH = 2.0

PEN_WIDTH_KEY = "-myscript-pen-width"
COLOR_KEY = "color"

CONTENT_GROUP_KINDS = ("Raw Content", "Edge", "Node")
IMAGE_KIND = "Image"

COLLECTION_SUFFIX = ".nebo"
PAGES_DIR = "pages"
OBJECTS_DIR = "objects"
METADATA_FILE = "meta.json"
INK_EXTENSION = ".jiix"

GRID_PATTERN_ID = "grid"

# Layer tag attached to reconstructed strokes; images carry none
USER_LAYER = 0


class AlphaPolicy:
    """How decoded color alpha is applied to drawables."""
    SOURCE = "source"      # strokes forced opaque, lines keep decoded alpha
    OPAQUE = "opaque"      # every drawable opaque
    PRESERVE = "preserve"  # every drawable keeps decoded alpha

    ALL = (SOURCE, OPAQUE, PRESERVE)


# ============================================================================
# Processing Configuration
# ============================================================================

@dataclass
class GeometryConfig:
    """Coordinate and stroke reconstruction settings."""
    coordinate_scale: float = COORDINATE_SCALE
    width_scale: float = WIDTH_SCALE
    default_stroke_width: float = DEFAULT_STROKE_WIDTH
    min_path_points: int = 1
    alpha_policy: str = AlphaPolicy.SOURCE


@dataclass
class DocumentDefaults:
    """Document-level settings applied to every reconstructed page."""
    background_color: Tuple[int, int, int, int] = (255, 255, 255, 255)
    grid_size: Tuple[float, float] = (32.0, 32.0)
    grid_color: Tuple[int, int, int, int] = (200, 200, 200, 255)
    show_borders: bool = False
    layout: str = "infinite"


@dataclass
class ExportConfig:
    """Export configuration."""
    formats: List[str] = field(default_factory=lambda: ["json", "svg"])
    svg_margin: float = 64.0
    png_max_side: int = 4096
    png_min_thickness: int = 1


@dataclass
class PipelineConfig:
    """Main pipeline configuration."""
    geometry: GeometryConfig = field(default_factory=GeometryConfig)
    document: DocumentDefaults = field(default_factory=DocumentDefaults)
    export: ExportConfig = field(default_factory=ExportConfig)

    # Global settings
    debug_mode: bool = False
    fail_fast: bool = False


# ============================================================================
# Default Configuration Instance
# ============================================================================

def get_config() -> PipelineConfig:
    """Get the default pipeline configuration with environment overrides."""
    config = PipelineConfig()

    if os.environ.get("INKRECON_DEBUG", "").lower() == "true":
        config.debug_mode = True

    if os.environ.get("INKRECON_FAIL_FAST", "").lower() == "true":
        config.fail_fast = True

    scale = os.environ.get("INKRECON_SCALE")
    if scale:
        try:
            config.geometry.coordinate_scale = float(scale)
            config.geometry.width_scale = float(scale)
        except ValueError:
            logger.warning(f"Ignoring invalid INKRECON_SCALE: {scale!r}")

    policy = os.environ.get("INKRECON_ALPHA_POLICY", "").lower()
    if policy:
        if policy in AlphaPolicy.ALL:
            config.geometry.alpha_policy = policy
        else:
            logger.warning(f"Ignoring unknown INKRECON_ALPHA_POLICY: {policy!r}")

    return config


# ============================================================================
# JSON Schema Version
# ============================================================================

JSON_SCHEMA_VERSION = "1.0"
