"""
Utility modules for the ink reconstruction pipeline.
"""

from .errors import (
    InkReconError, MalformedInkData, MalformedStyle, InvalidPenWidth, InvalidColor,
    EmptyOrMismatchedArrays, DegeneratePath, MissingStyleForLine, UnsupportedItemType,
    AssetNotFound, AssetDecodeFailed, ExportFailed,
)
from .styles import Color, Style, parse_style, parse_color, format_style
from .spans import Span, SpanWalker
from .strokes import StrokeDrawable, build_stroke, build_line
from .images import Rectangle, ImageDrawable, place_image
from .elements import Element, Item, ElementKind, ItemKind, ElementClassifier, parse_ink_document
from .assembler import (
    Page, PageMetadata, PageDocument, DocumentConfig, PageAssembler,
    ExportConverter, ConversionReport,
)
from .io import iter_pages, load_page, save_json, load_json, ensure_dir
from .export import JsonExporter, SvgExporter, PngExporter, DocumentExporter

__all__ = [
    # Errors
    "InkReconError", "MalformedInkData", "MalformedStyle", "InvalidPenWidth", "InvalidColor",
    "EmptyOrMismatchedArrays", "DegeneratePath", "MissingStyleForLine", "UnsupportedItemType",
    "AssetNotFound", "AssetDecodeFailed", "ExportFailed",
    # Styles
    "Color", "Style", "parse_style", "parse_color", "format_style",
    "Span", "SpanWalker",
    # Drawables
    "StrokeDrawable", "build_stroke", "build_line",
    "Rectangle", "ImageDrawable", "place_image",
    # Elements
    "Element", "Item", "ElementKind", "ItemKind", "ElementClassifier", "parse_ink_document",
    # Assembly
    "Page", "PageMetadata", "PageDocument", "DocumentConfig", "PageAssembler",
    "ExportConverter", "ConversionReport",
    # IO
    "iter_pages", "load_page", "save_json", "load_json", "ensure_dir",
    # Export
    "JsonExporter", "SvgExporter", "PngExporter", "DocumentExporter",
]
