"""
Ink description elements and their classification into drawables.

Provides:
- Element/Item data model decoded from JIIX dicts
- Closed kind enumerations for elements and items
- ElementClassifier, which routes each element and item to its builder

JIIX reference: https://developer.myscript.com/docs/interactive-ink/2.0/reference/jiix/
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..config import CONTENT_GROUP_KINDS, IMAGE_KIND, GeometryConfig
from .errors import MalformedInkData, UnsupportedItemType
from .images import ImageDrawable, place_image
from .spans import Span, SpanWalker
from .strokes import StrokeDrawable, build_line, build_stroke
from .styles import Style, parse_style

logger = logging.getLogger(__name__)

Drawable = Union[StrokeDrawable, ImageDrawable]


# ============================================================================
# Enums
# ============================================================================

class ElementKind(Enum):
    """Top-level element kinds."""
    RAW_CONTENT = "Raw Content"
    EDGE = "Edge"
    NODE = "Node"
    IMAGE = "Image"
    UNKNOWN = "unknown"

    @classmethod
    def from_tag(cls, tag: str) -> 'ElementKind':
        try:
            return cls(tag)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_content_group(self) -> bool:
        return self.value in CONTENT_GROUP_KINDS

    @property
    def is_image(self) -> bool:
        return self.value == IMAGE_KIND


class ItemKind(Enum):
    """Primitive kinds inside a content group."""
    STROKE = "stroke"
    LINE = "line"
    GLYPH = "glyph"
    ARC = "arc"


SKIPPED_ITEM_KINDS = (ItemKind.GLYPH, ItemKind.ARC)


# ============================================================================
# Field Extraction
# ============================================================================

def _number(raw: Dict[str, Any], key: str) -> Optional[float]:
    value = raw.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedInkData(f"Field {key!r} must be a number, got {value!r}")
    return float(value)


def _number_list(raw: Dict[str, Any], key: str) -> Optional[List[float]]:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise MalformedInkData(f"Field {key!r} must be a list, got {type(value).__name__}")
    return value


def _required(value: Optional[float], key: str, owner: str) -> float:
    if value is None:
        raise MalformedInkData(f"{owner} is missing field {key!r}")
    return value


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class Item:
    """One primitive inside a content group element."""
    type_tag: str
    xs: Optional[List[float]] = None
    ys: Optional[List[float]] = None
    pressures: Optional[List[float]] = None
    timestamps: Optional[List[float]] = None
    x1: Optional[float] = None
    y1: Optional[float] = None
    x2: Optional[float] = None
    y2: Optional[float] = None

    @property
    def kind(self) -> Optional[ItemKind]:
        try:
            return ItemKind(self.type_tag)
        except ValueError:
            return None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'Item':
        if not isinstance(raw, dict):
            raise MalformedInkData(f"Item must be an object, got {type(raw).__name__}")
        type_tag = raw.get("type")
        if not isinstance(type_tag, str):
            raise MalformedInkData(f"Item has invalid 'type': {type_tag!r}")
        return cls(
            type_tag=type_tag,
            xs=_number_list(raw, "X"),
            ys=_number_list(raw, "Y"),
            pressures=_number_list(raw, "F"),
            timestamps=_number_list(raw, "T"),
            x1=_number(raw, "x1"),
            y1=_number(raw, "y1"),
            x2=_number(raw, "x2"),
            y2=_number(raw, "y2"),
        )

    def endpoints(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        owner = f"{self.type_tag} item"
        return (
            (_required(self.x1, "x1", owner), _required(self.y1, "y1", owner)),
            (_required(self.x2, "x2", owner), _required(self.y2, "y2", owner)),
        )


@dataclass
class Element:
    """One top-level entry of an ink description."""
    type_tag: str
    url: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    items: List[Item] = field(default_factory=list)
    spans: List[Span] = field(default_factory=list)
    style: Optional[Style] = None

    @property
    def kind(self) -> ElementKind:
        return ElementKind.from_tag(self.type_tag)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'Element':
        """
        Decode one JIIX element.

        Spans and the element style are decoded eagerly, so a malformed style
        anywhere in the element fails the page.
        """
        if not isinstance(raw, dict):
            raise MalformedInkData(f"Element must be an object, got {type(raw).__name__}")

        type_tag = raw.get("type")
        if not isinstance(type_tag, str):
            raise MalformedInkData(f"Element has invalid 'type': {type_tag!r}")

        url = raw.get("url")
        if url is not None and not isinstance(url, str):
            raise MalformedInkData(f"Element has invalid 'url': {url!r}")

        items = raw.get("items") or []
        spans = raw.get("spans") or []
        if not isinstance(items, list) or not isinstance(spans, list):
            raise MalformedInkData("Element 'items' and 'spans' must be lists")

        style = raw.get("style")
        if style is not None and not isinstance(style, str):
            raise MalformedInkData(f"Element has invalid 'style': {style!r}")

        return cls(
            type_tag=type_tag,
            url=url,
            x=_number(raw, "x"),
            y=_number(raw, "y"),
            width=_number(raw, "width"),
            height=_number(raw, "height"),
            items=[Item.from_dict(item) for item in items],
            spans=[Span.from_dict(span) for span in spans],
            style=parse_style(style) if style is not None else None,
        )


def parse_ink_document(raw: Any) -> List[Element]:
    """
    Decode the `elements` list of a parsed .jiix document.

    Raises:
        MalformedInkData: If the document has no element list
    """
    if not isinstance(raw, dict) or not isinstance(raw.get("elements"), list):
        raise MalformedInkData("Ink description has no 'elements' list")
    return [Element.from_dict(element) for element in raw["elements"]]


# ============================================================================
# Element Classifier
# ============================================================================

class ElementClassifier:
    """
    Turns elements into drawables.

    Content groups are walked item by item with a fresh SpanWalker; image
    elements are placed from the asset directory. Glyphs, arcs and unknown
    element kinds produce nothing.
    """

    def __init__(
        self,
        asset_dir: Union[str, Path],
        geometry: Optional[GeometryConfig] = None
    ):
        self.asset_dir = Path(asset_dir)
        self.geometry = geometry or GeometryConfig()
        self.skipped_items = 0
        self.skipped_elements = 0

    def classify(self, element: Element) -> List[Drawable]:
        """
        Build the drawables for one element, in item order.

        Raises:
            UnsupportedItemType: For item kinds with no handler
            InkReconError: Any builder failure, unchanged
        """
        kind = element.kind

        if kind.is_content_group:
            return self._classify_group(element)

        if kind.is_image:
            return [self._place(element)]

        self.skipped_elements += 1
        logger.warning(f"Unexpected element type {element.type_tag!r}, ignoring")
        return []

    def _classify_group(self, element: Element) -> List[Drawable]:
        walker = SpanWalker(element.spans)
        drawables: List[Drawable] = []

        for index, item in enumerate(element.items):
            kind = item.kind

            if kind is ItemKind.STROKE:
                style = walker.style_for(index)
                if style is None:
                    logger.debug(f"No span covers item {index}, using default pen")
                drawables.append(build_stroke(
                    item.xs,
                    item.ys,
                    item.pressures,
                    style,
                    geometry=self.geometry,
                    timestamps=item.timestamps
                ))

            elif kind is ItemKind.LINE:
                start, end = item.endpoints()
                drawables.append(build_line(start, end, element.style, geometry=self.geometry))

            elif kind in SKIPPED_ITEM_KINDS:
                # Text is not rebuilt from glyphs; arcs are not kept
                self.skipped_items += 1

            else:
                raise UnsupportedItemType(item.type_tag)

        return drawables

    def _place(self, element: Element) -> ImageDrawable:
        owner = "Image element"
        if not element.url:
            raise MalformedInkData(f"{owner} is missing field 'url'")
        position = (
            _required(element.x, "x", owner),
            _required(element.y, "y", owner),
        )
        size = (
            _required(element.width, "width", owner),
            _required(element.height, "height", owner),
        )
        return place_image(element.url, position, size, self.asset_dir, geometry=self.geometry)
