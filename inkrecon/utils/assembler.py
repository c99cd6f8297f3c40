"""
Page assembler for the ink reconstruction pipeline.

Provides:
- Page data model (PageMetadata, Page)
- Per-page document configuration
- PageAssembler, which turns one page into an ordered drawable list
- ExportConverter, which runs the assembler over a whole export tree
"""

import logging
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np

from ..config import (
    GRID_PATTERN_ID,
    JSON_SCHEMA_VERSION,
    DocumentDefaults,
    GeometryConfig,
    PipelineConfig,
)
from .elements import Drawable, Element, ElementClassifier
from .errors import InkReconError, MalformedInkData
from .styles import WHITE, Color

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

class PatternStyle(Enum):
    """Background pattern requested from the output document."""
    NONE = "none"
    GRID = "grid"


class Layout(Enum):
    """Canvas layout mode of the output document."""
    INFINITE = "infinite"
    FIXED = "fixed"


@dataclass
class PageMetadata:
    """Contents of a page's meta.json."""
    page_title: Optional[str] = None
    background_pattern: str = ""

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'PageMetadata':
        if not isinstance(raw, dict):
            raise MalformedInkData("Page metadata must be an object")
        title = raw.get("pageTitle")
        pattern = raw.get("backgroundPattern")
        if title is not None and not isinstance(title, str):
            raise MalformedInkData(f"Invalid 'pageTitle': {title!r}")
        if not isinstance(pattern, str):
            raise MalformedInkData(f"Invalid 'backgroundPattern': {pattern!r}")
        return cls(page_title=title, background_pattern=pattern)


@dataclass
class Page:
    """One capture page, ready to be assembled."""
    page_id: str
    collection: str
    title: str
    metadata: PageMetadata
    elements: List[Element]
    asset_dir: Path
    source_path: Optional[Path] = None


@dataclass
class DocumentConfig:
    """Document-level settings handed to the output sink with the drawables."""
    background_color: Color = WHITE
    pattern: PatternStyle = PatternStyle.NONE
    pattern_size: Tuple[float, float] = (32.0, 32.0)
    pattern_color: Color = field(default_factory=lambda: Color(200, 200, 200, 255))
    show_borders: bool = False
    layout: Layout = Layout.INFINITE

    @classmethod
    def for_page(
        cls,
        metadata: PageMetadata,
        defaults: Optional[DocumentDefaults] = None
    ) -> 'DocumentConfig':
        defaults = defaults or DocumentDefaults()
        pattern = PatternStyle.NONE
        if metadata.background_pattern == GRID_PATTERN_ID:
            pattern = PatternStyle.GRID
        return cls(
            background_color=Color.from_tuple(defaults.background_color),
            pattern=pattern,
            pattern_size=tuple(defaults.grid_size),
            pattern_color=Color.from_tuple(defaults.grid_color),
            show_borders=defaults.show_borders,
            layout=Layout(defaults.layout),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "background_color": self.background_color.to_hex(),
            "pattern": self.pattern.value,
            "pattern_size": list(self.pattern_size),
            "show_borders": self.show_borders,
            "layout": self.layout.value,
        }


def sanitize_name(name: str) -> str:
    """Make a collection/page title safe to use as a file name."""
    cleaned = re.sub(r'[\\/:*?"<>|\x00-\x1f]', "_", name).strip().strip(".")
    return cleaned or "page"


@dataclass
class PageDocument:
    """A fully assembled page: configuration plus ordered (drawable, layer) pairs."""
    page_id: str
    collection: str
    title: str
    config: DocumentConfig
    entries: List[Tuple[Drawable, Optional[int]]] = field(default_factory=list)
    skipped_items: int = 0
    skipped_elements: int = 0

    @property
    def drawables(self) -> List[Drawable]:
        return [drawable for drawable, _ in self.entries]

    @property
    def output_name(self) -> str:
        return sanitize_name(f"{self.collection}_{self.title}")

    def bounds(self) -> Optional[Tuple[float, float, float, float]]:
        """Union of all drawable bounds, or None for an empty page."""
        if not self.entries:
            return None
        boxes = np.array([drawable.bounds() for drawable, _ in self.entries], dtype=np.float64)
        return (
            float(boxes[:, 0].min()), float(boxes[:, 1].min()),
            float(boxes[:, 2].max()), float(boxes[:, 3].max())
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": JSON_SCHEMA_VERSION,
            "page_id": self.page_id,
            "collection": self.collection,
            "title": self.title,
            "document": self.config.to_dict(),
            "drawables": [drawable.to_dict() for drawable, _ in self.entries],
            "skipped": {
                "items": self.skipped_items,
                "elements": self.skipped_elements,
            },
        }


# ============================================================================
# Page Assembler
# ============================================================================

class PageAssembler:
    """
    Builds the ordered drawable list of one page.

    A page either assembles completely or raises; nothing partial is handed
    to the sink.
    """

    def __init__(
        self,
        geometry: Optional[GeometryConfig] = None,
        defaults: Optional[DocumentDefaults] = None,
        sink: Optional[Any] = None
    ):
        self.geometry = geometry or GeometryConfig()
        self.defaults = defaults or DocumentDefaults()
        self.sink = sink

    def assemble(self, page: Page) -> PageDocument:
        """
        Assemble a page into a PageDocument.

        Args:
            page: Parsed page with its elements and asset directory

        Returns:
            PageDocument with drawables in source order

        Raises:
            InkReconError: On the first page-fatal error
        """
        classifier = ElementClassifier(page.asset_dir, geometry=self.geometry)
        entries: List[Tuple[Drawable, Optional[int]]] = []

        for element in page.elements:
            for drawable in classifier.classify(element):
                entries.append((drawable, drawable.layer))

        document = PageDocument(
            page_id=page.page_id,
            collection=page.collection,
            title=page.title,
            config=DocumentConfig.for_page(page.metadata, self.defaults),
            entries=entries,
            skipped_items=classifier.skipped_items,
            skipped_elements=classifier.skipped_elements,
        )
        logger.debug(
            f"Assembled page {page.page_id}: {len(entries)} drawables, "
            f"{classifier.skipped_items} skipped items"
        )
        return document

    def process(self, page: Page) -> Tuple[PageDocument, Any]:
        """Assemble a page and hand it to the sink exactly once."""
        document = self.assemble(page)
        result = None
        if self.sink is not None:
            result = self.sink.export(document)
        return document, result


# ============================================================================
# Export Converter
# ============================================================================

@dataclass
class ConversionReport:
    """Outcome of converting an export tree."""
    converted: List[Dict[str, Any]] = field(default_factory=list)
    failed: List[Dict[str, Any]] = field(default_factory=list)
    skipped_items: int = 0
    skipped_elements: int = 0
    processing_time_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "converted": self.converted,
            "failed": self.failed,
            "skipped": {
                "items": self.skipped_items,
                "elements": self.skipped_elements,
            },
            "processing_time_seconds": round(self.processing_time_seconds, 2),
        }


class ExportConverter:
    """
    Converts every page of an export tree.

    Page-fatal errors are logged and recorded, and the next page is
    processed, unless `fail_fast` is set.
    """

    def __init__(
        self,
        output_dir: Union[str, Path],
        config: Optional[PipelineConfig] = None,
        formats: Optional[List[str]] = None
    ):
        from .export import DocumentExporter

        self.config = config or PipelineConfig()
        self.output_dir = Path(output_dir)
        self.exporter = DocumentExporter(
            self.output_dir,
            formats=formats or self.config.export.formats,
            config=self.config.export
        )
        self.assembler = PageAssembler(
            geometry=self.config.geometry,
            defaults=self.config.document,
            sink=self.exporter
        )

    def convert(
        self,
        input_path: Union[str, Path],
        collections: Optional[List[str]] = None
    ) -> ConversionReport:
        """
        Convert all pages below `input_path`.

        Args:
            input_path: Export root (directory of collections) or one collection
            collections: Optional collection names to restrict the run to

        Returns:
            ConversionReport listing converted and failed pages
        """
        from .io import iter_pages

        start_time = time.time()
        report = ConversionReport()
        written: Dict[str, str] = {}

        for page_ref, loader in iter_pages(input_path, collections=collections):
            try:
                page = loader()
                document, outputs = self.assembler.process(page)
            except InkReconError as e:
                if self.config.fail_fast:
                    raise
                logger.error(f"Failed page {page_ref}: {e}")
                report.failed.append({"page": page_ref, "error": type(e).__name__, "message": str(e)})
                continue

            for path in outputs.values():
                previous = written.get(str(path))
                if previous is not None:
                    logger.warning(f"Page {page_ref} overwrote {path}, already written for page {previous}")
                written[str(path)] = page_ref

            report.skipped_items += document.skipped_items
            report.skipped_elements += document.skipped_elements
            report.converted.append({
                "page": page_ref,
                "title": document.title,
                "drawables": len(document.entries),
                "outputs": {fmt: str(path) for fmt, path in outputs.items()},
            })
            logger.info(f"Converted page {page_ref} ({len(document.entries)} drawables)")

        report.processing_time_seconds = time.time() - start_time
        return report
