"""
I/O utilities for the ink reconstruction pipeline.

Handles:
- Export tree discovery (collections and their pages)
- Page loading (meta.json + <page>.jiix)
- JSON serialization
- Directory management
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional, Tuple, Union
from dataclasses import asdict

import numpy as np

from ..config import (
    COLLECTION_SUFFIX,
    INK_EXTENSION,
    METADATA_FILE,
    OBJECTS_DIR,
    PAGES_DIR,
)
from .assembler import Page, PageMetadata
from .elements import parse_ink_document
from .errors import MalformedInkData

logger = logging.getLogger(__name__)


# ============================================================================
# JSON Serialization
# ============================================================================

class EnhancedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy arrays and dataclasses."""

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if hasattr(obj, '__dataclass_fields__'):
            return asdict(obj)
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def save_json(
    data: Any,
    output_path: Union[str, Path],
    indent: int = 2,
    ensure_ascii: bool = False
) -> Path:
    """
    Save data to a JSON file.

    Args:
        data: Data to serialize (dict, list, dataclass, numpy arrays)
        output_path: Path to save the JSON file
        indent: Indentation level for pretty printing
        ensure_ascii: If True, escape non-ASCII characters

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii, cls=EnhancedJSONEncoder)

    logger.debug(f"Saved JSON: {output_path}")
    return output_path


def load_json(json_path: Union[str, Path]) -> Any:
    """
    Load data from a JSON file.

    Raises:
        MalformedInkData: If the file is missing, unreadable or not valid JSON
    """
    json_path = Path(json_path)
    if not json_path.is_file():
        raise MalformedInkData(f"File not found: {json_path}")

    try:
        with open(json_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedInkData(f"Couldn't parse {json_path}: {e}")


# ============================================================================
# Directory Management
# ============================================================================

def ensure_dir(path: Union[str, Path]) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _subdirs(path: Path) -> List[Path]:
    return sorted(p for p in path.iterdir() if p.is_dir())


# ============================================================================
# Export Tree Discovery
# ============================================================================
#
# <root>/
#   <collection>.nebo/
#     objects/            image assets referenced by url
#     pages/
#       <page_id>/
#         meta.json       page title and background
#         <page_id>.jiix  ink description

def detect_input_type(input_path: Union[str, Path]) -> str:
    """
    Detect what kind of directory was given.

    Returns:
        One of: 'collection', 'export_root', 'unknown'
    """
    input_path = Path(input_path)
    if not input_path.is_dir():
        return 'unknown'
    if (input_path / PAGES_DIR).is_dir():
        return 'collection'
    if any((d / PAGES_DIR).is_dir() for d in _subdirs(input_path)):
        return 'export_root'
    return 'unknown'


def collection_name(collection_dir: Union[str, Path]) -> str:
    """Display name of a collection folder (its name without '.nebo')."""
    return Path(collection_dir).name.replace(COLLECTION_SUFFIX, "")


def find_collections(input_path: Union[str, Path]) -> List[Path]:
    """
    List collection folders below an export root, or the folder itself if it
    is a collection.

    Raises:
        NotADirectoryError: If `input_path` is not a directory
    """
    input_path = Path(input_path)
    if not input_path.is_dir():
        raise NotADirectoryError(f"Could not find the path provided or is not a folder: {input_path}")

    input_type = detect_input_type(input_path)
    if input_type == 'collection':
        return [input_path]
    if input_type == 'unknown':
        logger.warning(f"No collections found in {input_path}")
        return []
    return [d for d in _subdirs(input_path) if (d / PAGES_DIR).is_dir()]


def find_pages(collection_dir: Union[str, Path]) -> List[Path]:
    """List page folders of a collection in name order."""
    pages_dir = Path(collection_dir) / PAGES_DIR
    if not pages_dir.is_dir():
        return []
    return _subdirs(pages_dir)


def load_metadata(page_dir: Union[str, Path]) -> PageMetadata:
    """Load and decode a page's meta.json."""
    metadata_path = Path(page_dir) / METADATA_FILE
    return PageMetadata.from_dict(load_json(metadata_path))


def load_page(
    page_dir: Union[str, Path],
    collection: str,
    asset_dir: Union[str, Path],
    metadata: Optional[PageMetadata] = None,
    fallback_title: Optional[str] = None
) -> Page:
    """
    Load one page folder.

    Args:
        page_dir: Folder holding meta.json and <page_id>.jiix
        collection: Collection display name
        asset_dir: Folder holding image assets
        metadata: Already-loaded metadata, read from meta.json if None
        fallback_title: Title used when the page has none

    Returns:
        Page ready to be assembled

    Raises:
        MalformedInkData: If metadata or the ink description cannot be decoded
    """
    page_dir = Path(page_dir)
    page_id = page_dir.name

    if metadata is None:
        metadata = load_metadata(page_dir)

    title = metadata.page_title
    if title is None:
        title = fallback_title or page_id

    ink_path = page_dir / f"{page_id}{INK_EXTENSION}"
    elements = parse_ink_document(load_json(ink_path))

    return Page(
        page_id=page_id,
        collection=collection,
        title=title,
        metadata=metadata,
        elements=elements,
        asset_dir=Path(asset_dir),
        source_path=ink_path
    )


def iter_pages(
    input_path: Union[str, Path],
    collections: Optional[List[str]] = None
) -> Iterator[Tuple[str, Callable[[], Page]]]:
    """
    Yield `(page_ref, loader)` for every page of every collection.

    Loading is deferred to the returned callable so that a broken page can be
    reported without stopping the walk. Loaders must be called in the order
    they are yielded: untitled pages are named `unnamed_<n>` with `n` counting
    per collection.
    """
    for collection_dir in find_collections(input_path):
        name = collection_name(collection_dir)
        if collections and name not in collections:
            logger.debug(f"Skipping collection {name}")
            continue

        logger.info(f"Collection: {name}")
        asset_dir = collection_dir / OBJECTS_DIR
        counter = {"unnamed": 0}

        for page_dir in find_pages(collection_dir):
            yield f"{name}/{page_dir.name}", _page_loader(page_dir, name, asset_dir, counter)


def _page_loader(
    page_dir: Path,
    collection: str,
    asset_dir: Path,
    counter: dict
) -> Callable[[], Page]:
    def load() -> Page:
        metadata = load_metadata(page_dir)
        fallback = None
        if metadata.page_title is None:
            counter["unnamed"] += 1
            fallback = f"unnamed_{counter['unnamed']}"
        logger.debug(f"Metadata: {metadata}, page: {page_dir}")
        return load_page(page_dir, collection, asset_dir, metadata=metadata, fallback_title=fallback)
    return load
