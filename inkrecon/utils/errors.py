"""
Custom exceptions for the ink reconstruction pipeline.

Every error below is page-fatal: the page being assembled is abandoned and
nothing is exported for it. Skippable content (glyphs, arcs, unknown element
kinds) never raises.
"""


class InkReconError(Exception):
    """Base exception for all ink reconstruction errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown ink reconstruction error occurred."


class MalformedInkData(InkReconError):
    """Raised when an ink description or page metadata file lacks required fields."""

    @property
    def default_message(self) -> str:
        return "Ink description is malformed."


# ============================================================================
# Style Errors
# ============================================================================

class StyleError(InkReconError):
    """Base class for style declaration failures."""

    @property
    def default_message(self) -> str:
        return "Could not parse style."


class MalformedStyle(StyleError):
    """Raised when a style segment is not a key:value pair."""

    @property
    def default_message(self) -> str:
        return "Style segment is not a key:value pair."


class InvalidPenWidth(StyleError):
    """Raised when the pen width value is not a number."""

    @property
    def default_message(self) -> str:
        return "Could not parse pen width."


class InvalidColor(StyleError):
    """Raised when a color value is not a #RRGGBBAA literal."""

    @property
    def default_message(self) -> str:
        return "Could not parse color."


# ============================================================================
# Geometry Errors
# ============================================================================

class EmptyOrMismatchedArrays(InkReconError):
    """Raised when stroke coordinate/pressure arrays are empty or of unequal length."""

    @property
    def default_message(self) -> str:
        return "Stroke arrays are empty or have mismatched lengths."


class DegeneratePath(InkReconError):
    """Raised when a point sequence cannot form a valid stroke path."""

    @property
    def default_message(self) -> str:
        return "Could not generate pen path from coordinates."


class MissingStyleForLine(InkReconError):
    """Raised when a line item's element declares no style."""

    @property
    def default_message(self) -> str:
        return "Line item has no element style."


class UnsupportedItemType(InkReconError):
    """Raised when a content group contains an item kind with no handler."""

    def __init__(self, item_type: str = "") -> None:
        self.item_type = item_type
        super().__init__(f"Unsupported item type: {item_type!r}" if item_type else "")

    @property
    def default_message(self) -> str:
        return "Unsupported item type."


# ============================================================================
# Asset Errors
# ============================================================================

class AssetNotFound(InkReconError):
    """Raised when an image element references a missing asset file."""

    @property
    def default_message(self) -> str:
        return "Could not find the image asset."


class AssetDecodeFailed(InkReconError):
    """Raised when asset bytes cannot be decoded as an image."""

    @property
    def default_message(self) -> str:
        return "Could not decode the image asset."


# ============================================================================
# Output Errors
# ============================================================================

class ExportFailed(InkReconError):
    """Raised when a page document cannot be written to its outputs."""

    @property
    def default_message(self) -> str:
        return "Could not export the page document."
