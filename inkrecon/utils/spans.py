"""
Run-length style spans.

A content group lists its style spans ordered by the index of the last item
each one covers. SpanWalker maps increasing item indices to the style that
is active for them.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from .errors import MalformedInkData
from .styles import Style, parse_style

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Span:
    """A style covering items up to and including `last_item`."""
    last_item: int
    style: Style

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'Span':
        """Build a span from its JIIX fields (`last-item`, `style`)."""
        last_item = raw.get("last-item")
        declaration = raw.get("style")
        if isinstance(last_item, bool) or not isinstance(last_item, int) or last_item < 0:
            raise MalformedInkData(f"Span has invalid 'last-item': {last_item!r}")
        if not isinstance(declaration, str):
            raise MalformedInkData(f"Span has invalid 'style': {declaration!r}")
        return cls(last_item=last_item, style=parse_style(declaration))


class SpanWalker:
    """
    Forward-only cursor over an ordered span list.

    Each query advances past every span whose coverage ends before the
    requested index. Once the spans run out, no style is returned for any
    later index.
    """

    def __init__(self, spans: Iterable[Span]):
        self._spans = iter(spans)
        self._current: Optional[Span] = next(self._spans, None)
        self._last_index = -1

    @property
    def current(self) -> Optional[Span]:
        return self._current

    def style_for(self, index: int) -> Optional[Style]:
        """
        Return the style active at `index`, or None once spans are exhausted.

        Raises:
            ValueError: If `index` is lower than a previously queried index
        """
        if index < self._last_index:
            raise ValueError(
                f"Span cursor cannot move backwards (from {self._last_index} to {index})"
            )
        self._last_index = index

        while self._current is not None and index > self._current.last_item:
            self._current = next(self._spans, None)

        if self._current is None:
            return None
        return self._current.style


def resolve_styles(spans: List[Span], count: int) -> List[Optional[Style]]:
    """Resolve the style for every item index in `range(count)`."""
    walker = SpanWalker(spans)
    return [walker.style_for(i) for i in range(count)]
