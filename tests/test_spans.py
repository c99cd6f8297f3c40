"""
Tests for run-length style spans.
"""

import pytest


def _span(last_item, width):
    from inkrecon.utils.spans import Span
    from inkrecon.utils.styles import Style

    return Span(last_item=last_item, style=Style(pen_width=width))


class TestSpanWalker:
    """Test the forward-only span cursor."""

    def test_contiguous_spans_cover_every_index(self):
        """Test each covered index resolves to exactly one style."""
        from inkrecon.utils.spans import resolve_styles

        spans = [_span(1, 1.0), _span(2, 2.0), _span(5, 3.0)]

        widths = [s.pen_width for s in resolve_styles(spans, 6)]

        assert widths == [1.0, 1.0, 2.0, 3.0, 3.0, 3.0]

    def test_exhausted_spans_return_none(self):
        """Test indices past the last span get no style."""
        from inkrecon.utils.spans import resolve_styles

        styles = resolve_styles([_span(0, 1.0)], 3)

        assert styles[0].pen_width == 1.0
        assert styles[1] is None
        assert styles[2] is None

    def test_empty_span_list(self):
        """Test no spans means no style for any index."""
        from inkrecon.utils.spans import SpanWalker

        walker = SpanWalker([])

        assert walker.style_for(0) is None
        assert walker.current is None

    def test_jump_skips_several_spans(self):
        """Test a sparse query advances past every finished span."""
        from inkrecon.utils.spans import SpanWalker

        walker = SpanWalker([_span(0, 1.0), _span(1, 2.0), _span(2, 3.0), _span(9, 4.0)])

        assert walker.style_for(0).pen_width == 1.0
        assert walker.style_for(7).pen_width == 4.0

    def test_repeat_query_same_index(self):
        """Test querying the same index twice does not move the cursor."""
        from inkrecon.utils.spans import SpanWalker

        walker = SpanWalker([_span(1, 1.0), _span(3, 2.0)])

        assert walker.style_for(1).pen_width == 1.0
        assert walker.style_for(1).pen_width == 1.0
        assert walker.style_for(2).pen_width == 2.0

    def test_never_regresses(self):
        """Test a lower index than the last query is refused."""
        from inkrecon.utils.spans import SpanWalker

        walker = SpanWalker([_span(1, 1.0), _span(3, 2.0)])
        walker.style_for(2)

        with pytest.raises(ValueError):
            walker.style_for(1)

    def test_spans_never_reactivate(self):
        """Test an out-of-order span cannot bring a style back once exhausted."""
        from inkrecon.utils.spans import resolve_styles

        styles = resolve_styles([_span(0, 1.0), _span(1, 2.0)], 4)

        assert styles[2:] == [None, None]


class TestSpanFromDict:
    """Test span decoding from ink description fields."""

    def test_valid_span(self):
        from inkrecon.utils.spans import Span

        span = Span.from_dict({"last-item": 3, "style": "-myscript-pen-width:1.5;color:#000000FF"})

        assert span.last_item == 3
        assert span.style.pen_width == 1.5

    @pytest.mark.parametrize("raw", [
        {"style": "color:#000000FF"},
        {"last-item": -1, "style": "color:#000000FF"},
        {"last-item": "2", "style": "color:#000000FF"},
        {"last-item": True, "style": "color:#000000FF"},
        {"last-item": 0},
    ])
    def test_invalid_span(self, raw):
        from inkrecon.utils.spans import Span
        from inkrecon.utils.errors import MalformedInkData

        with pytest.raises(MalformedInkData):
            Span.from_dict(raw)

    def test_bad_style_propagates(self):
        from inkrecon.utils.spans import Span
        from inkrecon.utils.errors import InvalidColor

        with pytest.raises(InvalidColor):
            Span.from_dict({"last-item": 0, "style": "color:red"})
