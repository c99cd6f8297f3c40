"""
Tests for style declaration decoding.
"""

import pytest


class TestParseColor:
    """Test #RRGGBBAA color decoding."""

    def test_color_with_alpha(self):
        """Test that each hex pair maps to one channel."""
        from inkrecon.utils.styles import parse_color

        color = parse_color("#FF000080")

        assert color.to_tuple() == (255, 0, 0, 128)

    def test_lowercase_hex(self):
        """Test lowercase digits are accepted."""
        from inkrecon.utils.styles import parse_color

        assert parse_color("#0a0b0cff").to_tuple() == (10, 11, 12, 255)

    @pytest.mark.parametrize("value", [
        "#FF00",        # too short
        "#FF0000800",   # too long
        "FF00008000",   # no hash, right length + 1
        "xFF000080",    # wrong prefix
        "#GG000080",    # not hex
        "#+1000080",    # sign accepted by int()
        "# 1000080",    # whitespace accepted by int()
    ])
    def test_invalid_colors(self, value):
        """Test malformed color literals are rejected."""
        from inkrecon.utils.styles import parse_color
        from inkrecon.utils.errors import InvalidColor

        with pytest.raises(InvalidColor):
            parse_color(value)


class TestParseStyle:
    """Test style declaration decoding."""

    def test_pen_width_and_color(self):
        """Test the two recognized keys."""
        from inkrecon.utils.styles import parse_style

        style = parse_style("-myscript-pen-width:2;color:#11223344")

        assert style.pen_width == 2.0
        assert style.color.to_tuple() == (17, 34, 51, 68)

    def test_whitespace_and_trailing_separator(self):
        """Test keys and values are trimmed and empty segments skipped."""
        from inkrecon.utils.styles import parse_style

        style = parse_style("  color : #000000FF ; -myscript-pen-width : 0.75 ;")

        assert style.pen_width == 0.75
        assert style.color.to_tuple() == (0, 0, 0, 255)

    def test_unknown_keys_ignored(self):
        """Test forward compatibility with unknown attributes."""
        from inkrecon.utils.styles import parse_style

        style = parse_style("font-family:serif;-myscript-pen-brush:Pen;color:#10203040")

        assert style.color.to_tuple() == (16, 32, 48, 64)
        assert style.pen_width == 0.0

    def test_value_with_colon(self):
        """Test only the first colon separates key and value."""
        from inkrecon.utils.styles import parse_style

        style = parse_style("url:http://example.com;-myscript-pen-width:1")

        assert style.pen_width == 1.0

    def test_missing_keys_keep_defaults(self):
        """Test an empty declaration yields the default style."""
        from inkrecon.utils.styles import parse_style, Style

        assert parse_style("") == Style()

    def test_segment_without_colon(self):
        """Test a bare segment is malformed."""
        from inkrecon.utils.styles import parse_style
        from inkrecon.utils.errors import MalformedStyle

        with pytest.raises(MalformedStyle):
            parse_style("color#FF000080")

    def test_invalid_pen_width(self):
        """Test a non-numeric pen width."""
        from inkrecon.utils.styles import parse_style
        from inkrecon.utils.errors import InvalidPenWidth

        with pytest.raises(InvalidPenWidth):
            parse_style("-myscript-pen-width:thick")

    def test_invalid_color_in_style(self):
        """Test color errors surface from style decoding."""
        from inkrecon.utils.styles import parse_style
        from inkrecon.utils.errors import InvalidColor, StyleError

        with pytest.raises(InvalidColor) as exc_info:
            parse_style("-myscript-pen-width:1;color:#FF00")

        assert isinstance(exc_info.value, StyleError)

    @pytest.mark.parametrize("declaration", [
        "-myscript-pen-width:2;color:#11223344",
        "color:#FFFFFF00;-myscript-pen-width:0.333",
        "-myscript-pen-width:1e-3;color:#abcdef12",
    ])
    def test_round_trip(self, declaration):
        """Test canonical re-encoding keeps width and color."""
        from inkrecon.utils.styles import parse_style, format_style

        style = parse_style(declaration)

        assert parse_style(format_style(style)) == style


class TestColor:
    """Test Color helpers."""

    def test_opaque(self):
        from inkrecon.utils.styles import Color

        assert Color(1, 2, 3, 4).opaque() == Color(1, 2, 3, 255)

    def test_hex_and_bgr(self):
        from inkrecon.utils.styles import Color

        color = Color(17, 34, 51, 68)

        assert color.to_hex() == "#11223344"
        assert color.to_hex(with_alpha=False) == "#112233"
        assert color.to_bgr() == (51, 34, 17)
        assert color.to_floats()[3] == pytest.approx(68 / 255)
