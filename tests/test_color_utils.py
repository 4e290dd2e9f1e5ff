"""
Tests for color_utils module.

Run with: pytest tests/test_color_utils.py -v
"""

import pytest

from color_utils import (
    FALLBACK_COLOR, brightness, darken_color, darken_fraction, get_text_color, lighten_fraction,
    parse_hex_color
)


class TestParseHexColor:
    """Tests for parse_hex_color."""

    def test_six_digits(self):
        """Test a full hex colour."""
        assert parse_hex_color("#22c55e") == (0x22, 0xc5, 0x5e)

    def test_three_digits(self):
        """Test shorthand expansion."""
        assert parse_hex_color("#fa0") == (255, 170, 0)

    @pytest.mark.parametrize("color", [None, "", "red", "#12345", "#gggggg", 42])
    def test_invalid(self, color):
        """Test that malformed input gives None."""
        assert parse_hex_color(color) is None


class TestShading:
    """Tests for darken/lighten helpers."""

    def test_darken_clamps_at_zero(self):
        """Test the default 40 step with clamping."""
        assert darken_color("#2050ff") == "#0028d7"

    def test_lighten_clamps_at_255(self):
        """Test lightening near white."""
        assert lighten_fraction("#f0f0f0", 0.2) == "#ffffff"

    def test_fractions(self):
        """Test fractional shading of 20 %."""
        assert darken_fraction("#808080", 0.2) == "#4d4d4d"
        assert lighten_fraction("#808080", 0.2) == "#b3b3b3"

    def test_malformed_falls_back(self):
        """Test that bad colours degrade instead of raising."""
        assert darken_color("not-a-color") == FALLBACK_COLOR
        assert lighten_fraction(None) == FALLBACK_COLOR


class TestTextColor:
    """Tests for get_text_color."""

    def test_white_background(self):
        """Test black text on white."""
        assert get_text_color("#ffffff") == "#000000"

    def test_black_background(self):
        """Test white text on black."""
        assert get_text_color("#000000") == "#ffffff"

    def test_threshold(self):
        """Test that exactly 128 counts as dark."""
        assert brightness("#808080") == pytest.approx(128)
        assert get_text_color("#808080") == "#ffffff"
        assert get_text_color("#818181") == "#000000"

    def test_green_tee(self):
        """Test a saturated mid-tone colour."""
        # 0.299*34 + 0.587*197 + 0.114*94 is about 136
        assert get_text_color("#22c55e") == "#000000"
