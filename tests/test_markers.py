"""
Tests for markers module.

Run with: pytest tests/test_markers.py -v
"""

import xml.etree.ElementTree as ET

import pytest
import svgwrite

from course_model import CourseStyle
from markers import (
    SELECTED_STROKE, annotation_box_size, annotation_marker, basket_marker, basket_top_view,
    dropzone_marker, mandatory_marker, tee_marker
)


@pytest.fixture
def dwg():
    return svgwrite.Drawing(debug=False)


def _parse(element):
    return ET.fromstring(element.tostring())


def _texts(root):
    return [el.text for el in root.iter("text")]


class TestTeeMarker:
    """Tests for tee_marker."""

    def test_hole_number_text(self, dwg):
        """Test that the hole number wins over the tee name."""
        root = _parse(tee_marker(dwg, 10, 20, "#22c55e", hole_number=7, tee_name="Pro"))
        assert root.get("class") == "tee-marker"
        assert root.get("transform") == "translate(10, 20)"
        assert _texts(root) == ["7"]

    def test_tee_name_fallback(self, dwg):
        """Test the tee name when no number is shown."""
        assert _texts(_parse(tee_marker(dwg, 0, 0, "#22c55e", tee_name="Am"))) == ["Am"]

    def test_no_text(self, dwg):
        """Test a bare pad."""
        assert _texts(_parse(tee_marker(dwg, 0, 0, "#22c55e"))) == []

    def test_scale_applies_to_pad(self, dwg):
        """Test that the pad size follows the scale."""
        root = _parse(tee_marker(dwg, 0, 0, "#22c55e", scale=0.5))
        pad = next(root.iter("rect"))
        assert float(pad.get("width")) == pytest.approx(16)
        assert float(pad.get("height")) == pytest.approx(10)

    def test_text_color_contrasts_with_pad(self, dwg):
        """Test white text on a dark pad."""
        root = _parse(tee_marker(dwg, 0, 0, "#1f2937", hole_number=1))
        assert next(root.iter("text")).get("fill") == "#ffffff"

    def test_text_not_rotated(self, dwg):
        """Test that rotation is applied to the pad group only."""
        root = _parse(tee_marker(dwg, 0, 0, "#22c55e", hole_number=1, rotation=45))
        rotated = [g for g in root.iter("g") if "rotate" in (g.get("transform") or "")]
        assert len(rotated) == 1
        assert list(rotated[0].iter("text")) == []

    def test_selected_outline(self, dwg):
        """Test the highlighted outline."""
        root = _parse(tee_marker(dwg, 0, 0, "#22c55e", selected=True))
        assert next(root.iter("rect")).get("stroke") == SELECTED_STROKE


class TestBasketMarkers:
    """Tests for basket_marker and basket_top_view."""

    def test_side_view_uses_style_colors(self, dwg):
        """Test that the top band takes the style colour."""
        style = CourseStyle(basket_top_color="#123456")
        root = _parse(basket_marker(dwg, 5, 5, style))
        assert root.get("class") == "basket-marker"
        assert "#123456" in [el.get("fill") for el in root.iter("ellipse")]

    def test_top_view_spokes(self, dwg):
        """Test the 12 outer and 6 inner chains."""
        root = _parse(basket_top_view(dwg, 0, 0, CourseStyle()))
        assert len(list(root.iter("line"))) == 18


class TestDropzoneMarker:
    """Tests for dropzone_marker."""

    def test_label(self, dwg):
        """Test the DZ label and its suppression."""
        assert _texts(_parse(dropzone_marker(dwg, 0, 0, "#f59e0b"))) == ["DZ"]
        assert _texts(_parse(dropzone_marker(dwg, 0, 0, "#f59e0b", show_label=False))) == []


class TestMandatoryMarker:
    """Tests for mandatory_marker."""

    def test_line_direction(self, dwg):
        """Test that the boundary line follows line_angle."""
        root = _parse(mandatory_marker(dwg, 100, 100, 0, "#a855f7", line_angle=0))
        line = next(root.iter("line"))
        assert float(line.get("x2")) - float(line.get("x1")) == pytest.approx(24)
        assert float(line.get("y2")) == pytest.approx(float(line.get("y1")))

    def test_centered_on_position(self, dwg):
        """Test that the 64 px canvas is centered on the marker."""
        root = _parse(mandatory_marker(dwg, 100, 100, 90, "#a855f7"))
        assert root.get("transform") == "translate(68, 68)"
        assert root.get("class") == "mandatory-marker"


class TestAnnotationMarker:
    """Tests for annotation boxes."""

    def test_box_size(self):
        """Test the 0.6 em glyph estimate plus padding."""
        width, height = annotation_box_size("abcd", 10)
        assert width == pytest.approx(4 * 10 * 0.6 + 16)
        assert height == pytest.approx(26)

    def test_text_escaped_by_writer(self, dwg):
        """Test that markup characters survive serialization."""
        element = annotation_marker(dwg, 0, 0, "A & <B>", 14, "sans-serif", "normal", "#000", "#fff", "#ccc")
        assert "&amp;" in element.tostring()
        assert _texts(_parse(element)) == ["A & <B>"]
