"""
Tests for legend module.

Run with: pytest tests/test_legend.py -v
"""

import xml.etree.ElementTree as ET

import pytest
import svgwrite

from course_model import CourseStyle, Dropzone, Fairway, FlightLine, OBLine, Tee
from legend import FULL_LEGEND_ITEMS, compact_legend_items, full_legend_size, generate_compact_legend, generate_legend


@pytest.fixture
def dwg():
    return svgwrite.Drawing(debug=False)


def _texts(element):
    return [el.text for el in ET.fromstring(element.tostring()).iter("text")]


class TestFullLegend:
    """Tests for generate_legend."""

    def test_all_items_listed(self, dwg):
        """Test the title and every item label."""
        texts = _texts(generate_legend(dwg, 10, 10, CourseStyle()))
        assert texts == ["Legend"] + list(FULL_LEGEND_ITEMS)

    def test_scale(self):
        """Test that the box size scales."""
        width, height = full_legend_size(0.5)
        full_width, full_height = full_legend_size(1)
        assert width == pytest.approx(full_width / 2)
        assert height == pytest.approx(full_height / 2)

    def test_style_colors_used(self, dwg):
        """Test that swatches follow the course style."""
        markup = generate_legend(dwg, 0, 0, CourseStyle(fairway_color="#010203")).tostring()
        assert "#010203" in markup


class TestCompactLegend:
    """Tests for the tee-sign legend."""

    def test_only_present_kinds(self):
        """Test that absent kinds are left out."""
        features = [Tee(id="t", coordinates=[0, 0]), Dropzone(id="d", coordinates=[0, 0])]
        assert [label for label, _, _ in compact_legend_items(features, CourseStyle())] == ["DZ"]

    def test_item_order(self):
        """Test the fixed item order."""
        features = [
            FlightLine(id="f", coordinates=[[0, 0], [0, 1]]),
            Fairway(id="fw", coordinates=[[[0, 0], [1, 0], [1, 1], [0, 0]]]),
            OBLine(id="ob", coordinates=[[0, 0], [1, 1]]),
        ]
        labels = [label for label, _, _ in compact_legend_items(features, CourseStyle())]
        assert labels == ["OB", "Fairway", "Flight"]

    def test_no_legend_without_items(self, dwg):
        """Test that a tee-only hole gets no legend."""
        assert generate_compact_legend(dwg, [Tee(id="t", coordinates=[0, 0])], CourseStyle(), 800, 600) is None

    def test_bottom_right_corner(self, dwg):
        """Test the box placement against the page corner."""
        group = generate_compact_legend(dwg, [Dropzone(id="d", coordinates=[0, 0])], CourseStyle(), 800, 600)
        box = ET.fromstring(group.tostring()).find("rect")
        height = 1 * 16 + 16 + 14
        assert float(box.get("x")) == pytest.approx(800 - 80 - 30)
        assert float(box.get("y")) == pytest.approx(600 - height - 30)
        assert group["class"] == "legend legend-compact"
