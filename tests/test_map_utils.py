"""
Tests for map_utils module.

Run with: pytest tests/test_map_utils.py -v
"""

import math
import pytest
import svgwrite

from course_model import Basket, Tee
from export_config import InvalidExportConfig
from map_utils import (
    GeoBounds, LayerManager, RotationConfig, Viewport, calculate_bounds, distance_meters,
    line_string_to_svg, meters_per_degree, polygon_coords_to_svg, polygon_to_path
)


class TestGeoBounds:
    """Tests for the GeoBounds dataclass."""

    def test_ranges_and_center(self):
        """Test extent and center properties."""
        bounds = GeoBounds(min_lng=10, max_lng=12, min_lat=50, max_lat=51)
        assert bounds.lng_range == 2
        assert bounds.lat_range == 1
        assert bounds.center == (11, 50.5)

    def test_pad_fraction(self):
        """Test growing by a fraction of each extent."""
        bounds = GeoBounds(min_lng=0, max_lng=10, min_lat=0, max_lat=20).pad_fraction(0.1)
        assert bounds.as_tuple() == pytest.approx((-1, -2, 11, 22))

    def test_with_min_span_widens_collapsed_axis(self):
        """Test that a zero-width axis is widened around its center."""
        bounds = GeoBounds(min_lng=5, max_lng=5, min_lat=0, max_lat=0.001).with_min_span(1e-4)
        assert bounds.lng_range == pytest.approx(1e-4)
        assert bounds.center[0] == pytest.approx(5)
        assert bounds.lat_range == pytest.approx(0.001)

    def test_degenerate(self):
        """Test degenerate detection for empty and non-finite bounds."""
        assert GeoBounds(0, 0, 0, 1).is_degenerate is True
        assert GeoBounds(0, math.inf, 0, 1).is_degenerate is True
        assert GeoBounds(0, 1, 0, 1).is_degenerate is False


class TestCalculateBounds:
    """Tests for calculate_bounds."""

    def test_bounds_of_points(self):
        """Test bounds covering every feature coordinate."""
        features = [Tee(id="t", coordinates=[1, 2]), Basket(id="b", coordinates=[3, 5])]
        bounds = calculate_bounds(features)
        assert bounds.as_tuple() == (1, 2, 3, 5)

    def test_no_features(self):
        """Test that no coordinates gives None."""
        assert calculate_bounds([]) is None


class TestViewport:
    """Tests for the geographic-to-pixel transform."""

    @pytest.fixture
    def viewport(self):
        bounds = GeoBounds(min_lng=10, max_lng=10.01, min_lat=50, max_lat=50.005)
        return Viewport(width=800, height=600, padding=50, bounds=bounds)

    def test_corners_inside_content_rect(self, viewport):
        """Test that projected corners stay inside the padded content rectangle."""
        b = viewport.bounds
        for lng in (b.min_lng, b.max_lng):
            for lat in (b.min_lat, b.max_lat):
                x, y = viewport.geo_to_svg([lng, lat])
                assert 50 - 1e-9 <= x <= 750 + 1e-9
                assert 50 - 1e-9 <= y <= 550 + 1e-9

    def test_uniform_scale_keeps_aspect(self, viewport):
        """Test that the projected extent fits the content aspect in both axes."""
        b = viewport.bounds
        x1, y1 = viewport.geo_to_svg([b.min_lng, b.max_lat])
        x2, y2 = viewport.geo_to_svg([b.max_lng, b.min_lat])
        assert (x2 - x1) / (y2 - y1) == pytest.approx(b.lng_range / b.lat_range)
        assert x2 - x1 <= viewport.content_width + 1e-9
        assert y2 - y1 <= viewport.content_height + 1e-9

    def test_content_is_centered(self, viewport):
        """Test that the narrower axis is centered."""
        b = viewport.bounds
        _, y1 = viewport.geo_to_svg([b.center[0], b.max_lat])
        _, y2 = viewport.geo_to_svg([b.center[0], b.min_lat])
        assert y1 > 50
        assert (y1 - 50) == pytest.approx(550 - y2)

    def test_axis_flip(self, viewport):
        """Test that higher latitude maps to smaller y."""
        _, y_south = viewport.geo_to_svg([10.005, 50.001])
        _, y_north = viewport.geo_to_svg([10.005, 50.004])
        assert y_south > y_north

    def test_degenerate_bounds_rejected(self):
        """Test that zero-size bounds raise InvalidExportConfig."""
        with pytest.raises(InvalidExportConfig):
            Viewport(800, 600, 50, GeoBounds(0, 0, 0, 1))

    def test_padding_larger_than_canvas_rejected(self):
        """Test that no content area raises InvalidExportConfig."""
        with pytest.raises(InvalidExportConfig):
            Viewport(80, 600, 50, GeoBounds(0, 1, 0, 1))

    def test_meters_per_pixel(self, viewport):
        """Test meters per pixel at the bounds' mid latitude."""
        m_lng, _ = meters_per_degree(viewport.bounds.center[1])
        assert viewport.meters_per_pixel() == pytest.approx(m_lng / viewport.scale)


class TestDistances:
    """Tests for flat-earth distances."""

    def test_meters_per_degree_at_equator(self):
        """Test the equator constants."""
        assert meters_per_degree(0) == pytest.approx((111320, 110540))

    def test_distance_north(self):
        """Test 0.001 degrees of latitude."""
        assert distance_meters([0, 0], [0, 0.001]) == pytest.approx(110.54)


class TestPathBuilders:
    """Tests for polygon and line path strings."""

    @pytest.fixture
    def viewport(self):
        return Viewport(200, 200, 0, GeoBounds(0, 1, 0, 1))

    def test_polygon_points(self, viewport):
        """Test the point list of a polygon."""
        points = polygon_coords_to_svg([[0, 0], [1, 0], [1, 1]], viewport)
        assert points == "0.00,200.00 200.00,200.00 200.00,0.00"

    def test_line_string(self, viewport):
        """Test the path data of a line."""
        assert line_string_to_svg([[0, 0], [1, 1]], viewport) == "M 0.00,200.00 L 200.00,0.00"

    def test_zero_radius_matches_plain_path(self, viewport):
        """Test that a zero corner radius gives the plain closed path."""
        ring = [[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]
        plain = "M " + line_string_to_svg(ring[:-1], viewport)[2:] + " Z"
        assert polygon_to_path(ring, viewport, 0) == plain

    def test_rounded_corners_use_quadratic_curves(self, viewport):
        """Test that rounding emits one Q segment per corner."""
        ring = [[0, 0], [1, 0], [1, 1], [0, 1]]
        d = polygon_to_path(ring, viewport, 10)
        assert d.count("Q") == 4
        assert d.endswith("Z")

    def test_rounding_limited_by_short_edges(self, viewport):
        """Test that the corner cut never exceeds 45% of the shorter edge."""
        ring = [[0, 0], [0.1, 0], [0.1, 1], [0, 1]]
        d = polygon_to_path(ring, viewport, 1000)
        first = d.split(" Q")[0]
        x, y = (float(v) for v in first[2:].split(","))
        # First corner at (0, 200); the short edge is 20 px long
        assert x == pytest.approx(0)
        assert y == pytest.approx(200 - 0.45 * 20)

    def test_degenerate_polygon(self, viewport):
        """Test that fewer than 3 distinct points give an empty path."""
        assert polygon_to_path([[0, 0], [1, 1], [0, 0]], viewport) == ""


class TestRotationConfig:
    """Tests for the RotationConfig class."""

    def test_no_rotation(self):
        """Test with zero rotation."""
        rot = RotationConfig(angle_deg=0, center_x=100, center_y=100)
        assert rot.is_rotated is False
        assert rot.calculate_expanded_bounds(100, 50) == (0.0, 0.0)
        assert rot.get_svg_transform() == ""

    def test_rotated_extent_90_degrees(self):
        """Test that a quarter turn swaps width and height."""
        width, height = RotationConfig(90).rotated_extent(200, 100)
        assert width == pytest.approx(100)
        assert height == pytest.approx(200)

    def test_calculate_expanded_bounds_45_degrees(self):
        """Test bounds expansion with 45-degree rotation."""
        rot = RotationConfig(angle_deg=45)
        expand_x, expand_y = rot.calculate_expanded_bounds(100, 100)
        expected = (100 * math.sqrt(2) - 100) / 2
        assert expand_x == pytest.approx(expected)
        assert expand_y == pytest.approx(expected)

    def test_get_svg_transform_with_rotation(self):
        """Test SVG transform string with rotation."""
        transform = RotationConfig(angle_deg=-90, center_x=245, center_y=240.5).get_svg_transform()
        assert transform == "rotate(-90.00, 245.00, 240.50)"


class TestLayerManager:
    """Tests for the LayerManager class."""

    @pytest.fixture
    def manager(self):
        return LayerManager(svgwrite.Drawing(debug=False))

    def test_register_layers_in_list_order(self, manager):
        """Test that list order is stacking order."""
        manager.register_layers(["terrain", "fairway", "tee"])
        assert manager.layer_names() == ["terrain", "fairway", "tee"]

    def test_skip_empty_layers(self, manager):
        """Test that empty layers are left out when assembling."""
        manager.register_layers(["terrain", "tee"])
        manager.get_layer("tee").add(manager.dwg.circle(center=(0, 0), r=1))
        assert manager.get_layers_by_z_order() == [manager.get_layer("tee")]
        assert len(manager.get_layers_by_z_order(skip_empty=False)) == 2

    def test_layer_ids_use_prefix(self, manager):
        """Test group ids."""
        layer = manager.register_layer("tee", z_order=10)
        assert layer["id"] == "layer-tee"

    def test_unknown_layer(self, manager):
        """Test that a missing layer is None."""
        assert manager.get_layer("nope") is None

    def test_assemble_sets_transform(self, manager):
        """Test that layers land in the parent with the given transform."""
        manager.register_layers(["terrain", "tee"])
        manager.get_layer("tee").add(manager.dwg.circle(center=(0, 0), r=1))
        parent = manager.dwg.g()
        manager.assemble_into_group(parent, manager.get_layers_by_z_order(), "rotate(30.00, 1.00, 2.00)")
        assert parent["transform"] == "rotate(30.00, 1.00, 2.00)"
        assert parent.elements == [manager.get_layer("tee")]
