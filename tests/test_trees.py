"""
Tests for trees module.

Run with: pytest tests/test_trees.py -v
"""

import pytest
import svgwrite
from shapely.geometry import Point

from render_context import RenderContext
from trees import (
    FOREST_SPECIES_WEIGHTS, ForestParams, TREE_SPECIES, course_map_forest_params, forest_seed,
    generate_forest_tree_placements, get_tree_colors, image_tree, normalize_tree_type, polygon_shape,
    side_view_forest_params, side_view_tree, tee_sign_forest_params, top_view_tree, tree_image_for
)

SQUARE = [(0, 0), (200, 0), (200, 200), (0, 200)]


@pytest.fixture
def dwg():
    return svgwrite.Drawing(debug=False)


class TestSpecies:
    """Tests for species lookup."""

    def test_unknown_species_is_oak(self):
        """Test the fallback species."""
        assert normalize_tree_type("baobab") == "oak"
        assert normalize_tree_type("pine") == "pine"

    def test_custom_colors(self):
        """Test a partial palette override."""
        colors = get_tree_colors("birch", {"accent": "#ffffff"})
        assert colors.accent == "#ffffff"
        assert colors.primary == TREE_SPECIES["birch"].primary

    def test_image_for_species_and_name(self):
        """Test raster crown lookup."""
        assert tree_image_for("pine") == "tree3.png"
        assert tree_image_for("tree2") == "tree2.png"
        assert tree_image_for("unknown") == "tree1.png"


class TestTreeRenderers:
    """Tests for the three tree looks."""

    @pytest.mark.parametrize("species", sorted(TREE_SPECIES))
    def test_top_view_every_species(self, dwg, species):
        """Test that each species draws a crown."""
        group = top_view_tree(dwg, 50, 50, species)
        assert group.elements
        assert group["class"] == f"tree tree-{species}"

    def test_top_view_selected_ring(self, dwg):
        """Test the dashed selection ring."""
        markup = top_view_tree(dwg, 0, 0, "oak", selected=True).tostring()
        assert "stroke-dasharray" in markup

    @pytest.mark.parametrize("species", sorted(TREE_SPECIES))
    def test_side_view_deterministic(self, dwg, species):
        """Test that a fixed seed gives identical silhouettes."""
        first = side_view_tree(dwg, 10, 10, species, 40, seed=5).tostring()
        second = side_view_tree(dwg, 10, 10, species, 40, seed=5).tostring()
        assert first == second

    def test_side_view_counter_rotation(self, dwg):
        """Test that the silhouette is rotated back around its base."""
        group = side_view_tree(dwg, 10, 20, "pine", 40, counter_rotation=-30)
        assert group["transform"] == "rotate(-30 10 20)"

    def test_image_tree_size_from_meters(self):
        """Test a 5 m crown at 0.25 m per pixel."""
        ctx = RenderContext(100, 100)
        use = image_tree(ctx, 50, 50, "tree2.png", meters_per_pixel=0.25)
        assert "#tree_img_tree2" in use.tostring()
        assert float(use["height"]) == pytest.approx(20)

    def test_image_tree_size_capped(self):
        """Test the 60 px cap."""
        ctx = RenderContext(100, 100)
        use = image_tree(ctx, 50, 50, "tree1.png", size=2, meters_per_pixel=0.01)
        assert float(use["height"]) == pytest.approx(60)


class TestForestPlacement:
    """Tests for forest tree placement."""

    def test_forest_seed(self):
        """Test the seed from the first two id characters."""
        assert forest_seed("ab") == ord("a") * 1000 + ord("b")
        assert forest_seed("a") == ord("a") * 1000
        assert forest_seed("") == 0

    def test_trees_inside_polygon(self):
        """Test that every tree lies inside the polygon and away from its edge."""
        params = ForestParams(tree_count=40, min_spacing=10, edge_margin=5)
        placements = generate_forest_tree_placements(SQUARE, 1234, params)
        shape = polygon_shape(SQUARE)
        assert placements
        for p in placements:
            assert shape.contains(Point(p.x, p.y))
            assert shape.exterior.distance(Point(p.x, p.y)) >= 5

    def test_minimum_spacing(self):
        """Test that no two trees are closer than min_spacing."""
        params = ForestParams(tree_count=60, min_spacing=15)
        placements = generate_forest_tree_placements(SQUARE, 7, params)
        for i, a in enumerate(placements):
            for b in placements[i + 1:]:
                assert (a.x - b.x) ** 2 + (a.y - b.y) ** 2 >= 15 ** 2

    def test_deterministic_and_sorted(self):
        """Test that the same seed gives the same forest, ordered by y."""
        params = ForestParams(tree_count=20, min_spacing=10)
        first = generate_forest_tree_placements(SQUARE, 99, params)
        second = generate_forest_tree_placements(SQUARE, 99, params)
        assert first == second
        assert [p.y for p in first] == sorted(p.y for p in first)
        assert all(p.kind in FOREST_SPECIES_WEIGHTS for p in first)

    def test_concave_polygon(self):
        """Test that trees stay out of the notch of a U shape."""
        u_shape = [(0, 0), (300, 0), (300, 300), (200, 300), (200, 100), (100, 100), (100, 300), (0, 300)]
        placements = generate_forest_tree_placements(u_shape, 3, ForestParams(tree_count=50, min_spacing=8))
        assert placements
        assert not any(100 < p.x < 200 and p.y > 100 for p in placements)

    def test_degenerate_polygon(self):
        """Test that a polygon without area gets no trees."""
        assert generate_forest_tree_placements([(0, 0), (10, 10), (20, 20)], 1, ForestParams(5, 1)) == []
        assert generate_forest_tree_placements([(0, 0), (1, 1)], 1, ForestParams(5, 1)) == []


class TestForestParams:
    """Tests for per-layout forest constants."""

    def test_course_map_density(self):
        """Test 25 trees per 10 000 px² with a floor of 3."""
        assert course_map_forest_params(polygon_shape(SQUARE)).tree_count == 100
        tiny = polygon_shape([(0, 0), (10, 0), (10, 10), (0, 10)])
        assert course_map_forest_params(tiny).tree_count == 3

    def test_tee_sign_density_clamped(self):
        """Test the 5-300 clamp of the per-hectare count."""
        shape = polygon_shape(SQUARE)
        assert tee_sign_forest_params(shape, 0.01).tree_count == 5
        assert tee_sign_forest_params(shape, 10).tree_count == 300
        assert tee_sign_forest_params(shape, 0.5).min_spacing == pytest.approx(8)

    def test_side_view_heights(self):
        """Test the silhouette height range."""
        params = side_view_forest_params(polygon_shape(SQUARE))
        assert params.tree_count == 60
        assert params.size_range == (35, 55)
