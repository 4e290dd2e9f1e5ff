"""
Tests for terrain_patterns module.

Run with: pytest tests/test_terrain_patterns.py -v
"""

import pytest

from render_context import ImageAsset, ImageCache, RenderContext
from terrain_patterns import (
    GRASS_IMAGE, PATTERN_GENERATORS, TERRAIN_PALETTES, generate_terrain_pattern, get_terrain_colors,
    grass_image_background, image_tile_size, normalize_terrain_type, terrain_fill, tree_image_symbols
)


def _pattern_markup(terrain_type, scale=1.0, render_mode="detailed"):
    ctx = RenderContext(200, 200)
    colors = get_terrain_colors(terrain_type)
    return generate_terrain_pattern(ctx, terrain_type, colors, scale, render_mode).tostring()


class TestPalettes:
    """Tests for palette lookup."""

    def test_every_generator_has_a_palette(self):
        """Test that palettes and generators cover the same terrain types."""
        assert set(PATTERN_GENERATORS) == set(TERRAIN_PALETTES)

    def test_custom_colors_override(self):
        """Test partial custom colour overrides."""
        colors = get_terrain_colors("water", {"primary": "#000000"})
        assert colors.primary == "#000000"
        assert colors.secondary == TERRAIN_PALETTES["water"].secondary

    def test_unknown_type_is_grass(self):
        """Test the fallback terrain."""
        assert normalize_terrain_type("lava") == "grass"
        assert get_terrain_colors(None) == TERRAIN_PALETTES["grass"]


class TestPatternGeneration:
    """Tests for procedural pattern generators."""

    @pytest.mark.parametrize("terrain_type", sorted(TERRAIN_PALETTES))
    def test_deterministic(self, terrain_type):
        """Test that the same inputs give byte-identical markup."""
        assert _pattern_markup(terrain_type) == _pattern_markup(terrain_type)

    def test_scale_changes_tile(self):
        """Test that scale affects the tile size."""
        assert _pattern_markup("grass", 1.0) != _pattern_markup("grass", 2.0)

    def test_minimal_mode(self):
        """Test the flat 10x10 tile."""
        markup = _pattern_markup("forest", render_mode="minimal")
        assert 'width="10"' in markup
        assert "<path" not in markup

    def test_unknown_terrain_falls_back(self):
        """Test that an unknown terrain renders as grass."""
        ctx = RenderContext(200, 200)
        pattern = generate_terrain_pattern(ctx, "lava", get_terrain_colors("grass"))
        assert pattern["id"].startswith("terrain_grass")

    def test_terrain_fill_defines_pattern_once(self):
        """Test that repeated fills share one definition."""
        ctx = RenderContext(200, 200)
        colors = get_terrain_colors("sand")
        first = terrain_fill(ctx, "sand", colors)
        second = terrain_fill(ctx, "sand", colors)
        assert first == second
        assert first.startswith("url(#terrain_sand")
        assert len(ctx.dwg.defs.elements) == 1


class TestImageTiles:
    """Tests for photo tile backgrounds."""

    def test_tile_size(self):
        """Test meters-per-tile over meters-per-pixel."""
        assert image_tile_size(0.1, 5) == 50

    def test_tile_size_clamped(self):
        """Test the 30-800 px clamp."""
        assert image_tile_size(10, 5) == 30
        assert image_tile_size(0.001, 5) == 800
        assert image_tile_size(0, 5) == 800

    def test_relative_href_without_cache(self):
        """Test that a missing asset is referenced by file name."""
        ctx = RenderContext(200, 200)
        markup = grass_image_background(ctx, 0.1).tostring()
        assert GRASS_IMAGE in markup

    def test_inlined_href_with_cache(self):
        """Test that a cached asset is inlined."""
        images = ImageCache([ImageAsset(GRASS_IMAGE, "data:image/jpeg;base64,AAAA", 128, 128)])
        ctx = RenderContext(200, 200, images)
        markup = grass_image_background(ctx, 0.1).tostring()
        assert "data:image/jpeg;base64,AAAA" in markup

    def test_tree_symbols_defined_once(self):
        """Test that tree symbols are shared across calls."""
        ctx = RenderContext(200, 200)
        ids = tree_image_symbols(ctx)
        tree_image_symbols(ctx)
        assert ids["tree1.png"] == "tree_img_tree1"
        assert len(ctx.dwg.defs.elements) == 4
