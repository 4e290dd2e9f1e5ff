"""
Tests for decorators module.

Run with: pytest tests/test_decorators.py -v
"""

import pytest
import svgwrite

from decorators import (
    BackgroundConfig, background_config_from_dict, generate_background, generate_compass_rose,
    generate_scale_bar, nice_scale_distance
)
from render_context import RenderContext


@pytest.fixture
def dwg():
    return svgwrite.Drawing(debug=False)


class TestScaleBar:
    """Tests for the scale bar."""

    @pytest.mark.parametrize("max_meters,expected", [
        (1000, 500), (130, 100), (60, 20), (12.5, 10), (5, 50),
    ])
    def test_nice_distance(self, max_meters, expected):
        """Test the largest round distance within 80 % of the available width."""
        assert nice_scale_distance(max_meters) == expected

    def test_bar_width_matches_distance(self, dwg):
        """Test that four segments span the chosen distance."""
        group = generate_scale_bar(dwg, 10, 10, meters_per_pixel=1.0, max_width=150)
        rects = [el for el in group.elements if el.elementname == "rect"]
        assert len(rects) == 4
        assert sum(float(r["width"]) for r in rects) == pytest.approx(100)
        assert "100m" in group.tostring()

    @pytest.mark.parametrize("mpp", [0, -1, float("inf")])
    def test_unusable_resolution(self, dwg, mpp):
        """Test that no bar is drawn for an unusable resolution."""
        assert generate_scale_bar(dwg, 0, 0, mpp) is None


class TestCompassRose:
    """Tests for the compass rose."""

    def test_north_label(self, dwg):
        """Test the N label and placement."""
        group = generate_compass_rose(dwg, 100, 60, 50)
        assert group["transform"] == "translate(100, 60)"
        assert ">N<" in group.tostring()


class TestBackground:
    """Tests for page backgrounds."""

    def test_from_dict(self):
        """Test editor keys and gradient stops."""
        config = background_config_from_dict({
            "type": "gradient", "enableFrame": False,
            "gradient": {"type": "linear", "angle": 90, "stops": [{"offset": 0, "color": "#000"}]},
        })
        assert config.type == "gradient"
        assert config.enable_frame is False
        assert config.gradient.type == "linear"
        assert config.gradient.stops[0].color == "#000"

    def test_solid_background_elements(self):
        """Test fill, grain, vignette and frame in order."""
        ctx = RenderContext(400, 300)
        config = BackgroundConfig(type="solid", solid_color="#ffffff")
        elements = generate_background(ctx, config, 400, 300)
        assert elements[0]["fill"] == "#ffffff"
        assert len(elements) == 4
        assert elements[-1]["fill"] == "none"
        assert len(ctx.dwg.defs.elements) == 2

    def test_gradient_defined(self):
        """Test that a gradient background defines its gradient."""
        ctx = RenderContext(400, 300)
        config = BackgroundConfig(type="gradient", enable_noise_texture=False, enable_vignette=False,
                                  enable_frame=False)
        elements = generate_background(ctx, config, 400, 300)
        assert len(elements) == 1
        assert elements[0]["fill"].startswith("url(#bg_gradient")

    def test_fill_can_be_skipped(self):
        """Test overlay-only backgrounds."""
        ctx = RenderContext(400, 300)
        config = BackgroundConfig(enable_noise_texture=False, enable_vignette=False)
        elements = generate_background(ctx, config, 400, 300, include_fill=False)
        assert len(elements) == 1
        assert elements[0]["stroke"] == config.frame_color
