"""
Tests for landmarks module.

Run with: pytest tests/test_landmarks.py -v
"""

import pytest
import svgwrite

from landmarks import LANDMARK_DEFINITIONS, LANDMARK_RENDERERS, landmark_marker


@pytest.fixture
def dwg():
    return svgwrite.Drawing(debug=False)


class TestLandmarkMarker:
    """Tests for landmark_marker."""

    def test_every_type_has_a_definition(self):
        """Test that renderers and definitions cover the same types."""
        assert set(LANDMARK_RENDERERS) == set(LANDMARK_DEFINITIONS)

    @pytest.mark.parametrize("landmark_type", sorted(LANDMARK_RENDERERS))
    def test_every_type_draws(self, dwg, landmark_type):
        """Test that each glyph produces at least one shape."""
        group = landmark_marker(dwg, landmark_type, 10, 20)
        assert group is not None
        assert group.elements
        assert f"landmark-{landmark_type}" in group["class"]

    def test_position_and_rotation(self, dwg):
        """Test the placement transform."""
        group = landmark_marker(dwg, "bench", 10, 20, rotation=30)
        assert group["transform"] == "translate(10, 20) rotate(30)"

    def test_default_color(self, dwg):
        """Test that the type's colour is used without an override."""
        markup = landmark_marker(dwg, "parking", 0, 0).tostring()
        assert LANDMARK_DEFINITIONS["parking"].color in markup

    def test_custom_color(self, dwg):
        """Test a colour override."""
        markup = landmark_marker(dwg, "parking", 0, 0, color="#abcdef").tostring()
        assert "#abcdef" in markup

    def test_size_scales_glyph(self, dwg):
        """Test that a bigger size gives different geometry."""
        small = landmark_marker(dwg, "rock", 0, 0, size=1).tostring()
        large = landmark_marker(dwg, "rock", 0, 0, size=2).tostring()
        assert small != large

    def test_unknown_type(self, dwg, capsys):
        """Test that an unknown type draws nothing and warns when verbose."""
        assert landmark_marker(dwg, "volcano", 0, 0, verbose=True) is None
        assert "Warning" in capsys.readouterr().out
