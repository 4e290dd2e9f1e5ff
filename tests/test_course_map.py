"""
Tests for course_map module.

Run with: pytest tests/test_course_map.py -v
"""

import pytest

from conftest import SVG_NS, all_text, elements_with_class, make_hole, parse_svg
from course_map import generate_course_svg, generate_hole_svgs, hole_export_data, select_holes
from course_model import Course, CourseStyle, Landmark, TerrainArea
from export_config import ExportConfig, InvalidExportConfig


def _config(**kwargs):
    return ExportConfig(width=800, height=600, **kwargs)


class TestSelectHoles:
    """Tests for the holes selector."""

    @pytest.fixture
    def course(self):
        return Course(id="c", name="C", holes=[make_hole(1), make_hole(2), make_hole(3)])

    def test_all(self, course):
        """Test selecting every hole."""
        assert [h.number for h in select_holes(course, _config())] == [1, 2, 3]

    def test_indices(self, course):
        """Test selecting by position."""
        assert [h.number for h in select_holes(course, _config(holes=[0, 2]))] == [1, 3]

    def test_current_with_selection(self, course):
        """Test selecting the editor's selected holes."""
        config = _config(holes="current", selected_hole_ids=["h2"])
        assert [h.number for h in select_holes(course, config)] == [2]

    def test_current_without_selection(self, course):
        """Test that no selection means every hole."""
        assert len(select_holes(course, _config(holes="current"))) == 3


class TestGenerateCourseSvg:
    """Tests for the course overview map."""

    def test_single_hole(self, simple_course):
        """Test one tee, one basket, the title and no distance labels."""
        root = parse_svg(generate_course_svg(simple_course, _config()))
        assert root.get("width") == "800"
        assert len(elements_with_class(root, "tee-marker")) == 1
        assert len(elements_with_class(root, "basket-marker")) == 1
        assert "Test Park" in all_text(root)
        assert elements_with_class(root, "distance-label") == []

    def test_distance_label_meters(self, flight_line_course):
        """Test the label of a 0.001 degree flight line."""
        root = parse_svg(generate_course_svg(flight_line_course, _config()))
        labels = elements_with_class(root, "distance-label")
        assert len(labels) == 1
        assert [el.text for el in labels[0].iter(f"{SVG_NS}text")] == ["111m"]

    def test_distance_label_feet(self, flight_line_course):
        """Test the same line labelled in feet."""
        root = parse_svg(generate_course_svg(flight_line_course, _config(units="feet")))
        label = elements_with_class(root, "distance-label")[0]
        assert [el.text for el in label.iter(f"{SVG_NS}text")] == ["363ft"]

    def test_distances_disabled(self, flight_line_course):
        """Test that labels can be turned off."""
        root = parse_svg(generate_course_svg(flight_line_course, _config(include_distances=False)))
        assert elements_with_class(root, "distance-label") == []

    def test_empty_course_placeholder(self, empty_course):
        """Test the placeholder document at the requested size."""
        root = parse_svg(generate_course_svg(empty_course, _config()))
        assert root.get("width") == "800"
        assert root.get("height") == "600"
        assert all_text(root) == ["No features to export"]

    def test_hole_numbers_on_tees(self, simple_course):
        """Test that tee pads show hole numbers."""
        root = parse_svg(generate_course_svg(simple_course, _config()))
        tee = elements_with_class(root, "tee-marker")[0]
        assert [el.text for el in tee.iter(f"{SVG_NS}text")] == ["1"]

    def test_tee_names_without_hole_numbers(self, simple_course):
        """Test the tee name fallback."""
        root = parse_svg(generate_course_svg(simple_course, _config(include_hole_numbers=False)))
        tee = elements_with_class(root, "tee-marker")[0]
        assert [el.text for el in tee.iter(f"{SVG_NS}text")] == ["Pro"]

    def test_decorations_toggle(self, simple_course):
        """Test legend, compass and scale bar switches."""
        full = parse_svg(generate_course_svg(simple_course, _config()))
        assert elements_with_class(full, "legend")
        assert elements_with_class(full, "compass-rose")
        assert elements_with_class(full, "scale-bar")

        bare = parse_svg(generate_course_svg(simple_course, _config(
            include_legend=False, include_title=False, include_terrain=False)))
        assert elements_with_class(bare, "legend") == []
        assert elements_with_class(bare, "compass-rose") == []
        assert elements_with_class(bare, "scale-bar") == []
        assert "Test Park" not in all_text(bare)

    def test_infrastructure_toggle(self, simple_course):
        """Test that course terrain follows include_infrastructure."""
        simple_course.terrain_features.append(TerrainArea(
            id="pond", coordinates=[[[0, 0], [0.0005, 0], [0.0005, 0.0005], [0, 0]]], terrain_type="water"))
        shown = parse_svg(generate_course_svg(simple_course, _config()))
        hidden = parse_svg(generate_course_svg(simple_course, _config(include_infrastructure=False)))
        assert len(elements_with_class(shown, "terrain-water")) == 1
        assert elements_with_class(hidden, "terrain-water") == []

    def test_element_ids_unique(self, flight_line_course):
        """Test that every id in a document with repeated and mixed terrain appears once."""
        square = [[[0, 0], [0.0004, 0], [0.0004, 0.0004], [0, 0.0004], [0, 0]]]
        terrain = [
            TerrainArea(id="pond1", coordinates=square, terrain_type="water"),
            TerrainArea(id="pond2", coordinates=square, terrain_type="water"),
            TerrainArea(id="bunker", coordinates=square, terrain_type="sand"),
            TerrainArea(id="lawn1", coordinates=square, terrain_type="grass"),
            TerrainArea(id="lawn2", coordinates=square, terrain_type="grass",
                        custom_colors={"primary": "#2f855a"}),
            TerrainArea(id="woods", coordinates=square, terrain_type="forest"),
        ]
        flight_line_course.terrain_features.extend(terrain)
        flight_line_course.landmark_features.append(Landmark(id="p", coordinates=[0.0001, 0.0005],
                                                             landmark_type="parking"))
        root = parse_svg(generate_course_svg(flight_line_course, _config()))
        ids = [el.get("id") for el in root.iter() if el.get("id") is not None]
        assert len(ids) > len(terrain)
        assert len(ids) == len(set(ids))

    def test_landmarks_drawn(self, simple_course):
        """Test course-level landmarks."""
        simple_course.landmark_features.append(Landmark(id="p", coordinates=[0.0001, 0.0005],
                                                        landmark_type="parking"))
        root = parse_svg(generate_course_svg(simple_course, _config()))
        assert len(elements_with_class(root, "landmark-parking")) == 1

    def test_editor_background(self, simple_course):
        """Test a solid editor background."""
        simple_course.style = CourseStyle(background={"type": "solid", "solidColor": "#123456"})
        assert 'fill="#123456"' in generate_course_svg(simple_course, _config())

    def test_feature_outside_selected_holes(self):
        """Test that unselected holes are not drawn."""
        course = Course(id="c", name="C", holes=[make_hole(1), make_hole(2, tee=(1, 1), basket=(1, 1.001))])
        root = parse_svg(generate_course_svg(course, _config(holes=[1])))
        assert len(elements_with_class(root, "tee-marker")) == 1

    def test_invalid_config(self, simple_course):
        """Test that bad options raise before rendering."""
        with pytest.raises(InvalidExportConfig):
            generate_course_svg(simple_course, ExportConfig(width=0))

    def test_deterministic(self, simple_course):
        """Test that two exports are identical."""
        assert generate_course_svg(simple_course, _config()) == generate_course_svg(simple_course, _config())


class TestHoleExports:
    """Tests for per-hole course maps."""

    def test_one_map_per_hole(self):
        """Test hole metadata and the absence of title and legend."""
        course = Course(id="c", name="Park", holes=[
            make_hole(1, par=4, notes="Uphill", rules=["Drop zone on miss"]),
            make_hole(2, tee=(0.001, 0), basket=(0.001, 0.001)),
        ])
        data = hole_export_data(course, _config())
        assert [d.hole_number for d in data] == [1, 2]
        assert data[0].par == 4
        assert data[0].notes == "Uphill"
        assert data[0].rules == ["Drop zone on miss"]
        root = parse_svg(data[0].svg_content)
        assert len(elements_with_class(root, "tee-marker")) == 1
        assert elements_with_class(root, "legend") == []
        assert "Park" not in all_text(root)

    def test_generate_hole_svgs(self, simple_course):
        """Test the plain SVG list."""
        assert len(generate_hole_svgs(simple_course, _config())) == 1
