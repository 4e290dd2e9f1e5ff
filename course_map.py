"""
course_map.py - Full course overview map

Renders the selected holes of a course into one SVG document:
- Background terrain (photo grass tiles, vector pattern or editor background)
- Course-level terrain polygons, paths, trees and landmarks
- Game features of every hole, scaled down on dense courses
- Flight-line distance labels placed around the markers
- Title banner, compass rose, scale bar and legend
"""

from dataclasses import dataclass, replace
from typing import List, Optional

from color_utils import darken_color
from collision import calculate_density_metrics
from course_model import Course, FlightLine, Hole
from decorators import (
    background_config_from_dict, generate_background, generate_compass_rose, generate_scale_bar,
    page_frame, vignette_gradient
)
from draw_pipeline import COURSE_MAP_LAYERS, DrawOptions, DrawPipeline
from export_config import ExportConfig
from legend import generate_legend
from map_utils import Viewport, calculate_bounds
from render_context import ImageCache, RenderContext, placeholder_document
from terrain_patterns import get_terrain_colors, grass_image_background, normalize_terrain_type, terrain_fill

PADDING = 50
BOUNDS_PADDING = 0.1
BACKGROUND_TILE_METERS = 20
BACKGROUND_PATTERN_SCALE = 1.5
PLAIN_BACKGROUND = "#f8fafc"
CHROME_COLOR = "#374151"


def select_holes(course: Course, config: ExportConfig) -> List[Hole]:
    """Holes chosen by the config's holes selector.

    "current" uses selected_hole_ids and falls back to every hole when none
    are selected; an index list keeps the holes at those positions.
    """
    if config.holes == "all":
        return list(course.holes)
    if config.holes == "current":
        if config.selected_hole_ids:
            return [h for h in course.holes if h.id in config.selected_hole_ids]
        return list(course.holes)
    indices = set(config.holes)
    return [h for i, h in enumerate(course.holes) if i in indices]


def _draw_background(pipe: DrawPipeline, course: Course, config: ExportConfig):
    ctx = pipe.ctx
    dwg = ctx.dwg
    width, height = ctx.width, ctx.height

    if not config.include_terrain:
        pipe.add("background", dwg.rect(size=(width, height), fill=PLAIN_BACKGROUND))
        return

    style = course.style
    if style.background:
        ctx.log("Rendering editor background...")
        for element in generate_background(ctx, background_config_from_dict(style.background), width, height):
            pipe.add("background", element)
        return

    terrain_type = normalize_terrain_type(style.default_terrain)
    colors = get_terrain_colors(terrain_type)
    ctx.log(f"Rendering {terrain_type} background...")
    if terrain_type == "grass":
        pattern_id = ctx.cached_pattern(
            f"background|grass|{BACKGROUND_TILE_METERS}",
            lambda c: grass_image_background(c, pipe.meters_per_pixel, BACKGROUND_TILE_METERS)
        )
        fill = f"url(#{pattern_id})"
    else:
        fill = terrain_fill(ctx, terrain_type, colors, BACKGROUND_PATTERN_SCALE)
    pipe.add("background", dwg.rect(size=(width, height), fill=fill))

    vignette_id = ctx.unique_id("vignette")
    ctx.add_def(vignette_gradient(dwg, vignette_id, "#000", 0.15))
    pipe.add("background", dwg.rect(size=(width, height), fill=f"url(#{vignette_id})"))
    pipe.add("background", page_frame(dwg, width, height, darken_color(colors.primary), 3))


def _draw_title(pipe: DrawPipeline, name: str):
    dwg = pipe.dwg
    width = pipe.ctx.width
    pipe.add("title", dwg.rect(insert=(width / 2 - 120, 12), size=(240, 36), rx=6, fill="#1f2937", opacity=0.9))
    pipe.add("title", dwg.text(name, insert=(width / 2, 38), text_anchor="middle", font_family="Georgia, serif",
                               font_weight="bold", font_size=20, fill="#ffffff"))


def generate_course_svg(course: Course, config: ExportConfig, images: Optional[ImageCache] = None) -> str:
    """Render the course overview map.

    Args:
        course: Course to render
        config: Export options (validated here)
        images: Raster assets to inline; relative hrefs are emitted without

    Returns:
        SVG document string, or the placeholder document when the selected
        holes have no features
    """
    config.validate()
    width, height = config.width, config.height

    holes = select_holes(course, config)
    features = [f for hole in holes for f in hole.features]
    bounds = calculate_bounds(features)
    if bounds is None:
        if config.verbose:
            print("  Warning: no features to export")
        return placeholder_document(width, height)

    bounds = bounds.with_min_span().pad_fraction(BOUNDS_PADDING)
    ctx = RenderContext(width, height, images, config.verbose)
    viewport = Viewport(width, height, PADDING, bounds)

    density = calculate_density_metrics(features, viewport)
    ctx.log(f"{len(holes)} holes, {len(features)} features, marker scale {density.marker_scale:.2f}")

    options = DrawOptions(
        marker_scale=density.marker_scale,
        label_scale=density.label_scale,
        hole_numbers={h.id: h.number for h in holes} if config.include_hole_numbers else {},
        units=config.units,
    )
    pipe = DrawPipeline(ctx, viewport, course.style, options, COURSE_MAP_LAYERS)

    _draw_background(pipe, course, config)

    course_features = []
    if config.include_infrastructure:
        course_features.extend(course.terrain_features)
    course_features.extend(course.path_features)
    course_features.extend(course.tree_features)
    course_features.extend(course.landmark_features)
    ctx.log("Rendering course features...")
    pipe.draw_features(course_features)

    ctx.log("Rendering hole features...")
    pipe.draw_features(features)

    if config.include_distances:
        flight_lines = [f for f in features if isinstance(f, FlightLine)]
        count = pipe.draw_distance_labels(flight_lines)
        ctx.log(f"Placed {count} distance labels")

    if config.include_title:
        _draw_title(pipe, course.name)

    if config.include_compass and config.include_terrain:
        pipe.add("compass", generate_compass_rose(ctx.dwg, width - 50, 60, 50, CHROME_COLOR))

    if config.include_scale_bar and config.include_terrain:
        pipe.add("scaleBar", generate_scale_bar(ctx.dwg, PADDING + 10, height - 30, pipe.meters_per_pixel,
                                                150, CHROME_COLOR))

    if config.include_legend:
        pipe.add("legend", generate_legend(ctx.dwg, width - 160, height - 240, course.style))

    pipe.assemble(ctx.dwg)
    return ctx.tostring()


# === Per-hole export ===

@dataclass
class HoleExportData:
    """One hole's overview map plus the text printed beside it."""
    hole_number: int
    hole_name: Optional[str]
    par: int
    notes: Optional[str]
    rules: List[str]
    svg_content: str


def hole_export_data(course: Course, config: ExportConfig,
                     images: Optional[ImageCache] = None) -> List[HoleExportData]:
    """Course map of each hole on its own, without title or legend."""
    hole_config = replace(config, holes="all", include_title=False, include_legend=False)
    result = []
    for hole in course.holes:
        single = replace(course, holes=[hole])
        result.append(HoleExportData(
            hole_number=hole.number,
            hole_name=hole.name,
            par=hole.par,
            notes=hole.notes,
            rules=list(hole.rules),
            svg_content=generate_course_svg(single, hole_config, images),
        ))
    return result


def generate_hole_svgs(course: Course, config: ExportConfig, images: Optional[ImageCache] = None) -> List[str]:
    """Overview map SVG of every hole, in hole order."""
    return [data.svg_content for data in hole_export_data(course, config, images)]
