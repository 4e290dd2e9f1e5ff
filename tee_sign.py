"""
tee_sign.py - Per-hole tee sign (A4 portrait)

Generates one sign per hole with:
- A sidebar: logo, par, hole number, distance and wrapped notes
- A map of the hole rotated so the tee-to-basket bearing points up
- A compact legend of the feature kinds present on the hole

Two variants share the sidebar and map pipeline: "blob" clips the map to
an organic sole-shaped outline, "rectangle" uses a framed rectangle with
a colour-coded distance box per tee.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from color_utils import darken_color, get_text_color
from course_model import Basket, Course, Dropzone, Feature, FlightLine, Hole, Mandatory, OBLine, OBZone, Tee
from draw_pipeline import DrawOptions, DrawPipeline
from export_config import FEET_PER_METER, ExportConfig
from legend import generate_compact_legend
from map_utils import GeoBounds, RotationConfig, Viewport, calculate_bounds, distance_meters, meters_per_degree
from render_context import ImageCache, RenderContext
from render_helpers import geo_line_length_meters, wrap_text
from terrain_patterns import (
    get_terrain_colors, grass_image_background, highgrass_image_background, normalize_terrain_type, terrain_fill
)

# Page layout
PAGE_PADDING = 30
INFO_WIDTH = 180
BLOB_PADDING = 30
MAP_VIEWPORT_PADDING = 10
MARKER_PADDING_PX = 35
PHOTO_TILE_METERS = 10

INK = "#1f2937"
NOTE_COLOR = "#4b5563"
HEAVY_FONT = "Arial Black, Arial, sans-serif"
FONT = "Arial, sans-serif"

TEE_SIGN_LAYERS = [
    "terrain", "paths", "trees", "forest", "fairway", "dropzoneArea", "obLine", "obZone",
    "flightLine", "dropzone", "mandatory", "tee", "basket",
]

# Normalized sole outline, traced clockwise from the inner arch
SOLE_SHAPE: List[Tuple[float, float]] = [
    (0.184, 0.504), (0.132, 0.467), (0.083, 0.431), (0.039, 0.394), (0.013, 0.357),
    (0.009, 0.321), (0.013, 0.284), (0.018, 0.247), (0.031, 0.21), (0.048, 0.174),
    (0.07, 0.137), (0.101, 0.1), (0.145, 0.063), (0.211, 0.027), (0.307, 0.005),
    (0.404, 0.0), (0.5, 0.008), (0.596, 0.028), (0.689, 0.06), (0.768, 0.097),
    (0.825, 0.134), (0.877, 0.17), (0.917, 0.207), (0.952, 0.244), (0.974, 0.28),
    (0.991, 0.317), (1.0, 0.354), (1.0, 0.391), (0.987, 0.427), (0.969, 0.464),
    (0.943, 0.501), (0.917, 0.538), (0.89, 0.574), (0.873, 0.611), (0.855, 0.648),
    (0.846, 0.684), (0.838, 0.721), (0.825, 0.758), (0.811, 0.795), (0.794, 0.831),
    (0.772, 0.868), (0.737, 0.905), (0.684, 0.942), (0.592, 0.975), (0.496, 0.995),
    (0.399, 1.0), (0.303, 0.997), (0.206, 0.987), (0.11, 0.958), (0.048, 0.922),
    (0.013, 0.885), (0.0, 0.848), (0.004, 0.811), (0.026, 0.773), (0.057, 0.736),
    (0.092, 0.703), (0.145, 0.663), (0.184, 0.629), (0.219, 0.591), (0.228, 0.554),
    (0.202, 0.518),
]
BLOB_TENSION = 0.4


def _f(value: float) -> float:
    return round(value, 2)


# === Distances and notes ===

@dataclass
class TeeDistance:
    """Distance from one tee to the basket, rounded in the requested units."""
    tee_name: Optional[str]
    color: str
    distance: int


def get_hole_distances(hole: Hole, course: Course, units: str = "meters") -> List[TeeDistance]:
    """Distance of every tee of a hole, in tee order.

    A flight line starting at the tee is measured along its vertices;
    otherwise the straight tee-to-basket distance is used.

    Returns:
        One TeeDistance per tee, or [] when the hole has no basket or no tee
    """
    basket = hole.first_of(Basket)
    tees = hole.features_of(Tee)
    if basket is None or not tees:
        return []

    flight_lines = hole.features_of(FlightLine)
    result = []
    for tee in tees:
        line = next((fl for fl in flight_lines if fl.start_feature_id == tee.id), None)
        if line is not None:
            meters = geo_line_length_meters(line.coordinates)
        else:
            meters = distance_meters(tee.coordinates, basket.coordinates)
        if units == "feet":
            meters *= FEET_PER_METER
        result.append(TeeDistance(tee.name, tee.color or course.style.default_tee_color, round(meters)))
    return result


def mandatory_direction(rotation: float) -> str:
    """Arrow character for a mandatory's rotation quadrant."""
    rotation = rotation % 360
    if rotation >= 315 or rotation < 45:
        return "→"
    if rotation < 135:
        return "↓"
    if rotation < 225:
        return "←"
    return "↑"


def hole_notes(hole: Hole, include_notes: bool = True, include_rules: bool = True) -> List[str]:
    """Sidebar notes: mandatories, dropzones, OB, the hole's notes, then its rules."""
    notes = []
    if include_notes:
        mandatories = hole.features_of(Mandatory)
        for index, mando in enumerate(mandatories, 1):
            arrow = mandatory_direction(mando.rotation)
            notes.append(f"Mando {index}: {arrow}" if len(mandatories) > 1 else f"Mando: {arrow}")

        dropzones = hole.features_of(Dropzone)
        if dropzones:
            notes.append(f"Dropzone{'s' if len(dropzones) > 1 else ''}: {len(dropzones)}")

        if hole.features_of(OBZone) or hole.features_of(OBLine):
            notes.append("OB marked on map")

        if hole.notes:
            notes.append(hole.notes)

    if include_rules:
        notes.extend(hole.rules)
    return notes


# === Geometry ===

def sole_blob_path(cx: float, cy: float, width: float, height: float) -> str:
    """Closed Catmull-Rom curve through the sole outline scaled to a box."""
    left = cx - width / 2
    top = cy - height / 2
    points = [(left + nx * width, top + ny * height) for nx, ny in SOLE_SHAPE]
    n = len(points)

    parts = [f"M {points[0][0]:.1f} {points[0][1]:.1f}"]
    for i in range(n):
        p0 = points[(i - 1) % n]
        p1 = points[i]
        p2 = points[(i + 1) % n]
        p3 = points[(i + 2) % n]
        cp1 = (p1[0] + (p2[0] - p0[0]) * BLOB_TENSION, p1[1] + (p2[1] - p0[1]) * BLOB_TENSION)
        cp2 = (p2[0] - (p3[0] - p1[0]) * BLOB_TENSION, p2[1] - (p3[1] - p1[1]) * BLOB_TENSION)
        parts.append(f"C {cp1[0]:.1f} {cp1[1]:.1f}, {cp2[0]:.1f} {cp2[1]:.1f}, {p2[0]:.1f} {p2[1]:.1f}")
    parts.append("Z")
    return " ".join(parts)


def map_rotation(hole: Hole) -> float:
    """Rotation (degrees) that turns the first tee-to-basket bearing toward the page top."""
    tee = hole.first_of(Tee)
    basket = hole.first_of(Basket)
    if tee is None or basket is None:
        return 0.0
    dx = basket.lng - tee.lng
    dy = basket.lat - tee.lat
    if dx == 0 and dy == 0:
        return 0.0
    return math.degrees(math.atan2(dy, dx)) - 90


def tee_sign_bounds(features: Sequence[Feature], map_width: float, map_height: float,
                    rotation: float) -> Optional[GeoBounds]:
    """Hole bounds grown for rotation and marker room, matched to the map panel's aspect.

    Args:
        features: Hole features
        map_width: Map panel width in pixels
        map_height: Map panel height in pixels
        rotation: Map rotation in degrees

    Returns:
        GeoBounds for the map viewport, or None without features
    """
    bounds = calculate_bounds(features)
    if bounds is None:
        return None
    bounds = bounds.with_min_span()

    # A rotated rectangle needs a larger axis-aligned box
    expand_lng, expand_lat = RotationConfig(rotation).calculate_expanded_bounds(bounds.lng_range, bounds.lat_range)
    bounds = bounds.expand(expand_lng, expand_lat)

    m_lng, m_lat = meters_per_degree(bounds.center[1])
    viewport_aspect = map_height / map_width
    bounds_aspect = bounds.lat_range / bounds.lng_range * (m_lat / m_lng)
    if bounds_aspect > viewport_aspect:
        est_mpp = bounds.lat_range * m_lat / (map_height - 10)
    else:
        est_mpp = bounds.lng_range * m_lng / (map_width - 10)

    pad_meters = MARKER_PADDING_PX * est_mpp
    bounds = bounds.expand(pad_meters / m_lng, pad_meters / m_lat)

    content_width = map_width - 2 * MAP_VIEWPORT_PADDING
    content_height = map_height - 2 * MAP_VIEWPORT_PADDING
    target_aspect = content_height / content_width
    width_m = bounds.lng_range * m_lng
    height_m = bounds.lat_range * m_lat
    if height_m / width_m < target_aspect:
        grow = (width_m * target_aspect - height_m) / 2
        bounds = bounds.expand(0, grow / m_lat)
    else:
        grow = (height_m / target_aspect - width_m) / 2
        bounds = bounds.expand(grow / m_lng, 0)
    return bounds


# === Sidebar ===

def _sidebar_header(ctx, hole: Hole, config: ExportConfig, x: float, y: float) -> float:
    """Logo, par and hole number; returns the next free y."""
    dwg = ctx.dwg
    if config.logo_data_url:
        dwg.add(dwg.image(href=config.logo_data_url, insert=(x, y), size=(100, 100),
                          preserveAspectRatio="xMidYMid meet"))
        y += 130
    else:
        y += 40

    dwg.add(dwg.text(f"PAR {hole.par}", insert=(x, y), font_family=HEAVY_FONT, font_weight="900",
                     font_size=28, fill=INK))
    y += 60
    dwg.add(dwg.text(str(hole.number), insert=(x, y + 80), font_family=HEAVY_FONT, font_weight="900",
                     font_size=140, fill=INK))
    return y + 160


def _sidebar_notes(ctx, notes: Sequence[str], x: float, y: float) -> float:
    dwg = ctx.dwg
    if not notes:
        return y
    y += 10
    for note in notes:
        for line in wrap_text(note, INFO_WIDTH - 20, 12):
            dwg.add(dwg.text(line, insert=(x, y), font_family=FONT, font_size=12, fill=NOTE_COLOR))
            y += 16
        y += 4
    return y


def _course_name_footer(ctx, course: Course, config: ExportConfig):
    if config.include_course_name and course.name:
        ctx.dwg.add(ctx.dwg.text(course.name, insert=(PAGE_PADDING, config.height - PAGE_PADDING),
                                 font_family=FONT, font_size=12, fill="#6b7280"))


def _unit_label(units: str) -> str:
    return "FT" if units == "feet" else "M"


# === Map panel ===

def _tee_sign_options(rotation: float, config: ExportConfig, forest_style: str) -> DrawOptions:
    return DrawOptions(
        glow_offset=5,
        glow_width=10,
        boundary_width=3,
        flight_width_factor=1.5,
        flight_dash="12 6",
        tee_rotation=270 - rotation,
        dropzone_rotation=270 - rotation,
        top_view_baskets=True,
        register_collisions=False,
        terrain_opacity=0.85,
        image_terrain=True,
        photo_tile_meters=PHOTO_TILE_METERS,
        forest_style=forest_style,
        counter_rotation=-rotation,
        units=config.units,
    )


def _map_background(pipe: DrawPipeline, course: Course, x: float, y: float, width: float, height: float) -> list:
    """Background rects covering a map panel, filled with the course's default terrain."""
    ctx = pipe.ctx
    dwg = ctx.dwg
    terrain_type = normalize_terrain_type(course.style.default_terrain)
    area = dict(insert=(_f(x), _f(y)), size=(_f(width), _f(height)))

    if terrain_type in ("grass", "roughGrass"):
        build = grass_image_background if terrain_type == "grass" else highgrass_image_background
        pattern_id = ctx.cached_pattern(
            f"photo|{terrain_type}|{PHOTO_TILE_METERS}",
            lambda c: build(c, pipe.meters_per_pixel, PHOTO_TILE_METERS)
        )
        return [dwg.rect(fill=f"url(#{pattern_id})", **area)]

    fill = terrain_fill(ctx, terrain_type, get_terrain_colors(terrain_type), 1.5)
    return [dwg.rect(fill="#1a2e1a", **area), dwg.rect(fill=fill, opacity=0.7, **area)]


def _map_features(course: Course, hole: Hole, config: ExportConfig) -> List[Feature]:
    features: List[Feature] = []
    if config.include_infrastructure:
        features.extend(course.terrain_features)
    features.extend(course.path_features)
    features.extend(course.tree_features)
    features.extend(hole.features)
    return features


def _draw_map(ctx, course: Course, hole: Hole, config: ExportConfig, map_x: float, map_y: float,
              map_width: float, map_height: float, rotation: float, bounds: GeoBounds,
              forest_style: str, clip_id: str, background_box: Tuple[float, float, float, float]):
    """Rotated hole map clipped to a shape already defined under clip_id."""
    dwg = ctx.dwg
    viewport = Viewport(map_width, map_height, MAP_VIEWPORT_PADDING, bounds)
    options = _tee_sign_options(rotation, config, forest_style)
    pipe = DrawPipeline(ctx, viewport, course.style, options, TEE_SIGN_LAYERS, id_prefix=f"hole{hole.number}")
    ctx.log(f"Hole {hole.number}: rotation {rotation:.1f} deg, {pipe.meters_per_pixel:.2f} m/px")

    clipped = dwg.g(clip_path=f"url(#{clip_id})")
    for element in _map_background(pipe, course, *background_box):
        clipped.add(element)

    pipe.draw_features(_map_features(course, hole, config))

    panel = dwg.g(transform=f"translate({_f(map_x)}, {_f(map_y)})")
    rotated = dwg.g()
    pipe.assemble(rotated, RotationConfig(rotation, map_width / 2, map_height / 2).get_svg_transform())
    panel.add(rotated)
    clipped.add(panel)
    dwg.add(clipped)


def _page_background(ctx, width: float, height: float):
    dwg = ctx.dwg
    dots = dwg.pattern(id="bg_dots", size=(20, 20), patternUnits="userSpaceOnUse")
    dots.add(dwg.circle(center=(10, 10), r=1, fill="#d1d5db", opacity=0.5))
    ctx.add_def(dots)
    dwg.add(dwg.rect(size=(width, height), fill="#f3f4f6"))
    dwg.add(dwg.rect(size=(width, height), fill="url(#bg_dots)"))


# === Variants ===

def _blob_sign(ctx, course: Course, hole: Hole, config: ExportConfig):
    dwg = ctx.dwg
    width, height = config.width, config.height

    blob_width = width - INFO_WIDTH - PAGE_PADDING
    blob_height = height - PAGE_PADDING * 2
    blob_cx = INFO_WIDTH + blob_width / 2
    blob_cy = PAGE_PADDING + blob_height / 2
    map_width = blob_width - BLOB_PADDING * 2
    map_height = blob_height - BLOB_PADDING * 2
    map_x = INFO_WIDTH + BLOB_PADDING
    map_y = PAGE_PADDING + BLOB_PADDING
    blob = sole_blob_path(blob_cx, blob_cy, blob_width * 0.98, blob_height * 0.98)

    _page_background(ctx, width, height)

    x = PAGE_PADDING
    y = _sidebar_header(ctx, hole, config, x, PAGE_PADDING + 20)
    distances = get_hole_distances(hole, course, config.units)
    if distances:
        dwg.add(dwg.text(f"{distances[0].distance} {_unit_label(config.units)}", insert=(x, y),
                         font_family=HEAVY_FONT, font_weight="900", font_size=36, fill=INK))
        y += 50
    _sidebar_notes(ctx, hole_notes(hole, config.include_notes, config.include_rules), x, y)
    _course_name_footer(ctx, course, config)

    rotation = map_rotation(hole)
    bounds = tee_sign_bounds(hole.features, map_width, map_height, rotation)
    if bounds is None:
        ctx.warn(f"hole {hole.number} has no features")
        dwg.add(dwg.path(d=blob, fill=INK, transform="translate(4, 4)", opacity=0.3))
        dwg.add(dwg.path(d=blob, fill="#2d3748"))
        dwg.add(dwg.text("No features on this hole", insert=(_f(blob_cx), _f(blob_cy)), text_anchor="middle",
                         font_family=FONT, font_size=14, fill="#9ca3af"))
        return

    clip_id = f"blob_clip_{hole.number}"
    clip = dwg.clipPath(id=clip_id)
    clip.add(dwg.path(d=blob))
    ctx.add_def(clip)

    dwg.add(dwg.path(d=blob, fill=INK, transform="translate(4, 4)", opacity=0.3))
    dwg.add(dwg.path(d=blob, fill=INK))

    box = (blob_cx - blob_width / 2 - 50, blob_cy - blob_height / 2 - 50, blob_width + 100, blob_height + 100)
    _draw_map(ctx, course, hole, config, map_x, map_y, map_width, map_height, rotation, bounds, "image",
              clip_id, box)

    if config.include_legend:
        legend = generate_compact_legend(dwg, hole.features, course.style, width, height, PAGE_PADDING)
        if legend is not None:
            dwg.add(legend)


def _distance_boxes(ctx, distances: Sequence[TeeDistance], units: str, x: float, y: float) -> float:
    """One colour-coded box per tee; returns the next free y."""
    dwg = ctx.dwg
    box_width = INFO_WIDTH - PAGE_PADDING - 10
    for entry in distances:
        text_color = get_text_color(entry.color)
        dwg.add(dwg.rect(insert=(x, y), size=(box_width, 44), rx=6, fill=entry.color,
                         stroke=darken_color(entry.color), stroke_width=2))
        dwg.add(dwg.text(f"{entry.distance} {_unit_label(units)}", insert=(x + 10, y + 29),
                         font_family=HEAVY_FONT, font_weight="900", font_size=22, fill=text_color))
        if entry.tee_name:
            dwg.add(dwg.text(entry.tee_name, insert=(x + box_width - 10, y + 28), text_anchor="end",
                             font_family=FONT, font_size=11, fill=text_color))
        y += 52
    return y


def _rectangle_sign(ctx, course: Course, hole: Hole, config: ExportConfig):
    dwg = ctx.dwg
    width, height = config.width, config.height

    panel_x = INFO_WIDTH
    panel_y = PAGE_PADDING
    panel_width = width - INFO_WIDTH - PAGE_PADDING
    panel_height = height - PAGE_PADDING * 2
    map_width = panel_width - 2 * MAP_VIEWPORT_PADDING
    map_height = panel_height - 2 * MAP_VIEWPORT_PADDING

    _page_background(ctx, width, height)

    x = PAGE_PADDING
    y = _sidebar_header(ctx, hole, config, x, PAGE_PADDING + 20)
    y = _distance_boxes(ctx, get_hole_distances(hole, course, config.units), config.units, x, y - 30)
    _sidebar_notes(ctx, hole_notes(hole, config.include_notes, config.include_rules), x, y)
    _course_name_footer(ctx, course, config)

    frame = dict(insert=(panel_x, panel_y), size=(panel_width, panel_height), rx=12)
    dwg.add(dwg.rect(fill=INK, opacity=0.3, transform="translate(4, 4)", **frame))
    dwg.add(dwg.rect(fill=INK, **frame))

    rotation = map_rotation(hole)
    bounds = tee_sign_bounds(hole.features, map_width, map_height, rotation)
    if bounds is None:
        ctx.warn(f"hole {hole.number} has no features")
        dwg.add(dwg.text("No features on this hole", insert=(_f(panel_x + panel_width / 2),
                                                             _f(panel_y + panel_height / 2)),
                         text_anchor="middle", font_family=FONT, font_size=14, fill="#9ca3af"))
        return

    clip_id = f"rect_clip_{hole.number}"
    clip = dwg.clipPath(id=clip_id)
    clip.add(dwg.rect(insert=(panel_x + 4, panel_y + 4), size=(panel_width - 8, panel_height - 8), rx=10))
    ctx.add_def(clip)

    box = (panel_x, panel_y, panel_width, panel_height)
    _draw_map(ctx, course, hole, config, panel_x + MAP_VIEWPORT_PADDING, panel_y + MAP_VIEWPORT_PADDING,
              map_width, map_height, rotation, bounds, "side", clip_id, box)

    if config.include_legend:
        legend = generate_compact_legend(dwg, hole.features, course.style, width, height, PAGE_PADDING + 10)
        if legend is not None:
            dwg.add(legend)


def generate_tee_sign_svg(course: Course, hole: Hole, config: ExportConfig,
                          images: Optional[ImageCache] = None) -> str:
    """Render the tee sign of one hole.

    Args:
        course: Course the hole belongs to (style and course-level layers)
        hole: Hole to render
        config: Export options; tee_sign_variant picks "blob" or "rectangle"
        images: Raster assets to inline

    Returns:
        SVG document string. A hole without features keeps the sidebar and
        shows a "No features on this hole" placeholder in the map panel.
    """
    config.validate()
    ctx = RenderContext(config.width, config.height, images, config.verbose)
    if config.tee_sign_variant == "rectangle":
        _rectangle_sign(ctx, course, hole, config)
    else:
        _blob_sign(ctx, course, hole, config)
    return ctx.tostring()
