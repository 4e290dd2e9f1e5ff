"""
print_layout.py - Print booklet pages

Two page kinds built on the shared draw pipeline:
- Overview page: header, every hole on one map, hole/par table, legend, totals
- Hole page: header with hole number and par, enlarged single-hole map, notes
"""

from typing import Optional

from course_model import Course, Hole
from draw_pipeline import DrawOptions, DrawPipeline
from export_config import ExportConfig
from legend import generate_legend
from map_utils import Viewport, calculate_bounds
from render_context import ImageCache, RenderContext, placeholder_document

PRINT_LAYERS = [
    "fairway", "dropzoneArea", "obLine", "obZone", "flightLine",
    "dropzone", "mandatory", "annotation", "tee", "basket",
]

# Overview page
HEADER_HEIGHT = 60
FOOTER_HEIGHT = 120
MAP_PADDING = 20
OVERVIEW_SCALE = 0.8
HOLES_PER_ROW = 9
TABLE_COLUMN_WIDTH = 70
TABLE_ROW_HEIGHT = 20

# Hole page
HOLE_HEADER_HEIGHT = 80
HOLE_INFO_HEIGHT = 100
HOLE_BOUNDS_PADDING = 0.15
HOLE_VIEWPORT_PADDING = 30
HOLE_SCALE = 1.2
NOTES_MAX_CHARS = 100

INK = "#374151"
HEADER_FILL = "#1f2937"
RULE_COLOR = "#e2e8f0"
FONT = "Arial, sans-serif"


def _text(dwg, text, x, y, size, fill=INK, bold=False, anchor=None):
    attrs = {"font_weight": "bold"} if bold else {}
    if anchor:
        attrs["text_anchor"] = anchor
    return dwg.text(str(text), insert=(x, y), font_family=FONT, font_size=size, fill=fill, **attrs)


def generate_print_layout_svg(course: Course, config: ExportConfig, images: Optional[ImageCache] = None) -> str:
    """Overview page of the whole course.

    Returns:
        SVG document string, or the placeholder document for a course
        without features
    """
    config.validate()
    width, height = config.width, config.height
    map_width = width - 2 * MAP_PADDING
    map_height = height - HEADER_HEIGHT - FOOTER_HEIGHT - 2 * MAP_PADDING

    features = course.all_hole_features()
    bounds = calculate_bounds(features)
    if bounds is None:
        return placeholder_document(width, height)

    ctx = RenderContext(width, height, images, config.verbose)
    dwg = ctx.dwg
    viewport = Viewport(map_width, map_height, MAP_PADDING, bounds.with_min_span().pad_fraction(0.1))
    options = DrawOptions(
        marker_scale=OVERVIEW_SCALE,
        label_scale=OVERVIEW_SCALE,
        annotation_scale=OVERVIEW_SCALE,
        glow_offset=4,
        glow_width=8,
        boundary_width=2,
        hole_numbers={h.id: h.number for h in course.holes},
        register_collisions=False,
        units=config.units,
    )
    pipe = DrawPipeline(ctx, viewport, course.style, options, PRINT_LAYERS)

    dwg.add(dwg.rect(size=(width, height), fill="white"))
    dwg.add(dwg.rect(insert=(0, 0), size=(width, HEADER_HEIGHT), fill=HEADER_FILL))
    dwg.add(_text(dwg, course.name, width / 2, HEADER_HEIGHT / 2 + 8, 24, "white", bold=True, anchor="middle"))
    if course.location_name:
        dwg.add(_text(dwg, course.location_name, width / 2, HEADER_HEIGHT / 2 + 28, 12, "#9ca3af",
                      anchor="middle"))

    ctx.log(f"Rendering {len(course.holes)} holes on the overview page...")
    map_group = dwg.g(transform=f"translate({MAP_PADDING}, {HEADER_HEIGHT + MAP_PADDING})")
    map_group.add(dwg.rect(size=(map_width, map_height), fill="#f1f5f9", stroke=RULE_COLOR, stroke_width=1, rx=4))
    pipe.draw_features(features)
    pipe.assemble(map_group)
    dwg.add(map_group)

    footer_y = height - FOOTER_HEIGHT
    dwg.add(dwg.line(start=(0, footer_y), end=(width, footer_y), stroke=RULE_COLOR, stroke_width=1))

    table_x = MAP_PADDING
    table_y = footer_y + 20
    dwg.add(_text(dwg, "Hole", table_x, table_y, 10, bold=True))
    dwg.add(_text(dwg, "Par", table_x + 60, table_y, 10, bold=True))
    for index, hole in enumerate(course.holes):
        row, col = divmod(index, HOLES_PER_ROW)
        x = table_x + col * TABLE_COLUMN_WIDTH
        y = table_y + (row + 1) * TABLE_ROW_HEIGHT
        dwg.add(_text(dwg, hole.number, x, y, 9))
        dwg.add(_text(dwg, hole.par, x + 25, y, 9))

    if config.include_legend:
        dwg.add(generate_legend(dwg, width - 160, footer_y + 10, course.style, OVERVIEW_SCALE))

    total_par = sum(h.par for h in course.holes)
    dwg.add(_text(dwg, f"Total Par: {total_par}", width - 100, footer_y + 100, 12, bold=True))
    dwg.add(_text(dwg, f"{len(course.holes)} holes", width - 100, footer_y + 115, 10, "#6b7280"))

    return ctx.tostring()


def truncate_notes(notes: str, limit: int = NOTES_MAX_CHARS) -> str:
    """First limit characters of the notes, with "..." when cut."""
    return notes[:limit] + ("..." if len(notes) > limit else "")


def generate_hole_page_svg(hole: Hole, course: Course, config: ExportConfig,
                           images: Optional[ImageCache] = None) -> str:
    """Full page of one hole.

    Returns:
        SVG document string, or the placeholder document for a hole
        without features
    """
    config.validate()
    width, height = config.width, config.height
    map_width = width - 60
    map_height = height - HOLE_HEADER_HEIGHT - HOLE_INFO_HEIGHT - 40

    bounds = calculate_bounds(hole.features)
    if bounds is None:
        if config.verbose:
            print(f"  Warning: hole {hole.number} has no features")
        return placeholder_document(width, height)

    ctx = RenderContext(width, height, images, config.verbose)
    dwg = ctx.dwg
    viewport = Viewport(map_width, map_height, HOLE_VIEWPORT_PADDING,
                        bounds.with_min_span().pad_fraction(HOLE_BOUNDS_PADDING))
    options = DrawOptions(
        marker_scale=HOLE_SCALE,
        label_scale=HOLE_SCALE,
        annotation_scale=HOLE_SCALE,
        glow_offset=5,
        glow_width=10,
        boundary_width=3,
        flight_width_factor=1.5,
        flight_dash="12 6",
        hole_numbers={hole.id: hole.number},
        register_collisions=False,
        units=config.units,
    )
    pipe = DrawPipeline(ctx, viewport, course.style, options, PRINT_LAYERS)

    dwg.add(dwg.rect(size=(width, height), fill="white"))
    dwg.add(dwg.rect(insert=(0, 0), size=(width, HOLE_HEADER_HEIGHT), fill=HEADER_FILL))
    dwg.add(_text(dwg, course.name, 30, 35, 20, "white", bold=True))
    dwg.add(_text(dwg, f"Hole {hole.number}", 30, 60, 28, "#60a5fa"))
    dwg.add(_text(dwg, f"Par {hole.par}", width - 30, 50, 36, "white", bold=True, anchor="end"))
    if hole.name:
        dwg.add(_text(dwg, f"- {hole.name}", 120, 60, 16, "#9ca3af"))

    ctx.log(f"Rendering hole {hole.number} page...")
    map_group = dwg.g(transform=f"translate(30, {HOLE_HEADER_HEIGHT + 20})")
    map_group.add(dwg.rect(size=(map_width, map_height), fill="#f8fafc", stroke=RULE_COLOR, rx=8))
    pipe.draw_features(hole.features)
    pipe.assemble(map_group)
    dwg.add(map_group)

    info_y = height - HOLE_INFO_HEIGHT
    dwg.add(dwg.line(start=(0, info_y), end=(width, info_y), stroke=RULE_COLOR, stroke_width=1))
    if hole.notes and config.include_notes:
        box_y = info_y + 20
        dwg.add(_text(dwg, "Notes:", 30, box_y + 20, 12, bold=True))
        dwg.add(_text(dwg, truncate_notes(hole.notes), 30, box_y + 40, 11, "#6b7280"))

    return ctx.tostring()
