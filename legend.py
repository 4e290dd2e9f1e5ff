"""
Map legends.

The full legend lists every game feature with a miniature of its marker;
the compact legend on tee signs lists only the kinds present on the hole.
"""

from typing import Callable, List, Sequence, Tuple

from color_utils import darken_color
from course_model import (
    CourseStyle, DropzoneArea, Dropzone, Fairway, Feature, FlightLine, Mandatory, OBLine, OBZone
)

INK = "#374151"
FONT = "Arial, sans-serif"

FULL_LEGEND_ITEMS = ("Tee", "Basket", "Flight Line", "OB Zone", "Fairway", "Dropzone", "Mandatory")


def _f(value: float) -> float:
    return round(value, 2)


# ============ FULL LEGEND ============

def _tee_icon(dwg, x, y, style: CourseStyle, s):
    color = style.default_tee_color
    border = darken_color(color)
    group = dwg.g(transform=f"translate({_f(x)}, {_f(y)})")
    group.add(dwg.rect(insert=(0, 0), size=(_f(16 * s), _f(10 * s)), rx=_f(2 * s), fill=color,
                       stroke=border, stroke_width=_f(s)))
    group.add(dwg.rect(insert=(_f(2 * s), _f(2 * s)), size=(_f(12 * s), _f(6 * s)), rx=_f(s), fill=border,
                       opacity=0.2))
    return group


def _basket_icon(dwg, x, y, style: CourseStyle, s):
    group = dwg.g(transform=f"translate({_f(x)}, {_f(y - 4 * s)})")
    group.add(dwg.rect(insert=(_f(5 * s), _f(9 * s)), size=(_f(s), _f(5 * s)), fill=style.basket_pole_color))
    group.add(dwg.path(d=f"M{_f(2 * s)} {_f(6 * s)} L{_f(10 * s)} {_f(6 * s)} L{_f(9 * s)} {_f(9 * s)} "
                         f"L{_f(3 * s)} {_f(9 * s)} Z",
                       fill=style.basket_body_color, stroke=darken_color(style.basket_body_color),
                       stroke_width=_f(0.5 * s)))
    group.add(dwg.path(d=f"M{_f(3 * s)} {_f(3 * s)} L{_f(3 * s)} {_f(6 * s)} "
                         f"M{_f(5.5 * s)} {_f(2 * s)} L{_f(5.5 * s)} {_f(6 * s)} "
                         f"M{_f(8 * s)} {_f(3 * s)} L{_f(8 * s)} {_f(6 * s)}",
                       stroke=style.basket_chain_color, stroke_width=_f(0.8 * s)))
    group.add(dwg.ellipse(center=(_f(5.5 * s), _f(2 * s)), r=(_f(4 * s), _f(1.2 * s)),
                          fill=style.basket_top_color, stroke=darken_color(style.basket_top_color),
                          stroke_width=_f(0.5 * s)))
    return group


def _flight_line_icon(dwg, x, y, style: CourseStyle, s):
    icon = 16 * s
    return dwg.line(start=(_f(x), _f(y + icon / 3)), end=(_f(x + icon), _f(y + icon / 3)),
                    stroke=style.default_flight_line_color, stroke_width=_f(2 * s),
                    stroke_dasharray=f"{_f(4 * s)} {_f(2 * s)}")


def _ob_zone_icon(dwg, x, y, style: CourseStyle, s):
    icon = 16 * s
    return dwg.rect(insert=(_f(x), _f(y)), size=(_f(icon), _f(icon * 0.6)), rx=_f(2 * s),
                    fill=style.ob_zone_color, fill_opacity=0.5, stroke=style.ob_zone_color,
                    stroke_width=_f(s), stroke_dasharray=f"{_f(3 * s)} {_f(1.5 * s)}")


def _fairway_icon(dwg, x, y, style: CourseStyle, s):
    icon = 16 * s
    return dwg.rect(insert=(_f(x), _f(y)), size=(_f(icon), _f(icon * 0.6)), rx=_f(2 * s),
                    fill=style.fairway_color, fill_opacity=0.7)


def _dropzone_icon(dwg, x, y, style: CourseStyle, s):
    color = style.dropzone_color
    border = darken_color(color)
    group = dwg.g(transform=f"translate({_f(x)}, {_f(y)})")
    group.add(dwg.rect(insert=(0, 0), size=(_f(16 * s), _f(10 * s)), rx=_f(2 * s), fill=color,
                       stroke=border, stroke_width=_f(s)))
    group.add(dwg.rect(insert=(_f(2 * s), _f(2 * s)), size=(_f(12 * s), _f(6 * s)), rx=_f(s), fill="none",
                       stroke=border, stroke_width=_f(0.5 * s), opacity=0.4))
    return group


def _mandatory_icon(dwg, x, y, style: CourseStyle, s):
    color = style.mandatory_color
    outline = [(0, 3), (8, 3), (8, 1), (12, 5), (8, 9), (8, 7), (0, 7)]
    d = "M" + " L".join(f"{_f(dx * s)} {_f(dy * s)}" for dx, dy in outline) + " Z"
    group = dwg.g(transform=f"translate({_f(x)}, {_f(y)})")
    group.add(dwg.path(d=d, fill=color, stroke=darken_color(color), stroke_width=_f(0.8 * s),
                       stroke_linejoin="round"))
    return group


FULL_LEGEND_ICONS: List[Callable] = [
    _tee_icon, _basket_icon, _flight_line_icon, _ob_zone_icon, _fairway_icon, _dropzone_icon, _mandatory_icon,
]


def full_legend_size(scale: float = 1) -> Tuple[float, float]:
    """(width, height) of the full legend box."""
    item_height = 24 * scale
    padding = 12 * scale
    return 140 * scale, len(FULL_LEGEND_ITEMS) * item_height + 2 * padding + 24 * scale


def generate_legend(dwg, x: float, y: float, style: CourseStyle, scale: float = 1):
    """Full legend box with its top-left corner at (x, y).

    Args:
        dwg: svgwrite Drawing used as element factory
        x: Left edge
        y: Top edge
        style: Course style the swatches are coloured from
        scale: Size factor for the whole box

    Returns:
        svgwrite Group with class "legend"
    """
    item_height = 24 * scale
    icon_size = 16 * scale
    padding = 12 * scale
    width, height = full_legend_size(scale)

    group = dwg.g(transform=f"translate({_f(x)}, {_f(y)})", class_="legend")
    group.add(dwg.rect(insert=(0, 0), size=(_f(width), _f(height)), rx=_f(4 * scale), fill="white",
                       stroke="#e5e7eb", stroke_width=_f(scale)))
    group.add(dwg.text("Legend", insert=(_f(padding), _f(padding + 14 * scale)), font_family=FONT,
                       font_weight="bold", font_size=_f(12 * scale), fill=INK))

    label_x = padding + icon_size + 8 * scale
    for index, (label, icon) in enumerate(zip(FULL_LEGEND_ITEMS, FULL_LEGEND_ICONS)):
        item_y = padding + 24 * scale + index * item_height
        group.add(icon(dwg, padding, item_y, style, scale))
        group.add(dwg.text(label, insert=(_f(label_x), _f(item_y + icon_size / 2)), font_family=FONT,
                           font_size=_f(10 * scale), fill=INK))
    return group


# ============ COMPACT LEGEND ============

COMPACT_PADDING = 8
COMPACT_ITEM_HEIGHT = 16
COMPACT_WIDTH = 80


def _compact_label(dwg, x, y, text, dy=2):
    return dwg.text(text, insert=(x + 16, y + dy), font_family=FONT, font_size=8, fill=INK)


def _compact_swatch(color, opacity=None, rx=1):
    def draw(dwg, x, y):
        attrs = {"fill_opacity": opacity} if opacity is not None else {}
        return [dwg.rect(insert=(x, y - 5), size=(12, 8), rx=rx, fill=color, **attrs)]
    return draw


def _compact_mando(color):
    def draw(dwg, x, y):
        outline = [(0, -1), (6, -1), (6, -3), (10, 1), (6, 5), (6, 3), (0, 3)]
        d = "M" + " L".join(f"{_f(x + dx)} {_f(y + dy)}" for dx, dy in outline) + " Z"
        return [dwg.path(d=d, fill=color, stroke=darken_color(color), stroke_width=0.5,
                         stroke_linejoin="round")]
    return draw


def _compact_flight(color):
    def draw(dwg, x, y):
        return [dwg.line(start=(x, y), end=(x + 12, y), stroke=color, stroke_width=2, stroke_dasharray="3 2")]
    return draw


def compact_legend_items(features: Sequence[Feature], style: CourseStyle) -> List[Tuple[str, Callable, int]]:
    """(label, icon builder, label baseline offset) for the kinds present on a hole."""
    def present(*classes):
        return any(isinstance(f, classes) for f in features)

    items = []
    if present(OBZone, OBLine, DropzoneArea):
        items.append(("OB", _compact_swatch(style.ob_zone_color, 0.5), 2))
    if present(Fairway):
        items.append(("Fairway", _compact_swatch(style.fairway_color, 0.7), 2))
    if present(Mandatory):
        items.append(("Mando", _compact_mando(style.mandatory_color), 2))
    if present(Dropzone):
        items.append(("DZ", _compact_swatch(style.dropzone_color, rx=2), 2))
    if present(FlightLine):
        items.append(("Flight", _compact_flight(style.default_flight_line_color), 3))
    return items


def generate_compact_legend(dwg, features: Sequence[Feature], style: CourseStyle,
                            page_width: float, page_height: float, page_padding: float = 30):
    """Small legend in the bottom-right page corner.

    Returns:
        svgwrite Group, or None when no legend-worthy feature is present
    """
    items = compact_legend_items(features, style)
    if not items:
        return None

    height = len(items) * COMPACT_ITEM_HEIGHT + COMPACT_PADDING * 2 + 14
    x = page_width - COMPACT_WIDTH - page_padding
    y = page_height - height - page_padding

    group = dwg.g(class_="legend legend-compact")
    group.add(dwg.rect(insert=(_f(x), _f(y)), size=(COMPACT_WIDTH, height), rx=4, fill="white",
                       fill_opacity=0.95, stroke=INK, stroke_width=1))
    current_y = y + COMPACT_PADDING + 10
    group.add(dwg.text("Legend", insert=(_f(x + COMPACT_PADDING), _f(current_y)), font_family=FONT,
                       font_weight="bold", font_size=9, fill=INK))

    item_x = x + COMPACT_PADDING
    for label, icon, dy in items:
        current_y += COMPACT_ITEM_HEIGHT
        for element in icon(dwg, _f(item_x), _f(current_y)):
            group.add(element)
        group.add(_compact_label(dwg, _f(item_x), _f(current_y), label, dy))
    return group
