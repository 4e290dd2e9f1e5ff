"""
Export-time marker renderers.

Each renderer takes the svgwrite drawing (as element factory), a pixel
position and style parameters, and returns one self-contained group.
Every linear dimension, stroke widths included, is multiplied by scale.
Shapes rotate; text is drawn in an un-rotated child group so it stays
upright.
"""

import math
from typing import Optional, Union

from color_utils import darken_color, get_text_color

SELECTED_STROKE = "#3b82f6"
MANDATORY_LINE_COLOR = "#dc2626"

# Marker footprints at scale 1, used for collision boxes
TEE_SIZE = (32, 20)
BASKET_SIZE = (32, 44)
BASKET_TOP_RADIUS = 18
DROPZONE_SIZE = (32, 20)
MANDATORY_BOX = 48


def _f(value: float) -> float:
    return round(value, 2)


def _border(color: str, scale: float, selected: bool, width: float = 2):
    """(stroke colour, stroke width) for a marker outline."""
    if selected:
        return SELECTED_STROKE, _f(width * 1.5 * scale + 1)
    return darken_color(color), _f(width * scale)


def _pad_shape(dwg, color: str, scale: float, rotation: float, selected: bool,
               corner: float, inner_fill: bool):
    """Rounded pad with an inset panel and a direction arrow (tees and dropzones)."""
    s = scale
    w = TEE_SIZE[0] * s
    h = TEE_SIZE[1] * s
    border = darken_color(color)
    stroke, stroke_width = _border(color, s, selected)

    shape = dwg.g(transform=f"rotate({_f(rotation)})")
    shape.add(dwg.rect(insert=(_f(-w / 2), _f(-h / 2)), size=(_f(w), _f(h)), rx=_f(corner * s),
                       fill=color, stroke=stroke, stroke_width=stroke_width))
    inset = dict(insert=(_f(-w / 2 + 4 * s), _f(-h / 2 + 4 * s)), size=(_f(24 * s), _f(12 * s)),
                 rx=_f(2 * s))
    if inner_fill:
        shape.add(dwg.rect(fill=border, opacity=0.2, **inset))
    else:
        shape.add(dwg.rect(fill="none", stroke=border, stroke_width=_f(s), opacity=0.4, **inset))
    shape.add(dwg.polygon(
        points=[(_f(w / 2 - 6 * s), 0), (_f(w / 2 - 10 * s), _f(-3 * s)), (_f(w / 2 - 10 * s), _f(3 * s))],
        fill=get_text_color(color), opacity=0.6
    ))
    return shape


def tee_marker(
    dwg,
    x: float,
    y: float,
    color: str,
    hole_number: Optional[Union[int, str]] = None,
    tee_name: Optional[str] = None,
    scale: float = 1,
    rotation: float = 0,
    selected: bool = False
):
    """Tee pad: rounded rectangle with a direction arrow.

    Args:
        dwg: svgwrite Drawing used as element factory
        x: Pixel x of the pad center
        y: Pixel y of the pad center
        color: Pad colour; border and text colours derive from it
        hole_number: Text shown on the pad (takes precedence over tee_name)
        tee_name: Fallback text, e.g. "Pro"
        scale: Uniform size factor
        rotation: Pad rotation in degrees (clockwise); text stays upright
        selected: Draw the highlighted outline

    Returns:
        svgwrite Group with class "tee-marker"
    """
    s = scale
    group = dwg.g(transform=f"translate({_f(x)}, {_f(y)})", class_="tee-marker")
    group.add(_pad_shape(dwg, color, s, rotation, selected, corner=3, inner_fill=True))

    text = hole_number if hole_number is not None else tee_name
    if text not in (None, ""):
        group.add(dwg.text(str(text), insert=(0, _f(4 * s)), text_anchor="middle",
                           font_family="Arial, sans-serif", font_weight="bold",
                           font_size=_f(12 * s), fill=get_text_color(color)))
    return group


def basket_marker(dwg, x: float, y: float, style, scale: float = 1, rotation: float = 0,
                  selected: bool = False):
    """Side view of a basket (top band, chains, body, pole) centered on (x, y).

    Colours come from the course style's basket_* fields.
    """
    s = scale
    top_color = style.basket_top_color
    body_color = style.basket_body_color
    pole_color = style.basket_pole_color
    top_border = SELECTED_STROKE if selected else darken_color(top_color)
    body_border = darken_color(body_color)
    cx = BASKET_SIZE[0] * s / 2
    cy = BASKET_SIZE[1] * s / 2

    group = dwg.g(transform=f"translate({_f(x)}, {_f(y)})", class_="basket-marker")
    rotated = dwg.g(transform=f"rotate({_f(rotation)})")
    body = dwg.g(transform=f"translate({_f(-cx)}, {_f(-cy)})")

    body.add(dwg.rect(insert=(_f(15 * s), _f(28 * s)), size=(_f(2 * s), _f(14 * s)), fill=pole_color))
    body.add(dwg.ellipse(center=(_f(16 * s), _f(42 * s)), r=(_f(6 * s), _f(2 * s)), fill=pole_color))
    body.add(dwg.path(
        d=f"M{_f(6 * s)} {_f(18 * s)} L{_f(26 * s)} {_f(18 * s)} L{_f(24 * s)} {_f(28 * s)} "
          f"L{_f(8 * s)} {_f(28 * s)} Z",
        fill=body_color, stroke=body_border, stroke_width=_f(1.5 * s)
    ))
    chains = " ".join(
        f"M{_f(cx_ * s)} {_f(top * s)} L{_f(cx_ * s)} {_f(18 * s)}"
        for cx_, top in ((8, 10), (12, 8), (16, 6), (20, 8), (24, 10))
    )
    body.add(dwg.path(d=chains, stroke=style.basket_chain_color, stroke_width=_f(1.5 * s),
                      stroke_linecap="round", fill="none"))
    body.add(dwg.ellipse(center=(_f(16 * s), _f(6 * s)), r=(_f(10 * s), _f(3 * s)), fill=top_color,
                         stroke=top_border, stroke_width=_f((2.5 if selected else 1.5) * s)))
    body.add(dwg.ellipse(center=(_f(16 * s), _f(18 * s)), r=(_f(8 * s), _f(2 * s)), fill="none",
                         stroke=body_border, stroke_width=_f(s)))

    rotated.add(body)
    group.add(rotated)
    return group


def basket_top_view(dwg, x: float, y: float, style, scale: float = 1):
    """Top-down basket: rim, chain rings and 12 + 6 radial chains."""
    s = scale
    color = style.basket_top_color
    dark = darken_color(color)

    outer_radius = BASKET_TOP_RADIUS * s
    chain_radius = outer_radius - 3 * s
    ring1 = chain_radius * 0.75
    ring2 = chain_radius * 0.5
    center_radius = 4 * s

    group = dwg.g(transform=f"translate({_f(x)}, {_f(y)})", class_="basket-marker")
    group.add(dwg.circle(center=(0, 0), r=_f(outer_radius), fill=color))
    group.add(dwg.circle(center=(0, 0), r=_f(chain_radius), fill=color, opacity=0.7))
    for ring in (ring1, ring2):
        group.add(dwg.circle(center=(0, 0), r=_f(ring), fill="none", stroke=dark, stroke_width=_f(1.2 * s)))

    spokes = [(math.radians(i * 30), chain_radius, ring2) for i in range(12)]
    spokes += [(math.radians(i * 60 + 30), ring2, center_radius) for i in range(6)]
    for angle, r_from, r_to in spokes:
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        group.add(dwg.line(start=(_f(r_from * cos_a), _f(r_from * sin_a)),
                           end=(_f(r_to * cos_a), _f(r_to * sin_a)),
                           stroke=dark, stroke_width=_f(1.5 * s)))

    group.add(dwg.circle(center=(0, 0), r=_f(center_radius), fill=dark))
    group.add(dwg.circle(center=(0, 0), r=_f(center_radius * 0.5), fill=color))
    return group


def dropzone_marker(dwg, x: float, y: float, color: str, scale: float = 1, rotation: float = 0,
                    show_label: bool = True, selected: bool = False):
    """Dropzone pad, like a tee pad with an outlined inset and a "DZ" label."""
    s = scale
    group = dwg.g(transform=f"translate({_f(x)}, {_f(y)})", class_="dropzone-marker")
    group.add(_pad_shape(dwg, color, s, rotation, selected, corner=4, inner_fill=False))
    if show_label:
        group.add(dwg.text("DZ", insert=(0, _f(4 * s)), text_anchor="middle",
                           font_family="Arial, sans-serif", font_weight="bold",
                           font_size=_f(10 * s), fill=get_text_color(color)))
    return group


def mandatory_marker(
    dwg,
    x: float,
    y: float,
    rotation: float,
    color: str,
    scale: float = 1,
    line_angle: float = 270,
    line_color: str = MANDATORY_LINE_COLOR,
    selected: bool = False
):
    """Mandatory: direction arrow plus an independently angled boundary line.

    Args:
        rotation: Arrow direction in degrees (0 = pointing right)
        line_angle: Boundary line direction in degrees (0 right, 90 down, 180 left, 270 up)
        line_color: Boundary line colour
    """
    s = scale
    # Drawn on a 64x64 canvas centered on the marker position
    cx = cy = 32 * s
    line_length = 24 * s
    head = 6 * s

    line_rad = math.radians(line_angle)
    end_x = cx + math.cos(line_rad) * line_length
    end_y = cy + math.sin(line_rad) * line_length
    head_points = [(_f(end_x), _f(end_y))]
    for offset in (math.pi * 0.8, -math.pi * 0.8):
        head_points.append((_f(end_x + math.cos(line_rad + offset) * head),
                            _f(end_y + math.sin(line_rad + offset) * head)))

    group = dwg.g(transform=f"translate({_f(x - cx)}, {_f(y - cy)})", class_="mandatory-marker")
    group.add(dwg.line(start=(_f(cx), _f(cy)), end=(_f(end_x), _f(end_y)), stroke=line_color,
                       stroke_width=_f(2.5 * s), stroke_linecap="round"))
    group.add(dwg.polygon(points=head_points, fill=line_color))

    outline = [(-10, -2), (2, -2), (2, -6), (12, 0), (2, 6), (2, 2), (-10, 2)]
    arrow_d = "M" + " L".join(f"{_f(cx + dx * s)} {_f(cy + dy * s)}" for dx, dy in outline) + " Z"
    stroke, stroke_width = _border(color, s, selected, width=1.5)
    arrow = dwg.g(transform=f"rotate({_f(rotation)} {_f(cx)} {_f(cy)})")
    arrow.add(dwg.path(d=arrow_d, fill=color, stroke=stroke, stroke_width=stroke_width,
                       stroke_linejoin="round"))
    group.add(arrow)
    return group


def annotation_box_size(text: str, font_size: float, scale: float = 1):
    """(width, height) of an annotation box; glyphs are estimated at 0.6 em."""
    scaled = font_size * scale
    padding = 8 * scale
    return len(text) * scaled * 0.6 + padding * 2, scaled + padding * 2


def annotation_marker(
    dwg,
    x: float,
    y: float,
    text: str,
    font_size: float,
    font_family: str,
    font_weight: str,
    text_color: str,
    background_color: str,
    border_color: str,
    scale: float = 1,
    selected: bool = False
):
    """Text label in a rounded box centered on (x, y)."""
    scaled = font_size * scale
    box_width, box_height = annotation_box_size(text, font_size, scale)

    group = dwg.g(transform=f"translate({_f(x - box_width / 2)}, {_f(y - box_height / 2)})",
                  class_="annotation")
    group.add(dwg.rect(insert=(0, 0), size=(_f(box_width), _f(box_height)), rx=_f(4 * scale),
                       fill=background_color,
                       stroke=SELECTED_STROKE if selected else border_color,
                       stroke_width=_f(scale * (2 if selected else 1))))
    group.add(dwg.text(text, insert=(_f(box_width / 2), _f(box_height / 2 + scaled / 3)),
                       text_anchor="middle", font_family=font_family, font_weight=font_weight,
                       font_size=_f(scaled), fill=text_color))
    return group
