"""
Landmark glyphs: amenities, nature, signage, hazards and structures.

Every glyph is drawn around the origin in units of the landmark size and
placed with translate(x, y) rotate(r). Border and highlight shades are
derived by darkening or lightening by a fraction of full scale.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from color_utils import darken_fraction as darken, lighten_fraction as lighten

POST_COLOR = "#78716c"
WOOD_COLOR = "#a16207"
WOOD_DARK = "#78350f"
METAL_COLOR = "#94a3b8"
MARK_COLOR = "#1f2937"
FLOWER_CENTER = "#fbbf24"


@dataclass(frozen=True)
class LandmarkDefinition:
    """Default colour and nominal pixel size of a landmark type."""
    color: str
    size: float
    category: str


LANDMARK_DEFINITIONS: Dict[str, LandmarkDefinition] = {
    "parking": LandmarkDefinition("#3b82f6", 24, "amenities"),
    "restroom": LandmarkDefinition("#6366f1", 24, "amenities"),
    "bench": LandmarkDefinition("#78716c", 20, "amenities"),
    "picnicTable": LandmarkDefinition("#a16207", 28, "amenities"),
    "trashCan": LandmarkDefinition("#52525b", 18, "amenities"),
    "waterFountain": LandmarkDefinition("#0ea5e9", 20, "amenities"),
    "tree": LandmarkDefinition("#16a34a", 28, "nature"),
    "treeGroup": LandmarkDefinition("#15803d", 36, "nature"),
    "bush": LandmarkDefinition("#22c55e", 18, "nature"),
    "flower": LandmarkDefinition("#ec4899", 16, "nature"),
    "rock": LandmarkDefinition("#71717a", 22, "nature"),
    "stump": LandmarkDefinition("#92400e", 18, "nature"),
    "infoSign": LandmarkDefinition("#0284c7", 22, "signage"),
    "holeSign": LandmarkDefinition("#dc2626", 20, "signage"),
    "directionSign": LandmarkDefinition("#f59e0b", 22, "signage"),
    "warningSign": LandmarkDefinition("#eab308", 22, "signage"),
    "fence": LandmarkDefinition("#a1a1aa", 16, "hazards"),
    "post": LandmarkDefinition("#71717a", 14, "hazards"),
    "electricBox": LandmarkDefinition("#22c55e", 20, "hazards"),
    "shelter": LandmarkDefinition("#b45309", 36, "structures"),
    "bridge": LandmarkDefinition("#78716c", 32, "structures"),
    "stairs": LandmarkDefinition("#a1a1aa", 24, "structures"),
    "path": LandmarkDefinition("#d6d3d1", 16, "structures"),
}


def _f(value: float) -> float:
    return round(value, 2)


class Glyph:
    """Adds shapes to a group with every length in units of the glyph scale."""

    def __init__(self, dwg, group, scale: float):
        self.dwg = dwg
        self.group = group
        self.s = scale

    def _attrs(self, attrs):
        if "stroke_width" in attrs:
            attrs["stroke_width"] = _f(attrs["stroke_width"] * self.s)
        return attrs

    def rect(self, x, y, w, h, rx=None, **attrs):
        s = self.s
        self.group.add(self.dwg.rect(insert=(_f(x * s), _f(y * s)), size=(_f(w * s), _f(h * s)),
                                     rx=_f(rx * s) if rx else None, **self._attrs(attrs)))

    def circle(self, cx, cy, r, **attrs):
        s = self.s
        self.group.add(self.dwg.circle(center=(_f(cx * s), _f(cy * s)), r=_f(r * s), **self._attrs(attrs)))

    def ellipse(self, cx, cy, rx, ry, rotate: Optional[float] = None, **attrs):
        s = self.s
        if rotate is not None:
            attrs["transform"] = f"rotate({rotate} {_f(cx * s)} {_f(cy * s)})"
        self.group.add(self.dwg.ellipse(center=(_f(cx * s), _f(cy * s)), r=(_f(rx * s), _f(ry * s)),
                                        **self._attrs(attrs)))

    def line(self, x1, y1, x2, y2, **attrs):
        s = self.s
        self.group.add(self.dwg.line(start=(_f(x1 * s), _f(y1 * s)), end=(_f(x2 * s), _f(y2 * s)),
                                     **self._attrs(attrs)))

    def polygon(self, points: Sequence[Tuple[float, float]], **attrs):
        s = self.s
        self.group.add(self.dwg.polygon(points=[(_f(x * s), _f(y * s)) for x, y in points],
                                        **self._attrs(attrs)))

    def curve(self, start, control, end, **attrs):
        """Quadratic curve from start through control to end."""
        s = self.s
        d = "M {} {} Q {} {} {} {}".format(*(_f(v * s) for v in (*start, *control, *end)))
        self.group.add(self.dwg.path(d=d, fill="none", **self._attrs(attrs)))

    def text(self, content, x, y, size, fill):
        s = self.s
        self.group.add(self.dwg.text(content, insert=(_f(x * s), _f(y * s)), text_anchor="middle",
                                     font_family="Arial, sans-serif", font_weight="bold",
                                     font_size=_f(size * s), fill=fill))


# ============ AMENITIES ============

def _parking(g: Glyph, color: str):
    g.rect(-12, -12, 24, 24, rx=4, fill=color, stroke=darken(color), stroke_width=1.5)
    g.text("P", 0, 6, 18, "white")
    g.rect(-12, 10, 24, 4, fill=darken(color), opacity=0.3)


def _restroom(g: Glyph, color: str):
    g.rect(-14, -12, 28, 24, rx=3, fill=color, stroke=darken(color), stroke_width=1.5)
    g.circle(-5, -5, 3, fill="white")
    g.rect(-7, -1, 4, 8, rx=1, fill="white")
    g.rect(-8, 7, 2.5, 5, rx=1, fill="white")
    g.rect(-4.5, 7, 2.5, 5, rx=1, fill="white")
    g.circle(5, -5, 3, fill="white")
    g.polygon([(2, -1), (8, -1), (9, 7), (6.5, 7), (6.5, 12), (3.5, 12), (3.5, 7), (1, 7)], fill="white")


def _bench(g: Glyph, color: str):
    for top in (-6, -1):
        g.rect(-14, top, 28, 4, rx=1, fill=WOOD_COLOR, stroke=WOOD_DARK, stroke_width=0.5)
    for left in (-10, 7):
        g.rect(left, 4, 3, 6, rx=0.5, fill=color, stroke=darken(color), stroke_width=0.5)
    for grain in (-4, 1):
        g.line(-12, grain, 12, grain, stroke=WOOD_DARK, stroke_width=0.3, opacity=0.3)


def _picnic_table(g: Glyph, color: str):
    dark = darken(color)
    g.rect(-16, -4, 32, 8, rx=1, fill=color, stroke=dark, stroke_width=1)
    for top in (-10, 6):
        g.rect(-14, top, 28, 4, rx=1, fill=lighten(color, 0.1), stroke=dark, stroke_width=0.5)
    g.line(-8, -10, -10, 12, stroke=dark, stroke_width=2)
    g.line(8, -10, 10, 12, stroke=dark, stroke_width=2)
    g.line(-12, 2, 12, 2, stroke=dark, stroke_width=1.5)


def _trash_can(g: Glyph, color: str):
    dark = darken(color)
    g.polygon([(-8, -6), (-10, 10), (10, 10), (8, -6)], fill=color, stroke=dark, stroke_width=1)
    g.ellipse(0, -6, 10, 3, fill=lighten(color, 0.1), stroke=dark, stroke_width=1)
    g.curve((-3, -9), (0, -14), (3, -9), stroke=dark, stroke_width=1.5)
    g.line(-7, 0, 7, 0, stroke=dark, stroke_width=0.5, opacity=0.3)
    g.line(-8, 4, 8, 4, stroke=dark, stroke_width=0.5, opacity=0.3)


def _water_fountain(g: Glyph, color: str):
    metal_dark = darken(METAL_COLOR)
    g.rect(-6, 2, 12, 10, rx=1, fill=METAL_COLOR, stroke=metal_dark, stroke_width=1)
    g.ellipse(0, -2, 10, 5, fill=lighten(METAL_COLOR, 0.1), stroke=metal_dark, stroke_width=1)
    g.curve((-2, -4), (2, -10), (6, -4), stroke=color, stroke_width=2, stroke_linecap="round")
    g.circle(4, -6, 1, fill=color, opacity=0.7)
    g.circle(6, -3, 0.8, fill=color, opacity=0.5)


# ============ NATURE ============

def _tree(g: Glyph, color: str):
    g.rect(-3, 2, 6, 10, rx=1, fill=WOOD_DARK, stroke=darken(WOOD_DARK), stroke_width=0.5)
    g.circle(0, -8, 12, fill=color)
    g.circle(-6, -4, 8, fill=darken(color, 0.1))
    g.circle(6, -4, 8, fill=darken(color, 0.1))
    g.circle(0, -12, 8, fill=lighten(color, 0.1))
    g.circle(-4, -12, 4, fill=lighten(color, 0.2), opacity=0.5)


def _tree_group(g: Glyph, color: str):
    g.rect(-12, 0, 4, 8, fill=WOOD_DARK)
    g.circle(-10, -6, 10, fill=darken(color, 0.1))
    g.rect(6, 2, 4, 8, fill=WOOD_DARK)
    g.circle(8, -4, 9, fill=lighten(color, 0.15))
    g.rect(-3, 4, 5, 10, fill=WOOD_DARK, stroke=darken(WOOD_DARK), stroke_width=0.5)
    g.circle(0, -6, 12, fill=color)
    g.circle(-3, -10, 5, fill=lighten(color, 0.15), opacity=0.6)


def _bush(g: Glyph, color: str):
    g.ellipse(0, 2, 12, 8, fill=color)
    g.ellipse(-6, 0, 7, 6, fill=darken(color, 0.1))
    g.ellipse(6, 0, 7, 6, fill=darken(color, 0.1))
    g.ellipse(0, -3, 8, 5, fill=lighten(color, 0.1))
    g.circle(-4, -4, 2, fill=lighten(color, 0.2), opacity=0.5)


def _flower(g: Glyph, color: str):
    petals = ((0, -6, None), (5, -3, 72), (4, 4, 144), (-4, 4, -144), (-5, -3, -72))
    for i, (cx, cy, angle) in enumerate(petals):
        g.ellipse(cx, cy, 3, 5, rotate=angle, fill=color if i % 2 == 0 else lighten(color, 0.1))
    center_dark = darken(FLOWER_CENTER)
    g.circle(0, 0, 4, fill=FLOWER_CENTER, stroke=center_dark, stroke_width=0.5)
    g.circle(-1, -1, 1, fill=center_dark, opacity=0.5)
    g.circle(1, 1, 0.8, fill=center_dark, opacity=0.4)


def _rock(g: Glyph, color: str):
    g.polygon([(-10, 4), (-8, -4), (-2, -8), (6, -6), (10, -2), (8, 6), (0, 8)],
              fill=color, stroke=darken(color), stroke_width=1)
    g.polygon([(-6, -2), (-2, -6), (4, -4), (2, 0)], fill=lighten(color, 0.15), opacity=0.6)
    g.line(-4, 2, 4, 4, stroke=darken(color), stroke_width=0.5, opacity=0.3)


def _stump(g: Glyph, color: str):
    dark = darken(color)
    g.ellipse(0, 6, 10, 4, fill=dark)
    g.rect(-10, -2, 20, 8, fill=color)
    g.ellipse(0, -2, 10, 4, fill=lighten(color, 0.2), stroke=color, stroke_width=1)
    g.ellipse(0, -2, 7, 2.8, fill="none", stroke=dark, stroke_width=0.5, opacity=0.5)
    g.ellipse(0, -2, 4, 1.6, fill="none", stroke=dark, stroke_width=0.5, opacity=0.5)
    g.circle(0, -2, 1.5, fill=dark, opacity=0.3)


# ============ SIGNAGE ============

def _info_sign(g: Glyph, color: str):
    g.rect(-1.5, 0, 3, 12, fill=POST_COLOR, stroke=darken(POST_COLOR), stroke_width=0.5)
    g.rect(-10, -12, 20, 14, rx=2, fill=color, stroke=darken(color), stroke_width=1)
    g.circle(0, -8, 2, fill="white")
    g.rect(-1.5, -5, 3, 6, rx=1, fill="white")


def _hole_sign(g: Glyph, color: str):
    g.rect(-1, 2, 2, 10, fill=POST_COLOR)
    g.rect(-8, -10, 16, 14, rx=2, fill=color, stroke=darken(color), stroke_width=1)
    g.text("#", 0, 0, 12, "white")


def _direction_sign(g: Glyph, color: str):
    g.rect(-1.5, -2, 3, 14, fill=POST_COLOR, stroke=darken(POST_COLOR), stroke_width=0.5)
    g.polygon([(-12, -10), (8, -10), (14, -5), (8, 0), (-12, 0)],
              fill=color, stroke=darken(color), stroke_width=1)


def _warning_sign(g: Glyph, color: str):
    g.rect(-1, 2, 2, 10, fill=POST_COLOR)
    g.polygon([(0, -14), (12, 4), (-12, 4)], fill=color, stroke=darken(color), stroke_width=1.5)
    g.rect(-1.5, -8, 3, 7, rx=1, fill=MARK_COLOR)
    g.circle(0, 1, 1.5, fill=MARK_COLOR)


# ============ HAZARDS ============

def _fence(g: Glyph, color: str):
    g.rect(-3, -10, 6, 20, rx=1, fill=color, stroke=darken(color), stroke_width=0.5)
    g.rect(-4, -12, 8, 3, rx=1, fill=lighten(color, 0.1), stroke=darken(color), stroke_width=0.5)


def _post(g: Glyph, color: str):
    g.rect(-2, -12, 4, 24, rx=2, fill=color, stroke=darken(color), stroke_width=0.5)
    g.circle(0, -12, 3, fill=lighten(color, 0.1), stroke=darken(color), stroke_width=0.5)


def _electric_box(g: Glyph, color: str):
    g.rect(-8, -10, 16, 20, rx=2, fill=color, stroke=darken(color), stroke_width=1)
    g.line(0, -8, 0, 8, stroke=darken(color), stroke_width=0.5)
    g.rect(-5, -6, 10, 8, rx=1, fill=FLOWER_CENTER)
    g.polygon([(-1, -5), (2, -2), (0, -1), (2, 1), (-1, -2), (1, -3)], fill=MARK_COLOR)


# ============ STRUCTURES ============

def _shelter(g: Glyph, color: str):
    g.polygon([(-18, -4), (0, -16), (18, -4)], fill=WOOD_DARK, stroke=darken(WOOD_DARK), stroke_width=1)
    for left in (-14, 10):
        g.rect(left, -4, 4, 16, fill=color, stroke=darken(color), stroke_width=0.5)
    g.rect(-16, 10, 32, 4, fill=POST_COLOR, opacity=0.5)


def _bridge(g: Glyph, color: str):
    g.rect(-16, -2, 32, 6, rx=1, fill=WOOD_COLOR, stroke=darken(WOOD_COLOR), stroke_width=1)
    g.rect(-16, -10, 2, 8, fill=color)
    g.rect(14, -10, 2, 8, fill=color)
    g.rect(-16, -10, 32, 2, rx=1, fill=color, stroke=darken(color), stroke_width=0.5)
    for plank in (-10, 0, 10):
        g.line(plank, -1, plank, 3, stroke=darken(WOOD_COLOR), stroke_width=0.5)


def _stairs(g: Glyph, color: str):
    steps = ((-10, 6, 20, color), (-8, 2, 16, lighten(color, 0.05)),
             (-6, -2, 12, lighten(color, 0.1)), (-4, -6, 8, lighten(color, 0.15)))
    for x, y, w, fill in steps:
        g.rect(x, y, w, 4, fill=fill, stroke=darken(color), stroke_width=0.5)


def _path_marker(g: Glyph, color: str):
    g.ellipse(-3, -4, 3, 5, rotate=-15, fill=color, stroke=darken(color), stroke_width=0.5)
    g.ellipse(3, 4, 3, 5, rotate=15, fill=color, stroke=darken(color), stroke_width=0.5)
    for cx, cy in ((-5, -9), (-3, -10), (-1, -9.5), (1, -0.5), (3, -1), (5, -0.5)):
        g.circle(cx, cy, 1, fill=color)


LANDMARK_RENDERERS: Dict[str, Callable[[Glyph, str], None]] = {
    "parking": _parking,
    "restroom": _restroom,
    "bench": _bench,
    "picnicTable": _picnic_table,
    "trashCan": _trash_can,
    "waterFountain": _water_fountain,
    "tree": _tree,
    "treeGroup": _tree_group,
    "bush": _bush,
    "flower": _flower,
    "rock": _rock,
    "stump": _stump,
    "infoSign": _info_sign,
    "holeSign": _hole_sign,
    "directionSign": _direction_sign,
    "warningSign": _warning_sign,
    "fence": _fence,
    "post": _post,
    "electricBox": _electric_box,
    "shelter": _shelter,
    "bridge": _bridge,
    "stairs": _stairs,
    "path": _path_marker,
}


def landmark_marker(
    dwg,
    landmark_type: str,
    x: float,
    y: float,
    size: float = 1,
    rotation: float = 0,
    color: Optional[str] = None,
    verbose: bool = False
):
    """Draw one landmark glyph.

    Args:
        dwg: svgwrite Drawing used as element factory
        landmark_type: Key of LANDMARK_RENDERERS, e.g. "bench"
        x: Pixel x
        y: Pixel y
        size: Size multiplier (1 = nominal)
        rotation: Rotation in degrees
        color: Main colour, defaults to the type's default colour

    Returns:
        svgwrite Group, or None for unknown landmark types
    """
    renderer = LANDMARK_RENDERERS.get(landmark_type)
    if renderer is None:
        if verbose:
            print(f"  Warning: no glyph for landmark type {landmark_type!r}")
        return None

    definition = LANDMARK_DEFINITIONS[landmark_type]
    group = dwg.g(transform=f"translate({_f(x)}, {_f(y)}) rotate({_f(rotation)})",
                  class_=f"landmark landmark-{landmark_type}")
    renderer(Glyph(dwg, group, size), color or definition.color)
    return group
