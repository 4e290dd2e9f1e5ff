"""
Tree rendering and forest fill.

Three looks share one placement algorithm:
- top view vector crowns per species (course map and print layouts)
- raster crowns referenced through <symbol>/<use> (blob tee sign)
- side view silhouettes kept upright on a rotated map (rectangle tee sign)

Forest polygons are filled by rejection sampling inside the projected
polygon, seeded from the feature id so a forest looks the same on every
export.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from shapely.geometry import Polygon

from render_context import SeededRandom
from render_helpers import point_in_polygon, dist_to_polygon_edge
from terrain_patterns import TREE_IMAGES, tree_symbol_id

SELECTED_STROKE = "#3b82f6"
SHADOW_COLOR = "#000"
TRUNK_COLOR = "#5D4037"
CONIFER_TRUNK_COLOR = "#3E2723"
BIRCH_TRUNK_COLOR = "#E8E4E1"
BIRCH_MARK_COLOR = "#4A4A4A"

DEFAULT_SPECIES = "oak"
IMAGE_TREE_SIZE = 40
IMAGE_CROWN_METERS = 5
MAX_IMAGE_TREE_PX = 60


@dataclass(frozen=True)
class TreeSpecies:
    """Palette and nominal crown size of a tree species."""
    primary: str
    secondary: str
    accent: str
    size: float
    category: str


TREE_SPECIES: Dict[str, TreeSpecies] = {
    "oak": TreeSpecies("#228b22", "#1a6b1a", "#32cd32", 48, "deciduous"),
    "maple": TreeSpecies("#2e8b57", "#1e5f3a", "#3cb371", 40, "deciduous"),
    "pine": TreeSpecies("#0d5524", "#073d18", "#2d7d46", 36, "conifer"),
    "spruce": TreeSpecies("#1e4d2b", "#143d1f", "#2d6b3f", 32, "conifer"),
    "birch": TreeSpecies("#6b8e23", "#556b2f", "#9acd32", 28, "deciduous"),
}

# Raster crown used for each species on the blob tee sign
SPECIES_IMAGES = {
    "oak": "tree1.png",
    "maple": "tree2.png",
    "pine": "tree3.png",
    "spruce": "tree4.png",
    "birch": "tree1.png",
}

# Mixed forest, favouring conifers
FOREST_SPECIES_WEIGHTS = {"oak": 0.25, "maple": 0.15, "pine": 0.30, "spruce": 0.15, "birch": 0.15}
FOREST_IMAGE_WEIGHTS = {name: 1.0 for name in TREE_IMAGES}


@dataclass(frozen=True)
class TreeColors:
    primary: str
    secondary: str
    accent: str


def normalize_tree_type(tree_type: Optional[str], verbose: bool = False) -> str:
    """Known species name, or oak for anything else."""
    if tree_type in TREE_SPECIES:
        return tree_type
    if verbose:
        print(f"  Warning: unknown tree type {tree_type!r}, using {DEFAULT_SPECIES}")
    return DEFAULT_SPECIES


def get_tree_colors(tree_type: Optional[str], custom_colors: Optional[Dict[str, str]] = None) -> TreeColors:
    """Species palette with any custom colour overrides applied."""
    species = TREE_SPECIES[normalize_tree_type(tree_type)]
    custom = custom_colors or {}
    return TreeColors(
        custom.get("primary") or species.primary,
        custom.get("secondary") or species.secondary,
        custom.get("accent") or species.accent,
    )


def _f(value: float) -> float:
    return round(value, 2)


def _points(points: Sequence[Tuple[float, float]]) -> List[Tuple[float, float]]:
    return [(_f(x), _f(y)) for x, y in points]


# ============ TOP VIEW ============

OAK_CROWN = [
    (0, 0, 0.4), (-0.25, -0.15, 0.32), (0.28, -0.12, 0.3), (-0.18, 0.22, 0.28),
    (0.22, 0.2, 0.26), (-0.1, -0.28, 0.24), (0.12, 0.28, 0.22),
]


def _shadow(dwg, x, y, rx, ry, offset=2, opacity=0.2):
    return dwg.ellipse(center=(_f(x + offset), _f(y + offset)), r=(_f(rx), _f(ry)),
                       fill=SHADOW_COLOR, opacity=opacity)


def _oak_top(dwg, group, x, y, s, colors: TreeColors):
    rnd = SeededRandom.with_seed(12345)
    group.add(_shadow(dwg, x, y, s * 0.5, s * 0.45))
    for i, (dx, dy, r) in enumerate(OAK_CROWN):
        jitter = (rnd.next() - 0.5) * 0.05
        color = colors.primary if i < 3 else colors.secondary if i < 5 else colors.accent
        group.add(dwg.circle(center=(_f(x + (dx + jitter) * s), _f(y + (dy + jitter) * s)),
                             r=_f(r * s), fill=color))


def _maple_top(dwg, group, x, y, s, colors: TreeColors):
    group.add(_shadow(dwg, x, y, s * 0.45, s * 0.42))
    group.add(dwg.circle(center=(_f(x), _f(y)), r=_f(s * 0.4), fill=colors.primary))
    for i in range(5):
        angle = math.radians(i * 72 - 90)
        group.add(dwg.circle(center=(_f(x + math.cos(angle) * s * 0.32), _f(y + math.sin(angle) * s * 0.32)),
                             r=_f(s * 0.18), fill=colors.accent))
    group.add(dwg.circle(center=(_f(x), _f(y)), r=_f(s * 0.25), fill=colors.secondary, opacity=0.5))


def _pine_top(dwg, group, x, y, s, colors: TreeColors):
    group.add(_shadow(dwg, x, y, s * 0.4, s * 0.38))
    for i in range(8):
        angle = math.radians(i * 45)
        tip = (x + math.cos(angle) * s * 0.45, y + math.sin(angle) * s * 0.45)
        base1 = (x + math.cos(angle - 0.4) * s * 0.15, y + math.sin(angle - 0.4) * s * 0.15)
        base2 = (x + math.cos(angle + 0.4) * s * 0.15, y + math.sin(angle + 0.4) * s * 0.15)
        group.add(dwg.polygon(points=_points([tip, base1, base2]),
                              fill=colors.primary if i % 2 == 0 else colors.secondary))
    group.add(dwg.circle(center=(_f(x), _f(y)), r=_f(s * 0.12), fill=colors.accent))


def _spruce_top(dwg, group, x, y, s, colors: TreeColors):
    group.add(_shadow(dwg, x, y, s * 0.38, s * 0.35))
    for radius, color in ((0.45, colors.primary), (0.32, colors.secondary), (0.18, colors.accent)):
        star = []
        for i in range(12):
            angle = math.radians(i * 30 - 90)
            r = radius * s if i % 2 == 0 else radius * s * 0.5
            star.append((x + math.cos(angle) * r, y + math.sin(angle) * r))
        group.add(dwg.polygon(points=_points(star), fill=color))


def _birch_top(dwg, group, x, y, s, colors: TreeColors):
    rnd = SeededRandom.with_seed(54321)
    group.add(_shadow(dwg, x, y, s * 0.35, s * 0.32, offset=1.5, opacity=0.15))
    for _ in range(12):
        angle = rnd.next() * math.pi * 2
        dist = rnd.next() * s * 0.35 + s * 0.05
        r = s * (0.08 + rnd.next() * 0.06)
        pick = rnd.next()
        color = colors.primary if pick < 0.4 else colors.accent if pick < 0.7 else colors.secondary
        group.add(dwg.circle(center=(_f(x + math.cos(angle) * dist), _f(y + math.sin(angle) * dist)),
                             r=_f(r), fill=color))


TOP_VIEW_RENDERERS = {
    "oak": _oak_top,
    "maple": _maple_top,
    "pine": _pine_top,
    "spruce": _spruce_top,
    "birch": _birch_top,
}


def top_view_tree(
    dwg,
    x: float,
    y: float,
    tree_type: str,
    size: float = 1,
    rotation: float = 0,
    opacity: float = 1,
    scale: float = 1,
    custom_colors: Optional[Dict[str, str]] = None,
    selected: bool = False
):
    """Vector tree crown seen from above, centered on (x, y).

    Args:
        dwg: svgwrite Drawing used as element factory
        tree_type: Species name; unknown names draw an oak
        size: Size multiplier of the species' nominal crown
        rotation: Crown rotation in degrees
        opacity: Group opacity
        scale: Marker density scale
        custom_colors: Optional primary/secondary/accent overrides
        selected: Draw a dashed selection ring

    Returns:
        svgwrite Group
    """
    species_name = normalize_tree_type(tree_type)
    crown = TREE_SPECIES[species_name].size * size * scale
    group = dwg.g(transform=f"rotate({_f(rotation)} {_f(x)} {_f(y)})", opacity=_f(opacity),
                  class_=f"tree tree-{species_name}")
    if selected:
        group.add(dwg.circle(center=(_f(x), _f(y)), r=_f(crown / 2 + 4), fill="none",
                             stroke=SELECTED_STROKE, stroke_width=2, stroke_dasharray="4 2"))
    TOP_VIEW_RENDERERS[species_name](dwg, group, x, y, crown, get_tree_colors(species_name, custom_colors))
    return group


# ============ SIDE VIEW ============

def _tapered_trunk(dwg, x, y, trunk_height, trunk_width, top_ratio, mid_ratio, base_ratio, color):
    top = y - trunk_height
    mid = y - trunk_height * 0.5
    d = (f"M{_f(x - trunk_width * base_ratio)} {_f(y)} "
         f"Q{_f(x - trunk_width * mid_ratio)} {_f(mid)} {_f(x - trunk_width * top_ratio)} {_f(top)} "
         f"L{_f(x + trunk_width * top_ratio)} {_f(top)} "
         f"Q{_f(x + trunk_width * mid_ratio)} {_f(mid)} {_f(x + trunk_width * base_ratio)} {_f(y)} Z")
    return dwg.path(d=d, fill=color)


def _ground_shadow(dwg, x, y, rx, ry, opacity=0.12):
    return dwg.ellipse(center=(_f(x), _f(y + 2)), r=(_f(rx), _f(ry)), fill=SHADOW_COLOR, opacity=opacity)


def _oak_side(dwg, group, x, y, h, colors: TreeColors, rnd: SeededRandom):
    crown_height = h * 0.75
    trunk_height = h * 0.3
    crown_width = h * 0.9
    crown_base = y - trunk_height + crown_height * 0.1

    group.add(_ground_shadow(dwg, x, y, crown_width * 0.4, h * 0.05))
    group.add(_tapered_trunk(dwg, x, y, trunk_height, h * 0.12, 0.2, 0.35, 0.4, TRUNK_COLOR))
    count = 7 + int(rnd.next() * 3)
    for i in range(count):
        angle = i / count * math.pi * 2 + rnd.next() * 0.4
        dist = crown_width * 0.2 * rnd.next()
        r = crown_width * (0.25 + rnd.next() * 0.2)
        pick = rnd.next()
        color = colors.primary if pick < 0.4 else colors.secondary if pick < 0.7 else colors.accent
        group.add(dwg.circle(center=(_f(x + math.cos(angle) * dist),
                                     _f(crown_base - crown_height * 0.5 + math.sin(angle) * dist * 0.6)),
                             r=_f(r), fill=color))
    group.add(dwg.circle(center=(_f(x + crown_width * 0.05), _f(crown_base - crown_height * 0.4)),
                         r=_f(crown_width * 0.35), fill=colors.secondary, opacity=0.4))


def _maple_side(dwg, group, x, y, h, colors: TreeColors, rnd: SeededRandom):
    crown_height = h * 0.7
    trunk_height = h * 0.35
    crown_width = h * 0.7
    crown_base = y - trunk_height + crown_height * 0.1
    crown_cy = crown_base - crown_height * 0.45

    group.add(_ground_shadow(dwg, x, y, crown_width * 0.35, h * 0.04))
    group.add(_tapered_trunk(dwg, x, y, trunk_height, h * 0.1, 0.15, 0.3, 0.4, TRUNK_COLOR))
    group.add(dwg.circle(center=(_f(x), _f(crown_cy)), r=_f(crown_width * 0.45), fill=colors.primary))
    for i in range(5):
        angle = math.radians(i * 72 - 90) + (rnd.next() - 0.5) * 0.2
        r = crown_width * (0.15 + rnd.next() * 0.08)
        group.add(dwg.circle(center=(_f(x + math.cos(angle) * crown_width * 0.35),
                                     _f(crown_cy + math.sin(angle) * crown_height * 0.35)),
                             r=_f(r), fill=colors.accent))
    group.add(dwg.circle(center=(_f(x), _f(crown_base - crown_height * 0.4)), r=_f(crown_width * 0.28),
                         fill=colors.secondary, opacity=0.5))


def _pine_side(dwg, group, x, y, h, colors: TreeColors, rnd: SeededRandom):
    crown_height = h * 0.8
    trunk_height = h * 0.25
    crown_width = h * 0.5
    trunk_width = h * 0.08

    group.add(_ground_shadow(dwg, x, y, crown_width * 0.35, h * 0.04))
    group.add(dwg.rect(insert=(_f(x - trunk_width / 2), _f(y - trunk_height)),
                       size=(_f(trunk_width), _f(trunk_height)), fill=CONIFER_TRUNK_COLOR))
    layers = 3 + int(rnd.next() * 2)
    for i in range(layers):
        ratio = i / layers
        top = y - trunk_height - crown_height * (1 - ratio * 0.15)
        bottom = y - trunk_height - crown_height * ratio * 0.6
        width = crown_width * (0.3 + (1 - ratio) * 0.7)
        jitter = (rnd.next() - 0.5) * crown_width * 0.05
        group.add(dwg.polygon(
            points=_points([(x + jitter, top), (x - width / 2 + jitter, bottom), (x + width / 2 + jitter, bottom)]),
            fill=colors.primary if i % 2 == 0 else colors.secondary
        ))


def _spruce_side(dwg, group, x, y, h, colors: TreeColors, rnd: SeededRandom):
    crown_height = h * 0.85
    trunk_height = h * 0.2
    crown_width = h * 0.35
    trunk_width = h * 0.06
    crown_top = y - trunk_height - crown_height
    crown_bottom = y - trunk_height + crown_height * 0.05

    group.add(_ground_shadow(dwg, x, y, crown_width * 0.4, h * 0.035))
    group.add(dwg.rect(insert=(_f(x - trunk_width / 2), _f(y - trunk_height)),
                       size=(_f(trunk_width), _f(trunk_height)), fill=CONIFER_TRUNK_COLOR))
    group.add(dwg.polygon(points=_points([(x, crown_top), (x - crown_width / 2, crown_bottom),
                                          (x + crown_width / 2, crown_bottom)]), fill=colors.primary))
    inner_width = crown_width * 0.7
    group.add(dwg.polygon(points=_points([(x, crown_top + crown_height * 0.1), (x - inner_width / 2, crown_bottom),
                                          (x + inner_width / 2, crown_bottom)]),
                          fill=colors.secondary, opacity=0.6))
    branches = 4 + int(rnd.next() * 3)
    for i in range(branches):
        by = crown_top + crown_height * 0.9 * ((i + 1) / (branches + 1))
        reach = crown_width * 0.3 * (1 - (i / branches) * 0.3)
        side = 1 if rnd.next() > 0.5 else -1
        group.add(dwg.line(start=(_f(x), _f(by)), end=(_f(x + side * reach), _f(by + 3)),
                           stroke=colors.accent, stroke_width=1.5, opacity=0.6))


def _birch_side(dwg, group, x, y, h, colors: TreeColors, rnd: SeededRandom):
    crown_height = h * 0.65
    trunk_height = h * 0.4
    crown_width = h * 0.5
    trunk_width = h * 0.06
    crown_base = y - trunk_height + crown_height * 0.15

    group.add(_ground_shadow(dwg, x, y, crown_width * 0.3, h * 0.035, opacity=0.1))
    group.add(_tapered_trunk(dwg, x, y, trunk_height, trunk_width, 0.2, 0.3, 0.35, BIRCH_TRUNK_COLOR))
    for i in range(4):
        mark_y = y - trunk_height * (0.2 + i * 0.2) + rnd.next() * 5
        mark_width = trunk_width * (0.3 + rnd.next() * 0.3)
        group.add(dwg.ellipse(center=(_f(x), _f(mark_y)), r=(_f(mark_width), 1.5),
                              fill=BIRCH_MARK_COLOR, opacity=0.5))
    count = 10 + int(rnd.next() * 5)
    for _ in range(count):
        angle = rnd.next() * math.pi * 2
        dist = crown_width * 0.35 * rnd.next()
        cy = (crown_base - crown_height * 0.5 + math.sin(angle) * dist * 0.7
              + (rnd.next() - 0.5) * crown_height * 0.3)
        r = crown_width * (0.08 + rnd.next() * 0.1)
        pick = rnd.next()
        color = colors.primary if pick < 0.4 else colors.accent if pick < 0.7 else colors.secondary
        group.add(dwg.circle(center=(_f(x + math.cos(angle) * dist), _f(cy)), r=_f(r), fill=color))


SIDE_VIEW_RENDERERS = {
    "oak": _oak_side,
    "maple": _maple_side,
    "pine": _pine_side,
    "spruce": _spruce_side,
    "birch": _birch_side,
}


def side_view_tree(
    dwg,
    x: float,
    y: float,
    tree_type: str,
    height: float,
    opacity: float = 1,
    seed: Optional[int] = None,
    counter_rotation: float = 0
):
    """Tree silhouette standing on (x, y), its crown above the point.

    Args:
        height: Tree height in pixels
        seed: Shape seed; defaults to one derived from the position
        counter_rotation: Rotation cancelling a rotated map so the tree stays upright

    Returns:
        svgwrite Group
    """
    species_name = normalize_tree_type(tree_type)
    if seed is None:
        seed = round(x * 1000 + y * 1000)
    attrs = {"opacity": _f(opacity), "class_": f"tree tree-{species_name}"}
    if counter_rotation:
        attrs["transform"] = f"rotate({_f(counter_rotation)} {_f(x)} {_f(y)})"
    group = dwg.g(**attrs)
    SIDE_VIEW_RENDERERS[species_name](dwg, group, x, y, height, get_tree_colors(species_name),
                                      SeededRandom.with_seed(seed))
    return group


# ============ RASTER CROWNS ============

def tree_image_for(tree_type: Optional[str]) -> str:
    """Raster crown for a species or image name ('pine' -> 'tree3.png', 'tree2' -> 'tree2.png')."""
    if tree_type in SPECIES_IMAGES:
        return SPECIES_IMAGES[tree_type]
    name = f"{tree_type}.png"
    return name if name in TREE_IMAGES else TREE_IMAGES[0]


def image_tree(
    ctx,
    x: float,
    y: float,
    image_name: str,
    size: float = 1,
    rotation: float = 0,
    opacity: float = 1,
    meters_per_pixel: Optional[float] = None
):
    """<use> of a tree image symbol centered on (x, y).

    With meters_per_pixel the crown is sized as a 5 m crown times size,
    capped at 60 px; otherwise the nominal 40 px times size.
    """
    if image_name not in TREE_IMAGES:
        ctx.warn(f"unknown tree image {image_name!r}, using {TREE_IMAGES[0]}")
        image_name = TREE_IMAGES[0]

    if meters_per_pixel and meters_per_pixel > 0:
        height = min(IMAGE_CROWN_METERS * size / meters_per_pixel, MAX_IMAGE_TREE_PX)
    else:
        height = IMAGE_TREE_SIZE * size
    width = height * ctx.images.aspect(image_name)

    return ctx.dwg.use(
        f"#{tree_symbol_id(image_name)}",
        insert=(_f(x - width / 2), _f(y - height / 2)),
        size=(_f(width), _f(height)),
        transform=f"rotate({_f(rotation)} {_f(x)} {_f(y)})",
        opacity=_f(opacity),
    )


# ============ FOREST FILL ============

@dataclass
class ForestParams:
    """Placement constants for one layout.

    Attributes:
        tree_count: Target number of trees
        min_spacing: Minimum distance between trees in pixels
        edge_margin: Minimum distance from the polygon edge in pixels
        attempts_per_tree: Attempt budget is tree_count times this
        kinds: Weights of the tree kinds to pick from
        size_range: Range of the size value given to each tree
        opacity_range: Range of per-tree opacity
    """
    tree_count: int
    min_spacing: float
    edge_margin: float = 0
    attempts_per_tree: int = 20
    kinds: Dict[str, float] = field(default_factory=lambda: dict(FOREST_SPECIES_WEIGHTS))
    size_range: Tuple[float, float] = (1.0, 1.5)
    opacity_range: Tuple[float, float] = (0.9, 1.0)


@dataclass
class TreePlacement:
    x: float
    y: float
    kind: str
    size: float
    rotation: float
    opacity: float
    seed: int


def forest_seed(feature_id: str) -> int:
    """Placement seed from the first two characters of a feature id."""
    if not feature_id:
        return 0
    second = ord(feature_id[1]) if len(feature_id) > 1 else 0
    return ord(feature_id[0]) * 1000 + second


def polygon_shape(polygon: Sequence[Tuple[float, float]]) -> Optional[Polygon]:
    """shapely Polygon of a pixel ring, or None when it has no area."""
    if len(polygon) < 3:
        return None
    shape = Polygon(polygon)
    if not shape.is_valid:
        shape = shape.buffer(0)
    if shape.is_empty or not math.isfinite(shape.area) or shape.area <= 0:
        return None
    return shape


def course_map_forest_params(shape: Polygon, marker_scale: float = 1) -> ForestParams:
    """Overview map: 25 trees per 10 000 px², at least 3."""
    min_x, min_y, max_x, max_y = shape.bounds
    max_dim = max(max_x - min_x, max_y - min_y)
    return ForestParams(
        tree_count=max(3, int(shape.area / 10000 * 25)),
        min_spacing=18 * marker_scale,
        edge_margin=min(15, max_dim * 0.1) * marker_scale,
        attempts_per_tree=20,
    )


def tee_sign_forest_params(shape: Polygon, meters_per_pixel: float) -> ForestParams:
    """Close-up canopy: 700 trees per hectare, clamped to [5, 300]."""
    area_m2 = shape.area * meters_per_pixel * meters_per_pixel
    return ForestParams(
        tree_count=max(5, min(300, int(area_m2 / 10000 * 700))),
        min_spacing=max(8, 4 / meters_per_pixel),
        edge_margin=max(4, 2 / meters_per_pixel),
        attempts_per_tree=50,
        kinds=dict(FOREST_IMAGE_WEIGHTS),
        size_range=(1.2, 2.0),
    )


def side_view_forest_params(shape: Polygon) -> ForestParams:
    """Silhouette forest: 15 trees per 10 000 px², heights 35-55 px."""
    return ForestParams(
        tree_count=int(shape.area / 10000 * 15),
        min_spacing=25,
        attempts_per_tree=10,
        size_range=(35, 55),
        opacity_range=(0.85, 1.0),
    )


def generate_forest_tree_placements(
    polygon: Sequence[Tuple[float, float]],
    seed: int,
    params: ForestParams
) -> List[TreePlacement]:
    """Scatter trees inside a pixel-space polygon.

    Candidates are drawn uniformly in the bounding box and kept only when
    inside the polygon, at least edge_margin from every edge and at least
    min_spacing from every kept tree. Sampling stops at tree_count trees
    or after tree_count * attempts_per_tree candidates.

    Returns:
        Placements sorted by y so lower trees are drawn over higher ones
    """
    shape = polygon_shape(polygon)
    if shape is None or params.tree_count <= 0:
        return []

    min_x, min_y, max_x, max_y = shape.bounds
    width = max_x - min_x
    height = max_y - min_y
    ring = list(polygon)
    rnd = SeededRandom.with_seed(seed)
    spacing_sq = params.min_spacing * params.min_spacing

    placements: List[TreePlacement] = []
    attempts = 0
    max_attempts = params.tree_count * params.attempts_per_tree

    while len(placements) < params.tree_count and attempts < max_attempts:
        attempts += 1
        x = min_x + rnd.next() * width
        y = min_y + rnd.next() * height

        if not point_in_polygon(x, y, ring):
            continue
        if params.edge_margin > 0 and dist_to_polygon_edge(x, y, ring) < params.edge_margin:
            continue
        if any((p.x - x) ** 2 + (p.y - y) ** 2 < spacing_sq for p in placements):
            continue

        placements.append(TreePlacement(
            x=x,
            y=y,
            kind=rnd.weighted_choice(params.kinds),
            size=rnd.uniform(*params.size_range),
            rotation=rnd.next() * 360,
            opacity=rnd.uniform(*params.opacity_range),
            seed=round(rnd.next() * 100000),
        ))

    placements.sort(key=lambda p: p.y)
    return placements
