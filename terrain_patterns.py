"""
Procedural terrain textures.

Every terrain type has a generator that builds a tileable svgwrite
<pattern> from a three-colour palette and a scale factor. Generators draw
from a SeededRandom with a fixed per-terrain seed, so the same terrain,
palette and scale always produce the same markup. Grass and rough grass
can also be drawn from photo tiles sized in real-world meters.
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional, Any, Callable

from render_context import SeededRandom

GRASS_IMAGE = "grass.jpg"
HIGHGRASS_IMAGE = "highgrass.jpg"
IMAGE_TILE_SOURCE_SIZE = 128
MIN_TILE_PX = 30
MAX_TILE_PX = 800

DEFAULT_TERRAIN = "grass"


@dataclass(frozen=True)
class TerrainColors:
    primary: str
    secondary: str
    accent: str

    def key(self) -> str:
        return f"{self.primary}|{self.secondary}|{self.accent}"


TERRAIN_PALETTES: Dict[str, TerrainColors] = {
    "grass": TerrainColors("#4ade80", "#22c55e", "#86efac"),
    "roughGrass": TerrainColors("#84cc16", "#65a30d", "#bef264"),
    "forest": TerrainColors("#166534", "#14532d", "#22c55e"),
    "water": TerrainColors("#38bdf8", "#0ea5e9", "#7dd3fc"),
    "sand": TerrainColors("#fcd34d", "#fbbf24", "#fef3c7"),
    "path": TerrainColors("#d6d3d1", "#a8a29e", "#f5f5f4"),
    "concrete": TerrainColors("#9ca3af", "#6b7280", "#d1d5db"),
    "gravel": TerrainColors("#78716c", "#57534e", "#a8a29e"),
    "marsh": TerrainColors("#5eead4", "#2dd4bf", "#99f6e4"),
    "rocks": TerrainColors("#71717a", "#52525b", "#a1a1aa"),
}


def normalize_terrain_type(terrain_type: Optional[str]) -> str:
    """Known terrain type, or the grass default for anything else."""
    return terrain_type if terrain_type in TERRAIN_PALETTES else DEFAULT_TERRAIN


def get_terrain_colors(terrain_type: Optional[str],
                       custom_colors: Optional[Dict[str, str]] = None) -> TerrainColors:
    """Palette for a terrain type with any custom colour overrides applied."""
    defaults = TERRAIN_PALETTES[normalize_terrain_type(terrain_type)]
    custom = custom_colors or {}
    return TerrainColors(
        primary=custom.get("primary") or defaults.primary,
        secondary=custom.get("secondary") or defaults.secondary,
        accent=custom.get("accent") or defaults.accent,
    )


def _r(value: float) -> float:
    """Round to two decimals so output is stable and compact."""
    return round(value, 2)


def _pattern_shell(dwg, pattern_id: str, size: float, fill: Optional[str]):
    """Empty userSpaceOnUse pattern tile with an optional base fill."""
    pattern = dwg.pattern(id=pattern_id, size=(_r(size), _r(size)), patternUnits="userSpaceOnUse")
    if fill:
        pattern.add(dwg.rect(size=("100%", "100%"), fill=fill))
    return pattern


def _tiered(value: float, colors: TerrainColors, high: float, low: float, order: str) -> str:
    """Pick a palette colour by threshold: > high, > low, else.

    order names the three picks, e.g. "aps" = accent, primary, secondary.
    """
    names = {"a": colors.accent, "p": colors.primary, "s": colors.secondary}
    if value > high:
        return names[order[0]]
    if value > low:
        return names[order[1]]
    return names[order[2]]


# ============ GRASS - lush lawn ============

GRASS_CLUSTERS = [
    (8, 12), (24, 8), (40, 16),
    (12, 32), (32, 28), (44, 40),
    (4, 44), (20, 44), (36, 4),
]


def grass_pattern(dwg, pattern_id: str, colors: TerrainColors, scale: float = 1):
    s = scale
    size = 48 * s
    rnd = SeededRandom.with_seed(42)
    pattern = _pattern_shell(dwg, pattern_id, size, colors.primary)

    grad = dwg.linearGradient(start=("0%", "0%"), end=("100%", "100%"), id=f"{pattern_id}_grad")
    grad.add_stop_color("0%", colors.primary)
    grad.add_stop_color("50%", colors.secondary)
    grad.add_stop_color("100%", colors.primary)
    pattern.add(grad)
    pattern.add(dwg.rect(size=("100%", "100%"), fill=f"url(#{pattern_id}_grad)", opacity=0.3))

    for cx, cy in GRASS_CLUSTERS:
        blade_count = int(rnd.next() * 5) + 8
        for _ in range(blade_count):
            offset_x = (rnd.next() - 0.5) * 10 * s
            offset_y = (rnd.next() - 0.5) * 10 * s
            x = (cx * s + offset_x + size) % size
            y = (cy * s + offset_y + size) % size
            height = (rnd.next() * 6 + 4) * s
            lean = (rnd.next() - 0.5) * 4 * s
            curve = (rnd.next() - 0.5) * 2 * s
            thickness = (rnd.next() * 0.4 + 0.6) * s
            color = _tiered(rnd.next(), colors, 0.7, 0.3, "aps")
            d = (f"M{_r(x)} {_r(y + height)} "
                 f"Q{_r(x + lean * 0.3 + curve)} {_r(y + height * 0.6)} {_r(x + lean * 0.6)} {_r(y + height * 0.3)} "
                 f"Q{_r(x + lean * 0.8 - curve * 0.5)} {_r(y + height * 0.1)} {_r(x + lean)} {_r(y)}")
            pattern.add(dwg.path(d=d, stroke=color, stroke_width=_r(thickness), fill="none",
                                 stroke_linecap="round", opacity=_r(rnd.next() * 0.3 + 0.7)))

    for _ in range(30):
        x = rnd.next() * size
        y = rnd.next() * size
        r = rnd.next() * 0.5 + 0.2
        pattern.add(dwg.circle(center=(_r(x), _r(y)), r=_r(r * s), fill=colors.secondary,
                               opacity=_r(rnd.next() * 0.2 + 0.1)))
    return pattern


# ============ ROUGH GRASS - wild meadow ============

def rough_grass_pattern(dwg, pattern_id: str, colors: TerrainColors, scale: float = 1):
    s = scale
    size = 64 * s
    rnd = SeededRandom.with_seed(123)
    pattern = _pattern_shell(dwg, pattern_id, size, colors.primary)

    for _ in range(60):
        x = rnd.next() * size
        y = rnd.next() * size
        height = (rnd.next() * 16 + 10) * s
        lean = (rnd.next() - 0.5) * 12 * s
        wave = rnd.next() * 4 * s
        thickness = (rnd.next() * 0.6 + 0.8) * s
        color = _tiered(rnd.next(), colors, 0.6, 0.3, "asp")
        d = (f"M{_r(x)} {_r(y + height)} "
             f"C{_r(x + wave)} {_r(y + height * 0.75)} {_r(x + lean * 0.4 - wave)} {_r(y + height * 0.5)} "
             f"{_r(x + lean * 0.5 + wave * 0.5)} {_r(y + height * 0.35)} "
             f"C{_r(x + lean * 0.7)} {_r(y + height * 0.2)} {_r(x + lean * 0.9)} {_r(y + height * 0.1)} "
             f"{_r(x + lean)} {_r(y)}")
        pattern.add(dwg.path(d=d, stroke=color, stroke_width=_r(thickness), fill="none",
                             stroke_linecap="round", opacity=_r(rnd.next() * 0.25 + 0.75)))

        # Seed heads on some blades
        if rnd.next() > 0.7:
            seed_x = x + lean
            seed_y = y
            tilt = 15 if lean > 0 else -15
            pattern.add(dwg.ellipse(center=(_r(seed_x), _r(seed_y - 2 * s)), r=(_r(1.5 * s), _r(4 * s)),
                                    fill=colors.accent, opacity=0.8,
                                    transform=f"rotate({tilt} {_r(seed_x)} {_r(seed_y)})"))

    for _ in range(20):
        x = rnd.next() * size
        y = rnd.next() * size
        pattern.add(dwg.ellipse(center=(_r(x), _r(y)), r=(_r(2 * s), _r(1 * s)),
                                fill=colors.secondary, opacity=0.2))
    return pattern


# ============ FOREST - canopy from above ============

FOREST_CANOPY = [
    (12, 14, 11), (36, 10, 9), (58, 18, 10), (8, 38, 8),
    (28, 32, 12), (52, 36, 9), (68, 48, 10), (18, 58, 9),
    (44, 56, 11), (64, 68, 8), (4, 66, 7),
]


def forest_pattern(dwg, pattern_id: str, colors: TerrainColors, scale: float = 1):
    s = scale
    size = 72 * s
    rnd = SeededRandom.with_seed(456)
    pattern = _pattern_shell(dwg, pattern_id, size, colors.primary)

    for tx, ty, tr in FOREST_CANOPY:
        x, y, r = tx * s, ty * s, tr * s

        pattern.add(dwg.circle(center=(_r(x + 2 * s), _r(y + 2 * s)), r=_r(r),
                               fill=colors.secondary, opacity=0.4))

        blob_count = 5 + int(rnd.next() * 3)
        for i in range(blob_count):
            angle = (i / blob_count) * math.pi * 2 + rnd.next() * 0.5
            dist = r * 0.3 * rnd.next()
            blob_x = x + math.cos(angle) * dist
            blob_y = y + math.sin(angle) * dist
            blob_r = r * (0.6 + rnd.next() * 0.5)
            color = _tiered(rnd.next(), colors, 0.6, 0.3, "aps")
            pattern.add(dwg.circle(center=(_r(blob_x), _r(blob_y)), r=_r(blob_r), fill=color,
                                   opacity=_r(0.7 + rnd.next() * 0.3)))

        pattern.add(dwg.circle(center=(_r(x - r * 0.25), _r(y - r * 0.25)), r=_r(r * 0.35),
                               fill=colors.accent, opacity=0.5))
        pattern.add(dwg.circle(center=(_r(x + r * 0.1), _r(y + r * 0.1)), r=_r(r * 0.2),
                               fill=colors.secondary, opacity=0.3))

    # Undergrowth
    for _ in range(25):
        x = rnd.next() * size
        y = rnd.next() * size
        r = rnd.next() * 1.5 + 0.5
        pattern.add(dwg.circle(center=(_r(x), _r(y)), r=_r(r * s), fill=colors.secondary,
                               opacity=_r(rnd.next() * 0.3 + 0.1)))
    return pattern


# ============ WATER - calm surface ============

def water_pattern(dwg, pattern_id: str, colors: TerrainColors, scale: float = 1):
    s = scale
    size = 60 * s
    rnd = SeededRandom.with_seed(789)
    pattern = _pattern_shell(dwg, pattern_id, size, colors.primary)

    grad = dwg.linearGradient(start=("0%", "0%"), end=("100%", "100%"), id=f"{pattern_id}_water_grad")
    grad.add_stop_color("0%", colors.secondary, 0.3)
    grad.add_stop_color("30%", colors.primary, 0)
    grad.add_stop_color("70%", colors.primary, 0)
    grad.add_stop_color("100%", colors.secondary, 0.3)
    pattern.add(grad)
    pattern.add(dwg.rect(size=("100%", "100%"), fill=f"url(#{pattern_id}_water_grad)"))

    for row in range(6):
        y = (row * 10 + 5) * s
        offset = (row % 2) * 15 * s
        amplitude = (1.5 + rnd.next()) * s
        d = (f"M{_r(-10 + offset)} {_r(y)} "
             f"Q{_r(5 + offset)} {_r(y - amplitude)} {_r(20 + offset)} {_r(y)} "
             f"Q{_r(35 + offset)} {_r(y + amplitude)} {_r(50 + offset)} {_r(y)} "
             f"Q{_r(65 + offset)} {_r(y - amplitude)} {_r(80 + offset)} {_r(y)}")
        pattern.add(dwg.path(d=d, stroke=colors.accent, stroke_width=_r(0.8 * s), fill="none",
                             stroke_linecap="round", opacity=_r(0.3 + rnd.next() * 0.2)))

    # Sparkles
    for _ in range(15):
        x = rnd.next() * size
        y = rnd.next() * size
        sparkle = (rnd.next() * 1.5 + 0.5) * s
        opacity = _r(rnd.next() * 0.4 + 0.2)
        tilt = round(rnd.next() * 30 - 15)
        pattern.add(dwg.ellipse(center=(_r(x), _r(y)), r=(_r(sparkle), _r(sparkle * 0.5)),
                                fill="#ffffff", opacity=opacity,
                                transform=f"rotate({tilt} {_r(x)} {_r(y)})"))

    # Depth variation
    for _ in range(8):
        x = rnd.next() * size
        y = rnd.next() * size
        r = (rnd.next() * 8 + 4) * s
        pattern.add(dwg.circle(center=(_r(x), _r(y)), r=_r(r), fill=colors.secondary,
                               opacity=_r(rnd.next() * 0.1 + 0.05)))
    return pattern


# ============ SAND / PATH - stippled grains ============

def _grain_pattern(dwg, pattern_id: str, colors: TerrainColors, scale: float, seed: int,
                   grains: int = 200, ripples: int = 5, pebbles: int = 10):
    s = scale
    size = 50 * s
    rnd = SeededRandom.with_seed(seed)
    pattern = _pattern_shell(dwg, pattern_id, size, colors.primary)

    for _ in range(grains):
        x = rnd.next() * size
        y = rnd.next() * size
        r = (rnd.next() * 0.6 + 0.2) * s
        color = _tiered(rnd.next(), colors, 0.7, 0.4, "aps")
        pattern.add(dwg.circle(center=(_r(x), _r(y)), r=_r(r), fill=color,
                               opacity=_r(rnd.next() * 0.5 + 0.3)))

    # Wind ripples
    for i in range(ripples):
        y = (i * 10 + 5 + rnd.next() * 5) * s
        start_x = rnd.next() * 10 * s
        curve = (rnd.next() - 0.5) * 4 * s
        d = f"M{_r(start_x)} {_r(y)} Q{_r(size * 0.5)} {_r(y + curve)} {_r(size - start_x)} {_r(y)}"
        pattern.add(dwg.path(d=d, stroke=colors.secondary, stroke_width=_r(0.5 * s), fill="none",
                             opacity=0.15))

    for _ in range(pebbles):
        x = rnd.next() * size
        y = rnd.next() * size
        rx = (rnd.next() * 1.2 + 0.6) * s
        ry = (rnd.next() * 0.8 + 0.4) * s
        rotation = rnd.next() * 180
        pattern.add(dwg.ellipse(center=(_r(x), _r(y)), r=(_r(rx), _r(ry)), fill=colors.secondary,
                                opacity=_r(rnd.next() * 0.3 + 0.2),
                                transform=f"rotate({round(rotation)} {_r(x)} {_r(y)})"))
    return pattern


def sand_pattern(dwg, pattern_id: str, colors: TerrainColors, scale: float = 1):
    return _grain_pattern(dwg, pattern_id, colors, scale, seed=234)


def path_pattern(dwg, pattern_id: str, colors: TerrainColors, scale: float = 1):
    """Packed walking path: sand-style grains on their own seed, fewer ripples."""
    return _grain_pattern(dwg, pattern_id, colors, scale, seed=901, grains=160, ripples=2, pebbles=14)


# ============ CONCRETE - paved surface ============

def concrete_pattern(dwg, pattern_id: str, colors: TerrainColors, scale: float = 1):
    s = scale
    size = 80 * s
    rnd = SeededRandom.with_seed(567)
    pattern = _pattern_shell(dwg, pattern_id, size, colors.primary)

    # Expansion joints
    joint = _r(0.8 * s)
    half = _r(size / 2)
    pattern.add(dwg.line(start=(0, half), end=(_r(size), half), stroke=colors.secondary,
                         stroke_width=joint, opacity=0.4))
    pattern.add(dwg.line(start=(half, 0), end=(half, _r(size)), stroke=colors.secondary,
                         stroke_width=joint, opacity=0.4))

    for _ in range(80):
        x = rnd.next() * size
        y = rnd.next() * size
        r = (rnd.next() * 1.2 + 0.3) * s
        pattern.add(dwg.circle(center=(_r(x), _r(y)), r=_r(r), fill=colors.secondary,
                               opacity=_r(rnd.next() * 0.12 + 0.04)))

    # Aggregate specks
    for _ in range(40):
        x = rnd.next() * size
        y = rnd.next() * size
        r = (rnd.next() * 0.8 + 0.2) * s
        color = colors.accent if rnd.next() > 0.5 else colors.secondary
        pattern.add(dwg.circle(center=(_r(x), _r(y)), r=_r(r), fill=color,
                               opacity=_r(rnd.next() * 0.2 + 0.1)))

    # Hairline cracks
    for _ in range(3):
        start_x = rnd.next() * size
        start_y = rnd.next() * size
        length = (rnd.next() * 15 + 5) * s
        angle = rnd.next() * math.pi
        end_x = start_x + math.cos(angle) * length
        end_y = start_y + math.sin(angle) * length
        mid_x = (start_x + end_x) / 2 + (rnd.next() - 0.5) * 3 * s
        mid_y = (start_y + end_y) / 2 + (rnd.next() - 0.5) * 3 * s
        d = f"M{_r(start_x)} {_r(start_y)} Q{_r(mid_x)} {_r(mid_y)} {_r(end_x)} {_r(end_y)}"
        pattern.add(dwg.path(d=d, stroke=colors.secondary, stroke_width=_r(0.3 * s), fill="none",
                             opacity=0.2))
    return pattern


# ============ GRAVEL - loose angular stones ============

def gravel_pattern(dwg, pattern_id: str, colors: TerrainColors, scale: float = 1):
    s = scale
    size = 40 * s
    rnd = SeededRandom.with_seed(345)
    pattern = _pattern_shell(dwg, pattern_id, size, colors.primary)

    for _ in range(90):
        x = rnd.next() * size
        y = rnd.next() * size
        radius = (rnd.next() * 1.4 + 0.6) * s
        sides = 4 + int(rnd.next() * 3)
        start = rnd.next() * math.pi
        points = []
        for k in range(sides):
            angle = start + k * 2 * math.pi / sides
            reach = radius * (0.7 + rnd.next() * 0.3)
            points.append((_r(x + math.cos(angle) * reach), _r(y + math.sin(angle) * reach)))
        color = _tiered(rnd.next(), colors, 0.65, 0.3, "aps")
        pattern.add(dwg.polygon(points=points, fill=color, opacity=_r(rnd.next() * 0.4 + 0.5)))

    # Dark gaps between stones
    for _ in range(40):
        x = rnd.next() * size
        y = rnd.next() * size
        pattern.add(dwg.circle(center=(_r(x), _r(y)), r=_r((rnd.next() * 0.4 + 0.2) * s),
                               fill=colors.secondary, opacity=0.35))
    return pattern


# ============ MARSH - reeds over shallow water ============

def marsh_pattern(dwg, pattern_id: str, colors: TerrainColors, scale: float = 1):
    s = scale
    size = 60 * s
    rnd = SeededRandom.with_seed(678)
    pattern = _pattern_shell(dwg, pattern_id, size, colors.primary)

    # Open water patches
    for _ in range(10):
        x = rnd.next() * size
        y = rnd.next() * size
        rx = (rnd.next() * 6 + 3) * s
        ry = rx * (0.4 + rnd.next() * 0.3)
        pattern.add(dwg.ellipse(center=(_r(x), _r(y)), r=(_r(rx), _r(ry)), fill=colors.accent,
                                opacity=_r(rnd.next() * 0.2 + 0.2)))

    # Reed clumps
    for _ in range(22):
        base_x = rnd.next() * size
        base_y = rnd.next() * size
        stems = 3 + int(rnd.next() * 3)
        for _ in range(stems):
            height = (rnd.next() * 8 + 6) * s
            lean = (rnd.next() - 0.5) * 5 * s
            x = base_x + (rnd.next() - 0.5) * 3 * s
            color = _tiered(rnd.next(), colors, 0.7, 0.35, "ssp")
            d = f"M{_r(x)} {_r(base_y)} Q{_r(x + lean * 0.3)} {_r(base_y - height * 0.5)} {_r(x + lean)} {_r(base_y - height)}"
            pattern.add(dwg.path(d=d, stroke=color, stroke_width=_r((rnd.next() * 0.5 + 0.6) * s),
                                 fill="none", stroke_linecap="round", opacity=0.85))
        # Cattail head on some clumps
        if rnd.next() > 0.6:
            pattern.add(dwg.ellipse(center=(_r(base_x), _r(base_y - 8 * s)), r=(_r(0.9 * s), _r(2.5 * s)),
                                    fill="#78350f", opacity=0.7))
    return pattern


# ============ ROCKS - boulders and scree ============

def rocks_pattern(dwg, pattern_id: str, colors: TerrainColors, scale: float = 1):
    s = scale
    size = 70 * s
    rnd = SeededRandom.with_seed(890)
    pattern = _pattern_shell(dwg, pattern_id, size, colors.primary)

    for _ in range(12):
        x = rnd.next() * size
        y = rnd.next() * size
        radius = (rnd.next() * 5 + 3) * s
        sides = 6 + int(rnd.next() * 3)
        points = []
        for k in range(sides):
            angle = k * 2 * math.pi / sides
            reach = radius * (0.75 + rnd.next() * 0.25)
            points.append((_r(x + math.cos(angle) * reach), _r(y + math.sin(angle) * reach)))

        shadow = [(px + _r(1.2 * s), py + _r(1.2 * s)) for px, py in points]
        pattern.add(dwg.polygon(points=shadow, fill=colors.secondary, opacity=0.5))
        pattern.add(dwg.polygon(points=points, fill=colors.primary, stroke=colors.secondary,
                                stroke_width=_r(0.4 * s)))
        pattern.add(dwg.circle(center=(_r(x - radius * 0.3), _r(y - radius * 0.3)), r=_r(radius * 0.35),
                               fill=colors.accent, opacity=0.45))

    for _ in range(30):
        x = rnd.next() * size
        y = rnd.next() * size
        pattern.add(dwg.circle(center=(_r(x), _r(y)), r=_r((rnd.next() * 0.9 + 0.3) * s),
                               fill=_tiered(rnd.next(), colors, 0.5, -1.0, "ass"),
                               opacity=_r(rnd.next() * 0.3 + 0.3)))
    return pattern


PATTERN_GENERATORS: Dict[str, Callable[..., Any]] = {
    "grass": grass_pattern,
    "roughGrass": rough_grass_pattern,
    "forest": forest_pattern,
    "water": water_pattern,
    "sand": sand_pattern,
    "path": path_pattern,
    "concrete": concrete_pattern,
    "gravel": gravel_pattern,
    "marsh": marsh_pattern,
    "rocks": rocks_pattern,
}


def generate_terrain_pattern(
    ctx,
    terrain_type: str,
    colors: TerrainColors,
    scale: float = 1,
    render_mode: str = "detailed"
):
    """Build a terrain pattern with a fresh document id.

    Args:
        ctx: RenderContext (id counter and element factory)
        terrain_type: Terrain type; unknown types render as grass
        colors: Palette
        scale: Tile scale factor
        render_mode: "detailed", or "minimal" for a flat 10x10 tile

    Returns:
        svgwrite Pattern element (not yet added to defs)
    """
    if terrain_type not in PATTERN_GENERATORS:
        ctx.warn(f"unknown terrain type {terrain_type!r}, using {DEFAULT_TERRAIN}")
        terrain_type = DEFAULT_TERRAIN

    pattern_id = ctx.unique_id(f"terrain_{terrain_type}")

    if render_mode == "minimal":
        return _pattern_shell(ctx.dwg, pattern_id, 10, colors.primary)

    return PATTERN_GENERATORS[terrain_type](ctx.dwg, pattern_id, colors, scale)


def terrain_fill(ctx, terrain_type: str, colors: TerrainColors, scale: float = 1,
                 render_mode: str = "detailed") -> str:
    """fill value for a terrain, defining its pattern once per document."""
    key = f"{terrain_type}|{colors.key()}|{scale}|{render_mode}"
    pattern_id = ctx.cached_pattern(
        key, lambda c: generate_terrain_pattern(c, terrain_type, colors, scale, render_mode)
    )
    return f"url(#{pattern_id})"


# ============ PHOTO TILES ============

def image_tile_size(meters_per_pixel: float, meters_per_tile: float) -> int:
    """Tile edge in pixels for a photo tile covering meters_per_tile, clamped to [30, 800]."""
    if meters_per_pixel <= 0 or not math.isfinite(meters_per_pixel):
        return MAX_TILE_PX
    tile = meters_per_tile / meters_per_pixel
    return int(round(max(MIN_TILE_PX, min(MAX_TILE_PX, tile))))


def image_tile_pattern(ctx, base_id: str, meters_per_pixel: float, meters_per_tile: float = 5,
                       asset: str = GRASS_IMAGE):
    """Pattern tiling a raster asset at a real-world size.

    The image is referenced by file name, or inlined when the context's
    image cache holds it.
    """
    size = image_tile_size(meters_per_pixel, meters_per_tile)
    dwg = ctx.dwg
    pattern = dwg.pattern(id=ctx.unique_id(base_id), size=(size, size), patternUnits="userSpaceOnUse")
    pattern.viewbox(0, 0, IMAGE_TILE_SOURCE_SIZE, IMAGE_TILE_SOURCE_SIZE)
    pattern.add(dwg.image(href=ctx.href(asset), size=(IMAGE_TILE_SOURCE_SIZE, IMAGE_TILE_SOURCE_SIZE)))
    return pattern


def grass_image_background(ctx, meters_per_pixel: float, meters_per_tile: float = 5):
    return image_tile_pattern(ctx, "grass_bg", meters_per_pixel, meters_per_tile, GRASS_IMAGE)


def highgrass_image_background(ctx, meters_per_pixel: float, meters_per_tile: float = 5):
    return image_tile_pattern(ctx, "highgrass_bg", meters_per_pixel, meters_per_tile, HIGHGRASS_IMAGE)


# ============ TREE IMAGES ============

TREE_IMAGES = ("tree1.png", "tree2.png", "tree3.png", "tree4.png")
TREE_SYMBOL_SIZE = 100


def tree_symbol_id(image_name: str) -> str:
    """Symbol id for a tree image ('tree2.png' -> 'tree_img_tree2')."""
    return f"tree_img_{image_name.rsplit('.', 1)[0]}"


def tree_image_symbols(ctx) -> Dict[str, str]:
    """Define one reusable <symbol> per tree image.

    Each forest tree is then a <use> of its symbol, so embedded image data
    appears once per document however many trees are drawn.

    Returns:
        Symbol id by image name
    """
    dwg = ctx.dwg
    ids = {}
    for name in TREE_IMAGES:
        symbol_id = tree_symbol_id(name)
        if symbol_id not in ctx.patterns:
            symbol = dwg.symbol(id=symbol_id)
            symbol.viewbox(0, 0, TREE_SYMBOL_SIZE, TREE_SYMBOL_SIZE)
            symbol['preserveAspectRatio'] = "xMidYMid meet"
            symbol.add(dwg.image(href=ctx.href(name), size=(TREE_SYMBOL_SIZE, TREE_SYMBOL_SIZE)))
            ctx.add_def(symbol)
            ctx.patterns[symbol_id] = symbol_id
        ids[name] = symbol_id
    return ids
