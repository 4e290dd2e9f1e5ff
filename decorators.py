"""
Map decorations: compass rose, scale bar and page backgrounds.

Backgrounds are described by a BackgroundConfig (solid, gradient or
terrain fill, plus optional grain, vignette and frame) and expand into
<defs> entries and full-page rectangles.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any

from render_context import SeededRandom
from terrain_patterns import TerrainColors

NICE_SCALE_DISTANCES = (10, 20, 50, 100, 200, 500, 1000)
DEFAULT_SCALE_DISTANCE = 50


# ============ COMPASS ROSE ============

def generate_compass_rose(dwg, x: float, y: float, size: float = 60, color: str = "#374151"):
    """Compass rose centered at (x, y) with the needle pointing to the top of the page.

    Args:
        dwg: svgwrite Drawing (element factory)
        x: Center X
        y: Center Y
        size: Overall diameter in pixels
        color: Ink colour

    Returns:
        svgwrite Group
    """
    s = size / 60
    group = dwg.g(transform=f"translate({x}, {y})", class_="compass-rose")

    group.add(dwg.circle(center=(0, 0), r=30 * s, fill="white", stroke=color, stroke_width=2 * s, opacity=0.9))
    group.add(dwg.circle(center=(0, 0), r=28 * s, fill="none", stroke=color, stroke_width=0.5 * s))

    # Cardinal needles
    group.add(dwg.polygon(points=[(0, -25 * s), (4 * s, -8 * s), (0, -12 * s), (-4 * s, -8 * s)], fill=color))
    group.add(dwg.polygon(points=[(0, 25 * s), (4 * s, 8 * s), (0, 12 * s), (-4 * s, 8 * s)],
                          fill="white", stroke=color, stroke_width=0.5 * s))
    group.add(dwg.polygon(points=[(25 * s, 0), (8 * s, 4 * s), (12 * s, 0), (8 * s, -4 * s)],
                          fill="white", stroke=color, stroke_width=0.5 * s))
    group.add(dwg.polygon(points=[(-25 * s, 0), (-8 * s, 4 * s), (-12 * s, 0), (-8 * s, -4 * s)],
                          fill="white", stroke=color, stroke_width=0.5 * s))

    # Intercardinal needles
    for sx, sy in ((1, -1), (1, 1), (-1, 1), (-1, -1)):
        points = [(sx * 17 * s, sy * 17 * s), (sx * 6 * s, sy * 3 * s),
                  (sx * 8 * s, sy * 8 * s), (sx * 3 * s, sy * 6 * s)]
        group.add(dwg.polygon(points=points, fill=color, opacity=0.6))

    group.add(dwg.circle(center=(0, 0), r=3 * s, fill=color))
    group.add(dwg.text("N", insert=(0, -32 * s), text_anchor="middle", font_family="Georgia, serif",
                       font_weight="bold", font_size=8 * s, fill=color))
    return group


# ============ SCALE BAR ============

def nice_scale_distance(max_meters: float) -> int:
    """Largest round distance no longer than 80 % of max_meters (50 when none fits)."""
    limit = max_meters * 0.8
    fitting = [d for d in NICE_SCALE_DISTANCES if d <= limit]
    return fitting[-1] if fitting else DEFAULT_SCALE_DISTANCE


def generate_scale_bar(
    dwg,
    x: float,
    y: float,
    meters_per_pixel: float,
    max_width: float = 150,
    color: str = "#374151"
):
    """Four-segment alternating scale bar labelled in meters.

    Args:
        dwg: svgwrite Drawing (element factory)
        x: Left edge
        y: Top edge of the bar
        meters_per_pixel: Ground resolution of the map
        max_width: Available bar width in pixels
        color: Ink colour

    Returns:
        svgwrite Group, or None when the resolution is unusable
    """
    if not (meters_per_pixel > 0 and math.isfinite(meters_per_pixel)):
        return None

    distance = nice_scale_distance(max_width * meters_per_pixel)
    bar_width = distance / meters_per_pixel
    segment = bar_width / 4

    group = dwg.g(transform=f"translate({x}, {y})", class_="scale-bar")
    for i in range(4):
        group.add(dwg.rect(insert=(i * segment, 0), size=(segment, 6),
                           fill=color if i % 2 == 0 else "white", stroke=color, stroke_width=0.5))
    group.add(dwg.text("0", insert=(0, 16), font_family="Arial, sans-serif", font_size=9, fill=color))
    group.add(dwg.text(f"{distance}m", insert=(bar_width, 16), text_anchor="end",
                       font_family="Arial, sans-serif", font_size=9, fill=color))
    return group


# ============ BACKGROUNDS ============

@dataclass
class GradientStop:
    offset: float
    color: str


@dataclass
class BackgroundGradient:
    """Linear (angle in degrees, 0 = bottom to top) or radial gradient."""
    type: str = "radial"
    angle: float = 0
    stops: List[GradientStop] = field(default_factory=lambda: [
        GradientStop(0, "#86efac"), GradientStop(0.6, "#4ade80"), GradientStop(1, "#22c55e"),
    ])


@dataclass
class BackgroundConfig:
    """Page background: base fill plus optional atmosphere.

    Attributes:
        type: "solid", "gradient" or "terrain" (vector grass)
        solid_color: Fill for "solid"
        gradient: Gradient for "gradient"
        terrain_base_color: Primary grass colour for "terrain"
        enable_vignette: Darken the page edges
        vignette_color: Edge colour
        vignette_opacity: Edge opacity
        enable_noise_texture: Overlay a film grain
        noise_opacity: Grain opacity
        enable_frame: Stroke a rounded frame around the page
        frame_color: Frame colour
        frame_width: Frame stroke width
    """
    type: str = "terrain"
    solid_color: Optional[str] = None
    gradient: Optional[BackgroundGradient] = field(default_factory=BackgroundGradient)
    terrain_base_color: str = "#4ade80"
    enable_vignette: bool = True
    vignette_color: str = "#166534"
    vignette_opacity: float = 0.12
    enable_noise_texture: bool = True
    noise_opacity: float = 0.04
    enable_frame: bool = True
    frame_color: str = "#166534"
    frame_width: float = 3


def background_config_from_dict(data: Dict[str, Any]) -> BackgroundConfig:
    """BackgroundConfig from editor-style camelCase keys."""
    config = BackgroundConfig()
    keys = {
        "type": "type", "solidColor": "solid_color", "terrainBaseColor": "terrain_base_color",
        "enableVignette": "enable_vignette", "vignetteColor": "vignette_color",
        "vignetteOpacity": "vignette_opacity", "enableNoiseTexture": "enable_noise_texture",
        "noiseOpacity": "noise_opacity", "enableFrame": "enable_frame",
        "frameColor": "frame_color", "frameWidth": "frame_width",
    }
    for key, value in data.items():
        attr = keys.get(key, key)
        if attr == "gradient" and isinstance(value, dict):
            stops = [GradientStop(float(s.get("offset", 0)), s.get("color", "#ffffff"))
                     for s in value.get("stops", [])]
            config.gradient = BackgroundGradient(value.get("type", "radial"), float(value.get("angle", 0)), stops)
        elif hasattr(config, attr):
            setattr(config, attr, value)
    return config


def gradient_def(dwg, gradient_id: str, gradient: BackgroundGradient):
    """svgwrite gradient element for a BackgroundGradient."""
    if gradient.type == "radial":
        element = dwg.radialGradient(id=gradient_id, cx="50%", cy="50%", r="70%", fx="50%", fy="50%")
    else:
        rad = math.radians(gradient.angle)
        x2 = 50 + math.sin(rad) * 50
        y2 = 50 - math.cos(rad) * 50
        element = dwg.linearGradient(start=("50%", "0%"), end=(f"{x2:.0f}%", f"{y2:.0f}%"), id=gradient_id)
    for stop in gradient.stops:
        element.add_stop_color(f"{stop.offset * 100:.0f}%", stop.color)
    return element


def grain_pattern(dwg, pattern_id: str, scale: float = 1):
    """Transparent tile sprinkled with faint dark specks."""
    rnd = SeededRandom.with_seed(777)
    size = 40 * scale
    pattern = dwg.pattern(id=pattern_id, size=(size, size), patternUnits="userSpaceOnUse")
    pattern.add(dwg.rect(size=("100%", "100%"), fill="transparent"))
    for _ in range(60):
        x = rnd.next() * 40 * scale
        y = rnd.next() * 40 * scale
        r = rnd.next() * 0.8 + 0.2
        opacity = rnd.next() * 0.15 + 0.05
        pattern.add(dwg.circle(center=(round(x, 1), round(y, 1)), r=round(r, 1), fill="#000",
                               opacity=round(opacity, 2)))
    return pattern


def grass_background_pattern(dwg, pattern_id: str, colors, scale: float = 1):
    """Short uniform lawn used as a whole-page background."""
    s = scale
    size = 40 * s
    rnd = SeededRandom.with_seed(999)
    pattern = dwg.pattern(id=pattern_id, size=(round(size, 2), round(size, 2)), patternUnits="userSpaceOnUse")
    pattern.add(dwg.rect(size=("100%", "100%"), fill=colors.primary))

    for _ in range(50):
        x = rnd.next() * size
        y = rnd.next() * size
        height = (rnd.next() * 5 + 3) * s
        lean = (rnd.next() - 0.5) * 4 * s
        thickness = (rnd.next() * 0.4 + 0.5) * s
        pick = rnd.next()
        color = colors.accent if pick > 0.6 else colors.secondary if pick > 0.3 else colors.primary
        d = (f"M{x:.2f} {y + height:.2f} Q{x + lean * 0.5:.2f} {y + height * 0.5:.2f} "
             f"{x + lean:.2f} {y:.2f}")
        pattern.add(dwg.path(d=d, stroke=color, stroke_width=round(thickness, 2), fill="none",
                             stroke_linecap="round"))

    for _ in range(15):
        x = rnd.next() * size
        y = rnd.next() * size
        r = rnd.next() * 0.6 + 0.2
        pattern.add(dwg.circle(center=(round(x, 2), round(y, 2)), r=round(r * s, 2),
                               fill=colors.secondary, opacity=0.2))
    return pattern


def vignette_gradient(dwg, gradient_id: str, color: str = "#000", opacity: float = 0.2):
    """Radial gradient, clear in the middle, tinted at the edges."""
    gradient = dwg.radialGradient(id=gradient_id, cx="50%", cy="50%", r="70%", fx="50%", fy="50%")
    gradient.add_stop_color("0%", color, 0)
    gradient.add_stop_color("70%", color, 0)
    gradient.add_stop_color("100%", color, opacity)
    return gradient


def page_frame(dwg, width: float, height: float, color: str, frame_width: float = 3):
    """Rounded stroke just inside the page edge."""
    fw = frame_width
    return dwg.rect(insert=(fw / 2, fw / 2), size=(width - fw, height - fw), fill="none",
                    stroke=color, stroke_width=fw, rx=fw * 2)


def generate_background(ctx, config: BackgroundConfig, width: float, height: float,
                        include_fill: bool = True) -> List[Any]:
    """Background elements for a page; required gradients and patterns go to <defs>.

    Args:
        ctx: RenderContext
        config: Background description
        width: Page width
        height: Page height
        include_fill: Draw the base fill (off when a terrain layer already covers the page)

    Returns:
        Elements to draw, bottom first
    """
    dwg = ctx.dwg
    elements = []

    if include_fill:
        if config.type == "solid" and config.solid_color:
            elements.append(dwg.rect(size=(width, height), fill=config.solid_color))
        elif config.type == "gradient" and config.gradient:
            grad_id = ctx.unique_id("bg_gradient")
            ctx.add_def(gradient_def(dwg, grad_id, config.gradient))
            elements.append(dwg.rect(size=(width, height), fill=f"url(#{grad_id})"))
        elif config.type == "terrain":
            colors = TerrainColors(config.terrain_base_color or "#4ade80", "#22c55e", "#86efac")
            grass_id = ctx.unique_id("bg_grass")
            ctx.add_def(grass_background_pattern(dwg, grass_id, colors, max(width, height) / 800))
            elements.append(dwg.rect(size=(width, height), fill=f"url(#{grass_id})"))
        else:
            ctx.warn(f"unknown background type {config.type!r}")

    if config.enable_noise_texture and config.noise_opacity:
        noise_id = ctx.unique_id("noise")
        ctx.add_def(grain_pattern(dwg, noise_id, max(width, height) / 400))
        elements.append(dwg.rect(size=(width, height), fill=f"url(#{noise_id})", opacity=config.noise_opacity))

    if config.enable_vignette and config.vignette_color:
        vignette_id = ctx.unique_id("vignette")
        ctx.add_def(vignette_gradient(dwg, vignette_id, config.vignette_color, config.vignette_opacity))
        elements.append(dwg.rect(size=(width, height), fill=f"url(#{vignette_id})"))

    if config.enable_frame and config.frame_color and config.frame_width:
        elements.append(page_frame(dwg, width, height, config.frame_color, config.frame_width))

    return elements
