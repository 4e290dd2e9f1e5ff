"""
Shared feature drawing pipeline.

Every layout draws its features through one DrawPipeline: the layout
supplies a viewport, the course style, DrawOptions and an ordered list of
layer names, and the pipeline draws each feature into the layer of its
kind. Stacking comes from the layer list alone; a kind whose layer is not
in the list is not drawn.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence, Type

from collision import (
    BoundingBox, PRIORITY_BASKET, PRIORITY_DROPZONE, PRIORITY_MANDATORY, PRIORITY_TEE, place_distance_label
)
from course_model import (
    Annotation, Basket, CourseStyle, Dropzone, DropzoneArea, Fairway, Feature, FlightLine, Landmark,
    Mandatory, OBLine, OBZone, PathLine, Tee, TerrainArea, Tree
)
from export_config import FEET_PER_METER
from landmarks import landmark_marker
from map_utils import LayerManager, Viewport, line_string_to_svg, polygon_to_path, project_coords
from markers import (
    BASKET_SIZE, BASKET_TOP_RADIUS, DROPZONE_SIZE, MANDATORY_BOX, TEE_SIZE,
    annotation_marker, basket_marker, basket_top_view, dropzone_marker, mandatory_marker, tee_marker
)
from render_helpers import geo_line_length_meters
from terrain_patterns import (
    get_terrain_colors, grass_image_background, highgrass_image_background, terrain_fill, tree_image_symbols
)
from trees import (
    course_map_forest_params, forest_seed, generate_forest_tree_placements, image_tree, polygon_shape,
    side_view_forest_params, side_view_tree, tee_sign_forest_params, top_view_tree, tree_image_for
)

# Ordered layers of the course overview map, bottom first
COURSE_MAP_LAYERS = [
    "background", "terrain", "paths", "trees", "forest", "landmarks",
    "fairway", "dropzoneArea", "obLine", "obZone", "flightLine",
    "dropzone", "mandatory", "annotation", "tee", "basket",
    "labels", "title", "compass", "scaleBar", "legend",
]

FAIRWAY_GLOW = "#22c55e"
OB_GLOW = "#dc2626"
OB_LINE_COLOR = "#dc2626"
PATH_COLOR = "#a8a29e"
PATH_WIDTH = 4
ANNOTATION_BORDER = "#e5e7eb"
ANNOTATION_FONT = "sans-serif"


@dataclass
class DrawOptions:
    """Per-layout drawing constants.

    Attributes:
        marker_scale: Size factor for point markers
        label_scale: Size factor for distance labels
        annotation_scale: Size factor for annotation boxes and their font
        glow_offset: Sideways shift of the fairway/OB glow strokes
        glow_width: Width of the glow strokes
        boundary_width: Width of OB line and dropzone-area boundaries
        flight_width_factor: Multiplier of the style's flight line width
        flight_dash: Dash pattern of flight lines
        hole_numbers: Hole number by hole id shown on tee pads (empty = tee names)
        tee_rotation: Fixed tee pad rotation, or None for each tee's own
        dropzone_rotation: Fixed dropzone rotation, or None for each dropzone's own
        top_view_baskets: Draw baskets from above
        register_collisions: Register marker boxes for label placement
        terrain_opacity: Opacity of terrain polygons without their own
        terrain_scale: Pattern scale of terrain polygons
        image_terrain: Fill grass and rough grass with photo tiles
        photo_tile_meters: Ground size of one photo tile
        forest_style: "vector", "image" or "side"
        counter_rotation: Map rotation cancelled by upright elements (side-view trees)
        units: "meters" or "feet" for distance labels
    """
    marker_scale: float = 1.0
    label_scale: float = 1.0
    annotation_scale: float = 1.0
    glow_offset: float = 6
    glow_width: float = 12
    boundary_width: float = 3
    flight_width_factor: float = 1.0
    flight_dash: str = "8 4"
    hole_numbers: Dict[str, int] = field(default_factory=dict)
    tee_rotation: Optional[float] = None
    dropzone_rotation: Optional[float] = None
    top_view_baskets: bool = False
    register_collisions: bool = True
    terrain_opacity: float = 0.9
    terrain_scale: float = 1.0
    image_terrain: bool = False
    photo_tile_meters: float = 10
    forest_style: str = "vector"
    counter_rotation: float = 0
    units: str = "meters"


def _f(value: float) -> float:
    return round(value, 2)


def format_distance(meters: float, units: str = "meters") -> str:
    """Rounded distance label text ('111m' or '364ft')."""
    if units == "feet":
        return f"{round(meters * FEET_PER_METER)}ft"
    return f"{round(meters)}m"


class DrawPipeline:
    """Draws course features into ordered layer groups.

    Attributes:
        ctx: RenderContext of the document
        viewport: Viewport features are projected through
        style: Course style
        options: Layout drawing constants
        layers: LayerManager holding one group per layer name
    """

    def __init__(self, ctx, viewport: Viewport, style: CourseStyle, options: DrawOptions,
                 layer_names: Sequence[str], id_prefix: str = "layer"):
        self.ctx = ctx
        self.dwg = ctx.dwg
        self.viewport = viewport
        self.style = style
        self.options = options
        self.layers = LayerManager(ctx.dwg, id_prefix)
        self.layers.register_layers(layer_names)
        self._meters_per_pixel = viewport.meters_per_pixel()

    @property
    def meters_per_pixel(self) -> float:
        return self._meters_per_pixel

    def layer(self, name: str):
        """Group of a named layer, or None when the layout has no such layer."""
        return self.layers.get_layer(name)

    def add(self, layer_name: str, element) -> bool:
        """Add an element to a layer; False when the layer does not exist."""
        group = self.layer(layer_name)
        if group is None or element is None:
            return False
        group.add(element)
        return True

    def point(self, feature: Feature):
        return self.viewport.geo_to_svg(feature.coordinates)

    def _register(self, element_id: str, bbox: BoundingBox, priority: int):
        if self.options.register_collisions:
            self.ctx.collisions.add_element(element_id, bbox, priority)

    # === Dispatch ===

    def draw_features(self, features: Sequence[Feature]) -> int:
        """Draw features layer by layer in stacking order.

        Returns:
            Number of features drawn
        """
        drawn = 0
        for name in self.layers.layer_names():
            for feature in features:
                if layer_for(feature) != name:
                    continue
                drawer = FEATURE_DRAWERS.get(type(feature))
                if drawer is None:
                    self.ctx.warn(f"no renderer for {type(feature).__name__}")
                    continue
                drawer(self, feature)
                drawn += 1
        return drawn

    def assemble(self, parent, transform: Optional[str] = None, skip_empty: bool = True):
        """Add the layer groups to a parent in stacking order."""
        self.layers.assemble_into_group(parent, self.layers.get_layers_by_z_order(skip_empty=skip_empty),
                                        transform)
        return parent

    # === Distance labels ===

    def draw_distance_labels(self, flight_lines: Sequence[FlightLine]) -> int:
        """Distance label per flight line, placed after every marker is registered.

        A label moved away from its line gets a leader line and an anchor dot.

        Returns:
            Number of labels drawn
        """
        group = self.layer("labels")
        if group is None:
            return 0

        count = 0
        for index, line in enumerate(flight_lines):
            coords = line.coordinates
            if len(coords) < 2:
                continue

            color = line.color or self.style.default_flight_line_color
            text = format_distance(geo_line_length_meters(coords), self.options.units)

            label = place_distance_label(
                self.ctx.collisions, f"label-{index}", text, project_coords(coords, self.viewport),
                self.options.label_scale
            )
            group.add(self._distance_label(label, text, color))
            count += 1
        return count

    def _distance_label(self, label, text: str, color: str):
        dwg = self.dwg
        ls = self.options.label_scale
        wrapper = dwg.g(class_="distance-label")
        if label.needs_leader:
            anchor = (_f(label.anchor_x), _f(label.anchor_y))
            wrapper.add(dwg.line(start=anchor, end=(_f(label.x), _f(label.y)),
                                 stroke=color, stroke_width=_f(ls), stroke_opacity=0.5))
            wrapper.add(dwg.circle(center=anchor, r=_f(3 * ls), fill=color, opacity=0.5))
        box = dwg.g(transform=f"translate({_f(label.x)}, {_f(label.y)})")
        box.add(dwg.rect(insert=(_f(-label.width / 2), _f(-label.height / 2)),
                         size=(_f(label.width), _f(label.height)), rx=_f(10 * ls), fill="white",
                         stroke=color, stroke_width=_f(2 * ls)))
        box.add(dwg.text(text, insert=(0, _f(label.font_size / 3)), text_anchor="middle",
                         font_family="Arial, sans-serif", font_weight="bold",
                         font_size=_f(label.font_size), fill=color))
        wrapper.add(box)
        return wrapper


def layer_for(feature: Feature) -> str:
    """Layer a feature is drawn into."""
    if isinstance(feature, TerrainArea):
        return "forest" if feature.terrain_type == "forest" else "terrain"
    return LAYER_BY_KIND.get(type(feature), "")


LAYER_BY_KIND: Dict[Type[Feature], str] = {
    PathLine: "paths",
    Tree: "trees",
    Landmark: "landmarks",
    Fairway: "fairway",
    DropzoneArea: "dropzoneArea",
    OBLine: "obLine",
    OBZone: "obZone",
    FlightLine: "flightLine",
    Dropzone: "dropzone",
    Mandatory: "mandatory",
    Annotation: "annotation",
    Tee: "tee",
    Basket: "basket",
}


# === Area features ===

def _terrain_fill(pipe: DrawPipeline, feature: TerrainArea) -> str:
    ctx = pipe.ctx
    options = pipe.options
    terrain_type = feature.terrain_type
    if options.image_terrain and terrain_type in ("grass", "roughGrass"):
        build = grass_image_background if terrain_type == "grass" else highgrass_image_background
        pattern_id = ctx.cached_pattern(
            f"photo|{terrain_type}|{options.photo_tile_meters}",
            lambda c: build(c, pipe.meters_per_pixel, options.photo_tile_meters)
        )
        return f"url(#{pattern_id})"
    colors = get_terrain_colors(terrain_type, feature.custom_colors)
    return terrain_fill(ctx, terrain_type, colors, options.terrain_scale)


def draw_terrain(pipe: DrawPipeline, feature: TerrainArea):
    if feature.terrain_type == "forest":
        draw_forest(pipe, feature)
        return

    ring = feature.ring
    opacity = feature.opacity if feature.opacity is not None else pipe.options.terrain_opacity
    radius_px = 0.0
    if feature.corner_radius and feature.corner_radius > 0 and pipe.meters_per_pixel > 0:
        radius_px = feature.corner_radius / pipe.meters_per_pixel

    d = polygon_to_path(ring, pipe.viewport, radius_px)
    if not d:
        pipe.ctx.warn(f"skipping degenerate terrain polygon {feature.id}")
        return
    pipe.add("terrain", pipe.dwg.path(d=d, fill=_terrain_fill(pipe, feature), opacity=_f(opacity),
                                      class_=f"terrain terrain-{feature.terrain_type}"))


def draw_forest(pipe: DrawPipeline, feature: TerrainArea):
    """Fill a forest polygon with individual trees."""
    options = pipe.options
    polygon = [(x, y) for x, y in project_coords(feature.ring, pipe.viewport)]
    shape = polygon_shape(polygon)
    if shape is None:
        pipe.ctx.warn(f"skipping degenerate forest polygon {feature.id}")
        return

    if options.forest_style == "image":
        params = tee_sign_forest_params(shape, pipe.meters_per_pixel)
    elif options.forest_style == "side":
        params = side_view_forest_params(shape)
    else:
        params = course_map_forest_params(shape, options.marker_scale)

    placements = generate_forest_tree_placements(polygon, forest_seed(feature.id), params)
    pipe.ctx.log(f"Forest {feature.id}: {len(placements)} of {params.tree_count} trees placed")

    group = pipe.dwg.g(class_="forest")
    if options.forest_style == "image":
        tree_image_symbols(pipe.ctx)
    for p in placements:
        if options.forest_style == "image":
            group.add(image_tree(pipe.ctx, p.x, p.y, p.kind, p.size, p.rotation, p.opacity,
                                 pipe.meters_per_pixel))
        elif options.forest_style == "side":
            group.add(side_view_tree(pipe.dwg, p.x, p.y, p.kind, p.size, p.opacity, p.seed,
                                     options.counter_rotation))
        else:
            group.add(top_view_tree(pipe.dwg, p.x, p.y, p.kind, p.size, p.rotation, p.opacity,
                                    options.marker_scale))
    pipe.add("forest", group)


def draw_fairway(pipe: DrawPipeline, feature: Fairway):
    points = [(_f(x), _f(y)) for x, y in project_coords(feature.ring, pipe.viewport)]
    if len(points) < 3:
        return
    pipe.add("fairway", pipe.dwg.polygon(points=points, fill=feature.color or pipe.style.fairway_color,
                                         fill_opacity=pipe.style.fairway_opacity, class_="fairway"))


def draw_ob_zone(pipe: DrawPipeline, feature: OBZone):
    points = [(_f(x), _f(y)) for x, y in project_coords(feature.ring, pipe.viewport)]
    if len(points) < 3:
        return
    color = feature.color or pipe.style.ob_zone_color
    pipe.add("obZone", pipe.dwg.polygon(points=points, fill=color, fill_opacity=pipe.style.ob_zone_opacity,
                                        stroke=color, stroke_width=2, stroke_dasharray="8 4", class_="ob-zone"))


def _glowing_boundary(pipe: DrawPipeline, d: str, fairway_first_left: bool, main_color: str, class_: str):
    """Green glow on the fairway side, red glow on the OB side, then the line itself."""
    dwg = pipe.dwg
    options = pipe.options
    offset = options.glow_offset
    green = -offset if fairway_first_left else offset
    group = dwg.g(class_=class_)
    for color, dx in ((FAIRWAY_GLOW, green), (OB_GLOW, -green)):
        group.add(dwg.path(d=d, fill="none", stroke=color, stroke_width=options.glow_width, stroke_opacity=0.4,
                           transform=f"translate({_f(dx)}, 0)", stroke_linecap="round",
                           stroke_linejoin="round"))
    group.add(dwg.path(d=d, fill="none", stroke=main_color, stroke_width=options.boundary_width,
                       stroke_linecap="round", stroke_linejoin="round"))
    return group


def draw_dropzone_area(pipe: DrawPipeline, feature: DropzoneArea):
    ring = feature.ring
    if len(ring) < 3:
        return
    d = line_string_to_svg(ring, pipe.viewport) + " Z"
    pipe.add("dropzoneArea", _glowing_boundary(pipe, d, feature.fairway_inside,
                                               feature.color or pipe.style.dropzone_area_border_color,
                                               "dropzone-area"))


# === Line features ===

def draw_ob_line(pipe: DrawPipeline, feature: OBLine):
    if len(feature.coordinates) < 2:
        return
    d = line_string_to_svg(feature.coordinates, pipe.viewport)
    pipe.add("obLine", _glowing_boundary(pipe, d, feature.fairway_side != "right", OB_LINE_COLOR, "ob-line"))


def draw_flight_line(pipe: DrawPipeline, feature: FlightLine):
    if len(feature.coordinates) < 2:
        return
    style = pipe.style
    pipe.add("flightLine", pipe.dwg.path(
        d=line_string_to_svg(feature.coordinates, pipe.viewport), fill="none",
        stroke=feature.color or style.default_flight_line_color,
        stroke_width=_f(style.flight_line_width * pipe.options.flight_width_factor),
        stroke_dasharray=pipe.options.flight_dash, stroke_linecap="round", stroke_linejoin="round",
        class_="flight-line"
    ))


def draw_path(pipe: DrawPipeline, feature: PathLine):
    if len(feature.coordinates) < 2:
        return
    pipe.add("paths", pipe.dwg.path(
        d=line_string_to_svg(feature.coordinates, pipe.viewport), fill="none",
        stroke=feature.color or PATH_COLOR, stroke_width=feature.stroke_width or PATH_WIDTH,
        stroke_opacity=feature.opacity if feature.opacity is not None else 1,
        stroke_linecap="round", stroke_linejoin="round", class_="path"
    ))


# === Point features ===

def draw_tree(pipe: DrawPipeline, feature: Tree):
    x, y = pipe.point(feature)
    opacity = feature.opacity if feature.opacity is not None else 1
    if pipe.options.forest_style == "image":
        tree_image_symbols(pipe.ctx)
        element = image_tree(pipe.ctx, x, y, tree_image_for(feature.tree_type), feature.size, feature.rotation,
                             opacity, pipe.meters_per_pixel)
    else:
        element = top_view_tree(pipe.dwg, x, y, feature.tree_type, feature.size, feature.rotation, opacity,
                                pipe.options.marker_scale, feature.custom_colors)
    pipe.add("trees", element)


def draw_landmark(pipe: DrawPipeline, feature: Landmark):
    x, y = pipe.point(feature)
    pipe.add("landmarks", landmark_marker(pipe.dwg, feature.landmark_type, x, y,
                                          feature.size * pipe.options.marker_scale, feature.rotation,
                                          feature.color, pipe.ctx.verbose))


def draw_dropzone(pipe: DrawPipeline, feature: Dropzone):
    x, y = pipe.point(feature)
    ms = pipe.options.marker_scale
    rotation = pipe.options.dropzone_rotation
    if rotation is None:
        rotation = feature.rotation
    pipe.add("dropzone", dropzone_marker(pipe.dwg, x, y, feature.color or pipe.style.dropzone_color, ms,
                                         rotation, show_label=False))
    pipe._register(f"dz-{feature.id}", BoundingBox.centered(x, y, DROPZONE_SIZE[0] * ms, DROPZONE_SIZE[1] * ms),
                   PRIORITY_DROPZONE)


def draw_mandatory(pipe: DrawPipeline, feature: Mandatory):
    x, y = pipe.point(feature)
    ms = pipe.options.marker_scale
    pipe.add("mandatory", mandatory_marker(pipe.dwg, x, y, feature.rotation,
                                           feature.color or pipe.style.mandatory_color, ms, feature.line_angle))
    pipe._register(f"mando-{feature.id}", BoundingBox.centered(x, y, MANDATORY_BOX * ms, MANDATORY_BOX * ms),
                   PRIORITY_MANDATORY)


def draw_annotation(pipe: DrawPipeline, feature: Annotation):
    if not feature.text:
        return
    x, y = pipe.point(feature)
    style = pipe.style
    scale = pipe.options.annotation_scale
    pipe.add("annotation", annotation_marker(
        pipe.dwg, x, y, feature.text,
        (feature.font_size or style.annotation_font_size) * scale,
        feature.font_family or ANNOTATION_FONT,
        feature.font_weight or "normal",
        feature.text_color or style.annotation_text_color,
        feature.background_color or style.annotation_background_color,
        feature.border_color or ANNOTATION_BORDER,
        scale,
    ))


def draw_tee(pipe: DrawPipeline, feature: Tee):
    x, y = pipe.point(feature)
    options = pipe.options
    ms = options.marker_scale
    rotation = options.tee_rotation if options.tee_rotation is not None else feature.rotation
    pipe.add("tee", tee_marker(pipe.dwg, x, y, feature.color or pipe.style.default_tee_color,
                               options.hole_numbers.get(feature.hole_id), feature.name, ms, rotation))
    pipe._register(f"tee-{feature.id}", BoundingBox.centered(x, y, TEE_SIZE[0] * ms, TEE_SIZE[1] * ms),
                   PRIORITY_TEE)


def draw_basket(pipe: DrawPipeline, feature: Basket):
    x, y = pipe.point(feature)
    ms = pipe.options.marker_scale
    if pipe.options.top_view_baskets:
        pipe.add("basket", basket_top_view(pipe.dwg, x, y, pipe.style, ms))
        size = 2 * BASKET_TOP_RADIUS * ms
        bbox = BoundingBox.centered(x, y, size, size)
    else:
        pipe.add("basket", basket_marker(pipe.dwg, x, y, pipe.style, ms))
        bbox = BoundingBox.centered(x, y, BASKET_SIZE[0] * ms, BASKET_SIZE[1] * ms)
    pipe._register(f"basket-{feature.id}", bbox, PRIORITY_BASKET)


FEATURE_DRAWERS: Dict[Type[Feature], Callable[[DrawPipeline, Any], None]] = {
    TerrainArea: draw_terrain,
    PathLine: draw_path,
    Tree: draw_tree,
    Landmark: draw_landmark,
    Fairway: draw_fairway,
    DropzoneArea: draw_dropzone_area,
    OBLine: draw_ob_line,
    OBZone: draw_ob_zone,
    FlightLine: draw_flight_line,
    Dropzone: draw_dropzone,
    Mandatory: draw_mandatory,
    Annotation: draw_annotation,
    Tee: draw_tee,
    Basket: draw_basket,
}

