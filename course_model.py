"""
Course data model for export.

Features are a tagged union: one dataclass per feature kind, each carrying
only the fields that kind uses. The FEATURE_TYPE class attribute is the
discriminator used when loading editor JSON or GeoJSON.
"""

import json
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type

Coordinate = Tuple[float, float]


# === Features ===

@dataclass
class Feature:
    """Common fields of every feature.

    Attributes:
        id: Stable identifier, also used as a seed source
        coordinates: GeoJSON-style coordinates ([lng, lat] pairs)
        hole_id: Owning hole id ("" for course-level features)
    """
    id: str
    coordinates: Any
    hole_id: str = ""
    color: Optional[str] = None
    opacity: Optional[float] = None
    label: Optional[str] = None

    FEATURE_TYPE: ClassVar[str] = ""
    GEOMETRY_TYPE: ClassVar[str] = ""

    def all_coordinates(self) -> List[Coordinate]:
        """Flat list of every (lng, lat) pair in the geometry."""
        raise NotImplementedError


@dataclass
class PointFeature(Feature):
    GEOMETRY_TYPE: ClassVar[str] = "Point"

    @property
    def lng(self) -> float:
        return self.coordinates[0]

    @property
    def lat(self) -> float:
        return self.coordinates[1]

    def all_coordinates(self) -> List[Coordinate]:
        return [tuple(self.coordinates[:2])]


@dataclass
class LineFeature(Feature):
    GEOMETRY_TYPE: ClassVar[str] = "LineString"

    def all_coordinates(self) -> List[Coordinate]:
        return [tuple(c[:2]) for c in self.coordinates]


@dataclass
class PolygonFeature(Feature):
    GEOMETRY_TYPE: ClassVar[str] = "Polygon"

    @property
    def ring(self) -> List[Coordinate]:
        """Outer ring of the polygon."""
        return [tuple(c[:2]) for c in self.coordinates[0]] if self.coordinates else []

    def all_coordinates(self) -> List[Coordinate]:
        return [tuple(c[:2]) for ring in self.coordinates for c in ring]


@dataclass
class Tee(PointFeature):
    FEATURE_TYPE: ClassVar[str] = "tee"
    name: Optional[str] = None
    rotation: float = 0


@dataclass
class Basket(PointFeature):
    FEATURE_TYPE: ClassVar[str] = "basket"


@dataclass
class Dropzone(PointFeature):
    FEATURE_TYPE: ClassVar[str] = "dropzone"
    rotation: float = 0


@dataclass
class Mandatory(PointFeature):
    """Mandatory marker: arrow rotation and boundary line angle are independent."""
    FEATURE_TYPE: ClassVar[str] = "mandatory"
    rotation: float = 0
    line_angle: float = 270


@dataclass
class Annotation(PointFeature):
    FEATURE_TYPE: ClassVar[str] = "annotation"
    text: str = ""
    font_size: Optional[float] = None
    font_family: Optional[str] = None
    font_weight: Optional[str] = None
    text_color: Optional[str] = None
    background_color: Optional[str] = None
    border_color: Optional[str] = None


@dataclass
class Landmark(PointFeature):
    FEATURE_TYPE: ClassVar[str] = "landmark"
    landmark_type: str = "bench"
    size: float = 1.0
    rotation: float = 0


@dataclass
class Tree(PointFeature):
    FEATURE_TYPE: ClassVar[str] = "tree"
    tree_type: str = "oak"
    size: float = 1.0
    rotation: float = 0
    custom_colors: Optional[Dict[str, str]] = None


@dataclass
class FlightLine(LineFeature):
    FEATURE_TYPE: ClassVar[str] = "flightLine"
    start_feature_id: Optional[str] = None


@dataclass
class OBLine(LineFeature):
    FEATURE_TYPE: ClassVar[str] = "obLine"
    fairway_side: str = "left"


@dataclass
class PathLine(LineFeature):
    """Walking path drawn as a stroked line."""
    FEATURE_TYPE: ClassVar[str] = "path"
    stroke_width: Optional[float] = None


@dataclass
class OBZone(PolygonFeature):
    FEATURE_TYPE: ClassVar[str] = "obZone"


@dataclass
class Fairway(PolygonFeature):
    FEATURE_TYPE: ClassVar[str] = "fairway"


@dataclass
class DropzoneArea(PolygonFeature):
    FEATURE_TYPE: ClassVar[str] = "dropzoneArea"
    fairway_inside: bool = True


@dataclass
class TerrainArea(PolygonFeature):
    """Terrain polygon (grass, forest, water...). corner_radius is in meters."""
    FEATURE_TYPE: ClassVar[str] = "infrastructure"
    terrain_type: str = "grass"
    custom_colors: Optional[Dict[str, str]] = None
    corner_radius: float = 0


FEATURE_CLASSES: Dict[str, Type[Feature]] = {
    cls.FEATURE_TYPE: cls
    for cls in (
        Tee, Basket, Dropzone, Mandatory, Annotation, Landmark, Tree,
        FlightLine, OBLine, PathLine, OBZone, Fairway, DropzoneArea, TerrainArea,
    )
}
# Older editor files tag terrain polygons as "terrain"
FEATURE_CLASSES["terrain"] = TerrainArea


# === Course ===

@dataclass
class CourseStyle:
    """Colours, widths and opacities used by every renderer."""
    tee_color: str = "#22c55e"
    default_tee_color: str = "#dc2626"
    basket_color: str = "#ef4444"
    basket_top_color: str = "#eab308"
    basket_body_color: str = "#9ca3af"
    basket_chain_color: str = "#6b7280"
    basket_pole_color: str = "#4b5563"
    ob_zone_color: str = "#dc2626"
    ob_zone_opacity: float = 0.3
    fairway_color: str = "#86efac"
    fairway_opacity: float = 0.2
    flight_line_color: str = "#3b82f6"
    flight_line_width: float = 2
    default_flight_line_color: str = "#3b82f6"
    dropzone_color: str = "#f59e0b"
    dropzone_area_border_color: str = "#f59e0b"
    mandatory_color: str = "#8b5cf6"
    annotation_font_size: float = 14
    annotation_text_color: str = "#1f2937"
    annotation_background_color: str = "#ffffff"
    default_terrain: str = "grass"
    map_style: str = "satellite"
    # Editor background settings (camelCase keys), None = terrain background
    background: Optional[Dict[str, Any]] = None


@dataclass
class Hole:
    """One hole: 1-based number plus the features scoped to it."""
    id: str
    number: int
    par: int = 3
    name: Optional[str] = None
    notes: Optional[str] = None
    rules: List[str] = field(default_factory=list)
    features: List[Feature] = field(default_factory=list)

    def features_of(self, cls: Type[Feature]) -> List[Feature]:
        """Features of one kind, in drawing order."""
        return [f for f in self.features if isinstance(f, cls)]

    def first_of(self, cls: Type[Feature]) -> Optional[Feature]:
        for f in self.features:
            if isinstance(f, cls):
                return f
        return None


@dataclass
class Course:
    """A course and its course-level feature layers."""
    id: str
    name: str
    location_name: str = ""
    style: CourseStyle = field(default_factory=CourseStyle)
    holes: List[Hole] = field(default_factory=list)
    terrain_features: List[TerrainArea] = field(default_factory=list)
    path_features: List[PathLine] = field(default_factory=list)
    tree_features: List[Tree] = field(default_factory=list)
    landmark_features: List[Landmark] = field(default_factory=list)

    def all_hole_features(self) -> List[Feature]:
        return [f for hole in self.holes for f in hole.features]


# === Loading ===

def _snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _dataclass_kwargs(cls, data: Dict[str, Any], skip=()) -> Dict[str, Any]:
    """Pick the keys of data (camelCase or snake_case) that cls accepts."""
    known = {f.name for f in fields(cls)}
    kwargs = {}
    for key, value in data.items():
        name = _snake_case(key)
        if name in known and name not in skip:
            kwargs[name] = value
    return kwargs


def feature_from_dict(data: Dict[str, Any], verbose: bool = False) -> Optional[Feature]:
    """Build a feature from editor JSON or a GeoJSON Feature.

    Returns None (with a warning) for unknown feature kinds.
    """
    if "properties" in data or "geometry" in data:
        props = dict(data.get("properties") or {})
        geometry = data.get("geometry") or {}
        coordinates = geometry.get("coordinates")
        if "id" not in props and "id" in data:
            props["id"] = data["id"]
    else:
        props = dict(data)
        coordinates = props.pop("coordinates", None)

    kind = props.get("type")
    cls = FEATURE_CLASSES.get(kind)
    if cls is None:
        if verbose:
            print(f"  Warning: skipping feature {props.get('id', '?')} with unknown type {kind!r}")
        return None

    if coordinates is None:
        if verbose:
            print(f"  Warning: skipping {kind} feature {props.get('id', '?')} without coordinates")
        return None

    kwargs = _dataclass_kwargs(cls, props, skip=("coordinates",))
    kwargs.setdefault("id", "")
    kwargs["id"] = str(kwargs["id"])
    return cls(coordinates=coordinates, **kwargs)


def _features_from_list(items, verbose: bool, cls: Optional[Type[Feature]] = None) -> List[Feature]:
    features = []
    for item in items or []:
        feature = feature_from_dict(item, verbose=verbose)
        if feature is None:
            continue
        if cls is not None and not isinstance(feature, cls):
            if verbose:
                print(f"  Warning: expected {cls.FEATURE_TYPE} feature, got {feature.FEATURE_TYPE}")
            continue
        features.append(feature)
    return features


def hole_from_dict(data: Dict[str, Any], verbose: bool = False) -> Hole:
    features = data.get("features") or []
    if isinstance(features, dict):
        # GeoJSON FeatureCollection
        features = features.get("features") or []
    kwargs = _dataclass_kwargs(Hole, data, skip=("features",))
    kwargs.setdefault("id", str(data.get("number", "")))
    kwargs.setdefault("number", 1)
    hole = Hole(**kwargs)
    hole.rules = list(hole.rules or [])
    hole.features = _features_from_list(features, verbose)
    for feature in hole.features:
        if not feature.hole_id:
            feature.hole_id = hole.id
    return hole


def course_from_dict(data: Dict[str, Any], verbose: bool = False) -> Course:
    """Build a Course from the editor's JSON shape.

    Accepts camelCase keys, and either "location": {"name": ...} or a
    flat "locationName".
    """
    style_data = data.get("style") or {}
    style = CourseStyle(**_dataclass_kwargs(CourseStyle, style_data))

    location = data.get("location")
    location_name = data.get("locationName", "")
    if isinstance(location, dict):
        location_name = location.get("name", location_name)
    elif isinstance(location, str):
        location_name = location

    holes = [hole_from_dict(h, verbose=verbose) for h in data.get("holes") or []]
    holes.sort(key=lambda h: h.number)

    return Course(
        id=str(data.get("id", "")),
        name=data.get("name", ""),
        location_name=location_name or "",
        style=style,
        holes=holes,
        terrain_features=_features_from_list(data.get("terrainFeatures", data.get("terrain_features")),
                                             verbose, TerrainArea),
        path_features=_features_from_list(data.get("pathFeatures", data.get("path_features")),
                                          verbose, PathLine),
        tree_features=_features_from_list(data.get("treeFeatures", data.get("tree_features")),
                                          verbose, Tree),
        landmark_features=_features_from_list(data.get("landmarkFeatures", data.get("landmark_features")),
                                              verbose, Landmark),
    )


def load_course(path, verbose: bool = False) -> Course:
    """Load a course from a JSON file."""
    course_path = Path(path)
    if verbose:
        print(f"  Loading course from {course_path}...")
    with open(course_path) as f:
        data = json.load(f)
    return course_from_dict(data, verbose=verbose)
