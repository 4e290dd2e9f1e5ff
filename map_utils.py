"""
Utility classes for course map generation.

This module provides reusable components for geographic bounds, the
geographic-to-SVG coordinate transform, rotation handling, and SVG layer
management.
"""

import math
from dataclasses import dataclass, field
from typing import Tuple, List, Dict, Optional, Any, Iterable, Sequence

from export_config import InvalidExportConfig

# Flat-earth approximation used everywhere distances are measured
METERS_PER_DEGREE_LAT = 110540
METERS_PER_DEGREE_LNG_EQUATOR = 111320

# Smallest geographic span (degrees) a layout will build a viewport from
MIN_SPAN_DEG = 1e-4


def meters_per_degree(lat: float) -> Tuple[float, float]:
    """Meters per degree of longitude and latitude at a latitude.

    Returns:
        Tuple of (meters_per_degree_lng, meters_per_degree_lat)
    """
    return (METERS_PER_DEGREE_LNG_EQUATOR * math.cos(math.radians(lat)), METERS_PER_DEGREE_LAT)


def distance_meters(a: Sequence[float], b: Sequence[float]) -> float:
    """Approximate ground distance between two [lng, lat] coordinates."""
    mid_lat = (a[1] + b[1]) / 2
    m_lng, m_lat = meters_per_degree(mid_lat)
    dx = (b[0] - a[0]) * m_lng
    dy = (b[1] - a[1]) * m_lat
    return math.sqrt(dx * dx + dy * dy)


@dataclass
class GeoBounds:
    """Geographic bounding rectangle in degrees.

    Attributes:
        min_lng: Western boundary
        max_lng: Eastern boundary
        min_lat: Southern boundary
        max_lat: Northern boundary
    """
    min_lng: float
    max_lng: float
    min_lat: float
    max_lat: float

    @property
    def lng_range(self) -> float:
        """East-west extent in degrees."""
        return self.max_lng - self.min_lng

    @property
    def lat_range(self) -> float:
        """North-south extent in degrees."""
        return self.max_lat - self.min_lat

    @property
    def center(self) -> Tuple[float, float]:
        """Center point as (lng, lat)."""
        return (
            (self.min_lng + self.max_lng) / 2,
            (self.min_lat + self.max_lat) / 2
        )

    @property
    def is_degenerate(self) -> bool:
        """True when the bounds cannot define a transform."""
        values = (self.min_lng, self.max_lng, self.min_lat, self.max_lat)
        if not all(math.isfinite(v) for v in values):
            return True
        return self.max_lng <= self.min_lng or self.max_lat <= self.min_lat

    def expand(self, lng_buffer: float, lat_buffer: Optional[float] = None) -> 'GeoBounds':
        """Return new bounds grown by a buffer (degrees) on each side."""
        if lat_buffer is None:
            lat_buffer = lng_buffer
        return GeoBounds(
            min_lng=self.min_lng - lng_buffer,
            max_lng=self.max_lng + lng_buffer,
            min_lat=self.min_lat - lat_buffer,
            max_lat=self.max_lat + lat_buffer
        )

    def pad_fraction(self, fraction: float) -> 'GeoBounds':
        """Return new bounds grown by a fraction of each extent on each side."""
        return self.expand(self.lng_range * fraction, self.lat_range * fraction)

    def with_min_span(self, min_span: float = MIN_SPAN_DEG) -> 'GeoBounds':
        """Return bounds widened around the center so each axis spans at least min_span."""
        lng_buffer = max(0.0, (min_span - self.lng_range) / 2)
        lat_buffer = max(0.0, (min_span - self.lat_range) / 2)
        if lng_buffer == 0 and lat_buffer == 0:
            return self
        return self.expand(lng_buffer, lat_buffer)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """Return bounds as (min_lng, min_lat, max_lng, max_lat) tuple."""
        return (self.min_lng, self.min_lat, self.max_lng, self.max_lat)


def calculate_bounds(features: Iterable[Any]) -> Optional[GeoBounds]:
    """Bounding box of every coordinate of every feature.

    Returns:
        GeoBounds, or None when there are no coordinates
    """
    lngs: List[float] = []
    lats: List[float] = []
    for feature in features:
        for lng, lat in feature.all_coordinates():
            lngs.append(lng)
            lats.append(lat)

    if not lngs:
        return None

    return GeoBounds(min_lng=min(lngs), max_lng=max(lngs), min_lat=min(lats), max_lat=max(lats))


@dataclass(frozen=True)
class Viewport:
    """Pixel canvas plus the geographic bounds drawn into it.

    The transform scales both axes by one factor (the smaller of the two
    axis-fit scales), centers the content inside the padded rectangle and
    flips the Y axis. Construction fails for bounds that cannot define a
    transform; adjust bounds before building the viewport.

    Attributes:
        width: Canvas width in pixels
        height: Canvas height in pixels
        padding: Pixel inset reserved around the content
        bounds: Geographic bounds to fit
    """
    width: float
    height: float
    padding: float
    bounds: GeoBounds
    scale: float = field(init=False)
    offset_x: float = field(init=False)
    offset_y: float = field(init=False)

    def __post_init__(self):
        if self.bounds.is_degenerate:
            raise InvalidExportConfig(f"viewport bounds are degenerate: {self.bounds.as_tuple()}")

        content_width = self.width - 2 * self.padding
        content_height = self.height - 2 * self.padding
        if not (content_width > 0 and content_height > 0):
            raise InvalidExportConfig(
                f"viewport {self.width}x{self.height} leaves no content area with padding {self.padding}"
            )

        lng_range = self.bounds.lng_range
        lat_range = self.bounds.lat_range
        scale = min(content_width / lng_range, content_height / lat_range)

        object.__setattr__(self, "scale", scale)
        object.__setattr__(self, "offset_x", self.padding + (content_width - lng_range * scale) / 2)
        object.__setattr__(self, "offset_y", self.padding + (content_height - lat_range * scale) / 2)

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.padding

    @property
    def content_height(self) -> float:
        return self.height - 2 * self.padding

    def geo_to_svg(self, coord: Sequence[float]) -> Tuple[float, float]:
        """Project a [lng, lat] coordinate to pixel (x, y)."""
        x = self.offset_x + (coord[0] - self.bounds.min_lng) * self.scale
        # SVG Y grows downward, latitude grows upward
        y = self.offset_y + (self.bounds.max_lat - coord[1]) * self.scale
        return (x, y)

    def meters_per_pixel(self) -> float:
        """Ground meters covered by one pixel at the bounds' mid latitude."""
        m_lng, _ = meters_per_degree(self.bounds.center[1])
        return m_lng / self.scale


def geo_to_svg(coord: Sequence[float], viewport: Viewport) -> Tuple[float, float]:
    """Project a [lng, lat] coordinate through a viewport."""
    return viewport.geo_to_svg(coord)


def format_point(x: float, y: float) -> str:
    """Format a pixel point as 'x,y' with two decimals."""
    return f"{x:.2f},{y:.2f}"


def polygon_coords_to_svg(coords: Sequence[Sequence[float]], viewport: Viewport) -> str:
    """Project a ring to an SVG points list ('x,y x,y ...')."""
    return " ".join(format_point(*viewport.geo_to_svg(c)) for c in coords)


def line_string_to_svg(coords: Sequence[Sequence[float]], viewport: Viewport) -> str:
    """Project a line to an SVG path ('M x,y L x,y ...')."""
    points = [format_point(*viewport.geo_to_svg(c)) for c in coords]
    return "M " + " L ".join(points)


def project_coords(coords: Sequence[Sequence[float]], viewport: Viewport) -> List[Tuple[float, float]]:
    """Project a coordinate list to pixel tuples."""
    return [viewport.geo_to_svg(c) for c in coords]


def polygon_to_path(
    coords: Sequence[Sequence[float]],
    viewport: Viewport,
    corner_radius: float = 0
) -> str:
    """Project a ring to a closed SVG path, optionally with rounded corners.

    Each corner is cut back along both adjacent edges by
    min(corner_radius, 0.45 * shorter edge) and joined with a quadratic
    curve through the original vertex.

    Args:
        coords: Ring of [lng, lat] coordinates (closing point optional)
        viewport: Viewport to project through
        corner_radius: Corner radius in pixels (0 = sharp corners)

    Returns:
        Path data string, or '' for fewer than 3 distinct points
    """
    points = project_coords(coords, viewport)

    # Drop the closing point of a closed ring
    if (len(points) > 1 and
            abs(points[0][0] - points[-1][0]) < 0.01 and
            abs(points[0][1] - points[-1][1]) < 0.01):
        points = points[:-1]

    if len(points) < 3:
        return ""

    if corner_radius <= 0:
        return "M " + " L ".join(format_point(x, y) for x, y in points) + " Z"

    n = len(points)
    parts = []
    for i in range(n):
        px, py = points[(i - 1) % n]
        cx, cy = points[i]
        nx, ny = points[(i + 1) % n]

        v1x, v1y = px - cx, py - cy
        v2x, v2y = nx - cx, ny - cy
        len1 = math.hypot(v1x, v1y)
        len2 = math.hypot(v2x, v2y)

        offset = min(corner_radius, min(len1, len2) * 0.45)
        if len1 > 0:
            start = (cx + v1x / len1 * offset, cy + v1y / len1 * offset)
        else:
            start = (cx, cy)
        if len2 > 0:
            end = (cx + v2x / len2 * offset, cy + v2y / len2 * offset)
        else:
            end = (cx, cy)

        move = "M" if i == 0 else " L"
        parts.append(f"{move} {format_point(*start)}")
        parts.append(f" Q {format_point(cx, cy)} {format_point(*end)}")

    parts.append(" Z")
    return "".join(parts)


@dataclass
class RotationConfig:
    """Rotation of a map panel about a point, in SVG degrees (clockwise).

    Attributes:
        angle_deg: Rotation angle in degrees
        center_x: X coordinate of rotation center
        center_y: Y coordinate of rotation center
    """
    angle_deg: float
    center_x: float = 0
    center_y: float = 0

    @property
    def is_rotated(self) -> bool:
        return self.angle_deg != 0

    def rotated_extent(self, width: float, height: float) -> Tuple[float, float]:
        """Axis-aligned size of a width x height rectangle after rotation."""
        angle = math.radians(self.angle_deg)
        c, s = abs(math.cos(angle)), abs(math.sin(angle))
        return (width * c + height * s, width * s + height * c)

    def calculate_expanded_bounds(self, width: float, height: float) -> Tuple[float, float]:
        """Extra space needed on each side so the rotated rectangle still covers the panel.

        Returns:
            Tuple of (expand_x, expand_y)
        """
        if not self.is_rotated:
            return (0.0, 0.0)
        rotated_width, rotated_height = self.rotated_extent(width, height)
        return ((rotated_width - width) / 2, (rotated_height - height) / 2)

    def get_svg_transform(self) -> str:
        """rotate() transform about the center, or "" without rotation."""
        if not self.is_rotated:
            return ""
        return f"rotate({self.angle_deg:.2f}, {self.center_x:.2f}, {self.center_y:.2f})"


class LayerManager:
    """Named SVG layer groups stacked by z-order.

    Layouts register their layer list once; features are drawn into the
    groups in any order and assembled in stacking order at the end.
    """

    def __init__(self, dwg, id_prefix: str = "layer"):
        self.dwg = dwg
        self.id_prefix = id_prefix
        self._z_order: Dict[str, int] = {}
        self._groups: Dict[str, Any] = {}

    def register_layer(self, name: str, z_order: int) -> Any:
        """Create the group for one layer (higher z_order renders on top)."""
        group = self.dwg.g(id=f"{self.id_prefix}-{name}")
        self._z_order[name] = z_order
        self._groups[name] = group
        return group

    def register_layers(self, names: Sequence[str]) -> None:
        """Register one layer per name, stacked in list order."""
        for index, name in enumerate(names):
            self.register_layer(name, z_order=index * 10)

    def get_layer(self, name: str) -> Any:
        return self._groups.get(name)

    def layer_names(self) -> List[str]:
        """Layer names sorted by z-order."""
        return sorted(self._z_order, key=self._z_order.get)

    def get_layers_by_z_order(self, skip_empty: bool = True) -> List[Any]:
        """Layer groups lowest first, leaving out empty ones unless skip_empty is False."""
        groups = [self._groups[name] for name in self.layer_names()]
        if skip_empty:
            groups = [g for g in groups if g.elements]
        return groups

    def assemble_into_group(self, parent_group: Any, layers: List[Any], transform: Optional[str] = None):
        """Add layers to parent_group, setting its transform when one is given."""
        if transform:
            parent_group['transform'] = transform
        for layer in layers:
            parent_group.add(layer)
