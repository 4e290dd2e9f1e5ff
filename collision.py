"""
Label collision avoidance and marker density scaling.

Markers register their pixel bounding boxes as they are drawn; floating
labels are placed last by probing candidate offsets against everything
registered so far.
"""

import math
from dataclasses import dataclass
from typing import List, Tuple, Sequence, Any

import numpy as np

from render_helpers import get_line_length, get_point_and_angle_at_distance

# Collision priorities (lower = more fixed)
PRIORITY_TEE = 1
PRIORITY_BASKET = 1
PRIORITY_DROPZONE = 2
PRIORITY_MANDATORY = 3
PRIORITY_LABEL = 5

IDEAL_MIN_DISTANCE_PX = 70
MIN_MARKER_SCALE = 0.5
MIN_LABEL_SCALE = 0.6

SEARCH_ANGLES = (0, 45, 90, 135, 180, 225, 270, 315)
SEARCH_DISTANCES = (20, 35, 50, 65)
LEADER_DISTANCE = 25


@dataclass
class BoundingBox:
    """Axis-aligned pixel rectangle."""
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def centered(cls, cx: float, cy: float, width: float, height: float) -> 'BoundingBox':
        return cls(cx - width / 2, cy - height / 2, width, height)

    def expand(self, margin: float) -> 'BoundingBox':
        return BoundingBox(self.x - margin, self.y - margin,
                           self.width + 2 * margin, self.height + 2 * margin)

    def intersects(self, other: 'BoundingBox') -> bool:
        """True when the boxes overlap. Boxes that only touch do not."""
        return not (
            self.x + self.width <= other.x or
            other.x + other.width <= self.x or
            self.y + self.height <= other.y or
            other.y + other.height <= self.y
        )


@dataclass
class PlacedElement:
    id: str
    bbox: BoundingBox
    priority: int


@dataclass
class Placement:
    """Result of a position search."""
    x: float
    y: float
    needs_leader: bool


class CollisionManager:
    """Append-only registry of placed element boxes."""

    def __init__(self):
        self.placed: List[PlacedElement] = []

    def clear(self):
        self.placed = []

    def add_element(self, element_id: str, bbox: BoundingBox, priority: int):
        self.placed.append(PlacedElement(element_id, bbox, priority))

    def check_collision(self, bbox: BoundingBox, margin: float = 2) -> bool:
        """True when bbox grown by margin overlaps any registered box."""
        expanded = bbox.expand(margin)
        return any(expanded.intersects(el.bbox) for el in self.placed)

    def find_non_colliding_position(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        max_offset: float = 80
    ) -> Placement:
        """Find a free spot for a width x height box centered near (x, y).

        Tries the original position, then 8 directions at growing radii up
        to max_offset. When nothing is free the box goes up and to the right
        at 0.7 * max_offset; it is never dropped.

        Returns:
            Placement; needs_leader is set when the box moved beyond 25px
        """
        if not self.check_collision(BoundingBox.centered(x, y, width, height), 4):
            return Placement(x, y, False)

        for dist in SEARCH_DISTANCES + (max_offset,):
            for angle in SEARCH_ANGLES:
                rad = math.radians(angle)
                test_x = x + math.cos(rad) * dist
                test_y = y + math.sin(rad) * dist
                if not self.check_collision(BoundingBox.centered(test_x, test_y, width, height), 4):
                    return Placement(test_x, test_y, dist > LEADER_DISTANCE)

        return Placement(x + max_offset * 0.7, y - max_offset * 0.7, True)

    def __len__(self) -> int:
        return len(self.placed)


# === Distance labels ===

@dataclass
class LabelBox:
    """Where a distance label went and how big it is."""
    x: float
    y: float
    width: float
    height: float
    font_size: float
    needs_leader: bool
    anchor_x: float
    anchor_y: float


def place_distance_label(
    collisions: CollisionManager,
    label_id: str,
    text: str,
    line_points: Sequence[Tuple[float, float]],
    label_scale: float = 1.0
) -> LabelBox:
    """Place a line's distance label beside the line and register it.

    The label is anchored half way along the pixel line. Candidates
    perpendicular to the line there (both sides, at one and two base
    offsets) are tried before the generic radial search.

    Args:
        collisions: Registry to test against and register into
        label_id: Registry id for the label
        text: Label text, used to size the box
        line_points: The line in pixel coordinates
        label_scale: Density label scale

    Returns:
        LabelBox with the chosen center and the anchor on the line
    """
    font_size = 11 * label_scale
    width = (len(text) * font_size * 0.7 + 12) * label_scale
    height = 20 * label_scale

    anchor_x, anchor_y, angle = get_point_and_angle_at_distance(line_points, get_line_length(line_points) / 2)
    perp_x = -math.sin(math.radians(angle))
    perp_y = math.cos(math.radians(angle))

    base = 18 * label_scale
    candidates = [
        (anchor_x + perp_x * base, anchor_y + perp_y * base, base),
        (anchor_x - perp_x * base, anchor_y - perp_y * base, base),
        (anchor_x + perp_x * base * 2, anchor_y + perp_y * base * 2, base * 2),
        (anchor_x - perp_x * base * 2, anchor_y - perp_y * base * 2, base * 2),
    ]

    placement = None
    for cx, cy, dist in candidates:
        if not collisions.check_collision(BoundingBox.centered(cx, cy, width, height), 4):
            placement = Placement(cx, cy, dist > base * 1.5)
            break

    if placement is None:
        placement = collisions.find_non_colliding_position(
            anchor_x, anchor_y - base, width, height, max_offset=60 * label_scale
        )

    collisions.add_element(label_id, BoundingBox.centered(placement.x, placement.y, width, height),
                           PRIORITY_LABEL)
    return LabelBox(placement.x, placement.y, width, height, font_size, placement.needs_leader, anchor_x, anchor_y)


# === Density ===

@dataclass
class DensityMetrics:
    """Course-wide marker spacing summary for one viewport."""
    feature_count: int
    map_area_px: float
    avg_feature_distance: float
    min_feature_distance: float
    density_factor: float
    marker_scale: float
    label_scale: float


def density_from_points(points: Sequence[Tuple[float, float]], map_area_px: float = 0.0) -> DensityMetrics:
    """Density metrics from already projected pixel points.

    density = clamp(1 - min_distance / 70, 0, 1); markers shrink to at
    most half size and labels to 60 %.
    """
    count = len(points)
    if count < 2:
        return DensityMetrics(count, map_area_px, math.inf, math.inf, 0.0, 1.0, 1.0)

    coords = np.asarray(points, dtype=float)
    diffs = coords[:, None, :] - coords[None, :, :]
    dists = np.sqrt((diffs ** 2).sum(axis=-1))
    upper = dists[np.triu_indices(count, k=1)]

    min_distance = float(upper.min())
    avg_distance = float(upper.mean())
    density = max(0.0, min(1.0, 1 - min_distance / IDEAL_MIN_DISTANCE_PX))

    return DensityMetrics(
        feature_count=count,
        map_area_px=map_area_px,
        avg_feature_distance=avg_distance,
        min_feature_distance=min_distance,
        density_factor=density,
        marker_scale=max(MIN_MARKER_SCALE, 1 - density * 0.5),
        label_scale=max(MIN_LABEL_SCALE, 1 - density * 0.4),
    )


def calculate_density_metrics(features: Sequence[Any], viewport) -> DensityMetrics:
    """Density metrics of the point features of a course in a viewport."""
    points = [viewport.geo_to_svg(f.coordinates) for f in features
              if getattr(f, "GEOMETRY_TYPE", "") == "Point"]
    return density_from_points(points, viewport.content_width * viewport.content_height)
