"""
Geometry and text helpers shared by the layout renderers.

Pixel-space line walking, ray-casting containment, segment distance,
flat-earth line lengths in meters, word wrapping and XML escaping.
"""

import math
from typing import List, Tuple, Sequence

from map_utils import meters_per_degree


def get_point_and_angle_at_distance(
    line_coords: Sequence[Tuple[float, float]],
    target_distance: float
) -> Tuple[float, float, float]:
    """Get position and angle at a given distance along a line.

    Args:
        line_coords: List of (x, y) coordinate tuples defining the line
        target_distance: Distance along line to find point

    Returns:
        Tuple of (x, y, angle_degrees) at the target distance
    """
    if len(line_coords) == 1:
        return (line_coords[0][0], line_coords[0][1], 0.0)

    cumulative = 0.0
    for i in range(len(line_coords) - 1):
        x1, y1 = line_coords[i]
        x2, y2 = line_coords[i + 1]
        seg_len = math.hypot(x2 - x1, y2 - y1)

        if cumulative + seg_len >= target_distance and seg_len > 0:
            t = (target_distance - cumulative) / seg_len
            angle = math.degrees(math.atan2(y2 - y1, x2 - x1))
            return (x1 + t * (x2 - x1), y1 + t * (y2 - y1), angle)
        cumulative += seg_len

    # Past the end
    x1, y1 = line_coords[-2]
    x2, y2 = line_coords[-1]
    angle = math.degrees(math.atan2(y2 - y1, x2 - x1))
    return (x2, y2, angle)


def get_line_length(line_coords: Sequence[Tuple[float, float]]) -> float:
    """Calculate total length of a line from its coordinates.

    Args:
        line_coords: List of (x, y) coordinate tuples

    Returns:
        Total length of the line
    """
    total = 0.0
    for i in range(len(line_coords) - 1):
        x1, y1 = line_coords[i]
        x2, y2 = line_coords[i + 1]
        total += math.hypot(x2 - x1, y2 - y1)
    return total


def geo_line_length_meters(coords: Sequence[Sequence[float]]) -> float:
    """Length of a [lng, lat] line in meters.

    Each segment uses the meters-per-degree of its own mid latitude.
    """
    total = 0.0
    for (lng1, lat1), (lng2, lat2) in zip(
        ((c[0], c[1]) for c in coords), ((c[0], c[1]) for c in coords[1:])
    ):
        m_lng, m_lat = meters_per_degree((lat1 + lat2) / 2)
        total += math.hypot((lng2 - lng1) * m_lng, (lat2 - lat1) * m_lat)
    return total


def point_in_polygon(x: float, y: float, polygon: Sequence[Tuple[float, float]]) -> bool:
    """Ray casting containment test. Points on the boundary may go either way."""
    inside = False
    n = len(polygon)
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def dist_to_segment(px: float, py: float, x1: float, y1: float, x2: float, y2: float) -> float:
    """Distance from a point to a line segment (to the endpoint for zero-length segments)."""
    dx = x2 - x1
    dy = y2 - y1
    len_sq = dx * dx + dy * dy
    if len_sq == 0:
        return math.hypot(px - x1, py - y1)
    t = max(0.0, min(1.0, ((px - x1) * dx + (py - y1) * dy) / len_sq))
    return math.hypot(px - (x1 + t * dx), py - (y1 + t * dy))


def dist_to_polygon_edge(px: float, py: float, polygon: Sequence[Tuple[float, float]]) -> float:
    """Distance from a point to the nearest edge of a closed polygon."""
    n = len(polygon)
    if n == 0:
        return math.inf
    return min(
        dist_to_segment(px, py, *polygon[i], *polygon[(i + 1) % n])
        for i in range(n)
    )


def wrap_text(text: str, max_width: float, font_size: float) -> List[str]:
    """Greedy word wrap using an average glyph width of half the font size.

    A single word longer than the line stays on its own line.
    """
    avg_char_width = font_size * 0.5
    max_chars = max(1, int(max_width // avg_char_width))

    lines: List[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= max_chars:
            current = candidate
        else:
            if current:
                lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


_XML_ESCAPES = {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&apos;"}


def escape_xml(text: str) -> str:
    """Escape &, <, >, \" and ' for embedding in markup.

    Text handed to svgwrite is escaped on serialization already; use this
    only for strings assembled outside svgwrite.
    """
    return "".join(_XML_ESCAPES.get(ch, ch) for ch in str(text))
