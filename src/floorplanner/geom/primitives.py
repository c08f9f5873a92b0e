"""Geometric primitives for plan polygons.

Pure functions over ``Point`` sequences: measurement, containment,
intersection and projection. Everything else in the engine builds on
these, so they never raise on well-formed input; failures are signalled
with ``None``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple

from ..config import (
    ON_SEGMENT_EPS,
    PARALLEL_EPS,
    SEGMENT_T_EPS,
    SQ_UNITS_PER_SQ_FOOT,
    UNITS_PER_FOOT,
)
from ..core.model import Point


@dataclass(frozen=True)
class SegmentProjection:
    """Result of projecting a point onto a segment.

    Attributes:
        distance: Distance from the point to ``closest_point``.
        closest_point: Closest point on the segment (projection clamped to it).
        is_on_segment: Whether the unclamped projection fell inside the segment.
    """

    distance: float
    closest_point: Point
    is_on_segment: bool


def distance(p1: Point, p2: Point) -> float:
    """Calculate Euclidean distance between two points."""
    return math.sqrt((p1.x - p2.x) ** 2 + (p1.z - p2.z) ** 2)


def midpoint(p1: Point, p2: Point) -> Point:
    return Point((p1.x + p2.x) / 2, (p1.z + p2.z) / 2)


def polygon_edges(polygon: Sequence[Point]) -> Iterator[Tuple[int, Point, Point]]:
    """Yield ``(index, start, end)`` for every edge of a closed ring."""
    n = len(polygon)
    for i in range(n):
        yield i, polygon[i], polygon[(i + 1) % n]


def area(polygon: Sequence[Point]) -> float:
    """Polygon area in square feet via the shoelace formula.

    Works for either winding order. Returns 0 for fewer than 3 points.
    """
    n = len(polygon)
    if n < 3:
        return 0.0

    total = 0.0
    for i in range(n):
        j = (i + 1) % n
        total += polygon[i].x * polygon[j].z
        total -= polygon[j].x * polygon[i].z

    return abs(total) / 2 / SQ_UNITS_PER_SQ_FOOT


def bounding_box(polygon: Sequence[Point]) -> Tuple[float, float, float, float]:
    """Axis-aligned bounding box as ``(min_x, min_z, max_x, max_z)``."""
    xs = [p.x for p in polygon]
    zs = [p.z for p in polygon]
    return min(xs), min(zs), max(xs), max(zs)


def dimensions(polygon: Sequence[Point]) -> Tuple[float, float]:
    """Bounding box ``(width, height)`` in feet.

    The box is axis-aligned in the coordinates given; rotate first if
    oriented dimensions are wanted.
    """
    if len(polygon) < 3:
        return 0.0, 0.0

    min_x, min_z, max_x, max_z = bounding_box(polygon)
    return (max_x - min_x) / UNITS_PER_FOOT, (max_z - min_z) / UNITS_PER_FOOT


def centroid(points: Sequence[Point]) -> Point:
    """Arithmetic mean of the vertices (not the area-weighted centroid)."""
    if not points:
        return Point(0.0, 0.0)

    n = len(points)
    return Point(sum(p.x for p in points) / n, sum(p.z for p in points) / n)


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """Ray-casting parity test.

    Points on the boundary are resolved by the crossing test itself.
    """
    inside = False
    n = len(polygon)
    j = n - 1
    for i in range(n):
        xi, zi = polygon[i].x, polygon[i].z
        xj, zj = polygon[j].x, polygon[j].z

        if (zi > point.z) != (zj > point.z) and point.x < (xj - xi) * (point.z - zi) / (zj - zi) + xi:
            inside = not inside
        j = i

    return inside


def segment_intersection(
    p1: Point,
    q1: Point,
    p2: Point,
    q2: Point,
    parallel_eps: float = PARALLEL_EPS,
    t_eps: float = SEGMENT_T_EPS,
) -> Optional[Point]:
    """Intersection point of segments ``p1-q1`` and ``p2-q2``.

    Args:
        p1: Start of the first segment.
        q1: End of the first segment.
        p2: Start of the second segment.
        q2: End of the second segment.
        parallel_eps: Denominators smaller than this are treated as parallel.
        t_eps: Slack allowed outside ``[0, 1]`` on both segment parameters.

    Returns:
        The intersection point, or None if the segments are parallel or miss.
    """
    denom = (p1.x - q1.x) * (p2.z - q2.z) - (p1.z - q1.z) * (p2.x - q2.x)
    if denom == 0 or abs(denom) < parallel_eps:
        return None

    t = ((p1.x - p2.x) * (p2.z - q2.z) - (p1.z - p2.z) * (p2.x - q2.x)) / denom
    u = -((p1.x - q1.x) * (p1.z - p2.z) - (p1.z - q1.z) * (p1.x - p2.x)) / denom

    if -t_eps <= t <= 1 + t_eps and -t_eps <= u <= 1 + t_eps:
        return Point(p1.x + t * (q1.x - p1.x), p1.z + t * (q1.z - p1.z))

    return None


def segments_intersect(p1: Point, q1: Point, p2: Point, q2: Point) -> bool:
    """Exact crossing test: parallel segments never intersect, endpoints count."""
    return segment_intersection(p1, q1, p2, q2, parallel_eps=0.0, t_eps=0.0) is not None


def line_intersection(
    p1: Point, p2: Point, p3: Point, p4: Point, parallel_eps: float = PARALLEL_EPS
) -> Optional[Point]:
    """Intersection of the infinite lines through ``p1-p2`` and ``p3-p4``."""
    denom = (p1.x - p2.x) * (p3.z - p4.z) - (p1.z - p2.z) * (p3.x - p4.x)
    if denom == 0 or abs(denom) < parallel_eps:
        return None

    t = ((p1.x - p3.x) * (p3.z - p4.z) - (p1.z - p3.z) * (p3.x - p4.x)) / denom
    return Point(p1.x + t * (p2.x - p1.x), p1.z + t * (p2.z - p1.z))


def is_point_on_segment(
    point: Point, start: Point, end: Point, eps: float = ON_SEGMENT_EPS
) -> bool:
    """Bounding box check that a point known to be on the line lies within the segment."""
    return (
        min(start.x, end.x) - eps <= point.x <= max(start.x, end.x) + eps
        and min(start.z, end.z) - eps <= point.z <= max(start.z, end.z) + eps
    )


def distance_point_to_segment(point: Point, start: Point, end: Point) -> SegmentProjection:
    """Project a point onto a segment.

    Zero-length segments project onto their start point and count as
    on-segment.
    """
    a = point.x - start.x
    b = point.z - start.z
    c = end.x - start.x
    d = end.z - start.z

    len_sq = c * c + d * d
    if len_sq == 0:
        return SegmentProjection(math.sqrt(a * a + b * b), Point(start.x, start.z), True)

    param = (a * c + b * d) / len_sq
    if param < 0:
        closest = Point(start.x, start.z)
        on_segment = False
    elif param > 1:
        closest = Point(end.x, end.z)
        on_segment = False
    else:
        closest = Point(start.x + param * c, start.z + param * d)
        on_segment = True

    return SegmentProjection(distance(point, closest), closest, on_segment)
