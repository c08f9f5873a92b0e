"""Mitered wall outlines for renderers.

A room's edges are drawn as thick quads. Adjacent quads are trimmed so
they meet on the bisector of the corner instead of overlapping.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..config import COVER_EPS, DEFAULT_WALL_THICKNESS, MIN_EDGE_LENGTH, MITER_PARALLEL_EPS
from ..core.model import FloorPlan, Point, Room, RotationMap
from .primitives import line_intersection, polygon_edges
from .rotation import world_polygon

Interval = Tuple[float, float]


@dataclass(frozen=True)
class EdgeWall:
    """One segment in a closed wall chain, with its thickness."""

    start: Point
    end: Point
    thickness: float


@dataclass(frozen=True)
class WallQuad:
    """Four corners of a trimmed wall.

    ``top`` is offset to the left of the segment direction, ``bottom`` to
    the right.
    """

    top_start: Point
    top_end: Point
    bottom_start: Point
    bottom_end: Point

    def as_polygon(self) -> Tuple[Point, Point, Point, Point]:
        """Corners in drawing order."""
        return (self.top_start, self.top_end, self.bottom_end, self.bottom_start)


def _offset_line(wall: EdgeWall, side: float) -> Optional[Tuple[Point, Point]]:
    """The wall's line shifted by half its thickness; ``side`` is +1 or -1."""
    dx = wall.end.x - wall.start.x
    dz = wall.end.z - wall.start.z
    length = math.hypot(dx, dz)
    if length == 0:
        return None

    half = wall.thickness / 2 * side
    perp_x = -dz / length * half
    perp_z = dx / length * half
    return (
        Point(wall.start.x + perp_x, wall.start.z + perp_z),
        Point(wall.end.x + perp_x, wall.end.z + perp_z),
    )


def calculate_mitered_corners(walls: Sequence[EdgeWall]) -> List[Optional[WallQuad]]:
    """Trimmed quads for a closed, ordered chain of walls.

    Each side of wall ``i`` is intersected, as an infinite line, with the
    same side of wall ``i - 1`` at its start and of wall ``i + 1`` at its
    end. Near-parallel neighbours keep the raw offset point.

    Returns:
        One quad per wall, or None for zero-length walls.
    """
    n = len(walls)
    corners: List[Optional[WallQuad]] = []

    for i, wall in enumerate(walls):
        top = _offset_line(wall, 1)
        bottom = _offset_line(wall, -1)
        if top is None or bottom is None:
            corners.append(None)
            continue

        top_start, top_end = top
        bottom_start, bottom_end = bottom

        prev_wall = walls[i - 1]
        prev_top = _offset_line(prev_wall, 1)
        prev_bottom = _offset_line(prev_wall, -1)
        if prev_top is not None and prev_bottom is not None:
            top_start = line_intersection(*prev_top, *top, MITER_PARALLEL_EPS) or top_start
            bottom_start = line_intersection(*prev_bottom, *bottom, MITER_PARALLEL_EPS) or bottom_start

        next_wall = walls[(i + 1) % n]
        next_top = _offset_line(next_wall, 1)
        next_bottom = _offset_line(next_wall, -1)
        if next_top is not None and next_bottom is not None:
            top_end = line_intersection(*top, *next_top, MITER_PARALLEL_EPS) or top_end
            bottom_end = line_intersection(*bottom, *next_bottom, MITER_PARALLEL_EPS) or bottom_end

        corners.append(WallQuad(top_start, top_end, bottom_start, bottom_end))

    return corners


def room_edge_walls(
    room: Room, thickness: float, rotations: Optional[RotationMap] = None
) -> List[EdgeWall]:
    """Closed wall chain along a room's current outline."""
    polygon = world_polygon(room, rotations)
    return [EdgeWall(start, end, thickness) for _, start, end in polygon_edges(polygon)]


def generate_room_wall_quads(
    room: Room,
    thickness: float = DEFAULT_WALL_THICKNESS,
    rotations: Optional[RotationMap] = None,
) -> List[Optional[WallQuad]]:
    """Mitered quads for every edge of a room.

    Edges shorter than ``MIN_EDGE_LENGTH`` get no quad (None at their index).
    """
    if room.is_wall or room.is_reference or len(room.floor_polygon) < 3:
        return []

    walls = room_edge_walls(room, thickness, rotations)
    quads = calculate_mitered_corners(walls)
    return [
        quad if math.hypot(w.end.x - w.start.x, w.end.z - w.start.z) >= MIN_EDGE_LENGTH else None
        for w, quad in zip(walls, quads)
    ]


def _is_horizontal(start: Point, end: Point, tolerance: float) -> bool:
    return abs(start.z - end.z) < tolerance


def _is_vertical(start: Point, end: Point, tolerance: float) -> bool:
    return abs(start.x - end.x) < tolerance


def _collinear(
    a_start: Point, a_end: Point, b_start: Point, b_end: Point, tolerance: float
) -> bool:
    """Both segments horizontal on the same z, or vertical on the same x."""
    if (
        _is_horizontal(a_start, a_end, tolerance)
        and _is_horizontal(b_start, b_end, tolerance)
        and abs(a_start.z - b_start.z) < tolerance
    ):
        return True
    return (
        _is_vertical(a_start, a_end, tolerance)
        and _is_vertical(b_start, b_end, tolerance)
        and abs(a_start.x - b_start.x) < tolerance
    )


def _axis_interval(start: Point, end: Point, horizontal: bool) -> Interval:
    if horizontal:
        return min(start.x, end.x), max(start.x, end.x)
    return min(start.z, end.z), max(start.z, end.z)


def merge_intervals(intervals: Sequence[Interval], tolerance: float = COVER_EPS) -> List[Interval]:
    """Merge sorted-or-not intervals whose gaps are within ``tolerance``."""
    merged: List[Interval] = []
    for low, high in sorted(intervals):
        if merged and low <= merged[-1][1] + tolerance:
            merged[-1] = (merged[-1][0], max(merged[-1][1], high))
        else:
            merged.append((low, high))
    return merged


def covers_range(
    intervals: Sequence[Interval], low: float, high: float, tolerance: float = COVER_EPS
) -> bool:
    """Whether merged intervals cover ``[low, high]`` without gaps."""
    if not intervals:
        return False
    if intervals[0][0] > low + tolerance or intervals[-1][1] < high - tolerance:
        return False
    return all(
        intervals[i][0] <= intervals[i - 1][1] + tolerance for i in range(1, len(intervals))
    )


def is_external_wall_segment(
    room_id: str,
    index: int,
    plan: FloorPlan,
    rotations: Optional[RotationMap] = None,
    tolerance: float = COVER_EPS,
) -> bool:
    """Whether edge ``index`` of a room faces outside the building.

    An edge is internal when collinear edges of other rooms cover it
    completely. Only axis-aligned edges can be covered.

    Args:
        room_id: ID of the room owning the edge.
        index: Edge index in the room's polygon.
        plan: The plan holding every room.
        rotations: Rotation map applied to all rooms.
        tolerance: Collinearity and interval gap tolerance.

    Returns:
        False for missing rooms, Wall rooms and out-of-range indices.
    """
    room = plan.room(room_id)
    if room is None or room.is_wall or room.is_reference:
        return False

    polygon = world_polygon(room, rotations)
    if index < 0 or index >= len(polygon):
        return False

    start = polygon[index]
    end = polygon[(index + 1) % len(polygon)]
    horizontal = _is_horizontal(start, end, tolerance)
    wall_low, wall_high = _axis_interval(start, end, horizontal)

    covering: List[Interval] = []
    for other in plan.rooms:
        if other.id == room_id or other.is_wall or other.is_reference:
            continue
        for _, other_start, other_end in polygon_edges(world_polygon(other, rotations)):
            if not _collinear(start, end, other_start, other_end, tolerance):
                continue
            other_low, other_high = _axis_interval(other_start, other_end, horizontal)
            overlap_low = max(wall_low, other_low)
            overlap_high = min(wall_high, other_high)
            if overlap_low <= overlap_high + tolerance:
                covering.append((overlap_low, overlap_high))

    return not covers_range(merge_intervals(covering, tolerance), wall_low, wall_high, tolerance)
