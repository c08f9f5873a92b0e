"""Cutting rooms with newly drawn walls.

A wall whose line crosses a room's outline at two edges splits that room
in two along the wall's infinite line. Rotated rooms are never split:
their stored polygon is not their current geometry, and cutting them is
a known limitation kept as is.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..config import (
    DEFAULT_DRAWN_WALL_WIDTH,
    MIN_SPLIT_AREA,
    SHORT_WALL_LENGTH,
    SPLIT_PROBE_EXTENSION,
    STRAIGHTEN_ANGLE_DEG,
    TOUCH_EPS,
)
from ..core.model import FloorPlan, Point, Room, RotationMap, generate_unique_id
from .edit import IdFactory, create_room, make_wall, replace_rooms
from .primitives import (
    area,
    bounding_box,
    centroid,
    distance,
    distance_point_to_segment,
    is_point_on_segment,
    midpoint,
    polygon_edges,
    segment_intersection,
)
from .rotation import rotation_of

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Crossing:
    point: Point
    edge_index: int
    distance: float


@dataclass(frozen=True)
class SplitResult:
    """Outcome of cutting a polygon with a wall line.

    Attributes:
        snapped_start: Where the cut enters the polygon.
        snapped_end: Where the cut leaves the polygon.
        polygons: The two sub-polygons.
    """

    snapped_start: Point
    snapped_end: Point
    polygons: Tuple[Tuple[Point, ...], Tuple[Point, ...]]


@dataclass(frozen=True)
class AddWallResult:
    """Outcome of drawing a wall.

    Attributes:
        plan: The updated plan.
        divided: Whether the wall split a room instead of being inserted.
        rooms: Rooms created by the split, or the inserted wall.
    """

    plan: FloorPlan
    divided: bool
    rooms: Tuple[Room, ...]


def _direction(start: Point, end: Point) -> Optional[Tuple[float, float, float]]:
    length = distance(start, end)
    if length == 0:
        return None
    return (end.x - start.x) / length, (end.z - start.z) / length, length


def straighten_wall(
    start: Point, end: Point, tolerance_deg: float = STRAIGHTEN_ANGLE_DEG
) -> Tuple[Point, Point]:
    """Snap a drawn wall to horizontal, vertical or 45 degree diagonals.

    The start point is kept; the end point moves. Walls further than
    ``tolerance_deg`` from every preferred direction are returned as drawn.
    """
    dx = end.x - start.x
    dz = end.z - start.z

    angle = math.degrees(math.atan2(dz, dx))
    normalized = math.fmod(math.fmod(angle, 180) + 180, 180)

    if normalized <= tolerance_deg or normalized >= 180 - tolerance_deg:
        return start, Point(end.x, start.z)

    if abs(normalized - 90) <= tolerance_deg:
        return start, Point(start.x, end.z)

    diagonal = math.sqrt(dx * dx + dz * dz) / math.sqrt(2)
    if abs(normalized - 45) <= tolerance_deg:
        return start, Point(
            start.x + (diagonal if dx > 0 else -diagonal),
            start.z + (diagonal if dz > 0 else -diagonal),
        )

    if abs(normalized - 135) <= tolerance_deg:
        return start, Point(
            start.x + (-diagonal if dx > 0 else diagonal),
            start.z + (diagonal if dz > 0 else -diagonal),
        )

    return start, end


def count_wall_room_intersections(
    wall_start: Point,
    wall_end: Point,
    polygon: Sequence[Point],
    extension: float = SPLIT_PROBE_EXTENSION,
) -> int:
    """Number of room edges crossed by the wall, slightly extended at both ends."""
    direction = _direction(wall_start, wall_end)
    if direction is None:
        return 0
    dir_x, dir_z, _ = direction

    probe_start = Point(wall_start.x - dir_x * extension, wall_start.z - dir_z * extension)
    probe_end = Point(wall_end.x + dir_x * extension, wall_end.z + dir_z * extension)

    count = 0
    for _, edge_start, edge_end in polygon_edges(polygon):
        crossing = segment_intersection(probe_start, probe_end, edge_start, edge_end)
        if crossing is not None and is_point_on_segment(crossing, edge_start, edge_end):
            count += 1
    return count


def does_wall_cross_room(
    wall_start: Point,
    wall_end: Point,
    polygon: Sequence[Point],
    touch_eps: float = TOUCH_EPS,
) -> bool:
    """Whether the wall crosses or touches at least two distinct room edges."""
    touched = set()
    for index, edge_start, edge_end in polygon_edges(polygon):
        if (
            distance_point_to_segment(wall_start, edge_start, edge_end).distance <= touch_eps
            or distance_point_to_segment(wall_end, edge_start, edge_end).distance <= touch_eps
        ):
            touched.add(index)
            continue

        crossing = segment_intersection(wall_start, wall_end, edge_start, edge_end)
        if crossing is not None and is_point_on_segment(crossing, edge_start, edge_end):
            touched.add(index)

    return len(touched) >= 2


def _select_entry_exit(
    crossings: List[_Crossing], wall_start: Point, wall_end: Point
) -> Tuple[_Crossing, _Crossing]:
    """Pick the pair of crossings that straddles the drawn wall."""
    crossings.sort(key=lambda c: c.distance)
    if len(crossings) == 2:
        return crossings[0], crossings[1]

    center = midpoint(wall_start, wall_end)
    nearest = min(crossings, key=lambda c: distance(c.point, center))

    before = None
    after = None
    for crossing in crossings:
        if crossing.distance < nearest.distance:
            if before is None or crossing.distance > before.distance:
                before = crossing
        elif crossing.distance > nearest.distance:
            if after is None or crossing.distance < after.distance:
                after = crossing

    entry = before or crossings[0]
    exit_ = after or crossings[-1]
    if entry is exit_:
        entry, exit_ = crossings[0], crossings[-1]
    return entry, exit_


def divide_room_polygon(
    polygon: Sequence[Point],
    wall_start: Point,
    wall_end: Point,
    min_area: float = MIN_SPLIT_AREA,
) -> Optional[SplitResult]:
    """Cut a polygon in two along the infinite line through a wall.

    Args:
        polygon: Room outline, in either winding.
        wall_start: Start of the drawn wall.
        wall_end: End of the drawn wall.
        min_area: Sub-polygons with area at or below this (sq ft) are slivers.

    Returns:
        The split, or None unless exactly two non-degenerate sub-polygons
        result.
    """
    direction = _direction(wall_start, wall_end)
    if direction is None or len(polygon) < 3:
        return None
    dir_x, dir_z, wall_length = direction

    min_x, min_z, max_x, max_z = bounding_box(polygon)
    extension = math.hypot(max_x - min_x, max_z - min_z) * 2

    probe_start = Point(wall_start.x - dir_x * extension, wall_start.z - dir_z * extension)
    probe_end = Point(wall_end.x + dir_x * extension, wall_end.z + dir_z * extension)

    reference = midpoint(wall_start, wall_end) if wall_length < SHORT_WALL_LENGTH else wall_start

    crossings: List[_Crossing] = []
    for index, edge_start, edge_end in polygon_edges(polygon):
        point = segment_intersection(probe_start, probe_end, edge_start, edge_end)
        if point is None or not is_point_on_segment(point, edge_start, edge_end):
            continue
        along = (point.x - reference.x) * dir_x + (point.z - reference.z) * dir_z
        crossings.append(_Crossing(point, index, along))

    if len(crossings) < 2:
        return None

    entry, exit_ = _select_entry_exit(crossings, wall_start, wall_end)
    n = len(polygon)

    forward = [entry.point]
    current = (entry.edge_index + 1) % n
    while current != (exit_.edge_index + 1) % n:
        forward.append(polygon[current])
        current = (current + 1) % n
    forward.append(exit_.point)

    backward = [entry.point]
    current = entry.edge_index
    while current != exit_.edge_index:
        backward.append(polygon[current])
        current = (current - 1 + n) % n
    backward.append(exit_.point)

    survivors = [tuple(p) for p in (forward, backward) if len(p) >= 3 and area(p) > min_area]
    if len(survivors) != 2:
        LOGGER.debug("Split aborted: %d valid sub-polygons", len(survivors))
        return None

    return SplitResult(entry.point, exit_.point, (survivors[0], survivors[1]))


def find_split_candidates(
    wall_start: Point,
    wall_end: Point,
    plan: FloorPlan,
    rotations: Optional[RotationMap] = None,
) -> List[Room]:
    """Unrotated ordinary rooms whose outline the wall crosses at least twice."""
    return [
        room
        for room in plan.rooms
        if room.is_regular_room
        and len(room.floor_polygon) >= 3
        and rotation_of(rotations, room.id) == 0
        and count_wall_room_intersections(wall_start, wall_end, room.floor_polygon) >= 2
    ]


def find_best_room_to_divide(
    wall_start: Point,
    wall_end: Point,
    plan: FloorPlan,
    rotations: Optional[RotationMap] = None,
) -> Optional[Room]:
    """Candidate room whose centroid is nearest the wall's midpoint."""
    candidates = find_split_candidates(wall_start, wall_end, plan, rotations)
    if not candidates:
        return None

    center = midpoint(wall_start, wall_end)
    return min(candidates, key=lambda room: distance(center, centroid(room.floor_polygon)))


def split_room_by_wall(
    plan: FloorPlan,
    wall: Room,
    rotations: Optional[RotationMap] = None,
    id_factory: IdFactory = generate_unique_id,
) -> Optional[Tuple[FloorPlan, Tuple[Room, Room]]]:
    """Replace the room cut by ``wall`` with its two halves.

    The drawn wall is consumed: it is removed from the plan if present.

    Returns:
        The updated plan and the two new rooms, or None if no room can be
        split, in which case the caller keeps the wall as a standalone wall.
    """
    if len(wall.floor_polygon) != 2:
        return None
    wall_start, wall_end = wall.floor_polygon

    target = find_best_room_to_divide(wall_start, wall_end, plan, rotations)
    if target is None:
        return None

    result = divide_room_polygon(target.floor_polygon, wall_start, wall_end)
    if result is None:
        return None

    first, second = (create_room(polygon, id_factory=id_factory) for polygon in result.polygons)
    LOGGER.info(
        "Split room %s into %s (%.2f sq ft) and %s (%.2f sq ft)",
        target.id, first.id, first.area, second.id, second.area,
    )
    new_plan = replace_rooms(plan, [target.id, wall.id], [first, second], rotations)
    return new_plan, (first, second)


def add_wall(
    plan: FloorPlan,
    start: Point,
    end: Point,
    width: float = DEFAULT_DRAWN_WALL_WIDTH,
    rotations: Optional[RotationMap] = None,
    straighten: bool = True,
    id_factory: IdFactory = generate_unique_id,
) -> AddWallResult:
    """Add a drawn wall: split the room it cuts, or keep it standalone.

    Args:
        plan: The plan to modify.
        start: Drawn start point.
        end: Drawn end point.
        width: Thickness of the wall if it stays standalone.
        rotations: Current rotation map.
        straighten: Whether to snap the wall to preferred directions first.
        id_factory: Generator for fresh IDs.

    Returns:
        The result of the edit. No plan data is lost when the split fails.
    """
    if straighten:
        start, end = straighten_wall(start, end)

    wall = make_wall(start, end, width, id_factory=id_factory)

    split = split_room_by_wall(plan, wall, rotations, id_factory)
    if split is not None:
        new_plan, rooms = split
        return AddWallResult(new_plan, True, rooms)

    new_plan = replace_rooms(plan, [], [wall], rotations)
    return AddWallResult(new_plan, False, (wall,))
