"""Overlap detection between rooms.

Only regular rooms take part: walls, reference anchors and site
boundaries are skipped. Each room is compared in its current (rotated)
geometry.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Set, Tuple

from ..config import OVERLAP_EPS
from ..core.model import FloorPlan, Point, RotationMap
from .primitives import bounding_box, point_in_polygon, polygon_edges, segments_intersect
from .rotation import world_polygon

OverlapPair = Tuple[str, str]


def boxes_overlap(
    poly1: Sequence[Point], poly2: Sequence[Point], tolerance: float = OVERLAP_EPS
) -> bool:
    """Broad phase: bounding boxes intersect by more than ``tolerance``.

    Boxes that only touch, or overlap by less than the tolerance, do not count.
    """
    min_x1, min_z1, max_x1, max_z1 = bounding_box(poly1)
    min_x2, min_z2, max_x2, max_z2 = bounding_box(poly2)
    return not (
        max_x1 <= min_x2 + tolerance
        or min_x1 >= max_x2 - tolerance
        or max_z1 <= min_z2 + tolerance
        or min_z1 >= max_z2 - tolerance
    )


def polygons_intersect(poly1: Sequence[Point], poly2: Sequence[Point]) -> bool:
    """Narrow phase: any edge crossing, or one polygon containing the other."""
    for _, a_start, a_end in polygon_edges(poly1):
        for _, b_start, b_end in polygon_edges(poly2):
            if segments_intersect(a_start, a_end, b_start, b_end):
                return True

    return point_in_polygon(poly1[0], poly2) or point_in_polygon(poly2[0], poly1)


def check_room_overlap(
    plan: FloorPlan,
    rotations: Optional[RotationMap] = None,
    tolerance: float = OVERLAP_EPS,
) -> List[OverlapPair]:
    """Find every pair of overlapping regular rooms.

    Args:
        plan: The plan to inspect.
        rotations: Rotation map applied before comparing.
        tolerance: Broad phase shrink so touching rooms are not reported.

    Returns:
        Pairs of room IDs, in plan order.
    """
    rooms = [room for room in plan.rooms if room.is_regular_room and len(room.floor_polygon) >= 3]
    polygons = [world_polygon(room, rotations) for room in rooms]

    overlaps: List[OverlapPair] = []
    for i in range(len(rooms)):
        for j in range(i + 1, len(rooms)):
            if not boxes_overlap(polygons[i], polygons[j], tolerance):
                continue
            if polygons_intersect(polygons[i], polygons[j]):
                overlaps.append((rooms[i].id, rooms[j].id))

    return overlaps


def overlapping_room_ids(overlaps: Sequence[OverlapPair]) -> Set[str]:
    """IDs of every room involved in at least one overlap."""
    return {room_id for pair in overlaps for room_id in pair}


def is_room_overlapping(room_id: str, overlaps: Sequence[OverlapPair]) -> bool:
    return any(room_id in pair for pair in overlaps)


def describe_overlaps(plan: FloorPlan, overlaps: Sequence[OverlapPair]) -> str:
    """Short human-readable summary such as ``"Kitchen and Bedroom, Hall and Bath and 2 more"``."""
    names = []
    for id1, id2 in overlaps:
        room1 = plan.room(id1)
        room2 = plan.room(id2)
        if room1 is None or room2 is None or room1.is_wall or room2.is_wall:
            continue
        names.append(f"{room1.room_type or room1.id} and {room2.room_type or room2.id}")

    if len(names) <= 2:
        return ", ".join(names)
    return f"{', '.join(names[:2])} and {len(names) - 2} more"
