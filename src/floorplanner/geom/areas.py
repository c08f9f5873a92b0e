"""Plan-level area aggregation.

Boundary rooms stand for the site. Rooms inside a boundary are already
represented by its footprint, so only rooms outside every boundary add to
the total.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Sequence

from ..core.model import FloorPlan, Room, RotationMap
from .primitives import centroid, point_in_polygon
from .rotation import world_polygon


def _outside_all(room: Room, boundaries: Sequence[Room], rotations: Optional[RotationMap]) -> bool:
    """True when the room's rotated centroid lies outside every boundary polygon."""
    center = centroid(world_polygon(room, rotations))
    return not any(point_in_polygon(center, boundary.floor_polygon) for boundary in boundaries)


def _outermost_boundaries(boundaries: Sequence[Room]) -> List[Room]:
    """Boundaries whose centroid is not inside another boundary."""
    outermost = []
    for boundary in boundaries:
        center = centroid(boundary.floor_polygon)
        nested = any(
            other.id != boundary.id and point_in_polygon(center, other.floor_polygon)
            for other in boundaries
        )
        if not nested:
            outermost.append(boundary)
    return outermost


def total_area(rooms: Sequence[Room], rotations: Optional[RotationMap] = None) -> float:
    """Total plan area in square feet without double counting.

    Args:
        rooms: Every room in the plan, of any type.
        rotations: Rotation map used to locate rotated rooms.

    Returns:
        Sum of regular room areas when there is no boundary; otherwise the
        area of the outermost boundaries plus every regular room whose
        centroid falls outside all boundaries.
    """
    boundaries = [room for room in rooms if room.is_boundary]
    regular = [room for room in rooms if room.is_regular_room]

    if not boundaries:
        return sum(room.area for room in regular)

    if len(boundaries) == 1:
        counted = boundaries
    else:
        counted = _outermost_boundaries(boundaries)

    outside = [room for room in regular if _outside_all(room, boundaries, rotations)]
    return sum(b.area for b in counted) + sum(room.area for room in outside)


def room_count(rooms: Sequence[Room]) -> int:
    """Number of regular rooms (walls, reference anchors and boundaries excluded)."""
    return sum(1 for room in rooms if room.is_regular_room)


def refresh_totals(plan: FloorPlan, rotations: Optional[RotationMap] = None) -> FloorPlan:
    """Recompute ``room_count`` and ``total_area`` (rounded to 2 decimals)."""
    return replace(
        plan,
        room_count=room_count(plan.rooms),
        total_area=round(total_area(plan.rooms, rotations), 2),
    )
