"""Post-apply validation functions for plan operations.

These validators run after an operation is applied to make sure the
resulting plan still respects the document's data model.
"""

from __future__ import annotations

from collections import Counter
from typing import List

from shapely.geometry import Polygon as ShapelyPolygon

from ..core.model import FloorPlan, Room
from ..geom.primitives import area

AREA_TOLERANCE = 0.01


class InvalidOperation(Exception):
    """Raised when an operation leaves the plan in an invalid state."""

    pass


def validate_wall_rooms(plan: FloorPlan) -> bool:
    """Every Wall room has exactly two points."""
    return all(len(room.floor_polygon) == 2 for room in plan.rooms if room.is_wall)


def _is_simple_ring(room: Room) -> bool:
    ring = ShapelyPolygon([(p.x, p.z) for p in room.floor_polygon])
    return ring.is_valid and not ring.is_empty


def validate_room_polygons(plan: FloorPlan) -> List[str]:
    """IDs of ordinary rooms that are not simple polygons of at least 3 points.

    Returns:
        The offending room IDs; empty when every polygon is valid.
    """
    invalid = []
    for room in plan.rooms:
        if room.is_wall or room.is_reference:
            continue
        if len(room.floor_polygon) < 3 or not _is_simple_ring(room):
            invalid.append(room.id)
    return invalid


def duplicate_ids(plan: FloorPlan) -> List[str]:
    counts = Counter(room.id for room in plan.rooms)
    return sorted(room_id for room_id, count in counts.items() if count > 1)


def validate_areas(plan: FloorPlan, tolerance: float = AREA_TOLERANCE) -> List[str]:
    """IDs of ordinary rooms whose stored area disagrees with their polygon."""
    return [
        room.id
        for room in plan.rooms
        if not (room.is_wall or room.is_reference)
        and abs(room.area - area(room.floor_polygon)) > tolerance
    ]


def validate_plan(plan: FloorPlan) -> bool:
    """Run all validators on the plan.

    Args:
        plan: The plan to validate.

    Returns:
        True if all validations pass.

    Raises:
        InvalidOperation: If any validation fails, with details about the failure.
    """
    if not validate_wall_rooms(plan):
        raise InvalidOperation("Wall validation failed: walls must have exactly 2 points")

    invalid_polygons = validate_room_polygons(plan)
    if invalid_polygons:
        raise InvalidOperation(
            f"Polygon validation failed: {', '.join(invalid_polygons)} are not simple polygons"
        )

    duplicates = duplicate_ids(plan)
    if duplicates:
        raise InvalidOperation(f"ID validation failed: duplicate IDs {', '.join(duplicates)}")

    mismatched = validate_areas(plan)
    if mismatched:
        raise InvalidOperation(
            f"Area validation failed: stored area out of date for {', '.join(mismatched)}"
        )

    return True
