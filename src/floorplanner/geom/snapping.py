"""Wall snapping for door and window placement.

Wall surfaces come from standalone Wall rooms and from every edge of every
ordinary room, in their current (rotated) geometry. A query point snaps
to the nearest surface whose perpendicular foot lies on the segment.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from ..config import MIN_SEGMENT_LENGTH, SNAP_EPS
from ..core.model import FloorPlan, Point, RotationMap, WallSegment
from .primitives import distance, distance_point_to_segment, midpoint, polygon_edges
from .rotation import world_polygon

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapResult:
    """Outcome of a nearest-wall query.

    Attributes:
        is_on_wall: Whether a wall surface lies within tolerance.
        snapped_position: Perpendicular foot on the wall, when on a wall.
        wall_segment: The wall snapped to, when on a wall.
        distance: Distance to the nearest on-segment wall (inf if none).
        suggested_rotation: Placement rotation in degrees, when on a wall.
    """

    is_on_wall: bool
    snapped_position: Optional[Point] = None
    wall_segment: Optional[WallSegment] = None
    distance: float = math.inf
    suggested_rotation: Optional[float] = None


@dataclass(frozen=True)
class PlacementResult:
    """Where an opening ends up and how it is turned."""

    position: Point
    rotation: float
    is_valid: bool


def _make_segment(owner_id: str, start: Point, end: Point) -> Optional[WallSegment]:
    length = distance(start, end)
    if length < MIN_SEGMENT_LENGTH:
        return None
    return WallSegment(
        owner_id=owner_id,
        start=start,
        end=end,
        midpoint=midpoint(start, end),
        length=length,
        angle=math.atan2(end.z - start.z, end.x - start.x),
    )


def enumerate_wall_segments(
    plan: FloorPlan, rotations: Optional[RotationMap] = None
) -> List[WallSegment]:
    """Every wall surface in the plan, rotated into current geometry.

    Segments shorter than half a render unit are dropped.
    """
    segments: List[WallSegment] = []

    for room in plan.rooms:
        if room.is_wall:
            if len(room.floor_polygon) != 2:
                continue
            start, end = world_polygon(room, rotations)
            segment = _make_segment(room.id, start, end)
            if segment is not None:
                segments.append(segment)
            continue

        if room.is_reference or len(room.floor_polygon) < 3:
            continue

        polygon = world_polygon(room, rotations)
        for _, start, end in polygon_edges(polygon):
            segment = _make_segment(room.id, start, end)
            if segment is not None:
                segments.append(segment)

    return segments


def calculate_opening_rotation(wall_angle: float) -> float:
    """Placement rotation in degrees for a wall direction given in radians.

    The angle is normalized to [0, 360); angles strictly between 135 and 225
    degrees collapse to 0 so symmetric opening sprites are never drawn
    upside down.
    """
    degrees = math.degrees(wall_angle) % 360
    if degrees >= 360:
        degrees -= 360

    if 135 < degrees < 225:
        degrees = 0.0

    return degrees


def find_nearest_wall(
    position: Point,
    plan: FloorPlan,
    rotations: Optional[RotationMap] = None,
    tolerance: float = SNAP_EPS,
) -> SnapResult:
    """Snap a point to the nearest wall surface within ``tolerance``.

    Only walls whose closest point is the perpendicular foot (not an
    endpoint reached by clamping) are considered.
    """
    nearest: Optional[WallSegment] = None
    nearest_distance = math.inf
    nearest_point: Optional[Point] = None

    for segment in enumerate_wall_segments(plan, rotations):
        projection = distance_point_to_segment(position, segment.start, segment.end)
        if projection.is_on_segment and projection.distance < nearest_distance:
            nearest = segment
            nearest_distance = projection.distance
            nearest_point = projection.closest_point

    if nearest is None or nearest_point is None or nearest_distance > tolerance:
        LOGGER.debug("No wall within %.2f of (%.2f, %.2f)", tolerance, position.x, position.z)
        return SnapResult(is_on_wall=False, distance=nearest_distance)

    return SnapResult(
        is_on_wall=True,
        snapped_position=nearest_point,
        wall_segment=nearest,
        distance=nearest_distance,
        suggested_rotation=calculate_opening_rotation(nearest.angle),
    )


def is_valid_placement_position(
    position: Point,
    plan: FloorPlan,
    rotations: Optional[RotationMap] = None,
    tolerance: float = SNAP_EPS,
) -> bool:
    """Openings may only be placed on a wall."""
    return find_nearest_wall(position, plan, rotations, tolerance).is_on_wall


def get_snapped_placement_result(
    position: Point,
    plan: FloorPlan,
    rotations: Optional[RotationMap] = None,
    tolerance: float = SNAP_EPS,
) -> PlacementResult:
    """Snapped position and rotation, or the raw position flagged invalid."""
    snap = find_nearest_wall(position, plan, rotations, tolerance)
    if snap.is_on_wall and snap.snapped_position is not None and snap.suggested_rotation is not None:
        return PlacementResult(snap.snapped_position, snap.suggested_rotation, True)

    return PlacementResult(position, 0.0, False)
