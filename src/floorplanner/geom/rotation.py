"""Rotation model for plan entities.

Rotations live in a map ``room_id -> degrees`` and are never stored in
``floor_polygon``. Consumers that need current geometry derive a
``WorldPolygon`` by rotating the ``LocalPolygon`` about its own centroid.
Only the persistence step bakes rotations into the stored vertices.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Dict, Iterable, Optional, Sequence

from ..config import GROUP_ROTATION_STEP_DEG, ROTATION_STEP_DEG
from ..core.model import FloorPlan, LocalPolygon, Point, Room, RotationMap, WorldPolygon
from .primitives import area, centroid, dimensions


def rotate_point(point: Point, center: Point, angle_degrees: float) -> Point:
    """Rotate a point about ``center`` by ``angle_degrees`` (counterclockwise in x/z)."""
    radians = math.radians(angle_degrees)
    cos = math.cos(radians)
    sin = math.sin(radians)
    dx = point.x - center.x
    dz = point.z - center.z
    return Point(center.x + dx * cos - dz * sin, center.z + dx * sin + dz * cos)


def rotate_polygon(polygon: Sequence[Point], angle_degrees: float) -> WorldPolygon:
    """Rotate a polygon about its vertex centroid.

    A zero rotation returns the vertices unchanged.
    """
    if angle_degrees == 0 or not polygon:
        return WorldPolygon(tuple(polygon))

    center = centroid(polygon)
    return WorldPolygon(tuple(rotate_point(p, center, angle_degrees) for p in polygon))


def rotation_of(rotations: Optional[RotationMap], room_id: str) -> float:
    """Rotation for an entity; an absent entry means 0."""
    if not rotations:
        return 0.0
    return rotations.get(room_id, 0.0) or 0.0


def local_polygon(room: Room) -> LocalPolygon:
    return LocalPolygon(tuple(room.floor_polygon))


def world_polygon(room: Room, rotations: Optional[RotationMap] = None) -> WorldPolygon:
    """Current geometry of a room: its stored polygon under its rotation."""
    return rotate_polygon(local_polygon(room), rotation_of(rotations, room.id))


def bake_rotations(plan: FloorPlan, rotations: Optional[RotationMap]) -> FloorPlan:
    """Write every non-zero rotation into the stored polygons.

    Used once when the plan is persisted. Areas are unchanged by rotation;
    bounding dimensions are recomputed for ordinary rooms.
    """
    if not rotations:
        return plan

    rooms = []
    for room in plan.rooms:
        angle = rotation_of(rotations, room.id)
        if angle == 0:
            rooms.append(room)
            continue

        rotated = tuple(rotate_polygon(room.floor_polygon, angle))
        if room.is_wall or room.is_reference:
            rooms.append(replace(room, floor_polygon=rotated))
        else:
            width, height = dimensions(rotated)
            rooms.append(
                replace(room, floor_polygon=rotated, area=area(rotated), width=width, height=height)
            )

    return replace(plan, rooms=tuple(rooms))


def rotate_rooms(
    rotations: RotationMap,
    room_id: str,
    direction: str,
    selected_ids: Iterable[str] = (),
    step: float = ROTATION_STEP_DEG,
) -> Dict[str, float]:
    """Rotate one room, or a whole multi-selection containing it, by one step.

    Args:
        rotations: Current rotation map.
        room_id: ID of the room the user rotated.
        direction: ``"right"`` for a positive step, ``"left"`` for a negative one.
        selected_ids: Currently selected room IDs.
        step: Rotation increment in degrees.

    Returns:
        A new rotation map.

    Raises:
        ValueError: If ``direction`` is not ``"left"`` or ``"right"``.
    """
    amount = _signed_step(direction, step)
    selected = list(selected_ids)
    new_rotations = dict(rotations)

    targets = selected if len(selected) > 1 and room_id in selected else [room_id]
    for target in targets:
        new_rotations[target] = rotation_of(rotations, target) + amount

    return new_rotations


def rotate_selection(
    rotations: RotationMap,
    selected_ids: Iterable[str],
    direction: str,
    step: float = GROUP_ROTATION_STEP_DEG,
) -> Dict[str, float]:
    """Quarter-turn every selected room, keeping angles modulo 360.

    Single selections are left alone; the per-room control handles those.
    """
    selected = list(selected_ids)
    new_rotations = dict(rotations)
    if len(selected) <= 1:
        return new_rotations

    amount = _signed_step(direction, step)
    for target in selected:
        new_rotations[target] = math.fmod(rotation_of(rotations, target) + amount, 360)

    return new_rotations


def _signed_step(direction: str, step: float) -> float:
    if direction == "right":
        return step
    if direction == "left":
        return -step
    raise ValueError(f"Unknown rotation direction: {direction}")
