"""Conversions between wall segments and rooms.

This module turns closed wall loops into rooms, breaks rooms back into
standalone walls, and keeps stored room measurements derived from the
polygon whenever the polygon changes. Every function returns a new
``FloorPlan``; the input plan is never modified.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..config import DEFAULT_TOLERANCES, DEFAULT_WALL_THICKNESS, Tolerances
from ..core.model import (
    REFERENCE_TYPE,
    WALL_TYPE,
    FloorPlan,
    Point,
    Room,
    RotationMap,
    generate_unique_id,
)
from ..core.topology import Closure, find_closures
from .areas import refresh_totals
from .primitives import area, dimensions, polygon_edges

LOGGER = logging.getLogger(__name__)

IdFactory = Callable[[str], str]

REFERENCE_ANCHOR_ID = "invisible-reference-point-1"

_WALL_SEGMENT_ID = re.compile(r"^(?P<room>.+)-wall-(?P<index>\d+)$")


def create_room(
    polygon: Sequence[Point],
    room_type: str = "",
    room_id: Optional[str] = None,
    is_boundary: bool = False,
    id_factory: IdFactory = generate_unique_id,
) -> Room:
    """Create an ordinary room whose measurements come from its polygon.

    Args:
        polygon: Room outline with at least three points.
        room_type: Room type name; empty leaves it for the user to assign.
        room_id: Explicit ID; a fresh one is generated when omitted.
        is_boundary: Whether the polygon marks the site boundary.
        id_factory: Generator for fresh IDs.

    Returns:
        A regular room.
    """
    points = tuple(polygon)
    width, height = dimensions(points)
    return Room(
        id=room_id or id_factory("room"),
        room_type=room_type,
        area=area(points),
        height=height,
        width=width,
        floor_polygon=points,
        is_regular=True,
        is_boundary=is_boundary,
    )


def make_wall(
    start: Point,
    end: Point,
    width: float = DEFAULT_WALL_THICKNESS,
    wall_id: Optional[str] = None,
    id_factory: IdFactory = generate_unique_id,
) -> Room:
    """Create a standalone Wall room; ``width`` is the wall thickness."""
    return Room(
        id=wall_id or id_factory("wall"),
        room_type=WALL_TYPE,
        area=0.0,
        height=0.0,
        width=width,
        floor_polygon=(start, end),
    )


def rectangle_polygon(start: Point, end: Point) -> Tuple[Point, ...]:
    """Axis-aligned rectangle spanned by two opposite corners."""
    return (
        Point(start.x, start.z),
        Point(end.x, start.z),
        Point(end.x, end.z),
        Point(start.x, end.z),
    )


def replace_rooms(
    plan: FloorPlan,
    remove_ids: Iterable[str],
    add_rooms: Iterable[Room] = (),
    rotations: Optional[RotationMap] = None,
) -> FloorPlan:
    """Drop rooms by ID, append new ones, and refresh the document totals."""
    removed = set(remove_ids)
    rooms = [room for room in plan.rooms if room.id not in removed]
    rooms.extend(add_rooms)
    return refresh_totals(replace(plan, rooms=tuple(rooms)), rotations)


def update_room_polygon(
    plan: FloorPlan,
    room_id: str,
    polygon: Sequence[Point],
    rotations: Optional[RotationMap] = None,
) -> FloorPlan:
    """Replace a room's polygon and rederive its area and dimensions.

    Wall rooms keep their thickness in ``width``.
    """
    points = tuple(polygon)
    rooms = []
    for room in plan.rooms:
        if room.id != room_id:
            rooms.append(room)
        elif room.is_wall:
            rooms.append(replace(room, floor_polygon=points))
        else:
            width, height = dimensions(points)
            rooms.append(replace(room, floor_polygon=points, area=area(points), width=width, height=height))
    return refresh_totals(replace(plan, rooms=tuple(rooms)), rotations)


def room_from_closure(closure: Closure, id_factory: IdFactory = generate_unique_id) -> Room:
    """Room for a closed wall loop, with its type left unassigned."""
    return create_room(closure.polygon, room_type="", id_factory=id_factory)


def walls_to_room(
    plan: FloorPlan,
    closure: Closure,
    rotations: Optional[RotationMap] = None,
    id_factory: IdFactory = generate_unique_id,
) -> Tuple[FloorPlan, Room]:
    """Replace the walls consumed by a closure with a single new room."""
    room = room_from_closure(closure, id_factory)
    consumed = {room_obj.id for room_obj in plan.rooms if room_obj.is_wall and room_obj.id in closure.wall_ids}
    LOGGER.info("Closed %d walls into room %s (%.2f sq ft)", len(consumed), room.id, room.area)
    return replace_rooms(plan, consumed, [room], rotations), room


def close_wall_loops(
    plan: FloorPlan,
    rotations: Optional[RotationMap] = None,
    tolerances: Tolerances = DEFAULT_TOLERANCES,
    id_factory: IdFactory = generate_unique_id,
) -> Tuple[FloorPlan, List[Room]]:
    """Convert every closable wall group into a room.

    Groups that do not close are left as standalone walls, to be retried
    after the next wall edit.

    Returns:
        The updated plan and the rooms created, in creation order.
    """
    walls = plan.walls
    if len(walls) < 3:
        return plan, []

    created: List[Room] = []
    for closure in find_closures(walls, tolerances.connect, tolerances.close, tolerances.close_search_max):
        plan, room = walls_to_room(plan, closure, rotations, id_factory)
        created.append(room)

    return plan, created


def room_to_walls(
    plan: FloorPlan,
    room_id: str,
    thickness: float = DEFAULT_WALL_THICKNESS,
    skip_edge: Optional[int] = None,
    rotations: Optional[RotationMap] = None,
    id_factory: IdFactory = generate_unique_id,
) -> FloorPlan:
    """Discard a room and emit one standalone wall per polygon edge.

    Args:
        plan: The plan to modify.
        room_id: ID of the room to break up.
        thickness: Thickness of the emitted walls.
        skip_edge: Index of an edge that gets no wall (a deleted wall segment).
        rotations: Rotation map used to refresh the document totals.
        id_factory: Generator for fresh wall IDs.

    Returns:
        The updated plan, or the unchanged plan if the room is missing or
        is itself a wall.
    """
    room = plan.room(room_id)
    if room is None or room.is_wall or room.is_reference:
        LOGGER.debug("Room %s cannot be converted to walls", room_id)
        return plan

    walls = [
        make_wall(start, end, thickness, id_factory=id_factory)
        for index, start, end in polygon_edges(room.floor_polygon)
        if index != skip_edge
    ]
    return replace_rooms(plan, [room_id], walls, rotations)


def delete_room_edge(
    plan: FloorPlan,
    room_id: str,
    edge_index: int,
    thickness: float = DEFAULT_WALL_THICKNESS,
    rotations: Optional[RotationMap] = None,
    id_factory: IdFactory = generate_unique_id,
) -> FloorPlan:
    """Delete one wall segment of a room, leaving the other edges as walls."""
    return room_to_walls(plan, room_id, thickness, edge_index, rotations, id_factory)


def remove_room_vertices(
    plan: FloorPlan,
    room_id: str,
    indices: Iterable[int],
    thickness: float = DEFAULT_WALL_THICKNESS,
    rotations: Optional[RotationMap] = None,
    id_factory: IdFactory = generate_unique_id,
) -> FloorPlan:
    """Delete vertices from a room.

    A room left with fewer than three vertices is no longer an area; its
    original edges become standalone walls instead.
    """
    room = plan.room(room_id)
    if room is None or room.is_wall or room.is_reference:
        return plan

    dropped = set(indices)
    remaining = [p for i, p in enumerate(room.floor_polygon) if i not in dropped]
    if len(remaining) >= 3:
        return update_room_polygon(plan, room_id, remaining, rotations)

    return room_to_walls(plan, room_id, thickness, rotations=rotations, id_factory=id_factory)


def wall_segment_id(room_id: str, index: int) -> str:
    """Selection ID of one edge of a room, e.g. ``room|ab12-wall-3``."""
    return f"{room_id}-wall-{index}"


def parse_wall_segment_id(selection_id: str) -> Optional[Tuple[str, int]]:
    """Split a wall segment selection ID into ``(room_id, edge_index)``."""
    match = _WALL_SEGMENT_ID.match(selection_id)
    if not match:
        return None
    return match.group("room"), int(match.group("index"))


def ensure_reference_anchor(plan: FloorPlan, rotations: Optional[RotationMap] = None) -> FloorPlan:
    """Replace any reference anchors with the single invisible origin anchor."""
    anchor = Room(
        id=REFERENCE_ANCHOR_ID,
        room_type=REFERENCE_TYPE,
        area=0.0,
        height=0.0,
        width=0.0,
        floor_polygon=(Point(0.0, 0.0), Point(0.0, 0.0)),
        is_regular=False,
    )
    visible = [room for room in plan.rooms if not room.is_reference]
    return refresh_totals(replace(plan, rooms=tuple(visible) + (anchor,)), rotations)
