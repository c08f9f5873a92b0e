"""Operations engine for floor plan editing.

This module provides the edits that can be applied to a plan: closing wall
loops, drawing walls and rooms, deleting rooms and wall segments, removing
vertices and placing doors and windows.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Sequence, Union

from ..config import DEFAULT_DRAWN_WALL_WIDTH, DEFAULT_WALL_THICKNESS, SNAP_EPS
from ..core.model import FloorPlan, Opening, Point, RotationMap, generate_unique_id
from ..geom.edit import (
    IdFactory,
    close_wall_loops,
    create_room,
    delete_room_edge,
    parse_wall_segment_id,
    rectangle_polygon,
    remove_room_vertices,
    replace_rooms,
)
from ..geom.snapping import find_nearest_wall
from ..geom.split import add_wall
from .validators import InvalidOperation

PointLike = Union[Point, Mapping[str, float], Sequence[float]]


def to_point(value: PointLike) -> Point:
    """Accept a Point, a ``{"x", "z"}`` mapping or an ``(x, z)`` pair.

    Raises:
        ValueError: If the value cannot be read as a point.
    """
    if isinstance(value, Point):
        return value
    try:
        if isinstance(value, Mapping):
            return Point(float(value["x"]), float(value["z"]))
        x, z = value
        return Point(float(x), float(z))
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid point: {value!r}") from e


class Operation(Protocol):
    """Protocol for plan operations.

    All operations must implement this interface to be compatible with the
    operation registry and ``engine.api.apply``.
    """

    def precheck(self, plan: FloorPlan, rotations: Optional[RotationMap] = None, **kwargs: Any) -> bool:
        """Validate that the operation can be applied to the plan.

        Raises:
            ValueError: If a referenced entity is missing or a parameter is invalid.
        """
        ...

    def apply(
        self,
        plan: FloorPlan,
        rotations: Optional[RotationMap] = None,
        id_factory: IdFactory = generate_unique_id,
        **kwargs: Any,
    ) -> FloorPlan:
        """Apply the operation and return the new plan."""
        ...


def _require_room(plan: FloorPlan, room_id: str) -> None:
    if plan.room(room_id) is None:
        raise ValueError(f"Room '{room_id}' does not exist")


class CloseWallsOp:
    """Convert every closable group of standalone walls into a room."""

    def precheck(self, plan: FloorPlan, rotations: Optional[RotationMap] = None, **kwargs: Any) -> bool:
        return True

    def apply(
        self,
        plan: FloorPlan,
        rotations: Optional[RotationMap] = None,
        id_factory: IdFactory = generate_unique_id,
        **kwargs: Any,
    ) -> FloorPlan:
        new_plan, _ = close_wall_loops(plan, rotations, id_factory=id_factory)
        return new_plan


class AddWallOp:
    """Draw a wall; it splits the room it cuts or stays standalone."""

    def precheck(
        self,
        plan: FloorPlan,
        rotations: Optional[RotationMap] = None,
        start: PointLike = None,
        end: PointLike = None,
        **kwargs: Any,
    ) -> bool:
        if start is None or end is None:
            raise ValueError("add_wall requires 'start' and 'end'")
        if to_point(start) == to_point(end):
            raise ValueError("add_wall requires distinct 'start' and 'end' points")
        return True

    def apply(
        self,
        plan: FloorPlan,
        rotations: Optional[RotationMap] = None,
        id_factory: IdFactory = generate_unique_id,
        start: PointLike = None,
        end: PointLike = None,
        width: float = DEFAULT_DRAWN_WALL_WIDTH,
        straighten: bool = True,
        **kwargs: Any,
    ) -> FloorPlan:
        result = add_wall(
            plan,
            to_point(start),
            to_point(end),
            width=float(width),
            rotations=rotations,
            straighten=straighten,
            id_factory=id_factory,
        )
        return result.plan


class CreateRoomOp:
    """Add an ordinary room from a polygon, or from two rectangle corners.

    With ``boundary=True`` the room marks the site boundary instead.
    """

    def precheck(
        self,
        plan: FloorPlan,
        rotations: Optional[RotationMap] = None,
        polygon: Optional[Iterable[PointLike]] = None,
        start: Optional[PointLike] = None,
        end: Optional[PointLike] = None,
        **kwargs: Any,
    ) -> bool:
        if polygon is None and (start is None or end is None):
            raise ValueError("create_room requires 'polygon' or both 'start' and 'end'")
        if polygon is not None and len(list(polygon)) < 3:
            raise ValueError("create_room requires a polygon with at least 3 points")
        return True

    def apply(
        self,
        plan: FloorPlan,
        rotations: Optional[RotationMap] = None,
        id_factory: IdFactory = generate_unique_id,
        polygon: Optional[Iterable[PointLike]] = None,
        start: Optional[PointLike] = None,
        end: Optional[PointLike] = None,
        room_type: str = "",
        boundary: bool = False,
        **kwargs: Any,
    ) -> FloorPlan:
        if polygon is not None:
            points = tuple(to_point(p) for p in polygon)
        else:
            points = rectangle_polygon(to_point(start), to_point(end))

        room = create_room(points, room_type=room_type, is_boundary=boundary, id_factory=id_factory)
        return replace_rooms(plan, [], [room], rotations)


class DeleteRoomOp:
    """Delete a room or a standalone wall outright."""

    def precheck(
        self, plan: FloorPlan, rotations: Optional[RotationMap] = None, room: str = "", **kwargs: Any
    ) -> bool:
        _require_room(plan, room)
        return True

    def apply(
        self,
        plan: FloorPlan,
        rotations: Optional[RotationMap] = None,
        id_factory: IdFactory = generate_unique_id,
        room: str = "",
        **kwargs: Any,
    ) -> FloorPlan:
        return replace_rooms(plan, [room], [], rotations)


class DeleteWallSegmentOp:
    """Delete one edge of a room selected as ``<room_id>-wall-<index>``."""

    def precheck(
        self, plan: FloorPlan, rotations: Optional[RotationMap] = None, segment: str = "", **kwargs: Any
    ) -> bool:
        parsed = parse_wall_segment_id(segment)
        if parsed is None:
            raise ValueError(f"Invalid wall segment ID: '{segment}'")

        room_id, index = parsed
        _require_room(plan, room_id)
        room = plan.room(room_id)
        if room.is_wall or room.is_reference:
            raise ValueError(f"Room '{room_id}' has no wall segments")
        if index >= len(room.floor_polygon):
            raise ValueError(f"Room '{room_id}' has no wall segment {index}")
        return True

    def apply(
        self,
        plan: FloorPlan,
        rotations: Optional[RotationMap] = None,
        id_factory: IdFactory = generate_unique_id,
        segment: str = "",
        thickness: float = DEFAULT_WALL_THICKNESS,
        **kwargs: Any,
    ) -> FloorPlan:
        room_id, index = parse_wall_segment_id(segment)
        return delete_room_edge(plan, room_id, index, thickness, rotations, id_factory)


class RemoveVerticesOp:
    """Delete selected vertices from a room."""

    def precheck(
        self,
        plan: FloorPlan,
        rotations: Optional[RotationMap] = None,
        room: str = "",
        indices: Iterable[int] = (),
        **kwargs: Any,
    ) -> bool:
        _require_room(plan, room)
        size = len(plan.room(room).floor_polygon)
        for index in indices:
            if not 0 <= int(index) < size:
                raise ValueError(f"Room '{room}' has no vertex {index}")
        return True

    def apply(
        self,
        plan: FloorPlan,
        rotations: Optional[RotationMap] = None,
        id_factory: IdFactory = generate_unique_id,
        room: str = "",
        indices: Iterable[int] = (),
        **kwargs: Any,
    ) -> FloorPlan:
        return remove_room_vertices(
            plan, room, [int(i) for i in indices], rotations=rotations, id_factory=id_factory
        )


class PlaceOpeningOp:
    """Place a door or window, snapped onto the nearest wall."""

    def __init__(self, kind: str):
        self.kind = kind

    def precheck(
        self,
        plan: FloorPlan,
        rotations: Optional[RotationMap] = None,
        position: PointLike = None,
        tolerance: float = SNAP_EPS,
        **kwargs: Any,
    ) -> bool:
        if position is None:
            raise ValueError(f"place_{self.kind} requires 'position'")
        snap = find_nearest_wall(to_point(position), plan, rotations, tolerance)
        if not snap.is_on_wall:
            raise InvalidOperation(f"A {self.kind} must be placed on a wall")
        return True

    def apply(
        self,
        plan: FloorPlan,
        rotations: Optional[RotationMap] = None,
        id_factory: IdFactory = generate_unique_id,
        position: PointLike = None,
        tolerance: float = SNAP_EPS,
        asset_path: Optional[str] = None,
        width: Optional[float] = None,
        **kwargs: Any,
    ) -> FloorPlan:
        snap = find_nearest_wall(to_point(position), plan, rotations, tolerance)
        if not snap.is_on_wall:
            raise InvalidOperation(f"A {self.kind} must be placed on a wall")

        opening = Opening(
            id=id_factory(self.kind),
            position=snap.snapped_position,
            rotation=snap.suggested_rotation,
            width=width,
            asset_path=asset_path,
        )
        if self.kind == "door":
            return replace(plan, doors=plan.doors + (opening,))
        return replace(plan, windows=plan.windows + (opening,))


# Operation registry
_OPERATIONS: Dict[str, Operation] = {
    "close_walls": CloseWallsOp(),
    "add_wall": AddWallOp(),
    "create_room": CreateRoomOp(),
    "delete_room": DeleteRoomOp(),
    "delete_wall_segment": DeleteWallSegmentOp(),
    "remove_vertices": RemoveVerticesOp(),
    "place_door": PlaceOpeningOp("door"),
    "place_window": PlaceOpeningOp("window"),
}


def register_operation(name: str, operation: Operation) -> None:
    """Register a new operation in the registry.

    Args:
        name: Name of the operation.
        operation: Operation instance to register.
    """
    _OPERATIONS[name] = operation


def get_operation(name: str) -> Operation:
    """Get an operation by name.

    Args:
        name: Name of the operation.

    Returns:
        The operation instance.

    Raises:
        KeyError: If the operation is not registered.
    """
    if name not in _OPERATIONS:
        raise KeyError(f"Operation '{name}' is not registered")
    return _OPERATIONS[name]


def list_operations() -> list[str]:
    """List all registered operations."""
    return list(_OPERATIONS.keys())
