"""Core data models for floor plan editing.

This module defines the plan document manipulated by the geometry engine:
points, rooms (including the special Wall, Reference and boundary rooms),
openings, labels and dimension lines. Every model is frozen; edits produce
new values with ``dataclasses.replace``.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import NewType, Optional, Sequence, Tuple

WALL_TYPE = "Wall"
REFERENCE_TYPE = "Reference"
BOUNDARY_TYPE = "Boundary"


@dataclass(frozen=True)
class Point:
    """Represents a planar point in render units.

    Attributes:
        x: The x-coordinate of the point.
        z: The z-coordinate of the point (the plan's depth axis).
    """

    x: float
    z: float


Polygon = Tuple[Point, ...]

# Stored vertices, before the entity's rotation is applied.
LocalPolygon = NewType("LocalPolygon", Tuple[Point, ...])
# Vertices after rotation about the local polygon's centroid.
WorldPolygon = NewType("WorldPolygon", Tuple[Point, ...])

RotationMap = Mapping[str, float]


@dataclass(frozen=True)
class Room:
    """Represents a room, a wall, a boundary or a reference anchor.

    Attributes:
        id: Unique identifier for the room.
        room_type: Room type name; ``"Wall"`` and ``"Reference"`` are special.
        area: Area in square feet, derived from ``floor_polygon``.
        height: Bounding box height in feet.
        width: Bounding box width in feet, or the thickness of a wall.
        floor_polygon: Stored (unrotated) vertices of the room outline.
        is_regular: Whether the room was produced by the engine as a regular room.
        is_boundary: Whether this polygon marks the site boundary.
    """

    id: str
    room_type: str
    area: float
    height: float
    width: float
    floor_polygon: Tuple[Point, ...]
    is_regular: Optional[bool] = None
    is_boundary: bool = False

    @property
    def is_wall(self) -> bool:
        return self.room_type == WALL_TYPE

    @property
    def is_reference(self) -> bool:
        return self.room_type == REFERENCE_TYPE

    @property
    def is_regular_room(self) -> bool:
        """True for rooms that take part in overlap, placement and area sums."""
        return not (self.is_wall or self.is_reference or self.is_boundary)


@dataclass(frozen=True)
class Opening:
    """Represents a door or window anchored on a wall surface.

    The binding to a wall is positional only: moving the host wall does
    not move the opening.

    Attributes:
        id: Unique identifier for the opening.
        position: Anchor point of the opening.
        rotation: Placement rotation in degrees.
        width: Width of the opening, if known.
        asset_path: Sprite path used by the renderer.
        scale: Render scale factor.
        flip_horizontal: Whether the sprite is mirrored horizontally.
        flip_vertical: Whether the sprite is mirrored vertically.
    """

    id: str
    position: Point
    rotation: float = 0.0
    width: Optional[float] = None
    asset_path: Optional[str] = None
    scale: Optional[float] = None
    flip_horizontal: bool = False
    flip_vertical: bool = False


@dataclass(frozen=True)
class Label:
    """A free text label placed on the plan."""

    id: str
    text: str
    position: Point
    font_size: Optional[float] = None
    color: Optional[str] = None


@dataclass(frozen=True)
class DimensionLine:
    """A measured line between two points."""

    id: str
    start_point: Point
    end_point: Point
    distance: float
    mid_point: Point


@dataclass(frozen=True)
class WallSegment:
    """A wall surface derived on demand from a Wall room or a room edge.

    Attributes:
        owner_id: ID of the room the segment belongs to.
        start: World-space start point.
        end: World-space end point.
        midpoint: Midpoint of the segment.
        length: Segment length in render units.
        angle: Direction angle in radians.
    """

    owner_id: str
    start: Point
    end: Point
    midpoint: Point
    length: float
    angle: float


@dataclass(frozen=True)
class FloorPlan:
    """Represents a complete plan document.

    Attributes:
        room_count: Number of regular rooms.
        total_area: Aggregated plan area in square feet.
        room_types: Room type names known to the plan.
        rooms: Rooms, walls, boundaries and reference anchors.
        doors: Door openings.
        windows: Window openings.
        labels: Text labels.
        dimension_lines: Measurement lines.
        extra: Unrecognized document fields, kept for round trips.
    """

    room_count: int = 0
    total_area: float = 0.0
    room_types: Tuple[str, ...] = ()
    rooms: Tuple[Room, ...] = ()
    doors: Tuple[Opening, ...] = ()
    windows: Tuple[Opening, ...] = ()
    labels: Tuple[Label, ...] = ()
    dimension_lines: Tuple[DimensionLine, ...] = ()
    extra: Mapping[str, object] = field(default_factory=dict)

    def room(self, room_id: str) -> Optional[Room]:
        """Return the room with the given ID, or None."""
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None

    @property
    def walls(self) -> Tuple[Room, ...]:
        return tuple(room for room in self.rooms if room.is_wall)

    @property
    def regular_rooms(self) -> Tuple[Room, ...]:
        return tuple(room for room in self.rooms if room.is_regular_room)

    @property
    def boundaries(self) -> Tuple[Room, ...]:
        return tuple(room for room in self.rooms if room.is_boundary)


def generate_unique_id(prefix: str) -> str:
    """Return a fresh entity ID such as ``room|3f2a9c1b04de``."""
    return f"{prefix}|{uuid.uuid4().hex[:12]}"


def as_polygon(points: Sequence[Point]) -> Polygon:
    """Normalize any point sequence to the immutable polygon representation."""
    return tuple(points)
