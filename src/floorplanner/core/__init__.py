"""Core data models for floor plan editing."""

from .model import FloorPlan, Opening, Point, Room, WallSegment, generate_unique_id
from .topology import attempt_to_form_closed_polygon, find_closures, find_connected_wall_groups

__all__ = [
    "FloorPlan",
    "Opening",
    "Point",
    "Room",
    "WallSegment",
    "generate_unique_id",
    "find_connected_wall_groups",
    "attempt_to_form_closed_polygon",
    "find_closures",
]
