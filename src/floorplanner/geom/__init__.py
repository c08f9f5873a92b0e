"""Geometry utilities for floor plan editing.

This module provides polygon measurement, room splitting, overlap
detection, wall snapping and mitered wall outlines.
"""

from .areas import total_area
from .overlap import check_room_overlap
from .primitives import area, centroid, dimensions, point_in_polygon
from .snapping import find_nearest_wall
from .split import add_wall, divide_room_polygon

__all__ = [
    "area",
    "dimensions",
    "centroid",
    "point_in_polygon",
    "total_area",
    "check_room_overlap",
    "find_nearest_wall",
    "add_wall",
    "divide_room_polygon",
]
