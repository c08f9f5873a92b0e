"""Floor Planner - A Python geometry engine for editing 2D floor plans."""

__version__ = "0.1.0"

from .core.model import FloorPlan, Opening, Point, Room

__all__ = ["FloorPlan", "Opening", "Point", "Room"]
