"""Engine module for floor plan operations.

This module provides the API for applying operations to plans and the
editing session that drives recomputes.
"""

from .api import apply, recompute_overlaps, recompute_walls
from .session import EditSession, Mode, RecomputeScheduler
from .validators import InvalidOperation, validate_plan

__all__ = [
    "apply",
    "recompute_walls",
    "recompute_overlaps",
    "EditSession",
    "Mode",
    "RecomputeScheduler",
    "InvalidOperation",
    "validate_plan",
]
