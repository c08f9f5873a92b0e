"""Core API for floor plan operations.

This module provides the main interface for applying operations to plans
and the idempotent recompute entry points driven by the host.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ..config import DEFAULT_TOLERANCES, Tolerances
from ..core.model import FloorPlan, Room, RotationMap, generate_unique_id
from ..geom.edit import IdFactory, close_wall_loops
from ..geom.overlap import OverlapPair, check_room_overlap
from .ops import get_operation
from .validators import InvalidOperation, validate_plan

LOGGER = logging.getLogger(__name__)


def apply(
    plan: FloorPlan,
    operation: dict,
    rotations: Optional[RotationMap] = None,
    id_factory: IdFactory = generate_unique_id,
) -> FloorPlan:
    """Apply an operation to a plan and return the modified plan.

    Args:
        plan: The plan to modify.
        operation: Dictionary describing the operation, e.g.
            ``{"op": "add_wall", "start": {"x": 0, "z": 0}, "end": {"x": 0, "z": 50}}``.
        rotations: Current rotation map.
        id_factory: Generator for fresh entity IDs.

    Returns:
        A new FloorPlan with the operation applied.

    Raises:
        ValueError: If the operation type is not recognized or refers to a
            missing entity.
        InvalidOperation: If the resulting plan violates plan invariants.
    """
    operation_type = operation.get("op") or operation.get("type")

    if operation_type is None:
        raise ValueError("Operation must have an 'op' or 'type' field")

    try:
        op = get_operation(operation_type)
    except KeyError:
        raise ValueError(f"Unknown operation type: {operation_type}")

    params = {k: v for k, v in operation.items() if k not in ["op", "type"]}

    op.precheck(plan, rotations, **params)
    new_plan = op.apply(plan, rotations, id_factory, **params)

    try:
        validate_plan(new_plan)
    except InvalidOperation as e:
        raise InvalidOperation(f"Operation failed validation: {e}")

    LOGGER.debug("Applied %s: %d rooms", operation_type, len(new_plan.rooms))
    return new_plan


def recompute_walls(
    plan: FloorPlan,
    rotations: Optional[RotationMap] = None,
    tolerances: Tolerances = DEFAULT_TOLERANCES,
    id_factory: IdFactory = generate_unique_id,
) -> Tuple[FloorPlan, List[Room]]:
    """Close every wall loop that can be closed.

    Running it again on its own output changes nothing.
    """
    return close_wall_loops(plan, rotations, tolerances, id_factory)


def recompute_overlaps(
    plan: FloorPlan,
    rotations: Optional[RotationMap] = None,
    tolerances: Tolerances = DEFAULT_TOLERANCES,
) -> List[OverlapPair]:
    """Current overlapping room pairs."""
    return check_room_overlap(plan, rotations, tolerances.overlap)
