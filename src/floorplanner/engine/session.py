"""Editing session state for an interactive host.

The host owns one ``EditSession`` holding the plan, the rotation map, the
current interaction mode and the dirty flags. Expensive recomputes (wall
loop closing, overlap detection) are not run on every edit: edits mark the
session dirty and ``RecomputeScheduler.tick`` runs whatever is pending, at
most once per interval, whenever the host calls it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from ..config import DEFAULT_TOLERANCES, RECOMPUTE_INTERVAL_S, Tolerances
from ..core.model import FloorPlan, Point, generate_unique_id
from ..geom.edit import IdFactory, ensure_reference_anchor
from ..geom.overlap import OverlapPair, overlapping_room_ids
from ..geom.rotation import rotate_rooms, rotate_selection
from ..io.parser import load_plan, save_plan
from .api import apply, recompute_overlaps, recompute_walls

LOGGER = logging.getLogger(__name__)


class Mode(str, Enum):
    DESIGN = "design"
    DRAW_WALL = "draw_wall"
    DRAW_ROOM = "draw_room"
    DRAW_BOUNDARY = "draw_boundary"
    PLACE_DOOR = "place_door"
    PLACE_WINDOW = "place_window"
    DRAG = "drag"


# Operations that can leave new standalone walls behind
_WALL_OPERATIONS = {"add_wall", "delete_wall_segment", "remove_vertices"}
# Operations that never move room geometry
_OPENING_OPERATIONS = {"place_door", "place_window"}


@dataclass
class EditSession:
    """Mutable editing context around an immutable plan.

    Attributes:
        plan: The current plan.
        rotations: Per-room rotation in degrees; absent means 0.
        mode: Current interaction mode.
        selected_ids: Currently selected room IDs.
        walls_dirty: Wall loops must be re-closed.
        overlaps_dirty: Overlaps must be recomputed.
        overlaps: Overlapping pairs from the last recompute.
        tolerances: Tolerances used by the recomputes.
        id_factory: Generator for fresh entity IDs.
    """

    plan: FloorPlan = field(default_factory=FloorPlan)
    rotations: Dict[str, float] = field(default_factory=dict)
    mode: Mode = Mode.DESIGN
    selected_ids: List[str] = field(default_factory=list)
    walls_dirty: bool = True
    overlaps_dirty: bool = True
    overlaps: List[OverlapPair] = field(default_factory=list)
    tolerances: Tolerances = DEFAULT_TOLERANCES
    id_factory: IdFactory = generate_unique_id

    @classmethod
    def open(cls, path: Union[str, Path], **kwargs) -> "EditSession":
        """Start a session from a saved plan, with the reference anchor in place."""
        return cls(plan=ensure_reference_anchor(load_plan(path)), **kwargs)

    def save(self, path: Union[str, Path]) -> FloorPlan:
        """Persist the plan with rotations baked in; the rotation map is cleared."""
        self.plan = save_plan(self.plan, path, self.rotations)
        self.rotations = {}
        return self.plan

    def set_mode(self, mode: Union[Mode, str]) -> None:
        """Switch interaction mode.

        Raises:
            ValueError: If ``mode`` is not a known mode.
        """
        self.mode = Mode(mode)
        LOGGER.debug("Mode set to %s", self.mode.value)

    def select(self, room_ids: List[str]) -> None:
        self.selected_ids = list(room_ids)

    def mark_dirty(self, walls: bool = True, overlaps: bool = True) -> None:
        self.walls_dirty = self.walls_dirty or walls
        self.overlaps_dirty = self.overlaps_dirty or overlaps

    def apply(self, operation: dict) -> FloorPlan:
        """Apply an operation to the session plan and mark what it invalidates."""
        self.plan = apply(self.plan, operation, self.rotations, self.id_factory)

        op_type = operation.get("op") or operation.get("type")
        if op_type not in _OPENING_OPERATIONS:
            self.mark_dirty(walls=op_type in _WALL_OPERATIONS, overlaps=True)

        tracked = set(self.rotations) | set(self.selected_ids)
        removed = {room_id for room_id in tracked if self.plan.room(room_id) is None}
        for room_id in removed:
            self.rotations.pop(room_id, None)
        self.selected_ids = [room_id for room_id in self.selected_ids if room_id not in removed]
        return self.plan

    def commit_drawing(self, start: Point, end: Point) -> FloorPlan:
        """Finish a drag-drawn shape according to the current mode.

        Raises:
            ValueError: If the current mode does not draw.
        """
        if self.mode == Mode.DRAW_WALL:
            return self.apply({"op": "add_wall", "start": start, "end": end})
        if self.mode == Mode.DRAW_ROOM:
            return self.apply({"op": "create_room", "start": start, "end": end})
        if self.mode == Mode.DRAW_BOUNDARY:
            return self.apply({"op": "create_room", "start": start, "end": end, "boundary": True})
        raise ValueError(f"Mode '{self.mode.value}' does not draw")

    def place_opening(self, position: Point) -> FloorPlan:
        """Place a door or window according to the current mode.

        Raises:
            ValueError: If the current mode does not place openings.
        """
        if self.mode == Mode.PLACE_DOOR:
            return self.apply({"op": "place_door", "position": position})
        if self.mode == Mode.PLACE_WINDOW:
            return self.apply({"op": "place_window", "position": position})
        raise ValueError(f"Mode '{self.mode.value}' does not place openings")

    def rotate(self, room_id: str, direction: str) -> None:
        """Rotate a room (or the selection containing it) by one small step."""
        self.rotations = rotate_rooms(self.rotations, room_id, direction, self.selected_ids)
        self.overlaps_dirty = True

    def rotate_selected(self, direction: str) -> None:
        """Quarter-turn the current multi-selection."""
        self.rotations = rotate_selection(self.rotations, self.selected_ids, direction)
        self.overlaps_dirty = True

    def recompute_walls(self) -> None:
        self.plan, created = recompute_walls(self.plan, self.rotations, self.tolerances, self.id_factory)
        self.walls_dirty = False
        if created:
            self.overlaps_dirty = True

    def recompute_overlaps(self) -> None:
        self.overlaps = recompute_overlaps(self.plan, self.rotations, self.tolerances)
        self.overlaps_dirty = False

    @property
    def overlapping_ids(self) -> Set[str]:
        return overlapping_room_ids(self.overlaps)


class RecomputeScheduler:
    """Runs pending session recomputes at a bounded rate.

    The host calls ``tick`` with its own clock; nothing here owns a timer.
    """

    def __init__(self, session: EditSession, interval: float = RECOMPUTE_INTERVAL_S):
        self.session = session
        self.interval = interval
        self._last_run: Optional[float] = None

    def tick(self, now: float) -> bool:
        """Run pending recomputes if the interval has elapsed.

        Args:
            now: Current host time in seconds.

        Returns:
            True if any recompute ran.
        """
        if self._last_run is not None and now - self._last_run < self.interval:
            return False

        session = self.session
        if not (session.walls_dirty or session.overlaps_dirty):
            return False

        if session.walls_dirty:
            session.recompute_walls()
        if session.overlaps_dirty:
            session.recompute_overlaps()

        self._last_run = now
        return True
