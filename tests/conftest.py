"""Shared test fixtures for floor plan geometry tests."""
import itertools

import pytest

from floorplanner.core.model import FloorPlan, Point
from floorplanner.geom.areas import refresh_totals
from floorplanner.geom.edit import create_room, make_wall, rectangle_polygon


@pytest.fixture
def id_factory():
    """Deterministic ID generator: ``room|1``, ``wall|2``, ..."""
    counter = itertools.count(1)
    return lambda prefix: f"{prefix}|{next(counter)}"


@pytest.fixture
def rect():
    """Build an ordinary room from two opposite corners."""

    def _rect(x1, z1, x2, z2, room_id, room_type="", is_boundary=False):
        return create_room(
            rectangle_polygon(Point(x1, z1), Point(x2, z2)),
            room_type=room_type,
            room_id=room_id,
            is_boundary=is_boundary,
        )

    return _rect


@pytest.fixture
def plan_of():
    """Wrap rooms in a plan with refreshed totals."""

    def _plan_of(*rooms):
        return refresh_totals(FloorPlan(rooms=tuple(rooms)))

    return _plan_of


@pytest.fixture
def square_walls():
    """Four standalone walls tracing the 100x100 square at the origin."""
    corners = [Point(0, 0), Point(100, 0), Point(100, 100), Point(0, 100)]
    return [
        make_wall(corners[i], corners[(i + 1) % 4], wall_id=f"w{i + 1}")
        for i in range(4)
    ]


@pytest.fixture
def wide_room(rect):
    """The 200x100 rectangle used for split conservation (200 sq ft)."""
    return rect(0, 0, 200, 100, "room|wide", "Living")


@pytest.fixture
def adjacent_plan(rect, plan_of):
    """Kitchen and Bedroom sharing the edge x=100."""
    return plan_of(
        rect(0, 0, 100, 100, "room|a", "Kitchen"),
        rect(100, 0, 200, 100, "room|b", "Bedroom"),
    )
