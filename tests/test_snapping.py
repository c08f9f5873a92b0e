"""Tests for geom/snapping.py door and window placement."""
import math

import pytest

from floorplanner.core.model import REFERENCE_TYPE, Point, Room
from floorplanner.geom.edit import make_wall
from floorplanner.geom.snapping import (
    calculate_opening_rotation,
    enumerate_wall_segments,
    find_nearest_wall,
    get_snapped_placement_result,
    is_valid_placement_position,
)


@pytest.fixture
def wall_plan(plan_of):
    return plan_of(make_wall(Point(0, 0), Point(100, 0), wall_id="wall|1"))


def test_snap_onto_wall(wall_plan):
    result = find_nearest_wall(Point(50, 1.5), wall_plan)

    assert result.is_on_wall
    assert result.snapped_position == Point(50, 0)
    assert result.distance == pytest.approx(1.5)
    assert result.suggested_rotation == pytest.approx(0.0)
    assert result.wall_segment.owner_id == "wall|1"


def test_snap_tolerance_boundary(wall_plan):
    eps = 1e-6
    assert find_nearest_wall(Point(50, 2.0 - eps), wall_plan).is_on_wall
    assert not find_nearest_wall(Point(50, 2.0 + eps), wall_plan).is_on_wall


def test_snap_custom_tolerance(wall_plan):
    assert find_nearest_wall(Point(50, 8), wall_plan, tolerance=10).is_on_wall


def test_beyond_wall_end_does_not_snap(wall_plan):
    assert not find_nearest_wall(Point(101, 0.5), wall_plan).is_on_wall


def test_snap_to_room_edge(rect, plan_of):
    plan = plan_of(rect(0, 0, 100, 100, "room|a"))
    result = find_nearest_wall(Point(99, 40), plan)

    assert result.is_on_wall
    assert (result.snapped_position.x, result.snapped_position.z) == pytest.approx((100, 40))
    assert result.wall_segment.owner_id == "room|a"
    assert result.suggested_rotation == pytest.approx(90.0)


def test_snap_uses_rotated_geometry(rect, plan_of):
    plan = plan_of(rect(0, 0, 200, 100, "room|a"))
    rotations = {"room|a": 90}

    assert not find_nearest_wall(Point(100, 1), plan, rotations).is_on_wall
    # After a quarter turn about (100, 50) the bottom edge lies on x=150.
    assert find_nearest_wall(Point(149, 50), plan, rotations).is_on_wall


def test_enumerate_wall_segments(rect, plan_of):
    reference = Room(
        id="ref",
        room_type=REFERENCE_TYPE,
        area=0.0,
        height=0.0,
        width=0.0,
        floor_polygon=(Point(0, 0), Point(0, 0)),
    )
    plan = plan_of(
        rect(0, 0, 100, 100, "room|a"),
        make_wall(Point(200, 0), Point(300, 0), wall_id="wall|long"),
        make_wall(Point(400, 0), Point(400.2, 0), wall_id="wall|short"),
        reference,
    )
    owners = [s.owner_id for s in enumerate_wall_segments(plan)]

    assert owners.count("room|a") == 4
    assert "wall|long" in owners
    assert "wall|short" not in owners
    assert "ref" not in owners


# --- calculate_opening_rotation ---

def test_rotation_horizontal_and_vertical():
    assert calculate_opening_rotation(0.0) == pytest.approx(0.0)
    assert calculate_opening_rotation(math.pi / 2) == pytest.approx(90.0)
    assert calculate_opening_rotation(-math.pi / 2) == pytest.approx(270.0)


def test_rotation_upside_down_collapses_to_zero():
    assert calculate_opening_rotation(math.pi) == 0.0
    assert calculate_opening_rotation(math.radians(136)) == 0.0
    assert calculate_opening_rotation(math.radians(224)) == 0.0


def test_rotation_outside_collapse_band():
    assert calculate_opening_rotation(math.radians(134)) == pytest.approx(134.0)
    assert calculate_opening_rotation(math.radians(226)) == pytest.approx(226.0)


def test_rotation_normalized_below_360():
    assert 0.0 <= calculate_opening_rotation(-1e-12) < 360.0


def test_reverse_wall_snaps_upright(plan_of):
    plan = plan_of(make_wall(Point(100, 0), Point(0, 0), wall_id="wall|rev"))
    assert find_nearest_wall(Point(50, 1), plan).suggested_rotation == 0.0


# --- placement wrappers ---

def test_placement_result_valid(wall_plan):
    result = get_snapped_placement_result(Point(30, -1), wall_plan)

    assert result.is_valid
    assert (result.position.x, result.position.z) == pytest.approx((30, 0))
    assert is_valid_placement_position(Point(30, -1), wall_plan)


def test_placement_result_invalid_keeps_position(wall_plan):
    result = get_snapped_placement_result(Point(30, 50), wall_plan)

    assert not result.is_valid
    assert result.position == Point(30, 50)
    assert result.rotation == 0.0
    assert not is_valid_placement_position(Point(30, 50), wall_plan)
