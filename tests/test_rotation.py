"""Tests for geom/rotation.py."""
import pytest

from floorplanner.core.model import Point
from floorplanner.geom.rotation import (
    bake_rotations,
    rotate_polygon,
    rotate_rooms,
    rotate_selection,
    rotation_of,
    world_polygon,
)

WIDE = (Point(0, 0), Point(200, 0), Point(200, 100), Point(0, 100))


def _assert_same_polygon(actual, expected):
    assert len(actual) == len(expected)
    for a, e in zip(actual, expected):
        assert a.x == pytest.approx(e.x, abs=1e-9)
        assert a.z == pytest.approx(e.z, abs=1e-9)


def test_rotate_polygon_quarter_turn_about_centroid():
    rotated = rotate_polygon(WIDE, 90)
    # centroid (100, 50); (0, 0) -> (150, -50)
    assert rotated[0].x == pytest.approx(150.0)
    assert rotated[0].z == pytest.approx(-50.0)


def test_rotate_by_zero_is_identity():
    assert rotate_polygon(WIDE, 0) == WIDE


def test_rotate_by_360_is_identity():
    _assert_same_polygon(rotate_polygon(WIDE, 360), WIDE)


def test_rotate_then_unrotate_is_identity():
    _assert_same_polygon(rotate_polygon(rotate_polygon(WIDE, 37), -37), WIDE)


def test_rotation_of_missing_entry_is_zero():
    assert rotation_of({}, "room|x") == 0.0
    assert rotation_of(None, "room|x") == 0.0
    assert rotation_of({"room|x": 30}, "room|x") == 30


def test_world_polygon_uses_rotation_map(wide_room):
    assert world_polygon(wide_room, {}) == wide_room.floor_polygon
    _assert_same_polygon(
        world_polygon(wide_room, {wide_room.id: 90}),
        rotate_polygon(wide_room.floor_polygon, 90),
    )


# --- rotate_rooms ---

def test_rotate_single_room():
    assert rotate_rooms({}, "a", "right") == {"a": 15}
    assert rotate_rooms({"a": 15}, "a", "left") == {"a": 0}


def test_rotate_multi_selection_together():
    result = rotate_rooms({"b": 30}, "a", "right", selected_ids=["a", "b"])
    assert result == {"a": 15, "b": 45}


def test_rotate_outside_selection_only_moves_target():
    result = rotate_rooms({}, "c", "right", selected_ids=["a", "b"])
    assert result == {"c": 15}


def test_rotate_unknown_direction():
    with pytest.raises(ValueError, match="direction"):
        rotate_rooms({}, "a", "up")


# --- rotate_selection ---

def test_rotate_selection_wraps_modulo_360():
    result = rotate_selection({"a": 300}, ["a", "b"], "right")
    assert result["a"] == pytest.approx(30.0)
    assert result["b"] == pytest.approx(90.0)


def test_rotate_selection_ignores_single_selection():
    assert rotate_selection({"a": 10}, ["a"], "right") == {"a": 10}


# --- bake_rotations ---

def test_bake_rotations_writes_polygons(wide_room, plan_of):
    plan = plan_of(wide_room)
    baked = bake_rotations(plan, {wide_room.id: 90})
    room = baked.room(wide_room.id)

    _assert_same_polygon(room.floor_polygon, rotate_polygon(WIDE, 90))
    assert room.area == pytest.approx(200.0)
    assert room.width == pytest.approx(10.0)
    assert room.height == pytest.approx(20.0)


def test_bake_without_rotations_is_noop(wide_room, plan_of):
    plan = plan_of(wide_room)
    assert bake_rotations(plan, {}) is plan
