"""Tests for geom/edit.py room and wall conversions."""
import pytest

from floorplanner.core.model import REFERENCE_TYPE, FloorPlan, Point, Room
from floorplanner.geom.edit import (
    REFERENCE_ANCHOR_ID,
    close_wall_loops,
    create_room,
    delete_room_edge,
    ensure_reference_anchor,
    make_wall,
    parse_wall_segment_id,
    rectangle_polygon,
    remove_room_vertices,
    room_to_walls,
    update_room_polygon,
    wall_segment_id,
)


def test_create_room_measurements(id_factory):
    room = create_room(rectangle_polygon(Point(0, 0), Point(200, 100)), "Living", id_factory=id_factory)

    assert room.id == "room|1"
    assert room.room_type == "Living"
    assert room.area == pytest.approx(200.0)
    assert (room.width, room.height) == pytest.approx((20.0, 10.0))
    assert room.is_regular is True
    assert room.is_regular_room


def test_rectangle_polygon_from_any_corners():
    polygon = rectangle_polygon(Point(100, 50), Point(0, 0))
    assert set(polygon) == {Point(100, 50), Point(0, 50), Point(0, 0), Point(100, 0)}


def test_make_wall_defaults():
    wall = make_wall(Point(0, 0), Point(10, 0), wall_id="w")
    assert wall.is_wall
    assert wall.width == 6.0
    assert wall.area == 0.0


# --- walls -> room ---

def test_close_wall_loops_square(square_walls, id_factory):
    plan = FloorPlan(rooms=tuple(square_walls))
    new_plan, created = close_wall_loops(plan, id_factory=id_factory)

    assert len(created) == 1
    room = created[0]
    assert room.area == pytest.approx(100.0)
    assert room.room_type == ""
    assert room.is_regular is True
    assert new_plan.walls == ()
    assert new_plan.room_count == 1
    assert new_plan.total_area == pytest.approx(100.0)


def test_close_wall_loops_keeps_unclosed_walls(square_walls, id_factory):
    stray = make_wall(Point(1000, 0), Point(1100, 0), wall_id="stray")
    plan = FloorPlan(rooms=tuple(square_walls) + (stray,))
    new_plan, created = close_wall_loops(plan, id_factory=id_factory)

    assert len(created) == 1
    assert [w.id for w in new_plan.walls] == ["stray"]


def test_close_wall_loops_needs_three_walls(square_walls):
    plan = FloorPlan(rooms=tuple(square_walls[:2]))
    new_plan, created = close_wall_loops(plan)

    assert new_plan is plan
    assert created == []


def test_close_wall_loops_is_idempotent(square_walls, id_factory):
    plan, _ = close_wall_loops(FloorPlan(rooms=tuple(square_walls)), id_factory=id_factory)
    again, created = close_wall_loops(plan, id_factory=id_factory)

    assert created == []
    assert again.rooms == plan.rooms


# --- room -> walls ---

def test_room_to_walls(wide_room, plan_of, id_factory):
    plan = room_to_walls(plan_of(wide_room), wide_room.id, id_factory=id_factory)

    assert plan.room(wide_room.id) is None
    assert len(plan.walls) == 4
    assert all(w.width == 6.0 for w in plan.walls)
    assert plan.room_count == 0
    assert plan.total_area == 0.0


def test_room_to_walls_missing_room_is_noop(wide_room, plan_of):
    plan = plan_of(wide_room)
    assert room_to_walls(plan, "room|missing") is plan


def test_room_to_walls_then_close_restores_area(wide_room, plan_of, id_factory):
    plan = room_to_walls(plan_of(wide_room), wide_room.id, id_factory=id_factory)
    plan, created = close_wall_loops(plan, id_factory=id_factory)

    assert len(created) == 1
    assert created[0].area == pytest.approx(200.0)


def test_delete_room_edge_skips_that_edge(wide_room, plan_of, id_factory):
    plan = delete_room_edge(plan_of(wide_room), wide_room.id, 0, id_factory=id_factory)

    assert len(plan.walls) == 3
    bottom = (Point(0, 0), Point(200, 0))
    assert all(w.floor_polygon != bottom for w in plan.walls)


def test_wall_segment_ids_round_trip():
    selection = wall_segment_id("room|ab12", 3)
    assert selection == "room|ab12-wall-3"
    assert parse_wall_segment_id(selection) == ("room|ab12", 3)


def test_parse_wall_segment_id_rejects_other_ids():
    assert parse_wall_segment_id("room|ab12") is None
    assert parse_wall_segment_id("room|ab12-wall-x") is None


# --- vertices ---

def test_remove_vertex_keeps_room(plan_of, id_factory):
    pentagon = create_room(
        (Point(0, 0), Point(100, 0), Point(100, 100), Point(50, 150), Point(0, 100)),
        room_id="room|p",
    )
    plan = remove_room_vertices(plan_of(pentagon), "room|p", [3], id_factory=id_factory)
    room = plan.room("room|p")

    assert len(room.floor_polygon) == 4
    assert room.area == pytest.approx(100.0)


def test_remove_vertices_below_three_becomes_walls(rect, plan_of, id_factory):
    room = rect(0, 0, 100, 100, "room|sq")
    plan = remove_room_vertices(plan_of(room), "room|sq", [0, 1], id_factory=id_factory)

    assert plan.room("room|sq") is None
    assert len(plan.walls) == 4


def test_update_room_polygon_rederives_area(rect, plan_of):
    room = rect(0, 0, 100, 100, "room|sq")
    plan = update_room_polygon(plan_of(room), "room|sq", rectangle_polygon(Point(0, 0), Point(300, 100)))

    assert plan.room("room|sq").area == pytest.approx(300.0)
    assert plan.total_area == pytest.approx(300.0)


# --- reference anchor ---

def test_ensure_reference_anchor_replaces_existing(wide_room, plan_of):
    stale = Room(
        id="old-ref",
        room_type=REFERENCE_TYPE,
        area=0.0,
        height=0.0,
        width=0.0,
        floor_polygon=(Point(5, 5), Point(5, 5)),
    )
    plan = ensure_reference_anchor(plan_of(wide_room, stale))
    references = [r for r in plan.rooms if r.is_reference]

    assert [r.id for r in references] == [REFERENCE_ANCHOR_ID]
    assert references[0].floor_polygon == (Point(0, 0), Point(0, 0))
    assert plan.room_count == 1
