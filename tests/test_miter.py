"""Tests for geom/miter.py wall quads and external edges."""
import pytest

from floorplanner.core.model import Point
from floorplanner.geom.edit import make_wall
from floorplanner.geom.miter import (
    EdgeWall,
    calculate_mitered_corners,
    covers_range,
    generate_room_wall_quads,
    is_external_wall_segment,
    merge_intervals,
)


def _xz(point):
    return (point.x, point.z)


def _square_walls(thickness):
    corners = [Point(0, 0), Point(100, 0), Point(100, 100), Point(0, 100)]
    return [EdgeWall(corners[i], corners[(i + 1) % 4], thickness) for i in range(4)]


def test_square_corners_meet_on_bisectors():
    quads = calculate_mitered_corners(_square_walls(10))
    first = quads[0]

    assert _xz(first.top_start) == pytest.approx((5, 5))
    assert _xz(first.top_end) == pytest.approx((95, 5))
    assert _xz(first.bottom_start) == pytest.approx((-5, -5))
    assert _xz(first.bottom_end) == pytest.approx((105, -5))


def test_adjacent_quads_share_corners():
    quads = calculate_mitered_corners(_square_walls(6))
    for i, quad in enumerate(quads):
        following = quads[(i + 1) % 4]
        assert _xz(quad.top_end) == pytest.approx(_xz(following.top_start))
        assert _xz(quad.bottom_end) == pytest.approx(_xz(following.bottom_start))


def test_parallel_neighbours_keep_raw_offsets():
    walls = [
        EdgeWall(Point(0, 0), Point(50, 0), 10),
        EdgeWall(Point(50, 0), Point(100, 0), 10),
    ]
    quads = calculate_mitered_corners(walls)

    assert _xz(quads[0].top_start) == pytest.approx((0, 5))
    assert _xz(quads[0].top_end) == pytest.approx((50, 5))
    assert _xz(quads[1].bottom_end) == pytest.approx((100, -5))


def test_zero_length_wall_has_no_quad():
    walls = _square_walls(6) + [EdgeWall(Point(0, 0), Point(0, 0), 6)]
    quads = calculate_mitered_corners(walls)

    assert quads[-1] is None
    assert all(q is not None for q in quads[:-1])


def test_quad_polygon_order():
    quad = calculate_mitered_corners(_square_walls(10))[0]
    assert quad.as_polygon() == (quad.top_start, quad.top_end, quad.bottom_end, quad.bottom_start)


def test_generate_room_wall_quads(rect):
    room = rect(0, 0, 100, 100, "room|a")
    quads = generate_room_wall_quads(room, thickness=10)

    assert len(quads) == 4
    assert _xz(quads[0].top_start) == pytest.approx((5, 5))


def test_generate_room_wall_quads_skips_walls():
    wall = make_wall(Point(0, 0), Point(10, 0), wall_id="wall|1")
    assert generate_room_wall_quads(wall) == []


# --- external wall segments ---

def test_shared_edge_is_internal(adjacent_plan):
    # Edge 1 of room a is x=100, shared with room b.
    assert not is_external_wall_segment("room|a", 1, adjacent_plan)
    assert is_external_wall_segment("room|a", 0, adjacent_plan)
    assert not is_external_wall_segment("room|b", 3, adjacent_plan)


def test_partially_covered_edge_is_external(rect, plan_of):
    plan = plan_of(rect(0, 0, 100, 100, "room|a"), rect(100, 0, 200, 50, "room|b"))
    assert is_external_wall_segment("room|a", 1, plan)


def test_edge_covered_by_two_rooms_is_internal(rect, plan_of):
    plan = plan_of(
        rect(0, 0, 100, 100, "room|a"),
        rect(100, 0, 200, 50, "room|b"),
        rect(100, 50, 200, 100, "room|c"),
    )
    assert not is_external_wall_segment("room|a", 1, plan)


def test_external_checks_for_missing_entities(adjacent_plan, plan_of):
    assert not is_external_wall_segment("room|missing", 0, adjacent_plan)
    assert not is_external_wall_segment("room|a", 4, adjacent_plan)

    wall_plan = plan_of(make_wall(Point(0, 0), Point(10, 0), wall_id="wall|1"))
    assert not is_external_wall_segment("wall|1", 0, wall_plan)


def test_merge_intervals():
    assert merge_intervals([(30, 40), (0, 10), (10.5, 20)]) == [(0, 20), (30, 40)]


def test_covers_range():
    assert covers_range([(0, 100)], 0, 100)
    assert covers_range([(0.5, 99.5)], 0, 100)
    assert not covers_range([(0, 40), (60, 100)], 0, 100)
    assert not covers_range([], 0, 100)
