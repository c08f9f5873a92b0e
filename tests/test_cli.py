"""Tests for the floor-planner command line interface."""
from dataclasses import replace

import pytest
from typer.testing import CliRunner

from floorplanner.cli import app
from floorplanner.core.model import FloorPlan, Point
from floorplanner.io.parser import load_plan, save_plan

runner = CliRunner()


@pytest.fixture
def write_plan(tmp_path):
    """Save rooms to a plan file and return its path as a string."""

    def _write(*rooms, name="plan.json"):
        path = tmp_path / name
        save_plan(FloorPlan(rooms=tuple(rooms)), path)
        return str(path)

    return _write


def test_info(write_plan, rect):
    path = write_plan(rect(0, 0, 100, 100, "room|a", "Kitchen"), rect(100, 0, 300, 100, "room|b", "Bedroom"))
    result = runner.invoke(app, ["info", path])

    assert result.exit_code == 0
    assert "Rooms: 2" in result.output
    assert "Total area: 300.00 sq ft" in result.output
    assert "Kitchen" in result.output


def test_info_with_log_level(write_plan, rect):
    path = write_plan(rect(0, 0, 100, 100, "room|a"))
    result = runner.invoke(app, ["--log-level", "debug", "info", path])
    assert result.exit_code == 0


def test_missing_file(tmp_path):
    result = runner.invoke(app, ["info", str(tmp_path / "missing.json")])

    assert result.exit_code == 1
    assert "File not found" in result.output


def test_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("[", encoding="utf-8")
    result = runner.invoke(app, ["validate", str(path)])

    assert result.exit_code == 1
    assert "Invalid plan" in result.output


def test_overlaps(write_plan, rect):
    path = write_plan(rect(0, 0, 100, 100, "room|a", "Kitchen"), rect(50, 0, 150, 100, "room|b", "Bedroom"))
    result = runner.invoke(app, ["overlaps", path])

    assert result.exit_code == 0
    assert "Overlapping: Kitchen and Bedroom" in result.output


def test_no_overlaps(write_plan, rect):
    path = write_plan(rect(0, 0, 100, 100, "room|a"), rect(100, 0, 200, 100, "room|b"))
    result = runner.invoke(app, ["overlaps", path])

    assert result.exit_code == 0
    assert "No overlapping rooms" in result.output


def test_close_walls(write_plan, square_walls, tmp_path):
    path = write_plan(*square_walls)
    out = tmp_path / "closed.json"
    result = runner.invoke(app, ["close-walls", path, "-o", str(out)])

    assert result.exit_code == 0
    assert "Created 1 room(s); 0 standalone wall(s) remain" in result.output
    closed = load_plan(out)
    assert closed.room_count == 1
    assert closed.walls == ()


def test_close_walls_without_output_leaves_file(write_plan, square_walls):
    path = write_plan(*square_walls)
    result = runner.invoke(app, ["close-walls", path])

    assert result.exit_code == 0
    assert len(load_plan(path).walls) == 4


def test_add_wall_splits(write_plan, rect, tmp_path):
    path = write_plan(rect(0, 10, 200, 110, "room|wide"))
    out = tmp_path / "split.json"
    result = runner.invoke(app, ["add-wall", path, "100", "0", "100", "120", "-o", str(out)])

    assert result.exit_code == 0
    assert "Wall split a room in two" in result.output
    split = load_plan(out)
    assert split.room_count == 2
    assert split.total_area == pytest.approx(200.0)


def test_add_wall_standalone(write_plan, rect):
    path = write_plan(rect(0, 0, 100, 100, "room|a"))
    result = runner.invoke(app, ["add-wall", path, "300", "0", "400", "0", "--width", "6"])

    assert result.exit_code == 0
    assert "Wall added as a standalone wall" in result.output


def test_add_wall_rejects_degenerate(write_plan, rect):
    path = write_plan(rect(0, 0, 100, 100, "room|a"))
    result = runner.invoke(app, ["add-wall", path, "5", "5", "5", "5"])

    assert result.exit_code == 1
    assert "distinct" in result.output


def test_snap(write_plan, rect):
    path = write_plan(rect(0, 10, 100, 110, "room|a"))
    result = runner.invoke(app, ["snap", path, "50", "11"])

    assert result.exit_code == 0
    assert "Snapped to (50.00, 10.00) on room|a" in result.output


def test_snap_off_wall(write_plan, rect):
    path = write_plan(rect(0, 10, 100, 110, "room|a"))
    result = runner.invoke(app, ["snap", path, "50", "60"])

    assert result.exit_code == 1
    assert "No wall within 2.0" in result.output


def test_snap_with_tolerance(write_plan, rect):
    path = write_plan(rect(0, 10, 100, 110, "room|a"))
    result = runner.invoke(app, ["snap", path, "50", "15", "--tolerance", "6"])
    assert result.exit_code == 0


def test_validate(write_plan, rect):
    path = write_plan(rect(0, 0, 100, 100, "room|a"))
    result = runner.invoke(app, ["validate", path])

    assert result.exit_code == 0
    assert "Plan is valid" in result.output


def test_validate_bowtie(write_plan, rect):
    room = rect(0, 0, 100, 100, "room|a")
    bowtie = replace(room, floor_polygon=(Point(0, 0), Point(100, 100), Point(100, 0), Point(0, 100)), area=0.0)
    path = write_plan(bowtie)
    result = runner.invoke(app, ["validate", path])

    assert result.exit_code == 1
    assert "Polygon validation failed" in result.output
