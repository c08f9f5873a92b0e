"""Command Line Interface for Floor Planner.

This module provides a simple CLI for inspecting plan documents and
applying geometry edits to them.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import LOG_LEVEL_ENV, SNAP_EPS
from .core.model import FloorPlan, Point
from .engine.api import apply as apply_operation
from .engine.validators import InvalidOperation, validate_plan
from .geom.areas import refresh_totals
from .geom.overlap import check_room_overlap, describe_overlaps
from .geom.snapping import find_nearest_wall
from .io.parser import load_plan, save_plan

app = typer.Typer(
    name="floor-planner",
    help="A CLI tool for floor plan geometry operations and analysis",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help=f"Logging level (defaults to ${LOG_LEVEL_ENV} or WARNING)"
    ),
):
    """Configure logging for every command."""
    level = (log_level or os.environ.get(LOG_LEVEL_ENV) or "WARNING").upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load(plan_path: Path) -> FloorPlan:
    try:
        return load_plan(str(plan_path))
    except FileNotFoundError as e:
        console.print(f"[red]Error: File not found - {e}[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error: Invalid plan - {e}[/red]")
        raise typer.Exit(1)


@app.command()
def info(plan: Path = typer.Argument(..., help="Path to plan JSON file")):
    """Show room count, total area and a per-room table."""
    plan_obj = refresh_totals(_load(plan))

    console.print(f"[bold]Rooms:[/bold] {plan_obj.room_count}")
    console.print(f"[bold]Total area:[/bold] {plan_obj.total_area:.2f} sq ft")

    table = Table()
    table.add_column("ID", style="cyan")
    table.add_column("Type")
    table.add_column("Area (sq ft)", justify="right")
    table.add_column("Width (ft)", justify="right")
    table.add_column("Height (ft)", justify="right")

    for room in plan_obj.rooms:
        if room.is_reference:
            continue
        room_type = room.room_type or "-"
        if room.is_boundary:
            room_type = f"{room_type} (boundary)"
        table.add_row(
            room.id,
            room_type,
            f"{room.area:.2f}",
            f"{room.width:.2f}",
            f"{room.height:.2f}",
        )

    console.print(table)


@app.command()
def overlaps(plan: Path = typer.Argument(..., help="Path to plan JSON file")):
    """List overlapping room pairs."""
    plan_obj = _load(plan)
    pairs = check_room_overlap(plan_obj)

    if not pairs:
        console.print("[green]No overlapping rooms[/green]")
        return

    table = Table()
    table.add_column("Room", style="cyan")
    table.add_column("Overlaps with", style="cyan")
    for first, second in pairs:
        table.add_row(first, second)

    console.print(table)
    console.print(f"[yellow]Overlapping: {describe_overlaps(plan_obj, pairs)}[/yellow]")


def _apply_and_save(plan_obj: FloorPlan, operation: dict, output: Optional[Path]) -> FloorPlan:
    try:
        new_plan = apply_operation(plan_obj, operation)
    except (ValueError, InvalidOperation) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if output is not None:
        save_plan(new_plan, output)
        console.print(f"[green]Saved plan to {output}[/green]")
    return new_plan


@app.command("close-walls")
def close_walls(
    plan: Path = typer.Argument(..., help="Path to plan JSON file"),
    output: Optional[Path] = typer.Option(None, "--out", "-o", help="Path to output plan JSON file"),
):
    """Convert closable loops of standalone walls into rooms."""
    plan_obj = _load(plan)
    new_plan = _apply_and_save(plan_obj, {"op": "close_walls"}, output)

    created = len(new_plan.regular_rooms) - len(plan_obj.regular_rooms)
    console.print(f"Created {created} room(s); {len(new_plan.walls)} standalone wall(s) remain")


@app.command("add-wall")
def add_wall(
    plan: Path = typer.Argument(..., help="Path to plan JSON file"),
    x1: float = typer.Argument(..., help="Start x"),
    z1: float = typer.Argument(..., help="Start z"),
    x2: float = typer.Argument(..., help="End x"),
    z2: float = typer.Argument(..., help="End z"),
    width: float = typer.Option(4.0, "--width", "-w", help="Thickness if the wall stays standalone"),
    straighten: bool = typer.Option(True, "--straighten/--no-straighten", help="Snap to preferred angles"),
    output: Optional[Path] = typer.Option(None, "--out", "-o", help="Path to output plan JSON file"),
):
    """Draw a wall: split the room it cuts, or add it as a standalone wall."""
    plan_obj = _load(plan)
    operation = {
        "op": "add_wall",
        "start": Point(x1, z1),
        "end": Point(x2, z2),
        "width": width,
        "straighten": straighten,
    }
    new_plan = _apply_and_save(plan_obj, operation, output)

    if len(new_plan.regular_rooms) > len(plan_obj.regular_rooms):
        console.print("[green]Wall split a room in two[/green]")
    else:
        console.print("Wall added as a standalone wall")


@app.command()
def snap(
    plan: Path = typer.Argument(..., help="Path to plan JSON file"),
    x: float = typer.Argument(..., help="Query x"),
    z: float = typer.Argument(..., help="Query z"),
    tolerance: float = typer.Option(SNAP_EPS, "--tolerance", "-t", help="Snap distance"),
):
    """Snap a point onto the nearest wall."""
    plan_obj = _load(plan)
    result = find_nearest_wall(Point(x, z), plan_obj, tolerance=tolerance)

    if not result.is_on_wall:
        console.print(f"[yellow]No wall within {tolerance}[/yellow]")
        raise typer.Exit(1)

    position = result.snapped_position
    console.print(f"Snapped to ({position.x:.2f}, {position.z:.2f}) on {result.wall_segment.owner_id}")
    console.print(f"Distance: {result.distance:.2f}, rotation: {result.suggested_rotation:.1f}")


@app.command()
def validate(plan: Path = typer.Argument(..., help="Path to plan JSON file")):
    """Check the plan against the document invariants."""
    plan_obj = _load(plan)
    try:
        validate_plan(plan_obj)
    except InvalidOperation as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print("[green]Plan is valid[/green]")


if __name__ == "__main__":
    app()
