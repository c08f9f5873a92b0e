"""Parser for floor plan JSON documents.

This module converts between the JSON plan document exchanged with the
editor and the frozen ``FloorPlan`` model.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..core.model import (
    REFERENCE_TYPE,
    WALL_TYPE,
    DimensionLine,
    FloorPlan,
    Label,
    Opening,
    Point,
    Room,
    RotationMap,
)
from ..geom.areas import refresh_totals
from ..geom.primitives import area, dimensions
from ..geom.rotation import bake_rotations

LOGGER = logging.getLogger(__name__)

_KNOWN_KEYS = {
    "room_count",
    "total_area",
    "room_types",
    "rooms",
    "doors",
    "windows",
    "labels",
    "dimensionLines",
}

PathLike = Union[str, Path]


def _point(data: Any) -> Point:
    """Parse ``{"x": .., "z": ..}`` into a Point."""
    try:
        return Point(float(data["x"]), float(data["z"]))
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid point: {data!r}") from e


def _point_dict(point: Point) -> Dict[str, float]:
    return {"x": point.x, "z": point.z}


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _parse_room(data: Mapping[str, Any]) -> Room:
    """Parse a room entry.

    Ordinary rooms and boundaries get area and bounding dimensions derived
    from their polygon. Stored values are kept only for walls, where
    ``width`` is the thickness, and for the reference anchor.
    """
    try:
        room_id = str(data["id"])
        room_type = str(data.get("room_type", ""))
        polygon = tuple(_point(p) for p in data.get("floor_polygon", []))
        room_area = float(data.get("area", 0.0))
        height = float(data.get("height", 0.0))
        width = float(data.get("width", 0.0))
        is_regular = data.get("is_regular")
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid room data for {data.get('id', '?')}: {e}") from e

    if room_type not in (WALL_TYPE, REFERENCE_TYPE):
        derived = area(polygon)
        if round(derived, 2) != round(room_area, 2):
            LOGGER.debug("Room %s stored area %.2f re-derived as %.2f", room_id, room_area, derived)
        room_area = derived
        width, height = dimensions(polygon)

    return Room(
        id=room_id,
        room_type=room_type,
        area=room_area,
        height=height,
        width=width,
        floor_polygon=polygon,
        is_regular=None if is_regular is None else bool(is_regular),
        is_boundary=bool(data.get("isBoundary", False)),
    )


def _parse_opening(data: Mapping[str, Any], path_key: str) -> Opening:
    try:
        return Opening(
            id=str(data["id"]),
            position=_point(data["position"]),
            rotation=float(data.get("rotation", 0.0) or 0.0),
            width=_optional_float(data.get("width")),
            asset_path=data.get(path_key),
            scale=_optional_float(data.get("scale")),
            flip_horizontal=bool(data.get("flipHorizontal", False)),
            flip_vertical=bool(data.get("flipVertical", False)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid opening data for {data.get('id', '?')}: {e}") from e


def _parse_label(data: Mapping[str, Any]) -> Label:
    try:
        return Label(
            id=str(data["id"]),
            text=str(data.get("text", "")),
            position=_point(data["position"]),
            font_size=_optional_float(data.get("fontSize")),
            color=data.get("color"),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid label data for {data.get('id', '?')}: {e}") from e


def _parse_dimension_line(data: Mapping[str, Any]) -> DimensionLine:
    try:
        return DimensionLine(
            id=str(data["id"]),
            start_point=_point(data["startPoint"]),
            end_point=_point(data["endPoint"]),
            distance=float(data.get("distance", 0.0)),
            mid_point=_point(data["midPoint"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid dimension line data for {data.get('id', '?')}: {e}") from e


def plan_from_dict(data: Mapping[str, Any]) -> FloorPlan:
    """Build a FloorPlan from a decoded JSON plan document.

    Args:
        data: The decoded document.

    Returns:
        The plan. Unrecognized top-level fields are kept in ``extra``.

    Raises:
        ValueError: If the document or one of its entities is malformed.
    """
    if not isinstance(data, Mapping):
        raise ValueError("Plan document must be a JSON object")

    try:
        room_count = int(data.get("room_count", 0))
        total_area = float(data.get("total_area", 0.0))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid plan totals: {e}") from e

    return FloorPlan(
        room_count=room_count,
        total_area=total_area,
        room_types=tuple(str(t) for t in data.get("room_types", [])),
        rooms=tuple(_parse_room(r) for r in data.get("rooms", [])),
        doors=tuple(_parse_opening(d, "doorPath") for d in data.get("doors", [])),
        windows=tuple(_parse_opening(w, "windowPath") for w in data.get("windows", [])),
        labels=tuple(_parse_label(lb) for lb in data.get("labels", [])),
        dimension_lines=tuple(_parse_dimension_line(d) for d in data.get("dimensionLines", [])),
        extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
    )


def _room_dict(room: Room) -> Dict[str, Any]:
    result: Dict[str, Any] = {
        "id": room.id,
        "room_type": room.room_type,
        "area": room.area,
        "height": room.height,
        "width": room.width,
        "floor_polygon": [_point_dict(p) for p in room.floor_polygon],
    }
    if room.is_regular is not None:
        result["is_regular"] = 1 if room.is_regular else 0
    if room.is_boundary:
        result["isBoundary"] = True
    return result


def _opening_dict(opening: Opening, path_key: str) -> Dict[str, Any]:
    result: Dict[str, Any] = {
        "id": opening.id,
        path_key: opening.asset_path or "",
        "position": _point_dict(opening.position),
        "rotation": opening.rotation,
    }
    if opening.width is not None:
        result["width"] = opening.width
    if opening.scale is not None:
        result["scale"] = opening.scale
    if opening.flip_horizontal:
        result["flipHorizontal"] = True
    if opening.flip_vertical:
        result["flipVertical"] = True
    return result


def _label_dict(label: Label) -> Dict[str, Any]:
    result: Dict[str, Any] = {
        "id": label.id,
        "text": label.text,
        "position": _point_dict(label.position),
    }
    if label.font_size is not None:
        result["fontSize"] = label.font_size
    if label.color is not None:
        result["color"] = label.color
    return result


def plan_to_dict(plan: FloorPlan) -> Dict[str, Any]:
    """Convert a FloorPlan back to the JSON plan document shape."""
    data: Dict[str, Any] = dict(plan.extra)
    data.update(
        {
            "room_count": plan.room_count,
            "total_area": plan.total_area,
            "room_types": list(plan.room_types),
            "rooms": [_room_dict(r) for r in plan.rooms],
            "doors": [_opening_dict(d, "doorPath") for d in plan.doors],
            "windows": [_opening_dict(w, "windowPath") for w in plan.windows],
            "labels": [_label_dict(lb) for lb in plan.labels],
            "dimensionLines": [
                {
                    "id": d.id,
                    "startPoint": _point_dict(d.start_point),
                    "endPoint": _point_dict(d.end_point),
                    "distance": d.distance,
                    "midPoint": _point_dict(d.mid_point),
                }
                for d in plan.dimension_lines
            ],
        }
    )
    return data


def load_plan(path: PathLike) -> FloorPlan:
    """Load a floor plan from a JSON file.

    Args:
        path: Path to the JSON plan document.

    Returns:
        The parsed plan.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the JSON data is invalid or malformed.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(file_path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

    plan = plan_from_dict(data)
    LOGGER.debug("Loaded %d rooms from %s", len(plan.rooms), file_path)
    return plan


def save_plan(plan: FloorPlan, path: PathLike, rotations: Optional[RotationMap] = None) -> FloorPlan:
    """Save a plan, baking rotations into the stored polygons.

    Args:
        plan: The plan to save.
        path: Destination file; parent directories are created.
        rotations: Rotation map to bake in. Nothing is baked when omitted.

    Returns:
        The plan exactly as written, so callers can continue from it with an
        empty rotation map.
    """
    baked = refresh_totals(bake_rotations(plan, rotations))

    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(plan_to_dict(baked), f, indent=2)

    LOGGER.info("Saved %d rooms to %s", len(baked.rooms), file_path)
    return baked
