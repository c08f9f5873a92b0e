"""Wall connectivity analysis for floor plans.

This module groups loose wall segments into connected components by
endpoint proximity and tries to chain a component into a single closed
loop that can become a room.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set, Tuple

import networkx as nx

from ..config import CLOSE_EPS, CLOSE_SEARCH_MAX, CONNECT_EPS
from .model import Point, Room

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Closure:
    """A closed wall loop.

    Attributes:
        polygon: Vertices of the loop, in chaining order.
        wall_ids: IDs of the walls consumed by the loop.
    """

    polygon: Tuple[Point, ...]
    wall_ids: Tuple[str, ...]


@dataclass(frozen=True)
class _Connection:
    wall: Room
    next_point: Point
    distance: float


def _point_distance(p1: Point, p2: Point) -> float:
    return ((p1.x - p2.x) ** 2 + (p1.z - p2.z) ** 2) ** 0.5


def _is_usable_wall(room: Room) -> bool:
    """Wall rooms with two distinct endpoints; anything else is skipped."""
    if not room.is_wall or len(room.floor_polygon) != 2:
        return False
    start, end = room.floor_polygon
    return _point_distance(start, end) > 0


def _walls_connected(wall_a: Room, wall_b: Room, tolerance: float) -> bool:
    """Check if any endpoint of one wall lies within tolerance of any endpoint of the other."""
    return any(
        _point_distance(p, q) <= tolerance
        for p in wall_a.floor_polygon
        for q in wall_b.floor_polygon
    )


def build_wall_graph(walls: Sequence[Room], connect_eps: float = CONNECT_EPS) -> nx.Graph:
    """Build a graph linking walls whose endpoints are close.

    Creates a NetworkX graph where nodes are wall IDs and edges join walls
    with an endpoint pair within ``connect_eps``.

    Args:
        walls: Wall rooms to analyze.
        connect_eps: Endpoint proximity tolerance in render units.

    Returns:
        NetworkX Graph with wall connectivity.
    """
    G = nx.Graph()

    usable = [wall for wall in walls if _is_usable_wall(wall)]
    for index, wall in enumerate(usable):
        G.add_node(wall.id, index=index, wall=wall)

    for i, wall_a in enumerate(usable):
        for wall_b in usable[i + 1:]:
            if _walls_connected(wall_a, wall_b, connect_eps):
                G.add_edge(wall_a.id, wall_b.id)

    return G


def find_connected_wall_groups(
    walls: Sequence[Room], connect_eps: float = CONNECT_EPS
) -> List[List[Room]]:
    """Split walls into connected components, each listed in depth-first order.

    Degenerate walls (not exactly two distinct points) are left out.
    """
    G = build_wall_graph(walls, connect_eps)

    groups: List[List[Room]] = []
    visited: Set[str] = set()
    for wall_id in G.nodes:
        if wall_id in visited:
            continue
        component = list(nx.dfs_preorder_nodes(G, wall_id))
        visited.update(component)
        groups.append([G.nodes[node]["wall"] for node in component])

    return groups


def _find_best_connection(
    group: Sequence[Room], from_point: Point, used: Set[str], tolerance: float
) -> Optional[_Connection]:
    """Unused wall with the endpoint nearest ``from_point`` within tolerance."""
    best: Optional[_Connection] = None

    for wall in group:
        if wall.id in used:
            continue

        start, end = wall.floor_polygon
        for connect_point, next_point in ((start, end), (end, start)):
            gap = _point_distance(from_point, connect_point)
            if gap <= tolerance and (best is None or gap < best.distance):
                best = _Connection(wall=wall, next_point=next_point, distance=gap)

    return best


def _try_form_polygon_from_start(
    group: Sequence[Room], start_index: int, tolerance: float, search_max: float
) -> Optional[Closure]:
    first_wall = group[start_index]
    start, end = first_wall.floor_polygon

    for head, tail in ((start, end), (end, start)):
        polygon = [head, tail]
        used_order = [first_wall.id]
        used = {first_wall.id}
        free_end = tail

        attempts = 0
        max_attempts = len(group) * 5
        while len(used) < len(group) and attempts < max_attempts:
            attempts += 1
            connection = _find_best_connection(group, free_end, used, min(tolerance, search_max))
            if connection is None:
                break
            polygon.append(connection.next_point)
            used.add(connection.wall.id)
            used_order.append(connection.wall.id)
            free_end = connection.next_point

        if len(used) < 3:
            continue

        closing_gap = _point_distance(free_end, polygon[0])
        if closing_gap <= tolerance or len(used) == len(group):
            # A closed chain revisits its first point; drop the duplicate.
            if closing_gap <= tolerance and len(polygon) > 3:
                polygon.pop()
            return Closure(polygon=tuple(polygon), wall_ids=tuple(used_order))

    return None


def attempt_to_form_closed_polygon(
    group: Sequence[Room],
    tolerance: float = CLOSE_EPS,
    search_max: float = CLOSE_SEARCH_MAX,
) -> Optional[Closure]:
    """Try to chain a wall group into one closed polygon.

    Every wall is tried as the starting wall, in both traversal directions.
    The chain grows greedily with the unused wall whose endpoint is nearest
    the free end. A chain closes when it has consumed at least three walls
    and either its free end is back within ``tolerance`` of its first point
    or it has consumed the whole group.

    Args:
        group: Connected wall rooms.
        tolerance: Maximum endpoint gap for chaining and closing.
        search_max: Cap on the chaining search radius.

    Returns:
        The closure, or None if no start and direction closes.
    """
    group = [wall for wall in group if _is_usable_wall(wall)]
    if len(group) < 3:
        return None

    for start_index in range(len(group)):
        closure = _try_form_polygon_from_start(group, start_index, tolerance, search_max)
        if closure is not None:
            return closure

    LOGGER.debug("No closed loop among %d walls", len(group))
    return None


def find_closures(
    walls: Sequence[Room],
    connect_eps: float = CONNECT_EPS,
    tolerance: float = CLOSE_EPS,
    search_max: float = CLOSE_SEARCH_MAX,
) -> List[Closure]:
    """Closures for every connected wall group that can be closed."""
    closures = []
    for group in find_connected_wall_groups(walls, connect_eps):
        if len(group) < 3:
            continue
        closure = attempt_to_form_closed_polygon(group, tolerance, search_max)
        if closure is not None:
            closures.append(closure)
    return closures
