"""Configuration for the floor plan geometry engine.

Units are render units: 10 render units make one real-world foot, so
100 square render units make one square foot.
"""

from __future__ import annotations

from dataclasses import dataclass

# Units
UNITS_PER_FOOT = 10.0
SQ_UNITS_PER_SQ_FOOT = 100.0

# Closeness tolerances (render units)
CONNECT_EPS = 50.0  # Endpoint proximity that links two walls into one group
CLOSE_EPS = 1.46  # Endpoint gap accepted when chaining walls into a loop
CLOSE_SEARCH_MAX = 6.0  # Upper bound for the greedy chaining search radius
SNAP_EPS = 2.0  # Default snap distance for doors and windows
OVERLAP_EPS = 1.0  # Bounding box shrink so touching rooms do not overlap
TOUCH_EPS = 5.0  # Distance at which a drawn wall endpoint touches an edge
COVER_EPS = 1.0  # Collinearity and interval gap tolerance for shared edges

# Intersection tolerances
PARALLEL_EPS = 1e-3  # Minimum |denominator| for segment intersection
MITER_PARALLEL_EPS = 1e-4  # Minimum |denominator| for miter line intersection
SEGMENT_T_EPS = 1e-3  # Slack on the [0, 1] segment parameter range
ON_SEGMENT_EPS = 0.01  # Bounding box slack for point-on-segment checks
SPLIT_PROBE_EXTENSION = 2.0  # Wall extension used when counting crossings

# Degeneracy thresholds
MIN_SEGMENT_LENGTH = 0.5  # Shorter wall segments are ignored by snapping
MIN_EDGE_LENGTH = 0.1  # Shorter room edges get no rendered wall quad
MIN_SPLIT_AREA = 0.1  # Sub-polygons at or below this area (sq ft) are slivers
SHORT_WALL_LENGTH = 10.0  # Split reference moves to the wall midpoint below this

# Drawing defaults
STRAIGHTEN_ANGLE_DEG = 15.0
DEFAULT_WALL_THICKNESS = 6.0
DEFAULT_DRAWN_WALL_WIDTH = 4.0
DEFAULT_ROOM_HEIGHT = 3.0

# Rotation steps (degrees)
ROTATION_STEP_DEG = 15.0
GROUP_ROTATION_STEP_DEG = 90.0

# Host-driven recompute cadence (seconds)
RECOMPUTE_INTERVAL_S = 0.15

# Environment variable read by the CLI to set the log level
LOG_LEVEL_ENV = "FLOORPLANNER_LOG_LEVEL"


@dataclass(frozen=True)
class Tolerances:
    """Named closeness tolerances passed explicitly to the engine.

    Attributes:
        connect: Endpoint distance that puts two walls in the same group.
        close: Endpoint gap accepted when closing a wall loop.
        close_search_max: Cap on the greedy chaining radius.
        snap: Maximum distance for snapping an opening onto a wall.
        overlap: Bounding box shrink used by the overlap broad phase.
    """

    connect: float = CONNECT_EPS
    close: float = CLOSE_EPS
    close_search_max: float = CLOSE_SEARCH_MAX
    snap: float = SNAP_EPS
    overlap: float = OVERLAP_EPS


DEFAULT_TOLERANCES = Tolerances()
