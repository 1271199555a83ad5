"""
Geometry primitives for orthogonal routing.

Points are plain ``(x, y)`` tuples or any object exposing ``x`` and ``y``
attributes. All equality tests use a small floating point tolerance so that
coordinates produced by intersection arithmetic still compare equal to the
corners and anchors they were derived from.
"""

from enum import Enum
from typing import List, Optional, Sequence, Tuple

# Two coordinates closer than this are treated as the same position
FLOAT_TOLERANCE = 1e-7

Coordinate = Tuple[float, float]


class Direction(Enum):
    """Compass direction of travel between two adjacent graph nodes."""

    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    @property
    def is_horizontal(self) -> bool:
        return self in (Direction.EAST, Direction.WEST)

    @property
    def is_vertical(self) -> bool:
        return self in (Direction.NORTH, Direction.SOUTH)


_OPPOSITES = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.EAST: Direction.WEST,
    Direction.WEST: Direction.EAST,
}

# Clockwise from north, the order neighbours are visited in during search
DIRECTIONS: Tuple[Direction, ...] = (
    Direction.NORTH,
    Direction.EAST,
    Direction.SOUTH,
    Direction.WEST,
)


def _xy(point) -> Coordinate:
    if isinstance(point, tuple):
        return point[0], point[1]
    return point.x, point.y


def points_equal(p1, p2, tolerance: float = FLOAT_TOLERANCE) -> bool:
    """Return True if two points coincide within ``tolerance`` on both axes."""
    x1, y1 = _xy(p1)
    x2, y2 = _xy(p2)
    return abs(x1 - x2) < tolerance and abs(y1 - y2) < tolerance


def direction_between(a, b, tolerance: float = FLOAT_TOLERANCE) -> Optional[Direction]:
    """
    Classify the direction of travel from ``a`` to ``b``.

    Screen coordinates are assumed, so north is decreasing y. Horizontal
    movement wins when both axes change. Returns None for coincident points.
    """
    ax, ay = _xy(a)
    bx, by = _xy(b)
    if bx - ax > tolerance:
        return Direction.EAST
    if bx - ax < -tolerance:
        return Direction.WEST
    if by - ay > tolerance:
        return Direction.SOUTH
    if by - ay < -tolerance:
        return Direction.NORTH
    return None


def manhattan_distance(a, b) -> float:
    """Sum of the absolute axis differences between two points."""
    ax, ay = _xy(a)
    bx, by = _xy(b)
    return abs(bx - ax) + abs(by - ay)


def distance_squared(a, b) -> float:
    """Squared Euclidean distance between two points."""
    ax, ay = _xy(a)
    bx, by = _xy(b)
    return (ax - bx) * (ax - bx) + (ay - by) * (ay - by)


def segment_intersection(a1, a2, b1, b2) -> Optional[Coordinate]:
    """
    Intersect segment ``a1-a2`` with segment ``b1-b2``.

    Uses the parametric form described by Paul Bourke. Returns None when
    either segment has zero length, the segments are parallel, or the
    crossing lies only on the extension of one of the lines.

    Returns:
        The ``(x, y)`` intersection, or None
    """
    x1, y1 = _xy(a1)
    x2, y2 = _xy(a2)
    x3, y3 = _xy(b1)
    x4, y4 = _xy(b2)

    if (x1 == x2 and y1 == y2) or (x3 == x4 and y3 == y4):
        return None

    denominator = (y4 - y3) * (x2 - x1) - (x4 - x3) * (y2 - y1)
    if denominator == 0:
        return None

    ua = ((x4 - x3) * (y1 - y3) - (y4 - y3) * (x1 - x3)) / denominator
    ub = ((x2 - x1) * (y1 - y3) - (y2 - y1) * (x1 - x3)) / denominator

    if ua < 0 or ua > 1 or ub < 0 or ub > 1:
        return None

    return x1 + ua * (x2 - x1), y1 + ua * (y2 - y1)


def simplify_waypoints(
    waypoints: Sequence[Coordinate], tolerance: float = FLOAT_TOLERANCE
) -> List[Coordinate]:
    """Remove duplicate and collinear interior waypoints from a polyline."""
    if len(waypoints) <= 2:
        return list(waypoints)

    # Remove duplicate consecutive points first so collinearity is well defined
    deduped = [waypoints[0]]
    for pt in waypoints[1:]:
        if not points_equal(pt, deduped[-1], tolerance):
            deduped.append(pt)

    if len(deduped) <= 2:
        return deduped

    simplified = [deduped[0]]
    for i in range(1, len(deduped) - 1):
        prev = simplified[-1]
        curr = deduped[i]
        next_pt = deduped[i + 1]

        same_x = abs(prev[0] - curr[0]) < tolerance and abs(curr[0] - next_pt[0]) < tolerance
        same_y = abs(prev[1] - curr[1]) < tolerance and abs(curr[1] - next_pt[1]) < tolerance

        if not (same_x or same_y):
            simplified.append(curr)

    simplified.append(deduped[-1])
    return simplified


def is_orthogonal_path(
    waypoints: Sequence[Coordinate], tolerance: float = FLOAT_TOLERANCE
) -> bool:
    """Return True if every hop of the polyline is horizontal or vertical."""
    for (x1, y1), (x2, y2) in zip(waypoints, waypoints[1:]):
        if abs(x1 - x2) >= tolerance and abs(y1 - y2) >= tolerance:
            return False
    return True
