"""
Path shifting for overlapping connectors.

Links routed through the same corridor would otherwise be drawn exactly on
top of each other. Each link is translated by its own offset, with the
endpoints pinned to their anchors, so parallel links fan out.
"""

from typing import List, Tuple

from .geometry import FLOAT_TOLERANCE

# Amount the translation grows by for each successive link
DEFAULT_PATH_SHIFT = 3


def shift_path(
    path: List[Tuple[float, float]],
    translation: Tuple[float, float],
    tolerance: float = FLOAT_TOLERANCE,
) -> None:
    """
    Translate the interior points of an orthogonal path in place.

    The first and last points never move. The second and second-to-last
    points move only along the axis that keeps their hop to the fixed end
    orthogonal: a point directly above or below its end moves in y, one
    level with its end moves in x. Every other point moves by the full
    translation. A point that is both second and second-to-last (a single
    bend between the two ends) cannot move without breaking a hop and is
    left alone.

    Args:
        path: Waypoints from source to target; replaced element-wise
        translation: ``(dx, dy)`` offset to apply
        tolerance: Coordinate equality tolerance
    """
    dx, dy = translation
    last = len(path) - 1
    if last < 2:
        return

    for i in range(1, last):
        x, y = path[i]
        if i == 1 and i == last - 1:
            continue
        if i == 1 or i == last - 1:
            anchor_x, anchor_y = path[0] if i == 1 else path[last]
            if abs(x - anchor_x) < tolerance:
                path[i] = (x, y + dy)
            elif abs(y - anchor_y) < tolerance:
                path[i] = (x + dx, y)
        else:
            path[i] = (x + dx, y + dy)
