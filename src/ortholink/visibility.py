"""
Orthogonal visibility graph construction.

Loosely based on:
    Wybrow, Michael, Kim Marriott, and Peter J. Stuckey.
    "Orthogonal connector routing."
    International Symposium on Graph Drawing. Springer, 2009.

Building the graph happens in two passes:

1. ``find_interesting_segments`` gathers the points of interest (connectors
   plus obstacle corners), wires every obstacle boundary into the graph, and
   casts a ray from each point of interest in every direction it still lacks
   a neighbour. Each ray stops at the nearest obstacle edge, at a point of
   interest in its path, or at the edge of the routing area, and becomes a
   horizontal or vertical segment.
2. ``intersect_interesting_segments`` crosses every horizontal segment with
   every vertical one and splices a graph node into both at each crossing,
   so that routes can turn there.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from .geometry import (
    FLOAT_TOLERANCE,
    Coordinate,
    Direction,
    direction_between,
    points_equal,
    segment_intersection,
)
from .graph import GraphNode, OrthogonalGraph, Segment
from .models import ConnectorPoint, Rect

logger = logging.getLogger(__name__)

# (left, top, right, bottom)
Bounds = Tuple[float, float, float, float]


def _obstacle_bounds(corners: Sequence[Coordinate]) -> Bounds:
    tl, tr, bl = corners[0], corners[1], corners[2]
    return tl[0], tl[1], tr[0], bl[1]


def _corner_node(
    graph: OrthogonalGraph,
    corner_nodes: List[GraphNode],
    x: float,
    y: float,
    tolerance: float,
) -> Tuple[GraphNode, bool]:
    """Return the corner node at (x, y), creating it if no obstacle has one yet."""
    for node in corner_nodes:
        if points_equal(node, (x, y), tolerance):
            return node, False
    node = graph.add_node(x, y)
    corner_nodes.append(node)
    return node, True


def _wire_boundary_edges(
    graph: OrthogonalGraph,
    edges: List[Tuple[GraphNode, GraphNode]],
    horizontal: bool,
    tolerance: float,
) -> List[Segment]:
    """
    Link obstacle boundary edges into chains of adjacent nodes.

    Edges lying on the same line that touch or overlap are merged into one
    run, and every corner on the run is linked to the next one along it.
    This keeps touching obstacles that share an edge from producing parallel,
    unconnected copies of that edge.

    Args:
        graph: Graph that owns the corner nodes
        edges: ``(start, end)`` pairs, start being the west/north end
        horizontal: True for top/bottom edges, False for left/right edges
        tolerance: Coordinate equality tolerance

    Returns:
        The boundary segments, one per linked pair of corners
    """
    if horizontal:
        direction = Direction.EAST

        def fixed(n: GraphNode) -> float:
            return n.y

        def along(n: GraphNode) -> float:
            return n.x

    else:
        direction = Direction.SOUTH

        def fixed(n: GraphNode) -> float:
            return n.x

        def along(n: GraphNode) -> float:
            return n.y

    # Group edges into lines first; each line keeps the fixed coordinate of
    # its first edge, so near-equal lines cannot interleave along the axis.
    lines: List[List[Tuple[GraphNode, GraphNode]]] = []
    line_fixed: Optional[float] = None
    for edge in sorted(edges, key=lambda e: fixed(e[0])):
        if line_fixed is not None and abs(fixed(edge[0]) - line_fixed) < tolerance:
            lines[-1].append(edge)
        else:
            lines.append([edge])
            line_fixed = fixed(edge[0])

    runs: List[List[GraphNode]] = []
    for line in lines:
        run_end: Optional[float] = None
        for start, end in sorted(line, key=lambda e: (along(e[0]), along(e[1]))):
            if run_end is not None and along(start) <= run_end + tolerance:
                runs[-1].extend((start, end))
                run_end = max(run_end, along(end))
            else:
                runs.append([start, end])
                run_end = along(end)

    segments: List[Segment] = []
    for run in runs:
        members: List[GraphNode] = []
        for node in run:
            if not any(node is m for m in members):
                members.append(node)
        members.sort(key=along)
        for first, second in zip(members, members[1:]):
            graph.link(first, second, direction)
            segments.append(Segment(first, second))
    return segments


def _cast_ray(
    point: GraphNode, direction: Direction, obstacles: List[Bounds], area: Rect
) -> float:
    """
    Find how far a ray from ``point`` travels before it is blocked.

    Returns the coordinate (y for north/south, x for east/west) at which the
    ray stops: the nearest obstacle edge facing the point, or the routing
    area edge when nothing is in the way. Obstacles are checked in input
    order and only a strictly nearer edge replaces the current stop, so the
    first of several equidistant edges wins.
    """
    x, y = point.x, point.y
    if direction is Direction.NORTH:
        stop = area.y
        for left, top, right, bottom in obstacles:
            if left <= x <= right and y >= bottom and bottom > stop:
                stop = bottom
    elif direction is Direction.SOUTH:
        stop = area.y2
        for left, top, right, bottom in obstacles:
            if left <= x <= right and y <= top and top < stop:
                stop = top
    elif direction is Direction.EAST:
        stop = area.x2
        for left, top, right, bottom in obstacles:
            if top <= y <= bottom and x <= left and left < stop:
                stop = left
    else:
        stop = area.x
        for left, top, right, bottom in obstacles:
            if top <= y <= bottom and x >= right and right > stop:
                stop = right
    return stop


def _accepts(node: GraphNode, direction: Direction) -> bool:
    """Whether ``node`` can take a new neighbour arriving from ``direction``."""
    return node.neighbour_index(direction.opposite) is None and node.allows(
        direction.opposite
    )


def _nearest_node_on_ray(
    graph: OrthogonalGraph,
    point: GraphNode,
    direction: Direction,
    stop: float,
    tolerance: float,
) -> Optional[GraphNode]:
    """
    Closest node strictly between ``point`` and ``stop`` that ends the ray.

    That is a point of interest, or the terminal of an earlier ray cast the
    opposite way along the same line. Stopping at the latter joins the two
    rays into one chain instead of leaving two overlapping segments.
    """
    sign = 1.0 if direction in (Direction.EAST, Direction.SOUTH) else -1.0
    if direction.is_vertical:
        start, limit = point.y, stop
    else:
        start, limit = point.x, stop

    poi = set(graph.poi)
    best: Optional[GraphNode] = None
    best_distance = abs(limit - start) - tolerance
    for other in graph.nodes:
        if other is point:
            continue
        if other.index not in poi and other.neighbour_index(direction) is None:
            continue
        if direction.is_vertical:
            if abs(other.x - point.x) >= tolerance:
                continue
            distance = (other.y - start) * sign
        else:
            if abs(other.y - point.y) >= tolerance:
                continue
            distance = (other.x - start) * sign
        if tolerance < distance < best_distance and _accepts(other, direction):
            best, best_distance = other, distance
    return best


def _add_ray_segment(
    graph: OrthogonalGraph,
    point: GraphNode,
    direction: Direction,
    stop: float,
    tolerance: float,
) -> Optional[Segment]:
    """Link ``point`` to a terminal node at the end of its ray."""
    if direction.is_vertical:
        x, y = point.x, stop
    else:
        x, y = stop, point.y

    # Ray blocked immediately, e.g. the point sits on an obstacle edge
    if points_equal(point, (x, y), tolerance):
        return None

    # A point of interest or an opposite ray in the path ends the ray early
    terminal = _nearest_node_on_ray(graph, point, direction, stop, tolerance)
    if terminal is None:
        # Reuse a node already at the terminal position when it can accept the link
        terminal = graph.find_node(x, y, tolerance)
        if terminal is None or terminal is point or not _accepts(terminal, direction):
            terminal = graph.add_node(x, y)

    graph.link(point, terminal, direction)
    return Segment(point, terminal)


def find_interesting_segments(
    connector_points: Sequence[ConnectorPoint],
    obstacles: Sequence[Sequence[Coordinate]],
    area: Rect,
    tolerance: float = FLOAT_TOLERANCE,
) -> OrthogonalGraph:
    """
    Build the points of interest and the horizontal/vertical segments.

    Args:
        connector_points: Link endpoints, with optional directional flags
        obstacles: Four corners per obstacle, ordered top-left, top-right,
            bottom-left, bottom-right
        area: Rectangle that every ray is clipped to
        tolerance: Coordinate equality tolerance

    Returns:
        A graph holding the connector nodes, obstacle corners, ray terminals
        and the ``h``/``v`` segments, not yet intersected
    """
    graph = OrthogonalGraph()

    for connector in connector_points:
        node = graph.add_node(
            connector.x,
            connector.y,
            is_connector=True,
            horizontal_only=connector.horizontal_only,
            vertical_only=connector.vertical_only,
        )
        graph.poi.append(node.index)

    # Obstacle corners are wired into closed rectangles by hand; their
    # boundary edges are known to be free and are never rediscovered by
    # the ray casting below.
    corner_nodes: List[GraphNode] = []
    horizontal_edges: List[Tuple[GraphNode, GraphNode]] = []
    vertical_edges: List[Tuple[GraphNode, GraphNode]] = []
    bounds: List[Bounds] = []
    for corners in obstacles:
        tl, tr, bl, br = (
            _corner_node(graph, corner_nodes, cx, cy, tolerance)
            for cx, cy in corners
        )
        for node, created in (tl, tr, bl, br):
            if created:
                graph.poi.append(node.index)
        horizontal_edges.extend([(tl[0], tr[0]), (bl[0], br[0])])
        vertical_edges.extend([(tl[0], bl[0]), (tr[0], br[0])])
        bounds.append(_obstacle_bounds(corners))

    graph.h.extend(_wire_boundary_edges(graph, horizontal_edges, True, tolerance))
    graph.v.extend(_wire_boundary_edges(graph, vertical_edges, False, tolerance))

    for index in list(graph.poi):
        point = graph.node(index)
        for direction in (
            Direction.NORTH,
            Direction.SOUTH,
            Direction.EAST,
            Direction.WEST,
        ):
            if point.neighbour_index(direction) is not None:
                continue
            if not point.allows(direction):
                continue
            stop = _cast_ray(point, direction, bounds, area)
            segment = _add_ray_segment(graph, point, direction, stop, tolerance)
            if segment is None:
                continue
            if direction.is_vertical:
                graph.v.append(segment)
            else:
                graph.h.append(segment)

    logger.debug(
        "Found %d points of interest, %d horizontal and %d vertical segments",
        len(graph.poi),
        len(graph.h),
        len(graph.v),
    )
    return graph


def _segments_connected(seg1: Segment, seg2: Segment, tolerance: float) -> bool:
    """Whether the two segments share an endpoint position."""
    return (
        points_equal(seg1.a, seg2.a, tolerance)
        or points_equal(seg1.a, seg2.b, tolerance)
        or points_equal(seg1.b, seg2.a, tolerance)
        or points_equal(seg1.b, seg2.b, tolerance)
    )


def _split_segment(
    graph: OrthogonalGraph, segment: Segment, node: GraphNode
) -> List[Segment]:
    """Splice ``node`` between the two ends of ``segment``."""
    direction = direction_between(segment.a, node)
    graph.link(segment.a, node, direction)
    graph.link(node, segment.b, direction)
    return [Segment(segment.a, node), Segment(node, segment.b)]


def _has_horizontal_neighbour(node: GraphNode) -> bool:
    return node.east is not None or node.west is not None


def _has_vertical_neighbour(node: GraphNode) -> bool:
    return node.north is not None or node.south is not None


def _can_splice(node: GraphNode, split_h: bool, split_v: bool) -> bool:
    """Whether ``node`` can sit inside the segments being split."""
    if split_h and (_has_horizontal_neighbour(node) or not node.allows(Direction.EAST)):
        return False
    if split_v and (_has_vertical_neighbour(node) or not node.allows(Direction.NORTH)):
        return False
    return True


def intersect_interesting_segments(
    graph: OrthogonalGraph, tolerance: float = FLOAT_TOLERANCE
) -> List[int]:
    """
    Splice a node into the graph at every horizontal/vertical crossing.

    ``graph.h`` and ``graph.v`` are rewritten in place: each crossed segment
    is replaced by the two pieces either side of the crossing, and the
    pieces are themselves checked against the remaining segments.

    Returns:
        Indices of the nodes created purely by intersection
    """
    h, v = graph.h, graph.v
    created: List[int] = []

    h_index = 0
    while h_index < len(h):
        v_index = 0
        while v_index < len(v):
            # h[h_index] can be replaced during this loop, so look it up again
            h_seg = h[h_index]
            v_seg = v[v_index]

            hit = segment_intersection(h_seg.a, h_seg.b, v_seg.a, v_seg.b)
            # Segments meeting at a shared corner are already neighbours
            if hit is None or _segments_connected(h_seg, v_seg, tolerance):
                v_index += 1
                continue

            # Reuse an endpoint the crossing lands on (a T junction)
            node: Optional[GraphNode] = None
            for endpoint in (h_seg.a, h_seg.b, v_seg.a, v_seg.b):
                if points_equal(endpoint, hit, tolerance):
                    node = endpoint
                    break

            split_h = node is None or not h_seg.has_endpoint(node)
            split_v = node is None or not v_seg.has_endpoint(node)

            if node is not None and not _can_splice(node, split_h, split_v):
                # The endpoint is already wired along this axis by an
                # overlapping collinear segment, or its flags forbid that
                # axis; leave the crossing alone.
                v_index += 1
                continue

            if node is None:
                # Reuse a free node already sitting on the crossing
                node = graph.find_node(v_seg.a.x, h_seg.a.y, tolerance)
                if node is None or not _can_splice(node, True, True):
                    node = graph.add_node(v_seg.a.x, h_seg.a.y)
                    created.append(node.index)

            if split_h:
                h[h_index : h_index + 1] = _split_segment(graph, h_seg, node)
            if split_v:
                v[v_index : v_index + 1] = _split_segment(graph, v_seg, node)
                # Both pieces now share an endpoint with h[h_index]
                v_index += 1
            v_index += 1
        h_index += 1

    logger.debug("Spliced %d intersection nodes into the graph", len(created))
    return created


def build_orthogonal_graph(
    connector_points: Sequence[ConnectorPoint],
    obstacles: Sequence[Sequence[Coordinate]],
    area: Rect,
    tolerance: float = FLOAT_TOLERANCE,
) -> OrthogonalGraph:
    """Run both construction passes and return the finished graph."""
    graph = find_interesting_segments(connector_points, obstacles, area, tolerance)
    graph.ovg = intersect_interesting_segments(graph, tolerance)
    return graph
