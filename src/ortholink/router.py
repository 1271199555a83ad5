"""
Orthogonal connector router.

Owns the obstacle and connector state for one layout pass, builds the
orthogonal visibility graph once, and answers any number of route requests
against it:

- ``set_obstacles`` / ``set_connector_points`` supply the inputs
- ``generate_orthogonal_graph`` builds the graph inside a bounding area
- ``find_route`` runs an A* search between two connector points

Changing the obstacles or connectors discards the graph; it must be
generated again before the next route request.
"""

import logging
import time
from contextlib import nullcontext
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ContextManager, Dict, List, Optional, Sequence, Tuple, Union

from .geometry import FLOAT_TOLERANCE, Coordinate, points_equal, simplify_waypoints
from .graph import GraphNode, OrthogonalGraph, Segment
from .models import ConnectorPoint, Rect
from .pathfinding import TURN_PENALTY, find_path
from .tracer import RouteSearch, RouteTrace
from .visibility import find_interesting_segments, intersect_interesting_segments

logger = logging.getLogger(__name__)


class RoutingError(Exception):
    """Base class for route request failures."""

    pass


class GraphNotBuiltError(RoutingError):
    """Raised when a route is requested before the graph was generated."""

    pass


class UnknownConnectorError(RoutingError):
    """Raised when a route endpoint matches no connector point."""

    pass


class NoRouteError(RoutingError):
    """Raised when the search exhausts the graph without reaching the end."""

    pass


class RouteStatus(Enum):
    """Outcome of a route request."""

    FOUND = "found"
    NO_ROUTE = "no_route"
    GRAPH_NOT_BUILT = "graph_not_built"
    UNKNOWN_CONNECTOR = "unknown_connector"


_STATUS_ERRORS = {
    RouteStatus.NO_ROUTE: NoRouteError,
    RouteStatus.GRAPH_NOT_BUILT: GraphNotBuiltError,
    RouteStatus.UNKNOWN_CONNECTOR: UnknownConnectorError,
}


@dataclass(frozen=True)
class RouterConfig:
    """
    Router settings.

    Attributes:
        turn_penalty: Cost added to a path each time it changes direction.
        tolerance: Distance under which two coordinates are the same point.
        simplify: Drop collinear intermediate graph nodes from returned
            routes, leaving only the endpoints and the bends.
    """

    turn_penalty: float = TURN_PENALTY
    tolerance: float = FLOAT_TOLERANCE
    simplify: bool = True

    def __post_init__(self):
        if self.turn_penalty < 0:
            raise ValueError("turn_penalty must not be negative")
        if self.tolerance <= 0:
            raise ValueError("tolerance must be positive")


@dataclass
class RouteResult:
    """
    Result of a single ``find_route`` call.

    Attributes:
        status: What happened.
        start: Requested start position.
        end: Requested end position.
        points: Route from start to end inclusive; empty unless found.
        cost: Search cost of the route.
        message: Explanation for failures.
    """

    status: RouteStatus
    start: Coordinate
    end: Coordinate
    points: List[Coordinate] = field(default_factory=list)
    cost: float = 0.0
    message: str = ""

    @property
    def found(self) -> bool:
        return self.status is RouteStatus.FOUND

    def __bool__(self) -> bool:
        return self.found

    def raise_for_status(self) -> "RouteResult":
        """Raise the matching ``RoutingError`` unless a route was found."""
        if self.found:
            return self
        raise _STATUS_ERRORS[self.status](self.message)


PointLike = Union[ConnectorPoint, GraphNode, Tuple[float, float], Any]


def _coordinates(point: PointLike) -> Coordinate:
    if isinstance(point, tuple):
        return float(point[0]), float(point[1])
    if isinstance(point, dict):
        return float(point["x"]), float(point["y"])
    return float(point.x), float(point.y)


def _as_connector(point: Any) -> ConnectorPoint:
    if isinstance(point, ConnectorPoint):
        return point
    if isinstance(point, dict):
        return ConnectorPoint(
            x=float(point["x"]),
            y=float(point["y"]),
            horizontal_only=bool(point.get("horizontal_only", False)),
            vertical_only=bool(point.get("vertical_only", False)),
        )
    x, y = _coordinates(point)
    return ConnectorPoint(x, y)


def _as_area(area: Any) -> Rect:
    if isinstance(area, Rect):
        rect = area
    elif isinstance(area, dict):
        rect = Rect(area["x"], area["y"], area["w"], area["h"])
    else:
        rect = Rect(*area)
    if rect.width <= 0 or rect.height <= 0:
        raise ValueError(f"Routing area must have a positive size, got {rect}")
    return rect


def _validate_obstacle(corners: Sequence[Any], tolerance: float) -> List[Coordinate]:
    """Check that four corners form an axis-aligned rectangle in tl/tr/bl/br order."""
    if isinstance(corners, Rect):
        corners = corners.corners
    points = [_coordinates(c) for c in corners]
    if len(points) != 4:
        raise ValueError(f"Obstacle needs exactly 4 corners, got {len(points)}")
    (tlx, tly), (trx, try_), (blx, bly), (brx, bry) = points
    aligned = (
        abs(tly - try_) < tolerance
        and abs(bly - bry) < tolerance
        and abs(tlx - blx) < tolerance
        and abs(trx - brx) < tolerance
    )
    if not aligned or trx <= tlx or bly <= tly:
        raise ValueError(
            "Obstacle corners must be an axis-aligned rectangle ordered "
            f"top-left, top-right, bottom-left, bottom-right, got {points}"
        )
    return points


class OrthogonalRouter:
    """
    Routes orthogonal connectors around rectangular obstacles.

    The router is not safe for concurrent use: route requests share the
    graph it owns. Searches never modify the graph, so concurrent callers
    only need to serialise calls that change the inputs or rebuild it.

    Example:
        >>> router = OrthogonalRouter()
        >>> router.set_obstacles([Rect(10, 10, 20, 10)])
        >>> router.set_connector_points([(5, 15), (35, 15)])
        >>> graph = router.generate_orthogonal_graph(Rect(0, 0, 50, 30))
        >>> result = router.find_route((5, 15), (35, 15))
        >>> result.points[0], result.points[-1]
        ((5.0, 15.0), (35.0, 15.0))
    """

    def __init__(
        self,
        config: Optional[RouterConfig] = None,
        trace: Optional[RouteTrace] = None,
    ):
        """
        Initialize the router.

        Args:
            config: Router settings; defaults to ``RouterConfig()``
            trace: Optional trace that records stages and searches
        """
        self.config = config or RouterConfig()
        self.trace = trace
        self._obstacle_corners: List[List[Coordinate]] = []
        self._connector_points: List[ConnectorPoint] = []
        self._graph: Optional[OrthogonalGraph] = None

    @property
    def obstacle_corners(self) -> List[List[Coordinate]]:
        return self._obstacle_corners

    @property
    def connector_points(self) -> List[ConnectorPoint]:
        return self._connector_points

    @property
    def graph(self) -> Optional[OrthogonalGraph]:
        """The current visibility graph, or None if it must be generated."""
        return self._graph

    @property
    def is_graph_generated(self) -> bool:
        return self._graph is not None

    @property
    def h(self) -> List[Segment]:
        return self._graph.h if self._graph else []

    @property
    def v(self) -> List[Segment]:
        return self._graph.v if self._graph else []

    @property
    def poi(self) -> List[GraphNode]:
        if not self._graph:
            return []
        return [self._graph.nodes[i] for i in self._graph.poi]

    @property
    def ovg(self) -> List[GraphNode]:
        if not self._graph:
            return []
        return [self._graph.nodes[i] for i in self._graph.ovg]

    def set_obstacles(self, obstacles: Sequence[Any]) -> None:
        """
        Set the rectangles routes must go around.

        Args:
            obstacles: Each obstacle is a ``Rect`` or four corners in the
                order top-left, top-right, bottom-left, bottom-right

        Raises:
            ValueError: If an obstacle is not an axis-aligned rectangle
        """
        self._obstacle_corners = [
            _validate_obstacle(o, self.config.tolerance) for o in obstacles
        ]
        self._invalidate()
        if self.trace is not None:
            self.trace.add_stage(
                "obstacles_set", {"obstacles": len(self._obstacle_corners)}
            )

    def set_connector_points(self, connector_points: Sequence[Any]) -> None:
        """
        Set the points that routes may start from and end at.

        Args:
            connector_points: ``ConnectorPoint`` objects, ``(x, y)`` tuples, or
                mappings with ``x``, ``y`` and optional ``horizontal_only`` /
                ``vertical_only`` keys
        """
        self._connector_points = [_as_connector(p) for p in connector_points]
        self._invalidate()
        if self.trace is not None:
            self.trace.add_stage(
                "connectors_set", {"connectors": len(self._connector_points)}
            )

    def _invalidate(self) -> None:
        if self._graph is not None:
            logger.debug("Router inputs changed, discarding visibility graph")
        self._graph = None

    def generate_orthogonal_graph(self, area: Any) -> OrthogonalGraph:
        """
        Build the orthogonal visibility graph used by ``find_route``.

        Must be called after the obstacles and connector points are set and
        before any route is requested. Calling it again with the same inputs
        produces an identical graph.

        Args:
            area: ``Rect``, ``(x, y, w, h)`` tuple or ``{x, y, w, h}`` mapping
                that every route is confined to

        Returns:
            The generated graph
        """
        rect = _as_area(area)
        tolerance = self.config.tolerance
        started = time.perf_counter()

        with self._timed_stage("graph_generated") as summary:
            with self._timed_stage("segments_found") as data:
                graph = find_interesting_segments(
                    self._connector_points, self._obstacle_corners, rect, tolerance
                )
                data.update(poi=len(graph.poi), h=len(graph.h), v=len(graph.v))

            with self._timed_stage("segments_intersected") as data:
                graph.ovg = intersect_interesting_segments(graph, tolerance)
                data.update(ovg=len(graph.ovg), h=len(graph.h), v=len(graph.v))

            summary.update(
                area=(rect.x, rect.y, rect.width, rect.height),
                nodes=len(graph.nodes),
                edges=graph.edge_count(),
            )

        self._graph = graph
        logger.debug(
            "Generated orthogonal graph: %d nodes, %d edges in %.2fms",
            len(graph.nodes),
            graph.edge_count(),
            (time.perf_counter() - started) * 1000.0,
        )
        return graph

    def _timed_stage(self, name: str) -> ContextManager[Dict[str, Any]]:
        """Record a timed trace stage, or collect nothing when untraced."""
        if self.trace is None:
            return nullcontext({})
        return self.trace.timed_stage(name)

    def _resolve(self, point: PointLike) -> Optional[GraphNode]:
        """Map a route endpoint onto a connector node of the current graph."""
        graph = self._graph
        if isinstance(point, GraphNode):
            if (
                point.index < len(graph.nodes)
                and graph.nodes[point.index] is point
                and point.is_connector
            ):
                return point
        x, y = _coordinates(point)
        return graph.find_connector(x, y, self.config.tolerance)

    def find_route(self, start: PointLike, end: PointLike) -> RouteResult:
        """
        Find an orthogonal route between two connector points.

        ``start`` and ``end`` may be connector nodes of the current graph or
        bare positions, which are matched to connector points by coordinate.
        Failures are reported through the result status rather than raised;
        call ``RouteResult.raise_for_status()`` to turn them into exceptions.

        Args:
            start: Position (or connector node) the route starts at
            end: Position (or connector node) the route ends at

        Returns:
            RouteResult whose points run from start to end inclusive
        """
        started = time.perf_counter()
        start_xy = _coordinates(start)
        end_xy = _coordinates(end)
        expanded = touched = 0

        if self._graph is None:
            result = RouteResult(
                RouteStatus.GRAPH_NOT_BUILT,
                start_xy,
                end_xy,
                message="The orthogonal graph has not been generated. "
                "Call generate_orthogonal_graph() first.",
            )
        else:
            start_node = self._resolve(start)
            end_node = self._resolve(end)
            if start_node is None or end_node is None:
                missing = start_xy if start_node is None else end_xy
                result = RouteResult(
                    RouteStatus.UNKNOWN_CONNECTOR,
                    start_xy,
                    end_xy,
                    message=f"No connector point at {missing}",
                )
            else:
                outcome = find_path(
                    self._graph,
                    start_node,
                    end_node,
                    self.config.turn_penalty,
                    self.config.tolerance,
                )
                expanded, touched = outcome.expanded, outcome.touched
                if outcome.found:
                    points = [n.position for n in outcome.path]
                    if self.config.simplify:
                        points = simplify_waypoints(points, self.config.tolerance)
                    result = RouteResult(
                        RouteStatus.FOUND,
                        start_xy,
                        end_xy,
                        points=points,
                        cost=outcome.cost,
                    )
                else:
                    result = RouteResult(
                        RouteStatus.NO_ROUTE,
                        start_xy,
                        end_xy,
                        message=f"No route from {start_xy} to {end_xy}",
                    )

        elapsed_ms = (time.perf_counter() - started) * 1000.0
        logger.debug(
            "Route %s -> %s: %s in %.2fms",
            start_xy,
            end_xy,
            result.status.value,
            elapsed_ms,
        )
        if self.trace is not None:
            self.trace.add_search(
                RouteSearch(
                    start=start_xy,
                    end=end_xy,
                    status=result.status.value,
                    expanded=expanded,
                    touched=touched,
                    waypoints=len(result.points),
                    elapsed_ms=elapsed_ms,
                )
            )
        return result

    def has_connector(self, point: PointLike) -> bool:
        """Whether ``point`` matches a connector point by position."""
        x, y = _coordinates(point)
        return any(
            points_equal(c, (x, y), self.config.tolerance)
            for c in self._connector_points
        )
