"""
ortholink - Orthogonal connector routing for table diagrams

Routes axis-aligned links around rectangular obstacles using an orthogonal
visibility graph and A* search, and lays out tables of nodes so that the
links between them can be drawn.

Example:
    >>> from ortholink import OrthogonalRouter, Rect
    >>> router = OrthogonalRouter()
    >>> router.set_obstacles([Rect(10, 10, 20, 10)])
    >>> router.set_connector_points([(5, 15), (35, 15)])
    >>> graph = router.generate_orthogonal_graph(Rect(0, 0, 50, 30))
    >>> route = router.find_route((5, 15), (35, 15))
    >>> route.points  # along the left edge, under the obstacle, back up
    [(5.0, 15.0), (10.0, 15.0), (10.0, 20.0), (35.0, 20.0), (35.0, 15.0)]

Table Layout Example:
    >>> from ortholink import LayoutConfig, TableLayout
    >>> layout = TableLayout(LayoutConfig(width=200, height=150))
    >>> result = layout.layout(
    ...     [{"id": "users", "children": [{"id": "id"}]},
    ...      {"id": "orders", "children": [{"id": "user_id"}]}],
    ...     [("id", "user_id")],
    ... )
    >>> result.links[0].routed
    True
"""

from .debug import GraphInspector, to_networkx
from .geometry import Direction
from .graph import GraphNode, OrthogonalGraph, Segment
from .heap import BinaryHeap
from .hierarchy import HierarchyError, build_tables
from .layout import LayoutConfig, TableLayout, TableLayoutResult
from .models import Area, ConnectorPoint, Link, Rect, Table, TableNode
from .path_shift import shift_path
from .pathfinding import SearchOutcome, find_path
from .placement import ForceSimulation, place_tables
from .png_renderer import LayoutPNGRenderer, render_to_png
from .router import (
    GraphNotBuiltError,
    NoRouteError,
    OrthogonalRouter,
    RouteResult,
    RouterConfig,
    RouteStatus,
    RoutingError,
    UnknownConnectorError,
)
from .tracer import PipelineStage, RouteSearch, RouteTrace
from .visibility import (
    build_orthogonal_graph,
    find_interesting_segments,
    intersect_interesting_segments,
)

__version__ = "0.1.0"

__all__ = [
    # Router
    "OrthogonalRouter",
    "RouterConfig",
    "RouteResult",
    "RouteStatus",
    "RoutingError",
    "GraphNotBuiltError",
    "UnknownConnectorError",
    "NoRouteError",
    # Models
    "Rect",
    "Area",
    "ConnectorPoint",
    "Table",
    "TableNode",
    "Link",
    # Graph construction and search
    "Direction",
    "GraphNode",
    "Segment",
    "OrthogonalGraph",
    "find_interesting_segments",
    "intersect_interesting_segments",
    "build_orthogonal_graph",
    "BinaryHeap",
    "find_path",
    "SearchOutcome",
    "shift_path",
    # Table layout
    "TableLayout",
    "LayoutConfig",
    "TableLayoutResult",
    "HierarchyError",
    "build_tables",
    "ForceSimulation",
    "place_tables",
    # Rendering
    "LayoutPNGRenderer",
    "render_to_png",
    # Debug/Tracing (for development and debugging)
    "RouteTrace",
    "RouteSearch",
    "PipelineStage",
    "GraphInspector",
    "to_networkx",
]
