"""
Table layout pipeline.

Lays out tables of nodes in a bounded area and routes orthogonal links
between nodes of different tables:

1. Hierarchy - nested input becomes tables and nodes
2. Placement - a force simulation spreads the tables over the area
3. Node positions - nodes stack vertically inside their table
4. Links - link endpoints are resolved to nodes
5. Routing - one visibility graph for the whole layout, one A* search per
   link, then each link is shifted a little further than the last so that
   links sharing a corridor fan out
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import networkx as nx

from .geometry import Coordinate
from .graph import OrthogonalGraph
from .hierarchy import build_tables
from .models import ConnectorPoint, Link, Rect, Table, TableNode
from .path_shift import DEFAULT_PATH_SHIFT, shift_path
from .pathfinding import TURN_PENALTY
from .placement import place_tables
from .router import OrthogonalRouter, RouterConfig
from .tracer import RouteTrace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutConfig:
    """
    Table layout settings.

    Attributes:
        width: Width of the layout area.
        height: Height of the layout area.
        node_width: Width of every node, and therefore of every table.
        node_height: Height of a single node row.
        table_inflation: Margin around each table used for spacing during
            placement and as the routing obstacle.
        path_shift: Offset added per link so parallel links separate.
        iterations: Number of force simulation ticks.
        charge_strength: Many-body strength between tables (positive pulls
            tables together, collision keeps them apart).
        collide_padding: Clearance added on every side of each inflated
            table for collision; neighbouring tables end up twice this apart.
        area_padding: Clearance between inflated tables and the area edge.
        link_strength: Pull between tables that share links; 0 disables it.
        turn_penalty: Routing cost per change of direction.
    """

    width: float = 50.0
    height: float = 50.0
    node_width: float = 10.0
    node_height: float = 5.0
    table_inflation: float = 5.0
    path_shift: float = DEFAULT_PATH_SHIFT
    iterations: int = 300
    charge_strength: float = 1000.0
    collide_padding: float = 5.0
    area_padding: float = 10.0
    link_strength: float = 0.0
    turn_penalty: float = TURN_PENALTY

    def __post_init__(self):
        for name in ("width", "height", "node_width", "node_height"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        for name in ("table_inflation", "path_shift", "collide_padding", "area_padding"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if self.iterations < 0:
            raise ValueError("iterations must not be negative")

    @property
    def area(self) -> Rect:
        return Rect(0.0, 0.0, self.width, self.height)


@dataclass
class TableLayoutResult:
    """
    Result of a table layout.

    Attributes:
        tables: Positioned tables.
        nodes: Positioned nodes, indexed by ``TableNode.index``.
        links: Links with their routed polylines.
        area: Layout area every route is confined to.
        graph: Visibility graph the links were routed on, for debugging.
    """

    tables: List[Table] = field(default_factory=list)
    nodes: List[TableNode] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)
    area: Optional[Rect] = None
    graph: Optional[OrthogonalGraph] = None

    @property
    def poi(self) -> List[Coordinate]:
        if not self.graph:
            return []
        return [self.graph.nodes[i].position for i in self.graph.poi]

    @property
    def ovg(self) -> List[Coordinate]:
        if not self.graph:
            return []
        return [self.graph.nodes[i].position for i in self.graph.ovg]

    @property
    def h(self) -> List[Tuple[Coordinate, Coordinate]]:
        return [(s.a.position, s.b.position) for s in self.graph.h] if self.graph else []

    @property
    def v(self) -> List[Tuple[Coordinate, Coordinate]]:
        return [(s.a.position, s.b.position) for s in self.graph.v] if self.graph else []

    def table(self, table_id: Any) -> Table:
        for table in self.tables:
            if table.id == table_id:
                return table
        raise KeyError(table_id)


class TableLayout:
    """
    Lays out tables and routes the links between their nodes.

    Example:
        >>> layout = TableLayout(LayoutConfig(width=200, height=150))
        >>> result = layout.layout(
        ...     [
        ...         {"id": "users", "children": [{"id": "id"}, {"id": "name"}]},
        ...         {"id": "orders", "children": [{"id": "user_id"}]},
        ...     ],
        ...     [{"source": 0, "target": 2}],
        ... )
        >>> result.links[0].points[0] == layout.connector_xy(result.nodes[0])
        True
    """

    def __init__(
        self,
        config: Optional[LayoutConfig] = None,
        trace: Optional[RouteTrace] = None,
    ):
        self.config = config or LayoutConfig()
        self.trace = trace

    def layout(
        self,
        raw_tables: Sequence[Mapping[str, Any]],
        raw_links: Optional[Sequence[Any]] = None,
    ) -> TableLayoutResult:
        """
        Compute table positions, node positions and link routes.

        Args:
            raw_tables: Nested table input; see ``hierarchy.build_tables``
            raw_links: Links as ``{"source": ..., "target": ...}`` mappings
                or ``(source, target)`` pairs. Integers refer to node
                indices, anything else to node ids.

        Returns:
            TableLayoutResult with everything positioned and routed
        """
        tables, nodes = build_tables(raw_tables)
        result = TableLayoutResult(tables=tables, nodes=nodes, area=self.config.area)
        if self.trace is not None:
            self.trace.add_stage(
                "hierarchy", {"tables": len(tables), "nodes": len(nodes)}
            )

        result.links = self._compute_node_links(nodes, raw_links or [])
        self._compute_table_placement(tables, nodes, result.links)
        self._compute_node_positions(tables)
        self._compute_link_points(result)
        return result

    def table_size(self, table: Table) -> Tuple[float, float]:
        """Size of the table body: one node wide, one row per node."""
        return self.config.node_width, self.config.node_height * len(table.children)

    def connector_point(self, node: TableNode) -> ConnectorPoint:
        """The anchor links attach to: the node centre, approached sideways."""
        return ConnectorPoint(
            x=node.x + self.config.node_width / 2.0,
            y=node.y + self.config.node_height / 2.0,
            horizontal_only=True,
        )

    def connector_xy(self, node: TableNode) -> Coordinate:
        point = self.connector_point(node)
        return point.x, point.y

    def _compute_table_placement(
        self, tables: List[Table], nodes: List[TableNode], links: List[Link]
    ) -> None:
        config = self.config
        inflation = config.table_inflation * 2
        sizes = []
        for table in tables:
            width, height = self.table_size(table)
            sizes.append((width + inflation, height + inflation))

        # Tables whose nodes are linked attract each other
        table_index = {table.id: i for i, table in enumerate(tables)}
        link_graph = nx.Graph()
        link_graph.add_nodes_from(range(len(tables)))
        for link in links:
            a = table_index[link.source.table]
            b = table_index[link.target.table]
            if a != b:
                link_graph.add_edge(a, b)

        centres = place_tables(
            sizes,
            (config.width, config.height),
            iterations=config.iterations,
            charge_strength=config.charge_strength,
            collide_padding=config.collide_padding,
            area_padding=config.area_padding,
            link_graph=link_graph,
            link_strength=config.link_strength,
        )

        # Positions from the simulation are table centres
        for table, (cx, cy) in zip(tables, centres):
            width, height = self.table_size(table)
            table.width = width
            table.height = height
            table.x = cx - width / 2.0
            table.y = cy - height / 2.0
            table.inflated_rect = table.rect.inflate(config.table_inflation)

        if self.trace is not None:
            self.trace.add_stage(
                "placement",
                {
                    "tables": len(tables),
                    "linked_table_pairs": link_graph.number_of_edges(),
                },
            )

    def _compute_node_positions(self, tables: List[Table]) -> None:
        for table in tables:
            y = table.y
            for child in table.children:
                child.x = table.x
                child.y = y
                y += self.config.node_height

    def _compute_node_links(
        self, nodes: List[TableNode], raw_links: Sequence[Any]
    ) -> List[Link]:
        by_id: Dict[Any, TableNode] = {}
        for node in nodes:
            by_id.setdefault(node.id, node)

        def resolve(ref: Any) -> TableNode:
            if isinstance(ref, TableNode):
                return ref
            if isinstance(ref, int) and not isinstance(ref, bool):
                if 0 <= ref < len(nodes):
                    return nodes[ref]
                raise ValueError(f"Link refers to node index {ref}, out of range")
            try:
                return by_id[ref]
            except KeyError:
                raise ValueError(f"Link refers to unknown node {ref!r}") from None

        links: List[Link] = []
        for i, raw in enumerate(raw_links):
            if isinstance(raw, Mapping):
                source_ref, target_ref = raw["source"], raw["target"]
            else:
                source_ref, target_ref = raw
            link = Link(source=resolve(source_ref), target=resolve(target_ref), index=i)
            link.source.source_links.append(link)
            link.target.target_links.append(link)
            links.append(link)
        return links

    def _compute_link_points(self, result: TableLayoutResult) -> None:
        config = self.config
        router = OrthogonalRouter(
            RouterConfig(turn_penalty=config.turn_penalty), trace=self.trace
        )
        obstacles = [
            t.inflated_rect
            for t in result.tables
            if t.inflated_rect.width > 0 and t.inflated_rect.height > 0
        ]
        router.set_obstacles(obstacles)
        router.set_connector_points([self.connector_point(n) for n in result.nodes])
        result.graph = router.generate_orthogonal_graph(result.area)

        # Route every link and shift each one a little further than the last
        shift_amount = 0.0
        failed = 0
        for link in result.links:
            source = self.connector_xy(link.source)
            target = self.connector_xy(link.target)
            route = router.find_route(source, target)
            if route.found:
                link.points = list(route.points)
                link.routed = True
                shift_path(link.points, (shift_amount, shift_amount))
            else:
                logger.warning(
                    "Link %s -> %s could not be routed (%s), drawing a straight line",
                    link.source.id,
                    link.target.id,
                    route.status.value,
                )
                link.points = [source, target]
                link.routed = False
                failed += 1
            shift_amount += config.path_shift

        if self.trace is not None:
            self.trace.add_stage(
                "links_routed", {"links": len(result.links), "failed": failed}
            )
