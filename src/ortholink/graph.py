"""
Orthogonal visibility graph storage.

Nodes live in an arena and are addressed by a stable integer index. Each
node has four directional neighbour slots holding the index of the adjacent
node in that direction, or None. Splicing a node into an edge means adding a
new arena entry and rewriting the slots on either side of it, so no node ever
holds a reference to another node object.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .geometry import DIRECTIONS, FLOAT_TOLERANCE, Direction, points_equal


@dataclass
class GraphNode:
    """
    A vertex of the orthogonal visibility graph.

    Attributes:
        index: Position of this node in its graph's arena.
        x: X coordinate.
        y: Y coordinate.
        is_connector: True if the node was supplied as a link endpoint,
            rather than derived from an obstacle corner, a ray terminal or
            a segment intersection.
        horizontal_only: Never give this node a north or south neighbour.
        vertical_only: Never give this node an east or west neighbour.
        north, east, south, west: Index of the adjacent node, or None.
    """

    index: int
    x: float
    y: float
    is_connector: bool = False
    horizontal_only: bool = False
    vertical_only: bool = False
    north: Optional[int] = None
    east: Optional[int] = None
    south: Optional[int] = None
    west: Optional[int] = None

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y

    def neighbour_index(self, direction: Direction) -> Optional[int]:
        return getattr(self, direction.value)

    def set_neighbour_index(self, direction: Direction, index: Optional[int]) -> None:
        setattr(self, direction.value, index)

    def allows(self, direction: Direction) -> bool:
        """Whether the directional flags permit a neighbour in ``direction``."""
        if direction.is_vertical:
            return not self.horizontal_only
        return not self.vertical_only


@dataclass
class Segment:
    """
    An axis-aligned edge between two graph nodes.

    Segments are horizontal when ``a.y == b.y`` and vertical when
    ``a.x == b.x``. They are replaced in place by two shorter segments when
    an intersection is spliced into them.
    """

    a: GraphNode
    b: GraphNode

    @property
    def is_horizontal(self) -> bool:
        return self.a.y == self.b.y

    @property
    def length(self) -> float:
        return abs(self.b.x - self.a.x) + abs(self.b.y - self.a.y)

    def has_endpoint(self, node: GraphNode) -> bool:
        return self.a is node or self.b is node

    def __repr__(self) -> str:
        return (
            f"Segment(({self.a.x}, {self.a.y}) #{self.a.index} -> "
            f"({self.b.x}, {self.b.y}) #{self.b.index})"
        )


@dataclass
class OrthogonalGraph:
    """
    Arena of graph nodes plus the segment families they were built from.

    Attributes:
        nodes: Every node, indexed by ``GraphNode.index``.
        h: Horizontal segments.
        v: Vertical segments.
        poi: Indices of the points of interest (connectors then obstacle
            corners) that rays were cast from.
        ovg: Indices of nodes created purely by segment intersection.
        connectors: Indices of connector nodes, in the order supplied.
    """

    nodes: List[GraphNode] = field(default_factory=list)
    h: List[Segment] = field(default_factory=list)
    v: List[Segment] = field(default_factory=list)
    poi: List[int] = field(default_factory=list)
    ovg: List[int] = field(default_factory=list)
    connectors: List[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.nodes)

    def add_node(
        self,
        x: float,
        y: float,
        is_connector: bool = False,
        horizontal_only: bool = False,
        vertical_only: bool = False,
    ) -> GraphNode:
        """Append a new node to the arena and return it."""
        node = GraphNode(
            index=len(self.nodes),
            x=x,
            y=y,
            is_connector=is_connector,
            horizontal_only=horizontal_only,
            vertical_only=vertical_only,
        )
        self.nodes.append(node)
        if is_connector:
            self.connectors.append(node.index)
        return node

    def node(self, index: int) -> GraphNode:
        return self.nodes[index]

    def neighbour(self, node: GraphNode, direction: Direction) -> Optional[GraphNode]:
        index = node.neighbour_index(direction)
        return None if index is None else self.nodes[index]

    def neighbours(self, node: GraphNode) -> Iterator[Tuple[Direction, GraphNode]]:
        """Yield ``(direction, neighbour)`` pairs clockwise from north."""
        for direction in DIRECTIONS:
            index = node.neighbour_index(direction)
            if index is not None:
                yield direction, self.nodes[index]

    def link(self, a: GraphNode, b: GraphNode, direction: Direction) -> None:
        """Make ``b`` the neighbour of ``a`` in ``direction``, and vice versa."""
        a.set_neighbour_index(direction, b.index)
        b.set_neighbour_index(direction.opposite, a.index)

    def find_node(
        self, x: float, y: float, tolerance: float = FLOAT_TOLERANCE
    ) -> Optional[GraphNode]:
        """Return the first node at (x, y), or None."""
        for node in self.nodes:
            if points_equal(node, (x, y), tolerance):
                return node
        return None

    def find_connector(
        self, x: float, y: float, tolerance: float = FLOAT_TOLERANCE
    ) -> Optional[GraphNode]:
        """Return the first connector node at (x, y), or None."""
        for index in self.connectors:
            node = self.nodes[index]
            if points_equal(node, (x, y), tolerance):
                return node
        return None

    def iter_edges(self) -> Iterator[Tuple[GraphNode, GraphNode, Direction]]:
        """Yield each undirected edge once, as ``(a, b, direction a->b)``."""
        for node in self.nodes:
            for direction in (Direction.EAST, Direction.SOUTH):
                other = self.neighbour(node, direction)
                if other is not None:
                    yield node, other, direction

    def edge_count(self) -> int:
        return sum(1 for _ in self.iter_edges())
