"""
Debug utilities for ortholink.

This module provides tools for checking and exploring a visibility graph
when a route looks wrong or cannot be found.

Key Components:
- GraphInspector: invariant checks and lookups over an OrthogonalGraph
- to_networkx: export the graph to networkx for analysis or drawing

Usage:
    >>> router.generate_orthogonal_graph(area)
    >>> inspector = GraphInspector(router.graph)
    >>> inspector.asymmetric_edges()
    []
    >>> inspector.are_connected((5, 15), (35, 15))
    True
"""

from typing import List, Optional, Sequence, Tuple

import networkx as nx

from .geometry import FLOAT_TOLERANCE, Coordinate, Direction, distance_squared
from .graph import GraphNode, OrthogonalGraph, Segment
from .models import Rect


def to_networkx(graph: OrthogonalGraph) -> nx.Graph:
    """
    Export a visibility graph as an undirected networkx graph.

    Nodes are keyed by arena index and carry ``x``, ``y``, ``pos`` and
    ``is_connector`` attributes. Edges carry ``direction`` (from the lower
    index end, east or south) and ``weight`` (squared length, the search
    edge weight without turn penalties).
    """
    nx_graph = nx.Graph()
    for node in graph.nodes:
        nx_graph.add_node(
            node.index,
            x=node.x,
            y=node.y,
            pos=(node.x, node.y),
            is_connector=node.is_connector,
        )
    for a, b, direction in graph.iter_edges():
        nx_graph.add_edge(
            a.index,
            b.index,
            direction=direction.value,
            weight=distance_squared(a, b),
        )
    return nx_graph


def _segment_crosses_rect(segment: Segment, rect: Rect, tolerance: float) -> bool:
    """True if the segment passes through the open interior of ``rect``."""
    x1, y1 = segment.a.x, segment.a.y
    x2, y2 = segment.b.x, segment.b.y
    if abs(y1 - y2) < tolerance:
        if rect.y + tolerance < y1 < rect.y2 - tolerance:
            low, high = min(x1, x2), max(x1, x2)
            return low < rect.x2 - tolerance and high > rect.x + tolerance
        return False
    if rect.x + tolerance < x1 < rect.x2 - tolerance:
        low, high = min(y1, y2), max(y1, y2)
        return low < rect.y2 - tolerance and high > rect.y + tolerance
    return False


class GraphInspector:
    """
    Utilities for checking a visibility graph.

    Provides invariant checks (symmetric adjacency, no segment through an
    obstacle) and connectivity queries that explain failed routes.
    """

    def __init__(self, graph: OrthogonalGraph, tolerance: float = FLOAT_TOLERANCE):
        """
        Initialize the inspector.

        Args:
            graph: The graph to inspect
            tolerance: Coordinate equality tolerance
        """
        self._graph = graph
        self._tolerance = tolerance
        self._nx_graph: Optional[nx.Graph] = None

    @property
    def nx_graph(self) -> nx.Graph:
        if self._nx_graph is None:
            self._nx_graph = to_networkx(self._graph)
        return self._nx_graph

    def asymmetric_edges(self) -> List[Tuple[int, Direction, int]]:
        """
        Find adjacency slots without a matching slot on the other end.

        Returns:
            ``(node, direction, neighbour)`` triples where the neighbour does
            not point back at the node in the opposite direction
        """
        problems = []
        for node in self._graph.nodes:
            for direction, other in self._graph.neighbours(node):
                if other.neighbour_index(direction.opposite) != node.index:
                    problems.append((node.index, direction, other.index))
        return problems

    def misaligned_edges(self) -> List[Tuple[int, Direction, int]]:
        """Find neighbours that do not actually lie in their slot's direction."""
        problems = []
        tol = self._tolerance
        for node in self._graph.nodes:
            for direction, other in self._graph.neighbours(node):
                dx, dy = other.x - node.x, other.y - node.y
                ok = {
                    Direction.NORTH: abs(dx) < tol and dy < -tol,
                    Direction.SOUTH: abs(dx) < tol and dy > tol,
                    Direction.EAST: abs(dy) < tol and dx > tol,
                    Direction.WEST: abs(dy) < tol and dx < -tol,
                }[direction]
                if not ok:
                    problems.append((node.index, direction, other.index))
        return problems

    def segments_crossing(self, obstacles: Sequence[Rect]) -> List[Segment]:
        """Find segments in ``h`` or ``v`` that pass through an obstacle interior."""
        crossing = []
        for segment in list(self._graph.h) + list(self._graph.v):
            for rect in obstacles:
                if _segment_crosses_rect(segment, rect, self._tolerance):
                    crossing.append(segment)
                    break
        return crossing

    def duplicate_nodes(self) -> List[Tuple[int, int]]:
        """Pairs of non-connector nodes that share a position."""
        seen: List[GraphNode] = []
        duplicates = []
        for node in self._graph.nodes:
            if node.is_connector:
                continue
            for other in seen:
                if (
                    abs(other.x - node.x) < self._tolerance
                    and abs(other.y - node.y) < self._tolerance
                ):
                    duplicates.append((other.index, node.index))
                    break
            seen.append(node)
        return duplicates

    def node_at(self, point: Coordinate) -> Optional[GraphNode]:
        """First node at ``point``, preferring connectors."""
        x, y = point
        node = self._graph.find_connector(x, y, self._tolerance)
        return node or self._graph.find_node(x, y, self._tolerance)

    def are_connected(self, a: Coordinate, b: Coordinate) -> bool:
        """Whether any path of graph edges joins the nodes at ``a`` and ``b``."""
        node_a, node_b = self.node_at(a), self.node_at(b)
        if node_a is None or node_b is None:
            return False
        return nx.has_path(self.nx_graph, node_a.index, node_b.index)

    def component_count(self) -> int:
        """Number of connected components in the graph."""
        return nx.number_connected_components(self.nx_graph)

    def summary(self) -> str:
        """Short multi-line report of graph size and invariant checks."""
        graph = self._graph
        lines = [
            f"Nodes: {len(graph.nodes)} "
            f"({len(graph.connectors)} connectors, {len(graph.ovg)} intersections)",
            f"Edges: {graph.edge_count()}",
            f"Segments: {len(graph.h)} horizontal, {len(graph.v)} vertical",
            f"Components: {self.component_count()}",
            f"Asymmetric edges: {len(self.asymmetric_edges())}",
            f"Misaligned edges: {len(self.misaligned_edges())}",
            f"Duplicate nodes: {len(self.duplicate_nodes())}",
        ]
        return "\n".join(lines)
