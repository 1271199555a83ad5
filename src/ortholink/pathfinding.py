"""
A* path finding over the orthogonal visibility graph.

Inspiration taken from
https://briangrinstead.com/blog/astar-search-algorithm-in-javascript-updated/
and https://en.wikipedia.org/wiki/A*_search_algorithm#Pseudocode

Search state (``g``, ``h``, ``f``, parent, visited and closed flags) is kept
in a scratch table owned by a single call, indexed by node index. The graph
itself is only read, so it can be searched any number of times, and two
searches over the same graph never see each other's state.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .geometry import (
    FLOAT_TOLERANCE,
    Direction,
    direction_between,
    distance_squared,
    manhattan_distance,
)
from .graph import GraphNode, OrthogonalGraph
from .heap import BinaryHeap

# Extra cost added when a path changes direction
TURN_PENALTY = 0.1


class _SearchTable:
    """Per-search scratch values, one slot per graph node."""

    __slots__ = ("g", "h", "f", "parent", "visited", "closed")

    def __init__(self, size: int):
        self.g = [0.0] * size
        self.h = [0.0] * size
        self.f = [0.0] * size
        self.parent: List[Optional[int]] = [None] * size
        self.visited = [False] * size
        self.closed = [False] * size


@dataclass
class SearchOutcome:
    """
    Result of a single A* search.

    Attributes:
        path: Nodes from start to end inclusive, or None if the end could
            not be reached.
        cost: Total path cost (``g`` of the end node), 0 if not found.
        expanded: Number of nodes popped and closed.
        touched: Number of distinct nodes given a score.
        closed_improvements: Times a closed node was reached more cheaply
            than when it was closed. Stays 0 while the heuristic is
            consistent for the graph's edge weights.
    """

    path: Optional[List[GraphNode]] = None
    cost: float = 0.0
    expanded: int = 0
    touched: int = 0
    closed_improvements: int = 0
    touched_nodes: List[int] = field(default_factory=list, repr=False)

    @property
    def found(self) -> bool:
        return self.path is not None


def edge_weight(
    previous: Optional[GraphNode],
    current: GraphNode,
    neighbour: GraphNode,
    turn_penalty: float = TURN_PENALTY,
    tolerance: float = FLOAT_TOLERANCE,
) -> float:
    """
    Cost of travelling from ``current`` to ``neighbour``.

    Squared Euclidean distance, plus ``turn_penalty`` when the move does not
    continue in the direction ``current`` was entered from ``previous``.
    """
    weight = distance_squared(current, neighbour)
    if previous is not None:
        incoming: Optional[Direction] = direction_between(previous, current, tolerance)
        outgoing = direction_between(current, neighbour, tolerance)
        if incoming is not outgoing:
            weight += turn_penalty
    return weight


def _reconstruct_path(
    graph: OrthogonalGraph, table: _SearchTable, end: int
) -> List[GraphNode]:
    path = [graph.nodes[end]]
    parent = table.parent[end]
    while parent is not None:
        path.append(graph.nodes[parent])
        parent = table.parent[parent]
    path.reverse()
    return path


def find_path(
    graph: OrthogonalGraph,
    start: GraphNode,
    end: GraphNode,
    turn_penalty: float = TURN_PENALTY,
    tolerance: float = FLOAT_TOLERANCE,
) -> SearchOutcome:
    """
    Find the cheapest orthogonal path from ``start`` to ``end``.

    Connector nodes other than ``end`` are never entered, so a route cannot
    pass through another link's anchor. Exhausting the open set without
    reaching ``end`` is reported through ``SearchOutcome.found``.

    Args:
        graph: A fully built visibility graph
        start: Node to start from
        end: Node to reach
        turn_penalty: Cost added per change of direction
        tolerance: Coordinate equality tolerance for direction tests

    Returns:
        SearchOutcome with the node path and search statistics
    """
    table = _SearchTable(len(graph.nodes))
    outcome = SearchOutcome()

    # Open set is a binary heap sorted by (minimum) f value
    open_nodes: BinaryHeap[int] = BinaryHeap(lambda i: table.f[i])

    table.g[start.index] = 0.0
    table.h[start.index] = manhattan_distance(start, end)
    table.f[start.index] = table.h[start.index]
    table.visited[start.index] = True
    open_nodes.push(start.index)
    outcome.touched_nodes.append(start.index)

    while len(open_nodes) > 0:
        current_index = open_nodes.pop()
        current = graph.nodes[current_index]

        if current_index == end.index:
            outcome.path = _reconstruct_path(graph, table, current_index)
            outcome.cost = table.g[current_index]
            break

        table.closed[current_index] = True
        outcome.expanded += 1

        parent_index = table.parent[current_index]
        previous = graph.nodes[parent_index] if parent_index is not None else None

        for _, neighbour in graph.neighbours(current):
            j = neighbour.index
            if neighbour.is_connector and neighbour is not end:
                continue

            tentative_g = table.g[current_index] + edge_weight(
                previous, current, neighbour, turn_penalty, tolerance
            )

            if table.closed[j]:
                if tentative_g < table.g[j] - tolerance:
                    outcome.closed_improvements += 1
                continue

            previously_visited = table.visited[j]
            if previously_visited and tentative_g >= table.g[j]:
                continue

            table.g[j] = tentative_g
            table.h[j] = manhattan_distance(neighbour, end)
            table.f[j] = tentative_g + table.h[j]
            table.parent[j] = current_index
            table.visited[j] = True

            if previously_visited:
                # f dropped, move it towards the top of the heap
                open_nodes.bubble_up_element(j)
            else:
                open_nodes.push(j)
                outcome.touched_nodes.append(j)

    outcome.touched = len(outcome.touched_nodes)
    return outcome
