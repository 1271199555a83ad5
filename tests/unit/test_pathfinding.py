"""Tests for A* search over the visibility graph."""

import pytest

from ortholink.geometry import Direction, direction_between
from ortholink.graph import OrthogonalGraph
from ortholink.pathfinding import TURN_PENALTY, edge_weight, find_path


def _bends(path):
    directions = [direction_between(a, b) for a, b in zip(path, path[1:])]
    return sum(1 for d1, d2 in zip(directions, directions[1:]) if d1 is not d2)


class TestEdgeWeight:
    """Tests for the edge cost function."""

    def test_first_hop_has_no_turn_penalty(self):
        graph = OrthogonalGraph()
        a = graph.add_node(0, 0)
        b = graph.add_node(3, 0)
        assert edge_weight(None, a, b) == 9

    def test_straight_continuation(self):
        graph = OrthogonalGraph()
        a, b, c = graph.add_node(0, 0), graph.add_node(3, 0), graph.add_node(5, 0)
        assert edge_weight(a, b, c) == 4

    def test_turn_adds_penalty(self):
        graph = OrthogonalGraph()
        a, b, c = graph.add_node(0, 0), graph.add_node(3, 0), graph.add_node(3, 2)
        assert edge_weight(a, b, c) == pytest.approx(4 + TURN_PENALTY)
        assert edge_weight(a, b, c, turn_penalty=2.0) == pytest.approx(6.0)


class TestFindPath:
    """Tests for find_path."""

    def test_prefers_fewest_turns(self, grid_graph):
        """Every monotone path costs 4; the turn penalty picks a single bend."""
        graph, nodes = grid_graph
        outcome = find_path(graph, nodes[(0, 0)], nodes[(2, 2)])

        assert outcome.found
        assert outcome.path[0] is nodes[(0, 0)]
        assert outcome.path[-1] is nodes[(2, 2)]
        assert len(outcome.path) == 5
        assert _bends(outcome.path) == 1
        assert outcome.cost == pytest.approx(4 + TURN_PENALTY)

    def test_straight_route_beats_equal_cost_detour(self):
        """Both routes weigh 4 before penalties; the detour turns twice."""
        graph = OrthogonalGraph()
        start = graph.add_node(0, 0, is_connector=True)
        end = graph.add_node(2, 0, is_connector=True)
        graph.link(start, end, Direction.EAST)

        corners = [graph.add_node(x, 1) for x in (0, 1, 2)]
        graph.link(start, corners[0], Direction.SOUTH)
        graph.link(corners[0], corners[1], Direction.EAST)
        graph.link(corners[1], corners[2], Direction.EAST)
        graph.link(corners[2], end, Direction.NORTH)

        outcome = find_path(graph, start, end)
        assert outcome.path == [start, end]
        assert outcome.cost == 4

    def test_start_equals_end(self, grid_graph):
        graph, nodes = grid_graph
        outcome = find_path(graph, nodes[(0, 0)], nodes[(0, 0)])
        assert outcome.path == [nodes[(0, 0)]]
        assert outcome.cost == 0

    def test_does_not_pass_through_other_connectors(self):
        graph = OrthogonalGraph()
        start = graph.add_node(0, 0, is_connector=True)
        blocker = graph.add_node(5, 0, is_connector=True)
        end = graph.add_node(10, 0, is_connector=True)
        graph.link(start, blocker, Direction.EAST)
        graph.link(blocker, end, Direction.EAST)

        down = graph.add_node(0, 5)
        across = graph.add_node(5, 5)
        up = graph.add_node(10, 5)
        graph.link(start, down, Direction.SOUTH)
        graph.link(down, across, Direction.EAST)
        graph.link(across, up, Direction.EAST)
        graph.link(up, end, Direction.NORTH)

        outcome = find_path(graph, start, end)
        assert outcome.found
        assert blocker not in outcome.path
        assert [n.position for n in outcome.path] == [
            (0, 0),
            (0, 5),
            (5, 5),
            (10, 5),
            (10, 0),
        ]

    def test_no_route(self):
        graph = OrthogonalGraph()
        start = graph.add_node(0, 0, is_connector=True)
        end = graph.add_node(10, 0, is_connector=True)
        other = graph.add_node(0, 5)
        graph.link(start, other, Direction.SOUTH)

        outcome = find_path(graph, start, end)
        assert not outcome.found
        assert outcome.path is None
        assert outcome.cost == 0
        assert outcome.expanded == 2

    def test_search_does_not_modify_graph(self, detour_router):
        graph = detour_router.graph
        before = [(n.north, n.east, n.south, n.west) for n in graph.nodes]

        first = find_path(graph, graph.nodes[0], graph.nodes[1])
        second = find_path(graph, graph.nodes[0], graph.nodes[1])

        after = [(n.north, n.east, n.south, n.west) for n in graph.nodes]
        assert before == after
        assert [n.index for n in first.path] == [n.index for n in second.path]
        assert first.cost == second.cost

    def test_closed_nodes_never_improve_with_long_edges(self, detour_router):
        """With every edge at least one unit long the heuristic is consistent."""
        graph = detour_router.graph
        outcome = find_path(graph, graph.nodes[0], graph.nodes[1])
        assert outcome.found
        assert outcome.closed_improvements == 0

    def test_statistics(self, detour_router):
        graph = detour_router.graph
        outcome = find_path(graph, graph.nodes[0], graph.nodes[1])
        assert outcome.expanded > 0
        assert outcome.touched == len(outcome.touched_nodes)
        assert outcome.touched >= outcome.expanded
