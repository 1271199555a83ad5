"""
Tests for the debug module.

These tests verify the graph inspection helpers and the networkx export.
"""

from ortholink.debug import GraphInspector, to_networkx
from ortholink.geometry import Direction
from ortholink.graph import OrthogonalGraph


class TestToNetworkx:
    """Tests for to_networkx export."""

    def test_sizes_match(self, detour_router):
        graph = detour_router.graph
        nx_graph = to_networkx(graph)
        assert nx_graph.number_of_nodes() == len(graph.nodes)
        assert nx_graph.number_of_edges() == graph.edge_count()

    def test_attributes(self, grid_graph):
        graph, nodes = grid_graph
        nx_graph = to_networkx(graph)

        start = nodes[(0, 0)].index
        assert nx_graph.nodes[start]["pos"] == (0.0, 0.0)
        assert nx_graph.nodes[start]["is_connector"] is True

        right = nodes[(1, 0)].index
        edge = nx_graph.edges[start, right]
        assert edge["direction"] == "east"
        assert edge["weight"] == 1.0


class TestGraphInspector:
    """Tests for GraphInspector."""

    def test_clean_graph(self, detour_router):
        inspector = GraphInspector(detour_router.graph)
        assert inspector.asymmetric_edges() == []
        assert inspector.misaligned_edges() == []
        assert inspector.duplicate_nodes() == []
        assert inspector.component_count() == 1

    def test_detects_asymmetric_edge(self):
        graph = OrthogonalGraph()
        a = graph.add_node(0, 0)
        b = graph.add_node(5, 0)
        a.east = b.index

        problems = GraphInspector(graph).asymmetric_edges()
        assert problems == [(a.index, Direction.EAST, b.index)]

    def test_detects_misaligned_edge(self):
        graph = OrthogonalGraph()
        a = graph.add_node(0, 0)
        b = graph.add_node(5, 0)
        graph.link(a, b, Direction.SOUTH)

        problems = GraphInspector(graph).misaligned_edges()
        assert (a.index, Direction.SOUTH, b.index) in problems
        assert (b.index, Direction.NORTH, a.index) in problems

    def test_detects_duplicate_nodes(self):
        graph = OrthogonalGraph()
        graph.add_node(1, 1)
        graph.add_node(1, 1)
        graph.add_node(1, 1, is_connector=True)
        assert GraphInspector(graph).duplicate_nodes() == [(0, 1)]

    def test_are_connected(self, detour_router):
        inspector = GraphInspector(detour_router.graph)
        assert inspector.are_connected((5, 15), (35, 15))
        assert not inspector.are_connected((5, 15), (99, 99))

    def test_node_at_prefers_connectors(self):
        graph = OrthogonalGraph()
        graph.add_node(1, 1)
        connector = graph.add_node(1, 1, is_connector=True)
        assert GraphInspector(graph).node_at((1, 1)) is connector

    def test_summary(self, detour_router):
        summary = GraphInspector(detour_router.graph).summary()
        assert "Nodes:" in summary
        assert "2 connectors" in summary
        assert "Asymmetric edges: 0" in summary
