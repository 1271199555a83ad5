"""
Tests for orthogonal visibility graph construction.

These cover the two construction passes (ray casting and segment
intersection) and the structural properties every generated graph must
have: symmetric adjacency, no edge through an obstacle and stable output.
"""

from ortholink import GraphInspector, OrthogonalRouter, Rect, Segment
from ortholink.geometry import Direction, direction_between, points_equal
from ortholink.models import ConnectorPoint
from ortholink.visibility import (
    build_orthogonal_graph,
    find_interesting_segments,
    intersect_interesting_segments,
)

DETOUR_CORNERS = [[(10, 10), (30, 10), (10, 20), (30, 20)]]
DETOUR_CONNECTORS = [ConnectorPoint(5, 15), ConnectorPoint(35, 15)]
DETOUR_AREA = Rect(0, 0, 50, 30)


def _adjacency(graph):
    return [
        (n.x, n.y, n.is_connector, n.north, n.east, n.south, n.west)
        for n in graph.nodes
    ]


class TestFindInterestingSegments:
    """Tests for the ray casting pass."""

    def test_points_of_interest_are_connectors_then_corners(self):
        graph = find_interesting_segments(DETOUR_CONNECTORS, DETOUR_CORNERS, DETOUR_AREA)

        positions = [graph.nodes[i].position for i in graph.poi]
        assert positions == [
            (5, 15),
            (35, 15),
            (10, 10),
            (30, 10),
            (10, 20),
            (30, 20),
        ]
        assert graph.connectors == [0, 1]

    def test_obstacle_boundary_is_wired(self):
        graph = find_interesting_segments(DETOUR_CONNECTORS, DETOUR_CORNERS, DETOUR_AREA)
        tl = graph.find_node(10, 10)
        tr = graph.find_node(30, 10)
        bl = graph.find_node(10, 20)
        assert tl.east == tr.index
        assert tl.south == bl.index

    def test_ray_stops_at_obstacle(self):
        graph = find_interesting_segments(DETOUR_CONNECTORS, DETOUR_CORNERS, DETOUR_AREA)
        left = graph.find_connector(5, 15)
        terminal = graph.neighbour(left, Direction.EAST)
        assert terminal.position == (10, 15)

    def test_ray_stops_at_area_edge(self):
        graph = find_interesting_segments(DETOUR_CONNECTORS, DETOUR_CORNERS, DETOUR_AREA)
        left = graph.find_connector(5, 15)
        assert graph.neighbour(left, Direction.NORTH).position == (5, 0)
        assert graph.neighbour(left, Direction.SOUTH).position == (5, 30)
        assert graph.neighbour(left, Direction.WEST).position == (0, 15)

    def test_ray_stops_at_nearest_of_several_obstacles(self):
        corners = [
            Rect(40, 10, 5, 10).corners,
            Rect(20, 10, 5, 10).corners,
        ]
        graph = find_interesting_segments([ConnectorPoint(5, 15)], corners, Rect(0, 0, 60, 30))
        connector = graph.find_connector(5, 15)
        assert graph.neighbour(connector, Direction.EAST).position == (20, 15)

    def test_equidistant_edges_stop_at_same_place(self):
        """Two obstacles sharing the blocking edge line stop the ray at that line."""
        corners = [
            Rect(20, 0, 5, 16).corners,
            Rect(20, 14, 5, 16).corners,
        ]
        graph = find_interesting_segments([ConnectorPoint(5, 15)], corners, Rect(0, 0, 60, 30))
        connector = graph.find_connector(5, 15)
        assert graph.neighbour(connector, Direction.EAST).position == (20, 15)

    def test_ray_links_to_point_of_interest_in_its_path(self):
        graph = find_interesting_segments(
            [ConnectorPoint(0, 0), ConnectorPoint(10, 0)], [], Rect(0, 0, 20, 10)
        )
        first = graph.find_connector(0, 0)
        second = graph.find_connector(10, 0)
        assert first.east == second.index
        assert second.west == first.index

    def test_point_on_area_edge_casts_no_outward_ray(self):
        graph = find_interesting_segments([ConnectorPoint(0, 0)], [], Rect(0, 0, 20, 10))
        node = graph.find_connector(0, 0)
        assert node.north is None
        assert node.west is None
        assert node.east is not None
        assert node.south is not None


class TestIntersectInterestingSegments:
    """Tests for the intersection pass."""

    def test_crossings_become_nodes(self):
        graph = find_interesting_segments(DETOUR_CONNECTORS, DETOUR_CORNERS, DETOUR_AREA)
        created = intersect_interesting_segments(graph)

        positions = {graph.nodes[i].position for i in created}
        # Connector rays cross the rays cast sideways from the corners
        assert (5, 10) in positions
        assert (5, 20) in positions
        assert (35, 10) in positions
        assert (35, 20) in positions

    def test_t_junction_splits_boundary(self):
        """A ray ending on an obstacle edge is spliced into that edge."""
        graph = build_orthogonal_graph(DETOUR_CONNECTORS, DETOUR_CORNERS, DETOUR_AREA)
        junction = graph.find_node(10, 15)
        assert graph.neighbour(junction, Direction.NORTH).position == (10, 10)
        assert graph.neighbour(junction, Direction.SOUTH).position == (10, 20)
        assert graph.neighbour(junction, Direction.WEST).position == (5, 15)

    def test_segments_stay_linked_end_to_end(self):
        graph = build_orthogonal_graph(DETOUR_CONNECTORS, DETOUR_CORNERS, DETOUR_AREA)
        for segment in graph.h + graph.v:
            direction = direction_between(segment.a, segment.b)
            assert direction is not None
            assert segment.a.neighbour_index(direction) == segment.b.index

    def test_segment_families_keep_their_axis(self):
        graph = build_orthogonal_graph(DETOUR_CONNECTORS, DETOUR_CORNERS, DETOUR_AREA)
        assert all(s.a.y == s.b.y for s in graph.h)
        assert all(s.a.x == s.b.x for s in graph.v)


class TestGraphProperties:
    """Structural checks on generated graphs."""

    def test_adjacency_is_symmetric(self, detour_router):
        inspector = GraphInspector(detour_router.graph)
        assert inspector.asymmetric_edges() == []
        assert inspector.misaligned_edges() == []

    def test_no_segment_crosses_an_obstacle(self, detour_router, obstacle):
        inspector = GraphInspector(detour_router.graph)
        assert inspector.segments_crossing([obstacle]) == []

    def test_no_segment_crosses_any_of_several_obstacles(self):
        obstacles = [Rect(10, 10, 10, 10), Rect(30, 5, 10, 30), Rect(50, 20, 10, 5)]
        router = OrthogonalRouter()
        router.set_obstacles(obstacles)
        router.set_connector_points([(5, 15), (25, 40), (65, 22)])
        graph = router.generate_orthogonal_graph((0, 0, 70, 50))

        inspector = GraphInspector(graph)
        assert inspector.segments_crossing(obstacles) == []
        assert inspector.asymmetric_edges() == []

    def test_generation_is_deterministic(self):
        first = build_orthogonal_graph(DETOUR_CONNECTORS, DETOUR_CORNERS, DETOUR_AREA)
        second = build_orthogonal_graph(DETOUR_CONNECTORS, DETOUR_CORNERS, DETOUR_AREA)
        assert _adjacency(first) == _adjacency(second)

    def test_regenerating_gives_identical_graph(self, detour_router):
        before = _adjacency(detour_router.graph)
        detour_router.generate_orthogonal_graph((0, 0, 50, 30))
        assert _adjacency(detour_router.graph) == before


class TestDirectionalConnectors:
    """Connectors restricted to horizontal or vertical approach."""

    def test_horizontal_only_never_gets_vertical_neighbours(self):
        router = OrthogonalRouter()
        router.set_obstacles([])
        router.set_connector_points(
            [{"x": 25, "y": 25, "horizontal_only": True}, (25, 5)]
        )
        graph = router.generate_orthogonal_graph((0, 0, 50, 50))

        node = graph.find_connector(25, 25)
        assert node.north is None
        assert node.south is None
        assert node.east is not None
        assert node.west is not None

    def test_vertical_only_never_gets_horizontal_neighbours(self):
        router = OrthogonalRouter()
        router.set_obstacles([])
        router.set_connector_points(
            [ConnectorPoint(25, 25, vertical_only=True), (5, 25)]
        )
        graph = router.generate_orthogonal_graph((0, 0, 50, 50))

        node = graph.find_connector(25, 25)
        assert node.east is None
        assert node.west is None
        assert node.north is not None


class TestTouchingObstacles:
    """Obstacles that share or overlap edges."""

    def test_shared_edge_has_no_duplicate_corners(self):
        corners = [Rect(10, 10, 20, 10).corners, Rect(30, 10, 20, 10).corners]
        graph = build_orthogonal_graph(
            [ConnectorPoint(5, 15), ConnectorPoint(55, 15)], corners, Rect(0, 0, 60, 30)
        )

        inspector = GraphInspector(graph)
        assert inspector.duplicate_nodes() == []
        assert len(graph.poi) == 2 + 6
        shared = [n for n in graph.nodes if points_equal(n, (30, 10))]
        assert len(shared) == 1

    def test_shared_edge_is_one_chain(self):
        corners = [Rect(10, 10, 20, 10).corners, Rect(30, 10, 20, 10).corners]
        graph = build_orthogonal_graph([], corners, Rect(0, 0, 60, 30))

        left = graph.find_node(10, 10)
        middle = graph.find_node(30, 10)
        right = graph.find_node(50, 10)
        assert left.east == middle.index
        assert middle.east == right.index

    def test_overlapping_obstacles_build_a_consistent_graph(self):
        corners = [Rect(10, 10, 20, 10).corners, Rect(20, 15, 20, 10).corners]
        graph = build_orthogonal_graph(
            [ConnectorPoint(5, 5), ConnectorPoint(45, 28)], corners, Rect(0, 0, 50, 30)
        )

        inspector = GraphInspector(graph)
        assert inspector.asymmetric_edges() == []
        assert inspector.misaligned_edges() == []
        assert inspector.are_connected((5, 5), (45, 28))


class TestNearlyCollinearEdges:
    """Obstacle edges that share a line only to within tolerance."""

    OBSTACLES = [
        Rect(90 + 1e-9, 0, 20, 20),
        Rect(90 - 1e-9, 40, 20, 20),
        Rect(80, 25, 20, 10),
    ]

    def _graph(self):
        router = OrthogonalRouter()
        router.set_obstacles(self.OBSTACLES)
        router.set_connector_points(
            [
                {"x": 95, "y": 22, "horizontal_only": True},
                {"x": 95, "y": 38, "horizontal_only": True},
            ]
        )
        return router.generate_orthogonal_graph((0, 0, 150, 70))

    def test_edges_with_a_gap_are_not_chained(self):
        graph = self._graph()
        upper = graph.find_node(90, 20)
        lower = graph.find_node(90, 40)

        # Walk down from the upper obstacle; the chain ends on the middle one
        node = upper
        while graph.neighbour(node, Direction.SOUTH) is not None:
            node = graph.neighbour(node, Direction.SOUTH)
            assert node is not lower
        assert points_equal(node, (90, 25))

    def test_no_segment_crosses_the_obstacle_in_the_gap(self):
        inspector = GraphInspector(self._graph())
        assert inspector.segments_crossing(self.OBSTACLES) == []
        assert inspector.asymmetric_edges() == []


class TestFacingConnectors:
    """Connectors in side by side obstacles whose rays overlap."""

    def test_opposite_rays_form_one_chain(self):
        graph = build_orthogonal_graph(
            [
                ConnectorPoint(10, 10, horizontal_only=True),
                ConnectorPoint(50, 10, horizontal_only=True),
            ],
            [Rect(0, 0, 20, 20).corners, Rect(40, 0, 20, 20).corners],
            Rect(0, 0, 70, 30),
        )

        left = graph.find_connector(10, 10)
        right = graph.find_connector(50, 10)
        edge = graph.neighbour(right, Direction.WEST)
        assert edge.position == (40, 10)
        assert graph.neighbour(edge, Direction.WEST).position == (20, 10)
        assert graph.neighbour(graph.find_node(20, 10), Direction.WEST) is left
        assert GraphInspector(graph).duplicate_nodes() == []

    def test_crossing_reuses_a_free_node(self):
        graph = find_interesting_segments([], [], Rect(0, 0, 10, 10))
        west = graph.add_node(0, 5)
        east = graph.add_node(10, 5)
        north = graph.add_node(5, 0)
        south = graph.add_node(5, 10)
        lonely = graph.add_node(5, 5)
        graph.link(west, east, Direction.EAST)
        graph.link(north, south, Direction.SOUTH)
        graph.h.append(Segment(west, east))
        graph.v.append(Segment(north, south))

        created = intersect_interesting_segments(graph)

        assert created == []
        assert graph.neighbour(west, Direction.EAST) is lonely
        assert graph.neighbour(north, Direction.SOUTH) is lonely
        assert len(graph.nodes) == 5
