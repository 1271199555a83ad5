"""Pytest configuration and shared fixtures for ortholink tests."""

import pytest

from ortholink import OrthogonalGraph, OrthogonalRouter, Rect
from ortholink.geometry import Direction


@pytest.fixture
def obstacle():
    """Single obstacle between the two connectors of the detour scene."""
    return Rect(10, 10, 20, 10)


@pytest.fixture
def detour_router(obstacle):
    """Router with one obstacle between two connectors, graph generated."""
    router = OrthogonalRouter()
    router.set_obstacles([[(10, 10), (30, 10), (10, 20), (30, 20)]])
    router.set_connector_points([(5, 15), (35, 15)])
    router.generate_orthogonal_graph((0, 0, 50, 30))
    return router


@pytest.fixture
def open_router():
    """Router with no obstacles and two connectors on the same row."""
    router = OrthogonalRouter()
    router.set_obstacles([])
    router.set_connector_points([(0, 0), (10, 0)])
    router.generate_orthogonal_graph((0, 0, 20, 10))
    return router


@pytest.fixture
def grid_graph():
    """3x3 grid with unit spacing; (0, 0) and (2, 2) are connectors."""
    graph = OrthogonalGraph()
    nodes = {}
    for y in range(3):
        for x in range(3):
            is_connector = (x, y) in ((0, 0), (2, 2))
            nodes[(x, y)] = graph.add_node(float(x), float(y), is_connector=is_connector)
    for y in range(3):
        for x in range(3):
            if x < 2:
                graph.link(nodes[(x, y)], nodes[(x + 1, y)], Direction.EAST)
            if y < 2:
                graph.link(nodes[(x, y)], nodes[(x, y + 1)], Direction.SOUTH)
    return graph, nodes


@pytest.fixture
def two_tables():
    """Two small tables with one link between them."""
    tables = [
        {"id": "users", "children": [{"id": "users.id"}, {"id": "users.name"}]},
        {"id": "orders", "children": [{"id": "orders.id"}, {"id": "orders.user_id"}]},
    ]
    links = [{"source": "users.id", "target": "orders.user_id"}]
    return tables, links
