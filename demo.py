#!/usr/bin/env python3
"""
Demo script for ortholink.

Routes a link around a single obstacle, then lays out a small schema of
tables, prints every routed link and saves the layout as a PNG.
"""

import logging

from ortholink import (
    GraphInspector,
    LayoutConfig,
    LayoutPNGRenderer,
    OrthogonalRouter,
    Rect,
    RouteTrace,
    TableLayout,
)


def print_header(title):
    """Print a formatted header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70 + "\n")


def demo_router():
    """Demo 1: One obstacle, two connectors"""
    print_header("Demo 1: Routing Around an Obstacle")

    trace = RouteTrace()
    router = OrthogonalRouter(trace=trace)
    router.set_obstacles([[(10, 10), (30, 10), (10, 20), (30, 20)]])
    router.set_connector_points([(5, 15), (35, 15)])
    graph = router.generate_orthogonal_graph((0, 0, 50, 30))

    result = router.find_route((5, 15), (35, 15))
    print(f"Status: {result.status.value}")
    print(f"Route:  {result.points}")
    print()
    print(GraphInspector(graph).summary())
    print()
    print(trace.summary())


def demo_tables(output_path="schema.png"):
    """Demo 2: A small database schema"""
    print_header("Demo 2: Table Layout")

    tables = [
        {"id": "users", "children": [{"id": "users.id"}, {"id": "users.email"}]},
        {
            "id": "orders",
            "children": [
                {"id": "orders.id"},
                {"id": "orders.user_id"},
                {"id": "orders.product_id"},
            ],
        },
        {"id": "products", "children": [{"id": "products.id"}, {"id": "products.name"}]},
        {"id": "reviews", "children": [{"id": "reviews.user_id"}, {"id": "reviews.product_id"}]},
    ]
    links = [
        ("users.id", "orders.user_id"),
        ("products.id", "orders.product_id"),
        ("users.id", "reviews.user_id"),
        ("products.id", "reviews.product_id"),
    ]

    layout = TableLayout(LayoutConfig(width=160, height=120, link_strength=0.2))
    result = layout.layout(tables, links)

    for table in result.tables:
        print(f"{table.id:10} at ({table.x:6.1f}, {table.y:6.1f})")
    print()
    for link in result.links:
        state = "routed" if link.routed else "straight"
        print(f"{link.source.id} -> {link.target.id} [{state}]")
        print(f"    {[(round(x, 1), round(y, 1)) for x, y in link.points]}")

    path = LayoutPNGRenderer(scale=5, show_graph=True).render(result, output_path)
    print(f"\nSaved {path}")


def main():
    logging.basicConfig(level=logging.INFO)
    demo_router()
    demo_tables()


if __name__ == "__main__":
    main()
