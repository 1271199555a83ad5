"""
Table/node hierarchy flattening.

Input nodes arrive as a nested structure: every top-level entry is a table
and its ``children`` are the nodes shown inside it. This module turns that
structure into ``Table`` and ``TableNode`` objects, and numbers the nodes in
table order so links can refer to them by index.
"""

from typing import Any, List, Mapping, Sequence, Tuple

from .models import Table, TableNode


class HierarchyError(ValueError):
    """Raised when the input nodes cannot be arranged into tables."""

    pass


def build_tables(
    raw_tables: Sequence[Mapping[str, Any]],
) -> Tuple[List[Table], List[TableNode]]:
    """
    Build tables and their nodes from nested input.

    Args:
        raw_tables: Mappings with an ``id`` and an optional list of
            ``children`` mappings, each with its own ``id``

    Returns:
        (tables, nodes) where nodes are listed table by table, and each
        node's ``index`` is its position in that list

    Raises:
        HierarchyError: If an entry is not a mapping, a node has children of
            its own, or two tables share an id
    """
    tables: List[Table] = []
    nodes: List[TableNode] = []
    seen_ids = set()

    for table_pos, raw_table in enumerate(raw_tables):
        if not isinstance(raw_table, Mapping):
            raise HierarchyError(
                f"Table entry {table_pos} must be a mapping, got {type(raw_table).__name__}"
            )
        table_id = raw_table.get("id", table_pos)
        if table_id in seen_ids:
            raise HierarchyError(f"Duplicate table id: {table_id!r}")
        seen_ids.add(table_id)

        table = Table(id=table_id, data=dict(raw_table))
        for child_pos, raw_child in enumerate(raw_table.get("children") or []):
            if not isinstance(raw_child, Mapping):
                raise HierarchyError(
                    f"Node {child_pos} of table {table_id!r} must be a mapping"
                )
            if raw_child.get("children"):
                # Only one level of nesting is supported
                raise HierarchyError(
                    f"Node {raw_child.get('id', child_pos)!r} of table "
                    f"{table_id!r} has children; nodes cannot be nested"
                )
            node = TableNode(
                id=raw_child.get("id", f"{table_id}.{child_pos}"),
                table=table_id,
                index=len(nodes),
                data=dict(raw_child),
            )
            table.children.append(node)
            nodes.append(node)
        tables.append(table)

    return tables, nodes
