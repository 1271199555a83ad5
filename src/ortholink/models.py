"""
Data models for table layout and connector routing.

This module contains the dataclasses shared by the router and the table
layout pipeline. They hold geometry only; the visibility graph itself lives
in :mod:`ortholink.graph`.

Classes:
    Rect: Axis-aligned rectangle, used for obstacles and the routing area.
    ConnectorPoint: An anchor from which links may start or end.
    TableNode: A single row inside a table.
    Table: A top-level diagram entity containing nodes.
    Link: A requested connection between two nodes, and its routed polyline.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle in screen coordinates (y grows downwards).

    Attributes:
        x: Left edge.
        y: Top edge.
        width: Horizontal extent.
        height: Vertical extent.
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2.0, self.y + self.height / 2.0

    @property
    def corners(self) -> List[Tuple[float, float]]:
        """Corners in obstacle order: top-left, top-right, bottom-left, bottom-right."""
        return [
            (self.x, self.y),
            (self.x2, self.y),
            (self.x, self.y2),
            (self.x2, self.y2),
        ]

    def inflate(self, margin: float) -> "Rect":
        """Return a copy grown by ``margin`` on every side."""
        return Rect(
            x=self.x - margin,
            y=self.y - margin,
            width=self.width + margin * 2,
            height=self.height + margin * 2,
        )


# The routing area is just a rectangle
Area = Rect


@dataclass(frozen=True)
class ConnectorPoint:
    """
    A point that links may start from or end at.

    Attributes:
        x: X coordinate.
        y: Y coordinate.
        horizontal_only: Only approach this point from the east or west.
        vertical_only: Only approach this point from the north or south.
    """

    x: float
    y: float
    horizontal_only: bool = False
    vertical_only: bool = False


@dataclass
class TableNode:
    """
    A node (row) inside a table.

    Attributes:
        id: Identifier taken from the input data.
        table: Identifier of the owning table.
        index: Global position of the node across all tables.
        data: The raw input mapping the node was built from.
        x: Left edge once positioned.
        y: Top edge once positioned.
        source_links: Links that leave this node.
        target_links: Links that arrive at this node.
    """

    id: Any
    table: Any
    index: int = 0
    data: Dict[str, Any] = field(default_factory=dict)
    x: float = 0.0
    y: float = 0.0
    source_links: List["Link"] = field(default_factory=list, repr=False)
    target_links: List["Link"] = field(default_factory=list, repr=False)


@dataclass
class Table:
    """
    A top-level diagram entity that contains a vertical stack of nodes.

    Attributes:
        id: Identifier taken from the input data.
        children: Nodes in display order.
        data: The raw input mapping the table was built from.
        x: Left edge of the table body once positioned.
        y: Top edge of the table body once positioned.
        width: Table body width.
        height: Table body height.
        inflated_rect: Table body grown by the layout margin; used as the
            routing obstacle.
    """

    id: Any
    children: List[TableNode] = field(default_factory=list)
    data: Dict[str, Any] = field(default_factory=dict)
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    inflated_rect: Optional[Rect] = None

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)


@dataclass
class Link:
    """
    A connection between two nodes.

    Attributes:
        source: Source node (index or id before resolution).
        target: Target node (index or id before resolution).
        index: Position of the link in the input.
        points: Routed polyline from source anchor to target anchor.
        routed: False when no orthogonal route was found and ``points`` is
            a straight fallback line.
    """

    source: Any
    target: Any
    index: int = 0
    points: List[Tuple[float, float]] = field(default_factory=list)
    routed: bool = False
