"""
Force-directed table placement.

Spreads tables over the layout area with a small physics simulation modelled
on d3-force:

- Many-body charge between every pair of tables
- Centering, which keeps the mean table position at the area centre
- Bounding-box collision, which pushes overlapping tables apart along the
  axis of least overlap, using the inflated table size padded on every side
- Optional link attraction between tables whose nodes are linked
- Clamping, which keeps every table inside the area before each tick

The simulation is deterministic: tables start on a phyllotaxis spiral and
coincident tables are separated by a fixed, index-derived nudge rather than
random jiggle.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import networkx as nx

logger = logging.getLogger(__name__)

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))

# d3-force defaults
ALPHA_MIN = 0.001
VELOCITY_DECAY = 0.4
LINK_DISTANCE = 30.0
DISTANCE_MIN_SQUARED = 1.0


@dataclass
class Body:
    """A table being placed, tracked by its centre."""

    index: int
    width: float
    height: float
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0


def _nudge(i: int, j: int) -> Tuple[float, float]:
    # Tiny deterministic offset for bodies sitting exactly on top of each other
    angle = (i * 7 + j * 13) % 360
    return 1e-6 * math.cos(math.radians(angle)), 1e-6 * math.sin(math.radians(angle))


class ForceSimulation:
    """
    Deterministic force simulation over rectangular bodies.

    Example:
        >>> sim = ForceSimulation([(20, 15), (20, 25)], area=(100, 100))
        >>> centres = sim.run(300)
    """

    def __init__(
        self,
        sizes: Sequence[Tuple[float, float]],
        area: Tuple[float, float],
        charge_strength: float = 1000.0,
        collide_padding: float = 5.0,
        area_padding: float = 10.0,
        link_graph: Optional[nx.Graph] = None,
        link_strength: float = 0.0,
        iterations: int = 300,
    ):
        """
        Initialize the simulation.

        Args:
            sizes: ``(width, height)`` of each body, already inflated
            area: ``(width, height)`` of the layout area
            charge_strength: Many-body strength; positive values attract
            collide_padding: Clearance added on every side of each body for
                collision, so neighbouring bodies end up twice this apart
            area_padding: Clearance kept between bodies and the area edge
            link_graph: Graph over body indices; edges pull bodies together
            link_strength: Strength of the link force, 0 disables it
            iterations: Number of ticks used to derive the cooling rate
        """
        self.area_width, self.area_height = area
        self.charge_strength = charge_strength
        self.collide_padding = collide_padding
        self.area_padding = area_padding
        self.link_graph = link_graph if link_graph is not None else nx.Graph()
        self.link_strength = link_strength
        self.alpha = 1.0
        self.alpha_decay = 1 - ALPHA_MIN ** (1.0 / max(iterations, 1))

        self.bodies: List[Body] = []
        for i, (width, height) in enumerate(sizes):
            radius = INITIAL_RADIUS * math.sqrt(0.5 + i)
            angle = i * INITIAL_ANGLE
            self.bodies.append(
                Body(
                    index=i,
                    width=width,
                    height=height,
                    x=radius * math.cos(angle),
                    y=radius * math.sin(angle),
                )
            )

    def run(self, iterations: int = 300) -> List[Tuple[float, float]]:
        """Run ``iterations`` ticks and return the body centres."""
        for _ in range(iterations):
            self.constrain_to_area()
            self.tick()
        logger.debug(
            "Placed %d tables in %d ticks (alpha %.4f)",
            len(self.bodies),
            iterations,
            self.alpha,
        )
        return [(b.x, b.y) for b in self.bodies]

    def tick(self) -> None:
        """Advance the simulation by one step."""
        self.alpha += -self.alpha * self.alpha_decay

        if self.link_strength and self.link_graph.number_of_edges():
            self._apply_links()
        if self.charge_strength:
            self._apply_charge()
        self._apply_collision()

        for body in self.bodies:
            body.vx *= 1 - VELOCITY_DECAY
            body.vy *= 1 - VELOCITY_DECAY
            body.x += body.vx
            body.y += body.vy

        self._apply_center()

    def constrain_to_area(self) -> None:
        """Clamp every body centre so the body stays inside the area."""
        for body in self.bodies:
            body.x = _clamp(
                body.x, body.width / 2 + self.area_padding, self.area_width
            )
            body.y = _clamp(
                body.y, body.height / 2 + self.area_padding, self.area_height
            )

    def _apply_charge(self) -> None:
        for a in self.bodies:
            for b in self.bodies:
                if a is b:
                    continue
                dx = b.x - a.x
                dy = b.y - a.y
                if dx == 0 and dy == 0:
                    dx, dy = _nudge(a.index, b.index)
                distance_sq = dx * dx + dy * dy
                if distance_sq < DISTANCE_MIN_SQUARED:
                    distance_sq = math.sqrt(DISTANCE_MIN_SQUARED * distance_sq)
                scale = self.charge_strength * self.alpha / distance_sq
                a.vx += dx * scale
                a.vy += dy * scale

    def _apply_collision(self) -> None:
        # Each body is padded on every side
        padding = 2 * self.collide_padding
        count = len(self.bodies)
        for i in range(count):
            a = self.bodies[i]
            for j in range(i + 1, count):
                b = self.bodies[j]
                ax, ay = a.x + a.vx, a.y + a.vy
                bx, by = b.x + b.vx, b.y + b.vy
                dx = bx - ax
                dy = by - ay
                if dx == 0 and dy == 0:
                    dx, dy = _nudge(i, j)
                overlap_x = (a.width + b.width) / 2 + padding - abs(dx)
                overlap_y = (a.height + b.height) / 2 + padding - abs(dy)
                if overlap_x <= 0 or overlap_y <= 0:
                    continue
                # Separate along the axis that needs the smaller push
                if overlap_x < overlap_y:
                    push = math.copysign(overlap_x / 2, dx)
                    a.vx -= push
                    b.vx += push
                else:
                    push = math.copysign(overlap_y / 2, dy)
                    a.vy -= push
                    b.vy += push

    def _apply_links(self) -> None:
        degree = dict(self.link_graph.degree())
        for i, j in self.link_graph.edges():
            if i == j:
                continue
            source, target = self.bodies[i], self.bodies[j]
            dx = target.x + target.vx - source.x - source.vx
            dy = target.y + target.vy - source.y - source.vy
            if dx == 0 and dy == 0:
                dx, dy = _nudge(i, j)
            length = math.sqrt(dx * dx + dy * dy)
            factor = (length - LINK_DISTANCE) / length * self.alpha * self.link_strength
            dx *= factor
            dy *= factor
            bias = degree[i] / (degree[i] + degree[j])
            target.vx -= dx * bias
            target.vy -= dy * bias
            source.vx += dx * (1 - bias)
            source.vy += dy * (1 - bias)

    def _apply_center(self) -> None:
        if not self.bodies:
            return
        shift_x = sum(b.x for b in self.bodies) / len(self.bodies) - self.area_width / 2
        shift_y = sum(b.y for b in self.bodies) / len(self.bodies) - self.area_height / 2
        for body in self.bodies:
            body.x -= shift_x
            body.y -= shift_y


def _clamp(value: float, extent: float, limit: float) -> float:
    low, high = extent, limit - extent
    if low > high:
        # Body is larger than the area; centre it
        return limit / 2
    return min(max(value, low), high)


def place_tables(
    sizes: Sequence[Tuple[float, float]],
    area: Tuple[float, float],
    iterations: int = 300,
    **kwargs,
) -> List[Tuple[float, float]]:
    """
    Place rectangular tables and return their centres.

    Args:
        sizes: Inflated ``(width, height)`` of each table
        area: ``(width, height)`` of the layout area
        iterations: Number of simulation ticks
        **kwargs: Passed through to ``ForceSimulation``

    Returns:
        ``(x, y)`` centre of each table, in input order
    """
    simulation = ForceSimulation(sizes, area, iterations=iterations, **kwargs)
    simulation.run(iterations)
    # Leave the final positions inside the area as well
    simulation.constrain_to_area()
    return [(b.x, b.y) for b in simulation.bodies]
