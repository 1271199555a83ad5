"""
Debug tracing infrastructure for ortholink.

This module provides data structures for capturing detailed traces of graph
construction and route searches. Pass a ``RouteTrace`` to the router (or the
table layout) to enable tracing; without one nothing is recorded.

This is primarily useful for:
1. Debugging routing issues (why a link took the path it did, or none)
2. Understanding the pipeline flow (graph sizes after each stage)
3. Finding slow stages (every stage and search is timed)

Usage:
    >>> trace = RouteTrace()
    >>> router = OrthogonalRouter(trace=trace)
    >>> ...
    >>> print(trace.summary())
    >>> trace.dump_to_file("route_trace.txt")

The trace captures:
- Pipeline stages (obstacles set, segments found, segments intersected, ...)
- Elapsed time for each stage
- One record per route search with its outcome and search statistics
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple


@dataclass
class RouteSearch:
    """
    Record of a single route request.

    Attributes:
        start: Requested start position
        end: Requested end position
        status: Outcome of the request (a ``RouteStatus`` value)
        expanded: Number of nodes the search closed
        touched: Number of nodes the search scored
        waypoints: Number of points in the returned route
        elapsed_ms: Wall time spent on the request
    """

    start: Tuple[float, float]
    end: Tuple[float, float]
    status: str
    expanded: int = 0
    touched: int = 0
    waypoints: int = 0
    elapsed_ms: float = 0.0

    def __str__(self) -> str:
        return (
            f"{self.start} -> {self.end}: {self.status} "
            f"[{self.waypoints} pts, {self.expanded} expanded, "
            f"{self.touched} touched] {self.elapsed_ms:.2f}ms"
        )


@dataclass
class PipelineStage:
    """
    Snapshot of state at a pipeline stage.

    The routing pipeline has these stages:
    1. obstacles_set - Obstacles supplied to the router
    2. connectors_set - Connector points supplied to the router
    3. segments_found - Points of interest and ray segments built
    4. segments_intersected - Crossings spliced into the graph
    5. graph_generated - Graph ready for route searches

    The table layout adds ``hierarchy``, ``placement`` and ``links_routed``.

    Attributes:
        name: Name of this pipeline stage
        data: Dictionary of relevant data at this stage
        elapsed_ms: Time spent in the stage, if it was timed
    """

    name: str
    data: Dict[str, Any]
    elapsed_ms: Optional[float] = None

    def __str__(self) -> str:
        header = f"=== Stage: {self.name} ==="
        if self.elapsed_ms is not None:
            header += f" ({self.elapsed_ms:.2f}ms)"
        lines = [header]
        for key, value in self.data.items():
            # Truncate long values
            str_val = str(value)
            if len(str_val) > 100:
                str_val = str_val[:100] + "..."
            lines.append(f"  {key}: {str_val}")
        return "\n".join(lines)


@dataclass
class RouteTrace:
    """
    Complete trace of a routing session.

    Usage:
        >>> trace = RouteTrace()
        >>> router = OrthogonalRouter(trace=trace)
        >>> router.set_obstacles([...])
        >>> router.set_connector_points([...])
        >>> router.generate_orthogonal_graph(Rect(0, 0, 100, 100))
        >>> router.find_route((0, 0), (10, 0))
        >>>
        >>> # Get summary
        >>> print(trace.summary())
        >>>
        >>> # Inspect failed searches
        >>> for search in trace.get_failed_searches():
        ...     print(search)

    Attributes:
        stages: List of pipeline stages with their data
        searches: List of route searches in request order
    """

    stages: List[PipelineStage] = field(default_factory=list)
    searches: List[RouteSearch] = field(default_factory=list)

    def add_stage(
        self,
        name: str,
        data: Dict[str, Any],
        elapsed_ms: Optional[float] = None,
    ) -> None:
        """
        Add a pipeline stage snapshot.

        Args:
            name: Name of the stage (e.g., "segments_found")
            data: Dictionary of relevant data at this stage
            elapsed_ms: Optional time spent in the stage
        """
        self.stages.append(PipelineStage(name, data.copy(), elapsed_ms))

    @contextmanager
    def timed_stage(self, name: str) -> Iterator[Dict[str, Any]]:
        """
        Time a block of work and record it as a stage.

        The yielded dictionary becomes the stage data, so the block can fill
        it in as results become available.
        """
        data: Dict[str, Any] = {}
        started = time.perf_counter()
        yield data
        elapsed = (time.perf_counter() - started) * 1000.0
        self.add_stage(name, data, elapsed)

    def add_search(self, search: RouteSearch) -> None:
        """Record a route search."""
        self.searches.append(search)

    def get_stage(self, name: str) -> Optional[PipelineStage]:
        """Get a specific pipeline stage by name (the latest if repeated)."""
        for stage in reversed(self.stages):
            if stage.name == name:
                return stage
        return None

    def get_failed_searches(self) -> List[RouteSearch]:
        """Get all searches that did not produce a route."""
        return [s for s in self.searches if s.status != "found"]

    def total_search_ms(self) -> float:
        return sum(s.elapsed_ms for s in self.searches)

    def clear(self) -> None:
        self.stages.clear()
        self.searches.clear()

    def summary(self) -> str:
        """
        Generate a human-readable summary of the trace.

        Returns a string with:
        - Pipeline stages overview
        - Route search statistics
        """
        lines = [
            "=" * 60,
            "ROUTE TRACE SUMMARY",
            "=" * 60,
            "",
            f"Pipeline stages: {len(self.stages)}",
        ]

        for stage in self.stages:
            timing = (
                f" ({stage.elapsed_ms:.2f}ms)" if stage.elapsed_ms is not None else ""
            )
            lines.append(f"  {stage.name}{timing}")

        lines.extend(
            [
                "",
                f"Route searches: {len(self.searches)}",
                f"Failed searches: {len(self.get_failed_searches())}",
                f"Total search time: {self.total_search_ms():.2f}ms",
                "",
            ]
        )

        # Count by status
        status_counts: Dict[str, int] = {}
        for s in self.searches:
            status_counts[s.status] = status_counts.get(s.status, 0) + 1

        lines.append("Searches by status:")
        for status, count in sorted(status_counts.items(), key=lambda x: -x[1]):
            lines.append(f"  {status}: {count}")

        return "\n".join(lines)

    def dump(self) -> str:
        """
        Generate a complete human-readable dump of the trace.

        This includes all stages with their full data and every search.
        """
        lines = [self.summary(), "", "=" * 60, "DETAILED TRACE", "=" * 60, ""]

        lines.append("PIPELINE STAGES:")
        lines.append("-" * 40)
        for stage in self.stages:
            lines.append(str(stage))
            lines.append("")

        lines.append("ROUTE SEARCHES:")
        lines.append("-" * 40)
        for s in self.searches:
            lines.append(str(s))

        return "\n".join(lines)

    def dump_to_file(self, filename: str) -> None:
        """Write the complete trace dump to a file."""
        with open(filename, "w", encoding="utf-8") as f:
            f.write(self.dump())
