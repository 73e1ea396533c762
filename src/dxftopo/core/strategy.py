"""Contour strategies.

Two independent algorithms close open segments into contours:

- ``GraphTraversalStrategy`` builds a planar graph and walks its faces.
  Used for area reporting.
- ``ChainAssemblyStrategy`` greedily chains segments end to end. Used for
  extrusion shapes.

Both take the output of the SegmentExtractor and return every closed
contour wound counter-clockwise, directly closed primitives included.
``compare_strategies`` runs both so callers can flag disagreement.
"""

import math
from dataclasses import dataclass, field
from typing import Protocol

from dxftopo.config import ContourStrategyName
from dxftopo.core.chain import ChainAssembler
from dxftopo.core.extractor import ExtractionResult
from dxftopo.core.faces import FaceTraverser
from dxftopo.core.graph import PlanarGraphBuilder
from dxftopo.domain import Contour, Segment, StrategyComparison, WindingDirection

AREA_EPSILON = 1e-9


@dataclass
class StrategyOutput:
    """Contours found by one strategy.

    Attributes:
        contours: Closed contours, counter-clockwise, in discovery order
        unused_segments: Open segments that ended up in no contour
        strategy: Name of the strategy
    """

    contours: list[Contour]
    unused_segments: list[Segment] = field(default_factory=list)
    strategy: str = ""


class ContourStrategy(Protocol):
    """Turns extracted geometry into closed contours."""

    name: str

    def find_contours(self, extraction: ExtractionResult) -> StrategyOutput:
        """Return every closed contour in the extraction."""
        ...


def _closed_contours(extraction: ExtractionResult) -> list[Contour]:
    return [
        c.normalized(WindingDirection.COUNTER_CLOCKWISE)
        for c in extraction.closed_contours()
        if c.area() > AREA_EPSILON
    ]


class GraphTraversalStrategy:
    """Planar graph face traversal.

    With no open segments the directly closed contours are returned as is.
    Otherwise each closed curve is cut into two halves and joins the graph
    with the open segments, so it can sit inside an open boundary. Only
    bounded (counter-clockwise) faces are kept.
    """

    name = ContourStrategyName.GRAPH.value

    def __init__(
        self,
        builder: PlanarGraphBuilder | None = None,
        traverser: FaceTraverser | None = None,
    ) -> None:
        """Initialize strategy.

        Args:
            builder: Graph builder (default tolerance and merge mode if None)
            traverser: Face traverser
        """
        self.builder = builder or PlanarGraphBuilder()
        self.traverser = traverser or FaceTraverser()

    def find_contours(self, extraction: ExtractionResult) -> StrategyOutput:
        if not extraction.has_open_geometry():
            return StrategyOutput(contours=_closed_contours(extraction), strategy=self.name)

        segments = list(extraction.segments)
        open_count = len(segments)
        direct: list[Contour] = []

        for curve in extraction.closed_curves:
            first, second = curve.split()
            if first.start.distance_to(first.end) < self.builder.tolerance:
                # Too small to split into two distinct nodes
                direct.append(curve.to_contour().normalized(WindingDirection.COUNTER_CLOCKWISE))
                continue
            segments.extend((first, second))

        return self.find_in_segments(segments, open_count, direct)

    def find_in_segments(
        self,
        segments: list[Segment],
        open_count: int | None = None,
        direct: list[Contour] | None = None,
    ) -> StrategyOutput:
        """Traverse the graph of the given segments.

        Args:
            segments: Segments to build the graph from
            open_count: How many leading segments are genuinely open; only
                those are reported as unused (all of them if None)
            direct: Contours to add to the result without traversal

        Returns:
            StrategyOutput
        """
        if open_count is None:
            open_count = len(segments)

        graph = self.builder.build(segments)
        faces = self.traverser.traverse(graph)

        kept = [f for f in faces if f.signed_area() > AREA_EPSILON]
        if not kept and faces:
            largest = max(faces, key=lambda f: abs(f.signed_area()))
            if abs(largest.signed_area()) > AREA_EPSILON:
                kept = [largest]

        used_segments: set[int] = set()
        for face in kept:
            used_segments.update(graph.edges[e].segment for e in face.edges)

        contours = [f.contour.normalized(WindingDirection.COUNTER_CLOCKWISE) for f in kept]
        contours.extend(direct or [])

        return StrategyOutput(
            contours=contours,
            unused_segments=[segments[k] for k in range(open_count) if k not in used_segments],
            strategy=self.name,
        )


class ChainAssemblyStrategy:
    """Greedy end-to-end chaining; closed primitives pass through unchanged."""

    name = ContourStrategyName.CHAIN.value

    def __init__(self, assembler: ChainAssembler | None = None) -> None:
        self.assembler = assembler or ChainAssembler()

    def find_contours(self, extraction: ExtractionResult) -> StrategyOutput:
        chains = self.assembler.assemble(extraction.segments)
        return StrategyOutput(
            contours=_closed_contours(extraction) + chains.contours,
            unused_segments=chains.unused,
            strategy=self.name,
        )


def compare_strategies(
    extraction: ExtractionResult,
    first: ContourStrategy,
    second: ContourStrategy,
    rel_tolerance: float = 1e-6,
) -> StrategyComparison:
    """Run two strategies on the same extraction and compare contour areas.

    The strategies diverge when they find a different number of contours
    or when any pair of area-sorted contours differs beyond the tolerance.

    Args:
        extraction: Extracted geometry of one drawing
        first: Usually the graph traversal strategy
        second: Usually the chain assembly strategy
        rel_tolerance: Relative tolerance on each area

    Returns:
        StrategyComparison
    """
    out_a = first.find_contours(extraction)
    out_b = second.find_contours(extraction)

    areas_a = sorted((c.area() for c in out_a.contours), reverse=True)
    areas_b = sorted((c.area() for c in out_b.contours), reverse=True)

    diverged = len(areas_a) != len(areas_b) or any(
        not math.isclose(a, b, rel_tol=rel_tolerance, abs_tol=AREA_EPSILON)
        for a, b in zip(areas_a, areas_b)
    )

    return StrategyComparison(
        graph_areas=areas_a,
        chain_areas=areas_b,
        graph_unused=len(out_a.unused_segments),
        chain_unused=len(out_b.unused_segments),
        diverged=diverged,
        tolerance=rel_tolerance,
    )


def make_strategy(
    name: ContourStrategyName,
    tolerance: float,
    builder: PlanarGraphBuilder | None = None,
) -> ContourStrategy:
    """Create a strategy by name."""
    if name == ContourStrategyName.CHAIN:
        return ChainAssemblyStrategy(ChainAssembler(tolerance))
    return GraphTraversalStrategy(builder or PlanarGraphBuilder(tolerance))
