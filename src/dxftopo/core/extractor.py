"""Segment extraction.

Splits a drawing's primitives into curves that are closed on their own
(circles, full arcs and ellipses, closed polylines and splines) and open
segments that still have to be joined by a contour strategy.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog

from dxftopo.core.geometry import bounding_box
from dxftopo.core.sampler import CurveSampler, SampledCurve
from dxftopo.domain import (
    Contour,
    Diagnostic,
    Insert,
    Point2D,
    PointEntity,
    Primitive,
    Segment,
    Severity,
)
from dxftopo.exceptions import PrimitiveError


@dataclass
class ExtractionResult:
    """Closed curves and open segments of one drawing.

    Attributes:
        closed_curves: Primitives that bound a region on their own
        segments: Open segments in input order
        diagnostics: Skipped primitives
        ignored_count: Point primitives, which carry no topology
        dropped_count: Open segments dropped because both ends coincide
    """

    closed_curves: list[SampledCurve] = field(default_factory=list)
    segments: list[Segment] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    ignored_count: int = 0
    dropped_count: int = 0

    def closed_contours(self) -> list[Contour]:
        return [curve.to_contour() for curve in self.closed_curves]

    def has_open_geometry(self) -> bool:
        return len(self.segments) > 0

    def extents(self) -> tuple[float, float]:
        """(width, height) of every extracted sample."""
        points: list[Point2D] = []
        for curve in self.closed_curves:
            points.extend(curve.points)
        for segment in self.segments:
            points.extend(segment.points)
        box = bounding_box(points)
        if box is None:
            return 0.0, 0.0
        return box[2] - box[0], box[3] - box[1]


class SegmentExtractor:
    """Classifies primitives as directly closed or open.

    A malformed primitive becomes a Diagnostic and the pass continues.
    """

    def __init__(
        self,
        sampler: CurveSampler | None = None,
        tolerance: float = 0.5,
        logger: structlog.stdlib.BoundLogger | None = None,
        close_self_loops: bool = False,
    ) -> None:
        """Initialize extractor.

        Args:
            sampler: Curve sampler (default configuration if None)
            tolerance: Distance below which two endpoints coincide
            logger: Structured logger (module logger if None)
            close_self_loops: Treat an open curve whose ends meet as closed
                instead of dropping it
        """
        self.sampler = sampler or CurveSampler()
        self.tolerance = tolerance
        self.close_self_loops = close_self_loops
        self.logger = logger or structlog.get_logger("dxftopo")

    def extract(self, items: Iterable[tuple[int, Primitive]]) -> ExtractionResult:
        """Sample and classify primitives.

        Args:
            items: (input index, primitive) pairs with inserts already expanded

        Returns:
            ExtractionResult
        """
        result = ExtractionResult()

        for index, primitive in items:
            if isinstance(primitive, PointEntity):
                result.ignored_count += 1
                continue
            if isinstance(primitive, Insert):
                result.diagnostics.append(
                    Diagnostic(index, "insert", "block reference was not expanded", Severity.INFO)
                )
                continue

            try:
                curve = self.sampler.sample(primitive, index)
            except PrimitiveError as e:
                kind = getattr(primitive, "kind", None)
                kind_name = kind.value if kind is not None else type(primitive).__name__
                result.diagnostics.append(Diagnostic(index, kind_name, str(e)))
                self.logger.warning(
                    "Primitive skipped", index=index, kind=kind_name, reason=str(e)
                )
                continue

            if curve.closed:
                result.closed_curves.append(curve)
                continue

            if curve.start.distance_to(curve.end) >= self.tolerance:
                result.segments.append(curve.to_segment())
                continue

            # Ends meet: the segment cannot become a graph edge
            loop = SampledCurve(curve.points, curve.chord_areas, True, index)
            if (
                self.close_self_loops
                and len(curve.points) >= 3
                and loop.to_contour().area() > self.tolerance**2
            ):
                result.closed_curves.append(loop)
                self.logger.debug("Open curve closes on itself", index=index)
            else:
                result.dropped_count += 1
                self.logger.debug("Degenerate segment dropped", index=index)

        return result
