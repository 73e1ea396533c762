"""Curve sampling for drawing primitives.

Every curve primitive is turned into an ordered list of 2D samples. Curves
with a circular or elliptical closed form also carry, for each chord, the
signed area between that chord and the true curve, so the area of any loop
built from them is exact rather than that of the inscribed polygon.

Closed curves repeat their first sample at the end; the repeated sample is
dropped when the curve becomes a Contour.
"""

import math
from collections.abc import Callable
from dataclasses import dataclass

from dxftopo.config import SamplingConfig
from dxftopo.core._bspline import catmull_rom_points, evaluate_bspline_curve
from dxftopo.core.geometry import (
    TAU,
    circular_chord_area,
    dedupe_consecutive,
    elliptical_chord_area,
    normalize_sweep,
)
from dxftopo.domain import (
    Arc,
    Circle,
    Contour,
    ContourSource,
    Ellipse,
    Line,
    Point2D,
    Polyline,
    Primitive,
    Segment,
    Spline,
)
from dxftopo.exceptions import MalformedPrimitiveError, UnsupportedPrimitiveError

BULGE_EPSILON = 1e-12


def check_finite(primitive: Primitive, kind: str) -> None:
    """Raise MalformedPrimitiveError unless every coordinate field is a finite number."""
    try:
        values = list(primitive.scalars())
    except (AttributeError, TypeError) as e:
        raise MalformedPrimitiveError(kind, f"missing field ({e})") from e
    for value in values:
        if not isinstance(value, (int, float)) or not math.isfinite(value):
            raise MalformedPrimitiveError(kind, f"non-finite value {value!r}")


@dataclass(frozen=True)
class SampledCurve:
    """Samples of one primitive.

    Attributes:
        points: Ordered samples; closed curves end on their first sample
        chord_areas: Signed chord-to-curve area per consecutive pair
        closed: True when the primitive bounds a region on its own
        source_index: Index of the primitive in the input list
    """

    points: tuple[Point2D, ...]
    chord_areas: tuple[float, ...]
    closed: bool = False
    source_index: int | None = None

    @property
    def start(self) -> Point2D:
        return self.points[0]

    @property
    def end(self) -> Point2D:
        return self.points[-1]

    def to_segment(self) -> Segment:
        return Segment(
            points=self.points,
            chord_areas=self.chord_areas,
            source_index=self.source_index,
            is_closed=self.closed,
        )

    def to_contour(self) -> Contour:
        """Loop of this closed curve, without the repeated closing sample."""
        points = list(self.points)
        if len(points) > 1 and points[0] == points[-1]:
            points.pop()
        return Contour(
            points=points,
            area_correction=math.fsum(self.chord_areas),
            source=ContourSource.CLOSED_PRIMITIVE,
            source_indices=() if self.source_index is None else (self.source_index,),
        )

    def split(self) -> tuple[Segment, Segment]:
        """Cut a closed curve into two open halves at its middle sample."""
        mid = len(self.points) // 2
        first = Segment(
            points=self.points[: mid + 1],
            chord_areas=self.chord_areas[:mid],
            source_index=self.source_index,
            is_closed=True,
        )
        second = Segment(
            points=self.points[mid:],
            chord_areas=self.chord_areas[mid:],
            source_index=self.source_index,
            is_closed=True,
        )
        return first, second


class CurveSampler:
    """Converts primitives into point samples.

    The sampler is stateless apart from its configuration and safe for use
    in worker processes.

    Example:
        sampler = CurveSampler()
        curve = sampler.sample(Circle(Point3D(0, 0), 10.0))
        contour = curve.to_contour()
    """

    def __init__(self, config: SamplingConfig | None = None, epsilon: float = 1e-9) -> None:
        """Initialize sampler.

        Args:
            config: Sampling densities and tolerances
            epsilon: Consecutive samples closer than this are collapsed
        """
        self.config = config or SamplingConfig()
        self.epsilon = epsilon
        self._samplers: dict[type, Callable[[object], tuple[list[Point2D], list[float], bool]]] = {
            Line: self._sample_line,
            Arc: self._sample_arc,
            Circle: self._sample_circle,
            Ellipse: self._sample_ellipse,
            Spline: self._sample_spline,
            Polyline: self._sample_polyline,
        }

    def sample(self, primitive: Primitive, index: int | None = None) -> SampledCurve:
        """Sample one primitive.

        Args:
            primitive: Primitive to sample (points and inserts carry no curve)
            index: Position of the primitive in the input list

        Returns:
            SampledCurve with at least two samples

        Raises:
            MalformedPrimitiveError: If fields are missing, non-finite or out of range
            UnsupportedPrimitiveError: If the primitive has no curve to sample
        """
        sampler = self._samplers.get(type(primitive))
        if sampler is None:
            raise UnsupportedPrimitiveError(getattr(primitive, "kind", type(primitive).__name__))

        kind = primitive.kind.value
        check_finite(primitive, kind)

        points, areas, closed = sampler(primitive)
        points, areas = dedupe_consecutive(points, areas, self.epsilon)
        if len(points) < 2:
            raise MalformedPrimitiveError(kind, "curve collapses to a single point")

        return SampledCurve(
            points=tuple(points),
            chord_areas=tuple(areas),
            closed=closed,
            source_index=index,
        )

    def is_full_turn(self, sweep: float) -> bool:
        return abs(sweep - TAU) < self.config.full_turn_tolerance

    def _sample_line(self, line: Line) -> tuple[list[Point2D], list[float], bool]:
        return [line.start.to_2d(), line.end.to_2d()], [0.0], False

    def _circle_points(
        self, cx: float, cy: float, radius: float, start: float, sweep: float, steps: int
    ) -> tuple[list[Point2D], list[float]]:
        points = [
            Point2D(
                cx + radius * math.cos(start + sweep * i / steps),
                cy + radius * math.sin(start + sweep * i / steps),
            )
            for i in range(steps + 1)
        ]
        return points, [circular_chord_area(radius, sweep / steps)] * steps

    def _sample_circle(self, circle: Circle) -> tuple[list[Point2D], list[float], bool]:
        if circle.radius <= 0:
            raise MalformedPrimitiveError("circle", f"radius must be positive, got {circle.radius}")

        steps = self.config.circle_segments
        points, areas = self._circle_points(
            circle.center.x, circle.center.y, circle.radius, 0.0, TAU, steps
        )
        points[-1] = points[0]
        return points, areas, True

    def _sample_arc(self, arc: Arc) -> tuple[list[Point2D], list[float], bool]:
        if arc.radius <= 0:
            raise MalformedPrimitiveError("arc", f"radius must be positive, got {arc.radius}")

        sweep = normalize_sweep(arc.start_angle, arc.end_angle)
        if self.is_full_turn(sweep):
            steps = self.config.circle_segments
            points, areas = self._circle_points(
                arc.center.x, arc.center.y, arc.radius, arc.start_angle, TAU, steps
            )
            points[-1] = points[0]
            return points, areas, True

        steps = max(self.config.arc_min_segments, math.ceil(sweep / math.pi * 32))
        points, areas = self._circle_points(
            arc.center.x, arc.center.y, arc.radius, arc.start_angle, sweep, steps
        )
        return points, areas, False

    def _sample_ellipse(self, ellipse: Ellipse) -> tuple[list[Point2D], list[float], bool]:
        major = math.hypot(ellipse.major_axis.x, ellipse.major_axis.y)
        if major <= 0:
            raise MalformedPrimitiveError("ellipse", "major axis has zero length")
        if ellipse.axis_ratio <= 0:
            raise MalformedPrimitiveError(
                "ellipse", f"axis ratio must be positive, got {ellipse.axis_ratio}"
            )

        minor = major * ellipse.axis_ratio
        rotation = math.atan2(ellipse.major_axis.y, ellipse.major_axis.x)
        cos_r = math.cos(rotation)
        sin_r = math.sin(rotation)

        # end_param 0 reads as a full turn from start_param
        sweep = normalize_sweep(ellipse.start_param, ellipse.end_param)
        closed = self.is_full_turn(sweep)
        if closed:
            sweep = TAU
            steps = self.config.circle_segments
        else:
            steps = max(self.config.arc_min_segments, math.ceil(sweep / math.pi * 32))

        points: list[Point2D] = []
        for i in range(steps + 1):
            t = ellipse.start_param + sweep * i / steps
            lx = major * math.cos(t)
            ly = minor * math.sin(t)
            points.append(
                Point2D(
                    ellipse.center.x + lx * cos_r - ly * sin_r,
                    ellipse.center.y + lx * sin_r + ly * cos_r,
                )
            )
        if closed:
            points[-1] = points[0]

        return points, [elliptical_chord_area(major, minor, sweep / steps)] * steps, closed

    def _sample_polyline(self, polyline: Polyline) -> tuple[list[Point2D], list[float], bool]:
        vertices = polyline.vertices
        if len(vertices) < 2:
            raise MalformedPrimitiveError(
                "polyline", f"needs at least 2 vertices, got {len(vertices)}"
            )

        has_bulge = any(abs(v.bulge) > BULGE_EPSILON for v in vertices)
        closed = polyline.closed and (len(vertices) >= 3 or has_bulge)

        pairs = list(zip(vertices, vertices[1:]))
        if polyline.closed:
            pairs.append((vertices[-1], vertices[0]))

        points = [Point2D(vertices[0].x, vertices[0].y)]
        areas: list[float] = []
        for v1, v2 in pairs:
            p1 = Point2D(v1.x, v1.y)
            p2 = Point2D(v2.x, v2.y)
            if abs(v1.bulge) <= BULGE_EPSILON:
                points.append(p2)
                areas.append(0.0)
                continue
            arc_points, arc_areas = self.bulge_arc(p1, p2, v1.bulge)
            points.extend(arc_points[1:])
            areas.extend(arc_areas)

        if polyline.closed:
            points[-1] = points[0]
        return points, areas, closed

    def bulge_arc(
        self, p1: Point2D, p2: Point2D, bulge: float
    ) -> tuple[list[Point2D], list[float]]:
        """Expand one bulged polyline edge into arc samples.

        The bulge is ``tan(theta / 4)`` for the included angle theta; a
        positive bulge turns counter-clockwise from p1 to p2. The first and
        last samples are exactly p1 and p2.

        Args:
            p1: Edge start vertex (the vertex carrying the bulge)
            p2: Edge end vertex
            bulge: Bulge value of p1

        Returns:
            Tuple of (points from p1 to p2, signed chord areas)
        """
        dx = p2.x - p1.x
        dy = p2.y - p1.y
        chord = math.hypot(dx, dy)
        if chord <= self.epsilon:
            return [p1, p2], [0.0]

        theta = 4.0 * math.atan(abs(bulge))
        direction = 1.0 if bulge > 0 else -1.0
        radius = chord / (2.0 * math.sin(theta / 2.0))
        sagitta = abs(bulge) * chord / 2.0

        # Left normal of the chord; the center sits on it at distance r - s
        nx = -dy / chord
        ny = dx / chord
        offset = (radius - sagitta) * direction
        cx = (p1.x + p2.x) / 2.0 + nx * offset
        cy = (p1.y + p2.y) / 2.0 + ny * offset

        start = math.atan2(p1.y - cy, p1.x - cx)
        sweep = theta * direction
        steps = max(self.config.bulge_min_segments, math.ceil(theta / math.pi * 32))

        points, areas = self._circle_points(cx, cy, radius, start, sweep, steps)
        points[0] = p1
        points[-1] = p2
        return points, areas

    def _sample_spline(self, spline: Spline) -> tuple[list[Point2D], list[float], bool]:
        control = [p.to_2d() for p in spline.control_points]
        fit = [p.to_2d() for p in spline.fit_points]

        if spline.knots and control:
            self._validate_knots(spline)
            steps = max(
                self.config.spline_min_samples,
                len(control) * self.config.spline_samples_per_control_point,
            )
            points = evaluate_bspline_curve(spline.degree, control, list(spline.knots), steps)
            closed = spline.closed and len(control) >= 3
        elif len(fit) >= 2:
            points = catmull_rom_points(fit, len(fit) * self.config.fit_point_samples)
            closed = spline.closed and len(fit) >= 3
        elif len(control) >= 2:
            points = list(control)
            closed = spline.closed and len(control) >= 3
        else:
            raise MalformedPrimitiveError(
                "spline", "needs a knot vector, 2 fit points or 2 control points"
            )

        if closed and points[0] != points[-1]:
            points.append(points[0])
        return points, [0.0] * (len(points) - 1), closed

    @staticmethod
    def _validate_knots(spline: Spline) -> None:
        degree = spline.degree
        count = len(spline.control_points)
        knots = spline.knots

        if degree < 1:
            raise MalformedPrimitiveError("spline", f"degree must be at least 1, got {degree}")
        if count < degree + 1:
            raise MalformedPrimitiveError(
                "spline", f"degree {degree} needs {degree + 1} control points, got {count}"
            )
        if len(knots) != count + degree + 1:
            raise MalformedPrimitiveError(
                "spline",
                f"expected {count + degree + 1} knots for {count} control points, got {len(knots)}",
            )
        if any(b < a for a, b in zip(knots, knots[1:])):
            raise MalformedPrimitiveError("spline", "knot vector is not non-decreasing")
        if knots[count] <= knots[degree]:
            raise MalformedPrimitiveError("spline", "knot vector has an empty parameter domain")
