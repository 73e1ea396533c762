"""Tests for curve sampling."""

import math

import pytest

from dxftopo.config import SamplingConfig
from dxftopo.core._bspline import catmull_rom_points, evaluate_bspline_curve, find_knot_span
from dxftopo.core.sampler import CurveSampler
from dxftopo.domain import (
    Arc,
    Circle,
    Contour,
    Ellipse,
    Insert,
    Line,
    Point2D,
    Point3D,
    PointEntity,
    Polyline,
    PolylineVertex,
    Spline,
)
from dxftopo.exceptions import MalformedPrimitiveError, UnsupportedPrimitiveError


@pytest.fixture
def sampler() -> CurveSampler:
    """Create sampler with default configuration."""
    return CurveSampler()


class TestLinesAndCircles:
    """Tests for lines, circles and arcs."""

    def test_line(self, sampler: CurveSampler) -> None:
        """Test a line is its two endpoints."""
        curve = sampler.sample(Line(Point3D(0, 0, 5), Point3D(10, 0, 5)), index=4)
        assert curve.points == (Point2D(0, 0), Point2D(10, 0))
        assert curve.chord_areas == (0.0,)
        assert not curve.closed
        assert curve.source_index == 4

    def test_circle_is_closed_with_exact_area(self, sampler: CurveSampler) -> None:
        """Test a circle repeats its first sample and carries exact area."""
        curve = sampler.sample(Circle(Point3D(5, 5), 10.0))
        assert curve.closed
        assert len(curve.points) == 65
        assert curve.points[0] == curve.points[-1]

        contour = curve.to_contour()
        assert len(contour.points) == 64
        assert contour.signed_area() == pytest.approx(math.pi * 100.0, rel=1e-9)

    def test_circle_bad_radius(self, sampler: CurveSampler) -> None:
        """Test zero radius is rejected."""
        with pytest.raises(MalformedPrimitiveError):
            sampler.sample(Circle(Point3D(0, 0), 0.0))

    def test_quarter_arc(self, sampler: CurveSampler) -> None:
        """Test a quarter arc is open and starts and ends on the circle."""
        curve = sampler.sample(Arc(Point3D(0, 0), 10.0, 0.0, math.pi / 2))
        assert not curve.closed
        assert len(curve.points) - 1 == 32
        assert curve.start.x == pytest.approx(10.0)
        assert curve.end.y == pytest.approx(10.0)
        # Quarter disc: the sampled arc closed through the center plus its chord caps
        cap = math.fsum(curve.chord_areas)
        wedge = Contour(points=[Point2D(0, 0), *curve.points], area_correction=cap)
        assert wedge.signed_area() == pytest.approx(math.pi * 25.0, rel=1e-9)

    def test_arc_wraps_past_zero(self, sampler: CurveSampler) -> None:
        """Test an arc whose end angle is below its start sweeps through zero."""
        curve = sampler.sample(Arc(Point3D(0, 0), 1.0, 3 * math.pi / 2, math.pi / 2))
        assert not curve.closed
        assert curve.start.y == pytest.approx(-1.0)
        assert curve.end.y == pytest.approx(1.0)
        assert all(p.x >= -1e-9 for p in curve.points)

    def test_full_turn_arc_is_circle(self, sampler: CurveSampler) -> None:
        """Test an arc sweeping a full turn is closed."""
        curve = sampler.sample(Arc(Point3D(0, 0), 2.0, 0.0, 2 * math.pi - 0.001))
        assert curve.closed
        assert curve.to_contour().area() == pytest.approx(math.pi * 4.0, rel=1e-9)

    def test_custom_circle_resolution(self) -> None:
        """Test circle sample count follows configuration."""
        sampler = CurveSampler(SamplingConfig(circle_segments=16))
        curve = sampler.sample(Circle(Point3D(0, 0), 1.0))
        assert len(curve.points) == 17
        assert curve.to_contour().area() == pytest.approx(math.pi, rel=1e-9)


class TestEllipse:
    """Tests for ellipse sampling."""

    def test_full_ellipse(self, sampler: CurveSampler) -> None:
        """Test a full ellipse is closed with exact area."""
        curve = sampler.sample(Ellipse(Point3D(0, 0), Point3D(10, 0), 0.5))
        assert curve.closed
        assert curve.to_contour().area() == pytest.approx(math.pi * 10 * 5, rel=1e-9)

    def test_rotated_ellipse(self, sampler: CurveSampler) -> None:
        """Test a rotated major axis keeps the area and orientation."""
        curve = sampler.sample(Ellipse(Point3D(1, 1), Point3D(0, 4), 0.25))
        assert curve.start.x == pytest.approx(1.0)
        assert curve.start.y == pytest.approx(5.0)
        assert curve.to_contour().area() == pytest.approx(math.pi * 4 * 1, rel=1e-9)

    def test_half_ellipse_is_open(self, sampler: CurveSampler) -> None:
        """Test an elliptical arc is open."""
        curve = sampler.sample(Ellipse(Point3D(0, 0), Point3D(10, 0), 0.5, 0.0, math.pi))
        assert not curve.closed
        assert curve.end.x == pytest.approx(-10.0)

    def test_zero_axis(self, sampler: CurveSampler) -> None:
        """Test a zero-length major axis is rejected."""
        with pytest.raises(MalformedPrimitiveError):
            sampler.sample(Ellipse(Point3D(0, 0), Point3D(0, 0), 0.5))


class TestPolyline:
    """Tests for polyline and bulge sampling."""

    def test_open_polyline(self, sampler: CurveSampler) -> None:
        """Test an open polyline keeps its vertices."""
        poly = Polyline((PolylineVertex(0, 0), PolylineVertex(10, 0), PolylineVertex(10, 10)))
        curve = sampler.sample(poly)
        assert not curve.closed
        assert curve.points == (Point2D(0, 0), Point2D(10, 0), Point2D(10, 10))

    def test_closed_polyline(self, sampler: CurveSampler) -> None:
        """Test a closed polyline repeats its first vertex."""
        poly = Polyline(
            (
                PolylineVertex(0, 0),
                PolylineVertex(10, 0),
                PolylineVertex(10, 10),
                PolylineVertex(0, 10),
            ),
            closed=True,
        )
        curve = sampler.sample(poly)
        assert curve.closed
        assert curve.points[-1] == curve.points[0]
        assert curve.to_contour().signed_area() == pytest.approx(100.0)

    def test_two_vertex_closed_polyline_without_bulge(self, sampler: CurveSampler) -> None:
        """Test a closed polyline with two straight vertices encloses nothing."""
        poly = Polyline((PolylineVertex(0, 0), PolylineVertex(10, 0)), closed=True)
        curve = sampler.sample(poly)
        assert not curve.closed

    def test_bulge_semicircle_pair_is_circle(self, sampler: CurveSampler) -> None:
        """Test two bulge-1 edges form a full circle of diameter 10."""
        poly = Polyline(
            (PolylineVertex(0, 0, 1.0), PolylineVertex(10, 0, 1.0)),
            closed=True,
        )
        curve = sampler.sample(poly)
        assert curve.closed
        assert curve.to_contour().area() == pytest.approx(math.pi * 25.0, rel=1e-9)

    @pytest.mark.parametrize("bulge", [0.5, -0.5, 1.0])
    def test_bulge_arc_ends_on_vertices(self, sampler: CurveSampler, bulge: float) -> None:
        """Test bulge arcs start and end exactly on their vertices."""
        p1 = Point2D(1.0, 2.0)
        p2 = Point2D(7.0, 3.0)
        points, areas = sampler.bulge_arc(p1, p2, bulge)
        assert points[0] == p1
        assert points[-1] == p2
        assert len(areas) == len(points) - 1

    def test_positive_bulge_turns_counter_clockwise(self, sampler: CurveSampler) -> None:
        """Test a positive bulge of 1 is a counter-clockwise semicircle."""
        points, areas = sampler.bulge_arc(Point2D(0, 0), Point2D(10, 0), 1.0)
        # Walked left to right, a counter-clockwise half turn passes below the chord
        mid = points[len(points) // 2]
        assert mid.y == pytest.approx(-5.0, abs=1e-6)
        cap = Contour(points=points, area_correction=math.fsum(areas))
        assert cap.signed_area() == pytest.approx(math.pi * 25.0 / 2, rel=1e-9)

    def test_negative_bulge_mirrors(self, sampler: CurveSampler) -> None:
        """Test a negative bulge turns the other way."""
        points, areas = sampler.bulge_arc(Point2D(0, 0), Point2D(10, 0), -1.0)
        mid = points[len(points) // 2]
        assert mid.y == pytest.approx(5.0, abs=1e-6)
        cap = Contour(points=points, area_correction=math.fsum(areas))
        assert cap.signed_area() == pytest.approx(-math.pi * 25.0 / 2, rel=1e-9)

    def test_single_vertex(self, sampler: CurveSampler) -> None:
        """Test a one-vertex polyline is malformed."""
        with pytest.raises(MalformedPrimitiveError):
            sampler.sample(Polyline((PolylineVertex(0, 0),)))


class TestSpline:
    """Tests for B-spline and fit-point sampling."""

    def test_knotted_spline_ends_on_clamped_control_points(self, sampler: CurveSampler) -> None:
        """Test a clamped B-spline interpolates its first and last control points."""
        spline = Spline(
            control_points=(Point3D(0, 0), Point3D(5, 10), Point3D(10, -10), Point3D(15, 0)),
            degree=3,
            knots=(0, 0, 0, 0, 1, 1, 1, 1),
        )
        curve = sampler.sample(spline)
        assert curve.start.x == pytest.approx(0.0)
        assert curve.start.y == pytest.approx(0.0)
        assert curve.end.x == pytest.approx(15.0)
        assert curve.end.y == pytest.approx(0.0)
        assert len(curve.points) == 51

    def test_bad_knot_count(self, sampler: CurveSampler) -> None:
        """Test a knot vector of the wrong length is rejected."""
        spline = Spline(
            control_points=(Point3D(0, 0), Point3D(1, 1), Point3D(2, 0)),
            degree=2,
            knots=(0, 0, 1, 1),
        )
        with pytest.raises(MalformedPrimitiveError, match="knots"):
            sampler.sample(spline)

    def test_decreasing_knots(self, sampler: CurveSampler) -> None:
        """Test a decreasing knot vector is rejected."""
        spline = Spline(
            control_points=(Point3D(0, 0), Point3D(1, 1)),
            degree=1,
            knots=(0, 1, 0.5, 1),
        )
        with pytest.raises(MalformedPrimitiveError, match="non-decreasing"):
            sampler.sample(spline)

    def test_fit_points(self, sampler: CurveSampler) -> None:
        """Test a fit-point curve passes through its fit points."""
        spline = Spline(fit_points=(Point3D(0, 0), Point3D(5, 5), Point3D(10, 0)))
        curve = sampler.sample(spline)
        assert curve.start == Point2D(0, 0)
        assert curve.end.distance_to(Point2D(10, 0)) < 1e-9
        assert any(p.distance_to(Point2D(5, 5)) < 1e-9 for p in curve.points)

    def test_control_polygon_fallback(self, sampler: CurveSampler) -> None:
        """Test a spline without knots or fit points uses its control polygon."""
        spline = Spline(control_points=(Point3D(0, 0), Point3D(1, 0), Point3D(1, 1)))
        curve = sampler.sample(spline)
        assert curve.points == (Point2D(0, 0), Point2D(1, 0), Point2D(1, 1))

    def test_closed_spline(self, sampler: CurveSampler) -> None:
        """Test a closed spline is directly closed."""
        spline = Spline(
            control_points=(Point3D(0, 0), Point3D(10, 0), Point3D(10, 10), Point3D(0, 10)),
            closed=True,
        )
        curve = sampler.sample(spline)
        assert curve.closed
        assert curve.to_contour().area() == pytest.approx(100.0)

    def test_empty_spline(self, sampler: CurveSampler) -> None:
        """Test a spline with no geometry is malformed."""
        with pytest.raises(MalformedPrimitiveError):
            sampler.sample(Spline())


class TestBSplineHelpers:
    """Tests for the B-spline evaluation helpers."""

    def test_find_knot_span(self) -> None:
        """Test knot span lookup including the domain end."""
        knots = [0, 0, 0, 1, 2, 3, 3, 3]
        assert find_knot_span(0.5, 2, knots, 4) == 2
        assert find_knot_span(1.5, 2, knots, 4) == 3
        assert find_knot_span(3.0, 2, knots, 4) == 4

    def test_linear_bspline(self) -> None:
        """Test a degree 1 B-spline is its control polygon."""
        points = evaluate_bspline_curve(
            1, [Point2D(0, 0), Point2D(10, 0)], [0, 0, 1, 1], steps=10
        )
        assert len(points) == 11
        assert points[5].x == pytest.approx(5.0)

    def test_catmull_rom_interpolates(self) -> None:
        """Test Catmull-Rom passes through every fit point."""
        fit = [Point2D(0, 0), Point2D(3, 4), Point2D(6, 0), Point2D(9, 4)]
        points = catmull_rom_points(fit, 30)
        for f in fit:
            assert any(p.distance_to(f) < 1e-9 for p in points)


class TestRejection:
    """Tests for primitives the sampler refuses."""

    def test_non_finite(self, sampler: CurveSampler) -> None:
        """Test NaN coordinates are malformed."""
        with pytest.raises(MalformedPrimitiveError, match="non-finite"):
            sampler.sample(Line(Point3D(math.nan, 0), Point3D(1, 1)))

    def test_infinite_radius(self, sampler: CurveSampler) -> None:
        """Test infinite radius is malformed."""
        with pytest.raises(MalformedPrimitiveError):
            sampler.sample(Circle(Point3D(0, 0), math.inf))

    def test_missing_field(self, sampler: CurveSampler) -> None:
        """Test a primitive with a missing coordinate is malformed."""
        with pytest.raises(MalformedPrimitiveError):
            sampler.sample(Line(None, Point3D(1, 1)))  # type: ignore[arg-type]

    def test_zero_length_line(self, sampler: CurveSampler) -> None:
        """Test a line collapsing to one point is malformed."""
        with pytest.raises(MalformedPrimitiveError, match="single point"):
            sampler.sample(Line(Point3D(1, 1), Point3D(1, 1)))

    @pytest.mark.parametrize(
        "primitive", [PointEntity(Point3D(0, 0)), Insert("A", Point3D(0, 0))]
    )
    def test_unsupported(self, sampler: CurveSampler, primitive) -> None:
        """Test points and inserts carry no curve."""
        with pytest.raises(UnsupportedPrimitiveError):
            sampler.sample(primitive)


class TestSampledCurve:
    """Tests for SampledCurve conversions."""

    def test_split_halves(self, sampler: CurveSampler) -> None:
        """Test splitting a closed curve keeps every sample and the total correction."""
        curve = sampler.sample(Circle(Point3D(0, 0), 5.0))
        first, second = curve.split()

        assert first.end == second.start
        assert first.start == second.end
        assert first.is_closed and second.is_closed
        assert len(first.points) + len(second.points) == len(curve.points) + 1
        assert first.area_correction + second.area_correction == pytest.approx(
            math.fsum(curve.chord_areas)
        )
