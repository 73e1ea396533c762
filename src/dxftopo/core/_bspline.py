"""Internal spline evaluation algorithms.

This is an internal module containing helper functions for the curve
sampler. Not intended for public use.
"""

import math

from dxftopo.domain import Point2D

KNOT_EPSILON = 1e-10


def find_knot_span(t: float, degree: int, knots: list[float], n: int) -> int:
    """Find the knot span index containing parameter t.

    Returns the index i such that ``knots[i] <= t < knots[i + 1]``, with the
    last span closed at its upper end.

    Args:
        t: Parameter value, already clamped to the valid domain
        degree: Spline degree
        knots: Knot vector
        n: Number of control points minus one

    Returns:
        Knot span index in ``[degree, n]``
    """
    if t >= knots[n + 1]:
        return n
    if t <= knots[degree]:
        return degree

    low = degree
    high = n + 1
    mid = (low + high) // 2

    while t < knots[mid] or t >= knots[mid + 1]:
        if t < knots[mid]:
            high = mid
        else:
            low = mid
        mid = (low + high) // 2

    return mid


def evaluate_bspline(
    t: float,
    degree: int,
    control_points: list[Point2D],
    knots: list[float],
) -> Point2D:
    """Evaluate a B-spline at parameter t using De Boor's algorithm.

    Args:
        t: Parameter value (clamped into ``[knots[degree], knots[n + 1]]``)
        degree: Degree of the spline curve
        control_points: Control points
        knots: Knot vector of length ``len(control_points) + degree + 1``

    Returns:
        Point on the curve
    """
    n = len(control_points) - 1

    t_min = knots[degree]
    t_max = knots[n + 1]
    t = max(t_min, min(t_max, t))

    span = find_knot_span(t, degree, knots, n)

    # Local control-point window [span - degree .. span]
    xs: list[float] = []
    ys: list[float] = []
    for j in range(degree + 1):
        cp = control_points[max(0, min(n, span - degree + j))]
        xs.append(cp.x)
        ys.append(cp.y)

    for r in range(1, degree + 1):
        for j in range(degree, r - 1, -1):
            left = span - degree + j
            knot_left = knots[left]
            knot_right = knots[left + degree - r + 1]
            denom = knot_right - knot_left

            # Knot multiplicity: keep current point
            if abs(denom) < KNOT_EPSILON:
                continue

            alpha = (t - knot_left) / denom
            xs[j] = (1.0 - alpha) * xs[j - 1] + alpha * xs[j]
            ys[j] = (1.0 - alpha) * ys[j - 1] + alpha * ys[j]

    return Point2D(xs[degree], ys[degree])


def evaluate_bspline_curve(
    degree: int,
    control_points: list[Point2D],
    knots: list[float],
    steps: int,
) -> list[Point2D]:
    """Sample a B-spline at ``steps + 1`` evenly spaced parameters.

    Args:
        degree: Degree of the spline curve
        control_points: Control points
        knots: Knot vector
        steps: Number of parameter intervals

    Returns:
        List of evaluated points from the start to the end of the domain
    """
    n = len(control_points) - 1
    t_min = knots[degree]
    t_max = knots[n + 1]

    return [
        evaluate_bspline(t_min + (i / steps) * (t_max - t_min), degree, control_points, knots)
        for i in range(steps + 1)
    ]


def _centripetal_coefficients(
    x0: float, x1: float, x2: float, x3: float, dt0: float, dt1: float, dt2: float
) -> tuple[float, float, float, float]:
    """Cubic coefficients of one non-uniform Catmull-Rom span from x1 to x2."""
    t1 = (x1 - x0) / dt0 - (x2 - x0) / (dt0 + dt1) + (x2 - x1) / dt1
    t2 = (x2 - x1) / dt1 - (x3 - x1) / (dt1 + dt2) + (x3 - x2) / dt2
    t1 *= dt1
    t2 *= dt1
    return (
        x1,
        t1,
        -3.0 * x1 + 3.0 * x2 - 2.0 * t1 - t2,
        2.0 * x1 - 2.0 * x2 + t1 + t2,
    )


def catmull_rom_points(fit_points: list[Point2D], divisions: int) -> list[Point2D]:
    """Interpolate fit points with an open centripetal Catmull-Rom curve.

    The curve passes through every fit point. Missing neighbours at the two
    ends are extrapolated by reflection.

    Args:
        fit_points: Points the curve must pass through (at least 2)
        divisions: Number of intervals over the whole curve

    Returns:
        ``divisions + 1`` points from the first to the last fit point
    """
    m = len(fit_points)
    result: list[Point2D] = []

    for d in range(divisions + 1):
        p = (m - 1) * (d / divisions)
        index = int(math.floor(p))
        weight = p - index
        if index >= m - 1:
            index = m - 2
            weight = 1.0

        p1 = fit_points[index]
        p2 = fit_points[index + 1]
        if index > 0:
            p0 = fit_points[index - 1]
        else:
            p0 = Point2D(2.0 * p1.x - p2.x, 2.0 * p1.y - p2.y)
        if index + 2 < m:
            p3 = fit_points[index + 2]
        else:
            p3 = Point2D(2.0 * p2.x - p1.x, 2.0 * p2.y - p1.y)

        dt0 = math.hypot(p1.x - p0.x, p1.y - p0.y) ** 0.5
        dt1 = math.hypot(p2.x - p1.x, p2.y - p1.y) ** 0.5
        dt2 = math.hypot(p3.x - p2.x, p3.y - p2.y) ** 0.5

        if dt1 < 1e-4:
            dt1 = 1.0
        if dt0 < 1e-4:
            dt0 = dt1
        if dt2 < 1e-4:
            dt2 = dt1

        cx = _centripetal_coefficients(p0.x, p1.x, p2.x, p3.x, dt0, dt1, dt2)
        cy = _centripetal_coefficients(p0.y, p1.y, p2.y, p3.y, dt0, dt1, dt2)
        w2 = weight * weight
        w3 = w2 * weight
        result.append(
            Point2D(
                cx[0] + cx[1] * weight + cx[2] * w2 + cx[3] * w3,
                cy[0] + cy[1] * weight + cy[2] * w2 + cy[3] * w3,
            )
        )

    return result
