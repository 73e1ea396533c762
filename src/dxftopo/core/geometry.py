"""Geometric operations shared by the topology stages.

This module provides core mathematical utilities for:
- Signed area calculation (shoelace formula)
- Sample clean-up and bounding boxes
- Chord-to-arc area corrections for circular and elliptical curves

All functions are pure and stateless.
"""

import math

from dxftopo.domain import Point2D, polygon_signed_area

TAU = 2.0 * math.pi


def signed_area(points: list[Point2D]) -> float:
    """Calculate signed area of a polygon using the shoelace formula.

    The sign of the area indicates winding direction:
    - Positive area: counter-clockwise winding
    - Negative area: clockwise winding

    Args:
        points: List of points forming the polygon boundary

    Returns:
        Signed area in square units. Returns 0.0 for degenerate polygons.

    Examples:
        >>> p1 = Point2D(0.0, 0.0)
        >>> p2 = Point2D(1.0, 0.0)
        >>> p3 = Point2D(1.0, 1.0)
        >>> p4 = Point2D(0.0, 1.0)
        >>> signed_area([p1, p2, p3, p4])  # CCW square
        1.0
        >>> signed_area([p1, p4, p3, p2])  # CW square
        -1.0
    """
    return polygon_signed_area(points)


def distance(a: Point2D, b: Point2D) -> float:
    """Euclidean distance between two points."""
    return math.hypot(a.x - b.x, a.y - b.y)


def dedupe_consecutive(
    points: list[Point2D],
    chord_areas: list[float] | None = None,
    epsilon: float = 1e-9,
) -> tuple[list[Point2D], list[float]]:
    """Drop samples that repeat their predecessor.

    Chord areas of removed zero-length chords are folded into the
    preceding chord so the total correction is preserved.

    Args:
        points: Ordered samples
        chord_areas: One value per consecutive pair (defaults to zeros)
        epsilon: Distance at or below which two samples are the same

    Returns:
        Tuple of (points, chord_areas) without repeated samples
    """
    if chord_areas is None:
        chord_areas = [0.0] * max(len(points) - 1, 0)
    if not points:
        return [], []

    kept = [points[0]]
    kept_areas: list[float] = []
    carry = 0.0
    for i in range(1, len(points)):
        if distance(points[i], kept[-1]) <= epsilon:
            carry += chord_areas[i - 1]
            continue
        kept.append(points[i])
        kept_areas.append(chord_areas[i - 1] + carry)
        carry = 0.0

    if carry and kept_areas:
        kept_areas[-1] += carry
    return kept, kept_areas


def circular_chord_area(radius: float, delta: float) -> float:
    """Signed area between a chord and the circular arc it cuts off.

    Positive when the arc turns counter-clockwise about its center
    (``delta > 0``), negative when it turns clockwise.

    Args:
        radius: Circle radius
        delta: Angle subtended by the chord, signed by sweep direction

    Returns:
        Signed circular-segment area, ``r^2 / 2 * (delta - sin(delta))``
    """
    return 0.5 * radius * radius * (delta - math.sin(delta))


def elliptical_chord_area(major: float, minor: float, delta: float) -> float:
    """Signed area between a chord and an elliptical arc spanning ``delta`` parameter."""
    return 0.5 * major * minor * (delta - math.sin(delta))


def normalize_sweep(start: float, end: float) -> float:
    """Counter-clockwise sweep from start to end, in (0, 2*pi]."""
    sweep = end - start
    if sweep <= 0:
        sweep += TAU
    return sweep


def bounding_box(points: list[Point2D]) -> tuple[float, float, float, float] | None:
    """(min_x, min_y, max_x, max_y) of the points, or None when empty."""
    if not points:
        return None
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return (min(xs), min(ys), max(xs), max(ys))
