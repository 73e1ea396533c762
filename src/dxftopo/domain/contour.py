"""Core geometric types for contour representation.

This module defines the fundamental geometric types used throughout dxftopo:
- Point2D / Point3D: Plain coordinates, compared only via distance
- Segment: The sampled form of one open (or split closed) primitive
- Contour: A closed loop of points with signed area and nesting depth
- Shape: A material contour plus the holes directly inside it
- WindingDirection: Enum for contour winding direction
"""

import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from dxftopo.exceptions import ContourError


class WindingDirection(Enum):
    """Contour winding direction.

    Signed area is positive for counter-clockwise loops. Recovered contours
    are normalized to counter-clockwise; holes handed to a Shape wind
    clockwise.
    """

    CLOCKWISE = auto()
    COUNTER_CLOCKWISE = auto()


class ContourSource(Enum):
    """Where a contour came from."""

    CLOSED_PRIMITIVE = auto()
    GRAPH_FACE = auto()
    CHAIN = auto()


@dataclass(frozen=True, slots=True)
class Point2D:
    """A point in the drawing plane.

    Attributes:
        x: X coordinate in drawing units
        y: Y coordinate in drawing units
    """

    x: float
    y: float

    def distance_to(self, other: "Point2D") -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple."""
        return (self.x, self.y)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Point2D":
        """Deserialize from dictionary."""
        return cls(x=data["x"], y=data["y"])


@dataclass(frozen=True, slots=True)
class Point3D:
    """A point or vector as decoded from the drawing file.

    Attributes:
        x: X coordinate in drawing units
        y: Y coordinate in drawing units
        z: Z coordinate in drawing units (ignored by the planar topology)
    """

    x: float
    y: float
    z: float = 0.0

    def translated(self, offset: "Point3D") -> "Point3D":
        """Return this point moved by an offset vector."""
        return Point3D(self.x + offset.x, self.y + offset.y, self.z + offset.z)

    def to_2d(self) -> Point2D:
        """Drop the Z coordinate."""
        return Point2D(self.x, self.y)

    def to_tuple(self) -> tuple[float, float, float]:
        """Convert to simple (x, y, z) tuple."""
        return (self.x, self.y, self.z)


def polygon_signed_area(points: list[Point2D]) -> float:
    """Shoelace signed area of an implicitly closed point loop.

    Positive for counter-clockwise loops, 0.0 for fewer than 3 points.
    """
    n = len(points)
    if n < 3:
        return 0.0

    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += points[i].x * points[j].y
        area -= points[j].x * points[i].y

    return area / 2.0


@dataclass(frozen=True)
class Segment:
    """The sampled representation of one open primitive.

    Attributes:
        points: Ordered samples from start to end (at least 2)
        chord_areas: For each consecutive pair of samples, the signed area
            between the straight chord and the true curve when walked from
            start to end. Zero for straight edges and for curves without a
            closed form.
        source_index: Index of the primitive this segment was sampled from
        is_closed: True for halves of a directly-closed primitive
    """

    points: tuple[Point2D, ...]
    chord_areas: tuple[float, ...] = ()
    source_index: int | None = None
    is_closed: bool = False

    def __post_init__(self) -> None:
        if len(self.points) < 2:
            raise ContourError(f"Segment needs at least 2 points, got {len(self.points)}")
        if not self.chord_areas:
            object.__setattr__(self, "chord_areas", (0.0,) * (len(self.points) - 1))
        elif len(self.chord_areas) != len(self.points) - 1:
            raise ContourError(
                f"Segment has {len(self.points)} points but {len(self.chord_areas)} chord areas"
            )

    @property
    def start(self) -> Point2D:
        return self.points[0]

    @property
    def end(self) -> Point2D:
        return self.points[-1]

    @property
    def area_correction(self) -> float:
        """Total signed chord-to-curve area walked from start to end."""
        return math.fsum(self.chord_areas)

    def reversed(self) -> "Segment":
        """Return the same segment walked from end to start."""
        return Segment(
            points=tuple(reversed(self.points)),
            chord_areas=tuple(-a for a in reversed(self.chord_areas)),
            source_index=self.source_index,
            is_closed=self.is_closed,
        )

    def length(self) -> float:
        """Polyline length of the samples."""
        return sum(
            self.points[i].distance_to(self.points[i + 1])
            for i in range(len(self.points) - 1)
        )


@dataclass
class Contour:
    """A closed loop of points bounding a region.

    The loop is implicit: the last point connects back to the first and is
    not repeated.

    Attributes:
        points: List of points forming the loop
        area_correction: Signed area between the sampled chords and the true
            curves along the loop, added to the shoelace area
        source: Which algorithm produced the contour
        source_indices: Primitive indices that contributed to the loop
        depth: Nesting depth (None until resolved; even = material, odd = void)
    """

    points: list[Point2D]
    area_correction: float = 0.0
    source: ContourSource = ContourSource.CLOSED_PRIMITIVE
    source_indices: tuple[int, ...] = ()
    depth: int | None = None
    _cached_area: float | None = field(default=None, repr=False, init=False)
    _cached_bbox: tuple[float, float, float, float] | None = field(
        default=None, repr=False, init=False
    )
    _cached_centroid: Point2D | None = field(default=None, repr=False, init=False)

    def signed_area(self) -> float:
        """Calculate signed area using the shoelace formula.

        The sign of the area indicates winding direction:
        - Positive area: counter-clockwise winding
        - Negative area: clockwise winding

        Curved edges add their chord corrections so circles and arcs report
        their exact area. Result is cached.

        Returns:
            Signed area of the contour
        """
        if self._cached_area is not None:
            return self._cached_area

        if len(self.points) < 3:
            self._cached_area = 0.0
        else:
            self._cached_area = polygon_signed_area(self.points) + self.area_correction
        return self._cached_area

    def area(self) -> float:
        """Absolute enclosed area."""
        return abs(self.signed_area())

    @property
    def direction(self) -> WindingDirection:
        """Winding direction derived from the signed area."""
        if self.signed_area() < 0:
            return WindingDirection.CLOCKWISE
        return WindingDirection.COUNTER_CLOCKWISE

    def bounding_box(self) -> tuple[float, float, float, float]:
        """Calculate bounding box of the contour.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y)
        """
        if self._cached_bbox is not None:
            return self._cached_bbox

        if not self.points:
            self._cached_bbox = (0.0, 0.0, 0.0, 0.0)
            return self._cached_bbox

        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]

        self._cached_bbox = (min(xs), min(ys), max(xs), max(ys))
        return self._cached_bbox

    def centroid(self) -> Point2D:
        """Area centroid of the sampled polygon.

        Falls back to the vertex average when the polygon has no area.
        """
        if self._cached_centroid is not None:
            return self._cached_centroid

        n = len(self.points)
        if n == 0:
            self._cached_centroid = Point2D(0.0, 0.0)
            return self._cached_centroid

        cross_sum = 0.0
        cx = 0.0
        cy = 0.0
        for i in range(n):
            p = self.points[i]
            q = self.points[(i + 1) % n]
            cross = p.x * q.y - q.x * p.y
            cross_sum += cross
            cx += (p.x + q.x) * cross
            cy += (p.y + q.y) * cross

        if abs(cross_sum) < 1e-12:
            self._cached_centroid = Point2D(
                sum(p.x for p in self.points) / n,
                sum(p.y for p in self.points) / n,
            )
        else:
            self._cached_centroid = Point2D(cx / (3.0 * cross_sum), cy / (3.0 * cross_sum))
        return self._cached_centroid

    def contains_point(self, x: float, y: float) -> bool:
        """Check if point is inside contour using ray casting algorithm.

        Casts a ray from the point to the right and counts intersections
        with contour edges. Odd count means inside, even means outside.
        """
        n = len(self.points)
        if n < 3:
            return False

        inside = False
        j = n - 1

        for i in range(n):
            xi, yi = self.points[i].x, self.points[i].y
            xj, yj = self.points[j].x, self.points[j].y

            if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi) + xi):
                inside = not inside

            j = i

        return inside

    def reversed(self) -> "Contour":
        """Return the same loop with opposite winding."""
        return Contour(
            points=list(reversed(self.points)),
            area_correction=-self.area_correction,
            source=self.source,
            source_indices=self.source_indices,
            depth=self.depth,
        )

    def normalized(self, direction: WindingDirection = WindingDirection.COUNTER_CLOCKWISE) -> "Contour":
        """Return this contour wound in the requested direction."""
        if self.direction == direction:
            return self
        return self.reversed()

    def is_material(self) -> bool:
        """Even depth is solid material, odd depth is a void."""
        return self.depth is not None and self.depth % 2 == 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary representation of the contour
        """
        return {
            "points": [p.to_dict() for p in self.points],
            "area_correction": self.area_correction,
            "source": self.source.name,
            "source_indices": list(self.source_indices),
            "depth": self.depth,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Contour":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a contour

        Returns:
            Contour instance
        """
        return cls(
            points=[Point2D.from_dict(p) for p in data["points"]],
            area_correction=data.get("area_correction", 0.0),
            source=ContourSource[data.get("source", "CLOSED_PRIMITIVE")],
            source_indices=tuple(data.get("source_indices", ())),
            depth=data.get("depth"),
        )


@dataclass
class Shape:
    """A material contour plus the holes nested directly inside it.

    The unit handed to extrusion or rendering. The outer loop winds
    counter-clockwise and every hole winds clockwise.

    Attributes:
        outer: Material contour (even depth)
        holes: Void contours one level deeper whose centroid lies inside outer
    """

    outer: Contour
    holes: list[Contour] = field(default_factory=list)

    @property
    def depth(self) -> int:
        return self.outer.depth or 0

    def gross_area(self) -> float:
        """Area of the outer loop, holes not subtracted."""
        return self.outer.area()

    def net_area(self) -> float:
        """Area of the outer loop minus its holes."""
        return self.outer.area() - sum(h.area() for h in self.holes)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {
            "outer": self.outer.to_dict(),
            "holes": [h.to_dict() for h in self.holes],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Shape":
        """Deserialize from dictionary."""
        return cls(
            outer=Contour.from_dict(data["outer"]),
            holes=[Contour.from_dict(h) for h in data["holes"]],
        )
