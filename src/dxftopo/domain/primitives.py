"""Drawing primitives as decoded from a vector drawing file.

Each primitive type is its own frozen dataclass carrying only the fields
that type needs, so the sampler never has to probe for optional fields.
The union of all of them is the ``Primitive`` type.

All angles are in radians, measured counter-clockwise from +X.
"""

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import ClassVar

from dxftopo.domain.contour import Point3D
from dxftopo.domain.report import Diagnostic


class PrimitiveKind(str, Enum):
    """Tag of a primitive variant."""

    LINE = "line"
    ARC = "arc"
    CIRCLE = "circle"
    ELLIPSE = "ellipse"
    SPLINE = "spline"
    POLYLINE = "polyline"
    POINT = "point"
    INSERT = "insert"


@dataclass(frozen=True, slots=True)
class Line:
    """Straight segment between two points."""

    start: Point3D
    end: Point3D
    kind: ClassVar[PrimitiveKind] = PrimitiveKind.LINE

    def translated(self, offset: Point3D) -> "Line":
        return Line(self.start.translated(offset), self.end.translated(offset))

    def scalars(self) -> Iterator[float]:
        yield from self.start.to_tuple()
        yield from self.end.to_tuple()


@dataclass(frozen=True, slots=True)
class Arc:
    """Circular arc swept counter-clockwise from start_angle to end_angle."""

    center: Point3D
    radius: float
    start_angle: float
    end_angle: float
    kind: ClassVar[PrimitiveKind] = PrimitiveKind.ARC

    def translated(self, offset: Point3D) -> "Arc":
        return replace(self, center=self.center.translated(offset))

    def scalars(self) -> Iterator[float]:
        yield from self.center.to_tuple()
        yield self.radius
        yield self.start_angle
        yield self.end_angle


@dataclass(frozen=True, slots=True)
class Circle:
    """Full circle."""

    center: Point3D
    radius: float
    kind: ClassVar[PrimitiveKind] = PrimitiveKind.CIRCLE

    def translated(self, offset: Point3D) -> "Circle":
        return replace(self, center=self.center.translated(offset))

    def scalars(self) -> Iterator[float]:
        yield from self.center.to_tuple()
        yield self.radius


@dataclass(frozen=True, slots=True)
class Ellipse:
    """Ellipse or elliptical arc.

    Attributes:
        center: Center point
        major_axis: Vector from center to the end of the major axis
        axis_ratio: Minor radius divided by major radius
        start_param: Start parameter in radians
        end_param: End parameter in radians; 0.0 means a full turn
    """

    center: Point3D
    major_axis: Point3D
    axis_ratio: float
    start_param: float = 0.0
    end_param: float = 0.0
    kind: ClassVar[PrimitiveKind] = PrimitiveKind.ELLIPSE

    def translated(self, offset: Point3D) -> "Ellipse":
        # major_axis is a direction vector and does not move
        return replace(self, center=self.center.translated(offset))

    def scalars(self) -> Iterator[float]:
        yield from self.center.to_tuple()
        yield from self.major_axis.to_tuple()
        yield self.axis_ratio
        yield self.start_param
        yield self.end_param


@dataclass(frozen=True, slots=True)
class Spline:
    """Non-rational B-spline, or a fit-point curve when no knots are given."""

    control_points: tuple[Point3D, ...] = ()
    degree: int = 3
    knots: tuple[float, ...] = ()
    fit_points: tuple[Point3D, ...] = ()
    closed: bool = False
    kind: ClassVar[PrimitiveKind] = PrimitiveKind.SPLINE

    def translated(self, offset: Point3D) -> "Spline":
        return replace(
            self,
            control_points=tuple(p.translated(offset) for p in self.control_points),
            fit_points=tuple(p.translated(offset) for p in self.fit_points),
        )

    def scalars(self) -> Iterator[float]:
        for p in self.control_points:
            yield from p.to_tuple()
        for p in self.fit_points:
            yield from p.to_tuple()
        yield from self.knots


@dataclass(frozen=True, slots=True)
class PolylineVertex:
    """Polyline vertex; a non-zero bulge turns the edge to the next vertex into an arc."""

    x: float
    y: float
    bulge: float = 0.0


@dataclass(frozen=True, slots=True)
class Polyline:
    """Ordered vertices, optionally closed back to the first vertex."""

    vertices: tuple[PolylineVertex, ...]
    closed: bool = False
    kind: ClassVar[PrimitiveKind] = PrimitiveKind.POLYLINE

    def translated(self, offset: Point3D) -> "Polyline":
        return replace(
            self,
            vertices=tuple(
                PolylineVertex(v.x + offset.x, v.y + offset.y, v.bulge)
                for v in self.vertices
            ),
        )

    def scalars(self) -> Iterator[float]:
        for v in self.vertices:
            yield v.x
            yield v.y
            yield v.bulge


@dataclass(frozen=True, slots=True)
class PointEntity:
    """Single drawn point; carries no topology."""

    position: Point3D
    kind: ClassVar[PrimitiveKind] = PrimitiveKind.POINT

    def translated(self, offset: Point3D) -> "PointEntity":
        return PointEntity(self.position.translated(offset))

    def scalars(self) -> Iterator[float]:
        yield from self.position.to_tuple()


@dataclass(frozen=True, slots=True)
class Insert:
    """Reference to a named block placed at an insertion point.

    Only the insertion offset is applied during expansion; scale and
    rotation are kept so they can be reported.
    """

    block_name: str
    position: Point3D
    x_scale: float = 1.0
    y_scale: float = 1.0
    rotation: float = 0.0
    kind: ClassVar[PrimitiveKind] = PrimitiveKind.INSERT

    def translated(self, offset: Point3D) -> "Insert":
        return replace(self, position=self.position.translated(offset))

    def scalars(self) -> Iterator[float]:
        yield from self.position.to_tuple()

    def is_plain_translation(self) -> bool:
        return self.x_scale == 1.0 and self.y_scale == 1.0 and self.rotation == 0.0


Primitive = Line | Arc | Circle | Ellipse | Spline | Polyline | PointEntity | Insert

PRIMITIVE_TYPES: tuple[type, ...] = (
    Line,
    Arc,
    Circle,
    Ellipse,
    Spline,
    Polyline,
    PointEntity,
    Insert,
)

BlockTable = Mapping[str, Sequence[Primitive]]


@dataclass
class Drawing:
    """One decoded drawing: primitives, block definitions and decode notes.

    Attributes:
        name: Source name (usually the file path)
        primitives: Model-space primitives in file order
        blocks: Block definitions keyed by name, used to expand inserts
        diagnostics: Problems found while decoding
    """

    name: str
    primitives: list[Primitive]
    blocks: dict[str, list[Primitive]] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def is_empty(self) -> bool:
        return len(self.primitives) == 0
