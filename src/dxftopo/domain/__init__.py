"""Domain models for dxftopo.

This module contains the core domain models representing drawing
primitives, sampled segments, recovered contours and the records a
topology pass reports. All models are designed to be:

- Immutable where possible (using frozen dataclasses)
- Serializable for inter-process communication (batch processing)
- Independent of the drawing-file decoder

Key classes:
- Line, Arc, Circle, Ellipse, Spline, Polyline, PointEntity, Insert: Primitives
- Point2D / Point3D: Coordinates
- Segment: Sampled open primitive
- Contour: Closed loop with signed area and depth
- Shape: Material contour with its holes
- PlanarGraph, Node, DirectedEdge: Graph records
- TopologyResult, ShapeSet: Pass results
"""

from dxftopo.domain.contour import (
    Contour,
    ContourSource,
    Point2D,
    Point3D,
    Segment,
    Shape,
    WindingDirection,
    polygon_signed_area,
)
from dxftopo.domain.graph import DirectedEdge, Node, PlanarGraph, twin
from dxftopo.domain.primitives import (
    PRIMITIVE_TYPES,
    Arc,
    BlockTable,
    Circle,
    Drawing,
    Ellipse,
    Insert,
    Line,
    PointEntity,
    Polyline,
    PolylineVertex,
    Primitive,
    PrimitiveKind,
    Spline,
)
from dxftopo.domain.report import (
    AreaSummary,
    Diagnostic,
    IssueCode,
    Severity,
    ShapeSet,
    StrategyComparison,
    TopologyResult,
    ValidationIssue,
)

__all__: list[str] = [
    # Enums
    "ContourSource",
    "IssueCode",
    "PrimitiveKind",
    "Severity",
    "WindingDirection",
    # Primitives
    "PRIMITIVE_TYPES",
    "Arc",
    "BlockTable",
    "Circle",
    "Drawing",
    "Ellipse",
    "Insert",
    "Line",
    "PointEntity",
    "Polyline",
    "PolylineVertex",
    "Primitive",
    "Spline",
    # Geometry
    "Contour",
    "Point2D",
    "Point3D",
    "Segment",
    "Shape",
    "polygon_signed_area",
    # Graph
    "DirectedEdge",
    "Node",
    "PlanarGraph",
    "twin",
    # Results
    "AreaSummary",
    "Diagnostic",
    "ShapeSet",
    "StrategyComparison",
    "TopologyResult",
    "ValidationIssue",
]
