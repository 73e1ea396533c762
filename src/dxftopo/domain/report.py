"""Result records produced by a topology pass.

These are plain containers: diagnostics for skipped input, validation
issues on recovered contours, the area summary and the full results for
the area and extrusion use cases.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from dxftopo.domain.contour import Contour, Segment, Shape


class Severity(str, Enum):
    """How serious a diagnostic is."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """Why one primitive or decoded record was skipped or altered.

    Attributes:
        index: Position of the primitive in the input list (None if not applicable)
        kind: Primitive or entity type name
        reason: Human-readable explanation
        severity: INFO for ignored types, WARNING for skipped geometry
    """

    index: int | None
    kind: str
    reason: str
    severity: Severity = Severity.WARNING

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "kind": self.kind,
            "reason": self.reason,
            "severity": self.severity.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Diagnostic":
        return cls(
            index=data["index"],
            kind=data["kind"],
            reason=data["reason"],
            severity=Severity(data["severity"]),
        )


class IssueCode(str, Enum):
    """Manufacturability problems found on recovered contours."""

    HOLE_TOO_SMALL = "hole_too_small"
    FLOATING_PIECE = "floating_piece"


@dataclass(frozen=True)
class ValidationIssue:
    """A problem with one recovered contour.

    Attributes:
        code: Issue category
        message: Human-readable explanation
        contour_index: Index into the result's contour list
    """

    code: IssueCode
    message: str
    contour_index: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "contour_index": self.contour_index,
        }


@dataclass
class AreaSummary:
    """Aggregate measurements of one drawing.

    Attributes:
        total_area: Reported area under the configured metric
        outer_area: Area of the outer boundary (largest contour)
        net_area: Material minus voids, for reference only
        material_count: Contours at even depth
        hole_count: Contours at odd depth
        island_count: Material contours at depth 2 or deeper
        pierce_count: Closed loops a cutter must pierce
        width: Extents along X of all extracted geometry
        height: Extents along Y of all extracted geometry
    """

    total_area: float = 0.0
    outer_area: float = 0.0
    net_area: float = 0.0
    material_count: int = 0
    hole_count: int = 0
    island_count: int = 0
    pierce_count: int = 0
    width: float = 0.0
    height: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_area": self.total_area,
            "outer_area": self.outer_area,
            "net_area": self.net_area,
            "material_count": self.material_count,
            "hole_count": self.hole_count,
            "island_count": self.island_count,
            "pierce_count": self.pierce_count,
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AreaSummary":
        return cls(**data)


@dataclass
class TopologyResult:
    """Everything recovered from one drawing for the area use case.

    Attributes:
        contours: Closed contours with resolved depth, largest first
        outer_index: Index of the outer boundary in contours (None if none)
        summary: Aggregate measurements
        strategy: Name of the contour strategy that produced the contours
        open_segments: Open segments that are not part of any contour
        diagnostics: Skipped or altered primitives
        issues: Manufacturability issues
    """

    contours: list[Contour]
    outer_index: int | None
    summary: AreaSummary
    strategy: str
    open_segments: list[Segment] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def total_area(self) -> float:
        return self.summary.total_area

    @property
    def outer_boundary(self) -> Contour | None:
        if self.outer_index is None:
            return None
        return self.contours[self.outer_index]

    def has_geometry(self) -> bool:
        return len(self.contours) > 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC (open segments are counted, not copied)."""
        return {
            "contours": [c.to_dict() for c in self.contours],
            "outer_index": self.outer_index,
            "summary": self.summary.to_dict(),
            "strategy": self.strategy,
            "open_segment_count": len(self.open_segments),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "issues": [i.to_dict() for i in self.issues],
        }


@dataclass
class ShapeSet:
    """Extrusion-ready shapes plus the open segments left over.

    Attributes:
        shapes: Material contours with their direct holes
        unused_segments: Open segments no closed chain could use; render as strokes
        strategy: Name of the contour strategy used
        diagnostics: Skipped or altered primitives
    """

    shapes: list[Shape]
    unused_segments: list[Segment] = field(default_factory=list)
    strategy: str = ""
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.shapes


@dataclass
class StrategyComparison:
    """Outcome of running both contour strategies on the same input.

    Attributes:
        graph_areas: Contour areas from graph traversal, largest first
        chain_areas: Contour areas from chain assembly, largest first
        graph_unused: Open segments graph traversal left unused
        chain_unused: Open segments chain assembly left unused
        diverged: True when contour counts or areas disagree
        tolerance: Relative tolerance used to compare areas
    """

    graph_areas: list[float]
    chain_areas: list[float]
    graph_unused: int
    chain_unused: int
    diverged: bool
    tolerance: float

    def describe(self) -> str:
        if not self.diverged:
            return f"strategies agree on {len(self.graph_areas)} contours"
        return (
            f"graph found {len(self.graph_areas)} contours "
            f"({self.graph_unused} unused segments), "
            f"chain found {len(self.chain_areas)} contours "
            f"({self.chain_unused} unused segments)"
        )
