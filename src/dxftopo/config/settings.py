"""Configuration settings for dxftopo."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class NodeMergeMode(str, Enum):
    """How near-coincident endpoints are merged into graph nodes."""

    UNION_FIND = "union_find"
    FIRST_MATCH = "first_match"


class AreaMetric(str, Enum):
    """Which contours contribute to the reported piece area."""

    TOP_LEVEL = "top_level"
    OUTER_BOUNDARY = "outer_boundary"
    NET = "net"


class ContourStrategyName(str, Enum):
    """Algorithm used to close open segments into contours."""

    GRAPH = "graph"
    CHAIN = "chain"


class SamplingConfig(BaseModel):
    """Configuration for turning curves into point sequences."""

    circle_segments: int = Field(
        default=64,
        ge=8,
        le=1024,
        description="Points sampled around a full circle or ellipse",
    )
    arc_min_segments: int = Field(
        default=32,
        ge=4,
        le=1024,
        description="Minimum chords for an open arc (scaled up with sweep)",
    )
    full_turn_tolerance: float = Field(
        default=0.01,
        gt=0.0,
        le=0.5,
        description="Radians within which an arc or ellipse sweep counts as a full turn",
    )
    bulge_min_segments: int = Field(
        default=8,
        ge=1,
        le=256,
        description="Minimum chords for a polyline bulge arc",
    )
    spline_min_samples: int = Field(
        default=50,
        ge=4,
        le=10000,
        description="Minimum parameter steps when evaluating a B-spline",
    )
    spline_samples_per_control_point: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Parameter steps per control point when evaluating a B-spline",
    )
    fit_point_samples: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Samples per fit point for splines without a knot vector",
    )


class GeometryConfig(BaseModel):
    """Configuration for endpoint matching and graph construction."""

    endpoint_tolerance: float = Field(
        default=0.5,
        gt=0.0,
        le=100.0,
        description="Distance below which two endpoints are the same node",
    )
    node_merge: NodeMergeMode = Field(
        default=NodeMergeMode.UNION_FIND,
        description="Endpoint merge algorithm",
    )
    duplicate_point_epsilon: float = Field(
        default=1e-9,
        ge=0.0,
        le=1e-3,
        description="Consecutive samples closer than this are collapsed",
    )
    close_self_loops: bool = Field(
        default=False,
        description="Treat an open curve whose ends meet as a closed contour instead of dropping it",
    )


class TopologyConfig(BaseModel):
    """Configuration for contour recovery and area reporting."""

    area_metric: AreaMetric = Field(
        default=AreaMetric.TOP_LEVEL,
        description="Contours that contribute to the reported area",
    )
    area_strategy: ContourStrategyName = Field(
        default=ContourStrategyName.GRAPH,
        description="Contour strategy used for area reporting",
    )
    shape_strategy: ContourStrategyName = Field(
        default=ContourStrategyName.CHAIN,
        description="Contour strategy used for extrusion shapes",
    )
    max_insert_depth: int = Field(
        default=16,
        ge=1,
        le=256,
        description="Maximum nesting of block references",
    )


class ValidationConfig(BaseModel):
    """Configuration for manufacturability checks on recovered contours."""

    min_hole_diameter: float = Field(
        default=1.0,
        ge=0.0,
        description="Holes with a smaller equivalent diameter are reported",
    )
    report_floating_pieces: bool = Field(
        default=True,
        description="Report material islands that sit inside holes",
    )


class ProcessingConfig(BaseModel):
    """Configuration for batch processing."""

    max_workers: int | None = Field(
        default=None,
        description="Max worker processes (None = auto)",
    )
    max_primitives: int | None = Field(
        default=None,
        ge=1,
        description="Reject drawings with more primitives than this (None = no cap)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class TopologySettings(BaseModel):
    """Main application settings."""

    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    topology: TopologyConfig = Field(default_factory=TopologyConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> TopologySettings:
    """Get default application settings."""
    return TopologySettings()
