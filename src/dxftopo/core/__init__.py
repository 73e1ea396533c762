"""Core topology algorithms for dxftopo.

This module contains the core algorithms for:

- Curve sampling (arcs, ellipses, bulges, B-splines, fit-point curves)
- Block reference expansion
- Segment extraction (directly closed vs open primitives)
- Planar graph construction and face traversal
- Greedy chain assembly
- Nesting resolution and area reporting

All stages are designed to be:
- Stateless apart from their configuration (safe for use in worker processes)
- Pure with respect to their inputs

Key functions:
- signed_area: Calculate polygon area using shoelace formula
- expand_inserts: Replace block references with block content
- compare_strategies: Run both contour strategies and compare them

Key classes:
- CurveSampler: Turns primitives into samples
- SegmentExtractor: Separates closed curves from open segments
- PlanarGraphBuilder / FaceTraverser: Graph-based contour recovery
- ChainAssembler: Greedy contour recovery
- NestingResolver: Depth and parent of every contour
- AreaReporter: Area metrics, counts and validation issues
- TopologyEngine: Runs one full pass
- DrawingProcessor: Analyzes many drawing files in parallel
"""

from dxftopo.core.blocks import ExpansionResult, InsertExpander, expand_inserts
from dxftopo.core.chain import ChainAssembler, ChainResult
from dxftopo.core.extractor import ExtractionResult, SegmentExtractor
from dxftopo.core.faces import Face, FaceTraverser
from dxftopo.core.geometry import signed_area
from dxftopo.core.graph import PlanarGraphBuilder
from dxftopo.core.nesting import ContourHierarchy, NestingResolver, build_shapes
from dxftopo.core.processor import (
    DrawingProcessor,
    DrawingReport,
    TopologyEngine,
    process_drawing,
)
from dxftopo.core.reporter import AreaReporter
from dxftopo.core.sampler import CurveSampler, SampledCurve
from dxftopo.core.strategy import (
    ChainAssemblyStrategy,
    ContourStrategy,
    GraphTraversalStrategy,
    StrategyOutput,
    compare_strategies,
)

__all__ = [
    # Reporting
    "AreaReporter",
    # Chain assembly
    "ChainAssembler",
    "ChainAssemblyStrategy",
    "ChainResult",
    # Nesting
    "ContourHierarchy",
    "ContourStrategy",
    "CurveSampler",
    # Processor classes
    "DrawingProcessor",
    "DrawingReport",
    "ExpansionResult",
    "ExtractionResult",
    # Graph traversal
    "Face",
    "FaceTraverser",
    "GraphTraversalStrategy",
    "InsertExpander",
    "NestingResolver",
    "PlanarGraphBuilder",
    "SampledCurve",
    "SegmentExtractor",
    "StrategyOutput",
    "TopologyEngine",
    "build_shapes",
    "compare_strategies",
    "expand_inserts",
    "process_drawing",
    # Geometry functions
    "signed_area",
]
