"""Topology pipeline orchestration.

This module wires the stages together for one drawing and runs many
drawings in parallel.

Key components:
- TopologyEngine: Runs one pass (expand, extract, close, nest, report)
- process_drawing: Top-level picklable function for parallel execution
- DrawingProcessor: Analyzes drawing files with ProcessPoolExecutor
"""

import time
import traceback
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from dxftopo.config import ContourStrategyName, TopologySettings, get_default_settings
from dxftopo.core.blocks import InsertExpander
from dxftopo.core.chain import ChainAssembler
from dxftopo.core.extractor import ExtractionResult, SegmentExtractor
from dxftopo.core.graph import PlanarGraphBuilder
from dxftopo.core.nesting import NestingResolver, build_shapes
from dxftopo.core.reporter import AreaReporter
from dxftopo.core.sampler import CurveSampler
from dxftopo.core.strategy import (
    ChainAssemblyStrategy,
    ContourStrategy,
    GraphTraversalStrategy,
    compare_strategies,
)
from dxftopo.domain import (
    AreaSummary,
    BlockTable,
    Diagnostic,
    Drawing,
    Primitive,
    Severity,
    ShapeSet,
    StrategyComparison,
    TopologyResult,
)
from dxftopo.exceptions import DrawingTooLargeError, InvalidInputError
from dxftopo.io import DrawingReader
from dxftopo.utils import AnalysisLogger, ProcessingStats, configure_logging


class TopologyEngine:
    """Recovers closed contours and their nesting from drawing primitives.

    One call is one pass over one primitive list; nothing is kept between
    calls, so an engine can be shared across drawings.

    Example:
        engine = TopologyEngine()
        result = engine.analyze(primitives, blocks)
        print(result.total_area)
    """

    def __init__(
        self,
        settings: TopologySettings | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize engine and its stages.

        Args:
            settings: Settings (defaults if None)
            logger: Structured logger (module logger if None)
        """
        self.settings = settings or get_default_settings()
        self.logger = logger or structlog.get_logger("dxftopo")

        tolerance = self.settings.geometry.endpoint_tolerance
        self.sampler = CurveSampler(
            self.settings.sampling, self.settings.geometry.duplicate_point_epsilon
        )
        self.extractor = SegmentExtractor(
            self.sampler, tolerance, self.logger, self.settings.geometry.close_self_loops
        )
        self.graph_strategy = GraphTraversalStrategy(
            PlanarGraphBuilder(tolerance, self.settings.geometry.node_merge)
        )
        self.chain_strategy = ChainAssemblyStrategy(ChainAssembler(tolerance))
        self.resolver = NestingResolver()
        self.reporter = AreaReporter(self.settings.topology.area_metric, self.settings.validation)

    def strategy(self, name: ContourStrategyName | str) -> ContourStrategy:
        """Strategy instance for a name."""
        if ContourStrategyName(name) == ContourStrategyName.CHAIN:
            return self.chain_strategy
        return self.graph_strategy

    def extract(
        self,
        primitives: Sequence[Primitive],
        blocks: BlockTable | None = None,
    ) -> ExtractionResult:
        """Expand inserts, sample primitives and split closed from open geometry.

        Args:
            primitives: Primitives of one drawing
            blocks: Block definitions for insert expansion

        Returns:
            ExtractionResult carrying expansion and sampling diagnostics

        Raises:
            InvalidInputError: If primitives is not a list or blocks not a mapping
            DrawingTooLargeError: If the primitive count exceeds the configured cap
        """
        if not isinstance(primitives, (list, tuple)):
            raise InvalidInputError(
                f"primitives must be a list, got {type(primitives).__name__}"
            )
        if blocks is not None and not isinstance(blocks, Mapping):
            raise InvalidInputError(f"blocks must be a mapping, got {type(blocks).__name__}")

        limit = self.settings.processing.max_primitives
        if limit is not None and len(primitives) > limit:
            raise DrawingTooLargeError(len(primitives), limit)

        expansion = InsertExpander(blocks, self.settings.topology.max_insert_depth).expand(
            primitives
        )
        extraction = self.extractor.extract(expansion.items)
        extraction.diagnostics = expansion.diagnostics + extraction.diagnostics

        self.logger.debug(
            "Primitives extracted",
            primitives=len(primitives),
            closed=len(extraction.closed_curves),
            segments=len(extraction.segments),
            skipped=len(extraction.diagnostics),
            dropped=extraction.dropped_count,
        )
        return extraction

    def analyze(
        self,
        primitives: Sequence[Primitive],
        blocks: BlockTable | None = None,
        strategy: ContourStrategyName | str | None = None,
    ) -> TopologyResult:
        """Full area pass over one drawing.

        Args:
            primitives: Primitives of one drawing
            blocks: Block definitions for insert expansion
            strategy: Contour strategy (configured area strategy if None)

        Returns:
            TopologyResult with contours sorted largest first
        """
        extraction = self.extract(primitives, blocks)
        return self._analyze_extraction(extraction, strategy)

    def _analyze_extraction(
        self,
        extraction: ExtractionResult,
        strategy: ContourStrategyName | str | None = None,
    ) -> TopologyResult:
        chosen = self.strategy(strategy or self.settings.topology.area_strategy)
        found = chosen.find_contours(extraction)
        hierarchy = self.resolver.resolve(found.contours)

        return TopologyResult(
            contours=hierarchy.contours,
            outer_index=hierarchy.outer_index,
            summary=self.reporter.summarize(hierarchy, extraction.extents()),
            strategy=found.strategy,
            open_segments=found.unused_segments,
            diagnostics=list(extraction.diagnostics),
            issues=self.reporter.validate(hierarchy),
        )

    def compute_area(
        self,
        primitives: Sequence[Primitive],
        blocks: BlockTable | None = None,
    ) -> float:
        """Reported piece area; 0.0 when no closed geometry exists."""
        return self.analyze(primitives, blocks).total_area

    def build_shapes(
        self,
        primitives: Sequence[Primitive],
        blocks: BlockTable | None = None,
        strategy: ContourStrategyName | str | None = None,
    ) -> ShapeSet:
        """Extrusion shapes plus the open segments no contour used.

        Args:
            primitives: Primitives of one drawing
            blocks: Block definitions for insert expansion
            strategy: Contour strategy (configured shape strategy if None)

        Returns:
            ShapeSet; empty when no closed geometry exists
        """
        extraction = self.extract(primitives, blocks)
        chosen = self.strategy(strategy or self.settings.topology.shape_strategy)
        found = chosen.find_contours(extraction)
        hierarchy = self.resolver.resolve(found.contours)

        return ShapeSet(
            shapes=build_shapes(hierarchy),
            unused_segments=found.unused_segments,
            strategy=found.strategy,
            diagnostics=list(extraction.diagnostics),
        )

    def cross_check(
        self,
        primitives: Sequence[Primitive],
        blocks: BlockTable | None = None,
        rel_tolerance: float = 1e-6,
    ) -> StrategyComparison:
        """Run both contour strategies and report whether they agree."""
        extraction = self.extract(primitives, blocks)
        comparison = compare_strategies(
            extraction, self.graph_strategy, self.chain_strategy, rel_tolerance
        )
        if comparison.diverged:
            self.logger.warning("Contour strategies diverge", detail=comparison.describe())
        return comparison

    def analyze_drawing(self, drawing: Drawing) -> TopologyResult:
        """Analyze a loaded Drawing, keeping its decode diagnostics."""
        result = self.analyze(drawing.primitives, drawing.blocks)
        result.diagnostics = list(drawing.diagnostics) + result.diagnostics
        return result


@dataclass
class DrawingReport:
    """Outcome of analyzing one drawing file in a batch.

    Attributes:
        name: Drawing path
        summary: Area summary (None on error)
        contour_count: Number of contours found
        open_segment_count: Open segments left out of every contour
        diagnostics: Skipped entities and primitives
        issues: Validation issues as dictionaries
        diverged: Whether the two strategies disagreed (None if not checked)
        comparison: Human-readable comparison (None if not checked)
        error: Error message when the drawing could not be analyzed
        duration_ms: Wall time spent on the drawing
    """

    name: str
    summary: AreaSummary | None = None
    contour_count: int = 0
    open_segment_count: int = 0
    diagnostics: list[Diagnostic] = field(default_factory=list)
    issues: list[dict[str, Any]] = field(default_factory=list)
    diverged: bool | None = None
    comparison: str | None = None
    error: str | None = None
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DrawingReport":
        """Build a report from the dictionary returned by process_drawing."""
        if "error" in data:
            return cls(
                name=data["name"],
                error=data["error"],
                duration_ms=data.get("duration_ms", 0.0),
            )
        result = data["result"]
        return cls(
            name=data["name"],
            summary=AreaSummary.from_dict(result["summary"]),
            contour_count=len(result["contours"]),
            open_segment_count=result["open_segment_count"],
            diagnostics=[Diagnostic.from_dict(d) for d in result["diagnostics"]],
            issues=list(result["issues"]),
            diverged=data.get("diverged"),
            comparison=data.get("comparison"),
            duration_ms=data.get("duration_ms", 0.0),
        )


def process_drawing(
    path: str,
    settings_dict: dict[str, Any],
    cross_check: bool = False,
) -> dict[str, Any]:
    """Analyze a single drawing file.

    Top-level function designed to be picklable for use with ProcessPoolExecutor.
    Loads the drawing, runs the engine, and returns a serialized result.

    Args:
        path: Drawing file path
        settings_dict: Serialized TopologySettings
        cross_check: Also run both contour strategies and compare them

    Returns:
        Dictionary containing either:
        - Success: {"name": str, "result": dict, "duration_ms": float} plus
          "diverged"/"comparison" when cross-checked
        - Error: {"name": str, "error": str, "traceback": str, "duration_ms": float}
    """
    start_time = time.time()

    try:
        settings = TopologySettings(**settings_dict)
        drawing = DrawingReader(Path(path)).load()
        engine = TopologyEngine(settings)

        result = engine.analyze_drawing(drawing)
        output: dict[str, Any] = {"name": path, "result": result.to_dict()}

        if cross_check:
            comparison = engine.cross_check(drawing.primitives, drawing.blocks)
            output["diverged"] = comparison.diverged
            output["comparison"] = comparison.describe()

        output["duration_ms"] = (time.time() - start_time) * 1000
        return output

    except Exception as e:
        # Capture full traceback for debugging
        duration_ms = (time.time() - start_time) * 1000
        return {
            "name": path,
            "error": str(e),
            "traceback": traceback.format_exc(),
            "duration_ms": duration_ms,
        }


class DrawingProcessor:
    """Orchestrates parallel analysis of drawing files.

    Manages the complete workflow:
    1. Submit one task per drawing to worker processes
    2. Collect results as they complete
    3. Update statistics and report progress

    Example:
        processor = DrawingProcessor(TopologySettings())
        reports, stats = processor.process([Path("a.dxf"), Path("b.dxf")])
    """

    def __init__(self, config: TopologySettings, quiet: bool = False) -> None:
        """Initialize drawing processor with configuration.

        Args:
            config: Settings passed to every worker
            quiet: Suppress console logging except errors
        """
        self.config = config
        self.logger = configure_logging(
            log_file=config.logging.log_file,
            console_level=config.logging.log_level,
            file_level=config.logging.file_log_level,
            quiet=quiet,
        )
        self.analysis_logger = AnalysisLogger(self.logger)

    def process(
        self,
        paths: Sequence[Path],
        max_workers: int | None = None,
        cross_check: bool = False,
        progress_callback: Callable[[int, int, str, bool], None] | None = None,
    ) -> tuple[list[DrawingReport], ProcessingStats]:
        """Analyze drawing files in parallel.

        Args:
            paths: Drawing files
            max_workers: Maximum worker processes (None = configured default)
            cross_check: Compare both contour strategies on every drawing
            progress_callback: Optional callback(completed, total, name, success)
                for progress updates

        Returns:
            Tuple of (reports in input order, processing statistics)

        Raises:
            KeyboardInterrupt: If processing is cancelled by user
        """
        stats = self.analysis_logger.stats
        stats.start_time = time.time()

        if max_workers is None:
            max_workers = self.config.processing.max_workers

        settings_dict = self.config.model_dump()
        names = [str(p) for p in paths]
        reports: dict[int, DrawingReport] = {}

        self.logger.info(
            "Starting drawing analysis",
            drawing_count=len(names),
            max_workers=max_workers,
        )

        total = len(names)
        completed = 0
        pending_futures: dict = {}

        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            for position, name in enumerate(names):
                future = executor.submit(process_drawing, name, settings_dict, cross_check)
                pending_futures[future] = (position, name)

            try:
                for future in as_completed(pending_futures):
                    position, name = pending_futures.pop(future)
                    success = False

                    try:
                        report = DrawingReport.from_dict(future.result())
                    except Exception as e:
                        # Executor-level error
                        self.analysis_logger.log_drawing_error(
                            name, e, traceback.format_exc()
                        )
                        report = DrawingReport(name=name, error=str(e))
                    else:
                        if report.summary is not None:
                            success = True
                            self._log_report(report, report.summary)
                        else:
                            self.analysis_logger.log_drawing_error(
                                name, Exception(report.error or "unknown error")
                            )

                    reports[position] = report
                    completed += 1
                    if progress_callback is not None:
                        progress_callback(completed, total, name, success)

            except KeyboardInterrupt:
                self.logger.info("Cancellation requested by user")
                for f in pending_futures:
                    f.cancel()

                stats.was_cancelled = True
                stats.cancelled_count = len(pending_futures)

                executor.shutdown(wait=True, cancel_futures=True)
                raise

        stats.end_time = time.time()

        self.logger.info(
            "Analysis complete",
            processed=stats.processed_count,
            errors=stats.error_count,
            diverged=stats.divergence_count,
            duration_seconds=round(stats.duration_seconds, 2),
        )

        return [reports[i] for i in sorted(reports)], stats

    def _log_report(self, report: DrawingReport, summary: AreaSummary) -> None:
        for diagnostic in report.diagnostics:
            if diagnostic.severity == Severity.INFO:
                continue
            self.analysis_logger.log_primitive_skipped(
                report.name, diagnostic.index, diagnostic.kind, diagnostic.reason
            )
        if report.diverged:
            self.analysis_logger.log_strategy_divergence(report.name, report.comparison or "")
        self.analysis_logger.log_drawing_complete(
            report.name,
            summary.total_area,
            report.contour_count,
            report.duration_ms,
        )
