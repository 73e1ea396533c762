"""CLI application entry point for dxftopo.

This module provides the main CLI interface using Typer.
"""

import json
import os
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError

from dxftopo import __version__
from dxftopo.cli.output import (
    SYM_DOT,
    console,
    create_progress,
    print_area_table,
    print_cancellation_notice,
    print_cancellation_summary,
    print_comparison,
    print_diagnostics,
    print_drawing_info,
    print_error,
    print_header,
    print_issues,
    print_processing_info,
    print_shapes,
    print_step,
    print_summary,
)
from dxftopo.config import (
    AreaMetric,
    ContourStrategyName,
    GeometryConfig,
    LoggingConfig,
    ProcessingConfig,
    TopologyConfig,
    TopologySettings,
)
from dxftopo.core import DrawingProcessor, DrawingReport, TopologyEngine
from dxftopo.exceptions import DrawingLoadError, DxfTopoError
from dxftopo.io import load_drawing
from dxftopo.utils import configure_logging

# Create the Typer app
app = typer.Typer(
    name="dxftopo",
    help="Recover closed contours, holes and areas from 2D drawings.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]dxftopo[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Recover closed contours, holes and areas from 2D drawings."""


ToleranceOption = Annotated[
    float,
    typer.Option(
        "--tolerance",
        "-t",
        help="Distance under which two endpoints are the same node",
        min=0.0,
    ),
]
LogFileOption = Annotated[
    Path | None,
    typer.Option("--log-file", help="Write detailed logs to file"),
]
LogLevelOption = Annotated[
    str,
    typer.Option("--log-level", help="Logging level (DEBUG|INFO|WARNING|ERROR)"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Verbose console output"),
]
QuietOption = Annotated[
    bool,
    typer.Option("--quiet", "-q", help="Minimal console output"),
]


def _build_settings(
    tolerance: float,
    metric: AreaMetric = AreaMetric.TOP_LEVEL,
    strategy: ContourStrategyName | None = None,
    workers: int | None = None,
    log_file: Path | None = None,
    log_level: str = "WARNING",
    quiet: bool = False,
) -> TopologySettings:
    topology = TopologyConfig(area_metric=metric)
    if strategy is not None:
        topology = TopologyConfig(
            area_metric=metric, area_strategy=strategy, shape_strategy=strategy
        )
    try:
        return TopologySettings(
            geometry=GeometryConfig(endpoint_tolerance=tolerance),
            topology=topology,
            processing=ProcessingConfig(max_workers=workers),
            logging=LoggingConfig(
                log_file=log_file,
                log_level=log_level if not quiet else "WARNING",
            ),
        )
    except ValidationError as e:
        for error in e.errors():
            field = error["loc"][-1] if error["loc"] else "option"
            print_error(f"Invalid {field}: {error['msg']}")
        raise typer.Exit(code=1) from None


def _check_flags(verbose: bool, quiet: bool) -> None:
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)


def _check_input(path: Path) -> None:
    if not path.exists():
        print_error(
            f"Input file not found: {path}",
            details=f"The file '{path}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)
    if not path.is_file():
        print_error(
            f"Input path is not a file: {path}",
            details="Please provide a path to a DXF or JSON drawing file.",
        )
        raise typer.Exit(code=1)


def _report_to_json(report: DrawingReport) -> dict[str, Any]:
    data: dict[str, Any] = {"name": report.name, "duration_ms": round(report.duration_ms, 3)}
    if report.summary is None:
        data["error"] = report.error
        return data
    data["area"] = report.summary.total_area
    data["summary"] = report.summary.to_dict()
    data["contour_count"] = report.contour_count
    data["open_segment_count"] = report.open_segment_count
    data["diagnostics"] = [d.to_dict() for d in report.diagnostics]
    data["issues"] = report.issues
    if report.diverged is not None:
        data["diverged"] = report.diverged
        data["comparison"] = report.comparison
    return data


@app.command()
def area(
    files: Annotated[
        list[Path],
        typer.Argument(help="DXF or dxf-parser JSON drawings", show_default=False),
    ],
    metric: Annotated[
        AreaMetric,
        typer.Option("--metric", "-m", help="Which contours count toward the area"),
    ] = AreaMetric.TOP_LEVEL,
    tolerance: ToleranceOption = 0.5,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-j",
            help="Number of parallel workers (default: auto)",
            min=1,
        ),
    ] = None,
    cross_check: Annotated[
        bool,
        typer.Option("--cross-check", help="Compare both contour strategies on every drawing"),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print results as JSON"),
    ] = False,
    log_file: LogFileOption = None,
    log_level: LogLevelOption = "WARNING",
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Report the piece area of one or more drawings.

    Drawings are analyzed in parallel. The default metric sums the areas of
    the top-level contours; holes are not subtracted.

    Example:
        dxftopo area part.dxf bracket.dxf --json
    """
    _check_flags(verbose, quiet)
    for path in files:
        _check_input(path)

    # JSON output replaces all decorated output
    quiet = quiet or as_json
    settings = _build_settings(tolerance, metric, None, workers, log_file, log_level, quiet)

    if not quiet:
        print_header(__version__)
        print_step(f"Analyzing {len(files)} drawings")
        actual_workers = workers if workers else os.cpu_count() or 1
        print_processing_info(actual_workers, is_auto=(workers is None))

    processor = DrawingProcessor(settings, quiet=quiet)
    stats = processor.analysis_logger.stats

    try:
        if not quiet:
            with create_progress() as progress:
                task_id = progress.add_task(f"Analyzing {len(files)} drawings", total=len(files))

                def update_progress(completed: int, *_: object) -> None:
                    progress.update(task_id, completed=completed)

                reports, stats = processor.process(
                    files, workers, cross_check, progress_callback=update_progress
                )
        else:
            reports, stats = processor.process(files, workers, cross_check)
    except KeyboardInterrupt:
        if not quiet:
            print_cancellation_notice()
            print_cancellation_summary(
                processed=stats.processed_count,
                cancelled=stats.cancelled_count,
            )
        raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code

    if as_json:
        typer.echo(json.dumps([_report_to_json(r) for r in reports], indent=2))
    else:
        print_step("Results")
        print_area_table(reports)
        if verbose:
            for report in reports:
                if report.diagnostics:
                    console.print(f"\n[bold]{report.name}[/bold]")
                    print_diagnostics(report.diagnostics, verbose=True)
        if not quiet:
            print_summary(
                total_time_s=stats.duration_seconds,
                processed=stats.processed_count,
                errors=stats.error_count,
                avg_time_ms=stats.average_ms,
            )

    if any(not r.ok for r in reports):
        raise typer.Exit(code=1)


@app.command()
def shapes(
    file: Annotated[
        Path,
        typer.Argument(help="DXF or dxf-parser JSON drawing", show_default=False),
    ],
    strategy: Annotated[
        ContourStrategyName,
        typer.Option("--strategy", "-s", help="Contour strategy used to close segments"),
    ] = ContourStrategyName.CHAIN,
    tolerance: ToleranceOption = 0.5,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print shapes as JSON"),
    ] = False,
    log_file: LogFileOption = None,
    log_level: LogLevelOption = "WARNING",
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """List extrusion shapes: material outlines with their direct holes.

    Example:
        dxftopo shapes part.dxf --strategy graph
    """
    _check_flags(verbose, quiet)
    _check_input(file)
    quiet = quiet or as_json
    settings = _build_settings(
        tolerance, strategy=strategy, log_file=log_file, log_level=log_level, quiet=quiet
    )

    try:
        logger = configure_logging(
            log_file=settings.logging.log_file,
            console_level=settings.logging.log_level,
            file_level=settings.logging.file_log_level,
            quiet=quiet,
        )
        if not quiet:
            print_header(__version__)
            print_step("Loading drawing")

        drawing = load_drawing(file)

        if not quiet:
            print_drawing_info(drawing.name, len(drawing.primitives), len(drawing.blocks))
            print_step(f"Building shapes ({strategy.value})")

        engine = TopologyEngine(settings, logger)
        shape_set = engine.build_shapes(drawing.primitives, drawing.blocks)
        diagnostics = list(drawing.diagnostics) + shape_set.diagnostics

        if as_json:
            typer.echo(
                json.dumps(
                    {
                        "name": drawing.name,
                        "strategy": shape_set.strategy,
                        "shapes": [s.to_dict() for s in shape_set.shapes],
                        "unused_segment_count": len(shape_set.unused_segments),
                        "diagnostics": [d.to_dict() for d in diagnostics],
                    },
                    indent=2,
                )
            )
        else:
            print_shapes(shape_set)
            if verbose or not quiet:
                print_diagnostics(diagnostics, verbose=verbose)

    except DrawingLoadError as e:
        print_error(f"Could not load drawing: {e.reason}")
        raise typer.Exit(code=1)
    except DxfTopoError as e:
        print_error(str(e))
        raise typer.Exit(code=1)


@app.command()
def check(
    file: Annotated[
        Path,
        typer.Argument(help="DXF or dxf-parser JSON drawing", show_default=False),
    ],
    tolerance: ToleranceOption = 0.5,
    rel_tolerance: Annotated[
        float,
        typer.Option(
            "--rel-tolerance",
            help="Relative tolerance when comparing strategy areas",
            min=0.0,
        ),
    ] = 1e-6,
    log_file: LogFileOption = None,
    log_level: LogLevelOption = "WARNING",
    verbose: VerboseOption = False,
) -> None:
    """Show skipped primitives, validation issues and a strategy cross-check.

    Exits with code 2 when the two contour strategies disagree.

    Example:
        dxftopo check part.dxf -v
    """
    _check_input(file)
    settings = _build_settings(tolerance, log_file=log_file, log_level=log_level)

    try:
        logger = configure_logging(
            log_file=settings.logging.log_file,
            console_level=settings.logging.log_level,
            file_level=settings.logging.file_log_level,
        )
        print_header(__version__)
        print_step("Loading drawing")
        drawing = load_drawing(file)
        print_drawing_info(drawing.name, len(drawing.primitives), len(drawing.blocks))

        engine = TopologyEngine(settings, logger)
        result = engine.analyze_drawing(drawing)

        print_step("Skipped primitives")
        print_diagnostics(result.diagnostics, verbose=verbose)

        print_step("Validation")
        console.print(
            f"  {len(result.contours)} contours {SYM_DOT} area {result.total_area:.3f}"
        )
        print_issues(result.issues)

        print_step("Strategy cross-check")
        comparison = engine.cross_check(drawing.primitives, drawing.blocks, rel_tolerance)
        print_comparison(comparison)

    except DrawingLoadError as e:
        print_error(f"Could not load drawing: {e.reason}")
        raise typer.Exit(code=1)
    except DxfTopoError as e:
        print_error(str(e))
        raise typer.Exit(code=1)

    if comparison.diverged:
        raise typer.Exit(code=2)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
