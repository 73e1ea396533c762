"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with progress bars, tables, and formatted messages.
"""

from collections.abc import Sequence

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from dxftopo.core import DrawingReport
from dxftopo.domain import Diagnostic, Severity, ShapeSet, StrategyComparison, ValidationIssue

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_WARN = "!"  # Warning
SYM_DOT = "·"  # Separator/secondary info


def create_progress() -> Progress:
    """Create a rich progress bar for drawing analysis.

    Returns:
        Configured Progress instance with bar and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]dxftopo[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator."""
    console.print(f"\n{SYM_STEP} {message}")


def print_drawing_info(name: str, primitive_count: int, block_count: int) -> None:
    """Print drawing information.

    Args:
        name: Drawing path
        primitive_count: Model-space primitives
        block_count: Block definitions
    """
    # Use Text to safely handle paths with special characters
    line = Text("  ")
    line.append(name)
    console.print(line)
    console.print(f"  {primitive_count:,} primitives {SYM_DOT} {block_count:,} blocks")


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_processing_info(workers: int, is_auto: bool = False) -> None:
    """Print processing configuration.

    Args:
        workers: Number of parallel workers
        is_auto: Whether the count was auto-detected
    """
    auto_suffix = " (auto)" if is_auto else ""
    console.print(f"  {workers} workers{auto_suffix} {SYM_DOT} Ctrl+C to cancel")


def print_area_table(reports: Sequence[DrawingReport], precision: int = 3) -> None:
    """Print one row per drawing with its area and contour counts.

    Args:
        reports: Batch reports in input order
        precision: Decimal places for areas and extents
    """
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Drawing", overflow="fold")
    table.add_column("Area", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Material", justify="right")
    table.add_column("Holes", justify="right")
    table.add_column("Pierces", justify="right")
    table.add_column("Skipped", justify="right")

    for report in reports:
        if report.summary is None:
            table.add_row(report.name, Text(f"{SYM_ERR} {report.error}", style="red"))
            continue
        s = report.summary
        skipped = sum(1 for d in report.diagnostics if d.severity != Severity.INFO)
        table.add_row(
            report.name,
            f"{s.total_area:.{precision}f}",
            f"{s.width:.{precision}f} × {s.height:.{precision}f}",
            str(s.material_count),
            str(s.hole_count),
            str(s.pierce_count),
            Text(str(skipped), style="yellow" if skipped else ""),
        )

    console.print(table)


def print_shapes(shape_set: ShapeSet, precision: int = 3) -> None:
    """Print extrusion shapes and leftover open segments."""
    if shape_set.is_empty():
        console.print("  No closed shapes found")
    for i, shape in enumerate(shape_set.shapes):
        console.print(
            f"  Shape {i + 1} {SYM_DOT} depth {shape.depth} {SYM_DOT} "
            f"{len(shape.outer.points)} points {SYM_DOT} "
            f"area {shape.gross_area():.{precision}f} {SYM_DOT} "
            f"{len(shape.holes)} holes {SYM_DOT} net {shape.net_area():.{precision}f}"
        )
    if shape_set.unused_segments:
        console.print(
            f"  [yellow]{len(shape_set.unused_segments)} open segments[/yellow] "
            "not part of any shape"
        )


def print_diagnostics(diagnostics: Sequence[Diagnostic], verbose: bool = False) -> None:
    """Print skipped primitives; informational ones only when verbose."""
    shown = [d for d in diagnostics if verbose or d.severity != Severity.INFO]
    if not shown:
        console.print(f"  [green]{SYM_OK}[/green] No primitives skipped")
        return
    for d in shown:
        style = "dim" if d.severity == Severity.INFO else "yellow"
        where = f"#{d.index} " if d.index is not None else ""
        line = Text(f"  {SYM_WARN} ", style=style)
        line.append(f"{where}{d.kind}: {d.reason}")
        console.print(line)


def print_issues(issues: Sequence[ValidationIssue]) -> None:
    """Print validation issues."""
    if not issues:
        console.print(f"  [green]{SYM_OK}[/green] No validation issues")
        return
    for issue in issues:
        console.print(f"  [yellow]{SYM_WARN}[/yellow] contour {issue.contour_index}: {issue.message}")


def print_comparison(comparison: StrategyComparison) -> None:
    """Print the result of the strategy cross-check."""
    if comparison.diverged:
        console.print(f"  [yellow]{SYM_WARN} Strategies diverge[/yellow]: {comparison.describe()}")
    else:
        console.print(f"  [green]{SYM_OK}[/green] {comparison.describe().capitalize()}")


def print_summary(
    total_time_s: float,
    processed: int,
    errors: int,
    avg_time_ms: float | None = None,
) -> None:
    """Print completion message with summary.

    Args:
        total_time_s: Total processing time in seconds
        processed: Number of drawings analyzed
        errors: Number of drawings that failed
        avg_time_ms: Average analysis time per drawing in milliseconds
    """
    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {_format_time(total_time_s)}")

    error_style = "red" if errors > 0 else "green"
    console.print(
        f"  {processed} drawings {SYM_DOT} [{error_style}]{errors} errors[/{error_style}]"
    )
    if avg_time_ms:
        console.print(f"  {avg_time_ms:.1f}ms avg")


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")


def print_cancellation_notice() -> None:
    """Print cancellation acknowledgment."""
    console.print(f"\n{SYM_DOT} Cancelling... waiting for in-progress drawings")


def print_cancellation_summary(processed: int, cancelled: int) -> None:
    """Print cancellation summary.

    Args:
        processed: Number of drawings analyzed before cancellation
        cancelled: Number of pending tasks that were cancelled
    """
    console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
    console.print(f"  {processed} drawings completed {SYM_DOT} {cancelled} tasks cancelled")
