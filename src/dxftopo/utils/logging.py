"""Logging utilities for dxftopo."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import structlog


@dataclass
class ProcessingStats:
    """Statistics from a batch run."""

    processed_count: int = 0
    error_count: int = 0
    primitives_skipped: int = 0
    divergence_count: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    drawing_timings_ms: list[float] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None
    was_cancelled: bool = False
    cancelled_count: int = 0

    @property
    def duration_seconds(self) -> float:
        """Calculate processing duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    @property
    def average_ms(self) -> float:
        if not self.drawing_timings_ms:
            return 0.0
        return sum(self.drawing_timings_ms) / len(self.drawing_timings_ms)


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (no file output if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Reconfiguring replaces our own handlers instead of stacking them
    for handler in list(root_logger.handlers):
        if getattr(handler, "_dxftopo", False):
            root_logger.removeHandler(handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        file_handler._dxftopo = True  # type: ignore[attr-defined]
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    console_handler._dxftopo = True  # type: ignore[attr-defined]
    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("dxftopo")
    logger.debug("Logging initialized", log_file=str(log_file) if log_file else None)

    return logger


class AnalysisLogger:
    """Logger for tracking drawing analysis progress and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = ProcessingStats()

    def log_drawing_complete(
        self,
        drawing_name: str,
        total_area: float,
        contour_count: int,
        duration_ms: float,
    ) -> None:
        """Log successful drawing analysis."""
        self._logger.info(
            "Drawing analyzed",
            drawing=drawing_name,
            area=round(total_area, 4),
            contours=contour_count,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.processed_count += 1
        self._stats.drawing_timings_ms.append(duration_ms)

    def log_primitive_skipped(self, drawing_name: str, index: int | None, kind: str, reason: str) -> None:
        """Log a primitive left out of the topology."""
        self._logger.warning(
            "Primitive skipped",
            drawing=drawing_name,
            index=index,
            kind=kind,
            reason=reason,
        )
        self._stats.primitives_skipped += 1

    def log_drawing_error(
        self,
        drawing_name: str,
        error: Exception,
        traceback: str | None = None,
    ) -> None:
        """Log drawing analysis error."""
        self._logger.error(
            "Drawing analysis failed",
            drawing=drawing_name,
            error=str(error),
            error_type=type(error).__name__,
            traceback=traceback,
        )
        self._stats.error_count += 1
        self._stats.errors.append((drawing_name, str(error)))

    def log_strategy_divergence(self, drawing_name: str, description: str) -> None:
        """Log disagreement between the two contour strategies."""
        self._logger.warning("Contour strategies diverge", drawing=drawing_name, detail=description)
        self._stats.divergence_count += 1

    @property
    def stats(self) -> ProcessingStats:
        """Get current processing statistics."""
        return self._stats
