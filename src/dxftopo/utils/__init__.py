"""Utility functions for dxftopo.

This module provides:

- Logging setup and configuration
- Per-run statistics
"""

from dxftopo.utils.logging import (
    AnalysisLogger,
    ProcessingStats,
    configure_logging,
)

__all__ = [
    "AnalysisLogger",
    "ProcessingStats",
    "configure_logging",
]
