"""Command-line interface for dxftopo.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Area table for one or many drawings, analyzed in parallel
- Extrusion shape listing
- Diagnostics, validation issues and strategy cross-check
- JSON output for scripting
"""

from dxftopo.cli.app import cli, main

__all__ = ["cli", "main"]
