"""Command-line interface for iconsmith.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- One font family per icon collection
- Progress bar over collections
- Verbose/quiet output modes
- Errors naming collection, stage and glyph
"""

from iconsmith.cli.app import cli, main

__all__ = ["cli", "main"]
