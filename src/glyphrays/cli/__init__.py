"""Command-line interface for glyphrays.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Progress bars for glyph encoding
- Verbose/quiet output modes
- Per-glyph hierarchy inspection
- Detailed error reporting
"""

from glyphrays.cli.app import cli, main

__all__ = ["cli", "main"]
