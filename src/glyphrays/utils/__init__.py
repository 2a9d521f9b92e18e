"""Utility functions for glyphrays.

This module provides utility functions including:

- Logging setup and configuration
- Progress and statistics tracking helpers
"""

from glyphrays.utils.logging import (
    ProcessingLogger,
    ProcessingStats,
    configure_logging,
)

__all__ = [
    "ProcessingLogger",
    "ProcessingStats",
    "configure_logging",
]
