"""Configuration management for glyphrays.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments, explicit objects passed to
finalize(), or the process-wide hierarchy defaults.

Key classes:
- HierarchyConfig: Termination policy for the box hierarchy
- AtlasConfig: In-memory atlas store settings
- ProcessingConfig: Font processing settings
- LoggingConfig: Logging settings
- GlyphRaysSettings: Main application settings
"""

from glyphrays.config.settings import (
    DEFAULT_EXPECTED_MIN_RENDER_SIZE,
    DEFAULT_MAX_RECURSION,
    DEFAULT_SPLIT_THRESH,
    AtlasConfig,
    GlyphRaysSettings,
    HierarchyConfig,
    LoggingConfig,
    ProcessingConfig,
    default_hierarchy_config,
    expected_min_render_size,
    get_default_settings,
    max_recursion,
    reset_defaults,
    set_expected_min_render_size,
    set_max_recursion,
    set_split_thresh,
    split_thresh,
)

__all__ = [
    "DEFAULT_EXPECTED_MIN_RENDER_SIZE",
    "DEFAULT_MAX_RECURSION",
    "DEFAULT_SPLIT_THRESH",
    "AtlasConfig",
    "GlyphRaysSettings",
    "HierarchyConfig",
    "LoggingConfig",
    "ProcessingConfig",
    "default_hierarchy_config",
    "expected_min_render_size",
    "get_default_settings",
    "max_recursion",
    "reset_defaults",
    "set_expected_min_render_size",
    "set_max_recursion",
    "set_split_thresh",
    "split_thresh",
]
