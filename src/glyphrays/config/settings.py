"""Configuration settings for glyphrays."""

import threading
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from glyphrays.domain.curve import FillRule

DEFAULT_MAX_RECURSION = 12
DEFAULT_SPLIT_THRESH = 4
DEFAULT_EXPECTED_MIN_RENDER_SIZE = 32.0


class HierarchyConfig(BaseModel):
    """Termination policy for the box hierarchy.

    The three knobs are independent stopping conditions: a box becomes a
    leaf as soon as any one of them holds. Instances are frozen so that a
    snapshot taken by finalize() can never change underneath a build.
    """

    model_config = ConfigDict(frozen=True)

    max_recursion: int = Field(
        default=DEFAULT_MAX_RECURSION,
        ge=0,
        le=32,
        description="Maximum depth of the box hierarchy",
    )
    split_thresh: int = Field(
        default=DEFAULT_SPLIT_THRESH,
        ge=0,
        description="A box with at most this many curves is not split",
    )
    expected_min_render_size: float = Field(
        default=DEFAULT_EXPECTED_MIN_RENDER_SIZE,
        gt=0.0,
        description="Smallest pixel size (per EM) the glyph is expected to render at",
    )

    def pixel_size(self, units_per_em: float) -> float:
        """Size of one rendered pixel in glyph units at the minimum render size.

        Args:
            units_per_em: Units per EM of the glyph's font

        Returns:
            Glyph units covered by a single pixel
        """
        return units_per_em / self.expected_min_render_size


class AtlasConfig(BaseModel):
    """Configuration for the in-memory atlas store."""

    capacity_words: int = Field(
        default=1 << 22,
        ge=1,
        description="Number of 32-bit words the store can hold",
    )


class ProcessingConfig(BaseModel):
    """Configuration for font-level encoding."""

    max_workers: int | None = Field(
        default=None,
        description="Max worker processes (None = auto)",
    )
    skip_composite: bool = Field(
        default=False,
        description="Skip composite glyphs instead of encoding their decomposed outline",
    )
    fill_rule: FillRule = Field(
        default=FillRule.NONZERO,
        description="Fill rule recorded with every encoded glyph",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class GlyphRaysSettings(BaseModel):
    """Main application settings."""

    hierarchy: HierarchyConfig = Field(default_factory=lambda: default_hierarchy_config())
    atlas: AtlasConfig = Field(default_factory=AtlasConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> GlyphRaysSettings:
    """Get default application settings."""
    return GlyphRaysSettings()


# Process-wide defaults used by finalize() when no explicit config is given.
# Setters swap the whole (frozen) object under the lock, so a reader sees
# either the old or the new configuration, never a mix.
_defaults_lock = threading.Lock()
_defaults = HierarchyConfig()


def default_hierarchy_config() -> HierarchyConfig:
    """Snapshot of the current process-wide hierarchy configuration."""
    with _defaults_lock:
        return _defaults


def _update_defaults(**changes: object) -> None:
    global _defaults
    with _defaults_lock:
        _defaults = HierarchyConfig(**{**_defaults.model_dump(), **changes})


def max_recursion() -> int:
    """Maximum recursion used by glyphs finalized from now on."""
    return default_hierarchy_config().max_recursion


def set_max_recursion(value: int) -> None:
    """Set the value returned by max_recursion(). Default is 12."""
    _update_defaults(max_recursion=value)


def split_thresh() -> int:
    """Curve count at or below which a box is not split."""
    return default_hierarchy_config().split_thresh


def set_split_thresh(value: int) -> None:
    """Set the value returned by split_thresh(). Default is 4."""
    _update_defaults(split_thresh=value)


def expected_min_render_size() -> float:
    """Expected minimum render size (pixels per EM)."""
    return default_hierarchy_config().expected_min_render_size


def set_expected_min_render_size(value: float) -> None:
    """Set the value returned by expected_min_render_size(). Default is 32.0."""
    _update_defaults(expected_min_render_size=value)


def reset_defaults() -> None:
    """Restore the process-wide hierarchy configuration to its defaults."""
    global _defaults
    with _defaults_lock:
        _defaults = HierarchyConfig()
