"""Logging utilities for glyphrays."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import structlog


@dataclass
class ProcessingStats:
    """Statistics from an encoding run."""

    encoded_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    error_count: int = 0
    words_written: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    glyph_times_ms: list[float] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate processing duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    @property
    def avg_glyph_time_ms(self) -> float | None:
        if not self.glyph_times_ms:
            return None
        return sum(self.glyph_times_ms) / len(self.glyph_times_ms)

    @property
    def min_glyph_time_ms(self) -> float | None:
        return min(self.glyph_times_ms) if self.glyph_times_ms else None

    @property
    def max_glyph_time_ms(self) -> float | None:
        return max(self.glyph_times_ms) if self.glyph_times_ms else None


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (auto-generated if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    if log_file is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = Path(f"glyphrays_{timestamp}.log")

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(getattr(logging, file_level.upper()))
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(
        logging.ERROR if quiet else getattr(logging, console_level.upper())
    )
    console_handler.setFormatter(logging.Formatter("%(message)s"))
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

    logger = structlog.get_logger("glyphrays")
    logger.info("Logging initialized", log_file=str(log_file), level=file_level)

    return logger


class ProcessingLogger:
    """Logger for tracking encoding progress and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = ProcessingStats()

    def log_glyph_start(self, glyph_name: str) -> None:
        """Log start of glyph encoding."""
        self._logger.debug("Encoding glyph", glyph=glyph_name)

    def log_glyph_complete(
        self,
        glyph_name: str,
        words: int,
        duration_ms: float,
    ) -> None:
        """Log a glyph stored in the atlas."""
        self._logger.info(
            "Glyph encoded",
            glyph=glyph_name,
            words=words,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.encoded_count += 1
        self._stats.words_written += words
        self._stats.glyph_times_ms.append(duration_ms)

    def log_glyph_skipped(self, glyph_name: str, reason: str) -> None:
        """Log skipped glyph."""
        self._logger.debug("Glyph skipped", glyph=glyph_name, reason=reason)
        self._stats.skipped_count += 1

    def log_glyph_failed(self, glyph_name: str, reason: str) -> None:
        """Log a glyph that could not be packed or stored."""
        self._logger.warning("Glyph not encoded", glyph=glyph_name, reason=reason)
        self._stats.failed_count += 1
        self._stats.errors.append((glyph_name, reason))

    def log_glyph_error(
        self,
        glyph_name: str,
        error: Exception | str,
        traceback: str | None = None,
    ) -> None:
        """Log glyph encoding error."""
        self._logger.error(
            "Glyph encoding failed",
            glyph=glyph_name,
            error=str(error),
            error_type=type(error).__name__ if isinstance(error, Exception) else None,
            traceback=traceback,
        )
        self._stats.error_count += 1
        self._stats.errors.append((glyph_name, str(error)))

    def log_hierarchy(
        self,
        glyph_name: str,
        nodes: int,
        leaves: int,
        max_depth: int,
    ) -> None:
        """Log hierarchy shape."""
        self._logger.debug(
            "Hierarchy",
            glyph=glyph_name,
            nodes=nodes,
            leaves=leaves,
            max_depth=max_depth,
        )

    @property
    def stats(self) -> ProcessingStats:
        """Get current processing statistics."""
        return self._stats
