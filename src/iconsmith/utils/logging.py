"""Logging utilities for Iconsmith."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import structlog


@dataclass
class BuildStats:
    """Statistics from a build run."""

    built_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    glyph_count: int = 0
    dropped_glyphs: list[tuple[str, str]] = field(default_factory=list)
    errors: list[tuple[str, str]] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None
    was_cancelled: bool = False

    @property
    def duration_seconds(self) -> float:
        """Calculate build duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    @property
    def total_count(self) -> int:
        return self.built_count + self.skipped_count + self.failed_count


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (no file logging if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in list(root_logger.handlers):
        if getattr(handler, "_iconsmith", False):
            root_logger.removeHandler(handler)
            handler.close()

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        file_handler._iconsmith = True  # type: ignore[attr-defined]
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    console_handler._iconsmith = True  # type: ignore[attr-defined]
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
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("iconsmith")
    logger.info(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=file_level,
    )

    return logger


class BuildLogger:
    """Logger for tracking collection builds and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = BuildStats()

    def log_collection_start(self, collection: str, glyph_count: int) -> None:
        """Log start of a collection build."""
        self._logger.info("Building collection", collection=collection, glyphs=glyph_count)

    def log_stage(self, collection: str, stage: str, **details: object) -> None:
        """Log a completed build stage."""
        self._logger.debug("Stage complete", collection=collection, stage=stage, **details)

    def log_collection_built(
        self,
        collection: str,
        glyph_count: int,
        duration_ms: float,
    ) -> None:
        """Log a successful collection build."""
        self._logger.info(
            "Collection built",
            collection=collection,
            glyphs=glyph_count,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.built_count += 1
        self._stats.glyph_count += glyph_count

    def log_collection_skipped(self, collection: str, reason: str) -> None:
        """Log a collection that produced no output."""
        self._logger.info("Collection skipped", collection=collection, reason=reason)
        self._stats.skipped_count += 1

    def log_glyph_dropped(self, collection: str, glyph_name: str, reason: str) -> None:
        """Log a malformed glyph excluded from a collection."""
        self._logger.warning(
            "Glyph dropped",
            collection=collection,
            glyph=glyph_name,
            reason=reason,
        )
        self._stats.dropped_glyphs.append((f"{collection}/{glyph_name}", reason))

    def log_collection_error(
        self,
        collection: str,
        error: Exception,
        stage: str | None = None,
    ) -> None:
        """Log a failed collection build."""
        self._logger.error(
            "Collection build failed",
            collection=collection,
            stage=stage,
            error=str(error),
            error_type=type(error).__name__,
        )
        self._stats.failed_count += 1
        self._stats.errors.append((collection, str(error)))

    @property
    def stats(self) -> BuildStats:
        """Get current build statistics."""
        return self._stats
