"""Logging utilities for Graffitizer."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import structlog


@dataclass
class RenderStats:
    """Statistics from a render run."""

    glyph_count: int = 0
    space_count: int = 0
    placeholder_count: int = 0
    layer_count: int = 0
    error_count: int = 0
    rejected_markup_count: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate render duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure structured logging to the console and optionally a file.

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
    for handler in [h for h in root_logger.handlers if getattr(h, "_graffitizer", False)]:
        root_logger.removeHandler(handler)
        handler.close()

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        file_handler._graffitizer = True  # type: ignore[attr-defined]
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    console_handler._graffitizer = True  # type: ignore[attr-defined]
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

    logger = structlog.get_logger("graffitizer")
    logger.info(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=file_level,
    )

    return logger


def get_logger(name: str = "graffitizer") -> structlog.stdlib.BoundLogger:
    """Get a named structlog logger."""
    return structlog.get_logger(name)


class RenderLogger:
    """Logger for render progress, statistics and per-glyph failures.

    This is the error-reporting path of the renderer: markup the sanitizer
    rejects and glyphs the compositor fails on are recorded here instead of
    being raised to the caller.
    """

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._logger = logger if logger is not None else get_logger("graffitizer.render")
        self._stats = RenderStats()

    def reset(self) -> None:
        """Start a fresh set of statistics."""
        self._stats = RenderStats()

    def log_render_start(self, text: str, glyph_count: int) -> None:
        """Log start of a render pass."""
        self._logger.debug("Rendering text", text=text, glyphs=glyph_count)

    def log_glyph_missing(self, letter: str, error: Exception) -> None:
        """Log a character without a glyph; a placeholder is drawn instead."""
        self._logger.warning("Glyph not found", letter=letter, error=str(error))
        self._stats.placeholder_count += 1
        self._stats.errors.append((letter, str(error)))

    def log_glyph_rendered(self, index: int, letter: str, layer_count: int) -> None:
        """Log successful composition of one glyph."""
        self._logger.debug("Glyph composited", index=index, letter=letter, layers=layer_count)
        self._stats.glyph_count += 1
        self._stats.layer_count += layer_count

    def log_space(self, index: int) -> None:
        """Log a whitespace glyph, which produces no layers."""
        self._logger.debug("Space skipped", index=index)
        self._stats.space_count += 1

    def log_glyph_error(
        self,
        letter: str,
        error: Exception,
        traceback: str | None = None,
    ) -> None:
        """Log glyph composition error."""
        self._logger.error(
            "Glyph composition failed",
            letter=letter,
            error=str(error),
            error_type=type(error).__name__,
            traceback=traceback,
        )
        self._stats.error_count += 1
        self._stats.placeholder_count += 1
        self._stats.errors.append((letter, str(error)))

    def log_markup_rejected(self, letter: str | None, reason: str) -> None:
        """Log glyph markup that failed validation or sanitization."""
        self._logger.warning("Glyph markup rejected", letter=letter, reason=reason)
        self._stats.rejected_markup_count += 1
        self._stats.errors.append((letter or "?", reason))

    def log_layout(
        self,
        content_width: float,
        content_height: float,
        container_scale: float,
        fit_scale: float,
    ) -> None:
        """Log layout results."""
        self._logger.debug(
            "Layout computed",
            width=round(content_width, 2),
            height=round(content_height, 2),
            container_scale=round(container_scale, 4),
            fit_scale=round(fit_scale, 4),
        )

    def log_render_complete(self, layer_count: int, duration_ms: float) -> None:
        """Log a finished render pass."""
        self._logger.info(
            "Render complete",
            layers=layer_count,
            errors=self._stats.error_count,
            duration_ms=round(duration_ms, 2),
        )

    @property
    def stats(self) -> RenderStats:
        """Get current render statistics."""
        return self._stats
