# ABOUTME: Logging configuration using loguru sinks and structlog loggers
# ABOUTME: Dual-mode operation: interactive CLI vs production JSON logging

import logging
import os
import sys
from pathlib import Path
from typing import Any

import structlog
from loguru import logger

QUIETED_LOGGERS = ["httpx", "httpcore", "urllib3", "PIL", "html5lib", "asyncio"]


class LoggingMode:
    """Logging mode constants."""

    INTERACTIVE = "interactive"
    PRODUCTION = "production"


def detect_logging_mode() -> str:
    """Detect whether we're running in interactive or production mode."""
    mode = os.getenv("POKEDICT_LOG_MODE")
    if mode and mode.lower() in [LoggingMode.INTERACTIVE, LoggingMode.PRODUCTION]:
        return mode.lower()

    return LoggingMode.INTERACTIVE if sys.stdout.isatty() else LoggingMode.PRODUCTION


def setup_third_party_logging() -> None:
    """Keep chatty libraries from drowning out build output."""
    for logger_name in QUIETED_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.captureWarnings(True)
    logging.getLogger("py.warnings").setLevel(logging.ERROR)


class LoguruLogger:
    """structlog logger that hands rendered events to loguru's sinks under its own name."""

    def __init__(self, name: str | None = None):
        self.name = name or "pokedict"
        self._logger = logger.patch(lambda record: record.update(name=self.name))

    def _log(self, level: str, message: str) -> None:
        self._logger.log(level, message)

    def debug(self, message: str) -> None:
        self._log("DEBUG", message)

    def info(self, message: str) -> None:
        self._log("INFO", message)

    def warning(self, message: str) -> None:
        self._log("WARNING", message)

    def error(self, message: str) -> None:
        self._log("ERROR", message)

    def critical(self, message: str) -> None:
        self._log("CRITICAL", message)

    def exception(self, message: str) -> None:
        self._log("ERROR", message)

    msg = info
    warn = warning
    fatal = critical


def _configure_structlog(numeric_level: int) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event"], drop_missing=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=LoguruLogger,
        cache_logger_on_first_use=False,
    )


def configure_logging(mode: str | None = None, log_level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging sinks and structured loggers.

    Args:
        mode: Logging mode (interactive/production), auto-detected if None
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Custom log file path, uses default if None
    """
    if mode is None:
        mode = detect_logging_mode()

    setup_third_party_logging()

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    level_name = logging.getLevelName(numeric_level)
    logging.getLogger().setLevel(numeric_level)

    logger.remove()
    _configure_structlog(numeric_level)

    if mode == LoggingMode.INTERACTIVE:
        # Interactive mode: full logs go to files
        log_dir = Path("logs")
        try:
            log_dir.mkdir(exist_ok=True)
        except OSError:
            mode = LoggingMode.PRODUCTION

    if mode == LoggingMode.PRODUCTION:
        logger.add(sys.stdout, level=level_name, format="{time} | {level} | {name} | {message}", serialize=True)
        return

    # stderr only sees warnings so the progress bar stays readable
    logger.add(sys.stderr, level="WARNING", format="<level>{level: <8}</level> | {message}")

    log_file_path = log_file or str(log_dir / "pokedict.log")

    # Human-readable logs
    logger.add(
        log_file_path,
        level=level_name,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name} - {message}",
        rotation="10 MB",
        retention="7 days",
    )

    # JSON logs for machine processing
    logger.add(
        log_dir / "pokedict.json",
        level=level_name,
        format="{time} | {level} | {name} | {message}",
        serialize=True,
        rotation="10 MB",
        retention="7 days",
    )

    # Errors only
    logger.add(
        log_dir / "errors.log",
        level="ERROR",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name} - {message}",
        backtrace=True,
        diagnose=True,
    )


def get_logging_status() -> dict[str, Any]:
    """Get current logging configuration status."""
    mode = detect_logging_mode()
    log_dir = Path("logs")

    return {
        "mode": mode,
        "log_directory": str(log_dir.absolute()) if log_dir.exists() else None,
        "log_files": {
            "main": str(log_dir / "pokedict.log") if mode == LoggingMode.INTERACTIVE else None,
            "json": str(log_dir / "pokedict.json") if mode == LoggingMode.INTERACTIVE else None,
            "errors": str(log_dir / "errors.log") if mode == LoggingMode.INTERACTIVE else None,
        },
        "third_party_suppressed": QUIETED_LOGGERS + ["py.warnings"],
    }
