# ABOUTME: Logger utilities with context binding and operation tracking decorators
# ABOUTME: Binds dex ids, page URLs, build runs, and failed extraction stages to structlog events

import functools
import time
import uuid
from collections.abc import Callable
from typing import Any, TypeVar

import structlog

F = TypeVar("F", bound=Callable[..., Any])


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance with automatic module detection.

    Args:
        name: Logger name, auto-detected from caller if None

    Returns:
        Configured structlog logger instance
    """
    if name is None:
        import inspect

        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", "unknown")

    return structlog.get_logger(name or "pokedict")


def new_run_id() -> str:
    """Short random id tying together the events of one build or operation."""
    return uuid.uuid4().hex[:8]


def failure_fields(exc: BaseException) -> dict[str, Any]:
    """Key/value fields describing a failure, including the extraction stage path when there is one."""
    fields: dict[str, Any] = {"error": str(exc), "error_type": type(exc).__name__}
    stages = getattr(exc, "stages", None)
    if stages:
        fields["stage"] = " > ".join(stages)
    return fields


def with_operation_context(operation: str, **context) -> Callable[[F], F]:
    """Log start, completion, and failure (with duration) of every call to the decorated function.

    Args:
        operation: Operation name, bound as ``operation``
        **context: Extra fields bound to every event, e.g. ``url``
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            log = get_logger(func.__module__).bind(operation=operation, run_id=new_run_id(), **context)

            log.info(f"Starting {operation}")
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                log.error(
                    f"Failed {operation}",
                    duration_seconds=round(time.perf_counter() - start, 3),
                    **failure_fields(exc),
                )
                raise

            log.info(f"Completed {operation}", duration_seconds=round(time.perf_counter() - start, 3))
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


class LogContext:
    """Binds fields for the duration of a block and logs the failure that escapes it."""

    def __init__(self, logger: structlog.stdlib.BoundLogger, failure_event: str, **context):
        self.logger = logger
        self.failure_event = failure_event
        self.context = {key: value for key, value in context.items() if value is not None}
        self.bound_logger: structlog.stdlib.BoundLogger | None = None

    def __enter__(self) -> structlog.stdlib.BoundLogger:
        self.bound_logger = self.logger.bind(**self.context)
        return self.bound_logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_val is not None and self.bound_logger is not None:
            self.bound_logger.error(self.failure_event, **failure_fields(exc_val))


def with_entry_context(dex_id: Any, url: str | None = None) -> LogContext:
    """Logging context for work on one Pokédex entry.

    Args:
        dex_id: Dex number of the entry (DexId or raw int), bound as its ``#0025`` form
        url: Source page URL, if known
    """
    return LogContext(get_logger(), "Entry failed", dex_id=str(dex_id), url=url)


def with_pipeline_context(pipeline_name: str, **context) -> LogContext:
    """Logging context for a whole build run; every event carries the same ``run_id``.

    Args:
        pipeline_name: Name of the pipeline, e.g. ``"build"``
        **context: Additional fields such as the selected generations
    """
    return LogContext(
        get_logger(), f"{pipeline_name} failed", pipeline=pipeline_name, run_id=new_run_id(), **context
    )
