# ABOUTME: Logging configuration, progress tracking, and output formatting
# ABOUTME: Provides rich console output and structured logging for the build

from .config import LoggingMode, configure_logging, detect_logging_mode, get_logging_status
from .progress import BatchProgressTracker, create_batch_progress
from .utils import (
    LogContext,
    failure_fields,
    get_logger,
    new_run_id,
    with_entry_context,
    with_operation_context,
    with_pipeline_context,
)

__all__ = [
    # Configuration
    "LoggingMode",
    "configure_logging",
    "detect_logging_mode",
    "get_logging_status",
    # Progress
    "BatchProgressTracker",
    "create_batch_progress",
    # Utilities
    "LogContext",
    "failure_fields",
    "get_logger",
    "new_run_id",
    "with_entry_context",
    "with_operation_context",
    "with_pipeline_context",
]
