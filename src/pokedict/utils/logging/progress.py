# ABOUTME: Progress tracking for batch extraction using Rich's built-in capabilities
# ABOUTME: One bar for the whole batch, advanced from worker threads

from typing import Any

from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn


class BatchProgressTracker:
    """Advances a Rich progress task as entries finish."""

    def __init__(self, progress: Progress, task_id: Any):
        self.progress = progress
        self.task_id = task_id

    def __call__(self, label: str, completed: int, total: int) -> None:
        # Rich's Progress is thread-safe, so workers may call this directly
        self.progress.update(self.task_id, completed=completed, total=total, description=f"📖 {label}")


def create_batch_progress(
    console, total: int, initial_description: str = "📖 Reading Pokédex pages..."
) -> tuple[Progress, Any, BatchProgressTracker]:
    """Create a progress bar for a batch of entries.

    Args:
        console: Rich console instance
        total: Number of entries in the batch
        initial_description: Initial progress description

    Returns:
        Tuple of (progress, task_id, tracker)
    """
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )

    task_id = progress.add_task(initial_description, total=total)
    tracker = BatchProgressTracker(progress, task_id)

    return progress, task_id, tracker
