"""Progress display for bulk operations."""

import time
from typing import Any, Dict, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


class ProgressTracker:
    """Manages a rich progress bar fed by the engine's progress callback."""

    def __init__(self, console: Console):
        """Initialize progress tracker.

        Args:
            console: Rich console for output
        """
        self.console = console
        self.progress: Optional[Progress] = None
        self.task_id: Optional[TaskID] = None
        self.start_time: Optional[float] = None
        self.total_items: Optional[int] = None
        self.completed_items: int = 0

    def start_progress(self, description: str = "Processing objects"):
        """Start progress tracking.

        The total is unknown until the engine reports it with the first completion.

        Args:
            description: Description for the progress bar
        """
        self.total_items = None
        self.completed_items = 0

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("({task.completed}/{task.fields[total_label]})"),
            TimeElapsedColumn(),
            console=self.console,
        )

        self.progress.start()
        self.task_id = self.progress.add_task(description, total=None, total_label="?")
        self.start_time = time.time()

    def __call__(self, completed: int, total: Optional[int]) -> None:
        """Engine progress callback: record absolute completion count."""
        self.set_progress(completed, total)

    def set_progress(self, completed: int, total: Optional[int] = None):
        """Set absolute progress value.

        Args:
            completed: Absolute number of items completed
            total: Total number of items, if known
        """
        self.completed_items = completed
        if total is not None:
            self.total_items = total

        if self.progress and self.task_id is not None:
            total_label = str(self.total_items) if self.total_items is not None else "?"
            self.progress.update(
                self.task_id,
                completed=completed,
                total=self.total_items,
                total_label=total_label,
            )

    def finish_progress(self):
        """Complete progress tracking."""
        if self.progress:
            self.progress.stop()
            self.progress = None
            self.task_id = None

    def get_elapsed_time(self) -> float:
        """Get elapsed time since progress started."""
        if self.start_time:
            return time.time() - self.start_time
        return 0.0

    def get_progress_stats(self) -> Dict[str, Any]:
        """Get current progress statistics."""
        elapsed = self.get_elapsed_time()
        stats: Dict[str, Any] = {
            "total_items": self.total_items,
            "completed_items": self.completed_items,
            "elapsed_time": elapsed,
            "items_per_second": (self.completed_items / elapsed) if elapsed > 0 else 0,
        }
        if self.total_items:
            stats["completion_percentage"] = self.completed_items / self.total_items * 100
        return stats
