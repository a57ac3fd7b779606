"""
cli/ui/progress.py - Progress tracking for parallel project audits

Thread-safe progress tracker with success/failure separation. The audit
scheduler calls set_total() once and on_complete() from worker threads
after each project finishes (outside its own lock).

Example:
    from cli.ui.progress import parallel_progress

    with parallel_progress("프로젝트 감사") as tracker:
        report = service.audit(ctx, progress_tracker=tracker)

    success, failed, total = tracker.stats
    console.print(f"완료: {success}개 성공, {failed}개 실패")
"""

from __future__ import annotations

import threading
from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    ProgressColumn,
    SpinnerColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text

if TYPE_CHECKING:
    from rich.console import Console

from .console import console as default_console


class SuccessFailColumn(ProgressColumn):
    """Custom column showing success/fail counts: '40✓ 10✗'"""

    def __init__(self, tracker: ParallelTracker) -> None:
        super().__init__()
        self._tracker = tracker

    def render(self, task: Task) -> Text:
        """Render the column with success (green) and fail (red) counts."""
        success, failed, _ = self._tracker.stats
        text = Text()
        text.append(f"{success}", style="green")
        text.append("✓ ", style="green")  # checkmark
        text.append(f"{failed}", style="red")
        text.append("✗", style="red")  # x mark
        return text


class ParallelTracker:
    """Thread-safe parallel execution progress tracker.

    Tracks success (project audited) and failure (project skipped) counts
    separately with real-time display.

    Display format:
        [spinner] 프로젝트 감사 40✓ 10✗ / 50 [progress bar] 00:15
    """

    def __init__(self, progress: Progress, task_id: TaskID, description: str) -> None:
        self._progress = progress
        self._task_id = task_id
        self._description = description
        self._lock = threading.Lock()
        self._success = 0
        self._failed = 0
        self._total = 0

    def set_total(self, total: int) -> None:
        """Set the total number of projects to process.

        Args:
            total: Total number of tasks to process
        """
        with self._lock:
            self._total = total
            self._progress.update(self._task_id, total=total)

    def on_complete(self, success: bool) -> None:
        """Record task completion (thread-safe).

        Args:
            success: True if the project was audited, False if skipped
        """
        with self._lock:
            if success:
                self._success += 1
            else:
                self._failed += 1
            self._progress.update(self._task_id, completed=self._success + self._failed)

    @property
    def stats(self) -> tuple[int, int, int]:
        """Get current statistics (success, failed, total)."""
        with self._lock:
            return (self._success, self._failed, self._total)


@contextmanager
def parallel_progress(
    description: str,
    console: Console | None = None,
    disable: bool = False,
) -> Generator[ParallelTracker, None, None]:
    """Context manager for parallel execution progress.

    Args:
        description: Description for the progress bar
        console: Rich Console to use (default: cli.ui.console)
        disable: Hide the progress bar (quiet mode)

    Yields:
        ParallelTracker for tracking parallel operations
    """
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn(""),  # Placeholder for SuccessFailColumn
        TextColumn("/"),
        MofNCompleteColumn(),
        BarColumn(bar_width=40),
        TimeElapsedColumn(),
        console=console or default_console,
        expand=False,
        disable=disable,
    )

    with progress:
        task_id = progress.add_task(f"[cyan]{description}", total=None)
        tracker = ParallelTracker(progress, task_id, description)

        # Replace placeholder column with actual SuccessFailColumn
        columns: list[ProgressColumn | str] = list(progress.columns)
        columns[2] = SuccessFailColumn(tracker)
        progress.columns = tuple(columns)

        try:
            yield tracker
        finally:
            # Update final status
            _success, failed, total = tracker.stats
            if total > 0:
                if failed == 0:
                    final_desc = f"[green]{description} 완료"
                else:
                    final_desc = f"[yellow]{description} 완료 ({failed}개 건너뜀)"
                progress.update(task_id, description=final_desc)
