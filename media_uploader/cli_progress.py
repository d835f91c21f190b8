"""Console rendering and progress helpers for media-up CLI."""
from __future__ import annotations

import time
from typing import Any, Dict, Optional

from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn
from rich.table import Table

from .orchestrator.models import TaskState, UploadTask

console = Console(stderr=True)

# Progress bar position reached when a task enters each state
STATE_STEPS = {
    TaskState.PENDING: 0,
    TaskState.COMPRESSING: 1,
    TaskState.REQUESTING_CREDENTIAL: 2,
    TaskState.TRANSFERRING: 3,
    TaskState.RESOLVING: 4,
    TaskState.SUCCEEDED: 5,
    TaskState.FAILED: 5,
}


def _echo(message: str) -> None:
    console.print(message)


def _human_size(value: int) -> str:
    size = float(max(value, 0))
    units = ["B", "KB", "MB", "GB", "TB"]
    unit_idx = 0
    while size >= 1024.0 and unit_idx < len(units) - 1:
        size /= 1024.0
        unit_idx += 1
    if unit_idx == 0:
        return f"{int(size)} {units[unit_idx]}"
    return f"{size:.2f} {units[unit_idx]}"


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    panel = Panel(
        table,
        title="[bold green]media-up[/bold green]",
        subtitle="[dim]batch image uploader[/dim]",
        border_style="blue",
    )
    console.print(panel)


class BatchProgressDisplay:
    """Event-based console display for one upload batch."""

    def __init__(self):
        self._tasks: Dict[str, TaskID] = {}
        self._live: Optional[Live] = None
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold cyan]{task.fields[label]}", justify="left"),
            BarColumn(bar_width=28),
            TextColumn("[dim]{task.fields[state]}", justify="left"),
            expand=False,
            console=console,
        )

    def _emit_timeline(
        self,
        status: str,
        name: str,
        size_bytes: Optional[int] = None,
        error: Optional[str] = None,
    ) -> None:
        stamp = time.strftime("%H:%M:%S")
        size_label = f" {_human_size(size_bytes)}" if size_bytes and size_bytes > 0 else ""
        error_label = f" cause={error}" if error else ""
        palette = {
            "DONE": "green",
            "FAIL": "red",
            "SKIP": "yellow",
        }
        color = palette.get(status, "white")
        _echo(f"[dim]{stamp}[/dim] [{color}]{status:<4}[/{color}] {name}{size_label}{error_label}")

    def _start_live(self) -> None:
        if self._live is not None:
            return
        self._live = Live(
            self._progress,
            console=console,
            refresh_per_second=8,
            vertical_overflow="visible",
        )
        self._live.start()

    def _stop_live(self) -> None:
        if self._live is None:
            return
        self._live.stop()
        self._live = None

    def on_task_state(self, task: UploadTask) -> None:
        task_key = task.placeholder.id
        step = STATE_STEPS[task.state]

        if task_key not in self._tasks:
            self._start_live()
            self._tasks[task_key] = self._progress.add_task(
                "upload",
                label=task.filename[:60],
                total=max(STATE_STEPS.values()),
                state=task.state.value,
            )

        self._progress.update(self._tasks[task_key], completed=step, state=task.state.value)

        if task.state.settled:
            self._progress.remove_task(self._tasks.pop(task_key))
            payload = task.payload or task.source
            if task.state is TaskState.SUCCEEDED:
                self._emit_timeline("DONE", task.filename, size_bytes=payload.size)
            else:
                error = task.result.error if task.result else None
                self._emit_timeline("FAIL", task.filename, size_bytes=payload.size, error=error)

    def on_validation_failed(self, error: Any) -> None:
        name = getattr(error, "filename", "file")
        reason = getattr(error, "reason", str(error))
        self._emit_timeline("SKIP", name, error=reason)

    def on_batch_failed(self, count: int, message: str) -> None:
        _echo(f"[red]{message}[/red]")

    def on_finish(self, result: Any) -> None:
        self._stop_live()
        added = len(getattr(result, "added", ()))
        failed = getattr(result, "failed", 0)
        dropped = getattr(result, "dropped", 0)
        rejected = len(getattr(result, "rejected", ()))
        _echo(
            f"[bold]Finished[/bold] added={added} failed={failed} "
            f"rejected={rejected} dropped={dropped}"
        )
