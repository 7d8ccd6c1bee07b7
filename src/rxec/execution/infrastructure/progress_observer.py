"""ProgressExecutionObserver — renders per-variant Rich progress bars to stderr."""

from __future__ import annotations

import sys
from pathlib import Path

from rich.console import Console, Group
from rich.live import Live
from rich.markup import escape
from rich.progress import (
    Progress,
    ProgressColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text

_OVERALL = "Overall"
_EMPTY_VARIANT_LABEL = "(no argument)"

_VARIANT_COLORS: list[str] = [
    "cyan",
    "green",
    "yellow",
    "magenta",
    "blue",
]


def display_name(variant: str) -> str:
    return variant if variant != "" else _EMPTY_VARIANT_LABEL


class _CountsColumn(ProgressColumn):
    """Renders done+inflight/total, with failures in red when there are any."""

    def render(self, task: Task) -> Text:
        done = int(task.fields.get("done", 0))
        inflight = int(task.fields.get("inflight", 0))
        failed = int(task.fields.get("failed", 0))
        total = int(task.total or 0)
        text = Text.assemble(
            (str(done), "bright_green"),
            ("+", "dim white"),
            (str(inflight), "grey50"),
            ("/", "dim white"),
            (str(total), "default"),
        )
        if failed:
            text.append(f"  {failed} failed", style="red")
        return text


class _ThreeSegmentBarColumn(ProgressColumn):
    """ProgressColumn that renders three segments: done, in-flight, remaining."""

    def __init__(self, bar_width: int = 40) -> None:
        super().__init__()
        self.bar_width = bar_width

    def render(self, task: Task) -> Text:
        bar_width = self.bar_width or 40
        total = task.total or 0
        if total > 0:
            done_cells = int(task.completed / total * bar_width)
            inflight = int(task.fields.get("inflight", 0))
            inflight_cells = min(
                int(inflight / total * bar_width),
                bar_width - done_cells,
            )
        else:
            done_cells = 0
            inflight_cells = 0
        remaining_cells = bar_width - done_cells - inflight_cells

        result = Text()
        result.append("█" * done_cells, style="bright_green")
        result.append("▒" * inflight_cells, style="grey50")
        result.append("░" * remaining_cells, style="dim white")
        return result


def _make_progress(console: Console) -> Progress:
    return Progress(
        TextColumn("{task.description}"),
        _ThreeSegmentBarColumn(bar_width=40),
        _CountsColumn(),
        TimeElapsedColumn(),
        console=console,
        refresh_per_second=10,
        transient=False,
    )


class ProgressExecutionObserver:
    """Renders one progress row per variant plus an Overall row on stderr.

    Counters are tracked even when ``disabled=True``, which suppresses all
    terminal output (useful in tests and with JSON logging).

    Does NOT inherit from ExecutionObserver (structural typing via Protocol).
    """

    def __init__(self, disabled: bool = False) -> None:
        self._disabled = disabled
        self._done: dict[str, int] = {}
        self._inflight: dict[str, int] = {}
        self._failed: dict[str, int] = {}
        self._total: dict[str, int] = {}
        self._task_ids: dict[str, TaskID] = {}
        self._progress: Progress | None = None
        self._live: Live | None = None

    @property
    def done(self) -> dict[str, int]:
        return dict(self._done)

    @property
    def inflight(self) -> dict[str, int]:
        return dict(self._inflight)

    @property
    def failed(self) -> dict[str, int]:
        return dict(self._failed)

    @property
    def total(self) -> dict[str, int]:
        return dict(self._total)

    def _make_desc(self, name: str, index: int, pad_width: int) -> str:
        if name == _OVERALL:
            return f"[bold]{_OVERALL:<{pad_width}}[/bold]"
        label = escape(f"{display_name(name):<{pad_width}}")
        if sys.stderr.isatty():
            color = _VARIANT_COLORS[index % len(_VARIANT_COLORS)]
            return f"[{color}]{label}[/{color}]"
        return label

    def _update_task(self, key: str) -> None:
        if self._progress is None or key not in self._task_ids:
            return
        done = self._done.get(key, 0)
        self._progress.update(
            self._task_ids[key],
            completed=done,
            done=done,
            inflight=self._inflight.get(key, 0),
            failed=self._failed.get(key, 0),
        )

    def _bump(self, counters: dict[str, int], variant: str, delta: int) -> None:
        for key in (variant, _OVERALL):
            if key in counters:
                counters[key] = max(0, counters[key] + delta)
        if not self._disabled:
            self._update_task(key=variant)
            self._update_task(key=_OVERALL)

    def _finish(self, variant: str, failed: bool) -> None:
        self._bump(self._inflight, variant, -1)
        if failed:
            self._bump(self._failed, variant, 1)
        self._bump(self._done, variant, 1)

    def execution_started(
        self,
        command: str,
        total_runs: int,
        variants: list[str],
        repeat_count: int,
        admission_width: int,
        output_dir: Path | None,
    ) -> None:
        self._done = {}
        self._inflight = {}
        self._failed = {}
        self._total = {}
        self._task_ids = {}
        self._progress = None
        self._live = None

        # A variant listed twice shares one row.
        unique_variants = list(dict.fromkeys(variants))
        for name in variants:
            self._total[name] = self._total.get(name, 0) + repeat_count
        for name in [*unique_variants, _OVERALL]:
            self._done[name] = 0
            self._inflight[name] = 0
            self._failed[name] = 0
        self._total[_OVERALL] = total_runs

        if self._disabled:
            return

        pad_width = max(
            (len(display_name(name)) for name in [*unique_variants, _OVERALL]),
            default=len(_OVERALL),
        )
        console = Console(stderr=True)
        self._progress = _make_progress(console=console)

        self._task_ids[_OVERALL] = self._progress.add_task(
            description=self._make_desc(name=_OVERALL, index=0, pad_width=pad_width),
            total=float(total_runs),
            done=0,
            inflight=0,
            failed=0,
        )
        for i, name in enumerate(unique_variants):
            self._task_ids[name] = self._progress.add_task(
                description=self._make_desc(name=name, index=i, pad_width=pad_width),
                total=float(self._total[name]),
                done=0,
                inflight=0,
                failed=0,
            )

        legend = Text.assemble(
            f"  {command} → {output_dir}  " if output_dir is not None else "  ",
            ("█", "bright_green"),
            " done  ",
            ("▒", "grey50"),
            " in-flight  ",
            ("░", "dim white"),
            " remaining",
        )
        self._live = Live(
            Group(self._progress, Text(""), legend),
            console=console,
            refresh_per_second=10,
        )
        self._live.start()

    def execution_completed(
        self,
        total_runs: int,
        failed_runs: int,
        elapsed_seconds: float,
    ) -> None:
        if self._live is not None:
            self._live.stop()
        self._progress = None
        self._live = None
        self._task_ids = {}

    def run_started(self, variant: str, repeat_index: int, worker_id: int) -> None:
        self._bump(self._inflight, variant, 1)

    def run_completed(
        self,
        variant: str,
        repeat_index: int,
        worker_id: int,
        exit_code: int | None,
        elapsed_seconds: float,
    ) -> None:
        self._finish(variant=variant, failed=exit_code != 0)

    def run_failed(
        self,
        variant: str,
        repeat_index: int,
        worker_id: int,
        outcome: str,
        reason: str,
    ) -> None:
        self._finish(variant=variant, failed=True)

    def result_stored(self, variant: str, repeat_index: int, path: Path) -> None:
        pass

    def result_store_failed(
        self,
        variant: str,
        repeat_index: int,
        reason: str,
    ) -> None:
        pass
