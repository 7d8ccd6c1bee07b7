"""Observer port for the execution domain — defines events in domain language."""

from pathlib import Path
from typing import Protocol


class ExecutionObserver(Protocol):
    """Observer port emitting structured events while the scheduler drains its queue.

    Implementations may log to structlog, render progress, or record for tests.
    """

    def execution_started(
        self,
        command: str,
        total_runs: int,
        variants: list[str],
        repeat_count: int,
        admission_width: int,
        output_dir: Path | None,
    ) -> None: ...

    def execution_completed(
        self,
        total_runs: int,
        failed_runs: int,
        elapsed_seconds: float,
    ) -> None: ...

    def run_started(self, variant: str, repeat_index: int, worker_id: int) -> None: ...

    def run_completed(
        self,
        variant: str,
        repeat_index: int,
        worker_id: int,
        exit_code: int | None,
        elapsed_seconds: float,
    ) -> None: ...

    def run_failed(
        self,
        variant: str,
        repeat_index: int,
        worker_id: int,
        outcome: str,
        reason: str,
    ) -> None: ...

    def result_stored(self, variant: str, repeat_index: int, path: Path) -> None: ...

    def result_store_failed(
        self,
        variant: str,
        repeat_index: int,
        reason: str,
    ) -> None: ...
