"""StructlogExecutionObserver — production observer that delegates to structlog."""

from pathlib import Path

import structlog


class StructlogExecutionObserver:
    """Logs execution domain events to structlog.

    Does NOT inherit from ExecutionObserver (structural typing via Protocol).
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def execution_started(
        self,
        command: str,
        total_runs: int,
        variants: list[str],
        repeat_count: int,
        admission_width: int,
        output_dir: Path | None,
    ) -> None:
        self._log.info(
            "execution.started",
            command=command,
            total_runs=total_runs,
            variants=variants,
            repeat_count=repeat_count,
            admission_width=admission_width,
            output_dir=str(output_dir) if output_dir is not None else None,
        )

    def execution_completed(
        self,
        total_runs: int,
        failed_runs: int,
        elapsed_seconds: float,
    ) -> None:
        log = self._log.warning if failed_runs else self._log.info
        log(
            "execution.completed",
            total_runs=total_runs,
            failed_runs=failed_runs,
            elapsed_seconds=round(elapsed_seconds, 2),
        )

    def run_started(self, variant: str, repeat_index: int, worker_id: int) -> None:
        self._log.info(
            "execution.run.started",
            variant=variant,
            repeat_index=repeat_index,
            worker_id=worker_id,
        )

    def run_completed(
        self,
        variant: str,
        repeat_index: int,
        worker_id: int,
        exit_code: int | None,
        elapsed_seconds: float,
    ) -> None:
        log = self._log.info if exit_code == 0 else self._log.warning
        log(
            "execution.run.completed",
            variant=variant,
            repeat_index=repeat_index,
            worker_id=worker_id,
            exit_code=exit_code,
            elapsed_seconds=round(elapsed_seconds, 2),
        )

    def run_failed(
        self,
        variant: str,
        repeat_index: int,
        worker_id: int,
        outcome: str,
        reason: str,
    ) -> None:
        self._log.error(
            "execution.run.failed",
            variant=variant,
            repeat_index=repeat_index,
            worker_id=worker_id,
            outcome=outcome,
            reason=reason,
        )

    def result_stored(self, variant: str, repeat_index: int, path: Path) -> None:
        self._log.debug(
            "execution.result.stored",
            variant=variant,
            repeat_index=repeat_index,
            path=str(path),
        )

    def result_store_failed(
        self,
        variant: str,
        repeat_index: int,
        reason: str,
    ) -> None:
        self._log.error(
            "execution.result.store_failed",
            variant=variant,
            repeat_index=repeat_index,
            reason=reason,
        )
