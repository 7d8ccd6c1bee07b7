"""CompositeExecutionObserver — fans out all events to a list of observers."""

from pathlib import Path

from rxec.execution.domain.observer import ExecutionObserver


class CompositeExecutionObserver:
    """Delegates every observer event to each observer in order.

    Does NOT inherit from ExecutionObserver (structural typing via Protocol).
    """

    def __init__(self, observers: list[ExecutionObserver]) -> None:
        self._observers = observers

    def execution_started(
        self,
        command: str,
        total_runs: int,
        variants: list[str],
        repeat_count: int,
        admission_width: int,
        output_dir: Path | None,
    ) -> None:
        for obs in self._observers:
            obs.execution_started(
                command=command,
                total_runs=total_runs,
                variants=variants,
                repeat_count=repeat_count,
                admission_width=admission_width,
                output_dir=output_dir,
            )

    def execution_completed(
        self,
        total_runs: int,
        failed_runs: int,
        elapsed_seconds: float,
    ) -> None:
        for obs in self._observers:
            obs.execution_completed(
                total_runs=total_runs,
                failed_runs=failed_runs,
                elapsed_seconds=elapsed_seconds,
            )

    def run_started(self, variant: str, repeat_index: int, worker_id: int) -> None:
        for obs in self._observers:
            obs.run_started(
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
        for obs in self._observers:
            obs.run_completed(
                variant=variant,
                repeat_index=repeat_index,
                worker_id=worker_id,
                exit_code=exit_code,
                elapsed_seconds=elapsed_seconds,
            )

    def run_failed(
        self,
        variant: str,
        repeat_index: int,
        worker_id: int,
        outcome: str,
        reason: str,
    ) -> None:
        for obs in self._observers:
            obs.run_failed(
                variant=variant,
                repeat_index=repeat_index,
                worker_id=worker_id,
                outcome=outcome,
                reason=reason,
            )

    def result_stored(self, variant: str, repeat_index: int, path: Path) -> None:
        for obs in self._observers:
            obs.result_stored(variant=variant, repeat_index=repeat_index, path=path)

    def result_store_failed(
        self,
        variant: str,
        repeat_index: int,
        reason: str,
    ) -> None:
        for obs in self._observers:
            obs.result_store_failed(
                variant=variant,
                repeat_index=repeat_index,
                reason=reason,
            )
