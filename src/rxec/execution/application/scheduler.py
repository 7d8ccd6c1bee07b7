"""Scheduler — drains a TaskQueue through the harness under a concurrency policy."""

import asyncio
import itertools
import time
from typing import TypeAlias
from collections import Counter
from pathlib import Path

from rxec.execution.domain.harness import ExecutionHarness
from rxec.execution.domain.observer import ExecutionObserver
from rxec.execution.domain.policy import CappedPolicy, SerialPolicy, UnboundedPolicy
from rxec.execution.domain.queue import TaskQueue
from rxec.execution.domain.result import RunOutcome, RunResult
from rxec.execution.domain.sink import ResultSink
from rxec.execution.domain.summary import ExecutionSummary
from rxec.execution.infrastructure.errors import ResultStoreError

InFlight: TypeAlias = dict[asyncio.Task[RunResult], int]


class Scheduler:
    """Admits queued units into the harness, keeping the pool at its target width.

    A single coroutine owns the queue: it admits the initial batch, then waits
    for completions and admits exactly one replacement per completed run until
    the queue is drained. The harness and sink are injected so that tests can
    substitute in-memory fakes.
    """

    def __init__(
        self,
        queue: TaskQueue,
        policy: SerialPolicy | CappedPolicy | UnboundedPolicy,
        harness: ExecutionHarness,
        sink: ResultSink,
        observer: ExecutionObserver,
        command: str = "",
        output_dir: Path | None = None,
    ) -> None:
        self._queue = queue
        self._policy = policy
        self._harness = harness
        self._sink = sink
        self._observer = observer
        self._command = command
        self._output_dir = output_dir

    async def run(self) -> ExecutionSummary:
        """Run every queued unit and return the tallied outcomes.

        Per-run failures (non-zero exit, timeout, spawn or capture failure) and
        per-file store failures are recorded and never stop the run. Any other
        exception cancels the runs still in flight and propagates.
        """
        total_runs = len(self._queue)
        if total_runs == 0:
            return ExecutionSummary(output_dir=self._output_dir)

        width = self._policy.admission_width(total_runs)
        self._observer.execution_started(
            command=self._command,
            total_runs=total_runs,
            variants=self._queue.variants,
            repeat_count=self._queue.repeat_count,
            admission_width=width,
            output_dir=self._output_dir,
        )
        started_at = time.monotonic()

        # Worker labels are observability only; the counter lives with this run.
        worker_ids = itertools.count(1)
        in_flight: InFlight = {}
        outcomes: Counter[str] = Counter()
        store_failures = 0

        try:
            while len(in_flight) < width and not self._queue.is_empty():
                self._admit(in_flight=in_flight, worker_id=next(worker_ids))

            while in_flight:
                done, _ = await asyncio.wait(
                    in_flight.keys(), return_when=asyncio.FIRST_COMPLETED
                )
                for task in done:
                    worker_id = in_flight.pop(task)
                    if not self._queue.is_empty():
                        self._admit(in_flight=in_flight, worker_id=next(worker_ids))

                    result = task.result()
                    outcomes[self._classify(result)] += 1
                    self._report(result=result, worker_id=worker_id)
                    if not self._store(result=result):
                        store_failures += 1
        finally:
            for task in in_flight:
                task.cancel()
            if in_flight:
                await asyncio.gather(*in_flight, return_exceptions=True)

        elapsed_seconds = time.monotonic() - started_at
        summary = ExecutionSummary(
            output_dir=self._output_dir,
            total_runs=total_runs,
            succeeded=outcomes["succeeded"],
            exited_nonzero=outcomes["exited_nonzero"],
            timed_out=outcomes[RunOutcome.TIMED_OUT],
            spawn_failed=outcomes[RunOutcome.SPAWN_FAILED],
            capture_failed=outcomes[RunOutcome.CAPTURE_FAILED],
            store_failures=store_failures,
            elapsed_seconds=elapsed_seconds,
        )
        self._observer.execution_completed(
            total_runs=summary.total_runs,
            failed_runs=summary.failed,
            elapsed_seconds=elapsed_seconds,
        )
        return summary

    def _admit(self, in_flight: InFlight, worker_id: int) -> None:
        unit = self._queue.pop()
        if unit is None:
            return
        self._observer.run_started(
            variant=unit.variant,
            repeat_index=unit.repeat_index,
            worker_id=worker_id,
        )
        task = asyncio.create_task(
            self._harness.execute(unit),
            name=f"rxec-worker-{worker_id}",
        )
        in_flight[task] = worker_id

    def _classify(self, result: RunResult) -> str:
        if result.outcome is RunOutcome.EXITED:
            return "succeeded" if result.succeeded else "exited_nonzero"
        return result.outcome

    def _report(self, result: RunResult, worker_id: int) -> None:
        if result.outcome is RunOutcome.EXITED:
            self._observer.run_completed(
                variant=result.variant,
                repeat_index=result.repeat_index,
                worker_id=worker_id,
                exit_code=result.exit_code,
                elapsed_seconds=result.elapsed_seconds,
            )
            return
        self._observer.run_failed(
            variant=result.variant,
            repeat_index=result.repeat_index,
            worker_id=worker_id,
            outcome=str(result.outcome),
            reason=result.error or str(result.outcome),
        )

    def _store(self, result: RunResult) -> bool:
        """Hand the result to the sink; a failed write is reported, not raised."""
        try:
            self._sink.store(result)
        except ResultStoreError as exc:
            self._observer.result_store_failed(
                variant=result.variant,
                repeat_index=result.repeat_index,
                reason=str(exc),
            )
            return False
        return True
