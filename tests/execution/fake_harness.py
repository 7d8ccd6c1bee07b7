"""FakeHarness — in-memory ExecutionHarness that scripts outcomes per variant."""

import asyncio
import time
from dataclasses import dataclass

from rxec.execution.domain.result import RunOutcome, RunResult
from rxec.execution.domain.task import TaskUnit


@dataclass(frozen=True)
class RunRecord:
    variant: str
    repeat_index: int
    in_flight_at_start: int
    started_at: float
    finished_at: float


class FakeHarness:
    """Returns scripted results without spawning processes.

    Records every unit it was given (in start order), the number of executions
    in flight as each one started (itself included), and monotonic start and
    finish times. ``finished_at`` is taken before the optional
    ``post_run_delay``, mirroring where the real harness paces.
    """

    def __init__(
        self,
        exit_codes: dict[str, int] | None = None,
        outcomes: dict[str, RunOutcome] | None = None,
        delay_seconds: float = 0.01,
        delays: dict[str, float] | None = None,
        post_run_delay: float | None = None,
    ) -> None:
        self._exit_codes = exit_codes or {}
        self._outcomes = outcomes or {}
        self._delay_seconds = delay_seconds
        self._delays = delays or {}
        self._post_run_delay = post_run_delay
        self._units: list[TaskUnit] = []
        self._records: list[RunRecord] = []
        self._in_flight = 0
        self._max_in_flight = 0

    @property
    def units(self) -> list[TaskUnit]:
        return self._units

    @property
    def records(self) -> list[RunRecord]:
        """One record per finished run, in start order."""
        return sorted(self._records, key=lambda r: r.started_at)

    @property
    def max_in_flight(self) -> int:
        return self._max_in_flight

    async def execute(self, unit: TaskUnit) -> RunResult:
        self._units.append(unit)
        self._in_flight += 1
        in_flight_at_start = self._in_flight
        self._max_in_flight = max(self._max_in_flight, self._in_flight)
        started_at = time.monotonic()
        try:
            await asyncio.sleep(self._delays.get(unit.variant, self._delay_seconds))
        finally:
            self._in_flight -= 1
        self._records.append(
            RunRecord(
                variant=unit.variant,
                repeat_index=unit.repeat_index,
                in_flight_at_start=in_flight_at_start,
                started_at=started_at,
                finished_at=time.monotonic(),
            )
        )
        if self._post_run_delay:
            await asyncio.sleep(self._post_run_delay)

        outcome = self._outcomes.get(unit.variant, RunOutcome.EXITED)
        if outcome is not RunOutcome.EXITED:
            return RunResult(
                variant=unit.variant,
                repeat_index=unit.repeat_index,
                outcome=outcome,
                error=f"scripted {outcome}",
            )
        return RunResult(
            variant=unit.variant,
            repeat_index=unit.repeat_index,
            outcome=RunOutcome.EXITED,
            exit_code=self._exit_codes.get(unit.variant, 0),
            stdout=" ".join(unit.argv()).encode(),
        )
