"""ExecutionHarness Protocol — runs one TaskUnit to completion."""

from typing import Protocol

from rxec.execution.domain.result import RunResult
from rxec.execution.domain.task import TaskUnit


class ExecutionHarness(Protocol):
    """Executes a unit and reports every outcome as a RunResult, never by raising."""

    async def execute(self, unit: TaskUnit) -> RunResult: ...
