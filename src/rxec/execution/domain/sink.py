"""ResultSink Protocol — persists completed runs."""

from typing import Protocol

from rxec.execution.domain.result import RunResult


class ResultSink(Protocol):
    """Stores one RunResult. Raises ResultStoreError if it cannot be written."""

    def store(self, result: RunResult) -> None: ...
