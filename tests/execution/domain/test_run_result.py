"""Tests for RunResult and ExecutionSummary value objects."""

import pytest
from pydantic import ValidationError

from rxec.execution.domain.result import RunOutcome, RunResult
from rxec.execution.domain.summary import ExecutionSummary


class TestRunResult:
    def test_zero_exit_succeeds(self) -> None:
        result = RunResult(
            variant="a", repeat_index=1, outcome=RunOutcome.EXITED, exit_code=0
        )
        assert result.succeeded

    def test_nonzero_exit_does_not_succeed(self) -> None:
        result = RunResult(
            variant="a", repeat_index=1, outcome=RunOutcome.EXITED, exit_code=2
        )
        assert not result.succeeded

    def test_timeout_does_not_succeed(self) -> None:
        result = RunResult(variant="a", repeat_index=1, outcome=RunOutcome.TIMED_OUT)
        assert not result.succeeded

    def test_label_joins_variant_and_repeat(self) -> None:
        result = RunResult(variant="host", repeat_index=3, outcome=RunOutcome.EXITED)
        assert result.label == "host-3"

    def test_repeat_index_starts_at_one(self) -> None:
        with pytest.raises(ValidationError):
            RunResult(variant="a", repeat_index=0, outcome=RunOutcome.EXITED)

    def test_is_frozen(self) -> None:
        result = RunResult(variant="a", repeat_index=1, outcome=RunOutcome.EXITED)
        with pytest.raises(ValidationError):
            result.variant = "b"  # type: ignore[misc]


class TestExecutionSummary:
    def test_failed_counts_everything_but_successes(self) -> None:
        summary = ExecutionSummary(
            total_runs=5, succeeded=2, exited_nonzero=1, timed_out=1, spawn_failed=1
        )
        assert summary.failed == 3
        assert not summary.all_succeeded

    def test_store_failure_spoils_a_clean_run(self) -> None:
        summary = ExecutionSummary(total_runs=2, succeeded=2, store_failures=1)
        assert summary.failed == 0
        assert not summary.all_succeeded

    def test_clean_run(self) -> None:
        summary = ExecutionSummary(total_runs=2, succeeded=2)
        assert summary.all_succeeded
