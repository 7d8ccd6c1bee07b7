"""Tests for SubprocessHarness — runs real child processes via the current interpreter."""

import asyncio
import os
import sys
import time
from pathlib import Path

import pytest

from rxec.execution.domain.result import RunOutcome
from rxec.execution.domain.task import TaskUnit
from rxec.execution.infrastructure.subprocess_harness import SubprocessHarness


def _unit(script: str, variant: str = "v", command: str = sys.executable) -> TaskUnit:
    return TaskUnit(
        command=command,
        arguments=["-c", script],
        variant=variant,
        total_repeats=1,
        remaining_repeats=0,
    )


class TestCapture:
    async def test_captures_stdout_and_exit_code(self, tmp_path: Path) -> None:
        harness = SubprocessHarness(cwd=tmp_path)
        result = await harness.execute(_unit("print('hello')"))
        assert result.outcome is RunOutcome.EXITED
        assert result.exit_code == 0
        assert result.stdout.strip() == b"hello"
        assert result.succeeded
        assert result.variant == "v"
        assert result.repeat_index == 1

    async def test_nonzero_exit_keeps_stderr(self, tmp_path: Path) -> None:
        harness = SubprocessHarness(cwd=tmp_path)
        result = await harness.execute(
            _unit("import sys; sys.stderr.write('oops'); sys.exit(3)")
        )
        assert result.outcome is RunOutcome.EXITED
        assert result.exit_code == 3
        assert result.stderr == b"oops"
        assert not result.succeeded

    async def test_runs_in_configured_directory(self, tmp_path: Path) -> None:
        harness = SubprocessHarness(cwd=tmp_path)
        result = await harness.execute(_unit("import os; print(os.getcwd())"))
        assert Path(result.stdout.decode().strip()).resolve() == tmp_path.resolve()

    async def test_large_output_does_not_block(self, tmp_path: Path) -> None:
        harness = SubprocessHarness(cwd=tmp_path, timeout_seconds=10)
        result = await harness.execute(
            _unit("import sys; sys.stdout.write('x' * 1_000_000)")
        )
        assert result.outcome is RunOutcome.EXITED
        assert len(result.stdout) == 1_000_000

    async def test_output_is_raw_bytes(self, tmp_path: Path) -> None:
        harness = SubprocessHarness(cwd=tmp_path)
        result = await harness.execute(
            _unit("import sys; sys.stdout.buffer.write(bytes([0, 255, 10]))")
        )
        assert result.stdout == bytes([0, 255, 10])


class TestTimeout:
    async def test_slow_run_is_killed(self, tmp_path: Path) -> None:
        harness = SubprocessHarness(cwd=tmp_path, timeout_seconds=0.5)
        started = time.monotonic()
        result = await harness.execute(_unit("import time; time.sleep(30)"))
        assert result.outcome is RunOutcome.TIMED_OUT
        assert result.exit_code is None
        assert result.error is not None and "timed out" in result.error
        assert time.monotonic() - started < 10

    async def test_fast_run_beats_timeout(self, tmp_path: Path) -> None:
        harness = SubprocessHarness(cwd=tmp_path, timeout_seconds=10)
        result = await harness.execute(_unit("print('quick')"))
        assert result.outcome is RunOutcome.EXITED


class TestSpawnFailure:
    async def test_missing_executable(self, tmp_path: Path) -> None:
        harness = SubprocessHarness(cwd=tmp_path)
        result = await harness.execute(
            _unit("", command=str(tmp_path / "no-such-binary"))
        )
        assert result.outcome is RunOutcome.SPAWN_FAILED
        assert result.exit_code is None
        assert result.error is not None and "cannot start" in result.error


class TestPacing:
    async def test_post_run_delay_holds_the_slot(self, tmp_path: Path) -> None:
        harness = SubprocessHarness(cwd=tmp_path, post_run_delay=0.3)
        started = time.monotonic()
        result = await harness.execute(_unit("pass"))
        assert time.monotonic() - started >= 0.3
        # The delay is not part of the run itself.
        assert result.elapsed_seconds < time.monotonic() - started

    async def test_delay_also_follows_failures(self, tmp_path: Path) -> None:
        harness = SubprocessHarness(cwd=tmp_path, post_run_delay=0.3)
        started = time.monotonic()
        result = await harness.execute(_unit("", command=str(tmp_path / "missing")))
        assert result.outcome is RunOutcome.SPAWN_FAILED
        assert time.monotonic() - started >= 0.3


def _is_gone(pid: int) -> bool:
    """True once *pid* no longer exists or is only a zombie awaiting its reaper."""
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return True
    stat = Path(f"/proc/{pid}/stat")
    try:
        state = stat.read_text().rsplit(")", 1)[1].split()[0]
    except (OSError, IndexError):
        return True
    return state in ("Z", "X")


@pytest.mark.skipif(not sys.platform.startswith("linux"), reason="needs /proc and sh")
class TestBackgroundedChildren:
    """The command exits in time but leaves a process holding its stdout."""

    async def test_exit_before_deadline_is_not_a_timeout(self, tmp_path: Path) -> None:
        harness = SubprocessHarness(cwd=tmp_path, timeout_seconds=1.0)
        unit = TaskUnit(
            command="sh",
            arguments=["-c", "echo hi; sleep 30 & echo $! > bg.pid; exit 4"],
            variant="bg",
            total_repeats=1,
            remaining_repeats=0,
        )
        started = time.monotonic()
        result = await harness.execute(unit)

        assert result.outcome is RunOutcome.EXITED
        assert result.exit_code == 4
        assert result.stdout == b"hi\n"
        assert time.monotonic() - started < 10

    async def test_leftover_process_group_is_killed(self, tmp_path: Path) -> None:
        harness = SubprocessHarness(cwd=tmp_path, timeout_seconds=1.0)
        unit = TaskUnit(
            command="sh",
            arguments=["-c", "echo hi; sleep 30 & echo $! > bg.pid"],
            variant="bg",
            total_repeats=1,
            remaining_repeats=0,
        )
        await harness.execute(unit)

        pid = int((tmp_path / "bg.pid").read_text())
        deadline = time.monotonic() + 5
        while not _is_gone(pid) and time.monotonic() < deadline:
            await asyncio.sleep(0.05)
        assert _is_gone(pid)


class TestUnspawnableArguments:
    async def test_nul_in_argument_is_a_spawn_failure(self, tmp_path: Path) -> None:
        harness = SubprocessHarness(cwd=tmp_path)
        unit = TaskUnit(
            command=sys.executable,
            arguments=["-c", "pass", "a\x00b"],
            variant="a\x00b",
            total_repeats=1,
            remaining_repeats=0,
        )
        result = await harness.execute(unit)
        assert result.outcome is RunOutcome.SPAWN_FAILED
        assert result.error is not None and "cannot start" in result.error
