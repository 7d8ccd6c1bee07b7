"""SubprocessHarness — runs a TaskUnit as a child process with timeout and pacing."""

import asyncio
import os
import signal
import time
from pathlib import Path

from rxec.execution.domain.result import RunOutcome, RunResult
from rxec.execution.domain.task import TaskUnit

_POSIX = os.name == "posix"


class SubprocessHarness:
    """Spawns the unit's command, captures its output and enforces the timeout.

    Satisfies the ExecutionHarness protocol structurally. Every failure mode is
    reported as a RunResult outcome; nothing is raised to the scheduler except
    cancellation.
    """

    def __init__(
        self,
        cwd: Path,
        timeout_seconds: float | None = None,
        post_run_delay: float | None = None,
    ) -> None:
        self._cwd = cwd
        self._timeout_seconds = timeout_seconds
        self._post_run_delay = post_run_delay

    async def execute(self, unit: TaskUnit) -> RunResult:
        """Run the unit to completion, then hold for the pacing delay if configured."""
        result = await self._run(unit=unit)
        if self._post_run_delay:
            await asyncio.sleep(self._post_run_delay)
        return result

    async def _run(self, unit: TaskUnit) -> RunResult:
        started_at = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                *unit.argv(),
                cwd=self._cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=_POSIX,
            )
        except (OSError, ValueError) as exc:
            # ValueError: an argument the OS cannot take, e.g. an embedded NUL.
            return RunResult(
                variant=unit.variant,
                repeat_index=unit.repeat_index,
                outcome=RunOutcome.SPAWN_FAILED,
                error=f"cannot start {unit.command!r}: {exc}",
                elapsed_seconds=time.monotonic() - started_at,
            )

        # communicate() drains both pipes while waiting, so a chatty child
        # cannot block on a full pipe before it exits. It is shielded so that
        # output read before a timeout can still be collected afterwards.
        drain = asyncio.ensure_future(proc.communicate())
        try:
            async with asyncio.timeout(self._timeout_seconds):
                stdout, stderr = await asyncio.shield(drain)
        except TimeoutError:
            exit_code = proc.returncode
            await _kill(proc)
            if exit_code is None:
                await asyncio.gather(drain, return_exceptions=True)
                return RunResult(
                    variant=unit.variant,
                    repeat_index=unit.repeat_index,
                    outcome=RunOutcome.TIMED_OUT,
                    error=f"timed out after {self._timeout_seconds}s",
                    elapsed_seconds=time.monotonic() - started_at,
                )
            # The command exited in time; something it left behind in its
            # process group held the pipes open until the kill.
            return await self._collect_after_exit(
                unit=unit,
                drain=drain,
                exit_code=exit_code,
                started_at=started_at,
            )
        except OSError as exc:
            exit_code = proc.returncode
            await _kill(proc)
            return _capture_failed(
                unit=unit, exit_code=exit_code, exc=exc, started_at=started_at
            )
        except asyncio.CancelledError:
            await _kill(proc)
            drain.cancel()
            raise

        return RunResult(
            variant=unit.variant,
            repeat_index=unit.repeat_index,
            outcome=RunOutcome.EXITED,
            exit_code=proc.returncode,
            stdout=stdout,
            stderr=stderr,
            elapsed_seconds=time.monotonic() - started_at,
        )

    async def _collect_after_exit(
        self,
        unit: TaskUnit,
        drain: asyncio.Future[tuple[bytes, bytes]],
        exit_code: int,
        started_at: float,
    ) -> RunResult:
        try:
            stdout, stderr = await drain
        except OSError as exc:
            return _capture_failed(
                unit=unit, exit_code=exit_code, exc=exc, started_at=started_at
            )
        return RunResult(
            variant=unit.variant,
            repeat_index=unit.repeat_index,
            outcome=RunOutcome.EXITED,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            elapsed_seconds=time.monotonic() - started_at,
        )


def _capture_failed(
    unit: TaskUnit, exit_code: int | None, exc: OSError, started_at: float
) -> RunResult:
    return RunResult(
        variant=unit.variant,
        repeat_index=unit.repeat_index,
        outcome=RunOutcome.CAPTURE_FAILED,
        exit_code=exit_code,
        error=f"cannot read output: {exc}",
        elapsed_seconds=time.monotonic() - started_at,
    )


async def _kill(proc: asyncio.subprocess.Process) -> None:
    """SIGKILL the child's whole process group, then reap the child.

    The group is signalled even when the child has already exited, so
    background processes it started do not outlive the run.
    """
    try:
        if _POSIX:
            os.killpg(proc.pid, signal.SIGKILL)
        elif proc.returncode is None:
            proc.kill()
    except ProcessLookupError:
        pass
    await proc.wait()
