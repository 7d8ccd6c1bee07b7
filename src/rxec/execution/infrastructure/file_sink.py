"""FileResultSink — writes each completed run to the output directory."""

from datetime import datetime
from pathlib import Path
from urllib.parse import quote

from rxec.execution.domain.observer import ExecutionObserver
from rxec.execution.domain.result import RunOutcome, RunResult
from rxec.execution.infrastructure.errors import OutputDirectoryError, ResultStoreError

_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
_STEM_SAFE_CHARS = " ,=@+"


def output_directory_name(prefix: str, now: datetime) -> str:
    """Build the directory name: {prefix}-{YYYYMMDDHHMMSS}."""
    return f"{prefix}-{now.strftime(_TIMESTAMP_FORMAT)}"


def create_output_directory(base: Path, prefix: str, now: datetime) -> Path:
    """Create a fresh output directory under *base*.

    Two invocations within the same second collide; the second one fails
    rather than sharing or renaming the directory.

    Raises:
        OutputDirectoryError: if the directory exists or cannot be created.
    """
    path = base / output_directory_name(prefix=prefix, now=now)
    try:
        path.mkdir()
    except FileExistsError as exc:
        raise OutputDirectoryError(path=path, reason="already exists") from exc
    except OSError as exc:
        raise OutputDirectoryError(path=path, reason=str(exc)) from exc
    return path


class FileResultSink:
    """Persists runs as ``{variant}-{repeat_index}.log`` / ``.err`` files.

    A run that exited on its own gets its raw stdout in a ``.log`` file,
    whatever the exit code. Every run that did not succeed also gets an
    ``.err`` status record, so timeouts and spawn failures leave a trace
    instead of vanishing. Timed-out runs have no ``.log`` file.

    The variant is percent-encoded in file names (``a/b`` → ``a%2Fb``), so
    distinct variants never share a file.

    Satisfies the ResultSink protocol structurally.
    """

    def __init__(self, output_dir: Path, observer: ExecutionObserver) -> None:
        self._output_dir = output_dir
        self._observer = observer

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def log_path(self, result: RunResult) -> Path:
        return self._output_dir / f"{_file_stem(result)}.log"

    def error_path(self, result: RunResult) -> Path:
        return self._output_dir / f"{_file_stem(result)}.err"

    def store(self, result: RunResult) -> None:
        """Write the run's artifacts.

        Raises:
            ResultStoreError: if a file cannot be written. Files of other runs
                are never touched.
        """
        if result.outcome is RunOutcome.EXITED:
            self._write(result=result, path=self.log_path(result), data=result.stdout)
        if not result.succeeded:
            self._write(
                result=result,
                path=self.error_path(result),
                data=_render_error_record(result),
            )

    def _write(self, result: RunResult, path: Path, data: bytes) -> None:
        try:
            # "xb" refuses to clobber: names are unique per (variant, repeat).
            with path.open("xb") as fh:
                fh.write(data)
        except OSError as exc:
            raise ResultStoreError(path=path, reason=str(exc)) from exc
        self._observer.result_stored(
            variant=result.variant,
            repeat_index=result.repeat_index,
            path=path,
        )


def _file_stem(result: RunResult) -> str:
    # Injective, and never contains a path separator ("%" itself is encoded).
    variant = quote(result.variant, safe=_STEM_SAFE_CHARS)
    return f"{variant}-{result.repeat_index}"


def _render_error_record(result: RunResult) -> bytes:
    """Status header lines followed by whatever stderr was captured."""
    exit_code = "" if result.exit_code is None else str(result.exit_code)
    lines = [
        f"variant: {result.variant}",
        f"repeat_index: {result.repeat_index}",
        f"outcome: {result.outcome}",
        f"exit_code: {exit_code}",
        f"error: {result.error or ''}",
        f"elapsed_seconds: {result.elapsed_seconds:.3f}",
        "",
    ]
    header = "\n".join(lines).encode("utf-8")
    if result.stderr:
        return header + b"\n" + result.stderr
    return header
