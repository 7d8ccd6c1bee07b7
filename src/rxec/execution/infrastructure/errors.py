"""Error types raised by execution infrastructure."""

from pathlib import Path

from rxec.core.errors import RxecError


class OutputDirectoryError(RxecError):
    """Raised when the per-invocation output directory cannot be created."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to create output directory {path}: {reason}")


class ResultStoreError(RxecError):
    """Raised when a single run's artifact cannot be written."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to store result {path}: {reason}")
