"""Error types raised by config infrastructure."""

from pathlib import Path

from rxec.core.errors import RxecError


class ConfigLoadError(RxecError):
    """Raised when the config file cannot be read or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to load config {path}: {reason}")


class ConfigValidationError(RxecError):
    """Raised when the merged config fails schema or semantic validation."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to validate config: {reason}")


class ConfigFormatError(RxecError):
    """Raised when a config or template path has an unsupported extension."""

    def __init__(self, path: Path, supported: list[str]) -> None:
        self.path = path
        self.supported = supported
        super().__init__(
            f"Failed to handle config {path}: extension must be one of"
            f" {', '.join(supported)}"
        )
