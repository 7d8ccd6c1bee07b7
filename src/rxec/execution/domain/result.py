"""RunResult value object — the outcome of a single harness invocation."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class RunOutcome(StrEnum):
    """How a run ended. Only EXITED carries captured output."""

    EXITED = "exited"
    TIMED_OUT = "timed_out"
    SPAWN_FAILED = "spawn_failed"
    CAPTURE_FAILED = "capture_failed"


class RunResult(BaseModel, frozen=True):
    """Immutable record of one run: identity, terminal status and captured bytes."""

    model_config = ConfigDict(frozen=True)

    variant: str
    repeat_index: int = Field(ge=1)
    outcome: RunOutcome
    exit_code: int | None = None
    stdout: bytes = b""
    stderr: bytes = b""
    error: str | None = None
    elapsed_seconds: float = Field(default=0.0, ge=0)

    @property
    def succeeded(self) -> bool:
        return self.outcome is RunOutcome.EXITED and self.exit_code == 0

    @property
    def label(self) -> str:
        """Run identity: ``{variant}-{repeat_index}``."""
        return f"{self.variant}-{self.repeat_index}"
