"""ExecutionSummary — the aggregate result of a completed scheduler run."""

from pathlib import Path

from pydantic import BaseModel, Field


class ExecutionSummary(BaseModel, frozen=True):
    """Counters describing how every run of one invocation ended.

    Individual RunResults are not retained; they are handed to the sink and
    dropped, so only the tallies survive.
    """

    output_dir: Path | None = None
    total_runs: int = Field(default=0, ge=0)
    succeeded: int = Field(default=0, ge=0)
    exited_nonzero: int = Field(default=0, ge=0)
    timed_out: int = Field(default=0, ge=0)
    spawn_failed: int = Field(default=0, ge=0)
    capture_failed: int = Field(default=0, ge=0)
    store_failures: int = Field(default=0, ge=0)
    elapsed_seconds: float = Field(default=0.0, ge=0)

    @property
    def failed(self) -> int:
        return self.total_runs - self.succeeded

    @property
    def all_succeeded(self) -> bool:
        return self.failed == 0 and self.store_failures == 0
