"""RunConfig — the fully resolved configuration of one rxec invocation."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rxec.execution.domain.policy import (
    CappedPolicy,
    SerialPolicy,
    UnboundedPolicy,
    policy_from_parallel,
)


class RunConfig(BaseModel, frozen=True):
    """Root configuration for an rxec run.

    Field descriptions double as the comments written by ``rxec template``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    cmd: list[str] = Field(
        min_length=1,
        description=(
            "The command to run. The first element is the executable, the rest"
            " are arguments shared by every run"
        ),
    )
    args: list[str] = Field(
        default_factory=lambda: [""],
        description=(
            "Argument variants; each one is appended to the command to form one"
            " run. An empty string appends nothing. Variants must be unique"
        ),
    )
    cwd: Path = Field(
        default=Path("."),
        description="The working directory to run the command in",
    )
    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Per-run timeout in seconds. Unset means runs are never killed",
    )
    interval: float = Field(
        default=0.0,
        ge=0,
        description=(
            "Seconds to wait after each run before starting the next. Only takes"
            " effect when parallel is unset"
        ),
    )
    parallel: int | None = Field(
        default=None,
        ge=0,
        description=(
            "Number of runs in flight at once. Unset runs serially, 0 runs"
            " everything at once"
        ),
    )
    number: int = Field(
        default=1,
        ge=1,
        description="How many times to run each variant",
    )
    output: str | None = Field(
        default=None,
        min_length=1,
        description="Output directory prefix. Defaults to the command name",
    )

    @field_validator("cmd")
    @classmethod
    def _command_not_blank(cls, value: list[str]) -> list[str]:
        if not value[0].strip():
            raise ValueError("command must not be empty")
        return value

    @field_validator("args")
    @classmethod
    def _variants_unique(cls, value: list[str]) -> list[str]:
        # Each variant names its own output files.
        duplicates = sorted({v for v in value if value.count(v) > 1})
        if duplicates:
            raise ValueError(f"duplicate argument variants: {duplicates}")
        return value

    @property
    def command(self) -> str:
        return self.cmd[0]

    @property
    def base_args(self) -> list[str]:
        return list(self.cmd[1:])

    @property
    def policy(self) -> SerialPolicy | CappedPolicy | UnboundedPolicy:
        return policy_from_parallel(self.parallel, interval_seconds=self.interval)

    @property
    def output_prefix(self) -> str:
        """Configured prefix, or the base name of the command (``./bin/tool`` → ``tool``)."""
        if self.output is not None:
            return self.output
        return Path(self.command).name or self.command
