"""Concurrency policy models — discriminated union on `kind` field."""

from typing import Annotated, Literal, TypeAlias

from pydantic import BaseModel, Field


class SerialPolicy(BaseModel, frozen=True):
    """Admit one unit at a time, optionally pausing after each run."""

    kind: Literal["serial"] = "serial"
    interval_seconds: float = Field(default=0.0, ge=0)

    def admission_width(self, remaining: int) -> int:
        return 1

    @property
    def pacing_delay(self) -> float | None:
        return self.interval_seconds if self.interval_seconds > 0 else None


class CappedPolicy(BaseModel, frozen=True):
    """Keep up to `limit` units in flight, replenishing as runs complete."""

    kind: Literal["capped"] = "capped"
    limit: int = Field(ge=1)

    def admission_width(self, remaining: int) -> int:
        return self.limit

    @property
    def pacing_delay(self) -> float | None:
        return None


class UnboundedPolicy(BaseModel, frozen=True):
    """Admit every remaining unit immediately."""

    kind: Literal["unbounded"] = "unbounded"

    def admission_width(self, remaining: int) -> int:
        return remaining

    @property
    def pacing_delay(self) -> float | None:
        return None


ConcurrencyPolicy: TypeAlias = Annotated[
    SerialPolicy | CappedPolicy | UnboundedPolicy,
    Field(discriminator="kind"),
]


def policy_from_parallel(
    parallel: int | None, interval_seconds: float = 0.0
) -> SerialPolicy | CappedPolicy | UnboundedPolicy:
    """Map the `parallel` setting to a policy.

    ``None`` runs serially (the only mode where ``interval_seconds`` applies),
    ``0`` runs everything at once, and ``n`` keeps ``n`` runs in flight.
    """
    if parallel is None:
        return SerialPolicy(interval_seconds=interval_seconds)
    if parallel == 0:
        return UnboundedPolicy()
    return CappedPolicy(limit=parallel)
