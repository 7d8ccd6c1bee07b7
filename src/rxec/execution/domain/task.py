"""TaskUnit — one schedulable invocation of the base command."""

from dataclasses import dataclass


@dataclass(slots=True)
class TaskUnit:
    """A variant of the base command together with its repeat bookkeeping.

    Inside a TaskQueue the unit is mutated in place as repeats are consumed.
    Every pop hands out an independent copy whose ``remaining_repeats`` is the
    count left after that occurrence and whose ``repeat_index`` identifies it.
    """

    command: str
    arguments: list[str]
    variant: str
    total_repeats: int
    remaining_repeats: int

    def __post_init__(self) -> None:
        if not 0 <= self.remaining_repeats <= self.total_repeats:
            raise ValueError(
                f"remaining_repeats must be within 0..{self.total_repeats},"
                f" got {self.remaining_repeats}"
            )

    @property
    def repeat_index(self) -> int:
        """1-based index of the occurrence this unit represents once popped."""
        return self.total_repeats - self.remaining_repeats

    def argv(self) -> list[str]:
        return [self.command, *self.arguments]
