"""TaskQueue — the ordered backlog of units the scheduler drains."""

from collections import deque
from collections.abc import Sequence
from dataclasses import replace

from rxec.execution.domain.task import TaskUnit


class TaskQueue:
    """FIFO of TaskUnits, one per variant, each repeated ``total_repeats`` times.

    Only the front unit is ever popped, so all repeats of a variant are handed
    out consecutively before the next variant starts. The queue is owned by a
    single coordinating coroutine and is not safe for concurrent mutation.
    """

    def __init__(self, units: Sequence[TaskUnit] = ()) -> None:
        self._units: deque[TaskUnit] = deque(
            unit for unit in units if unit.remaining_repeats > 0
        )

    @classmethod
    def build(
        cls,
        command: str,
        base_args: Sequence[str],
        variants: Sequence[str],
        repeat_count: int,
    ) -> "TaskQueue":
        """Expand (command × variants × repeat_count) into a queue.

        An empty variant adds no trailing argument. No variants → empty queue.
        """
        if repeat_count < 1:
            raise ValueError(f"repeat_count must be >= 1, got {repeat_count}")
        units = [
            TaskUnit(
                command=command,
                arguments=[*base_args, variant] if variant != "" else list(base_args),
                variant=variant,
                total_repeats=repeat_count,
                remaining_repeats=repeat_count,
            )
            for variant in variants
        ]
        return cls(units)

    def pop(self) -> TaskUnit | None:
        """Consume one repeat of the front unit and return a copy of it.

        The front unit is dropped once its last repeat is consumed.
        """
        if not self._units:
            return None
        front = self._units[0]
        front.remaining_repeats -= 1
        if front.remaining_repeats == 0:
            self._units.popleft()
        return replace(front, arguments=list(front.arguments))

    def is_empty(self) -> bool:
        return not self._units

    def __len__(self) -> int:
        """Number of pops left before the queue is exhausted."""
        return sum(unit.remaining_repeats for unit in self._units)

    @property
    def variants(self) -> list[str]:
        return [unit.variant for unit in self._units]

    @property
    def repeat_count(self) -> int:
        """Repeats per variant as built (0 for an empty queue)."""
        return self._units[0].total_repeats if self._units else 0
