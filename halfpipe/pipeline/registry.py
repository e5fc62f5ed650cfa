"""Ordered, append-only registry of pipeline steps."""

from collections.abc import Iterator

from .base_step import Step
from .errors import DuplicateStepError, UnknownStepError


class StepRegistry:
    """Ordered map of (step id, step) pairs.

    Instead of overriding duplicate ids, ``add`` raises. There is no removal;
    iteration follows insertion order.
    """

    def __init__(self) -> None:
        self._keys: list[str] = []
        self._steps: dict[str, Step] = {}

    def add(self, step_id: str, step: Step) -> None:
        """Append a step.

        Raises:
            DuplicateStepError: If step_id is already registered. Nothing is
                mutated in that case.
        """
        if step_id in self._steps:
            raise DuplicateStepError(step_id)
        self._steps[step_id] = step
        self._keys.append(step_id)

    def keys(self) -> list[str]:
        """Return step ids in insertion order (a copy)."""
        return list(self._keys)

    def get(self, step_id: str) -> Step:
        try:
            return self._steps[step_id]
        except KeyError:
            raise UnknownStepError(step_id) from None

    __getitem__ = get

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._steps

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())
