"""Step abstractions for the pipeline."""

import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Protocol, Union, runtime_checkable

from .context import ExecutionContext

StepAction = Callable[
    [ExecutionContext],
    Union[ExecutionContext, Awaitable[ExecutionContext]],
]


@runtime_checkable
class Step(Protocol):
    """Anything that can be invoked as part of a pipeline.

    ``run`` may also be a plain method; its result is awaited only when it
    is awaitable.
    """

    async def run(self, context: ExecutionContext) -> ExecutionContext: ...


class PipelineStep(ABC):
    """Abstract base class for pipeline steps.

    Each step should:
    1. Implement run()
    2. Read what it needs from the incoming context
    3. Return a new context (``context.with_value(...)``) or the same one
    4. Raise to report failure
    """

    @abstractmethod
    async def run(self, context: ExecutionContext) -> ExecutionContext:
        """Execute the step.

        Args:
            context: Context produced by the previous step

        Returns:
            Context handed to the next step
        """


class FunctionStep(PipelineStep):
    """Step that invokes a single function.

    The action may be a plain function or a coroutine function.
    """

    def __init__(self, action: StepAction):
        if not callable(action):
            raise TypeError(f"Step action must be callable, got {type(action).__name__}")
        self.action = action

    async def run(self, context: ExecutionContext) -> ExecutionContext:
        result = self.action(context)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        name = getattr(self.action, "__qualname__", repr(self.action))
        return f"FunctionStep({name})"


def as_step(obj: Step | StepAction) -> Step:
    """Coerce a step or bare callable into a step.

    Raises:
        TypeError: If obj has no run() and is not callable
    """
    if callable(getattr(obj, "run", None)):
        return obj  # type: ignore[return-value]
    if callable(obj):
        return FunctionStep(obj)
    raise TypeError(f"{type(obj).__name__} is not a pipeline step")
