"""Pipeline executor for running registered steps in order."""

import asyncio
import inspect
from collections.abc import Callable
from typing import Optional

from halfpipe.config import get_logger, settings

from .base_step import Step, StepAction, as_step
from .context import ExecutionContext
from .errors import DuplicateStepError, RegistrationFault, StepError
from .registry import StepRegistry
from .result import PipelineResult, RunState

logger = get_logger(__name__)


class Pipeline:
    """Ordered sequence of steps run one after another.

    The pipeline:
    1. Runs steps in registration order, one at a time
    2. Hands each step the context returned by the previous one
    3. Checks the context for cancellation before each step
    4. Stops at the first failure and returns that error unchanged
    """

    def __init__(self, name: Optional[str] = None):
        """Initialize an empty pipeline.

        Args:
            name: Pipeline name for logging. Defaults to
                ``settings.pipeline.default_name``.
        """
        self.name = name or settings.pipeline.default_name
        self._registry = StepRegistry()
        self.logger = logger.bind(pipeline=self.name)

    def add_step(self, step_id: str, step: Step | StepAction) -> "Pipeline":
        """Add a step to the end of the pipeline.

        Args:
            step_id: Unique step id
            step: Object with a sync or async ``run(context)``, or a bare
                callable which is wrapped in a FunctionStep

        Returns:
            Self for method chaining

        Raises:
            DuplicateStepError: If step_id is already registered
            TypeError: If step is neither a step nor callable
        """
        resolved = as_step(step)
        try:
            self._registry.add(step_id, resolved)
        except DuplicateStepError:
            self.logger.warning("Duplicate step id rejected", step=step_id)
            raise
        self.logger.debug("Step registered", step=step_id, position=len(self._registry))
        return self

    def must_add_step(self, step_id: str, step: Step | StepAction) -> "Pipeline":
        """Add a step, treating a duplicate id as a fatal programming error.

        Meant for static registration at startup. For the recoverable
        version, see add_step.

        Raises:
            RegistrationFault: If step_id is already registered
        """
        try:
            return self.add_step(step_id, step)
        except DuplicateStepError as e:
            self.logger.critical("Duplicate step id at registration", step=step_id)
            raise RegistrationFault(str(e)) from e

    def step(self, step_id: str) -> Callable[[StepAction], StepAction]:
        """Decorator registering a function as a step via must_add_step.

        Returns the function unchanged.
        """

        def decorator(action: StepAction) -> StepAction:
            self.must_add_step(step_id, action)
            return action

        return decorator

    def steps(self) -> list[str]:
        """Get step ids in the order the pipeline will run them."""
        return self._registry.keys()

    def __len__(self) -> int:
        return len(self._registry)

    async def run(self, context: ExecutionContext) -> PipelineResult:
        """Run every registered step in order.

        Args:
            context: Initial context handed to the first step

        Returns:
            PipelineResult holding the final context and, on failure or
            cancellation, the error

        The state is CANCELLED only when the context is found cancelled
        before a step starts. An exception raised by a step is always
        FAILED and returned unchanged, even when it is a Cancelled the step
        raised itself after checking ``context.error()``.
        """
        step_ids = self._registry.keys()
        steps_run: list[str] = []

        self.logger.info("Pipeline starting", step_count=len(step_ids))

        for step_id in step_ids:
            cancelled = context.error()
            if cancelled is not None:
                self.logger.warning(
                    "Context cancelled, stopping pipeline",
                    step=step_id,
                    reason=str(cancelled),
                )
                return PipelineResult(
                    context=context,
                    error=cancelled,
                    state=RunState.CANCELLED,
                    steps_run=steps_run,
                )

            self.logger.debug("Executing step", step=step_id)

            try:
                next_context = self._registry.get(step_id).run(context)
                if inspect.isawaitable(next_context):
                    next_context = await next_context
            except Exception as e:
                if isinstance(e, StepError) and e.context is not None:
                    context = e.context
                self.logger.error("Step failed, stopping pipeline", step=step_id, error=str(e))
                return PipelineResult(
                    context=context,
                    error=e,
                    state=RunState.FAILED,
                    steps_run=steps_run,
                    failed_step=step_id,
                )

            if not isinstance(next_context, ExecutionContext):
                error = TypeError(
                    f"step {step_id!r} returned {type(next_context).__name__}, "
                    "expected ExecutionContext"
                )
                self.logger.error("Step returned no context", step=step_id, error=str(error))
                return PipelineResult(
                    context=context,
                    error=error,
                    state=RunState.FAILED,
                    steps_run=steps_run,
                    failed_step=step_id,
                )

            context = next_context
            steps_run.append(step_id)

        self.logger.info("Pipeline completed", steps_run=len(steps_run))

        return PipelineResult(context=context, state=RunState.COMPLETED, steps_run=steps_run)

    def run_sync(self, context: ExecutionContext) -> PipelineResult:
        """Run the pipeline from synchronous code.

        Must not be called while an event loop is already running in this
        thread.
        """
        return asyncio.run(self.run(context))
