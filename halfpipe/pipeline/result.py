"""Pipeline run outcome models."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .context import ExecutionContext


class RunState(str, Enum):
    """Per-run state machine.

    IDLE -> RUNNING -> {COMPLETED, FAILED, CANCELLED}. Results only ever
    carry one of the three terminal states.
    """

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:
        return self in (RunState.COMPLETED, RunState.FAILED, RunState.CANCELLED)


class PipelineResult(BaseModel):
    """Outcome of a single ``Pipeline.run``."""

    context: ExecutionContext = Field(description="Context current when the run halted")
    error: Optional[Exception] = Field(None, description="Step failure or cancellation, verbatim")
    state: RunState = Field(description="Terminal run state")
    steps_run: list[str] = Field(
        default_factory=list, description="Ids of steps that returned normally, in order"
    )
    failed_step: Optional[str] = Field(None, description="Id of the step that raised, if any")

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_tuple(self) -> tuple[ExecutionContext, Optional[Exception]]:
        """Return the ``(context, error)`` pair."""
        return self.context, self.error

    def raise_for_error(self) -> ExecutionContext:
        """Re-raise the stored error, or return the context on success."""
        if self.error is not None:
            raise self.error
        return self.context

    def summary(self) -> dict[str, Any]:
        """Get a JSON-friendly summary of the run.

        Returns:
            Dictionary with state, step ids and error details
        """
        return {
            "state": self.state.value,
            "success": self.ok,
            "steps_run": list(self.steps_run),
            "failed_step": self.failed_step,
            "error": str(self.error) if self.error is not None else None,
            "error_type": type(self.error).__name__ if self.error is not None else None,
        }
