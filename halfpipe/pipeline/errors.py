"""Exceptions raised by pipeline registration and execution."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .context import ExecutionContext


class PipelineError(Exception):
    """Base class for recoverable pipeline errors."""


class DuplicateStepError(PipelineError, ValueError):
    """Raised when a step id is registered twice."""

    def __init__(self, step_id: str):
        self.step_id = step_id
        super().__init__(f"duplicate id for step: {step_id}")


class UnknownStepError(PipelineError, KeyError):
    """Raised when looking up a step id that was never registered."""

    def __init__(self, step_id: str):
        self.step_id = step_id
        super().__init__(step_id)

    def __str__(self) -> str:
        return f"unknown step: {self.step_id}"


class Cancelled(PipelineError):
    """Raised (or returned) when a run observes a cancelled context.

    Attributes:
        reason: Whatever the canceller supplied, or None
    """

    default_message = "context canceled"

    def __init__(self, reason: Any = None):
        self.reason = reason
        message = self.default_message if reason is None else f"{self.default_message}: {reason}"
        super().__init__(message)


class DeadlineExceeded(Cancelled):
    """Cancellation caused by a context deadline passing."""

    default_message = "context deadline exceeded"


class StepError(PipelineError):
    """Failure raised by a step that wants to report its own context.

    Steps may raise any exception; this one only exists so a step can hand
    back the context it had built up before failing.
    """

    def __init__(self, message: str, context: "ExecutionContext | None" = None):
        super().__init__(message)
        self.context = context


class RegistrationFault(BaseException):
    """Fatal registration error raised by ``Pipeline.must_add_step``.

    Derives from BaseException so ``except Exception`` handlers do not
    recover from it.
    """
