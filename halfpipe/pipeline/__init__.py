"""Pipeline infrastructure: step registry, execution context and runner."""

from .base_step import FunctionStep, PipelineStep, Step, StepAction
from .context import CancelFunc, ExecutionContext
from .errors import (
    Cancelled,
    DeadlineExceeded,
    DuplicateStepError,
    PipelineError,
    RegistrationFault,
    StepError,
    UnknownStepError,
)
from .pipeline import Pipeline
from .registry import StepRegistry
from .result import PipelineResult, RunState

__all__ = [
    "CancelFunc",
    "Cancelled",
    "DeadlineExceeded",
    "DuplicateStepError",
    "ExecutionContext",
    "FunctionStep",
    "Pipeline",
    "PipelineError",
    "PipelineResult",
    "PipelineStep",
    "RegistrationFault",
    "RunState",
    "Step",
    "StepAction",
    "StepError",
    "StepRegistry",
    "UnknownStepError",
]
