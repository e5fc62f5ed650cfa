"""Minimal sequential pipeline runner."""

from halfpipe.pipeline import (
    Cancelled,
    DeadlineExceeded,
    DuplicateStepError,
    ExecutionContext,
    FunctionStep,
    Pipeline,
    PipelineError,
    PipelineResult,
    PipelineStep,
    RegistrationFault,
    RunState,
    StepError,
    StepRegistry,
    UnknownStepError,
)

__version__ = "0.1.0"

__all__ = [
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
    "StepError",
    "StepRegistry",
    "UnknownStepError",
]
