"""Domain entities."""

from coachflow.domain.entities.workflow import (
    ModelTier,
    StepStatus,
    StepType,
    TokenUsage,
    WorkflowContext,
    WorkflowResult,
    WorkflowStep,
)

__all__ = [
    "ModelTier",
    "StepStatus",
    "StepType",
    "TokenUsage",
    "WorkflowContext",
    "WorkflowResult",
    "WorkflowStep",
]
