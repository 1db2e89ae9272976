"""Workflow application layer."""

from coachflow.application.workflow.executors import (
    CompressionExecutor,
    LLMCallExecutor,
    RAGRetrievalExecutor,
    StepExecutor,
    StepExecutorRegistry,
    ToolUseExecutor,
    create_default_registry,
    map_model_tier_to_scenario,
)
from coachflow.application.workflow.intermediate_cache import IntermediateResultCache
from coachflow.application.workflow.orchestrator import WorkflowOrchestrator

__all__ = [
    "CompressionExecutor",
    "IntermediateResultCache",
    "LLMCallExecutor",
    "RAGRetrievalExecutor",
    "StepExecutor",
    "StepExecutorRegistry",
    "ToolUseExecutor",
    "WorkflowOrchestrator",
    "create_default_registry",
    "map_model_tier_to_scenario",
]
