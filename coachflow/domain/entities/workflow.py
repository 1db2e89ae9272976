"""Workflow entities: steps, run context and aggregate result."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class StepType(str, Enum):
    """Kind of work a step performs; selects the executor it is dispatched to."""

    LLM_CALL = "llm-call"
    TOOL_USE = "tool-use"
    RAG_RETRIEVAL = "rag-retrieval"
    COMPRESSION = "compression"


class ModelTier(str, Enum):
    """Cost/quality selector forwarded to the model backend for llm-call steps."""

    COST_OPTIMIZED = "cost-optimized"
    BALANCED = "balanced"
    QUALITY_OPTIMIZED = "quality-optimized"


class StepStatus(str, Enum):
    """Terminal status written to the step log."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class WorkflowStep:
    """Single unit of work.

    ``type`` and ``model_tier`` are plain strings so that callers can submit
    tags the engine does not know about; those fail at dispatch time and get
    the generic fallback instead of being rejected up front.

    ``output``, ``token_usage``, ``latency`` and ``error`` are written by the
    orchestrator. ``error`` is set only when the execution path failed.
    """

    id: str
    name: str
    type: str
    model_tier: str = ModelTier.BALANCED.value
    input: dict[str, Any] = field(default_factory=dict)

    output: dict[str, Any] | None = None
    token_usage: int = 0
    latency: float | None = None  # ms
    error: str | None = None

    def __post_init__(self) -> None:
        """Normalize enum members to their string tags."""
        if isinstance(self.type, Enum):
            self.type = self.type.value
        if isinstance(self.model_tier, Enum):
            self.model_tier = self.model_tier.value

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class WorkflowContext:
    """Run-scoped correlation data.

    ``session_id`` namespaces the intermediate result cache. ``state`` holds
    anything a conditional predicate wants to look at.
    """

    session_id: str
    user_id: str
    state: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        """Read a value from ``state``."""
        return self.state.get(key, default)


@dataclass
class TokenUsage:
    """Token accounting for one run."""

    total: int = 0
    by_step: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"total": self.total, "byStep": dict(self.by_step)}


@dataclass
class WorkflowResult:
    """Aggregate outcome of one orchestrator invocation.

    ``results`` is index-aligned with the submitted steps. In parallel mode a
    failed step is reported as ``None``.
    """

    success: bool
    results: list[dict[str, Any] | None]
    token_usage: TokenUsage
    duration: float  # ms

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "results": list(self.results),
            "tokenUsage": self.token_usage.to_dict(),
            "duration": self.duration,
        }
