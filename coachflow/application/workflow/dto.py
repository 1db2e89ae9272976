"""Workflow DTOs."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StepSpec(BaseModel):
    """One step as submitted by a client."""

    id: str = Field(..., min_length=1, max_length=200)
    name: str = ""
    type: str
    model_tier: str = Field("balanced", alias="modelTier")
    input: dict[str, Any] = {}

    model_config = ConfigDict(populate_by_name=True)


class WorkflowRunRequest(BaseModel):
    """Sequential or parallel run."""

    session_id: str = Field(..., min_length=1, max_length=100, alias="sessionId")
    user_id: str = Field(..., min_length=1, max_length=100, alias="userId")
    steps: list[StepSpec] = Field(..., max_length=100)
    state: dict[str, Any] = {}

    model_config = ConfigDict(populate_by_name=True)


class ConditionalRunRequest(BaseModel):
    """Conditional run: ``state[condition_key]`` truthiness selects the branch."""

    session_id: str = Field(..., min_length=1, max_length=100, alias="sessionId")
    user_id: str = Field(..., min_length=1, max_length=100, alias="userId")
    condition_key: str = Field(..., min_length=1, alias="conditionKey")
    true_branch: list[StepSpec] = Field(..., max_length=100, alias="trueBranch")
    false_branch: list[StepSpec] = Field(..., max_length=100, alias="falseBranch")
    state: dict[str, Any] = {}

    model_config = ConfigDict(populate_by_name=True)


class StepReport(BaseModel):
    """Per-step execution summary."""

    id: str
    status: str  # success | failed
    error: str | None = None
    latency: float | None = None
    token_usage: int = Field(0, serialization_alias="tokenUsage")


class TokenUsageReport(BaseModel):
    total: int
    by_step: dict[str, int] = Field(serialization_alias="byStep")


class WorkflowRunResponse(BaseModel):
    """Aggregate run outcome."""

    success: bool
    results: list[dict[str, Any] | None]
    token_usage: TokenUsageReport = Field(serialization_alias="tokenUsage")
    duration: float
    steps: list[StepReport] = []
