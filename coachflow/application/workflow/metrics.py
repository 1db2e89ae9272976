"""Step logging and token accounting."""

from typing import Any

import structlog

from coachflow.domain.entities.workflow import StepStatus, TokenUsage, WorkflowResult, WorkflowStep

log = structlog.get_logger()


def log_step_execution(
    step: WorkflowStep,
    duration: float,
    token_usage: int,
    status: StepStatus,
    error: str | None = None,
    cached: bool = False,
) -> dict[str, Any]:
    """Emit the structured step record and return it."""
    record = {
        "stepId": step.id,
        "stepName": step.name,
        "stepType": step.type,
        "modelTier": step.model_tier,
        "duration": round(duration, 3),
        "tokenUsage": token_usage,
        "status": status.value,
        "error": error,
        "cached": cached,
    }
    if status is StepStatus.SUCCESS:
        log.debug("workflow_step_completed", **record)
    else:
        log.error("workflow_step_failed", **record)
    return record


def log_run_completed(mode: str, step_count: int, result: WorkflowResult) -> None:
    log.info(
        "workflow_run_completed",
        mode=mode,
        steps=step_count,
        success=result.success,
        total_tokens=result.token_usage.total,
        duration=round(result.duration, 3),
    )


def token_count(outcome: dict[str, Any]) -> int:
    """Token usage reported in an outcome; anything non-numeric counts as 0."""
    value = outcome.get("tokenUsage") or 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)


class TokenUsageTally:
    """Per-step token counts for one run. ``total`` is always the sum of ``by_step``."""

    def __init__(self) -> None:
        self._by_step: dict[str, int] = {}

    def record(self, step_id: str, tokens: int) -> None:
        self._by_step[step_id] = tokens

    @property
    def total(self) -> int:
        return sum(self._by_step.values())

    def to_usage(self) -> TokenUsage:
        return TokenUsage(total=self.total, by_step=dict(self._by_step))
