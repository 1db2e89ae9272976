"""Workflow use case - maps API requests onto orchestrator runs."""

from coachflow.application.workflow.dto import (
    ConditionalRunRequest,
    StepReport,
    StepSpec,
    TokenUsageReport,
    WorkflowRunRequest,
    WorkflowRunResponse,
)
from coachflow.application.workflow.intermediate_cache import IntermediateResultCache
from coachflow.application.workflow.orchestrator import WorkflowOrchestrator
from coachflow.domain.entities.workflow import StepStatus, WorkflowContext, WorkflowResult, WorkflowStep


def _to_step(spec: StepSpec) -> WorkflowStep:
    return WorkflowStep(
        id=spec.id,
        name=spec.name or spec.id,
        type=spec.type,
        model_tier=spec.model_tier,
        input=dict(spec.input),
    )


def _to_response(result: WorkflowResult, steps: list[WorkflowStep]) -> WorkflowRunResponse:
    return WorkflowRunResponse(
        success=result.success,
        results=result.results,
        token_usage=TokenUsageReport(
            total=result.token_usage.total,
            by_step=result.token_usage.by_step,
        ),
        duration=result.duration,
        steps=[
            StepReport(
                id=s.id,
                status=(StepStatus.FAILED if s.failed else StepStatus.SUCCESS).value,
                error=s.error,
                latency=s.latency,
                token_usage=s.token_usage,
            )
            for s in steps
        ],
    )


class WorkflowUseCase:
    """Builds steps and context from requests and runs them."""

    def __init__(self, orchestrator: WorkflowOrchestrator, cache: IntermediateResultCache) -> None:
        self._orchestrator = orchestrator
        self._cache = cache

    async def run_sequential(self, request: WorkflowRunRequest) -> WorkflowRunResponse:
        steps = [_to_step(s) for s in request.steps]
        context = WorkflowContext(request.session_id, request.user_id, dict(request.state))
        result = await self._orchestrator.run_sequential(steps, context)
        return _to_response(result, steps)

    async def run_parallel(self, request: WorkflowRunRequest) -> WorkflowRunResponse:
        steps = [_to_step(s) for s in request.steps]
        context = WorkflowContext(request.session_id, request.user_id, dict(request.state))
        result = await self._orchestrator.run_parallel(steps, context)
        return _to_response(result, steps)

    async def run_conditional(self, request: ConditionalRunRequest) -> WorkflowRunResponse:
        true_branch = [_to_step(s) for s in request.true_branch]
        false_branch = [_to_step(s) for s in request.false_branch]
        context = WorkflowContext(request.session_id, request.user_id, dict(request.state))
        key = request.condition_key
        result = await self._orchestrator.run_conditional(
            lambda ctx: bool(ctx.state[key]),
            true_branch,
            false_branch,
            context,
        )
        chosen = true_branch if bool(context.state[key]) else false_branch
        return _to_response(result, chosen)

    async def clear_session_cache(self, session_id: str) -> int:
        return await self._cache.clear_session(session_id)

    def cache_stats(self) -> dict:
        return self._cache.get_stats()
