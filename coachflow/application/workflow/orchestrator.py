"""Workflow orchestrator - sequential, parallel and conditional step execution.

Every step is attempted: a failing step is recorded (fallback outcome in
sequential mode, ``None`` in parallel mode) and the run continues. The only
exception that escapes is one raised by a conditional predicate.
"""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from typing import Any

from coachflow.application.workflow.executors import StepExecutorRegistry, error_message
from coachflow.application.workflow.intermediate_cache import IntermediateResultCache
from coachflow.application.workflow.metrics import (
    TokenUsageTally,
    log_run_completed,
    log_step_execution,
    token_count,
)
from coachflow.domain.entities.workflow import StepStatus, WorkflowContext, WorkflowResult, WorkflowStep

logger = logging.getLogger(__name__)

Predicate = Callable[[WorkflowContext], bool]


class WorkflowOrchestrator:
    """Composes steps into sequential, parallel or conditional runs.

    Steps are mutated in place (``output``, ``token_usage``, ``latency``,
    ``error``), so a step object must not be shared by concurrent runs.
    """

    def __init__(
        self,
        executors: StepExecutorRegistry,
        cache: IntermediateResultCache,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._executors = executors
        self._cache = cache
        self._clock = clock

    def _elapsed_ms(self, since: float) -> float:
        return (self._clock() - since) * 1000

    async def run_sequential(
        self,
        steps: Sequence[WorkflowStep],
        context: WorkflowContext,
    ) -> WorkflowResult:
        """Run steps in order, consulting the intermediate cache first.

        A cache hit is appended verbatim and costs 0 tokens. Each step sees the
        outcomes of the steps before it.
        """
        start = self._clock()
        results: list[dict[str, Any]] = []
        tally = TokenUsageTally()

        for step in steps:
            logger.debug("Executing step %s (%s) in sequential mode", step.id, step.name)
            step.error = None
            step_start = self._clock()

            cached = await self._cache.get(context.session_id, step.id)
            if cached is not None:
                logger.debug("Cache hit for step %s", step.id)
                results.append(cached)
                tally.record(step.id, 0)
                step.output = cached
                step.token_usage = 0
                step.latency = self._elapsed_ms(step_start)
                log_step_execution(step, step.latency, 0, StepStatus.SUCCESS, cached=True)
                continue

            try:
                outcome = await self._executors.dispatch(step, context, list(results))
            except Exception as e:
                message = error_message(e)
                logger.error("Step %s failed: %s", step.id, message)
                fallback = self._executors.fallback_for(step, message)
                results.append(fallback)
                step.error = message
                step.output = fallback
                step.token_usage = 0
                step.latency = self._elapsed_ms(step_start)
                log_step_execution(step, step.latency, 0, StepStatus.FAILED, message)
                continue

            tokens = token_count(outcome)
            results.append(outcome)
            tally.record(step.id, tokens)
            step.output = outcome
            step.token_usage = tokens
            step.latency = self._elapsed_ms(step_start)

            await self._cache.set(context.session_id, step.id, outcome)
            log_step_execution(step, step.latency, tokens, StepStatus.SUCCESS)

        result = WorkflowResult(
            success=len(results) == len(steps) and not any(s.error is not None for s in steps),
            results=list(results),
            token_usage=tally.to_usage(),
            duration=self._elapsed_ms(start),
        )
        log_run_completed("sequential", len(steps), result)
        return result

    async def _timed_dispatch(self, step: WorkflowStep, context: WorkflowContext) -> dict[str, Any]:
        """Dispatch one parallel step; ``step.latency`` is written whether it succeeds or not."""
        step_start = self._clock()
        try:
            # Parallel steps never see each other's results.
            return await self._executors.dispatch(step, context, [])
        finally:
            step.latency = self._elapsed_ms(step_start)

    async def run_parallel(
        self,
        steps: Sequence[WorkflowStep],
        context: WorkflowContext,
    ) -> WorkflowResult:
        """Run all steps concurrently; the cache is neither read nor written.

        ``results[i]`` is ``None`` for a step that raised, ``CancelledError``
        from a collaborator included. Its ``error`` is set and its ``output``
        carries the fallback outcome. Cancelling the run itself still cancels
        every step and propagates.
        """
        start = self._clock()
        logger.debug("Executing %d steps in parallel mode", len(steps))
        for step in steps:
            step.error = None
            step.latency = None

        settled = await asyncio.gather(
            *(self._timed_dispatch(step, context) for step in steps),
            return_exceptions=True,
        )

        results: list[dict[str, Any] | None] = []
        tally = TokenUsageTally()
        all_fulfilled = True

        for step, outcome in zip(steps, settled):
            if isinstance(outcome, BaseException):
                all_fulfilled = False
                message = error_message(outcome)
                logger.error("Step %s failed: %s", step.id, message)
                results.append(None)
                step.error = message
                step.output = self._executors.fallback_for(step, message)
                step.token_usage = 0
                log_step_execution(step, step.latency, 0, StepStatus.FAILED, message)
                continue

            tokens = token_count(outcome)
            results.append(outcome)
            tally.record(step.id, tokens)
            step.output = outcome
            step.token_usage = tokens
            log_step_execution(step, step.latency, tokens, StepStatus.SUCCESS)

        result = WorkflowResult(
            success=all_fulfilled,
            results=results,
            token_usage=tally.to_usage(),
            duration=self._elapsed_ms(start),
        )
        log_run_completed("parallel", len(steps), result)
        return result

    async def run_conditional(
        self,
        predicate: Predicate,
        true_branch: Sequence[WorkflowStep],
        false_branch: Sequence[WorkflowStep],
        context: WorkflowContext,
    ) -> WorkflowResult:
        """Evaluate ``predicate`` once and run the chosen branch sequentially.

        Exceptions raised by ``predicate`` propagate to the caller.
        """
        logger.debug("Executing conditional workflow")
        take_true = bool(predicate(context))
        branch = true_branch if take_true else false_branch
        logger.debug("Condition evaluated to %s, executing %d steps", take_true, len(branch))
        return await self.run_sequential(branch, context)
