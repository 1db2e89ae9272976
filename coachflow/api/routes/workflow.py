"""Workflow API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from coachflow.api.dependencies import get_workflow_use_case, limiter
from coachflow.application.workflow.dto import ConditionalRunRequest, WorkflowRunRequest
from coachflow.application.workflow.use_case import WorkflowUseCase

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workflow", tags=["workflow"])


@router.post("/sequential")
@limiter.limit("30/minute")
async def run_sequential(
    request: Request,
    run_request: WorkflowRunRequest,
    use_case: WorkflowUseCase = Depends(get_workflow_use_case),
) -> dict:
    """Run steps in order with intermediate result caching."""
    try:
        response = await use_case.run_sequential(run_request)
    except Exception:
        logger.exception("Sequential workflow failed")
        raise HTTPException(status_code=500, detail="Workflow execution failed")
    return response.model_dump(by_alias=True)


@router.post("/parallel")
@limiter.limit("30/minute")
async def run_parallel(
    request: Request,
    run_request: WorkflowRunRequest,
    use_case: WorkflowUseCase = Depends(get_workflow_use_case),
) -> dict:
    """Run independent steps concurrently."""
    try:
        response = await use_case.run_parallel(run_request)
    except Exception:
        logger.exception("Parallel workflow failed")
        raise HTTPException(status_code=500, detail="Workflow execution failed")
    return response.model_dump(by_alias=True)


@router.post("/conditional")
@limiter.limit("30/minute")
async def run_conditional(
    request: Request,
    run_request: ConditionalRunRequest,
    use_case: WorkflowUseCase = Depends(get_workflow_use_case),
) -> dict:
    """Run the branch selected by ``state[conditionKey]``."""
    try:
        response = await use_case.run_conditional(run_request)
    except KeyError:
        raise HTTPException(
            status_code=400,
            detail=f"Condition key not found in state: {run_request.condition_key}",
        )
    except Exception:
        logger.exception("Conditional workflow failed")
        raise HTTPException(status_code=500, detail="Workflow execution failed")
    return response.model_dump(by_alias=True)


@router.get("/cache/stats")
async def cache_stats(use_case: WorkflowUseCase = Depends(get_workflow_use_case)) -> dict:
    """Intermediate result cache hit/miss counters."""
    return use_case.cache_stats()


@router.delete("/cache/{session_id}")
async def clear_session_cache(
    session_id: str,
    use_case: WorkflowUseCase = Depends(get_workflow_use_case),
) -> dict:
    """Drop cached step outcomes of one session."""
    removed = await use_case.clear_session_cache(session_id)
    return {"session_id": session_id, "removed": removed}
