"""FastAPI dependencies."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from coachflow.api.container import get_container
from coachflow.application.workflow.use_case import WorkflowUseCase

limiter = Limiter(key_func=get_remote_address)


def get_workflow_use_case() -> WorkflowUseCase:
    return get_container().workflow_use_case
