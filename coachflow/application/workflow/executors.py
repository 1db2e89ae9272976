"""Step executors - one per step type, each owning its fallback shape.

The registry maps a step's type tag to its executor. Adding a step type means
writing one executor and registering it; the orchestrator does not change.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from coachflow.domain.entities.workflow import ModelTier, StepType, WorkflowContext, WorkflowStep
from coachflow.domain.errors import StepExecutionError, UnknownStepTypeError
from coachflow.domain.ports.compression import CompressionPort
from coachflow.domain.ports.config import WorkflowConfig
from coachflow.domain.ports.llm import ModelInvocationPort, ModelRequest
from coachflow.domain.ports.rag import RetrievalPort
from coachflow.domain.ports.tools import ToolRegistryPort

logger = logging.getLogger(__name__)

_KNOWN_TIERS = frozenset(t.value for t in ModelTier)


def map_model_tier_to_scenario(model_tier: str | None) -> str:
    """Scenario tag for the model backend. Unknown tiers route as balanced."""
    if model_tier in _KNOWN_TIERS:
        return model_tier
    return ModelTier.BALANCED.value


def error_message(error: BaseException | str) -> str:
    """Message recorded on a failed step; never empty."""
    if isinstance(error, str):
        return error
    return str(error) or type(error).__name__


class StepExecutor(ABC):
    """Runs one type of step against its collaborator."""

    @property
    @abstractmethod
    def step_type(self) -> str:
        """Type tag this executor handles (e.g. 'llm-call')."""
        ...

    @abstractmethod
    async def execute(
        self,
        step: WorkflowStep,
        context: WorkflowContext,
        previous_results: list[dict[str, Any]],
    ) -> dict[str, Any]:
        """Execute the step.

        Returns an outcome dict with ``tokenUsage`` and the type's payload
        field. Raises on any collaborator failure.
        """
        ...

    @abstractmethod
    def fallback_fields(self) -> dict[str, Any]:
        """Payload substituted for the real outcome when execution fails."""
        ...

    def fallback(self, error: str) -> dict[str, Any]:
        """Degraded outcome: empty payload, zero tokens, the error message."""
        return {**self.fallback_fields(), "tokenUsage": 0, "error": error}

    def _require(self, step: WorkflowStep, key: str) -> Any:
        value = step.input.get(key)
        if value is None:
            raise StepExecutionError(step.id, f"{self.step_type} step '{step.id}' requires input '{key}'")
        return value


class LLMCallExecutor(StepExecutor):
    """Forwards a prompt to the model backend."""

    def __init__(
        self,
        model: ModelInvocationPort,
        default_temperature: float = 0.7,
        default_max_tokens: int = 1000,
    ) -> None:
        self._model = model
        self._default_temperature = default_temperature
        self._default_max_tokens = default_max_tokens

    @property
    def step_type(self) -> str:
        return StepType.LLM_CALL.value

    async def execute(self, step, context, previous_results):
        prompt = self._require(step, "prompt")
        # 0 / missing fall back to defaults
        request = ModelRequest(
            model="",
            prompt=str(prompt),
            temperature=step.input.get("temperature") or self._default_temperature,
            max_tokens=step.input.get("maxTokens") or self._default_max_tokens,
        )
        response = await self._model.call(
            request,
            context.user_id,
            map_model_tier_to_scenario(step.model_tier),
        )
        return {
            "content": response.content,
            "tokenUsage": response.usage.total_tokens or 0,
        }

    def fallback_fields(self) -> dict[str, Any]:
        return {"content": ""}


class ToolUseExecutor(StepExecutor):
    """Invokes a named tool from the tool registry."""

    def __init__(self, tools: ToolRegistryPort) -> None:
        self._tools = tools

    @property
    def step_type(self) -> str:
        return StepType.TOOL_USE.value

    async def execute(self, step, context, previous_results):
        tool_name = self._require(step, "toolName")
        tool_input = step.input.get("toolInput")
        logger.debug("Executing tool %s for step %s", tool_name, step.id)
        outcome = await self._tools.invoke(str(tool_name), tool_input)
        return {"result": outcome.result, "tokenUsage": outcome.token_usage}

    def fallback_fields(self) -> dict[str, Any]:
        return {"result": None}


class RAGRetrievalExecutor(StepExecutor):
    """Queries the retrieval service."""

    def __init__(self, retrieval: RetrievalPort) -> None:
        self._retrieval = retrieval

    @property
    def step_type(self) -> str:
        return StepType.RAG_RETRIEVAL.value

    async def execute(self, step, context, previous_results):
        query = self._require(step, "query")
        logger.debug("Executing retrieval for step %s", step.id)
        outcome = await self._retrieval.query(str(query))
        return {
            "documents": [doc.model_dump() for doc in outcome.documents],
            "tokenUsage": outcome.token_usage,
        }

    def fallback_fields(self) -> dict[str, Any]:
        return {"documents": []}


class CompressionExecutor(StepExecutor):
    """Compresses content to a token budget."""

    def __init__(self, compressor: CompressionPort, default_max_tokens: int = 500) -> None:
        self._compressor = compressor
        self._default_max_tokens = default_max_tokens

    @property
    def step_type(self) -> str:
        return StepType.COMPRESSION.value

    async def execute(self, step, context, previous_results):
        content = step.input.get("content") or ""
        max_tokens = step.input.get("maxTokens") or self._default_max_tokens
        logger.debug("Compressing content to %s tokens for step %s", max_tokens, step.id)
        outcome = await self._compressor.compress(str(content), int(max_tokens))
        return {"compressed": outcome.compressed, "tokenUsage": outcome.token_usage}

    def fallback_fields(self) -> dict[str, Any]:
        return {"compressed": ""}


class StepExecutorRegistry:
    """Maps step type tags to executors."""

    def __init__(self) -> None:
        self._executors: dict[str, StepExecutor] = {}

    def register(self, executor: StepExecutor) -> None:
        self._executors[executor.step_type] = executor

    def get(self, step_type: str) -> StepExecutor | None:
        return self._executors.get(step_type)

    def has(self, step_type: str) -> bool:
        return step_type in self._executors

    def list_types(self) -> list[str]:
        return list(self._executors.keys())

    async def dispatch(
        self,
        step: WorkflowStep,
        context: WorkflowContext,
        previous_results: list[dict[str, Any]],
    ) -> dict[str, Any]:
        """Run the step with its executor.

        Raises:
            UnknownStepTypeError: No executor for ``step.type``.
        """
        executor = self.get(step.type)
        if executor is None:
            raise UnknownStepTypeError(step.id, step.type)
        return await executor.execute(step, context, previous_results)

    def fallback_for(self, step: WorkflowStep, error: BaseException | str) -> dict[str, Any]:
        """Fallback outcome for a failed step; ``{error}`` only for unknown types."""
        message = error_message(error)
        logger.warning("Handling error for step %s: %s", step.id, message)
        executor = self.get(step.type)
        if executor is None:
            return {"error": message}
        return executor.fallback(message)


def create_default_registry(
    model: ModelInvocationPort,
    tools: ToolRegistryPort,
    retrieval: RetrievalPort,
    compressor: CompressionPort,
    config: WorkflowConfig | None = None,
) -> StepExecutorRegistry:
    """Registry with the four built-in step types."""
    config = config or WorkflowConfig()
    registry = StepExecutorRegistry()
    registry.register(
        LLMCallExecutor(
            model,
            default_temperature=config.default_temperature,
            default_max_tokens=config.default_max_tokens,
        )
    )
    registry.register(ToolUseExecutor(tools))
    registry.register(RAGRetrievalExecutor(retrieval))
    registry.register(CompressionExecutor(compressor, default_max_tokens=config.default_compression_tokens))
    return registry
