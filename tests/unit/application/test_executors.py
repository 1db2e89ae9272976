"""Tests for step executors and the executor registry."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from coachflow.application.workflow.executors import (
    CompressionExecutor,
    LLMCallExecutor,
    RAGRetrievalExecutor,
    StepExecutorRegistry,
    ToolUseExecutor,
    create_default_registry,
    error_message,
    map_model_tier_to_scenario,
)
from coachflow.domain.entities.workflow import ModelTier, StepType, WorkflowContext, WorkflowStep
from coachflow.domain.errors import StepExecutionError, UnknownStepTypeError
from coachflow.domain.ports.compression import CompressionResult
from coachflow.domain.ports.config import WorkflowConfig
from coachflow.domain.ports.llm import ModelResponse, ModelUsage
from coachflow.domain.ports.rag import Document, RetrievalResult
from coachflow.domain.ports.tools import ToolResult


@pytest.fixture
def context():
    return WorkflowContext(session_id="sess", user_id="user-42")


@pytest.fixture
def model():
    m = MagicMock()
    m.call = AsyncMock(
        return_value=ModelResponse(
            content="Tell me about yourself.",
            usage=ModelUsage(input_tokens=12, output_tokens=30, total_tokens=42),
        )
    )
    return m


class TestMapModelTier:
    @pytest.mark.parametrize("tier", [t.value for t in ModelTier])
    def test_known_tiers_pass_through(self, tier):
        assert map_model_tier_to_scenario(tier) == tier

    @pytest.mark.parametrize("tier", ["premium", "", None])
    def test_unknown_tier_is_balanced(self, tier):
        assert map_model_tier_to_scenario(tier) == "balanced"


class TestErrorMessage:
    def test_uses_exception_text(self):
        assert error_message(RuntimeError("boom")) == "boom"

    def test_empty_exception_uses_class_name(self):
        assert error_message(TimeoutError()) == "TimeoutError"


class TestLLMCallExecutor:
    @pytest.mark.asyncio
    async def test_forwards_prompt_with_defaults(self, model, context):
        executor = LLMCallExecutor(model)
        step = WorkflowStep(
            id="q1",
            name="Generate question",
            type="llm-call",
            model_tier="quality-optimized",
            input={"prompt": "Ask a behavioral question"},
        )

        outcome = await executor.execute(step, context, [])

        assert outcome == {"content": "Tell me about yourself.", "tokenUsage": 42}
        request, user_id, scenario = model.call.call_args.args
        assert request.prompt == "Ask a behavioral question"
        assert request.model == ""
        assert request.temperature == 0.7
        assert request.max_tokens == 1000
        assert user_id == "user-42"
        assert scenario == "quality-optimized"

    @pytest.mark.asyncio
    async def test_explicit_parameters(self, model, context):
        executor = LLMCallExecutor(model)
        step = WorkflowStep(
            id="q1",
            name="q",
            type="llm-call",
            model_tier="mystery-tier",
            input={"prompt": "p", "temperature": 0.2, "maxTokens": 256},
        )

        await executor.execute(step, context, [])

        request, _, scenario = model.call.call_args.args
        assert request.temperature == 0.2
        assert request.max_tokens == 256
        assert scenario == "balanced"

    @pytest.mark.asyncio
    async def test_zero_values_fall_back_to_defaults(self, model, context):
        executor = LLMCallExecutor(model, default_temperature=0.5, default_max_tokens=300)
        step = WorkflowStep(id="q", name="q", type="llm-call", input={"prompt": "p", "temperature": 0, "maxTokens": 0})

        await executor.execute(step, context, [])

        request = model.call.call_args.args[0]
        assert request.temperature == 0.5
        assert request.max_tokens == 300

    @pytest.mark.asyncio
    async def test_missing_prompt_raises(self, model, context):
        executor = LLMCallExecutor(model)
        step = WorkflowStep(id="q", name="q", type="llm-call")

        with pytest.raises(StepExecutionError, match="prompt"):
            await executor.execute(step, context, [])
        model.call.assert_not_awaited()

    def test_fallback_shape(self, model):
        assert LLMCallExecutor(model).fallback("boom") == {"content": "", "tokenUsage": 0, "error": "boom"}


class TestToolUseExecutor:
    @pytest.mark.asyncio
    async def test_invokes_named_tool(self, context):
        tools = MagicMock()
        tools.invoke = AsyncMock(return_value=ToolResult(result={"overlapPercentage": 50.0}, token_usage=3))
        executor = ToolUseExecutor(tools)
        step = WorkflowStep(
            id="t",
            name="match",
            type="tool-use",
            input={"toolName": "keyword_matcher", "toolInput": {"jobKeywords": ["sql"]}},
        )

        outcome = await executor.execute(step, context, [])

        assert outcome == {"result": {"overlapPercentage": 50.0}, "tokenUsage": 3}
        tools.invoke.assert_awaited_once_with("keyword_matcher", {"jobKeywords": ["sql"]})

    @pytest.mark.asyncio
    async def test_missing_tool_name_raises(self, context):
        executor = ToolUseExecutor(MagicMock())
        with pytest.raises(StepExecutionError, match="toolName"):
            await executor.execute(WorkflowStep(id="t", name="t", type="tool-use"), context, [])

    def test_fallback_shape(self):
        assert ToolUseExecutor(MagicMock()).fallback("x") == {"result": None, "tokenUsage": 0, "error": "x"}


class TestRAGRetrievalExecutor:
    @pytest.mark.asyncio
    async def test_documents_are_plain_dicts(self, context):
        retrieval = MagicMock()
        retrieval.query = AsyncMock(
            return_value=RetrievalResult(
                documents=[Document(content="STAR method", metadata={"topic": "behavioral"}, score=0.9)],
            )
        )
        executor = RAGRetrievalExecutor(retrieval)
        step = WorkflowStep(id="r", name="r", type="rag-retrieval", input={"query": "behavioral questions"})

        outcome = await executor.execute(step, context, [])

        assert outcome == {
            "documents": [{"content": "STAR method", "metadata": {"topic": "behavioral"}, "score": 0.9}],
            "tokenUsage": 0,
        }
        retrieval.query.assert_awaited_once_with("behavioral questions")

    def test_fallback_shape(self):
        assert RAGRetrievalExecutor(MagicMock()).fallback("x") == {"documents": [], "tokenUsage": 0, "error": "x"}


class TestCompressionExecutor:
    @pytest.mark.asyncio
    async def test_default_budget(self, context):
        compressor = MagicMock()
        compressor.compress = AsyncMock(return_value=CompressionResult(compressed="tail", token_usage=0))
        executor = CompressionExecutor(compressor)
        step = WorkflowStep(id="c", name="c", type="compression", input={"content": "long transcript"})

        outcome = await executor.execute(step, context, [])

        assert outcome == {"compressed": "tail", "tokenUsage": 0}
        compressor.compress.assert_awaited_once_with("long transcript", 500)

    @pytest.mark.asyncio
    async def test_explicit_budget(self, context):
        compressor = MagicMock()
        compressor.compress = AsyncMock(return_value=CompressionResult(compressed="x"))
        executor = CompressionExecutor(compressor)
        step = WorkflowStep(id="c", name="c", type="compression", input={"content": "abc", "maxTokens": 64})

        await executor.execute(step, context, [])

        compressor.compress.assert_awaited_once_with("abc", 64)

    def test_fallback_shape(self):
        assert CompressionExecutor(MagicMock()).fallback("x") == {"compressed": "", "tokenUsage": 0, "error": "x"}


class TestStepExecutorRegistry:
    @pytest.fixture
    def registry(self, model):
        return create_default_registry(
            model,
            MagicMock(),
            MagicMock(),
            MagicMock(),
            WorkflowConfig(default_max_tokens=64),
        )

    def test_default_registry_has_all_types(self, registry):
        assert set(registry.list_types()) == {t.value for t in StepType}
        assert registry.has("llm-call")
        assert not registry.has("teleport")

    @pytest.mark.asyncio
    async def test_dispatch_routes_by_type(self, registry, model, context):
        step = WorkflowStep(id="q", name="q", type=StepType.LLM_CALL, input={"prompt": "p"})

        outcome = await registry.dispatch(step, context, [])

        assert outcome["tokenUsage"] == 42
        assert model.call.call_args.args[0].max_tokens == 64

    @pytest.mark.asyncio
    async def test_dispatch_unknown_type_raises(self, registry, context):
        step = WorkflowStep(id="z", name="z", type="teleport")

        with pytest.raises(UnknownStepTypeError) as exc_info:
            await registry.dispatch(step, context, [])
        assert exc_info.value.step_id == "z"
        assert str(exc_info.value) == "Unknown step type: teleport"

    def test_fallback_for_unknown_type_is_error_only(self, registry):
        step = WorkflowStep(id="z", name="z", type="teleport")
        assert registry.fallback_for(step, RuntimeError("nope")) == {"error": "nope"}

    def test_fallback_for_known_type(self, registry):
        step = WorkflowStep(id="r", name="r", type="rag-retrieval")
        assert registry.fallback_for(step, "down") == {"documents": [], "tokenUsage": 0, "error": "down"}

    def test_register_replaces_executor(self):
        registry = StepExecutorRegistry()
        first = ToolUseExecutor(MagicMock())
        second = ToolUseExecutor(MagicMock())
        registry.register(first)
        registry.register(second)

        assert registry.get("tool-use") is second
        assert registry.list_types() == ["tool-use"]
