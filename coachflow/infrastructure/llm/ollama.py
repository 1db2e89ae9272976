"""Ollama adapter - implements ModelInvocationPort behind a circuit breaker."""

import logging

import httpx
from ollama import AsyncClient
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from coachflow.domain.ports.config import ModelTierConfig, OllamaConfig
from coachflow.domain.ports.llm import ModelRequest, ModelResponse, ModelUsage
from coachflow.infrastructure.resilience import CircuitBreakerConfig, get_circuit_breaker

logger = logging.getLogger(__name__)

# Fail fast when the host is unreachable
DEFAULT_CONNECT_TIMEOUT = 5.0


class OllamaModelAdapter:
    """Single-prompt completions through Ollama's chat endpoint.

    The scenario tag (model tier) picks the model unless the request names one.
    An open circuit raises CircuitOpenError so the caller's fallback applies.
    """

    def __init__(self, config: OllamaConfig, models: ModelTierConfig) -> None:
        self._config = config
        self._models = models
        read_timeout = float(config.timeout) if config.timeout else 120.0
        timeout = httpx.Timeout(
            connect=DEFAULT_CONNECT_TIMEOUT,
            read=read_timeout,
            write=read_timeout,
            pool=30.0,
        )
        self._client = AsyncClient(host=config.host, timeout=timeout)
        self._breaker = get_circuit_breaker(
            "ollama",
            CircuitBreakerConfig(failure_threshold=5, recovery_timeout=30.0, success_threshold=2),
        )

    def _options(self, request: ModelRequest) -> dict:
        opts: dict = {"temperature": request.temperature, "num_predict": request.max_tokens}
        if self._config.num_ctx is not None:
            opts["num_ctx"] = self._config.num_ctx
        return opts

    @retry(
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError, ConnectionError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _chat(self, model: str, prompt: str, options: dict):
        return await self._breaker.call(
            self._client.chat,
            model=model,
            messages=[{"role": "user", "content": prompt}],
            options=options,
        )

    async def call(self, request: ModelRequest, user_id: str, scenario: str) -> ModelResponse:
        """Run a completion; usage comes from Ollama's prompt/eval counters."""
        model = request.model or self._models.model_for_scenario(scenario)
        logger.debug("Ollama call user=%s scenario=%s model=%s", user_id, scenario, model)
        response = await self._chat(model, request.prompt, self._options(request))

        content = response.message.content if response.message else ""
        input_tokens = response.prompt_eval_count or 0
        output_tokens = response.eval_count or 0
        return ModelResponse(
            content=content or "",
            model=response.model or model,
            usage=ModelUsage(
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            ),
        )

    async def is_available(self) -> bool:
        """Check that the Ollama server answers /api/tags."""
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                resp = await client.get(f"{self._config.host.rstrip('/')}/api/tags")
                return resp.status_code == 200
        except httpx.HTTPError as e:
            logger.debug("Ollama availability check failed: %s", e)
            return False
