"""In-process tool registry - implements ToolRegistryPort."""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from coachflow.domain.ports.tools import ToolResult
from coachflow.infrastructure.tools.keyword_matcher import match_keywords_tool

logger = logging.getLogger(__name__)

ToolFunc = Callable[[Any], Any]


class ToolNotFoundError(KeyError):
    """No tool registered under the requested name."""

    def __str__(self) -> str:
        return f"Unknown tool: {self.args[0]}"


class InMemoryToolRegistry:
    """Registry of named tools.

    A tool is a sync or async callable taking the step's ``toolInput``. It may
    return a ToolResult to report token usage; any other value is wrapped with
    0 tokens. Tool exceptions propagate.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolFunc] = {}

    def register(self, name: str, func: ToolFunc) -> None:
        self._tools[name] = func

    def has(self, name: str) -> bool:
        return name in self._tools

    def list_tools(self) -> list[str]:
        return list(self._tools.keys())

    async def invoke(self, tool_name: str, tool_input: Any) -> ToolResult:
        func = self._tools.get(tool_name)
        if func is None:
            raise ToolNotFoundError(tool_name)

        logger.debug("Invoking tool %s", tool_name)
        value = func(tool_input)
        if inspect.isawaitable(value):
            value = await value
        if isinstance(value, ToolResult):
            return value
        return ToolResult(result=value, token_usage=0)


def create_default_tool_registry() -> InMemoryToolRegistry:
    """Registry with the built-in tools."""
    registry = InMemoryToolRegistry()
    registry.register("keyword_matcher", match_keywords_tool)
    return registry
