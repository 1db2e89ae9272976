"""Tool registry port."""

from typing import Any, Protocol

from pydantic import BaseModel


class ToolResult(BaseModel):
    """Outcome of a tool invocation."""

    result: Any = None
    token_usage: int = 0


class ToolRegistryPort(Protocol):
    """Interface for named tool dispatch."""

    async def invoke(self, tool_name: str, tool_input: Any) -> ToolResult:
        """Invoke a registered tool by name."""
        ...
