"""Tool registry and built-in tools."""

from coachflow.infrastructure.tools.registry import (
    InMemoryToolRegistry,
    ToolNotFoundError,
    create_default_tool_registry,
)

__all__ = ["InMemoryToolRegistry", "ToolNotFoundError", "create_default_tool_registry"]
