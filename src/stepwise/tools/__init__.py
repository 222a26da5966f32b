"""Tooling helpers for Stepwise."""

from stepwise.tools.executor import ToolExecutor, serialize_tool_output
from stepwise.tools.schema import Tool, ToolInput, ToolSet, normalize_tools, schema_from_model, tool, tool_from_model

__all__ = [
    "Tool",
    "ToolExecutor",
    "ToolInput",
    "ToolSet",
    "normalize_tools",
    "schema_from_model",
    "serialize_tool_output",
    "tool",
    "tool_from_model",
]
