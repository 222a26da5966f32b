"""Tool execution for multi-step generation."""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ValidationError

from stepwise.core.errors import ErrorKind, StepwiseError
from stepwise.core.telemetry import span
from stepwise.core.values import ToolCall, ToolResult
from stepwise.tools.schema import Tool, ToolInput, normalize_tools

logger = logging.getLogger(__name__)


def serialize_tool_output(output: Any) -> str:
    if isinstance(output, str):
        return output
    if isinstance(output, BaseModel):
        return output.model_dump_json()
    try:
        return json.dumps(output, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(output)


class ToolExecutor:
    """Run requested tool calls and turn their output into ToolResults."""

    def execute(self, calls: Sequence[ToolCall], tools: ToolInput) -> list[ToolResult]:
        if not calls:
            return []
        try:
            tool_map = normalize_tools(tools).by_name()
        except (ValueError, TypeError) as exc:
            raise StepwiseError(ErrorKind.INVALID_INPUT, str(exc), cause=exc) from exc
        if not tool_map:
            raise StepwiseError(ErrorKind.TOOL, "No runnable tools are available.")
        return [self._run(call, tool_map) for call in calls]

    def _run(self, call: ToolCall, tool_map: dict[str, Tool]) -> ToolResult:
        tool_obj = tool_map.get(call.name)
        if tool_obj is None:
            raise StepwiseError(ErrorKind.TOOL, f"Unknown tool name: {call.name}.")
        with span("stepwise.tool.execute", tool=call.name, tool_call_id=call.id):
            try:
                output = tool_obj.run(**call.arguments)
            except StepwiseError:
                raise
            except ValidationError as exc:
                raise StepwiseError(
                    ErrorKind.INVALID_INPUT,
                    f"Tool '{call.name}' argument validation failed.",
                    cause=exc,
                ) from exc
            except Exception as exc:
                raise StepwiseError(ErrorKind.TOOL, f"Tool '{call.name}' execution failed.", cause=exc) from exc
        if inspect.isawaitable(output):
            if inspect.iscoroutine(output):
                output.close()
            raise StepwiseError(ErrorKind.INVALID_INPUT, f"Tool '{call.name}' is async and cannot run here.")
        logger.debug("Tool '%s' (%s) completed", call.name, call.id)
        return ToolResult(tool_call_id=call.id, tool_name=call.name, result=serialize_tool_output(output))
