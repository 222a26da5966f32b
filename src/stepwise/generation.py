"""Multi-step text generation with tool execution."""

from __future__ import annotations

import logging
from dataclasses import replace

from stepwise.core.errors import ErrorKind, StepwiseError
from stepwise.core.responses import ResponseBuilder, TextResponse
from stepwise.core.telemetry import span
from stepwise.dispatch.base import Dispatcher
from stepwise.dispatch.request import Request
from stepwise.tools.executor import ToolExecutor
from stepwise.tools.schema import ToolInput, normalize_tools

logger = logging.getLogger(__name__)


def generate_text(
    dispatcher: Dispatcher,
    request: Request,
    *,
    tools: ToolInput = None,
    max_steps: int = 1,
    executor: ToolExecutor | None = None,
) -> TextResponse:
    """Dispatch ``request`` and keep going while the model asks for tools.

    Each round-trip becomes one step. Tool calls are executed when runnable
    tools were given and the step budget is not spent; their results are
    attached to the step that requested them and fed back as ``tool``
    messages on the next dispatch.
    """
    if max_steps < 1:
        raise StepwiseError(ErrorKind.INVALID_INPUT, "max_steps must be >= 1")
    if request.kind != "text":
        raise StepwiseError(ErrorKind.INVALID_INPUT, f"generate_text needs a text request, got {request.kind!r}.")

    toolset = normalize_tools(tools)
    if toolset.schemas and not request.tools:
        request = replace(request, tools=tuple(toolset.schemas))
    executor = executor or ToolExecutor()
    builder = ResponseBuilder()
    transcript = request.transcript()
    current = request

    with span("stepwise.generate_text", provider=request.provider, model=request.model, max_steps=max_steps):
        while True:
            response = dispatcher.dispatch(current)
            if not isinstance(response, TextResponse):
                raise StepwiseError(
                    ErrorKind.PROVIDER,
                    f"Expected a text response, got {type(response).__name__}.",
                )
            for earlier in response.steps[:-1]:
                transcript.append(earlier.as_assistant_message())
                transcript.extend(result.as_message() for result in earlier.tool_results)
                builder.add_step(earlier.with_messages(transcript))
            step = response.last_step
            transcript.append(step.as_assistant_message())

            should_continue = step.has_tool_calls and bool(toolset.runnable) and len(builder) + 1 < max_steps
            if step.has_tool_calls and toolset.runnable:
                results = executor.execute(step.tool_calls, toolset)
                step = step.with_tool_results(results)
                transcript.extend(result.as_message() for result in results)

            builder.add_step(step.with_messages(transcript))
            logger.debug("step %d finished with %s", len(builder), step.finish_reason.value)
            if not should_continue:
                return builder.to_response()
            current = request.continued(transcript)
