"""Tool definitions for Stepwise requests.

Tools reach a request in three shapes: a :class:`Tool`, a plain callable
(wrapped on the fly) or a raw ``{"type": "function", ...}`` schema. Raw
schemas are advertised to the model but never executed.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter

ModelT = TypeVar("ModelT", bound=BaseModel)

ToolSchema = dict[str, Any]


def default_tool_name(obj: Any) -> str:
    """``WeatherQuery`` -> ``weather_query``; callables keep their own name."""
    raw = getattr(obj, "__name__", None) or type(obj).__name__
    chars: list[str] = []
    for index, char in enumerate(raw):
        if char.isupper():
            if index and not raw[index - 1].isupper() and raw[index - 1] != "_":
                chars.append("_")
            chars.append(char.lower())
        else:
            chars.append(char)
    return "".join(chars)


def function_schema(name: str, description: str, parameters: dict[str, Any]) -> ToolSchema:
    return {
        "type": "function",
        "function": {"name": name, "description": description, "parameters": parameters},
    }


def _parameter_schema(param: inspect.Parameter) -> dict[str, Any]:
    annotation = Any if param.annotation is param.empty else param.annotation
    try:
        return TypeAdapter(annotation).json_schema()
    except Exception as exc:
        raise ValueError(f"Cannot describe parameter '{param.name}' of type {annotation!r}.") from exc


def parameters_from_signature(func: Callable[..., Any]) -> dict[str, Any]:
    """JSON schema for the keyword-addressable parameters of ``func``."""
    params = [
        param
        for param in inspect.signature(func).parameters.values()
        if param.kind not in (param.VAR_POSITIONAL, param.VAR_KEYWORD)
    ]
    schema: dict[str, Any] = {
        "type": "object",
        "properties": {param.name: _parameter_schema(param) for param in params},
    }
    required = [param.name for param in params if param.default is param.empty]
    if required:
        schema["required"] = required
    return schema


@dataclass(frozen=True)
class Tool:
    """A capability the model can ask to invoke."""

    name: str
    description: str = ""
    parameters: dict[str, Any] = field(default_factory=dict, hash=False)
    handler: Callable[..., Any] | None = None

    def schema(self) -> ToolSchema:
        return function_schema(self.name, self.description, self.parameters)

    def run(self, **kwargs: Any) -> Any:
        if self.handler is None:
            raise TypeError(f"Tool '{self.name}' is schema-only and cannot be executed.")
        return self.handler(**kwargs)

    @classmethod
    def from_callable(
        cls,
        func: Callable[..., Any],
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> Tool:
        if description is None:
            description = inspect.getdoc(func) or ""
        return cls(
            name=name or default_tool_name(func),
            description=description,
            parameters=parameters_from_signature(func),
            handler=func,
        )


@dataclass(frozen=True)
class ToolSet:
    """Normalized tools: the schemas sent with a request and the runnable subset."""

    schemas: list[ToolSchema]
    runnable: list[Tool]

    def by_name(self) -> dict[str, Tool]:
        return {item.name: item for item in self.runnable}


def schema_from_model(
    model: type[ModelT],
    *,
    name: str | None = None,
    description: str | None = None,
) -> ToolSchema:
    """Advertise a Pydantic model as a tool without making it runnable."""
    return tool_from_model(model, None, name=name, description=description).schema()


def tool_from_model(
    model: type[ModelT],
    handler: Callable[[ModelT], Any] | None,
    *,
    name: str | None = None,
    description: str | None = None,
) -> Tool:
    """Runnable Tool whose arguments are validated into ``model`` before ``handler`` sees them."""
    if description is None:
        description = model.__doc__ or ""

    bound: Callable[..., Any] | None = None
    if handler is not None:

        def bound(**kwargs: Any) -> Any:
            return handler(model.model_validate(kwargs))

    return Tool(
        name=name or default_tool_name(model),
        description=description,
        parameters=model.model_json_schema(),
        handler=bound,
    )


ToolInput = ToolSet | Sequence[Any] | None


def _coerce(item: Any) -> tuple[ToolSchema, Tool | None]:
    if isinstance(item, dict):
        function = item.get("function")
        if item.get("type") != "function":
            raise ValueError("Tool schema must have type='function'.")
        if not isinstance(function, dict):
            raise TypeError("Tool schema must include a 'function' object.")
        return item, None
    if isinstance(item, Tool):
        return item.schema(), item
    if callable(item):
        wrapped = Tool.from_callable(item)
        return wrapped.schema(), wrapped
    raise TypeError(f"Unsupported tool type: {type(item)}")


def normalize_tools(tools: ToolInput) -> ToolSet:
    """Fold tools, callables and raw schemas into one ToolSet with unique names."""
    if isinstance(tools, ToolSet):
        return tools
    toolset = ToolSet([], [])
    for item in tools or ():
        schema, runnable = _coerce(item)
        name = schema["function"].get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Tool name cannot be empty.")
        if any(existing["function"]["name"] == name for existing in toolset.schemas):
            raise ValueError(f"Duplicate tool name: {name}")
        toolset.schemas.append(schema)
        if runnable is not None and runnable.handler is not None:
            toolset.runnable.append(runnable)
    return toolset


def tool(
    func: Callable[..., Any] | None = None,
    *,
    name: str | None = None,
    description: str | None = None,
) -> Tool | Callable[[Callable[..., Any]], Tool]:
    """Decorator turning a function into a Tool, with or without arguments."""

    def wrap(target: Callable[..., Any]) -> Tool:
        return Tool.from_callable(target, name=name, description=description)

    return wrap if func is None else wrap(func)
