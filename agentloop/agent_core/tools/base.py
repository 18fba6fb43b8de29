from __future__ import annotations

"""Tool protocol and callable-backed tool definitions.

A *tool* is anything exposing a ``schema`` (name, description, JSON-schema
parameters) and an async ``execute(args, ctx)``. Tools never decide whether
they may run: the allow-list is applied by the invocation protocol in
``ReasoningContext.call_tool`` before ``execute`` is reached.

``ToolDefinition`` wraps a plain (sync or async) function. The ``tool``
decorator builds one from a function signature, deriving the parameter
schema with pydantic.
"""

import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Protocol, get_type_hints

from pydantic import create_model

from ..schemas.domain import ToolSchema

if TYPE_CHECKING:
    from ..runtime.context import ExecutionContext


class Tool(Protocol):
    """Protocol for tool implementations."""

    schema: ToolSchema

    async def execute(self, args: Dict[str, Any], ctx: "ExecutionContext") -> Any: ...


@dataclass(frozen=True)
class ToolDefinition:
    """
    Tool backed by a Python callable.

    Attributes:
        schema: The schema advertised to the model backend.
        fn: The function invoked with the call arguments as keyword arguments.
        takes_context: When True the ``ExecutionContext`` is passed as the
            first positional argument.
    """

    schema: ToolSchema
    fn: Callable[..., Any]
    takes_context: bool = False

    @property
    def name(self) -> str:
        return self.schema.name

    async def execute(self, args: Dict[str, Any], ctx: "ExecutionContext") -> Any:
        if self.takes_context:
            result = self.fn(ctx, **args)
        else:
            result = self.fn(**args)
        if inspect.isawaitable(result):
            result = await result
        return result


def define_tool(
    name: str,
    description: str,
    fn: Callable[..., Any],
    *,
    parameters: Optional[Dict[str, Any]] = None,
    takes_context: bool = False,
) -> ToolDefinition:
    """Build a ``ToolDefinition`` from an explicit schema."""
    schema = ToolSchema(
        name=name,
        description=description,
        parameters=parameters if parameters is not None else {"type": "object", "properties": {}},
    )
    return ToolDefinition(schema=schema, fn=fn, takes_context=takes_context)


def _parameters_schema(fn: Callable[..., Any], *, skip_first: bool) -> Dict[str, Any]:
    try:
        hints = get_type_hints(fn)
    except NameError:
        hints = {}

    params = list(inspect.signature(fn).parameters.values())
    if skip_first:
        params = params[1:]

    fields: Dict[str, Any] = {}
    for p in params:
        if p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        annotation = hints.get(p.name, Any)
        default = ... if p.default is inspect.Parameter.empty else p.default
        fields[p.name] = (annotation, default)

    model = create_model(f"{fn.__name__}_arguments", **fields)
    schema = model.model_json_schema()
    schema.pop("title", None)
    for prop in schema.get("properties", {}).values():
        prop.pop("title", None)
    schema.setdefault("properties", {})
    return schema


def tool(
    name: Optional[str] = None,
    *,
    description: Optional[str] = None,
) -> Callable[[Callable[..., Any]], ToolDefinition]:
    """
    Decorator turning a function into a ``ToolDefinition``.

    The parameter schema is derived from the function's signature and type
    hints. A first parameter named ``ctx`` receives the ``ExecutionContext``
    and is excluded from the schema. The description defaults to the first
    line of the docstring.

    Example:
        @tool()
        async def get_weather(city: str, unit: str = "c") -> dict:
            \"\"\"Look up the current weather for a city.\"\"\"
            ...
    """

    def decorator(fn: Callable[..., Any]) -> ToolDefinition:
        params = list(inspect.signature(fn).parameters)
        takes_context = bool(params) and params[0] == "ctx"
        doc = inspect.getdoc(fn) or ""
        schema = ToolSchema(
            name=name or fn.__name__,
            description=description if description is not None else (doc.splitlines()[0] if doc else ""),
            parameters=_parameters_schema(fn, skip_first=takes_context),
        )
        return ToolDefinition(schema=schema, fn=fn, takes_context=takes_context)

    return decorator
