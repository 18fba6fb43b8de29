from __future__ import annotations

from typing import Any, Dict

import pytest

from agentloop.agent_core.events import EventBus
from agentloop.agent_core.runtime.context import ExecutionContext, create_context
from agentloop.agent_core.tools.base import ToolDefinition, define_tool, tool
from agentloop.agent_core.tools.registry import ToolRegistry


@pytest.fixture
def ctx() -> ExecutionContext:
    return create_context("hi", bus=EventBus(), session_id="s")


def _echo(text: str) -> Dict[str, Any]:
    return {"echo": text}


class TestToolRegistry:
    def test_register_then_get_round_trips_name(self) -> None:
        reg = ToolRegistry()
        reg.register(define_tool("echo", "Echo text", _echo))
        found = reg.get("echo")
        assert found is not None
        assert found.schema.name == "echo"
        assert reg.has("echo")
        assert len(reg) == 1

    def test_get_unknown_returns_none(self) -> None:
        assert ToolRegistry().get("nope") is None

    def test_register_overwrites_by_name(self) -> None:
        reg = ToolRegistry()
        reg.register(define_tool("echo", "first", _echo)).register(define_tool("echo", "second", _echo))
        assert len(reg) == 1
        assert reg.get_schemas()[0].description == "second"

    def test_get_all_keeps_registration_order(self) -> None:
        reg = ToolRegistry()
        reg.register(define_tool("b", "", _echo)).register(define_tool("a", "", _echo))
        assert [t.schema.name for t in reg.get_all()] == ["b", "a"]

    @pytest.mark.parametrize(
        ("allowed", "expected"),
        [(None, True), (["echo"], True), (["other"], False), ([], False)],
    )
    def test_is_allowed(self, allowed, expected: bool) -> None:
        assert ToolRegistry.is_allowed("echo", allowed) is expected


class TestToolDecorator:
    def test_schema_derived_from_signature(self) -> None:
        @tool()
        async def get_weather(city: str, unit: str = "c") -> dict:
            """Look up the weather.

            More text that is not part of the description.
            """
            return {"city": city, "unit": unit}

        assert isinstance(get_weather, ToolDefinition)
        assert get_weather.name == "get_weather"
        assert get_weather.schema.description == "Look up the weather."
        params = get_weather.schema.parameters
        assert params["type"] == "object"
        assert params["properties"]["city"] == {"type": "string"}
        assert params["properties"]["unit"]["default"] == "c"
        assert params["required"] == ["city"]
        assert "title" not in params

    def test_ctx_parameter_is_injected_not_advertised(self, ctx: ExecutionContext) -> None:
        @tool("whoami", description="Return the session")
        def whoami(ctx, suffix: str = "") -> str:
            return ctx.session_id + suffix

        assert whoami.takes_context
        assert "ctx" not in whoami.schema.parameters["properties"]
        assert whoami.schema.name == "whoami"

    @pytest.mark.asyncio
    async def test_execute_sync_and_async(self, ctx: ExecutionContext) -> None:
        @tool()
        def add(a: int, b: int) -> int:
            return a + b

        @tool()
        async def whoami(ctx) -> str:
            return ctx.session_id

        assert await add.execute({"a": 1, "b": 2}, ctx) == 3
        assert await whoami.execute({}, ctx) == "s"


def test_define_tool_defaults_to_empty_object_schema() -> None:
    t = define_tool("ping", "Ping", lambda: "pong")
    assert t.schema.parameters == {"type": "object", "properties": {}}
