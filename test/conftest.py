from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional, Sequence, Union

import httpx
import pytest

from agentloop.agent_core.events import EventBus
from agentloop.agent_core.policy.global_policy import GlobalPolicy
from agentloop.agent_core.policy.models import AgentPolicy
from agentloop.agent_core.runtime.context import create_context
from agentloop.agent_core.runtime.reasoning_context import ReasoningContext
from agentloop.agent_core.schemas.domain import (
    Message,
    ModelRequest,
    ModelResponse,
    Role,
    TokenUsage,
    ToolCall,
)
from agentloop.agent_core.tools.base import Tool
from agentloop.agent_core.tools.registry import ToolRegistry

Reply = Union[ModelResponse, Callable[[ModelRequest], ModelResponse]]


class ScriptedModel:
    """Model provider answering from a fixed list of replies, recording every request."""

    name = "scripted"

    def __init__(self, replies: Iterable[Reply]) -> None:
        self._replies: List[Reply] = list(replies)
        self.requests: List[ModelRequest] = []

    @property
    def remaining(self) -> int:
        return len(self._replies)

    async def complete(self, request: ModelRequest) -> ModelResponse:
        self.requests.append(request)
        if not self._replies:
            raise AssertionError("scripted model ran out of replies")
        nxt = self._replies.pop(0)
        return nxt(request) if callable(nxt) else nxt


def make_call(name: str, call_id: Optional[str] = None, **arguments: Any) -> ToolCall:
    return ToolCall(id=call_id or f"call_{name}", name=name, arguments=arguments)


def make_reply(content: str = "", calls: Sequence[ToolCall] = (), *, tokens: int = 0, cost: float = 0.0) -> ModelResponse:
    tool_calls = list(calls) or None
    usage = TokenUsage(prompt_tokens=tokens, completion_tokens=0, total_tokens=tokens, cost_usd=cost)
    return ModelResponse(
        message=Message(role=Role.assistant, content=content, tool_calls=tool_calls),
        tool_calls=tool_calls,
        usage=usage,
    )


@pytest.fixture
def scripted_model() -> Callable[..., ScriptedModel]:
    def _make(*replies: Reply) -> ScriptedModel:
        return ScriptedModel(replies)

    return _make


@pytest.fixture
def reply() -> Callable[..., ModelResponse]:
    return make_reply


@pytest.fixture
def tool_call() -> Callable[..., ToolCall]:
    return make_call


@pytest.fixture
def reasoning_context() -> Callable[..., ReasoningContext]:
    """Build a ``ReasoningContext`` seeded with a user message, outside of an agent runtime."""

    def _make(
        model: Any,
        *,
        tools: Sequence[Tool] = (),
        policy: Optional[AgentPolicy] = None,
        user_input: str = "question",
        system_prompt: Optional[str] = None,
        bus: Optional[EventBus] = None,
        engine_name: str = "test",
    ) -> ReasoningContext:
        ctx = create_context(user_input, bus=bus or EventBus(), session_id="s1")
        if system_prompt:
            ctx.state.messages.append(Message(role=Role.system, content=system_prompt))
        ctx.state.messages.append(Message(role=Role.user, content=user_input))
        registry = ToolRegistry()
        for t in tools:
            registry.register(t)
        return ReasoningContext(
            ctx,
            model=model,
            tools=registry,
            policy=GlobalPolicy(policy),
            system_prompt=system_prompt,
            engine_name=engine_name,
        )

    return _make


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)
