"""Pydantic AI model adapter.

Implements :class:`~agentloop.agent_core.model.base.ModelProvider` on top of
``pydantic_ai.direct``, so any model pydantic-ai supports (a ``Model``
instance or a ``"provider:model"`` string) can drive the agent runtime.
Only the wire conversion lives here; the reasoning loop never sees
pydantic-ai types.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Union

from pydantic_ai import messages as pai
from pydantic_ai.direct import model_request, model_request_stream
from pydantic_ai.models import Model, ModelRequestParameters
from pydantic_ai.settings import ModelSettings
from pydantic_ai.tools import ToolDefinition as PAIToolDefinition

from agentloop.core.logging_config import get_logger

from ...schemas.domain import (
    Message,
    ModelRequest,
    ModelResponse,
    ModelResponseChunk,
    Role,
    TokenUsage,
    ToolCall,
    ToolSchema,
)

logger = get_logger(__name__)


def to_pydantic_ai_messages(messages: Sequence[Message]) -> List[pai.ModelMessage]:
    """
    Convert a transcript into pydantic-ai messages.

    Consecutive system, user and tool messages are merged into a single
    ``ModelRequest``; every assistant message becomes a ``ModelResponse``.
    """
    result: List[pai.ModelMessage] = []
    pending: List[pai.ModelRequestPart] = []
    tool_names: Dict[str, str] = {}

    def flush() -> None:
        if pending:
            result.append(pai.ModelRequest(parts=list(pending)))
            pending.clear()

    for msg in messages:
        if msg.role == Role.system:
            pending.append(pai.SystemPromptPart(content=msg.content))
        elif msg.role == Role.user:
            pending.append(pai.UserPromptPart(content=msg.content))
        elif msg.role == Role.tool:
            call_id = msg.tool_call_id or ""
            pending.append(
                pai.ToolReturnPart(tool_name=tool_names.get(call_id, ""), content=msg.content, tool_call_id=call_id)
            )
        else:
            flush()
            parts: List[pai.ModelResponsePart] = []
            if msg.content or not msg.tool_calls:
                parts.append(pai.TextPart(content=msg.content))
            for call in msg.tool_calls or []:
                tool_names[call.id] = call.name
                parts.append(pai.ToolCallPart(tool_name=call.name, args=dict(call.arguments), tool_call_id=call.id))
            result.append(pai.ModelResponse(parts=parts))
    flush()
    return result


def to_tool_definitions(tools: Sequence[ToolSchema]) -> List[PAIToolDefinition]:
    return [
        PAIToolDefinition(name=t.name, description=t.description, parameters_json_schema=t.parameters) for t in tools
    ]


def _usage_of(response: pai.ModelResponse) -> TokenUsage:
    usage = response.usage
    # pydantic-ai renamed request/response tokens to input/output tokens.
    prompt = getattr(usage, "input_tokens", None)
    if prompt is None:
        prompt = getattr(usage, "request_tokens", None)
    completion = getattr(usage, "output_tokens", None)
    if completion is None:
        completion = getattr(usage, "response_tokens", None)
    prompt, completion = prompt or 0, completion or 0
    total = getattr(usage, "total_tokens", None) or prompt + completion
    return TokenUsage(prompt_tokens=prompt, completion_tokens=completion, total_tokens=total)


def from_pydantic_ai_response(response: pai.ModelResponse) -> ModelResponse:
    texts: List[str] = []
    calls: List[ToolCall] = []
    for part in response.parts:
        if isinstance(part, pai.TextPart):
            texts.append(part.content)
        elif isinstance(part, pai.ToolCallPart):
            calls.append(ToolCall(id=part.tool_call_id, name=part.tool_name, arguments=part.args_as_dict()))

    message = Message(role=Role.assistant, content="".join(texts), tool_calls=calls or None)
    return ModelResponse(message=message, tool_calls=calls or None, usage=_usage_of(response), raw=response)


class PydanticAIModelProvider:
    """
    Model provider backed by pydantic-ai's direct model API.

    Attributes:
        model: A pydantic-ai ``Model`` or a known model name such as
            ``"openai:gpt-4o"``.
        model_settings: Optional pydantic-ai ``ModelSettings`` sent with
            every request.
    """

    def __init__(self, model: Union[Model, str], model_settings: Optional[ModelSettings] = None) -> None:
        self.model = model
        self.model_settings = model_settings
        model_name = model if isinstance(model, str) else getattr(model, "model_name", type(model).__name__)
        self.name = f"pydantic-ai:{model_name}"

    def _parameters(self, request: ModelRequest) -> ModelRequestParameters:
        return ModelRequestParameters(function_tools=to_tool_definitions(request.tools), allow_text_output=True)

    async def complete(self, request: ModelRequest) -> ModelResponse:
        logger.debug(f"{self.name}: request with {len(request.messages)} message(s), {len(request.tools)} tool(s)")
        response = await model_request(
            self.model,
            to_pydantic_ai_messages(request.messages),
            model_settings=self.model_settings,
            model_request_parameters=self._parameters(request),
        )
        return from_pydantic_ai_response(response)

    async def stream(self, request: ModelRequest) -> AsyncIterator[ModelResponseChunk]:
        """Yield one chunk per text delta, then a final ``done`` chunk."""
        async with model_request_stream(
            self.model,
            to_pydantic_ai_messages(request.messages),
            model_settings=self.model_settings,
            model_request_parameters=self._parameters(request),
        ) as stream:
            async for event in stream:
                delta = _text_delta(event)
                if delta:
                    yield ModelResponseChunk(delta=delta)
        yield ModelResponseChunk(delta="", done=True)


def _text_delta(event: Any) -> Optional[str]:
    if isinstance(event, pai.PartStartEvent) and isinstance(event.part, pai.TextPart):
        return event.part.content
    if isinstance(event, pai.PartDeltaEvent) and isinstance(event.delta, pai.TextPartDelta):
        return event.delta.content_delta
    return None
