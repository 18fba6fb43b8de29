"""Helpers shared by the built-in reasoning engines."""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any, List, Optional

from ..schemas.domain import ModelResponse, ToolCall

if TYPE_CHECKING:
    from ..runtime.reasoning_context import ReasoningContext

_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_THINKING = re.compile(r"<thinking>[\s\S]*?</thinking>", re.IGNORECASE)
_THOUGHT = re.compile(r"<thought>[\s\S]*?</thought>", re.IGNORECASE)


def tool_calls_of(response: ModelResponse) -> List[ToolCall]:
    return list(response.tool_calls or response.message.tool_calls or [])


async def execute_tool_calls(rctx: "ReasoningContext", response: ModelResponse) -> None:
    """Run every tool call of ``response`` one after another."""
    for call in tool_calls_of(response):
        await rctx.call_tool(call.name, call.arguments, call.id)


def strip_fence(text: str) -> str:
    match = _FENCE.search(text)
    return (match.group(1) if match else text).strip()


def parse_json(text: str) -> Any:
    """
    Parse JSON from model output, preferring the first fenced block.

    Raises:
        ValueError: The text holds no valid JSON.
    """
    return json.loads(strip_fence(text))


def extract_text(content: Optional[str]) -> str:
    """Drop ``<thinking>``/``<thought>`` blocks and surrounding whitespace."""
    if not content:
        return ""
    return _THOUGHT.sub("", _THINKING.sub("", content)).strip()
