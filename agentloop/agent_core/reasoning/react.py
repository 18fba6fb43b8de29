from __future__ import annotations

from typing import TYPE_CHECKING

from agentloop.core.logging_config import get_logger

from ..errors import MaxStepsExceededError
from ..schemas.domain import ResponseStep, ThoughtStep
from .base import ReasoningEngine, StrategyName
from .utils import execute_tool_calls, tool_calls_of

if TYPE_CHECKING:
    from ..runtime.reasoning_context import ReasoningContext

logger = get_logger(__name__)


class ReactEngine(ReasoningEngine):
    """
    Reason + act loop.

    Each iteration calls the model on the live transcript. A turn without
    tool calls is the answer; otherwise the calls run in order and the loop
    continues. ``policy.max_steps`` overrides ``max_steps`` when set.
    """

    name = StrategyName.react.value

    def __init__(self, *, max_steps: int = 10) -> None:
        self.max_steps = max_steps

    async def execute(self, rctx: "ReasoningContext") -> str:
        max_steps = rctx.policy.max_steps_or(self.max_steps)
        messages = rctx.messages

        for step in range(max_steps):
            response = await rctx.call_model(messages)
            messages.append(response.message)
            calls = tool_calls_of(response)

            if not calls:
                content = response.message.content
                rctx.push_step(ResponseStep(content=content, engine=self.name))
                return content

            if response.message.content:
                rctx.push_step(ThoughtStep(content=response.message.content, engine=self.name))
            logger.debug(f"react step {step + 1}/{max_steps}: {len(calls)} tool call(s)")
            await execute_tool_calls(rctx, response)

        raise MaxStepsExceededError(self.name, max_steps, "no final answer")
