from __future__ import annotations

"""Chain-of-thought engine.

The system prompt of the first model call is extended with an instruction to
reason inside ``<thinking>`` tags. The tagged block is pushed as a thought
and removed from the answer. Tool calls made along the way fall into a
bounded tool loop on the plain transcript.
"""

import re
from typing import TYPE_CHECKING, List, Optional

from ..errors import MaxStepsExceededError
from ..schemas.domain import Message, ResponseStep, Role, ThoughtStep
from .base import ReasoningEngine, StrategyName
from .utils import execute_tool_calls, extract_text, tool_calls_of

if TYPE_CHECKING:
    from ..runtime.reasoning_context import ReasoningContext

DEFAULT_THINKING_INSTRUCTION = (
    "Before answering, reason step by step inside <thinking> tags.\n"
    "Work through the problem carefully, considering all relevant information.\n"
    "Then provide your final answer outside the tags."
)

_THINKING_BLOCK = re.compile(r"<thinking>([\s\S]*?)</thinking>", re.IGNORECASE)


class ChainOfThoughtEngine(ReasoningEngine):
    name = StrategyName.cot.value

    def __init__(
        self,
        *,
        use_thinking_tags: bool = True,
        max_tool_steps: int = 5,
        thinking_instruction: str = DEFAULT_THINKING_INSTRUCTION,
    ) -> None:
        self.use_thinking_tags = use_thinking_tags
        self.max_tool_steps = max_tool_steps
        self.thinking_instruction = thinking_instruction

    async def execute(self, rctx: "ReasoningContext") -> str:
        transcript = rctx.messages

        response = await rctx.call_model(self._inject_instruction(transcript))
        transcript.append(response.message)

        if self.use_thinking_tags:
            thinking = self._extract_thinking(response.message.content)
            if thinking:
                rctx.push_step(ThoughtStep(content=thinking, engine=self.name))

        if not tool_calls_of(response):
            return self._finish(rctx, response.message.content)

        await execute_tool_calls(rctx, response)
        for _ in range(1, self.max_tool_steps):
            response = await rctx.call_model(transcript)
            transcript.append(response.message)
            if not tool_calls_of(response):
                return self._finish(rctx, response.message.content)
            await execute_tool_calls(rctx, response)

        raise MaxStepsExceededError(self.name, self.max_tool_steps, "tool loop did not settle")

    def _finish(self, rctx: "ReasoningContext", content: str) -> str:
        answer = extract_text(content)
        rctx.push_step(ResponseStep(content=answer, engine=self.name))
        return answer

    def _inject_instruction(self, messages: List[Message]) -> List[Message]:
        """Return a copy of ``messages`` carrying the thinking instruction."""
        if not self.use_thinking_tags:
            return list(messages)

        result = list(messages)
        for idx, msg in enumerate(result):
            if msg.role == Role.system:
                result[idx] = msg.model_copy(update={"content": f"{msg.content}\n\n{self.thinking_instruction}"})
                return result
        result.insert(0, Message(role=Role.system, content=self.thinking_instruction))
        return result

    @staticmethod
    def _extract_thinking(content: str) -> Optional[str]:
        match = _THINKING_BLOCK.search(content or "")
        return match.group(1).strip() if match else None
