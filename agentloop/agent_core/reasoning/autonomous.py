from __future__ import annotations

"""Open-ended agent loop terminated by a synthetic ``finish`` tool.

``finish`` is advertised to the model for this run only and is never added
to the tool registry. A turn without any tool call is also taken as the
final answer.
"""

from typing import TYPE_CHECKING

from agentloop.core.logging_config import get_logger

from ..errors import MaxStepsExceededError
from ..schemas.domain import Message, ResponseStep, Role, ThoughtStep, ToolSchema
from .base import ReasoningEngine, StrategyName
from .utils import extract_text, tool_calls_of

if TYPE_CHECKING:
    from ..runtime.reasoning_context import ReasoningContext

logger = get_logger(__name__)

DEFAULT_FINISH_DESCRIPTION = "Signal that you have completed the task. Call this with your final answer."

FINISH_RESULT_CONTENT = '{"done": true}'


class AutonomousEngine(ReasoningEngine):
    name = StrategyName.autonomous.value

    def __init__(
        self,
        *,
        max_steps: int = 30,
        finish_tool_name: str = "finish",
        finish_tool_description: str = DEFAULT_FINISH_DESCRIPTION,
    ) -> None:
        self.max_steps = max_steps
        self.finish_tool_name = finish_tool_name
        self.finish_tool_description = finish_tool_description

    def finish_schema(self) -> ToolSchema:
        return ToolSchema(
            name=self.finish_tool_name,
            description=self.finish_tool_description,
            parameters={
                "type": "object",
                "properties": {"result": {"type": "string", "description": "Your final answer or output."}},
                "required": ["result"],
            },
        )

    async def execute(self, rctx: "ReasoningContext") -> str:
        max_steps = rctx.policy.max_steps_or(self.max_steps)
        schemas = [*rctx.policy.allowed_schemas(rctx.tools), self.finish_schema()]
        messages = rctx.messages

        for _ in range(max_steps):
            response = await rctx.call_model(messages, tools=schemas)
            messages.append(response.message)
            content = response.message.content

            if content:
                rctx.push_step(ThoughtStep(content=content, engine=self.name))

            calls = tool_calls_of(response)
            if not calls:
                answer = extract_text(content)
                rctx.push_step(ResponseStep(content=answer, engine=self.name))
                return answer

            finish = next((c for c in calls if c.name == self.finish_tool_name), None)
            for call in calls:
                if call.name != self.finish_tool_name:
                    await rctx.call_tool(call.name, call.arguments, call.id)

            if finish is not None:
                value = finish.arguments.get("result")
                result = str(value) if value is not None else content
                messages.append(Message(role=Role.tool, content=FINISH_RESULT_CONTENT, tool_call_id=finish.id))
                rctx.push_step(ResponseStep(content=result, engine=self.name))
                return result

        logger.warning(f"autonomous run ended without calling '{self.finish_tool_name}'")
        raise MaxStepsExceededError(self.name, max_steps, f"'{self.finish_tool_name}' was never called")
