from __future__ import annotations

"""Generate, critique, revise.

The answer is produced by a short tool loop, then judged by a tool-less
critique call that must answer with JSON. A critique that cannot be parsed
counts as an accept. Revision stops as soon as a critique no longer asks for
it, reaches ``acceptance_threshold``, or ``max_reflections`` is used up.
"""

from typing import TYPE_CHECKING, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from agentloop.core.logging_config import get_logger

from ..errors import MaxStepsExceededError
from ..schemas.domain import Message, ReflectionStep, ResponseStep, Role, ThoughtStep
from .base import ReasoningEngine, StrategyName
from .utils import execute_tool_calls, extract_text, parse_json, tool_calls_of

if TYPE_CHECKING:
    from ..runtime.reasoning_context import ReasoningContext

logger = get_logger(__name__)

DEFAULT_CRITIQUE_PROMPT = """You are a critical evaluator. Review the answer below and assess its quality.

Respond in this exact JSON format (no markdown):
{
  "score": <0-10>,
  "issues": ["<issue 1>", "<issue 2>"],
  "suggestion": "<one-sentence improvement suggestion>",
  "needs_revision": <true|false>
}

Be strict. Score 10 only for perfect answers. Score < 8 if the answer is incomplete, incorrect, or could be substantially improved."""

REVISION_PROMPT = "You are revising your previous answer based on critique. Produce an improved, complete answer."


class Critique(BaseModel):
    model_config = ConfigDict(extra="ignore")

    score: float = Field(ge=0, le=10)
    issues: List[str] = Field(default_factory=list)
    suggestion: str = ""
    needs_revision: bool = False

    @classmethod
    def accept(cls) -> "Critique":
        return cls(score=9, issues=[], suggestion="", needs_revision=False)

    def assessment(self) -> str:
        return f"Score: {self.score:g}/10. Issues: {'; '.join(self.issues)}. {self.suggestion}"


class ReflectEngine(ReasoningEngine):
    name = StrategyName.reflect.value

    def __init__(
        self,
        *,
        max_reflections: int = 2,
        acceptance_threshold: float = 8,
        max_answer_steps: int = 5,
        critique_prompt: str = DEFAULT_CRITIQUE_PROMPT,
    ) -> None:
        self.max_reflections = max_reflections
        self.acceptance_threshold = acceptance_threshold
        self.max_answer_steps = max_answer_steps
        self.critique_prompt = critique_prompt

    async def execute(self, rctx: "ReasoningContext") -> str:
        question = rctx.ctx.input
        answer = await self._generate(rctx)
        rctx.push_step(ThoughtStep(content="Initial answer generated.", engine=self.name))

        revised = False
        for attempt in range(1, self.max_reflections + 1):
            critique = await self._critique(rctx, question, answer)
            rctx.push_step(
                ReflectionStep(
                    assessment=critique.assessment(), needs_revision=critique.needs_revision, engine=self.name
                )
            )
            if not critique.needs_revision or critique.score >= self.acceptance_threshold:
                break

            rctx.push_step(
                ThoughtStep(
                    content=f"Revising answer (attempt {attempt}/{self.max_reflections})...", engine=self.name
                )
            )
            answer = await self._revise(rctx, question, answer, critique)
            revised = True

        if revised:
            rctx.messages.append(Message(role=Role.assistant, content=answer))
        rctx.push_step(ResponseStep(content=answer, engine=self.name))
        return answer

    async def _generate(self, rctx: "ReasoningContext") -> str:
        messages = rctx.messages
        for _ in range(self.max_answer_steps):
            response = await rctx.call_model(messages)
            messages.append(response.message)
            if not tool_calls_of(response):
                return extract_text(response.message.content)
            await execute_tool_calls(rctx, response)
        raise MaxStepsExceededError(self.name, self.max_answer_steps, "no initial answer")

    async def _critique(self, rctx: "ReasoningContext", question: str, answer: str) -> Critique:
        response = await rctx.call_model(
            [
                Message(role=Role.system, content=self.critique_prompt),
                Message(role=Role.user, content=f"Question:\n{question}\n\nAnswer to evaluate:\n{answer}"),
            ],
            no_tools=True,
        )
        try:
            return Critique.model_validate(parse_json(response.message.content))
        except (ValueError, ValidationError):
            logger.info("critique was not valid JSON, accepting the answer")
            return Critique.accept()

    async def _revise(self, rctx: "ReasoningContext", question: str, answer: str, critique: Critique) -> str:
        feedback = (
            f"Critique of your answer:\n- Score: {critique.score:g}/10\n- Issues: {', '.join(critique.issues)}\n"
            f"- Suggestion: {critique.suggestion}\n\nPlease revise your answer to address these issues."
        )
        response = await rctx.call_model(
            [
                Message(role=Role.system, content=REVISION_PROMPT),
                Message(role=Role.user, content=f"Original question:\n{question}"),
                Message(role=Role.assistant, content=answer),
                Message(role=Role.user, content=feedback),
            ]
        )
        if not tool_calls_of(response):
            return extract_text(response.message.content)

        rctx.messages.append(response.message)
        await execute_tool_calls(rctx, response)
        final = await rctx.call_model(rctx.messages, no_tools=True)
        return extract_text(final.message.content)
