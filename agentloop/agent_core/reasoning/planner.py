from __future__ import annotations

"""Plan, execute, synthesize.

1. **Plan**: one tool-less model call turns the user input into a JSON list
   of tasks with dependencies. Output that does not parse falls back to a
   single task wrapping the raw input.
2. **Execute**: tasks run in dependency order. The plan is swept repeatedly
   until a sweep makes no progress, so dependencies may be declared in any
   order. Every task gets its own short tool-enabled conversation.
3. **Synthesize**: one tool-less model call merges the results of the tasks
   that completed.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from pydantic import ValidationError

from agentloop.core.logging_config import get_logger

from ..errors import MaxStepsExceededError, TaskFailedError
from ..schemas.domain import (
    Message,
    PlanStep,
    PlanTask,
    ResponseStep,
    Role,
    TaskStatus,
    ThoughtStep,
)
from .base import ReasoningEngine, StrategyName
from .utils import extract_text, parse_json, tool_calls_of

if TYPE_CHECKING:
    from ..runtime.reasoning_context import ReasoningContext

logger = get_logger(__name__)

DEFAULT_PLANNER_PROMPT = """You are a planning assistant. Break the user's request into a clear, ordered list of subtasks.

Respond with ONLY a JSON array of tasks in this exact format (no markdown, no preamble):
[
  { "id": "t1", "description": "...", "dependsOn": [] },
  { "id": "t2", "description": "...", "dependsOn": ["t1"] }
]

Rules:
- Each task must be atomic and independently executable
- dependsOn lists task ids that must complete first
- Order tasks so dependencies come first
- Be specific, the executor will act on each description"""

DEFAULT_EXECUTOR_PROMPT = (
    "You are an execution assistant. Complete the given subtask using available tools.\n"
    "Focus only on the current task. Be concise and direct."
)

SYNTHESIS_PROMPT = (
    "Synthesize the results of the completed tasks into a clear, direct answer to the original user request."
)


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


class PlannerEngine(ReasoningEngine):
    """
    Attributes:
        max_execution_steps: Upper bound on the number of tasks executed.
        allow_replan: Keep going after a task fails instead of raising
            ``TaskFailedError``. No replanning happens; the failed task and
            everything depending on it are left out of the synthesis.
        max_task_steps: Model turns allowed per task.
    """

    name = StrategyName.planner.value

    def __init__(
        self,
        *,
        max_execution_steps: int = 20,
        allow_replan: bool = False,
        planner_prompt: str = DEFAULT_PLANNER_PROMPT,
        executor_prompt: str = DEFAULT_EXECUTOR_PROMPT,
        max_task_steps: int = 5,
    ) -> None:
        self.max_execution_steps = max_execution_steps
        self.allow_replan = allow_replan
        self.planner_prompt = planner_prompt
        self.executor_prompt = executor_prompt
        self.max_task_steps = max_task_steps

    async def execute(self, rctx: "ReasoningContext") -> str:
        plan = await self._make_plan(rctx)
        rctx.push_step(PlanStep(tasks=[t.model_copy(deep=True) for t in plan], engine=self.name))

        results = await self._run_plan(rctx, plan)

        answer = await self._synthesize(rctx, plan, results)
        rctx.messages.append(Message(role=Role.assistant, content=answer))
        rctx.push_step(ResponseStep(content=answer, engine=self.name))
        return answer

    async def _make_plan(self, rctx: "ReasoningContext") -> List[PlanTask]:
        user_input = rctx.ctx.input
        response = await rctx.call_model(
            [
                Message(role=Role.system, content=self.planner_prompt),
                Message(role=Role.user, content=user_input),
            ],
            no_tools=True,
        )
        tasks = self._parse_plan(response.message.content)
        if tasks is None:
            logger.info("plan output was not a usable task list, falling back to a single task")
            return [PlanTask(id="t1", description=user_input)]
        return tasks

    @staticmethod
    def _parse_plan(content: str) -> Optional[List[PlanTask]]:
        try:
            raw = parse_json(content)
        except ValueError:
            return None
        if not isinstance(raw, list) or not raw:
            return None

        tasks: List[PlanTask] = []
        for item in raw:
            if not isinstance(item, dict) or not isinstance(item.get("description"), str):
                return None
            deps = item.get("dependsOn", item.get("depends_on"))
            if deps is None:
                deps = []
            if not isinstance(deps, list) or not all(_is_scalar(d) for d in deps):
                return None
            task_id = item.get("id")
            if task_id is not None and not _is_scalar(task_id):
                return None

            fields: Dict[str, Any] = {"description": item["description"], "depends_on": [str(d) for d in deps]}
            if task_id is not None:
                fields["id"] = str(task_id)
            try:
                tasks.append(PlanTask(**fields))
            except ValidationError:
                return None
        return tasks

    async def _run_plan(self, rctx: "ReasoningContext", plan: List[PlanTask]) -> Dict[str, str]:
        results: Dict[str, str] = {}
        executed = 0
        progressed = True

        while progressed:
            progressed = False
            for task in plan:
                if task.status != TaskStatus.pending:
                    continue
                if any(dep not in results for dep in task.depends_on):
                    continue
                if executed >= self.max_execution_steps:
                    raise MaxStepsExceededError(self.name, self.max_execution_steps, "too many plan tasks")

                task.status = TaskStatus.in_progress
                rctx.push_step(
                    ThoughtStep(content=f"Executing task [{task.id}]: {task.description}", engine=self.name)
                )
                executed += 1
                progressed = True
                try:
                    result = await self._execute_task(rctx, task, results)
                except Exception as exc:
                    task.status = TaskStatus.failed
                    if not self.allow_replan:
                        raise TaskFailedError(task.id, str(exc)) from exc
                    logger.warning(f"task '{task.id}' failed, continuing without it: {exc}")
                    continue
                task.status = TaskStatus.done
                task.result = result
                results[task.id] = result

        for task in plan:
            if task.status == TaskStatus.pending:
                task.status = TaskStatus.failed
                missing = [d for d in task.depends_on if d not in results]
                logger.warning(f"task '{task.id}' never ran, unsatisfied dependencies: {missing}")
        return results

    async def _execute_task(self, rctx: "ReasoningContext", task: PlanTask, previous: Dict[str, str]) -> str:
        context = ""
        if task.depends_on:
            lines = "\n".join(f"[{dep}]: {previous.get(dep, 'N/A')}" for dep in task.depends_on)
            context = f"\n\nContext from previous tasks:\n{lines}"

        messages = [
            Message(role=Role.system, content=self.executor_prompt),
            Message(
                role=Role.user,
                content=f"Original goal: {rctx.ctx.input}\n\nCurrent task: {task.description}{context}",
            ),
        ]

        for _ in range(self.max_task_steps):
            response = await rctx.call_model(messages)
            messages.append(response.message)
            calls = tool_calls_of(response)
            if not calls:
                return extract_text(response.message.content)

            # Keep the run transcript well formed: tool messages follow their call.
            rctx.messages.append(response.message)
            for call in calls:
                await rctx.call_tool(call.name, call.arguments, call.id)
                messages.append(rctx.messages[-1])

        raise MaxStepsExceededError(self.name, self.max_task_steps, f"task '{task.id}' did not finish")

    async def _synthesize(self, rctx: "ReasoningContext", plan: List[PlanTask], results: Dict[str, str]) -> str:
        done = "\n\n".join(
            f"[{t.id}] {t.description}:\n{results.get(t.id, 'no result')}" for t in plan if t.status == TaskStatus.done
        )
        response = await rctx.call_model(
            [
                Message(role=Role.system, content=SYNTHESIS_PROMPT),
                Message(role=Role.user, content=f"Original request: {rctx.ctx.input}\n\nTask results:\n{done}"),
            ],
            no_tools=True,
        )
        return response.message.content
