from __future__ import annotations

import json
from typing import Any, Dict, List

import pytest

from agentloop.agent_core.errors import MaxStepsExceededError, TaskFailedError
from agentloop.agent_core.reasoning.planner import SYNTHESIS_PROMPT, PlannerEngine
from agentloop.agent_core.schemas.domain import (
    ModelRequest,
    PlanStep,
    ResponseStep,
    Role,
    TaskStatus,
    ThoughtStep,
)
from agentloop.agent_core.tools.base import define_tool


def _plan(*tasks: Dict[str, Any]) -> str:
    return json.dumps(list(tasks))


def _task_of(request: ModelRequest) -> str:
    """Pull the 'Current task' line out of an executor request."""
    user = request.messages[1].content
    return user.split("Current task: ", 1)[1].split("\n", 1)[0]


def _executed(rctx) -> List[str]:
    prefix = "Executing task ["
    return [
        s.content[len(prefix) : s.content.index("]")]
        for s in rctx.state.steps
        if isinstance(s, ThoughtStep) and s.content.startswith(prefix)
    ]


def _check_single_final_response(rctx, answer: str) -> None:
    responses = [s for s in rctx.state.steps if isinstance(s, ResponseStep)]
    assert len(responses) == 1
    assert rctx.state.steps[-1] is responses[0]
    assert responses[0].content == answer
    assert rctx.messages[-1].role == Role.assistant and rctx.messages[-1].content == answer


@pytest.mark.asyncio
async def test_plan_execute_synthesize(reasoning_context, scripted_model, reply) -> None:
    plan = _plan(
        {"id": "a", "description": "find facts", "dependsOn": []},
        {"id": "b", "description": "summarize facts", "dependsOn": ["a"]},
    )
    model = scripted_model(
        reply(f"```json\n{plan}\n```"),
        reply("fact one"),
        reply("<thinking>short</thinking>summary"),
        reply("final"),
    )
    rctx = reasoning_context(model, user_input="research topic")

    out = await PlannerEngine().execute(rctx)

    assert out == "final"
    _check_single_final_response(rctx, "final")
    plan_step = next(s for s in rctx.state.steps if isinstance(s, PlanStep))
    assert [t.id for t in plan_step.tasks] == ["a", "b"]
    assert all(t.status == TaskStatus.pending for t in plan_step.tasks)
    assert _executed(rctx) == ["a", "b"]

    # Planning and synthesis never advertise tools.
    assert model.requests[0].tools == [] and model.requests[-1].tools == []
    # The dependent task sees the result of its dependency.
    assert "[a]: fact one" in model.requests[2].messages[1].content
    synthesis = model.requests[-1].messages
    assert synthesis[0].content == SYNTHESIS_PROMPT
    assert "[a] find facts:\nfact one" in synthesis[1].content
    assert "[b] summarize facts:\nsummary" in synthesis[1].content


@pytest.mark.asyncio
async def test_unparseable_plan_falls_back_to_single_task(reasoning_context, scripted_model, reply) -> None:
    model = scripted_model(reply("Sure! First I will..."), reply("did it"), reply("answer"))
    rctx = reasoning_context(model, user_input="do the thing")

    out = await PlannerEngine().execute(rctx)

    assert out == "answer"
    plan_step = next(s for s in rctx.state.steps if isinstance(s, PlanStep))
    (task,) = plan_step.tasks
    assert task.id == "t1" and task.description == "do the thing"
    assert _task_of(model.requests[1]) == "do the thing"


@pytest.mark.parametrize(
    "content",
    [
        "[]",
        '{"id": "t1"}',
        '[{"id": "t1"}]',
        "[1, 2]",
        '[{"id": "t1", "description": "x", "dependsOn": 5}]',
        '[{"id": "t1", "description": "x", "dependsOn": "t0"}]',
        '[{"id": "t1", "description": "x", "depends_on": [{"id": "t0"}]}]',
        '[{"id": ["t1"], "description": "x"}]',
    ],
)
def test_parse_plan_rejects_unusable_output(content: str) -> None:
    assert PlannerEngine._parse_plan(content) is None


def test_parse_plan_accepts_snake_case_dependencies() -> None:
    tasks = PlannerEngine._parse_plan('[{"id": 1, "description": "x"}, {"id": 2, "description": "y", "depends_on": [1]}]')
    assert tasks is not None
    assert [(t.id, t.depends_on) for t in tasks] == [("1", []), ("2", ["1"])]


@pytest.mark.asyncio
async def test_dependencies_declared_out_of_order(reasoning_context, scripted_model, reply) -> None:
    plan = _plan(
        {"id": "second", "description": "use base", "dependsOn": ["first"]},
        {"id": "first", "description": "make base", "dependsOn": []},
    )

    def executor(request: ModelRequest):
        return reply(f"result of {_task_of(request)}")

    model = scripted_model(reply(plan), executor, executor, reply("ok"))
    rctx = reasoning_context(model)

    await PlannerEngine().execute(rctx)

    assert _executed(rctx) == ["first", "second"]
    assert "[first]: result of make base" in model.requests[2].messages[1].content


@pytest.mark.asyncio
async def test_unresolvable_tasks_are_marked_failed(reasoning_context, scripted_model, reply) -> None:
    plan = _plan(
        {"id": "ok", "description": "works", "dependsOn": []},
        {"id": "orphan", "description": "never runs", "dependsOn": ["missing"]},
        {"id": "loop1", "description": "cycle", "dependsOn": ["loop2"]},
        {"id": "loop2", "description": "cycle", "dependsOn": ["loop1"]},
    )
    model = scripted_model(reply(plan), reply("fine"), reply("partial answer"))
    rctx = reasoning_context(model)
    engine = PlannerEngine()

    out = await engine.execute(rctx)

    assert out == "partial answer"
    assert _executed(rctx) == ["ok"]
    synthesis = model.requests[-1].messages[1].content
    assert "[ok] works" in synthesis
    assert "orphan" not in synthesis and "loop1" not in synthesis


@pytest.mark.asyncio
async def test_task_failure_raises(reasoning_context, scripted_model, reply, tool_call) -> None:
    def explode() -> None:
        raise RuntimeError("disk full")

    plan = _plan({"id": "t1", "description": "write file", "dependsOn": []})
    model = scripted_model(reply(plan), reply("", [tool_call("write")]))
    rctx = reasoning_context(model, tools=[define_tool("write", "", explode)])

    with pytest.raises(TaskFailedError) as exc_info:
        await PlannerEngine().execute(rctx)

    assert exc_info.value.task_id == "t1"
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert not any(isinstance(s, ResponseStep) for s in rctx.state.steps)


@pytest.mark.asyncio
async def test_allow_replan_skips_failed_task_and_dependents(reasoning_context, scripted_model, reply, tool_call) -> None:
    def explode() -> None:
        raise RuntimeError("nope")

    plan = _plan(
        {"id": "bad", "description": "fails", "dependsOn": []},
        {"id": "child", "description": "needs bad", "dependsOn": ["bad"]},
        {"id": "good", "description": "independent", "dependsOn": []},
    )
    model = scripted_model(reply(plan), reply("", [tool_call("explode")]), reply("good result"), reply("answer"))
    rctx = reasoning_context(model, tools=[define_tool("explode", "", explode)])

    out = await PlannerEngine(allow_replan=True).execute(rctx)

    assert out == "answer"
    assert _executed(rctx) == ["bad", "good"]
    synthesis = model.requests[-1].messages[1].content
    assert "[good] independent:\ngood result" in synthesis
    assert "[bad]" not in synthesis and "[child]" not in synthesis
    _check_single_final_response(rctx, "answer")


@pytest.mark.asyncio
async def test_task_tool_calls_keep_transcript_well_formed(reasoning_context, scripted_model, reply, tool_call) -> None:
    plan = _plan({"id": "t1", "description": "add", "dependsOn": []})
    model = scripted_model(reply(plan), reply("", [tool_call("add", a=1, b=2)]), reply("3"), reply("It is 3."))
    rctx = reasoning_context(model, tools=[define_tool("add", "", lambda a, b: a + b)])

    await PlannerEngine().execute(rctx)

    assert [m.role for m in rctx.messages] == [Role.user, Role.assistant, Role.tool, Role.assistant]
    assert rctx.messages[2].content == "3"
    # The executor conversation sees the tool result of its own call.
    follow_up = model.requests[2].messages
    assert follow_up[-1].role == Role.tool and follow_up[-1].tool_call_id == "call_add"


@pytest.mark.asyncio
async def test_execution_limit(reasoning_context, scripted_model, reply) -> None:
    plan = _plan(*[{"id": f"t{i}", "description": f"step {i}", "dependsOn": []} for i in range(3)])
    model = scripted_model(reply(plan), reply("r0"), reply("r1"))
    rctx = reasoning_context(model)

    with pytest.raises(MaxStepsExceededError):
        await PlannerEngine(max_execution_steps=2).execute(rctx)


@pytest.mark.asyncio
async def test_malformed_dependencies_fall_back_to_single_task(reasoning_context, scripted_model, reply) -> None:
    plan = _plan({"id": "t1", "description": "first"}, {"id": "t2", "description": "second", "dependsOn": 5})
    model = scripted_model(reply(plan), reply("did it"), reply("answer"))
    rctx = reasoning_context(model, user_input="do the thing")

    out = await PlannerEngine().execute(rctx)

    assert out == "answer"
    plan_step = next(s for s in rctx.state.steps if isinstance(s, PlanStep))
    assert [(t.id, t.description) for t in plan_step.tasks] == [("t1", "do the thing")]
    assert _executed(rctx) == ["t1"]
    _check_single_final_response(rctx, "answer")
