from __future__ import annotations

"""The surface reasoning engines program against.

``ReasoningContext`` bundles the execution context with the model provider,
tool registry, policy and middleware pipeline of the agent, and implements
the three operations every engine is built from:

- ``push_step``: record an observable transition,
- ``call_model``: one model round-trip with usage accounting and budgets,
- ``call_tool``: the tool invocation protocol with full bookkeeping on both
  the success and the failure path.
"""

from typing import Any, Dict, List, Optional

from pydantic_core import to_json

from agentloop.core.logging_config import get_logger

from ..errors import ToolNotAllowedError, UnknownToolError
from ..middleware.pipeline import MiddlewareContext, MiddlewarePipeline, ToolInvocationInfo
from ..model.base import ModelProvider
from ..policy.global_policy import GlobalPolicy
from ..schemas.domain import (
    CoreEvent,
    ExecutionState,
    Message,
    MiddlewareScope,
    ModelRequest,
    ModelResponse,
    ReasoningStep,
    Role,
    ToolCall,
    ToolCallRecord,
    ToolCallStep,
    ToolResultStep,
    ToolSchema,
)
from ..tools.registry import ToolRegistry
from .context import ExecutionContext

logger = get_logger(__name__)

TOOL_STEP_ENGINE = "runtime"


def _tool_content(payload: Any) -> str:
    return to_json(payload, fallback=str).decode()


class ReasoningContext:
    def __init__(
        self,
        ctx: ExecutionContext,
        *,
        model: ModelProvider,
        tools: ToolRegistry,
        policy: GlobalPolicy,
        pipeline: Optional[MiddlewarePipeline] = None,
        system_prompt: Optional[str] = None,
        engine_name: str = "runtime",
    ) -> None:
        self.ctx = ctx
        self.model = model
        self.tools = tools
        self.policy = policy
        self.pipeline = pipeline or MiddlewarePipeline()
        self.system_prompt = system_prompt
        self.engine_name = engine_name

    @property
    def state(self) -> ExecutionState:
        return self.ctx.state

    @property
    def messages(self) -> List[Message]:
        """The run's live transcript. Engines append to it in place."""
        return self.ctx.state.messages

    def push_step(self, step: ReasoningStep) -> None:
        self.ctx.state.steps.append(step)
        self.ctx.emit(CoreEvent.step_reasoning, step)

    async def call_model(
        self,
        messages: List[Message],
        *,
        tools: Optional[List[ToolSchema]] = None,
        no_tools: bool = False,
    ) -> ModelResponse:
        """
        Send ``messages`` to the model and account for the response usage.

        Args:
            messages: Transcript to send. Not modified.
            tools: Explicit tool schemas. Defaults to every registered tool the
                policy allows.
            no_tools: Send no tool schemas at all.

        Raises:
            TokenBudgetExceededError: Accumulated usage reached the token budget.
            CostBudgetExceededError: Accumulated cost reached the cost limit.
        """
        if no_tools:
            schemas: List[ToolSchema] = []
        elif tools is not None:
            schemas = tools
        else:
            schemas = self.policy.allowed_schemas(self.tools)

        request = ModelRequest(messages=list(messages), tools=schemas)
        await self.pipeline.run(MiddlewareContext(scope=MiddlewareScope.step_before, ctx=self.ctx))
        self.ctx.emit(CoreEvent.model_request, request)

        response = await self.model.complete(request)

        self.ctx.emit(CoreEvent.model_response, response)
        if response.usage is not None:
            self.ctx.state.usage.add(response.usage)
            self.policy.check_usage(self.ctx.state.usage, engine=self.engine_name)
        await self.pipeline.run(MiddlewareContext(scope=MiddlewareScope.step_after, ctx=self.ctx))
        return response

    async def call_tool(self, name: str, args: Dict[str, Any], call_id: str) -> Any:
        """
        Invoke a registered tool and record the outcome.

        Exactly one tool message, one ``tool_result`` step and one call record
        are appended whether the tool succeeds or raises. A tool error is
        re-raised unchanged once that bookkeeping is done.

        Raises:
            UnknownToolError: No tool is registered under ``name``.
            ToolNotAllowedError: The policy allow-list excludes ``name``.
        """
        tool = self.tools.get(name)
        if tool is None:
            raise UnknownToolError(name)
        if not self.policy.is_tool_allowed(name):
            raise ToolNotAllowedError(name)

        self.push_step(ToolCallStep(tool_name=name, args=dict(args), call_id=call_id, engine=TOOL_STEP_ENGINE))
        info = ToolInvocationInfo(name=name, args=dict(args))
        self.ctx.emit(CoreEvent.tool_before, {"tool": name, "args": args})
        await self.pipeline.run(MiddlewareContext(scope=MiddlewareScope.tool_before, ctx=self.ctx, tool=info))

        call = ToolCall(id=call_id, name=name, arguments=dict(args))
        try:
            result = await tool.execute(args, self.ctx)
        except Exception as exc:
            error = str(exc) or type(exc).__name__
            logger.warning(f"tool '{name}' ({call_id}) failed: {error}")
            self._record(call, result=None, error=error, content=_tool_content({"error": error}))
            info.error = error
            self.ctx.emit(CoreEvent.tool_after, {"tool": name, "error": error})
            await self.pipeline.run(MiddlewareContext(scope=MiddlewareScope.tool_after, ctx=self.ctx, tool=info))
            raise

        self._record(call, result=result, error=None, content=_tool_content(result))
        info.result = result
        self.ctx.emit(CoreEvent.tool_after, {"tool": name, "result": result})
        await self.pipeline.run(MiddlewareContext(scope=MiddlewareScope.tool_after, ctx=self.ctx, tool=info))
        return result

    def _record(self, call: ToolCall, *, result: Any, error: Optional[str], content: str) -> None:
        state = self.ctx.state
        self.push_step(
            ToolResultStep(tool_name=call.name, call_id=call.id, result=result, error=error, engine=TOOL_STEP_ENGINE)
        )
        state.tool_calls.append(ToolCallRecord(call=call, result=result))
        state.messages.append(Message(role=Role.tool, content=content, tool_call_id=call.id))
