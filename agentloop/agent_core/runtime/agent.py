from __future__ import annotations

"""Agent runtime: the composition root of a run.

``AgentRuntime.run`` drives one run through a fixed lifecycle:

1. emit ``run:start`` and run ``run:before`` middleware,
2. resolve the model provider and the reasoning engine,
3. seed the transcript (system prompt, user input) and prepend the
   session history read from memory (``memory:read``),
4. execute the engine, under ``policy.timeout`` when set,
5. write the transcript back to memory (``memory:write``),
6. stamp ``finished_at``, run ``run:after`` middleware, emit ``run:end``.

Any failure emits ``error`` and is re-raised unchanged. Nothing is retried.

Lifecycle events (``run:*``, ``memory:*``, ``error``) are awaited. Step,
model and tool events are fire-and-forget and are drained once the engine
returns, so every one of them is delivered before ``memory:write``.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from agentloop.core.logging_config import get_logger

from ..errors import MissingModelProviderError, RunTimeoutError
from ..events import EventBus, EventHandler
from ..memory.base import MemoryProvider
from ..middleware.pipeline import Middleware, MiddlewareContext, MiddlewarePipeline
from ..model.base import ModelProvider
from ..policy.global_policy import GlobalPolicy
from ..policy.models import AgentPolicy
from ..reasoning.base import ReasoningEngine, StrategyName
from ..reasoning.registry import EngineRegistry
from ..schemas.domain import (
    CoreEvent,
    ExecutionState,
    MemoryReadOptions,
    MemoryWriteOptions,
    Message,
    MiddlewareScope,
    Role,
)
from ..tools.base import Tool
from ..tools.registry import ToolRegistry
from .context import ExecutionContext, create_context
from .reasoning_context import ReasoningContext

logger = get_logger(__name__)

Reasoning = Union[ReasoningEngine, StrategyName, str]


@dataclass
class AgentConfig:
    """
    Static description of an agent.

    Attributes:
        name: Used in logs, errors and memory metadata.
        model: The model provider. Required before ``run``.
        tools: Tools registered at construction.
        memory: Optional memory provider for session history.
        reasoning: An engine instance or a strategy name resolved through the
            runtime's ``EngineRegistry`` for every run.
        middleware: Middleware registered at construction, in order.
        policy: Resource and tool limits.
        system_prompt: Seeded as the first message of every run.
        data: Default per-run data, overlaid by ``RunOptions.data``.
    """

    name: str = "agent"
    model: Optional[ModelProvider] = None
    tools: List[Tool] = field(default_factory=list)
    memory: Optional[MemoryProvider] = None
    reasoning: Reasoning = StrategyName.react
    middleware: List[Middleware] = field(default_factory=list)
    policy: AgentPolicy = field(default_factory=AgentPolicy)
    system_prompt: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RunOptions:
    input: str
    data: Optional[Dict[str, Any]] = None
    session_id: Optional[str] = None
    signal: Optional[asyncio.Event] = None


@dataclass
class RunResult:
    output: str
    state: ExecutionState
    session_id: str


class AgentRuntime:
    """
    Run an agent configuration against a model provider.

    Builder methods mutate the runtime and return it, so configuration can be
    chained::

        agent = AgentRuntime(AgentConfig(name="helper"), engines=engines)
        agent.provider(model).tool(search).policy(AgentPolicy(max_steps=5))
        result = await agent.run("What changed in the last release?")
    """

    def __init__(self, config: Optional[AgentConfig] = None, *, engines: EngineRegistry) -> None:
        self.config = config or AgentConfig()
        self.engines = engines
        self.bus = EventBus()
        self.tools = ToolRegistry()
        self.pipeline = MiddlewarePipeline()

        self._model = self.config.model
        self._memory = self.config.memory
        self._policy = self.config.policy
        self._reasoning: Reasoning = self.config.reasoning
        self._store: Dict[str, Any] = {}

        for t in self.config.tools:
            self.tools.register(t)
        for m in self.config.middleware:
            self.pipeline.use(m)

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def current_policy(self) -> AgentPolicy:
        return self._policy

    @property
    def current_memory(self) -> Optional[MemoryProvider]:
        return self._memory

    def provider(self, model: ModelProvider) -> "AgentRuntime":
        self._model = model
        return self

    def tool(self, definition: Tool) -> "AgentRuntime":
        self.tools.register(definition)
        return self

    def use(self, middleware: Middleware) -> "AgentRuntime":
        self.pipeline.use(middleware)
        return self

    def memory(self, provider: Optional[MemoryProvider]) -> "AgentRuntime":
        self._memory = provider
        return self

    def policy(self, policy: Union[AgentPolicy, Dict[str, Any]]) -> "AgentRuntime":
        """Merge ``policy`` into the current one; explicitly set fields win."""
        update = policy if isinstance(policy, AgentPolicy) else AgentPolicy(**policy)
        self._policy = self._policy.merged(update)
        return self

    def reasoning(self, reasoning: Reasoning) -> "AgentRuntime":
        self._reasoning = reasoning
        return self

    def on(self, event: Union[CoreEvent, str], handler: EventHandler) -> "AgentRuntime":
        self.bus.on(event, handler)
        return self

    def set(self, key: str, value: Any) -> "AgentRuntime":
        self._store[key] = value
        return self

    def get(self, key: str, default: Any = None) -> Any:
        return self._store.get(key, default)

    def resolve_engine(self) -> ReasoningEngine:
        if isinstance(self._reasoning, (str, Enum)):
            return self.engines.create(self._reasoning)
        return self._reasoning

    async def run(self, options: Union[str, RunOptions]) -> RunResult:
        opts = RunOptions(input=options) if isinstance(options, str) else options
        ctx = create_context(
            opts.input,
            bus=self.bus,
            session_id=opts.session_id,
            data={**self.config.data, **(opts.data or {})},
            memory=self._memory,
            signal=opts.signal,
        )
        logger.info(f"agent '{self.name}' run started (session={ctx.session_id})")
        await self.bus.emit(CoreEvent.run_start, {"input": opts.input, "session_id": ctx.session_id})

        try:
            await self.pipeline.run(MiddlewareContext(scope=MiddlewareScope.run_before, ctx=ctx))
            output = await self._execute(ctx)
            ctx.state.finished_at = datetime.now(timezone.utc)
            await self.pipeline.run(MiddlewareContext(scope=MiddlewareScope.run_after, ctx=ctx))
            await self.bus.emit(CoreEvent.run_end, {"output": output, "state": ctx.state})
        except Exception as exc:
            logger.error(f"agent '{self.name}' run failed (session={ctx.session_id}): {exc}")
            await self.bus.drain()
            await self.bus.emit(CoreEvent.error, exc)
            raise
        else:
            usage = ctx.state.usage
            logger.info(
                f"agent '{self.name}' run finished (session={ctx.session_id}, "
                f"steps={len(ctx.state.steps)}, tokens={usage.total_tokens})"
            )
            return RunResult(output=output, state=ctx.state, session_id=ctx.session_id)
        finally:
            ctx.close()
            await self.bus.drain()

    async def _execute(self, ctx: ExecutionContext) -> str:
        if self._model is None:
            raise MissingModelProviderError(self.name)
        engine = self.resolve_engine()

        seed: List[Message] = []
        if self.config.system_prompt:
            seed.append(Message(role=Role.system, content=self.config.system_prompt))
        seed.append(Message(role=Role.user, content=ctx.input))

        history: List[Message] = []
        if ctx.memory is not None:
            await self.bus.emit(CoreEvent.memory_read, {"session_id": ctx.session_id})
            history = await ctx.memory.read(MemoryReadOptions(session_id=ctx.session_id))
            logger.debug(f"loaded {len(history)} history message(s) for session {ctx.session_id}")
        ctx.state.messages = [*history, *seed]

        rctx = ReasoningContext(
            ctx,
            model=self._model,
            tools=self.tools,
            policy=GlobalPolicy(self._policy),
            pipeline=self.pipeline,
            system_prompt=self.config.system_prompt,
            engine_name=engine.name,
        )
        output = await self._run_engine(engine, rctx)
        await self.bus.drain()

        if ctx.memory is not None:
            await self.bus.emit(CoreEvent.memory_write, {"session_id": ctx.session_id})
            await ctx.memory.write(
                ctx.state.messages,
                MemoryWriteOptions(session_id=ctx.session_id, agent_name=self.name),
            )
        return output

    async def _run_engine(self, engine: ReasoningEngine, rctx: ReasoningContext) -> str:
        timeout = self._policy.timeout
        if timeout is None:
            return await engine.execute(rctx)
        try:
            return await asyncio.wait_for(engine.execute(rctx), timeout)
        except asyncio.TimeoutError as exc:
            raise RunTimeoutError(timeout) from exc
