"""Agent core.

Building blocks of an agent run:

- ``schemas``: messages, steps, usage and memory records,
- ``tools``: tool protocol, callable-backed definitions and the registry,
- ``policy``: resource and allow-list limits,
- ``events`` and ``middleware``: observation and interception of a run,
- ``memory``: history strategies per session,
- ``model``: the vendor-neutral model contract and its adapters,
- ``reasoning``: the control-flow engines,
- ``runtime``: execution context, reasoning context and the agent runtime.
"""

from .errors import (
    AgentCoreError,
    BudgetExceededError,
    ConfigurationError,
    CostBudgetExceededError,
    MaxStepsExceededError,
    MissingModelProviderError,
    RunTimeoutError,
    TaskFailedError,
    TokenBudgetExceededError,
    ToolNotAllowedError,
    ToolPolicyError,
    UnknownStrategyError,
    UnknownToolError,
)
from .events import EventBus
from .factory import build_default_engine_registry, create_agent
from .memory import BufferMemory, CompositeMemory, MemoryProvider, SlidingWindowMemory, SummarizingMemory
from .middleware import FunctionMiddleware, LoggingMiddleware, Middleware, MiddlewareContext, MiddlewarePipeline
from .model import ModelProvider
from .policy import AgentPolicy, GlobalPolicy
from .reasoning import (
    AutonomousEngine,
    ChainOfThoughtEngine,
    EngineRegistry,
    PlannerEngine,
    ReactEngine,
    ReasoningEngine,
    ReflectEngine,
    StrategyName,
)
from .runtime import AgentConfig, AgentRuntime, ExecutionContext, ReasoningContext, RunOptions, RunResult
from .tools import Tool, ToolDefinition, ToolRegistry, define_tool, tool

__all__ = [
    "AgentConfig",
    "AgentCoreError",
    "AgentPolicy",
    "AgentRuntime",
    "AutonomousEngine",
    "BudgetExceededError",
    "BufferMemory",
    "ChainOfThoughtEngine",
    "CompositeMemory",
    "ConfigurationError",
    "CostBudgetExceededError",
    "EngineRegistry",
    "EventBus",
    "ExecutionContext",
    "FunctionMiddleware",
    "GlobalPolicy",
    "LoggingMiddleware",
    "MaxStepsExceededError",
    "MemoryProvider",
    "Middleware",
    "MiddlewareContext",
    "MiddlewarePipeline",
    "MissingModelProviderError",
    "ModelProvider",
    "PlannerEngine",
    "ReactEngine",
    "ReasoningContext",
    "ReasoningEngine",
    "ReflectEngine",
    "RunOptions",
    "RunResult",
    "RunTimeoutError",
    "SlidingWindowMemory",
    "StrategyName",
    "SummarizingMemory",
    "TaskFailedError",
    "TokenBudgetExceededError",
    "Tool",
    "ToolDefinition",
    "ToolNotAllowedError",
    "ToolPolicyError",
    "ToolRegistry",
    "UnknownStrategyError",
    "UnknownToolError",
    "build_default_engine_registry",
    "create_agent",
    "define_tool",
    "tool",
]
