"""Run orchestration: execution context, reasoning context, agent runtime."""

from .agent import AgentConfig, AgentRuntime, RunOptions, RunResult
from .context import ExecutionContext, create_context
from .reasoning_context import ReasoningContext

__all__ = [
    "AgentConfig",
    "AgentRuntime",
    "ExecutionContext",
    "ReasoningContext",
    "RunOptions",
    "RunResult",
    "create_context",
]
