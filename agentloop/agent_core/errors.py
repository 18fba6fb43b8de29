"""Error types for the agent core.

Defines the exception hierarchy raised by the runtime, the reasoning engines
and the tool invocation protocol:

- configuration problems detected at run start,
- hard resource limits (steps, tokens, cost, wall-clock),
- tool policy violations raised synchronously by the invocation protocol,
- planner task failures.

Errors raised by a tool body are *not* wrapped: the invocation protocol
records them and re-raises the original exception.
"""

from __future__ import annotations


class AgentCoreError(Exception):
    """Base error for all agent core exceptions."""


class ConfigurationError(AgentCoreError):
    """Raised when an agent is wired incorrectly."""


class MissingModelProviderError(ConfigurationError):
    """Raised when a run starts without a model provider."""

    def __init__(self, agent_name: str) -> None:
        super().__init__(f"Agent '{agent_name}' has no model provider configured")


class UnknownStrategyError(ConfigurationError):
    """Raised when a reasoning strategy name is not present in the engine registry."""

    def __init__(self, strategy: str) -> None:
        self.strategy = strategy
        super().__init__(f"Reasoning strategy '{strategy}' is not registered")


class BudgetExceededError(AgentCoreError):
    """Base error for hard resource limits. Always fatal for the run."""


class MaxStepsExceededError(BudgetExceededError):
    def __init__(self, engine: str, max_steps: int, detail: str = "") -> None:
        self.engine = engine
        self.max_steps = max_steps
        message = f"[{engine}] Max steps ({max_steps}) reached"
        super().__init__(f"{message}: {detail}" if detail else message)


class TokenBudgetExceededError(BudgetExceededError):
    def __init__(self, engine: str, used: int, budget: int) -> None:
        self.used = used
        self.budget = budget
        super().__init__(f"[{engine}] Token budget exceeded: {used} >= {budget}")


class CostBudgetExceededError(BudgetExceededError):
    def __init__(self, engine: str, spent: float, limit: float) -> None:
        self.spent = spent
        self.limit = limit
        super().__init__(f"[{engine}] Cost budget exceeded: ${spent:.4f} >= ${limit:.4f}")


class RunTimeoutError(BudgetExceededError):
    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Run exceeded timeout of {timeout}s")


class ToolPolicyError(AgentCoreError):
    """Base error for tool lookups rejected by the invocation protocol."""


class UnknownToolError(ToolPolicyError):
    def __init__(self, name: str) -> None:
        self.tool_name = name
        super().__init__(f"Unknown tool: '{name}'")


class ToolNotAllowedError(ToolPolicyError):
    def __init__(self, name: str) -> None:
        self.tool_name = name
        super().__init__(f"Tool not allowed by policy: '{name}'")


class TaskFailedError(AgentCoreError):
    """Raised by the planner when a plan task fails and replanning is disabled."""

    def __init__(self, task_id: str, reason: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task '{task_id}' failed: {reason}")
