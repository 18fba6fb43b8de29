from __future__ import annotations

"""Runtime policy decisions for a run.

``GlobalPolicy`` is the authority the reasoning context and engines consult
for:

- the tool allow-list (schemas advertised to the model, calls permitted),
- the effective loop bound,
- token and cost budget enforcement after every model response.
"""

from typing import List

from ..errors import CostBudgetExceededError, TokenBudgetExceededError
from ..schemas.domain import TokenUsage, ToolSchema
from ..tools.registry import ToolRegistry
from .models import AgentPolicy


class GlobalPolicy:
    """Aggregate policy decisions for a single run.

    ``GlobalPolicy`` is configured by ``AgentPolicy`` and provides helper
    methods used by the reasoning context and engines.
    """

    def __init__(self, config: AgentPolicy | None = None) -> None:
        self._cfg = config or AgentPolicy()

    @property
    def config(self) -> AgentPolicy:
        """Return the underlying configuration object."""
        return self._cfg

    def is_tool_allowed(self, name: str) -> bool:
        return ToolRegistry.is_allowed(name, self._cfg.allowed_tools)

    def allowed_schemas(self, registry: ToolRegistry) -> List[ToolSchema]:
        """Return the schemas of registered tools that pass the allow-list."""
        return [s for s in registry.get_schemas() if self.is_tool_allowed(s.name)]

    def max_steps_or(self, default: int) -> int:
        """Return the policy loop bound, falling back to an engine default."""
        return self._cfg.max_steps if self._cfg.max_steps is not None else default

    def check_usage(self, usage: TokenUsage, *, engine: str) -> None:
        """
        Enforce the token and cost budgets.

        Args:
            usage: The run's accumulated usage.
            engine: Name used in the error message.

        Raises:
            TokenBudgetExceededError: ``total_tokens`` reached ``token_budget``.
            CostBudgetExceededError: ``cost_usd`` reached ``max_cost``.
        """
        budget = self._cfg.token_budget
        if budget is not None and usage.total_tokens >= budget:
            raise TokenBudgetExceededError(engine, usage.total_tokens, budget)
        limit = self._cfg.max_cost
        if limit is not None and usage.cost_usd >= limit:
            raise CostBudgetExceededError(engine, usage.cost_usd, limit)
