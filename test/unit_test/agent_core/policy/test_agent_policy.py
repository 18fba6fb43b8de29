from __future__ import annotations

import pytest

from agentloop.agent_core.errors import CostBudgetExceededError, TokenBudgetExceededError
from agentloop.agent_core.policy.global_policy import GlobalPolicy
from agentloop.agent_core.policy.models import AgentPolicy
from agentloop.agent_core.schemas.domain import TokenUsage
from agentloop.agent_core.tools.base import define_tool
from agentloop.agent_core.tools.registry import ToolRegistry


def test_merged_only_overrides_explicit_fields() -> None:
    base = AgentPolicy(max_steps=5, token_budget=1000)
    merged = base.merged(AgentPolicy(token_budget=50))
    assert merged.max_steps == 5
    assert merged.token_budget == 50
    assert base.token_budget == 1000


def test_policy_rejects_non_positive_limits() -> None:
    with pytest.raises(ValueError):
        AgentPolicy(max_steps=0)
    with pytest.raises(ValueError):
        AgentPolicy(timeout=0)


def test_allowed_schemas_filters_by_allow_list() -> None:
    reg = ToolRegistry()
    reg.register(define_tool("a", "", lambda: 1)).register(define_tool("b", "", lambda: 2))
    p = GlobalPolicy(AgentPolicy(allowed_tools=["b"]))
    assert [s.name for s in p.allowed_schemas(reg)] == ["b"]
    assert [s.name for s in GlobalPolicy().allowed_schemas(reg)] == ["a", "b"]


def test_max_steps_or_prefers_policy() -> None:
    assert GlobalPolicy(AgentPolicy(max_steps=3)).max_steps_or(10) == 3
    assert GlobalPolicy().max_steps_or(10) == 10


def test_check_usage_token_budget_is_inclusive() -> None:
    p = GlobalPolicy(AgentPolicy(token_budget=100))
    p.check_usage(TokenUsage(total_tokens=99), engine="react")
    with pytest.raises(TokenBudgetExceededError) as ei:
        p.check_usage(TokenUsage(total_tokens=100), engine="react")
    assert ei.value.used == 100
    assert "react" in str(ei.value)


def test_check_usage_cost_limit() -> None:
    p = GlobalPolicy(AgentPolicy(max_cost=0.5))
    p.check_usage(TokenUsage(cost_usd=0.49), engine="e")
    with pytest.raises(CostBudgetExceededError):
        p.check_usage(TokenUsage(cost_usd=0.5), engine="e")


def test_no_budget_never_raises() -> None:
    GlobalPolicy().check_usage(TokenUsage(total_tokens=10**9, cost_usd=10**6), engine="e")
