from __future__ import annotations

"""Convenience factories for wiring the agent core.

This module contains small helpers to build the default reasoning engine
registry and to create an ``AgentRuntime`` with the defaults taken from
``agentloop.core.config.settings``.

Deployments that need other engines build their own ``EngineRegistry`` and
pass it in; nothing here holds process-global state.
"""

from dataclasses import replace
from typing import Any, Dict, Optional

from agentloop.core.config import Settings, settings

from .policy.models import AgentPolicy
from .reasoning import (
    AutonomousEngine,
    ChainOfThoughtEngine,
    EngineRegistry,
    PlannerEngine,
    ReactEngine,
    ReflectEngine,
    StrategyName,
)
from .runtime.agent import AgentConfig, AgentRuntime


def build_default_engine_registry() -> EngineRegistry:
    """Build an ``EngineRegistry`` holding the five built-in strategies with default settings."""
    reg = EngineRegistry()
    reg.register(StrategyName.react, ReactEngine)
    reg.register(StrategyName.cot, ChainOfThoughtEngine)
    reg.register(StrategyName.planner, PlannerEngine)
    reg.register(StrategyName.reflect, ReflectEngine)
    reg.register(StrategyName.autonomous, AutonomousEngine)
    return reg


def default_policy(source: Settings = settings) -> AgentPolicy:
    """Build the ``AgentPolicy`` described by the ``AGENTLOOP_DEFAULT_*`` settings."""
    fields: Dict[str, Any] = {}
    if source.default_max_steps is not None:
        fields["max_steps"] = source.default_max_steps
    if source.default_token_budget is not None:
        fields["token_budget"] = source.default_token_budget
    if source.default_timeout is not None:
        fields["timeout"] = source.default_timeout
    return AgentPolicy(**fields)


def create_agent(
    config: Optional[AgentConfig] = None,
    *,
    engines: Optional[EngineRegistry] = None,
    source: Settings = settings,
) -> AgentRuntime:
    """
    Create an ``AgentRuntime``.

    Without ``config`` the agent uses the configured default strategy. Policy
    fields set explicitly on ``config.policy`` override the settings defaults.
    """
    if config is None:
        config = AgentConfig(reasoning=source.default_strategy)
    config = replace(config, policy=default_policy(source).merged(config.policy))
    return AgentRuntime(config, engines=engines if engines is not None else build_default_engine_registry())
