"""Policy subsystem for tool access and resource budgets.

Components
----------

- ``AgentPolicy``: declarative limits (loop bound, token budget, tool
  allow-list, timeout, cost ceiling).
- ``GlobalPolicy``: runtime helper that applies an ``AgentPolicy``.
"""

from .global_policy import GlobalPolicy
from .models import AgentPolicy

__all__ = [
    "AgentPolicy",
    "GlobalPolicy",
]
