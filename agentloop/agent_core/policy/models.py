from __future__ import annotations

from typing import Optional

from pydantic import Field

from ..schemas.base import BaseSchema


class AgentPolicy(BaseSchema):
    """
    Resource and behavioral limits applied to a run.

    Every field is optional; ``None`` means "no limit". Budgets are checked
    after each model response, not preemptively.
    """

    max_steps: Optional[int] = Field(
        default=None,
        ge=1,
        description="Loop bound for the ReAct and Autonomous engines. Overrides the engine default when set.",
    )
    token_budget: Optional[int] = Field(
        default=None,
        ge=1,
        description="Abort the run once accumulated total tokens reach this value.",
    )
    allowed_tools: Optional[list[str]] = Field(
        default=None,
        description="If set, only these tool names may be advertised to the model or invoked.",
    )
    timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Wall-clock limit in seconds for the reasoning phase of a run.",
    )
    max_cost: Optional[float] = Field(
        default=None,
        gt=0,
        description="Abort the run once accumulated cost (USD, as reported by the model backend) reaches this value.",
    )

    def merged(self, other: "AgentPolicy") -> "AgentPolicy":
        """Return a copy with every field explicitly set on ``other`` taking precedence."""
        return self.model_copy(update=other.model_dump(exclude_unset=True))
