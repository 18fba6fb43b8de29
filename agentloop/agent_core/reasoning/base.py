from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..runtime.reasoning_context import ReasoningContext


class StrategyName(str, Enum):
    react = "react"
    cot = "cot"
    planner = "planner"
    reflect = "reflect"
    autonomous = "autonomous"


class ReasoningEngine(ABC):
    """
    A control-flow strategy driving one run.

    ``execute`` consumes the reasoning context, pushes a step for every
    observable transition (ending with exactly one ``response`` step) and
    returns the final answer text. Limits are reported by raising, never by
    returning a partial answer.
    """

    name: str = "custom"

    @abstractmethod
    async def execute(self, rctx: "ReasoningContext") -> str: ...
