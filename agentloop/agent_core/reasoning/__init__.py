"""Reasoning engines: the control-flow strategies of a run."""

from .autonomous import AutonomousEngine
from .base import ReasoningEngine, StrategyName
from .cot import ChainOfThoughtEngine
from .planner import PlannerEngine
from .react import ReactEngine
from .reflect import Critique, ReflectEngine
from .registry import EngineFactory, EngineRegistry
from .utils import execute_tool_calls, extract_text, parse_json

__all__ = [
    "AutonomousEngine",
    "ChainOfThoughtEngine",
    "Critique",
    "EngineFactory",
    "EngineRegistry",
    "PlannerEngine",
    "ReactEngine",
    "ReasoningEngine",
    "ReflectEngine",
    "StrategyName",
    "execute_tool_calls",
    "extract_text",
    "parse_json",
]
