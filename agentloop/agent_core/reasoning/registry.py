from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, List, Union

from ..errors import UnknownStrategyError
from .base import ReasoningEngine

EngineFactory = Callable[[], ReasoningEngine]
"""
EngineFactory:
    A zero-argument callable returning a fresh ``ReasoningEngine``. A new
    engine is created for every run resolved by name.
"""


def _key(name: Union[str, Enum]) -> str:
    return str(name.value) if isinstance(name, Enum) else str(name)


class EngineRegistry:
    """
    Registry of reasoning engine factories keyed by strategy name.

    Each agent runtime receives its registry explicitly, so two runtimes in
    one process can resolve the same name to different engines.
    """

    def __init__(self) -> None:
        self._factories: Dict[str, EngineFactory] = {}

    def register(self, name: Union[str, Enum], factory: EngineFactory) -> "EngineRegistry":
        """
        Register (or replace) the factory for a strategy name.

        Args:
            name: Strategy identifier, e.g. ``"react"``.
            factory: Callable producing a new engine.
        """
        self._factories[_key(name)] = factory
        return self

    def get(self, name: Union[str, Enum]) -> EngineFactory:
        """
        Retrieve the factory for a strategy name.

        Raises:
            UnknownStrategyError: If nothing is registered under ``name``.
        """
        try:
            return self._factories[_key(name)]
        except KeyError as e:
            raise UnknownStrategyError(_key(name)) from e

    def has(self, name: Union[str, Enum]) -> bool:
        return _key(name) in self._factories

    def create(self, name: Union[str, Enum]) -> ReasoningEngine:
        return self.get(name)()

    def names(self) -> List[str]:
        return list(self._factories)
