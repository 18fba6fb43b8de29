"""Adapters from concrete model libraries to ``ModelProvider``."""

from .pydantic_ai import PydanticAIModelProvider

__all__ = ["PydanticAIModelProvider"]
