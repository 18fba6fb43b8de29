"""Model backend contract and adapters."""

from .base import ModelProvider, StreamingModelProvider

__all__ = ["ModelProvider", "StreamingModelProvider"]
