from __future__ import annotations

"""Vendor-neutral model backend contract.

Engines and memory strategies only ever see :class:`ModelProvider`; wire
formats belong to adapters under ``agentloop.agent_core.model.adapters``.
"""

from typing import AsyncIterator, Protocol, runtime_checkable

from ..schemas.domain import ModelRequest, ModelResponse, ModelResponseChunk


@runtime_checkable
class ModelProvider(Protocol):
    name: str

    async def complete(self, request: ModelRequest) -> ModelResponse: ...


@runtime_checkable
class StreamingModelProvider(ModelProvider, Protocol):
    def stream(self, request: ModelRequest) -> AsyncIterator[ModelResponseChunk]: ...
