"""Chain several memory providers behind one."""

from __future__ import annotations

import asyncio
from typing import List, Literal, Optional, Sequence, Set

from ..errors import ConfigurationError
from ..schemas.domain import MemoryEntry, MemoryReadOptions, MemoryWriteOptions, Message
from .base import MemoryProvider

ReadStrategy = Literal["first-hit", "merge"]

FINGERPRINT_CHARS = 100


def _fingerprint(message: Message) -> str:
    return f"{message.role.value}:{message.content[:FINGERPRINT_CHARS]}"


class CompositeMemory(MemoryProvider):
    """
    Writes fan out to every provider concurrently.

    Reads follow ``read_strategy``: ``first-hit`` returns the first non-empty
    result in provider order, ``merge`` concatenates all results and drops
    messages whose ``role:content[:100]`` fingerprint was already seen.
    """

    type = "composite"

    def __init__(self, providers: Sequence[MemoryProvider], *, read_strategy: ReadStrategy = "first-hit") -> None:
        if not providers:
            raise ConfigurationError("CompositeMemory requires at least one provider")
        if read_strategy not in ("first-hit", "merge"):
            raise ConfigurationError(f"unknown read strategy: {read_strategy!r}")
        self.providers: List[MemoryProvider] = list(providers)
        self.read_strategy: ReadStrategy = read_strategy

    async def read(self, options: Optional[MemoryReadOptions] = None) -> List[Message]:
        if self.read_strategy == "first-hit":
            for provider in self.providers:
                messages = await provider.read(options)
                if messages:
                    return messages
            return []

        results = await asyncio.gather(*(p.read(options) for p in self.providers))
        seen: Set[str] = set()
        merged: List[Message] = []
        for messages in results:
            for msg in messages:
                key = _fingerprint(msg)
                if key not in seen:
                    seen.add(key)
                    merged.append(msg)
        return merged

    async def write(self, messages: List[Message], options: Optional[MemoryWriteOptions] = None) -> None:
        await asyncio.gather(*(p.write(messages, options) for p in self.providers))

    async def clear(self, session_id: Optional[str] = None) -> None:
        await asyncio.gather(*(p.clear(session_id) for p in self.providers))

    async def entries(self, session_id: Optional[str] = None) -> List[MemoryEntry]:
        results = await asyncio.gather(*(p.entries(session_id) for p in self.providers))
        return [entry for entries in results for entry in entries]
