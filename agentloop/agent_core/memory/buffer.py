"""Message-count bounded in-process memory."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4

from agentloop.core.logging_config import get_logger

from ..schemas.domain import (
    MemoryEntry,
    MemoryMetadata,
    MemoryReadOptions,
    MemoryWriteOptions,
    Message,
    Role,
)
from .base import MemoryProvider, session_of, tags_match
from .tokens import estimate_messages_tokens, trim_to_token_budget

logger = get_logger(__name__)


class BufferMemory(MemoryProvider):
    """
    Keep the most recent ``max_messages`` non-system messages per session.

    Eviction is FIFO by message, not by turn, so a tool exchange can be cut in
    half at the boundary. ``max_tokens`` adds a secondary trim applied on read.
    Pass ``default_store`` to share one backing dict between instances.
    """

    type = "buffer"

    def __init__(
        self,
        *,
        max_messages: int = 20,
        max_tokens: Optional[int] = None,
        default_store: Optional[Dict[str, MemoryEntry]] = None,
    ) -> None:
        if max_messages < 1:
            raise ValueError("max_messages must be >= 1")
        self.max_messages = max_messages
        self.max_tokens = max_tokens
        self._store: Dict[str, MemoryEntry] = default_store if default_store is not None else {}

    @property
    def session_count(self) -> int:
        return len(self._store)

    async def read(self, options: Optional[MemoryReadOptions] = None) -> List[Message]:
        session_id = session_of(options)
        entry = self._store.get(session_id)
        if entry is None:
            return []
        if options is not None and not tags_match(entry.metadata.tags, options.tags):
            return []

        entry.metadata.accessed_at = datetime.now(timezone.utc)
        messages = list(entry.messages)
        if self.max_tokens is not None:
            messages = trim_to_token_budget(messages, self.max_tokens)
        if options is not None and options.limit is not None:
            messages = messages[-options.limit :] if options.limit else []
        return messages

    async def write(self, messages: List[Message], options: Optional[MemoryWriteOptions] = None) -> None:
        session_id = session_of(options)
        kept = [m for m in messages if m.role != Role.system][-self.max_messages :]

        previous = self._store.get(session_id)
        metadata = MemoryMetadata(
            created_at=previous.metadata.created_at if previous else datetime.now(timezone.utc),
            accessed_at=datetime.now(timezone.utc),
            agent_name=options.agent_name if options else None,
            tags=options.tags if options else None,
            token_count=estimate_messages_tokens(kept),
        )
        self._store[session_id] = MemoryEntry(
            id=previous.id if previous else str(uuid4()),
            session_id=session_id,
            messages=kept,
            metadata=metadata,
        )
        logger.debug("buffer memory stored %d message(s) for session %s", len(kept), session_id)

    async def clear(self, session_id: Optional[str] = None) -> None:
        if session_id is None:
            self._store.clear()
        else:
            self._store.pop(session_id, None)

    async def entries(self, session_id: Optional[str] = None) -> List[MemoryEntry]:
        if session_id is not None:
            entry = self._store.get(session_id)
            return [entry] if entry else []
        return list(self._store.values())
