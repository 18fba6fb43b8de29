from __future__ import annotations

"""Turn-aware, token-bounded in-process memory.

History is kept as a list of conversation turns. A turn ends at an assistant
message that carries no pending tool calls; whatever trails after the last
such message is flushed as its own (incomplete) turn. Eviction and read-time
trimming both operate on whole turns, so a tool exchange is never split.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence
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
from .tokens import estimate_messages_tokens

logger = get_logger(__name__)


@dataclass
class ConversationTurn:
    messages: List[Message] = field(default_factory=list)

    @property
    def tokens(self) -> int:
        return estimate_messages_tokens(self.messages)


@dataclass(frozen=True)
class WindowStats:
    turns: int
    estimated_tokens: int


def group_into_turns(messages: Sequence[Message]) -> List[ConversationTurn]:
    turns: List[ConversationTurn] = []
    current: List[Message] = []
    for msg in messages:
        current.append(msg)
        if msg.role == Role.assistant and not msg.tool_calls:
            turns.append(ConversationTurn(current))
            current = []
    if current:
        turns.append(ConversationTurn(current))
    return turns


def _overlap(stored: Sequence[Message], incoming: Sequence[Message]) -> int:
    """
    Length of the longest suffix of ``stored`` that is a prefix of ``incoming``.

    Messages are matched by identity: ``read`` hands out the stored instances,
    so an equal but newly created message is always new.
    """
    for size in range(min(len(stored), len(incoming)), 0, -1):
        if all(a is b for a, b in zip(stored[-size:], incoming[:size])):
            return size
    return 0


class SlidingWindowMemory(MemoryProvider):
    """Keep at most ``max_turns`` turns and serve at most ``max_tokens`` of them."""

    type = "sliding-window"

    def __init__(self, *, max_tokens: int = 4000, max_turns: int = 50) -> None:
        if max_turns < 1:
            raise ValueError("max_turns must be >= 1")
        self.max_tokens = max_tokens
        self.max_turns = max_turns
        self._sessions: Dict[str, List[ConversationTurn]] = {}
        self._meta: Dict[str, MemoryEntry] = {}

    async def read(self, options: Optional[MemoryReadOptions] = None) -> List[Message]:
        session_id = session_of(options)
        turns = self._sessions.get(session_id)
        if not turns:
            return []
        entry = self._meta[session_id]
        if options is not None and not tags_match(entry.metadata.tags, options.tags):
            return []
        entry.metadata.accessed_at = datetime.now(timezone.utc)

        limit = options.limit if options is not None else None
        window: List[ConversationTurn] = []
        tokens = 0
        count = 0
        # Newest first; stop at the first turn that would overflow either bound.
        for turn in reversed(turns):
            if tokens + turn.tokens > self.max_tokens:
                break
            if limit is not None and count + len(turn.messages) > limit:
                break
            window.append(turn)
            tokens += turn.tokens
            count += len(turn.messages)

        window.reverse()
        return [m for turn in window for m in turn.messages]

    async def write(self, messages: List[Message], options: Optional[MemoryWriteOptions] = None) -> None:
        """
        Append the new turns of a run to the session.

        The runtime hands back the history it read followed by the run's own
        messages. The stored instances at the head of ``messages`` that
        continue the stored tail are not appended again. A turn that merely
        equals an earlier one is a new turn.
        """
        session_id = session_of(options)
        existing = self._sessions.get(session_id, [])
        stored = [m for turn in existing for m in turn.messages]

        incoming = [m for m in messages if m.role != Role.system]
        fresh = incoming[_overlap(stored, incoming) :]

        merged = [*existing, *group_into_turns(fresh)][-self.max_turns :]
        self._sessions[session_id] = merged

        flat = [m for turn in merged for m in turn.messages]
        previous = self._meta.get(session_id)
        self._meta[session_id] = MemoryEntry(
            id=previous.id if previous else str(uuid4()),
            session_id=session_id,
            messages=flat,
            metadata=MemoryMetadata(
                created_at=previous.metadata.created_at if previous else datetime.now(timezone.utc),
                accessed_at=datetime.now(timezone.utc),
                agent_name=options.agent_name if options else None,
                tags=options.tags if options else None,
                token_count=estimate_messages_tokens(flat),
            ),
        )
        logger.debug(
            "sliding window for session %s: %d turn(s), %d new message(s)", session_id, len(merged), len(fresh)
        )

    async def clear(self, session_id: Optional[str] = None) -> None:
        if session_id is None:
            self._sessions.clear()
            self._meta.clear()
        else:
            self._sessions.pop(session_id, None)
            self._meta.pop(session_id, None)

    async def entries(self, session_id: Optional[str] = None) -> List[MemoryEntry]:
        if session_id is not None:
            entry = self._meta.get(session_id)
            return [entry] if entry else []
        return list(self._meta.values())

    def stats(self, session_id: str) -> Optional[WindowStats]:
        turns = self._sessions.get(session_id)
        if turns is None:
            return None
        return WindowStats(turns=len(turns), estimated_tokens=sum(t.tokens for t in turns))
