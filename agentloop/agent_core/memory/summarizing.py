"""Memory that folds old history into a rolling model-written summary."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4

from agentloop.core.logging_config import get_logger

from ..model.base import ModelProvider
from ..schemas.domain import (
    MemoryEntry,
    MemoryMetadata,
    MemoryReadOptions,
    MemoryWriteOptions,
    Message,
    ModelRequest,
    Role,
)
from .base import MemoryProvider, session_of
from .tokens import CHARS_PER_TOKEN, estimate_messages_tokens

logger = get_logger(__name__)

DEFAULT_SUMMARY_PROMPT = (
    "You are a memory compression assistant.\n"
    "Summarize the following conversation concisely, preserving key facts, decisions, and context.\n"
    "Output only the summary with no preamble or commentary."
)

SUMMARY_HEADER = "[Conversation summary so far]"


@dataclass
class _Session:
    session_id: str
    id: str = field(default_factory=lambda: str(uuid4()))
    summary: Optional[str] = None
    active: List[Message] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    accessed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    agent_name: Optional[str] = None


class SummarizingMemory(MemoryProvider):
    """
    Keep an active window of raw messages plus one rolling summary.

    When a write pushes the active window above ``active_window_tokens``, its
    older half is sent to ``model`` together with the previous summary and
    replaced by the new summary, clamped to roughly ``summary_max_tokens``.
    Reads return the summary as a leading system message followed by the
    active window.
    """

    type = "summarizing"

    def __init__(
        self,
        model: ModelProvider,
        *,
        active_window_tokens: int = 3000,
        summary_max_tokens: int = 600,
        summary_prompt: str = DEFAULT_SUMMARY_PROMPT,
    ) -> None:
        self.model = model
        self.active_window_tokens = active_window_tokens
        self.summary_max_tokens = summary_max_tokens
        self.summary_prompt = summary_prompt
        self._sessions: Dict[str, _Session] = {}

    async def read(self, options: Optional[MemoryReadOptions] = None) -> List[Message]:
        session = self._sessions.get(session_of(options))
        if session is None:
            return []

        session.accessed_at = datetime.now(timezone.utc)
        active = list(session.active)
        if options is not None and options.limit is not None:
            active = active[-options.limit :] if options.limit else []

        messages: List[Message] = []
        if session.summary:
            messages.append(Message(role=Role.system, content=f"{SUMMARY_HEADER}\n{session.summary}"))
        messages.extend(active)
        return messages

    async def write(self, messages: List[Message], options: Optional[MemoryWriteOptions] = None) -> None:
        session_id = session_of(options)
        session = self._sessions.get(session_id) or _Session(
            session_id=session_id, agent_name=options.agent_name if options else None
        )
        # The summary comes back as a system message on read, so it is dropped here.
        session.active = [m for m in messages if m.role != Role.system]
        session.accessed_at = datetime.now(timezone.utc)

        if estimate_messages_tokens(session.active) > self.active_window_tokens:
            await self._compress(session)

        self._sessions[session_id] = session

    async def clear(self, session_id: Optional[str] = None) -> None:
        if session_id is None:
            self._sessions.clear()
        else:
            self._sessions.pop(session_id, None)

    async def entries(self, session_id: Optional[str] = None) -> List[MemoryEntry]:
        if session_id is not None:
            sessions = [self._sessions[session_id]] if session_id in self._sessions else []
        else:
            sessions = list(self._sessions.values())
        return [
            MemoryEntry(
                id=s.id,
                session_id=s.session_id,
                messages=list(s.active),
                metadata=MemoryMetadata(
                    created_at=s.created_at,
                    accessed_at=s.accessed_at,
                    agent_name=s.agent_name,
                    token_count=estimate_messages_tokens(s.active),
                ),
            )
            for s in sessions
        ]

    def get_summary(self, session_id: str) -> Optional[str]:
        session = self._sessions.get(session_id)
        return session.summary if session else None

    async def _compress(self, session: _Session) -> None:
        split_at = len(session.active) // 2
        to_compress, to_keep = session.active[:split_at], session.active[split_at:]

        prefix = f"Previous summary:\n{session.summary}\n\nNew conversation to add:" if session.summary else ""
        transcript = "\n".join(f"{m.role.value.upper()}: {m.content}" for m in to_compress)

        response = await self.model.complete(
            ModelRequest(
                messages=[
                    Message(role=Role.system, content=self.summary_prompt),
                    Message(role=Role.user, content=f"{prefix}\n{transcript}"),
                ]
            )
        )
        session.summary = response.message.content[: self.summary_max_tokens * CHARS_PER_TOKEN]
        session.active = to_keep
        logger.info(
            "compressed %d message(s) of session %s into a %d-char summary",
            len(to_compress),
            session.session_id,
            len(session.summary),
        )
