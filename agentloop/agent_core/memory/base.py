from __future__ import annotations

"""Memory provider contract.

A memory provider owns the per-session conversation history. The agent
runtime only talks to it through ``read`` and ``write``:

- ``read`` returns the ordered messages to prepend to the next run.
- ``write`` receives the full transcript of a finished run (history that was
  read plus the messages the run produced).

The built-in providers keep a per-process, per-session map with
last-write-wins semantics and no locking; concurrent runs against the same
session may interleave writes.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..schemas.domain import MemoryEntry, MemoryReadOptions, MemoryWriteOptions, Message

DEFAULT_SESSION_ID = "default"


def session_of(options: MemoryReadOptions | MemoryWriteOptions | None) -> str:
    if options is None or options.session_id is None:
        return DEFAULT_SESSION_ID
    return options.session_id


def tags_match(stored: Optional[Dict[str, str]], wanted: Optional[Dict[str, str]]) -> bool:
    """True when every ``wanted`` tag is present with the same value in ``stored``."""
    if not wanted:
        return True
    stored = stored or {}
    return all(stored.get(k) == v for k, v in wanted.items())


class MemoryProvider(ABC):
    """Abstract base class for memory strategies."""

    type: str = "abstract"

    @abstractmethod
    async def read(self, options: Optional[MemoryReadOptions] = None) -> List[Message]:
        """Load prior conversation history for a session."""

    @abstractmethod
    async def write(self, messages: List[Message], options: Optional[MemoryWriteOptions] = None) -> None:
        """Persist the transcript of a completed run."""

    @abstractmethod
    async def clear(self, session_id: Optional[str] = None) -> None:
        """Forget one session, or every session when ``session_id`` is None."""

    @abstractmethod
    async def entries(self, session_id: Optional[str] = None) -> List[MemoryEntry]:
        """Return raw entries for inspection."""
