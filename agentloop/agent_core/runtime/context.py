from __future__ import annotations

"""Per-run execution context.

An :class:`ExecutionContext` is created fresh for every run and owns that
run's :class:`ExecutionState`. It composes the run's memory provider and the
agent's event bus but never reaches into either's internals.
"""

import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional, Union
from uuid import uuid4

from agentloop.core.logging_config import get_logger

from ..events import EventBus
from ..schemas.domain import CoreEvent, ExecutionState

if TYPE_CHECKING:
    from ..memory.base import MemoryProvider

logger = get_logger(__name__)


class ExecutionContext:
    """Mutable state plus collaborators shared by everything inside one run."""

    def __init__(
        self,
        *,
        input: str,
        bus: EventBus,
        session_id: str,
        data: Optional[Dict[str, Any]] = None,
        memory: Optional["MemoryProvider"] = None,
        state: Optional[ExecutionState] = None,
    ) -> None:
        self.input = input
        self.data: Dict[str, Any] = dict(data or {})
        self.state = state or ExecutionState()
        self.session_id = session_id
        self.memory = memory
        self.bus = bus
        self._cancelled = False
        self._watcher: Optional[asyncio.Task[None]] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """
        Mark the run as cancelled and emit ``cancel``.

        Cancellation is advisory: nothing already awaited is interrupted and
        engines are not required to observe the flag.
        """
        if self._cancelled:
            return
        self._cancelled = True
        logger.info(f"run for session {self.session_id} cancelled")
        self.emit(CoreEvent.cancel, {"session_id": self.session_id})

    def emit(self, event: Union[CoreEvent, Enum, str], payload: Any = None) -> None:
        """Fire-and-forget event emission."""
        self.bus.emit_nowait(event, payload)

    def watch(self, signal: asyncio.Event) -> None:
        """Call :meth:`cancel` once ``signal`` is set."""

        async def _wait() -> None:
            await signal.wait()
            self.cancel()

        self._watcher = asyncio.get_running_loop().create_task(_wait())

    def close(self) -> None:
        """Stop watching the cancellation signal."""
        if self._watcher is not None and not self._watcher.done():
            self._watcher.cancel()
        self._watcher = None


def create_context(
    input: str,
    *,
    bus: EventBus,
    session_id: Optional[str] = None,
    data: Optional[Dict[str, Any]] = None,
    memory: Optional["MemoryProvider"] = None,
    signal: Optional[asyncio.Event] = None,
) -> ExecutionContext:
    ctx = ExecutionContext(
        input=input,
        bus=bus,
        session_id=session_id or str(uuid4()),
        data=data,
        memory=memory,
    )
    if signal is not None:
        if signal.is_set():
            ctx.cancel()
        else:
            ctx.watch(signal)
    return ctx
