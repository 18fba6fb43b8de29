from __future__ import annotations

"""Lifecycle event bus.

``EventBus`` fans a named event out to every subscribed handler. Handlers may
be plain functions or coroutine functions.

Two delivery modes exist:

- ``await bus.emit(...)``: delivers to every handler and propagates the
  first handler failure to the caller.
- ``bus.emit_nowait(...)``: fire-and-forget. Delivery is scheduled on the
  running loop and handler failures are logged, never raised into the
  emitting code.
"""

import asyncio
import inspect
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Set, Union

from agentloop.core.logging_config import get_logger

logger = get_logger(__name__)

EventHandler = Callable[[Any], Union[None, Awaitable[None]]]


def _key(event: Union[str, Enum]) -> str:
    return str(event.value) if isinstance(event, Enum) else str(event)


class EventBus:
    """Lightweight async event emitter used by the agent runtime."""

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = {}
        self._pending: Set[asyncio.Task[None]] = set()

    def on(self, event: Union[str, Enum], handler: EventHandler) -> "EventBus":
        self._handlers.setdefault(_key(event), []).append(handler)
        return self

    def off(self, event: Union[str, Enum], handler: EventHandler) -> "EventBus":
        key = _key(event)
        handlers = self._handlers.get(key)
        if handlers:
            self._handlers[key] = [h for h in handlers if h is not handler]
        return self

    def handlers(self, event: Union[str, Enum]) -> List[EventHandler]:
        return list(self._handlers.get(_key(event), []))

    async def emit(self, event: Union[str, Enum], payload: Any = None) -> None:
        """
        Deliver ``payload`` to every handler of ``event``.

        Plain functions run inline in subscription order; coroutine handlers
        are then awaited concurrently.
        """
        pending = []
        for handler in self.handlers(event):
            result = handler(payload)
            if inspect.isawaitable(result):
                pending.append(result)
        if pending:
            await asyncio.gather(*pending)

    def emit_nowait(self, event: Union[str, Enum], payload: Any = None) -> None:
        """Schedule delivery of ``event`` without waiting for the handlers."""
        if not self._handlers.get(_key(event)):
            return
        task = asyncio.get_running_loop().create_task(self.emit(event, payload))
        self._pending.add(task)
        task.add_done_callback(self._on_delivered(_key(event)))

    def _on_delivered(self, key: str) -> Callable[["asyncio.Task[None]"], None]:
        def _done(task: "asyncio.Task[None]") -> None:
            self._pending.discard(task)
            if task.cancelled():
                return
            exc = task.exception()
            if exc is not None:
                logger.error(f"Event handler for '{key}' failed: {exc!r}", exc_info=exc)

        return _done

    async def drain(self) -> None:
        """Wait until every fire-and-forget delivery scheduled so far has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
