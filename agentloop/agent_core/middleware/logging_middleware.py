"""Structured logging middleware.

Logs every lifecycle scope it sees through the standard ``logging`` module:
``run:*`` at INFO, ``step:*`` and ``tool:*`` at DEBUG. Durations are
measured between each ``:before`` scope and its matching ``:after``.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Dict, Iterable, Optional, Tuple

from agentloop.core.logging_config import get_logger

from ..schemas.domain import MiddlewareScope
from .pipeline import MiddlewareContext, NextFn

_SCOPE_LEVELS = {
    MiddlewareScope.run_before: logging.INFO,
    MiddlewareScope.run_after: logging.INFO,
    MiddlewareScope.step_before: logging.DEBUG,
    MiddlewareScope.step_after: logging.DEBUG,
    MiddlewareScope.tool_before: logging.DEBUG,
    MiddlewareScope.tool_after: logging.DEBUG,
}


class LoggingMiddleware:
    """
    Log lifecycle scopes with optional before→after timing.

    Attributes:
        name: Always ``"logger"``.
        scope: ``None``; the middleware sees every scope and applies its own
            ``scopes`` filter so it never blocks the chain.
    """

    name = "logger"
    scope = None

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        scopes: Optional[Iterable[MiddlewareScope | str]] = None,
        timing: bool = True,
    ) -> None:
        self._logger = logger or get_logger(__name__)
        self._scopes = {MiddlewareScope(s) for s in scopes} if scopes is not None else None
        self._timing = timing
        self._timers: Dict[Tuple[int, str, str], float] = {}

    def _timer_key(self, mctx: MiddlewareContext, phase: str) -> Tuple[int, str, str]:
        family = mctx.scope.value.split(":")[0]
        tool = mctx.tool.name if mctx.tool is not None else ""
        return (id(mctx.ctx), f"{family}:{phase}", tool)

    async def run(self, mctx: MiddlewareContext, next: NextFn) -> None:
        scope = mctx.scope
        if self._scopes is not None and scope not in self._scopes:
            await next()
            return

        level = _SCOPE_LEVELS.get(scope, logging.INFO)
        if not self._logger.isEnabledFor(level):
            await next()
            return

        parts = [f"scope={scope.value}", f"session={mctx.ctx.session_id}"]
        if mctx.tool is not None:
            parts.append(f"tool={mctx.tool.name}")

        if scope.value.endswith(":before"):
            if self._timing:
                self._timers[self._timer_key(mctx, "before")] = time.perf_counter()
            if mctx.tool is not None:
                parts.append(f"args={json.dumps(mctx.tool.args, default=str)}")
            self._logger.log(level, " ".join(parts))
            await next()
            return

        if self._timing:
            start = self._timers.pop(self._timer_key(mctx, "before"), None)
            if start is not None:
                parts.append(f"duration={(time.perf_counter() - start) * 1000:.1f}ms")

        await next()

        if mctx.tool is not None:
            if mctx.tool.error is not None:
                parts.append(f"error={mctx.tool.error}")
            else:
                parts.append(f"result={json.dumps(mctx.tool.result, default=str)[:200]}")
        self._logger.log(level, " ".join(parts))
