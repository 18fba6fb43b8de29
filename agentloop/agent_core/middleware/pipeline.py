from __future__ import annotations

"""Ordered, scope-filtered middleware pipeline.

For every lifecycle scope invocation the pipeline:

1. filters the registered middleware to the ones matching the scope
   (middleware without a scope match every scope),
2. chains them in registration order through an explicit continuation.

Each middleware must ``await next()`` to hand control to the next one.
Returning without calling it short-circuits the rest of the chain for that
invocation. Exceptions abort the chain and propagate to the caller.
"""

from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Protocol,
    Sequence,
    Union,
)

from ..schemas.domain import MiddlewareScope

if TYPE_CHECKING:
    from ..runtime.context import ExecutionContext

NextFn = Callable[[], Awaitable[None]]
ScopeSpec = Union[MiddlewareScope, str, Sequence[Union[MiddlewareScope, str]], None]


@dataclass
class ToolInvocationInfo:
    """Tool details exposed to ``tool:*`` middleware."""

    name: str
    args: Dict[str, Any]
    result: Any = None
    error: Optional[str] = None


@dataclass
class MiddlewareContext:
    """Input handed to every middleware for one scope invocation."""

    scope: MiddlewareScope
    ctx: "ExecutionContext"
    tool: Optional[ToolInvocationInfo] = None


class Middleware(Protocol):
    """Protocol for middleware implementations.

    ``name`` and ``scope`` are optional attributes; a missing or ``None``
    scope matches every lifecycle scope.
    """

    async def run(self, mctx: MiddlewareContext, next: NextFn) -> None: ...


@dataclass(frozen=True)
class FunctionMiddleware:
    """Middleware backed by a coroutine function ``fn(mctx, next)``."""

    fn: Callable[[MiddlewareContext, NextFn], Awaitable[None]]
    scope: ScopeSpec = None
    name: Optional[str] = None

    async def run(self, mctx: MiddlewareContext, next: NextFn) -> None:
        await self.fn(mctx, next)


def _scopes_of(middleware: Any) -> Optional[List[MiddlewareScope]]:
    scope = getattr(middleware, "scope", None)
    if scope is None:
        return None
    if isinstance(scope, (str, MiddlewareScope)):
        return [MiddlewareScope(scope)]
    return [MiddlewareScope(s) for s in scope]


def matches_scope(middleware: Any, scope: MiddlewareScope) -> bool:
    scopes = _scopes_of(middleware)
    return scopes is None or scope in scopes


class MiddlewarePipeline:
    """Koa-style async middleware chain."""

    def __init__(self) -> None:
        self._middlewares: List[Middleware] = []

    def use(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._middlewares.append(middleware)
        return self

    def __len__(self) -> int:
        return len(self._middlewares)

    async def run(self, mctx: MiddlewareContext) -> None:
        """Execute all middleware matching ``mctx.scope``."""
        scoped = [m for m in self._middlewares if matches_scope(m, mctx.scope)]

        async def dispatch(index: int) -> None:
            if index >= len(scoped):
                return

            async def next_() -> None:
                await dispatch(index + 1)

            await scoped[index].run(mctx, next_)

        await dispatch(0)
