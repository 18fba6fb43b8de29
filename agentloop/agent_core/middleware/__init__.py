"""Middleware interception pipeline.

 - ``MiddlewarePipeline``: ordered, scope-filtered continuation chain.
 - ``MiddlewareContext`` / ``ToolInvocationInfo``: middleware inputs.
 - ``FunctionMiddleware``: adapt a coroutine function into a middleware.
 - ``LoggingMiddleware``: lifecycle logging with timings.
 """

from .logging_middleware import LoggingMiddleware
from .pipeline import (
    FunctionMiddleware,
    Middleware,
    MiddlewareContext,
    MiddlewarePipeline,
    NextFn,
    ToolInvocationInfo,
)

__all__ = [
    "FunctionMiddleware",
    "LoggingMiddleware",
    "Middleware",
    "MiddlewareContext",
    "MiddlewarePipeline",
    "NextFn",
    "ToolInvocationInfo",
]
