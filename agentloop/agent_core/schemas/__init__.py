"""Schemas and DTOs for the agent core."""

from .domain import (
    CoreEvent,
    ExecutionState,
    MemoryEntry,
    MemoryMetadata,
    MemoryReadOptions,
    MemoryWriteOptions,
    Message,
    MiddlewareScope,
    ModelRequest,
    ModelResponse,
    ModelResponseChunk,
    PlanStep,
    PlanTask,
    ReasoningStep,
    ReflectionStep,
    ResponseStep,
    Role,
    TaskStatus,
    ThoughtStep,
    TokenUsage,
    ToolCall,
    ToolCallRecord,
    ToolCallStep,
    ToolResultStep,
    ToolSchema,
)

__all__ = [
    "CoreEvent",
    "ExecutionState",
    "MemoryEntry",
    "MemoryMetadata",
    "MemoryReadOptions",
    "MemoryWriteOptions",
    "Message",
    "MiddlewareScope",
    "ModelRequest",
    "ModelResponse",
    "ModelResponseChunk",
    "PlanStep",
    "PlanTask",
    "ReasoningStep",
    "ReflectionStep",
    "ResponseStep",
    "Role",
    "TaskStatus",
    "ThoughtStep",
    "TokenUsage",
    "ToolCall",
    "ToolCallRecord",
    "ToolCallStep",
    "ToolResultStep",
    "ToolSchema",
]
