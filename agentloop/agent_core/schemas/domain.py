from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import Field

from .base import BaseSchema, FrozenSchema


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    system = "system"
    user = "user"
    assistant = "assistant"
    tool = "tool"


class TaskStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    done = "done"
    failed = "failed"


class MiddlewareScope(str, Enum):
    run_before = "run:before"
    run_after = "run:after"
    step_before = "step:before"
    step_after = "step:after"
    tool_before = "tool:before"
    tool_after = "tool:after"


class CoreEvent(str, Enum):
    run_start = "run:start"
    run_end = "run:end"
    step_reasoning = "step:reasoning"
    model_request = "model:request"
    model_response = "model:response"
    tool_before = "tool:before"
    tool_after = "tool:after"
    memory_read = "memory:read"
    memory_write = "memory:write"
    cancel = "cancel"
    error = "error"


# ─── Model exchange ──────────────────────────────────────────────────────────


class ToolCall(BaseSchema):
    id: str
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class Message(BaseSchema):
    role: Role
    content: str = ""
    reasoning: Optional[str] = None
    tool_call_id: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None


class ToolSchema(BaseSchema):
    name: str
    description: str = ""
    parameters: Dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})


class TokenUsage(BaseSchema):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    cost_usd: float = 0.0

    def add(self, other: "TokenUsage") -> None:
        """Accumulate ``other`` into this counter in place."""
        self.prompt_tokens += other.prompt_tokens
        self.completion_tokens += other.completion_tokens
        self.total_tokens += other.total_tokens
        self.cost_usd += other.cost_usd


class ModelRequest(BaseSchema):
    messages: List[Message]
    tools: List[ToolSchema] = Field(default_factory=list)


class ModelResponse(BaseSchema):
    message: Message
    tool_calls: Optional[List[ToolCall]] = None
    usage: Optional[TokenUsage] = None
    raw: Any = None


class ModelResponseChunk(BaseSchema):
    delta: str
    done: bool = False


# ─── Planning ────────────────────────────────────────────────────────────────


class PlanTask(BaseSchema):
    id: str = Field(default_factory=lambda: str(uuid4()))
    description: str
    depends_on: List[str] = Field(default_factory=list)
    status: TaskStatus = TaskStatus.pending
    result: Any = None


# ─── Reasoning steps ─────────────────────────────────────────────────────────


class ThoughtStep(FrozenSchema):
    type: Literal["thought"] = "thought"
    content: str
    engine: str


class PlanStep(FrozenSchema):
    type: Literal["plan"] = "plan"
    tasks: List[PlanTask]
    engine: str


class ToolCallStep(FrozenSchema):
    type: Literal["tool_call"] = "tool_call"
    tool_name: str
    args: Dict[str, Any] = Field(default_factory=dict)
    call_id: str
    engine: str


class ToolResultStep(FrozenSchema):
    type: Literal["tool_result"] = "tool_result"
    tool_name: str
    call_id: str
    result: Any = None
    error: Optional[str] = None
    engine: str


class ReflectionStep(FrozenSchema):
    type: Literal["reflection"] = "reflection"
    assessment: str
    needs_revision: bool
    engine: str


class ResponseStep(FrozenSchema):
    type: Literal["response"] = "response"
    content: str
    engine: str


ReasoningStep = Annotated[
    Union[ThoughtStep, PlanStep, ToolCallStep, ToolResultStep, ReflectionStep, ResponseStep],
    Field(discriminator="type"),
]


# ─── Execution state ─────────────────────────────────────────────────────────


class ToolCallRecord(BaseSchema):
    call: ToolCall
    result: Any = None


class ExecutionState(BaseSchema):
    """Per-run mutable state. Owned by exactly one run."""

    steps: List[ReasoningStep] = Field(default_factory=list)
    messages: List[Message] = Field(default_factory=list)
    tool_calls: List[ToolCallRecord] = Field(default_factory=list)
    usage: TokenUsage = Field(default_factory=TokenUsage)
    started_at: datetime = Field(default_factory=_utc_now)
    finished_at: Optional[datetime] = None


# ─── Memory ──────────────────────────────────────────────────────────────────


class MemoryMetadata(BaseSchema):
    created_at: datetime = Field(default_factory=_utc_now)
    accessed_at: Optional[datetime] = None
    agent_name: Optional[str] = None
    tags: Optional[Dict[str, str]] = None
    token_count: Optional[int] = None


class MemoryEntry(BaseSchema):
    id: str = Field(default_factory=lambda: str(uuid4()))
    session_id: str
    messages: List[Message] = Field(default_factory=list)
    metadata: MemoryMetadata = Field(default_factory=MemoryMetadata)


class MemoryReadOptions(BaseSchema):
    session_id: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=0)
    query: Optional[str] = None
    tags: Optional[Dict[str, str]] = None


class MemoryWriteOptions(BaseSchema):
    session_id: Optional[str] = None
    tags: Optional[Dict[str, str]] = None
    agent_name: Optional[str] = None
