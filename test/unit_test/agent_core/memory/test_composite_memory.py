from __future__ import annotations

import pytest

from agentloop.agent_core.errors import ConfigurationError
from agentloop.agent_core.memory.buffer import BufferMemory
from agentloop.agent_core.memory.composite import CompositeMemory
from agentloop.agent_core.memory.sliding_window import SlidingWindowMemory
from agentloop.agent_core.schemas.domain import MemoryReadOptions, MemoryWriteOptions, Message, Role


def _m(role: Role, content: str) -> Message:
    return Message(role=role, content=content)


def test_requires_at_least_one_provider() -> None:
    with pytest.raises(ConfigurationError):
        CompositeMemory([])


def test_rejects_unknown_read_strategy() -> None:
    with pytest.raises(ConfigurationError):
        CompositeMemory([BufferMemory()], read_strategy="newest")  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_writes_fan_out_to_every_provider() -> None:
    a, b = BufferMemory(), SlidingWindowMemory()
    mem = CompositeMemory([a, b])
    msgs = [_m(Role.user, "hi"), _m(Role.assistant, "hello")]
    await mem.write(msgs, MemoryWriteOptions(session_id="s"))

    assert await a.read(MemoryReadOptions(session_id="s")) == msgs
    assert await b.read(MemoryReadOptions(session_id="s")) == msgs
    assert len(await mem.entries("s")) == 2


@pytest.mark.asyncio
async def test_first_hit_returns_first_non_empty_provider() -> None:
    empty, full = BufferMemory(), BufferMemory()
    await full.write([_m(Role.user, "from second")], MemoryWriteOptions(session_id="s"))

    mem = CompositeMemory([empty, full])
    out = await mem.read(MemoryReadOptions(session_id="s"))
    assert [m.content for m in out] == ["from second"]
    assert await mem.read(MemoryReadOptions(session_id="other")) == []


@pytest.mark.asyncio
async def test_merge_dedupes_by_role_and_content_prefix() -> None:
    a, b = BufferMemory(), BufferMemory()
    shared = "x" * 100
    await a.write([_m(Role.user, shared + "tail-a"), _m(Role.assistant, "only a")], MemoryWriteOptions(session_id="s"))
    await b.write(
        [_m(Role.user, shared + "tail-b"), _m(Role.assistant, shared), _m(Role.user, "only b")],
        MemoryWriteOptions(session_id="s"),
    )

    mem = CompositeMemory([a, b], read_strategy="merge")
    out = await mem.read(MemoryReadOptions(session_id="s"))
    assert [(m.role, m.content) for m in out] == [
        (Role.user, shared + "tail-a"),
        (Role.assistant, "only a"),
        (Role.assistant, shared),
        (Role.user, "only b"),
    ]


@pytest.mark.asyncio
async def test_clear_reaches_every_provider() -> None:
    a, b = BufferMemory(), BufferMemory()
    mem = CompositeMemory([a, b])
    await mem.write([_m(Role.user, "hi")], MemoryWriteOptions(session_id="s"))
    await mem.clear("s")
    assert a.session_count == 0 and b.session_count == 0
