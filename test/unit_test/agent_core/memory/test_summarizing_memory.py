from __future__ import annotations

import pytest

from agentloop.agent_core.memory.summarizing import DEFAULT_SUMMARY_PROMPT, SummarizingMemory
from agentloop.agent_core.schemas.domain import MemoryReadOptions, MemoryWriteOptions, Message, Role


def _msgs(n: int, start: int = 0) -> list[Message]:
    return [
        Message(role=Role.user if i % 2 == 0 else Role.assistant, content=f"msg-{i:03d}")
        for i in range(start, start + n)
    ]


@pytest.mark.asyncio
async def test_no_compression_below_window(scripted_model) -> None:
    model = scripted_model()
    mem = SummarizingMemory(model, active_window_tokens=1000)
    await mem.write(_msgs(4), MemoryWriteOptions(session_id="s"))

    out = await mem.read(MemoryReadOptions(session_id="s"))
    assert [m.content for m in out] == [m.content for m in _msgs(4)]
    assert mem.get_summary("s") is None
    assert model.requests == []


@pytest.mark.asyncio
async def test_compression_prepends_summary_and_keeps_newer_half(scripted_model, reply) -> None:
    model = scripted_model(reply("they greeted each other"))
    mem = SummarizingMemory(model, active_window_tokens=30)
    msgs = _msgs(6)  # 6 tokens each, 36 in total
    await mem.write(msgs, MemoryWriteOptions(session_id="s"))

    out = await mem.read(MemoryReadOptions(session_id="s"))
    assert out[0].role == Role.system
    assert out[0].content == "[Conversation summary so far]\nthey greeted each other"
    assert out[1:] == msgs[3:]

    (request,) = model.requests
    assert request.tools == []
    assert request.messages[0].content == DEFAULT_SUMMARY_PROMPT
    assert request.messages[1].content == "\nUSER: msg-000\nASSISTANT: msg-001\nUSER: msg-002"


@pytest.mark.asyncio
async def test_second_compression_folds_previous_summary(scripted_model, reply) -> None:
    model = scripted_model(reply("first"), reply("second"))
    mem = SummarizingMemory(model, active_window_tokens=30)
    await mem.write(_msgs(6), MemoryWriteOptions(session_id="s"))

    history = await mem.read(MemoryReadOptions(session_id="s"))
    await mem.write([*history, *_msgs(4, start=6)], MemoryWriteOptions(session_id="s"))

    assert mem.get_summary("s") == "second"
    prompt = model.requests[1].messages[1].content
    assert prompt.startswith("Previous summary:\nfirst\n\nNew conversation to add:\n")
    # The summary system message is never stored in the active window.
    assert "[Conversation summary so far]" not in prompt

    (entry,) = await mem.entries("s")
    assert [m.content for m in entry.messages] == ["msg-006", "msg-007", "msg-008", "msg-009"]


@pytest.mark.asyncio
async def test_summary_is_clamped_by_character_budget(scripted_model, reply) -> None:
    model = scripted_model(reply("x" * 100))
    mem = SummarizingMemory(model, active_window_tokens=10, summary_max_tokens=5)
    await mem.write(_msgs(4), MemoryWriteOptions(session_id="s"))
    assert mem.get_summary("s") == "x" * 20


@pytest.mark.asyncio
async def test_read_limit_applies_to_active_window(scripted_model) -> None:
    mem = SummarizingMemory(scripted_model(), active_window_tokens=1000)
    await mem.write(_msgs(4), MemoryWriteOptions(session_id="s"))
    out = await mem.read(MemoryReadOptions(session_id="s", limit=1))
    assert [m.content for m in out] == ["msg-003"]
