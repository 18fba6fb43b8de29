from __future__ import annotations

from agentloop.agent_core.memory.tokens import (
    estimate_message_tokens,
    estimate_messages_tokens,
    estimate_tokens,
    trim_to_token_budget,
)
from agentloop.agent_core.schemas.domain import Message, Role


def _m(role: Role, content: str) -> Message:
    return Message(role=role, content=content)


def test_estimate_tokens_rounds_up() -> None:
    assert estimate_tokens("") == 0
    assert estimate_tokens("abcd") == 1
    assert estimate_tokens("abcde") == 2


def test_messages_add_per_message_overhead() -> None:
    msgs = [_m(Role.user, "abcd"), _m(Role.assistant, "")]
    assert estimate_message_tokens(msgs[0]) == 5
    assert estimate_messages_tokens(msgs) == 9


def test_trim_keeps_system_and_newest_suffix() -> None:
    system = _m(Role.system, "s" * 4)  # 5 tokens
    old = _m(Role.user, "o" * 40)  # 14 tokens
    mid = _m(Role.assistant, "m" * 8)  # 6 tokens
    new = _m(Role.user, "n" * 8)  # 6 tokens

    trimmed = trim_to_token_budget([old, system, mid, new], 17)
    assert trimmed == [system, mid, new]


def test_trim_stops_at_first_message_that_does_not_fit() -> None:
    small_old = _m(Role.user, "a")  # 5 tokens
    big = _m(Role.assistant, "b" * 40)  # 14 tokens
    newest = _m(Role.user, "c")  # 5 tokens
    assert trim_to_token_budget([small_old, big, newest], 12) == [newest]
