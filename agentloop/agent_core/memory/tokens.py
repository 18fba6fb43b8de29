"""Token estimation heuristics.

Roughly four characters per token plus a fixed per-message overhead. This is
deliberately approximate and not a tokenizer; budgets built on it are soft
approximations of the model's real accounting.
"""

from __future__ import annotations

import math
from typing import List, Sequence

from ..schemas.domain import Message, Role

MESSAGE_OVERHEAD_TOKENS = 4
CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def estimate_message_tokens(message: Message) -> int:
    return estimate_tokens(message.content) + MESSAGE_OVERHEAD_TOKENS


def estimate_messages_tokens(messages: Sequence[Message]) -> int:
    return sum(estimate_message_tokens(m) for m in messages)


def trim_to_token_budget(messages: Sequence[Message], max_tokens: int) -> List[Message]:
    """
    Drop the oldest non-system messages until the list fits ``max_tokens``.

    System messages are always kept and moved to the front. The remaining
    messages are filled newest-first; the walk stops at the first message
    that does not fit, so the result is always a suffix of the originals.
    """
    system = [m for m in messages if m.role == Role.system]
    rest = [m for m in messages if m.role != Role.system]

    tokens = estimate_messages_tokens(system)
    kept: List[Message] = []
    for msg in reversed(rest):
        cost = estimate_message_tokens(msg)
        if tokens + cost > max_tokens:
            break
        kept.append(msg)
        tokens += cost

    kept.reverse()
    return [*system, *kept]
