"""Memory strategies deciding which history survives into the next run."""

from .base import DEFAULT_SESSION_ID, MemoryProvider
from .buffer import BufferMemory
from .composite import CompositeMemory
from .sliding_window import SlidingWindowMemory, WindowStats
from .summarizing import DEFAULT_SUMMARY_PROMPT, SummarizingMemory
from .tokens import estimate_message_tokens, estimate_messages_tokens, estimate_tokens, trim_to_token_budget

__all__ = [
    "DEFAULT_SESSION_ID",
    "DEFAULT_SUMMARY_PROMPT",
    "BufferMemory",
    "CompositeMemory",
    "MemoryProvider",
    "SlidingWindowMemory",
    "SummarizingMemory",
    "WindowStats",
    "estimate_message_tokens",
    "estimate_messages_tokens",
    "estimate_tokens",
    "trim_to_token_budget",
]
