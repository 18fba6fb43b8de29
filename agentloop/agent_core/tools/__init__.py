"""Tool protocol, callable-backed tool definitions and the tool registry.

 - ``Tool``: protocol for async tool execution.
 - ``ToolDefinition`` / ``define_tool`` / ``tool``: build tools from functions.
 - ``ToolRegistry``: name → tool mapping plus allow-list checks.
 """

from .base import Tool, ToolDefinition, define_tool, tool
from .registry import ToolRegistry

__all__ = [
    "Tool",
    "ToolDefinition",
    "ToolRegistry",
    "define_tool",
    "tool",
]
