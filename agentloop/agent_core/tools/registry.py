from __future__ import annotations

"""Tool registry.

The registry maps a tool name to an executable tool implementation. The
reasoning context uses it to resolve the tool calls issued by the model, and
the engines use it to build the schema list sent with each model request.
"""

from typing import Dict, List, Optional, Sequence

from ..schemas.domain import ToolSchema
from .base import Tool


class ToolRegistry:
    """
    In-memory mapping of tool names to implementations.

    Notes:
        - ``register`` overwrites any existing mapping for the tool name.
        - ``get`` returns ``None`` for unknown names; the invocation protocol
          turns that into ``UnknownToolError``.
    """

    def __init__(self) -> None:
        """Initialize an empty tool registry."""
        self._tools: Dict[str, Tool] = {}

    def register(self, tool: Tool) -> "ToolRegistry":
        """
        Register a tool implementation under ``tool.schema.name``.

        Args:
            tool: The tool instance to register.

        Returns:
            The registry itself, for chaining.
        """
        self._tools[tool.schema.name] = tool
        return self

    def get(self, name: str) -> Optional[Tool]:
        """Return the tool registered under ``name``, or ``None``."""
        return self._tools.get(name)

    def get_all(self) -> List[Tool]:
        """Return all registered tools in registration order."""
        return list(self._tools.values())

    def get_schemas(self) -> List[ToolSchema]:
        """Return the schema of every registered tool in registration order."""
        return [t.schema for t in self._tools.values()]

    def has(self, name: str) -> bool:
        return name in self._tools

    @staticmethod
    def is_allowed(name: str, allowed_tools: Optional[Sequence[str]] = None) -> bool:
        """
        Check a tool name against an allow-list.

        Args:
            name: The tool name.
            allowed_tools: The allow-list; ``None`` means every tool is allowed.

        Returns:
            True if the tool may be invoked.
        """
        if allowed_tools is None:
            return True
        return name in allowed_tools

    def __len__(self) -> int:
        return len(self._tools)
