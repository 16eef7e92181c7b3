from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List
from threading import RLock
from copy import deepcopy
import logging

from .schema import Tool

logger = logging.getLogger(__name__)


Handler = Callable[[Any, Dict[str, Any]], Dict[str, Any]]


@dataclass(frozen=True)
class RegisteredTool:
    tool: Tool
    handler: Handler


class ToolRegistry:
    """
    Authoritative handler table for the architect.

    This forms the capability boundary: if a tool is not registered here,
    the oracle cannot trigger it.
    """

    def __init__(self) -> None:
        self._tools: Dict[str, RegisteredTool] = {}
        self._lock = RLock()
        logger.info("[TOOL REGISTRY] Initialized (empty)")

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, tool: Tool, handler: Handler) -> None:

        if not callable(handler):
            raise TypeError(f"Handler for '{tool.name}' must be callable.")

        with self._lock:
            if tool.name in self._tools:
                raise ValueError(f"Tool '{tool.name}' is already registered.")

            self._tools[tool.name] = RegisteredTool(tool=tool, handler=handler)

            logger.info(
                "[TOOL REGISTRY] Tool registered: %s | total=%d",
                tool.name,
                len(self._tools),
            )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, tool_name: str) -> RegisteredTool:

        with self._lock:
            try:
                return self._tools[tool_name]
            except KeyError:
                logger.error(
                    "[TOOL REGISTRY] Lookup FAILED: %s | available=%s",
                    tool_name,
                    list(self._tools.keys()),
                )
                raise KeyError(f"Tool '{tool_name}' is not registered.") from None

    def has_tool(self, tool_name: str) -> bool:
        with self._lock:
            return tool_name in self._tools

    def __len__(self) -> int:
        with self._lock:
            return len(self._tools)

    # ------------------------------------------------------------------
    # Schema Access
    # ------------------------------------------------------------------

    def get_input_schema(self, tool_name: str) -> Dict[str, Any]:
        return deepcopy(self.get(tool_name).tool.parameters)

    def declarations(self) -> List[Dict[str, Any]]:
        """All tools in oracle function-declaration format, registration order."""
        with self._lock:
            return [entry.tool.to_declaration() for entry in self._tools.values()]
