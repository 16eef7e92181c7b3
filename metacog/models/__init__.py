"""
Core runtime data models for the metacog research collective.

These dataclasses define the structured information packets that move
between the oracle adapters, the dispatch loop and the tool handlers.
"""

from .tool_call import ToolCall
from .tool_result import ToolResult
from .oracle import OracleResponse, GroundedAnswer, Source

__all__ = ["ToolCall", "ToolResult", "OracleResponse", "GroundedAnswer", "Source"]
