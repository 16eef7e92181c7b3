from dataclasses import dataclass, field
from typing import Dict, Any
import json
import uuid


@dataclass(frozen=True)
class ToolCall:
    """
    Represents an oracle-issued request to execute a tool.

    This is the *execution intent packet* passed from the generation
    oracle to the ToolDispatcher. It contains no execution logic, only
    declarative intent.

    Architectural Role
    ------------------
    Oracle → ToolCall → ToolDispatcher → Handler

    The id is echoed back in the tool-result message so the oracle can
    correlate the observation with its request.
    """

    tool_name: str
    """Name of the tool to invoke."""

    arguments: Dict[str, Any]
    """Raw arguments as decoded from the oracle response."""

    # --- System Metadata ---
    id: str = field(default_factory=lambda: f"call_{uuid.uuid4().hex[:24]}")
    """Unique identifier for tracing this tool call."""

    # ------------------------------------------------------------------
    # Conversation Encoding
    # ------------------------------------------------------------------

    def to_message_part(self) -> Dict[str, Any]:
        """Encode as an assistant `tool_calls` entry (chat-completions shape)."""
        return {
            "id": self.id,
            "type": "function",
            "function": {
                "name": self.tool_name,
                "arguments": json.dumps(self.arguments),
            },
        }

    # ------------------------------------------------------------------
    # Debug Representation
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return f"ToolCall(id={self.id[:12]}, tool='{self.tool_name}')"
