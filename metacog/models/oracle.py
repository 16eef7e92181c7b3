from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import json

from .tool_call import ToolCall


@dataclass(frozen=True)
class OracleResponse:
    """
    One reply from the generation oracle.

    Either a final text payload, one or more tool invocations, or
    (rarely) neither, when the model returned nothing usable.
    """

    text: Optional[str] = None
    tool_calls: List[ToolCall] = field(default_factory=list)

    @property
    def requests_tools(self) -> bool:
        return bool(self.tool_calls)

    @property
    def first_call(self) -> Optional[ToolCall]:
        return self.tool_calls[0] if self.tool_calls else None


@dataclass(frozen=True)
class Source:
    """A citation returned by grounded generation."""

    uri: str
    title: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"uri": self.uri, "title": self.title or self.uri}


@dataclass(frozen=True)
class GroundedAnswer:
    """Text produced with external grounding plus its optional sources."""

    text: str
    sources: List[Source] = field(default_factory=list)


# ----------------------------------------------------------------------
# Conversation Messages (chat-completions shape)
# ----------------------------------------------------------------------

def user_message(content: str) -> Dict[str, Any]:
    return {"role": "user", "content": content}


def assistant_tool_message(call: ToolCall) -> Dict[str, Any]:
    """Assistant turn carrying exactly one tool invocation."""
    return {
        "role": "assistant",
        "content": None,
        "tool_calls": [call.to_message_part()],
    }


def tool_result_message(call: ToolCall, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "role": "tool",
        "tool_call_id": call.id,
        "name": call.tool_name,
        "content": json.dumps(payload, default=str),
    }
