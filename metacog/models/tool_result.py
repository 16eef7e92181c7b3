from dataclasses import dataclass
from typing import Any, Optional, Literal, Dict


@dataclass(frozen=True)
class ToolResult:
    """
    Immutable structured record of a tool effect.

    This object represents a single action the architect requested
    through the dispatch loop. It is the canonical observation fed back
    to the generation oracle as a tool-result message.

    Attributes
    ----------
    tool_name : str
        Name of the tool that was dispatched.

    status : {"success", "failure", "blocked"}
        Outcome classification:
            success → effect applied (or attempted, for reporting tools)
            failure → arguments or references invalid; nothing mutated
            blocked → tool name not registered

    output : Any
        Handler payload. None if the effect was not applied.

    error : Optional[str]
        Error message when status is failure or blocked.

    latency_ms : int
        Execution time in milliseconds (monotonic).
    """

    tool_name: str
    status: Literal["success", "failure", "blocked"]
    output: Any
    error: Optional[str]
    latency_ms: int

    # ------------------------------------------------------------------
    # Convenience Properties
    # ------------------------------------------------------------------

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def is_failure(self) -> bool:
        return self.status == "failure"

    @property
    def is_blocked(self) -> bool:
        return self.status == "blocked"

    # ------------------------------------------------------------------
    # Oracle-Facing Payload
    # ------------------------------------------------------------------

    def to_response(self) -> Dict[str, Any]:
        """
        Structured payload returned to the oracle.

        Failures always carry `success: False` and the error text so the
        oracle can correct its next request.
        """
        if not self.is_success:
            return {"success": False, "error": self.error}

        payload = {"success": True}
        if isinstance(self.output, dict):
            payload.update(self.output)
        elif self.output is not None:
            payload["result"] = self.output
        return payload

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tool_name": self.tool_name,
            "status": self.status,
            "output": self.output,
            "error": self.error,
            "latency_ms": self.latency_ms,
        }
