from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class Tool:
    """
    Declarative contract describing an architect capability.

    A Tool defines WHAT action can be requested by the oracle, while the
    effect itself lives in a handler bound at registration. This object
    is the canonical contract between:

        Oracle → ArgumentValidator → ToolDispatcher → handler → MissionContext

    `parameters` is a JSON-schema object (``type: object`` with
    ``properties`` and ``required``) sent verbatim to the oracle as the
    function declaration.
    """

    # ------------------------------------------------------------------
    # Core Identity
    # ------------------------------------------------------------------

    name: str
    description: str

    # ------------------------------------------------------------------
    # Schema (Contract Layer)
    # ------------------------------------------------------------------

    parameters: Dict[str, Any] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    # NOTE: Tuple used instead of List to preserve immutability
    tags: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        """
        Lightweight invariant checks.

        Raises early if the contract is malformed.
        """

        if not self.name or not isinstance(self.name, str):
            raise ValueError("Tool name must be a non-empty string.")

        if not isinstance(self.parameters, dict):
            raise TypeError("parameters must be a dictionary.")

        if self.parameters and self.parameters.get("type") != "object":
            raise ValueError("parameters must describe a JSON object.")

        unknown = [r for r in self.required if r not in self.properties]
        if unknown:
            raise ValueError(f"Required parameters not declared: {unknown}")

    # ------------------------------------------------------------------
    # Derived Properties
    # ------------------------------------------------------------------

    @property
    def properties(self) -> Dict[str, Any]:
        return self.parameters.get("properties", {})

    @property
    def required(self) -> List[str]:
        return list(self.parameters.get("required", []))

    def to_declaration(self) -> Dict[str, Any]:
        """Function declaration in chat-completions `tools` format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters or {"type": "object", "properties": {}},
            },
        }
