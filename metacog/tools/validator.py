from __future__ import annotations

from typing import Dict, Any

from .registry import ToolRegistry


class ArgumentValidationError(Exception):
    """Raised when tool arguments violate schema."""
    pass


class ArgumentValidator:
    """
    Validates tool arguments against the tool's JSON-schema parameters.
    Supports:
    - required / optional properties
    - string, integer, number, boolean, object
    - array with typed items
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self._registry = registry

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def validate(self, tool_name: str, args: Dict[str, Any]) -> Dict[str, Any]:

        schema = self._registry.get_input_schema(tool_name)

        if not isinstance(args, dict):
            raise ArgumentValidationError("Arguments must be a dictionary.")

        properties = schema.get("properties", {})

        self._check_required(schema.get("required", []), args)
        self._check_unknown(properties, args)
        self._check_types(properties, args)

        return args

    # ------------------------------------------------------------------
    # Validation Steps
    # ------------------------------------------------------------------

    def _check_required(self, required, args: Dict[str, Any]) -> None:
        missing = [key for key in required if args.get(key) is None]
        if missing:
            raise ArgumentValidationError(f"Missing required arguments: {missing}")

    def _check_unknown(self, properties: Dict[str, Any], args: Dict[str, Any]) -> None:
        extra = [k for k in args if k not in properties]
        if extra:
            raise ArgumentValidationError(f"Unknown arguments: {extra}")

    def _check_types(self, properties: Dict[str, Any], args: Dict[str, Any]) -> None:

        for key, spec in properties.items():

            if args.get(key) is None:
                continue  # optional and not present

            if not self._matches_type(spec, args[key]):
                raise ArgumentValidationError(
                    f"Argument '{key}' expected type {spec.get('type')}, "
                    f"got {type(args[key]).__name__}"
                )

    # ------------------------------------------------------------------
    # Type Matching
    # ------------------------------------------------------------------

    def _matches_type(self, spec: Dict[str, Any], value: Any) -> bool:

        expected = spec.get("type")

        if expected == "string":
            return isinstance(value, str)

        if expected == "boolean":
            return isinstance(value, bool)

        # bool is an int subclass; JSON true is never a count
        if expected == "integer":
            if isinstance(value, bool):
                return False
            return isinstance(value, int) or (isinstance(value, float) and value.is_integer())

        if expected == "number":
            return isinstance(value, (int, float)) and not isinstance(value, bool)

        if expected == "object":
            return isinstance(value, dict)

        if expected == "array":
            if not isinstance(value, list):
                return False
            items = spec.get("items")
            if not items:
                return True
            return all(self._matches_type(items, v) for v in value)

        return True  # Unknown spec → allow
