import json
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class SynthesisError(RuntimeError):
    """Raised when the architect's final payload is missing or unparseable."""
    pass


# ------------------------------------------------------------
# Tolerant JSON Extraction
# ------------------------------------------------------------

def strip_code_fence(text: str) -> str:
    text = text.strip()

    if text.startswith("```"):
        first_newline = text.find("\n")
        # ```json on its own line, or a bare ``` fence
        text = text[first_newline + 1:] if first_newline != -1 else text[3:]
        if text.lower().startswith("json"):
            text = text[4:]
        text = text.rstrip()
        if text.endswith("```"):
            text = text[:-3]

    return text.strip()


def slice_outer_object(text: str) -> str:
    first = text.find("{")
    last = text.rfind("}")
    if first != -1 and last > first:
        return text[first:last + 1]
    return text


def parse_synthesis(text: Optional[str]) -> Dict[str, Any]:
    """
    Parse the architect's final JSON payload.

    Steps: strip a surrounding ``` / ```json fence, keep the span from
    the first '{' to the last '}', then json.loads.

    Raises
    ------
    SynthesisError
        Empty text, invalid JSON, or JSON that is not an object.
    """

    if text is None or not text.strip():
        raise SynthesisError(
            "The Metacognitive Architect returned an empty response. This may be due to "
            "a content filter or an internal model error. Analysis cannot proceed."
        )

    candidate = slice_outer_object(strip_code_fence(text))

    try:
        payload = json.loads(candidate)
    except ValueError as e:
        logger.error("[PARSER] Unparseable synthesis payload: %s", text[:500])
        raise SynthesisError(f"Architect payload is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise SynthesisError(
            f"Architect payload must be a JSON object, got {type(payload).__name__}"
        )

    return payload
