from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import json
import logging

from ..models.oracle import OracleResponse, GroundedAnswer, user_message

logger = logging.getLogger(__name__)


class OracleError(RuntimeError):
    """Raised when the generation oracle cannot produce a response."""
    pass


def decode_arguments(raw: Any) -> Dict[str, Any]:
    """
    Decode tool-call arguments from an oracle response.

    Malformed JSON decodes to an empty dict; the argument validator then
    reports the missing fields back to the oracle.
    """
    if isinstance(raw, dict):
        return raw

    if not raw:
        return {}

    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("[ORACLE] Undecodable tool arguments: %r", str(raw)[:200])
        return {}

    return decoded if isinstance(decoded, dict) else {}


class GenerationClient(ABC):
    """
    Abstract generation oracle interface.

    Responsible only for:
        • Sending a prompt or conversation
        • Returning raw text or requested tool invocations
        • Handling backend-specific transport

    Every transport or model failure surfaces as OracleError.
    """

    model: str = ""

    @property
    def name(self) -> str:
        """Return backend identity."""
        return self.__class__.__name__

    @abstractmethod
    def converse(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> OracleResponse:
        """
        Execute one conversational round.

        Parameters
        ----------
        messages : list
            Conversation history in chat-completions shape.

        tools : list, optional
            Function declarations the model may invoke.

        response_schema : dict, optional
            JSON schema the final text payload should follow.

        Returns
        -------
        OracleResponse
            Text and/or tool invocations.
        """
        raise NotImplementedError

    def generate(self, prompt: str) -> str:
        """One-shot text generation."""
        response = self.converse([user_message(prompt)])
        return response.text or ""

    def grounded_search(self, query: str) -> GroundedAnswer:
        """
        Generation with external grounding.

        Backends without a grounding capability answer from the model
        alone and report no sources.
        """
        return GroundedAnswer(text=self.generate(query), sources=[])
