import json
import uuid
from typing import Any, Dict, List, Optional

import requests

from ..models.tool_call import ToolCall
from ..models.oracle import OracleResponse
from .client import GenerationClient, OracleError, decode_arguments


class OllamaClient(GenerationClient):
    """
    Ollama generation transport client.
    Local model backend.
    """

    def __init__(
        self,
        model: str = "llama3.1",
        base_url: str = "http://localhost:11434/api/chat",
        timeout_seconds: int = 180,
    ):
        self.model = model
        self.url = base_url
        self.timeout = timeout_seconds

    # ---------------------------------------------------------
    # Main Chat Interface
    # ---------------------------------------------------------

    def converse(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> OracleResponse:

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [self._to_ollama_message(m) for m in messages],
            "stream": False,
        }

        if tools:
            payload["tools"] = tools

        if response_schema:
            payload["format"] = response_schema  # Structured output enforcement

        try:
            response = requests.post(
                self.url,
                json=payload,
                timeout=self.timeout,
                proxies={"http": None, "https": None},
            )

            response.raise_for_status()

        except requests.Timeout as e:
            raise OracleError("Ollama request timed out") from e

        except requests.RequestException as e:
            raise OracleError(f"Ollama request failed: {str(e)}") from e

        try:
            message = response.json()["message"]
        except (KeyError, ValueError) as e:
            raise OracleError(
                f"Unexpected Ollama response format: {str(e)}"
            ) from e

        calls = []
        for raw_call in message.get("tool_calls") or []:
            function = raw_call.get("function", {})
            calls.append(
                ToolCall(
                    tool_name=function.get("name", ""),
                    arguments=decode_arguments(function.get("arguments")),
                    id=raw_call.get("id") or f"call_{uuid.uuid4().hex[:24]}",
                )
            )

        return OracleResponse(text=message.get("content") or None, tool_calls=calls)

    # ---------------------------------------------------------
    # Message Conversion
    # ---------------------------------------------------------

    @staticmethod
    def _to_ollama_message(message: Dict[str, Any]) -> Dict[str, Any]:
        """Ollama expects tool arguments as objects, not JSON strings."""

        if message.get("role") == "assistant" and message.get("tool_calls"):
            return {
                "role": "assistant",
                "content": message.get("content") or "",
                "tool_calls": [
                    {
                        "function": {
                            "name": tc["function"]["name"],
                            "arguments": decode_arguments(tc["function"]["arguments"]),
                        }
                    }
                    for tc in message["tool_calls"]
                ],
            }

        if message.get("role") == "tool":
            content = message.get("content")
            if not isinstance(content, str):
                content = json.dumps(content)
            return {"role": "tool", "content": content, "tool_name": message.get("name", "")}

        return {"role": message.get("role", "user"), "content": message.get("content") or ""}
