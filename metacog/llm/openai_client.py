import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError

from ..models.tool_call import ToolCall
from ..models.oracle import OracleResponse, GroundedAnswer, Source
from .client import GenerationClient, OracleError, decode_arguments

logger = logging.getLogger(__name__)


class OpenAIClient(GenerationClient):
    """
    OpenAI generation backend.

    Chat completions carry the tool-calling conversation; grounded
    search goes through the Responses API web-search tool.
    Any OpenAI-compatible endpoint works through `base_url`.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        search_model: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: float = 120,
    ):
        self.model = model
        self.search_model = search_model or model
        self.client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout_seconds)

    # ---------------------------------------------------------
    # Conversation
    # ---------------------------------------------------------

    def converse(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> OracleResponse:

        kwargs: Dict[str, Any] = {"model": self.model, "messages": messages}

        if tools:
            kwargs["tools"] = tools

        if response_schema:
            kwargs["response_format"] = {"type": "json_object"}

        logger.debug(
            "[OPENAI] converse | model=%s | messages=%d | tools=%d",
            self.model,
            len(messages),
            len(tools or []),
        )

        try:
            response = self.client.chat.completions.create(**kwargs)
        except OpenAIError as e:
            raise OracleError(f"OpenAI request failed: {e}") from e

        if not response.choices:
            return OracleResponse(text=None)

        message = response.choices[0].message

        calls = [
            ToolCall(
                tool_name=tc.function.name,
                arguments=decode_arguments(tc.function.arguments),
                id=tc.id,
            )
            for tc in (message.tool_calls or [])
        ]

        return OracleResponse(text=message.content, tool_calls=calls)

    # ---------------------------------------------------------
    # Grounded Search
    # ---------------------------------------------------------

    def grounded_search(self, query: str) -> GroundedAnswer:

        try:
            response = self.client.responses.create(
                model=self.search_model,
                tools=[{"type": "web_search_preview"}],
                input=query,
            )
        except OpenAIError as e:
            raise OracleError(f"OpenAI web search failed: {e}") from e

        sources: List[Source] = []
        seen = set()

        for item in response.output or []:
            for part in getattr(item, "content", None) or []:
                for annotation in getattr(part, "annotations", None) or []:
                    if getattr(annotation, "type", None) != "url_citation":
                        continue
                    if annotation.url in seen:
                        continue
                    seen.add(annotation.url)
                    sources.append(
                        Source(uri=annotation.url, title=getattr(annotation, "title", "") or "")
                    )

        return GroundedAnswer(text=response.output_text or "", sources=sources)
