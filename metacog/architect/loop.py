from dataclasses import dataclass, field
from typing import List, Sequence
import logging

from ..models import ToolResult
from ..models.oracle import user_message, assistant_tool_message, tool_result_message
from ..tools.dispatcher import ToolDispatcher
from .parser import parse_synthesis
from .prompt_builder import ArchitectPromptBuilder, SYNTHESIS_SCHEMA, FINAL_ANSWER_REQUEST
from .synthesis import ArchitectPayload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchitectTurn:
    """Outcome of one architect phase."""

    payload: ArchitectPayload
    tool_results: List[ToolResult] = field(default_factory=list)

    @property
    def rounds(self) -> int:
        return len(self.tool_results)


class ToolDispatchLoop:
    """
    Sequential conversation between the architect oracle and the tools.

    Each round executes exactly one tool call (the first one the oracle
    asked for) and feeds its result back, until the oracle answers with
    the synthesis JSON. After `max_tool_rounds` rounds one last request
    is sent with tools disabled.

    Raises
    ------
    OracleError
        Propagated from the oracle or from a tool effect that calls it.

    SynthesisError
        The final answer is empty or not a JSON object.
    """

    def __init__(
        self,
        oracle,
        dispatcher: ToolDispatcher,
        prompt_builder: ArchitectPromptBuilder,
        max_tool_rounds: int = 10,
    ):
        self.oracle = oracle
        self.dispatcher = dispatcher
        self.prompt_builder = prompt_builder
        self.max_tool_rounds = max_tool_rounds

    def run(self, context, specialist_outputs: Sequence) -> ArchitectTurn:

        signals = context.signals()

        if signals["chaos_intervention"]:
            context.journal.architect(
                "**! CHAOS INTERVENTION TRIGGERED !**\n\n"
                f"Stagnation count of {signals['stagnation_counter']} has breached the "
                "threshold. Forcing a radical strategic review.",
                kind="chaos",
            )
            logger.warning(
                "[ARCHITECT] Chaos intervention | stagnation=%d",
                signals["stagnation_counter"],
            )

        prompt = self.prompt_builder.build(context, specialist_outputs, signals)
        declarations = self.dispatcher.registry.declarations()

        messages = [user_message(prompt)]
        results: List[ToolResult] = []

        logger.info(
            "[ARCHITECT] Synthesis started | cycle=%d | inputs=%d",
            context.cycle,
            len(specialist_outputs),
        )

        response = self.oracle.converse(
            messages, tools=declarations, response_schema=SYNTHESIS_SCHEMA
        )

        while response.requests_tools:

            if len(results) >= self.max_tool_rounds:
                logger.warning(
                    "[ARCHITECT] Tool round cap (%d) reached; requesting final answer",
                    self.max_tool_rounds,
                )
                messages.append(user_message(FINAL_ANSWER_REQUEST))
                response = self.oracle.converse(
                    messages, tools=None, response_schema=SYNTHESIS_SCHEMA
                )
                break

            call = response.first_call

            if len(response.tool_calls) > 1:
                logger.warning(
                    "[ARCHITECT] Dropping %d extra tool call(s): %s",
                    len(response.tool_calls) - 1,
                    [c.tool_name for c in response.tool_calls[1:]],
                )

            logger.info("[ARCHITECT] Round %d | %r", len(results) + 1, call)

            result = self.dispatcher.dispatch(context, call)
            results.append(result)

            messages.append(assistant_tool_message(call))
            messages.append(tool_result_message(call, result.to_response()))

            response = self.oracle.converse(
                messages, tools=declarations, response_schema=SYNTHESIS_SCHEMA
            )

        payload = ArchitectPayload.from_dict(parse_synthesis(response.text))

        logger.info(
            "[ARCHITECT] Synthesis complete | rounds=%d | nodes=%d",
            len(results),
            len(payload.knowledge_update),
        )

        return ArchitectTurn(payload=payload, tool_results=results)
