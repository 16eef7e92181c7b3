from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence
import logging

from ..knowledge.nodes import KnowledgeNode
from ..models.oracle import user_message
from ..tools.builtin import EXECUTE_PYTHON_TOOL, WEB_SEARCH_TOOL
from ..tools.handlers import render_execution, run_web_search
from .registry import SpecialistAgent

logger = logging.getLogger(__name__)


SPECIALIST_TOOLS = [EXECUTE_PYTHON_TOOL.to_declaration(), WEB_SEARCH_TOOL.to_declaration()]

TASK_INSTRUCTIONS = (
    "Engage your cognitive process. Based on the Mission Context and your recent history, "
    "generate the next logical step in your research. YOUR WORK MUST DIRECTLY ADDRESS THE "
    "CURRENT MISSION OBJECTIVE. Your output should be a single, concise Markdown-formatted "
    "response representing your next intellectual step. If your purpose is to test a "
    "hypothesis with code, you MUST use the 'execute_python_code' tool if you have been "
    "granted access to it. If your primary function requires a tool (like web search), "
    "you MUST use it."
)


@dataclass(frozen=True)
class SpecialistOutput:
    agent_id: str
    content: str

    @property
    def is_empty(self) -> bool:
        return not self.content


def _node_list(nodes: Sequence[KnowledgeNode]) -> str:
    return "\n- " + "\n- ".join(node.summary_line() for node in nodes)


class SpecialistRunner:
    """
    Runs the parallel specialist phase of a cycle.

    Each runnable agent makes one oracle call on a worker thread. Agents
    only read the graph and the index; the only write is to their own
    journal stream. An OracleError from any agent propagates out of
    `run_phase` and ends the cycle.
    """

    def __init__(self, oracle, max_workers: int = 8):
        self.oracle = oracle
        self.max_workers = max_workers

    # ------------------------------------------------------------------
    # Phase
    # ------------------------------------------------------------------

    def run_phase(
        self,
        context,
        agents: Sequence[SpecialistAgent],
        is_running: Optional[Callable[[], bool]] = None,
    ) -> List[SpecialistOutput]:
        """
        Run every agent once; results come back in activation order.

        Returns an empty list when `is_running` turns false while
        results are still arriving.
        """

        if not agents:
            return []

        related = context.related_knowledge(context.objective)

        logger.info("[SPECIALISTS] Phase started | agents=%d", len(agents))

        outputs: Dict[str, SpecialistOutput] = {}
        workers = min(self.max_workers, len(agents))

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="specialist") as pool:
            futures = {
                pool.submit(self.run_step, context, agent, related): agent
                for agent in agents
            }

            try:
                for future in as_completed(futures):
                    agent = futures[future]
                    outputs[agent.id] = future.result()

                    if is_running is not None and not is_running():
                        logger.info("[SPECIALISTS] Stop requested; abandoning phase")
                        return []
            finally:
                for future in futures:
                    future.cancel()

        return [outputs[agent.id] for agent in agents]

    # ------------------------------------------------------------------
    # Single Step
    # ------------------------------------------------------------------

    def build_prompt(self, context, agent: SpecialistAgent, related: Sequence[KnowledgeNode]) -> str:

        nodes = context.graph.all()
        knowledge_base = _node_list(nodes) if nodes else "is empty."

        related_block = ""
        if related:
            related_block = (
                "\n**Semantically Related Knowledge (from Collective Consciousness):**"
                + _node_list(related)
            )

        return (
            f"{agent.mission_prompt}\n\n"
            "**Mission Context:**\n"
            f"- **Active Research Vector:** {context.research_vector}\n"
            f"- **Current Mission Objective:** {context.objective}\n"
            f"- **Persistent Knowledge Graph Summary:** {knowledge_base}{related_block}\n\n"
            f"**Your Task:**\n{TASK_INSTRUCTIONS}\n\n"
            f"<recent_history>\n{context.journal.history(agent.id)}\n</recent_history>\n"
        )

    def run_step(self, context, agent: SpecialistAgent, related: Sequence[KnowledgeNode] = ()) -> SpecialistOutput:

        prompt = self.build_prompt(context, agent, related)
        tools = SPECIALIST_TOOLS if agent.has_tools else None

        response = self.oracle.converse([user_message(prompt)], tools=tools)

        call = response.first_call
        if call is not None:

            if call.tool_name == EXECUTE_PYTHON_TOOL.name and call.arguments.get("code"):
                result = context.sandbox.run(call.arguments["code"])
                text = render_execution(result)
                context.journal.append(agent.id, text)
                return SpecialistOutput(agent.id, text)

            if call.tool_name == WEB_SEARCH_TOOL.name:
                query = str(call.arguments.get("query", ""))
                answer = run_web_search(context, agent.id, query)
                if answer is None:
                    return SpecialistOutput(agent.id, f"Web search for \"{query}\" failed.")
                return SpecialistOutput(agent.id, answer.text)

            logger.debug("[SPECIALISTS] %s requested unsupported tool %s", agent.id, call.tool_name)

        if response.text:
            context.journal.append(agent.id, response.text)
            return SpecialistOutput(agent.id, response.text)

        return SpecialistOutput(agent.id, "")
