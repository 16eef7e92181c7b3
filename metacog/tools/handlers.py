"""
Effects behind the architect's tools.

Every handler has the signature ``handler(context, args) -> dict`` where
`context` is the live MissionContext and `args` has already passed
schema validation. A handler raises ToolArgumentError when an argument
references something that does not exist; the graph and the agent
registry are left untouched in that case.
"""

from typing import Any, Dict, List, Optional
import logging

from ..agents.journal import ARCHITECT_STREAM
from ..agents.seeds import INTUITIONIST_ID, SKEPTIC_ID, seed_by_id
from ..models.oracle import GroundedAnswer
from ..sandbox.base import SandboxResult
from .builtin import ARCHITECT_TOOLS
from .registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolArgumentError(ValueError):
    """Raised when a tool argument references an unknown node or agent."""
    pass


# ----------------------------------------------------------------------
# Shared helpers
# ----------------------------------------------------------------------

def _preview(text: str, limit: int = 200) -> str:
    return f"{(text or '')[:limit]}..."


def _require_nodes(context, tool_name: str, *node_ids: str) -> List[Any]:
    nodes = [context.graph.get(node_id) for node_id in node_ids]
    missing = [node_id for node_id, node in zip(node_ids, nodes) if node is None]

    if missing:
        context.journal.architect(
            "#### Invalid Tool Call Blocked\n"
            f"- **Tool:** `{tool_name}`\n"
            f"- **Error:** Non-existent node ID(s): `{', '.join(missing)}`.\n"
            "- **Action:** Instructing Architect to select valid nodes.",
            kind="meta",
        )
        raise ToolArgumentError(
            f"The following node ID(s) do not exist: {', '.join(missing)}. Please review "
            "the provided Knowledge Graph and choose valid IDs for your next action."
        )

    return nodes


def _require_agents(context, *agent_ids: str) -> None:
    missing = [agent_id for agent_id in agent_ids if not context.agents.has(agent_id)]
    if missing:
        raise ToolArgumentError(
            f"The following agent ID(s) are not active: {', '.join(missing)}. "
            f"Active agents: {', '.join(context.agents.active_ids())}."
        )


def _reactive_prompt(context, agent_id: str) -> str:
    """Current prompt of a reactive seed, or its default if it was retired."""
    agent = context.agents.get(agent_id)
    if agent is not None:
        return agent.mission_prompt
    return seed_by_id(agent_id).render(context.config.goal)


def render_execution(result: SandboxResult) -> str:
    """Journal markdown for a sandbox run."""
    text = (
        "#### Code Execution Result:\n"
        "**STDOUT**\n"
        f"```\n{result.stdout or '(empty)'}\n```"
    )
    if result.stderr:
        text += f"\n**STDERR**\n```\n{result.stderr}\n```"
    return text


def run_web_search(context, stream: str, query: str) -> Optional[GroundedAnswer]:
    """
    Grounded search on behalf of `stream`.

    A failing search is logged to the journal and returns None; it never
    propagates, whichever agent asked.
    """
    try:
        answer = context.oracle.grounded_search(query)
    except Exception as e:
        logger.error("[WEB SEARCH] '%s' failed: %s", query, e)
        context.journal.append(stream, f"**ERROR:** Web search for \"{query}\" failed.")
        return None

    text = f"#### Web Search Result for \"{query}\"\n{answer.text}"
    if answer.sources:
        text += "\n\n**Sources:**\n" + "\n".join(
            f"- [{s.title or s.uri}]({s.uri})" for s in answer.sources
        )
    context.journal.append(stream, text)
    return answer


# ----------------------------------------------------------------------
# Reactive agents
# ----------------------------------------------------------------------

def invoke_intuitionist(context, args: Dict[str, Any]) -> Dict[str, Any]:
    node_a, node_b = _require_nodes(
        context, "invoke_intuitionist", args["node_id_A"], args["node_id_B"]
    )

    prompt = (
        f"{_reactive_prompt(context, INTUITIONIST_ID)}\n\n"
        "**Your Specific Task:**\n"
        "The Metacognitive Architect has summoned you to transcend a critical impasse. "
        "Meditate on the following two concepts and reveal the hidden connection, the "
        "unifying abstraction that bridges their worlds.\n\n"
        f"**CONCEPT A: {node_a.id} ({node_a.type.value})**\n```\n{node_a.content}\n```\n\n"
        f"**CONCEPT B: {node_b.id} ({node_b.type.value})**\n```\n{node_b.content}\n```\n\n"
        "Transmit your illumination now."
    )

    new_concept = context.oracle.generate(prompt)

    context.journal.append(INTUITIONIST_ID, f"#### CONCEPTUAL LEAP\n{new_concept}", kind="intuition")
    context.journal.architect(
        "#### EUREKA! Intuitionist Invoked.\n"
        f"- **Reason:** *{args['reason_for_invocation']}*\n"
        f"- **Anchor A:** {node_a.id}\n"
        f"- **Anchor B:** {node_b.id}\n"
        f"- **Resulting Abstraction:** {_preview(new_concept)}",
        kind="meta",
    )

    return {"new_concept": new_concept}


def challenge_with_skeptic(context, args: Dict[str, Any]) -> Dict[str, Any]:
    (target,) = _require_nodes(context, "challenge_with_skeptic", args["node_id_to_challenge"])

    prompt = (
        f"{_reactive_prompt(context, SKEPTIC_ID)}\n\n"
        "**Your Specific Task:**\n"
        "You have been summoned by the Metacognitive Architect to challenge the following "
        "knowledge node. Apply your full cognitive process to find its flaws.\n\n"
        f"**TARGET NODE: {target.id} ({target.type.value})**\n```\n{target.content}\n```\n\n"
        "Provide your critique now."
    )

    critique = context.oracle.generate(prompt)

    context.journal.append(SKEPTIC_ID, critique)
    context.journal.architect(
        "#### Adversarial Challenge Initiated\n"
        f"- **Target:** {target.id}\n"
        f"- **Reason:** *{args['reason_for_challenge']}*\n"
        f"- **Skeptic's Critique Summary:** {_preview(critique)}",
        kind="challenge",
    )

    return {"critique": critique}


# ----------------------------------------------------------------------
# Lifecycle
# ----------------------------------------------------------------------

def deploy_new_specialist_agent(context, args: Dict[str, Any]) -> Dict[str, Any]:
    agent_id = args["specialist_id"]
    lifespan = args.get("lifespan_cycles")

    deployed = context.deploy_agent(
        agent_id,
        args["mission_prompt"],
        required_tools=args.get("required_tools") or (),
        lifespan_cycles=int(lifespan) if lifespan is not None else None,
        title=args.get("title"),
    )

    if not deployed:
        raise ToolArgumentError(
            f"Agent {agent_id} already exists. Choose a different specialist_id."
        )

    return {"message": f"Agent {agent_id} deployed successfully."}


def retire_agent(context, args: Dict[str, Any]) -> Dict[str, Any]:
    agent_id = args["agent_id"]
    if context.retire_agent(agent_id, args["reason"]):
        return {"message": f"Agent {agent_id} retired."}
    return {"message": f"Agent {agent_id} was not active."}


def modify_agent_prompt(context, args: Dict[str, Any]) -> Dict[str, Any]:
    agent_id = args["agent_id"]
    _require_agents(context, agent_id)

    new_prompt = args["new_mission_prompt"]
    reason = args["reason"]

    context.agents.modify_prompt(agent_id, new_prompt)

    context.journal.architect(
        f"**Agent Evolution:** The core prompt for **{agent_id}** has been modified by the "
        f"Architect.\n\n**Reason:** *{reason}*",
        kind="meta",
    )
    context.journal.append(
        agent_id,
        "**CORE DIRECTIVE UPDATED:** My mission prompt has been evolved by the Architect.\n\n"
        f"**Reason:** *{reason}*\n\n**New Prompt:**\n{new_prompt}",
        kind="meta",
    )

    return {"message": f"Agent {agent_id} was modified."}


# ----------------------------------------------------------------------
# Verification and experiments
# ----------------------------------------------------------------------

def request_formal_verification(context, args: Dict[str, Any]) -> Dict[str, Any]:
    (node,) = _require_nodes(context, "request_formal_verification", args["node_id"])

    verified, feedback = context.verifier.verify(args["proof_code"])
    context.graph.set_verified(node.id, verified)

    context.journal.architect(
        f"#### Formal Verification Result for Node {node.id}\n"
        f"- **Status:** {'VERIFIED' if verified else 'FAILED'}\n"
        f"- **Verifier Feedback:** *{feedback}*",
        kind="verification",
    )

    return {"verified": verified, "feedback": feedback}


def execute_python_code(context, args: Dict[str, Any]) -> Dict[str, Any]:
    code = args["code"]

    context.journal.architect(
        f"**Architect initiated code experiment:** *{args['reason']}*\n```python\n{code}\n```"
    )

    result = context.sandbox.run(code)
    context.journal.architect(render_execution(result))

    return result.to_dict()


def perform_web_search(context, args: Dict[str, Any]) -> Dict[str, Any]:
    query = args["query"]
    answer = run_web_search(context, ARCHITECT_STREAM, query)

    if answer is None:
        return {"summary": "Web search failed.", "sources": []}

    return {
        "summary": answer.text,
        "sources": [s.to_dict() for s in answer.sources],
    }


# ----------------------------------------------------------------------
# Collaboration
# ----------------------------------------------------------------------

def request_peer_review(context, args: Dict[str, Any]) -> Dict[str, Any]:
    reviewer = args["reviewing_agent_id"]
    target = args["target_agent_id"]
    task = args["review_task"]

    _require_agents(context, reviewer, target)

    prompt = (
        f"You are {reviewer}. Your primary cognitive functions are temporarily being "
        "repurposed for a peer review task by the Metacognitive Architect.\n\n"
        f"**Your One-Time Task:**\n{task}\n\n"
        f"**Material to Review (Last 5 outputs from {target}):**\n"
        f"<history>\n{context.journal.history(target, 5)}\n</history>\n\n"
        "Provide your review as a concise, critical, and constructive Markdown-formatted "
        "response. After this, you will return to your original mission."
    )

    review = context.oracle.generate(prompt)

    context.journal.architect(
        "#### Peer Review Initiated\n"
        f"- **Reviewer:** {reviewer}\n"
        f"- **Target:** {target}\n"
        f"- **Task:** *{task}*\n\n"
        f"**Review Result:**\n{review}",
        kind="peer",
    )
    context.journal.append(
        reviewer,
        f"**Peer Review Task Completed.** I have reviewed {target}'s work.",
        kind="peer",
    )
    context.journal.append(
        target,
        f"**My work has been reviewed by {reviewer}.**\n\n**Review:**\n{review}",
        kind="peer",
    )

    return {"review_summary": review}


# ----------------------------------------------------------------------
# Handler table
# ----------------------------------------------------------------------

BUILTIN_HANDLERS = {
    "invoke_intuitionist": invoke_intuitionist,
    "challenge_with_skeptic": challenge_with_skeptic,
    "deploy_new_specialist_agent": deploy_new_specialist_agent,
    "request_formal_verification": request_formal_verification,
    "execute_python_code": execute_python_code,
    "retire_agent": retire_agent,
    "perform_web_search": perform_web_search,
    "modify_agent_prompt": modify_agent_prompt,
    "request_peer_review": request_peer_review,
}


def create_tool_registry() -> ToolRegistry:
    """Registry holding every architect tool bound to its effect."""
    registry = ToolRegistry()
    for tool in ARCHITECT_TOOLS:
        registry.register(tool, BUILTIN_HANDLERS[tool.name])
    return registry
