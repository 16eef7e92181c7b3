from metacog.tools.schema import Tool


def _params(properties, required):
    return {"type": "object", "properties": properties, "required": list(required)}


def _string(description):
    return {"type": "string", "description": description}


INVOKE_INTUITIONIST_TOOL = Tool(
    name="invoke_intuitionist",
    description=(
        "The ultimate last resort. Invokes the Intuitionist (Specialist-6) to generate a "
        "radical conceptual leap. Use ONLY when in a state of deep, paradoxical stagnation "
        "where all other strategies have failed. This is a high-cost, high-reward action "
        "to break intellectual deadlocks."
    ),
    parameters=_params(
        {
            "node_id_A": _string(
                "The ID of the first seemingly unrelated but promising node to serve as "
                "a conceptual anchor."
            ),
            "node_id_B": _string(
                "The ID of the second seemingly unrelated but promising node to serve as "
                "a conceptual anchor."
            ),
            "reason_for_invocation": _string(
                "A brief justification for why this extreme measure is necessary, "
                "explaining the nature of the intellectual deadlock."
            ),
        },
        ["node_id_A", "node_id_B", "reason_for_invocation"],
    ),
    tags=("builtin", "reactive-agent"),
)


CHALLENGE_WITH_SKEPTIC_TOOL = Tool(
    name="challenge_with_skeptic",
    description=(
        "Assigns the Skeptic (Specialist-5) to critically analyze and attempt to refute a "
        "specific node in the knowledge graph. This is the primary method for vetting new "
        "hypotheses before committing resources to them."
    ),
    parameters=_params(
        {
            "node_id_to_challenge": _string(
                "The ID of the HYPOTHESIS or LEMMA node that must be rigorously tested."
            ),
            "reason_for_challenge": _string(
                "A brief justification for why this node requires adversarial review."
            ),
        },
        ["node_id_to_challenge", "reason_for_challenge"],
    ),
    tags=("builtin", "reactive-agent"),
)


DEPLOY_SPECIALIST_TOOL = Tool(
    name="deploy_new_specialist_agent",
    description=(
        "Creates, deploys, and activates a new temporary specialist agent, often as part "
        "of a \"Task Force\" to solve a specific sub-goal."
    ),
    parameters=_params(
        {
            "specialist_id": _string(
                "A unique ID for the new agent, e.g., 'task_force_lemma5_prover'."
            ),
            "mission_prompt": _string(
                "The full, detailed system prompt that will define the new agent's "
                "hyper-focused behavior and goals."
            ),
            "title": _string("A short, human-readable title for the agent."),
            "icon_class": _string("A Font Awesome icon class, e.g., \"fa-bullseye\"."),
            "required_tools": {
                "type": "array",
                "items": {"type": "string"},
                "description": (
                    "List of tool names the new agent needs, e.g., ['execute_python_code']."
                ),
            },
            "lifespan_cycles": {
                "type": "integer",
                "description": (
                    "Number of cycles the agent should remain active before auto-retiring. "
                    "Use short lifespans for task forces."
                ),
            },
        },
        ["specialist_id", "mission_prompt", "title"],
    ),
    tags=("builtin", "lifecycle"),
)


FORMAL_VERIFICATION_TOOL = Tool(
    name="request_formal_verification",
    description=(
        "Sends a formal proof (e.g., in Lean/Coq) to an external, trusted verifier. This is "
        "the ultimate ground truth. Use this on any node of type 'THEOREM' or 'LEMMA' that "
        "contains a formal proof to confirm its absolute correctness."
    ),
    parameters=_params(
        {
            "node_id": _string(
                "The ID of the node in the Knowledge Graph containing the formal proof to "
                "be verified."
            ),
            "proof_code": _string(
                "The complete, formal proof code snippet extracted from the node content."
            ),
        },
        ["node_id", "proof_code"],
    ),
    tags=("builtin", "verification"),
)


EXECUTE_PYTHON_TOOL = Tool(
    name="execute_python_code",
    description="Runs a Python code snippet in a sandbox to test hypotheses.",
    parameters=_params(
        {
            "code": _string("The Python code to execute."),
            "reason": _string("A short justification for running this code."),
        },
        ["code", "reason"],
    ),
    tags=("builtin", "specialist", "sandbox"),
)


RETIRE_AGENT_TOOL = Tool(
    name="retire_agent",
    description=(
        "Deactivates and removes a specialist agent from the collective, often after a "
        "task force completes its mission."
    ),
    parameters=_params(
        {
            "agent_id": _string("The ID of the agent to retire."),
            "reason": _string(
                "Justification for the retirement (e.g., 'Task Force mission accomplished')."
            ),
        },
        ["agent_id", "reason"],
    ),
    tags=("builtin", "lifecycle"),
)


WEB_SEARCH_TOOL = Tool(
    name="perform_web_search",
    description=(
        "Performs a web search to find up-to-date information, definitions, or recent "
        "publications relevant to the research. Use this when the collective lacks "
        "critical external knowledge to avoid operating in an echo chamber."
    ),
    parameters=_params(
        {"query": _string("The specific, concise query to search for.")},
        ["query"],
    ),
    tags=("builtin", "specialist", "grounding"),
)


MODIFY_PROMPT_TOOL = Tool(
    name="modify_agent_prompt",
    description=(
        "Evolves an existing agent by modifying its core mission prompt. Use this for "
        "meta-learning and adapting agent capabilities based on performance data."
    ),
    parameters=_params(
        {
            "agent_id": _string("The ID of the specialist agent to modify."),
            "new_mission_prompt": _string(
                "The new, complete system prompt for the agent. This will overwrite its "
                "previous instructions."
            ),
            "reason": _string(
                "A short justification for this evolutionary step, referencing performance "
                "if applicable."
            ),
        },
        ["agent_id", "new_mission_prompt", "reason"],
    ),
    tags=("builtin", "lifecycle"),
)


PEER_REVIEW_TOOL = Tool(
    name="request_peer_review",
    description=(
        "Facilitates direct collaboration by tasking one agent to review the work of "
        "another. This fosters decentralized critique and idea generation."
    ),
    parameters=_params(
        {
            "reviewing_agent_id": _string("The ID of the agent that will perform the review."),
            "target_agent_id": _string("The ID of the agent whose work is to be reviewed."),
            "review_task": _string(
                "A specific and concise instruction for the review, e.g., 'Critique the "
                "logical soundness of the last 3 outputs' or 'Propose an alternative "
                "approach to this theorem'."
            ),
        },
        ["reviewing_agent_id", "target_agent_id", "review_task"],
    ),
    tags=("builtin", "collaboration"),
)


ARCHITECT_TOOLS = (
    INVOKE_INTUITIONIST_TOOL,
    CHALLENGE_WITH_SKEPTIC_TOOL,
    DEPLOY_SPECIALIST_TOOL,
    FORMAL_VERIFICATION_TOOL,
    EXECUTE_PYTHON_TOOL,
    RETIRE_AGENT_TOOL,
    WEB_SEARCH_TOOL,
    MODIFY_PROMPT_TOOL,
    PEER_REVIEW_TOOL,
)
