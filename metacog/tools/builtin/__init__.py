from .declarations import (
    ARCHITECT_TOOLS,
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

__all__ = [
    "ARCHITECT_TOOLS",
    "INVOKE_INTUITIONIST_TOOL",
    "CHALLENGE_WITH_SKEPTIC_TOOL",
    "DEPLOY_SPECIALIST_TOOL",
    "FORMAL_VERIFICATION_TOOL",
    "EXECUTE_PYTHON_TOOL",
    "RETIRE_AGENT_TOOL",
    "WEB_SEARCH_TOOL",
    "MODIFY_PROMPT_TOOL",
    "PEER_REVIEW_TOOL",
]
