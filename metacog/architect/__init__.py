"""
The Metacognitive Architect: prompt, tool-dispatch conversation,
tolerant payload parsing and synthesis application.
"""

from .parser import SynthesisError, parse_synthesis
from .prompt_builder import ArchitectPromptBuilder, SYNTHESIS_SCHEMA
from .synthesis import ArchitectPayload, SynthesisApplier
from .loop import ToolDispatchLoop, ArchitectTurn

__all__ = [
    "SynthesisError",
    "parse_synthesis",
    "ArchitectPromptBuilder",
    "SYNTHESIS_SCHEMA",
    "ArchitectPayload",
    "SynthesisApplier",
    "ToolDispatchLoop",
    "ArchitectTurn",
]
