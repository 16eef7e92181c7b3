"""
Architect tool layer: declarations, validation, dispatch and effects.
"""

from .schema import Tool
from .registry import ToolRegistry
from .validator import ArgumentValidator, ArgumentValidationError
from .handlers import ToolArgumentError, create_tool_registry
from .dispatcher import ToolDispatcher
from .verifier import ProofVerifier

__all__ = [
    "Tool",
    "ToolRegistry",
    "ArgumentValidator",
    "ArgumentValidationError",
    "ToolArgumentError",
    "create_tool_registry",
    "ToolDispatcher",
    "ProofVerifier",
]
