from __future__ import annotations

import time
import logging
from typing import Any

from .registry import ToolRegistry
from .validator import ArgumentValidator, ArgumentValidationError
from .handlers import ToolArgumentError
from ..llm.client import OracleError
from ..models import ToolCall, ToolResult

logger = logging.getLogger(__name__)


class ToolDispatcher:
    """
    Applies one oracle-requested tool call to the mission.

    Every outcome except an oracle failure comes back as a ToolResult
    so the dispatch loop can feed it to the oracle. OracleError raised
    by a handler (the intuitionist, skeptic and peer-review effects call
    the oracle themselves) propagates and ends the cycle.
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self._registry = registry
        self._arg_validator = ArgumentValidator(registry)

    # ============================================================
    # MAIN EXECUTION
    # ============================================================

    def dispatch(self, context, call: ToolCall) -> ToolResult:

        start = time.monotonic()
        tool_name = call.tool_name

        try:
            entry = self._registry.get(tool_name)
        except KeyError as e:
            logger.warning("[DISPATCH] Blocked unknown tool: %s", tool_name)
            return self._blocked_result(tool_name, str(e).strip("'\""))

        # ------------------------------------------------------------
        # Argument Validation
        # ------------------------------------------------------------
        try:
            args = self._arg_validator.validate(tool_name, call.arguments)
        except ArgumentValidationError as e:
            logger.warning("[DISPATCH] %s rejected: %s", tool_name, e)
            return self._failure_result(tool_name, f"Invalid arguments: {e}", start)

        # ------------------------------------------------------------
        # Effect
        # ------------------------------------------------------------
        try:
            output = entry.handler(context, args)

        except ToolArgumentError as e:
            logger.warning("[DISPATCH] %s failed validation: %s", tool_name, e)
            return self._failure_result(tool_name, str(e), start)

        except OracleError:
            raise

        except Exception as e:
            logger.exception("[DISPATCH] %s raised", tool_name)
            return self._failure_result(tool_name, f"Tool execution failed: {e}", start)

        result = self._success_result(tool_name, output, start)

        logger.info("[DISPATCH] %s ok | latency=%dms", tool_name, result.latency_ms)
        return result

    # ============================================================
    # RESULT BUILDERS
    # ============================================================

    def _success_result(self, tool_name: str, output: Any, start_time: float) -> ToolResult:

        return ToolResult(
            tool_name=tool_name,
            status="success",
            output=output,
            error=None,
            latency_ms=self._latency_ms(start_time),
        )

    def _failure_result(self, tool_name: str, error: str, start_time: float) -> ToolResult:

        return ToolResult(
            tool_name=tool_name,
            status="failure",
            output=None,
            error=error,
            latency_ms=self._latency_ms(start_time),
        )

    def _blocked_result(self, tool_name: str, error: str) -> ToolResult:

        return ToolResult(
            tool_name=tool_name,
            status="blocked",
            output=None,
            error=error,
            latency_ms=0,
        )

    @staticmethod
    def _latency_ms(start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)

    # ------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------

    @property
    def registry(self) -> ToolRegistry:
        return self._registry
