import logging
import subprocess
import sys

from .base import CodeSandbox, SandboxResult

logger = logging.getLogger(__name__)


class SubprocessSandbox(CodeSandbox):
    """
    Runs snippets in a fresh, isolated interpreter process.

    `-I` keeps the child away from user site-packages and PYTHON*
    environment variables. This is process isolation only, not a
    security boundary.
    """

    def __init__(self, timeout_seconds: int = 10, python_executable: str = None):
        self.timeout_seconds = timeout_seconds
        self.python_executable = python_executable or sys.executable

    def run(self, code: str) -> SandboxResult:

        logger.info("[SANDBOX] Executing %d chars of code", len(code or ""))

        try:
            completed = subprocess.run(
                [self.python_executable, "-I", "-c", code or ""],
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired as e:
            stdout = e.stdout or ""
            if isinstance(stdout, bytes):
                stdout = stdout.decode("utf-8", errors="replace")
            return SandboxResult(
                stdout=stdout,
                stderr=f"Execution timed out after {self.timeout_seconds}s",
            )
        except OSError as e:
            logger.error("[SANDBOX] Could not start interpreter: %s", e)
            return SandboxResult(stdout="", stderr=f"Sandbox unavailable: {e}")

        return SandboxResult(stdout=completed.stdout, stderr=completed.stderr)
