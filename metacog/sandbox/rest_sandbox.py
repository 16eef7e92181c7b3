import requests
import logging
from typing import Dict, Optional

from .base import CodeSandbox, SandboxResult

logger = logging.getLogger(__name__)


class RestSandbox(CodeSandbox):
    """
    Remote code execution over HTTP.

    Responsible ONLY for transport. The remote executor receives
    `{"code": ...}` and must answer `{"stdout": ..., "stderr": ...}`.
    """

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout_seconds: int = 30,
    ):
        self.url = base_url.rstrip("/")
        self.headers = headers or {}
        self.timeout_seconds = timeout_seconds

    def run(self, code: str) -> SandboxResult:

        logger.info("[REST SANDBOX] POST %s | %d chars", self.url, len(code or ""))

        try:
            response = requests.post(
                self.url,
                json={"code": code},
                headers=self.headers,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            return SandboxResult(stdout="", stderr=f"REST transport failure (POST {self.url}): {e}")

        # ------------------------------------------------------------
        # Response Parsing
        # ------------------------------------------------------------

        try:
            data = response.json()
        except ValueError:
            return SandboxResult(
                stdout="",
                stderr=f"Remote executor did not return valid JSON. Response text: {response.text}",
            )

        if not isinstance(data, dict):
            return SandboxResult(stdout="", stderr=f"Invalid response format from remote executor: {data}")

        return SandboxResult(
            stdout=str(data.get("stdout") or ""),
            stderr=str(data.get("stderr") or ""),
        )
