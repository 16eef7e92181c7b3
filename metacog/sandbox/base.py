from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class SandboxResult:
    stdout: str = ""
    stderr: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"stdout": self.stdout, "stderr": self.stderr}


class CodeSandbox(ABC):
    """
    Abstract execution backend for untrusted Python snippets.

    A sandbox is the boundary between agent cognition and real
    computation. Implementations must:
        • Capture standard output and standard error as text
        • Report every failure (syntax, runtime, timeout, transport)
          through `stderr` instead of raising
        • Leave no state behind between calls
    """

    @abstractmethod
    def run(self, code: str) -> SandboxResult:
        """
        Execute a code snippet.

        Parameters
        ----------
        code : str
            Python source to execute.

        Returns
        -------
        SandboxResult
            Captured output streams.
        """
        raise NotImplementedError

    def health(self) -> bool:
        """Default implementation assumes healthy."""
        return True
