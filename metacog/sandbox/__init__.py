from .base import CodeSandbox, SandboxResult
from .subprocess_sandbox import SubprocessSandbox
from .rest_sandbox import RestSandbox

__all__ = ["CodeSandbox", "SandboxResult", "SubprocessSandbox", "RestSandbox"]
