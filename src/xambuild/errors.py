"""Exception hierarchy shared by the invocation core and the tool runners."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple


class XamBuildError(Exception):
    """Base class for every error raised by xambuild."""


class ConfigurationError(XamBuildError):
    """Required input is missing or invalid. Raised before any process starts."""


class ToolNotFoundError(XamBuildError):
    """No executable could be resolved for a logical tool name."""

    def __init__(self, tool_name: str, attempted: Sequence[str]) -> None:
        self.tool_name = tool_name
        self.attempted: List[str] = list(attempted)
        lines = "\n".join(f"  - {p}" for p in self.attempted) or "  (no candidates)"
        super().__init__(f"Could not locate executable for '{tool_name}'. Tried:\n{lines}")


class ToolExecutionError(XamBuildError):
    """The external process could not be started or exited with a failing status."""

    def __init__(
        self,
        tool_name: str,
        arguments: str,
        exit_code: Optional[int],
        output: str = "",
        reason: str = "",
    ) -> None:
        self.tool_name = tool_name
        self.arguments = arguments
        self.exit_code = exit_code
        self.output = output
        if reason:
            message = f"{tool_name}: {reason} (arguments: {arguments})"
        else:
            message = f"{tool_name}: process returned an error (exit code {exit_code}) (arguments: {arguments})"
        if output:
            message = f"{message}\n{output}"
        super().__init__(message)


class RetryExhaustedError(XamBuildError):
    """A retried operation failed on every permitted attempt."""

    def __init__(self, operation: str, attempts: int, last_error: Optional[BaseException] = None) -> None:
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Failed to {operation} after {attempts} attempt(s)")


class BatchOperationError(XamBuildError):
    """One or more files in a batch upload/submit could not be processed."""

    def __init__(self, operation: str, failures: Sequence[Tuple[str, XamBuildError]]) -> None:
        self.operation = operation
        self.failures = list(failures)
        names = ", ".join(name for name, _ in self.failures)
        super().__init__(f"Failed to {operation} {len(self.failures)} file(s): {names}")
