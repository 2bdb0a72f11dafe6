from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from xambuild.core.arguments import ArgumentSequence

_OUTPUT_TAIL_LINES = 20


@dataclass(frozen=True)
class InvocationResult:
    """Outcome of one external tool process.

    Produced by the process runner and consumed right away by the tool
    runner, which decides whether a non-zero exit code is fatal.
    """

    tool_name: str
    executable: Path
    arguments: ArgumentSequence
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    launcher: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def command_line(self) -> str:
        """Secret-redacted command line, safe to log or show to the user."""
        parts = [*self.launcher, str(self.executable)]
        rendered = self.arguments.render_safe()
        if rendered:
            parts.append(rendered)
        return " ".join(parts)

    def output_tail(self, lines: Optional[int] = None) -> str:
        """Last lines of combined output, used in failure messages."""
        n = lines or _OUTPUT_TAIL_LINES
        combined = (self.stdout + self.stderr).rstrip().splitlines()
        return "\n".join(combined[-n:])
