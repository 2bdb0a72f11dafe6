from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Dict, Optional, Sequence

from xambuild.core.arguments import ArgumentSequence
from xambuild.core.tool_result import InvocationResult
from xambuild.errors import ToolExecutionError

_log = logging.getLogger(__name__)


class ProcessRunner:
    """Starts external tools and waits for them to exit."""

    def run(
        self,
        tool_name: str,
        executable: Path,
        arguments: ArgumentSequence,
        cwd: Path,
        env: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        launcher: Sequence[str] = (),
    ) -> InvocationResult:
        """Run ``executable`` with ``arguments`` and capture its exit status.

        Args:
            tool_name: Logical tool name, used in messages.
            executable: Resolved executable path.
            arguments: Built argument sequence.
            cwd: Working directory for the process.
            env: Full environment for the child, or None to inherit.
            timeout: Seconds before the process is killed, or None.
            launcher: Optional prefix, e.g. ``["/usr/bin/mono"]``.

        Returns:
            InvocationResult with exit code and captured output.

        Raises:
            ToolExecutionError: If the process cannot be started or times out.
        """
        cmd = [*launcher, str(executable), *arguments.argv()]
        safe_args = arguments.render_safe()
        _log.info("Executing: %s %s", " ".join([*launcher, str(executable)]), safe_args)

        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                errors="replace",
                cwd=str(cwd),
                env=env,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            raise ToolExecutionError(
                tool_name, safe_args, None, reason=f"timed out after {timeout}s"
            ) from None
        except OSError as exc:
            raise ToolExecutionError(
                tool_name, safe_args, None, reason=f"could not be started: {exc}"
            ) from exc

        if proc.stdout:
            _log.debug("%s stdout:\n%s", tool_name, proc.stdout.rstrip())
        if proc.stderr:
            _log.debug("%s stderr:\n%s", tool_name, proc.stderr.rstrip())

        return InvocationResult(
            tool_name=tool_name,
            executable=executable,
            arguments=arguments,
            exit_code=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            launcher=list(launcher),
        )


def check(result: InvocationResult) -> InvocationResult:
    """Raise ``ToolExecutionError`` when ``result`` reports a failing exit code."""
    if not result.ok:
        raise ToolExecutionError(
            result.tool_name,
            result.arguments.render_safe(),
            result.exit_code,
            output=result.output_tail(),
        )
    return result
