"""Shared pytest fixtures and helpers for xambuild tests."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import List, Optional

import pytest

from xambuild.config import XamBuildConfig
from xambuild.context import BuildContext
from xambuild.core.arguments import ArgumentSequence
from xambuild.core.environment import BuildEnvironment
from xambuild.core.process import ProcessRunner
from xambuild.core.resolver import ToolRegistry
from xambuild.core.tool_result import InvocationResult


class RecordingProcessRunner(ProcessRunner):
    """Records every invocation instead of spawning a process.

    ``exit_codes`` is consumed one per call; once empty, calls exit 0.
    """

    def __init__(self, exit_codes: Optional[List[int]] = None, on_run=None) -> None:
        self.calls: List[dict] = []
        self._exit_codes = list(exit_codes or [])
        self._on_run = on_run

    def run(self, tool_name, executable, arguments: ArgumentSequence, cwd, env=None, timeout=None, launcher=()):
        self.calls.append({
            "tool_name": tool_name,
            "executable": executable,
            "arguments": arguments,
            "cwd": cwd,
            "env": env,
            "timeout": timeout,
            "launcher": list(launcher),
        })
        if self._on_run is not None:
            self._on_run(arguments)
        code = self._exit_codes.pop(0) if self._exit_codes else 0
        return InvocationResult(
            tool_name=tool_name,
            executable=executable,
            arguments=arguments,
            exit_code=code,
            stderr="" if code == 0 else "boom\n",
            launcher=list(launcher),
        )


@pytest.fixture
def workspace(tmp_path):
    """A temporary directory that acts as the working directory."""
    return tmp_path


@pytest.fixture
def tools_dir(workspace):
    d = workspace / "tools"
    d.mkdir()
    return d


@pytest.fixture
def process_runner():
    return RecordingProcessRunner()


@pytest.fixture
def make_context(workspace, tools_dir):
    """Factory for a BuildContext rooted at the workspace with a fake process runner."""

    def _make(runner: Optional[ProcessRunner] = None, config: Optional[XamBuildConfig] = None,
              platform: str = "linux", path: str = "") -> BuildContext:
        cfg = config or XamBuildConfig(tools_dir=tools_dir)
        return BuildContext(
            environment=BuildEnvironment(
                working_directory=workspace,
                platform=platform,
                variables={"PATH": path},
            ),
            process_runner=runner or RecordingProcessRunner(),
            registry=ToolRegistry(tools_dir=cfg.tools_dir, tool_paths=dict(cfg.tool_paths)),
            config=cfg,
        )

    return _make


# ── Plain helper functions ─────────────────────────────────────────────────
# Each test file imports these directly:
#   from conftest import make_file, make_executable, set_mtime

def make_file(workspace: Path, relative_path: str, content: str = "hello\n") -> Path:
    p = workspace / relative_path
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding="utf-8")
    return p


def make_executable(directory: Path, name: str) -> Path:
    p = make_file(directory, name, "#!/bin/sh\nexit 0\n")
    p.chmod(p.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return p


def set_mtime(path: Path, mtime: float) -> Path:
    os.utime(path, (mtime, mtime))
    return path
