"""Dependency bundle handed to every runner and operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from xambuild.config import XamBuildConfig
from xambuild.core.environment import BuildEnvironment
from xambuild.core.filesystem import FileSystem
from xambuild.core.process import ProcessRunner
from xambuild.core.resolver import ToolRegistry


@dataclass
class BuildContext:
    file_system: FileSystem = field(default_factory=FileSystem)
    environment: BuildEnvironment = field(default_factory=BuildEnvironment)
    process_runner: ProcessRunner = field(default_factory=ProcessRunner)
    registry: ToolRegistry = field(default_factory=ToolRegistry)
    config: XamBuildConfig = field(default_factory=XamBuildConfig)

    @classmethod
    def from_config(
        cls,
        config: XamBuildConfig,
        working_directory: Optional[Path] = None,
        process_runner: Optional[ProcessRunner] = None,
    ) -> "BuildContext":
        env = BuildEnvironment(working_directory=working_directory or Path.cwd())
        return cls(
            environment=env,
            process_runner=process_runner or ProcessRunner(),
            registry=ToolRegistry(tools_dir=config.tools_dir, tool_paths=dict(config.tool_paths)),
            config=config,
        )
