from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional, Tuple, Union

from pydantic import Field, field_validator

from xambuild.core.arguments import ArgumentBuilder, ArgumentSequence
from xambuild.core.runner import ToolRunner, ToolSpec
from xambuild.core.settings import ToolSettings
from xambuild.core.tool_result import InvocationResult

if TYPE_CHECKING:
    from xambuild.context import BuildContext

MSBUILD = ToolSpec(
    name="msbuild",
    executable_names=("msbuild", "msbuild.exe", "xbuild", "xbuild.exe"),
    fallback_paths=(
        "/Library/Frameworks/Mono.framework/Versions/Current/Commands/msbuild",
    ),
)

VERBOSITY_LEVELS = ("quiet", "minimal", "normal", "detailed", "diagnostic")


class MSBuildSettings(ToolSettings):
    configuration: str = "Release"
    targets: Tuple[str, ...] = ()
    properties: Dict[str, str] = Field(default_factory=dict)
    verbosity: Optional[str] = None
    # 0 means "all cores" (plain /m)
    max_cpu_count: Optional[int] = Field(default=None, ge=0)

    @field_validator("verbosity")
    @classmethod
    def validate_verbosity(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if v.lower() not in VERBOSITY_LEVELS:
            raise ValueError(f"Must be one of {', '.join(VERBOSITY_LEVELS)}")
        return v.lower()

    def with_target(self, target: str) -> "MSBuildSettings":
        if target in self.targets:
            return self
        return self.replace(targets=(*self.targets, target))


def build_arguments(project: Path, settings: MSBuildSettings) -> ArgumentSequence:
    builder = ArgumentBuilder()
    if settings.verbosity:
        builder.append_switch("/v", settings.verbosity)
    if settings.max_cpu_count is not None:
        if settings.max_cpu_count == 0:
            builder.append("/m")
        else:
            builder.append_switch("/m", str(settings.max_cpu_count))
    builder.append_switch("/p", f"Configuration={settings.configuration}")
    # Sorted for a stable command line
    for key in sorted(settings.properties):
        builder.append_switch("/p", f"{key}={settings.properties[key]}")
    if settings.targets:
        builder.append_switch("/t", ";".join(settings.targets))
    builder.append_quoted(str(project))
    return builder.build()


class MSBuildRunner:
    def __init__(self, context: "BuildContext") -> None:
        self._tool = ToolRunner(MSBUILD, context)

    def build(self, project_file: Union[str, Path], settings: MSBuildSettings) -> InvocationResult:
        project = self._tool.require_file(project_file, settings, "Project File")
        return self._tool.run(settings, build_arguments(project, settings))
