from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from xambuild.core.arguments import ArgumentBuilder, ArgumentSequence
from xambuild.core.runner import ToolRunner, ToolSpec
from xambuild.core.settings import ToolSettings
from xambuild.core.tool_result import InvocationResult

if TYPE_CHECKING:
    from xambuild.context import BuildContext

DEFAULT_VSTOOL_PATH = "/Applications/Visual Studio.app/Contents/MacOS/vstool"

VSTOOL = ToolSpec(
    name="vstool",
    executable_names=("vstool", "vstool.exe", "vstool.cmd", "vstool.sh"),
    fallback_paths=(DEFAULT_VSTOOL_PATH,),
)


class VSToolSettings(ToolSettings):
    """Settings for the IDE command-line build tool."""

    # Adds -v to the command
    increase_verbosity: bool = False
    configuration: str = "Debug|iPhoneSimulator"
    target: str = "Build"


def build_arguments(project: Path, settings: VSToolSettings) -> ArgumentSequence:
    builder = ArgumentBuilder()
    if settings.increase_verbosity:
        builder.append("-v")
    builder.append("build")
    builder.append_switch("-t", settings.target or "Build")
    builder.append_switch_quoted("-c", settings.configuration)
    builder.append_quoted(str(project))
    return builder.build()


def archive_arguments(solution: Path, project_name: Optional[str], settings: VSToolSettings) -> ArgumentSequence:
    builder = ArgumentBuilder()
    if settings.increase_verbosity:
        builder.append("-v")
    builder.append("archive")
    if project_name:
        builder.append_switch("-p", project_name)
    builder.append_switch_quoted("-c", settings.configuration)
    builder.append_quoted(str(solution))
    return builder.build()


class VSToolRunner:
    def __init__(self, context: "BuildContext") -> None:
        self._tool = ToolRunner(VSTOOL, context)

    def build(self, project_file: Union[str, Path], settings: VSToolSettings) -> InvocationResult:
        """Build a project or solution."""
        project = self._tool.require_file(project_file, settings, "Project File")
        return self._tool.run(settings, build_arguments(project, settings))

    def archive(
        self,
        solution_file: Union[str, Path],
        project_name: Optional[str],
        settings: VSToolSettings,
    ) -> InvocationResult:
        """Archive ``project_name`` within a solution for distribution."""
        solution = self._tool.require_file(solution_file, settings, "Solution File")
        return self._tool.run(settings, archive_arguments(solution, project_name, settings))
