from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence, Union

from pydantic import field_validator

from xambuild.core.arguments import ArgumentBuilder, ArgumentSequence
from xambuild.core.runner import ToolRunner, ToolSpec
from xambuild.core.settings import ToolSettings
from xambuild.core.tool_result import InvocationResult
from xambuild.errors import ConfigurationError

if TYPE_CHECKING:
    from xambuild.context import BuildContext

NUNIT = ToolSpec(
    name="nunit3-console",
    executable_names=("nunit3-console.exe", "nunit3-console"),
    fallback_paths=("./tools/NUnit.ConsoleRunner*/tools/nunit3-console.exe",),
    managed=True,
)

LABEL_MODES = ("Off", "On", "Before", "After", "All")


class NUnitSettings(ToolSettings):
    result_path: Optional[Path] = None
    no_result: bool = False
    where: Optional[str] = None
    framework: Optional[str] = None
    labels: Optional[str] = None
    shadow_copy: bool = False

    @field_validator("labels")
    @classmethod
    def validate_labels(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in LABEL_MODES:
            raise ValueError(f"Must be one of {', '.join(LABEL_MODES)}")
        return v


class NUnitRunner:
    """Run UITest assemblies locally with the NUnit 3 console runner."""

    def __init__(self, context: "BuildContext") -> None:
        self._tool = ToolRunner(NUNIT, context)

    def arguments(self, assemblies: Sequence[Path], settings: NUnitSettings) -> ArgumentSequence:
        builder = ArgumentBuilder()
        for assembly in assemblies:
            builder.append_quoted(str(assembly))
        if settings.no_result:
            builder.append("--noresult")
        elif settings.result_path:
            builder.append_switch_quoted(
                "--result", str(self._tool.absolute(settings.result_path, settings)), separator="="
            )
        if settings.where:
            builder.append_switch_quoted("--where", settings.where, separator="=")
        if settings.framework:
            builder.append_switch("--framework", settings.framework, separator="=")
        if settings.labels:
            builder.append_switch("--labels", settings.labels, separator="=")
        if settings.shadow_copy:
            builder.append("--shadowcopy")
        return builder.build()

    def run(self, assemblies: Sequence[Union[str, Path]], settings: NUnitSettings) -> InvocationResult:
        if not assemblies:
            raise ConfigurationError("At least one test assembly is required")
        resolved: List[Path] = [self._tool.require_file(a, settings, "Test Assembly") for a in assemblies]
        return self._tool.run(settings, self.arguments(resolved, settings))
