from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from pydantic import Field

from xambuild.core.arguments import ArgumentBuilder, ArgumentSequence
from xambuild.core.runner import ToolRunner, ToolSpec
from xambuild.core.settings import ToolSettings
from xambuild.core.tool_result import InvocationResult

if TYPE_CHECKING:
    from xambuild.context import BuildContext

COMPONENT_TOOL = ToolSpec(
    name="xamarin-component",
    executable_names=("xamarin-component.exe", "xamarin-component"),
    fallback_paths=("./tools/xamarin-component.exe",),
    managed=True,
)


class ComponentSettings(ToolSettings):
    """Settings shared by every component tool command."""


class ComponentCredentials(ComponentSettings):
    email: Optional[str] = None
    password: Optional[str] = None


class ComponentRestoreSettings(ComponentCredentials):
    pass


class ComponentUploadSettings(ComponentCredentials):
    max_attempts: int = Field(default=3, ge=1)


class ComponentSubmitSettings(ComponentCredentials):
    max_attempts: int = Field(default=3, ge=1)


def _command(command: str, target: Path, settings: ComponentSettings) -> ArgumentSequence:
    builder = ArgumentBuilder()
    builder.append(command)
    if isinstance(settings, ComponentCredentials):
        if settings.email:
            builder.append_switch("--user", settings.email, separator="=")
        if settings.password:
            builder.append_switch_secret("--password", settings.password, separator="=")
    builder.append_quoted(str(target))
    return builder.build()


def restore_arguments(solution: Path, settings: ComponentRestoreSettings) -> ArgumentSequence:
    return _command("restore", solution, settings)


def package_arguments(directory: Path, settings: ComponentSettings) -> ArgumentSequence:
    return _command("package", directory, settings)


def upload_arguments(package: Path, settings: ComponentUploadSettings) -> ArgumentSequence:
    return _command("upload", package, settings)


def submit_arguments(package: Path, settings: ComponentSubmitSettings) -> ArgumentSequence:
    return _command("submit", package, settings)


class ComponentRunner:
    """Restore, package and publish Xamarin components."""

    def __init__(self, context: "BuildContext") -> None:
        self._tool = ToolRunner(COMPONENT_TOOL, context)

    def restore(self, solution_file: Union[str, Path], settings: ComponentRestoreSettings) -> InvocationResult:
        solution = self._tool.require_file(solution_file, settings, "Solution File")
        return self._tool.run(settings, restore_arguments(solution, settings))

    def package(self, component_directory: Union[str, Path], settings: ComponentSettings) -> InvocationResult:
        """Package the component described by ``component.yaml`` in a directory."""
        directory = self._tool.require_directory(component_directory, settings, "Component Directory")
        self._tool.require_file(directory / "component.yaml", settings, "Component YAML")
        return self._tool.run(settings, package_arguments(directory, settings))

    def upload(
        self,
        package_file: Union[str, Path],
        settings: ComponentUploadSettings,
        allow_failure: bool = False,
    ) -> InvocationResult:
        """Upload a new version of an existing component."""
        package = self._tool.require_file(package_file, settings, "Component Package")
        return self._tool.run(settings, upload_arguments(package, settings), allow_failure=allow_failure)

    def submit(
        self,
        package_file: Union[str, Path],
        settings: ComponentSubmitSettings,
        allow_failure: bool = False,
    ) -> InvocationResult:
        """Submit a brand new component with no previous versions."""
        package = self._tool.require_file(package_file, settings, "Component Package")
        return self._tool.run(settings, submit_arguments(package, settings), allow_failure=allow_failure)
