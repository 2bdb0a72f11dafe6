from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from xambuild.core.arguments import ArgumentBuilder, ArgumentSequence
from xambuild.core.runner import ToolRunner, ToolSpec
from xambuild.core.settings import ToolSettings
from xambuild.core.tool_result import InvocationResult
from xambuild.errors import ConfigurationError

if TYPE_CHECKING:
    from xambuild.context import BuildContext

TEST_CLOUD = ToolSpec(
    name="test-cloud",
    executable_names=("test-cloud.exe", "test-cloud"),
    fallback_paths=("./packages/Xamarin.UITest*/tools/test-cloud.exe",),
    managed=True,
)


class Keystore(BaseModel):
    """Android signing keystore passed through to Test Cloud."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: Path
    password: str
    alias: str
    key_password: str


class TestCloudSettings(ToolSettings):
    series: str = "master"
    locale: str = "en_US"
    app_name: Optional[str] = None
    nunit_xml_path: Optional[Path] = None
    categories: Tuple[str, ...] = ()
    fixture: Optional[str] = None
    test_parameters: Dict[str, str] = Field(default_factory=dict)
    dsym_path: Optional[Path] = None
    keystore: Optional[Keystore] = None


class TestCloudRunner:
    """Upload an app with its UITest assemblies to Test Cloud."""

    def __init__(self, context: "BuildContext") -> None:
        self._tool = ToolRunner(TEST_CLOUD, context)

    def arguments(
        self,
        app_file: Path,
        api_key: str,
        devices: str,
        user: str,
        assembly_dir: Path,
        settings: TestCloudSettings,
    ) -> ArgumentSequence:
        builder = ArgumentBuilder()
        builder.append("submit")
        builder.append_quoted(str(app_file))
        builder.append_secret(api_key)
        builder.append("--devices").append(devices)
        builder.append("--series").append_quoted(settings.series)
        builder.append("--locale").append_quoted(settings.locale)
        builder.append("--user").append(user)
        builder.append("--assembly-dir").append_quoted(str(assembly_dir))

        if settings.app_name:
            builder.append("--app-name").append_quoted(settings.app_name)
        if settings.nunit_xml_path:
            builder.append("--nunit-xml").append_quoted(str(self._tool.absolute(settings.nunit_xml_path, settings)))
        for category in settings.categories:
            builder.append("--category").append_quoted(category)
        if settings.fixture:
            builder.append("--fixture").append_quoted(settings.fixture)
        for key in sorted(settings.test_parameters):
            builder.append("--test-params").append(f"{key}:{settings.test_parameters[key]}")
        if settings.dsym_path:
            builder.append("--dsym").append_quoted(str(self._tool.absolute(settings.dsym_path, settings)))
        if settings.keystore:
            ks = settings.keystore
            builder.append("--keystore")
            builder.append_quoted(str(self._tool.absolute(ks.path, settings)))
            builder.append_secret(ks.password)
            builder.append(ks.alias)
            builder.append_secret(ks.key_password)
        return builder.build()

    def run(
        self,
        app_file: Union[str, Path],
        api_key: str,
        devices: str,
        user: str,
        assembly_dir: Union[str, Path],
        settings: TestCloudSettings,
    ) -> InvocationResult:
        for label, value in (("API key", api_key), ("Devices hash", devices), ("User email", user)):
            if not value:
                raise ConfigurationError(f"{label} is required for Test Cloud submission")
        app = self._tool.require_file(app_file, settings, "App Package")
        assemblies = self._tool.require_directory(assembly_dir, settings, "UITest Assembly Directory")
        args = self.arguments(app, api_key, devices, user, assemblies, settings)
        return self._tool.run(settings, args)
