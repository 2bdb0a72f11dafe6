"""
xambuild.tools
~~~~~~~~~~~~~~
One runner per wrapped command-line tool. Import from here so callers don't
need to know individual module paths.

    from xambuild.context import BuildContext
    from xambuild.tools import VSToolRunner, VSToolSettings

    runner = VSToolRunner(BuildContext())
    runner.build("App.sln", VSToolSettings(configuration="Release|iPhone"))
"""
from __future__ import annotations

from xambuild.tools.component import (
    COMPONENT_TOOL,
    ComponentRestoreSettings,
    ComponentRunner,
    ComponentSettings,
    ComponentSubmitSettings,
    ComponentUploadSettings,
)
from xambuild.tools.msbuild import MSBUILD, MSBuildRunner, MSBuildSettings
from xambuild.tools.nunit import NUNIT, NUnitRunner, NUnitSettings
from xambuild.tools.testcloud import TEST_CLOUD, Keystore, TestCloudRunner, TestCloudSettings
from xambuild.tools.vstool import VSTOOL, VSToolRunner, VSToolSettings

__all__ = [
    "COMPONENT_TOOL", "ComponentRunner", "ComponentSettings",
    "ComponentRestoreSettings", "ComponentUploadSettings", "ComponentSubmitSettings",
    "MSBUILD", "MSBuildRunner", "MSBuildSettings",
    "NUNIT", "NUnitRunner", "NUnitSettings",
    "TEST_CLOUD", "Keystore", "TestCloudRunner", "TestCloudSettings",
    "VSTOOL", "VSToolRunner", "VSToolSettings",
    "ALL_TOOLS",
]

ALL_TOOLS = (VSTOOL, MSBUILD, COMPONENT_TOOL, TEST_CLOUD, NUNIT)
