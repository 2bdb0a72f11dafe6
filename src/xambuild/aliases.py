"""High-level build operations.

Every function takes a :class:`BuildContext` first. Settings follow one
pattern: defaults are constructed, then an optional ``configure`` callable
returns the adjusted (frozen) settings.

    ctx = BuildContext.from_config(load_config())
    apk = android_package(ctx, "Droid/App.csproj", sign=True)
    if apk is None:
        ...  # build succeeded but produced no package
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from xambuild.context import BuildContext
from xambuild.core.artifacts import find_artifact, find_files
from xambuild.core.retry import with_retry
from xambuild.core.settings import configure as _apply
from xambuild.core.tool_result import InvocationResult
from xambuild.errors import BatchOperationError, ConfigurationError, XamBuildError
from xambuild.tools.component import (
    ComponentRestoreSettings,
    ComponentRunner,
    ComponentSettings,
    ComponentSubmitSettings,
    ComponentUploadSettings,
)
from xambuild.tools.msbuild import MSBuildRunner, MSBuildSettings
from xambuild.tools.nunit import NUnitRunner, NUnitSettings
from xambuild.tools.testcloud import TestCloudRunner, TestCloudSettings
from xambuild.tools.vstool import VSToolRunner, VSToolSettings

_log = logging.getLogger(__name__)

PathArg = Union[str, Path]

SIGNED_TARGET = "SignAndroidPackage"
UNSIGNED_TARGET = "PackageForAndroid"
SIGNED_APK_PATTERN = "**/*-Signed.apk"
APK_PATTERN = "**/*.apk"


# ── IDE build tool ─────────────────────────────────────────────────────────

def vstool_build(
    ctx: BuildContext,
    project_or_solution: PathArg,
    configure: Optional[Callable[[VSToolSettings], VSToolSettings]] = None,
) -> InvocationResult:
    settings = _apply(VSToolSettings(), configure)
    return VSToolRunner(ctx).build(project_or_solution, settings)


def vstool_archive(
    ctx: BuildContext,
    solution: PathArg,
    project_name: Optional[str] = None,
    configure: Optional[Callable[[VSToolSettings], VSToolSettings]] = None,
) -> InvocationResult:
    settings = _apply(VSToolSettings(), configure)
    return VSToolRunner(ctx).archive(solution, project_name, settings)


# ── Android ────────────────────────────────────────────────────────────────

def android_package(
    ctx: BuildContext,
    project_file: PathArg,
    sign: bool = False,
    configure: Optional[Callable[[MSBuildSettings], MSBuildSettings]] = None,
) -> Optional[Path]:
    """Build an Android .apk and return the newest one under the project directory.

    Args:
        ctx: Build context.
        project_file: The .csproj to build.
        sign: Build ``SignAndroidPackage`` and only accept ``*-Signed.apk``
            outputs; otherwise build ``PackageForAndroid`` and accept any .apk.
        configure: Adjusts the MSBuild settings after defaults are applied.

    Returns:
        Path of the most recently written matching .apk, or None if the
        build produced none.

    Raises:
        ConfigurationError: If the project file does not exist.
        ToolExecutionError: If the build fails.
    """
    project = ctx.environment.make_absolute(project_file)
    if not ctx.file_system.is_file(project):
        raise ConfigurationError(f"Project File Not Found: {project}")

    target = SIGNED_TARGET if sign else UNSIGNED_TARGET
    defaults = MSBuildSettings(configuration="Release").with_target(target)
    settings = _apply(defaults, configure).with_target(target)

    MSBuildRunner(ctx).build(project, settings)

    pattern = SIGNED_APK_PATTERN if sign else APK_PATTERN
    return find_artifact(project.parent, pattern, ctx.file_system)


# ── Components ─────────────────────────────────────────────────────────────

def restore_components(
    ctx: BuildContext,
    solution: PathArg,
    settings: Optional[ComponentRestoreSettings] = None,
) -> InvocationResult:
    return ComponentRunner(ctx).restore(solution, settings or ComponentRestoreSettings())


def package_component(
    ctx: BuildContext,
    component_directory: PathArg,
    settings: Optional[ComponentSettings] = None,
) -> InvocationResult:
    return ComponentRunner(ctx).package(component_directory, settings or ComponentSettings())


def upload_component(
    ctx: BuildContext,
    package_file: PathArg,
    settings: Optional[ComponentUploadSettings] = None,
) -> InvocationResult:
    """Upload a .xam package, retrying up to ``settings.max_attempts`` times."""
    settings = settings or ComponentUploadSettings(max_attempts=ctx.config.max_attempts)
    runner = ComponentRunner(ctx)
    return with_retry(
        lambda: runner.upload(package_file, settings, allow_failure=True),
        settings.max_attempts,
        description="Component Upload",
        action="upload component",
        delay=ctx.config.retry_delay,
    )


def submit_component(
    ctx: BuildContext,
    package_file: PathArg,
    settings: Optional[ComponentSubmitSettings] = None,
) -> InvocationResult:
    """Submit a new .xam package, retrying up to ``settings.max_attempts`` times."""
    settings = settings or ComponentSubmitSettings(max_attempts=ctx.config.max_attempts)
    runner = ComponentRunner(ctx)
    return with_retry(
        lambda: runner.submit(package_file, settings, allow_failure=True),
        settings.max_attempts,
        description="Component Submit",
        action="submit component",
        delay=ctx.config.retry_delay,
    )


def _for_each_match(
    ctx: BuildContext,
    patterns: Tuple[str, ...],
    operation: Callable[[Path], InvocationResult],
    action: str,
    continue_on_error: Optional[bool],
) -> List[Path]:
    keep_going = ctx.config.continue_on_error if continue_on_error is None else continue_on_error
    processed: List[Path] = []
    failures: List[Tuple[str, XamBuildError]] = []

    for pattern in patterns:
        files = find_files(pattern, ctx.environment.working_directory, ctx.file_system)
        if not files:
            _log.info("No files match '%s'", pattern)
            continue
        for file in files:
            try:
                operation(file)
            except XamBuildError as exc:
                if not keep_going:
                    raise
                _log.error("%s", exc)
                failures.append((str(file), exc))
                continue
            processed.append(file)

    if failures:
        raise BatchOperationError(action, failures)
    return processed


def upload_components(
    ctx: BuildContext,
    settings: Optional[ComponentUploadSettings],
    *patterns: str,
    continue_on_error: Optional[bool] = None,
) -> List[Path]:
    """Upload every .xam matching ``patterns``, one file at a time.

    Each file gets its own retry budget. By default the batch stops at the
    first file that exhausts its retries; with ``continue_on_error`` the
    remaining files are still attempted and one ``BatchOperationError``
    lists the failures.
    """
    return _for_each_match(
        ctx, patterns, lambda f: upload_component(ctx, f, settings), "upload components", continue_on_error
    )


def submit_components(
    ctx: BuildContext,
    settings: Optional[ComponentSubmitSettings],
    *patterns: str,
    continue_on_error: Optional[bool] = None,
) -> List[Path]:
    """Submit every .xam matching ``patterns``; see :func:`upload_components`."""
    return _for_each_match(
        ctx, patterns, lambda f: submit_component(ctx, f, settings), "submit components", continue_on_error
    )


# ── Testing ────────────────────────────────────────────────────────────────

def ui_test(
    ctx: BuildContext,
    tests_assembly: PathArg,
    settings: Optional[NUnitSettings] = None,
) -> InvocationResult:
    """Run UITests in an assembly with NUnit."""
    return NUnitRunner(ctx).run([tests_assembly], settings or NUnitSettings())


def test_cloud(
    ctx: BuildContext,
    app_file: PathArg,
    api_key: str,
    devices_hash: str,
    user_email: str,
    uitest_assemblies: PathArg,
    settings: Optional[TestCloudSettings] = None,
) -> InvocationResult:
    """Upload an app package to Test Cloud and run its UITests."""
    return TestCloudRunner(ctx).run(
        app_file, api_key, devices_hash, user_email, uitest_assemblies, settings or TestCloudSettings()
    )
