"""xambuild CLI entry point."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from xambuild import __version__, aliases
from xambuild.config import ConfigError, apply_cli_overrides, load_config
from xambuild.context import BuildContext
from xambuild.core.resolver import ToolResolver
from xambuild.core.settings import ToolSettings
from xambuild.errors import ToolNotFoundError, XamBuildError
from xambuild.log import configure_logging
from xambuild.tools import (
    ALL_TOOLS,
    ComponentRestoreSettings,
    ComponentSubmitSettings,
    ComponentUploadSettings,
    NUnitSettings,
    TestCloudSettings,
)

NO_ARTIFACT_EXIT_CODE = 2

console = Console()
err_console = Console(stderr=True)


def _fail(message: str) -> None:
    err_console.print(f"[bold red]error:[/] {escape(message)}", highlight=False, soft_wrap=True)
    sys.exit(1)


def _ctx(click_ctx: click.Context) -> BuildContext:
    return click_ctx.obj


def _run(fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except XamBuildError as e:
        _fail(str(e))


@click.group()
@click.version_option(__version__, prog_name="xambuild")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Config file (default: ./xambuild.yaml, then ~/.xambuild/config.yaml)")
@click.option("--tools-dir", type=click.Path(path_type=Path), default=None,
              help="Directory searched for tool executables")
@click.option("--max-attempts", type=int, default=None, help="Retry ceiling for upload/submit")
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
@click.pass_context
def main(click_ctx: click.Context, config_path: Path | None, tools_dir: Path | None,
         max_attempts: int | None, log_level: str | None) -> None:
    """Build, package and publish Xamarin apps and components."""
    try:
        config = load_config(config_path)
        config = apply_cli_overrides(
            config, tools_dir=tools_dir, max_attempts=max_attempts, log_level=log_level
        )
    except ConfigError as e:
        _fail(str(e))

    configure_logging(config.log_level)
    click_ctx.obj = BuildContext.from_config(config)


@main.command()
@click.argument("project", type=click.Path(path_type=Path))
@click.option("-c", "--configuration", default="Debug|iPhoneSimulator", show_default=True)
@click.option("-t", "--target", default="Build", show_default=True)
@click.option("-v", "--verbose", "increase_verbosity", is_flag=True, help="Pass -v to vstool")
@click.pass_context
def build(click_ctx, project: Path, configuration: str, target: str, increase_verbosity: bool) -> None:
    """Build a project or solution with vstool."""
    result = _run(
        aliases.vstool_build,
        _ctx(click_ctx),
        project,
        lambda s: s.replace(configuration=configuration, target=target, increase_verbosity=increase_verbosity),
    )
    console.print(f"[green]Build succeeded:[/] {escape(result.command_line)}", highlight=False, soft_wrap=True)


@main.command()
@click.argument("solution", type=click.Path(path_type=Path))
@click.option("-p", "--project", "project_name", default=None, help="Project within the solution")
@click.option("-c", "--configuration", default="Debug|iPhoneSimulator", show_default=True)
@click.option("-v", "--verbose", "increase_verbosity", is_flag=True, help="Pass -v to vstool")
@click.pass_context
def archive(click_ctx, solution: Path, project_name: str | None, configuration: str,
            increase_verbosity: bool) -> None:
    """Archive an app with vstool."""
    _run(
        aliases.vstool_archive,
        _ctx(click_ctx),
        solution,
        project_name,
        lambda s: s.replace(configuration=configuration, increase_verbosity=increase_verbosity),
    )
    console.print("[green]Archive succeeded[/]")


@main.command("android-package")
@click.argument("project", type=click.Path(path_type=Path))
@click.option("--sign", is_flag=True, help="Build a signed package (SignAndroidPackage)")
@click.option("-c", "--configuration", default="Release", show_default=True)
@click.option("-p", "--property", "properties", multiple=True, metavar="KEY=VALUE",
              help="Extra MSBuild property; repeatable")
@click.pass_context
def android_package(click_ctx, project: Path, sign: bool, configuration: str,
                    properties: tuple[str, ...]) -> None:
    """Build an Android .apk and print its path."""
    props = {}
    for item in properties:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got {item!r}", param_hint="--property")
        props[key] = value

    apk = _run(
        aliases.android_package,
        _ctx(click_ctx),
        project,
        sign,
        lambda s: s.replace(configuration=configuration, properties={**s.properties, **props}),
    )
    if apk is None:
        err_console.print("[yellow]No .apk found after build[/]")
        sys.exit(NO_ARTIFACT_EXIT_CODE)
    click.echo(str(apk))


@main.command("restore-components")
@click.argument("solution", type=click.Path(path_type=Path))
@click.option("--email", default=None)
@click.option("--password", default=None, envvar="XAMARIN_COMPONENT_PASSWORD")
@click.pass_context
def restore_components(click_ctx, solution: Path, email: str | None, password: str | None) -> None:
    """Restore Xamarin components for a solution."""
    settings = ComponentRestoreSettings(email=email, password=password)
    _run(aliases.restore_components, _ctx(click_ctx), solution, settings)
    console.print("[green]Components restored[/]")


@main.command("package-component")
@click.argument("directory", type=click.Path(path_type=Path))
@click.pass_context
def package_component(click_ctx, directory: Path) -> None:
    """Package the component described by DIRECTORY/component.yaml."""
    _run(aliases.package_component, _ctx(click_ctx), directory)
    console.print("[green]Component packaged[/]")


def _publish_options(fn):
    fn = click.option("--continue-on-error", is_flag=True,
                      help="Attempt remaining files after one fails")(fn)
    fn = click.option("--password", default=None, envvar="XAMARIN_COMPONENT_PASSWORD")(fn)
    fn = click.option("--email", default=None)(fn)
    fn = click.argument("patterns", nargs=-1, required=True)(fn)
    return fn


@main.command("upload-components")
@_publish_options
@click.pass_context
def upload_components(click_ctx, patterns, email, password, continue_on_error) -> None:
    """Upload .xam packages matching PATTERNS (new versions of existing components)."""
    ctx = _ctx(click_ctx)
    settings = ComponentUploadSettings(email=email, password=password, max_attempts=ctx.config.max_attempts)
    done = _run(aliases.upload_components, ctx, settings, *patterns, continue_on_error=continue_on_error or None)
    console.print(f"[green]Uploaded {len(done)} component package(s)[/]")


@main.command("submit-components")
@_publish_options
@click.pass_context
def submit_components(click_ctx, patterns, email, password, continue_on_error) -> None:
    """Submit .xam packages matching PATTERNS (brand new components)."""
    ctx = _ctx(click_ctx)
    settings = ComponentSubmitSettings(email=email, password=password, max_attempts=ctx.config.max_attempts)
    done = _run(aliases.submit_components, ctx, settings, *patterns, continue_on_error=continue_on_error or None)
    console.print(f"[green]Submitted {len(done)} component package(s)[/]")


@main.command("ui-test")
@click.argument("assembly", type=click.Path(path_type=Path))
@click.option("--result", "result_path", type=click.Path(path_type=Path), default=None)
@click.option("--where", default=None, help="NUnit test selection expression")
@click.pass_context
def ui_test(click_ctx, assembly: Path, result_path: Path | None, where: str | None) -> None:
    """Run UITests in ASSEMBLY with NUnit."""
    settings = NUnitSettings(result_path=result_path, where=where)
    _run(aliases.ui_test, _ctx(click_ctx), assembly, settings)
    console.print("[green]UITests passed[/]")


@main.command("test-cloud")
@click.argument("app", type=click.Path(path_type=Path))
@click.argument("assembly_dir", type=click.Path(path_type=Path))
@click.option("--api-key", required=True, envvar="TEST_CLOUD_API_KEY")
@click.option("--devices", required=True, help="Device set hash")
@click.option("--user", required=True, help="Account email")
@click.option("--series", default="master", show_default=True)
@click.option("--locale", default="en_US", show_default=True)
@click.option("--category", "categories", multiple=True)
@click.pass_context
def test_cloud(click_ctx, app: Path, assembly_dir: Path, api_key: str, devices: str, user: str,
               series: str, locale: str, categories: tuple[str, ...]) -> None:
    """Submit APP and its UITests in ASSEMBLY_DIR to Test Cloud."""
    settings = TestCloudSettings(series=series, locale=locale, categories=categories)
    _run(aliases.test_cloud, _ctx(click_ctx), app, api_key, devices, user, assembly_dir, settings)
    console.print("[green]Test Cloud run submitted[/]")


@main.command()
@click.argument("tool", required=False)
@click.pass_context
def which(click_ctx, tool: str | None) -> None:
    """Show which executable each wrapped tool resolves to."""
    ctx = _ctx(click_ctx)
    specs = [s for s in ALL_TOOLS if tool is None or s.name == tool]
    if not specs:
        _fail(f"Unknown tool '{tool}'. Known: {', '.join(s.name for s in ALL_TOOLS)}")

    resolver = ToolResolver(ctx.file_system, ctx.environment, ctx.registry)
    missing = 0
    for spec in specs:
        try:
            resolved = resolver.resolve(spec, ToolSettings())
        except ToolNotFoundError:
            missing += 1
            console.print(f"{spec.name}: [red]not found[/]", highlight=False, soft_wrap=True)
            continue
        launcher = " ".join(resolved.launcher)
        prefix = f"{launcher} " if launcher else ""
        console.print(f"{spec.name}: {escape(prefix + str(resolved.executable))}", highlight=False, soft_wrap=True)
    if missing and tool is not None:
        sys.exit(1)
