"""Tests for the click CLI wiring."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from xambuild.cli import NO_ARTIFACT_EXIT_CODE, main

from conftest import make_file, set_mtime


def _mock_proc(stdout="", stderr="", returncode=0):
    return MagicMock(stdout=stdout, stderr=stderr, returncode=returncode)


@pytest.fixture
def cli(workspace, monkeypatch):
    monkeypatch.chdir(workspace)
    monkeypatch.setattr("xambuild.config.DEFAULT_CONFIG_FILE", workspace / "no-home-config.yaml")
    return CliRunner()


def _invoke(cli, workspace, *args):
    return cli.invoke(main, ["--tools-dir", str(workspace / "tools"), "--log-level", "WARNING", *args])


class TestGlobalOptions:
    def test_help_lists_commands(self, cli):
        result = cli.invoke(main, ["--help"])
        assert result.exit_code == 0
        for cmd in ("build", "archive", "android-package", "upload-components", "test-cloud", "which"):
            assert cmd in result.output

    def test_invalid_max_attempts(self, cli):
        result = cli.invoke(main, ["--max-attempts", "0", "which"])
        assert result.exit_code == 1
        assert "max_attempts" in result.output

    def test_missing_explicit_config(self, cli):
        result = cli.invoke(main, ["--config", "nope.yaml", "which"])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestBuildCommand:
    def test_build_invokes_vstool(self, cli, workspace):
        vstool = make_file(workspace, "tools/vstool")
        make_file(workspace, "App.sln")
        with patch("subprocess.run", return_value=_mock_proc()) as mock:
            result = _invoke(cli, workspace, "build", str(workspace / "App.sln"), "-c", "Release|iPhone", "-v")
        assert result.exit_code == 0, result.output
        cmd = mock.call_args.args[0]
        assert cmd == [str(vstool), "-v", "build", "-t:Build", "-c:Release|iPhone", str(workspace / "App.sln")]

    def test_missing_project_exit_1(self, cli, workspace):
        make_file(workspace, "tools/vstool")
        with patch("subprocess.run") as mock:
            result = _invoke(cli, workspace, "build", str(workspace / "Missing.sln"))
        assert result.exit_code == 1
        assert "Not Found" in result.output
        mock.assert_not_called()

    def test_tool_failure_exit_1(self, cli, workspace):
        make_file(workspace, "tools/vstool")
        make_file(workspace, "App.sln")
        with patch("subprocess.run", return_value=_mock_proc(returncode=2, stderr="error CS1002")):
            result = _invoke(cli, workspace, "build", str(workspace / "App.sln"))
        assert result.exit_code == 1
        assert "exit code 2" in result.output
        assert "error CS1002" in result.output


class TestAndroidPackageCommand:
    def test_prints_apk_path(self, cli, workspace):
        make_file(workspace, "tools/msbuild")
        project = make_file(workspace, "Droid/Droid.csproj")
        apk = set_mtime(make_file(workspace, "Droid/bin/Release/app.apk"), 100)
        with patch("subprocess.run", return_value=_mock_proc()) as mock:
            result = _invoke(cli, workspace, "android-package", str(project), "-p", "AndroidKeyStore=false")
        assert result.exit_code == 0, result.output
        assert str(apk) in result.output
        argv = mock.call_args.args[0]
        assert "/t:PackageForAndroid" in argv
        assert "/p:AndroidKeyStore=false" in argv
        assert argv[-1] == str(project)

    def test_no_apk_exit_code(self, cli, workspace):
        make_file(workspace, "tools/msbuild")
        project = make_file(workspace, "Droid/Droid.csproj")
        with patch("subprocess.run", return_value=_mock_proc()):
            result = _invoke(cli, workspace, "android-package", str(project), "--sign")
        assert result.exit_code == NO_ARTIFACT_EXIT_CODE

    def test_bad_property(self, cli, workspace):
        result = _invoke(cli, workspace, "android-package", str(workspace / "Droid" / "Droid.csproj"), "-p", "novalue")
        assert result.exit_code == 2
        assert "KEY=VALUE" in result.output


class TestWhichCommand:
    def test_found(self, cli, workspace):
        vstool = make_file(workspace, "tools/vstool")
        result = _invoke(cli, workspace, "which", "vstool")
        assert result.exit_code == 0
        assert str(vstool) in result.output

    def test_unknown_tool(self, cli, workspace):
        result = _invoke(cli, workspace, "which", "gradle")
        assert result.exit_code == 1
        assert "Unknown tool" in result.output
