"""Tests for the component tool: restore/package arguments and retried upload/submit."""

from __future__ import annotations

from pathlib import Path

import pytest

from xambuild import aliases
from xambuild.config import XamBuildConfig
from xambuild.core.process import ProcessRunner
from xambuild.errors import (
    BatchOperationError,
    ConfigurationError,
    RetryExhaustedError,
    ToolExecutionError,
)
from xambuild.tools.component import (
    ComponentRestoreSettings,
    ComponentSubmitSettings,
    ComponentUploadSettings,
    restore_arguments,
    upload_arguments,
)

from conftest import RecordingProcessRunner, make_executable, make_file


@pytest.fixture
def component_tool(tools_dir):
    return make_file(tools_dir, "xamarin-component.exe")


@pytest.fixture
def mono_path(workspace):
    return str(make_executable(workspace / "monobin", "mono").parent)


@pytest.fixture
def ctx_factory(make_context, component_tool, mono_path):
    def _make(runner, **config):
        cfg = XamBuildConfig(tools_dir=component_tool.parent, **config)
        return make_context(runner, config=cfg, path=mono_path)

    return _make


class TestArguments:
    def test_restore_with_credentials(self, workspace):
        s = ComponentRestoreSettings(email="me@example.com", password="hunter2")
        args = restore_arguments(workspace / "App.sln", s)
        assert args.tokens() == ["restore", "--user=me@example.com", "--password=hunter2", f'"{workspace / "App.sln"}"']
        assert "hunter2" not in args.render_safe()

    def test_restore_without_credentials(self, workspace):
        args = restore_arguments(workspace / "App.sln", ComponentRestoreSettings())
        assert args.tokens() == ["restore", f'"{workspace / "App.sln"}"']

    def test_upload(self, workspace):
        args = upload_arguments(workspace / "c.xam", ComponentUploadSettings(email="me@example.com"))
        assert args.tokens()[:2] == ["upload", "--user=me@example.com"]

    def test_max_attempts_must_be_positive(self):
        with pytest.raises(Exception):
            ComponentUploadSettings(max_attempts=0)
        with pytest.raises(Exception):
            ComponentSubmitSettings(max_attempts=-2)


class TestRestoreAndPackage:
    def test_restore_runs_through_mono(self, workspace, component_tool, mono_path, ctx_factory):
        make_file(workspace, "App.sln")
        runner = RecordingProcessRunner()
        aliases.restore_components(ctx_factory(runner), "App.sln")
        call = runner.calls[0]
        assert call["executable"] == component_tool
        assert call["launcher"] == [f"{mono_path}/mono"]

    def test_package_requires_component_yaml(self, workspace, ctx_factory):
        (workspace / "component").mkdir()
        runner = RecordingProcessRunner()
        with pytest.raises(ConfigurationError, match="Component YAML"):
            aliases.package_component(ctx_factory(runner), "component")
        assert runner.calls == []

    def test_package(self, workspace, ctx_factory):
        make_file(workspace, "component/component.yaml", "name: Demo\n")
        runner = RecordingProcessRunner()
        aliases.package_component(ctx_factory(runner), "component")
        assert runner.calls[0]["arguments"].tokens() == ["package", f'"{workspace / "component"}"']

    def test_restore_failure_not_retried(self, workspace, ctx_factory):
        make_file(workspace, "App.sln")
        runner = RecordingProcessRunner(exit_codes=[1, 0])
        with pytest.raises(ToolExecutionError):
            aliases.restore_components(ctx_factory(runner), "App.sln")
        assert len(runner.calls) == 1


class TestUploadComponent:
    def test_succeeds_after_retries(self, workspace, ctx_factory):
        make_file(workspace, "out/c.xam")
        runner = RecordingProcessRunner(exit_codes=[1, 1, 0])
        result = aliases.upload_component(ctx_factory(runner), "out/c.xam", ComponentUploadSettings(max_attempts=3))
        assert result.ok
        assert len(runner.calls) == 3

    def test_exhausts_after_max_attempts(self, workspace, ctx_factory):
        make_file(workspace, "out/c.xam")
        runner = RecordingProcessRunner(exit_codes=[1, 1, 1, 1])
        with pytest.raises(RetryExhaustedError, match="upload component"):
            aliases.upload_component(ctx_factory(runner), "out/c.xam", ComponentUploadSettings(max_attempts=2))
        assert len(runner.calls) == 2

    @pytest.mark.skipif(not Path("/bin/sh").exists(), reason="needs a POSIX shell")
    def test_undecodable_output_is_retried(self, workspace, ctx_factory):
        make_file(workspace, "out/c.xam")
        tool = make_file(workspace, "bin/xamarin-component", "#!/bin/sh\nprintf '\\377 upload rejected' >&2\nexit 1\n")
        tool.chmod(0o755)
        settings = ComponentUploadSettings(tool_path=tool, max_attempts=2)
        with pytest.raises(RetryExhaustedError) as exc_info:
            aliases.upload_component(ctx_factory(ProcessRunner()), "out/c.xam", settings)
        assert exc_info.value.attempts == 2
        assert "upload rejected" in exc_info.value.last_error.output

    def test_default_attempts_from_config(self, workspace, ctx_factory):
        make_file(workspace, "out/c.xam")
        runner = RecordingProcessRunner(exit_codes=[1] * 10)
        with pytest.raises(RetryExhaustedError):
            aliases.upload_component(ctx_factory(runner, max_attempts=4), "out/c.xam")
        assert len(runner.calls) == 4

    def test_missing_package_not_retried(self, ctx_factory):
        runner = RecordingProcessRunner()
        with pytest.raises(ConfigurationError):
            aliases.upload_component(ctx_factory(runner), "out/missing.xam", ComponentUploadSettings())
        assert runner.calls == []

    def test_submit_exhaustion(self, workspace, ctx_factory):
        make_file(workspace, "out/c.xam")
        runner = RecordingProcessRunner(exit_codes=[1, 1, 1])
        with pytest.raises(RetryExhaustedError, match="submit component"):
            aliases.submit_component(ctx_factory(runner), "out/c.xam", ComponentSubmitSettings(max_attempts=3))
        assert len(runner.calls) == 3
        assert runner.calls[0]["arguments"].tokens()[0] == "submit"


class TestBatch:
    def test_uploads_each_match_sequentially(self, workspace, ctx_factory):
        a = make_file(workspace, "out/a.xam")
        b = make_file(workspace, "out/b.xam")
        runner = RecordingProcessRunner()
        done = aliases.upload_components(ctx_factory(runner), ComponentUploadSettings(), "out/*.xam", "none/*.xam")
        assert done == [a, b]
        assert [c["arguments"].argv()[-1] for c in runner.calls] == [str(a), str(b)]

    def test_aborts_on_first_exhaustion(self, workspace, ctx_factory):
        make_file(workspace, "out/a.xam")
        make_file(workspace, "out/b.xam")
        runner = RecordingProcessRunner(exit_codes=[1, 1])
        with pytest.raises(RetryExhaustedError):
            aliases.upload_components(ctx_factory(runner), ComponentUploadSettings(max_attempts=2), "out/*.xam")
        # b.xam never attempted
        assert len(runner.calls) == 2
        assert all(c["arguments"].argv()[-1].endswith("a.xam") for c in runner.calls)

    def test_continue_on_error_collects_failures(self, workspace, ctx_factory):
        make_file(workspace, "out/a.xam")
        make_file(workspace, "out/b.xam")
        runner = RecordingProcessRunner(exit_codes=[1, 1, 0])
        with pytest.raises(BatchOperationError) as exc_info:
            aliases.submit_components(
                ctx_factory(runner), ComponentSubmitSettings(max_attempts=2), "out/*.xam", continue_on_error=True
            )
        assert len(runner.calls) == 3
        failures = exc_info.value.failures
        assert len(failures) == 1
        assert failures[0][0].endswith("a.xam")
        assert isinstance(failures[0][1], RetryExhaustedError)

    def test_continue_on_error_from_config(self, workspace, ctx_factory):
        make_file(workspace, "out/a.xam")
        make_file(workspace, "out/b.xam")
        runner = RecordingProcessRunner(exit_codes=[1, 0])
        with pytest.raises(BatchOperationError):
            aliases.upload_components(
                ctx_factory(runner, continue_on_error=True), ComponentUploadSettings(max_attempts=1), "out/*.xam"
            )
        assert len(runner.calls) == 2

    def test_no_matches_is_not_an_error(self, ctx_factory):
        runner = RecordingProcessRunner()
        assert aliases.upload_components(ctx_factory(runner), None, "out/*.xam") == []
        assert runner.calls == []
