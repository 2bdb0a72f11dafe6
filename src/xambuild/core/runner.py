from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Tuple, Union

from xambuild.core.arguments import ArgumentSequence
from xambuild.core.process import check
from xambuild.core.resolver import ResolvedTool, ToolResolver
from xambuild.core.settings import ToolSettings
from xambuild.core.tool_result import InvocationResult
from xambuild.errors import ConfigurationError

if TYPE_CHECKING:
    from xambuild.context import BuildContext

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolSpec:
    """Static description of an external tool.

    ``managed`` marks .NET console assemblies that need ``mono`` to run
    outside Windows.
    """

    name: str
    executable_names: Tuple[str, ...]
    fallback_paths: Tuple[str, ...] = ()
    managed: bool = False


class ToolRunner:
    """Resolve, invoke and check one external tool.

    Per-tool runners hold one of these and only contribute arguments.
    """

    def __init__(self, spec: ToolSpec, context: "BuildContext") -> None:
        self.spec = spec
        self._context = context
        self._resolver = ToolResolver(context.file_system, context.environment, context.registry)

    @property
    def name(self) -> str:
        return self.spec.name

    def resolve(self, settings: ToolSettings) -> ResolvedTool:
        return self._resolver.resolve(self.spec, settings)

    def working_directory(self, settings: ToolSettings) -> Path:
        env = self._context.environment
        if settings.working_directory is not None:
            return env.make_absolute(settings.working_directory)
        return env.working_directory

    def absolute(self, path: Union[str, Path], settings: ToolSettings) -> Path:
        return self._context.environment.make_absolute(path, self.working_directory(settings))

    def require_file(self, path: Union[str, Path], settings: ToolSettings, description: str = "File") -> Path:
        full = self.absolute(path, settings)
        if not self._context.file_system.is_file(full):
            raise ConfigurationError(f"{description} Not Found: {full}")
        return full

    def require_directory(self, path: Union[str, Path], settings: ToolSettings, description: str = "Directory") -> Path:
        full = self.absolute(path, settings)
        if not self._context.file_system.is_dir(full):
            raise ConfigurationError(f"{description} Not Found: {full}")
        return full

    def _environment(self, settings: ToolSettings) -> Dict[str, str]:
        # Same variables the resolver searched, so PATH lookups agree
        return {**self._context.environment.variables, **settings.environment_variables}

    def run(
        self,
        settings: ToolSettings,
        arguments: ArgumentSequence,
        allow_failure: bool = False,
    ) -> InvocationResult:
        """Resolve the tool and run it with ``arguments``.

        With ``allow_failure`` a non-zero exit code is returned as a value
        instead of raising ``ToolExecutionError``.
        """
        tool = self.resolve(settings)
        result = self._context.process_runner.run(
            self.spec.name,
            tool.executable,
            arguments,
            cwd=self.working_directory(settings),
            env=self._environment(settings),
            timeout=settings.timeout,
            launcher=tool.launcher,
        )
        if allow_failure:
            if not result.ok:
                _log.info("%s exited with code %d", self.spec.name, result.exit_code)
            return result
        return check(result)
