from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional

from xambuild.core.artifacts import newest_match, split_pattern
from xambuild.core.environment import BuildEnvironment
from xambuild.core.filesystem import FileSystem
from xambuild.errors import ToolNotFoundError

if TYPE_CHECKING:
    from xambuild.core.runner import ToolSpec
    from xambuild.core.settings import ToolSettings

_log = logging.getLogger(__name__)

MONO = "mono"


@dataclass(frozen=True)
class ToolRegistry:
    """Configured tool locations: a shared tools directory and per-tool overrides."""

    tools_dir: Optional[Path] = None
    tool_paths: Dict[str, Path] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolvedTool:
    executable: Path
    launcher: List[str] = field(default_factory=list)


class ToolResolver:
    """Find the concrete executable for a logical tool.

    Order, first existing file wins: explicit override (settings, then
    registry), configured tools directory, well-known fallback paths, the
    environment's PATH.
    """

    def __init__(self, fs: FileSystem, env: BuildEnvironment, registry: ToolRegistry) -> None:
        self._fs = fs
        self._env = env
        self._registry = registry

    def resolve(self, spec: "ToolSpec", settings: "ToolSettings") -> ResolvedTool:
        base = self._base_dir(settings)
        attempted: List[str] = []

        executable = (
            self._from_overrides(spec, settings, base, attempted)
            or self._from_tools_dir(spec, attempted)
            or self._from_fallbacks(spec, base, attempted)
            or self._from_search_path(spec, attempted)
        )
        if executable is None:
            raise ToolNotFoundError(spec.name, attempted)

        _log.debug("Resolved %s -> %s", spec.name, executable)
        return ResolvedTool(executable=executable, launcher=self._launcher_for(spec, executable))

    def _base_dir(self, settings: "ToolSettings") -> Path:
        if settings.working_directory is not None:
            return self._env.make_absolute(settings.working_directory)
        return self._env.working_directory

    def _check(self, path: Path, attempted: List[str]) -> Optional[Path]:
        attempted.append(str(path))
        if self._fs.is_file(path):
            return path
        return None

    def _from_overrides(self, spec, settings, base: Path, attempted: List[str]) -> Optional[Path]:
        overrides = [settings.tool_path, self._registry.tool_paths.get(spec.name)]
        for override in overrides:
            if override is None:
                continue
            found = self._check(self._env.make_absolute(override, base), attempted)
            if found:
                return found
            _log.warning("Configured path for %s does not exist: %s", spec.name, override)
        return None

    def _from_tools_dir(self, spec, attempted: List[str]) -> Optional[Path]:
        tools_dir = self._registry.tools_dir
        if tools_dir is None:
            return None
        root = self._env.make_absolute(tools_dir)
        for name in spec.executable_names:
            found = self._check(root / name, attempted)
            if found:
                return found
        return None

    def _from_fallbacks(self, spec, base: Path, attempted: List[str]) -> Optional[Path]:
        for raw in spec.fallback_paths:
            root, rest = split_pattern(raw, base)
            if any(ch in rest for ch in "*?["):
                attempted.append(str(root / rest))
                found, count = newest_match(root, rest, self._fs)
                _log.debug("%s fallback %s matched %d candidate(s)", spec.name, raw, count)
            else:
                found = self._check(root / rest, attempted)
            if found:
                return found
        return None

    def _from_search_path(self, spec, attempted: List[str]) -> Optional[Path]:
        for name in spec.executable_names:
            attempted.append(f"PATH:{name}")
            found = self._env.which(name)
            if found:
                return found
        return None

    def _launcher_for(self, spec, executable: Path) -> List[str]:
        """Managed .exe tools run through mono everywhere but Windows."""
        if not spec.managed or self._env.is_windows or executable.suffix.lower() != ".exe":
            return []
        mono = self._env.which(MONO)
        if mono is None:
            raise ToolNotFoundError(MONO, [f"PATH:{MONO}"])
        return [str(mono)]
