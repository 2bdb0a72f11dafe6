"""Host environment accessor: working directory, platform and executable search."""

from __future__ import annotations

import os
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union

PathLike = Union[str, os.PathLike]


@dataclass(frozen=True)
class BuildEnvironment:
    """Snapshot of the host the tools run on.

    Injected into every runner instead of reading ``os``/``sys`` globals
    directly, so tests can describe a Windows host while running on Linux.
    """

    working_directory: Path = field(default_factory=Path.cwd)
    platform: str = sys.platform
    variables: Dict[str, str] = field(default_factory=lambda: dict(os.environ))

    @property
    def is_windows(self) -> bool:
        return self.platform.startswith("win")

    @property
    def search_path(self) -> str:
        return self.variables.get("PATH", "")

    def make_absolute(self, path: PathLike, base: Optional[Path] = None) -> Path:
        p = Path(path).expanduser()
        if not p.is_absolute():
            p = (base or self.working_directory) / p
        return Path(os.path.normpath(p))

    def which(self, name: str) -> Optional[Path]:
        if not self.search_path:
            return None
        found = shutil.which(name, path=self.search_path)
        return Path(found) if found else None
