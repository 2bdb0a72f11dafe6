"""Thin filesystem accessor used by the resolver and the artifact locator."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator


class FileSystem:
    def is_file(self, path: Path) -> bool:
        return path.is_file()

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def glob(self, root: Path, pattern: str) -> Iterator[Path]:
        """Yield entries under ``root`` matching ``pattern`` (``**`` recurses)."""
        if not root.is_dir():
            return iter(())
        return root.glob(pattern)

    def mtime(self, path: Path) -> float:
        """Last modification time; raises ``OSError`` if the entry is gone."""
        return path.stat().st_mtime
