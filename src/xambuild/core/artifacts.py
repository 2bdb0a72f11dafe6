"""Locate build outputs by glob pattern."""

from __future__ import annotations

import glob as _glob
import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from xambuild.core.filesystem import FileSystem

_log = logging.getLogger(__name__)


def split_pattern(pattern: Union[str, Path], base: Path) -> Tuple[Path, str]:
    """Split ``pattern`` into a literal root directory and a glob remainder.

    ``/out/**/*.xam`` -> (``/out``, ``**/*.xam``). Relative patterns are
    anchored at ``base``.
    """
    parts = Path(pattern).parts
    literal: List[str] = []
    for i, part in enumerate(parts):
        if _glob.has_magic(part):
            rest = "/".join(parts[i:])
            break
        literal.append(part)
    else:
        # No wildcard: the last segment is the file name itself.
        literal, rest = literal[:-1], parts[-1] if parts else ""

    root = Path(*literal) if literal else Path(".")
    if not root.is_absolute():
        root = base / root
    return root, rest


def _matches(root: Path, pattern: str, fs: FileSystem) -> List[Tuple[Path, float]]:
    found: List[Tuple[Path, float]] = []
    for path in fs.glob(root, pattern):
        try:
            if not fs.is_file(path):
                continue
            found.append((path, fs.mtime(path)))
        except OSError:
            # Removed between listing and stat
            _log.debug("Skipping vanished entry %s", path)
    return found


def find_files(pattern: Union[str, Path], base: Path, fs: Optional[FileSystem] = None) -> List[Path]:
    """All files matching ``pattern``, sorted by path."""
    fs = fs or FileSystem()
    root, rest = split_pattern(pattern, base)
    if not rest:
        return []
    return sorted(p for p, _ in _matches(root, rest, fs))


def newest_match(root: Path, pattern: str, fs: FileSystem) -> Tuple[Optional[Path], int]:
    """Most recently modified match and the number of candidates considered.

    Ties on modification time go to the lexicographically smallest path.
    """
    candidates = sorted(_matches(root, pattern, fs), key=lambda c: str(c[0]))
    if not candidates:
        return None, 0
    return max(candidates, key=lambda c: c[1])[0], len(candidates)


def find_artifact(root: Path, pattern: str, fs: Optional[FileSystem] = None) -> Optional[Path]:
    """Return the most recently modified file under ``root`` matching ``pattern``.

    Returns None when nothing matches.
    """
    best, count = newest_match(root, pattern, fs or FileSystem())
    if best is None:
        _log.info("No artifact matching '%s' under %s", pattern, root)
        return None
    _log.info("Found artifact %s (%d candidate(s))", best, count)
    return best
