"""Source tree discovery."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence

from .errors import SourceDiscoveryError

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "__pycache__",
    ".idea",
}


def _iter_files(root: Path) -> Iterator[Path]:
    def _raise(exc: OSError) -> None:
        raise SourceDiscoveryError(f"Cannot walk source root {root}: {exc}") from exc

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames[:] = [name for name in dirnames if name not in _EXCLUDED_DIRS]
        current_dir = Path(dirpath)
        for filename in filenames:
            yield current_dir / filename


def _matches_prefix(rel_path: str, prefixes: Sequence[str]) -> bool:
    if not prefixes:
        return True
    return any(rel_path.startswith(prefix) for prefix in prefixes)


def find_sources(
    root: Path,
    extensions: Iterable[str],
    prefixes: Sequence[str] = (),
) -> List[Path]:
    """Return every file under ``root`` with an accepted extension, sorted by path."""
    root_path = Path(root).expanduser()
    if not root_path.exists():
        raise SourceDiscoveryError(f"Source root not found: {root}")
    if not root_path.is_dir():
        raise SourceDiscoveryError(f"Source root is not a directory: {root}")

    accepted = {ext.lower().lstrip(".") for ext in extensions}
    found: List[tuple[str, Path]] = []
    for path in _iter_files(root_path):
        suffix = path.suffix.lower().lstrip(".")
        if suffix not in accepted:
            continue
        rel_path = path.relative_to(root_path).as_posix()
        if not _matches_prefix(rel_path, prefixes):
            continue
        found.append((path.as_posix(), path))

    found.sort(key=lambda item: item[0])
    return [path for _, path in found]


__all__ = ["find_sources"]
