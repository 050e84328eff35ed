"""Exceptions raised by the apidocs build pipeline."""

from __future__ import annotations

from pathlib import Path


class BuildError(RuntimeError):
    """Base class for failures that abort a build."""


class SourceDiscoveryError(BuildError):
    """Raised when a configured source root cannot be walked."""


class ParseError(BuildError):
    """Raised when the parser fails on a source file."""

    def __init__(self, path: Path, cause: BaseException) -> None:
        super().__init__(f"Failed to parse {path}: {cause}")
        self.path = path


class UnsupportedDefinitionError(BuildError):
    """Raised when a definition reaches a step that cannot handle its kind."""


class InvalidAttributeError(BuildError):
    """Raised when a declaration attribute carries values the pipeline cannot use."""


class CollisionError(BuildError):
    """Raised when two symbols claim the same index key or output path."""


__all__ = [
    "BuildError",
    "CollisionError",
    "InvalidAttributeError",
    "ParseError",
    "SourceDiscoveryError",
    "UnsupportedDefinitionError",
]
