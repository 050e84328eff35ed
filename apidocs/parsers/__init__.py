"""Parser plugins and discovery."""

from __future__ import annotations

from typing import Callable, Dict

from ..plugins import load_plugin
from .base import DefinitionParser, ParsedDefinition
from .hack import HackDefinitionParser

_ENTRY_POINT_GROUP = "apidocs.parsers"

_BUILTIN_FACTORIES: Dict[str, Callable[[], DefinitionParser]] = {
    "hack": HackDefinitionParser,
}


def load_parser(name: str = "hack") -> DefinitionParser:
    """Return the parser registered as ``name``."""
    return load_plugin(
        name,
        group=_ENTRY_POINT_GROUP,
        base=DefinitionParser,
        builtins=_BUILTIN_FACTORIES,
    )


__all__ = [
    "DefinitionParser",
    "HackDefinitionParser",
    "ParsedDefinition",
    "load_parser",
]
