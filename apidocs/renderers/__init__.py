"""Renderer plugins and discovery."""

from __future__ import annotations

from typing import Callable, Dict

from ..plugins import load_plugin
from .base import OutputFormat, RenderConfig, Renderer
from .markdown import MarkdownRenderer

_ENTRY_POINT_GROUP = "apidocs.renderers"

_BUILTIN_FACTORIES: Dict[str, Callable[[], Renderer]] = {
    "markdown": MarkdownRenderer,
}


def load_renderer(name: str = "markdown") -> Renderer:
    """Return the renderer registered as ``name``."""
    return load_plugin(
        name,
        group=_ENTRY_POINT_GROUP,
        base=Renderer,
        builtins=_BUILTIN_FACTORIES,
    )


__all__ = [
    "MarkdownRenderer",
    "OutputFormat",
    "RenderConfig",
    "Renderer",
    "load_renderer",
]
