"""Base class and options for renderer plugins."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ..models import Documentable

if TYPE_CHECKING:
    from ..index import CrossReferenceIndex


class OutputFormat(str, Enum):
    MARKDOWN = "markdown"


@dataclass(frozen=True)
class RenderConfig:
    """Options every renderer receives."""

    format: OutputFormat = OutputFormat.MARKDOWN
    syntax_highlighting: bool = True
    hide_private_methods: bool = True
    hide_inherited_methods: bool = False


class Renderer(ABC):
    """Contract for renderers that turn one documentable into text."""

    @abstractmethod
    def render(
        self,
        documentable: Documentable,
        index: "CrossReferenceIndex",
        config: RenderConfig,
    ) -> str:
        """Return the rendered documentation for ``documentable``."""
