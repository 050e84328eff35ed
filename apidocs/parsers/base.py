"""Base class for parser plugins."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence, Tuple

from ..models import Definition

ParsedDefinition = Tuple[Definition, Optional[Definition]]


class DefinitionParser(ABC):
    """Contract for parsers that extract definitions from one source file."""

    @abstractmethod
    def parse(self, path: Path) -> Sequence[ParsedDefinition]:
        """Return ``(definition, parent)`` pairs; ``parent`` is set for methods only."""
