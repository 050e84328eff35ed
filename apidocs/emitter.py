"""Writes one rendered document per documentable."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Set

from .errors import CollisionError, UnsupportedDefinitionError
from .index import CrossReferenceIndex
from .logging import get_logger
from .models import DefinitionKind, Documentable, Product
from .paths import DocPaths
from .renderers import OutputFormat, RenderConfig, Renderer

GENERATED_MARKER = "<!-- APIDOCS -->"

RENDER_CONFIG = RenderConfig(
    format=OutputFormat.MARKDOWN,
    syntax_highlighting=True,
    hide_private_methods=True,
    hide_inherited_methods=False,
)


def is_generated(text: str) -> bool:
    """Return True when ``text`` was written by the emitter."""
    return text.rstrip().endswith(GENERATED_MARKER)


def document_path(paths: DocPaths, documentable: Documentable) -> Path:
    """Return the Markdown path for a documentable."""
    definition = documentable.definition
    if definition.kind is DefinitionKind.METHOD:
        parent = documentable.parent
        if parent is None:
            raise UnsupportedDefinitionError(f"Method {definition.name} has no owning classish")
        return paths.markdown_for_method(parent.kind, parent.name, definition.name)
    if definition.kind is DefinitionKind.FUNCTION:
        return paths.markdown_for_function(definition.name)
    if definition.kind.is_classish:
        return paths.markdown_for_classish(definition.kind, definition.name)
    raise UnsupportedDefinitionError(
        f"Can't handle {definition.kind.value} definition {definition.name}"
    )


class ArtifactEmitter:
    """Renders documentables and writes them under the Markdown root."""

    def __init__(self, renderer: Renderer, markdown_root: Path, html_root: Path) -> None:
        self.renderer = renderer
        self.markdown_root = Path(markdown_root)
        self.html_root = Path(html_root)
        self.logger = get_logger("emitter")
        self._written: Set[Path] = set()

    def paths_for(self, product: Product) -> DocPaths:
        return DocPaths(product, self.markdown_root, self.html_root)

    def emit(
        self,
        product: Product,
        documentables: Sequence[Documentable],
        index: CrossReferenceIndex,
    ) -> List[Path]:
        """Write every documentable of ``product`` and return the paths in order."""
        paths = self.paths_for(product)
        paths.product_dir.mkdir(parents=True, exist_ok=True)

        written: List[Path] = []
        for documentable in documentables:
            path = document_path(paths, documentable)
            if path in self._written:
                raise CollisionError(f"Output path {path} produced twice")
            self._written.add(path)

            text = self.renderer.render(documentable, index, RENDER_CONFIG)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(f"{text}\n{GENERATED_MARKER}\n", encoding="utf-8")
            self.logger.debug("Wrote %s", path)
            written.append(path)
        return written


__all__ = [
    "ArtifactEmitter",
    "GENERATED_MARKER",
    "RENDER_CONFIG",
    "document_path",
    "is_generated",
]
