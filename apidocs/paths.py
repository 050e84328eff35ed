"""Deterministic mapping from symbols to output files and serving URLs."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

from .errors import UnsupportedDefinitionError
from .models import DefinitionKind, Product, normalize_name

MARKDOWN_SUFFIX = ".md"
HTML_SUFFIX = ".html"


def _require_classish(kind: DefinitionKind) -> None:
    if not kind.is_classish:
        raise UnsupportedDefinitionError(f"Not a classish kind: {kind.value}")


def url_segments(
    product: Product,
    name: str,
    kind: DefinitionKind,
    method: Optional[str] = None,
) -> Tuple[str, ...]:
    """Return the URL path segments serving a symbol's page."""
    if kind is DefinitionKind.FUNCTION:
        if method is not None:
            raise UnsupportedDefinitionError("Functions have no methods")
    else:
        _require_classish(kind)
    segments: Tuple[str, ...] = (product.value, "reference", kind.value, normalize_name(name))
    if method is not None:
        segments += (normalize_name(method),)
    return segments


def url_path(
    product: Product,
    name: str,
    kind: DefinitionKind,
    method: Optional[str] = None,
) -> str:
    return "/" + "/".join(url_segments(product, name, kind, method)) + "/"


class DocPaths:
    """Derives Markdown and HTML paths for one product."""

    def __init__(self, product: Product, markdown_root: Path, html_root: Path) -> None:
        self.product = product
        self.markdown_root = Path(markdown_root)
        self.html_root = Path(html_root)

    @property
    def product_dir(self) -> Path:
        return self.markdown_root / self.product.value

    def markdown_for_function(self, name: str) -> Path:
        return self.product_dir / DefinitionKind.FUNCTION.value / f"{normalize_name(name)}{MARKDOWN_SUFFIX}"

    def markdown_for_classish(self, kind: DefinitionKind, name: str) -> Path:
        _require_classish(kind)
        return self.product_dir / kind.value / f"{normalize_name(name)}{MARKDOWN_SUFFIX}"

    def markdown_for_method(self, kind: DefinitionKind, class_name: str, method: str) -> Path:
        _require_classish(kind)
        return (
            self.product_dir
            / kind.value
            / normalize_name(class_name)
            / f"{normalize_name(method)}{MARKDOWN_SUFFIX}"
        )

    def html_for_function(self, name: str) -> str:
        return self._html(DefinitionKind.FUNCTION, name)

    def html_for_classish(self, kind: DefinitionKind, name: str) -> str:
        _require_classish(kind)
        return self._html(kind, name)

    def html_for_method(self, kind: DefinitionKind, class_name: str, method: str) -> str:
        _require_classish(kind)
        return self._html(kind, class_name, method)

    def _html(self, kind: DefinitionKind, name: str, method: Optional[str] = None) -> str:
        base = self.html_root / self.product.value / kind.value
        if method is None:
            path = base / f"{normalize_name(name)}{HTML_SUFFIX}"
        else:
            path = base / normalize_name(name) / f"{normalize_name(method)}{HTML_SUFFIX}"
        return path.as_posix()


__all__ = ["DocPaths", "url_path", "url_segments"]
