"""Jinja2-backed Markdown renderer."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Set

from jinja2 import Environment, FileSystemLoader

from ..errors import UnsupportedDefinitionError
from ..index import DEPRECATION_ATTRIBUTE, CrossReferenceIndex
from ..models import (
    NAMESPACE_SEPARATOR,
    Definition,
    DefinitionKind,
    Documentable,
    Parameter,
    bare_name,
)
from ..paths import url_path
from .base import OutputFormat, RenderConfig, Renderer

_HIGHLIGHT_LANGUAGE = "Hack"


class MarkdownRenderer(Renderer):
    """Renders documentables through the templates shipped with the package."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        directories = []
        if templates_dir is not None:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        self._env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(
        self,
        documentable: Documentable,
        index: CrossReferenceIndex,
        config: RenderConfig,
    ) -> str:
        if config.format is not OutputFormat.MARKDOWN:
            raise UnsupportedDefinitionError(f"Unsupported output format: {config.format.value}")

        definition = documentable.definition
        context: Dict[str, object] = {
            "definition": definition,
            "title": definition.name,
            "doc": (definition.doc_comment or "").strip(),
            "fence": _HIGHLIGHT_LANGUAGE if config.syntax_highlighting else "",
            "deprecation": _deprecation(definition),
        }

        if documentable.parent is not None:
            owner = documentable.parent
            context["title"] = f"{owner.name}::{definition.name}"
            context["owner"] = self._link(index, owner.name)
            context["signature"] = _callable_signature(definition)
            context["parameters"] = [_format_parameter(p) for p in definition.parameters]
            template = "method.md.j2"
        elif definition.kind is DefinitionKind.FUNCTION:
            context["signature"] = _callable_signature(definition)
            context["parameters"] = [_format_parameter(p) for p in definition.parameters]
            template = "function.md.j2"
        elif definition.kind.is_classish:
            context["signature"] = _classish_signature(definition)
            context["parents"] = [
                self._link(index, _resolve_classish(index, name, definition.name))
                for name in definition.parents
            ]
            context["methods"] = self._method_links(
                index, index.methods_of(definition.name), config
            )
            context["inherited"] = (
                []
                if config.hide_inherited_methods
                else self._inherited_links(index, definition, config)
            )
            template = "classish.md.j2"
        else:
            raise UnsupportedDefinitionError(
                f"Cannot render {definition.kind.value} definition {definition.name}"
            )

        return self._env.get_template(template).render(**context).strip()

    def _link(self, index: CrossReferenceIndex, name: str, method: Optional[str] = None) -> str:
        label = f"{name}::{method}" if method else name
        target = index.find_classish(name)
        if target is None and method is None:
            target = index.functions.get(name)
        product = index.product_of(target.definition) if target is not None else None
        if target is None or product is None:
            return f"`{label}`"
        return f"[`{label}`]({url_path(product, name, target.definition.kind, method)})"

    def _method_links(
        self,
        index: CrossReferenceIndex,
        methods: List[Documentable],
        config: RenderConfig,
    ) -> List[Dict[str, str]]:
        links = []
        for method in methods:
            definition = method.definition
            if config.hide_private_methods and definition.visibility == "private":
                continue
            owner = method.parent.name if method.parent else ""
            links.append(
                {
                    "link": self._link(index, owner, definition.name),
                    "summary": _summary(definition.doc_comment),
                }
            )
        return links

    def _inherited_links(
        self,
        index: CrossReferenceIndex,
        definition: Definition,
        config: RenderConfig,
    ) -> List[Dict[str, str]]:
        seen: Set[str] = {method.definition.name.lower() for method in index.methods_of(definition.name)}
        visited: Set[str] = {definition.name}
        queue = [_resolve_classish(index, name, definition.name) for name in definition.parents]
        inherited: List[Documentable] = []
        while queue:
            name = queue.pop(0)
            if name in visited:
                continue
            visited.add(name)
            ancestor = index.find_classish(name)
            if ancestor is None:
                continue
            for method in index.methods_of(name):
                key = method.definition.name.lower()
                if key not in seen:
                    seen.add(key)
                    inherited.append(method)
            queue.extend(
                _resolve_classish(index, parent, ancestor.definition.name)
                for parent in ancestor.definition.parents
            )
        return self._method_links(index, inherited, config)


def _resolve_classish(index: CrossReferenceIndex, name: str, context: str) -> str:
    """Return the qualified name that ``name`` refers to from inside ``context``."""
    candidates = []
    if NAMESPACE_SEPARATOR in context:
        namespace = context.rsplit(NAMESPACE_SEPARATOR, 1)[0]
        candidates.append(f"{namespace}{NAMESPACE_SEPARATOR}{name}")
    candidates.append(name)
    # Core types are visible everywhere without a use statement.
    candidates.append(f"HH{NAMESPACE_SEPARATOR}{name}")
    for candidate in candidates:
        if index.find_classish(candidate) is not None:
            return candidate
    return name


def _deprecation(definition: Definition) -> Optional[str]:
    values = definition.attributes.get(DEPRECATION_ATTRIBUTE)
    if not values:
        return None
    return values[0]


def _summary(doc_comment: Optional[str]) -> str:
    if not doc_comment:
        return ""
    return doc_comment.strip().split("\n\n", 1)[0].replace("\n", " ")


def _format_parameter(parameter: Parameter) -> str:
    text = f"${parameter.name}" if parameter.name else ""
    if parameter.variadic:
        text = f"...{text}"
    if parameter.type:
        text = f"{parameter.type} {text}".strip()
    if parameter.default is not None:
        text = f"{text} = {parameter.default}"
    return text


def _generics(definition: Definition) -> str:
    return f"<{', '.join(definition.generics)}>" if definition.generics else ""


def _callable_signature(definition: Definition) -> str:
    prefix = f"{definition.visibility} " if definition.visibility else ""
    params = ", ".join(_format_parameter(p) for p in definition.parameters)
    signature = f"{prefix}function {bare_name(definition.name)}{_generics(definition)}({params})"
    if definition.return_type:
        signature = f"{signature}: {definition.return_type}"
    return signature


def _classish_signature(definition: Definition) -> str:
    signature = f"{definition.kind.value} {bare_name(definition.name)}{_generics(definition)}"
    if definition.parents:
        signature = f"{signature} extends {', '.join(definition.parents)}"
    return signature + " {...}"


__all__ = ["MarkdownRenderer"]
