"""Cross-reference and navigation index construction."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import CollisionError, InvalidAttributeError, UnsupportedDefinitionError
from .models import (
    CLASSISH_KINDS,
    ClassishIndexEntry,
    Definition,
    DefinitionKind,
    Documentable,
    FunctionIndexEntry,
    MethodIndexEntry,
    ParentRef,
    Product,
    ProductIndex,
    normalize_name,
)
from .paths import DocPaths, url_path

DEPRECATION_ATTRIBUTE = "__Deprecated"


@dataclass
class CrossReferenceIndex:
    """Lookup from qualified name to documentable, spanning every product."""

    functions: Dict[str, Documentable] = field(default_factory=dict)
    classes: Dict[str, Documentable] = field(default_factory=dict)
    interfaces: Dict[str, Documentable] = field(default_factory=dict)
    traits: Dict[str, Documentable] = field(default_factory=dict)
    # Type aliases are indexed for reference resolution but never emitted.
    types: Dict[str, Documentable] = field(default_factory=dict)
    newtypes: Dict[str, Documentable] = field(default_factory=dict)
    methods: Dict[str, List[Documentable]] = field(default_factory=dict)
    products: Dict[Tuple[DefinitionKind, str], Product] = field(default_factory=dict)

    def bucket(self, kind: DefinitionKind) -> Dict[str, Documentable]:
        if kind is DefinitionKind.FUNCTION:
            return self.functions
        if kind is DefinitionKind.CLASS:
            return self.classes
        if kind is DefinitionKind.INTERFACE:
            return self.interfaces
        if kind is DefinitionKind.TRAIT:
            return self.traits
        if kind is DefinitionKind.TYPE:
            return self.types
        if kind is DefinitionKind.NEWTYPE:
            return self.newtypes
        raise UnsupportedDefinitionError(f"No index bucket for {kind.value} definitions")

    def find_classish(self, name: str) -> Optional[Documentable]:
        for kind in CLASSISH_KINDS:
            found = self.bucket(kind).get(name)
            if found is not None:
                return found
        return None

    def methods_of(self, name: str) -> List[Documentable]:
        return self.methods.get(name, [])

    def product_of(self, definition: Definition) -> Optional[Product]:
        return self.products.get((definition.kind, definition.name))


def build_global_index(
    documentables: Mapping[Product, Sequence[Documentable]],
) -> CrossReferenceIndex:
    """Index every top-level documentable of every product by kind and qualified name."""
    index = CrossReferenceIndex()
    for product, items in documentables.items():
        for documentable in items:
            definition = documentable.definition
            if documentable.parent is not None:
                index.methods.setdefault(documentable.parent.name, []).append(documentable)
                continue
            bucket = index.bucket(definition.kind)
            if definition.name in bucket:
                raise CollisionError(
                    f"Duplicate {definition.kind.value} {definition.name} in cross-reference index"
                )
            bucket[definition.name] = documentable
            index.products[(definition.kind, definition.name)] = product

    for methods in index.methods.values():
        methods.sort(key=lambda item: item.definition.normalized_name)
    return index


def build_product_index(
    product: Product,
    documentables: Sequence[Documentable],
    paths: DocPaths,
) -> ProductIndex:
    """Build the navigation structure for one product."""
    ordered = sorted(documentables, key=lambda item: item.definition.name)
    methods_by_parent: Dict[ParentRef, List[Documentable]] = {}
    for documentable in ordered:
        if documentable.parent is not None:
            methods_by_parent.setdefault(documentable.parent, []).append(documentable)

    index = ProductIndex()
    for kind in CLASSISH_KINDS:
        entries = index.classish(kind)
        for documentable in ordered:
            definition = documentable.definition
            if documentable.parent is not None or definition.kind is not kind:
                continue
            key = normalize_name(definition.name)
            if key in entries:
                raise CollisionError(f"Duplicate {kind.value} {key} in {product.value} index")
            methods = methods_by_parent.get(ParentRef.of(definition), [])
            entries[key] = ClassishIndexEntry(
                kind=kind,
                name=definition.name,
                html_path=paths.html_for_classish(kind, definition.name),
                url_path=url_path(product, definition.name, kind),
                methods=_method_entries(product, paths, definition, methods),
            )

    for documentable in ordered:
        definition = documentable.definition
        if documentable.parent is not None or definition.kind is not DefinitionKind.FUNCTION:
            continue
        key = normalize_name(definition.name)
        if key in index.functions:
            raise CollisionError(f"Duplicate function {key} in {product.value} index")
        index.functions[key] = FunctionIndexEntry(
            name=definition.name,
            html_path=paths.html_for_function(definition.name),
            url_path=url_path(product, definition.name, DefinitionKind.FUNCTION),
            deprecation=_deprecation(definition),
        )
    return index


def _method_entries(
    product: Product,
    paths: DocPaths,
    owner: Definition,
    methods: Sequence[Documentable],
) -> Dict[str, MethodIndexEntry]:
    entries: Dict[str, MethodIndexEntry] = {}
    for method in sorted(methods, key=lambda item: item.definition.normalized_name):
        name = method.definition.name
        key = normalize_name(name)
        if key in entries:
            raise CollisionError(f"Duplicate method {owner.name}::{name} in {product.value} index")
        entries[key] = MethodIndexEntry(
            name=name,
            class_name=owner.name,
            class_kind=owner.kind,
            html_path=paths.html_for_method(owner.kind, owner.name, name),
            url_path=url_path(product, owner.name, owner.kind, name),
        )
    return entries


def _deprecation(definition: Definition) -> Optional[str]:
    values = definition.attributes.get(DEPRECATION_ATTRIBUTE)
    if values is None:
        return None
    if len(values) != 1:
        raise InvalidAttributeError(
            f"{DEPRECATION_ATTRIBUTE} on {definition.name} must have exactly one value, got {len(values)}"
        )
    return values[0]


__all__ = [
    "CrossReferenceIndex",
    "DEPRECATION_ATTRIBUTE",
    "build_global_index",
    "build_product_index",
]
