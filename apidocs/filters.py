"""Policies deciding which definitions are documented."""

from __future__ import annotations

import dataclasses
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import DocumentabilityConfig, EcosystemConfig
from .errors import UnsupportedDefinitionError
from .models import (
    NAMESPACE_SEPARATOR,
    Definition,
    DefinitionKind,
    Documentable,
    ParentRef,
    bare_name,
)

# Reflection helpers declared without a namespace in the type declarations
# but only ever called through HH\.
SPECIAL_FUNCTION_NAMES = frozenset({"fun", "meth_caller", "class_meth", "inst_meth"})
SPECIAL_NAMESPACE = "HH"

_PRIVATE_SEGMENT = "_Private"


def correct_special_name(definition: Definition) -> Definition:
    """Return ``definition`` with its namespaced name if it is a special helper."""
    if definition.kind is not DefinitionKind.FUNCTION:
        return definition
    if definition.name not in SPECIAL_FUNCTION_NAMES:
        return definition
    return dataclasses.replace(
        definition, name=f"{SPECIAL_NAMESPACE}{NAMESPACE_SEPARATOR}{definition.name}"
    )


def _in_namespace(name: str, namespace: str) -> bool:
    namespace = namespace.strip(NAMESPACE_SEPARATOR)
    if not namespace:
        return False
    return name == namespace or name.startswith(namespace + NAMESPACE_SEPARATOR)


class DocumentabilityPolicy:
    """Decides whether a definition must never be documented."""

    def __init__(self, config: DocumentabilityConfig | None = None) -> None:
        config = config or DocumentabilityConfig()
        self.internal_namespaces = list(config.internal_namespaces)
        self.excluded_attributes = set(config.excluded_attributes)

    def should_not_document(self, definition: Definition) -> bool:
        name = definition.name
        if any(_in_namespace(name, namespace) for namespace in self.internal_namespaces):
            return True
        if _PRIVATE_SEGMENT in name.split(NAMESPACE_SEPARATOR)[:-1]:
            return True
        if self.excluded_attributes.intersection(definition.attributes):
            return True
        if definition.kind is DefinitionKind.METHOD:
            return definition.visibility == "private"
        return bare_name(name).startswith("__")


class EcosystemFilter:
    """Separates ecosystem builtins from those inherited from the base language."""

    def __init__(self, config: EcosystemConfig | None = None) -> None:
        config = config or EcosystemConfig()
        self.namespaces = list(config.namespaces)
        self.name_prefixes = [prefix.lower() for prefix in config.name_prefixes]
        self.names = set(config.names)
        self.attributes = set(config.attributes)

    def is_ecosystem_specific(self, definition: Definition) -> bool:
        name = definition.name
        if name in self.names:
            return True
        if any(_in_namespace(name, namespace) for namespace in self.namespaces):
            return True
        if any(bare_name(name).lower().startswith(prefix) for prefix in self.name_prefixes):
            return True
        return bool(self.attributes.intersection(definition.attributes))

    def filter_documentables(self, documentables: Sequence[Documentable]) -> List[Documentable]:
        """Drop documentables whose parent (or, for top-level symbols, self) is not ecosystem-specific."""
        parents: Dict[Tuple[DefinitionKind, str], Definition] = {
            (item.definition.kind, item.definition.normalized_name): item.definition
            for item in documentables
            if item.parent is None and item.definition.kind.is_classish
        }

        kept: List[Documentable] = []
        for item in documentables:
            if item.parent is not None:
                parent = _resolve_parent(parents, item.parent)
                if parent is None:
                    raise UnsupportedDefinitionError(
                        f"Method {item.definition.name} refers to missing "
                        f"{item.parent.kind.value} {item.parent.name}"
                    )
                if self.is_ecosystem_specific(parent):
                    kept.append(item)
                continue
            if self.is_ecosystem_specific(item.definition):
                kept.append(item)
        return kept


def _resolve_parent(
    parents: Dict[Tuple[DefinitionKind, str], Definition], ref: ParentRef
) -> Optional[Definition]:
    return parents.get((ref.kind, ref.normalized_name))


def drop_undocumentable(
    pairs: Iterable[Tuple[Definition, Optional[Definition]]],
    policy: DocumentabilityPolicy,
) -> List[Documentable]:
    """Convert parser output to documentables, skipping excluded symbols and their members."""
    documentables: List[Documentable] = []
    for definition, parent in pairs:
        if parent is not None and policy.should_not_document(parent):
            continue
        if policy.should_not_document(definition):
            continue
        documentables.append(
            Documentable(definition=definition, parent=ParentRef.of(parent) if parent else None)
        )
    return documentables


__all__ = [
    "DocumentabilityPolicy",
    "EcosystemFilter",
    "SPECIAL_FUNCTION_NAMES",
    "correct_special_name",
    "drop_undocumentable",
]
