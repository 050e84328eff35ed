"""Reconciles definitions of the same symbol found in several source roots."""

from __future__ import annotations

import dataclasses
from typing import Dict, Iterable, List, Tuple

from .models import Definition, Documentable, ParentRef


def _preference(indexed: Tuple[int, Documentable]) -> Tuple[bool, object, int]:
    position, documentable = indexed
    definition = documentable.definition
    return (not definition.has_doc_comment, definition.location, position)


def merge_all(documentables: Iterable[Documentable]) -> List[Documentable]:
    """Return one representative per symbol, ordered by normalized name.

    A documented copy beats an undocumented one; otherwise the copy whose
    source location sorts first wins. Methods are re-pointed at the chosen
    copy of their classish, since two roots may disagree on its kind.
    """
    groups: Dict[Tuple[str, str, str], List[Tuple[int, Documentable]]] = {}
    for position, documentable in enumerate(documentables):
        groups.setdefault(documentable.key, []).append((position, documentable))

    chosen: List[Documentable] = []
    for key in sorted(groups):
        _, representative = min(groups[key], key=_preference)
        chosen.append(representative)

    classish: Dict[str, Definition] = {
        item.definition.normalized_name: item.definition
        for item in chosen
        if item.parent is None and item.definition.kind.is_classish
    }
    merged: List[Documentable] = []
    for item in chosen:
        if item.parent is not None:
            owner = classish.get(item.parent.normalized_name)
            if owner is not None and owner.kind is not item.parent.kind:
                item = dataclasses.replace(item, parent=ParentRef.of(owner))
        merged.append(item)
    return merged


__all__ = ["merge_all"]
