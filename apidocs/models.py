"""Core data models shared across apidocs components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

NAMESPACE_SEPARATOR = "\\"
NORMALIZED_SEPARATOR = "."


def normalize_name(name: str) -> str:
    """Return ``name`` with namespace separators replaced by dots."""
    return name.replace(NAMESPACE_SEPARATOR, NORMALIZED_SEPARATOR)


def bare_name(name: str) -> str:
    """Return the last namespace component of a qualified name."""
    return name.rsplit(NAMESPACE_SEPARATOR, 1)[-1]


class DefinitionKind(str, Enum):
    """Kinds of definitions a parser may report."""

    FUNCTION = "function"
    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"
    METHOD = "method"
    TYPE = "type"
    NEWTYPE = "newtype"

    @property
    def is_classish(self) -> bool:
        return self in CLASSISH_KINDS


CLASSISH_KINDS: Tuple[DefinitionKind, ...] = (
    DefinitionKind.CLASS,
    DefinitionKind.INTERFACE,
    DefinitionKind.TRAIT,
)


class Product(str, Enum):
    """Logical groupings of source trees for navigation purposes."""

    HACK = "hack"
    HSL = "hsl"
    HSL_EXPERIMENTAL = "hsl-experimental"


@dataclass(frozen=True, order=True)
class SourceLocation:
    """Where a definition was found."""

    path: str
    line: int = 0


@dataclass(frozen=True)
class Parameter:
    name: str
    type: Optional[str] = None
    default: Optional[str] = None
    variadic: bool = False


@dataclass(frozen=True)
class Definition:
    """A parsed program entity as reported by a parser."""

    name: str
    kind: DefinitionKind
    location: SourceLocation
    doc_comment: Optional[str] = None
    generics: Tuple[str, ...] = ()
    return_type: Optional[str] = None
    parameters: Tuple[Parameter, ...] = ()
    attributes: Dict[str, Tuple[str, ...]] = field(default_factory=dict, hash=False)
    visibility: Optional[str] = None
    parents: Tuple[str, ...] = ()

    @property
    def normalized_name(self) -> str:
        return normalize_name(self.name)

    @property
    def has_doc_comment(self) -> bool:
        return bool(self.doc_comment and self.doc_comment.strip())


@dataclass(frozen=True)
class ParentRef:
    """Lookup key for the classish that owns a method."""

    kind: DefinitionKind
    name: str

    @property
    def normalized_name(self) -> str:
        return normalize_name(self.name)

    @classmethod
    def of(cls, definition: Definition) -> "ParentRef":
        return cls(kind=definition.kind, name=definition.name)


@dataclass(frozen=True)
class Documentable:
    """A definition paired with the classish that owns it, if any."""

    definition: Definition
    parent: Optional[ParentRef] = None

    def __post_init__(self) -> None:
        if self.parent is None:
            return
        if not self.parent.kind.is_classish:
            raise ValueError(
                f"Parent of {self.definition.name} must be classish, got {self.parent.kind.value}"
            )
        if self.definition.kind is not DefinitionKind.METHOD:
            raise ValueError(
                f"Only methods may have a parent; {self.definition.name} is a {self.definition.kind.value}"
            )

    @property
    def key(self) -> Tuple[str, str, str]:
        """Identity used for merging and ordering.

        Functions and types live in separate symbol spaces, so a class and a
        function may share a name.
        """
        if self.parent is None:
            space = "function" if self.definition.kind is DefinitionKind.FUNCTION else "type"
            return (self.definition.normalized_name, "", space)
        return (self.parent.normalized_name, self.definition.normalized_name, "type")


@dataclass
class MethodIndexEntry:
    name: str
    class_name: str
    class_kind: DefinitionKind
    html_path: str
    url_path: str

    def to_payload(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "className": self.class_name,
            "classType": self.class_kind.value,
            "htmlPath": self.html_path,
            "urlPath": self.url_path,
        }


@dataclass
class ClassishIndexEntry:
    kind: DefinitionKind
    name: str
    html_path: str
    url_path: str
    methods: Dict[str, MethodIndexEntry] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, object]:
        return {
            "type": self.kind.value,
            "name": self.name,
            "htmlPath": self.html_path,
            "urlPath": self.url_path,
            "methods": {key: method.to_payload() for key, method in self.methods.items()},
        }


@dataclass
class FunctionIndexEntry:
    name: str
    html_path: str
    url_path: str
    deprecation: Optional[str] = None

    def to_payload(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "htmlPath": self.html_path,
            "urlPath": self.url_path,
            "deprecation": self.deprecation,
        }


@dataclass
class ProductIndex:
    """Navigation structure for one product, consumed by the web front-end."""

    classes: Dict[str, ClassishIndexEntry] = field(default_factory=dict)
    interfaces: Dict[str, ClassishIndexEntry] = field(default_factory=dict)
    traits: Dict[str, ClassishIndexEntry] = field(default_factory=dict)
    functions: Dict[str, FunctionIndexEntry] = field(default_factory=dict)

    def classish(self, kind: DefinitionKind) -> Dict[str, ClassishIndexEntry]:
        if kind is DefinitionKind.CLASS:
            return self.classes
        if kind is DefinitionKind.INTERFACE:
            return self.interfaces
        if kind is DefinitionKind.TRAIT:
            return self.traits
        raise ValueError(f"Not a classish kind: {kind.value}")

    def to_payload(self) -> Dict[str, object]:
        return {
            DefinitionKind.CLASS.value: _entries_payload(self.classes),
            DefinitionKind.INTERFACE.value: _entries_payload(self.interfaces),
            DefinitionKind.TRAIT.value: _entries_payload(self.traits),
            DefinitionKind.FUNCTION.value: _entries_payload(self.functions),
        }


def _entries_payload(entries: Dict[str, object]) -> Dict[str, object]:
    return {key: entry.to_payload() for key, entry in entries.items()}  # type: ignore[attr-defined]


@dataclass
class BuildResult:
    """Outcome of a pipeline run that was not skipped."""

    fingerprint: str
    files: List[str]
    indexes: Dict[Product, ProductIndex]
