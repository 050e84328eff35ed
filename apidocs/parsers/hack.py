"""Tree-sitter powered declaration parser for Hack and HHI sources."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from tree_sitter import Parser
from tree_sitter_languages import get_language

from ..logging import get_logger
from ..models import Definition, DefinitionKind, Parameter, SourceLocation
from .base import DefinitionParser, ParsedDefinition

_LANGUAGE_KEY = "hack"

_CLASSISH_NODES: Dict[str, DefinitionKind] = {
    "class_declaration": DefinitionKind.CLASS,
    "interface_declaration": DefinitionKind.INTERFACE,
    "trait_declaration": DefinitionKind.TRAIT,
}
_PARENT_CLAUSES = ("extends_clause", "implements_clause")
_NAME_NODES = ("qualified_identifier", "identifier")
_PARAMETER_MODIFIERS = {"attribute_modifier", "visibility_modifier", "inout_modifier", "comment"}

# Parser objects are not thread-safe and the runner parses files concurrently.
_thread_state = threading.local()

logger = get_logger("parsers.hack")


class HackDefinitionParser(DefinitionParser):
    """Extracts classes, interfaces, traits, functions and methods from Hack files.

    Only declarations at file or namespace level are reported, together with
    the methods of the classish ones. Enums, enum classes and type aliases are
    skipped.
    """

    cache_version = "2"

    def parse(self, path: Path) -> Sequence[ParsedDefinition]:
        source = Path(path).read_text(encoding="utf-8")
        source_bytes = source.encode("utf-8")
        tree = _get_parser().parse(source_bytes)
        if tree.root_node.has_error:
            logger.warning("Syntax errors in %s; declarations inside them are skipped", path)
        return _DeclarationCollector(str(path), source_bytes).collect(tree.root_node)


def _get_parser() -> Parser:
    parser = getattr(_thread_state, "parser", None)
    if parser is None:
        parser = Parser()
        parser.set_language(get_language(_LANGUAGE_KEY))
        _thread_state.parser = parser
    return parser


class _DeclarationCollector:
    def __init__(self, path: str, source_bytes: bytes) -> None:
        self.path = path
        self.source_bytes = source_bytes

    def collect(self, root) -> List[ParsedDefinition]:  # type: ignore[no-untyped-def]
        found: List[ParsedDefinition] = []
        self._collect_statements(root.children, "", found)
        return found

    def _collect_statements(self, nodes, namespace: str, found: List[ParsedDefinition]) -> None:  # type: ignore[no-untyped-def]
        for node in nodes:
            if node.type == "namespace_declaration":
                name = self._namespace_name(node)
                body = _child(node, "body", "compound_statement")
                if body is None:
                    # `namespace Foo;` applies to every following statement.
                    namespace = name
                else:
                    self._collect_statements(body.children, name, found)
            elif node.type == "function_declaration":
                function = self._callable(node, DefinitionKind.FUNCTION, namespace)
                if function is not None:
                    found.append((function, None))
            elif node.type in _CLASSISH_NODES:
                found.extend(self._classish(node, namespace))

    def _classish(self, node, namespace: str) -> List[ParsedDefinition]:  # type: ignore[no-untyped-def]
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return []
        classish = Definition(
            name=_qualify(namespace, self._text(name_node)),
            kind=_CLASSISH_NODES[node.type],
            location=self._location(name_node),
            doc_comment=self._doc_comment(node),
            generics=self._generics(node),
            attributes=self._attributes(node),
            parents=self._parents(node),
        )
        entries: List[ParsedDefinition] = [(classish, None)]
        body = _child(node, "body", "member_declarations")
        if body is None:
            return entries
        for member in body.named_children:
            if member.type != "method_declaration":
                continue
            visibility = next(
                (self._text(child) for child in member.named_children if child.type == "visibility_modifier"),
                "public",
            )
            method = self._callable(member, DefinitionKind.METHOD, "", visibility=visibility)
            if method is not None:
                entries.append((method, classish))
        return entries

    def _callable(  # type: ignore[no-untyped-def]
        self,
        node,
        kind: DefinitionKind,
        namespace: str,
        *,
        visibility: Optional[str] = None,
    ) -> Optional[Definition]:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        return_node = node.child_by_field_name("return_type")
        parameters = _child(node, None, "parameters")
        return Definition(
            name=_qualify(namespace, self._text(name_node)),
            kind=kind,
            location=self._location(name_node),
            doc_comment=self._doc_comment(node),
            generics=self._generics(node),
            return_type=_squash(self._text(return_node)) or None if return_node is not None else None,
            parameters=self._parameters(parameters) if parameters is not None else (),
            attributes=self._attributes(node),
            visibility=visibility,
        )

    def _parameters(self, node) -> Tuple[Parameter, ...]:  # type: ignore[no-untyped-def]
        parameters: List[Parameter] = []
        for child in node.named_children:
            if child.type == "parameter":
                parameters.append(self._parameter(child))
            elif child.type == "variadic_modifier":
                # A bare `...` accepts any number of untyped arguments.
                parameters.append(Parameter(name="", variadic=True))
        return tuple(parameters)

    def _parameter(self, node) -> Parameter:  # type: ignore[no-untyped-def]
        name = ""
        type_text: Optional[str] = None
        variadic = False
        for child in node.named_children:
            if child.type == "variable":
                name = self._text(child).lstrip("$")
                break
            if child.type == "variadic_modifier":
                variadic = True
            elif child.type not in _PARAMETER_MODIFIERS and type_text is None:
                type_text = _squash(self._text(child)) or None
        default_node = node.child_by_field_name("default_value")
        default = _squash(self._text(default_node)) or None if default_node is not None else None
        return Parameter(name=name, type=type_text, default=default, variadic=variadic)

    def _generics(self, node) -> Tuple[str, ...]:  # type: ignore[no-untyped-def]
        type_parameters = _child(node, None, "type_parameters")
        if type_parameters is None:
            return ()
        return tuple(
            _squash(self._text(child))
            for child in type_parameters.named_children
            if child.type == "type_parameter"
        )

    def _parents(self, node) -> Tuple[str, ...]:  # type: ignore[no-untyped-def]
        names: List[str] = []
        for clause in node.named_children:
            if clause.type not in _PARENT_CLAUSES:
                continue
            for parent in clause.named_children:
                if parent.type == "comment":
                    continue
                name = self._text(parent).split("<", 1)[0].strip().lstrip("\\")
                if name:
                    names.append(name)
        return tuple(names)

    def _attributes(self, node) -> Dict[str, Tuple[str, ...]]:  # type: ignore[no-untyped-def]
        # Only the leading `<<...>>` block belongs to the declaration itself.
        if not node.children or node.children[0].type != "attribute_modifier":
            return {}
        attributes: Dict[str, Tuple[str, ...]] = {}
        current: Optional[str] = None
        for child in node.children[0].named_children:
            if child.type in _NAME_NODES:
                current = self._text(child).lstrip("\\")
                attributes[current] = ()
            elif child.type == "arguments" and current is not None:
                attributes[current] = tuple(
                    _unquote(self._text(argument))
                    for argument in child.named_children
                    if argument.type != "comment"
                )
        return attributes

    def _doc_comment(self, node) -> Optional[str]:  # type: ignore[no-untyped-def]
        previous = node.prev_sibling
        if previous is None or previous.type != "comment":
            return None
        text = self._text(previous)
        if not text.startswith("/**") or text.startswith("/**/"):
            return None
        if self.source_bytes[previous.end_byte : node.start_byte].strip():
            return None
        return _clean_doc_comment(text) or None

    def _namespace_name(self, node) -> str:  # type: ignore[no-untyped-def]
        name_node = node.child_by_field_name("name")
        if name_node is None:
            name_node = next((child for child in node.named_children if child.type in _NAME_NODES), None)
        return self._text(name_node).strip("\\") if name_node is not None else ""

    def _location(self, node) -> SourceLocation:  # type: ignore[no-untyped-def]
        return SourceLocation(path=self.path, line=node.start_point[0] + 1)

    def _text(self, node) -> str:  # type: ignore[no-untyped-def]
        return self.source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def _child(node, field: Optional[str], node_type: str):  # type: ignore[no-untyped-def]
    if field is not None:
        found = node.child_by_field_name(field)
        if found is not None:
            return found
    return next((child for child in node.named_children if child.type == node_type), None)


def _qualify(namespace: str, name: str) -> str:
    return f"{namespace}\\{name}" if namespace else name


def _squash(text: str) -> str:
    return " ".join(text.split())


def _clean_doc_comment(text: str) -> str:
    body = text[3:-2] if text.endswith("*/") else text[3:]
    lines = []
    for line in body.splitlines():
        stripped = line.strip()
        if stripped.startswith("*"):
            stripped = stripped[1:]
            if stripped.startswith(" "):
                stripped = stripped[1:]
        lines.append(stripped.rstrip())
    return "\n".join(lines).strip()


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        return value[1:-1]
    return value


__all__ = ["HackDefinitionParser"]
