"""Tests for documentability and ecosystem filtering."""

from __future__ import annotations

import pytest

from apidocs.config import EcosystemConfig
from apidocs.errors import UnsupportedDefinitionError
from apidocs.filters import (
    DocumentabilityPolicy,
    EcosystemFilter,
    correct_special_name,
    drop_undocumentable,
)
from apidocs.models import Definition, DefinitionKind, Documentable, ParentRef, SourceLocation


def _definition(name: str, kind: DefinitionKind = DefinitionKind.FUNCTION, **kwargs) -> Definition:
    return Definition(name=name, kind=kind, location=SourceLocation("builtins.hhi", 1), **kwargs)


def _method(name: str, visibility: str = "public") -> Definition:
    return _definition(name, DefinitionKind.METHOD, visibility=visibility)


@pytest.mark.parametrize("name", ["fun", "meth_caller", "class_meth", "inst_meth"])
def test_correct_special_name_adds_hh_namespace(name: str) -> None:
    corrected = correct_special_name(_definition(name))
    assert corrected.name == f"HH\\{name}"


def test_correct_special_name_leaves_other_symbols_alone() -> None:
    method = _method("fun")
    namespaced = _definition("Foo\\fun")
    plain = _definition("funny")

    assert correct_special_name(method) is method
    assert correct_special_name(namespaced) is namespaced
    assert correct_special_name(plain) is plain


@pytest.mark.parametrize(
    "definition",
    [
        _definition("__SystemLib\\Foo", DefinitionKind.CLASS),
        _definition("HH\\Lib\\_Private\\helper"),
        _definition("Foo\\_Private\\Bar", DefinitionKind.CLASS),
        _definition("Foo\\hidden", attributes={"__NoDoc": ()}),
        _definition("__hhvm_intrinsic"),
        _method("secret", visibility="private"),
    ],
)
def test_policy_excludes_internal_symbols(definition: Definition) -> None:
    assert DocumentabilityPolicy().should_not_document(definition) is True


@pytest.mark.parametrize(
    "definition",
    [
        _definition("HH\\Lib\\Vec\\map"),
        _definition("HH\\Vector", DefinitionKind.CLASS),
        _method("__construct"),
        _method("helper", visibility="protected"),
        _definition("HH\\Lib\\PrivateThing", DefinitionKind.CLASS),
    ],
)
def test_policy_documents_public_symbols(definition: Definition) -> None:
    assert DocumentabilityPolicy().should_not_document(definition) is False


def test_drop_undocumentable_skips_members_of_excluded_parents() -> None:
    hidden = _definition("__SystemLib\\Helper", DefinitionKind.CLASS)
    visible = _definition("HH\\Vector", DefinitionKind.CLASS)
    pairs = [
        (hidden, None),
        (_method("run"), hidden),
        (visible, None),
        (_method("count"), visible),
        (_method("secret", visibility="private"), visible),
    ]

    documentables = drop_undocumentable(pairs, DocumentabilityPolicy())

    assert [item.definition.name for item in documentables] == ["HH\\Vector", "count"]
    assert documentables[1].parent == ParentRef(DefinitionKind.CLASS, "HH\\Vector")


def test_ecosystem_filter_recognises_ecosystem_builtins() -> None:
    ecosystem = EcosystemFilter(
        EcosystemConfig(names=["PHP_EOL_ALIAS"], attributes=["__HackOnly"])
    )

    assert ecosystem.is_ecosystem_specific(_definition("HH\\Vector", DefinitionKind.CLASS))
    assert ecosystem.is_ecosystem_specific(_definition("HH\\Lib\\Str\\join"))
    assert ecosystem.is_ecosystem_specific(_definition("HH_show"))
    assert ecosystem.is_ecosystem_specific(_definition("PHP_EOL_ALIAS"))
    assert ecosystem.is_ecosystem_specific(_definition("array_key", attributes={"__HackOnly": ()}))
    assert not ecosystem.is_ecosystem_specific(_definition("strlen"))
    assert not ecosystem.is_ecosystem_specific(_definition("HHVM\\thing"))


def test_ecosystem_filter_drops_methods_with_their_class() -> None:
    exception = _definition("Exception", DefinitionKind.CLASS)
    vector = _definition("HH\\Vector", DefinitionKind.CLASS)
    hh_debug = _method("hh_debug")
    ecosystem = EcosystemFilter()
    assert ecosystem.is_ecosystem_specific(hh_debug)

    documentables = [
        Documentable(exception),
        Documentable(_method("getMessage"), ParentRef.of(exception)),
        Documentable(hh_debug, ParentRef.of(exception)),
        Documentable(vector),
        Documentable(_method("count"), ParentRef.of(vector)),
        Documentable(_definition("strlen")),
        Documentable(_definition("hh_show")),
    ]

    kept = ecosystem.filter_documentables(documentables)

    assert [item.definition.name for item in kept] == ["HH\\Vector", "count", "hh_show"]


def test_ecosystem_filter_rejects_orphaned_methods() -> None:
    orphan = Documentable(_method("count"), ParentRef(DefinitionKind.CLASS, "HH\\Missing"))
    with pytest.raises(UnsupportedDefinitionError, match="HH\\\\Missing"):
        EcosystemFilter().filter_documentables([orphan])
