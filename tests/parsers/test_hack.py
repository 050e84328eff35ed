"""Tests for the Hack declaration parser."""

from __future__ import annotations

import textwrap
from pathlib import Path

from apidocs.models import DefinitionKind, Parameter
from apidocs.parsers import HackDefinitionParser, load_parser


def _parse(tmp_path: Path, content: str, name: str = "sample.hhi"):
    path = tmp_path / name
    path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
    return HackDefinitionParser().parse(path), path


def test_parses_namespaced_function_signature(tmp_path: Path) -> None:
    parsed, path = _parse(
        tmp_path,
        """
        <?hh

        namespace HH\\Lib\\Vec;

        /**
         * Returns a new vec where each value is the result of calling the
         * given function on the input value.
         */
        <<__Deprecated("use map_async")>>
        function map<Tv1, Tv2>(
          Traversable<Tv1> $traversable,
          (function(Tv1): Tv2) $value_func,
          int $limit = -1,
          string ...$tags
        ): vec<Tv2> {
          $result = vec[];
          return $result;
        }
        """,
    )

    assert len(parsed) == 1
    definition, parent = parsed[0]
    assert parent is None
    assert definition.name == "HH\\Lib\\Vec\\map"
    assert definition.kind is DefinitionKind.FUNCTION
    assert definition.location.path == str(path)
    assert definition.location.line == 10
    assert definition.generics == ("Tv1", "Tv2")
    assert definition.return_type == "vec<Tv2>"
    assert definition.doc_comment == (
        "Returns a new vec where each value is the result of calling the\n"
        "given function on the input value."
    )
    assert definition.attributes == {"__Deprecated": ("use map_async",)}
    assert definition.parameters == (
        Parameter(name="traversable", type="Traversable<Tv1>"),
        Parameter(name="value_func", type="(function(Tv1): Tv2)"),
        Parameter(name="limit", type="int", default="-1"),
        Parameter(name="tags", type="string", variadic=True),
    )


def test_parses_classes_with_methods(tmp_path: Path) -> None:
    parsed, _ = _parse(
        tmp_path,
        """
        <?hh

        namespace HH;

        /** A mutable, ordered sequence. */
        final class Vector<Tv> implements MutableVector<Tv>, \\Countable {
          /** Create a vector. */
          public function __construct(?Traversable<Tv> $it = null) {}

          public static function fromItems(?Traversable<Tv> $items): Vector<Tv> {
            return new Vector($items);
          }

          private function secret(): void {}

          public function map<Tu>((function(Tv): Tu) $fn): Vector<Tu> {
            $f = function($x) { return $x; };
            return $this;
          }
        }

        interface Countable {
          public function count(): int;
        }
        """,
    )

    summary = [
        (definition.name, definition.kind, parent.name if parent else None)
        for definition, parent in parsed
    ]
    assert summary == [
        ("HH\\Vector", DefinitionKind.CLASS, None),
        ("__construct", DefinitionKind.METHOD, "HH\\Vector"),
        ("fromItems", DefinitionKind.METHOD, "HH\\Vector"),
        ("secret", DefinitionKind.METHOD, "HH\\Vector"),
        ("map", DefinitionKind.METHOD, "HH\\Vector"),
        ("HH\\Countable", DefinitionKind.INTERFACE, None),
        ("count", DefinitionKind.METHOD, "HH\\Countable"),
    ]

    vector = parsed[0][0]
    assert vector.generics == ("Tv",)
    assert vector.parents == ("MutableVector", "Countable")
    assert vector.doc_comment == "A mutable, ordered sequence."

    construct = parsed[1][0]
    assert construct.visibility == "public"
    assert construct.doc_comment == "Create a vector."
    assert construct.parameters == (Parameter(name="it", type="?Traversable<Tv>", default="null"),)

    assert parsed[2][0].return_type == "Vector<Tv>"
    assert parsed[2][0].doc_comment is None
    assert parsed[3][0].visibility == "private"
    assert parsed[4][0].generics == ("Tu",)
    assert parsed[6][0].return_type == "int"


def test_ignores_declarations_outside_file_scope(tmp_path: Path) -> None:
    parsed, _ = _parse(
        tmp_path,
        """
        <?hh

        use function HH\\Lib\\Vec\\map;

        // function commented_out(): void {}
        /** Orphaned comment. */
        $unused = 1;

        function real(): string {
          $name = Foo::class;
          $text = "class Fake {}";
          return $text;
        }
        """,
        name="lookalikes.php",
    )

    assert [(definition.name, definition.doc_comment) for definition, _ in parsed] == [
        ("real", None)
    ]


def test_braced_namespaces_qualify_names(tmp_path: Path) -> None:
    parsed, _ = _parse(
        tmp_path,
        """
        <?hh

        namespace HH\\Lib\\Str {
          function join(Traversable<string> $pieces, string $glue): string {
            return '';
          }
        }

        namespace HH\\Lib\\Math {
          abstract class Calculator {}
        }
        """,
    )

    assert [definition.name for definition, _ in parsed] == [
        "HH\\Lib\\Str\\join",
        "HH\\Lib\\Math\\Calculator",
    ]


def test_load_parser_returns_builtin() -> None:
    assert isinstance(load_parser("hack"), HackDefinitionParser)


def test_skips_enums_aliases_and_string_contents(tmp_path: Path) -> None:
    parsed, _ = _parse(
        tmp_path,
        """
        <?hh

        namespace HH;

        enum class Colors: mixed {
          int RED = 1;
          string NAME = 'name';
        }

        enum Suit: string {
          HEARTS = 'h';
          SPADES = 's';
        }

        type Alias = int;
        newtype Opaque = string;

        $template = <<<EOT
        function phantom(): void {}
        class Ghost {}
        EOT;

        function real(): void {}
        """,
    )

    assert [(definition.name, definition.kind) for definition, _ in parsed] == [
        ("HH\\real", DefinitionKind.FUNCTION)
    ]


def test_collects_every_attribute_value(tmp_path: Path) -> None:
    parsed, _ = _parse(
        tmp_path,
        """
        <?hh

        <<__Deprecated("first", "second"), __NoDoc>>
        function old(mixed ...$args): void {}
        """,
    )

    definition = parsed[0][0]
    assert definition.attributes == {"__Deprecated": ("first", "second"), "__NoDoc": ()}
    assert definition.parameters == (Parameter(name="args", type="mixed", variadic=True),)
