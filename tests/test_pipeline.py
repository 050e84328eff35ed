"""End-to-end tests for the build pipeline."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import List

import pytest

from apidocs.emitter import is_generated
from apidocs.errors import ParseError
from apidocs.index import CrossReferenceIndex
from apidocs.models import Documentable
from apidocs.parsers import HackDefinitionParser
from apidocs.persistence import read_document_index
from apidocs.pipeline import BuildPipeline
from apidocs.renderers import MarkdownRenderer, RenderConfig
from tests._fixtures.site_builder import DEFAULT_CONFIG, SiteBuilder

_FUTURE_NS = 4_000_000_000 * 10**9

SOURCES = {
    "examples/vec/map.md": "Example usage.\n",
    "hhi/vector.hhi": """
        <?hh

        namespace HH;

        /** A mutable, ordered sequence. */
        final class Vector<Tv> {
          public function count(): int;
          private function grow(): void;
        }
        """,
    "hhi/builtins.hhi": """
        <?hh

        class Exception {
          public function getMessage(): string;
          public function hh_debug(): void;
        }

        function fun(string $name): mixed;
        function hh_show(mixed $value): void;
        function strlen(string $s): int;
        """,
    "hsl/vec.php": """
        <?hh

        namespace HH\\Lib\\Vec;

        /** Maps values. */
        function map<Tv1, Tv2>(Traversable<Tv1> $traversable, (function(Tv1): Tv2) $value_func): vec<Tv2> {
          return vec[];
        }
        """,
    "hsl/_Private/helpers.php": """
        <?hh

        namespace HH\\Lib\\_Private;

        function helper(): void {}
        """,
}


class RecordingParser(HackDefinitionParser):
    def __init__(self) -> None:
        self.calls: List[Path] = []

    def parse(self, path: Path):
        self.calls.append(Path(path))
        return super().parse(path)


class RecordingRenderer(MarkdownRenderer):
    def __init__(self) -> None:
        super().__init__()
        self.rendered: List[str] = []

    def render(self, documentable: Documentable, index: CrossReferenceIndex, config: RenderConfig) -> str:
        self.rendered.append(documentable.definition.name)
        return super().render(documentable, index, config)


def _pipeline(site_builder: SiteBuilder) -> tuple[BuildPipeline, RecordingParser, RecordingRenderer]:
    parser = RecordingParser()
    renderer = RecordingRenderer()
    pipeline = BuildPipeline(site_builder.config(), parser=parser, renderer=renderer)
    return pipeline, parser, renderer


@pytest.fixture
def site(site_builder: SiteBuilder) -> SiteBuilder:
    site_builder.write_config()
    site_builder.write(SOURCES)
    return site_builder


def test_build_emits_documents_and_indexes(site: SiteBuilder) -> None:
    pipeline, parser, _ = _pipeline(site)

    result = pipeline.run()

    assert result is not None
    assert len(parser.calls) == 4
    assert result.files == [
        "hack/class/HH.Vector.md",
        "hack/class/HH.Vector/count.md",
        "hack/function/HH.fun.md",
        "hack/function/hh_show.md",
        "hsl/function/HH.Lib.Vec.map.md",
    ]

    config = pipeline.config
    markdown_dir = config.output.markdown_dir
    assert read_document_index(config.output.document_index_file) == result.files
    for relative in result.files:
        assert is_generated((markdown_dir / relative).read_text(encoding="utf-8"))
    assert not (markdown_dir / "hack" / "class" / "Exception.md").exists()
    assert not (markdown_dir / "hack" / "class" / "Exception").exists()

    navigation = json.loads(config.output.index_file.read_text(encoding="utf-8"))
    assert list(navigation) == ["hack", "hsl"]
    assert "Exception" not in navigation["hack"]["class"]
    vector = navigation["hack"]["class"]["HH.Vector"]
    assert list(vector["methods"]) == ["count"]
    assert vector["methods"]["count"]["urlPath"] == "/hack/reference/class/HH.Vector/count/"
    assert vector["methods"]["count"]["htmlPath"] == "build/api-docs-html/hack/class/HH.Vector/count.html"
    assert list(navigation["hsl"]["function"]) == ["HH.Lib.Vec.map"]

    assert config.output.tag_file.read_text(encoding="utf-8") == result.fingerprint


def test_second_build_is_skipped_without_parsing(site: SiteBuilder) -> None:
    first, _, _ = _pipeline(site)
    assert first.run() is not None

    second, parser, renderer = _pipeline(site)
    assert second.check() is True
    assert second.run() is None
    assert parser.calls == []
    assert renderer.rendered == []


def test_force_and_changed_inputs_trigger_rebuild(site: SiteBuilder) -> None:
    first, _, _ = _pipeline(site)
    assert first.run() is not None

    forced, parser, _ = _pipeline(site)
    assert forced.run(force=True) is not None
    assert len(parser.calls) == 4

    example = site.path() / "examples" / "vec" / "map.md"
    os.utime(example, ns=(_FUTURE_NS, _FUTURE_NS))
    changed, parser, _ = _pipeline(site)
    assert changed.check() is False
    assert changed.run() is not None
    assert len(parser.calls) == 4


def test_parse_failure_leaves_no_fingerprint(site: SiteBuilder) -> None:
    first, _, _ = _pipeline(site)
    assert first.run() is not None

    class FailingParser(HackDefinitionParser):
        def parse(self, path: Path):
            raise ValueError("broken input")

    pipeline = BuildPipeline(site.config(), parser=FailingParser(), renderer=RecordingRenderer())
    with pytest.raises(ParseError):
        pipeline.run(force=True)

    assert not pipeline.config.output.tag_file.exists()


def test_config_change_triggers_rebuild(site: SiteBuilder) -> None:
    first, _, _ = _pipeline(site)
    result = first.run()
    assert result is not None
    assert "hack/function/strlen.md" not in result.files

    site.write_config(DEFAULT_CONFIG + "ecosystem:\n  names: [strlen]\n")
    changed, parser, _ = _pipeline(site)
    assert changed.check() is False

    rebuilt = changed.run()
    assert rebuilt is not None
    assert len(parser.calls) == 4
    assert "hack/function/strlen.md" in rebuilt.files
