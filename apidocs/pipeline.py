"""Pipeline orchestration for API reference builds."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Optional

from .config import BuildConfig
from .emitter import ArtifactEmitter
from .filters import DocumentabilityPolicy, EcosystemFilter
from .fingerprint import compute_fingerprint, should_skip
from .index import build_global_index, build_product_index
from .logging import get_logger
from .merger import merge_all
from .models import BuildResult, Documentable, Product, ProductIndex
from .parsers import DefinitionParser, load_parser
from .persistence import (
    invalidate_fingerprint,
    write_document_index,
    write_fingerprint,
    write_navigation_index,
)
from .renderers import Renderer, load_renderer
from .runner import ParserRunner
from .source_finder import find_sources


class BuildPipeline:
    """Coordinates discovery, parsing, indexing and emission for every product."""

    def __init__(
        self,
        config: BuildConfig,
        *,
        parser: DefinitionParser | None = None,
        renderer: Renderer | None = None,
    ) -> None:
        self.config = config
        self.parser = parser or load_parser(config.parser)
        self.renderer = renderer or load_renderer(config.renderer)
        self.plugins = (self.parser, self.renderer)
        self.policy = DocumentabilityPolicy(config.documentability)
        self.ecosystem = EcosystemFilter(config.ecosystem)
        self.logger = get_logger("pipeline")

    def discover(self) -> Dict[Product, List[Path]]:
        """Return the sorted source files of every configured product."""
        sources: Dict[Product, List[Path]] = {}
        for product, product_config in self.config.products.items():
            found: List[Path] = []
            for root in product_config.roots:
                found.extend(
                    find_sources(root, self.config.extensions, product_config.include_prefixes)
                )
            sources[product] = sorted(dict.fromkeys(found), key=lambda path: path.as_posix())
            self.logger.debug("Found %d %s sources", len(sources[product]), product.value)
        return sources

    def check(self) -> bool:
        """Return True when a build would be skipped."""
        fingerprint = compute_fingerprint(self.config, self.discover(), plugins=self.plugins)
        return should_skip(self.config, fingerprint)

    def run(self, *, force: bool = False) -> Optional[BuildResult]:
        """Build the API reference; return None when the previous build is still current."""
        output = self.config.output
        self.logger.info("Finding sources")
        sources = self.discover()
        fingerprint = compute_fingerprint(self.config, sources, plugins=self.plugins)
        if not force and should_skip(self.config, fingerprint):
            self.logger.info("Already built and no dependencies changed; skipping")
            return None

        invalidate_fingerprint(output.tag_file)

        runner = ParserRunner(
            self.parser,
            workers=self.config.workers,
            skip_errors=self.config.skip_parse_errors,
            policy=self.policy,
        )
        documentables: Dict[Product, List[Documentable]] = {}
        for product, paths in sources.items():
            self.logger.info("Parsing %s sources (%d files)", product.value, len(paths))
            parsed = runner.parse_all(paths)
            self.logger.info("De-duping %s definitions", product.value)
            merged = merge_all(parsed)
            if self.config.products[product].ecosystem_filter:
                self.logger.info("Filtering out non-ecosystem %s builtins", product.value)
                merged = self.ecosystem.filter_documentables(merged)
            documentables[product] = merged

        html_root = Path(os.path.relpath(output.html_dir, self.config.root))
        emitter = ArtifactEmitter(self.renderer, output.markdown_dir, html_root)

        indexes: Dict[Product, ProductIndex] = {}
        for product, items in documentables.items():
            self.logger.info("Generating navigation index for %s", product.value)
            indexes[product] = build_product_index(product, items, emitter.paths_for(product))

        self.logger.info("Creating cross-reference index")
        global_index = build_global_index(documentables)

        files: List[Path] = []
        for product, items in documentables.items():
            self.logger.info("Generating Markdown for %s (%d documents)", product.value, len(items))
            files.extend(emitter.emit(product, items, global_index))

        self.logger.info("Writing navigation and document indexes")
        write_navigation_index(output.index_file, indexes)
        write_document_index(output.document_index_file, files, output.markdown_dir)
        # Strictly last, so only a complete build can satisfy the staleness gate.
        write_fingerprint(output.tag_file, fingerprint)

        return BuildResult(
            fingerprint=fingerprint,
            files=[path.relative_to(output.markdown_dir).as_posix() for path in files],
            indexes=indexes,
        )


__all__ = ["BuildPipeline"]
