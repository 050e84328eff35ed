"""Concurrent parsing of discovered source files."""

from __future__ import annotations

from concurrent import futures
from pathlib import Path
from typing import List, Optional, Sequence

from .errors import ParseError
from .filters import DocumentabilityPolicy, correct_special_name, drop_undocumentable
from .logging import get_logger
from .models import Documentable
from .parsers import DefinitionParser, ParsedDefinition


class ParserRunner:
    """Runs the parser over many files with bounded concurrency."""

    def __init__(
        self,
        parser: DefinitionParser,
        *,
        workers: int = 8,
        skip_errors: bool = False,
        policy: DocumentabilityPolicy | None = None,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self.parser = parser
        self.workers = workers
        self.skip_errors = skip_errors
        self.policy = policy or DocumentabilityPolicy()
        self.logger = get_logger("runner")

    def parse_all(self, paths: Sequence[Path]) -> List[Documentable]:
        """Parse every path and return the documentable definitions they contain."""
        if not paths:
            return []

        with futures.ThreadPoolExecutor(
            max_workers=min(self.workers, len(paths)),
            thread_name_prefix="apidocs-parse",
        ) as executor:
            pending = [executor.submit(self._parse_one, path) for path in paths]
            try:
                # Input order, so the result never depends on scheduling.
                results = [future.result() for future in pending]
            except ParseError:
                for future in pending:
                    future.cancel()
                raise

        pairs: List[ParsedDefinition] = []
        for parsed in results:
            if parsed is not None:
                pairs.extend(parsed)
        self.logger.debug("Parsed %d definitions from %d files", len(pairs), len(paths))

        corrected = [
            (correct_special_name(definition) if parent is None else definition, parent)
            for definition, parent in pairs
        ]
        return drop_undocumentable(corrected, self.policy)

    def _parse_one(self, path: Path) -> Optional[Sequence[ParsedDefinition]]:
        try:
            parsed = list(self.parser.parse(path))
        except Exception as exc:
            if self.skip_errors:
                self.logger.warning("Skipping %s: %s", path, exc)
                return None
            raise ParseError(path, exc) from exc
        self.logger.debug("Parsed %s", path)
        return parsed


__all__ = ["ParserRunner"]
