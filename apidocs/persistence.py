"""Durable outputs of a build: navigation index, document index and fingerprint."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Mapping, Sequence

from .models import Product, ProductIndex


def _atomic_write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def write_navigation_index(path: Path, indexes: Mapping[Product, ProductIndex]) -> None:
    """Persist the per-product navigation indexes keyed by product name."""
    payload: Dict[str, object] = {
        product.value: index.to_payload() for product, index in indexes.items()
    }
    _atomic_write(path, json.dumps(payload, indent=2) + "\n")


def write_document_index(path: Path, files: Sequence[Path], root: Path) -> None:
    """Persist the ordered list of emitted documents, relative to ``root``."""
    payload = {"files": [Path(file).relative_to(root).as_posix() for file in files]}
    _atomic_write(path, json.dumps(payload, indent=2) + "\n")


def write_fingerprint(path: Path, fingerprint: str) -> None:
    _atomic_write(path, fingerprint)


def invalidate_fingerprint(path: Path) -> None:
    """Remove a stored fingerprint so an interrupted build is never mistaken for a complete one."""
    path.unlink(missing_ok=True)


def read_document_index(path: Path) -> list[str]:
    data = json.loads(path.read_text(encoding="utf-8"))
    files = data.get("files") if isinstance(data, dict) else None
    if not isinstance(files, list):
        return []
    return [str(item) for item in files]


__all__ = [
    "invalidate_fingerprint",
    "read_document_index",
    "write_document_index",
    "write_fingerprint",
    "write_navigation_index",
]
