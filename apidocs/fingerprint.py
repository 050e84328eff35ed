"""Build fingerprint and the staleness gate that compares against it."""

from __future__ import annotations

import dataclasses
import hashlib
import importlib
import inspect
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .config import BuildConfig, ConfigError, ProductConfig
from .models import Product

# Modules whose source decides what the build produces.
_PIPELINE_MODULES = (
    "apidocs.emitter",
    "apidocs.filters",
    "apidocs.fingerprint",
    "apidocs.index",
    "apidocs.merger",
    "apidocs.models",
    "apidocs.parsers.hack",
    "apidocs.paths",
    "apidocs.persistence",
    "apidocs.pipeline",
    "apidocs.renderers.markdown",
    "apidocs.runner",
)

_TEMPLATES_DIR = Path(__file__).parent / "renderers" / "templates"


def plugin_signature(plugin: object) -> str:
    """Return a stable signature for a parser or renderer instance."""
    cls = plugin.__class__
    cache_version = getattr(plugin, "cache_version", None) or getattr(cls, "cache_version", None) or "1"
    try:
        source = inspect.getsource(cls)
    except (OSError, TypeError):
        source_hash = f"{cls.__module__}:{cls.__qualname__}"
    else:
        source_hash = hashlib.sha256(source.encode("utf-8")).hexdigest()
    return f"{cls.__module__}:{cls.__qualname__}:{cache_version}:{source_hash}"


def pipeline_source_hash(plugins: Sequence[object] = ()) -> str:
    """Return a digest over the pipeline modules, templates and the given plugins."""
    digest = hashlib.sha256()
    for plugin in plugins:
        digest.update(plugin_signature(plugin).encode("utf-8"))
        digest.update(b"\0")
    for module_name in _PIPELINE_MODULES:
        module = importlib.import_module(module_name)
        try:
            source = inspect.getsource(module)
        except (OSError, TypeError):
            source = module_name
        digest.update(module_name.encode("utf-8"))
        digest.update(b"\0")
        digest.update(source.encode("utf-8"))
        digest.update(b"\0")
    for template in sorted(_TEMPLATES_DIR.glob("*.j2")):
        digest.update(template.name.encode("utf-8"))
        digest.update(b"\0")
        digest.update(template.read_bytes())
        digest.update(b"\0")
    return digest.hexdigest()


def upstream_tag(product_config: ProductConfig, sources: Sequence[Path]) -> str:
    """Return the fingerprint contributed by the stage that produced a product's sources."""
    if product_config.tag_file is not None:
        try:
            return product_config.tag_file.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            raise ConfigError(
                f"Upstream tag file for {product_config.product.value} not found: "
                f"{product_config.tag_file}"
            ) from None

    entries = []
    for path in sources:
        stat_result = path.stat()
        entries.append((path.as_posix(), stat_result.st_size, stat_result.st_mtime_ns))
    entries.sort()
    digest = hashlib.sha256()
    for path_str, size, mtime_ns in entries:
        digest.update(f"{path_str}\0{size}\0{mtime_ns}\0".encode("utf-8"))
    digest.update(str(len(entries)).encode("utf-8"))
    return digest.hexdigest()


def newest_mtime(directory: Path) -> int:
    """Return the newest modification time (ns) of anything under ``directory``."""
    if not directory.is_dir():
        raise ConfigError(f"Examples directory not found: {directory}")

    def _raise(exc: OSError) -> None:
        raise ConfigError(f"Cannot walk examples directory {directory}: {exc}") from exc

    max_mtime: Optional[int] = None
    for dirpath, dirnames, filenames in os.walk(directory, onerror=_raise):
        current = Path(dirpath)
        for name in [*dirnames, *filenames]:
            mtime = (current / name).stat().st_mtime_ns
            if max_mtime is None or mtime > max_mtime:
                max_mtime = mtime
    if max_mtime is None:
        raise ConfigError(f"Error finding the last modified file in {directory}")
    return max_mtime


def config_digest(config: BuildConfig) -> str:
    """Return a digest over the settings that decide what gets documented and where.

    Worker count and parse-error mode are left out: they change how a build
    runs, not what a successful build writes.
    """

    def relative(path: Path) -> str:
        return Path(os.path.relpath(path, config.root)).as_posix()

    settings: Dict[str, Any] = {
        "extensions": list(config.extensions),
        "products": {
            product.value: {
                "roots": [relative(root) for root in product_config.roots],
                "include_prefixes": list(product_config.include_prefixes),
                "ecosystem_filter": product_config.ecosystem_filter,
            }
            for product, product_config in config.products.items()
        },
        "ecosystem": dataclasses.asdict(config.ecosystem),
        "documentability": dataclasses.asdict(config.documentability),
        "parser": config.parser,
        "renderer": config.renderer,
        "output": {
            "markdown_dir": relative(config.output.markdown_dir),
            "html_dir": relative(config.output.html_dir),
            "index_file": relative(config.output.index_file),
        },
    }
    payload = json.dumps(settings, sort_keys=True)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def compute_fingerprint(
    config: BuildConfig,
    sources: Mapping[Product, Sequence[Path]],
    *,
    plugins: Sequence[object] = (),
    source_hash: Optional[str] = None,
) -> str:
    """Return the fingerprint text for the current inputs."""
    lines: List[str] = [
        f"build step source hash: {source_hash or pipeline_source_hash(plugins)}",
        f"configuration digest: {config_digest(config)}",
        "tags from dependencies:",
    ]
    for product, product_config in config.products.items():
        tag = upstream_tag(product_config, sources.get(product, ()))
        lines.append(f"{product.value}: {tag}")
    lines.append(f"highest examples mtime: {newest_mtime(config.examples_dir)}")
    return "\n".join(lines) + "\n"


def should_skip(config: BuildConfig, fingerprint: str) -> bool:
    """Return True when the previous build is complete and its inputs are unchanged."""
    output = config.output
    if not output.index_file.exists():
        return False
    if not output.document_index_file.exists():
        return False
    if not output.tag_file.exists():
        return False
    return output.tag_file.read_bytes() == fingerprint.encode("utf-8")


__all__ = [
    "compute_fingerprint",
    "config_digest",
    "newest_mtime",
    "pipeline_source_hash",
    "plugin_signature",
    "should_skip",
    "upstream_tag",
]
