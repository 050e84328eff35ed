"""Configuration loading for apidocs (.apidocs.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from .errors import BuildError
from .models import Product

CONFIG_FILENAME = ".apidocs.yml"

_DEFAULT_EXTENSIONS = ("php", "hhi", "hh")
_DEFAULT_WORKERS = 8
_PARSE_ERROR_MODES = ("fail", "warn")


class ConfigError(BuildError):
    """Raised when the configuration is missing, malformed or inconsistent."""


@dataclass
class OutputConfig:
    """Locations of everything the build writes."""

    markdown_dir: Path
    html_dir: Path
    index_file: Path
    tag_file: Path

    @property
    def document_index_file(self) -> Path:
        return self.markdown_dir / "index.json"


@dataclass
class ProductConfig:
    """Source roots and filtering options for one product."""

    product: Product
    roots: List[Path]
    include_prefixes: List[str] = field(default_factory=list)
    ecosystem_filter: bool = False
    tag_file: Optional[Path] = None


@dataclass
class EcosystemConfig:
    """Rules deciding whether a builtin belongs to the documented ecosystem."""

    namespaces: List[str] = field(default_factory=lambda: ["HH"])
    name_prefixes: List[str] = field(default_factory=lambda: ["hh_"])
    names: List[str] = field(default_factory=list)
    attributes: List[str] = field(default_factory=list)


@dataclass
class DocumentabilityConfig:
    """Rules for symbols that are never documented."""

    internal_namespaces: List[str] = field(
        default_factory=lambda: ["__SystemLib", "HH\\Lib\\_Private"]
    )
    excluded_attributes: List[str] = field(default_factory=lambda: ["__NoDoc", "__Internal"])


@dataclass
class BuildConfig:
    """Represents the settings defined in .apidocs.yml."""

    root: Path
    examples_dir: Path
    output: OutputConfig
    products: Dict[Product, ProductConfig]
    extensions: Tuple[str, ...] = _DEFAULT_EXTENSIONS
    workers: int = _DEFAULT_WORKERS
    parse_errors: str = "fail"
    ecosystem: EcosystemConfig = field(default_factory=EcosystemConfig)
    documentability: DocumentabilityConfig = field(default_factory=DocumentabilityConfig)
    parser: str = "hack"
    renderer: str = "markdown"

    @property
    def skip_parse_errors(self) -> bool:
        return self.parse_errors == "warn"


def load_config(config_path: Path) -> BuildConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    if not config_file.exists():
        raise ConfigError(f"Configuration file not found: {config_file}")
    root = config_file.parent.resolve()

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    examples = _as_str(data.get("examples_dir")) or "api-examples"

    output_data = _as_dict(data.get("output"))
    output = OutputConfig(
        markdown_dir=root / (_as_str(output_data.get("markdown_dir")) or "build/api-docs-md"),
        html_dir=root / (_as_str(output_data.get("html_dir")) or "build/api-docs-html"),
        index_file=root / (_as_str(output_data.get("index_file")) or "build/api-index.json"),
        tag_file=root / (_as_str(output_data.get("tag_file")) or "build/api-docs.tag"),
    )

    products = _parse_products(root, _as_dict(data.get("products")))

    extensions = tuple(
        ext.lower().lstrip(".") for ext in _as_str_list(data.get("extensions"))
    ) or _DEFAULT_EXTENSIONS

    workers = _as_int(data.get("workers"))
    if workers is None:
        workers = _DEFAULT_WORKERS
    if workers < 1:
        raise ConfigError("workers must be a positive integer")

    parse_errors = (_as_str(data.get("parse_errors")) or "fail").lower()
    if parse_errors not in _PARSE_ERROR_MODES:
        raise ConfigError(
            f"parse_errors must be one of {', '.join(_PARSE_ERROR_MODES)}; got {parse_errors!r}"
        )

    ecosystem = EcosystemConfig()
    ecosystem_data = _as_dict(data.get("ecosystem"))
    if ecosystem_data:
        if "namespaces" in ecosystem_data:
            ecosystem.namespaces = _as_str_list(ecosystem_data.get("namespaces"))
        if "name_prefixes" in ecosystem_data:
            ecosystem.name_prefixes = _as_str_list(ecosystem_data.get("name_prefixes"))
        ecosystem.names = _as_str_list(ecosystem_data.get("names"))
        ecosystem.attributes = _as_str_list(ecosystem_data.get("attributes"))

    documentability = DocumentabilityConfig()
    documentability_data = _as_dict(data.get("documentability"))
    if documentability_data:
        if "internal_namespaces" in documentability_data:
            documentability.internal_namespaces = _as_str_list(
                documentability_data.get("internal_namespaces")
            )
        if "excluded_attributes" in documentability_data:
            documentability.excluded_attributes = _as_str_list(
                documentability_data.get("excluded_attributes")
            )

    return BuildConfig(
        root=root,
        examples_dir=root / examples,
        output=output,
        products=products,
        extensions=extensions,
        workers=workers,
        parse_errors=parse_errors,
        ecosystem=ecosystem,
        documentability=documentability,
        parser=_as_str(data.get("parser")) or "hack",
        renderer=_as_str(data.get("renderer")) or "markdown",
    )


def _parse_products(root: Path, data: Dict[str, Any]) -> Dict[Product, ProductConfig]:
    if not data:
        raise ConfigError("At least one product must be configured under 'products'")

    products: Dict[Product, ProductConfig] = {}
    for key, raw in data.items():
        try:
            product = Product(str(key))
        except ValueError:
            known = ", ".join(p.value for p in Product)
            raise ConfigError(f"Unknown product {key!r}; expected one of {known}") from None
        entry = _as_dict(raw)
        roots = [root / value for value in _as_str_list(entry.get("roots"))]
        if not roots:
            raise ConfigError(f"Product {product.value!r} has no source roots")
        tag_file = _as_str(entry.get("tag_file"))
        products[product] = ProductConfig(
            product=product,
            roots=roots,
            include_prefixes=_as_str_list(entry.get("include_prefixes")),
            ecosystem_filter=_as_bool(entry.get("ecosystem_filter")) or False,
            tag_file=root / tag_file if tag_file else None,
        )

    # Enum order, so products are always processed the same way.
    return {product: products[product] for product in Product if product in products}


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "BuildConfig",
    "ConfigError",
    "DocumentabilityConfig",
    "EcosystemConfig",
    "OutputConfig",
    "ProductConfig",
    "load_config",
]
