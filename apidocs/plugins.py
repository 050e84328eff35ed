"""Entry-point discovery shared by parser and renderer plugins."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, Mapping, Type, TypeVar

from .config import ConfigError

T = TypeVar("T")


def load_plugin(
    name: str,
    *,
    group: str,
    base: Type[T],
    builtins: Mapping[str, Callable[[], T]],
) -> T:
    """Instantiate the plugin called ``name`` from builtins or the entry-point group."""
    key = name.lower()
    if key in builtins:
        return _coerce(builtins[key], base, name)

    for entry in _iter_entry_points(group):
        if entry.name.lower() != key:
            continue
        try:
            loaded = entry.load()
        except Exception as exc:
            raise ConfigError(f"Failed to load {group} entry point '{name}': {exc}") from exc
        return _coerce(loaded, base, name)

    known = ", ".join(sorted({*builtins, *(entry.name for entry in _iter_entry_points(group))}))
    raise ConfigError(f"Unknown {group} plugin '{name}'; available: {known}")


def _coerce(obj: object, base: Type[T], name: str) -> T:
    if isinstance(obj, base):
        return obj
    if isinstance(obj, type) and issubclass(obj, base):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, base):
            return instance
    raise ConfigError(f"Plugin '{name}' must be a {base.__name__} subclass or factory")


def _iter_entry_points(group: str) -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=group)


__all__ = ["load_plugin"]
