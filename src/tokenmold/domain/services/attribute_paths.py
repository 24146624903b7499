from __future__ import annotations

from typing import Any, Mapping

_MISSING = object()


def _step(source: Any, part: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(part, _MISSING)
    return getattr(source, part, _MISSING)


def get_property(source: Any, path: str, default: Any = None) -> Any:
    """Read a dotted path (``system.details.type``) from nested mappings or objects."""
    if not path:
        return default
    current = source
    for part in str(path).split("."):
        current = _step(current, part)
        if current is _MISSING:
            return default
    return current


def has_property(source: Any, path: str) -> bool:
    return get_property(source, path, _MISSING) is not _MISSING
