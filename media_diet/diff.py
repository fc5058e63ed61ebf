"""Order-insensitive change detection between stored and merged data."""

from __future__ import annotations

from typing import Any, List, Mapping

from .models import MediaRecord


def _identity_of(item: Any) -> str:
    if isinstance(item, MediaRecord):
        return item.identity or ""
    if isinstance(item, Mapping):
        return str(item.get("id") or "")
    return ""


def _plain(item: Any) -> Any:
    if isinstance(item, MediaRecord):
        return item.to_dict()
    return item


def _sorted_by_identity(items: List[Any]) -> List[Any]:
    return [_plain(item) for item in sorted(items, key=_identity_of)]


def has_changed(old: Any, new: Any) -> bool:
    """Return True when ``new`` differs from ``old``, ignoring sequence order.

    Sequences are sorted by identity before a structural comparison since
    merge output order may shift between runs without any content change.
    """

    if isinstance(old, (list, tuple)) and isinstance(new, (list, tuple)):
        return _sorted_by_identity(list(old)) != _sorted_by_identity(list(new))
    return _plain(old) != _plain(new)


__all__ = ["has_changed"]
