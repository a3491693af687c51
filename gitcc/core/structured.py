"""Typed lookups on parsed TOML and JSON documents.

``tomllib`` and ``json`` return plain ``object`` trees. Each getter
narrows one key to the expected type and returns None for anything
else, so callers can write ``get_int(t, "k") or default``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

type StrDict = dict[str, object]


def as_str_dict(obj: object) -> StrDict | None:
    """Return ``obj`` if it is a table with string keys."""
    if isinstance(obj, dict) and all(isinstance(k, str) for k in cast(dict[object, object], obj)):
        return cast(StrDict, obj)
    return None


def _lookup[T](table: Mapping[str, object], key: str, kind: type[T]) -> T | None:
    value = table.get(key)
    # bool subclasses int: neither may stand in for the other
    if isinstance(value, bool) != (kind is bool) or not isinstance(value, kind):
        return None
    return value


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Stripped string; blank counts as missing."""
    text = _lookup(table, key, str)
    if text is None:
        return None
    return text.strip() or None


def get_int(table: Mapping[str, object], key: str) -> int | None:
    return _lookup(table, key, int)


def get_bool(table: Mapping[str, object], key: str) -> bool | None:
    return _lookup(table, key, bool)


def get_str_list(table: Mapping[str, object], key: str) -> list[str] | None:
    """String items of a list; other items are skipped."""
    items = _lookup(table, key, list)
    if items is None:
        return None
    return [item for item in cast(list[object], items) if isinstance(item, str)]


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    return as_str_dict(table.get(key))
