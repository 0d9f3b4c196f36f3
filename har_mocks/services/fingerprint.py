"""
Structural fingerprinting of JSON values.

Two views of a response's shape:

- fingerprint(): md5 over a canonical shape tree. Key names (sorted) and the
  object / array / scalar-kind structure matter, values don't, so live data
  with fresh IDs and timestamps hashes identically while an added, removed or
  retyped field changes the hash. Arrays are sampled by their first element
  only: a heterogeneous array is under-fingerprinted.

- field_paths(): every dot-joined key path, used to explain drift. Array items
  are collapsed under a `[]` marker on the array's key and all items are
  unioned.

shape_signature() / diff_signatures() are the path-signature form used for
plain REST captures, where a readable diff matters more than a compact hash.

All walks stop at MAX_SHAPE_DEPTH. Captures are trees in practice, but a
corrupted or hostile one must not blow the stack.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping, Sequence
from typing import Any

from har_mocks.types import JsonValue

__all__ = [
    'ARRAY_MARKER',
    'MAX_SHAPE_DEPTH',
    'diff_signatures',
    'field_paths',
    'fingerprint',
    'shape_of',
    'shape_signature',
]

MAX_SHAPE_DEPTH = 64

ARRAY_MARKER = '[]'

# Shape-tree markers
_NULL = 'null'
_ARRAY = 'array'
_EMPTY = 'empty'
_DEPTH_LIMIT = 'depth-limit'


def _scalar_kind(value: Any) -> str:
    # bool is an int subclass, check it first
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    if isinstance(value, str):
        return 'string'
    return type(value).__name__


def shape_of(value: JsonValue, _depth: int = 0) -> JsonValue:
    """Canonical shape tree of a JSON-like value."""
    if _depth > MAX_SHAPE_DEPTH:
        return _DEPTH_LIMIT
    if value is None:
        return _NULL
    if isinstance(value, Mapping):
        return {str(key): shape_of(value[key], _depth + 1) for key in sorted(value, key=str)}
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        if not value:
            return [_ARRAY, _EMPTY]
        return [_ARRAY, shape_of(value[0], _depth + 1)]
    return _scalar_kind(value)


def fingerprint(value: JsonValue) -> str:
    """
    Deterministic structural hash of a JSON-like value.

    Total: never raises for any JSON-compatible input.

    Examples:
        >>> fingerprint({'a': 1, 'b': 'x'}) == fingerprint({'b': 'y', 'a': 2})
        True
        >>> fingerprint({'a': 1}) == fingerprint({'a': 1, 'b': 1})
        False
    """
    canonical = json.dumps(shape_of(value), indent=2, ensure_ascii=False)
    return hashlib.md5(canonical.encode('utf-8')).hexdigest()


def _join(prefix: str, key: str) -> str:
    return f'{prefix}.{key}' if prefix else key


def _collect_paths(value: JsonValue, prefix: str, paths: set[str], depth: int) -> None:
    if value is None or depth > MAX_SHAPE_DEPTH:
        return

    if isinstance(value, Mapping):
        for key, child in value.items():
            path = _join(prefix, str(key))
            paths.add(path)
            _collect_paths(child, path, paths, depth + 1)
        return

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        item_prefix = prefix + ARRAY_MARKER
        for item in value:
            _collect_paths(item, item_prefix, paths, depth + 1)


def field_paths(value: JsonValue) -> set[str]:
    """
    All field paths present in a value.

    Examples:
        >>> sorted(field_paths({'country': {'code': 'US', 'languages': [{'name': 'English'}]}}))
        ['country', 'country.code', 'country.languages', 'country.languages[].name']
    """
    paths: set[str] = set()
    _collect_paths(value, '', paths, 0)
    return paths


def _walk_signature(value: JsonValue, prefix: str, paths: list[str], depth: int) -> None:
    if value is None or depth > MAX_SHAPE_DEPTH:
        return

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        array_prefix = prefix + ARRAY_MARKER
        paths.append(array_prefix)
        if value:
            _walk_signature(value[0], array_prefix, paths, depth + 1)
        return

    if isinstance(value, Mapping):
        for key in sorted(value, key=str):
            path = _join(prefix, str(key))
            paths.append(path)
            _walk_signature(value[key], path, paths, depth + 1)


def shape_signature(value: JsonValue) -> str:
    """
    Readable shape signature: sorted unique key paths joined by `|`.

    Arrays contribute a `[]` path and are sampled by their first element.
    """
    paths: list[str] = []
    _walk_signature(value, '', paths, 0)
    return '|'.join(sorted(set(paths)))


def diff_signatures(old_signature: str, new_signature: str) -> tuple[list[str], list[str]]:
    """
    Structural difference between two shape signatures.

    Returns:
        (added, removed) path lists, both sorted
    """
    old_paths = {p for p in old_signature.split('|') if p}
    new_paths = {p for p in new_signature.split('|') if p}
    return sorted(new_paths - old_paths), sorted(old_paths - new_paths)
