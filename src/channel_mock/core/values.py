"""Structural equality for channel argument values (core domain).

Channel arguments are plain data: None, booleans, numbers, strings, bytes,
sequences, sets and string-keyed mappings, nested arbitrarily. Comparison
here is deep and order-insensitive for sequences, sets and mappings.
"""

from __future__ import annotations

from collections.abc import Mapping, Set
from typing import Any, Sequence

_SCALARS = (str, bytes, bytearray)


def is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_set(value: Any) -> bool:
    return isinstance(value, Set)


def is_sequence(value: Any) -> bool:
    """Return True for list-like values, excluding strings, bytes and sets."""

    if isinstance(value, _SCALARS):
        return False
    return isinstance(value, (list, tuple))


def _scalar_equals(left: Any, right: Any) -> bool:
    # bool is its own tag: True must not compare equal to 1.
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    return bool(left == right)


def _unordered_sequence_equals(left: Sequence[Any], right: Sequence[Any]) -> bool:
    if len(left) != len(right):
        return False

    # Elements may be unhashable, so pair them up greedily instead of counting.
    remaining = list(right)
    for item in left:
        for index, candidate in enumerate(remaining):
            if deep_equals(item, candidate):
                del remaining[index]
                break
        else:
            return False
    return True


def _mapping_equals(left: Mapping[Any, Any], right: Mapping[Any, Any]) -> bool:
    if len(left) != len(right):
        return False
    for key, value in left.items():
        if key not in right:
            return False
        if not deep_equals(value, right[key]):
            return False
    return True


def deep_equals(left: Any, right: Any) -> bool:
    """Compare two argument values structurally.

    - Mappings are equal when they hold the same keys with deep-equal values,
      regardless of insertion order.
    - Sequences are equal when they hold the same multiset of deep-equal
      elements, regardless of order.
    - Sets only equal other sets, with the same deep-equal members.
    - Everything else compares by value, with booleans kept apart from numbers.
    """

    if left is right:
        return True

    if is_mapping(left) or is_mapping(right):
        if not (is_mapping(left) and is_mapping(right)):
            return False
        return _mapping_equals(left, right)

    if is_set(left) or is_set(right):
        if not (is_set(left) and is_set(right)):
            return False
        return _unordered_sequence_equals(list(left), list(right))

    if is_sequence(left) or is_sequence(right):
        if not (is_sequence(left) and is_sequence(right)):
            return False
        return _unordered_sequence_equals(list(left), list(right))

    return _scalar_equals(left, right)
