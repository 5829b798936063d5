"""Presentation ordering for object-kind collections.

Sorting never touches the underlying value; it only reorders the (key, value)
pairs handed to traversal. Array-kind collections are never reordered.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any

from json_tree_editor.tree.nodes import PathKey, ValueKind, classify

CompareMethod = Callable[[str, str], int]
KeySort = bool | CompareMethod


def collection_entries(value: Any, key_sort: KeySort = False) -> list[tuple[PathKey, Any]]:
    """Return the child (key, value) pairs of a collection in presentation order.

    Array keys are the literal integer index. Object keys keep insertion order
    unless ``key_sort`` is True (lexicographic) or a two-key comparator.
    """
    kind = classify(value)
    if kind is ValueKind.ARRAY:
        return list(enumerate(value))
    if kind is not ValueKind.OBJECT:
        return []

    entries: list[tuple[PathKey, Any]] = list(value.items())
    if key_sort is True:
        entries.sort(key=lambda item: str(item[0]))
    elif callable(key_sort):
        compare = key_sort
        entries.sort(key=functools.cmp_to_key(lambda a, b: compare(a[0], b[0])))
    return entries
