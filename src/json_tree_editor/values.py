"""Copy-on-write helpers that produce a new root for each kind of mutation.

None of these functions mutate their input: every collection on the way from
the root to the change is shallow-copied, everything else is shared with the
previous root.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from json_tree_editor.tree.nodes import PathKey, ValueKind, classify
from json_tree_editor.tree.paths import is_prefix, restore_before_removal

__all__ = [
    "add_at",
    "delete_at",
    "get_at",
    "move_value",
    "rename_key",
    "set_at",
]


def get_at(root: Any, path: Sequence[PathKey]) -> Any:
    """Return the value at ``path``.

    Raises:
        KeyError: If the path does not resolve.
    """
    node = root
    for key in path:
        kind = classify(node)
        if kind is ValueKind.OBJECT and isinstance(key, str) and key in node:
            node = node[key]
        elif kind is ValueKind.ARRAY and _valid_index(key, len(node)):
            node = node[key]
        else:
            raise KeyError(f"No value at path {list(path)!r}")
    return node


def _valid_index(key: Any, length: int) -> bool:
    return isinstance(key, int) and not isinstance(key, bool) and 0 <= key < length


def _rebuild(sequence: Any, items: list[Any]) -> Any:
    return tuple(items) if isinstance(sequence, tuple) else items


def _update(root: Any, path: Sequence[PathKey], change: Callable[[Any], Any]) -> Any:
    """Apply ``change`` to the value at ``path``, copying every ancestor."""
    if not path:
        return change(root)
    key, rest = path[0], path[1:]
    kind = classify(root)
    if kind is ValueKind.OBJECT and isinstance(key, str) and key in root:
        copy = dict(root)
        copy[key] = _update(root[key], rest, change)
        return copy
    if kind is ValueKind.ARRAY and _valid_index(key, len(root)):
        items = list(root)
        items[key] = _update(root[key], rest, change)
        return _rebuild(root, items)
    raise KeyError(f"No value at path {list(path)!r}")


def set_at(root: Any, path: Sequence[PathKey], value: Any) -> Any:
    return _update(root, path, lambda _old: value)


def add_at(root: Any, path: Sequence[PathKey], value: Any) -> Any:
    """Insert ``value`` so that it ends up at ``path``.

    Array parents accept any index from 0 to the current length (inclusive);
    object parents require a key that is not present yet.

    Raises:
        KeyError: If the parent does not exist or the key is taken.
        IndexError: If an array index is out of range.
    """
    if not path:
        raise KeyError("Cannot add at the root path")
    key = path[-1]

    def insert(parent: Any) -> Any:
        kind = classify(parent)
        if kind is ValueKind.ARRAY:
            if not (isinstance(key, int) and 0 <= key <= len(parent)):
                raise IndexError(f"Index {key!r} out of range for insert")
            items = list(parent)
            items.insert(key, value)
            return _rebuild(parent, items)
        if kind is ValueKind.OBJECT:
            if not isinstance(key, str):
                raise KeyError(f"Object keys must be strings, got {key!r}")
            if key in parent:
                raise KeyError(f"Key {key!r} already exists")
            return {**parent, key: value}
        raise KeyError(f"Value at {list(path[:-1])!r} is not a collection")

    return _update(root, path[:-1], insert)


def delete_at(root: Any, path: Sequence[PathKey]) -> Any:
    if not path:
        raise KeyError("Cannot delete the root")
    get_at(root, path)
    key = path[-1]

    def remove(parent: Any) -> Any:
        if classify(parent) is ValueKind.ARRAY:
            items = list(parent)
            del items[key]
            return _rebuild(parent, items)
        return {k: v for k, v in parent.items() if k != key}

    return _update(root, path[:-1], remove)


def move_value(
    root: Any, source: Sequence[PathKey], destination: Sequence[PathKey]
) -> Any:
    """Relocate the value at ``source`` to ``destination`` in one step.

    ``destination`` is expressed against the tree *after* the source has been
    removed (see ``drag.plan_move``), so moving within one array is a plain
    remove-then-insert.

    Raises:
        ValueError: If the destination lies inside the source.
    """
    if is_prefix(source, restore_before_removal(destination, source)):
        raise ValueError("Cannot move a value into itself")
    value = get_at(root, source)
    return add_at(delete_at(root, source), destination, value)


def rename_key(root: Any, path: Sequence[PathKey], new_key: str) -> Any:
    """Rename the object member at ``path``; the renamed member is appended."""
    if not path or not isinstance(path[-1], str):
        raise KeyError(f"Path {list(path)!r} is not an object member")
    value = get_at(root, path)
    parent_path = path[:-1]
    return add_at(delete_at(root, path), (*parent_path, new_key), value)
