"""Path helpers: string form, prefix tests and removal adjustment."""

from __future__ import annotations

from collections.abc import Sequence

from json_tree_editor.tree.nodes import Path, PathKey

__all__ = [
    "KEY_EDIT_PREFIX",
    "adjust_after_removal",
    "as_path",
    "is_descendant",
    "is_prefix",
    "key_edit_slot",
    "parent_path",
    "restore_before_removal",
    "same_path",
    "to_path_string",
]

KEY_EDIT_PREFIX = "key_"


def as_path(path: Sequence[PathKey]) -> Path:
    return tuple(path)


def to_path_string(path: Sequence[PathKey]) -> str:
    """Join path parts with ``.``.

    An empty-string part would vanish from the joined form, so it is replaced
    with a NUL character.
    """
    return ".".join("\0" if part == "" else str(part) for part in path)


def key_edit_slot(path: Sequence[PathKey]) -> str:
    return KEY_EDIT_PREFIX + to_path_string(path)


def parent_path(path: Sequence[PathKey]) -> Path:
    if not path:
        raise ValueError("The root path has no parent")
    return tuple(path[:-1])


def is_prefix(prefix: Sequence[PathKey], path: Sequence[PathKey]) -> bool:
    """True when ``prefix`` equals ``path`` or is one of its ancestors.

    Segments compare by type as well as value so that the object key "0"
    and the array index 0 stay distinct.
    """
    if len(prefix) > len(path):
        return False
    return all(
        type(a) is type(b) and a == b for a, b in zip(prefix, path, strict=False)
    )


def same_path(a: Sequence[PathKey], b: Sequence[PathKey]) -> bool:
    return len(a) == len(b) and is_prefix(a, b)


def is_descendant(path: Sequence[PathKey], ancestor: Sequence[PathKey]) -> bool:
    return len(path) > len(ancestor) and is_prefix(ancestor, path)


def adjust_after_removal(path: Sequence[PathKey], removed: Sequence[PathKey]) -> Path:
    """Re-express ``path`` in the coordinates of a tree with ``removed`` deleted.

    Only array removals shift positions: when ``path`` runs through the same
    array as ``removed`` at a later index, that index is decremented.
    """
    if not removed:
        raise ValueError("Cannot remove the root")
    depth = len(removed) - 1
    last = removed[-1]
    if (
        isinstance(last, int)
        and len(path) > depth
        and is_prefix(removed[:-1], path)
        and isinstance(path[depth], int)
        and path[depth] > last
    ):
        adjusted = list(path)
        adjusted[depth] -= 1
        return tuple(adjusted)
    return tuple(path)


def restore_before_removal(path: Sequence[PathKey], removed: Sequence[PathKey]) -> Path:
    """Inverse of ``adjust_after_removal``: map ``path`` back to the full tree.

    A path through the array that held ``removed``, at or after its index,
    points one position further once the removed element is put back.
    """
    if not removed:
        raise ValueError("Cannot remove the root")
    depth = len(removed) - 1
    last = removed[-1]
    if (
        isinstance(last, int)
        and len(path) > depth
        and is_prefix(removed[:-1], path)
        and isinstance(path[depth], int)
        and not isinstance(path[depth], bool)
        and path[depth] >= last
    ):
        restored = list(path)
        restored[depth] += 1
        return tuple(restored)
    return tuple(path)
