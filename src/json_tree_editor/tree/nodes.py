"""NodeData descriptor and ValueKind StrEnum for JSON-like values.

Provides the foundational types used by TreeBuilder to derive one descriptor
per node of a nested value. Descriptors are recomputed on every traversal
pass and never used as identity; the path is the only stable identity.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum, auto
from typing import Any

# A single path segment: string for object members, int for array indices
PathKey = str | int
Path = tuple[PathKey, ...]


class ValueKind(StrEnum):
    """Closed tag set of value kinds.

    StrEnum values are the lowercased member names:
    - STRING  -> "string"
    - NUMBER  -> "number"
    - BOOLEAN -> "boolean"
    - NULL    -> "null"
    - OBJECT  -> "object"  : string-keyed, insertion-ordered mapping
    - ARRAY   -> "array"   : index-ordered sequence
    - INVALID -> "invalid" : anything that is not JSON-compatible
    """

    STRING = auto()
    NUMBER = auto()
    BOOLEAN = auto()
    NULL = auto()
    OBJECT = auto()
    ARRAY = auto()
    INVALID = auto()

    @property
    def is_collection(self) -> bool:
        return self in (ValueKind.OBJECT, ValueKind.ARRAY)


def classify(value: Any) -> ValueKind:
    """Return the ValueKind of ``value``.

    bool MUST be checked before int: bool subclasses int in Python.
    Array-ness is a runtime shape check (list or tuple), never a declared type.
    """
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    if isinstance(value, dict):
        return ValueKind.OBJECT
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if value is None:
        return ValueKind.NULL
    return ValueKind.INVALID


def is_collection(value: Any) -> bool:
    return classify(value).is_collection


def node_size(value: Any) -> int:
    """Child count for collections, 1 for scalar and invalid values."""
    return len(value) if is_collection(value) else 1


@dataclass(frozen=True, slots=True)
class NodeData:
    """Ephemeral descriptor of one node in the tree.

    Attributes:
        key:         Own key in the parent (root carries the configured root name).
        value:       The node's raw value (borrowed, never copied).
        path:        Keys from the root to this node; ``len(path) == level``.
        level:       Depth; 0 for the root.
        index:       Presentation position among its siblings.
        size:        Child count for collections, 1 otherwise.
        parent_data: Raw value of the enclosing collection (None for the root).
        full_data:   The root value, propagated unchanged.
    """

    key: PathKey
    value: Any
    path: Path
    level: int
    index: int
    size: int
    parent_data: Any
    full_data: Any

    @property
    def kind(self) -> ValueKind:
        return classify(self.value)

    @property
    def is_root(self) -> bool:
        return self.level == 0

    @property
    def parent_kind(self) -> ValueKind | None:
        if self.is_root:
            return None
        return classify(self.parent_data)


# Host-supplied predicate over a node descriptor
FilterFunction = Callable[[NodeData], bool]
