"""EditorConfig: immutable settings for a JsonTreeEditor.

Every host-facing policy (collapse, permissions, search, sort, codec, error
observer) is a field here. Policies accept the same shorthand forms: a bool
is a constant, a number is a level threshold where that makes sense, and a
callable is used as-is.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from json_tree_editor.codec import json_parse, json_stringify
from json_tree_editor.errors import ErrorObserver
from json_tree_editor.tree.nodes import FilterFunction, NodeData, ValueKind
from json_tree_editor.tree.sorting import KeySort

__all__ = ["EditorConfig", "get_filter_function"]

SearchFilterFunction = Callable[[NodeData, str], bool]
SearchFilter = Literal["key", "value", "all"] | SearchFilterFunction
TypeRestriction = bool | Sequence[str] | Callable[[NodeData], bool | Sequence[str]]

_SEARCH_MODES = ("key", "value", "all")


def get_filter_function(policy: bool | int | FilterFunction) -> FilterFunction:
    """Normalize a bool/level/callable policy into a predicate.

    - bool: the same answer for every node
    - int:  True for nodes at ``level >= policy``
    - callable: returned unchanged
    """
    if isinstance(policy, bool):
        return lambda _node: policy
    if isinstance(policy, int):
        return lambda node: node.level >= policy
    if callable(policy):
        return policy
    raise TypeError(f"Expected bool, int or callable, got {type(policy).__name__}")


@dataclass(frozen=True, slots=True)
class EditorConfig:
    """Immutable configuration for the tree editor.

    Attributes:
        root_name: Key shown for the root node.
        collapse: Initial collapse policy (bool, level threshold or predicate).
        collapse_animation_time: Seconds per collapse animation; <= 0 disables it.
        search_filter: "key", "value", "all", a ``(node, text) -> bool``
            predicate, or None to disable filtering.
        search_debounce_time: Seconds the query must be stable before it applies.
        key_sort: True for lexicographic object keys, or a comparator.
        show_array_indices: Show index labels on array elements.
        show_collection_count: True, False or "when-closed".
        show_string_quotes: Wrap string display values in quotes.
        string_truncate: Maximum display length of string values.
        show_error_messages: Surface errors at the node (they are always logged).
        error_display_time: Seconds before a node error clears itself.
        default_value: Value for new elements, or ``(parent NodeData) -> value``.
        restrict_edit, restrict_delete, restrict_add, restrict_key_edit,
        restrict_drag: True (or a predicate returning True) forbids the action.
        restrict_type_selection: True forbids type changes; a sequence lists
            the allowed kinds; a predicate may return either form.
        read_only: Deny every editing affordance (viewer mode).
        json_stringify: Serializer used to seed collection edit buffers.
        json_parse: Parser used on commit; raises InvalidJSONError.
        on_error: Observer for host-rejected mutations.
        max_node_states: Bound of the per-node state LRU store, fixed when the
            editor is built.
    """

    root_name: str = "root"
    collapse: bool | int | FilterFunction = False
    collapse_animation_time: float = 0.3
    search_filter: SearchFilter | None = None
    search_debounce_time: float = 0.35
    key_sort: KeySort = False
    show_array_indices: bool = True
    show_collection_count: bool | Literal["when-closed"] = True
    show_string_quotes: bool = True
    string_truncate: int = 250
    show_error_messages: bool = True
    error_display_time: float = 2.5
    default_value: Any = None
    restrict_edit: bool | FilterFunction = False
    restrict_delete: bool | FilterFunction = False
    restrict_add: bool | FilterFunction = False
    restrict_key_edit: bool | FilterFunction = False
    restrict_drag: bool | FilterFunction = True
    restrict_type_selection: TypeRestriction = False
    read_only: bool = False
    json_stringify: Callable[[Any], str] = json_stringify
    json_parse: Callable[[str], Any] = json_parse
    on_error: ErrorObserver | None = None
    max_node_states: int = 4096

    def __post_init__(self) -> None:
        if isinstance(self.search_filter, str) and self.search_filter not in _SEARCH_MODES:
            msg = f"search_filter must be one of {_SEARCH_MODES} or a callable, got {self.search_filter!r}"
            raise ValueError(msg)
        if self.show_collection_count not in (True, False, "when-closed"):
            msg = f"show_collection_count must be a bool or 'when-closed', got {self.show_collection_count!r}"
            raise ValueError(msg)
        if self.string_truncate < 1:
            msg = f"string_truncate must be >= 1, got {self.string_truncate}"
            raise ValueError(msg)
        if self.max_node_states < 1:
            msg = f"max_node_states must be >= 1, got {self.max_node_states}"
            raise ValueError(msg)
        if self.error_display_time < 0.0:
            msg = f"error_display_time must be >= 0.0, got {self.error_display_time}"
            raise ValueError(msg)
        if self.search_debounce_time < 0.0:
            msg = f"search_debounce_time must be >= 0.0, got {self.search_debounce_time}"
            raise ValueError(msg)
        get_filter_function(self.collapse)

    def with_changes(self, **changes: Any) -> EditorConfig:
        """Return a validated copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    # ------------------------------------------------------------------
    # Normalized policies
    # ------------------------------------------------------------------

    def collapse_filter(self) -> FilterFunction:
        return get_filter_function(self.collapse)

    def restriction(self, name: str) -> FilterFunction:
        """Predicate for ``restrict_<name>``; read-only mode forbids everything."""
        if self.read_only:
            return lambda _node: True
        return get_filter_function(getattr(self, f"restrict_{name}"))

    def allowed_types(self, node: NodeData) -> tuple[ValueKind, ...]:
        """Kinds ``node`` may be converted to (empty when type changes are off)."""
        policy = self.restrict_type_selection
        if self.read_only:
            return ()
        if callable(policy):
            policy = policy(node)
        if policy is True:
            return ()
        every = tuple(k for k in ValueKind if k is not ValueKind.INVALID)
        if policy is False:
            return every
        return tuple(ValueKind(kind) for kind in policy)
