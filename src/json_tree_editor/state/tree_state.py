"""TreeState: the only state shared across nodes and traversal passes.

Holds the path-targeted collapse override and the single "currently editing"
slot. One instance is passed by reference to everything that renders or
edits a tree, so independent editors (and tests) never interfere.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from json_tree_editor.tree.nodes import Path, PathKey
from json_tree_editor.tree.paths import is_prefix, key_edit_slot, same_path, to_path_string

__all__ = ["CollapseOverride", "TreeState"]


@dataclass(frozen=True, slots=True)
class CollapseOverride:
    """A one-shot collapse instruction for the node at ``path``.

    Attributes:
        path:        Target node.
        collapsed:   State to adopt.
        generation:  Write counter; a node adopts each generation at most once.
        include_descendants: Also target every node below ``path``.
    """

    path: Path
    collapsed: bool
    generation: int
    include_descendants: bool = False

    def matches(self, path: Sequence[PathKey]) -> bool:
        if self.include_descendants:
            return is_prefix(self.path, path)
        return same_path(self.path, path)


class TreeState:
    """Shared collapse override and edit slot.

    The edit slot holds the path of the node being edited and whether the
    edit is a key rename. Slot checks compare paths segment by segment; the
    string form (path string, or ``"key_" + path string`` for a rename) is
    kept for display and logging only, since distinct paths can share it.
    """

    def __init__(self) -> None:
        self._override: CollapseOverride | None = None
        self._generation = 0
        self._editing_path: Path | None = None
        self._editing_key = False

    # ------------------------------------------------------------------
    # Collapse override
    # ------------------------------------------------------------------

    @property
    def collapse_override(self) -> CollapseOverride | None:
        return self._override

    def set_collapse_override(
        self,
        path: Sequence[PathKey],
        collapsed: bool,
        include_descendants: bool = False,
    ) -> CollapseOverride:
        self._generation += 1
        self._override = CollapseOverride(
            tuple(path), collapsed, self._generation, include_descendants
        )
        return self._override

    def clear_collapse_override(self) -> None:
        self._override = None

    def does_path_match(self, path: Sequence[PathKey]) -> bool:
        return self._override is not None and self._override.matches(path)

    # ------------------------------------------------------------------
    # Edit slot
    # ------------------------------------------------------------------

    @property
    def currently_editing(self) -> str | None:
        if self._editing_path is None:
            return None
        if self._editing_key:
            return key_edit_slot(self._editing_path)
        return to_path_string(self._editing_path)

    @property
    def editing_path(self) -> Path | None:
        return self._editing_path

    def set_editing(self, path: Sequence[PathKey], key: bool = False) -> None:
        self._editing_path = tuple(path)
        self._editing_key = key

    def clear_editing(self) -> None:
        self._editing_path = None
        self._editing_key = False

    def holds_edit_slot(self, path: Sequence[PathKey]) -> bool:
        """True when ``path`` is being edited, value or key."""
        return self._editing_path is not None and same_path(self._editing_path, path)

    def is_editing(self, path: Sequence[PathKey], key: bool = False) -> bool:
        return self._editing_key is key and self.holds_edit_slot(path)

    def is_slot_taken_by_other(self, path: Sequence[PathKey]) -> bool:
        return self._editing_path is not None and not same_path(self._editing_path, path)

    def are_children_being_edited(self, path: Sequence[PathKey]) -> bool:
        """True when the active edit is at ``path`` or anywhere below it."""
        return self._editing_path is not None and is_prefix(path, self._editing_path)
