"""Drag-reorder: drop-zone resolution, permission checks and move planning.

A drop never issues a request by itself; it produces a destination path for
``MutationEngine.move``. Destinations are expressed against the tree with the
source already removed, which is the form ``values.move_value`` applies.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum, auto

from json_tree_editor.config import EditorConfig
from json_tree_editor.errors import ErrorCode
from json_tree_editor.tree.builder import TreeBuilder
from json_tree_editor.tree.nodes import NodeData, Path, PathKey, ValueKind
from json_tree_editor.tree.paths import adjust_after_removal, is_prefix

__all__ = ["DragController", "DropZone", "MoveRejected", "plan_move", "resolve_drop_zone"]

logger = logging.getLogger(__name__)


class DropZone(StrEnum):
    ABOVE = auto()
    BELOW = auto()
    ONTO = auto()


class MoveRejected(ValueError):
    """A drop that must not turn into a move request.

    Attributes:
        code: Error to surface at the drop target, or None for a silent
            rejection (cycles and moves that would change nothing).
    """

    def __init__(self, message: str, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.code = code


def resolve_drop_zone(fraction: float, is_collection: bool) -> DropZone:
    """Map a pointer position within a row (0 = top, 1 = bottom) to a zone.

    Collection rows split into quarters: the top quarter is "above", the
    bottom quarter "below" and the middle "onto". Value rows split in half.
    """
    if is_collection:
        if fraction < 0.25:
            return DropZone.ABOVE
        if fraction > 0.75:
            return DropZone.BELOW
        return DropZone.ONTO
    return DropZone.ABOVE if fraction < 0.5 else DropZone.BELOW


def _member_key(source: Sequence[PathKey]) -> str:
    return str(source[-1])


def plan_move(source: Sequence[PathKey], target: NodeData, zone: DropZone) -> Path:
    """Compute the destination path for dropping ``source`` at ``target``.

    Raises:
        MoveRejected: When the drop targets the source or one of its
            descendants, would change nothing, or clashes with an existing
            object key (code KEY_EXISTS).
    """
    source = tuple(source)
    if not source:
        raise MoveRejected("The root cannot be moved")

    if zone is DropZone.ONTO:
        if not target.kind.is_collection:
            raise MoveRejected("Only collections accept drops onto them")
        container, container_value = target.path, target.value
        key: PathKey = (
            len(container_value) if target.kind is ValueKind.ARRAY else _member_key(source)
        )
    else:
        if target.is_root:
            raise MoveRejected("Nothing can be placed beside the root")
        container, container_value = target.path[:-1], target.parent_data
        if target.parent_kind is ValueKind.ARRAY:
            key = target.key + (1 if zone is DropZone.BELOW else 0)
        else:
            key = _member_key(source)

    raw_destination = (*container, key)
    if is_prefix(source, raw_destination):
        raise MoveRejected("Cannot move a value into itself")

    if isinstance(key, str):
        if tuple(container) == source[:-1]:
            raise MoveRejected("Object members keep their position within their object")
        if key in container_value:
            raise MoveRejected(f"Key {key!r} already exists", ErrorCode.KEY_EXISTS)

    destination = adjust_after_removal(raw_destination, source)
    if destination == source:
        raise MoveRejected("Drop position equals the current position")
    return destination


@dataclass
class DragController:
    """Tracks the active drag source and applies drag/drop permissions.

    A node may be dragged unless ``restrict_drag`` forbids it (the root never
    can); a collection accepts drops unless ``restrict_edit`` forbids editing it.
    """

    config: EditorConfig
    builder: TreeBuilder
    source: Path | None = None

    def can_drag(self, node: NodeData) -> bool:
        return not node.is_root and not self.config.restriction("drag")(node)

    def can_drop_into(self, container: NodeData) -> bool:
        return container.kind.is_collection and not self.config.restriction("edit")(container)

    def start(self, node: NodeData) -> bool:
        if not self.can_drag(node):
            logger.debug("drag refused at %r", node.path)
            return False
        self.source = node.path
        return True

    def end(self) -> None:
        self.source = None

    def accepts(self, full_data: object, target: NodeData, zone: DropZone) -> bool:
        """Whether the current source may be dropped at ``target``/``zone``."""
        if self.source is None:
            return False
        container = target if zone is DropZone.ONTO else self._parent(full_data, target)
        if container is None or not self.can_drop_into(container):
            return False
        try:
            plan_move(self.source, target, zone)
        except MoveRejected:
            return False
        return True

    def plan(self, full_data: object, target: NodeData, zone: DropZone) -> Path:
        """Destination for dropping the current source at ``target``/``zone``.

        Raises:
            MoveRejected: No drag in progress, the container refuses drops,
                or ``plan_move`` rejects the drop.
        """
        if self.source is None:
            raise MoveRejected("No drag in progress")
        container = target if zone is DropZone.ONTO else self._parent(full_data, target)
        if container is None or not self.can_drop_into(container):
            raise MoveRejected("The target collection does not accept drops")
        return plan_move(self.source, target, zone)

    def _parent(self, full_data: object, target: NodeData) -> NodeData | None:
        if target.is_root:
            return None
        return self.builder.node_at(full_data, target.path[:-1])
