"""TreeRenderer: one traversal pass from a descriptor to a RenderedNode tree.

The renderer is a recursive function of the node descriptor plus three
pieces of state it is handed by reference: the shared TreeState, the
per-path NodeStateCache, and the collapse-policy generation. Filtered-out
nodes return None and are not traversed into; collapsed collections that
were never opened are not materialized.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from json_tree_editor.config import EditorConfig
from json_tree_editor.engine.drag import DragController
from json_tree_editor.engine.edit import EditController, EditMode
from json_tree_editor.engine.search import SearchFilterFunction, filter_node
from json_tree_editor.protocols import Scheduler
from json_tree_editor.state.collapse import CollapsePhase, CollapseTransition
from json_tree_editor.state.node_state import NodeState, NodeStateCache
from json_tree_editor.state.tree_state import TreeState
from json_tree_editor.tree.builder import TreeBuilder
from json_tree_editor.tree.nodes import NodeData, PathKey, ValueKind
from json_tree_editor.tree.paths import is_prefix

__all__ = ["NodePermissions", "RenderedNode", "TreeRenderer", "display_value", "truncate"]

logger = logging.getLogger(__name__)

INVALID_VALUE_STRING = "**INVALID_VALUE**"
INVALID_FUNCTION_STRING = "**INVALID_FUNCTION**"


def truncate(text: str, length: int = 200) -> str:
    """Shorten ``text`` to ``length`` characters, ending in ``...``."""
    if len(text) < length:
        return text
    return f"{text[: max(length - 2, 0)].strip()}..."


def display_value(value: Any, kind: ValueKind, config: EditorConfig) -> str:
    if kind is ValueKind.STRING:
        quote = '"' if config.show_string_quotes else ""
        return f"{quote}{truncate(value, config.string_truncate)}{quote}"
    if kind is ValueKind.BOOLEAN:
        return "true" if value else "false"
    if kind is ValueKind.NULL:
        return "null"
    if kind is ValueKind.NUMBER:
        return str(value)
    return INVALID_FUNCTION_STRING if callable(value) else INVALID_VALUE_STRING


@dataclass(frozen=True, slots=True)
class NodePermissions:
    can_edit: bool = False
    can_edit_key: bool = False
    can_add: bool = False
    can_delete: bool = False
    can_drag: bool = False
    can_drag_onto: bool = False
    allowed_types: tuple[ValueKind, ...] = ()


@dataclass(slots=True)
class RenderedNode:
    """Derived visual state of one node after a traversal pass.

    Attributes:
        node:        The descriptor this row was rendered from.
        mode:        Viewing, EditingValue or EditingKey.
        permissions: Affordances offered at this node.
        show_key:    Whether the key label is displayed.
        display:     Display text for scalars; None for collections.
        buffer:      Edit buffer while editing, else None.
        error:       Transient error message.
        busy:        A mutation started here is still pending.
        phase:       Collapse phase (collections only).
        direction:   "collapse"/"expand" while animating.
        extent:      Visible child extent in rows; None is unconstrained.
        clip_overflow: Clip children (only while collapsed or animating).
        show_count:  Whether the item count is displayed.
        children:    Rendered children, or None when not materialized or
                     replaced by the text buffer.
    """

    node: NodeData
    mode: EditMode
    permissions: NodePermissions
    show_key: bool
    display: str | None = None
    buffer: Any = None
    error: str | None = None
    busy: bool = False
    phase: CollapsePhase | None = None
    direction: str | None = None
    extent: float | None = None
    clip_overflow: bool = False
    show_count: bool = False
    children: list[RenderedNode] | None = field(default=None, repr=False)

    @property
    def kind(self) -> ValueKind:
        return self.node.kind

    @property
    def path(self) -> tuple[PathKey, ...]:
        return self.node.path

    @property
    def collapsed(self) -> bool | None:
        if self.phase is None:
            return None
        if self.phase is CollapsePhase.ANIMATING:
            return self.direction == "collapse"
        return self.phase is CollapsePhase.COLLAPSED

    @property
    def natural_extent(self) -> float:
        return float(sum(child.row_count for child in self.children or ()))

    @property
    def row_count(self) -> float:
        """Rows this node occupies: its own row plus visible child rows."""
        if self.children is None:
            return 1.0
        visible = self.natural_extent if self.extent is None else self.extent
        return 1.0 + min(visible, self.natural_extent)

    def iter_rows(self) -> Iterator[RenderedNode]:
        """Depth-first rows that are on screen once animations settle."""
        yield self
        if self.children is None or (self.collapsed and self.clip_overflow):
            return
        for child in self.children:
            yield from child.iter_rows()

    def find(self, path: Sequence[PathKey]) -> RenderedNode | None:
        """The rendered node at ``path``, if it was rendered this pass."""
        if not is_prefix(self.path, path):
            return None
        if len(self.path) == len(path):
            return self
        for child in self.children or ():
            found = child.find(path)
            if found is not None:
                return found
        return None


class TreeRenderer:
    """Derives RenderedNode trees and owns per-node state bookkeeping.

    Args:
        builder:    Descriptor factory (root name and key sort).
        config:     Display, collapse and permission policies.
        tree_state: Shared collapse override and edit slot.
        states:     Per-path state store.
        scheduler:  Timer source for collapse animations.
        edits:      Edit-mode and permission source.
        drag:       Drag permission source.
        notify:     Called when an animation settles.
    """

    def __init__(
        self,
        builder: TreeBuilder,
        config: EditorConfig,
        tree_state: TreeState,
        states: NodeStateCache,
        scheduler: Scheduler,
        edits: EditController,
        drag: DragController,
        notify: Callable[[], None] | None = None,
    ) -> None:
        self.builder = builder
        self.config = config
        self.tree_state = tree_state
        self.states = states
        self.scheduler = scheduler
        self.edits = edits
        self.drag = drag
        self.collapse_generation = 0
        self._notify = notify if notify is not None else (lambda: None)

    # ------------------------------------------------------------------
    # Node state
    # ------------------------------------------------------------------

    def state_for(self, node: NodeData) -> NodeState:
        """Fetch the state at ``node.path``, creating it on first sight.

        A new collection starts collapsed according to the collapse policy,
        unless an unconsumed collapse override targets it.
        """
        path = node.path
        kind = node.kind
        state = self.states.get(path)
        if state is not None and state.kind is kind:
            return state
        if state is not None:
            self.states.discard(path)

        state = NodeState(
            path=path,
            kind=kind,
            collapse_generation=self.collapse_generation,
        )
        if kind.is_collection:
            collapsed = bool(self.config.collapse_filter()(node))
            state.policy_collapsed = collapsed
            override = self.tree_state.collapse_override
            if override is not None and override.matches(node.path):
                collapsed = override.collapsed
                state.override_generation = override.generation
            state.transition = CollapseTransition(
                collapsed,
                self.config.collapse_animation_time,
                self.scheduler,
                self._notify,
            )
            state.has_been_opened = not collapsed
            state.natural_extent = float(node.size)
        self.states[path] = state
        return state

    def bump_collapse_generation(self) -> None:
        """Make every node re-evaluate the collapse policy on its next pass."""
        self.collapse_generation += 1

    def _sync_collapse(self, node: NodeData, state: NodeState, mode: EditMode) -> None:
        transition = state.transition
        assert transition is not None
        if state.collapse_generation != self.collapse_generation:
            state.collapse_generation = self.collapse_generation
            state.policy_collapsed = bool(self.config.collapse_filter()(node))
            should_collapse = state.policy_collapsed and mode is not EditMode.EDITING_VALUE
            if not should_collapse:
                state.has_been_opened = True
            transition.animate(should_collapse, state.natural_extent)

        override = self.tree_state.collapse_override
        if (
            override is not None
            and override.generation > state.override_generation
            and override.matches(node.path)
        ):
            state.override_generation = override.generation
            state.has_been_opened = True
            transition.animate(override.collapsed, state.natural_extent)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def render(
        self,
        node: NodeData,
        search_filter: SearchFilterFunction | None = None,
        search_text: str = "",
        can_drag_onto: bool = False,
    ) -> RenderedNode | None:
        """Render ``node`` and its visible subtree; None if filtered out."""
        if not filter_node(node, search_filter, search_text):
            return None

        state = self.state_for(node)
        mode = self.edits.mode(node)
        kind = node.kind
        permissions = self._permissions(node, can_drag_onto)
        rendered = RenderedNode(
            node=node,
            mode=mode,
            permissions=permissions,
            show_key=self.config.show_array_indices or node.parent_kind is not ValueKind.ARRAY,
            buffer=state.buffer if mode is not EditMode.VIEWING else None,
            error=state.error,
            busy=state.busy,
        )
        if not kind.is_collection:
            rendered.display = display_value(node.value, kind, self.config)
            return rendered

        self._sync_collapse(node, state, mode)
        transition = state.transition
        assert transition is not None
        suppressed = self.tree_state.are_children_being_edited(node.path)
        if not transition.collapsed:
            state.has_been_opened = True

        if mode is not EditMode.EDITING_VALUE and (state.has_been_opened or suppressed):
            children = []
            for child in self.builder.children(node):
                child_rendered = self.render(
                    child, search_filter, search_text, permissions.can_edit
                )
                if child_rendered is not None:
                    children.append(child_rendered)
            rendered.children = children
            state.natural_extent = rendered.natural_extent

        rendered.phase = transition.phase
        rendered.direction = transition.direction
        if suppressed:
            rendered.extent = None
            rendered.clip_overflow = False
        else:
            rendered.extent = transition.extent(state.natural_extent)
            rendered.clip_overflow = transition.collapsed or transition.animating

        count_policy = self.config.show_collection_count
        rendered.show_count = (
            transition.collapsed if count_policy == "when-closed" else bool(count_policy)
        )
        return rendered

    def _permissions(self, node: NodeData, can_drag_onto: bool) -> NodePermissions:
        can_edit = self.edits.can_edit(node)
        is_collection = node.kind.is_collection
        return NodePermissions(
            can_edit=can_edit,
            can_edit_key=self.edits.can_edit_key(node),
            can_add=is_collection and not self.config.restriction("add")(node),
            can_delete=not node.is_root and not self.config.restriction("delete")(node),
            can_drag=self.drag.can_drag(node),
            can_drag_onto=can_drag_onto,
            allowed_types=(
                self.config.allowed_types(node) if can_edit and not is_collection else ()
            ),
        )
