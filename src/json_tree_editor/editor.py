"""JsonTreeEditor: the interactive editing surface for one JSON-like value.

The editor never mutates the value it is given. Every accepted interaction
becomes a request to the host (edit, add, delete or move); the host answers
and hands back a new root through ``set_data``, after which the next
``render()`` re-derives the whole descriptor tree.

Example::

    editor = JsonTreeEditor({"x": 1}, host=my_host, scheduler=ManualScheduler())
    editor.start_edit(("x",))
    editor.set_buffer(("x",), 2)
    result = asyncio.run(editor.commit_edit(("x",)))   # calls my_host.on_edit(2, ("x",))
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Sequence
from typing import Any

from json_tree_editor.config import EditorConfig
from json_tree_editor.engine.drag import DragController, DropZone, MoveRejected, resolve_drop_zone
from json_tree_editor.engine.edit import EditController, EditMode
from json_tree_editor.engine.mutations import MutationEngine, MutationResult
from json_tree_editor.engine.search import SearchDebouncer, get_search_filter
from json_tree_editor.errors import ErrorCode
from json_tree_editor.protocols import EditorHost, Scheduler
from json_tree_editor.render import RenderedNode, TreeRenderer
from json_tree_editor.state.node_state import NodeState, NodeStateCache
from json_tree_editor.state.scheduler import LoopScheduler
from json_tree_editor.state.tree_state import TreeState
from json_tree_editor.tree.builder import TreeBuilder
from json_tree_editor.tree.nodes import NodeData, PathKey, ValueKind

__all__ = ["JsonTreeEditor"]

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


def _refused(message: str) -> MutationResult:
    return MutationResult(accepted=False, message=message)


class JsonTreeEditor:
    """Orchestrator wiring traversal, collapse, edit, mutation, search and drag.

    Args:
        data:       Current root value (treated as immutable).
        host:       Receiver of mutation requests.
        config:     Policies; defaults to ``EditorConfig()``.
        scheduler:  Timer source; defaults to the running asyncio loop.
        tree_state: Shared collapse/edit state; a fresh one by default.
        search_text: Initial (already applied) query.
    """

    def __init__(
        self,
        data: Any,
        host: EditorHost,
        config: EditorConfig | None = None,
        *,
        scheduler: Scheduler | None = None,
        tree_state: TreeState | None = None,
        search_text: str = "",
    ) -> None:
        self.config = config if config is not None else EditorConfig()
        self.host = host
        self.scheduler: Scheduler = scheduler if scheduler is not None else LoopScheduler()
        self.tree_state = tree_state if tree_state is not None else TreeState()
        self._data = data
        self._listeners: list[Listener] = []
        self._states = NodeStateCache(
            self.config.max_node_states, pinned=self.tree_state.holds_edit_slot
        )

        self.builder = TreeBuilder(self.config.root_name, self.config.key_sort)
        self.mutations = MutationEngine(host, self.config, self.scheduler, self._changed)
        self.edits = EditController(self.tree_state, self.config, self.mutations)
        self.drag = DragController(self.config, self.builder)
        self.renderer = TreeRenderer(
            self.builder,
            self.config,
            self.tree_state,
            self._states,
            self.scheduler,
            self.edits,
            self.drag,
            self._changed,
        )
        self.search = SearchDebouncer(
            self.scheduler,
            self.config.search_debounce_time,
            on_apply=lambda _text: self._changed(),
            text=search_text,
        )

    # ------------------------------------------------------------------
    # Data and configuration
    # ------------------------------------------------------------------

    @property
    def data(self) -> Any:
        return self._data

    def set_data(self, data: Any) -> None:
        """Replace the root with the host's new value."""
        self._data = data
        self._changed()

    def configure(self, **changes: Any) -> EditorConfig:
        """Apply config changes; a new collapse policy re-evaluates every node."""
        old = self.config
        new = old.with_changes(**changes)
        self.config = new
        for component in (self.mutations, self.edits, self.drag, self.renderer):
            component.config = new
        self.builder.root_name = new.root_name
        self.builder.key_sort = new.key_sort
        self.search.delay = new.search_debounce_time
        if new.collapse is not old.collapse:
            self.renderer.bump_collapse_generation()
        self._changed()
        return new

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def node(self, path: Sequence[PathKey]) -> NodeData:
        """Descriptor at ``path``. Raises KeyError if there is none."""
        return self.builder.node_at(self._data, path)

    def state(self, path: Sequence[PathKey]) -> NodeState:
        return self.renderer.state_for(self.node(path))

    def mode(self, path: Sequence[PathKey]) -> EditMode:
        return self.edits.mode(self.node(path))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> RenderedNode:
        """Run one traversal pass over the current root."""
        self._states.sweep()
        search_filter = get_search_filter(self.config.search_filter)
        rendered = self.renderer.render(
            self.builder.root(self._data), search_filter, self.search.text
        )
        assert rendered is not None  # the root is never filtered out
        return rendered

    def set_search_text(self, text: str) -> None:
        """Feed raw query input; it applies after the debounce delay."""
        self.search.set_text(text)

    # ------------------------------------------------------------------
    # Collapse
    # ------------------------------------------------------------------

    def toggle(self, path: Sequence[PathKey], modifier: bool = False) -> bool:
        """Flip a collection between collapsed and expanded.

        With ``modifier`` (alt-click) the new state is also written as a
        collapse override for the node and everything below it. A plain
        toggle is refused while the node itself is being value-edited.
        """
        node = self.node(path)
        if not node.kind.is_collection:
            return False
        state = self.renderer.state_for(node)
        transition = state.transition
        assert transition is not None
        target = not transition.collapsed

        if modifier:
            state.has_been_opened = True
            override = self.tree_state.set_collapse_override(
                node.path, target, include_descendants=True
            )
            state.override_generation = override.generation
            transition.animate(target, state.natural_extent)
            self._changed()
            return True

        if self.tree_state.is_editing(node.path):
            logger.debug("toggle refused at %r: being edited", node.path)
            return False
        state.has_been_opened = True
        self.tree_state.clear_collapse_override()
        transition.animate(target, state.natural_extent)
        self._changed()
        return True

    def set_collapse_override(
        self,
        path: Sequence[PathKey],
        collapsed: bool,
        include_descendants: bool = False,
    ) -> None:
        """Broadcast a one-shot collapse state for ``path``; adopted on render."""
        self.tree_state.set_collapse_override(path, collapsed, include_descendants)
        self._changed()

    # ------------------------------------------------------------------
    # Edit sessions
    # ------------------------------------------------------------------

    def start_edit(self, path: Sequence[PathKey]) -> bool:
        node = self.node(path)
        state = self.renderer.state_for(node)
        if state.busy:
            return False
        started = self.edits.start(node, state)
        if started:
            self._changed()
        return started

    def set_buffer(self, path: Sequence[PathKey], value: Any) -> None:
        """Replace the edit buffer of the node being edited at ``path``."""
        node = self.node(path)
        if self.edits.mode(node) is EditMode.VIEWING:
            raise ValueError(f"No edit in progress at {list(path)!r}")
        self.renderer.state_for(node).buffer = value

    async def commit_edit(self, path: Sequence[PathKey]) -> MutationResult:
        node = self.node(path)
        result = await self.edits.commit(node, self.renderer.state_for(node))
        self._changed()
        return result

    def cancel_edit(self, path: Sequence[PathKey]) -> None:
        """Leave any edit mode at ``path``, discarding the buffer."""
        node = self.node(path)
        self.edits.cancel(node, self.renderer.state_for(node))
        self._changed()

    def start_key_edit(self, path: Sequence[PathKey]) -> bool:
        node = self.node(path)
        state = self.renderer.state_for(node)
        if state.busy:
            return False
        started = self.edits.start_key(node, state)
        if started:
            self._changed()
        return started

    async def commit_key_edit(self, path: Sequence[PathKey], new_key: str) -> MutationResult:
        node = self.node(path)
        parent = self.node(node.path[:-1])
        result = await self.edits.commit_key(
            node, parent, self.renderer.state_for(node), new_key
        )
        self._changed()
        return result

    async def change_type(self, path: Sequence[PathKey], kind: ValueKind | str) -> MutationResult:
        node = self.node(path)
        state = self.renderer.state_for(node)
        if state.busy:
            return _refused("An update is already pending")
        result = await self.edits.change_type(node, state, kind)
        self._changed()
        return result

    # ------------------------------------------------------------------
    # Structural mutations
    # ------------------------------------------------------------------

    def default_value(self, container: NodeData) -> Any:
        default = self.config.default_value
        if callable(default):
            return default(container)
        return copy.deepcopy(default)

    async def add(self, path: Sequence[PathKey], key: str | None = None) -> MutationResult:
        """Add a default-valued element to the collection at ``path``.

        Arrays append at their current length; objects need ``key``. On
        acceptance the collection is forced open so the new element shows.
        """
        container = self.node(path)
        if not container.kind.is_collection:
            raise ValueError(f"{list(path)!r} is not a collection")
        state = self.renderer.state_for(container)
        if state.busy:
            return _refused("An update is already pending")
        if self.config.restriction("add")(container):
            return _refused("Adding is not permitted here")

        if container.kind is ValueKind.ARRAY:
            target = (*container.path, len(container.value))
        elif key is None:
            raise ValueError("A key is required to add to an object")
        else:
            target = (*container.path, key)

        value = self.default_value(container)
        result = await self.mutations.add(value, target, container, state)
        if result.accepted and state.transition is not None:
            state.has_been_opened = True
            state.transition.animate(False, state.natural_extent)
        self._changed()
        return result

    async def delete(self, path: Sequence[PathKey]) -> MutationResult:
        node = self.node(path)
        if node.is_root:
            return _refused("The root cannot be deleted")
        state = self.renderer.state_for(node)
        if state.busy:
            return _refused("An update is already pending")
        if self.config.restriction("delete")(node):
            return _refused("Deleting is not permitted here")
        result = await self.mutations.delete(node, state)
        self._changed()
        return result

    async def move(
        self, source: Sequence[PathKey], destination: Sequence[PathKey]
    ) -> MutationResult:
        """Relocate ``source`` to ``destination`` as one host request."""
        node = self.node(source)
        state = self.renderer.state_for(node)
        if state.busy:
            return _refused("An update is already pending")
        result = await self.mutations.move(tuple(destination), node, state)
        self._changed()
        return result

    # ------------------------------------------------------------------
    # Drag and drop
    # ------------------------------------------------------------------

    def start_drag(self, path: Sequence[PathKey]) -> bool:
        node = self.node(path)
        if self.renderer.state_for(node).busy:
            return False
        return self.drag.start(node)

    def end_drag(self) -> None:
        self.drag.end()

    def drop_zone(self, path: Sequence[PathKey], fraction: float) -> DropZone | None:
        """Zone under the pointer at ``path``, or None if it refuses the drop."""
        target = self.node(path)
        zone = resolve_drop_zone(fraction, target.kind.is_collection)
        return zone if self.drag.accepts(self._data, target, zone) else None

    async def drop(self, path: Sequence[PathKey], zone: DropZone | str) -> MutationResult:
        """Finish the current drag at ``path``/``zone`` with a move request."""
        target = self.node(path)
        zone = DropZone(zone)
        source = self.drag.source
        try:
            destination = self.drag.plan(self._data, target, zone)
        except MoveRejected as exc:
            self.drag.end()
            if exc.code is not None:
                self.mutations.report_local(
                    exc.code, str(exc), target, self.renderer.state_for(target), source
                )
                self._changed()
            return MutationResult.rejected(exc.code or ErrorCode.MOVE_ERROR, str(exc))
        self.drag.end()
        assert source is not None
        return await self.move(source, destination)

    # ------------------------------------------------------------------
    # Change notification and teardown
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` whenever derived state changes; returns an unsubscriber."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("change listener failed")

    def teardown(self) -> None:
        """Cancel every pending timer and drop all node state."""
        self.search.cancel()
        self.drag.end()
        self._states.clear()
        self._listeners.clear()
