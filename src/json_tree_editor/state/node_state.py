"""Per-node view state and its bounded LRU store.

A NodeState is what survives between passes for one path: the collapse
transition, the lazy-materialization latch, the edit buffer, the transient
error and the busy flag of a pending mutation. States live in a
``NodeStateCache`` keyed by path tuple. When the cache evicts a state that a
rebuild from the collapse policy would reproduce, that state's timers are
cancelled and it is dropped; states still holding user-owned data are set
aside instead and come back on the next lookup.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from cachetools import LRUCache

from json_tree_editor.protocols import Scheduler, TimerHandle
from json_tree_editor.state.collapse import CollapseTransition
from json_tree_editor.tree.nodes import Path, ValueKind

__all__ = ["NodeState", "NodeStateCache"]

logger = logging.getLogger(__name__)


@dataclass
class NodeState:
    """Mutable state of the node at ``path``.

    Attributes:
        path:         Identity of the node.
        kind:         Value kind when the state was created; a state whose
                      node changed kind is discarded and rebuilt.
        transition:   Collapse state; None for scalar nodes.
        has_been_opened: One-way latch: once True, children are always
                      materialized even while collapsed.
        policy_collapsed: What the collapse policy asked for when last
                      evaluated at this node.
        collapse_generation: Collapse-policy generation last applied.
        override_generation: Collapse-override generation last adopted.
        buffer:       Edit buffer (text for collections, typed for scalars).
        error:        Transient error message shown at this node.
        busy:         A mutation started here has not settled yet.
        natural_extent: Rows the children occupied on the last full pass.
    """

    path: Path
    kind: ValueKind
    transition: CollapseTransition | None = None
    has_been_opened: bool = False
    policy_collapsed: bool = False
    collapse_generation: int = 0
    override_generation: int = 0
    buffer: Any = None
    error: str | None = None
    busy: bool = False
    natural_extent: float = 0.0
    _error_timer: TimerHandle | None = field(default=None, repr=False)

    @property
    def collapsed(self) -> bool:
        return self.transition is not None and self.transition.collapsed

    @property
    def retained(self) -> bool:
        """True while this state holds something a fresh rebuild would lose.

        That is a pending request, a visible error, a running animation, a
        collapse state that departs from the policy, or an opened latch on a
        collection that is collapsed again.
        """
        if self.busy or self.error is not None:
            return True
        transition = self.transition
        if transition is None:
            return False
        return (
            transition.animating
            or transition.collapsed != self.policy_collapsed
            or (self.has_been_opened and transition.collapsed)
        )

    def show_error(
        self,
        message: str,
        scheduler: Scheduler,
        duration: float,
        on_cleared: Callable[[], None] | None = None,
    ) -> None:
        """Display ``message`` and clear it after ``duration`` seconds.

        A new error restarts the timer rather than stacking another one.
        """
        self._cancel_error_timer()
        self.error = message

        def clear() -> None:
            self._error_timer = None
            self.error = None
            if on_cleared is not None:
                on_cleared()

        self._error_timer = scheduler.call_later(duration, clear)

    def clear_error(self) -> None:
        self._cancel_error_timer()
        self.error = None

    def teardown(self) -> None:
        self._cancel_error_timer()
        if self.transition is not None:
            self.transition.cancel()

    def _cancel_error_timer(self) -> None:
        if self._error_timer is not None:
            self._error_timer.cancel()
            self._error_timer = None


class NodeStateCache(LRUCache):
    """LRU store of NodeState objects that tears down whatever it drops.

    Args:
        maxsize: Maximum number of node states held in the LRU order. Nodes
            that have not been visited for a long time are evicted first and
            start over from the collapse policy if they are rendered again.
        pinned: Paths whose state must never be dropped regardless of its
            contents (the node holding the edit slot).

    Evicted states that are ``retained`` (or pinned) move to a side table
    outside the bound and return to the LRU order when looked up again.
    ``sweep`` drops side-table entries that no longer need keeping.
    """

    def __init__(
        self, maxsize: int = 4096, pinned: Callable[[Path], bool] | None = None
    ) -> None:
        super().__init__(maxsize=maxsize)
        self._pinned = pinned if pinned is not None else (lambda path: False)
        self._retained: dict[Path, NodeState] = {}

    def _keep(self, key: Path, state: NodeState) -> bool:
        return state.retained or self._pinned(key)

    def popitem(self) -> tuple[Path, NodeState]:
        key, state = super().popitem()
        if self._keep(key, state):
            self._retained[key] = state
            logger.debug("node state %r set aside on eviction", key)
        else:
            state.teardown()
            logger.debug("evicted node state %r", key)
        return key, state

    def __missing__(self, key: Path) -> NodeState:
        state = self._retained.pop(key)
        self[key] = state
        return state

    def get(self, key: Path, default: Any = None) -> Any:
        if key in self._retained:
            return self[key]
        return super().get(key, default)

    @property
    def retained_count(self) -> int:
        return len(self._retained)

    def all_states(self) -> list[NodeState]:
        return [*self.values(), *self._retained.values()]

    def discard(self, path: Path) -> None:
        state = self._retained.pop(path, None)
        if state is None:
            state = self.pop(path, None)
        if state is not None:
            state.teardown()

    def sweep(self) -> None:
        """Drop set-aside states that a rebuild would now reproduce."""
        for key, state in list(self._retained.items()):
            if not self._keep(key, state):
                del self._retained[key]
                state.teardown()

    def clear(self) -> None:
        states = self.all_states()
        for key in list(self.keys()):
            del self[key]
        self._retained.clear()
        for state in states:
            state.teardown()
