"""Search filtering: built-in key/value predicates and the query debouncer.

Filtering is exclusion: a non-root node that fails the active predicate is
neither rendered nor traversed into. Ancestors of a match are not kept
automatically; wrap a predicate with ``with_ancestors`` to get that.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from json_tree_editor.protocols import Scheduler, TimerHandle
from json_tree_editor.tree.builder import TreeBuilder
from json_tree_editor.tree.nodes import NodeData, ValueKind

__all__ = [
    "SearchDebouncer",
    "filter_node",
    "get_search_filter",
    "match_key",
    "match_value",
    "with_ancestors",
]

logger = logging.getLogger(__name__)

SearchFilterFunction = Callable[[NodeData, str], bool]

_SCALAR_TEXT = {True: "true", False: "false", None: "null"}


def match_value(node: NodeData, search_text: str) -> bool:
    """Case-insensitive substring match on a scalar's display text.

    Collections never match by value.
    """
    kind = node.kind
    needle = search_text.casefold()
    if kind is ValueKind.STRING:
        return needle in node.value.casefold()
    if kind is ValueKind.NUMBER:
        return needle in str(node.value)
    if kind in (ValueKind.BOOLEAN, ValueKind.NULL):
        return needle in _SCALAR_TEXT[node.value]
    return False


def match_key(node: NodeData, search_text: str) -> bool:
    return search_text.casefold() in str(node.key).casefold()


def match_any(node: NodeData, search_text: str) -> bool:
    return match_value(node, search_text) or match_key(node, search_text)


def get_search_filter(
    mode: str | SearchFilterFunction | None,
) -> SearchFilterFunction | None:
    if mode is None:
        return None
    if mode == "value":
        return match_value
    if mode == "key":
        return match_key
    if mode == "all":
        return match_any
    if callable(mode):
        return mode
    raise ValueError(f"Unknown search filter {mode!r}")


def filter_node(
    node: NodeData,
    search_filter: SearchFilterFunction | None,
    search_text: str | None,
) -> bool:
    """True when ``node`` should be shown for the current query.

    The root is always shown; with no predicate or an empty query every node is.
    """
    if node.level == 0 or search_filter is None or not search_text:
        return True
    return bool(search_filter(node, search_text))


def with_ancestors(
    predicate: SearchFilterFunction, builder: TreeBuilder | None = None
) -> SearchFilterFunction:
    """Wrap ``predicate`` so collections with a passing descendant also pass."""
    tree = builder if builder is not None else TreeBuilder()

    def matches(node: NodeData, search_text: str) -> bool:
        if predicate(node, search_text):
            return True
        return any(matches(child, search_text) for child in tree.children(node))

    return matches


class SearchDebouncer:
    """Applies query text only after it has been stable for ``delay`` seconds.

    Predicates observe ``text`` (the debounced value), never the raw input.
    Each ``set_text`` cancels and restarts the pending timer.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        delay: float,
        on_apply: Callable[[str], None] | None = None,
        text: str = "",
    ) -> None:
        self._scheduler = scheduler
        self.delay = delay
        self._on_apply = on_apply
        self.text = text
        self.raw_text = text
        self._timer: TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def set_text(self, raw_text: str) -> None:
        self.raw_text = raw_text
        self.cancel()
        if self.delay <= 0:
            self._apply()
            return
        self._timer = self._scheduler.call_later(self.delay, self._apply)

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _apply(self) -> None:
        self._timer = None
        if self.text == self.raw_text:
            return
        self.text = self.raw_text
        logger.debug("search text applied: %r", self.text)
        if self._on_apply is not None:
            self._on_apply(self.text)
