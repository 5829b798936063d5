"""MutationEngine: turns edit/add/delete/move requests into host calls.

Every request is checked locally first (unchanged edits succeed without
asking the host, duplicate keys fail with KEY_EXISTS, array additions must
append, cyclic moves and root deletion never reach the host). Accepted
requests call the host, which may answer synchronously or with an awaitable;
both are handled the same way. While a request is outstanding only the
originating node is marked busy.

A host that never answers leaves its node busy indefinitely: requests have
no timeout.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from json_tree_editor.codec import deep_equal
from json_tree_editor.config import EditorConfig
from json_tree_editor.errors import ErrorCode, ErrorEvent
from json_tree_editor.protocols import EditorHost, HostOutcome, HostResult, Scheduler
from json_tree_editor.state.node_state import NodeState
from json_tree_editor.tree.nodes import NodeData, Path, ValueKind
from json_tree_editor.tree.paths import is_prefix, restore_before_removal

__all__ = ["MutationEngine", "MutationResult"]

logger = logging.getLogger(__name__)

REJECTED_MESSAGE = "The change was rejected"


@dataclass(frozen=True, slots=True)
class MutationResult:
    """Outcome of one mutation request.

    Attributes:
        accepted: True when the host accepted the change (or it was a no-op).
        code:     Error code for rejections.
        message:  Human-readable rejection message.
        requested: Whether the host was actually called.
    """

    accepted: bool
    code: ErrorCode | None = None
    message: str | None = None
    requested: bool = False

    @classmethod
    def ok(cls, requested: bool = True) -> MutationResult:
        return cls(accepted=True, requested=requested)

    @classmethod
    def rejected(
        cls, code: ErrorCode, message: str, requested: bool = False
    ) -> MutationResult:
        return cls(accepted=False, code=code, message=message, requested=requested)


def rejection_message(outcome: HostOutcome) -> str | None:
    """None when ``outcome`` means accepted, otherwise the message to show."""
    if outcome is None or outcome is True:
        return None
    if outcome is False:
        return REJECTED_MESSAGE
    return str(outcome) or REJECTED_MESSAGE


async def settle(result: HostResult) -> HostOutcome:
    if inspect.isawaitable(result):
        return await result
    return result


class MutationEngine:
    """Issues mutation requests to ``host`` and surfaces their failures.

    Args:
        host:      Receiver of every request.
        config:    Error display and observer settings.
        scheduler: Timer source for error auto-clear.
        notify:    Called whenever node state changes outside a direct call
                   (busy flag toggled, error cleared).
    """

    def __init__(
        self,
        host: EditorHost,
        config: EditorConfig,
        scheduler: Scheduler,
        notify: Callable[[], None] | None = None,
    ) -> None:
        self.host = host
        self.config = config
        self._scheduler = scheduler
        self._notify = notify if notify is not None else (lambda: None)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def edit(self, value: Any, node: NodeData, state: NodeState) -> MutationResult:
        """Replace the value at ``node.path``; unchanged values auto-succeed."""
        if deep_equal(value, node.value):
            return MutationResult.ok(requested=False)
        return await self._request(
            ErrorCode.UPDATE_ERROR,
            lambda: self.host.on_edit(value, node.path),
            value,
            node,
            state,
        )

    async def add(
        self, value: Any, path: Path, container: NodeData, state: NodeState
    ) -> MutationResult:
        """Insert ``value`` at ``path``, a direct child of ``container``.

        Array additions must target the current length; object additions must
        use a key that is not present yet.
        """
        path = tuple(path)
        if path[:-1] != container.path or not container.kind.is_collection:
            raise ValueError(f"{list(path)!r} is not a child path of {list(container.path)!r}")
        key = path[-1]
        if container.kind is ValueKind.ARRAY:
            expected = len(container.value)
            if key != expected or isinstance(key, bool):
                message = f"Array elements can only be appended at index {expected}"
                self._report(ErrorCode.ADD_ERROR, message, container, state, value)
                return MutationResult.rejected(ErrorCode.ADD_ERROR, message)
        elif key in container.value:
            message = f"Key {key!r} already exists"
            self._report(ErrorCode.KEY_EXISTS, message, container, state, key)
            return MutationResult.rejected(ErrorCode.KEY_EXISTS, message)

        return await self._request(
            ErrorCode.ADD_ERROR,
            lambda: self.host.on_add(value, path),
            value,
            container,
            state,
        )

    async def rename(
        self, renamed: Any, new_key: str, node: NodeData, parent: NodeData, state: NodeState
    ) -> MutationResult:
        """Send a key rename as one edit of ``parent``.

        Failures are reported at ``node``, the member whose key is edited.
        """
        return await self._request(
            ErrorCode.UPDATE_ERROR,
            lambda: self.host.on_edit(renamed, parent.path),
            new_key,
            node,
            state,
        )

    async def delete(self, node: NodeData, state: NodeState) -> MutationResult:
        if node.is_root:
            return MutationResult.rejected(ErrorCode.DELETE_ERROR, "The root cannot be deleted")
        return await self._request(
            ErrorCode.DELETE_ERROR,
            lambda: self.host.on_delete(node.path),
            node.value,
            node,
            state,
        )

    async def move(
        self, destination: Path, node: NodeData, state: NodeState
    ) -> MutationResult:
        """Relocate ``node`` to ``destination`` as one host request.

        ``destination`` uses the coordinates of the tree with the source
        removed. A destination equal to the source, or one that lands inside
        it once mapped back to the full tree, is rejected without calling the
        host.
        """
        source = node.path
        destination = tuple(destination)
        if not source:
            return MutationResult.rejected(ErrorCode.MOVE_ERROR, "The root cannot be moved")
        if destination == source or is_prefix(
            source, restore_before_removal(destination, source)
        ):
            logger.debug("move %r -> %r rejected: cycle", source, destination)
            return MutationResult.rejected(ErrorCode.MOVE_ERROR, "Cannot move a value into itself")
        return await self._request(
            ErrorCode.MOVE_ERROR,
            lambda: self.host.on_move(source, destination),
            node.value,
            node,
            state,
        )

    # ------------------------------------------------------------------
    # Error surfacing
    # ------------------------------------------------------------------

    def report_local(
        self, code: ErrorCode, message: str, node: NodeData, state: NodeState, attempted: Any
    ) -> None:
        """Surface a locally detected error at ``node`` (never forwarded)."""
        self._report(code, message, node, state, attempted)

    def _report(
        self,
        code: ErrorCode,
        message: str,
        node: NodeData,
        state: NodeState,
        attempted: Any,
        forward: bool = False,
    ) -> None:
        logger.warning("%s at %r: %s", code, list(node.path), message)
        if self.config.show_error_messages:
            state.show_error(
                message, self._scheduler, self.config.error_display_time, self._notify
            )
        if forward and self.config.on_error is not None:
            event = ErrorEvent(
                kind=code,
                message=message,
                path=node.path,
                key=node.key,
                attempted_value=attempted,
                current_value=node.value,
                current_full_value=node.full_data,
            )
            try:
                self.config.on_error(event)
            except Exception:
                logger.exception("error observer failed for %s at %r", code, node.path)

    # ------------------------------------------------------------------
    # Host round trip
    # ------------------------------------------------------------------

    async def _request(
        self,
        code: ErrorCode,
        call: Callable[[], HostResult],
        attempted: Any,
        node: NodeData,
        state: NodeState,
    ) -> MutationResult:
        logger.debug("%s request at %r", code, list(node.path))
        state.busy = True
        self._notify()
        try:
            outcome = await settle(call())
        except Exception as exc:
            logger.exception("host raised while handling %s at %r", code, node.path)
            outcome = str(exc) or REJECTED_MESSAGE
        finally:
            state.busy = False

        message = rejection_message(outcome)
        if message is None:
            self._notify()
            return MutationResult.ok()
        self._report(code, message, node, state, attempted, forward=True)
        self._notify()
        return MutationResult.rejected(code, message, requested=True)
