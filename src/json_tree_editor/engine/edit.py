"""EditController: the Viewing / EditingValue / EditingKey state machine.

A node's mode is derived from the shared edit slot in TreeState, so there is
at most one active edit session per tree. Entering a session seeds the
node's buffer (serialized text for collections, the typed value for
scalars); committing parses the buffer, skips unchanged values, and otherwise
sends an edit request, staying in EditingValue until the host answers.
Cancelling always succeeds in one step.
"""

from __future__ import annotations

import logging
import math
from enum import StrEnum, auto
from typing import Any

from json_tree_editor.codec import deep_equal
from json_tree_editor.config import EditorConfig
from json_tree_editor.engine.mutations import MutationEngine, MutationResult
from json_tree_editor.errors import ErrorCode, InvalidJSONError
from json_tree_editor.state.node_state import NodeState
from json_tree_editor.state.tree_state import TreeState
from json_tree_editor.tree.nodes import NodeData, ValueKind, classify

__all__ = ["DEFAULT_NEW_KEY", "EditController", "EditMode", "convert_value"]

logger = logging.getLogger(__name__)

DEFAULT_NEW_KEY = "key"
INVALID_JSON_MESSAGE = "Invalid JSON"


class EditMode(StrEnum):
    VIEWING = auto()
    EDITING_VALUE = auto()
    EDITING_KEY = auto()


def _not_editing(message: str = "No edit in progress") -> MutationResult:
    return MutationResult(accepted=False, message=message)


def _to_number(value: Any) -> int | float:
    if isinstance(value, (bool, int, float)):
        return int(value) if isinstance(value, bool) else value
    try:
        number = float(str(value).strip())
    except ValueError:
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return int(number) if number.is_integer() and "." not in str(value) else number


def convert_value(value: Any, kind: ValueKind) -> Any:
    """Convert a scalar to ``kind`` the way a data-type selector would."""
    if kind is ValueKind.STRING:
        if value is None or isinstance(value, bool):
            return {True: "true", False: "false", None: "null"}[value]
        return value if isinstance(value, str) else str(value)
    if kind is ValueKind.NUMBER:
        return _to_number(value)
    if kind is ValueKind.BOOLEAN:
        return bool(value)
    if kind is ValueKind.NULL:
        return None
    if kind is ValueKind.OBJECT:
        return {DEFAULT_NEW_KEY: value}
    if kind is ValueKind.ARRAY:
        return [value]
    raise ValueError(f"Cannot convert to {kind!r}")


class EditController:
    """Drives edit sessions for every node of one tree.

    Args:
        tree_state: Shared edit slot.
        config:     Permissions and codec.
        mutations:  Where committed changes are sent.
    """

    def __init__(
        self, tree_state: TreeState, config: EditorConfig, mutations: MutationEngine
    ) -> None:
        self.tree_state = tree_state
        self.config = config
        self.mutations = mutations

    # ------------------------------------------------------------------
    # Modes and permissions
    # ------------------------------------------------------------------

    def mode(self, node: NodeData) -> EditMode:
        if self.tree_state.is_editing(node.path):
            return EditMode.EDITING_VALUE
        if self.tree_state.is_editing(node.path, key=True):
            return EditMode.EDITING_KEY
        return EditMode.VIEWING

    def can_edit(self, node: NodeData) -> bool:
        if node.kind is ValueKind.INVALID:
            return False
        return not self.config.restriction("edit")(node)

    def can_edit_key(self, node: NodeData) -> bool:
        if node.parent_kind is not ValueKind.OBJECT:
            return False
        return not self.config.restriction("key_edit")(node)

    def seed_buffer(self, node: NodeData) -> Any:
        if node.kind.is_collection:
            return self.config.json_stringify(node.value)
        return node.value

    # ------------------------------------------------------------------
    # Value edits
    # ------------------------------------------------------------------

    def start(self, node: NodeData, state: NodeState) -> bool:
        """Enter EditingValue; refused without permission or when another
        node holds the edit slot."""
        if not self.can_edit(node):
            logger.debug("edit refused at %r: not permitted", node.path)
            return False
        if self.tree_state.is_slot_taken_by_other(node.path):
            logger.debug(
                "edit refused at %r: %r is being edited",
                node.path,
                self.tree_state.currently_editing,
            )
            return False
        self.tree_state.set_editing(node.path)
        state.buffer = self.seed_buffer(node)
        state.has_been_opened = True
        return True

    def parse_buffer(self, node: NodeData, buffer: Any) -> Any:
        """Turn the edit buffer back into a value.

        Raises:
            InvalidJSONError: When the buffer cannot be parsed.
        """
        kind = node.kind
        if kind.is_collection:
            try:
                return self.config.json_parse(buffer)
            except InvalidJSONError:
                raise
            except (ValueError, TypeError) as exc:
                raise InvalidJSONError(str(exc)) from exc
        if kind is ValueKind.NUMBER and isinstance(buffer, str):
            try:
                parsed = self.config.json_parse(buffer)
            except (ValueError, TypeError) as exc:
                raise InvalidJSONError(str(exc)) from exc
            if classify(parsed) is not ValueKind.NUMBER:
                raise InvalidJSONError(f"{buffer!r} is not a number")
            return parsed
        if kind is ValueKind.BOOLEAN and isinstance(buffer, str):
            lowered = buffer.strip().lower()
            if lowered not in ("true", "false"):
                raise InvalidJSONError(f"{buffer!r} is not a boolean")
            return lowered == "true"
        if kind is ValueKind.STRING and not isinstance(buffer, str):
            return str(buffer)
        return buffer

    async def commit(self, node: NodeData, state: NodeState) -> MutationResult:
        if self.mode(node) is not EditMode.EDITING_VALUE:
            return _not_editing()
        if state.busy:
            return _not_editing("An update is already pending")
        try:
            value = self.parse_buffer(node, state.buffer)
        except InvalidJSONError as exc:
            logger.debug("commit at %r failed to parse: %s", node.path, exc)
            self.mutations.report_local(
                ErrorCode.INVALID_JSON, INVALID_JSON_MESSAGE, node, state, state.buffer
            )
            return MutationResult.rejected(ErrorCode.INVALID_JSON, INVALID_JSON_MESSAGE)

        if deep_equal(value, node.value):
            self._finish(node, state)
            return MutationResult.ok(requested=False)

        result = await self.mutations.edit(value, node, state)
        if result.accepted and self.tree_state.is_editing(node.path):
            self._finish(node, state)
            state.buffer = (
                self.config.json_stringify(value) if node.kind.is_collection else value
            )
        return result

    def cancel(self, node: NodeData, state: NodeState) -> None:
        """Discard the buffer and return to Viewing. Never fails."""
        if self.mode(node) is not EditMode.VIEWING:
            self.tree_state.clear_editing()
        state.buffer = self.seed_buffer(node)
        state.clear_error()

    def _finish(self, node: NodeData, state: NodeState) -> None:
        self.tree_state.clear_editing()
        state.clear_error()

    # ------------------------------------------------------------------
    # Key rename
    # ------------------------------------------------------------------

    def start_key(self, node: NodeData, state: NodeState) -> bool:
        if not self.can_edit_key(node):
            return False
        if self.tree_state.is_slot_taken_by_other(node.path):
            return False
        self.tree_state.set_editing(node.path, key=True)
        state.buffer = node.key
        return True

    async def commit_key(
        self, node: NodeData, parent: NodeData, state: NodeState, new_key: str
    ) -> MutationResult:
        """Rename ``node``'s key within ``parent``.

        The rename is sent as one edit of the parent in which the old member
        is removed and the new one appended, so the renamed member moves to
        the end of its object.
        """
        if self.mode(node) is not EditMode.EDITING_KEY:
            return _not_editing()
        if state.busy:
            return _not_editing("An update is already pending")
        if new_key == node.key:
            self._finish(node, state)
            return MutationResult.ok(requested=False)
        if new_key in parent.value:
            message = f"Key {new_key!r} already exists"
            self.mutations.report_local(ErrorCode.KEY_EXISTS, message, node, state, new_key)
            return MutationResult.rejected(ErrorCode.KEY_EXISTS, message)

        renamed = {k: v for k, v in parent.value.items() if k != node.key}
        renamed[new_key] = node.value
        result = await self.mutations.rename(renamed, new_key, node, parent, state)
        if result.accepted and self.tree_state.is_editing(node.path, key=True):
            self._finish(node, state)
        return result

    # ------------------------------------------------------------------
    # Data-type change
    # ------------------------------------------------------------------

    async def change_type(
        self, node: NodeData, state: NodeState, kind: ValueKind | str
    ) -> MutationResult:
        kind = ValueKind(kind)
        if node.kind.is_collection or not self.can_edit(node):
            return _not_editing("Type changes apply to editable values only")
        if kind not in self.config.allowed_types(node):
            return _not_editing(f"Type {kind} is not allowed here")
        if kind is node.kind:
            return MutationResult.ok(requested=False)
        value = convert_value(node.value, kind)
        result = await self.mutations.edit(value, node, state)
        if result.accepted:
            state.buffer = value
        return result
