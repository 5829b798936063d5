"""Tests for the EditController state machine and value conversion."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import pytest

from json_tree_editor.config import EditorConfig
from json_tree_editor.engine.edit import EditController, EditMode, convert_value
from json_tree_editor.engine.mutations import MutationEngine
from json_tree_editor.errors import ErrorCode, ErrorEvent
from json_tree_editor.state.node_state import NodeState
from json_tree_editor.state.scheduler import ManualScheduler
from json_tree_editor.state.tree_state import TreeState
from json_tree_editor.tree.builder import TreeBuilder
from json_tree_editor.tree.nodes import NodeData, ValueKind

if TYPE_CHECKING:
    from conftest import RecordingHost

DATA: dict[str, Any] = {
    "name": "John",
    "age": 30,
    "admin": False,
    "tags": ["a", "b"],
    "meta": {"x": 1, "y": 2},
}


def node(*path: Any) -> NodeData:
    return TreeBuilder().node_at(DATA, path)


def state_for(target: NodeData) -> NodeState:
    return NodeState(target.path, target.kind)


def make_controller(host: RecordingHost, **changes: Any) -> EditController:
    config = EditorConfig(**changes)
    engine = MutationEngine(host, config, ManualScheduler())
    return EditController(TreeState(), config, engine)


# ---------------------------------------------------------------------------
# Entering an edit session
# ---------------------------------------------------------------------------


class TestStart:
    def test_scalar_buffer_is_typed_value(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = node("age")
        state = state_for(target)
        assert controller.start(target, state)
        assert state.buffer == 30
        assert controller.mode(target) is EditMode.EDITING_VALUE

    def test_collection_buffer_is_serialized(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = node("tags")
        state = state_for(target)
        controller.start(target, state)
        assert state.buffer == '[\n  "a",\n  "b"\n]'
        assert state.has_been_opened

    def test_restricted(self, host: RecordingHost) -> None:
        controller = make_controller(host, restrict_edit=True)
        target = node("age")
        assert not controller.start(target, state_for(target))
        assert controller.mode(target) is EditMode.VIEWING

    def test_read_only(self, host: RecordingHost) -> None:
        controller = make_controller(host, read_only=True)
        target = node("age")
        assert not controller.start(target, state_for(target))

    def test_single_active_session(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        first, second = node("age"), node("name")
        assert controller.start(first, state_for(first))
        assert not controller.start(second, state_for(second))
        assert controller.tree_state.currently_editing == "age"

    def test_invalid_values_are_not_editable(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = TreeBuilder().node_at({"f": {1, 2}}, ("f",))
        assert not controller.can_edit(target)


# ---------------------------------------------------------------------------
# Commit
# ---------------------------------------------------------------------------


class TestCommit:
    def test_invalid_json_stays_in_edit(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = node("meta")
        state = state_for(target)
        controller.start(target, state)
        state.buffer = "{bad"
        result = asyncio.run(controller.commit(target, state))
        assert result.code is ErrorCode.INVALID_JSON
        assert state.error == "Invalid JSON"
        assert controller.mode(target) is EditMode.EDITING_VALUE
        assert host.calls == []

    def test_unchanged_value_finishes_without_host(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = node("meta")
        state = state_for(target)
        controller.start(target, state)
        state.buffer = '{"y": 2, "x": 1}'
        result = asyncio.run(controller.commit(target, state))
        assert result.accepted and not result.requested
        assert controller.mode(target) is EditMode.VIEWING
        assert host.calls == []

    def test_accepted_edit_returns_to_viewing(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = node("meta")
        state = state_for(target)
        controller.start(target, state)
        state.buffer = '{"x": 5}'
        result = asyncio.run(controller.commit(target, state))
        assert result.accepted
        assert host.calls == [("edit", {"x": 5}, ("meta",))]
        assert controller.mode(target) is EditMode.VIEWING
        assert controller.tree_state.currently_editing is None

    def test_rejected_edit_stays_in_edit(self, host: RecordingHost) -> None:
        host.answer = "no"
        controller = make_controller(host)
        target = node("name")
        state = state_for(target)
        controller.start(target, state)
        state.buffer = "Jane"
        result = asyncio.run(controller.commit(target, state))
        assert result.code is ErrorCode.UPDATE_ERROR
        assert controller.mode(target) is EditMode.EDITING_VALUE
        assert state.buffer == "Jane"

    def test_number_buffer_text(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = node("age")
        state = state_for(target)
        controller.start(target, state)
        state.buffer = "31"
        asyncio.run(controller.commit(target, state))
        assert host.calls == [("edit", 31, ("age",))]

    def test_number_buffer_rejects_text(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = node("age")
        state = state_for(target)
        controller.start(target, state)
        state.buffer = "thirty"
        result = asyncio.run(controller.commit(target, state))
        assert result.code is ErrorCode.INVALID_JSON

    def test_boolean_buffer_text(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = node("admin")
        state = state_for(target)
        controller.start(target, state)
        state.buffer = "TRUE"
        asyncio.run(controller.commit(target, state))
        assert host.calls == [("edit", True, ("admin",))]

    def test_commit_without_session(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = node("age")
        result = asyncio.run(controller.commit(target, state_for(target)))
        assert not result.accepted
        assert host.calls == []

    def test_custom_parse_function(self, host: RecordingHost) -> None:
        def parse(text: str) -> Any:
            raise ValueError("never valid")

        controller = make_controller(host, json_parse=parse)
        target = node("meta")
        state = state_for(target)
        controller.start(target, state)
        result = asyncio.run(controller.commit(target, state))
        assert result.code is ErrorCode.INVALID_JSON


class TestCancel:
    def test_cancel_discards_buffer(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = node("name")
        state = state_for(target)
        controller.start(target, state)
        state.buffer = "changed"
        controller.cancel(target, state)
        assert controller.mode(target) is EditMode.VIEWING
        assert state.buffer == "John"
        assert host.calls == []

    def test_cancel_clears_error(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = node("meta")
        state = state_for(target)
        controller.start(target, state)
        state.buffer = "{bad"
        asyncio.run(controller.commit(target, state))
        controller.cancel(target, state)
        assert state.error is None


# ---------------------------------------------------------------------------
# Key rename
# ---------------------------------------------------------------------------


class TestKeyRename:
    def test_array_elements_have_no_editable_key(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        assert not controller.can_edit_key(node("tags", 0))
        assert not controller.can_edit_key(node())

    def test_restricted(self, host: RecordingHost) -> None:
        controller = make_controller(host, restrict_key_edit=True)
        target = node("meta", "x")
        assert not controller.start_key(target, state_for(target))

    def test_rename_sends_parent_edit(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = node("meta", "x")
        state = state_for(target)
        assert controller.start_key(target, state)
        assert controller.mode(target) is EditMode.EDITING_KEY
        result = asyncio.run(controller.commit_key(target, node("meta"), state, "z"))
        assert result.accepted
        [(name, value, path)] = host.calls
        assert (name, path) == ("edit", ("meta",))
        assert list(value.items()) == [("y", 2), ("z", 1)]
        assert controller.mode(target) is EditMode.VIEWING

    def test_duplicate_key(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = node("meta", "x")
        state = state_for(target)
        controller.start_key(target, state)
        result = asyncio.run(controller.commit_key(target, node("meta"), state, "y"))
        assert result.code is ErrorCode.KEY_EXISTS
        assert controller.mode(target) is EditMode.EDITING_KEY
        assert host.calls == []

    def test_refused_while_busy(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = node("meta", "x")
        state = state_for(target)
        controller.start_key(target, state)
        state.busy = True
        result = asyncio.run(controller.commit_key(target, node("meta"), state, "z"))
        assert not result.accepted
        assert host.calls == []
        assert controller.mode(target) is EditMode.EDITING_KEY

    def test_rejected_rename_reported_at_member(self, host: RecordingHost) -> None:
        events: list[ErrorEvent] = []
        config = EditorConfig(on_error=events.append)
        controller = EditController(
            TreeState(), config, MutationEngine(host, config, ManualScheduler())
        )
        host.answer = "frozen"
        target = node("meta", "x")
        state = state_for(target)
        controller.start_key(target, state)
        result = asyncio.run(controller.commit_key(target, node("meta"), state, "z"))
        assert result.code is ErrorCode.UPDATE_ERROR
        assert state.error == "frozen"
        [event] = events
        assert (event.path, event.key) == (("meta", "x"), "x")
        assert event.attempted_value == "z"
        assert event.current_value == 1

    def test_unchanged_key(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = node("meta", "x")
        state = state_for(target)
        controller.start_key(target, state)
        result = asyncio.run(controller.commit_key(target, node("meta"), state, "x"))
        assert result.accepted and not result.requested
        assert host.calls == []


# ---------------------------------------------------------------------------
# Type changes
# ---------------------------------------------------------------------------


class TestChangeType:
    @pytest.mark.parametrize(
        ("value", "kind", "expected"),
        [
            (5, ValueKind.STRING, "5"),
            (None, ValueKind.STRING, "null"),
            ("12", ValueKind.NUMBER, 12),
            ("1.5", ValueKind.NUMBER, 1.5),
            ("abc", ValueKind.NUMBER, 0),
            (True, ValueKind.NUMBER, 1),
            ("x", ValueKind.BOOLEAN, True),
            ("", ValueKind.BOOLEAN, False),
            (3, ValueKind.NULL, None),
            (3, ValueKind.OBJECT, {"key": 3}),
            (3, ValueKind.ARRAY, [3]),
        ],
    )
    def test_convert_value(self, value: Any, kind: ValueKind, expected: Any) -> None:
        assert convert_value(value, kind) == expected

    def test_change_type_sends_edit(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = node("age")
        state = state_for(target)
        result = asyncio.run(controller.change_type(target, state, "string"))
        assert result.accepted
        assert host.calls == [("edit", "30", ("age",))]
        assert state.buffer == "30"

    def test_disallowed_type(self, host: RecordingHost) -> None:
        controller = make_controller(host, restrict_type_selection=["string"])
        target = node("age")
        result = asyncio.run(controller.change_type(target, state_for(target), "null"))
        assert not result.accepted
        assert host.calls == []

    def test_collections_are_refused(self, host: RecordingHost) -> None:
        controller = make_controller(host)
        target = node("tags")
        result = asyncio.run(controller.change_type(target, state_for(target), "string"))
        assert not result.accepted
