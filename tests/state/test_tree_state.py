"""Tests for TreeState: collapse override matching and the edit slot."""

from __future__ import annotations

from json_tree_editor.state.tree_state import CollapseOverride, TreeState


class TestCollapseOverride:
    def test_exact_match_by_default(self) -> None:
        override = CollapseOverride(("a",), True, 1)
        assert override.matches(("a",))
        assert not override.matches(("a", "b"))
        assert not override.matches(())

    def test_descendants_included(self) -> None:
        override = CollapseOverride(("a",), True, 1, include_descendants=True)
        assert override.matches(("a",))
        assert override.matches(("a", 0, "b"))
        assert not override.matches(("b",))

    def test_generation_increments(self) -> None:
        state = TreeState()
        first = state.set_collapse_override(("a",), True)
        second = state.set_collapse_override(("a",), False)
        assert second.generation == first.generation + 1
        assert state.collapse_override is second

    def test_does_path_match(self) -> None:
        state = TreeState()
        assert not state.does_path_match(("a",))
        state.set_collapse_override(("a",), True)
        assert state.does_path_match(("a",))
        state.clear_collapse_override()
        assert not state.does_path_match(("a",))


class TestEditSlot:
    def test_value_and_key_slots_differ(self) -> None:
        state = TreeState()
        state.set_editing(("a", 0))
        assert state.currently_editing == "a.0"
        assert state.is_editing(("a", 0))
        assert not state.is_editing(("a", 0), key=True)

        state.set_editing(("a", "b"), key=True)
        assert state.currently_editing == "key_a.b"
        assert state.is_editing(("a", "b"), key=True)
        assert not state.is_editing(("a", "b"))

    def test_single_slot(self) -> None:
        state = TreeState()
        state.set_editing(("a",))
        state.set_editing(("b",))
        assert not state.is_editing(("a",))
        assert state.editing_path == ("b",)

    def test_slot_taken_by_other(self) -> None:
        state = TreeState()
        assert not state.is_slot_taken_by_other(("a",))
        state.set_editing(("a",))
        assert not state.is_slot_taken_by_other(("a",))
        assert state.is_slot_taken_by_other(("b",))
        assert state.is_slot_taken_by_other(("a", "c"))

    def test_children_being_edited(self) -> None:
        state = TreeState()
        state.set_editing(("a", "b", 1))
        assert state.are_children_being_edited(())
        assert state.are_children_being_edited(("a",))
        assert state.are_children_being_edited(("a", "b", 1))
        assert not state.are_children_being_edited(("c",))

    def test_dotted_key_is_its_own_slot(self) -> None:
        state = TreeState()
        state.set_editing(("a", "b"))
        assert state.is_editing(("a", "b"))
        assert not state.is_editing(("a.b",))
        assert state.is_slot_taken_by_other(("a.b",))

    def test_index_and_numeric_key_differ(self) -> None:
        state = TreeState()
        state.set_editing(("a", 0))
        assert not state.is_editing(("a", "0"))

    def test_holds_edit_slot_for_either_mode(self) -> None:
        state = TreeState()
        state.set_editing(("a",), key=True)
        assert state.holds_edit_slot(("a",))
        assert not state.holds_edit_slot(("b",))

    def test_clear(self) -> None:
        state = TreeState()
        state.set_editing(("a",))
        state.clear_editing()
        assert state.currently_editing is None
        assert not state.are_children_being_edited(())

    def test_independent_instances(self) -> None:
        first, second = TreeState(), TreeState()
        first.set_editing(("a",))
        assert second.currently_editing is None
