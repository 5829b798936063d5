"""JsonDocument: an in-memory host that owns the root value.

Applies every accepted request with the copy-on-write helpers in ``values``,
so earlier roots are never modified. Optional validators run before a change
is applied; returning ``False`` or a message rejects it. Listeners receive
each new root, which is how an editor is kept in sync::

    doc = JsonDocument({"x": 1})
    editor = JsonTreeEditor(doc.data, host=doc)
    doc.subscribe(editor.set_data)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from json_tree_editor.engine.mutations import rejection_message, settle
from json_tree_editor.protocols import HostOutcome, HostResult
from json_tree_editor.tree.nodes import Path, PathKey
from json_tree_editor.values import add_at, delete_at, get_at, move_value, set_at

__all__ = ["JsonDocument", "UpdateEvent", "UpdateMethod"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UpdateEvent:
    """What a validator sees before a change is applied.

    Attributes:
        new_data:      Root after the change.
        current_data:  Root before the change.
        new_value:     Value written at ``path`` (None for deletions).
        current_value: Value previously at ``path`` (None for additions).
        name:          Last key of ``path``.
        path:          Where the change lands (the destination for moves).
    """

    new_data: Any
    current_data: Any
    new_value: Any
    current_value: Any
    name: PathKey | None
    path: Path


UpdateMethod = Callable[[UpdateEvent], HostResult]
DataListener = Callable[[Any], None]


class JsonDocument:
    """Reference host: validates, applies and publishes every change.

    Args:
        data:      Initial root value.
        on_update: Validator run for every kind of change.
        on_edit, on_add, on_delete, on_move:
                   Validators for one kind of change, run before ``on_update``.
    """

    def __init__(
        self,
        data: Any,
        *,
        on_update: UpdateMethod | None = None,
        on_edit: UpdateMethod | None = None,
        on_add: UpdateMethod | None = None,
        on_delete: UpdateMethod | None = None,
        on_move: UpdateMethod | None = None,
    ) -> None:
        self._data = data
        self._on_update = on_update
        self._validators = {
            "edit": on_edit,
            "add": on_add,
            "delete": on_delete,
            "move": on_move,
        }
        self._listeners: list[DataListener] = []

    @property
    def data(self) -> Any:
        return self._data

    def subscribe(self, listener: DataListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # EditorHost surface
    # ------------------------------------------------------------------

    async def on_edit(self, new_value: Any, path: Path) -> HostOutcome:
        try:
            current_value = get_at(self._data, path)
            new_data = set_at(self._data, path, new_value)
        except KeyError as exc:
            return f"Cannot edit: {exc.args[0]}"
        return await self._apply("edit", new_data, new_value, current_value, path)

    async def on_add(self, new_value: Any, path: Path) -> HostOutcome:
        try:
            new_data = add_at(self._data, path, new_value)
        except (KeyError, IndexError) as exc:
            return f"Cannot add: {exc.args[0]}"
        return await self._apply("add", new_data, new_value, None, path)

    async def on_delete(self, path: Path) -> HostOutcome:
        try:
            current_value = get_at(self._data, path)
            new_data = delete_at(self._data, path)
        except KeyError as exc:
            return f"Cannot delete: {exc.args[0]}"
        return await self._apply("delete", new_data, None, current_value, path)

    async def on_move(self, source: Path, destination: Path) -> HostOutcome:
        try:
            value = get_at(self._data, source)
            new_data = move_value(self._data, source, destination)
        except (KeyError, IndexError, ValueError) as exc:
            return f"Cannot move: {exc.args[0]}"
        return await self._apply("move", new_data, value, value, destination)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _apply(
        self,
        operation: str,
        new_data: Any,
        new_value: Any,
        current_value: Any,
        path: Sequence[PathKey],
    ) -> HostOutcome:
        event = UpdateEvent(
            new_data=new_data,
            current_data=self._data,
            new_value=new_value,
            current_value=current_value,
            name=path[-1] if path else None,
            path=tuple(path),
        )
        for validator in (self._validators[operation], self._on_update):
            if validator is None:
                continue
            message = rejection_message(await settle(validator(event)))
            if message is not None:
                logger.debug("%s at %r rejected by validator: %s", operation, path, message)
                return message

        self._data = new_data
        for listener in list(self._listeners):
            listener(new_data)
        return None
