"""Shared fixtures: a host that records every request and answers on demand."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from json_tree_editor.tree.nodes import Path


class RecordingHost:
    """EditorHost double.

    Attributes:
        answer: Returned (or raised, when an exception) for every request.
        asynchronous: Answer through a coroutine instead of directly.
        gate: When set, asynchronous answers wait for this event first.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.answer: Any = None
        self.asynchronous = False
        self.gate: asyncio.Event | None = None

    def _respond(self, *call: Any) -> Any:
        self.calls.append(call)
        if self.asynchronous:
            return self._later()
        return self._resolve()

    def _resolve(self) -> Any:
        if isinstance(self.answer, BaseException):
            raise self.answer
        return self.answer

    async def _later(self) -> Any:
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        return self._resolve()

    def on_edit(self, new_value: Any, path: Path) -> Any:
        return self._respond("edit", new_value, path)

    def on_add(self, new_value: Any, path: Path) -> Any:
        return self._respond("add", new_value, path)

    def on_delete(self, path: Path) -> Any:
        return self._respond("delete", path)

    def on_move(self, source: Path, destination: Path) -> Any:
        return self._respond("move", source, destination)


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()
