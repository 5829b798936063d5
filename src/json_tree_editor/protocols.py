"""Structural protocols for the editor's external collaborators.

Hosts plug in without inheriting from anything: any object with conformant
methods passes ``isinstance`` checks.

Example::

    from json_tree_editor.protocols import EditorHost

    class MyHost:
        def on_edit(self, new_value, path):
            return None          # accepted
        def on_add(self, new_value, path):
            return "read only"   # rejected with a message
        async def on_delete(self, path):
            return False         # rejected, generic message
        def on_move(self, source, destination):
            return True          # accepted

    assert isinstance(MyHost(), EditorHost)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

from json_tree_editor.tree.nodes import Path

__all__ = ["EditorHost", "HostOutcome", "HostResult", "Scheduler", "TimerHandle"]

# None/True accept; False rejects with a generic message; a string rejects
# with that message.
HostOutcome = str | bool | None
HostResult = HostOutcome | Awaitable[HostOutcome]


@runtime_checkable
class EditorHost(Protocol):
    """Receives every mutation request the editor emits.

    Each method may answer synchronously or return an awaitable; the editor
    treats both identically. Accepting a change is not enough for the tree to
    show it: the host is expected to hand the new root back through
    ``JsonTreeEditor.set_data``.
    """

    def on_edit(self, new_value: Any, path: Path) -> HostResult: ...

    def on_add(self, new_value: Any, path: Path) -> HostResult: ...

    def on_delete(self, path: Path) -> HostResult: ...

    def on_move(self, source: Path, destination: Path) -> HostResult: ...


@runtime_checkable
class TimerHandle(Protocol):
    def cancel(self) -> None: ...


@runtime_checkable
class Scheduler(Protocol):
    """Clock plus one-shot timers, the only source of time for the editor."""

    def now(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...
