"""Error taxonomy for the tree editor.

Local validation failures (INVALID_JSON, KEY_EXISTS) are resolved inside the
editor; host rejections (the *_ERROR codes) are surfaced the same way and
additionally forwarded to the configured error observer as an ErrorEvent.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from json_tree_editor.tree.nodes import Path, PathKey

__all__ = ["ErrorCode", "ErrorEvent", "ErrorObserver", "InvalidJSONError"]


class ErrorCode(StrEnum):
    INVALID_JSON = "INVALID_JSON"
    UPDATE_ERROR = "UPDATE_ERROR"
    ADD_ERROR = "ADD_ERROR"
    DELETE_ERROR = "DELETE_ERROR"
    MOVE_ERROR = "MOVE_ERROR"
    KEY_EXISTS = "KEY_EXISTS"

    @property
    def is_local(self) -> bool:
        """True for errors detected before the host is asked anything."""
        return self in (ErrorCode.INVALID_JSON, ErrorCode.KEY_EXISTS)


class InvalidJSONError(ValueError):
    """Raised by a parse function when its input is not well-formed."""


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    """Full context of a rejected mutation, handed to the error observer.

    Attributes:
        kind:               Which operation failed.
        message:            Human-readable rejection message from the host.
        path:               Path of the node where the action originated.
        key:                That node's key.
        attempted_value:    The value the action tried to write.
        current_value:      The node's value when the action started.
        current_full_value: The root value when the action started.
    """

    kind: ErrorCode
    message: str
    path: Path
    key: PathKey
    attempted_value: Any
    current_value: Any
    current_full_value: Any


ErrorObserver = Callable[[ErrorEvent], None]
