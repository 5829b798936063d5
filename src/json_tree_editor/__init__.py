"""JSON tree editor - an editable, collapsible, searchable view of JSON data."""

from __future__ import annotations

from json_tree_editor.api import create_editor, create_viewer
from json_tree_editor.config import EditorConfig
from json_tree_editor.document import JsonDocument, UpdateEvent
from json_tree_editor.editor import JsonTreeEditor
from json_tree_editor.engine.drag import DropZone
from json_tree_editor.engine.edit import EditMode
from json_tree_editor.engine.mutations import MutationResult
from json_tree_editor.errors import ErrorCode, ErrorEvent, InvalidJSONError
from json_tree_editor.render import RenderedNode
from json_tree_editor.state.scheduler import LoopScheduler, ManualScheduler
from json_tree_editor.tree.nodes import NodeData, ValueKind

__version__: str = "0.1.0"
__all__: list[str] = [
    "DropZone",
    "EditMode",
    "EditorConfig",
    "ErrorCode",
    "ErrorEvent",
    "InvalidJSONError",
    "JsonDocument",
    "JsonTreeEditor",
    "LoopScheduler",
    "ManualScheduler",
    "MutationResult",
    "NodeData",
    "RenderedNode",
    "UpdateEvent",
    "ValueKind",
    "create_editor",
    "create_viewer",
]
