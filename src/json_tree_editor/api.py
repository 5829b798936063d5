"""Convenience constructors for the common editor setups.

``create_editor`` wires a JsonDocument host to a JsonTreeEditor so accepted
changes flow straight back into the tree; ``create_viewer`` builds the same
pair in read-only mode.
"""

from __future__ import annotations

from typing import Any

from json_tree_editor.config import EditorConfig
from json_tree_editor.document import JsonDocument, UpdateMethod
from json_tree_editor.editor import JsonTreeEditor
from json_tree_editor.protocols import Scheduler

__all__ = ["create_editor", "create_viewer"]


def create_editor(
    data: Any,
    config: EditorConfig | None = None,
    *,
    scheduler: Scheduler | None = None,
    on_update: UpdateMethod | None = None,
    **config_changes: Any,
) -> tuple[JsonTreeEditor, JsonDocument]:
    """Return an editor and the document that hosts its data.

    Args:
        data:      Initial root value.
        config:    Base configuration; defaults to ``EditorConfig()``.
        scheduler: Timer source; defaults to the running asyncio loop.
        on_update: Validator run before every change is applied.
        **config_changes: Field overrides applied on top of ``config``.

    Returns:
        ``(editor, document)``; the editor re-derives whenever the document
        accepts a change.
    """
    base = config if config is not None else EditorConfig()
    if config_changes:
        base = base.with_changes(**config_changes)
    document = JsonDocument(data, on_update=on_update)
    editor = JsonTreeEditor(document.data, host=document, config=base, scheduler=scheduler)
    document.subscribe(editor.set_data)
    return editor, document


def create_viewer(
    data: Any,
    config: EditorConfig | None = None,
    *,
    scheduler: Scheduler | None = None,
    **config_changes: Any,
) -> JsonTreeEditor:
    """Return a read-only editor: traversal, collapse and search only."""
    editor, _document = create_editor(
        data, config, scheduler=scheduler, read_only=True, **config_changes
    )
    return editor
