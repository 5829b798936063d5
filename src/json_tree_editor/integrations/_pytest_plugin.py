"""pytest plugin for json-tree-editor.

Auto-discovered by pytest via the pytest11 entry point declared in pyproject.toml.
When the package is installed (even in editable mode), pytest discovers this plugin
automatically -- no conftest.py changes are needed.

Source: https://docs.pytest.org/en/stable/how-to/writing_plugins.html
"""

from __future__ import annotations

from typing import Any

import pytest

from json_tree_editor import EditorConfig, JsonDocument, JsonTreeEditor, ManualScheduler


@pytest.fixture
def manual_scheduler() -> ManualScheduler:
    """A virtual clock; timers fire only on ``advance(seconds)``."""
    return ManualScheduler()


@pytest.fixture
def json_document() -> JsonDocument:
    """An in-memory host holding a small nested document.

    Usage in tests::

        def test_delete(json_document):
            asyncio.run(json_document.on_delete(("tags", 0)))
            assert json_document.data["tags"] == ["b"]
    """
    return JsonDocument({"name": "example", "tags": ["a", "b"], "meta": {"count": 2}})


@pytest.fixture
def tree_editor(json_document: JsonDocument, manual_scheduler: ManualScheduler) -> Any:
    """Factory building a JsonTreeEditor wired to ``json_document``.

    The editor uses ``manual_scheduler`` and is torn down after the test.

    Usage in tests::

        def test_collapse(tree_editor):
            editor = tree_editor(collapse=1)
            assert editor.render().find(("meta",)).collapsed
    """
    editors: list[JsonTreeEditor] = []

    def _build(**config_changes: Any) -> JsonTreeEditor:
        editor = JsonTreeEditor(
            json_document.data,
            host=json_document,
            config=EditorConfig(**config_changes),
            scheduler=manual_scheduler,
        )
        json_document.subscribe(editor.set_data)
        editors.append(editor)
        return editor

    yield _build
    for editor in editors:
        editor.teardown()
