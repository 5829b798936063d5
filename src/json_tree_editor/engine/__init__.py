"""Engine subpackage: the interaction state machines.

- EditController / EditMode: value and key edit sessions
- MutationEngine / MutationResult: host round trips for edit/add/delete/move
- SearchDebouncer and the built-in search predicates
- DragController / DropZone / plan_move: drag-reorder planning
"""

from json_tree_editor.engine.drag import (
    DragController,
    DropZone,
    MoveRejected,
    plan_move,
    resolve_drop_zone,
)
from json_tree_editor.engine.edit import EditController, EditMode, convert_value
from json_tree_editor.engine.mutations import MutationEngine, MutationResult
from json_tree_editor.engine.search import (
    SearchDebouncer,
    filter_node,
    get_search_filter,
    match_key,
    match_value,
    with_ancestors,
)

__all__ = [
    "DragController",
    "DropZone",
    "EditController",
    "EditMode",
    "MoveRejected",
    "MutationEngine",
    "MutationResult",
    "SearchDebouncer",
    "convert_value",
    "filter_node",
    "get_search_filter",
    "match_key",
    "match_value",
    "plan_move",
    "resolve_drop_zone",
    "with_ancestors",
]
