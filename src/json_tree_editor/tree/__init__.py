"""Tree subpackage: value classification, node descriptors and traversal.

Re-exports the public API for the tree module:
- ValueKind: StrEnum of the seven value kinds
- NodeData: ephemeral per-node descriptor
- TreeBuilder: derives descriptors and resolves them by path
- collection_entries: presentation-ordered children of a collection
"""

from json_tree_editor.tree.builder import TreeBuilder
from json_tree_editor.tree.nodes import (
    FilterFunction,
    NodeData,
    Path,
    PathKey,
    ValueKind,
    classify,
    is_collection,
    node_size,
)
from json_tree_editor.tree.paths import is_descendant, is_prefix, to_path_string
from json_tree_editor.tree.sorting import collection_entries

__all__ = [
    "FilterFunction",
    "NodeData",
    "Path",
    "PathKey",
    "TreeBuilder",
    "ValueKind",
    "classify",
    "collection_entries",
    "is_collection",
    "is_descendant",
    "is_prefix",
    "node_size",
    "to_path_string",
]
