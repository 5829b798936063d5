"""TreeBuilder: derives NodeData descriptors from a JSON-like value.

Every child descriptor is built from its parent's: ``path`` grows by the
child key, ``level`` by one, ``parent_data`` points at the parent's raw
value and ``full_data`` is carried through unchanged from the root.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from json_tree_editor.tree.nodes import NodeData, PathKey, node_size
from json_tree_editor.tree.sorting import KeySort, collection_entries


@dataclass
class TreeBuilder:
    """Builds root and child descriptors, and resolves descriptors by path.

    Example::
        builder = TreeBuilder()
        root = builder.root({"user": {"name": "John"}})
        [user] = builder.children(root)
        # user.path == ("user",), user.level == 1, user.parent_data is root.value
    """

    root_name: str = "root"
    key_sort: KeySort = False

    def root(self, value: Any) -> NodeData:
        return NodeData(
            key=self.root_name,
            value=value,
            path=(),
            level=0,
            index=0,
            size=node_size(value),
            parent_data=None,
            full_data=value,
        )

    def child(self, parent: NodeData, key: PathKey, value: Any, index: int) -> NodeData:
        return NodeData(
            key=key,
            value=value,
            path=(*parent.path, key),
            level=parent.level + 1,
            index=index,
            size=node_size(value),
            parent_data=parent.value,
            full_data=parent.full_data,
        )

    def children(self, parent: NodeData) -> list[NodeData]:
        """Child descriptors in presentation order (empty for scalars)."""
        entries = collection_entries(parent.value, self.key_sort)
        return [
            self.child(parent, key, value, index)
            for index, (key, value) in enumerate(entries)
        ]

    def walk(self, value: Any) -> Iterator[NodeData]:
        """Depth-first pre-order iteration over every descriptor of ``value``."""
        stack = [self.root(value)]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(self.children(node)))

    def node_at(self, value: Any, path: Sequence[PathKey]) -> NodeData:
        """Resolve the descriptor at ``path``.

        Raises:
            KeyError: If no node exists at ``path``.
        """
        node = self.root(value)
        for key in path:
            for child in self.children(node):
                if type(child.key) is type(key) and child.key == key:
                    node = child
                    break
            else:
                raise KeyError(f"No node at path {list(path)!r}")
        return node
