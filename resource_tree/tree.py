"""Arena of resource nodes indexed by identifier.

The arena is the primary representation of a hierarchy: every node is
stored once, keyed by id, with a parent -> children index next to it.
Walks (ancestors, descendants, paths) are iterative. Nested views with
``FolderNode.children`` filled in are built on demand by ``view``.

Nodes whose parent is not part of the arena (for example a visible node
below a folder the caller may not see) are kept but are unreachable from
the virtual root.
"""

import dataclasses
from collections import defaultdict, deque
from collections.abc import Iterable, Iterator
from typing import final

from resource_tree.models import ROOT_ID, FolderNode, Node, PathEntry


@final
class ResourceTree:
    """Flat, id-indexed hierarchy of nodes from one resource collection."""

    def __init__(self, nodes: Iterable[Node] = ()) -> None:
        """Index the given nodes.

        Args:
            nodes: Nodes of a single collection, in display order.

        Raises:
            ValueError: If two nodes share an id or a file is used as
                a parent.
        """
        self._nodes: dict[str, Node] = {}
        self._children: defaultdict[str, list[str]] = defaultdict(list)
        for node in nodes:
            if node.id in self._nodes:
                raise ValueError(f'Duplicate node id: {node.id}')
            self._nodes[node.id] = node
            self._children[node.parent_id].append(node.id)

        for parent_id in self._children:
            parent = self._nodes.get(parent_id)
            if parent is not None and not isinstance(parent, FolderNode):
                raise ValueError(f'File {parent_id} cannot contain nodes')

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def get(self, node_id: str) -> Node:
        """Return the node with the given id.

        Raises:
            KeyError: If the node is not part of the arena.
        """
        return self._nodes[node_id]

    def children_of(self, parent_id: str = ROOT_ID) -> tuple[Node, ...]:
        """Direct children of a folder (or of the virtual root)."""
        return tuple(
            self._nodes[child_id]
            for child_id in self._children.get(parent_id, ())
        )

    def ancestors(self, node_id: str) -> list[Node]:
        """Return the ancestors of a node, nearest first.

        The virtual root is not included.

        Raises:
            KeyError: If the node is unknown.
            ValueError: If the parent chain loops.
        """
        chain: list[Node] = []
        seen = {node_id}
        current = self._nodes[node_id]
        while current.parent_id != ROOT_ID:
            parent = self._nodes.get(current.parent_id)
            if parent is None:
                break
            if parent.id in seen:
                raise ValueError(f'Cycle detected above node {node_id}')
            seen.add(parent.id)
            chain.append(parent)
            current = parent
        return chain

    def depth(self, node_id: str) -> int:
        """Number of folders between the virtual root and the node."""
        if node_id == ROOT_ID:
            return 0
        return len(self.ancestors(node_id)) + 1

    def path_to(self, folder_id: str = ROOT_ID) -> tuple[PathEntry, ...]:
        """Breadcrumbs from the virtual root to ``folder_id`` inclusive."""
        root_entry = PathEntry(id=ROOT_ID, name='')
        if folder_id == ROOT_ID:
            return (root_entry,)
        folder = self._nodes[folder_id]
        chain = [folder, *self.ancestors(folder_id)]
        return (
            root_entry,
            *(PathEntry(id=node.id, name=node.name) for node in reversed(chain)),
        )

    def descendants(self, node_id: str) -> list[Node]:
        """All nodes below ``node_id``, breadth first."""
        found: list[Node] = []
        queue = deque(self._children.get(node_id, ()))
        seen: set[str] = set()
        while queue:
            child_id = queue.popleft()
            if child_id in seen:
                continue
            seen.add(child_id)
            found.append(self._nodes[child_id])
            queue.extend(self._children.get(child_id, ()))
        return found

    def is_descendant(self, node_id: str, ancestor_id: str) -> bool:
        """Whether ``ancestor_id`` appears in the parent chain of ``node_id``."""
        if ancestor_id == ROOT_ID:
            return node_id != ROOT_ID
        if node_id == ROOT_ID or node_id not in self._nodes:
            return False
        return any(
            ancestor.id == ancestor_id for ancestor in self.ancestors(node_id)
        )

    def view(self, root_id: str = ROOT_ID) -> tuple[Node, ...]:
        """Build a nested view of the subtree below ``root_id``.

        Folders in the returned tuple carry their children recursively;
        files are returned unchanged.
        """
        # Post-order: children are rebuilt before their parent.
        order: list[str] = []
        seen: set[str] = {root_id}
        stack = list(self._children.get(root_id, ()))
        while stack:
            node_id = stack.pop()
            if node_id in seen:
                continue
            seen.add(node_id)
            order.append(node_id)
            stack.extend(self._children.get(node_id, ()))

        built: dict[str, Node] = {}
        for node_id in reversed(order):
            node = self._nodes[node_id]
            if isinstance(node, FolderNode):
                node = dataclasses.replace(
                    node,
                    children=tuple(
                        built[child_id]
                        for child_id in self._children.get(node_id, ())
                        if child_id in built
                    ),
                )
            built[node_id] = node

        return tuple(
            built[child_id]
            for child_id in self._children.get(root_id, ())
            if child_id in built
        )
