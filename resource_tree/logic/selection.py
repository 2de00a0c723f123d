"""Checked state of the nodes in the currently displayed directory."""

from collections.abc import Iterable
from typing import final

from resource_tree.models import Node


@final
class SelectionSet:
    """Tracks which sibling nodes of one directory view are checked.

    The set never reaches into subfolders: only ids handed to ``reset``
    (the nodes of the current listing) can be checked.
    """

    def __init__(self) -> None:
        """Initialize an empty selection with no visible nodes."""
        self._visible: list[str] = []
        self._checked: set[str] = set()

    def reset(self, node_ids: Iterable[str]) -> None:
        """Replace the visible nodes and uncheck everything."""
        self._visible = list(node_ids)
        self._checked.clear()

    def toggle(self, node_id: str) -> bool:
        """Flip the checked state of one visible node.

        Args:
            node_id: Id of a node in the current listing.

        Returns:
            New checked state of the node.

        Raises:
            KeyError: If the node is not part of the current listing.
        """
        if node_id not in self._visible:
            raise KeyError(node_id)
        if node_id in self._checked:
            self._checked.discard(node_id)
            return False
        self._checked.add(node_id)
        return True

    def toggle_all(self) -> None:
        """Uncheck everything if anything is checked, else check all.

        With some but not all nodes checked this clears the selection;
        it never completes a partial selection.
        """
        if self._checked:
            self._checked.clear()
        else:
            self._checked.update(self._visible)

    def clear(self) -> None:
        """Uncheck every node."""
        self._checked.clear()

    def is_checked(self, node_id: str) -> bool:
        """Whether the node is currently checked."""
        return node_id in self._checked

    @property
    def checked_ids(self) -> list[str]:
        """Checked ids in listing order."""
        return [node_id for node_id in self._visible if node_id in self._checked]

    @property
    def count(self) -> int:
        """Number of checked nodes."""
        return len(self._checked)

    @property
    def all_checked(self) -> bool:
        """Whether every visible node is checked (and there is at least one)."""
        return bool(self._visible) and len(self._checked) == len(self._visible)

    def selected(self, nodes: Iterable[Node]) -> list[Node]:
        """Filter ``nodes`` down to the checked ones, keeping their order."""
        return [node for node in nodes if node.id in self._checked]
