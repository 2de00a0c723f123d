"""Resolution of legal destinations for a move.

Given the nodes a user wants to relocate and the full hierarchy, the
resolver builds a tree containing folders only:

* a folder is kept iff it is not itself being moved;
* the children of a dropped folder are never visited, so nothing inside
  a moving folder can become a destination;
* the folder the move starts from is kept but disabled;
* a synthetic ``Root`` target (id ``''``) is put on top, disabled when the
  move starts from the root.

Any enabled folder of the result is a legal target, without walking
ancestor chains when the user picks one.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Final, final

from resource_tree.models import ROOT_ID, FolderNode, Node
from resource_tree.tree import ResourceTree

ROOT_TARGET_NAME: Final = 'Root'


@final
@dataclass
class MoveTarget:
    """Folder offered as a move destination."""

    id: str
    name: str
    disabled: bool
    children: list['MoveTarget'] = field(default_factory=list)


def resolve_move_targets(
    tree: ResourceTree,
    moving: Iterable[Node],
    origin_id: str = ROOT_ID,
) -> MoveTarget:
    """Build the candidate destination tree for a move.

    Args:
        tree: Complete hierarchy of the collection.
        moving: Nodes the user intends to move.
        origin_id: Directory the move was started from.

    Returns:
        Synthetic root target whose descendants are the candidate folders.
    """
    moving_ids = {node.id for node in moving}
    root = MoveTarget(
        id=ROOT_ID,
        name=ROOT_TARGET_NAME,
        disabled=origin_id == ROOT_ID,
    )

    stack: list[tuple[str, MoveTarget]] = [(ROOT_ID, root)]
    while stack:
        parent_id, parent_target = stack.pop()
        for child in tree.children_of(parent_id):
            if not isinstance(child, FolderNode) or child.id in moving_ids:
                continue
            target = MoveTarget(
                id=child.id,
                name=child.name,
                disabled=child.id == origin_id,
            )
            parent_target.children.append(target)
            stack.append((child.id, target))

    return root


def iter_targets(root: MoveTarget) -> Iterator[MoveTarget]:
    """Yield every target of the candidate tree, root first."""
    stack = [root]
    while stack:
        target = stack.pop()
        yield target
        stack.extend(reversed(target.children))


def enabled_targets(root: MoveTarget) -> list[MoveTarget]:
    """All targets a move may be sent to."""
    return [target for target in iter_targets(root) if not target.disabled]


def find_target(root: MoveTarget, target_id: str) -> MoveTarget | None:
    """Look a target up by folder id."""
    for target in iter_targets(root):
        if target.id == target_id:
            return target
    return None


def is_valid_target(root: MoveTarget, target_id: str) -> bool:
    """Whether ``target_id`` is present in the tree and enabled."""
    target = find_target(root, target_id)
    return target is not None and not target.disabled
