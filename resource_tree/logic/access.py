"""Display access derivation and access-change requests.

``mixed`` is never persisted. A folder shows the access shared by all of
its descendant files, ``mixed`` when they disagree, and its own stored
access when it contains no files at all. The listing service uses the
same functions to fill ``displayAccess``.
"""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, final

from resource_tree.exceptions import ResourceValidationError
from resource_tree.models import (
    AccessLevel,
    DisplayAccess,
    FileNode,
    FolderNode,
    Node,
)
from resource_tree.tree import ResourceTree

if TYPE_CHECKING:
    from resource_tree.infrastructure.api import ResourceAPI
    from resource_tree.logic.bulk import BulkMutationExecutor, BulkOutcome

logger = logging.getLogger(__name__)


def derive_display_access(tree: ResourceTree, node_id: str) -> DisplayAccess:
    """Compute the access value a node is displayed with.

    Args:
        tree: Hierarchy containing the node and its descendants.
        node_id: Node to compute.

    Returns:
        The node's display access.
    """
    node = tree.get(node_id)
    if isinstance(node, FileNode):
        return DisplayAccess.of(node.access)

    found = {
        descendant.access
        for descendant in tree.descendants(node_id)
        if isinstance(descendant, FileNode)
    }
    if not found:
        return DisplayAccess.of(node.access)
    if len(found) > 1:
        return DisplayAccess.MIXED
    return DisplayAccess.of(found.pop())


def derive_all_display_access(tree: ResourceTree) -> dict[str, DisplayAccess]:
    """Compute display access for every node of the arena in one pass.

    Folders are resolved bottom-up from the sets of file access values
    below them, so each node is visited a constant number of times.
    """
    below: dict[str, set[AccessLevel]] = {}
    result: dict[str, DisplayAccess] = {}

    order = _post_order(tree)
    for node in order:
        if isinstance(node, FileNode):
            below[node.id] = {node.access}
            result[node.id] = DisplayAccess.of(node.access)
            continue
        collected: set[AccessLevel] = set()
        for child in tree.children_of(node.id):
            collected |= below.get(child.id, set())
        below[node.id] = collected
        result[node.id] = _fold(node, collected)
    return result


def _fold(folder: FolderNode, collected: set[AccessLevel]) -> DisplayAccess:
    if not collected:
        return DisplayAccess.of(folder.access)
    if len(collected) > 1:
        return DisplayAccess.MIXED
    return DisplayAccess.of(next(iter(collected)))


def _post_order(tree: ResourceTree) -> list[Node]:
    pre: list[Node] = []
    roots = [node for node in tree if node.parent_id not in tree]
    stack = list(roots)
    seen: set[str] = set()
    while stack:
        node = stack.pop()
        if node.id in seen:
            continue
        seen.add(node.id)
        pre.append(node)
        stack.extend(tree.children_of(node.id))
    pre.reverse()
    return pre


def parse_access_level(raw: str | None) -> AccessLevel:
    """Validate a user-supplied access value.

    Args:
        raw: Value picked in the UI.

    Returns:
        The matching persisted access level.

    Raises:
        ResourceValidationError: If the value is empty, ``mixed``
            or unknown.
    """
    if not raw:
        raise ResourceValidationError('newAccess', 'Choose an access setting.')
    if raw == DisplayAccess.MIXED:
        raise ResourceValidationError(
            'newAccess',
            'Mixed access is derived and cannot be set.',
        )
    try:
        return AccessLevel(raw)
    except ValueError as error:
        raise ResourceValidationError(
            'newAccess',
            f'Unknown access setting: {raw}',
        ) from error


@final
class AccessCascadeManager:
    """Issues access changes; the service cascades them to descendants."""

    def __init__(
        self,
        api: 'ResourceAPI',
        executor: 'BulkMutationExecutor',
    ) -> None:
        """Initialize the manager.

        Args:
            api: Client used for the per-node requests.
            executor: Executor running the requests sequentially.
        """
        self._api = api
        self._executor = executor

    async def change_access(
        self,
        nodes: Sequence[Node],
        new_access: AccessLevel | str | None,
    ) -> 'BulkOutcome':
        """Set the access of each node (and, server-side, its subtree).

        Args:
            nodes: Nodes picked by the user, not expanded client-side.
            new_access: Requested access value.

        Returns:
            Outcome of the bulk run.

        Raises:
            ResourceValidationError: If ``new_access`` is invalid. Nothing
                is sent in that case.
        """
        level = parse_access_level(new_access)
        logger.info(
            'Changing access of %d node(s) to %s',
            len(nodes),
            level,
        )

        async def mutate(node: Node) -> None:
            await self._api.change_access(node.id, level)

        return await self._executor.run(nodes, mutate)
