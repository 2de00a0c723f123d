"""Resource browser facade.

Wires the navigator, the selection, the bulk executor and the access
manager around one ``ResourceAPI`` so a UI only has to call verbs.
"""

import logging
from collections.abc import Sequence
from typing import Any, final

from resource_tree.exceptions import ResourceValidationError
from resource_tree.infrastructure.api import ResourceAPI, UploadItem
from resource_tree.logic.access import AccessCascadeManager
from resource_tree.logic.bulk import BulkMutationExecutor, BulkOutcome
from resource_tree.logic.errors import ErrorChannel
from resource_tree.logic.move_targets import (
    MoveTarget,
    is_valid_target,
    resolve_move_targets,
)
from resource_tree.logic.navigator import DirectoryNavigator
from resource_tree.logic.selection import SelectionSet
from resource_tree.models import AccessLevel, FileNode, Node

logger = logging.getLogger(__name__)


@final
class ResourceManager:
    """Browses one collection and runs actions on the checked nodes."""

    def __init__(
        self,
        api: ResourceAPI,
        errors: ErrorChannel | None = None,
    ) -> None:
        """Initialize the manager at the virtual root.

        Args:
            api: Client of the collection to manage.
            errors: Global error channel; a private one is created if
                omitted.
        """
        self.api = api
        self.errors = errors or ErrorChannel()
        self.selection = SelectionSet()
        self.navigator = DirectoryNavigator(api, self.selection, self.errors)
        self.executor = BulkMutationExecutor(
            self.errors,
            navigator=self.navigator,
            selection=self.selection,
        )
        self.access = AccessCascadeManager(api, self.executor)

    @property
    def selected_nodes(self) -> list[Node]:
        """Checked nodes of the displayed listing, in listing order."""
        return self.selection.selected(self.navigator.nodes)

    async def open(self, parent_id: str) -> bool:
        """Display another directory (clears the selection)."""
        return await self.navigator.navigate(parent_id)

    async def move_targets(self, nodes: Sequence[Node] | None = None) -> MoveTarget:
        """Fetch the hierarchy and resolve where ``nodes`` may be moved.

        Args:
            nodes: Nodes to move; the checked nodes by default.

        Returns:
            Synthetic root of the candidate destination tree.

        Raises:
            ResourceClientError: If the hierarchy cannot be fetched. Callers
                offering targets report it themselves.
        """
        moving = self.selected_nodes if nodes is None else list(nodes)
        tree = await self.api.get_tree()
        return resolve_move_targets(tree, moving, self.navigator.current_id)

    async def move_selected(self, new_parent_id: str) -> BulkOutcome:
        """Move the checked nodes into ``new_parent_id``.

        A failure to fetch the hierarchy is reported and nothing is sent.

        Raises:
            ResourceValidationError: If the destination is not offered by
                the move target resolver.
        """
        moving = self.selected_nodes
        try:
            targets = await self.move_targets(moving)
        except Exception as error:
            self.errors.report(error)
            return BulkOutcome(succeeded=False, applied=(), error=error)
        if not is_valid_target(targets, new_parent_id):
            raise ResourceValidationError(
                'newParentID',
                'That folder is not a valid destination.',
            )
        logger.info(
            'Moving %d node(s) to folder %r',
            len(moving),
            new_parent_id,
        )

        async def mutate(node: Node) -> None:
            await self.api.move_node(node.id, new_parent_id)

        return await self.executor.run(moving, mutate)

    async def delete_selected(self) -> BulkOutcome:
        """Delete the checked nodes and, for folders, their subtrees."""
        targets = self.selected_nodes
        logger.info('Deleting %d node(s)', len(targets))

        async def mutate(node: Node) -> None:
            await self.api.delete_node(node.id)

        return await self.executor.run(targets, mutate)

    async def change_access_selected(
        self,
        new_access: AccessLevel | str | None,
    ) -> BulkOutcome:
        """Set the access of the checked nodes."""
        return await self.access.change_access(self.selected_nodes, new_access)

    async def create_folder(self, name: str) -> Node | None:
        """Create a folder in the displayed directory and refresh.

        Returns:
            The new folder, or None if the request failed.
        """
        try:
            node = await self.api.create_folder(name, self.navigator.current_id)
        except ResourceValidationError:
            raise
        except Exception as error:
            self.errors.report(error)
            return None
        await self.navigator.refresh()
        return node

    async def upload(self, files: Sequence[UploadItem]) -> list[Node]:
        """Upload files into the displayed directory and refresh."""
        try:
            nodes = await self.api.upload_files(files, self.navigator.current_id)
        except ResourceValidationError:
            raise
        except Exception as error:
            self.errors.report(error)
            return []
        await self.navigator.refresh()
        return nodes

    async def edit(self, node_id: str, **changes: Any) -> Node | None:
        """Rename or describe one node and refresh.

        Args:
            node_id: Node to edit.
            changes: Keyword arguments of ``ResourceAPI.edit_node``.

        Returns:
            The updated node, or None if the request failed.
        """
        try:
            node = await self.api.edit_node(node_id, **changes)
        except ResourceValidationError:
            raise
        except Exception as error:
            self.errors.report(error)
            return None
        await self.navigator.refresh()
        return node

    async def download(self, node: FileNode) -> str | None:
        """Get a download URL, counting the download."""
        try:
            return await self.api.download_url(node.id)
        except Exception as error:
            self.errors.report(error)
            return None

    async def tag_suggestions(self, query: str) -> list[str]:
        """Suggest tags for autocompletion; failures yield no suggestions."""
        return await self.errors.quietly(self.api.suggest_tags(query), [])
