"""Current-directory state and listing refresh.

Every listing request gets a monotonically increasing id. Only the
response to the most recent request is applied; responses (or errors)
belonging to a superseded request are dropped, so a slow listing for a
directory the user already left can never overwrite a fresher one.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, final

from resource_tree.logic.errors import ErrorChannel
from resource_tree.logic.selection import SelectionSet
from resource_tree.models import ROOT_ID, Listing, Node, PathEntry

if TYPE_CHECKING:
    from resource_tree.infrastructure.api import ResourceAPI

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True)
class Breadcrumb:
    """Path entry as rendered above the listing."""

    id: str
    name: str
    clickable: bool


@final
class DirectoryNavigator:
    """Holds the displayed directory and keeps its listing fresh."""

    def __init__(
        self,
        api: 'ResourceAPI',
        selection: SelectionSet,
        errors: ErrorChannel,
    ) -> None:
        """Initialize the navigator at the virtual root, with no listing.

        Args:
            api: Listing client.
            selection: Selection reset whenever a new listing is shown.
            errors: Channel listing failures are reported to.
        """
        self._api = api
        self._selection = selection
        self._errors = errors
        self._listing: Listing | None = None
        self._requested_id = ROOT_ID
        self._next_request_id = 1
        self._latest_request_id = 0
        self._loading = False

    @property
    def current_id(self) -> str:
        """Id of the directory whose listing is displayed."""
        if self._listing is None:
            return self._requested_id
        return self._listing.parent_id

    @property
    def listing(self) -> Listing | None:
        """Displayed listing, if one was loaded."""
        return self._listing

    @property
    def nodes(self) -> tuple[Node, ...]:
        """Nodes of the displayed directory."""
        if self._listing is None:
            return ()
        return self._listing.nodes

    @property
    def path(self) -> tuple[PathEntry, ...]:
        """Ancestor chain of the displayed directory, root first."""
        if self._listing is None:
            return (PathEntry(id=ROOT_ID, name=''),)
        return self._listing.path

    @property
    def loading(self) -> bool:
        """Whether the most recent listing request is still pending."""
        return self._loading

    def breadcrumbs(self) -> list[Breadcrumb]:
        """Path entries with the current directory marked non-clickable."""
        current = self.current_id
        return [
            Breadcrumb(id=entry.id, name=entry.name, clickable=entry.id != current)
            for entry in self.path
        ]

    async def navigate(self, parent_id: str = ROOT_ID) -> bool:
        """Switch to another directory.

        Args:
            parent_id: Folder to display; ``''`` for the root.

        Returns:
            True if the new listing is now displayed.
        """
        logger.debug('Navigating to directory %r', parent_id)
        self._requested_id = parent_id
        return await self._load(parent_id)

    async def refresh(self) -> bool:
        """Reload the displayed directory, or the one being navigated to.

        Returns:
            True if the listing was replaced.
        """
        target = self._requested_id if self._loading else self.current_id
        return await self._load(target)

    async def _load(self, parent_id: str) -> bool:
        request_id = self._next_request_id
        self._next_request_id += 1
        self._latest_request_id = request_id
        self._loading = True

        try:
            listing = await self._api.list_children(parent_id)
        except Exception as error:
            if request_id != self._latest_request_id:
                logger.debug(
                    'Ignoring failure of superseded listing %d (%r)',
                    request_id,
                    parent_id,
                )
                return False
            self._loading = False
            self._errors.report(error)
            return False

        if request_id != self._latest_request_id:
            logger.debug(
                'Discarding stale listing %d for %r',
                request_id,
                parent_id,
            )
            return False

        self._loading = False
        self._listing = listing
        self._selection.reset(node.id for node in listing.nodes)
        logger.debug(
            'Displaying %d node(s) of directory %r',
            len(listing.nodes),
            parent_id,
        )
        return True
