"""HTTP client of the resource listing and mutation service.

Every response carries the envelope ``{"err": bool, "errMsg": str, ...}``.
A truthy ``err`` is the only failure signal looked at; HTTP status codes
are kept on the raised ``ServerError`` for logging only.
"""

import logging
from collections.abc import Sequence
from types import TracebackType
from typing import IO, Any, Final, Self, final

import httpx

from resource_tree.config import ClientConfig
from resource_tree.exceptions import ServerError, TransportError
from resource_tree.models import (
    ROOT_ID,
    AccessLevel,
    Collection,
    Listing,
    Node,
    node_from_payload,
    path_from_payload,
)
from resource_tree.tree import ResourceTree
from resource_tree.validation import validate_name

logger = logging.getLogger(__name__)

_DEPTH_ALL: Final = 'all'
_UNKNOWN_ERROR: Final = 'Unknown error.'

# (filename, content, content type) as accepted by httpx multipart
UploadItem = tuple[str, bytes | IO[bytes], str]


@final
class ResourceAPI:
    """Client for one collection of one project."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        project_id: str,
        collection: Collection = Collection.FILES,
    ) -> None:
        """Initialize the client.

        Args:
            client: HTTP client; its ``base_url`` points at the service.
            project_id: Project owning the collection.
            collection: Which resource collection to work on.
        """
        self._client = client
        self._project_id = project_id
        self._collection = collection
        self._prefix = f'/api/projects/{project_id}/{collection.value}/'

    @classmethod
    def from_config(
        cls,
        client_config: ClientConfig,
        project_id: str,
        collection: Collection = Collection.FILES,
    ) -> Self:
        """Create a client with its own connection pool.

        Args:
            client_config: Connection settings.
            project_id: Project owning the collection.
            collection: Which resource collection to work on.

        Returns:
            ResourceAPI instance; close it with ``aclose``.
        """
        client = httpx.AsyncClient(
            base_url=client_config.base_url,
            timeout=client_config.timeout,
            headers=client_config.headers,
        )
        return cls(client, project_id, collection)

    @property
    def project_id(self) -> str:
        """Project the client works on."""
        return self._project_id

    @property
    def collection(self) -> Collection:
        """Collection the client works on."""
        return self._collection

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()

    def _url(self, *parts: str) -> str:
        suffix = ''.join(f'{part}/' for part in parts)
        return f'{self._prefix}{suffix}'

    async def _request(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Send a request and unwrap the response envelope.

        Raises:
            TransportError: If the request failed or the body is not an
                envelope.
            ServerError: If the envelope reports ``err``.
        """
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as error:
            logger.exception('Request failed: %s %s', method, url)
            raise TransportError(f'{method} {url} failed: {error}') from error

        try:
            body = response.json()
        except ValueError as error:
            logger.warning(
                'Non-JSON response to %s %s (status %d)',
                method,
                url,
                response.status_code,
            )
            raise TransportError(
                f'Invalid response from server (status {response.status_code})',
            ) from error

        if not isinstance(body, dict):
            raise TransportError('Invalid response from server.')
        if body.get('err'):
            message = body.get('errMsg') or _UNKNOWN_ERROR
            logger.info(
                'Server rejected %s %s: %s',
                method,
                url,
                message,
            )
            raise ServerError(message, response.status_code)
        return body

    async def list_children(self, parent_id: str = ROOT_ID) -> Listing:
        """Fetch the children of a folder and the path leading to it.

        Args:
            parent_id: Folder id, ``''`` for the root.

        Returns:
            Listing of the folder.
        """
        params = {'parentID': parent_id} if parent_id else {}
        body = await self._request('GET', self._prefix, params=params)
        return Listing(
            parent_id=parent_id,
            nodes=tuple(node_from_payload(node) for node in body.get('nodes', ())),
            path=path_from_payload(body.get('path', ())),
        )

    async def get_tree(self) -> ResourceTree:
        """Fetch the whole collection at depth ``all`` as an arena."""
        body = await self._request(
            'GET',
            self._prefix,
            params={'depth': _DEPTH_ALL},
        )
        return ResourceTree(
            node_from_payload(node) for node in body.get('nodes', ())
        )

    async def get_node(self, node_id: str) -> Node:
        """Fetch one node."""
        body = await self._request('GET', self._url(node_id))
        return node_from_payload(body['node'])

    async def create_folder(self, name: str, parent_id: str = ROOT_ID) -> Node:
        """Create a folder.

        Raises:
            ResourceValidationError: If the name is not 1-100 characters.
        """
        validate_name(name)
        body = await self._request(
            'POST',
            self._url('folders'),
            json={'name': name, 'parentID': parent_id},
        )
        return node_from_payload(body['node'])

    async def upload_files(
        self,
        files: Sequence[UploadItem],
        parent_id: str = ROOT_ID,
    ) -> list[Node]:
        """Upload files into a folder.

        Args:
            files: ``(filename, content, content type)`` triples.
            parent_id: Destination folder, ``''`` for the root.

        Returns:
            The created file nodes.
        """
        for filename, _content, _content_type in files:
            validate_name(filename, field='files')
        body = await self._request(
            'POST',
            self._url('upload'),
            data={'parentID': parent_id},
            files=[('files', item) for item in files],
        )
        return [node_from_payload(node) for node in body.get('nodes', ())]

    async def edit_node(
        self,
        node_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        license: dict[str, Any] | None = None,  # noqa: A002
        author: str | None = None,
        tags: Sequence[str] | None = None,
    ) -> Node:
        """Rename or describe a node; ``None`` leaves a field untouched."""
        payload: dict[str, Any] = {}
        if name is not None:
            payload['name'] = validate_name(name)
        if description is not None:
            payload['description'] = description
        if license is not None:
            payload['license'] = license
        if author is not None:
            payload['author'] = author
        if tags is not None:
            payload['tags'] = list(tags)
        body = await self._request('PUT', self._url(node_id), json=payload)
        return node_from_payload(body['node'])

    async def move_node(self, node_id: str, new_parent_id: str) -> None:
        """Move a node under another folder (``''`` for the root)."""
        await self._request(
            'PUT',
            self._url(node_id, 'move'),
            json={'newParentID': new_parent_id},
        )

    async def change_access(self, node_id: str, new_access: AccessLevel) -> None:
        """Set the access of a node; the service cascades it to descendants."""
        await self._request(
            'PUT',
            self._url(node_id, 'access'),
            json={'newAccess': new_access.value},
        )

    async def delete_node(self, node_id: str) -> None:
        """Delete a node and, for folders, its entire subtree."""
        await self._request('DELETE', self._url(node_id))

    async def suggest_tags(self, query: str) -> list[str]:
        """Fetch tags already used in the collection that start with ``query``."""
        body = await self._request(
            'GET',
            self._url('tags'),
            params={'q': query},
        )
        return [str(tag) for tag in body.get('tags', ())]

    async def download_url(
        self,
        node_id: str,
        should_increment: bool = True,
    ) -> str:
        """Get a download link for a file.

        Args:
            node_id: File to download.
            should_increment: Whether the download counts towards
                ``downloadCount``.

        Returns:
            Signed download URL.
        """
        body = await self._request(
            'GET',
            self._url(node_id, 'download'),
            params={'shouldIncrement': 'true' if should_increment else 'false'},
        )
        return body['url']
