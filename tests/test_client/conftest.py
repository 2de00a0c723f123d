"""Shared fixtures for resource tree client tests."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio

from resource_tree.infrastructure.api import ResourceAPI
from resource_tree.models import (
    AccessLevel,
    FileNode,
    FolderNode,
    PathEntry,
)
from resource_tree.tree import ResourceTree

PROJECT_ID = 'proj-1'
BASE_URL = 'http://resources.test'
_PREFIX = f'/api/projects/{PROJECT_ID}/files/'


class FakeResourceService:
    """In-memory resource service answering through httpx.MockTransport.

    Nodes are kept as wire payloads. Access changes cascade and deletes
    remove subtrees, like the real service. ``fail`` makes one
    (method, node id) pair answer with an error envelope.
    """

    def __init__(self) -> None:
        self.nodes: dict[str, dict[str, Any]] = {}
        self.requests: list[tuple[str, str]] = []
        self.failures: dict[tuple[str, str], str] = {}
        self._next_id = 1

    def add(
        self,
        name: str,
        kind: str = 'file',
        parent_id: str = '',
        access: str = 'public',
        **extra: Any,
    ) -> str:
        node_id = f'n{self._next_id}'
        self._next_id += 1
        self.nodes[node_id] = {
            'id': node_id,
            'name': name,
            'kind': kind,
            'parentID': parent_id,
            'access': access,
            **extra,
        }
        return node_id

    def fail(self, method: str, node_id: str, message: str) -> None:
        self.failures[(method, node_id)] = message

    def children(self, parent_id: str) -> list[dict[str, Any]]:
        return [
            node for node in self.nodes.values()
            if node['parentID'] == parent_id
        ]

    def subtree(self, node_id: str) -> list[str]:
        found = [node_id]
        for child in self.children(node_id):
            found.extend(self.subtree(child['id']))
        return found

    def path(self, folder_id: str) -> list[dict[str, str]]:
        chain = []
        current = folder_id
        while current:
            node = self.nodes[current]
            chain.append({'id': node['id'], 'name': node['name']})
            current = node['parentID']
        return [{'id': '', 'name': ''}, *reversed(chain)]

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append((request.method, path))
        parts = path.removeprefix(_PREFIX).strip('/').split('/')
        node_id = parts[0] if parts and parts[0] not in {'', 'folders', 'tags'} else ''
        failure = self.failures.get((request.method, node_id))
        if failure is not None:
            return httpx.Response(400, json={'err': True, 'errMsg': failure})
        return self._route(request, parts, node_id)

    def _route(
        self,
        request: httpx.Request,
        parts: list[str],
        node_id: str,
    ) -> httpx.Response:
        action = parts[1] if len(parts) > 1 else ''
        if parts == [''] and request.method == 'GET':
            if request.url.params.get('depth') == 'all':
                return _ok(nodes=list(self.nodes.values()), path=self.path(''))
            parent_id = request.url.params.get('parentID', '')
            if parent_id and parent_id not in self.nodes:
                return _error('Not found', 404)
            return _ok(nodes=self.children(parent_id), path=self.path(parent_id))
        if parts == ['folders']:
            body = json.loads(request.content)
            new_id = self.add(body['name'], 'folder', body['parentID'])
            return _ok(node=self.nodes[new_id])
        if parts == ['tags']:
            return _ok(tags=['biology', 'biochemistry'])
        if node_id not in self.nodes:
            return _error("Couldn't find a file with that identifier.", 404)
        if request.method == 'DELETE':
            for removed in self.subtree(node_id):
                self.nodes.pop(removed)
            return _ok(ok=True)
        if action == 'move':
            self.nodes[node_id]['parentID'] = json.loads(request.content)['newParentID']
            return _ok(ok=True)
        if action == 'access':
            new_access = json.loads(request.content)['newAccess']
            for changed in self.subtree(node_id):
                self.nodes[changed]['access'] = new_access
            return _ok(ok=True)
        if action == 'download':
            return _ok(url=f'https://storage.test/{node_id}')
        if request.method == 'PUT':
            self.nodes[node_id].update(json.loads(request.content))
        return _ok(node=self.nodes[node_id])


def _ok(**payload: Any) -> httpx.Response:
    return httpx.Response(200, json={'err': False, **payload})


def _error(message: str, status: int) -> httpx.Response:
    return httpx.Response(status, json={'err': True, 'errMsg': message})


@pytest.fixture
def service():
    """Empty fake resource service.

    Returns:
        FakeResourceService instance.
    """
    return FakeResourceService()


@pytest_asyncio.fixture
async def api(service):
    """Client wired to the fake service.

    Yields:
        ResourceAPI for the files collection of PROJECT_ID.
    """
    client = httpx.AsyncClient(
        base_url=BASE_URL,
        transport=httpx.MockTransport(service.handle),
    )
    async with ResourceAPI(client, PROJECT_ID) as resource_api:
        yield resource_api


@pytest.fixture
def make_file() -> Callable[..., FileNode]:
    """Factory of file nodes.

    Returns:
        Function building a FileNode from id, parent and access.
    """
    def factory(
        node_id: str,
        parent_id: str = '',
        access: AccessLevel = AccessLevel.PUBLIC,
    ) -> FileNode:
        return FileNode(
            id=node_id,
            name=f'{node_id}.pdf',
            parent_id=parent_id,
            access=access,
        )
    return factory


@pytest.fixture
def make_folder() -> Callable[..., FolderNode]:
    """Factory of folder nodes.

    Returns:
        Function building a FolderNode from id, parent and access.
    """
    def factory(
        node_id: str,
        parent_id: str = '',
        access: AccessLevel = AccessLevel.PUBLIC,
    ) -> FolderNode:
        return FolderNode(
            id=node_id,
            name=node_id.title(),
            parent_id=parent_id,
            access=access,
        )
    return factory


@pytest.fixture
def scenario_tree(make_file, make_folder):
    """Hierarchy of the documented example, plus a few siblings.

    root
    ├── docs/            (folder)
    │   ├── draft        (file, team)
    │   └── drafts-old/  (folder)
    │       └── old      (file, team)
    ├── images/          (folder)
    │   └── archive/     (folder)
    └── readme           (file)

    Returns:
        ResourceTree of the hierarchy.
    """
    return ResourceTree([
        make_folder('docs'),
        make_file('draft', 'docs', AccessLevel.TEAM),
        make_folder('drafts-old', 'docs'),
        make_file('old', 'drafts-old', AccessLevel.TEAM),
        make_folder('images'),
        make_folder('archive', 'images'),
        make_file('readme'),
    ])


@pytest.fixture
def root_path():
    """Path of a root listing.

    Returns:
        Tuple holding the root entry.
    """
    return (PathEntry(id='', name=''),)
