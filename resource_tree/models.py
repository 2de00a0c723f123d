"""Data model shared by the resource tree client and the listing service."""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Final, final

# Identifier of the virtual root folder
ROOT_ID: Final = ''

# Folder and file names are limited at creation and rename time
NAME_MIN_LENGTH: Final = 1
NAME_MAX_LENGTH: Final = 100


class AccessLevel(enum.StrEnum):
    """Persisted visibility of a node."""

    PUBLIC = 'public'
    USERS = 'users'
    INSTRUCTORS = 'instructors'
    TEAM = 'team'


class DisplayAccess(enum.StrEnum):
    """Visibility shown to the user.

    Mirrors AccessLevel plus MIXED, which is derived for folders whose
    descendant files disagree and must never be sent back to the service.
    """

    PUBLIC = 'public'
    USERS = 'users'
    INSTRUCTORS = 'instructors'
    TEAM = 'team'
    MIXED = 'mixed'

    @classmethod
    def of(cls, access: AccessLevel) -> 'DisplayAccess':
        """Lift a persisted access level into the display domain."""
        return cls(access.value)


class NodeKind(enum.StrEnum):
    """Discriminator of the node union."""

    FILE = 'file'
    FOLDER = 'folder'


class Collection(enum.StrEnum):
    """Resource collections a project owns; each is an independent tree."""

    FILES = 'files'
    MATERIALS = 'materials'


@dataclass(frozen=True, kw_only=True)
class _NodeBase:
    id: str
    name: str
    parent_id: str = ROOT_ID
    access: AccessLevel = AccessLevel.PUBLIC
    display_access: DisplayAccess = DisplayAccess.PUBLIC
    description: str = ''
    created_date: datetime | None = None
    uploader: str = ''
    tags: tuple[str, ...] = ()
    license: dict[str, Any] = field(default_factory=dict)
    author: str = ''

    @property
    def is_root_level(self) -> bool:
        """Whether the node sits directly under the virtual root."""
        return self.parent_id == ROOT_ID


@final
@dataclass(frozen=True, kw_only=True)
class FileNode(_NodeBase):
    """A stored file."""

    size: int = 0
    download_count: int = 0
    mime_type: str = ''

    kind: NodeKind = field(default=NodeKind.FILE, init=False)


@final
@dataclass(frozen=True, kw_only=True)
class FolderNode(_NodeBase):
    """A folder. ``children`` is only filled in recursive views."""

    children: tuple['Node', ...] = ()

    kind: NodeKind = field(default=NodeKind.FOLDER, init=False)


Node = FileNode | FolderNode


@final
@dataclass(frozen=True)
class PathEntry:
    """One breadcrumb of a listing path."""

    id: str
    name: str


@final
@dataclass(frozen=True)
class Listing:
    """Children of one directory and the path leading to it."""

    parent_id: str
    nodes: tuple[Node, ...]
    path: tuple[PathEntry, ...]


def _parse_datetime(raw: str | None) -> datetime | None:
    if not raw:
        return None
    return datetime.fromisoformat(raw)


def node_from_payload(payload: dict[str, Any]) -> Node:
    """Build a node from its wire representation.

    Args:
        payload: Node object as returned by the listing service.

    Returns:
        FileNode or FolderNode depending on ``kind``.

    Raises:
        ValueError: If ``kind`` or an access value is unknown.
        KeyError: If ``id`` is missing.
    """
    kind = NodeKind(payload.get('kind', NodeKind.FILE))
    access = AccessLevel(payload.get('access') or AccessLevel.PUBLIC)
    display_access = DisplayAccess(
        payload.get('displayAccess') or access.value,
    )
    common: dict[str, Any] = {
        'id': str(payload['id']),
        'name': payload.get('name', ''),
        'parent_id': payload.get('parentID') or ROOT_ID,
        'access': access,
        'display_access': display_access,
        'description': payload.get('description') or '',
        'created_date': _parse_datetime(payload.get('createdDate')),
        'uploader': payload.get('uploader') or '',
        'tags': tuple(payload.get('tags') or ()),
        'license': dict(payload.get('license') or {}),
        'author': payload.get('author') or '',
    }
    if kind is NodeKind.FOLDER:
        return FolderNode(**common)
    return FileNode(
        size=int(payload.get('size') or 0),
        download_count=int(payload.get('downloadCount') or 0),
        mime_type=payload.get('mimeType') or '',
        **common,
    )


def path_from_payload(payload: list[dict[str, Any]]) -> tuple[PathEntry, ...]:
    """Build breadcrumbs from the wire ``path`` array."""
    return tuple(
        PathEntry(id=str(entry.get('id') or ROOT_ID), name=entry.get('name', ''))
        for entry in payload
    )
