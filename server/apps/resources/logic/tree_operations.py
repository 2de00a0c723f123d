"""Business logic for resource tree operations.

Every operation loads the whole (project, collection) tree once into a
``ResourceTree`` arena. Display access, visibility, breadcrumbs, cascade
sets and cycle checks are all answered from that arena, so the rules
match what the client computes.
"""

import logging
import uuid
from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final, final

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import UploadedFile
from django.db import transaction
from django.db.models import F

from resource_tree.exceptions import ResourceValidationError
from resource_tree.logic.access import (
    derive_all_display_access,
    parse_access_level,
)
from resource_tree.models import (
    ROOT_ID,
    AccessLevel,
    Collection,
    DisplayAccess,
    FileNode,
    FolderNode,
    Node,
    NodeKind,
    PathEntry,
)
from resource_tree.tree import ResourceTree
from resource_tree.validation import validate_name
from server.apps.resources.exceptions import (
    AccessDeniedError,
    InvalidMoveError,
    InvalidParentError,
    NodeNotFoundError,
    ResourceError,
)
from server.apps.resources.infrastructure.metadata import detect_mime_type
from server.apps.resources.logic.permissions import (
    allowed_levels,
    require_manage,
)
from server.apps.resources.models import Project, ResourceNode

if TYPE_CHECKING:
    from server.apps.resources.infrastructure.storage import ResourceStorage

logger = logging.getLogger(__name__)

_TAG_SUGGESTION_LIMIT: Final = 10
_ALL_LEVELS: Final = frozenset(DisplayAccess)

# Access of new nodes under the root or a mixed folder; uploads stay
# private to the team until opened up
_NEW_FOLDER_ACCESS: Final = AccessLevel.PUBLIC
_NEW_FILE_ACCESS: Final = AccessLevel.TEAM


@final
@dataclass(frozen=True)
class ResolvedNode:
    """Node row together with its derived display access."""

    row: ResourceNode
    display_access: DisplayAccess


@final
@dataclass(frozen=True)
class ListingResult:
    """Visible nodes of a directory (or collection) and its breadcrumbs."""

    nodes: list[ResolvedNode]
    path: tuple[PathEntry, ...]


def _get_storage() -> 'ResourceStorage':
    """Get the configured default storage backend.

    Returns:
        ResourceStorage instance with proper S3 configuration.
    """
    return default_storage  # type: ignore[return-value]


def _to_core(row: ResourceNode) -> Node:
    if row.is_folder:
        return FolderNode(
            id=str(row.id),
            name=row.name,
            parent_id=row.parent_key,
            access=AccessLevel(row.access),
        )
    return FileNode(
        id=str(row.id),
        name=row.name,
        parent_id=row.parent_key,
        access=AccessLevel(row.access),
    )


@final
class _CollectionState:
    """Rows of one project collection and the arena built from them."""

    def __init__(self, project: Project, collection: Collection) -> None:
        rows = ResourceNode.objects.filter(
            project=project,
            collection=collection,
        ).select_related('uploaded_by')
        self.rows = {str(row.id): row for row in rows}
        self.tree = ResourceTree(_to_core(row) for row in self.rows.values())
        self.display = derive_all_display_access(self.tree)

    def row(self, node_id: str) -> ResourceNode:
        try:
            return self.rows[node_id]
        except KeyError as error:
            logger.info('Resource not found: %s', node_id)
            raise NodeNotFoundError() from error

    def resolve(self, node_id: str) -> ResolvedNode:
        return ResolvedNode(
            row=self.rows[node_id],
            display_access=self.display[node_id],
        )

    def visible_ids(self, levels: frozenset[DisplayAccess]) -> set[str]:
        """Ids whose display access and every ancestor's are allowed."""
        if levels == _ALL_LEVELS:
            return set(self.rows)

        visible: set[str] = set()
        queue = deque([ROOT_ID])
        while queue:
            parent_id = queue.popleft()
            for child in self.tree.children_of(parent_id):
                if self.display[child.id] in levels:
                    visible.add(child.id)
                    queue.append(child.id)
        return visible

    def folder_or_root(
        self,
        folder_id: str,
        error_cls: type[ResourceError],
    ) -> ResourceNode | None:
        """Resolve a destination folder id, ``None`` meaning the root."""
        if not folder_id:
            return None
        folder = self.rows.get(folder_id)
        if folder is None or not folder.is_folder:
            logger.info('Invalid destination folder: %s', folder_id)
            raise error_cls()
        return folder

    def inherited_access(
        self,
        parent: ResourceNode | None,
        default: AccessLevel,
    ) -> AccessLevel:
        """Access given to new nodes created inside ``parent``.

        A new node takes the access its parent is displayed with; under
        the root or a ``mixed`` folder it gets ``default``.
        """
        if parent is None:
            return default
        shown = self.display[str(parent.id)]
        if shown is DisplayAccess.MIXED:
            return default
        return AccessLevel(shown.value)


def _clean_name(name: object, field: str = 'name') -> str:
    if not isinstance(name, str):
        raise ValidationError({field: 'Name must be a string.'})
    try:
        return validate_name(name, field)
    except ResourceValidationError as error:
        raise ValidationError({error.field: str(error)}) from error


def _uploader(user: Any) -> Any:
    if getattr(user, 'is_authenticated', False):
        return user
    return None


def list_children(
    project: Project,
    collection: Collection,
    user: Any,
    parent_id: str = ROOT_ID,
) -> ListingResult:
    """List the visible children of a folder.

    Args:
        project: Project owning the collection.
        collection: Collection to browse.
        user: Requesting user, possibly anonymous.
        parent_id: Folder id, ``''`` for the root.

    Returns:
        Visible children and the path root -> ``parent_id``.

    Raises:
        NodeNotFoundError: If the folder does not exist.
        AccessDeniedError: If the folder is hidden from the user.
        ResourceError: If ``parent_id`` is a file.
    """
    state = _CollectionState(project, collection)
    visible = state.visible_ids(allowed_levels(user, project))

    if parent_id:
        parent = state.row(parent_id)
        if parent_id not in visible:
            raise AccessDeniedError()
        if not parent.is_folder:
            raise ResourceError()

    logger.debug(
        'Listing %s/%s folder %r',
        project.pk,
        collection,
        parent_id,
    )
    return ListingResult(
        nodes=[
            state.resolve(child.id)
            for child in state.tree.children_of(parent_id)
            if child.id in visible
        ],
        path=state.tree.path_to(parent_id),
    )


def list_all(
    project: Project,
    collection: Collection,
    user: Any,
) -> ListingResult:
    """List every visible node of a collection as a flat list.

    Returns:
        All visible nodes; the path only holds the root entry.
    """
    state = _CollectionState(project, collection)
    visible = state.visible_ids(allowed_levels(user, project))
    return ListingResult(
        nodes=[
            state.resolve(node_id)
            for node_id in state.rows
            if node_id in visible
        ],
        path=state.tree.path_to(ROOT_ID),
    )


def get_node(
    project: Project,
    collection: Collection,
    user: Any,
    node_id: str,
) -> ResolvedNode:
    """Get one visible node.

    Raises:
        NodeNotFoundError: If the node does not exist or is hidden.
    """
    state = _CollectionState(project, collection)
    state.row(node_id)
    if node_id not in state.visible_ids(allowed_levels(user, project)):
        raise NodeNotFoundError()
    return state.resolve(node_id)


def create_folder(
    project: Project,
    collection: Collection,
    user: Any,
    name: object,
    parent_id: str = ROOT_ID,
) -> ResolvedNode:
    """Create a folder.

    Args:
        project: Project owning the collection.
        collection: Collection to create the folder in.
        user: Requesting user.
        name: Folder name, 1-100 characters.
        parent_id: Containing folder, ``''`` for the root.

    Returns:
        The new folder.

    Raises:
        AccessDeniedError: If the user is not on the project team.
        ValidationError: If the name is invalid.
        InvalidParentError: If the parent is not a folder of the collection.
    """
    require_manage(user, project)
    folder_name = _clean_name(name)
    state = _CollectionState(project, collection)
    parent = state.folder_or_root(parent_id, InvalidParentError)
    access = state.inherited_access(parent, _NEW_FOLDER_ACCESS)

    with transaction.atomic():
        row = ResourceNode.objects.create(
            project=project,
            collection=collection,
            parent=parent,
            kind=NodeKind.FOLDER,
            name=folder_name,
            access=access,
            uploaded_by=_uploader(user),
        )
    logger.info(
        'Created folder %s (%r) in %s/%s under %r',
        row.pk,
        folder_name,
        project.pk,
        collection,
        parent_id,
    )
    return ResolvedNode(row=row, display_access=DisplayAccess.of(access))


def upload_files(
    project: Project,
    collection: Collection,
    user: Any,
    files: Sequence[UploadedFile],
    parent_id: str = ROOT_ID,
) -> list[ResolvedNode]:
    """Upload files into a folder.

    Transaction safety: each file is uploaded to storage first, then its
    DB record is created. If the DB write fails, the uploaded object is
    deleted from storage (rollback).

    Args:
        project: Project owning the collection.
        collection: Collection to upload into.
        user: Requesting user.
        files: Uploaded files.
        parent_id: Destination folder, ``''`` for the root.

    Returns:
        The created file nodes, in upload order.

    Raises:
        AccessDeniedError: If the user is not on the project team.
        ValidationError: If the upload breaks the count, size or name limits.
        InvalidParentError: If the parent is not a folder of the collection.
    """
    require_manage(user, project)
    _validate_uploads(files)
    state = _CollectionState(project, collection)
    parent = state.folder_or_root(parent_id, InvalidParentError)
    access = state.inherited_access(parent, _NEW_FILE_ACCESS)

    created = [
        _store_upload(project, collection, user, parent, access, upload)
        for upload in files
    ]
    logger.info(
        'Uploaded %d file(s) to %s/%s under %r',
        len(created),
        project.pk,
        collection,
        parent_id,
    )
    return created


def _validate_uploads(files: Sequence[UploadedFile]) -> None:
    if not files:
        raise ValidationError({'files': 'No files were uploaded.'})
    max_files = settings.RESOURCES_MAX_UPLOAD_FILES
    if len(files) > max_files:
        raise ValidationError(
            {'files': f'At most {max_files} files can be uploaded at once.'},
        )
    max_size = settings.RESOURCES_MAX_UPLOAD_FILE_SIZE
    for upload in files:
        _clean_name(upload.name, 'files')
        if upload.size is not None and upload.size > max_size:
            raise ValidationError(
                {'files': f'{upload.name} exceeds the {max_size} byte limit.'},
            )


def _store_upload(  # noqa: WPS211
    project: Project,
    collection: Collection,
    user: Any,
    parent: ResourceNode | None,
    access: AccessLevel,
    upload: UploadedFile,
) -> ResolvedNode:
    node_id = uuid.uuid4()
    storage = _get_storage()

    # Storage first, the row only exists once its object does
    saved_name = storage.store_file(project.pk, node_id, upload)

    try:
        with transaction.atomic():
            row = ResourceNode.objects.create(
                id=node_id,
                project=project,
                collection=collection,
                parent=parent,
                kind=NodeKind.FILE,
                name=upload.name,
                access=access,
                file=saved_name,
                size_bytes=upload.size or 0,
                mime_type=detect_mime_type(upload.name, upload.content_type),
                uploaded_by=_uploader(user),
            )
    except Exception:
        logger.exception(
            'Creating the node failed, discarding its upload: %s',
            saved_name,
        )
        storage.discard([saved_name])
        raise
    return ResolvedNode(row=row, display_access=DisplayAccess.of(access))


def edit_node(
    project: Project,
    collection: Collection,
    user: Any,
    node_id: str,
    changes: dict[str, Any],
) -> ResolvedNode:
    """Rename or describe a node.

    Only the keys present in ``changes`` are touched: ``name``,
    ``description``, ``license``, ``author`` and ``tags``.

    Raises:
        AccessDeniedError: If the user is not on the project team.
        NodeNotFoundError: If the node does not exist.
        ValidationError: If a value is invalid or ``kind`` is sent.
    """
    require_manage(user, project)
    state = _CollectionState(project, collection)
    row = state.row(node_id)

    if 'kind' in changes:
        raise ValidationError({'kind': 'The kind of a resource cannot change.'})

    updated: list[str] = []
    if 'name' in changes:
        row.name = _clean_name(changes['name'])
        updated.append('name')
    if 'description' in changes:
        row.description = _expect(changes, 'description', str)
        updated.append('description')
    if 'license' in changes:
        row.license = _expect(changes, 'license', dict)
        updated.append('license')
    if 'author' in changes:
        row.author = _expect(changes, 'author', str)
        updated.append('author')
    if 'tags' in changes:
        tags = _expect(changes, 'tags', list)
        if not all(isinstance(tag, str) for tag in tags):
            raise ValidationError({'tags': 'Tags must be strings.'})
        row.tags = tags
        updated.append('tags')

    if updated:
        row.save(update_fields=[*updated, 'modified_at'])
        logger.info('Edited resource %s: %s', node_id, ', '.join(updated))
    return state.resolve(node_id)


def _expect(changes: dict[str, Any], key: str, expected: type) -> Any:
    value = changes[key]
    if not isinstance(value, expected):
        raise ValidationError({key: f'Expected {expected.__name__}.'})
    return value


def move_node(
    project: Project,
    collection: Collection,
    user: Any,
    node_id: str,
    new_parent_id: str,
) -> None:
    """Move a node under another folder of the same collection.

    Raises:
        AccessDeniedError: If the user is not on the project team.
        NodeNotFoundError: If the node does not exist.
        InvalidMoveError: If the destination is not a folder, is the node
            itself or lies inside the node's subtree.
    """
    require_manage(user, project)
    state = _CollectionState(project, collection)
    row = state.row(node_id)

    if new_parent_id == node_id:
        raise InvalidMoveError('A resource cannot be moved into itself.')
    target = state.folder_or_root(new_parent_id, InvalidMoveError)
    if target is not None and state.tree.is_descendant(new_parent_id, node_id):
        logger.warning(
            'Rejected move of %s into its descendant %s',
            node_id,
            new_parent_id,
        )
        raise InvalidMoveError(
            'A folder cannot be moved into one of its subfolders.',
        )

    with transaction.atomic():
        row.parent = target
        row.save(update_fields=['parent', 'modified_at'])
    logger.info('Moved resource %s to folder %r', node_id, new_parent_id)


def change_access(
    project: Project,
    collection: Collection,
    user: Any,
    node_id: str,
    new_access: object,
) -> int:
    """Set the access of a node and every node below it.

    Returns:
        Number of updated rows.

    Raises:
        AccessDeniedError: If the user is not on the project team.
        NodeNotFoundError: If the node does not exist.
        ValidationError: If ``new_access`` is empty, ``mixed`` or unknown.
    """
    require_manage(user, project)
    if not isinstance(new_access, str):
        raise ValidationError({'newAccess': 'Choose an access setting.'})
    try:
        level = parse_access_level(new_access)
    except ResourceValidationError as error:
        raise ValidationError({error.field: str(error)}) from error

    state = _CollectionState(project, collection)
    state.row(node_id)
    subtree = [node_id, *(node.id for node in state.tree.descendants(node_id))]

    with transaction.atomic():
        updated = ResourceNode.objects.filter(pk__in=subtree).update(
            access=level.value,
        )
    logger.info(
        'Set access of %s and %d descendant(s) to %s',
        node_id,
        len(subtree) - 1,
        level,
    )
    return updated


def delete_node(
    project: Project,
    collection: Collection,
    user: Any,
    node_id: str,
) -> int:
    """Delete a node and, for folders, its entire subtree.

    Stored objects are removed by the post_delete signal handler in
    signals.py, once per deleted file row.

    Returns:
        Number of deleted nodes.

    Raises:
        AccessDeniedError: If the user is not on the project team.
        NodeNotFoundError: If the node does not exist.
    """
    require_manage(user, project)
    state = _CollectionState(project, collection)
    row = state.row(node_id)
    count = 1 + len(state.tree.descendants(node_id))

    try:
        with transaction.atomic():
            row.delete()
    except Exception:
        logger.exception('Failed to delete resource subtree: %s', node_id)
        raise
    logger.info('Deleted resource %s and %d descendant(s)', node_id, count - 1)
    return count


def download_url(  # noqa: WPS211
    project: Project,
    collection: Collection,
    user: Any,
    node_id: str,
    should_increment: bool = True,
) -> str:
    """Get a download URL of a visible file.

    Args:
        project: Project owning the collection.
        collection: Collection of the file.
        user: Requesting user, possibly anonymous.
        node_id: File to download.
        should_increment: Whether to count the download.

    Returns:
        Pre-signed storage URL.

    Raises:
        NodeNotFoundError: If the file does not exist or is hidden.
        ResourceError: If the node is a folder.
    """
    state = _CollectionState(project, collection)
    row = state.row(node_id)
    if node_id not in state.visible_ids(allowed_levels(user, project)):
        raise NodeNotFoundError()
    if row.is_folder or not row.file:
        raise ResourceError()

    if should_increment:
        ResourceNode.objects.filter(pk=row.pk).update(
            download_count=F('download_count') + 1,
        )
    return _get_storage().download_url(
        row.file.name,
        expire=settings.RESOURCES_DOWNLOAD_URL_EXPIRY,
        filename=row.name,
    )


def suggest_tags(
    project: Project,
    collection: Collection,
    user: Any,
    query: str,
) -> list[str]:
    """Suggest tags used on visible nodes that start with ``query``."""
    state = _CollectionState(project, collection)
    visible = state.visible_ids(allowed_levels(user, project))
    needle = query.casefold()
    found = {
        tag
        for node_id in visible
        for tag in state.rows[node_id].tags
        if isinstance(tag, str) and tag.casefold().startswith(needle)
    }
    return sorted(found, key=str.casefold)[:_TAG_SUGGESTION_LIMIT]


def merge_materials_into_files(
    project: Project,
    folder_name: str,
) -> int:
    """Move a project's ``materials`` tree into a folder of its ``files``.

    A folder named ``folder_name`` is created at the root of ``files``;
    root-level materials are re-parented under it and every materials
    node switches collection. Storage keys do not depend on the
    collection, so no object is copied.

    Args:
        project: Project to migrate.
        folder_name: Name of the folder receiving the materials.

    Returns:
        Number of migrated nodes (the new folder excluded).
    """
    materials = ResourceNode.objects.filter(
        project=project,
        collection=Collection.MATERIALS,
    )
    if not materials.exists():
        return 0

    with transaction.atomic():
        folder = ResourceNode.objects.create(
            project=project,
            collection=Collection.FILES,
            kind=NodeKind.FOLDER,
            name=_clean_name(folder_name),
            access=AccessLevel.PUBLIC,
        )
        materials.filter(parent__isnull=True).update(parent=folder)
        moved = materials.update(collection=Collection.FILES)
    logger.info(
        'Moved %d material(s) of project %s into folder %s',
        moved,
        project.pk,
        folder.pk,
    )
    return moved
