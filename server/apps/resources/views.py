"""JSON API of project resource collections.

Every response is an envelope ``{"err": bool, "errMsg": str, ...}``.
Errors raised by the logic layer are mapped to the envelope (and an HTTP
status) here, in one place.
"""

import functools
import json
import logging
from collections.abc import Callable
from typing import Any, Final

from django.core.exceptions import ValidationError
from django.db import transaction
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from resource_tree.models import ROOT_ID, Collection
from server.apps.resources.exceptions import (
    INTERNAL_ERROR_MESSAGE,
    ProjectNotFoundError,
    ResourceError,
)
from server.apps.resources.logic import tree_operations
from server.apps.resources.logic.permissions import get_project
from server.apps.resources.logic.tree_operations import (
    ListingResult,
    ResolvedNode,
)
from server.apps.resources.models import Project

logger = logging.getLogger(__name__)

_DEPTH_ALL: Final = 'all'
_FALSE_VALUES: Final = frozenset(('false', '0', 'no'))
_METHOD_NOT_ALLOWED_MESSAGE: Final = 'That method is not allowed on this resource.'

_View = Callable[..., JsonResponse]


def _ok(**payload: Any) -> JsonResponse:
    return JsonResponse({'err': False, **payload})


def _fail(message: str, status: int) -> JsonResponse:
    # Returning a response would commit ATOMIC_REQUESTS otherwise
    if transaction.get_connection().in_atomic_block:
        transaction.set_rollback(True)
    return JsonResponse({'err': True, 'errMsg': message}, status=status)


def _validation_message(error: ValidationError) -> str:
    if hasattr(error, 'message_dict'):
        return ' '.join(
            message
            for messages in error.message_dict.values()
            for message in messages
        )
    return ' '.join(error.messages)


def api_view(*methods: str) -> Callable[[_View], _View]:
    """Resolve project and collection, and map errors to the envelope.

    Wrapped views are CSRF exempt, API clients send no token. A method
    outside ``methods`` gets a 405 envelope.

    Args:
        methods: Allowed HTTP methods.

    Returns:
        Decorator for views taking ``(request, project, collection, ...)``.
    """
    def decorator(view: _View) -> _View:
        allowed = frozenset(methods)

        @csrf_exempt
        @functools.wraps(view)
        def wrapper(
            request: HttpRequest,
            project_id: str,
            collection: str,
            **kwargs: Any,
        ) -> JsonResponse:
            if request.method not in allowed:
                response = _fail(_METHOD_NOT_ALLOWED_MESSAGE, 405)
                response['Allow'] = ', '.join(sorted(allowed))
                return response
            try:
                try:
                    resolved_collection = Collection(collection)
                except ValueError as error:
                    raise ProjectNotFoundError() from error
                project = get_project(project_id, request.user)
                # Node ids are matched as UUIDs but keyed as strings
                kwargs = {key: str(value) for key, value in kwargs.items()}
                return view(request, project, resolved_collection, **kwargs)
            except ResourceError as error:
                return _fail(error.message, error.status_code)
            except ValidationError as error:
                logger.info('Rejected %s %s: %s', request.method, request.path, error)
                return _fail(_validation_message(error), 400)
            except Exception:
                logger.exception(
                    'Unhandled error in %s %s',
                    request.method,
                    request.path,
                )
                return _fail(INTERNAL_ERROR_MESSAGE, 500)
        return wrapper
    return decorator


def _json_body(request: HttpRequest) -> dict[str, Any]:
    try:
        body = json.loads(request.body or b'{}')
    except ValueError as error:
        raise ValidationError('Request body must be JSON.') from error
    if not isinstance(body, dict):
        raise ValidationError('Request body must be a JSON object.')
    return body


def _string_field(body: dict[str, Any], key: str) -> str:
    value = body.get(key) or ROOT_ID
    if not isinstance(value, str):
        raise ValidationError({key: 'Expected a string.'})
    return value


def node_payload(resolved: ResolvedNode) -> dict[str, Any]:
    """Serialize a node to its wire representation."""
    row = resolved.row
    payload: dict[str, Any] = {
        'id': str(row.pk),
        'name': row.name,
        'kind': str(row.kind),
        'parentID': row.parent_key,
        'access': str(row.access),
        'displayAccess': str(resolved.display_access),
        'description': row.description,
        'createdDate': row.created_at.isoformat() if row.created_at else '',
        'uploader': row.uploaded_by.get_username() if row.uploaded_by else '',
        'tags': row.tags,
        'license': row.license,
        'author': row.author,
    }
    if not row.is_folder:
        payload['size'] = row.size_bytes
        payload['downloadCount'] = row.download_count
        payload['mimeType'] = row.mime_type
    return payload


def _listing_payload(listing: ListingResult) -> dict[str, Any]:
    return {
        'nodes': [node_payload(node) for node in listing.nodes],
        'path': [{'id': entry.id, 'name': entry.name} for entry in listing.path],
    }


@api_view('GET')
def collection_view(
    request: HttpRequest,
    project: Project,
    collection: Collection,
) -> JsonResponse:
    """List the children of ``parentID``, or everything with depth=all."""
    if request.GET.get('depth') == _DEPTH_ALL:
        listing = tree_operations.list_all(project, collection, request.user)
    else:
        listing = tree_operations.list_children(
            project,
            collection,
            request.user,
            request.GET.get('parentID', ROOT_ID),
        )
    return _ok(**_listing_payload(listing))


@api_view('POST')
def create_folder_view(
    request: HttpRequest,
    project: Project,
    collection: Collection,
) -> JsonResponse:
    """Create a folder."""
    body = _json_body(request)
    node = tree_operations.create_folder(
        project,
        collection,
        request.user,
        body.get('name'),
        _string_field(body, 'parentID'),
    )
    return _ok(node=node_payload(node))


@api_view('POST')
def upload_view(
    request: HttpRequest,
    project: Project,
    collection: Collection,
) -> JsonResponse:
    """Upload the multipart ``files`` into ``parentID``."""
    nodes = tree_operations.upload_files(
        project,
        collection,
        request.user,
        request.FILES.getlist('files'),
        request.POST.get('parentID', ROOT_ID),
    )
    return _ok(nodes=[node_payload(node) for node in nodes])


@api_view('GET', 'PUT', 'DELETE')
def node_view(
    request: HttpRequest,
    project: Project,
    collection: Collection,
    node_id: str,
) -> JsonResponse:
    """Get, edit or delete one node."""
    if request.method == 'DELETE':
        deleted = tree_operations.delete_node(
            project,
            collection,
            request.user,
            node_id,
        )
        return _ok(ok=True, deleted=deleted)
    if request.method == 'PUT':
        node = tree_operations.edit_node(
            project,
            collection,
            request.user,
            node_id,
            _json_body(request),
        )
        return _ok(node=node_payload(node))
    node = tree_operations.get_node(project, collection, request.user, node_id)
    return _ok(node=node_payload(node))


@api_view('PUT')
def move_view(
    request: HttpRequest,
    project: Project,
    collection: Collection,
    node_id: str,
) -> JsonResponse:
    """Move a node under ``newParentID``."""
    body = _json_body(request)
    tree_operations.move_node(
        project,
        collection,
        request.user,
        node_id,
        _string_field(body, 'newParentID'),
    )
    return _ok(ok=True)


@api_view('PUT')
def access_view(
    request: HttpRequest,
    project: Project,
    collection: Collection,
    node_id: str,
) -> JsonResponse:
    """Set ``newAccess`` on a node and its descendants."""
    body = _json_body(request)
    updated = tree_operations.change_access(
        project,
        collection,
        request.user,
        node_id,
        body.get('newAccess'),
    )
    return _ok(ok=True, updated=updated)


@api_view('GET')
def download_view(
    request: HttpRequest,
    project: Project,
    collection: Collection,
    node_id: str,
) -> JsonResponse:
    """Get a download URL of a file."""
    should_increment = (
        request.GET.get('shouldIncrement', 'true').lower() not in _FALSE_VALUES
    )
    url = tree_operations.download_url(
        project,
        collection,
        request.user,
        node_id,
        should_increment=should_increment,
    )
    return _ok(url=url)


@api_view('GET')
def tags_view(
    request: HttpRequest,
    project: Project,
    collection: Collection,
) -> JsonResponse:
    """Suggest tags starting with ``q``."""
    tags = tree_operations.suggest_tags(
        project,
        collection,
        request.user,
        request.GET.get('q', ''),
    )
    return _ok(tags=tags)
