"""Metadata extraction utilities for uploaded files."""

import mimetypes
from typing import Final

_DEFAULT_MIME_TYPE: Final = 'application/octet-stream'


def detect_mime_type(filename: str, declared: str | None = None) -> str:
    """Detect MIME type of an uploaded file.

    The type declared by the uploading client wins unless it is empty or
    the generic binary type; otherwise it is guessed from the extension.

    Args:
        filename: Filename with extension.
        declared: Content type sent with the upload, if any.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    if declared and declared != _DEFAULT_MIME_TYPE:
        return declared
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _DEFAULT_MIME_TYPE
    return mime_type


def storage_key(project_id: object, node_id: object) -> str:
    """Build the storage key of a resource file.

    Args:
        project_id: Owning project id.
        node_id: File node id.

    Returns:
        Key in the form ``<project_id>/<node_id>``.
    """
    return f'{project_id}/{node_id}'
