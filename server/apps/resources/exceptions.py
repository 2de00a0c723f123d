"""Exceptions for resources app.

Each error carries the HTTP status and the user-facing message the API
answers with; views never build error messages themselves.
"""

from typing import Final

INTERNAL_ERROR_MESSAGE: Final = (
    'Sorry, we seem to have encountered an internal error.'
)


class ResourceError(Exception):
    """Base class of errors reported through the API envelope."""

    status_code = 400
    default_message = "Sorry, that operation can't be performed on this resource."

    def __init__(self, message: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: User-facing message; the class default if omitted.
        """
        self.message = message or self.default_message
        super().__init__(self.message)


class ProjectNotFoundError(ResourceError):
    """Raised when the project does not exist or cannot be opened."""

    status_code = 404
    default_message = 'A resource with that identifier was not found.'


class NodeNotFoundError(ResourceError):
    """Raised when a node is missing from the project collection."""

    status_code = 404
    default_message = "Couldn't find a file with that identifier."


class AccessDeniedError(ResourceError):
    """Raised when the caller may not perform the operation."""

    status_code = 403
    default_message = "Sorry, you aren't authorized to perform that action."


class InvalidParentError(ResourceError):
    """Raised when a parent id is not a folder of the same collection."""

    default_message = 'File cannot be uploaded to this location.'


class InvalidMoveError(ResourceError):
    """Raised when a move would put a node inside itself or a file."""

    default_message = "Sorry, that operation can't be performed on this resource."
