"""Exceptions raised by the resource tree client."""


class ResourceClientError(Exception):
    """Base class for every client-side failure."""


class ResourceValidationError(ResourceClientError):
    """Raised when user input is rejected before any request is sent."""

    def __init__(self, field: str, message: str) -> None:
        """Initialize ResourceValidationError.

        Args:
            field: Name of the offending input.
            message: Human readable reason.
        """
        self.field = field
        super().__init__(message)


class ServerError(ResourceClientError):
    """Raised when the service answers with ``err: true``."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize ServerError.

        Args:
            message: ``errMsg`` sent by the service.
            status_code: HTTP status of the response, if any.
        """
        self.status_code = status_code
        super().__init__(message)


class TransportError(ResourceClientError):
    """Raised when a request never produced a usable envelope."""


class BulkActionInProgressError(ResourceClientError):
    """Raised when a bulk action starts while another one is running."""
