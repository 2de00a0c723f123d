"""Global error channel of the resource tree client.

Every failure that has to be shown to the user funnels through one
``ErrorChannel``. Handlers are plain callables; the channel logs each
error once and then forwards it to all subscribers.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar, final

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[Exception], None]

_T = TypeVar('_T')


@final
class ErrorChannel:
    """Single sink for user-visible errors."""

    def __init__(self) -> None:
        """Initialize an empty channel."""
        self._handlers: list[ErrorHandler] = []

    def subscribe(self, handler: ErrorHandler) -> Callable[[], None]:
        """Register a handler.

        Args:
            handler: Callable receiving every reported exception.

        Returns:
            Function removing the handler again.
        """
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def report(self, error: Exception) -> None:
        """Log an error and hand it to every subscribed handler.

        A failing handler is logged and does not prevent the others
        from running.
        """
        logger.error('Resource action failed: %s', error, exc_info=error)
        for handler in list(self._handlers):
            try:
                handler(error)
            except Exception:
                logger.exception('Error handler %r failed', handler)

    async def quietly(
        self,
        action: Awaitable[_T],
        default: _T,
    ) -> _T:
        """Await a best-effort call, dropping its failure.

        Used for non-critical fetches such as name suggestions: errors
        are logged at debug level and never reach the handlers.

        Args:
            action: Awaitable to run.
            default: Value returned when the action fails.

        Returns:
            Result of the action, or ``default`` on failure.
        """
        try:
            return await action
        except Exception:
            logger.debug('Best-effort resource call failed', exc_info=True)
            return default
