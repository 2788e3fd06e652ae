"""Latest-request-wins coordination for async fetches.

Starting a new request cancels the previous one. Cancellation is
cooperative: a superseded operation may still finish, but its result or
error is dropped instead of being committed.
"""

import logging
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationToken:
    """Cooperative cancellation flag handed to each operation."""

    def __init__(self):
        self._cancelled = False
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str = "Cancelled") -> bool:
        """Mark as cancelled. Returns False if it already was."""
        if self._cancelled:
            return False
        self._cancelled = True
        self.reason = reason
        return True


class RequestCoordinator(Generic[T]):
    """Commits only the most recently started, non-cancelled request.

    State (``data``, ``error``, ``is_loading``) is only ever written by the
    live request. ``data`` is kept across refetches until a newer result
    replaces it.
    """

    def __init__(self):
        self.data: Optional[T] = None
        self.error: Optional[str] = None
        self.is_loading = False
        self._token: Optional[CancellationToken] = None

    @property
    def has_pending(self) -> bool:
        return self._token is not None and not self._token.cancelled and self.is_loading

    def cancel(self, reason: str = "Cancelled") -> None:
        """Cancel the live request, if any."""
        if self._token is not None:
            self._token.cancel(reason)
            self.is_loading = False

    async def execute(
        self,
        operation: Callable[..., Awaitable[T]],
        *args: Any,
    ) -> Optional[T]:
        """Run operation(token, *args), superseding any pending request.

        Returns:
            The result if this request committed it, otherwise None (cancelled
            or failed; failures are stored on ``error`` as a plain string)
        """
        if self._token is not None:
            self._token.cancel("Superseded")
        token = CancellationToken()
        self._token = token

        self.is_loading = True
        self.error = None

        try:
            result = await operation(token, *args)
        except Exception as e:
            if token.cancelled:
                logger.debug(f"Discarding error from cancelled request: {e}")
                return None
            self.error = str(e) or e.__class__.__name__
            logger.error(f"Request failed: {self.error}")
            return None
        finally:
            if not token.cancelled:
                self.is_loading = False

        if token.cancelled:
            logger.debug(f"Discarding result from cancelled request ({token.reason})")
            return None

        self.data = result
        return result
