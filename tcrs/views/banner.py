"""
Inline error banner shared by the view models.
"""

from typing import Awaitable, Callable, Optional

RetryCallback = Callable[[], Awaitable[None]]


class ErrorBanner:
    """
    Display-only error message with a dismiss affordance and optional retry.
    """

    def __init__(self):
        self.message: Optional[str] = None
        self._retry: Optional[RetryCallback] = None

    @property
    def visible(self) -> bool:
        return self.message is not None

    @property
    def can_retry(self) -> bool:
        return self.visible and self._retry is not None

    def show(self, message: str, retry: Optional[RetryCallback] = None) -> None:
        self.message = message
        self._retry = retry

    def dismiss(self) -> None:
        self.message = None
        self._retry = None

    async def retry(self) -> None:
        """Dismiss and re-invoke the failed fetch."""
        callback = self._retry
        self.dismiss()
        if callback is not None:
            await callback()
