"""
Common lifecycle for headless views: loading flag, error banner, disposal.
"""

from typing import Awaitable, Optional, TypeVar

import structlog

from tcrs.core.errors import RequestCancelled, TcrsError, display_message
from tcrs.services.cancellation import CancelScope
from tcrs.views.banner import ErrorBanner, RetryCallback

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class View:

    name = "view"

    def __init__(self):
        self.scope = CancelScope(self.name)
        self.banner = ErrorBanner()
        self._in_flight = 0
        self.loaded = False

    @property
    def disposed(self) -> bool:
        return self.scope.closed

    @property
    def loading(self) -> bool:
        """True while any request started by this view is still running."""
        return self._in_flight > 0

    @property
    def error_panel(self) -> Optional[str]:
        """Full-panel error, only when a first load failed and nothing is rendered yet."""
        if not self.loaded and self.banner.visible:
            return self.banner.message
        return None

    async def _call(
        self,
        awaitable: Awaitable[T],
        operation: str,
        retry: Optional[RetryCallback] = None,
    ) -> Optional[T]:
        """
        Run a request inside the view's scope, counted as in flight while it runs.

        Failures land in the banner and return None; the previously rendered
        state is left untouched. A disposed view returns None silently.
        """
        self._in_flight += 1
        try:
            result = await self.scope.run(awaitable)
            if self.disposed:
                return None
            return result
        except RequestCancelled:
            logger.debug("Dropped response for disposed view", view=self.name, operation=operation)
            return None
        except TcrsError as e:
            if not self.disposed:
                self.banner.show(display_message(e, operation), retry)
            return None
        finally:
            self._in_flight -= 1

    def dispose(self) -> None:
        """Tear the view down: abort in-flight requests and ignore late responses."""
        self.scope.close()
