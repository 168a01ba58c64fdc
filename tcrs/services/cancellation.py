"""
Request cancellation tied to a view's lifetime.

Each view owns one CancelScope. Requests run as tasks inside the scope;
closing the scope cancels whatever is still in flight, which aborts the
underlying HTTP request, and the awaiting caller gets RequestCancelled
instead of a result it must not apply.
"""

import asyncio
from typing import Awaitable, Set, TypeVar

import structlog

from tcrs.core.errors import RequestCancelled

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class CancelScope:

    def __init__(self, name: str = "view"):
        self.name = name
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Await a request inside this scope.

        Raises:
            RequestCancelled: The scope was closed before or while the request ran
        """
        if self._closed:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise RequestCancelled()

        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)
        try:
            return await task
        except asyncio.CancelledError:
            # Only cancellations caused by close() become RequestCancelled
            if self._closed and task.cancelled():
                raise RequestCancelled() from None
            raise
        finally:
            self._tasks.discard(task)

    def close(self) -> None:
        """Cancel every in-flight request; later runs fail immediately."""
        if self._closed:
            return
        self._closed = True
        pending = [task for task in self._tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            logger.info("Cancelled in-flight requests", scope=self.name, count=len(pending))
