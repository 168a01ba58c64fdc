"""
Shared alert statistics store.

One store per process keeps every badge surface (sidebar, bell, overview
cards) on the same snapshot:

- the first subscriber starts a single polling job and triggers a fetch
- every successful fetch fans out to all subscribers
- the last unsubscriber stops polling and cancels any fetch in flight

A failed poll keeps the previous snapshot and records a display error.
The store is still not transactionally tied to the alert list; a badge may
trail a mutation until the next poll or an explicit refresh().
"""

import asyncio
from typing import Callable, List, Optional

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from tcrs.core.config import settings
from tcrs.core.errors import TcrsError, display_message
from tcrs.models.alert import AlertStatistics
from tcrs.services.alert_service import AlertService
from tcrs.services.badge import AlertBadge

logger = structlog.get_logger(__name__)

POLL_JOB_ID = "refresh_alert_statistics"

Listener = Callable[[AlertStatistics], None]


class Subscription:
    """Handle returned by StatisticsStore.subscribe()."""

    def __init__(self, store: "StatisticsStore", listener: Listener):
        self.store = store
        self.listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self.store._remove(self)


class StatisticsStore:

    def __init__(self, alert_service: AlertService, poll_interval: Optional[int] = None):
        self.alert_service = alert_service
        self.poll_interval = poll_interval or settings.STATISTICS_POLL_INTERVAL
        self._subscriptions: List[Subscription] = []
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._inflight: Optional[asyncio.Task] = None
        self._snapshot: Optional[AlertStatistics] = None
        self._snapshot_seq = 0
        self._request_seq = 0
        self.error: Optional[str] = None
        self.fetch_count = 0

    @property
    def snapshot(self) -> Optional[AlertStatistics]:
        return self._snapshot

    @property
    def badge(self) -> AlertBadge:
        return AlertBadge.from_statistics(self._snapshot)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    @property
    def polling(self) -> bool:
        return self._scheduler is not None and self._scheduler.get_job(POLL_JOB_ID) is not None

    async def subscribe(self, listener: Listener) -> Subscription:
        """
        Register a listener for new snapshots.

        The first subscriber starts polling and waits for the initial fetch;
        later subscribers receive the current snapshot straight away.
        """
        subscription = Subscription(self, listener)
        self._subscriptions.append(subscription)

        if len(self._subscriptions) == 1:
            self._start_polling()
            await self.refresh()
        elif self._snapshot is not None:
            self._deliver(subscription, self._snapshot)

        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
        if not self._subscriptions:
            self._stop_polling()

    async def refresh(self) -> Optional[AlertStatistics]:
        """
        Fetch a new snapshot now.

        Concurrent callers share the request already in flight. Returns the
        current snapshot, which is the previous one if the fetch failed.
        """
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._fetch())
        inflight = self._inflight
        try:
            await asyncio.shield(inflight)
        except asyncio.CancelledError:
            # Polling was torn down underneath us; the caller itself was not cancelled
            if not inflight.cancelled():
                raise
        return self._snapshot

    async def _fetch(self) -> None:
        self._request_seq += 1
        seq = self._request_seq
        try:
            statistics = await self.alert_service.fetch_statistics()
        except TcrsError as e:
            self.error = display_message(e, "Load alert statistics")
            logger.warning("Statistics refresh failed, keeping previous snapshot", error=self.error)
            return
        self.fetch_count += 1

        if seq < self._snapshot_seq:
            logger.debug("Discarding stale statistics response", seq=seq, current=self._snapshot_seq)
            return

        self._snapshot_seq = seq
        self._snapshot = statistics
        self.error = None
        for subscription in list(self._subscriptions):
            self._deliver(subscription, statistics)

    def _deliver(self, subscription: Subscription, statistics: AlertStatistics) -> None:
        try:
            subscription.listener(statistics)
        except Exception as e:
            logger.error("Statistics listener failed", error_type=type(e).__name__, error=str(e))

    async def _poll(self) -> None:
        logger.info("Running scheduled job: refresh_alert_statistics")
        await self.refresh()

    def _start_polling(self) -> None:
        if self._scheduler is not None:
            return

        logger.info("Starting statistics polling", interval_seconds=self.poll_interval)
        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self._poll,
            trigger=IntervalTrigger(seconds=self.poll_interval),
            id=POLL_JOB_ID,
            name="Refresh alert statistics",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()

    def _stop_polling(self) -> None:
        if self._scheduler is None:
            return

        logger.info("Stopping statistics polling")
        self._scheduler.remove_job(POLL_JOB_ID)
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()


_shared_store: Optional[StatisticsStore] = None


def get_statistics_store(alert_service: AlertService, poll_interval: Optional[int] = None) -> StatisticsStore:
    """
    Process-wide store, created on first use.

    Args:
        alert_service: Service the store fetches statistics through
        poll_interval: Seconds between polls; only applied when the store is created

    Returns:
        The shared StatisticsStore
    """
    global _shared_store
    if _shared_store is None:
        _shared_store = StatisticsStore(alert_service, poll_interval=poll_interval)
    return _shared_store


def reset_statistics_store() -> None:
    """Drop the process-wide store (stops its polling if still running)."""
    global _shared_store
    if _shared_store is not None:
        _shared_store._subscriptions.clear()
        _shared_store._stop_polling()
    _shared_store = None
