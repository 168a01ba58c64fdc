"""
Dashboard shell view model.

The shell renders three independent badge surfaces (sidebar nav item, top
bar bell, overview cards) fed by one shared statistics store, a bell
dropdown preview of recent unread alerts, a recent-alerts panel of the
latest alerts whether read or not, and the sibling list of monitoring setups.
Marking an alert read from the dashboard reloads both lists and the badges.
"""

from dataclasses import dataclass
from typing import List, Optional

import structlog

from tcrs.core.config import settings
from tcrs.models.alert import Alert, AlertStatistics
from tcrs.models.monitoring import CreditMonitoringResponse
from tcrs.services.alert_service import AlertService
from tcrs.services.badge import AlertBadge
from tcrs.services.monitoring_service import MonitoringService
from tcrs.services.statistics_store import StatisticsStore, Subscription
from tcrs.views.base import View

logger = structlog.get_logger(__name__)


class BadgeSurface:
    """One place a badge is drawn; it only ever holds the latest projection."""

    def __init__(self, name: str):
        self.name = name
        self.badge = AlertBadge.empty()
        self.updates = 0

    def update(self, statistics: AlertStatistics) -> None:
        self.badge = AlertBadge.from_statistics(statistics)
        self.updates += 1


@dataclass(frozen=True)
class OverviewCards:
    active_monitoring: int
    unread_alerts: int
    total_alerts: int
    high_priority_alerts: int
    critical_alerts: int
    recent_alerts: int

    @classmethod
    def from_statistics(cls, statistics: AlertStatistics) -> "OverviewCards":
        return cls(
            active_monitoring=statistics.active_monitoring,
            unread_alerts=statistics.unread_alerts,
            total_alerts=statistics.total_alerts,
            high_priority_alerts=statistics.high_priority_alerts,
            critical_alerts=statistics.critical_alerts,
            recent_alerts=statistics.recent_alerts,
        )


class DashboardShell(View):

    name = "dashboard"

    def __init__(
        self,
        alert_service: AlertService,
        monitoring_service: MonitoringService,
        statistics_store: StatisticsStore,
        preview_size: Optional[int] = None,
    ):
        super().__init__()
        self.alert_service = alert_service
        self.monitoring_service = monitoring_service
        self.statistics_store = statistics_store
        self.preview_size = preview_size or settings.BELL_PREVIEW_SIZE

        self.sidebar = BadgeSurface("sidebar")
        self.bell = BadgeSurface("bell")
        self.overview: Optional[OverviewCards] = None

        self.bell_preview: List[Alert] = []
        self.recent_alerts: List[Alert] = []
        self.monitoring_setups: List[CreditMonitoringResponse] = []

        self._subscriptions: List[Subscription] = []

    async def mount(self) -> None:
        """Subscribe every surface and load the dashboard lists."""
        for listener in (self.sidebar.update, self.bell.update, self._update_overview):
            self._subscriptions.append(await self.statistics_store.subscribe(listener))
        await self.load()

    def _update_overview(self, statistics: AlertStatistics) -> None:
        self.overview = OverviewCards.from_statistics(statistics)

    async def load(self) -> bool:
        setups = await self._call(
            self.monitoring_service.list_mine(0, settings.MONITORING_PAGE_SIZE),
            "Load monitoring setups",
            retry=self._reload,
        )
        if setups is None:
            return False
        self.monitoring_setups = setups.items

        ok = await self.load_recent_alerts()
        ok = await self.load_bell_preview() and ok
        self.loaded = True
        return ok

    async def _reload(self) -> None:
        await self.load()

    async def load_bell_preview(self) -> bool:
        """Most recent unread alerts for the bell dropdown."""
        preview = await self._call(
            self.alert_service.fetch_alerts(0, self.preview_size, True),
            "Load unread alerts",
            retry=self._reload_preview,
        )
        if preview is None:
            return False
        self.bell_preview = preview.items
        return True

    async def _reload_preview(self) -> None:
        await self.load_bell_preview()

    async def load_recent_alerts(self) -> bool:
        """Latest alerts whether read or not, for the recent-alerts panel."""
        recent = await self._call(
            self.alert_service.fetch_alerts(0, self.preview_size, False),
            "Load recent alerts",
            retry=self._reload_recent,
        )
        if recent is None:
            return False
        self.recent_alerts = recent.items
        return True

    async def _reload_recent(self) -> None:
        await self.load_recent_alerts()

    async def mark_read(self, alert_id: int) -> bool:
        """Mark an alert read, then bring the lists and every badge up to date."""
        result = await self._call(self.alert_service.mark_read(alert_id), "Mark alert read")
        if result is None:
            return False
        await self.load()
        if not self.disposed:
            await self.statistics_store.refresh()
        logger.info("Dashboard alert marked read", alert_id=alert_id)
        return True

    async def refresh_badges(self) -> None:
        """Pull a fresh snapshot now rather than waiting for the next poll."""
        await self.statistics_store.refresh()

    @property
    def statistics_error(self) -> Optional[str]:
        return self.statistics_store.error

    def dispose(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()
        super().dispose()
        logger.debug("Dashboard disposed")
