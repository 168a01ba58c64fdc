"""
Alert list view model.

Shows one server page of alerts. Severity, type and search filters narrow
only the page already fetched; they never re-query and never change the
server totals. Every mutation is followed by a re-fetch of the current page
so the server stays the source of truth.
"""

from typing import List, Optional, Union

import structlog

from tcrs.core.config import settings
from tcrs.models.alert import Alert, AlertSeverity, AlertType, Page
from tcrs.services.alert_service import AlertService
from tcrs.services.statistics_store import StatisticsStore
from tcrs.views.base import View

logger = structlog.get_logger(__name__)

NO_UNREAD_MESSAGE = "You don't have any unread alerts at the moment."
NO_MATCH_MESSAGE = "No alerts match your current filters."


class AlertListView(View):

    name = "alert_list"

    def __init__(
        self,
        alert_service: AlertService,
        page_size: Optional[int] = None,
        unread_only: bool = False,
        statistics_store: Optional[StatisticsStore] = None,
    ):
        super().__init__()
        self.alert_service = alert_service
        self.page_size = page_size or settings.DEFAULT_PAGE_SIZE
        self.unread_only = unread_only
        # Optional: refresh badges after a mutation instead of waiting for the next poll
        self.statistics_store = statistics_store

        self.page: Optional[Page[Alert]] = None
        self.current_page = 0

        self.severity: Optional[AlertSeverity] = None
        self.alert_type: Optional[Union[AlertType, str]] = None
        self.search = ""

    # Loading

    async def load(self, page: Optional[int] = None) -> bool:
        """Fetch a page (the current one by default). Returns False on failure."""
        if page is not None:
            self.current_page = page
        target = self.current_page

        result = await self._call(
            self.alert_service.fetch_alerts(target, self.page_size, self.unread_only),
            "Load alerts",
            retry=self._reload,
        )
        if result is None:
            return False

        self.page = result
        self.loaded = True
        logger.debug("Alert list rendered", page=target, count=len(result.items))
        return True

    async def _reload(self) -> None:
        await self.load()

    async def next_page(self) -> bool:
        if not self.has_next:
            return False
        return await self.load(self.current_page + 1)

    async def previous_page(self) -> bool:
        if not self.has_previous:
            return False
        return await self.load(self.current_page - 1)

    async def set_unread_only(self, unread_only: bool) -> bool:
        """Toggling the unread query restarts from the first page."""
        self.unread_only = unread_only
        return await self.load(0)

    # Server page

    @property
    def alerts(self) -> List[Alert]:
        return self.page.items if self.page else []

    @property
    def total_elements(self) -> int:
        return self.page.total_elements if self.page else 0

    @property
    def total_pages(self) -> int:
        return self.page.total_pages if self.page else 0

    @property
    def has_next(self) -> bool:
        return bool(self.page and self.page.has_next)

    @property
    def has_previous(self) -> bool:
        return bool(self.page and self.page.has_previous)

    # Client-side filters

    def set_filters(
        self,
        severity: Optional[AlertSeverity] = None,
        alert_type: Optional[Union[AlertType, str]] = None,
        search: str = "",
    ) -> None:
        self.severity = severity
        self.alert_type = alert_type
        self.search = search.strip()

    def clear_filters(self) -> None:
        self.set_filters()

    @property
    def visible_alerts(self) -> List[Alert]:
        """The current page narrowed by the active filters."""
        visible = self.alerts
        if self.severity:
            visible = [a for a in visible if a.severity_level == self.severity]
        if self.alert_type:
            visible = [a for a in visible if a.alert_type == self.alert_type]
        if self.search:
            visible = [a for a in visible if a.matches(self.search)]
        return visible

    @property
    def empty_message(self) -> Optional[str]:
        if self.visible_alerts:
            return None
        return NO_UNREAD_MESSAGE if self.unread_only else NO_MATCH_MESSAGE

    # Page-local counters (not global totals)

    @property
    def unread_on_page(self) -> int:
        return sum(1 for a in self.alerts if not a.is_read)

    @property
    def high_priority_on_page(self) -> int:
        return sum(1 for a in self.alerts if a.is_high_priority)

    @property
    def acknowledged_on_page(self) -> int:
        return sum(1 for a in self.alerts if a.is_acknowledged)

    # Mutations

    async def mark_read(self, alert_id: int) -> bool:
        result = await self._call(self.alert_service.mark_read(alert_id), "Mark alert read")
        if result is None:
            return False
        await self._after_mutation()
        return True

    async def acknowledge(self, alert_id: int, notes: Optional[str] = None) -> bool:
        result = await self._call(self.alert_service.acknowledge(alert_id, notes), "Acknowledge alert")
        if result is None:
            return False
        await self._after_mutation()
        return True

    async def _after_mutation(self) -> None:
        await self.load()
        if self.statistics_store is not None and not self.disposed:
            await self.statistics_store.refresh()
