"""
Alert detail view model.
"""

from typing import Any, Optional

import structlog

from tcrs.core.config import settings
from tcrs.models.alert import Alert
from tcrs.services.alert_service import AlertService
from tcrs.views.base import View

logger = structlog.get_logger(__name__)

NOT_FOUND_MESSAGE = "Alert not found"


class AlertDetailView(View):
    """
    Single alert, located by scanning the first page of alerts.

    Opening an unread alert marks it read. Acknowledging replaces the local
    copy with the server's response and leaves the read flag as the server
    reports it.
    """

    name = "alert_detail"

    def __init__(self, alert_service: AlertService, scan_size: Optional[int] = None):
        super().__init__()
        self.alert_service = alert_service
        self.scan_size = scan_size or settings.DETAIL_SCAN_SIZE
        self.alert_id: Optional[int] = None
        self.alert: Optional[Alert] = None
        self.acknowledging = False

    async def open(self, alert_id: int) -> bool:
        self.alert_id = alert_id
        found = await self._call(
            self.alert_service.fetch_alerts(0, self.scan_size, False),
            "Load alert",
            retry=self._reopen,
        )
        if found is None:
            return False

        alert = next((a for a in found.items if a.id == alert_id), None)
        if alert is None:
            self.banner.show(NOT_FOUND_MESSAGE)
            return False

        self.alert = alert
        self.loaded = True

        if not alert.is_read:
            updated = await self._call(self.alert_service.mark_read(alert_id), "Mark alert read")
            if updated is not None:
                self.alert = updated
        return True

    async def _reopen(self) -> None:
        if self.alert_id is not None:
            await self.open(self.alert_id)

    async def acknowledge(self, notes: Optional[str] = None) -> bool:
        if self.alert is None:
            return False

        self.acknowledging = True
        try:
            updated = await self._call(self.alert_service.acknowledge(self.alert.id, notes), "Acknowledge alert")
        finally:
            if not self.disposed:
                self.acknowledging = False
        if updated is None:
            return False

        self.alert = updated
        logger.info("Alert detail acknowledged", alert_id=updated.id)
        return True

    @property
    def details(self) -> Optional[Any]:
        return self.alert.parsed_details if self.alert else None

    @property
    def related_link(self) -> Optional[str]:
        return self.alert.related_link if self.alert else None

    @property
    def can_acknowledge(self) -> bool:
        return self.alert is not None and not self.alert.is_acknowledged
