"""
Alert fetcher: paged alert queries, statistics, mark-read and acknowledge.
"""

from typing import Optional

import structlog

from tcrs.core.config import settings
from tcrs.core.errors import ValidationError
from tcrs.models.alert import Alert, AlertStatistics, Page
from tcrs.services.api_client import ApiClient

logger = structlog.get_logger(__name__)

ALERTS_PATH = "/api/credit-monitoring/alerts"
STATISTICS_PATH = "/api/credit-monitoring/statistics"
FAILURE_MESSAGE = "Credit monitoring operation failed"


class AlertService:

    def __init__(self, client: ApiClient):
        self.client = client

    async def fetch_alerts(self, page: int = 0, page_size: Optional[int] = None, unread_only: bool = False) -> Page[Alert]:
        """
        Fetch one page of the current user's alerts.

        A page past the end comes back empty rather than failing.

        Args:
            page: Zero-based page index
            page_size: Items per page (defaults to DEFAULT_PAGE_SIZE)
            unread_only: Restrict the query to unread alerts

        Returns:
            Page of alerts
        """
        if page_size is None:
            page_size = settings.DEFAULT_PAGE_SIZE
        if page < 0:
            raise ValidationError("Page index must not be negative")
        if page_size <= 0:
            raise ValidationError("Page size must be positive")

        data = await self.client.get(
            ALERTS_PATH,
            params={
                "page": page,
                "size": page_size,
                "unreadOnly": "true" if unread_only else "false",
            },
            failure_message=FAILURE_MESSAGE,
        )
        result = Page[Alert].model_validate(data or {})
        logger.info(
            "Fetched alerts",
            page=page,
            size=page_size,
            unread_only=unread_only,
            count=len(result.items),
            total=result.total_elements,
        )
        return result

    async def fetch_statistics(self) -> AlertStatistics:
        """Fetch the aggregate alert statistics snapshot."""
        data = await self.client.get(STATISTICS_PATH, failure_message=FAILURE_MESSAGE)
        stats = AlertStatistics.model_validate(data or {})
        logger.info("Fetched alert statistics", unread=stats.unread_alerts, total=stats.total_alerts)
        return stats

    async def mark_read(self, alert_id: int) -> Alert:
        """Mark an alert read. Safe to repeat."""
        data = await self.client.post(f"{ALERTS_PATH}/{alert_id}/mark-read", failure_message=FAILURE_MESSAGE)
        alert = Alert.model_validate(data)
        logger.info("Alert marked read", alert_id=alert_id)
        return alert

    async def acknowledge(self, alert_id: int, notes: Optional[str] = None) -> Alert:
        """
        Acknowledge an alert with optional notes.

        The server rejects a second acknowledgement with a ConflictError;
        nothing here prevents a double submission.
        """
        data = await self.client.post(
            f"{ALERTS_PATH}/{alert_id}/acknowledge",
            json={"notes": notes or ""},
            failure_message=FAILURE_MESSAGE,
        )
        alert = Alert.model_validate(data)
        logger.info("Alert acknowledged", alert_id=alert_id, acknowledged_by=alert.acknowledged_by)
        return alert

    async def find_alert(self, alert_id: int, scan_size: Optional[int] = None) -> Optional[Alert]:
        """
        Look an alert up by id.

        There is no by-id endpoint, so this scans the first page of alerts.
        """
        page = await self.fetch_alerts(0, scan_size or settings.DETAIL_SCAN_SIZE, False)
        for alert in page.items:
            if alert.id == alert_id:
                return alert
        logger.info("Alert not found in scanned page", alert_id=alert_id, scanned=len(page.items))
        return None
