"""
Credit monitoring setup management.
"""

from typing import Optional

import structlog

from tcrs.core.config import settings
from tcrs.models.alert import Page
from tcrs.models.monitoring import CreditMonitoringRequest, CreditMonitoringResponse
from tcrs.services.api_client import ApiClient

logger = structlog.get_logger(__name__)

MONITORING_PATH = "/api/credit-monitoring"
FAILURE_MESSAGE = "Credit monitoring operation failed"


class MonitoringService:

    def __init__(self, client: ApiClient):
        self.client = client

    async def setup(self, request: CreditMonitoringRequest) -> CreditMonitoringResponse:
        """Create a monitoring setup after client-side validation."""
        request.validate_for_submit()
        data = await self.client.post(MONITORING_PATH, json=request.to_wire(), failure_message=FAILURE_MESSAGE)
        created = CreditMonitoringResponse.model_validate(data)
        logger.info("Monitoring setup created", monitoring_id=created.id, business_id=created.business_id)
        return created

    async def update(self, monitoring_id: int, request: CreditMonitoringRequest) -> CreditMonitoringResponse:
        request.validate_for_submit()
        data = await self.client.put(
            f"{MONITORING_PATH}/{monitoring_id}",
            json=request.to_wire(),
            failure_message=FAILURE_MESSAGE,
        )
        updated = CreditMonitoringResponse.model_validate(data)
        logger.info("Monitoring setup updated", monitoring_id=monitoring_id)
        return updated

    async def list_mine(self, page: int = 0, page_size: Optional[int] = None) -> Page[CreditMonitoringResponse]:
        data = await self.client.get(
            f"{MONITORING_PATH}/my-monitoring",
            params={"page": page, "size": page_size or settings.MONITORING_PAGE_SIZE},
            failure_message=FAILURE_MESSAGE,
        )
        return Page[CreditMonitoringResponse].model_validate(data or {})

    async def deactivate(self, monitoring_id: int) -> str:
        """Soft-delete a setup. Returns the server's confirmation message."""
        data = await self.client.delete(f"{MONITORING_PATH}/{monitoring_id}", failure_message=FAILURE_MESSAGE)
        logger.info("Monitoring setup deactivated", monitoring_id=monitoring_id)
        return data if isinstance(data, str) else "Monitoring deactivated"
