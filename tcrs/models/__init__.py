"""
Data models for the credit-monitoring alert client.

This package contains the pydantic models for:
- Alerts, alert statistics and paginated results
- Credit monitoring setups
- Display label and colour tables

All wire models inherit from WireModel, which maps snake_case fields onto
the API's camelCase names.
"""

from .alert import (
    Alert,
    AlertSeverity,
    AlertState,
    AlertStatistics,
    AlertType,
    Page,
    WireModel,
)
from .monitoring import (
    CreditMonitoringRequest,
    CreditMonitoringResponse,
    MonitoringType,
    NotificationFrequency,
)

__all__ = [
    # Alert models
    "Alert",
    "AlertSeverity",
    "AlertState",
    "AlertStatistics",
    "AlertType",
    "Page",
    "WireModel",

    # Monitoring models
    "CreditMonitoringRequest",
    "CreditMonitoringResponse",
    "MonitoringType",
    "NotificationFrequency",
]
