"""
Display lookup tables and formatting helpers for alert surfaces.
"""

from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping, Optional, Union

from tcrs.models.alert import AlertSeverity, AlertType
from tcrs.models.monitoring import MonitoringType, NotificationFrequency

ALERT_TYPE_LABELS: Mapping[AlertType, str] = MappingProxyType({
    AlertType.CREDIT_SCORE_CHANGE: "Credit Score Change",
    AlertType.CREDIT_SCORE_THRESHOLD: "Credit Score Threshold",
    AlertType.PAYMENT_DELAY: "Payment Delay",
    AlertType.OVERDUE_AMOUNT: "Overdue Amount",
    AlertType.NEW_TRADE_REFERENCE: "New Trade Reference",
    AlertType.TRADE_REFERENCE_VERIFIED: "Trade Reference Verified",
    AlertType.NEW_PAYMENT_HISTORY: "New Payment History",
    AlertType.CREDIT_REPORT_GENERATED: "Credit Report Generated",
    AlertType.BUSINESS_PROFILE_UPDATED: "Business Profile Updated",
    AlertType.RISK_LEVEL_CHANGE: "Risk Level Change",
    AlertType.CREDIT_LIMIT_CHANGE: "Credit Limit Change",
    AlertType.DISPUTE_REPORTED: "Dispute Reported",
    AlertType.SYSTEM_ALERT: "System Alert",
})

ALERT_SEVERITY_LABELS: Mapping[AlertSeverity, str] = MappingProxyType({
    AlertSeverity.LOW: "Low",
    AlertSeverity.MEDIUM: "Medium",
    AlertSeverity.HIGH: "High",
    AlertSeverity.CRITICAL: "Critical",
})

# Colour names rather than CSS classes: consumers pick their own palette
ALERT_SEVERITY_COLORS: Mapping[AlertSeverity, str] = MappingProxyType({
    AlertSeverity.LOW: "gray",
    AlertSeverity.MEDIUM: "yellow",
    AlertSeverity.HIGH: "orange",
    AlertSeverity.CRITICAL: "red",
})

MONITORING_TYPE_LABELS: Mapping[MonitoringType, str] = MappingProxyType({
    MonitoringType.COMPREHENSIVE: "Comprehensive Monitoring",
    MonitoringType.CREDIT_SCORE_ONLY: "Credit Score Only",
    MonitoringType.PAYMENT_BEHAVIOR: "Payment Behavior",
    MonitoringType.TRADE_REFERENCES: "Trade References",
    MonitoringType.BUSINESS_PROFILE: "Business Profile",
    MonitoringType.CUSTOM: "Custom Rules",
})

NOTIFICATION_FREQUENCY_LABELS: Mapping[NotificationFrequency, str] = MappingProxyType({
    NotificationFrequency.IMMEDIATE: "Immediate",
    NotificationFrequency.HOURLY: "Hourly Digest",
    NotificationFrequency.DAILY: "Daily Digest",
    NotificationFrequency.WEEKLY: "Weekly Summary",
})


def alert_type_label(alert_type: Union[AlertType, str]) -> str:
    """Label for an alert type; unknown raw values are title-cased."""
    if isinstance(alert_type, AlertType):
        return ALERT_TYPE_LABELS[alert_type]
    return str(alert_type).replace("_", " ").title()


def format_timestamp(value: datetime) -> str:
    """Format like 'Mar 5, 2024, 02:30 PM'."""
    return f"{value.strftime('%b')} {value.day}, {value.year}, {value.strftime('%I:%M %p')}"


def relative_time(value: datetime, now: Optional[datetime] = None) -> str:
    """
    Human readable age of a timestamp.

    Under a minute is 'Just now'; minutes, hours and days follow; a week or
    older falls back to the absolute timestamp.
    """
    if now is None:
        now = datetime.now(timezone.utc) if value.tzinfo else datetime.now()

    minutes = int((now - value).total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} minutes ago"

    hours = minutes // 60
    if hours < 24:
        return f"{hours} hours ago"

    days = hours // 24
    if days < 7:
        return f"{days} days ago"

    return format_timestamp(value)
