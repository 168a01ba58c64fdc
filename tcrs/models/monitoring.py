"""
Credit monitoring setup models.

A monitoring setup is the user-configured rule set the server evaluates to
produce alerts. The alert subsystem never mutates it.
"""

import enum
from datetime import datetime
from typing import Optional

from tcrs.core.errors import ValidationError
from tcrs.models.alert import WireModel


class MonitoringType(str, enum.Enum):
    """Monitoring scope enumeration."""
    COMPREHENSIVE = "COMPREHENSIVE"
    CREDIT_SCORE_ONLY = "CREDIT_SCORE_ONLY"
    PAYMENT_BEHAVIOR = "PAYMENT_BEHAVIOR"
    TRADE_REFERENCES = "TRADE_REFERENCES"
    BUSINESS_PROFILE = "BUSINESS_PROFILE"
    CUSTOM = "CUSTOM"


class NotificationFrequency(str, enum.Enum):
    """How often notifications for a setup are delivered."""
    IMMEDIATE = "IMMEDIATE"
    HOURLY = "HOURLY"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"


class CreditMonitoringRequest(WireModel):
    """Body for creating or updating a monitoring setup."""

    business_id: int
    monitoring_name: str
    monitoring_type: MonitoringType = MonitoringType.COMPREHENSIVE

    # Thresholds
    credit_score_threshold_min: Optional[int] = 300
    credit_score_threshold_max: Optional[int] = 850
    credit_score_change_threshold: Optional[int] = 25
    payment_delay_threshold_days: Optional[int] = 30
    overdue_amount_threshold: Optional[float] = 50000

    # Alert toggles
    new_trade_reference_alert: bool = True
    new_payment_history_alert: bool = True
    credit_report_generation_alert: bool = True
    business_profile_change_alert: bool = True

    # Notification channels
    email_notifications: bool = True
    sms_notifications: bool = False
    in_app_notifications: bool = True
    notification_frequency: NotificationFrequency = NotificationFrequency.IMMEDIATE

    notes: Optional[str] = None

    def validate_for_submit(self) -> None:
        """Required-field checks run before the request is sent."""
        if self.business_id <= 0:
            raise ValidationError("Please select a business to monitor")
        if not self.monitoring_name.strip():
            raise ValidationError("Monitoring name is required")
        if (
            self.credit_score_threshold_min is not None
            and self.credit_score_threshold_max is not None
            and self.credit_score_threshold_min > self.credit_score_threshold_max
        ):
            raise ValidationError("Minimum credit score threshold cannot exceed the maximum")


class CreditMonitoringResponse(WireModel):
    """A monitoring setup as stored by the server."""

    id: int
    business_id: int
    business_name: str = ""
    monitoring_name: str
    monitoring_type: MonitoringType
    is_active: bool = True

    credit_score_threshold_min: Optional[int] = None
    credit_score_threshold_max: Optional[int] = None
    credit_score_change_threshold: Optional[int] = None
    payment_delay_threshold_days: Optional[int] = None
    overdue_amount_threshold: Optional[float] = None

    new_trade_reference_alert: bool = False
    new_payment_history_alert: bool = False
    credit_report_generation_alert: bool = False
    business_profile_change_alert: bool = False

    email_notifications: bool = False
    sms_notifications: bool = False
    in_app_notifications: bool = False
    notification_frequency: NotificationFrequency = NotificationFrequency.IMMEDIATE

    last_check_date: Optional[datetime] = None
    last_alert_date: Optional[datetime] = None
    total_alerts_sent: int = 0
    last_credit_score: Optional[int] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
