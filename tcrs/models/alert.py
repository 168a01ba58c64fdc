"""
Alert models.

Alerts are server-owned; the client only holds cached copies of what the
credit-monitoring API returned. Field names are snake_case here and
camelCase on the wire.
"""

import enum
import json
from datetime import datetime
from typing import Annotated, Any, Dict, Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for every model exchanged with the API."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AlertType(str, enum.Enum):
    """Alert category enumeration."""
    CREDIT_SCORE_CHANGE = "CREDIT_SCORE_CHANGE"
    CREDIT_SCORE_THRESHOLD = "CREDIT_SCORE_THRESHOLD"
    PAYMENT_DELAY = "PAYMENT_DELAY"
    OVERDUE_AMOUNT = "OVERDUE_AMOUNT"
    NEW_TRADE_REFERENCE = "NEW_TRADE_REFERENCE"
    TRADE_REFERENCE_VERIFIED = "TRADE_REFERENCE_VERIFIED"
    NEW_PAYMENT_HISTORY = "NEW_PAYMENT_HISTORY"
    CREDIT_REPORT_GENERATED = "CREDIT_REPORT_GENERATED"
    BUSINESS_PROFILE_UPDATED = "BUSINESS_PROFILE_UPDATED"
    RISK_LEVEL_CHANGE = "RISK_LEVEL_CHANGE"
    CREDIT_LIMIT_CHANGE = "CREDIT_LIMIT_CHANGE"
    DISPUTE_REPORTED = "DISPUTE_REPORTED"
    SYSTEM_ALERT = "SYSTEM_ALERT"


class AlertSeverity(str, enum.Enum):
    """Alert severity, ordered LOW < MEDIUM < HIGH < CRITICAL."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    # str already compares lexically, so all four operators are overridden
    def __lt__(self, other):
        if isinstance(other, AlertSeverity):
            return self.rank < other.rank
        return NotImplemented

    def __le__(self, other):
        if isinstance(other, AlertSeverity):
            return self.rank <= other.rank
        return NotImplemented

    def __gt__(self, other):
        if isinstance(other, AlertSeverity):
            return self.rank > other.rank
        return NotImplemented

    def __ge__(self, other):
        if isinstance(other, AlertSeverity):
            return self.rank >= other.rank
        return NotImplemented


_SEVERITY_RANK = {
    AlertSeverity.LOW: 0,
    AlertSeverity.MEDIUM: 1,
    AlertSeverity.HIGH: 2,
    AlertSeverity.CRITICAL: 3,
}


class AlertState(str, enum.Enum):
    """Client-observed projection of the read/acknowledged flags."""
    UNREAD_UNACKNOWLEDGED = "unread_unacknowledged"
    READ_UNACKNOWLEDGED = "read_unacknowledged"
    UNREAD_ACKNOWLEDGED = "unread_acknowledged"
    READ_ACKNOWLEDGED = "read_acknowledged"

    @property
    def is_terminal(self) -> bool:
        return self is AlertState.READ_ACKNOWLEDGED


class Alert(WireModel):
    """A credit-monitoring alert as returned by the API."""

    id: int
    business_id: Optional[int] = None
    business_name: str = ""
    alert_number: str
    # Unknown categories from a newer server are kept as raw strings
    alert_type: Annotated[Union[AlertType, str], Field(union_mode="left_to_right")]
    severity_level: AlertSeverity
    title: str
    description: str = ""
    details: Optional[Any] = None
    previous_value: Optional[str] = None
    current_value: Optional[str] = None
    threshold_value: Optional[str] = None
    change_amount: Optional[float] = None
    change_percentage: Optional[float] = None
    is_read: bool = False
    is_acknowledged: bool = False
    acknowledged_by: Optional[str] = None
    acknowledged_date: Optional[datetime] = None
    acknowledgment_notes: Optional[str] = None
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[int] = None
    expires_at: Optional[datetime] = None
    created_at: datetime

    @property
    def state(self) -> AlertState:
        if self.is_acknowledged:
            return AlertState.READ_ACKNOWLEDGED if self.is_read else AlertState.UNREAD_ACKNOWLEDGED
        return AlertState.READ_UNACKNOWLEDGED if self.is_read else AlertState.UNREAD_UNACKNOWLEDGED

    @property
    def is_high_priority(self) -> bool:
        return self.severity_level >= AlertSeverity.HIGH

    @property
    def parsed_details(self) -> Optional[Any]:
        """The details payload decoded from its JSON string form, or None."""
        if self.details is None or self.details == "":
            return None
        if not isinstance(self.details, str):
            return self.details
        try:
            return json.loads(self.details)
        except ValueError:
            return None

    @property
    def related_link(self) -> Optional[str]:
        """Navigation path for the related entity; the entity itself is never loaded."""
        if not self.related_entity_type or not self.related_entity_id:
            return None
        return f"/dashboard/{self.related_entity_type.lower()}/{self.related_entity_id}"

    def matches(self, search: str) -> bool:
        """Case-insensitive match on title, description and business name."""
        needle = search.lower()
        return (
            needle in self.title.lower()
            or needle in self.description.lower()
            or needle in self.business_name.lower()
        )


class AlertStatistics(WireModel):
    """Aggregate alert counts; refreshed independently of the alert list."""

    total_alerts: int = 0
    unread_alerts: int = 0
    unacknowledged_alerts: int = 0
    active_monitoring: int = 0
    critical_alerts: int = 0
    high_alerts: int = 0
    medium_alerts: int = 0
    low_alerts: int = 0
    recent_alerts: int = 0
    alert_type_distribution: Dict[str, int] = Field(default_factory=dict)

    @property
    def high_priority_alerts(self) -> int:
        return self.critical_alerts + self.high_alerts


T = TypeVar("T")


class Page(WireModel, Generic[T]):
    """One page of a server-paginated collection."""

    content: List[T] = Field(default_factory=list)
    total_elements: int = 0
    total_pages: int = 0
    number: int = 0
    size: int = 0
    has_next: bool = False
    has_previous: bool = False

    @property
    def items(self) -> List[T]:
        return self.content

    @property
    def page_index(self) -> int:
        return self.number

    @property
    def page_size(self) -> int:
        return self.size

    @property
    def is_empty(self) -> bool:
        return not self.content
