from datetime import datetime, timedelta, timezone

from tcrs.models.alert import AlertSeverity, AlertType
from tcrs.models.labels import (
    ALERT_SEVERITY_COLORS,
    ALERT_TYPE_LABELS,
    alert_type_label,
    format_timestamp,
    relative_time,
)


def test_every_alert_type_has_a_label():
    assert set(ALERT_TYPE_LABELS) == set(AlertType)
    assert alert_type_label(AlertType.NEW_TRADE_REFERENCE) == "New Trade Reference"


def test_unknown_alert_type_is_title_cased():
    assert alert_type_label("SANCTIONS_LIST_MATCH") == "Sanctions List Match"


def test_severity_colors_escalate():
    assert ALERT_SEVERITY_COLORS[AlertSeverity.LOW] == "gray"
    assert ALERT_SEVERITY_COLORS[AlertSeverity.CRITICAL] == "red"


def test_severity_ordering():
    assert AlertSeverity.LOW < AlertSeverity.MEDIUM < AlertSeverity.HIGH < AlertSeverity.CRITICAL
    assert max(AlertSeverity) is AlertSeverity.CRITICAL
    assert sorted([AlertSeverity.HIGH, AlertSeverity.LOW]) == [AlertSeverity.LOW, AlertSeverity.HIGH]


def test_format_timestamp():
    assert format_timestamp(datetime(2024, 3, 5, 14, 30)) == "Mar 5, 2024, 02:30 PM"


def test_relative_time():
    now = datetime(2024, 3, 5, 14, 30, tzinfo=timezone.utc)

    assert relative_time(now - timedelta(seconds=30), now) == "Just now"
    assert relative_time(now - timedelta(minutes=5), now) == "5 minutes ago"
    assert relative_time(now - timedelta(hours=3), now) == "3 hours ago"
    assert relative_time(now - timedelta(days=2), now) == "2 days ago"
    assert relative_time(now - timedelta(days=10), now) == "Feb 24, 2024, 02:30 PM"
