import pytest

from tcrs.models.alert import AlertStatistics
from tcrs.services.badge import AlertBadge


@pytest.mark.parametrize(
    "unread, label",
    [(0, ""), (1, "1"), (42, "42"), (99, "99"), (100, "99+"), (150, "99+")],
)
def test_badge_label(unread, label):
    badge = AlertBadge.from_statistics(AlertStatistics(unread_alerts=unread))
    assert badge.label == label
    assert badge.visible == (unread > 0)


def test_high_priority_uses_critical_and_high():
    stats = AlertStatistics(unread_alerts=3, critical_alerts=1, high_alerts=2, medium_alerts=7)
    badge = AlertBadge.from_statistics(stats)

    assert badge.high_priority
    assert badge.high_priority_count == 3


def test_medium_and_low_are_not_high_priority():
    badge = AlertBadge.from_statistics(AlertStatistics(unread_alerts=9, medium_alerts=4, low_alerts=5))
    assert not badge.high_priority


def test_no_snapshot_gives_empty_badge():
    badge = AlertBadge.from_statistics(None)

    assert badge == AlertBadge.empty()
    assert badge.label == ""
    assert not badge.visible
    assert not badge.high_priority


def test_badge_is_a_pure_projection():
    stats = AlertStatistics.model_validate({"unreadAlerts": 150, "criticalAlerts": 2})
    assert AlertBadge.from_statistics(stats) == AlertBadge.from_statistics(stats)
    assert AlertBadge.from_statistics(stats).label == "99+"
