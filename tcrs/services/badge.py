"""
Alert badge projection.

A badge is derived purely from the latest statistics snapshot; it holds no
state of its own and is recomputed whenever the snapshot changes.
"""

from dataclasses import dataclass
from typing import Optional

from tcrs.models.alert import AlertStatistics

BADGE_CAP = 99


@dataclass(frozen=True)
class AlertBadge:
    unread_count: int
    high_priority_count: int

    @classmethod
    def from_statistics(cls, statistics: Optional[AlertStatistics]) -> "AlertBadge":
        if statistics is None:
            return cls.empty()
        return cls(
            unread_count=statistics.unread_alerts,
            high_priority_count=statistics.high_priority_alerts,
        )

    @classmethod
    def empty(cls) -> "AlertBadge":
        return cls(unread_count=0, high_priority_count=0)

    @property
    def high_priority(self) -> bool:
        return self.high_priority_count > 0

    @property
    def visible(self) -> bool:
        return self.unread_count > 0

    @property
    def label(self) -> str:
        """Badge text: empty when nothing is unread, capped at '99+'."""
        if self.unread_count <= 0:
            return ""
        if self.unread_count > BADGE_CAP:
            return f"{BADGE_CAP}+"
        return str(self.unread_count)
