"""Recovery-plan timeline data types."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


class TimelineActionType(Enum):
    DG_RETENTION = "dg_retention"
    REQUEST_QUOTES = "request_quotes"
    SELECT_QUOTE = "select_quote"
    START_RENOVATION = "start_renovation"
    TAKE_PHOTOS = "take_photos"
    MARK_READY = "mark_ready"
    CREATE_LISTING = "create_listing"
    CUSTOM = "custom"


class TimelineItemStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class TimelineItem:
    day_offset: int
    action_type: TimelineActionType
    scheduled_date: date
    title: str = ""
    status: TimelineItemStatus = TimelineItemStatus.PENDING
    completed_date: Optional[date] = None


@dataclass(frozen=True)
class Timeline:
    start_date: date
    items: tuple[TimelineItem, ...] = ()

    @property
    def total_days(self) -> int:
        if not self.items:
            return 0
        return max(item.day_offset for item in self.items)

    @property
    def estimated_ready_date(self) -> date:
        ready = [i for i in self.items if i.action_type == TimelineActionType.MARK_READY]
        if ready:
            return ready[0].scheduled_date
        return self.start_date
