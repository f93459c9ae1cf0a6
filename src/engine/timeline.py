"""Recovery-plan timeline generator and progress tracking.

Default plan (7 days):

    day 0  deposit retention notice   (retention > 0)
    day 1  request quotes             (renovation items)
    day 2  select quote               (renovation items)
    day 3+ renovation                 (owner-side work; 2 days, +1 per 2 items beyond 2)
    day 6  take photos                (or the day after renovation ends)
    day 7  mark ready, create listing

With no owner-side work the plan collapses to a single "mark ready" on day 0.
"""

from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from src.engine.errors import InvalidInput, InvalidTransition
from src.models.timeline import (
    Timeline,
    TimelineActionType,
    TimelineItem,
    TimelineItemStatus,
)

RETENTION_DAY = 0
REQUEST_QUOTES_DAY = 1
SELECT_QUOTE_DAY = 2
RENOVATION_START_DAY = 3
PHOTOS_DAY = 6
MIN_RENOVATION_DAYS = 2

ACTION_TITLES: dict[TimelineActionType, str] = {
    TimelineActionType.DG_RETENTION: "Send deposit retention notice",
    TimelineActionType.REQUEST_QUOTES: "Request quotes from providers",
    TimelineActionType.SELECT_QUOTE: "Select quotes",
    TimelineActionType.START_RENOVATION: "Renovation works",
    TimelineActionType.TAKE_PHOTOS: "Take listing photos",
    TimelineActionType.MARK_READY: "Mark property ready to rent",
    TimelineActionType.CREATE_LISTING: "Publish rental listing",
    TimelineActionType.CUSTOM: "Custom action",
}

STATUS_ORDER: dict[TimelineItemStatus, int] = {
    TimelineItemStatus.PENDING: 0,
    TimelineItemStatus.IN_PROGRESS: 1,
    TimelineItemStatus.COMPLETED: 2,
}


def renovation_days(renovation_items_count: int) -> int:
    """2 days minimum, +1 day for every 2 items beyond the first 2."""
    extra_items = max(0, renovation_items_count - 2)
    return MIN_RENOVATION_DAYS + extra_items // 2


def _item(start: date, day_offset: int, action: TimelineActionType) -> TimelineItem:
    return TimelineItem(
        day_offset=day_offset,
        action_type=action,
        scheduled_date=start + timedelta(days=day_offset),
        title=ACTION_TITLES[action],
    )


def generate_timeline(
    plan_start_date: date,
    owner_budget: Decimal,
    renovation_items_count: int,
    retention_amount: Decimal = Decimal("0"),
) -> Timeline:
    """Build the ordered action plan for getting the unit back on the market.

    Args:
        plan_start_date: Day 0 of the plan.
        owner_budget: Owner budget bucket, i.e. the owner-borne vetusty cost
            (worn elements plus owner renovation shares). Tenant liability
            does not offset it: worn elements need work whoever pays.
        renovation_items_count: Renovation items that need quotes.
        retention_amount: Deposit retention; a notice is scheduled when > 0.
    """
    if renovation_items_count < 0:
        raise InvalidInput(f"Renovation item count must be >= 0, got {renovation_items_count}")
    if not owner_budget.is_finite() or owner_budget < 0:
        raise InvalidInput(f"Owner budget must be a non-negative amount, got {owner_budget}")

    items: list[TimelineItem] = []
    if retention_amount > 0:
        items.append(_item(plan_start_date, RETENTION_DAY, TimelineActionType.DG_RETENTION))

    has_renovations = renovation_items_count > 0
    if not has_renovations and owner_budget == 0:
        items.append(_item(plan_start_date, 0, TimelineActionType.MARK_READY))
        return Timeline(start_date=plan_start_date, items=tuple(items))

    if has_renovations:
        items.append(_item(plan_start_date, REQUEST_QUOTES_DAY, TimelineActionType.REQUEST_QUOTES))
        items.append(_item(plan_start_date, SELECT_QUOTE_DAY, TimelineActionType.SELECT_QUOTE))

    items.append(
        _item(plan_start_date, RENOVATION_START_DAY, TimelineActionType.START_RENOVATION)
    )
    renovation_end = RENOVATION_START_DAY + renovation_days(renovation_items_count) - 1
    photos_day = max(PHOTOS_DAY, renovation_end + 1)
    items.append(_item(plan_start_date, photos_day, TimelineActionType.TAKE_PHOTOS))
    items.append(_item(plan_start_date, photos_day + 1, TimelineActionType.MARK_READY))
    items.append(_item(plan_start_date, photos_day + 1, TimelineActionType.CREATE_LISTING))

    return Timeline(start_date=plan_start_date, items=tuple(items))


def regenerate_timeline(existing: Iterable[TimelineItem], fresh: Timeline) -> Timeline:
    """Replace a process's timeline with a freshly generated one.

    Items are matched by action type; progress already made on a matched item
    is carried over. Actions already started or completed are kept even
    when the fresh plan no longer needs them. If the schedule is unchanged
    the existing items are returned as they are, so regenerating never
    duplicates actions.
    """
    existing = list(existing)
    by_action = {item.action_type: item for item in existing}

    same_schedule = len(existing) == len(fresh.items) and all(
        (old.action_type, old.day_offset, old.scheduled_date)
        == (new.action_type, new.day_offset, new.scheduled_date)
        for old, new in zip(existing, fresh.items)
    )
    if same_schedule:
        return Timeline(start_date=fresh.start_date, items=tuple(existing))

    merged = []
    for item in fresh.items:
        previous = by_action.get(item.action_type)
        if previous is not None:
            item = replace(item, status=previous.status, completed_date=previous.completed_date)
        merged.append(item)

    planned = {item.action_type for item in fresh.items}
    merged.extend(
        item for item in existing
        if item.action_type not in planned and item.status != TimelineItemStatus.PENDING
    )
    merged.sort(key=lambda item: item.day_offset)
    return Timeline(start_date=fresh.start_date, items=tuple(merged))


def _advance(item: TimelineItem, target: TimelineItemStatus) -> TimelineItem:
    if STATUS_ORDER[target] < STATUS_ORDER[item.status]:
        raise InvalidTransition(
            f"Timeline item {item.action_type.value} cannot go from "
            f"{item.status.value} back to {target.value}"
        )
    return replace(item, status=target)


def start_item(item: TimelineItem) -> TimelineItem:
    if item.status == TimelineItemStatus.COMPLETED:
        raise InvalidTransition(f"Timeline item {item.action_type.value} is already completed")
    return _advance(item, TimelineItemStatus.IN_PROGRESS)


def complete_item(item: TimelineItem, completed_on: Optional[date] = None) -> TimelineItem:
    """Mark an action done. Completing twice keeps the first completion date."""
    if item.status == TimelineItemStatus.COMPLETED:
        return item
    done = _advance(item, TimelineItemStatus.COMPLETED)
    return replace(done, completed_date=completed_on or date.today())


def timeline_progress(items: Iterable[TimelineItem]) -> Decimal:
    """Completed fraction in [0, 1]; an empty timeline is 0."""
    items = list(items)
    if not items:
        return Decimal("0")
    completed = sum(1 for item in items if item.status == TimelineItemStatus.COMPLETED)
    return Decimal(completed) / Decimal(len(items))
