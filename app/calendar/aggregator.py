"""Per-day bucketing of calendar entries and occasions for week/month views."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time, timedelta
from typing import Iterable, List, Optional

from app.calendar.types import CalendarEntry, Occasion, Period


def week_period(day: date) -> Period:
    """Sunday-to-Saturday week containing ``day``."""
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return Period(start, start + timedelta(days=6))


def month_period(day: date) -> Period:
    """Whole weeks covering the month of ``day``, as a month grid shows them."""
    first = day.replace(day=1)
    next_month = (first + timedelta(days=32)).replace(day=1)
    last = next_month - timedelta(days=1)
    return Period(week_period(first).start, week_period(last).end)


@dataclass
class DaySlot:
    """One occasion on one day with the entries bound to it (possibly none)."""
    occasion: Occasion
    is_daily: bool
    entries: List[CalendarEntry] = field(default_factory=list)

    @property
    def outfit_count(self) -> int:
        return sum(len(e.outfit_ids) for e in self.entries)

    @property
    def start_of_day(self) -> Optional[time]:
        st = self.occasion.start_time
        return st.replace(tzinfo=None).time() if st is not None else None


@dataclass
class DaySummary:
    day: date
    slots: List[DaySlot]
    visible_limit: int = 3

    @property
    def occasion_count(self) -> int:
        return len(self.slots)

    @property
    def outfit_count(self) -> int:
        return sum(s.outfit_count for s in self.slots)

    @property
    def visible(self) -> List[DaySlot]:
        return self.slots[: self.visible_limit]

    @property
    def overflow(self) -> int:
        return max(0, len(self.slots) - self.visible_limit)

    @property
    def has_daily(self) -> bool:
        return any(s.is_daily for s in self.slots)

    @property
    def preview(self) -> Optional[DaySlot]:
        return self.slots[0] if self.slots else None


def _slot_key(indexed: tuple[int, DaySlot]) -> tuple:
    idx, slot = indexed
    at = slot.start_of_day
    # daily first, then timed occasions ascending, untimed last; idx keeps ties stable
    return (0 if slot.is_daily else 1, at is None, at or time.min, idx)


def order_slots(slots: Iterable[DaySlot]) -> List[DaySlot]:
    return [s for _, s in sorted(enumerate(slots), key=_slot_key)]


def bucket_by_day(
    entries: Iterable[CalendarEntry],
    occasions: Iterable[Occasion],
    period: Period,
    visible_limit: int = 3,
) -> dict[date, DaySummary]:
    """Group entries and entry-less occasions into one summary per day of ``period``.

    Entries sharing an occasion on the same day collapse into a single slot.
    Days are compared by calendar date only.
    """
    slots: dict[date, dict[str, DaySlot]] = {d: {} for d in period.days()}

    for entry in entries:
        day = entry.day
        if day not in slots:
            continue
        bucket = slots[day]
        slot = bucket.get(entry.occasion_id)
        if slot is None:
            slot = bucket[entry.occasion_id] = DaySlot(
                occasion=entry.occasion,
                is_daily=entry.is_daily or entry.occasion.is_daily_placeholder,
            )
        slot.entries.append(entry)

    for occasion in occasions:
        if occasion.day not in slots:
            continue
        bucket = slots[occasion.day]
        if occasion.id not in bucket:
            bucket[occasion.id] = DaySlot(occasion=occasion, is_daily=occasion.is_daily_placeholder)

    return {
        day: DaySummary(day=day, slots=order_slots(bucket.values()), visible_limit=visible_limit)
        for day, bucket in slots.items()
    }
