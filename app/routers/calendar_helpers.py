from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from app.calendar.aggregator import DaySlot, DaySummary
from app.calendar.types import (
    AffectedItem,
    CalendarEntry,
    Occasion,
    OccasionFields,
    Outfit,
    Verdict,
    Warn,
)
from app.schemas.calendar import (
    AffectedItemOut,
    CalendarEntryOut,
    CalendarOutfitOut,
    DaySlotOut,
    DaySummaryOut,
    OccasionIn,
    OccasionOut,
    OutfitItemOut,
    VerdictOut,
)


def _iso(value: Optional[date | datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def occasion_fields(payload: OccasionIn) -> OccasionFields:
    return OccasionFields(
        name=payload.name,
        day=payload.date,
        start_time=payload.start_time,
        end_time=payload.end_time,
        description=payload.description,
        occasion_type_id=payload.occasion_type_id,
        weather_snapshot=payload.weather_snapshot,
    )


def occasion_out(occ: Occasion) -> OccasionOut:
    return OccasionOut(
        id=occ.id,
        name=occ.name,
        date=occ.day.isoformat(),
        is_daily=occ.is_daily_placeholder,
        occasion_type_id=occ.occasion_type_id,
        occasion_type_name=occ.occasion_type_name,
        description=occ.description,
        start_time=_iso(occ.start_time),
        end_time=_iso(occ.end_time),
        weather_snapshot=occ.weather_snapshot,
        created_at=_iso(occ.created_at),
        updated_at=_iso(occ.updated_at),
    )


def outfit_out(outfit: Outfit) -> CalendarOutfitOut:
    return CalendarOutfitOut(
        id=outfit.id,
        name=outfit.name,
        is_favorite=outfit.is_favorite,
        items=[
            OutfitItemOut(id=it.id, name=it.name, category_name=it.category_name, image_url=it.image_url, color=it.color)
            for it in outfit.items
        ],
    )


def entry_out(entry: CalendarEntry) -> CalendarEntryOut:
    return CalendarEntryOut(
        id=entry.id,
        date=entry.day.isoformat(),
        is_daily=entry.is_daily,
        occasion=occasion_out(entry.occasion),
        outfit_ids=list(entry.outfit_ids),
        outfits=[outfit_out(o) for o in entry.outfits],
        used_at=_iso(entry.used_at),
        created_at=_iso(entry.created_at),
    )


def _affected_out(item: AffectedItem) -> AffectedItemOut:
    return AffectedItemOut(
        item_id=item.item_id,
        item_name=item.item_name,
        image_url=item.image_url,
        category_name=item.category_name,
        last_worn_at=_iso(item.last_worn_at),
        worn_dates_in_range=[d.isoformat() for d in item.worn_dates_in_range],
        times_worn_in_range=item.times_worn_in_range,
    )


def verdict_out(verdict: Verdict) -> VerdictOut:
    if isinstance(verdict, Warn):
        return VerdictOut(
            status="warn",
            window_days=verdict.window_days,
            affected_items=[_affected_out(i) for i in verdict.affected_items],
            degraded=bool(verdict.ignored),
        )
    return VerdictOut(status="clear", degraded=bool(verdict.ignored))


def _slot_out(slot: DaySlot) -> DaySlotOut:
    return DaySlotOut(
        occasion=occasion_out(slot.occasion),
        is_daily=slot.is_daily,
        outfit_count=slot.outfit_count,
        entries=[entry_out(e) for e in slot.entries],
    )


def day_summary_out(summary: DaySummary) -> DaySummaryOut:
    return DaySummaryOut(
        date=summary.day.isoformat(),
        occasion_count=summary.occasion_count,
        outfit_count=summary.outfit_count,
        has_daily=summary.has_daily,
        overflow=summary.overflow,
        slots=[_slot_out(s) for s in summary.slots],
        visible=[_slot_out(s) for s in summary.visible],
    )
