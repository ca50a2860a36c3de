from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timezone
from typing import Iterable, Optional
from uuid import uuid4

from app.calendar.errors import NotFoundError, ValidationError
from app.calendar.types import (
    DAILY_OCCASION_NAME,
    Binding,
    CalendarEntry,
    DailyBinding,
    EntryUpdate,
    Occasion,
    OccasionFields,
    OccasionType,
    Outfit,
    Period,
    WearHistory,
)
from app.calendar.wear_history import find_recent_wear

DEFAULT_OCCASION_TYPES = ("Work", "Party", "Date", "Sport", "Travel")


@dataclass
class _EntryRecord:
    id: str
    user_id: str
    occasion_id: str
    is_daily: bool
    outfit_ids: list[str]
    used_at: datetime
    created_at: datetime


@dataclass
class InMemoryCalendarStore:
    """Process-local stand-in for the remote calendar store."""
    occasions: dict[str, Occasion] = field(default_factory=dict)
    entries: dict[str, _EntryRecord] = field(default_factory=dict)
    outfits: dict[str, Outfit] = field(default_factory=dict)
    occasion_types: dict[str, OccasionType] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.occasion_types:
            for name in DEFAULT_OCCASION_TYPES:
                self.add_occasion_type(name)

    def add_occasion_type(self, name: str) -> OccasionType:
        otype = OccasionType(id=str(uuid4()), name=name)
        self.occasion_types[otype.id] = otype
        return otype

    def add_outfit(self, outfit: Outfit, user_id: str) -> Outfit:
        outfit.user_id = user_id
        self.outfits[outfit.id] = outfit
        return outfit

    def for_user(self, user_id: str) -> "InMemoryCalendarRepository":
        return InMemoryCalendarRepository(self, user_id)


def _used_at(occasion: Occasion) -> datetime:
    if occasion.start_time is not None:
        return occasion.start_time
    return datetime.combine(occasion.day, time.min)


def _combine(day: date, at: Optional[time]) -> Optional[datetime]:
    return datetime.combine(day, at) if at is not None else None


class InMemoryCalendarRepository:
    def __init__(self, store: InMemoryCalendarStore | None = None, user_id: str = "local") -> None:
        self.store = store or InMemoryCalendarStore()
        self.user_id = user_id

    # occasions

    def _owned_occasion(self, occasion_id: str) -> Occasion:
        occ = self.store.occasions.get(occasion_id)
        if occ is None or occ.user_id != self.user_id:
            raise NotFoundError(f"occasion {occasion_id} not found", code="occasion_not_found")
        return occ

    async def list_occasions(self, period: Period) -> list[Occasion]:
        found = [o for o in self.store.occasions.values() if o.user_id == self.user_id and o.day in period]
        return sorted(found, key=lambda o: (o.day, o.start_time or datetime.combine(o.day, time.min)))

    async def get_occasion(self, occasion_id: str) -> Optional[Occasion]:
        occ = self.store.occasions.get(occasion_id)
        if occ is None or occ.user_id != self.user_id:
            return None
        return occ

    async def find_daily_occasion(self, day: date) -> Optional[Occasion]:
        for occ in self.store.occasions.values():
            if occ.user_id == self.user_id and occ.day == day and occ.is_daily_placeholder:
                return occ
        return None

    async def _find_or_create_daily(self, day: date) -> Occasion:
        existing = await self.find_daily_occasion(day)
        if existing is not None:
            return existing
        now = datetime.now(timezone.utc)
        occ = Occasion(
            id=str(uuid4()),
            name=DAILY_OCCASION_NAME,
            day=day,
            user_id=self.user_id,
            created_at=now,
            updated_at=now,
        )
        self.store.occasions[occ.id] = occ
        return occ

    def _resolve_type_name(self, type_id: Optional[str]) -> Optional[str]:
        if type_id is None:
            return None
        otype = self.store.occasion_types.get(type_id)
        if otype is None:
            raise NotFoundError(f"occasion type {type_id} not found", code="occasion_type_not_found")
        return otype.name

    async def create_occasion(self, fields: OccasionFields) -> Occasion:
        now = datetime.now(timezone.utc)
        occ = Occasion(
            id=str(uuid4()),
            name=fields.name.strip(),
            day=fields.day,
            occasion_type_id=fields.occasion_type_id,
            occasion_type_name=self._resolve_type_name(fields.occasion_type_id),
            description=fields.description,
            start_time=_combine(fields.day, fields.start_time),
            end_time=_combine(fields.day, fields.end_time),
            weather_snapshot=fields.weather_snapshot,
            user_id=self.user_id,
            created_at=now,
            updated_at=now,
        )
        self.store.occasions[occ.id] = occ
        return occ

    async def update_occasion(self, occasion_id: str, fields: OccasionFields) -> Occasion:
        occ = self._owned_occasion(occasion_id)
        updated = replace(
            occ,
            name=fields.name.strip(),
            day=fields.day,
            occasion_type_id=fields.occasion_type_id,
            occasion_type_name=self._resolve_type_name(fields.occasion_type_id),
            description=fields.description,
            start_time=_combine(fields.day, fields.start_time),
            end_time=_combine(fields.day, fields.end_time),
            weather_snapshot=fields.weather_snapshot,
            updated_at=datetime.now(timezone.utc),
        )
        self.store.occasions[occasion_id] = updated
        # entries follow their occasion to the new date
        for rec in self.store.entries.values():
            if rec.occasion_id == occasion_id:
                rec.used_at = _used_at(updated)
        return updated

    async def delete_occasion(self, occasion_id: str) -> None:
        self._owned_occasion(occasion_id)
        del self.store.occasions[occasion_id]
        for entry_id in [e.id for e in self.store.entries.values() if e.occasion_id == occasion_id]:
            del self.store.entries[entry_id]

    async def list_occasion_types(self) -> list[OccasionType]:
        return sorted(self.store.occasion_types.values(), key=lambda t: t.name)

    # calendar entries

    def _materialize(self, rec: _EntryRecord) -> CalendarEntry:
        return CalendarEntry(
            id=rec.id,
            occasion=self.store.occasions[rec.occasion_id],
            is_daily=rec.is_daily,
            outfit_ids=list(rec.outfit_ids),
            outfits=[self.store.outfits[oid] for oid in rec.outfit_ids if oid in self.store.outfits],
            used_at=rec.used_at,
            created_at=rec.created_at,
        )

    def _owned_entry(self, entry_id: str) -> _EntryRecord:
        rec = self.store.entries.get(entry_id)
        if rec is None or rec.user_id != self.user_id:
            raise NotFoundError(f"calendar entry {entry_id} not found", code="entry_not_found")
        return rec

    def _check_outfits(self, outfit_ids: Iterable[str]) -> None:
        for oid in outfit_ids:
            outfit = self.store.outfits.get(oid)
            if outfit is None or outfit.user_id != self.user_id:
                raise NotFoundError(f"outfit {oid} not found", code="outfit_not_found")

    async def list_calendar_entries(self, period: Period) -> list[CalendarEntry]:
        recs = [r for r in self.store.entries.values() if r.user_id == self.user_id and r.used_at in period]
        recs.sort(key=lambda r: (r.used_at, r.created_at))
        return [self._materialize(r) for r in recs]

    async def get_calendar_entry(self, entry_id: str) -> Optional[CalendarEntry]:
        rec = self.store.entries.get(entry_id)
        if rec is None or rec.user_id != self.user_id:
            return None
        return self._materialize(rec)

    async def create_calendar_entry(self, outfit_ids: list[str], binding: Binding) -> list[CalendarEntry]:
        if not outfit_ids:
            raise ValidationError("outfit_ids must not be empty", code="outfit_ids_required")
        self._check_outfits(outfit_ids)
        if isinstance(binding, DailyBinding):
            occ = await self._find_or_create_daily(binding.day)
            is_daily = True
        else:
            occ = self._owned_occasion(binding.occasion_id)
            is_daily = False
        rec = _EntryRecord(
            id=str(uuid4()),
            user_id=self.user_id,
            occasion_id=occ.id,
            is_daily=is_daily,
            outfit_ids=list(outfit_ids),
            used_at=_used_at(occ),
            created_at=datetime.now(timezone.utc),
        )
        self.store.entries[rec.id] = rec
        return [self._materialize(rec)]

    async def update_calendar_entry(self, entry_id: str, fields: EntryUpdate) -> CalendarEntry:
        rec = self._owned_entry(entry_id)
        outfit_ids = rec.outfit_ids
        if fields.outfit_ids is not None:
            self._check_outfits(fields.outfit_ids)
            outfit_ids = list(fields.outfit_ids)
        occasion_id, is_daily, used_at = rec.occasion_id, rec.is_daily, rec.used_at
        if fields.occasion_id is not None:
            occ = self._owned_occasion(fields.occasion_id)
            occasion_id, is_daily, used_at = occ.id, occ.is_daily_placeholder, _used_at(occ)
        if fields.day is not None:
            if is_daily:
                occ = await self._find_or_create_daily(fields.day)
                occasion_id, used_at = occ.id, _used_at(occ)
            else:
                used_at = datetime.combine(fields.day, used_at.time())

        # nothing above raised; apply the whole update
        rec.outfit_ids = outfit_ids
        rec.occasion_id = occasion_id
        rec.is_daily = is_daily
        rec.used_at = used_at
        return self._materialize(rec)

    async def delete_calendar_entry(self, entry_id: str) -> None:
        self._owned_entry(entry_id)
        del self.store.entries[entry_id]

    # wear history and outfits

    async def check_wear_history(self, item_id: str, day: date, window_days: int) -> WearHistory:
        worn: list[datetime] = []
        for rec in self.store.entries.values():
            if rec.user_id != self.user_id:
                continue
            for oid in rec.outfit_ids:
                outfit = self.store.outfits.get(oid)
                if outfit and any(it.id == item_id for it in outfit.items):
                    worn.append(rec.used_at)
                    break
        return find_recent_wear(item_id, worn, day, window_days)

    async def list_outfits(self, outfit_ids: Optional[Iterable[str]] = None) -> list[Outfit]:
        owned = [o for o in self.store.outfits.values() if o.user_id == self.user_id]
        if outfit_ids is None:
            return owned
        wanted = set(outfit_ids)
        return [o for o in owned if o.id in wanted]
