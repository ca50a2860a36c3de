from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from functools import partial
from typing import Callable, List, Literal, Optional

from app.calendar.advisor import GapDayAdvisor
from app.calendar.clock import today_in
from app.calendar.config import CalendarConfig
from app.calendar.errors import NotFoundError, PastDateError, ValidationError
from app.calendar.repository.base import CalendarRepository
from app.calendar.selection import OutfitSelection
from app.calendar.types import (
    Binding,
    CalendarEntry,
    Clear,
    DailyBinding,
    EntryUpdate,
    Occasion,
    OccasionBinding,
    OccasionFields,
    Period,
    Verdict,
    Warn,
    is_reserved_name,
)

logger = logging.getLogger("app.calendar.scheduler")


@dataclass
class AddOutfitsRequest:
    outfit_ids: List[str]
    occasion_id: Optional[str] = None
    daily: bool = False
    day: Optional[date] = None
    window_days: Optional[int] = None


@dataclass
class PendingAdd:
    """An add suspended on a gap-day warning until the user confirms or cancels."""
    request: AddOutfitsRequest
    verdict: Warn
    selection: Optional[OutfitSelection] = None
    cancelled: bool = False
    committed: bool = False


@dataclass
class AddResult:
    status: Literal["committed", "needs_confirmation"]
    verdict: Verdict
    entries: List[CalendarEntry] = field(default_factory=list)
    pending: Optional[PendingAdd] = None
    target: Optional[Occasion] = None

    @property
    def committed(self) -> bool:
        return self.status == "committed"


@dataclass
class EditResult:
    entry: CalendarEntry
    changed: bool


class SchedulingEngine:
    def __init__(
        self,
        repository: CalendarRepository,
        config: CalendarConfig | None = None,
        *,
        advisor: GapDayAdvisor | None = None,
        clock: Callable[[], date] | None = None,
    ) -> None:
        self.repository = repository
        self.config = config or CalendarConfig()
        self.advisor = advisor or GapDayAdvisor(repository, default_window=self.config.gap_days)
        # read on every guard, never cached across requests
        self.clock = clock or partial(today_in, self.config.timezone)

    def guard_not_past(self, day: date) -> None:
        today = self.clock()
        if day < today:
            raise PastDateError(day, today)

    # calendar entries

    def _binding_for(self, request: AddOutfitsRequest) -> Binding:
        if request.daily and request.occasion_id:
            raise ValidationError("daily mode must not reference an occasion", code="binding_conflict")
        if not request.daily and not request.occasion_id:
            raise ValidationError("an occasion or daily mode is required", code="binding_required")
        if request.occasion_id and request.day is not None:
            raise ValidationError("an occasion carries its own date", code="binding_conflict")
        if request.daily:
            if request.day is None:
                raise ValidationError("daily mode requires a date", code="date_required")
            return DailyBinding(day=request.day)
        return OccasionBinding(occasion_id=request.occasion_id)

    async def _resolve_target(self, binding: Binding) -> tuple[date, Optional[Occasion]]:
        if isinstance(binding, DailyBinding):
            # absent placeholder is materialized by the store on create
            return binding.day, await self.repository.find_daily_occasion(binding.day)
        occasion = await self.repository.get_occasion(binding.occasion_id)
        if occasion is None:
            raise NotFoundError(f"occasion {binding.occasion_id} not found", code="occasion_not_found")
        return occasion.day, occasion

    async def _drop_planned(self, outfit_ids: List[str], target: Occasion) -> List[str]:
        """Remove outfits already planned for ``target``; raise if none are left."""
        entries = await self.repository.list_calendar_entries(Period(target.day, target.day))
        planned = {oid for e in entries if e.occasion_id == target.id for oid in e.outfit_ids}
        remaining = [oid for oid in outfit_ids if oid not in planned]
        if not remaining:
            raise ValidationError("outfits are already planned for this occasion", code="already_planned")
        return remaining

    async def add_outfits(
        self,
        request: AddOutfitsRequest,
        *,
        selection: OutfitSelection | None = None,
        confirmed: bool = False,
    ) -> AddResult:
        """Attach outfits to an occasion or to a day's daily plan.

        Returns ``needs_confirmation`` with a ``PendingAdd`` when recently worn
        items are found and ``confirmed`` is false; nothing is written in that
        case. Remote failures while committing propagate unchanged.
        """
        outfit_ids = list(dict.fromkeys(request.outfit_ids))
        if not outfit_ids:
            raise ValidationError("at least one outfit is required", code="outfit_ids_required")
        binding = self._binding_for(request)
        if request.day is not None:
            self.guard_not_past(request.day)

        day, target = await self._resolve_target(binding)
        self.guard_not_past(day)
        if target is not None:
            outfit_ids = await self._drop_planned(outfit_ids, target)

        verdict: Verdict = Clear()
        if not confirmed:
            verdict = await self.advisor.evaluate_ids(outfit_ids, day, request.window_days)
            if isinstance(verdict, Warn):
                pending = PendingAdd(request=request, verdict=verdict, selection=selection)
                return AddResult(status="needs_confirmation", verdict=verdict, pending=pending, target=target)

        entries = await self.repository.create_calendar_entry(outfit_ids, binding)
        logger.info(
            "calendar add committed day=%s daily=%s outfits=%s confirmed=%s",
            day, isinstance(binding, DailyBinding), len(outfit_ids), confirmed,
        )
        if selection is not None:
            selection.clear()
        if target is None and entries:
            target = entries[0].occasion
        return AddResult(status="committed", verdict=verdict, entries=entries, target=target)

    async def confirm(self, pending: PendingAdd) -> AddResult:
        """Commit a suspended add despite its warning; the date is re-guarded."""
        if pending.cancelled:
            raise ValidationError("pending add was cancelled", code="pending_cancelled")
        if pending.committed:
            raise ValidationError("pending add was already committed", code="pending_committed")
        result = await self.add_outfits(pending.request, selection=pending.selection, confirmed=True)
        pending.committed = True
        result.verdict = pending.verdict
        return result

    def cancel(self, pending: PendingAdd) -> None:
        pending.cancelled = True

    async def edit_entry(self, entry_id: str, update: EntryUpdate) -> EditResult:
        current = await self.repository.get_calendar_entry(entry_id)
        if current is None:
            raise NotFoundError(f"calendar entry {entry_id} not found", code="entry_not_found")

        diff = EntryUpdate()
        if update.occasion_id is not None and update.occasion_id != current.occasion_id:
            occasion = await self.repository.get_occasion(update.occasion_id)
            if occasion is None:
                raise NotFoundError(f"occasion {update.occasion_id} not found", code="occasion_not_found")
            # the entry moves to the occasion's date
            self.guard_not_past(occasion.day)
            diff.occasion_id = update.occasion_id
        if update.outfit_ids is not None:
            outfit_ids = list(dict.fromkeys(update.outfit_ids))
            if not outfit_ids:
                raise ValidationError("at least one outfit is required", code="outfit_ids_required")
            if outfit_ids != current.outfit_ids:
                diff.outfit_ids = outfit_ids
        if update.day is not None and update.day != current.day:
            self.guard_not_past(update.day)
            diff.day = update.day

        if diff.is_empty():
            return EditResult(entry=current, changed=False)
        entry = await self.repository.update_calendar_entry(entry_id, diff)
        logger.info("calendar entry updated id=%s", entry_id)
        return EditResult(entry=entry, changed=True)

    async def delete_entry(self, entry_id: str) -> None:
        await self.repository.delete_calendar_entry(entry_id)
        logger.info("calendar entry deleted id=%s", entry_id)

    # occasions

    def _validate_occasion(self, fields: OccasionFields) -> None:
        if not fields.name or not fields.name.strip():
            raise ValidationError("occasion name is required", code="name_required")
        if is_reserved_name(fields.name):
            raise ValidationError("'Daily' is reserved", code="reserved_occasion_name")
        if fields.start_time and fields.end_time and fields.end_time < fields.start_time:
            raise ValidationError("end time precedes start time", code="invalid_time_range")

    async def create_occasion(self, fields: OccasionFields) -> Occasion:
        self._validate_occasion(fields)
        self.guard_not_past(fields.day)
        occasion = await self.repository.create_occasion(fields)
        logger.info("occasion created id=%s day=%s", occasion.id, occasion.day)
        return occasion

    async def update_occasion(self, occasion_id: str, fields: OccasionFields) -> Occasion:
        self._validate_occasion(fields)
        return await self.repository.update_occasion(occasion_id, fields)

    async def delete_occasion(self, occasion_id: str) -> None:
        await self.repository.delete_occasion(occasion_id)
        logger.info("occasion deleted id=%s", occasion_id)
