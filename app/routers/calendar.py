import logging
from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from app.calendar.aggregator import month_period, week_period
from app.calendar.clock import today_in
from app.calendar.scheduler import AddOutfitsRequest
from app.calendar.types import EntryUpdate
from app.routers.calendar_helpers import day_summary_out, entry_out, verdict_out
from app.schemas.calendar import (
    AddEntriesOut,
    CalendarEntryIn,
    CalendarEntryPatch,
    CalendarViewOut,
    EditEntryOut,
)
from app.services.calendar import CalendarService, get_calendar_service

router = APIRouter(prefix="/calendar", tags=["calendar"])
logger = logging.getLogger("uvicorn.error")


@router.get("", response_model=CalendarViewOut)
async def calendar_view(
    view: Literal["week", "month"] = Query("month"),
    on: str | None = Query(None, alias="date"),
    service: CalendarService = Depends(get_calendar_service),
):
    if on:
        try:
            anchor = date.fromisoformat(on)
        except ValueError as e:
            raise HTTPException(status_code=400, detail="invalid_date") from e
    else:
        anchor = today_in(service.config.timezone)
    period = week_period(anchor) if view == "week" else month_period(anchor)
    days = await service.view(period)
    return CalendarViewOut(
        view=view,
        start=period.start.isoformat(),
        end=period.end.isoformat(),
        days=[day_summary_out(s) for s in days.values()],
    )


@router.post("/entries", response_model=AddEntriesOut)
async def add_entries(
    payload: CalendarEntryIn,
    service: CalendarService = Depends(get_calendar_service),
):
    """
    Attach one or more outfits to an occasion (`occasion_id`) or to a day's daily plan (`daily` + `date`).
    When recently worn items are found the response is `needs_confirmation` and nothing is saved;
    re-send with `confirm_reuse: true` to save anyway.
    """
    request = AddOutfitsRequest(
        outfit_ids=payload.outfit_ids,
        occasion_id=payload.occasion_id,
        daily=payload.daily,
        day=payload.date,
        window_days=payload.window_days,
    )
    result = await service.engine.add_outfits(request, confirmed=payload.confirm_reuse)
    if result.status == "needs_confirmation":
        logger.info("calendar add held for confirmation: %s item(s) recently worn", len(result.verdict.affected_items))
    if result.verdict.ignored:
        logger.warning("gap-day check degraded: %s lookup(s) failed", len(result.verdict.ignored))
    return AddEntriesOut(
        status=result.status,
        verdict=verdict_out(result.verdict),
        entries=[entry_out(e) for e in result.entries],
    )


@router.patch("/entries/{entry_id}", response_model=EditEntryOut)
async def edit_entry(
    entry_id: str,
    payload: CalendarEntryPatch,
    service: CalendarService = Depends(get_calendar_service),
):
    update = EntryUpdate(occasion_id=payload.occasion_id, outfit_ids=payload.outfit_ids, day=payload.date)
    result = await service.engine.edit_entry(entry_id, update)
    return EditEntryOut(changed=result.changed, entry=entry_out(result.entry))


@router.delete("/entries/{entry_id}")
async def delete_entry(
    entry_id: str,
    service: CalendarService = Depends(get_calendar_service),
):
    await service.engine.delete_entry(entry_id)
    return {"ok": True}
