from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query

from app.calendar.clock import today_in
from app.calendar.types import Period
from app.routers.calendar_helpers import occasion_fields, occasion_out
from app.schemas.calendar import OccasionIn, OccasionOut, OccasionTypeOut
from app.services.calendar import CalendarService, get_calendar_service

router = APIRouter(prefix="/occasions", tags=["occasions"])


@router.get("", response_model=list[OccasionOut])
async def list_occasions(
    from_date: str | None = Query(None, alias="from"),
    to_date: str | None = Query(None, alias="to"),
    service: CalendarService = Depends(get_calendar_service),
):
    today = today_in(service.config.timezone)
    try:
        start = date.fromisoformat(from_date) if from_date else today
    except ValueError as e:
        raise HTTPException(status_code=400, detail="invalid_from_date") from e
    try:
        end = date.fromisoformat(to_date) if to_date else start + timedelta(days=30)
    except ValueError as e:
        raise HTTPException(status_code=400, detail="invalid_to_date") from e
    if end < start:
        raise HTTPException(status_code=400, detail="invalid_date_range")

    occasions = await service.repository.list_occasions(Period(start, end))
    return [occasion_out(o) for o in occasions]


@router.get("/types", response_model=list[OccasionTypeOut])
async def list_occasion_types(service: CalendarService = Depends(get_calendar_service)):
    types = await service.repository.list_occasion_types()
    return [OccasionTypeOut(id=t.id, name=t.name) for t in types]


@router.post("", response_model=OccasionOut)
async def create_occasion(
    payload: OccasionIn,
    service: CalendarService = Depends(get_calendar_service),
):
    occasion = await service.engine.create_occasion(occasion_fields(payload))
    return occasion_out(occasion)


@router.put("/{occasion_id}", response_model=OccasionOut)
async def update_occasion(
    occasion_id: str,
    payload: OccasionIn,
    service: CalendarService = Depends(get_calendar_service),
):
    occasion = await service.engine.update_occasion(occasion_id, occasion_fields(payload))
    return occasion_out(occasion)


@router.delete("/{occasion_id}")
async def delete_occasion(
    occasion_id: str,
    service: CalendarService = Depends(get_calendar_service),
):
    """Deletes the occasion together with every outfit planned for it."""
    await service.engine.delete_occasion(occasion_id)
    return {"ok": True}
