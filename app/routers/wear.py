from fastapi import APIRouter, Depends

from app.routers.calendar_helpers import verdict_out
from app.schemas.calendar import GapCheckIn, VerdictOut
from app.services.calendar import CalendarService, get_calendar_service

router = APIRouter(prefix="/wear", tags=["wear"])


@router.post("/gap-check", response_model=VerdictOut)
async def gap_check(
    payload: GapCheckIn,
    service: CalendarService = Depends(get_calendar_service),
):
    verdict = await service.gap_check(payload.outfit_ids, payload.date, payload.window_days)
    return verdict_out(verdict)
