from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator, Callable, Sequence

import httpx
from fastapi import Depends

from app.auth.deps import Caller, get_caller
from app.calendar.aggregator import DaySummary, bucket_by_day
from app.calendar.config import CalendarConfig
from app.calendar.repository import (
    CalendarRepository,
    HttpCalendarRepository,
    InMemoryCalendarStore,
)
from app.calendar.scheduler import SchedulingEngine
from app.calendar.types import Period, Verdict
from app.core.config import settings

_memory_store = InMemoryCalendarStore()


def memory_store() -> InMemoryCalendarStore:
    return _memory_store


class CalendarService:
    def __init__(
        self,
        repository: CalendarRepository,
        config: CalendarConfig | None = None,
        *,
        clock: Callable[[], date] | None = None,
    ) -> None:
        self.config = config or CalendarConfig.from_settings()
        self.repository = repository
        self.engine = SchedulingEngine(repository, self.config, clock=clock)

    async def view(self, period: Period) -> dict[date, DaySummary]:
        occasions, entries = await asyncio.gather(
            self.repository.list_occasions(period),
            self.repository.list_calendar_entries(period),
        )
        return bucket_by_day(entries, occasions, period, self.config.visible_limit)

    async def gap_check(self, outfit_ids: Sequence[str], day: date, window_days: int | None = None) -> Verdict:
        return await self.engine.advisor.evaluate_ids(list(dict.fromkeys(outfit_ids)), day, window_days)


@asynccontextmanager
async def open_calendar_service(caller: Caller) -> AsyncIterator[CalendarService]:
    provider = (settings.CALENDAR_REPOSITORY or "memory").lower()
    if provider == "http":
        async with httpx.AsyncClient(
            base_url=settings.CALENDAR_API_BASE_URL,
            timeout=settings.CALENDAR_API_TIMEOUT_S,
            headers={"Authorization": f"Bearer {caller.token}", "Accept": "*/*"},
        ) as client:
            yield CalendarService(HttpCalendarRepository(client))
    else:
        yield CalendarService(_memory_store.for_user(caller.user_id))


async def get_calendar_service(caller: Caller = Depends(get_caller)) -> AsyncIterator[CalendarService]:
    async with open_calendar_service(caller) as service:
        yield service
