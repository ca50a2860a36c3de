from __future__ import annotations

import asyncio
from datetime import time, timedelta

from app.calendar.aggregator import week_period
from app.calendar.clock import today_in
from app.calendar.repository import InMemoryCalendarStore
from app.calendar.scheduler import AddOutfitsRequest
from app.calendar.types import OccasionFields, Outfit, OutfitItem
from app.services.calendar import CalendarService


def _seed(store: InMemoryCalendarStore, user_id: str) -> None:
    tee = OutfitItem(id="tee", name="White Tee", category_name="Top")
    jeans = OutfitItem(id="jeans", name="Blue Jeans", category_name="Bottom")
    blazer = OutfitItem(id="blazer", name="Navy Blazer", category_name="Outerwear")
    store.add_outfit(Outfit(id="casual", name="Casual", items=[tee, jeans]), user_id)
    store.add_outfit(Outfit(id="office", name="Office", items=[tee, blazer]), user_id)


async def _run() -> None:
    user_id = "demo"
    store = InMemoryCalendarStore()
    _seed(store, user_id)
    service = CalendarService(store.for_user(user_id))
    engine = service.engine

    today = today_in(service.config.timezone)
    tomorrow = today + timedelta(days=1)
    await engine.add_outfits(AddOutfitsRequest(outfit_ids=["casual"], daily=True, day=today))
    meeting = await engine.create_occasion(
        OccasionFields(name="Client meeting", day=tomorrow, start_time=time(9, 0), end_time=time(10, 0))
    )
    result = await engine.add_outfits(AddOutfitsRequest(outfit_ids=["office"], occasion_id=meeting.id))
    print(f"add office for {tomorrow}: {result.status}")
    for item in getattr(result.verdict, "affected_items", ()):
        dates = ", ".join(d.isoformat() for d in item.worn_dates_in_range)
        print(f"  {item.item_name} worn on {dates}")
    if result.pending is not None:
        await engine.confirm(result.pending)

    days = await service.view(week_period(today))
    for day, summary in days.items():
        names = ", ".join(s.occasion.name for s in summary.visible)
        more = f" (+{summary.overflow} more)" if summary.overflow else ""
        print(f"{day:%a %d %b}: {summary.outfit_count} outfit(s) {names}{more}")


if __name__ == "__main__":
    asyncio.run(_run())
