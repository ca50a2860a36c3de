from datetime import date
from typing import Iterable, Optional, Protocol

from app.calendar.types import (
    Binding,
    CalendarEntry,
    EntryUpdate,
    Occasion,
    OccasionFields,
    OccasionType,
    Outfit,
    Period,
    WearHistory,
)


class CalendarRepository(Protocol):
    """Query/command surface of the calendar store, scoped to one user.

    Every method may raise ``RemoteFailure``.
    """

    async def list_occasions(self, period: Period) -> list[Occasion]:
        ...

    async def get_occasion(self, occasion_id: str) -> Optional[Occasion]:
        ...

    async def find_daily_occasion(self, day: date) -> Optional[Occasion]:
        ...

    async def create_occasion(self, fields: OccasionFields) -> Occasion:
        ...

    async def update_occasion(self, occasion_id: str, fields: OccasionFields) -> Occasion:
        ...

    async def delete_occasion(self, occasion_id: str) -> None:
        """Removes the occasion and every calendar entry bound to it."""
        ...

    async def list_occasion_types(self) -> list[OccasionType]:
        ...

    async def list_calendar_entries(self, period: Period) -> list[CalendarEntry]:
        ...

    async def get_calendar_entry(self, entry_id: str) -> Optional[CalendarEntry]:
        ...

    async def create_calendar_entry(self, outfit_ids: list[str], binding: Binding) -> list[CalendarEntry]:
        """A ``DailyBinding`` materializes the day's Daily placeholder when absent."""
        ...

    async def update_calendar_entry(self, entry_id: str, fields: EntryUpdate) -> CalendarEntry:
        ...

    async def delete_calendar_entry(self, entry_id: str) -> None:
        ...

    async def check_wear_history(self, item_id: str, day: date, window_days: int) -> WearHistory:
        ...

    async def list_outfits(self, outfit_ids: Optional[Iterable[str]] = None) -> list[Outfit]:
        ...
