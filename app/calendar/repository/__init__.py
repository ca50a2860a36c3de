from app.calendar.repository.base import CalendarRepository
from app.calendar.repository.in_memory import InMemoryCalendarRepository, InMemoryCalendarStore
from app.calendar.repository.http import HttpCalendarRepository

__all__ = [
    "CalendarRepository",
    "InMemoryCalendarRepository",
    "InMemoryCalendarStore",
    "HttpCalendarRepository",
]
