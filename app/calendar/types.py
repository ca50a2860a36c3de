from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Iterator, List, Optional, Union

DAILY_OCCASION_NAME = "Daily"


def is_reserved_name(name: Optional[str]) -> bool:
    return (name or "").strip().lower() == DAILY_OCCASION_NAME.lower()


def as_date(value: date | datetime) -> date:
    """Reduce a datetime to its calendar date; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass(frozen=True)
class Period:
    """Inclusive date range."""
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError("period end precedes start")

    def days(self) -> Iterator[date]:
        cur = self.start
        while cur <= self.end:
            yield cur
            cur += timedelta(days=1)

    def __contains__(self, value: date | datetime) -> bool:
        return self.start <= as_date(value) <= self.end


@dataclass
class OccasionType:
    id: str
    name: str


@dataclass
class Occasion:
    id: str
    name: str
    day: date
    occasion_type_id: Optional[str] = None
    occasion_type_name: Optional[str] = None
    description: str = ""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    weather_snapshot: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_daily_placeholder(self) -> bool:
        return self.occasion_type_id is None and is_reserved_name(self.name)


@dataclass
class OccasionFields:
    """Writable occasion attributes as submitted by a user."""
    name: str
    day: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    description: str = ""
    occasion_type_id: Optional[str] = None
    weather_snapshot: Optional[str] = None


@dataclass
class OutfitItem:
    id: str
    name: str = ""
    category_name: Optional[str] = None
    image_url: Optional[str] = None
    color: Optional[str] = None


@dataclass
class Outfit:
    id: str
    name: str = ""
    items: List[OutfitItem] = field(default_factory=list)
    is_favorite: bool = False
    user_id: Optional[str] = None


@dataclass
class CalendarEntry:
    id: str
    occasion: Occasion
    is_daily: bool
    outfit_ids: List[str]
    outfits: List[Outfit] = field(default_factory=list)
    used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def occasion_id(self) -> str:
        return self.occasion.id

    @property
    def day(self) -> date:
        if self.used_at is not None:
            return self.used_at.date()
        return self.occasion.day


@dataclass(frozen=True)
class OccasionBinding:
    occasion_id: str


@dataclass(frozen=True)
class DailyBinding:
    day: date


Binding = Union[OccasionBinding, DailyBinding]


@dataclass
class EntryUpdate:
    """Partial update; ``None`` means "leave unchanged"."""
    occasion_id: Optional[str] = None
    outfit_ids: Optional[List[str]] = None
    day: Optional[date] = None

    def is_empty(self) -> bool:
        return self.occasion_id is None and self.outfit_ids is None and self.day is None


@dataclass
class WearHistory:
    item_id: str
    within_window: bool = False
    worn_dates: List[date] = field(default_factory=list)
    times_worn: int = 0

    @property
    def last_worn(self) -> Optional[date]:
        return self.worn_dates[-1] if self.worn_dates else None


@dataclass(frozen=True)
class AffectedItem:
    item_id: str
    item_name: str
    image_url: Optional[str]
    category_name: Optional[str]
    last_worn_at: Optional[date]
    worn_dates_in_range: tuple[date, ...]
    times_worn_in_range: int


@dataclass(frozen=True)
class Clear:
    ignored: tuple[BaseException, ...] = ()

    is_warning = False


@dataclass(frozen=True)
class Warn:
    affected_items: tuple[AffectedItem, ...]
    window_days: int
    ignored: tuple[BaseException, ...] = ()

    is_warning = True


Verdict = Union[Clear, Warn]
