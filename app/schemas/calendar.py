import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class OccasionIn(BaseModel):
    name: str
    date: dt.date
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None
    description: str = ""
    occasion_type_id: Optional[str] = None
    weather_snapshot: Optional[str] = None


class OccasionOut(BaseModel):
    id: str
    name: str
    date: str
    is_daily: bool = False
    occasion_type_id: Optional[str] = None
    occasion_type_name: Optional[str] = None
    description: str = ""
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    weather_snapshot: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class OccasionTypeOut(BaseModel):
    id: str
    name: str


class OutfitItemOut(BaseModel):
    id: str
    name: str = ""
    category_name: Optional[str] = None
    image_url: Optional[str] = None
    color: Optional[str] = None


class CalendarOutfitOut(BaseModel):
    id: str
    name: str = ""
    is_favorite: bool = False
    items: List[OutfitItemOut] = []


class CalendarEntryOut(BaseModel):
    id: str
    date: str
    is_daily: bool
    occasion: OccasionOut
    outfit_ids: List[str]
    outfits: List[CalendarOutfitOut] = []
    used_at: Optional[str] = None
    created_at: Optional[str] = None


class CalendarEntryIn(BaseModel):
    outfit_ids: List[str]
    occasion_id: Optional[str] = None
    daily: bool = False
    date: Optional[dt.date] = None
    window_days: Optional[int] = Field(None, ge=0)
    confirm_reuse: bool = False


class CalendarEntryPatch(BaseModel):
    occasion_id: Optional[str] = None
    outfit_ids: Optional[List[str]] = None
    date: Optional[dt.date] = None


class AffectedItemOut(BaseModel):
    item_id: str
    item_name: str
    image_url: Optional[str] = None
    category_name: Optional[str] = None
    last_worn_at: Optional[str] = None
    worn_dates_in_range: List[str]
    times_worn_in_range: int


class VerdictOut(BaseModel):
    status: Literal["clear", "warn"]
    window_days: Optional[int] = None
    affected_items: List[AffectedItemOut] = []
    degraded: bool = False


class AddEntriesOut(BaseModel):
    status: Literal["committed", "needs_confirmation"]
    verdict: VerdictOut
    entries: List[CalendarEntryOut] = []


class EditEntryOut(BaseModel):
    changed: bool
    entry: CalendarEntryOut


class GapCheckIn(BaseModel):
    outfit_ids: List[str]
    date: dt.date
    window_days: Optional[int] = Field(None, ge=0)


class DaySlotOut(BaseModel):
    occasion: OccasionOut
    is_daily: bool
    outfit_count: int
    entries: List[CalendarEntryOut] = []


class DaySummaryOut(BaseModel):
    date: str
    occasion_count: int
    outfit_count: int
    has_daily: bool
    overflow: int
    slots: List[DaySlotOut]
    visible: List[DaySlotOut]


class CalendarViewOut(BaseModel):
    view: Literal["week", "month"]
    start: str
    end: str
    days: List[DaySummaryOut]
