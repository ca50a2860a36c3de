from dataclasses import dataclass

from app.core.config import settings


@dataclass(frozen=True)
class CalendarConfig:
    gap_days: int = 2
    visible_limit: int = 3
    timezone: str = "Europe/London"

    @classmethod
    def from_settings(cls) -> "CalendarConfig":
        return cls(
            gap_days=settings.GAP_DAY_WINDOW_DEFAULT,
            visible_limit=settings.DAY_VISIBLE_LIMIT,
            timezone=settings.CALENDAR_TZ,
        )
