from datetime import date, datetime
from zoneinfo import ZoneInfo


def today_in(tz_name: str) -> date:
    return datetime.now(ZoneInfo(tz_name)).date()
