from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable

from app.calendar.errors import ValidationError
from app.calendar.types import WearHistory, as_date


def find_recent_wear(
    item_id: str,
    wear_events: Iterable[date | datetime],
    candidate: date | datetime,
    window_days: int,
) -> WearHistory:
    """Look backward from ``candidate`` for wear events of one item.

    The window is ``[candidate - window_days, candidate]`` with both ends
    included. Planned wears after the candidate date are not considered.
    """
    if window_days < 0:
        raise ValidationError("window_days must be non-negative", code="invalid_window")
    day = as_date(candidate)
    floor = day - timedelta(days=window_days)
    worn = sorted({d for d in map(as_date, wear_events) if floor <= d <= day})
    return WearHistory(
        item_id=item_id,
        within_window=bool(worn),
        worn_dates=worn,
        times_worn=len(worn),
    )
