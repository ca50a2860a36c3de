"""Error taxonomy for the calendar scheduler.

Each error carries a short snake_case ``code`` which the routers pass through
as the HTTP ``detail``. A gap-day warning is not an error here: it is a
result the caller must confirm, not a failure.
"""
from __future__ import annotations

from datetime import date


class CalendarError(Exception):
    code = "calendar_error"

    def __init__(self, message: str | None = None, *, code: str | None = None) -> None:
        if code:
            self.code = code
        super().__init__(message or self.code)


class PastDateError(CalendarError):
    code = "past_date"

    def __init__(self, day: date, today: date) -> None:
        self.day = day
        self.today = today
        super().__init__(f"{day.isoformat()} is before {today.isoformat()}")


class ValidationError(CalendarError):
    code = "validation_error"


class NotFoundError(CalendarError):
    code = "not_found"


class RemoteFailure(CalendarError):
    code = "remote_failure"

    def __init__(self, message: str, *, status_code: int | None = None, operation: str | None = None) -> None:
        self.status_code = status_code
        self.operation = operation
        super().__init__(message)
