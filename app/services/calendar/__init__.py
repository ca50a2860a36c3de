from app.services.calendar.service import CalendarService, get_calendar_service, open_calendar_service

__all__ = ["CalendarService", "get_calendar_service", "open_calendar_service"]
