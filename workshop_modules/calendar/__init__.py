"""Calendar module -- month views over scheduled missions."""

from workshop_modules.calendar.service import CalendarService, MonthView

__all__ = ["CalendarService", "MonthView"]
