from .active_hours import (
    ActiveHoursConfig,
    HolidayCalendar,
    TimeRange,
    WorkMode,
    is_active,
    next_boundary,
)
from .clock import Clock, ManualClock, SystemClock
from .holidays import StaticHolidayCalendar, load_holiday_calendar

__all__ = [
    "ActiveHoursConfig",
    "Clock",
    "HolidayCalendar",
    "ManualClock",
    "StaticHolidayCalendar",
    "SystemClock",
    "TimeRange",
    "WorkMode",
    "is_active",
    "load_holiday_calendar",
    "next_boundary",
]
