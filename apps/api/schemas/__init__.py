from .alerts import AlertResponse
from .reminders import (
    ReminderCreateRequest,
    ReminderResponse,
    ReminderToggleRequest,
    ReminderUpdateRequest,
)
from .settings import (
    ActiveHoursModel,
    MainSettingsResponse,
    MainSettingsUpdateRequest,
    TimeRangeModel,
)
from .timers import TimerControlResponse, TimerStatusResponse

__all__ = [
    "ActiveHoursModel",
    "AlertResponse",
    "MainSettingsResponse",
    "MainSettingsUpdateRequest",
    "ReminderCreateRequest",
    "ReminderResponse",
    "ReminderToggleRequest",
    "ReminderUpdateRequest",
    "TimeRangeModel",
    "TimerControlResponse",
    "TimerStatusResponse",
]
