from .models import (
    MAIN_REMINDER_ID,
    AlertSnapshot,
    IntervalReminder,
    IntervalUnit,
    MainReminderSettings,
    OneTimeReminder,
    ReminderDefinition,
    TimerState,
    TimerStatus,
)
from .service import ReminderNotFoundError, ReminderRegistry, ReminderValidationError

__all__ = [
    "MAIN_REMINDER_ID",
    "AlertSnapshot",
    "IntervalReminder",
    "IntervalUnit",
    "MainReminderSettings",
    "OneTimeReminder",
    "ReminderDefinition",
    "ReminderNotFoundError",
    "ReminderRegistry",
    "ReminderValidationError",
    "TimerState",
    "TimerStatus",
]
