from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


MAIN_REMINDER_ID = "main"
MIN_INTERVAL_VALUE = 1
MAX_INTERVAL_VALUE = 99999


class IntervalUnit(str, Enum):
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"

    @property
    def seconds(self) -> int:
        if self is IntervalUnit.HOURS:
            return 3600
        if self is IntervalUnit.SECONDS:
            return 1
        return 60


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    WAITING = "waiting"
    ALERT_ACTIVE = "alert_active"


@dataclass(frozen=True)
class IntervalReminder:
    id: str
    title: str
    enabled: bool
    interval_value: int
    interval_unit: IntervalUnit
    next_trigger_at: Optional[dt.datetime]
    paused_remaining_ms: Optional[int]
    created_at: dt.datetime
    # countdown frozen while the active-hours window is closed
    waiting_remaining_ms: Optional[int] = None

    kind = "interval"

    @property
    def interval(self) -> dt.timedelta:
        return dt.timedelta(seconds=self.interval_value * self.interval_unit.seconds)

    @property
    def interval_ms(self) -> int:
        return self.interval_value * self.interval_unit.seconds * 1000


@dataclass(frozen=True)
class OneTimeReminder:
    id: str
    title: str
    enabled: bool
    target_at: Optional[dt.datetime]
    created_at: dt.datetime
    waiting_remaining_ms: Optional[int] = None

    kind = "onetime"


ReminderDefinition = Union[IntervalReminder, OneTimeReminder]


@dataclass(frozen=True)
class MainReminderSettings:
    interval_value: int = 45
    interval_unit: IntervalUnit = IntervalUnit.MINUTES
    message_prefix: str = "You have been sitting for "
    message_suffix: str = ", time to stand up and move."
    title: str = "Stand up and move"

    def message(self) -> str:
        return f"{self.message_prefix}{self.interval_value} {self.interval_unit.value}{self.message_suffix}"


@dataclass(frozen=True)
class TimerStatus:
    id: str
    time_left_ms: int
    total_time_ms: int
    status: TimerState


@dataclass(frozen=True)
class AlertSnapshot:
    reminder_id: str
    title: str
    message: str
    fired_at: dt.datetime


def interval_ms(value: int, unit: IntervalUnit) -> int:
    return value * unit.seconds * 1000


def target_of(reminder: ReminderDefinition) -> Optional[dt.datetime]:
    if isinstance(reminder, IntervalReminder):
        return reminder.next_trigger_at
    return reminder.target_at
