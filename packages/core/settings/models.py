from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..reminders.models import MainReminderSettings, ReminderDefinition
from ..schedule.active_hours import ActiveHoursConfig


@dataclass(frozen=True)
class AppSettings:
    main: MainReminderSettings = field(default_factory=MainReminderSettings)
    active_hours: ActiveHoursConfig = field(default_factory=ActiveHoursConfig)
    custom_reminders: Tuple[ReminderDefinition, ...] = ()
    timer_started: bool = False
    timer_paused: bool = False
    main_next_trigger_at: Optional[dt.datetime] = None
    main_paused_remaining_ms: Optional[int] = None
    main_waiting_remaining_ms: Optional[int] = None
