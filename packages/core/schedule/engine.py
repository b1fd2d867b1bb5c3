from __future__ import annotations

import datetime as dt
import logging
import threading
from typing import List, Optional, Union

from ..reminders.models import (
    AlertSnapshot,
    IntervalReminder,
    IntervalUnit,
    MainReminderSettings,
    OneTimeReminder,
    ReminderDefinition,
    TimerState,
    TimerStatus,
)
from ..reminders.service import ReminderRegistry, build_main
from ..settings.models import AppSettings
from .active_hours import ActiveHoursConfig, HolidayCalendar
from .alerts import AlertDispatcher, AlertListener
from .clock import Clock, SystemClock
from .scheduler import SchedulerCore


logger = logging.getLogger("breaktime.engine")


class ReminderEngine:
    """Single-writer entry point for the presentation layer and the ticker.

    Every command and every tick holds the same lock, so a UI edit never
    interleaves with a tick half-way through.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        holidays: Optional[HolidayCalendar] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        self._clock = clock or SystemClock()
        self._lock = threading.RLock()
        now = self._clock.now()
        self._registry = ReminderRegistry(created_at=now)
        self._dispatcher = AlertDispatcher()
        self._scheduler = SchedulerCore(self._registry, self._dispatcher, holidays=holidays)
        if settings is not None:
            self.load_settings(settings)

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def registry(self) -> ReminderRegistry:
        return self._registry

    @property
    def dispatcher(self) -> AlertDispatcher:
        return self._dispatcher

    @property
    def scheduler(self) -> SchedulerCore:
        return self._scheduler

    def add_alert_listener(self, listener: AlertListener) -> None:
        with self._lock:
            self._dispatcher.add_listener(listener)

    # --- ticking and timer control ---
    def tick(self) -> List[AlertSnapshot]:
        with self._lock:
            return self._scheduler.tick(self._clock.now())

    def toggle_timer(self) -> TimerState:
        with self._lock:
            state = self._scheduler.toggle_timer(self._clock.now())
            logger.info("timer_toggled state=%s", state.value)
            return state

    def timer_state(self) -> TimerState:
        with self._lock:
            return self._scheduler.timer_state()

    # --- alerts ---
    def dismiss(self, reminder_id: str) -> Optional[AlertSnapshot]:
        with self._lock:
            snapshot = self._dispatcher.dismiss(reminder_id)
            if snapshot is None:
                return None
            self._scheduler.rearm(reminder_id, self._clock.now())
            return snapshot

    acknowledge = dismiss

    def dismiss_latest(self) -> Optional[AlertSnapshot]:
        with self._lock:
            latest = self._dispatcher.latest()
            if latest is None:
                return None
            return self.dismiss(latest.reminder_id)

    def alerts(self) -> List[AlertSnapshot]:
        with self._lock:
            return self._dispatcher.snapshots()

    # --- reminders ---
    def create_interval(
        self, title: str, interval_value: int, interval_unit: Union[str, IntervalUnit]
    ) -> IntervalReminder:
        with self._lock:
            now = self._clock.now()
            reminder = self._registry.create_interval(title, interval_value, interval_unit, now)
            self._scheduler.refresh(reminder.id, now)
            return self._registry.get(reminder.id)

    def create_one_time(self, title: str, target_at: Optional[dt.datetime]) -> OneTimeReminder:
        with self._lock:
            now = self._clock.now()
            reminder = self._registry.create_one_time(title, target_at, now)
            self._scheduler.refresh(reminder.id, now)
            return reminder

    def update(self, reminder_id: str, **fields) -> ReminderDefinition:
        with self._lock:
            now = self._clock.now()
            self._registry.update(reminder_id, now, **fields)
            self._scheduler.refresh(reminder_id, now)
            return self._registry.get(reminder_id)

    def delete(self, reminder_id: str) -> ReminderDefinition:
        with self._lock:
            reminder = self._registry.delete(reminder_id)
            self._dispatcher.dismiss(reminder_id)
            self._scheduler.forget(reminder_id)
            return reminder

    def set_enabled(self, reminder_id: str, enabled: bool) -> Optional[ReminderDefinition]:
        with self._lock:
            now = self._clock.now()
            reminder = self._registry.set_enabled(reminder_id, enabled, now)
            return self._after_toggle(reminder_id, reminder, now)

    def toggle(self, reminder_id: str) -> Optional[ReminderDefinition]:
        with self._lock:
            now = self._clock.now()
            reminder = self._registry.toggle(reminder_id, now)
            return self._after_toggle(reminder_id, reminder, now)

    def _after_toggle(
        self, reminder_id: str, reminder: Optional[ReminderDefinition], now: dt.datetime
    ) -> Optional[ReminderDefinition]:
        if reminder is None:
            self._dispatcher.dismiss(reminder_id)
            self._scheduler.forget(reminder_id)
            return None
        self._scheduler.refresh(reminder_id, now)
        return self._registry.get(reminder_id)

    def get(self, reminder_id: str) -> ReminderDefinition:
        with self._lock:
            return self._registry.get(reminder_id)

    def list_reminders(self) -> List[ReminderDefinition]:
        with self._lock:
            return self._registry.list_custom()

    # --- projection ---
    def status(self, reminder_id: str) -> TimerStatus:
        with self._lock:
            return self._scheduler.status(reminder_id)

    def statuses(self) -> List[TimerStatus]:
        with self._lock:
            return self._scheduler.statuses()

    # --- settings ---
    @property
    def main_settings(self) -> MainReminderSettings:
        return self._registry.main_settings

    @property
    def active_hours(self) -> ActiveHoursConfig:
        return self._registry.active_hours

    def update_main(self, **fields) -> MainReminderSettings:
        with self._lock:
            now = self._clock.now()
            settings = self._registry.update_main(now, **fields)
            self._scheduler.refresh(self._registry.main.id, now)
            return settings

    def set_active_hours(self, config: ActiveHoursConfig) -> ActiveHoursConfig:
        with self._lock:
            config = self._registry.set_active_hours(config)
            self._scheduler.refresh_all(self._clock.now())
            return config

    def load_settings(self, settings: AppSettings) -> None:
        with self._lock:
            now = self._clock.now()
            main = build_main(
                settings.main,
                created_at=now,
                enabled=settings.timer_started,
                next_trigger_at=settings.main_next_trigger_at,
                paused_remaining_ms=settings.main_paused_remaining_ms,
                waiting_remaining_ms=settings.main_waiting_remaining_ms,
            )
            if main.enabled and main.next_trigger_at is None and main.paused_remaining_ms is None:
                main = build_main(
                    settings.main, created_at=now, enabled=True,
                    next_trigger_at=now + main.interval,
                )
            self._registry.restore(
                settings.main, main, settings.active_hours, settings.custom_reminders
            )
            self._scheduler.restore_paused(settings.timer_started and settings.timer_paused)
            for reminder_id in self._dispatcher.ids():
                if self._registry.find(reminder_id) is None:
                    self._dispatcher.dismiss(reminder_id)
            self._scheduler.resync(now)
            logger.info(
                "settings_loaded reminders=%s timer_started=%s",
                len(settings.custom_reminders),
                settings.timer_started,
            )

    def export_settings(self) -> AppSettings:
        with self._lock:
            main = self._registry.main
            return AppSettings(
                main=self._registry.main_settings,
                active_hours=self._registry.active_hours,
                custom_reminders=tuple(self._registry.list_custom()),
                timer_started=main.enabled,
                timer_paused=self._scheduler.paused,
                main_next_trigger_at=main.next_trigger_at,
                main_paused_remaining_ms=main.paused_remaining_ms,
                main_waiting_remaining_ms=main.waiting_remaining_ms,
            )
