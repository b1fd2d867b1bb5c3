from __future__ import annotations

import dataclasses
import datetime as dt
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..reminders.models import (
    MAIN_REMINDER_ID,
    AlertSnapshot,
    IntervalReminder,
    OneTimeReminder,
    ReminderDefinition,
    TimerState,
    TimerStatus,
    target_of,
)
from ..reminders.service import ReminderRegistry
from .active_hours import ActiveHoursConfig, HolidayCalendar, is_active, next_boundary
from .alerts import AlertDispatcher


CUSTOM_ALERT_TITLE = "Reminder"

logger = logging.getLogger("breaktime.scheduler")


def _ms(delta: dt.timedelta) -> int:
    return int(delta.total_seconds() * 1000)


@dataclass
class _Runtime:
    state: TimerState = TimerState.IDLE
    time_left_ms: int = 0
    total_time_ms: int = 0


class SchedulerCore:
    """Advances every countdown on each tick and owns the global timer control.

    Interval reminders are paused by the global pause; one-time reminders point
    at an absolute instant and ignore it. While the active-hours gate is closed
    every enabled reminder waits with its remaining time frozen in
    ``waiting_remaining_ms``, which is stored on the definition so a settings
    reload resumes from the same value.
    """

    def __init__(
        self,
        registry: ReminderRegistry,
        dispatcher: AlertDispatcher,
        holidays: Optional[HolidayCalendar] = None,
    ) -> None:
        self._registry = registry
        self._dispatcher = dispatcher
        self._holidays = holidays
        self._runtime: Dict[str, _Runtime] = {}
        self._paused = False
        self._gate_config: Optional[ActiveHoursConfig] = None
        self._gate_open = True
        self._gate_until: Optional[dt.datetime] = None
        self._gate_checked_at: Optional[dt.datetime] = None

    # --- global timer ---
    @property
    def paused(self) -> bool:
        return self._paused

    def timer_state(self) -> TimerState:
        if not self._registry.main.enabled:
            return TimerState.IDLE
        if self._paused:
            return TimerState.PAUSED
        return TimerState.RUNNING

    def start(self, now: dt.datetime) -> None:
        main = self._registry.main
        if main.enabled:
            return
        self._registry.replace(
            dataclasses.replace(
                main, enabled=True, next_trigger_at=now + main.interval, paused_remaining_ms=None
            )
        )
        self._paused = False
        logger.info("timer_started next_trigger_at=%s", self._registry.main.next_trigger_at)
        self.refresh_all(now)

    def pause(self, now: dt.datetime) -> None:
        if self._paused:
            return
        self._paused = True
        logger.info("timer_paused")
        self.refresh_all(now)

    def resume(self, now: dt.datetime) -> None:
        if not self._paused:
            return
        self._paused = False
        logger.info("timer_resumed")
        self.refresh_all(now)

    def toggle_timer(self, now: dt.datetime) -> TimerState:
        state = self.timer_state()
        if state == TimerState.IDLE:
            self.start(now)
        elif state == TimerState.PAUSED:
            self.resume(now)
        else:
            self.pause(now)
        return self.timer_state()

    def restore_paused(self, paused: bool) -> None:
        self._paused = paused

    # --- active-hours gate ---
    def gate_open(self, now: dt.datetime) -> bool:
        config = self._registry.active_hours
        stale = (
            config != self._gate_config
            or self._gate_checked_at is None
            or now < self._gate_checked_at
            or (self._gate_until is not None and now >= self._gate_until)
        )
        if stale:
            self._gate_open = is_active(now, config, self._holidays)
            self._gate_until = next_boundary(now, config, self._holidays)
            self._gate_config = config
            self._gate_checked_at = now
            logger.debug("gate_evaluated open=%s until=%s", self._gate_open, self._gate_until)
        return self._gate_open

    def next_gate_boundary(self) -> Optional[dt.datetime]:
        return self._gate_until

    # --- ticking ---
    def tick(self, now: dt.datetime) -> List[AlertSnapshot]:
        if self._registry.active_hours.enabled and not self._registry.main.enabled:
            self.start(now)
        for reminder_id in self._registry.purge_stale(now, keep=self._dispatcher.ids()):
            self.forget(reminder_id)

        fired: List[AlertSnapshot] = []
        for reminder in self._registry.list_all():
            snapshot = self._evaluate(reminder, now, allow_fire=True)
            if snapshot is not None:
                fired.append(snapshot)
        return fired

    def refresh(self, reminder_id: str, now: dt.datetime) -> None:
        """Re-derive one reminder's status after a command, without firing it."""
        reminder = self._registry.find(reminder_id)
        if reminder is None:
            self.forget(reminder_id)
            return
        self._evaluate(reminder, now, allow_fire=False)

    def refresh_all(self, now: dt.datetime) -> None:
        for reminder in self._registry.list_all():
            self._evaluate(reminder, now, allow_fire=False)

    def rearm(self, reminder_id: str, now: dt.datetime) -> Optional[ReminderDefinition]:
        """Handle an acknowledged alert.

        Interval reminders restart a full interval from ``now``; one-time
        reminders are deleted and None is returned.
        """
        reminder = self._registry.find(reminder_id)
        if reminder is None:
            self.forget(reminder_id)
            return None
        if isinstance(reminder, OneTimeReminder):
            self._registry.delete(reminder_id)
            self.forget(reminder_id)
            return None
        rearmed = self._store(
            reminder,
            next_trigger_at=now + reminder.interval,
            paused_remaining_ms=None,
            waiting_remaining_ms=None,
        )
        self._runtime[reminder_id] = _Runtime()
        self._evaluate(rearmed, now, allow_fire=False)
        logger.info("reminder_rearmed id=%s next_trigger_at=%s", reminder_id, rearmed.next_trigger_at)
        return rearmed

    def forget(self, reminder_id: str) -> None:
        self._runtime.pop(reminder_id, None)

    def resync(self, now: dt.datetime) -> None:
        """Drop runtime state of reminders that no longer exist, then refresh."""
        live = {reminder.id for reminder in self._registry.list_all()}
        for reminder_id in list(self._runtime):
            if reminder_id not in live:
                self.forget(reminder_id)
        self.refresh_all(now)

    def _store(self, reminder: ReminderDefinition, **changes) -> ReminderDefinition:
        updated = dataclasses.replace(reminder, **changes)
        self._registry.replace(updated)
        return updated

    def _evaluate(
        self, reminder: ReminderDefinition, now: dt.datetime, allow_fire: bool
    ) -> Optional[AlertSnapshot]:
        runtime = self._runtime.setdefault(reminder.id, _Runtime())
        runtime.total_time_ms = self._total_ms(reminder)

        if reminder.id in self._dispatcher:
            runtime.state = TimerState.ALERT_ACTIVE
            runtime.time_left_ms = 0
            return None

        target = target_of(reminder)
        paused_ms = reminder.paused_remaining_ms if isinstance(reminder, IntervalReminder) else None
        if not reminder.enabled or (target is None and paused_ms is None):
            if reminder.waiting_remaining_ms is not None:
                reminder = self._store(reminder, waiting_remaining_ms=None)
            runtime.state = TimerState.IDLE
            runtime.time_left_ms = self._idle_left_ms(reminder, now)
            return None

        waiting_ms = reminder.waiting_remaining_ms
        if isinstance(reminder, IntervalReminder):
            if self._paused:
                if paused_ms is None:
                    paused_ms = waiting_ms if waiting_ms is not None else max(0, _ms(target - now))
                    self._store(reminder, paused_remaining_ms=paused_ms, waiting_remaining_ms=None)
                runtime.state = TimerState.PAUSED
                runtime.time_left_ms = paused_ms
                return None
            if paused_ms is not None:
                reminder = self._store(
                    reminder,
                    next_trigger_at=now + dt.timedelta(milliseconds=paused_ms),
                    paused_remaining_ms=None,
                )
                target = reminder.next_trigger_at

        if not self.gate_open(now):
            if waiting_ms is None:
                waiting_ms = max(0, _ms(target - now))
                self._store(reminder, waiting_remaining_ms=waiting_ms)
            runtime.state = TimerState.WAITING
            runtime.time_left_ms = waiting_ms
            return None

        if waiting_ms is not None:
            # interval reminders resume from the frozen countdown; one-time
            # reminders keep their absolute target
            if isinstance(reminder, IntervalReminder):
                reminder = self._store(
                    reminder,
                    next_trigger_at=now + dt.timedelta(milliseconds=waiting_ms),
                    waiting_remaining_ms=None,
                )
            else:
                reminder = self._store(reminder, waiting_remaining_ms=None)
            target = target_of(reminder)

        time_left = _ms(target - now)
        if time_left > 0 or not allow_fire:
            runtime.state = TimerState.RUNNING
            runtime.time_left_ms = max(0, time_left)
            return None

        runtime.state = TimerState.ALERT_ACTIVE
        runtime.time_left_ms = 0
        snapshot = self._snapshot(reminder, now)
        self._dispatcher.enqueue(snapshot)
        logger.info("reminder_fired id=%s kind=%s late_ms=%s", reminder.id, reminder.kind, -time_left)
        return snapshot

    def _snapshot(self, reminder: ReminderDefinition, now: dt.datetime) -> AlertSnapshot:
        if reminder.id == MAIN_REMINDER_ID:
            settings = self._registry.main_settings
            return AlertSnapshot(
                reminder_id=reminder.id,
                title=settings.title,
                message=settings.message(),
                fired_at=now,
            )
        return AlertSnapshot(
            reminder_id=reminder.id,
            title=CUSTOM_ALERT_TITLE,
            message=reminder.title,
            fired_at=now,
        )

    def _total_ms(self, reminder: ReminderDefinition) -> int:
        if isinstance(reminder, IntervalReminder):
            return reminder.interval_ms
        if reminder.target_at is None:
            return 0
        return max(0, _ms(reminder.target_at - reminder.created_at))

    def _idle_left_ms(self, reminder: ReminderDefinition, now: dt.datetime) -> int:
        if isinstance(reminder, IntervalReminder):
            if reminder.paused_remaining_ms is not None:
                return reminder.paused_remaining_ms
            if reminder.next_trigger_at is not None:
                return max(0, _ms(reminder.next_trigger_at - now))
            return reminder.interval_ms
        return 0

    # --- projection ---
    def status(self, reminder_id: str) -> TimerStatus:
        reminder = self._registry.get(reminder_id)
        runtime = self._runtime.get(reminder.id)
        if runtime is None:
            return TimerStatus(
                id=reminder.id,
                time_left_ms=0,
                total_time_ms=self._total_ms(reminder),
                status=TimerState.IDLE,
            )
        return TimerStatus(
            id=reminder.id,
            time_left_ms=runtime.time_left_ms,
            total_time_ms=runtime.total_time_ms,
            status=runtime.state,
        )

    def statuses(self) -> List[TimerStatus]:
        return [self.status(reminder.id) for reminder in self._registry.list_all()]
