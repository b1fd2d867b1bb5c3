from __future__ import annotations

import dataclasses
import datetime as dt
import logging
import uuid
from typing import Dict, Iterable, List, Optional, Union
from zoneinfo import ZoneInfoNotFoundError

from ..schedule.active_hours import ActiveHoursConfig, prune_ranges
from .models import (
    MAIN_REMINDER_ID,
    MAX_INTERVAL_VALUE,
    MIN_INTERVAL_VALUE,
    IntervalReminder,
    IntervalUnit,
    MainReminderSettings,
    OneTimeReminder,
    ReminderDefinition,
)


logger = logging.getLogger("breaktime.reminders")


class ReminderValidationError(ValueError):
    pass


class ReminderNotFoundError(KeyError):
    def __str__(self) -> str:
        return f"reminder_not_found id={self.args[0]}"


def _new_id() -> str:
    return str(uuid.uuid4())


def _clean_title(title: Optional[str]) -> str:
    if title is None or not title.strip():
        raise ReminderValidationError("title_required")
    return title.strip()


def parse_unit(unit: Union[str, IntervalUnit]) -> IntervalUnit:
    try:
        return IntervalUnit(unit)
    except ValueError as exc:
        raise ReminderValidationError(f"invalid_interval_unit unit={unit}") from exc


def validate_interval(value: int, unit: Union[str, IntervalUnit]) -> IntervalUnit:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ReminderValidationError("interval_value_not_integer")
    if value < MIN_INTERVAL_VALUE or value > MAX_INTERVAL_VALUE:
        raise ReminderValidationError(
            f"interval_value_out_of_range value={value} "
            f"min={MIN_INTERVAL_VALUE} max={MAX_INTERVAL_VALUE}"
        )
    return parse_unit(unit)


def validate_target(target_at: Optional[dt.datetime], now: dt.datetime) -> dt.datetime:
    if target_at is None:
        raise ReminderValidationError("target_required")
    if target_at.tzinfo is None:
        raise ReminderValidationError("target_must_be_timezone_aware")
    if target_at <= now:
        raise ReminderValidationError("target_not_in_future")
    return target_at


def build_main(
    settings: MainReminderSettings,
    created_at: dt.datetime,
    enabled: bool = False,
    next_trigger_at: Optional[dt.datetime] = None,
    paused_remaining_ms: Optional[int] = None,
    waiting_remaining_ms: Optional[int] = None,
) -> IntervalReminder:
    return IntervalReminder(
        id=MAIN_REMINDER_ID,
        title=settings.title,
        enabled=enabled,
        interval_value=settings.interval_value,
        interval_unit=settings.interval_unit,
        next_trigger_at=next_trigger_at,
        paused_remaining_ms=paused_remaining_ms,
        created_at=created_at,
        waiting_remaining_ms=waiting_remaining_ms,
    )


class ReminderRegistry:
    """Authoritative copy of reminder definitions and gate configuration.

    The main reminder lives beside the custom mapping under the reserved id
    ``"main"``; its ``enabled`` flag means the global timer has been started.
    """

    def __init__(
        self,
        main_settings: Optional[MainReminderSettings] = None,
        active_hours: Optional[ActiveHoursConfig] = None,
        created_at: Optional[dt.datetime] = None,
    ) -> None:
        self._main_settings = main_settings or MainReminderSettings()
        self._main = build_main(
            self._main_settings, created_at or dt.datetime.now(dt.timezone.utc)
        )
        self._custom: Dict[str, ReminderDefinition] = {}
        self._active_hours = ActiveHoursConfig()
        if active_hours is not None:
            self.set_active_hours(active_hours)

    # --- lookups ---
    @property
    def main(self) -> IntervalReminder:
        return self._main

    @property
    def main_settings(self) -> MainReminderSettings:
        return self._main_settings

    @property
    def active_hours(self) -> ActiveHoursConfig:
        return self._active_hours

    def find(self, reminder_id: str) -> Optional[ReminderDefinition]:
        if reminder_id == MAIN_REMINDER_ID:
            return self._main
        return self._custom.get(reminder_id)

    def get(self, reminder_id: str) -> ReminderDefinition:
        reminder = self.find(reminder_id)
        if reminder is None:
            raise ReminderNotFoundError(reminder_id)
        return reminder

    def list_custom(self) -> List[ReminderDefinition]:
        return list(self._custom.values())

    def list_all(self) -> List[ReminderDefinition]:
        return [self._main, *self._custom.values()]

    # --- creation ---
    def create_interval(
        self,
        title: str,
        interval_value: int,
        interval_unit: Union[str, IntervalUnit],
        now: dt.datetime,
        enabled: bool = True,
    ) -> IntervalReminder:
        unit = validate_interval(interval_value, interval_unit)
        reminder = IntervalReminder(
            id=_new_id(),
            title=_clean_title(title),
            enabled=enabled,
            interval_value=interval_value,
            interval_unit=unit,
            next_trigger_at=None,
            paused_remaining_ms=None,
            created_at=now,
        )
        reminder = dataclasses.replace(reminder, next_trigger_at=now + reminder.interval)
        self._custom[reminder.id] = reminder
        logger.info("reminder_created id=%s kind=interval", reminder.id)
        return reminder

    def create_one_time(
        self, title: str, target_at: Optional[dt.datetime], now: dt.datetime
    ) -> OneTimeReminder:
        reminder = OneTimeReminder(
            id=_new_id(),
            title=_clean_title(title),
            enabled=True,
            target_at=validate_target(target_at, now),
            created_at=now,
        )
        self._custom[reminder.id] = reminder
        logger.info("reminder_created id=%s kind=onetime", reminder.id)
        return reminder

    def add(self, reminder: ReminderDefinition) -> None:
        """Insert an already-built definition, as loaded from a settings blob."""
        if reminder.id == MAIN_REMINDER_ID:
            raise ReminderValidationError("reserved_id")
        self._custom[reminder.id] = reminder

    # --- mutation ---
    def update(
        self,
        reminder_id: str,
        now: dt.datetime,
        title: Optional[str] = None,
        kind: Optional[str] = None,
        interval_value: Optional[int] = None,
        interval_unit: Optional[Union[str, IntervalUnit]] = None,
        target_at: Optional[dt.datetime] = None,
    ) -> ReminderDefinition:
        """Edit a custom reminder. Editing re-arms and re-enables it."""
        if reminder_id == MAIN_REMINDER_ID:
            raise ReminderValidationError("main_reminder_not_editable_here")
        current = self.get(reminder_id)
        new_kind = kind or current.kind
        new_title = _clean_title(title) if title is not None else current.title

        if new_kind == IntervalReminder.kind:
            value = interval_value
            unit = interval_unit
            if isinstance(current, IntervalReminder):
                value = current.interval_value if value is None else value
                unit = current.interval_unit if unit is None else unit
            if value is None or unit is None:
                raise ReminderValidationError("interval_required")
            unit = validate_interval(value, unit)
            updated: ReminderDefinition = IntervalReminder(
                id=current.id,
                title=new_title,
                enabled=True,
                interval_value=value,
                interval_unit=unit,
                next_trigger_at=now + dt.timedelta(seconds=value * unit.seconds),
                paused_remaining_ms=None,
                created_at=current.created_at,
            )
        elif new_kind == OneTimeReminder.kind:
            if target_at is None and isinstance(current, OneTimeReminder):
                target_at = current.target_at
            updated = OneTimeReminder(
                id=current.id,
                title=new_title,
                enabled=True,
                target_at=validate_target(target_at, now),
                created_at=current.created_at,
            )
        else:
            raise ReminderValidationError(f"invalid_kind kind={new_kind}")

        self._custom[reminder_id] = updated
        logger.info("reminder_updated id=%s kind=%s", reminder_id, updated.kind)
        return updated

    def replace(self, reminder: ReminderDefinition) -> None:
        """Write back scheduler-owned fields (trigger times, pause snapshots)."""
        if reminder.id == MAIN_REMINDER_ID:
            if not isinstance(reminder, IntervalReminder):
                raise ReminderValidationError("main_reminder_must_be_interval")
            self._main = reminder
            return
        if reminder.id not in self._custom:
            raise ReminderNotFoundError(reminder.id)
        self._custom[reminder.id] = reminder

    def delete(self, reminder_id: str) -> ReminderDefinition:
        if reminder_id == MAIN_REMINDER_ID:
            raise ReminderValidationError("main_reminder_not_deletable")
        reminder = self._custom.pop(reminder_id, None)
        if reminder is None:
            raise ReminderNotFoundError(reminder_id)
        logger.info("reminder_deleted id=%s", reminder_id)
        return reminder

    def set_enabled(
        self, reminder_id: str, enabled: bool, now: dt.datetime
    ) -> Optional[ReminderDefinition]:
        """Enable or disable a custom reminder.

        Interval reminders keep their trigger time across a disable. A one-time
        reminder whose target already passed is deleted on enable and None is
        returned.
        """
        current = self.get(reminder_id)
        if reminder_id == MAIN_REMINDER_ID:
            raise ReminderValidationError("main_reminder_uses_timer_toggle")
        if current.enabled == enabled:
            return current
        if isinstance(current, OneTimeReminder):
            if enabled and (current.target_at is None or current.target_at <= now):
                self.delete(reminder_id)
                logger.info("reminder_stale_dropped id=%s", reminder_id)
                return None
            updated: ReminderDefinition = dataclasses.replace(current, enabled=enabled)
        else:
            next_trigger_at = current.next_trigger_at
            if enabled and next_trigger_at is None and current.paused_remaining_ms is None:
                next_trigger_at = now + current.interval
            updated = dataclasses.replace(
                current, enabled=enabled, next_trigger_at=next_trigger_at
            )
        self._custom[reminder_id] = updated
        return updated

    def toggle(self, reminder_id: str, now: dt.datetime) -> Optional[ReminderDefinition]:
        return self.set_enabled(reminder_id, not self.get(reminder_id).enabled, now)

    def purge_stale(self, now: dt.datetime, keep: Iterable[str] = ()) -> List[str]:
        keep = set(keep)
        stale = [
            reminder.id
            for reminder in self._custom.values()
            if isinstance(reminder, OneTimeReminder)
            and not reminder.enabled
            and reminder.id not in keep
            and (reminder.target_at is None or reminder.target_at <= now)
        ]
        for reminder_id in stale:
            del self._custom[reminder_id]
            logger.info("reminder_stale_dropped id=%s", reminder_id)
        return stale

    def restore(
        self,
        main_settings: MainReminderSettings,
        main: IntervalReminder,
        active_hours: ActiveHoursConfig,
        reminders: Iterable[ReminderDefinition],
    ) -> None:
        """Replace all state with a loaded settings blob."""
        self.set_active_hours(active_hours)
        self._main_settings = main_settings
        self._main = main
        self._custom = {}
        for reminder in reminders:
            self.add(reminder)

    # --- configuration ---
    def update_main(
        self,
        now: dt.datetime,
        interval_value: Optional[int] = None,
        interval_unit: Optional[Union[str, IntervalUnit]] = None,
        message_prefix: Optional[str] = None,
        message_suffix: Optional[str] = None,
        title: Optional[str] = None,
    ) -> MainReminderSettings:
        value = self._main_settings.interval_value if interval_value is None else interval_value
        unit = validate_interval(
            value,
            self._main_settings.interval_unit if interval_unit is None else interval_unit,
        )
        interval_changed = (
            value != self._main_settings.interval_value
            or unit != self._main_settings.interval_unit
        )
        self._main_settings = dataclasses.replace(
            self._main_settings,
            interval_value=value,
            interval_unit=unit,
            message_prefix=(
                self._main_settings.message_prefix if message_prefix is None else message_prefix
            ),
            message_suffix=(
                self._main_settings.message_suffix if message_suffix is None else message_suffix
            ),
            title=_clean_title(title) if title is not None else self._main_settings.title,
        )

        main = build_main(
            self._main_settings,
            self._main.created_at,
            enabled=self._main.enabled,
            next_trigger_at=self._main.next_trigger_at,
            paused_remaining_ms=self._main.paused_remaining_ms,
            waiting_remaining_ms=self._main.waiting_remaining_ms,
        )
        if interval_changed and main.enabled:
            # a new interval restarts the current countdown
            main = dataclasses.replace(main, waiting_remaining_ms=None)
            if main.paused_remaining_ms is not None:
                main = dataclasses.replace(main, paused_remaining_ms=main.interval_ms)
            else:
                main = dataclasses.replace(main, next_trigger_at=now + main.interval)
        self._main = main
        return self._main_settings

    def set_active_hours(self, config: ActiveHoursConfig) -> ActiveHoursConfig:
        ranges = prune_ranges(config.ranges)
        try:
            config.zone()
            bounds = [time_range.bounds() for time_range in ranges]
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ReminderValidationError(f"invalid_active_hours error={exc}") from exc
        for start, end in bounds:
            if start == end:
                raise ReminderValidationError(f"empty_active_range start={start:%H:%M}")
        self._active_hours = dataclasses.replace(config, ranges=ranges)
        return self._active_hours
