from __future__ import annotations

import datetime as dt
import json
import logging
import os
import tempfile
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..reminders.models import (
    MAX_INTERVAL_VALUE,
    MIN_INTERVAL_VALUE,
    IntervalReminder,
    IntervalUnit,
    MainReminderSettings,
    OneTimeReminder,
    ReminderDefinition,
)
from ..schedule.active_hours import ActiveHoursConfig, TimeRange, WorkMode, prune_ranges
from .models import AppSettings


DEFAULT_SETTINGS_PATH = os.path.join("apps", "api", "data", "settings.json")

logger = logging.getLogger("breaktime.settings")


def settings_path() -> str:
    return os.getenv("BREAKTIME_SETTINGS_PATH", DEFAULT_SETTINGS_PATH)


def _from_ms(value: Any) -> Optional[dt.datetime]:
    if value is None or value == "":
        return None
    return dt.datetime.fromtimestamp(int(value) / 1000, tz=dt.timezone.utc)


def _to_ms(value: Optional[dt.datetime]) -> Optional[int]:
    if value is None:
        return None
    return int(value.timestamp() * 1000)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def _main_from_dict(payload: Dict[str, Any]) -> MainReminderSettings:
    defaults = MainReminderSettings()
    try:
        value = int(payload.get("intervalValue", defaults.interval_value))
        unit = IntervalUnit(payload.get("intervalUnit", defaults.interval_unit.value))
    except (TypeError, ValueError):
        logger.warning("settings_main_interval_invalid payload=%s", payload.get("intervalValue"))
        value, unit = defaults.interval_value, defaults.interval_unit
    value = min(max(value, MIN_INTERVAL_VALUE), MAX_INTERVAL_VALUE)
    return MainReminderSettings(
        interval_value=value,
        interval_unit=unit,
        message_prefix=payload.get("messagePrefix", defaults.message_prefix),
        message_suffix=payload.get("messageSuffix", defaults.message_suffix),
        title=payload.get("mainTitle") or defaults.title,
    )


def _valid_range(time_range: TimeRange) -> bool:
    try:
        start, end = time_range.bounds()
    except ValueError:
        start = end = None
    if start is None or start == end:
        logger.warning("settings_range_dropped start=%s end=%s", time_range.start, time_range.end)
        return False
    return True


def _timezone(value: Any) -> str:
    name = str(value or "UTC")
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("settings_timezone_invalid value=%s", name)
        return "UTC"
    return name


def _active_hours_from_dict(payload: Dict[str, Any]) -> ActiveHoursConfig:
    ranges = [
        TimeRange(start=str(raw.get("start") or ""), end=str(raw.get("end") or ""))
        for raw in payload.get("activeHoursRanges") or []
        if isinstance(raw, dict)
    ]
    try:
        work_mode = WorkMode(payload.get("workMode", WorkMode.EVERYDAY.value))
    except ValueError:
        logger.warning("settings_work_mode_invalid value=%s", payload.get("workMode"))
        work_mode = WorkMode.EVERYDAY
    return ActiveHoursConfig(
        enabled=bool(payload.get("activeHoursEnabled", False)),
        work_mode=work_mode,
        is_big_week=bool(payload.get("isBigWeek", True)),
        skip_holidays=bool(payload.get("skipHolidays", False)),
        ranges=tuple(r for r in prune_ranges(ranges) if _valid_range(r)),
        timezone=_timezone(payload.get("timezone")),
    )


_BAD_VALUE_ERRORS = (KeyError, TypeError, ValueError, OverflowError, OSError)


def reminder_from_dict(raw: Dict[str, Any], now: dt.datetime) -> ReminderDefinition:
    created_at = _from_ms(raw.get("createdAt")) or now
    waiting_remaining_ms = _optional_int(raw.get("waitingRemainingTime"))
    kind = raw.get("type", IntervalReminder.kind)
    if kind == OneTimeReminder.kind:
        return OneTimeReminder(
            id=str(raw["id"]),
            title=str(raw.get("title", "")),
            enabled=bool(raw.get("enabled", True)),
            target_at=_from_ms(raw.get("targetDateTime")),
            created_at=created_at,
            waiting_remaining_ms=waiting_remaining_ms,
        )
    if kind != IntervalReminder.kind:
        raise ValueError(f"unknown reminder type: {kind}")
    value = int(raw["intervalValue"])
    if value < MIN_INTERVAL_VALUE or value > MAX_INTERVAL_VALUE:
        raise ValueError(f"interval value out of range: {value}")
    reminder = IntervalReminder(
        id=str(raw["id"]),
        title=str(raw.get("title", "")),
        enabled=bool(raw.get("enabled", True)),
        interval_value=value,
        interval_unit=IntervalUnit(raw.get("intervalUnit", IntervalUnit.MINUTES.value)),
        next_trigger_at=_from_ms(raw.get("nextTriggerTime")),
        paused_remaining_ms=_optional_int(raw.get("pausedRemainingTime")),
        created_at=created_at,
        waiting_remaining_ms=waiting_remaining_ms,
    )
    if reminder.enabled and reminder.next_trigger_at is None and reminder.paused_remaining_ms is None:
        reminder = IntervalReminder(
            **{**reminder.__dict__, "next_trigger_at": now + reminder.interval}
        )
    return reminder


def reminder_to_dict(reminder: ReminderDefinition) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": reminder.id,
        "title": reminder.title,
        "type": reminder.kind,
        "enabled": reminder.enabled,
        "createdAt": _to_ms(reminder.created_at),
        "waitingRemainingTime": reminder.waiting_remaining_ms,
    }
    if isinstance(reminder, IntervalReminder):
        payload.update(
            {
                "intervalValue": reminder.interval_value,
                "intervalUnit": reminder.interval_unit.value,
                "nextTriggerTime": _to_ms(reminder.next_trigger_at),
                "pausedRemainingTime": reminder.paused_remaining_ms,
            }
        )
    else:
        payload["targetDateTime"] = _to_ms(reminder.target_at)
    return payload


def _main_timer_from_dict(payload: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return {
            "main_next_trigger_at": _from_ms(payload.get("mainNextTriggerTime")),
            "main_paused_remaining_ms": _optional_int(payload.get("mainPausedRemainingTime")),
            "main_waiting_remaining_ms": _optional_int(payload.get("mainWaitingRemainingTime")),
        }
    except _BAD_VALUE_ERRORS as exc:
        logger.warning("settings_main_timer_reset error=%s", exc)
        return {}


def settings_from_dict(payload: Dict[str, Any], now: dt.datetime) -> AppSettings:
    """Build settings from a stored blob, filling in whatever is missing."""
    reminders: List[ReminderDefinition] = []
    seen = set()
    for raw in payload.get("customReminders") or []:
        if not isinstance(raw, dict):
            logger.warning("settings_reminder_dropped id=None error=not_an_object")
            continue
        try:
            reminder = reminder_from_dict(raw, now)
        except _BAD_VALUE_ERRORS as exc:
            logger.warning("settings_reminder_dropped id=%s error=%s", raw.get("id"), exc)
            continue
        if reminder.id in seen or reminder.id == "main":
            logger.warning("settings_reminder_dropped id=%s error=duplicate_id", reminder.id)
            continue
        seen.add(reminder.id)
        reminders.append(reminder)

    return AppSettings(
        main=_main_from_dict(payload),
        active_hours=_active_hours_from_dict(payload),
        custom_reminders=tuple(reminders),
        timer_started=bool(payload.get("timerStarted", False)),
        timer_paused=bool(payload.get("timerPaused", False)),
        **_main_timer_from_dict(payload),
    )


def settings_to_dict(settings: AppSettings) -> Dict[str, Any]:
    active_hours = settings.active_hours
    return {
        "intervalValue": settings.main.interval_value,
        "intervalUnit": settings.main.interval_unit.value,
        "messagePrefix": settings.main.message_prefix,
        "messageSuffix": settings.main.message_suffix,
        "mainTitle": settings.main.title,
        "timerStarted": settings.timer_started,
        "timerPaused": settings.timer_paused,
        "mainNextTriggerTime": _to_ms(settings.main_next_trigger_at),
        "mainPausedRemainingTime": settings.main_paused_remaining_ms,
        "mainWaitingRemainingTime": settings.main_waiting_remaining_ms,
        "activeHoursEnabled": active_hours.enabled,
        "workMode": active_hours.work_mode.value,
        "isBigWeek": active_hours.is_big_week,
        "skipHolidays": active_hours.skip_holidays,
        "activeHoursRanges": [
            {"start": time_range.start, "end": time_range.end}
            for time_range in active_hours.ranges
        ],
        "timezone": active_hours.timezone,
        "customReminders": [reminder_to_dict(reminder) for reminder in settings.custom_reminders],
    }


def load_settings(path: Optional[str] = None, now: Optional[dt.datetime] = None) -> AppSettings:
    config_path = path or settings_path()
    now = now or dt.datetime.now(dt.timezone.utc)
    if not os.path.exists(config_path):
        return AppSettings()
    try:
        with open(config_path, "r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning("settings_unreadable path=%s error=%s", config_path, exc)
        return AppSettings()
    if not isinstance(payload, dict):
        logger.warning("settings_unreadable path=%s error=not_an_object", config_path)
        return AppSettings()
    return settings_from_dict(payload, now)


def save_settings(settings: AppSettings, path: Optional[str] = None) -> None:
    config_path = path or settings_path()
    directory = os.path.dirname(config_path) or "."
    os.makedirs(directory, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", dir=directory, prefix=".settings-", suffix=".tmp", delete=False
    )
    try:
        with handle:
            json.dump(settings_to_dict(settings), handle, ensure_ascii=False, indent=2)
        os.replace(handle.name, config_path)
    except Exception:
        if os.path.exists(handle.name):
            os.remove(handle.name)
        raise
