"""Active-hours gate: decides whether reminders may count down at an instant.

Wall-clock checks run in the config's timezone; instants passed in and returned
are timezone-aware.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Protocol, Tuple
from zoneinfo import ZoneInfo


SEARCH_HORIZON_DAYS = 366


class WorkMode(str, Enum):
    EVERYDAY = "everyday"
    BIG_SMALL = "big-small"
    WEEKEND = "weekend"


class HolidayCalendar(Protocol):
    def is_holiday(self, day: dt.date) -> bool:
        """Return True if the day is a statutory holiday."""


@dataclass(frozen=True)
class TimeRange:
    start: str
    end: str

    def is_blank(self) -> bool:
        return not self.start.strip() or not self.end.strip()

    def bounds(self) -> Tuple[dt.time, dt.time]:
        return _parse_hhmm(self.start), _parse_hhmm(self.end)

    def contains(self, moment: dt.time) -> bool:
        start, end = self.bounds()
        if start < end:
            return start <= moment < end
        # wraps past midnight
        return moment >= start or moment < end


@dataclass(frozen=True)
class ActiveHoursConfig:
    enabled: bool = False
    work_mode: WorkMode = WorkMode.EVERYDAY
    is_big_week: bool = True
    skip_holidays: bool = False
    ranges: Tuple[TimeRange, ...] = field(default_factory=tuple)
    timezone: str = "UTC"

    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def _parse_hhmm(value: str) -> dt.time:
    hours, _, minutes = value.strip().partition(":")
    return dt.time(int(hours), int(minutes or 0))


def prune_ranges(ranges: Iterable[TimeRange]) -> Tuple[TimeRange, ...]:
    return tuple(time_range for time_range in ranges if not time_range.is_blank())


def is_day_eligible(
    day: dt.date, config: ActiveHoursConfig, holidays: Optional[HolidayCalendar] = None
) -> bool:
    weekday = day.weekday()
    if config.work_mode == WorkMode.WEEKEND:
        eligible = weekday >= 5
    elif config.work_mode == WorkMode.BIG_SMALL:
        if weekday < 5:
            eligible = True
        elif weekday == 5:
            eligible = config.is_big_week
        else:
            eligible = False
    else:
        eligible = True
    if eligible and config.skip_holidays and holidays is not None:
        eligible = not holidays.is_holiday(day)
    return eligible


def is_active(
    now: dt.datetime, config: ActiveHoursConfig, holidays: Optional[HolidayCalendar] = None
) -> bool:
    if not config.enabled:
        return True
    local = now.astimezone(config.zone())
    if not is_day_eligible(local.date(), config, holidays):
        return False
    ranges = prune_ranges(config.ranges)
    if not ranges:
        return True
    moment = local.time().replace(tzinfo=None)
    return any(time_range.contains(moment) for time_range in ranges)


def _day_candidates(day: dt.date, config: ActiveHoursConfig) -> List[dt.datetime]:
    zone = config.zone()
    candidates = [dt.datetime.combine(day, dt.time(0, 0), tzinfo=zone)]
    for time_range in prune_ranges(config.ranges):
        start, end = time_range.bounds()
        candidates.append(dt.datetime.combine(day, start, tzinfo=zone))
        candidates.append(dt.datetime.combine(day, end, tzinfo=zone))
    return sorted(set(candidates))


def next_boundary(
    now: dt.datetime, config: ActiveHoursConfig, holidays: Optional[HolidayCalendar] = None
) -> Optional[dt.datetime]:
    """Return the earliest instant after ``now`` where ``is_active`` flips.

    Returns None when the gate is disabled or nothing flips within a year.
    """
    if not config.enabled:
        return None
    current = is_active(now, config, holidays)
    local_day = now.astimezone(config.zone()).date()
    for offset in range(SEARCH_HORIZON_DAYS + 1):
        day = local_day + dt.timedelta(days=offset)
        for candidate in _day_candidates(day, config):
            if candidate <= now:
                continue
            if is_active(candidate, config, holidays) != current:
                return candidate.astimezone(now.tzinfo or dt.timezone.utc)
    return None
