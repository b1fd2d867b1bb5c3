from __future__ import annotations

import datetime as dt
import json
import logging
import os
from typing import Iterable, Optional


DEFAULT_HOLIDAYS_PATH = os.path.join("apps", "api", "data", "holidays.json")

logger = logging.getLogger("breaktime.holidays")


class StaticHolidayCalendar:
    def __init__(self, days: Iterable[dt.date] = ()) -> None:
        self._days = frozenset(days)

    def is_holiday(self, day: dt.date) -> bool:
        return day in self._days

    def __len__(self) -> int:
        return len(self._days)


def load_holiday_calendar(path: Optional[str] = None) -> StaticHolidayCalendar:
    calendar_path = path or os.getenv("BREAKTIME_HOLIDAYS_PATH", DEFAULT_HOLIDAYS_PATH)
    if not os.path.exists(calendar_path):
        return StaticHolidayCalendar()
    with open(calendar_path, "r", encoding="utf-8") as handle:
        payload = json.load(handle)
    days = []
    for raw in payload.get("holidays", []):
        try:
            days.append(dt.date.fromisoformat(str(raw)))
        except ValueError:
            logger.warning("holiday_skipped value=%s", raw)
    return StaticHolidayCalendar(days)
