from __future__ import annotations

import logging
import threading
from typing import Optional

from apps.api.notifications import log_alert_event
from packages.core.schedule.clock import Clock
from packages.core.schedule.engine import ReminderEngine
from packages.core.schedule.holidays import load_holiday_calendar
from packages.core.settings.store import load_settings, save_settings


logger = logging.getLogger("breaktime.api")

_ENGINE: Optional[ReminderEngine] = None
_ENGINE_LOCK = threading.Lock()


def build_engine(clock: Optional[Clock] = None) -> ReminderEngine:
    engine = ReminderEngine(clock=clock, holidays=load_holiday_calendar())
    engine.load_settings(load_settings(now=engine.clock.now()))
    engine.add_alert_listener(log_alert_event)
    return engine


def get_engine() -> ReminderEngine:
    global _ENGINE
    with _ENGINE_LOCK:
        if _ENGINE is None:
            _ENGINE = build_engine()
        return _ENGINE


def set_engine(engine: Optional[ReminderEngine]) -> None:
    global _ENGINE
    with _ENGINE_LOCK:
        _ENGINE = engine


def persist(engine: ReminderEngine) -> None:
    # held across export and write so concurrent commands save in order
    with engine.lock:
        try:
            save_settings(engine.export_settings())
        except OSError as exc:
            logger.exception("settings_save_failed error=%s", exc)
