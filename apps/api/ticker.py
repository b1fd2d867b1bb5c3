from __future__ import annotations

import logging
import os

from apscheduler.schedulers.background import BackgroundScheduler

from apps.api.observability import tick_span
from packages.core.schedule.engine import ReminderEngine


logger = logging.getLogger("breaktime.ticker")


def _tick_seconds() -> float:
    return float(os.getenv("BREAKTIME_TICK_SECONDS", "1"))


def run_tick(engine: ReminderEngine) -> None:
    with tick_span() as span:
        try:
            fired = engine.tick()
        except Exception as exc:
            logger.exception("tick_failed error=%s", exc)
            return
        if span is not None:
            span.set_attribute("breaktime.fired", len(fired))
    for snapshot in fired:
        logger.debug("tick_fired id=%s", snapshot.reminder_id)


def start_ticker(engine: ReminderEngine) -> BackgroundScheduler:
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        run_tick,
        "interval",
        seconds=_tick_seconds(),
        args=[engine],
        id="tick",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info("ticker_started seconds=%s", _tick_seconds())
    return scheduler
