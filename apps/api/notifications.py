from __future__ import annotations

import logging

from packages.core.reminders.models import AlertSnapshot
from packages.core.schedule.alerts import DISMISSED, ENQUEUED


logger = logging.getLogger("breaktime.notifications")


def render_message(text: str) -> str:
    """Expand the literal ``\\n`` escapes users type into reminder text."""
    return (text or "").replace("\\n", "\n")


def log_alert_event(event: str, snapshot: AlertSnapshot) -> None:
    if event == ENQUEUED:
        logger.info(
            "alert_shown id=%s title=%s message=%r",
            snapshot.reminder_id,
            snapshot.title,
            render_message(snapshot.message),
        )
    elif event == DISMISSED:
        logger.info("alert_hidden id=%s", snapshot.reminder_id)
