from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Callable, List, Optional

from ..reminders.models import AlertSnapshot


ENQUEUED = "enqueued"
DISMISSED = "dismissed"

AlertListener = Callable[[str, AlertSnapshot], None]

logger = logging.getLogger("breaktime.alerts")


class AlertDispatcher:
    """Fired, unacknowledged alerts in the order they were raised.

    Holds at most one alert per reminder id. Listeners receive
    ``(event, snapshot)`` with event ``"enqueued"`` or ``"dismissed"``.
    """

    def __init__(self) -> None:
        self._alerts: "OrderedDict[str, AlertSnapshot]" = OrderedDict()
        self._listeners: List[AlertListener] = []

    def add_listener(self, listener: AlertListener) -> None:
        if not callable(listener):
            raise ValueError("Listener must be callable")
        self._listeners.append(listener)

    def remove_listener(self, listener: AlertListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: str, snapshot: AlertSnapshot) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, snapshot)
            except Exception:
                logger.exception(
                    "alert_listener_failed event=%s id=%s", event, snapshot.reminder_id
                )

    def enqueue(self, snapshot: AlertSnapshot) -> bool:
        if snapshot.reminder_id in self._alerts:
            return False
        self._alerts[snapshot.reminder_id] = snapshot
        logger.info("alert_enqueued id=%s", snapshot.reminder_id)
        self._emit(ENQUEUED, snapshot)
        return True

    def dismiss(self, reminder_id: str) -> Optional[AlertSnapshot]:
        snapshot = self._alerts.pop(reminder_id, None)
        if snapshot is None:
            return None
        logger.info("alert_dismissed id=%s", reminder_id)
        self._emit(DISMISSED, snapshot)
        return snapshot

    def dismiss_latest(self) -> Optional[AlertSnapshot]:
        if not self._alerts:
            return None
        reminder_id = next(reversed(self._alerts))
        return self.dismiss(reminder_id)

    def latest(self) -> Optional[AlertSnapshot]:
        if not self._alerts:
            return None
        return self._alerts[next(reversed(self._alerts))]

    def get(self, reminder_id: str) -> Optional[AlertSnapshot]:
        return self._alerts.get(reminder_id)

    def ids(self) -> List[str]:
        return list(self._alerts.keys())

    def snapshots(self) -> List[AlertSnapshot]:
        return list(self._alerts.values())

    def __contains__(self, reminder_id: object) -> bool:
        return reminder_id in self._alerts

    def __len__(self) -> int:
        return len(self._alerts)
