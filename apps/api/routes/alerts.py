from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException

from apps.api import state
from apps.api.notifications import render_message
from apps.api.schemas.alerts import AlertResponse
from packages.core.reminders.models import AlertSnapshot
from packages.core.schedule.engine import ReminderEngine


router = APIRouter(prefix="/alerts", tags=["alerts"])


def _engine() -> ReminderEngine:
    return state.get_engine()


def _to_response(snapshot: AlertSnapshot) -> AlertResponse:
    return AlertResponse(
        reminder_id=snapshot.reminder_id,
        title=snapshot.title,
        message=snapshot.message,
        display_message=render_message(snapshot.message),
        fired_at=snapshot.fired_at,
    )


@router.get("", response_model=List[AlertResponse])
def list_alerts() -> List[AlertResponse]:
    return [_to_response(snapshot) for snapshot in _engine().alerts()]


@router.post("/dismiss-latest", response_model=AlertResponse)
def dismiss_latest() -> AlertResponse:
    engine = _engine()
    snapshot = engine.dismiss_latest()
    if snapshot is None:
        raise HTTPException(status_code=404, detail="No active alerts")
    state.persist(engine)
    return _to_response(snapshot)


@router.post("/{reminder_id}/dismiss", response_model=AlertResponse)
def dismiss(reminder_id: str) -> AlertResponse:
    engine = _engine()
    snapshot = engine.dismiss(reminder_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Alert not found")
    state.persist(engine)
    return _to_response(snapshot)
