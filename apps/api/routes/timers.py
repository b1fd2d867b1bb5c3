from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException

from apps.api import state
from apps.api.schemas.timers import TimerControlResponse, TimerStatusResponse
from packages.core.reminders.models import TimerStatus
from packages.core.reminders.service import ReminderNotFoundError
from packages.core.schedule.engine import ReminderEngine


router = APIRouter(prefix="/timers", tags=["timers"])


def _engine() -> ReminderEngine:
    return state.get_engine()


def _to_response(status: TimerStatus) -> TimerStatusResponse:
    return TimerStatusResponse(
        id=status.id,
        time_left_ms=status.time_left_ms,
        total_time_ms=status.total_time_ms,
        status=status.status.value,
    )


def _control(engine: ReminderEngine) -> TimerControlResponse:
    return TimerControlResponse(
        state=engine.timer_state().value,
        active_hours_enabled=engine.active_hours.enabled,
        next_gate_boundary=engine.scheduler.next_gate_boundary(),
    )


@router.get("", response_model=List[TimerStatusResponse])
def list_statuses() -> List[TimerStatusResponse]:
    return [_to_response(status) for status in _engine().statuses()]


@router.get("/control", response_model=TimerControlResponse)
def control() -> TimerControlResponse:
    return _control(_engine())


@router.post("/toggle", response_model=TimerControlResponse)
def toggle() -> TimerControlResponse:
    engine = _engine()
    engine.toggle_timer()
    state.persist(engine)
    return _control(engine)


@router.get("/{reminder_id}", response_model=TimerStatusResponse)
def get_status(reminder_id: str) -> TimerStatusResponse:
    try:
        status = _engine().status(reminder_id)
    except ReminderNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Reminder not found") from exc
    return _to_response(status)
