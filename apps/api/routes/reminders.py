from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, HTTPException

from apps.api import state
from apps.api.schemas.reminders import (
    ReminderCreateRequest,
    ReminderResponse,
    ReminderToggleRequest,
    ReminderUpdateRequest,
)
from packages.core.reminders.models import IntervalReminder, ReminderDefinition
from packages.core.reminders.service import ReminderNotFoundError, ReminderValidationError
from packages.core.schedule.engine import ReminderEngine


router = APIRouter(prefix="/reminders", tags=["reminders"])


def _engine() -> ReminderEngine:
    return state.get_engine()


def _persist(engine: ReminderEngine) -> None:
    state.persist(engine)


def _aware(value: Optional[datetime], engine: ReminderEngine) -> Optional[datetime]:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=ZoneInfo(engine.active_hours.timezone))


def _to_response(engine: ReminderEngine, reminder: ReminderDefinition) -> ReminderResponse:
    status = engine.status(reminder.id)
    payload: Dict[str, Any] = {
        "id": reminder.id,
        "title": reminder.title,
        "type": reminder.kind,
        "enabled": reminder.enabled,
        "created_at": reminder.created_at,
        "status": status.status.value,
        "time_left_ms": status.time_left_ms,
        "total_time_ms": status.total_time_ms,
    }
    if isinstance(reminder, IntervalReminder):
        payload.update(
            interval_value=reminder.interval_value,
            interval_unit=reminder.interval_unit.value,
            next_trigger_at=reminder.next_trigger_at,
            paused_remaining_ms=reminder.paused_remaining_ms,
        )
    else:
        payload["target_at"] = reminder.target_at
    return ReminderResponse(**payload)


@router.post("", response_model=ReminderResponse)
def create(payload: ReminderCreateRequest) -> ReminderResponse:
    engine = _engine()
    try:
        if payload.type == "onetime":
            reminder = engine.create_one_time(payload.title, _aware(payload.target_at, engine))
        else:
            if payload.interval_value is None:
                raise ReminderValidationError("interval_required")
            reminder = engine.create_interval(
                payload.title, payload.interval_value, payload.interval_unit
            )
    except ReminderValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    _persist(engine)
    return _to_response(engine, reminder)


@router.get("", response_model=List[ReminderResponse])
def list_all() -> List[ReminderResponse]:
    engine = _engine()
    return [_to_response(engine, reminder) for reminder in engine.list_reminders()]


@router.get("/{reminder_id}", response_model=ReminderResponse)
def get(reminder_id: str) -> ReminderResponse:
    engine = _engine()
    try:
        reminder = engine.get(reminder_id)
    except ReminderNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Reminder not found") from exc
    return _to_response(engine, reminder)


@router.patch("/{reminder_id}", response_model=ReminderResponse)
def update(reminder_id: str, payload: ReminderUpdateRequest) -> ReminderResponse:
    engine = _engine()
    try:
        updated = engine.update(
            reminder_id,
            title=payload.title,
            kind=payload.type,
            interval_value=payload.interval_value,
            interval_unit=payload.interval_unit,
            target_at=_aware(payload.target_at, engine),
        )
    except ReminderNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Reminder not found") from exc
    except ReminderValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    _persist(engine)
    return _to_response(engine, updated)


@router.post("/{reminder_id}/toggle")
def toggle(reminder_id: str, payload: Optional[ReminderToggleRequest] = None) -> Dict[str, Any]:
    engine = _engine()
    try:
        if payload is not None and payload.enabled is not None:
            reminder = engine.set_enabled(reminder_id, payload.enabled)
        else:
            reminder = engine.toggle(reminder_id)
    except ReminderNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Reminder not found") from exc
    except ReminderValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    _persist(engine)
    if reminder is None:
        return {"status": "deleted", "id": reminder_id, "reason": "stale"}
    return {"status": "ok", "reminder": _to_response(engine, reminder).model_dump(mode="json")}


@router.delete("/{reminder_id}")
def delete(reminder_id: str) -> Dict[str, Any]:
    engine = _engine()
    try:
        engine.delete(reminder_id)
    except ReminderNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Reminder not found") from exc
    except ReminderValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    _persist(engine)
    return {"status": "deleted", "id": reminder_id}
