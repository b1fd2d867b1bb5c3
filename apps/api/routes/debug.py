from __future__ import annotations

import os
from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from apps.api import state
from packages.core.schedule.engine import ReminderEngine


router = APIRouter(prefix="/api/debug", tags=["debug"])


def _is_debug_enabled() -> bool:
    return os.getenv("BREAKTIME_DEBUG", "false").lower() == "true"


def _engine() -> ReminderEngine:
    return state.get_engine()


@router.post("/tick")
def tick() -> Dict[str, Any]:
    if not _is_debug_enabled():
        raise HTTPException(status_code=404, detail="not_found")
    fired = _engine().tick()
    return {"fired": [snapshot.reminder_id for snapshot in fired]}


@router.get("/state")
def snapshot() -> Dict[str, Any]:
    if not _is_debug_enabled():
        raise HTTPException(status_code=404, detail="not_found")
    engine = _engine()
    return {
        "now": engine.clock.now().isoformat(),
        "timer_state": engine.timer_state().value,
        "paused": engine.scheduler.paused,
        "alerts": engine.dispatcher.ids(),
        "gate_open_until": (
            engine.scheduler.next_gate_boundary().isoformat()
            if engine.scheduler.next_gate_boundary()
            else None
        ),
    }
