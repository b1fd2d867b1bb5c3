from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class TimerStatusResponse(BaseModel):
    id: str
    time_left_ms: int
    total_time_ms: int
    status: str


class TimerControlResponse(BaseModel):
    state: str
    active_hours_enabled: bool
    next_gate_boundary: Optional[datetime] = None
