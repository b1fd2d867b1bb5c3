from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


ReminderKind = Literal["interval", "onetime"]
IntervalUnitName = Literal["seconds", "minutes", "hours"]


class ReminderCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    type: ReminderKind = "interval"
    interval_value: Optional[int] = None
    interval_unit: IntervalUnitName = "minutes"
    target_at: Optional[datetime] = None


class ReminderUpdateRequest(BaseModel):
    title: Optional[str] = None
    type: Optional[ReminderKind] = None
    interval_value: Optional[int] = None
    interval_unit: Optional[IntervalUnitName] = None
    target_at: Optional[datetime] = None


class ReminderToggleRequest(BaseModel):
    enabled: Optional[bool] = None


class ReminderResponse(BaseModel):
    id: str
    title: str
    type: ReminderKind
    enabled: bool
    interval_value: Optional[int] = None
    interval_unit: Optional[IntervalUnitName] = None
    next_trigger_at: Optional[datetime] = None
    paused_remaining_ms: Optional[int] = None
    target_at: Optional[datetime] = None
    created_at: datetime
    status: str
    time_left_ms: int
    total_time_ms: int
