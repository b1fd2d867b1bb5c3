from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class AlertResponse(BaseModel):
    reminder_id: str
    title: str
    message: str
    display_message: str
    fired_at: datetime
