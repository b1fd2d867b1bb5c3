from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class MainSettingsResponse(BaseModel):
    title: str
    interval_value: int
    interval_unit: str
    message_prefix: str
    message_suffix: str
    message: str


class MainSettingsUpdateRequest(BaseModel):
    title: Optional[str] = None
    interval_value: Optional[int] = None
    interval_unit: Optional[Literal["seconds", "minutes", "hours"]] = None
    message_prefix: Optional[str] = None
    message_suffix: Optional[str] = None


class TimeRangeModel(BaseModel):
    start: str = ""
    end: str = ""


class ActiveHoursModel(BaseModel):
    enabled: bool = False
    work_mode: Literal["everyday", "big-small", "weekend"] = "everyday"
    is_big_week: bool = True
    skip_holidays: bool = False
    ranges: List[TimeRangeModel] = Field(default_factory=list)
    timezone: str = "UTC"
