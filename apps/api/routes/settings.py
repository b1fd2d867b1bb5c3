from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from apps.api import state
from apps.api.schemas.settings import (
    ActiveHoursModel,
    MainSettingsResponse,
    MainSettingsUpdateRequest,
    TimeRangeModel,
)
from packages.core.reminders.models import MainReminderSettings
from packages.core.reminders.service import ReminderValidationError
from packages.core.schedule.active_hours import ActiveHoursConfig, TimeRange, WorkMode
from packages.core.schedule.engine import ReminderEngine
from packages.core.settings.store import settings_to_dict


router = APIRouter(prefix="/settings", tags=["settings"])


def _engine() -> ReminderEngine:
    return state.get_engine()


def _main_response(settings: MainReminderSettings) -> MainSettingsResponse:
    return MainSettingsResponse(
        title=settings.title,
        interval_value=settings.interval_value,
        interval_unit=settings.interval_unit.value,
        message_prefix=settings.message_prefix,
        message_suffix=settings.message_suffix,
        message=settings.message(),
    )


def _active_hours_response(config: ActiveHoursConfig) -> ActiveHoursModel:
    return ActiveHoursModel(
        enabled=config.enabled,
        work_mode=config.work_mode.value,
        is_big_week=config.is_big_week,
        skip_holidays=config.skip_holidays,
        ranges=[TimeRangeModel(start=item.start, end=item.end) for item in config.ranges],
        timezone=config.timezone,
    )


@router.get("")
def get_settings() -> Dict[str, Any]:
    return settings_to_dict(_engine().export_settings())


@router.get("/main", response_model=MainSettingsResponse)
def get_main() -> MainSettingsResponse:
    return _main_response(_engine().main_settings)


@router.patch("/main", response_model=MainSettingsResponse)
def update_main(payload: MainSettingsUpdateRequest) -> MainSettingsResponse:
    engine = _engine()
    try:
        settings = engine.update_main(**payload.model_dump(exclude_none=True))
    except ReminderValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    state.persist(engine)
    return _main_response(settings)


@router.get("/active-hours", response_model=ActiveHoursModel)
def get_active_hours() -> ActiveHoursModel:
    return _active_hours_response(_engine().active_hours)


@router.put("/active-hours", response_model=ActiveHoursModel)
def put_active_hours(payload: ActiveHoursModel) -> ActiveHoursModel:
    engine = _engine()
    config = ActiveHoursConfig(
        enabled=payload.enabled,
        work_mode=WorkMode(payload.work_mode),
        is_big_week=payload.is_big_week,
        skip_holidays=payload.skip_holidays,
        ranges=tuple(TimeRange(start=item.start, end=item.end) for item in payload.ranges),
        timezone=payload.timezone,
    )
    try:
        config = engine.set_active_hours(config)
    except ReminderValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    state.persist(engine)
    return _active_hours_response(config)
