import datetime as dt

import pytest

from packages.core.reminders.models import MAIN_REMINDER_ID, TimerState
from packages.core.reminders.service import ReminderNotFoundError, ReminderValidationError
from packages.core.schedule.active_hours import ActiveHoursConfig, TimeRange
from packages.core.schedule.clock import ManualClock
from packages.core.schedule.engine import ReminderEngine
from packages.core.settings.store import settings_from_dict, settings_to_dict


UTC = dt.timezone.utc
T0 = dt.datetime(2026, 10, 19, 8, 0, tzinfo=UTC)


def _engine(start: dt.datetime = T0):
    clock = ManualClock(start)
    return ReminderEngine(clock=clock), clock


def test_interval_reminder_fires_and_rearms_on_dismiss():
    engine, clock = _engine()
    reminder = engine.create_interval("Stretch", 1, "minutes")

    status = engine.status(reminder.id)
    assert status.status == TimerState.RUNNING
    assert status.time_left_ms == 60000
    assert status.total_time_ms == 60000

    clock.advance(seconds=30)
    engine.tick()
    assert engine.status(reminder.id).time_left_ms == 30000

    clock.advance(seconds=30)
    fired = engine.tick()
    assert [snapshot.reminder_id for snapshot in fired] == [reminder.id]
    assert engine.status(reminder.id).status == TimerState.ALERT_ACTIVE
    assert [alert.reminder_id for alert in engine.alerts()] == [reminder.id]

    dismissed_at = clock.now()
    engine.dismiss(reminder.id)
    status = engine.status(reminder.id)
    assert status.status == TimerState.RUNNING
    assert status.time_left_ms == 60000
    assert engine.get(reminder.id).next_trigger_at == T0 + dt.timedelta(seconds=120)
    assert engine.get(reminder.id).next_trigger_at > dismissed_at
    assert engine.alerts() == []


def test_alert_is_not_refired_while_unacknowledged():
    engine, clock = _engine()
    reminder = engine.create_interval("Stretch", 1, "minutes")

    clock.advance(minutes=10)
    assert len(engine.tick()) == 1
    clock.advance(minutes=5)
    assert engine.tick() == []
    assert [alert.reminder_id for alert in engine.alerts()] == [reminder.id]
    assert engine.get(reminder.id).next_trigger_at == T0 + dt.timedelta(minutes=1)


def test_alert_snapshot_is_not_changed_by_later_edits():
    engine, clock = _engine()
    reminder = engine.create_interval("Drink water", 1, "minutes")
    clock.advance(minutes=1)
    engine.tick()

    engine.update(reminder.id, title="Drink tea")
    assert engine.alerts()[0].message == "Drink water"
    assert engine.status(reminder.id).status == TimerState.ALERT_ACTIVE


def test_two_alerts_in_one_tick_keep_fire_order():
    engine, clock = _engine()
    first = engine.create_interval("First", 1, "minutes")
    second = engine.create_interval("Second", 1, "minutes")

    clock.advance(minutes=1)
    fired = engine.tick()
    assert [snapshot.reminder_id for snapshot in fired] == [first.id, second.id]

    latest = engine.dismiss_latest()
    assert latest.reminder_id == second.id
    assert [alert.reminder_id for alert in engine.alerts()] == [first.id]
    assert engine.status(first.id).status == TimerState.ALERT_ACTIVE
    assert engine.status(second.id).status == TimerState.RUNNING


def test_one_time_reminder_is_deleted_after_dismiss():
    engine, clock = _engine()
    reminder = engine.create_one_time("Call the plumber", T0 + dt.timedelta(minutes=5))
    assert engine.status(reminder.id).total_time_ms == 5 * 60 * 1000

    clock.advance(minutes=5)
    engine.tick()
    assert engine.status(reminder.id).status == TimerState.ALERT_ACTIVE

    engine.dismiss(reminder.id)
    with pytest.raises(ReminderNotFoundError):
        engine.get(reminder.id)
    with pytest.raises(ReminderNotFoundError):
        engine.status(reminder.id)


def test_one_time_in_the_past_is_rejected():
    engine, _ = _engine()
    with pytest.raises(ReminderValidationError):
        engine.create_one_time("Too late", T0 - dt.timedelta(seconds=1))
    assert engine.list_reminders() == []


def test_stale_disabled_one_time_is_dropped_on_tick():
    engine, clock = _engine()
    reminder = engine.create_one_time("Standup", T0 + dt.timedelta(minutes=5))
    engine.set_enabled(reminder.id, False)
    assert engine.status(reminder.id).status == TimerState.IDLE

    clock.advance(minutes=6)
    assert engine.tick() == []
    assert engine.list_reminders() == []
    assert engine.alerts() == []


def test_reenabling_stale_one_time_deletes_instead_of_firing():
    engine, clock = _engine()
    reminder = engine.create_one_time("Standup", T0 + dt.timedelta(minutes=5))
    engine.toggle(reminder.id)

    clock.advance(minutes=6)
    assert engine.toggle(reminder.id) is None
    assert engine.list_reminders() == []
    assert engine.alerts() == []


def test_disable_keeps_progress_of_interval_reminder():
    engine, clock = _engine()
    reminder = engine.create_interval("Eyes", 10, "minutes")

    clock.advance(minutes=2)
    engine.set_enabled(reminder.id, False)
    assert engine.status(reminder.id).status == TimerState.IDLE

    clock.advance(minutes=3)
    engine.set_enabled(reminder.id, True)
    assert engine.get(reminder.id).next_trigger_at == T0 + dt.timedelta(minutes=10)
    assert engine.status(reminder.id).time_left_ms == 5 * 60 * 1000


def test_delete_removes_pending_alert():
    engine, clock = _engine()
    reminder = engine.create_interval("Stretch", 1, "minutes")
    clock.advance(minutes=1)
    engine.tick()

    engine.delete(reminder.id)
    assert engine.alerts() == []
    assert engine.dismiss(reminder.id) is None


def test_pause_and_resume_freeze_remaining_time():
    engine, clock = _engine()
    reminder = engine.create_interval("Stretch", 10, "minutes")
    clock.advance(minutes=3)
    engine.tick()

    assert engine.toggle_timer() == TimerState.RUNNING
    assert engine.toggle_timer() == TimerState.PAUSED
    assert engine.status(reminder.id).status == TimerState.PAUSED
    assert engine.status(reminder.id).time_left_ms == 7 * 60 * 1000
    assert engine.get(reminder.id).paused_remaining_ms == 7 * 60 * 1000

    clock.advance(hours=5)
    assert engine.tick() == []
    assert engine.status(reminder.id).time_left_ms == 7 * 60 * 1000
    assert engine.status(MAIN_REMINDER_ID).time_left_ms == 45 * 60 * 1000

    assert engine.toggle_timer() == TimerState.RUNNING
    status = engine.status(reminder.id)
    assert status.status == TimerState.RUNNING
    assert status.time_left_ms == 7 * 60 * 1000
    assert engine.get(reminder.id).next_trigger_at == clock.now() + dt.timedelta(minutes=7)
    assert engine.get(reminder.id).paused_remaining_ms is None


def test_main_reminder_is_idle_until_started():
    engine, clock = _engine()
    assert engine.timer_state() == TimerState.IDLE
    assert engine.status(MAIN_REMINDER_ID).status == TimerState.IDLE

    engine.toggle_timer()
    clock.advance(minutes=45)
    fired = engine.tick()
    assert [snapshot.reminder_id for snapshot in fired] == [MAIN_REMINDER_ID]
    assert fired[0].title == engine.main_settings.title
    assert "45 minutes" in fired[0].message


def test_waiting_freezes_countdown_outside_active_hours():
    engine, clock = _engine(dt.datetime(2026, 10, 19, 17, 0, tzinfo=UTC))
    engine.set_active_hours(
        ActiveHoursConfig(enabled=True, ranges=(TimeRange("09:00", "18:00"),))
    )
    reminder = engine.create_interval("Walk", 3, "hours")
    assert engine.get(reminder.id).next_trigger_at == dt.datetime(2026, 10, 19, 20, 0, tzinfo=UTC)

    clock.set(dt.datetime(2026, 10, 19, 18, 0, tzinfo=UTC))
    engine.tick()
    status = engine.status(reminder.id)
    assert status.status == TimerState.WAITING
    frozen = status.time_left_ms
    assert frozen == 2 * 3600 * 1000

    for moment in (dt.datetime(2026, 10, 19, 19, 59, tzinfo=UTC), dt.datetime(2026, 10, 20, 3, 0, tzinfo=UTC)):
        clock.set(moment)
        engine.tick()
        status = engine.status(reminder.id)
        assert status.status == TimerState.WAITING
        assert status.time_left_ms == frozen
    assert reminder.id not in [alert.reminder_id for alert in engine.alerts()]

    clock.set(dt.datetime(2026, 10, 20, 9, 0, tzinfo=UTC))
    engine.tick()
    status = engine.status(reminder.id)
    assert status.status == TimerState.RUNNING
    assert status.time_left_ms == frozen
    assert engine.get(reminder.id).next_trigger_at == dt.datetime(2026, 10, 20, 11, 0, tzinfo=UTC)


def test_active_hours_start_main_timer_automatically():
    engine, clock = _engine(dt.datetime(2026, 10, 19, 10, 0, tzinfo=UTC))
    engine.set_active_hours(
        ActiveHoursConfig(enabled=True, ranges=(TimeRange("09:00", "18:00"),))
    )
    assert engine.timer_state() == TimerState.IDLE

    engine.tick()
    assert engine.timer_state() == TimerState.RUNNING
    assert engine.status(MAIN_REMINDER_ID).status == TimerState.RUNNING


def test_dismiss_while_window_closed_waits_with_full_interval():
    engine, clock = _engine(dt.datetime(2026, 10, 19, 17, 59, tzinfo=UTC))
    engine.set_active_hours(
        ActiveHoursConfig(enabled=True, ranges=(TimeRange("09:00", "18:00"),))
    )
    reminder = engine.create_interval("Walk", 1, "minutes")
    engine.tick()

    clock.set(dt.datetime(2026, 10, 19, 18, 0, tzinfo=UTC))
    engine.tick()
    assert engine.status(reminder.id).status == TimerState.WAITING
    assert engine.status(reminder.id).time_left_ms == 0

    clock.set(dt.datetime(2026, 10, 20, 9, 0, tzinfo=UTC))
    engine.tick()
    assert engine.status(reminder.id).status == TimerState.ALERT_ACTIVE

    clock.set(dt.datetime(2026, 10, 20, 18, 30, tzinfo=UTC))
    engine.dismiss(reminder.id)
    status = engine.status(reminder.id)
    assert status.status == TimerState.WAITING
    assert status.time_left_ms == 60000


def test_every_reminder_has_exactly_one_status():
    engine, clock = _engine()
    engine.create_interval("A", 1, "minutes")
    engine.create_interval("B", 5, "minutes")
    engine.create_one_time("C", T0 + dt.timedelta(minutes=2))
    engine.toggle_timer()

    clock.advance(minutes=1)
    engine.tick()
    statuses = engine.statuses()
    ids = [status.id for status in statuses]
    assert len(ids) == len(set(ids)) == 4
    assert {status.status for status in statuses} <= set(TimerState)


def _office_hours_engine(start: dt.datetime):
    engine, clock = _engine(start)
    engine.set_active_hours(
        ActiveHoursConfig(enabled=True, ranges=(TimeRange("09:00", "18:00"),))
    )
    return engine, clock


def test_waiting_countdown_survives_settings_reload():
    engine, clock = _office_hours_engine(dt.datetime(2026, 10, 19, 17, 0, tzinfo=UTC))
    reminder = engine.create_interval("Walk", 3, "hours")
    clock.set(dt.datetime(2026, 10, 19, 18, 0, tzinfo=UTC))
    engine.tick()
    assert engine.status(reminder.id).time_left_ms == 7200000

    blob = settings_to_dict(engine.export_settings())
    clock.set(dt.datetime(2026, 10, 19, 23, 0, tzinfo=UTC))
    restored = ReminderEngine(clock=clock, settings=settings_from_dict(blob, clock.now()))
    restored.tick()
    status = restored.status(reminder.id)
    assert status.status == TimerState.WAITING
    assert status.time_left_ms == 7200000
    assert restored.status(MAIN_REMINDER_ID).time_left_ms == 45 * 60 * 1000

    clock.set(dt.datetime(2026, 10, 20, 9, 0, tzinfo=UTC))
    assert restored.tick() == []
    status = restored.status(reminder.id)
    assert status.status == TimerState.RUNNING
    assert status.time_left_ms == 7200000
    assert restored.get(reminder.id).next_trigger_at == dt.datetime(2026, 10, 20, 11, 0, tzinfo=UTC)
    assert restored.get(reminder.id).waiting_remaining_ms is None


def test_one_time_keeps_absolute_target_when_window_reopens():
    engine, clock = _office_hours_engine(dt.datetime(2026, 10, 19, 17, 0, tzinfo=UTC))
    target = dt.datetime(2026, 10, 19, 18, 30, tzinfo=UTC)
    reminder = engine.create_one_time("Pick up parcel", target)

    for moment in (dt.datetime(2026, 10, 19, 18, 0, tzinfo=UTC), dt.datetime(2026, 10, 19, 23, 0, tzinfo=UTC)):
        clock.set(moment)
        assert engine.tick() == []
        status = engine.status(reminder.id)
        assert status.status == TimerState.WAITING
        assert status.time_left_ms == 30 * 60 * 1000

    clock.set(dt.datetime(2026, 10, 20, 9, 0, tzinfo=UTC))
    fired = engine.tick()
    assert [snapshot.reminder_id for snapshot in fired] == [reminder.id]
    assert engine.get(reminder.id).target_at == target


def test_editing_a_waiting_reminder_freezes_the_new_interval():
    engine, clock = _office_hours_engine(dt.datetime(2026, 10, 19, 17, 0, tzinfo=UTC))
    reminder = engine.create_interval("Walk", 3, "hours")
    clock.set(dt.datetime(2026, 10, 19, 18, 0, tzinfo=UTC))
    engine.tick()

    clock.set(dt.datetime(2026, 10, 19, 20, 0, tzinfo=UTC))
    engine.update(reminder.id, interval_value=30, interval_unit="minutes")
    status = engine.status(reminder.id)
    assert status.status == TimerState.WAITING
    assert status.time_left_ms == 30 * 60 * 1000
