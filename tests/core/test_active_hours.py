import datetime as dt

from packages.core.schedule.active_hours import (
    ActiveHoursConfig,
    TimeRange,
    WorkMode,
    is_active,
    next_boundary,
    prune_ranges,
)
from packages.core.schedule.holidays import StaticHolidayCalendar


UTC = dt.timezone.utc
# 2026-10-19 is a Monday
MONDAY = dt.date(2026, 10, 19)


def _at(day: dt.date, hour: int, minute: int = 0) -> dt.datetime:
    return dt.datetime(day.year, day.month, day.day, hour, minute, tzinfo=UTC)


def _office_hours(**kwargs) -> ActiveHoursConfig:
    return ActiveHoursConfig(
        enabled=True, ranges=(TimeRange("09:00", "18:00"),), **kwargs
    )


def test_disabled_config_is_always_active():
    config = ActiveHoursConfig(enabled=False, ranges=(TimeRange("09:00", "10:00"),))
    assert is_active(_at(MONDAY, 3), config) is True
    assert next_boundary(_at(MONDAY, 3), config) is None


def test_ranges_are_half_open():
    config = _office_hours()
    assert is_active(_at(MONDAY, 8, 59), config) is False
    assert is_active(_at(MONDAY, 9, 0), config) is True
    assert is_active(_at(MONDAY, 17, 59), config) is True
    assert is_active(_at(MONDAY, 18, 0), config) is False


def test_empty_ranges_cover_whole_eligible_day():
    config = ActiveHoursConfig(enabled=True, work_mode=WorkMode.WEEKEND)
    saturday = MONDAY + dt.timedelta(days=5)
    assert is_active(_at(saturday, 0, 0), config) is True
    assert is_active(_at(saturday, 23, 59), config) is True
    assert is_active(_at(MONDAY, 12), config) is False


def test_weekend_mode_only_saturday_and_sunday():
    config = ActiveHoursConfig(enabled=True, work_mode=WorkMode.WEEKEND)
    eligible = [
        is_active(_at(MONDAY + dt.timedelta(days=offset), 12), config) for offset in range(7)
    ]
    assert eligible == [False, False, False, False, False, True, True]


def test_big_small_mode_depends_on_big_week():
    saturday = MONDAY + dt.timedelta(days=5)
    sunday = MONDAY + dt.timedelta(days=6)
    big = ActiveHoursConfig(enabled=True, work_mode=WorkMode.BIG_SMALL, is_big_week=True)
    small = ActiveHoursConfig(enabled=True, work_mode=WorkMode.BIG_SMALL, is_big_week=False)

    assert is_active(_at(MONDAY + dt.timedelta(days=4), 12), small) is True
    assert is_active(_at(saturday, 12), big) is True
    assert is_active(_at(saturday, 12), small) is False
    assert is_active(_at(sunday, 12), big) is False


def test_skip_holidays_excludes_listed_days():
    holidays = StaticHolidayCalendar([MONDAY])
    skipping = _office_hours(skip_holidays=True)
    not_skipping = _office_hours(skip_holidays=False)

    assert is_active(_at(MONDAY, 10), skipping, holidays) is False
    assert is_active(_at(MONDAY, 10), not_skipping, holidays) is True
    assert is_active(_at(MONDAY + dt.timedelta(days=1), 10), skipping, holidays) is True


def test_range_wrapping_midnight():
    config = ActiveHoursConfig(enabled=True, ranges=(TimeRange("22:00", "02:00"),))
    assert is_active(_at(MONDAY, 23), config) is True
    assert is_active(_at(MONDAY, 1), config) is True
    assert is_active(_at(MONDAY, 3), config) is False


def test_wall_clock_uses_config_timezone():
    config = _office_hours(timezone="Asia/Shanghai")
    # 02:00 UTC is 10:00 in Shanghai
    assert is_active(_at(MONDAY, 2), config) is True
    assert is_active(_at(MONDAY, 12), config) is False


def test_next_boundary_closes_and_opens():
    config = _office_hours()
    assert next_boundary(_at(MONDAY, 10), config) == _at(MONDAY, 18)
    assert next_boundary(_at(MONDAY, 19), config) == _at(MONDAY + dt.timedelta(days=1), 9)


def test_next_boundary_skips_ineligible_days():
    friday = MONDAY + dt.timedelta(days=4)
    next_monday = MONDAY + dt.timedelta(days=7)
    config = _office_hours(work_mode=WorkMode.BIG_SMALL, is_big_week=False)
    assert next_boundary(_at(friday, 20), config) == _at(next_monday, 9)


def test_next_boundary_whole_day_window():
    config = ActiveHoursConfig(enabled=True, work_mode=WorkMode.WEEKEND)
    saturday = MONDAY + dt.timedelta(days=5)
    assert next_boundary(_at(MONDAY, 10), config) == _at(saturday, 0)
    assert next_boundary(_at(saturday, 10), config) == _at(saturday + dt.timedelta(days=2), 0)


def test_prune_ranges_drops_blank_entries():
    ranges = [TimeRange("09:00", "12:00"), TimeRange("", "18:00"), TimeRange(" ", " ")]
    assert prune_ranges(ranges) == (TimeRange("09:00", "12:00"),)
