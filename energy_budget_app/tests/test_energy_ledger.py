from datetime import datetime, timedelta

import pytest

from backend.energy_ledger import (
    BatteryStatus, build_battery_status, compute_energy_used, energy_level,
    is_counted, resolve_reset_boundary
)


def _task(status, cost, completed_at=None):
    return {'status': status, 'energy_cost': cost, 'completed_at': completed_at}


def test_boundary_is_today_once_reset_time_has_passed():
    now = datetime(2024, 1, 2, 5, 0)
    assert resolve_reset_boundary("04:00", now) == datetime(2024, 1, 2, 4, 0)


def test_boundary_is_yesterday_before_reset_time():
    now = datetime(2024, 1, 2, 3, 59, 59)
    assert resolve_reset_boundary("04:00", now) == datetime(2024, 1, 1, 4, 0)


def test_boundary_at_exact_reset_instant_is_today():
    now = datetime(2024, 1, 2, 4, 0)
    assert resolve_reset_boundary("04:00", now) == now


def test_boundary_crosses_month_and_year():
    now = datetime(2024, 1, 1, 0, 30)
    assert resolve_reset_boundary("04:00", now) == datetime(2023, 12, 31, 4, 0)


def test_boundary_always_within_the_last_day():
    base = datetime(2024, 3, 10)
    for reset in ("00:00", "04:00", "12:30", "23:59"):
        for minutes in range(0, 24 * 60, 37):
            now = base + timedelta(minutes=minutes, seconds=15)
            boundary = resolve_reset_boundary(reset, now)
            assert boundary <= now
            assert now - boundary < timedelta(hours=24)
            hour, minute = (int(p) for p in reset.split(':'))
            today_reset = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
            if (now.hour, now.minute) >= (hour, minute):
                assert boundary == today_reset
            else:
                assert boundary == today_reset - timedelta(days=1)


@pytest.mark.parametrize("bad", ["4", "aa:bb", "04:00:00", "", "25:00", "12:60", "-1:00"])
def test_malformed_reset_time_raises(bad):
    with pytest.raises(ValueError):
        resolve_reset_boundary(bad, datetime(2024, 1, 2, 5, 0))


def test_energy_used_sums_only_counted_tasks():
    boundary = datetime(2024, 1, 2, 4, 0)
    tasks = [
        _task('Active', 10),
        _task('Active', 25),
        _task('Completed', 40, datetime(2024, 1, 2, 4, 30)),
        _task('Completed', 30, datetime(2024, 1, 1, 23, 0)),  # previous day
        _task('Backlog', 50),
        _task('Backlog', 20, datetime(2024, 1, 2, 6, 0)),  # stale timestamp never counts
    ]
    assert compute_energy_used(tasks, boundary) == 10 + 25 + 40


def test_completed_exactly_at_boundary_is_not_counted():
    boundary = datetime(2024, 1, 2, 4, 0)
    assert not is_counted(_task('Completed', 10, boundary), boundary)
    assert is_counted(_task('Completed', 10, boundary + timedelta(seconds=1)), boundary)


def test_completed_without_timestamp_is_not_counted():
    boundary = datetime(2024, 1, 2, 4, 0)
    assert compute_energy_used([_task('Completed', 10, None)], boundary) == 0


def test_energy_used_is_zero_for_empty_and_backlog_only():
    boundary = datetime(2024, 1, 2, 4, 0)
    assert compute_energy_used([], boundary) == 0
    assert compute_energy_used([_task('Backlog', 100), _task('Backlog', 5)], boundary) == 0


def test_overspent_day_clamps_remaining_but_not_percentage():
    battery = BatteryStatus(
        daily_budget=100, energy_used=150, reset_time="04:00",
        reset_boundary=datetime(2024, 1, 2, 4, 0)
    )
    assert battery.remaining_energy == 0
    assert battery.percentage_remaining == -50
    assert battery.is_overspent


def test_percentage_rounds_to_nearest_integer():
    battery = BatteryStatus(daily_budget=3, energy_used=1, reset_time="04:00",
                            reset_boundary=datetime(2024, 1, 2, 4, 0))
    assert battery.percentage_remaining == 67
    assert battery.remaining_energy == 2


def test_zero_budget_reports_zero_percent():
    battery = BatteryStatus(daily_budget=0, energy_used=10, reset_time="04:00",
                            reset_boundary=datetime(2024, 1, 2, 4, 0))
    assert battery.percentage_remaining == 0
    assert battery.remaining_energy == 0


def test_completion_from_previous_accounting_day_is_excluded():
    tasks = [_task('Completed', 40, datetime(2024, 1, 1, 3, 30))]
    battery = build_battery_status(tasks, daily_budget=100, reset_time="04:00",
                                   now=datetime(2024, 1, 2, 5, 0))
    assert battery.reset_boundary == datetime(2024, 1, 2, 4, 0)
    assert battery.energy_used == 0
    assert battery.remaining_energy == 100
    assert battery.percentage_remaining == 100


def test_completion_before_todays_reset_belongs_to_previous_day():
    tasks = [
        _task('Completed', 40, datetime(2024, 1, 2, 3, 0)),
        _task('Completed', 15, datetime(2024, 1, 2, 4, 30)),
        _task('Active', 20),
    ]
    battery = build_battery_status(tasks, daily_budget=100, reset_time="04:00",
                                   now=datetime(2024, 1, 2, 5, 0))
    assert battery.energy_used == 35
    assert battery.remaining_energy == 65
    assert battery.percentage_remaining == 65


def test_before_reset_yesterdays_late_completions_still_count():
    tasks = [_task('Completed', 40, datetime(2024, 1, 1, 22, 0))]
    battery = build_battery_status(tasks, daily_budget=100, reset_time="04:00",
                                   now=datetime(2024, 1, 2, 2, 0))
    assert battery.reset_boundary == datetime(2024, 1, 1, 4, 0)
    assert battery.energy_used == 40


@pytest.mark.parametrize("cost,label", [
    (5, 'Tiny'), (6, 'Small'), (10, 'Small'), (20, 'Medium'),
    (21, 'High'), (40, 'High'), (60, 'Intense'), (61, 'Draining'), (100, 'Draining'),
])
def test_energy_level_bands(cost, label):
    assert energy_level(cost).label == label
