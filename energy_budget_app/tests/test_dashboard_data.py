from datetime import datetime

from backend.dashboard_data import load_dashboard, load_battery
from backend.task_schema import StatusFilter


NOW = datetime(2024, 1, 2, 5, 0)


def test_dashboard_combines_battery_and_filtered_list(task_manager, settings_manager):
    settings_manager.update_settings(100, "04:00")
    yesterday = task_manager.create_task("Yesterday's run", 40, now=datetime(2024, 1, 1, 3, 0))
    task_manager.update_status(yesterday, 'Completed', now=datetime(2024, 1, 1, 3, 30))
    today = task_manager.create_task("Morning pages", 15, now=datetime(2024, 1, 2, 4, 10))
    task_manager.update_status(today, 'Completed', now=datetime(2024, 1, 2, 4, 30))
    active = task_manager.create_task("Write report", 30, now=datetime(2024, 1, 2, 4, 40))
    task_manager.update_status(active, 'Active')
    task_manager.create_task("Buy milk", 10, now=datetime(2024, 1, 2, 4, 50))

    data = load_dashboard(task_manager, settings_manager, 'Backlog', '', now=NOW)

    assert data.battery.energy_used == 45
    assert data.remaining_energy == 55
    assert data.battery.percentage_remaining == 55
    assert data.current_filter is StatusFilter.BACKLOG
    assert [t['title'] for t in data.tasks] == ["Buy milk"]
    assert data.counts == {'Backlog': 1, 'Active': 1, 'Completed': 2, 'All': 4}


def test_dashboard_unknown_filter_falls_back_to_all(task_manager, settings_manager):
    task_manager.create_task("One", 10)
    task_manager.create_task("Two", 10)
    data = load_dashboard(task_manager, settings_manager, 'Nonsense', None, now=NOW)
    assert data.current_filter is StatusFilter.ALL
    assert data.search == ''
    assert len(data.tasks) == 2


def test_battery_uses_stored_settings(task_manager, settings_manager):
    settings_manager.update_settings(50, "06:00")
    task_id = task_manager.create_task("Gym", 40)
    task_manager.update_status(task_id, 'Completed', now=datetime(2024, 1, 2, 4, 30))
    task_manager.update_status(task_manager.create_task("Cook", 20), 'Active')

    battery = load_battery(task_manager, settings_manager, now=NOW)

    # 05:00 is before the 06:00 reset, so the day began yesterday at 06:00
    assert battery.reset_boundary == datetime(2024, 1, 1, 6, 0)
    assert battery.energy_used == 60
    assert battery.remaining_energy == 0
    assert battery.percentage_remaining == -20
