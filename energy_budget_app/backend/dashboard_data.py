# backend/dashboard_data.py
"""
Assembles everything one dashboard render needs: the battery snapshot and the
visible task list. The ledger always runs before the list is rendered so the
list container can carry the current remaining energy.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from backend.energy_ledger import BatteryStatus, build_battery_status
from backend.task_schema import StatusFilter


@dataclass
class DashboardData:
    battery: BatteryStatus
    tasks: List[dict]
    current_filter: StatusFilter
    search: str
    counts: dict = field(default_factory=dict)

    @property
    def remaining_energy(self) -> int:
        return self.battery.remaining_energy


def load_battery(task_manager, settings_manager, now: Optional[datetime] = None) -> BatteryStatus:
    settings = settings_manager.get_settings()
    return build_battery_status(
        task_manager.list_energy_tasks(),
        daily_budget=settings.daily_budget,
        reset_time=settings.reset_time,
        now=now or datetime.now()
    )


def load_dashboard(
    task_manager,
    settings_manager,
    status_filter='Backlog',
    search: Optional[str] = '',
    now: Optional[datetime] = None
) -> DashboardData:
    current_filter = StatusFilter.parse(status_filter)
    battery = load_battery(task_manager, settings_manager, now)
    return DashboardData(
        battery=battery,
        tasks=task_manager.list_tasks(current_filter, search or ''),
        current_filter=current_filter,
        search=search or '',
        counts=task_manager.count_by_status()
    )
