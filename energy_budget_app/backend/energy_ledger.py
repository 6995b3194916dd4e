# backend/energy_ledger.py
"""
Daily energy accounting.

The accounting day starts at a configurable time of day (the reset time)
rather than midnight. Energy used for the current day is the cost of every
Active task plus every task completed after the most recent reset boundary.
All functions here are pure: callers pass in the tasks and the current time.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Mapping, Any

from backend.task_schema import TaskStatus, ENERGY_LEVELS, EnergyLevel


def parse_reset_time(reset_time_str: str):
    """
    Split an 'HH:MM' string into (hour, minute).

    Raises:
        ValueError: wrong segment count, non-numeric parts, or out-of-range values
    """
    parts = str(reset_time_str).split(':')
    if len(parts) != 2:
        raise ValueError(f"Reset time must be in HH:MM form, got {reset_time_str!r}")
    hour, minute = (int(part) for part in parts)
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Reset time out of range: {reset_time_str!r}")
    return hour, minute


def resolve_reset_boundary(reset_time_str: str, now: datetime) -> datetime:
    """Return the most recent reset boundary at or before `now`."""
    hour, minute = parse_reset_time(reset_time_str)
    today_reset = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if now >= today_reset:
        return today_reset
    # Clock has not reached today's reset yet, so the day started yesterday
    return today_reset - timedelta(days=1)


def is_counted(task: Mapping[str, Any], boundary: datetime) -> bool:
    status = task.get('status')
    if status == TaskStatus.ACTIVE.value:
        return True
    if status == TaskStatus.COMPLETED.value:
        completed_at = task.get('completed_at')
        return completed_at is not None and completed_at > boundary
    return False


def compute_energy_used(tasks: Iterable[Mapping[str, Any]], boundary: datetime) -> int:
    """Sum energy_cost over tasks that count toward the current accounting day."""
    return sum(int(task['energy_cost']) for task in tasks if is_counted(task, boundary))


@dataclass(frozen=True)
class BatteryStatus:
    """Snapshot of the energy budget for one render of the dashboard."""
    daily_budget: int
    energy_used: int
    reset_time: str
    reset_boundary: datetime

    @property
    def remaining_energy(self) -> int:
        return max(0, self.daily_budget - self.energy_used)

    @property
    def percentage_remaining(self) -> int:
        # Not clamped: goes negative when the day is overspent
        if self.daily_budget <= 0:
            return 0
        return round(100 * (self.daily_budget - self.energy_used) / self.daily_budget)

    @property
    def is_overspent(self) -> bool:
        return self.energy_used > self.daily_budget


def build_battery_status(
    tasks: Iterable[Mapping[str, Any]],
    daily_budget: int,
    reset_time: str,
    now: datetime
) -> BatteryStatus:
    boundary = resolve_reset_boundary(reset_time, now)
    return BatteryStatus(
        daily_budget=int(daily_budget),
        energy_used=compute_energy_used(tasks, boundary),
        reset_time=reset_time,
        reset_boundary=boundary,
    )


def energy_level(cost: int) -> EnergyLevel:
    """Map an energy cost to its display band (Tiny .. Draining)."""
    for level in ENERGY_LEVELS:
        if cost <= level.max_cost:
            return level
    return ENERGY_LEVELS[-1]
