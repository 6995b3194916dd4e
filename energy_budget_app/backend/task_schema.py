from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class TaskStatus(str, Enum):
    """Lifecycle states of a task. Any state may move to any other."""
    BACKLOG = 'Backlog'
    ACTIVE = 'Active'
    COMPLETED = 'Completed'


class StatusFilter(str, Enum):
    """Status tabs on the dashboard. ALL disables the status restriction."""
    BACKLOG = 'Backlog'
    ACTIVE = 'Active'
    COMPLETED = 'Completed'
    ALL = 'All'

    @classmethod
    def parse(cls, value: Optional[str]) -> 'StatusFilter':
        """Map request input to a filter; anything unrecognized means ALL."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if value == member.value:
                return member
        return cls.ALL

    def as_status(self) -> Optional[TaskStatus]:
        if self is StatusFilter.ALL:
            return None
        return TaskStatus(self.value)


# Energy cost bounds (inclusive)
MIN_ENERGY_COST = 5
MAX_ENERGY_COST = 100
DEFAULT_ENERGY_COST = 10

MAX_TITLE_LENGTH = 100
DEFAULT_CATEGORY = 'Personal'

# Offered in the task form; any other label is still accepted
CATEGORIES: List[str] = ['Work', 'Personal', 'Health', 'Chores', 'Social', 'Learning']

TAB_DESCRIPTIONS = {
    StatusFilter.BACKLOG: 'Tasks waiting for a day with enough energy.',
    StatusFilter.ACTIVE: 'Tasks you are working on right now.',
    StatusFilter.COMPLETED: 'Finished tasks, including previous days.',
    StatusFilter.ALL: 'Everything, newest first.',
}


@dataclass(frozen=True)
class EnergyLevel:
    label: str
    color: str
    max_cost: int


ENERGY_LEVELS: List[EnergyLevel] = [
    EnergyLevel(label='Tiny', color='teal', max_cost=5),
    EnergyLevel(label='Small', color='green', max_cost=10),
    EnergyLevel(label='Medium', color='deep-purple', max_cost=20),
    EnergyLevel(label='High', color='amber', max_cost=40),
    EnergyLevel(label='Intense', color='orange', max_cost=60),
    EnergyLevel(label='Draining', color='red', max_cost=MAX_ENERGY_COST),
]
