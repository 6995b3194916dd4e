# backend/visibility.py
"""
Server-side reference for the dashboard's client filter (static/js/energy_filter.js).

The browser decides which rendered task cards stay visible using the
remaining energy rendered on the list container. Both implementations follow
compute_visibility() below; keep them in step.
"""
from typing import Mapping, Any, Optional

from backend.task_schema import TaskStatus


def hidden_by_tired_mode(card: Mapping[str, Any], remaining_energy: int) -> bool:
    """Only Backlog cards that cost more than what is left get hidden."""
    return (
        card.get('status') == TaskStatus.BACKLOG.value
        and int(card.get('energy_cost') or 0) > remaining_energy
    )


def matches_search(card: Mapping[str, Any], search_text: Optional[str]) -> bool:
    term = (search_text or '').strip().lower()
    if not term:
        return True
    for field in ('title', 'description', 'category'):
        if term in str(card.get(field) or '').lower():
            return True
    return False


def compute_visibility(
    card: Mapping[str, Any],
    remaining_energy: int,
    tired_mode_on: bool,
    search_text: Optional[str]
) -> bool:
    """Return True if the card stays visible; it must pass both filters."""
    if tired_mode_on and hidden_by_tired_mode(card, remaining_energy):
        return False
    return matches_search(card, search_text)
