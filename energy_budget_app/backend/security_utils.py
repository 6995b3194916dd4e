# backend/security_utils.py
"""
Security utilities for input validation, display escaping, and error handling.
Every value that reaches the database passes through one of the validators below;
nothing is written when one of them raises.
"""
import os
import re
import html
import uuid
import json
import logging
import traceback
from datetime import datetime, date
from typing import Optional, Dict, Any
from pathlib import Path

from backend.task_schema import (
    TaskStatus, MIN_ENERGY_COST, MAX_ENERGY_COST, MAX_TITLE_LENGTH, DEFAULT_CATEGORY
)

logger = logging.getLogger(__name__)


# ============================================================================
# Input Length Limits (DoS Protection)
# ============================================================================

MAX_DESCRIPTION_LENGTH = 5000
MAX_CATEGORY_LENGTH = 50

RESET_TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


# ============================================================================
# Output Escaping (Display Safety)
# ============================================================================

def sanitize_html(text: Optional[str]) -> str:
    """
    Escape HTML special characters to prevent XSS attacks.

    Args:
        text: Input text that may contain HTML

    Returns:
        Escaped text safe for HTML display
    """
    if text is None:
        return ''
    if not isinstance(text, str):
        text = str(text)
    return html.escape(text, quote=True)


def escape_for_display(text: Optional[str]) -> str:
    """
    Escape user-generated content for raw HTML output (data attributes, ui.html).
    NiceGUI labels already escape their text.
    """
    return sanitize_html(text)


# ============================================================================
# Input Validation
# ============================================================================

class ValidationError(ValueError):
    """Raised when input validation fails. `field` names the offending form field."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
        self.message = message


def _as_int(value: Any, field: str, label: str) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{label} is required", field)
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be a whole number", field)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{label} must be a whole number", field)
        return int(value)
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        raise ValidationError(f"{label} must be a whole number", field)


def validate_title(title: Optional[str]) -> str:
    """
    Validate task title.

    Returns:
        Title with surrounding whitespace removed

    Raises:
        ValidationError: If empty or longer than MAX_TITLE_LENGTH
    """
    if not title or not str(title).strip():
        raise ValidationError("Task title is required.", 'title')

    title = str(title).strip()

    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(
            f"Task title too long (max {MAX_TITLE_LENGTH} characters)", 'title'
        )

    return title


def validate_energy_cost(cost: Any) -> int:
    """Energy cost must be a whole number between MIN_ENERGY_COST and MAX_ENERGY_COST."""
    cost = _as_int(cost, 'energy_cost', 'Energy cost')
    if not (MIN_ENERGY_COST <= cost <= MAX_ENERGY_COST):
        raise ValidationError(
            f"Energy cost must be between {MIN_ENERGY_COST} and {MAX_ENERGY_COST}.",
            'energy_cost'
        )
    return cost


def validate_category(category: Optional[str]) -> str:
    """Free-form label; blank falls back to the default category."""
    if not category or not str(category).strip():
        return DEFAULT_CATEGORY

    category = str(category).strip()

    if len(category) > MAX_CATEGORY_LENGTH:
        raise ValidationError(
            f"Category too long (max {MAX_CATEGORY_LENGTH} characters)", 'category'
        )

    return category


def validate_description(description: Optional[str]) -> str:
    if not description:
        return ''

    description = str(description).strip()

    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Description too long (max {MAX_DESCRIPTION_LENGTH} characters)", 'description'
        )

    return description


def validate_deadline(deadline: Any) -> Optional[datetime]:
    """
    Accept None/blank, a datetime, a date, or an ISO string
    ('2024-05-01' or '2024-05-01 17:30').
    """
    if deadline is None:
        return None
    if isinstance(deadline, datetime):
        return deadline
    if isinstance(deadline, date):
        return datetime(deadline.year, deadline.month, deadline.day)

    text = str(deadline).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError("Deadline must be a date (YYYY-MM-DD) or date and time.", 'deadline')


def validate_daily_budget(budget: Any) -> int:
    budget = _as_int(budget, 'daily_budget', 'Daily budget')
    if budget <= 0:
        raise ValidationError("Daily budget must be greater than 0.", 'daily_budget')
    return budget


def validate_reset_time(reset_time: Optional[str]) -> str:
    """Reset time must be 'HH:MM' on a 24-hour clock (e.g. '04:00', '23:30')."""
    text = str(reset_time or '').strip()
    if not RESET_TIME_PATTERN.match(text):
        raise ValidationError("Reset time must be in HH:MM (24-hour) format.", 'reset_time')
    return text


def validate_status(status: Any) -> TaskStatus:
    if isinstance(status, TaskStatus):
        return status
    try:
        return TaskStatus(str(status))
    except ValueError:
        raise ValidationError(
            f"Invalid status {status!r}: must be one of "
            f"{', '.join(s.value for s in TaskStatus)}",
            'status'
        )


def validate_task_id(task_id: Any) -> int:
    """
    Task IDs are positive integers. Route parameters arrive as strings.

    Raises:
        ValidationError: If task_id is missing or not a positive integer
    """
    if task_id is None or isinstance(task_id, bool):
        raise ValidationError("task_id is required", 'task_id')

    if not isinstance(task_id, int):
        try:
            task_id = int(str(task_id).strip())
        except (ValueError, TypeError):
            raise ValidationError("Invalid task_id: must be an integer", 'task_id')

    if task_id < 1:
        raise ValidationError("Invalid task_id: must be a positive integer", 'task_id')

    return task_id


# ============================================================================
# Error Handling with Error ID System
# ============================================================================

# Error log directory
ERROR_LOG_DIR = Path(__file__).parent.parent / 'data' / 'logs'
ERROR_LOG_FILE = ERROR_LOG_DIR / 'errors.jsonl'


def handle_error(
    operation: str,
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    log_file: Optional[Path] = None
) -> str:
    """
    Handle error: log full details server-side, return safe error ID to the user.

    Args:
        operation: Name of operation that failed (e.g., 'create_task', 'update_settings')
        error: Exception that occurred
        context: Optional additional context (dict of key-value pairs)
        log_file: Override for the JSON Lines error log

    Returns:
        Error ID string (8 characters) for user reporting
    """
    error_id = str(uuid.uuid4())[:8]  # Short ID for user reporting
    log_file = Path(log_file) if log_file else ERROR_LOG_FILE

    error_details = {
        'error_id': error_id,
        'timestamp': datetime.utcnow().isoformat(),
        'operation': operation,
        'error_type': type(error).__name__,
        'error_message': str(error),
        'traceback': ''.join(traceback.format_exception(type(error), error, error.__traceback__)),
        'environment': os.getenv('ENVIRONMENT', 'development'),
        'context': context or {}
    }

    # Write to error log file (JSON Lines format)
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        with open(log_file, 'a', encoding='utf-8') as f:
            f.write(json.dumps(error_details, default=str) + '\n')
    except OSError as log_error:
        logger.error("Failed to write error log: %s", log_error)

    if os.getenv('ENVIRONMENT', 'development') != 'production':
        logger.error("[ERROR %s] %s: %s", error_id, operation, error, exc_info=error)
    else:
        logger.error("[ERROR %s] %s: %s", error_id, operation, error)

    return error_id
