# ui/error_reporting.py
"""
User-facing error handling: generic messages with an error ID, never internal details.
"""
from typing import Optional, Callable, Any

from nicegui import ui

from backend.security_utils import handle_error, ValidationError
from backend.task_manager import PersistenceError


def show_error_notification(error_id: str, user_message: Optional[str] = None):
    """
    Show error notification with error ID.

    Args:
        error_id: Error ID from handle_error()
        user_message: User-friendly error message (defaults to generic message)
    """
    if user_message is None:
        user_message = (
            f"Something went wrong. Error ID: {error_id}. "
            "Please try again."
        )

    ui.notify(
        user_message,
        color='negative',
        timeout=10000  # 10 seconds
    )


def handle_error_with_ui(
    operation: str,
    error: Exception,
    context: Optional[dict] = None,
    user_message: Optional[str] = None
) -> str:
    """
    Log error via handle_error() and show a notification with its ID.

    Returns:
        Error ID string
    """
    error_id = handle_error(operation, error, context)
    show_error_notification(error_id, user_message)
    return error_id


def run_action(operation: str, action: Callable[[], Any], context: Optional[dict] = None):
    """
    Run a button action. Validation problems are shown as-is;
    store failures get a generic message with an error ID. The action is not retried.

    Returns:
        The action's result, or None if it failed
    """
    try:
        return action()
    except ValidationError as e:
        ui.notify(e.message, color='negative')
    except PersistenceError as e:
        handle_error_with_ui(operation, e, context)
    return None


def render_error_page(error_id: str, retry_path: str = '/'):
    """Full-page failure view used when a page cannot be built."""
    ui.label("Something went wrong").classes("text-2xl font-bold text-red-600 mb-4")

    with ui.card().classes("w-full max-w-2xl p-6 bg-red-50 border border-red-200"):
        ui.label("Unable to load this page.").classes("text-lg font-semibold text-red-700 mb-2")
        ui.label(f"Error ID: {error_id}").classes("text-sm text-red-600 mb-4")
        with ui.row().classes("gap-2"):
            ui.button("Retry", on_click=lambda: ui.navigate.to(retry_path))
            ui.button("Go to Settings", on_click=lambda: ui.navigate.to('/settings')).props("flat")
