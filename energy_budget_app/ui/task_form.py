# ui/task_form.py
from nicegui import ui
from fastapi.responses import HTMLResponse

from backend.security_utils import (
    ValidationError, handle_error, validate_title, validate_energy_cost, validate_category,
    validate_description, validate_deadline, validate_task_id
)
from backend.task_manager import PersistenceError
from backend.task_schema import (
    CATEGORIES, DEFAULT_CATEGORY, DEFAULT_ENERGY_COST, MIN_ENERGY_COST, MAX_ENERGY_COST, MAX_TITLE_LENGTH
)
from ui.error_reporting import handle_error_with_ui, render_error_page

NOT_FOUND_HTML = """
<html><body style="font-family: sans-serif; padding: 2rem;">
<h1>Task not found</h1>
<p>The task you are looking for does not exist or was deleted.</p>
<p><a href="/">Back to dashboard</a></p>
</body></html>
"""


def field_check(validator):
    """Wrap a backend validator as a NiceGUI validation callable (message or None)."""
    def check(value):
        try:
            validator(value)
        except ValidationError as e:
            return e.message
        return None
    return check


def not_found_response():
    return HTMLResponse(NOT_FOUND_HTML, status_code=404)


def deadline_input_value(deadline):
    # datetime-local wants "YYYY-MM-DDTHH:MM"; the time is kept on edit
    return deadline.strftime("%Y-%m-%dT%H:%M") if deadline else ''


def build_task_form(task=None):
    """
    Render the task fields, prefilled from `task` when editing.

    Returns:
        dict of field name -> input element
    """
    task = task or {}
    deadline = task.get('deadline')
    category = task.get('category') or DEFAULT_CATEGORY
    options = CATEGORIES if category in CATEGORIES else CATEGORIES + [category]

    fields = {}
    fields['title'] = ui.input(
        label="Title",
        value=task.get('title', ''),
        validation=field_check(validate_title)
    ).props(f"counter maxlength={MAX_TITLE_LENGTH}").classes("w-full")
    fields['energy_cost'] = ui.number(
        label=f"Energy cost ({MIN_ENERGY_COST}-{MAX_ENERGY_COST})",
        value=task.get('energy_cost', DEFAULT_ENERGY_COST),
        min=MIN_ENERGY_COST,
        max=MAX_ENERGY_COST,
        step=5,
        precision=0,
        validation=field_check(validate_energy_cost)
    ).classes("w-full max-w-xs")
    fields['category'] = ui.select(
        options,
        label="Category",
        value=category,
        new_value_mode='add-unique',
        validation=field_check(validate_category)
    ).classes("w-full max-w-xs")
    fields['deadline'] = ui.input(
        label="Deadline (optional)",
        value=deadline_input_value(deadline),
        validation=field_check(validate_deadline)
    ).props("type=datetime-local stack-label").classes("w-full max-w-xs")
    fields['description'] = ui.textarea(
        label="Description (optional)",
        value=task.get('description', ''),
        validation=field_check(validate_description)
    ).classes("w-full")
    return fields


def form_values(fields):
    return {name: element.value for name, element in fields.items()}


def submit_form(fields, save, operation, context=None):
    """
    Validate inline, then save. A ValidationError raised by the manager is
    shown on the offending field; nothing has been written in that case.
    A save that returns False found nothing to update.

    Returns:
        True if saved
    """
    if not all(element.validate() for element in fields.values()):
        return False
    try:
        result = save(**form_values(fields))
    except ValidationError as e:
        element = fields.get(e.field)
        if element is not None:
            element.error = e.message
        ui.notify(e.message, color='negative')
        return False
    except PersistenceError as e:
        handle_error_with_ui(operation, e, context)
        return False
    if result is False:
        ui.notify("That task no longer exists.", color='warning')
        return False
    return True


def register_task_form_pages(task_manager):

    @ui.page('/tasks/new')
    def create_task_page():
        ui.label("New Task").classes("text-2xl font-bold mb-2")

        with ui.column().classes('w-full max-w-2xl gap-4'):
            fields = build_task_form()

            def save_task():
                if submit_form(fields, task_manager.create_task, 'create_task'):
                    ui.notify("Task added to backlog", color='positive')
                    ui.navigate.to('/')

            with ui.row().classes("gap-2"):
                ui.button("Create Task", on_click=save_task)
                ui.button("Cancel", on_click=lambda: ui.navigate.to('/')).props("flat")

    @ui.page('/tasks/{task_id}/edit')
    def edit_task_page(task_id: str):
        try:
            task_id = validate_task_id(task_id)
        except ValidationError:
            return not_found_response()
        try:
            task = task_manager.get_task(task_id)
        except PersistenceError as e:
            render_error_page(handle_error('edit_task_page', e, {'task_id': task_id}), f'/tasks/{task_id}/edit')
            return
        if task is None:
            return not_found_response()

        ui.label("Edit Task").classes("text-2xl font-bold mb-2")
        ui.label(f"Status: {task['status']}").classes("text-sm text-gray-500")

        with ui.column().classes('w-full max-w-2xl gap-4'):
            fields = build_task_form(task)

            def save_edit():
                def save(**values):
                    return task_manager.edit_task(task_id, **values)

                if submit_form(fields, save, 'edit_task', {'task_id': task_id}):
                    ui.notify("Task saved", color='positive')
                    ui.navigate.to('/')

            def delete_task():
                try:
                    task_manager.delete_task(task_id)
                except PersistenceError as e:
                    handle_error_with_ui('delete_task', e, {'task_id': task_id})
                    return
                ui.notify("Task deleted", color='positive')
                ui.navigate.to('/')

            with ui.row().classes("gap-2"):
                ui.button("Save", on_click=save_edit).props("color=primary")
                ui.button("Cancel", on_click=lambda: ui.navigate.to('/')).props("flat")
                ui.button("Delete", on_click=delete_task).props("flat color=negative")
