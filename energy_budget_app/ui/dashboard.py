# ui/dashboard.py
import json
import logging
from urllib.parse import urlencode

from nicegui import ui, app

from backend.dashboard_data import load_dashboard
from backend.energy_ledger import energy_level
from backend.security_utils import escape_for_display
from backend.task_manager import PersistenceError
from backend.task_schema import TaskStatus, StatusFilter, TAB_DESCRIPTIONS
from ui.error_reporting import run_action, handle_error_with_ui

logger = logging.getLogger(__name__)

DASHBOARD_STYLE = """
<style>
    .task-card { transition: opacity 150ms ease; }
    .battery-bar .q-linear-progress__track { opacity: 0.25; }
    .status-tab.active { font-weight: 700; }
</style>
<script src="/static/js/energy_filter.js"></script>
"""

# Buttons offered per status: (label, target status, button color)
TRANSITIONS = {
    TaskStatus.BACKLOG.value: [("Start", TaskStatus.ACTIVE, "primary")],
    TaskStatus.ACTIVE.value: [
        ("Complete", TaskStatus.COMPLETED, "positive"),
        ("Back to backlog", TaskStatus.BACKLOG, "grey"),
    ],
    TaskStatus.COMPLETED.value: [
        ("Reopen", TaskStatus.ACTIVE, "primary"),
        ("Back to backlog", TaskStatus.BACKLOG, "grey"),
    ],
}


def format_datetime(dt):
    return dt.strftime("%Y-%m-%d %H:%M") if dt else ''


def battery_color(percentage):
    if percentage <= 0:
        return 'negative'
    if percentage < 25:
        return 'orange'
    if percentage < 50:
        return 'amber'
    return 'positive'


def render_battery(battery):
    """Battery card: used/budget, remaining energy, and next reset."""
    with ui.card().classes("w-full p-4"):
        with ui.row().classes("w-full justify-between items-end"):
            with ui.column().classes("gap-0"):
                ui.label("Energy remaining").classes("text-sm text-gray-500")
                ui.label(f"{battery.remaining_energy}").classes("text-4xl font-bold")
            with ui.column().classes("gap-0 items-end"):
                ui.label(f"{battery.percentage_remaining}%").classes("text-2xl font-semibold")
                ui.label(f"{battery.energy_used} / {battery.daily_budget} used").classes("text-sm text-gray-500")
        ui.linear_progress(
            value=max(0, min(100, battery.percentage_remaining)) / 100,
            show_value=False,
            color=battery_color(battery.percentage_remaining)
        ).classes("battery-bar mt-2")
        ui.label(
            f"Day started {format_datetime(battery.reset_boundary)} (resets daily at {battery.reset_time})"
        ).classes("text-xs text-gray-500 mt-1")
        if battery.is_overspent:
            ui.label(
                f"Over budget by {battery.energy_used - battery.daily_budget}."
            ).classes("text-sm text-red-600 font-semibold")


def build_dashboard(task_manager, settings_manager, status='Backlog', search=''):
    """
    Dashboard page. The task list is rebuilt in place on tab switches and
    status changes; each rebuild recomputes the battery first so the list
    container always carries the current remaining energy.
    """
    ui.add_head_html(DASHBOARD_STYLE)
    ui.dark_mode(app.storage.user.get('dark_mode', False))

    state = {
        'filter': StatusFilter.parse(status),
        'search': search or '',
    }

    with ui.row().classes("w-full justify-between items-center mb-4"):
        ui.label("Energy Budget").classes("text-3xl font-bold")
        with ui.row().classes("gap-2"):
            ui.button("New Task", icon="add", on_click=lambda: ui.navigate.to('/tasks/new'))
            ui.button("Settings", icon="settings", on_click=lambda: ui.navigate.to('/settings')).props("flat")

    with ui.column().classes("w-full max-w-3xl gap-4"):
        battery_col = ui.column().classes("w-full")
        tabs_row = ui.row().classes("w-full gap-2")
        description_label = ui.label("").classes("text-sm text-gray-500")

        with ui.row().classes("w-full items-center gap-4"):
            search_input = ui.input(
                label="Search tasks",
                placeholder="Type to filter, Enter to search titles",
                value=state['search']
            ).props("clearable").classes("flex-grow")
            tired_switch = ui.switch("Tired mode")

        list_col = ui.column().classes("w-full")

    def sync_url():
        params = {'status': state['filter'].value}
        if state['search']:
            params['search'] = state['search']
        ui.run_javascript(f"history.replaceState(null, '', {json.dumps('/?' + urlencode(params))});")

    def refresh():
        data = load_dashboard(task_manager, settings_manager, state['filter'], state['search'])

        battery_col.clear()
        with battery_col:
            render_battery(data.battery)

        tabs_row.clear()
        with tabs_row:
            for tab in StatusFilter:
                is_active = tab is data.current_filter
                ui.button(
                    f"{tab.value} ({data.counts.get(tab.value, 0)})",
                    on_click=lambda t=tab: switch_tab(t)
                ).props("unelevated" if is_active else "outline").classes(
                    "status-tab" + (" active" if is_active else "")
                )
        description_label.text = TAB_DESCRIPTIONS[data.current_filter]

        list_col.clear()
        with list_col:
            render_task_list(data)

        # Re-apply the client filter against the freshly rendered remaining energy
        ui.run_javascript("window.EnergyFilter && window.EnergyFilter.apply();")

    def safe_refresh():
        try:
            refresh()
        except (PersistenceError, ValueError) as e:
            handle_error_with_ui('refresh_dashboard', e, {'filter': state['filter'].value})

    def render_task_list(data):
        remaining = data.remaining_energy
        with ui.element('div').classes("w-full flex flex-col gap-2").props(
            f'id="taskListContainer" data-remaining-energy="{remaining}"'
        ).mark('task-list'):
            if not data.tasks:
                if data.search:
                    ui.label(f"No tasks match '{data.search}'.").classes("text-gray-500 py-8 text-center")
                else:
                    ui.label("No tasks here yet.").classes("text-gray-500 py-8 text-center")
            for task in data.tasks:
                render_task_card(task, remaining)
            ui.label("No tasks match the current filters.").classes(
                "text-gray-500 py-8 text-center"
            ).props('id="noFilterResults"').style("display: none;")

    def render_task_card(task, remaining):
        level = energy_level(task['energy_cost'])
        with ui.card().classes("task-card w-full p-3").props(
            f'data-task-id="{task["id"]}" data-energy-cost="{task["energy_cost"]}" data-status="{escape_for_display(task["status"])}"'
        ):
            with ui.row().classes("w-full justify-between items-start no-wrap"):
                with ui.column().classes("gap-1"):
                    ui.label(task['title']).classes("task-title text-lg font-semibold")
                    if task['description']:
                        ui.label(task['description']).classes("task-description text-sm text-gray-600")
                    with ui.row().classes("gap-2 items-center"):
                        ui.label(task['category']).classes("task-category text-xs text-gray-500")
                        if task['deadline']:
                            ui.label(f"Due {format_datetime(task['deadline'])}").classes("text-xs text-gray-500")
                        if task['completed_at']:
                            ui.label(f"Completed {format_datetime(task['completed_at'])}").classes("text-xs text-gray-500")
                ui.badge(f"{task['energy_cost']} · {level.label}", color=level.color)

            with ui.row().classes("gap-2 mt-2"):
                for label, target, color in TRANSITIONS.get(task['status'], []):
                    ui.button(
                        label,
                        on_click=lambda t=task, s=target: change_status(t, s, remaining)
                    ).props(f"dense size=sm color={color}")
                ui.button(
                    "Edit", on_click=lambda tid=task['id']: ui.navigate.to(f'/tasks/{tid}/edit')
                ).props("dense size=sm flat")
                ui.button(
                    "Delete", on_click=lambda t=task: confirm_delete(t)
                ).props("dense size=sm flat color=negative")

    def apply_status(task_id, new_status):
        result = run_action(
            'update_status',
            lambda: task_manager.update_status(task_id, new_status),
            {'task_id': task_id, 'status': new_status.value}
        )
        if result is False:
            ui.notify("That task no longer exists.", color='warning')
        safe_refresh()

    def change_status(task, new_status, remaining):
        # Energy gating is a confirmation here, not a rule in the data layer
        if (task['status'] == TaskStatus.BACKLOG.value
                and new_status is TaskStatus.ACTIVE
                and task['energy_cost'] > remaining):
            with ui.dialog() as dialog, ui.card().classes("p-4"):
                ui.label("Not enough energy").classes("text-lg font-bold")
                ui.label(
                    f"'{task['title']}' costs {task['energy_cost']}, "
                    f"but only {remaining} is left today. Start it anyway?"
                )
                with ui.row().classes("w-full justify-end gap-2"):
                    ui.button("Cancel", on_click=dialog.close).props("flat")

                    def confirm():
                        dialog.close()
                        apply_status(task['id'], new_status)

                    ui.button("Start anyway", on_click=confirm).props("color=negative")
            dialog.open()
            return
        apply_status(task['id'], new_status)

    def confirm_delete(task):
        with ui.dialog() as dialog, ui.card().classes("p-4"):
            ui.label(f"Delete '{task['title']}'?").classes("text-lg font-bold")
            with ui.row().classes("w-full justify-end gap-2"):
                ui.button("Cancel", on_click=dialog.close).props("flat")

                def do_delete():
                    dialog.close()
                    deleted = run_action(
                        'delete_task', lambda: task_manager.delete_task(task['id']), {'task_id': task['id']}
                    )
                    if deleted:
                        ui.notify("Task deleted", color='positive')
                    elif deleted is False:
                        ui.notify("That task no longer exists.", color='warning')
                    safe_refresh()

                ui.button("Delete", on_click=do_delete).props("color=negative")
        dialog.open()

    def switch_tab(tab):
        if tab is state['filter']:
            return
        state['filter'] = tab
        sync_url()
        safe_refresh()

    def handle_search_typing(e):
        # Live filtering happens in the browser over title, description and category
        value = e.args if isinstance(e.args, str) else (search_input.value or '')
        ui.run_javascript(f"window.EnergyFilter && window.EnergyFilter.setSearch({json.dumps(value)});")

    def handle_search_submit():
        state['search'] = (search_input.value or '').strip()
        logger.debug("Dashboard search submitted: %r", state['search'])
        sync_url()
        safe_refresh()

    def handle_search_clear():
        if state['search']:
            state['search'] = ''
            sync_url()
            safe_refresh()

    def handle_tired_mode(e):
        ui.run_javascript(f"window.EnergyFilter && window.EnergyFilter.setTiredMode({json.dumps(bool(e.value))});")

    search_input.on('update:model-value', handle_search_typing)
    search_input.on('keydown.enter', handle_search_submit)
    search_input.on('clear', handle_search_clear)
    tired_switch.on_value_change(handle_tired_mode)

    refresh()
    if state['search']:
        ui.run_javascript(f"window.EnergyFilter && window.EnergyFilter.setSearch({json.dumps(state['search'])});")
