# ui/settings_page.py
from nicegui import ui, app

from backend.csv_export import export_all_data_to_csv
from backend.security_utils import ValidationError, handle_error, validate_daily_budget, validate_reset_time
from backend.task_manager import PersistenceError
from ui.error_reporting import handle_error_with_ui, render_error_page
from ui.task_form import field_check


def register_settings_page(task_manager, settings_manager):

    @ui.page("/settings")
    def settings_page():
        dark = ui.dark_mode(app.storage.user.get('dark_mode', False))

        try:
            current = settings_manager.get_settings()
        except (PersistenceError, ValueError) as e:
            render_error_page(handle_error('settings_page', e), '/settings')
            return

        with ui.row().classes("w-full justify-between items-center mb-2"):
            ui.label("Settings").classes("text-2xl font-bold")
            ui.button("Dashboard", icon="arrow_back", on_click=lambda: ui.navigate.to('/')).props("flat")

        with ui.card().classes("w-full max-w-xl p-4 gap-3"):
            ui.label("Energy Budget").classes("text-lg font-semibold")
            ui.label(
                "Energy spent on active tasks and tasks completed since the last reset "
                "counts against the daily budget."
            ).classes("text-sm text-gray-600 mb-2")

            budget_input = ui.number(
                label="Daily budget",
                value=current.daily_budget,
                min=1,
                step=5,
                precision=0,
                validation=field_check(validate_daily_budget)
            ).props("dense outlined").classes("w-full max-w-sm")

            reset_input = ui.input(
                label="Daily reset time (HH:MM, 24-hour)",
                value=current.reset_time,
                validation=field_check(validate_reset_time)
            ).props("dense outlined type=time stack-label").classes("w-full max-w-sm")

            def save_settings():
                fields = {'daily_budget': budget_input, 'reset_time': reset_input}
                if not all(element.validate() for element in fields.values()):
                    return
                try:
                    saved = settings_manager.update_settings(budget_input.value, reset_input.value)
                except ValidationError as e:
                    element = fields.get(e.field)
                    if element is not None:
                        element.error = e.message
                    ui.notify(e.message, color="negative")
                    return
                except PersistenceError as e:
                    handle_error_with_ui('update_settings', e)
                    return
                ui.notify(
                    f"Saved: budget {saved.daily_budget}, resets at {saved.reset_time}",
                    color="positive"
                )

            ui.button("Save Energy Settings", on_click=save_settings).classes("bg-blue-500 text-white mt-2")

        ui.separator().classes("my-4")
        with ui.card().classes("w-full max-w-xl p-4 gap-3"):
            ui.label("Appearance").classes("text-lg font-semibold")

            def toggle_dark(e):
                app.storage.user['dark_mode'] = bool(e.value)
                dark.set_value(bool(e.value))

            ui.switch("Dark mode", value=dark.value, on_change=toggle_dark)

        ui.separator().classes("my-4")
        with ui.card().classes("w-full max-w-xl p-4 gap-3"):
            ui.label("Data & Export").classes("text-lg font-semibold")

            def export_csv():
                try:
                    counts, files = export_all_data_to_csv(task_manager, settings_manager)
                except (PersistenceError, OSError) as e:
                    handle_error_with_ui('export_csv', e, user_message="Export failed.")
                    return
                ui.notify(
                    f"Exported {counts['tasks']} tasks and {counts['settings']} settings to {', '.join(files)}",
                    color="positive"
                )

            ui.button("Export Data to CSV", on_click=export_csv).classes("bg-green-500 text-white mt-2")
            ui.label("Writes tasks.csv and settings.csv to the data/export folder.").classes("text-sm text-gray-600 mt-2")
