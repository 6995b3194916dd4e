# app.py
import os

from nicegui import ui

from backend.app_logger import setup_logging
from backend.database import init_db
from backend.security_utils import handle_error
from backend.settings_manager import SettingsManager
from backend.task_manager import TaskManager

from ui.dashboard import build_dashboard
from ui.error_reporting import render_error_page
from ui.settings_page import register_settings_page
from ui.task_form import register_task_form_pages


task_manager = TaskManager()
settings_manager = SettingsManager()


def register_pages(tasks=None, settings=None):
    tasks = tasks or task_manager
    settings = settings or settings_manager

    @ui.page('/')
    def index(status: str = 'Backlog', search: str = ''):
        try:
            build_dashboard(tasks, settings, status=status, search=search)
        except Exception as e:
            # Show a generic failure page instead of crashing; details go to the error log
            error_id = handle_error('build_dashboard', e, {'status': status})
            render_error_page(error_id)

    register_task_form_pages(tasks)
    register_settings_page(tasks, settings)


if __name__ in {"__main__", "__mp_main__"}:
    setup_logging()
    init_db()
    register_pages()

    # Client-side scripts (energy_filter.js)
    from fastapi.staticfiles import StaticFiles
    from nicegui import app

    static_dir = os.path.join(os.path.dirname(__file__), 'static')
    app.mount('/static', StaticFiles(directory=static_dir), name='static')

    host = os.getenv('NICEGUI_HOST', '127.0.0.1')  # Default to localhost, use env var in Docker
    port = int(os.getenv('NICEGUI_PORT', '8080'))
    ui.run(
        title='Energy Budget',
        port=port,
        host=host,
        reload=False,
        storage_secret=os.getenv('STORAGE_SECRET', 'energy-budget-local')
    )
