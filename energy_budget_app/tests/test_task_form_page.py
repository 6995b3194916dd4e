from datetime import datetime

from nicegui.testing import User

from app import register_pages
from ui.task_form import deadline_input_value


def test_deadline_input_keeps_time_of_day():
    assert deadline_input_value(datetime(2024, 5, 1, 17, 30)) == '2024-05-01T17:30'
    assert deadline_input_value(datetime(2024, 5, 1)) == '2024-05-01T00:00'
    assert deadline_input_value(None) == ''


async def test_saving_an_edit_keeps_the_deadline_time(user: User, task_manager, settings_manager):
    task_id = task_manager.create_task("Dentist", 10, deadline=datetime(2024, 5, 1, 17, 30))
    register_pages(task_manager, settings_manager)

    await user.open(f'/tasks/{task_id}/edit')
    user.find('Save').click()

    assert task_manager.get_task(task_id)['deadline'] == datetime(2024, 5, 1, 17, 30)


async def test_saving_an_edit_of_a_deleted_task_is_not_reported_as_saved(user: User, task_manager, settings_manager):
    task_id = task_manager.create_task("Dentist", 10)
    register_pages(task_manager, settings_manager)

    await user.open(f'/tasks/{task_id}/edit')
    task_manager.delete_task(task_id)
    user.find('Save').click()

    assert 'That task no longer exists.' in user.notify.messages
    assert 'Task saved' not in user.notify.messages
    assert task_manager.get_task(task_id) is None
