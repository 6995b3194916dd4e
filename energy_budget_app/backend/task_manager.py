# backend/task_manager.py
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from backend.database import get_session, Task
from backend.task_schema import TaskStatus, StatusFilter
from backend.security_utils import (
    validate_title, validate_energy_cost, validate_category, validate_description,
    validate_deadline, validate_status, validate_task_id
)

logger = logging.getLogger(__name__)


class PersistenceError(RuntimeError):
    """The store rejected or failed an operation. Nothing is retried."""


class TaskManager:
    """
    CRUD and queries for tasks. Every public method runs in its own session
    and commits (or rolls back) before returning.
    """

    def __init__(self, session_factory=None):
        self.db_session = session_factory or get_session

    def _fail(self, operation, session, error):
        session.rollback()
        logger.error("Database error in %s: %s", operation, error)
        raise PersistenceError(f"Database error in {operation}") from error

    # -----------------------------
    # Queries
    # -----------------------------
    def get_task(self, task_id) -> Optional[dict]:
        """Return a task by id as a dict, or None if it does not exist."""
        task_id = validate_task_id(task_id)
        with self.db_session() as session:
            try:
                task = session.get(Task, task_id)
                return task.to_dict() if task else None
            except SQLAlchemyError as e:
                self._fail('get_task', session, e)

    def list_tasks(self, status_filter='All', search: Optional[str] = '') -> List[dict]:
        """
        Visible tasks for a dashboard tab, newest first.

        Args:
            status_filter: 'Backlog', 'Active', 'Completed' or 'All'; anything else means 'All'
            search: case-insensitive substring of the title; empty disables the search
        """
        status = StatusFilter.parse(status_filter).as_status()
        with self.db_session() as session:
            try:
                query = session.query(Task)
                if status is not None:
                    query = query.filter(Task.status == status.value)
                tasks = [
                    task.to_dict()
                    for task in query.order_by(Task.created_at.desc(), Task.id.asc()).all()
                ]
            except SQLAlchemyError as e:
                self._fail('list_tasks', session, e)
        # SQLite lower() only folds ASCII, so the title match runs here
        if search:
            needle = search.lower()
            tasks = [task for task in tasks if needle in task['title'].lower()]
        return tasks

    def list_energy_tasks(self) -> List[dict]:
        """All Active and Completed tasks; the ledger decides which of them count today."""
        with self.db_session() as session:
            try:
                tasks = session.query(Task).filter(
                    Task.status.in_([TaskStatus.ACTIVE.value, TaskStatus.COMPLETED.value])
                ).all()
                return [task.to_dict() for task in tasks]
            except SQLAlchemyError as e:
                self._fail('list_energy_tasks', session, e)

    def count_by_status(self) -> dict:
        """Number of tasks per status, for the tab badges."""
        counts = {status.value: 0 for status in TaskStatus}
        with self.db_session() as session:
            try:
                rows = session.query(Task.status, func.count(Task.id)).group_by(Task.status).all()
            except SQLAlchemyError as e:
                self._fail('count_by_status', session, e)
        for status, count in rows:
            counts[status] = count
        counts[StatusFilter.ALL.value] = sum(counts.values())
        return counts

    # -----------------------------
    # Mutations
    # -----------------------------
    def create_task(self, title, energy_cost, category='Personal', deadline=None, description='', now=None) -> int:
        """
        Create a new task in Backlog and return its id.

        Raises:
            ValidationError: any field fails validation (nothing is written)
            PersistenceError: the insert failed
        """
        title = validate_title(title)
        energy_cost = validate_energy_cost(energy_cost)
        category = validate_category(category)
        deadline = validate_deadline(deadline)
        description = validate_description(description)

        with self.db_session() as session:
            try:
                task = Task(
                    title=title,
                    energy_cost=energy_cost,
                    category=category,
                    deadline=deadline,
                    description=description,
                    status=TaskStatus.BACKLOG.value,
                    created_at=now or datetime.now(),
                    completed_at=None
                )
                session.add(task)
                session.commit()
                logger.info("Created task %s (%r, cost=%s)", task.id, title, energy_cost)
                return task.id
            except SQLAlchemyError as e:
                self._fail('create_task', session, e)

    def edit_task(self, task_id, title, energy_cost, category='Personal', deadline=None, description='') -> bool:
        """
        Update the editable fields of a task. Status, completed_at and created_at are untouched.

        Returns:
            False if the task does not exist
        """
        task_id = validate_task_id(task_id)
        title = validate_title(title)
        energy_cost = validate_energy_cost(energy_cost)
        category = validate_category(category)
        deadline = validate_deadline(deadline)
        description = validate_description(description)

        with self.db_session() as session:
            try:
                task = session.get(Task, task_id)
                if not task:
                    logger.info("edit_task: no task with id %s", task_id)
                    return False
                task.title = title
                task.energy_cost = energy_cost
                task.category = category
                task.deadline = deadline
                task.description = description
                session.commit()
                logger.info("Edited task %s", task_id)
                return True
            except SQLAlchemyError as e:
                self._fail('edit_task', session, e)

    def update_status(self, task_id, new_status, now=None) -> bool:
        """
        Move a task to new_status. Every transition is allowed, including same-state.
        Entering Completed stamps completed_at; any other state clears it.

        Returns:
            False if the task does not exist (no-op)
        """
        task_id = validate_task_id(task_id)
        new_status = validate_status(new_status)

        with self.db_session() as session:
            try:
                task = session.get(Task, task_id)
                if not task:
                    logger.info("update_status: no task with id %s", task_id)
                    return False
                old_status = task.status
                task.status = new_status.value
                if new_status is TaskStatus.COMPLETED:
                    task.completed_at = now or datetime.now()
                else:
                    task.completed_at = None
                session.commit()
                logger.info("Task %s: %s -> %s", task_id, old_status, new_status.value)
                return True
            except SQLAlchemyError as e:
                self._fail('update_status', session, e)

    def delete_task(self, task_id) -> bool:
        """Hard-delete a task. Returns False if there was nothing to delete."""
        task_id = validate_task_id(task_id)
        with self.db_session() as session:
            try:
                task = session.get(Task, task_id)
                if not task:
                    logger.info("delete_task: no task with id %s", task_id)
                    return False
                session.delete(task)
                session.commit()
                logger.info("Deleted task %s", task_id)
                return True
            except SQLAlchemyError as e:
                self._fail('delete_task', session, e)
