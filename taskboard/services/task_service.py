"""Service for task business logic."""

from datetime import datetime
import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskboard.database import atomic
from taskboard.errors import NotFoundError, StorageError, ValidationError
from taskboard.models.task import Task
from taskboard.services.assignment_service import AssignmentService
from taskboard.services.query_builder import DocumentQuery, ListQuery
from taskboard.utils.date_utils import parse_datetime, utcnow
from taskboard.utils.ids import generate_object_id, is_object_id

if TYPE_CHECKING:
    from taskboard.schemas.task import TaskCreate

logger = logging.getLogger("taskboard.tasks")

_documents = DocumentQuery(Task)


def _required_fields(task_data: "TaskCreate") -> tuple[str, datetime]:
    """Return (name, deadline) or raise ValidationError."""
    if not task_data.name or not task_data.deadline:
        raise ValidationError("Task name and deadline required")
    deadline = parse_datetime(task_data.deadline)
    if deadline is None:
        raise ValidationError("Task deadline is not a valid date")
    return task_data.name, deadline


class TaskService:
    """Service for managing tasks."""

    @staticmethod
    def list_tasks(db: Session, query: ListQuery) -> list[Task] | int:
        """Run a dynamic list query; returns the match count when `query.count` is set."""
        try:
            if query.count:
                return _documents.count(db, query.where)
            return _documents.fetch(db, query)
        except SQLAlchemyError as exc:
            logger.error("Task query failed: %s", exc, exc_info=True)
            raise StorageError("Error fetching tasks") from exc

    @staticmethod
    def get_task(db: Session, task_id: str) -> Task:
        if not is_object_id(task_id):
            raise ValidationError("Error fetching task")
        try:
            task = db.get(Task, task_id)
        except SQLAlchemyError as exc:
            raise StorageError("Error fetching task") from exc
        if task is None:
            raise NotFoundError("Task not found")
        return task

    @staticmethod
    def create_task(db: Session, task_data: "TaskCreate") -> Task:
        """Create a task, linking it to `assignedUser` when that user exists."""
        name, deadline = _required_fields(task_data)
        task = Task(
            id=generate_object_id(),
            name=name,
            description=task_data.description or "",
            deadline=deadline,
            completed=bool(task_data.completed),
            date_created=utcnow(),
        )
        task.unassign()

        with atomic(db):
            db.add(task)
            if task_data.assigned_user:
                AssignmentService.link(db, task, task_data.assigned_user)

        logger.info("Task created: task_id=%s assigned_user=%r", task.id, task.assigned_user)
        return task

    @staticmethod
    def replace_task(db: Session, task_id: str, task_data: "TaskCreate") -> Task:
        """Replace every field of a task, moving its assignment if `assignedUser` changed.

        The creation timestamp is kept.
        """
        name, deadline = _required_fields(task_data)
        new_user = task_data.assigned_user or ""
        if not is_object_id(task_id):
            raise ValidationError("Failed to update task")

        with atomic(db):
            task = db.get(Task, task_id)
            if task is None:
                raise NotFoundError("Task not found")
            if task.is_assigned and task.assigned_user != new_user:
                AssignmentService.unlink(db, task)

            task.name = name
            task.description = task_data.description or ""
            task.deadline = deadline
            task.completed = bool(task_data.completed)
            if new_user:
                AssignmentService.link(db, task, new_user)
            else:
                task.unassign()

        logger.info("Task replaced: task_id=%s assigned_user=%r", task.id, task.assigned_user)
        return task

    @staticmethod
    def delete_task(db: Session, task_id: str) -> None:
        """Delete a task after removing it from its owner's pending tasks."""
        if not is_object_id(task_id):
            raise StorageError("Failed to delete task")
        with atomic(db):
            task = db.get(Task, task_id)
            if task is None:
                raise NotFoundError("Task not found")
            if task.is_assigned:
                AssignmentService.unlink(db, task)
            db.delete(task)

        logger.info("Task deleted: task_id=%s", task_id)


__all__ = ["TaskService"]
