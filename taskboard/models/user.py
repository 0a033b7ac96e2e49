"""User model representing an assignee of tasks."""

from collections.abc import Iterable
from typing import ClassVar

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from taskboard.database import Base
from taskboard.models.pending_task import PendingTask
from taskboard.utils.date_utils import utcnow
from taskboard.utils.ids import generate_object_id


class User(Base):
    """User document with its ordered set of pending task ids."""

    __tablename__ = "users"

    id = Column(String(24), primary_key=True, default=generate_object_id)
    name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), nullable=False, unique=True)
    date_created = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    version = Column(Integer, nullable=False)

    pending_entries = relationship(
        PendingTask,
        order_by=PendingTask.position,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    document_fields: ClassVar[dict[str, str]] = {
        "_id": "id",
        "name": "name",
        "email": "email",
        "dateCreated": "date_created",
    }
    # Array-valued document fields, backed by child rows
    array_fields: ClassVar[dict[str, str]] = {
        "pendingTasks": "pending_entries",
    }

    @property
    def pending_tasks(self) -> list[str]:
        return [entry.task_id for entry in self.pending_entries]

    def set_pending_tasks(self, task_ids: Iterable[str]) -> None:
        """Replace pending tasks wholesale, dropping duplicates but keeping first-seen order."""
        existing = {entry.task_id: entry for entry in self.pending_entries}
        entries: list[PendingTask] = []
        seen: set[str] = set()
        for task_id in task_ids:
            if task_id in seen:
                continue
            seen.add(task_id)
            entries.append(existing.get(task_id) or PendingTask(task_id=task_id))
        for position, entry in enumerate(entries):
            entry.position = position
        self.pending_entries = entries
        self.touch()

    def add_pending_task(self, task_id: str) -> bool:
        """Append `task_id` unless already present. Returns True if added."""
        if task_id in self.pending_tasks:
            return False
        self.pending_entries.append(PendingTask(task_id=task_id, position=len(self.pending_entries)))
        self.touch()
        return True

    def remove_pending_task(self, task_id: str) -> bool:
        """Remove `task_id` if present. Returns True if removed."""
        remaining = [entry for entry in self.pending_entries if entry.task_id != task_id]
        if len(remaining) == len(self.pending_entries):
            return False
        for position, entry in enumerate(remaining):
            entry.position = position
        self.pending_entries = remaining
        self.touch()
        return True

    def touch(self) -> None:
        """Force a row update so concurrent units editing this user conflict on its version."""
        self.updated_at = utcnow()

    def __repr__(self) -> str:
        """String representation of User."""
        return f"<User(id={self.id}, name='{self.name}', email='{self.email}')>"


__all__ = ["User"]
