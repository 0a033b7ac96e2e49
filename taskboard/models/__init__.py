"""Database models."""

from taskboard.models.pending_task import PendingTask
from taskboard.models.task import UNASSIGNED_NAME, UNASSIGNED_USER, Task
from taskboard.models.user import User

__all__ = ["PendingTask", "Task", "User", "UNASSIGNED_NAME", "UNASSIGNED_USER"]
