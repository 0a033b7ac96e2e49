"""Pydantic schemas for API requests and responses."""

from taskboard.schemas.envelope import Envelope
from taskboard.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from taskboard.schemas.user import UserCreate, UserResponse, UserUpdate

__all__ = [
    "Envelope",
    "TaskCreate",
    "TaskResponse",
    "TaskUpdate",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
]
