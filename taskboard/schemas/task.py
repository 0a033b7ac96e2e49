"""Pydantic schemas for Task documents."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from taskboard.utils.date_utils import format_datetime


class TaskCreate(BaseModel):
    """Request body for creating a task.

    Every field is optional at the schema level so that missing required
    fields are reported by the service as a validation error (400) rather
    than a schema error.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(None, description="Task name (required)")
    description: str | None = Field(None, description="Free text, defaults to empty")
    deadline: datetime | int | float | str | None = Field(
        None,
        description="Deadline (required): ISO-8601 string or epoch milliseconds",
    )
    completed: bool | None = Field(None, description="Completion flag, defaults to false")
    assigned_user: str | None = Field(None, alias="assignedUser", description="Owning user id")
    assigned_user_name: str | None = Field(
        None,
        alias="assignedUserName",
        description="Ignored on input: always derived from the owning user",
    )


class TaskUpdate(TaskCreate):
    """Request body for replacing a task (PUT is a full replacement)."""


class TaskResponse(BaseModel):
    """Serialized task document."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(serialization_alias="_id")
    name: str
    description: str
    deadline: datetime
    completed: bool
    assigned_user: str = Field(serialization_alias="assignedUser")
    assigned_user_name: str = Field(serialization_alias="assignedUserName")
    date_created: datetime = Field(serialization_alias="dateCreated")

    @field_serializer("deadline", "date_created")
    def _serialize_datetime(self, value: datetime) -> str:
        return format_datetime(value)

    @classmethod
    def document(cls, task: Any) -> dict[str, Any]:
        """Render an ORM task as a public JSON document."""
        return cls.model_validate(task).model_dump(by_alias=True, mode="json")


__all__ = ["TaskCreate", "TaskUpdate", "TaskResponse"]
