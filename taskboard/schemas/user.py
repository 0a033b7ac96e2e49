"""Pydantic schemas for User documents."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from taskboard.utils.date_utils import format_datetime


class UserCreate(BaseModel):
    """Request body for creating a user."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(None, description="Display name (required)")
    email: str | None = Field(None, description="Email address (required, unique)")
    pending_tasks: list[str] | None = Field(
        None,
        alias="pendingTasks",
        description="Task ids; duplicates are dropped",
    )


class UserUpdate(UserCreate):
    """Request body for replacing a user; `pendingTasks` is replaced wholesale."""


class UserResponse(BaseModel):
    """Serialized user document."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(serialization_alias="_id")
    name: str
    email: str
    pending_tasks: list[str] = Field(serialization_alias="pendingTasks")
    date_created: datetime = Field(serialization_alias="dateCreated")

    @field_serializer("date_created")
    def _serialize_datetime(self, value: datetime) -> str:
        return format_datetime(value)

    @classmethod
    def document(cls, user: Any) -> dict[str, Any]:
        """Render an ORM user as a public JSON document."""
        return cls.model_validate(user).model_dump(by_alias=True, mode="json")


__all__ = ["UserCreate", "UserUpdate", "UserResponse"]
