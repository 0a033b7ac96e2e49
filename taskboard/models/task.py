"""Task model."""

from typing import ClassVar

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from taskboard.database import Base
from taskboard.utils.date_utils import utcnow
from taskboard.utils.ids import generate_object_id

# assignedUser/assignedUserName pair meaning "no owning user"
UNASSIGNED_USER = ""
UNASSIGNED_NAME = "unassigned"


class Task(Base):
    """Task document, optionally assigned to one user."""

    __tablename__ = "tasks"

    id = Column(String(24), primary_key=True, default=generate_object_id)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    deadline = Column(DateTime, nullable=False, index=True)
    completed = Column(Boolean, nullable=False, default=False)
    assigned_user = Column(String(64), nullable=False, default=UNASSIGNED_USER, index=True)
    assigned_user_name = Column(String(255), nullable=False, default=UNASSIGNED_NAME)
    date_created = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Public document field name -> mapped attribute
    document_fields: ClassVar[dict[str, str]] = {
        "_id": "id",
        "name": "name",
        "description": "description",
        "deadline": "deadline",
        "completed": "completed",
        "assignedUser": "assigned_user",
        "assignedUserName": "assigned_user_name",
        "dateCreated": "date_created",
    }

    @property
    def is_assigned(self) -> bool:
        return bool(self.assigned_user)

    def unassign(self) -> None:
        """Apply the unassigned sentinel."""
        self.assigned_user = UNASSIGNED_USER
        self.assigned_user_name = UNASSIGNED_NAME

    def __repr__(self) -> str:
        """String representation of Task."""
        return f"<Task(id={self.id}, name='{self.name}', assigned_user='{self.assigned_user}')>"


__all__ = ["Task", "UNASSIGNED_USER", "UNASSIGNED_NAME"]
