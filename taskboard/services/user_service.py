"""Service for managing users."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from taskboard.database import atomic
from taskboard.errors import ConflictError, NotFoundError, StorageError, ValidationError
from taskboard.models.user import User
from taskboard.services.assignment_service import AssignmentService
from taskboard.services.query_builder import DocumentQuery, ListQuery
from taskboard.utils.date_utils import utcnow
from taskboard.utils.ids import generate_object_id, is_object_id

if TYPE_CHECKING:
    from taskboard.schemas.user import UserCreate

logger = logging.getLogger("taskboard.users")

_documents = DocumentQuery(User)


def _require_name_and_email(user_data: "UserCreate") -> None:
    if not user_data.name or not user_data.email:
        raise ValidationError("Name and email required")


def _ensure_email_free(db: Session, email: str, exclude_id: str | None = None) -> None:
    stmt = select(User.id).where(User.email == email)
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    if db.scalar(stmt) is not None:
        raise ConflictError("Email already exists")


def _flush_unique(db: Session) -> None:
    """Flush pending writes, reporting a unique-email race as a conflict."""
    try:
        db.flush()
    except IntegrityError as exc:
        raise ConflictError("Email already exists") from exc


class UserService:
    """Business logic for users."""

    @staticmethod
    def list_users(db: Session, query: ListQuery) -> list[User] | int:
        try:
            if query.count:
                return _documents.count(db, query.where)
            return _documents.fetch(db, query)
        except SQLAlchemyError as exc:
            logger.error("User query failed: %s", exc, exc_info=True)
            raise StorageError("Error fetching users") from exc

    @staticmethod
    def get_user(db: Session, user_id: str) -> User:
        if not is_object_id(user_id):
            raise ValidationError("Error fetching user")
        try:
            user = db.get(User, user_id)
        except SQLAlchemyError as exc:
            raise StorageError("Error fetching user") from exc
        if user is None:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def create_user(db: Session, user_data: "UserCreate") -> User:
        """Create a user.

        `pendingTasks` is stored as given (minus duplicates); the listed tasks
        are neither checked nor linked back to the new user.
        """
        _require_name_and_email(user_data)
        with atomic(db):
            _ensure_email_free(db, user_data.email)
            user = User(
                id=generate_object_id(),
                name=user_data.name,
                email=user_data.email,
                date_created=utcnow(),
            )
            user.set_pending_tasks(user_data.pending_tasks or [])
            db.add(user)
            _flush_unique(db)

        logger.info("User created: user_id=%s", user.id)
        return user

    @staticmethod
    def replace_user(db: Session, user_id: str, user_data: "UserCreate") -> User:
        """Replace a user and reconcile the tasks named in its new `pendingTasks`."""
        _require_name_and_email(user_data)
        if not is_object_id(user_id):
            raise ValidationError("Failed to update user")
        with atomic(db):
            user = db.get(User, user_id)
            if user is None:
                raise NotFoundError("User not found")
            _ensure_email_free(db, user_data.email, exclude_id=user_id)

            user.name = user_data.name
            user.email = user_data.email
            user.set_pending_tasks(user_data.pending_tasks or [])
            AssignmentService.reconcile_user(db, user)
            _flush_unique(db)

        logger.info("User replaced: user_id=%s pending=%d", user.id, len(user.pending_tasks))
        return user

    @staticmethod
    def delete_user(db: Session, user_id: str) -> None:
        """Delete a user after unassigning every task that points at it."""
        if not is_object_id(user_id):
            raise StorageError("Failed to delete user")
        with atomic(db):
            user = db.get(User, user_id)
            if user is None:
                raise NotFoundError("User not found")
            AssignmentService.release_tasks(db, user.id)
            db.delete(user)

        logger.info("User deleted: user_id=%s", user_id)


__all__ = ["UserService"]
