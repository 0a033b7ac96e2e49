"""Unit tests for assignment links and atomic units of work."""

from collections.abc import Generator
from datetime import datetime

import pytest
from sqlalchemy.orm import Session

from taskboard.database import Base, atomic
from taskboard.errors import StorageError
from taskboard.models import Task, User
from taskboard.services.assignment_service import AssignmentService
from tests.utils import clean_tables, create_sqlite_engine


engine, SessionLocal = create_sqlite_engine()


@pytest.fixture(scope="module")
def db_setup() -> Generator[None, None, None]:
    """Create test database schema once per module."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_setup: None) -> Generator[Session, None, None]:
    """Provide a session over empty tables."""
    db = SessionLocal()
    try:
        clean_tables(db)
        yield db
    finally:
        db.rollback()
        db.close()


def _add_user(db: Session, name: str) -> User:
    user = User(name=name, email=f"{name.lower()}@example.com")
    db.add(user)
    db.commit()
    return user


def _add_task(db: Session, name: str) -> Task:
    task = Task(name=name, deadline=datetime(2024, 1, 1))
    task.unassign()
    db.add(task)
    db.commit()
    return task


class TestLinkUnlink:
    """Link and unlink primitives."""

    def test_link_sets_both_sides(self, db_session: Session) -> None:
        user = _add_user(db_session, "Ann")
        task = _add_task(db_session, "T1")

        with atomic(db_session):
            linked = AssignmentService.link(db_session, task, user.id)

        assert linked is user
        assert task.assigned_user == user.id
        assert task.assigned_user_name == "Ann"
        assert user.pending_tasks == [task.id]

    def test_link_is_idempotent(self, db_session: Session) -> None:
        user = _add_user(db_session, "Ann")
        task = _add_task(db_session, "T1")

        for _ in range(2):
            with atomic(db_session):
                AssignmentService.link(db_session, task, user.id)

        assert user.pending_tasks == [task.id]

    def test_link_to_missing_user_unassigns(self, db_session: Session) -> None:
        task = _add_task(db_session, "T1")
        task.assigned_user = "stale"

        with atomic(db_session):
            assert AssignmentService.link(db_session, task, "0" * 24) is None

        assert (task.assigned_user, task.assigned_user_name) == ("", "unassigned")

    def test_unlink_clears_both_sides(self, db_session: Session) -> None:
        user = _add_user(db_session, "Ann")
        task = _add_task(db_session, "T1")
        with atomic(db_session):
            AssignmentService.link(db_session, task, user.id)

        with atomic(db_session):
            AssignmentService.unlink(db_session, task)

        assert user.pending_tasks == []
        assert (task.assigned_user, task.assigned_user_name) == ("", "unassigned")


class TestAtomicUnit:
    """All-or-nothing behaviour."""

    def test_failure_rolls_back_both_collections(self, db_session: Session) -> None:
        user = _add_user(db_session, "Ann")
        task = _add_task(db_session, "T1")
        task_id, user_id = task.id, user.id

        with pytest.raises(RuntimeError):
            with atomic(db_session):
                AssignmentService.link(db_session, task, user_id)
                db_session.flush()
                raise RuntimeError("boom")

        assert db_session.get(User, user_id).pending_tasks == []
        assert db_session.get(Task, task_id).assigned_user == ""

    def test_concurrent_modification_aborts(self, db_session: Session) -> None:
        user = _add_user(db_session, "Ann")
        task = _add_task(db_session, "T1")
        assert user.name == "Ann"  # load current version

        other = SessionLocal()
        try:
            with atomic(other):
                other.get(User, user.id).name = "Renamed"

            with pytest.raises(StorageError):
                with atomic(db_session):
                    AssignmentService.link(db_session, task, user.id)
        finally:
            other.close()

        db_session.expire_all()
        assert db_session.get(User, user.id).pending_tasks == []
        assert db_session.get(Task, task.id).assigned_user == ""

    def test_release_tasks_skips_kept_ids(self, db_session: Session) -> None:
        user = _add_user(db_session, "Ann")
        keep = _add_task(db_session, "Keep")
        drop = _add_task(db_session, "Drop")
        with atomic(db_session):
            AssignmentService.link(db_session, keep, user.id)
            AssignmentService.link(db_session, drop, user.id)

        with atomic(db_session):
            released = AssignmentService.release_tasks(db_session, user.id, keep=frozenset({keep.id}))

        assert [task.id for task in released] == [drop.id]
        assert keep.assigned_user == user.id
        assert drop.assigned_user == ""
