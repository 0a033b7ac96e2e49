"""Shared helpers for unit tests."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from typing import Callable

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, delete
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import taskboard.models  # noqa: F401  - registers tables on Base.metadata
from taskboard.models import PendingTask, Task, User

__all__ = [
    "api_path",
    "clean_tables",
    "create_sqlite_engine",
    "test_client_with_session",
]


def api_path(path: str) -> str:
    """Return the absolute API path for `path` (with or without a leading slash)."""
    from taskboard.config import get_settings

    if not path.startswith("/"):
        path = f"/{path}"
    return f"{get_settings().api_prefix}{path}"


def create_sqlite_engine() -> tuple[Engine, sessionmaker]:
    """Create an in-memory SQLite engine and session factory for tests.

    StaticPool reuses a single connection so every session sees the same
    in-memory database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return engine, session_factory


def clean_tables(db: Session) -> None:
    """Delete every row so each test starts from empty collections."""
    db.execute(delete(PendingTask))
    db.execute(delete(Task))
    db.execute(delete(User))
    db.commit()


@contextmanager
def test_client_with_session(
    app,
    dependency: Callable[..., Generator[Session, None, None]],
    session: Session,
) -> Generator[TestClient, None, None]:
    """Provide a TestClient whose DB dependency yields `session`."""

    def override_dependency() -> Generator[Session, None, None]:
        yield session

    app.dependency_overrides[dependency] = override_dependency
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


test_client_with_session.__test__ = False  # type: ignore[attr-defined]
