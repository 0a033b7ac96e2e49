"""Database configuration, session management and atomic units of work."""

from collections.abc import Iterator
from contextlib import contextmanager
import logging

from sqlalchemy import create_engine, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from taskboard.config import get_settings
from taskboard.errors import StorageError

logger = logging.getLogger("taskboard.database")

settings = get_settings()

engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if "sqlite" in settings.database_url else {},
    echo=settings.debug,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """Run the enclosed reads and writes as one unit of work.

    Everything done through `db` inside the block is committed together on
    normal exit. Any exception rolls the whole unit back. SQLAlchemy
    failures, including a version conflict with a concurrent unit, are
    re-raised as `StorageError`; domain errors propagate unchanged.
    """
    try:
        yield db
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        logger.warning("Atomic unit aborted by concurrent modification: %s", exc)
        raise StorageError("Document was modified concurrently") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Atomic unit aborted: %s", exc, exc_info=True)
        raise StorageError("Storage operation failed") from exc
    except Exception:
        db.rollback()
        raise


def init_db() -> None:
    """Initialize database tables."""
    import taskboard.models  # noqa: F401  - registers tables on Base.metadata

    logger.info("Initializing database tables...")
    logger.info(f"Database URL: {settings.database_url}")
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        logger.error(f"Error initializing database: {e}", exc_info=True)
        raise
    tables = inspect(engine).get_table_names()
    logger.info(f"Available tables after init: {tables}")
