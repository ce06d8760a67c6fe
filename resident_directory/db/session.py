from contextlib import contextmanager
from typing import Iterator
import structlog
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from resident_directory.config import settings

logger = structlog.get_logger()

SessionLocal = sessionmaker(autoflush=False, expire_on_commit=False)

_engine: Engine | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def init_engine(url: str | None = None) -> Engine:
    """Build the process-wide engine and bind ``SessionLocal`` to it.

    SQLite connections get foreign key enforcement switched on so that the
    cascade and set-null rules behave as they do on PostgreSQL.
    """
    global _engine
    if _engine is not None:
        _engine.dispose()
    engine = create_engine(url or settings.database_url(), pool_pre_ping=True)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    SessionLocal.configure(bind=engine)
    _engine = engine
    logger.debug("db.engine_initialized", dialect=engine.dialect.name)
    return engine


def get_engine() -> Engine:
    if _engine is None:
        return init_engine()
    return _engine


@contextmanager
def unit_of_work() -> Iterator[Session]:
    """All-or-nothing session scope: commit on success, roll back on any error."""
    get_engine()
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
