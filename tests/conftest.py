import os
import sys
from datetime import timezone
from pathlib import Path
import pytest
from sqlalchemy import select

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from resident_directory.db.base import Base
from resident_directory.db.session import SessionLocal, init_engine
from resident_directory.domain import models


@pytest.fixture(scope="session")
def database_url(tmp_path_factory):
    # TEST_POSTGRES=1 runs the suite against a throwaway PostgreSQL container.
    if os.getenv("TEST_POSTGRES", "").lower() in ("1", "true", "yes"):
        from testcontainers.postgres import PostgresContainer

        with PostgresContainer("postgres:15") as pg:
            yield pg.get_connection_url()
        return
    yield f"sqlite:///{tmp_path_factory.mktemp('db') / 'residents.db'}"


@pytest.fixture(scope="session")
def session_engine(database_url):
    engine = init_engine(database_url)
    yield engine
    engine.dispose()


@pytest.fixture()
def engine(session_engine):
    """Engine over an empty database; tables are dropped before each test."""
    Base.metadata.drop_all(bind=session_engine)
    SessionLocal.configure(bind=session_engine)
    return session_engine


@pytest.fixture()
def db(engine):
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


def _as_utc(value):
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@pytest.fixture()
def as_utc():
    """SQLite hands back naive UTC datetimes, PostgreSQL aware ones."""
    return _as_utc


@pytest.fixture()
def table_snapshot():
    def snapshot(session):
        tables = {}
        for model in (models.SchemaMigration, models.Role, models.User, models.UserRole, models.Resident, models.AuditLog):
            columns = list(model.__table__.columns)
            rows = session.execute(select(*columns)).all()
            tables[model.__tablename__] = sorted(
                (tuple(_as_utc(v) if hasattr(v, "tzinfo") else v for v in row) for row in rows),
                key=repr,
            )
        return tables

    return snapshot
