from sqlalchemy import select
from sqlalchemy.orm import Session
from resident_directory.db.upsert import ConflictPolicy, upsert
from resident_directory.domain import models


def record_version(db: Session, version: str) -> bool:
    written = upsert(
        db,
        models.SchemaMigration.__table__,
        [{"version": version}],
        conflict_on=["version"],
        policy=ConflictPolicy.IGNORE,
    )
    return written > 0


def is_applied(db: Session, version: str) -> bool:
    stmt = select(models.SchemaMigration.version).where(models.SchemaMigration.version == version)
    return db.execute(stmt).scalar_one_or_none() is not None
