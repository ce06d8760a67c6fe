"""Conflict-aware inserts with an explicit per-table policy.

Seeding declares, for every table it writes, what happens when a row with
the same conflict key already exists: ``OVERWRITE`` replaces the listed
mutable columns, ``IGNORE`` leaves the stored row untouched. The statement
is built with the dialect's own ``insert`` so the conflict clause renders
natively on PostgreSQL and SQLite.
"""
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select
from resident_directory.errors import UnsupportedDialectError

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class ConflictPolicy(str, Enum):
    OVERWRITE = "overwrite"
    IGNORE = "ignore"


def dialect_insert(db: Session, table):
    name = db.get_bind().dialect.name
    factory = _DIALECT_INSERTS.get(name)
    if factory is None:
        raise UnsupportedDialectError(name)
    return factory(table)


def _apply_policy(stmt, conflict_on: Sequence[str], policy: ConflictPolicy, update_columns: Iterable[str]):
    if policy is ConflictPolicy.IGNORE:
        return stmt.on_conflict_do_nothing(index_elements=list(conflict_on))
    update_columns = list(update_columns)
    if not update_columns:
        raise ValueError("OVERWRITE policy needs at least one column to update")
    return stmt.on_conflict_do_update(
        index_elements=list(conflict_on),
        set_={col: getattr(stmt.excluded, col) for col in update_columns},
    )


def upsert(
    db: Session,
    table,
    rows: Sequence[Mapping[str, Any]],
    *,
    conflict_on: Sequence[str],
    policy: ConflictPolicy,
    update_columns: Iterable[str] = (),
) -> int:
    """Insert ``rows`` into ``table`` resolving conflicts on ``conflict_on``.

    Returns the number of rows the database reports as written.
    """
    if not rows:
        return 0
    stmt = dialect_insert(db, table).values([dict(r) for r in rows])
    stmt = _apply_policy(stmt, conflict_on, policy, update_columns)
    return db.execute(stmt).rowcount


def upsert_from_select(
    db: Session,
    table,
    columns: Sequence[str],
    select: Select,
    *,
    conflict_on: Sequence[str],
    policy: ConflictPolicy = ConflictPolicy.IGNORE,
    update_columns: Iterable[str] = (),
) -> int:
    """``INSERT ... SELECT`` variant; a select matching nothing writes nothing."""
    stmt = dialect_insert(db, table).from_select(list(columns), select, include_defaults=False)
    stmt = _apply_policy(stmt, conflict_on, policy, update_columns)
    return db.execute(stmt).rowcount
