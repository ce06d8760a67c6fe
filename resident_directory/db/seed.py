import argparse
import sys
from typing import Mapping, Optional, Sequence
import structlog
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from resident_directory.config import settings
from resident_directory.db.base import Base
from resident_directory.db.seed_data import DEMO_USERS, ROLES, SAMPLE_RESIDENTS, SCHEMA_VERSION
from resident_directory.db.session import init_engine, unit_of_work
from resident_directory.errors import ResidentDirectoryError
from resident_directory.logs import configure_logging
from resident_directory.repositories import migrations
from resident_directory.repositories.identity import IdentityRepository
from resident_directory.repositories.residents import ResidentRepository
from resident_directory.services.auth import seed_password_hash

logger = structlog.get_logger()


class SeedReport(BaseModel):
    roles: int = 0
    users: int = 0
    assignments: int = 0
    residents: int = 0
    version_recorded: bool = False


def provision(db: Session, passwords: Optional[Mapping[str, str]] = None, include_samples: bool = True) -> SeedReport:
    """Create the schema if missing and bring the baseline rows to their seeded state.

    Runs inside the caller's transaction. Roles and users overwrite their
    metadata on conflict; assignments, sample residents and the ledger
    entry are inserted only when absent.
    """
    passwords = passwords or {}
    report = SeedReport()
    Base.metadata.create_all(bind=db.connection())

    identity = IdentityRepository(db)
    for role in ROLES:
        report.roles += identity.ensure_role(role["name"], role["description"])
    for account in DEMO_USERS:
        password = passwords.get(account["email"], account["password"])
        report.users += identity.ensure_user(
            account["email"],
            account["full_name"],
            seed_password_hash(account["email"], password),
            is_active=True,
        )
    for account in DEMO_USERS:
        report.assignments += identity.assign_role(account["email"], account["role"])

    if include_samples:
        report.residents = ResidentRepository(db).insert_many(SAMPLE_RESIDENTS)

    report.version_recorded = migrations.record_version(db, SCHEMA_VERSION)
    logger.info(
        "seed.provisioned",
        roles=report.roles,
        users=report.users,
        assignments=report.assignments,
        residents=report.residents,
        version=SCHEMA_VERSION,
        version_recorded=report.version_recorded,
    )
    return report


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Create the resident directory schema and seed baseline data.")
    parser.add_argument("--database-url", default=None, help="SQLAlchemy URL; defaults to DATABASE_URL or the DB_* settings")
    parser.add_argument("--skip-samples", action="store_true", help="do not insert the sample residents")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level, settings.log_json)
    include_samples = settings.seed_sample_residents and not args.skip_samples
    engine = None
    try:
        engine = init_engine(args.database_url)
        with unit_of_work() as db:
            provision(db, passwords=settings.seed_password_overrides(), include_samples=include_samples)
    except (SQLAlchemyError, ResidentDirectoryError):
        logger.exception("seed.failed")
        return 1
    finally:
        if engine is not None:
            engine.dispose()
    logger.info("seed.completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
