from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session
from resident_directory.config import settings
from resident_directory.db.seed import main
from resident_directory.db.seed_data import SCHEMA_VERSION
from resident_directory.domain import models
from resident_directory.repositories import migrations
from resident_directory.repositories.identity import IdentityRepository
from resident_directory.services.auth import verify_password


def test_cli_is_safe_to_rerun(tmp_path):
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    assert main(["--database-url", url]) == 0
    assert main(["--database-url", url]) == 0
    engine = create_engine(url)
    try:
        with Session(engine) as db:
            assert db.execute(select(func.count()).select_from(models.Resident)).scalar_one() == 3
            assert db.execute(select(func.count()).select_from(models.User)).scalar_one() == 2
            assert migrations.is_applied(db, SCHEMA_VERSION)
    finally:
        engine.dispose()


def test_cli_skip_samples(tmp_path):
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    assert main(["--database-url", url, "--skip-samples"]) == 0
    engine = create_engine(url)
    try:
        with Session(engine) as db:
            assert db.execute(select(func.count()).select_from(models.Resident)).scalar_one() == 0
    finally:
        engine.dispose()


def test_cli_applies_configured_password(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "seed_viewer_password", "viewer-rotated")
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    assert main(["--database-url", url]) == 0
    engine = create_engine(url)
    try:
        with Session(engine) as db:
            viewer = IdentityRepository(db).get_by_email("viewer@example.com")
            assert verify_password(viewer.password_hash, "viewer-rotated")
            admin = IdentityRepository(db).get_by_email("admin@example.com")
            assert verify_password(admin.password_hash, "admin123")
    finally:
        engine.dispose()


def test_cli_reports_database_failure(tmp_path):
    url = f"sqlite:///{tmp_path / 'missing-dir' / 'cli.db'}"
    assert main(["--database-url", url]) == 1
