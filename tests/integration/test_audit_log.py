import pytest
from resident_directory.db.seed import provision
from resident_directory.domain import models
from resident_directory.errors import AuditLogImmutableError
from resident_directory.repositories.audit import AuditRepository
from resident_directory.repositories.identity import IdentityRepository
from resident_directory.services.auth import hash_password


def _make_user(db, email="temp@example.com"):
    identity = IdentityRepository(db)
    identity.ensure_user(email, "Temp User", hash_password("temp-pass"))
    return identity.get_by_email(email)


def test_removing_actor_keeps_entry_and_email_snapshot(db):
    user = _make_user(db)
    entry = AuditRepository(db).append(
        models.AuditAction.UPDATE_RESIDENT,
        actor=user,
        entity_type=models.EntityKind.RESIDENT,
        entity_id=17,
        before={"notes": None},
        after={"notes": "x"},
    )
    db.commit()
    entry_id = entry.id
    db.delete(user)
    db.commit()
    db.expire_all()
    reloaded = db.get(models.AuditLog, entry_id)
    assert reloaded is not None
    assert reloaded.actor_user_id is None
    assert reloaded.actor_email == "temp@example.com"
    assert reloaded.entity_id == "17"
    assert reloaded.after == {"notes": "x"}


def test_deleting_user_cascades_role_assignments(db):
    identity = IdentityRepository(db)
    identity.ensure_role("viewer", "Read-only")
    user = _make_user(db)
    assert identity.assign_role(user.email, "viewer") == 1
    db.commit()
    db.delete(user)
    db.commit()
    assert db.query(models.UserRole).count() == 0
    assert identity.get_role("viewer") is not None


def test_entries_cannot_be_updated(db):
    entry = AuditRepository(db).append(models.AuditAction.LOGIN, actor_email="someone@example.com")
    db.commit()
    entry.action = "TAMPERED"
    with pytest.raises(AuditLogImmutableError):
        db.flush()
    db.rollback()


def test_entries_cannot_be_deleted(db):
    entry = AuditRepository(db).append(models.AuditAction.LOGIN, actor_email="someone@example.com")
    db.commit()
    db.delete(entry)
    with pytest.raises(AuditLogImmutableError):
        db.flush()
    db.rollback()


def test_free_form_actions_and_recent_ordering(db):
    audit = AuditRepository(db)
    audit.append("EXPORT_PDF", metadata={"pages": 3})
    audit.append(models.AuditAction.LOGIN, actor_email="a@example.com")
    db.commit()
    entries = audit.recent(limit=10)
    assert [e.action for e in entries] == ["LOGIN", "EXPORT_PDF"]
    assert entries[1].meta == {"pages": 3}
    assert audit.recent(limit=1)[0].action == "LOGIN"


def test_deleting_role_cascades_role_assignments(db):
    provision(db)
    identity = IdentityRepository(db)
    db.commit()
    db.delete(identity.get_role("viewer"))
    db.commit()
    assert db.query(models.UserRole).count() == 1
    assert identity.role_names("viewer@example.com") == set()
    assert identity.role_names("admin@example.com") == {"admin"}
    assert identity.get_by_email("viewer@example.com") is not None
