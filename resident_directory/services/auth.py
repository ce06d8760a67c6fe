import hashlib
from typing import Optional
import structlog
from argon2 import PasswordHasher, Type, exceptions as argon_exc
from argon2.low_level import hash_secret
from sqlalchemy.orm import Session
from resident_directory.db.timestamps import utcnow
from resident_directory.domain import models
from resident_directory.repositories.audit import AuditRepository
from resident_directory.repositories.identity import IdentityRepository

logger = structlog.get_logger()

TIME_COST = 3
MEMORY_COST = 65536
PARALLELISM = 4
HASH_LEN = 32
SALT_LEN = 16

ph = PasswordHasher(time_cost=TIME_COST, memory_cost=MEMORY_COST, parallelism=PARALLELISM, hash_len=HASH_LEN, salt_len=SALT_LEN)


def hash_password(password: str) -> str:
    return ph.hash(password)


def seed_password_hash(email: str, password: str) -> str:
    """argon2id hash with a salt derived from ``email``.

    Re-seeding the same account with the same password produces the same
    string, so a repeated seed run leaves the users table unchanged.
    """
    salt = hashlib.sha256(email.lower().encode("utf-8")).digest()[:SALT_LEN]
    encoded = hash_secret(
        password.encode("utf-8"),
        salt,
        time_cost=TIME_COST,
        memory_cost=MEMORY_COST,
        parallelism=PARALLELISM,
        hash_len=HASH_LEN,
        type=Type.ID,
    )
    return encoded.decode("ascii")


def verify_password(password_hash: str, password: str) -> bool:
    try:
        return ph.verify(password_hash, password)
    except argon_exc.VerifyMismatchError:
        return False
    except argon_exc.InvalidHashError:
        logger.warning("auth.invalid_hash_format")
        return False


def authenticate(db: Session, email: str, password: str, ip: str | None = None) -> Optional[models.User]:
    """Check credentials, stamp ``last_login_at`` and audit the attempt."""
    audit = AuditRepository(db)
    user = IdentityRepository(db).get_by_email(email)
    if user is None or not user.is_active or not verify_password(user.password_hash, password):
        audit.append(models.AuditAction.LOGIN, actor_email=email, metadata={"success": False, "ip": ip})
        logger.info("auth.login_failed", email=email)
        return None
    user.last_login_at = utcnow()
    audit.append(
        models.AuditAction.LOGIN,
        actor=user,
        entity_type=models.EntityKind.USER,
        entity_id=user.id,
        metadata={"success": True, "ip": ip},
    )
    logger.info("auth.login_succeeded", user_id=user.id)
    return user
