from sqlalchemy import select
from sqlalchemy.orm import Session
from resident_directory.db.upsert import ConflictPolicy, upsert, upsert_from_select
from resident_directory.domain import models


class IdentityRepository:
    """Roles, users and their assignments, addressed by natural keys.

    Every write is idempotent: roles and users are keyed by name and email
    and overwrite their metadata on conflict, while an assignment that
    already exists is left alone.
    """

    def __init__(self, db: Session):
        self.db = db

    def ensure_role(self, name: str, description: str | None) -> int:
        return upsert(
            self.db,
            models.Role.__table__,
            [{"name": name, "description": description}],
            conflict_on=["name"],
            policy=ConflictPolicy.OVERWRITE,
            update_columns=["description"],
        )

    def ensure_user(self, email: str, full_name: str | None, password_hash: str, is_active: bool = True) -> int:
        return upsert(
            self.db,
            models.User.__table__,
            [{"email": email, "full_name": full_name, "password_hash": password_hash, "is_active": is_active}],
            conflict_on=["email"],
            policy=ConflictPolicy.OVERWRITE,
            update_columns=["full_name", "password_hash", "is_active"],
        )

    def assign_role(self, email: str, role_name: str) -> int:
        # Returns 0 when either side is missing or the pair already exists.
        pairs = (
            select(models.User.id, models.Role.id)
            .select_from(models.User)
            .join(models.Role, models.Role.name == role_name)
            .where(models.User.email == email)
        )
        return upsert_from_select(
            self.db,
            models.UserRole.__table__,
            ["user_id", "role_id"],
            pairs,
            conflict_on=["user_id", "role_id"],
            policy=ConflictPolicy.IGNORE,
        )

    def get_by_email(self, email: str) -> models.User | None:
        return self.db.execute(select(models.User).where(models.User.email == email)).scalar_one_or_none()

    def get_role(self, name: str) -> models.Role | None:
        return self.db.execute(select(models.Role).where(models.Role.name == name)).scalar_one_or_none()

    def role_names(self, email: str) -> set[str]:
        stmt = (
            select(models.Role.name)
            .join(models.UserRole, models.UserRole.role_id == models.Role.id)
            .join(models.User, models.User.id == models.UserRole.user_id)
            .where(models.User.email == email)
        )
        return set(self.db.execute(stmt).scalars().all())
