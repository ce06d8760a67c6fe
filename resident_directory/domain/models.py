from datetime import datetime
from enum import Enum
from sqlalchemy import JSON, BigInteger, Boolean, DateTime, ForeignKey, Index, Integer, Text, UniqueConstraint, event, func, true
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from resident_directory.db.base import Base
from resident_directory.db.timestamps import stamp_updated_at, utcnow
from resident_directory.errors import AuditLogImmutableError

# BIGINT keys only autoincrement on SQLite when declared as INTEGER.
BigId = BigInteger().with_variant(Integer, "sqlite")
JSONDoc = JSON().with_variant(JSONB(), "postgresql")
Timestamp = DateTime(timezone=True)


class AuditAction(str, Enum):
    CREATE_RESIDENT = "CREATE_RESIDENT"
    UPDATE_RESIDENT = "UPDATE_RESIDENT"
    DELETE_RESIDENT = "DELETE_RESIDENT"
    IMPORT_CSV = "IMPORT_CSV"
    LOGIN = "LOGIN"


class EntityKind(str, Enum):
    """Entity tag stored in ``audit_log.entity_type``.

    ``resident`` pairs with the resident's numeric id and ``user`` with the
    user's numeric id, both rendered as strings. A bulk import carries the
    ``resident`` kind with no id. The database does not check the pairing.
    """

    RESIDENT = "resident"
    USER = "user"


class SchemaMigration(Base):
    __tablename__ = "schema_migrations"
    version: Mapped[str] = mapped_column(Text, primary_key=True)
    applied_at: Mapped[datetime] = mapped_column(Timestamp, nullable=False, server_default=func.now())


class Role(Base):
    __tablename__ = "roles"
    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(Timestamp, nullable=False, server_default=func.now())
    users: Mapped[list["User"]] = relationship("User", secondary="user_roles", back_populates="roles", passive_deletes=True)


class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(Text)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())
    created_at: Mapped[datetime] = mapped_column(Timestamp, nullable=False, server_default=func.now())
    last_login_at: Mapped[datetime | None] = mapped_column(Timestamp)
    roles: Mapped[list[Role]] = relationship("Role", secondary="user_roles", back_populates="users", passive_deletes=True)


class UserRole(Base):
    __tablename__ = "user_roles"
    user_id: Mapped[int] = mapped_column(BigId, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role_id: Mapped[int] = mapped_column(BigId, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(Timestamp, nullable=False, server_default=func.now())


class Resident(Base):
    __tablename__ = "residents"
    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    unit: Mapped[str] = mapped_column(Text, nullable=False)
    building: Mapped[str | None] = mapped_column(Text)
    floor: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str | None] = mapped_column(Text)
    email: Mapped[str | None] = mapped_column(Text)
    photo_url: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())
    created_at: Mapped[datetime] = mapped_column(Timestamp, nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(Timestamp, nullable=False, server_default=func.now(), onupdate=utcnow)
    deactivated_at: Mapped[datetime | None] = mapped_column(Timestamp)
    __table_args__ = (
        UniqueConstraint("building", "unit", name="uq_residents_building_unit"),
        Index("ix_residents_is_active", "is_active"),
        Index("ix_residents_unit", "unit"),
        Index("ix_residents_building", "building"),
        Index("ix_residents_floor", "floor"),
        Index("ix_residents_full_name", "full_name"),
    )


class AuditLog(Base):
    __tablename__ = "audit_log"
    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    actor_user_id: Mapped[int | None] = mapped_column(BigId, ForeignKey("users.id", ondelete="SET NULL"))
    actor_email: Mapped[str | None] = mapped_column(Text)
    action: Mapped[str] = mapped_column(Text, nullable=False)
    entity_type: Mapped[str | None] = mapped_column(Text)
    entity_id: Mapped[str | None] = mapped_column(Text)
    before: Mapped[dict | None] = mapped_column(JSONDoc)
    after: Mapped[dict | None] = mapped_column(JSONDoc)
    # "metadata" is reserved on declarative classes
    meta: Mapped[dict | None] = mapped_column("metadata", JSONDoc)
    created_at: Mapped[datetime] = mapped_column(Timestamp, nullable=False, server_default=func.now())
    actor: Mapped[User | None] = relationship("User")
    __table_args__ = (
        Index("ix_audit_log_created_at", "created_at"),
        Index("ix_audit_log_actor_user_id", "actor_user_id"),
        Index("ix_audit_log_action", "action"),
    )


@event.listens_for(Resident, "before_update")
def _refresh_resident_updated_at(mapper, connection, target):
    stamp_updated_at(target)


@event.listens_for(AuditLog, "before_update")
def _reject_audit_update(mapper, connection, target):
    raise AuditLogImmutableError(target.id, "update")


@event.listens_for(AuditLog, "before_delete")
def _reject_audit_delete(mapper, connection, target):
    raise AuditLogImmutableError(target.id, "delete")
