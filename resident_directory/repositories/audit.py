from typing import Any
from sqlalchemy import select
from sqlalchemy.orm import Session
from resident_directory.domain import models


class AuditRepository:
    """Append-only access to ``audit_log``; there is no update or delete."""

    def __init__(self, db: Session):
        self.db = db

    def append(
        self,
        action: models.AuditAction | str,
        actor: models.User | None = None,
        actor_email: str | None = None,
        entity_type: models.EntityKind | str | None = None,
        entity_id: Any = None,
        before: dict | None = None,
        after: dict | None = None,
        metadata: dict | None = None,
    ) -> models.AuditLog:
        entry = models.AuditLog(
            actor_user_id=actor.id if actor is not None else None,
            actor_email=actor_email if actor_email is not None else getattr(actor, "email", None),
            action=getattr(action, "value", action),
            entity_type=getattr(entity_type, "value", entity_type),
            entity_id=str(entity_id) if entity_id is not None else None,
            before=before,
            after=after,
            meta=metadata,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def recent(
        self,
        limit: int = 100,
        action: models.AuditAction | str | None = None,
        entity_type: models.EntityKind | str | None = None,
        entity_id: Any = None,
    ) -> list[models.AuditLog]:
        stmt = select(models.AuditLog)
        if action is not None:
            stmt = stmt.where(models.AuditLog.action == getattr(action, "value", action))
        if entity_type is not None:
            stmt = stmt.where(models.AuditLog.entity_type == getattr(entity_type, "value", entity_type))
        if entity_id is not None:
            stmt = stmt.where(models.AuditLog.entity_id == str(entity_id))
        stmt = stmt.order_by(models.AuditLog.created_at.desc(), models.AuditLog.id.desc()).limit(limit)
        return list(self.db.execute(stmt).scalars().all())
