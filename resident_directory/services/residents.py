import csv
from typing import TextIO
import structlog
from pydantic import ValidationError
from sqlalchemy.orm import Session
from resident_directory.domain import models
from resident_directory.domain.schemas import ImportResult, ImportRowError, ResidentCreate, ResidentOut, ResidentUpdate
from resident_directory.errors import ResidentNotFoundError
from resident_directory.repositories.audit import AuditRepository
from resident_directory.repositories.residents import ResidentRepository

logger = structlog.get_logger()


def snapshot(resident: models.Resident) -> dict:
    return ResidentOut.model_validate(resident).model_dump(mode="json")


class ResidentService:
    """Resident mutations paired with their audit entries.

    ``actor`` is the user performing the changes; ``None`` records a system
    action with no actor reference.
    """

    def __init__(self, db: Session, actor: models.User | None = None):
        self.db = db
        self.actor = actor
        self.repo = ResidentRepository(db)
        self.audit = AuditRepository(db)

    def _require(self, resident_id: int) -> models.Resident:
        resident = self.repo.get(resident_id)
        if resident is None:
            raise ResidentNotFoundError(resident_id)
        return resident

    def create(self, payload: ResidentCreate) -> models.Resident:
        resident = self.repo.create(**payload.model_dump())
        self.db.refresh(resident)
        self.audit.append(
            models.AuditAction.CREATE_RESIDENT,
            actor=self.actor,
            entity_type=models.EntityKind.RESIDENT,
            entity_id=resident.id,
            after=snapshot(resident),
        )
        logger.info("resident.created", resident_id=resident.id, unit=resident.unit)
        return resident

    def update(self, resident_id: int, payload: ResidentUpdate) -> models.Resident:
        resident = self._require(resident_id)
        before = snapshot(resident)
        changes = payload.model_dump(exclude_unset=True)
        if not changes:
            return resident
        self.repo.update(resident, **changes)
        self.db.refresh(resident)
        self.audit.append(
            models.AuditAction.UPDATE_RESIDENT,
            actor=self.actor,
            entity_type=models.EntityKind.RESIDENT,
            entity_id=resident.id,
            before=before,
            after=snapshot(resident),
            metadata={"fields": sorted(changes)},
        )
        logger.info("resident.updated", resident_id=resident.id, fields=sorted(changes))
        return resident

    def deactivate(self, resident_id: int) -> models.Resident:
        resident = self._require(resident_id)
        if not resident.is_active:
            return resident
        before = snapshot(resident)
        self.repo.deactivate(resident)
        self.db.refresh(resident)
        self.audit.append(
            models.AuditAction.DELETE_RESIDENT,
            actor=self.actor,
            entity_type=models.EntityKind.RESIDENT,
            entity_id=resident.id,
            before=before,
            after=snapshot(resident),
        )
        logger.info("resident.deactivated", resident_id=resident.id)
        return resident

    def import_csv(self, stream: TextIO, source: str | None = None) -> ImportResult:
        """Bulk-load residents from CSV with a header row of resident fields.

        Rows failing validation are reported and skipped; rows whose
        (building, unit) already exists are left untouched.
        """
        result = ImportResult()
        rows = []
        for line_no, raw in enumerate(csv.DictReader(stream), start=2):
            values = {k.strip(): v for k, v in raw.items() if k and v is not None and v.strip() != ""}
            try:
                rows.append(ResidentCreate(**values).model_dump())
            except ValidationError as exc:
                message = "; ".join(f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors())
                result.errors.append(ImportRowError(row=line_no, message=message))
        result.created = self.repo.insert_many(rows)
        result.skipped = len(rows) - result.created
        self.audit.append(
            models.AuditAction.IMPORT_CSV,
            actor=self.actor,
            entity_type=models.EntityKind.RESIDENT,
            metadata={"source": source, **result.model_dump()},
        )
        logger.info("resident.imported", created=result.created, skipped=result.skipped, errors=len(result.errors))
        return result
