from typing import Any, Mapping, Sequence
from sqlalchemy import select
from sqlalchemy.orm import Session
from resident_directory.db.timestamps import utcnow
from resident_directory.db.upsert import ConflictPolicy, upsert
from resident_directory.domain import models

NATURAL_KEY = ("building", "unit")
_IMMUTABLE = {"id", "created_at"}


class ResidentRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, resident_id: int) -> models.Resident | None:
        return self.db.get(models.Resident, resident_id)

    def get_by_unit(self, unit: str, building: str | None) -> models.Resident | None:
        stmt = select(models.Resident).where(models.Resident.unit == unit)
        if building is None:
            stmt = stmt.where(models.Resident.building.is_(None))
        else:
            stmt = stmt.where(models.Resident.building == building)
        return self.db.execute(stmt).scalars().first()

    def create(self, **fields: Any) -> models.Resident:
        resident = models.Resident(**fields)
        self.db.add(resident)
        self.db.flush()
        return resident

    def insert_many(self, rows: Sequence[Mapping[str, Any]]) -> int:
        """Insert rows, skipping any whose (building, unit) is already taken."""
        return upsert(
            self.db,
            models.Resident.__table__,
            rows,
            conflict_on=NATURAL_KEY,
            policy=ConflictPolicy.IGNORE,
        )

    def search(
        self,
        name: str | None = None,
        unit: str | None = None,
        building: str | None = None,
        floor: str | None = None,
        active: bool | None = True,
        limit: int = 50,
        offset: int = 0,
    ) -> list[models.Resident]:
        stmt = select(models.Resident)
        if active is not None:
            stmt = stmt.where(models.Resident.is_active.is_(active))
        if unit is not None:
            stmt = stmt.where(models.Resident.unit == unit)
        if building is not None:
            stmt = stmt.where(models.Resident.building == building)
        if floor is not None:
            stmt = stmt.where(models.Resident.floor == floor)
        if name:
            stmt = stmt.where(models.Resident.full_name.icontains(name, autoescape=True))
        stmt = stmt.order_by(models.Resident.full_name, models.Resident.id).offset(offset).limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def update(self, resident: models.Resident, **changes: Any) -> models.Resident:
        # updated_at is restamped on flush whatever the caller passes here
        for key, value in changes.items():
            if key in _IMMUTABLE or not hasattr(models.Resident, key):
                raise ValueError(f"cannot update resident attribute {key!r}")
            setattr(resident, key, value)
        self.db.flush()
        return resident

    def deactivate(self, resident: models.Resident) -> models.Resident:
        if resident.is_active:
            resident.is_active = False
            resident.deactivated_at = utcnow()
            self.db.flush()
        return resident

    def reactivate(self, resident: models.Resident) -> models.Resident:
        if not resident.is_active:
            resident.is_active = True
            resident.deactivated_at = None
            self.db.flush()
        return resident
