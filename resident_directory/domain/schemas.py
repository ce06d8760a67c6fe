from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional, List
from datetime import datetime


def _blank_to_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class ResidentCreate(BaseModel):
    full_name: str
    unit: str
    building: Optional[str] = None
    floor: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    photo_url: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool = True

    @field_validator("full_name", "unit")
    @classmethod
    def required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("building", "floor", "phone", "email", "photo_url", "notes", mode="before")
    @classmethod
    def optional_text(cls, v):
        return _blank_to_none(v)


class ResidentUpdate(BaseModel):
    full_name: Optional[str] = None
    unit: Optional[str] = None
    building: Optional[str] = None
    floor: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    photo_url: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("full_name", "unit")
    @classmethod
    def required_text(cls, v: Optional[str]) -> Optional[str]:
        # omitted fields never reach here; an explicit null would break NOT NULL
        if v is None:
            raise ValueError("must not be null")
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("building", "floor", "phone", "email", "photo_url", "notes", mode="before")
    @classmethod
    def optional_text(cls, v):
        return _blank_to_none(v)


class ResidentOut(BaseModel):
    id: int
    full_name: str
    unit: str
    building: Optional[str] = None
    floor: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deactivated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ImportRowError(BaseModel):
    row: int
    message: str


class ImportResult(BaseModel):
    created: int = 0
    skipped: int = 0
    errors: List[ImportRowError] = []
