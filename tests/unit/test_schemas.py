import pytest
from pydantic import ValidationError
from resident_directory.domain.schemas import ResidentCreate, ResidentUpdate


def test_resident_create_trims_and_blanks_optional_fields():
    r = ResidentCreate(full_name="  Jordan Park ", unit=" 410", building="C", phone="   ", notes="")
    assert r.full_name == "Jordan Park"
    assert r.unit == "410"
    assert r.phone is None
    assert r.notes is None
    assert r.is_active is True


def test_resident_create_rejects_blank_name():
    with pytest.raises(ValidationError):
        ResidentCreate(full_name="   ", unit="410")


def test_resident_create_rejects_bad_email():
    with pytest.raises(ValidationError):
        ResidentCreate(full_name="Jordan Park", unit="410", email="not-an-email")


def test_resident_update_tracks_only_supplied_fields():
    u = ResidentUpdate(notes="Moved in")
    assert u.model_dump(exclude_unset=True) == {"notes": "Moved in"}


def test_resident_update_rejects_explicit_null_for_required_fields():
    with pytest.raises(ValidationError):
        ResidentUpdate(full_name=None)
    with pytest.raises(ValidationError):
        ResidentUpdate(unit=None)
    assert ResidentUpdate(phone=None).model_dump(exclude_unset=True) == {"phone": None}
