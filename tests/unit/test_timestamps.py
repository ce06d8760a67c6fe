from datetime import datetime, timezone
from types import SimpleNamespace
from resident_directory.db.timestamps import stamp_updated_at, utcnow


def test_stamp_discards_caller_value():
    stale = datetime(2000, 1, 1, tzinfo=timezone.utc)
    target = SimpleNamespace(updated_at=stale)
    before = utcnow()
    stamped = stamp_updated_at(target)
    assert target.updated_at is stamped
    assert stamped >= before
    assert stamped.tzinfo is not None
