from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def stamp_updated_at(target) -> datetime:
    """Overwrite ``target.updated_at`` with the current time and return it.

    This is the single write-path hook for last-modified maintenance; any
    value the caller placed on the attribute is discarded.
    """
    now = utcnow()
    target.updated_at = now
    return now
