class ResidentDirectoryError(Exception):
    """Base class for errors raised by the resident directory storage layer."""


class UnsupportedDialectError(ResidentDirectoryError):
    def __init__(self, dialect: str):
        super().__init__(f"conflict-aware inserts are not supported on dialect {dialect!r}")
        self.dialect = dialect


class AuditLogImmutableError(ResidentDirectoryError):
    def __init__(self, entry_id: int | None, operation: str):
        super().__init__(f"audit entry {entry_id} is append-only; {operation} rejected")
        self.entry_id = entry_id
        self.operation = operation


class ResidentNotFoundError(ResidentDirectoryError):
    def __init__(self, resident_id: int):
        super().__init__(f"resident {resident_id} not found")
        self.resident_id = resident_id
