"""Custom exceptions for cmdb-graph."""


class CmdbGraphError(Exception):
    """Base exception for relationship graph operations."""


class CINotFoundError(CmdbGraphError):
    """Raised when a CI reference cannot be resolved to a single record."""

    def __init__(self, reference: str, message: str | None = None):
        self.reference = reference
        super().__init__(message or f"CI not found: {reference}")


class InvalidTraversalOptionsError(CmdbGraphError, ValueError):
    """Raised when traversal options fail validation."""


class RecordSourceError(CmdbGraphError):
    """Raised when a record source cannot answer a query."""

    def __init__(self, table: str, message: str):
        self.table = table
        super().__init__(f"{table}: {message}")
