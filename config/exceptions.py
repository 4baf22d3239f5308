"""Custom exception hierarchy for the catalog engine."""

from typing import Optional


class CatalogError(Exception):
    """Base exception for all catalog errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# ---- Validation Errors ----

class ValidationError(CatalogError):
    """Input validation failed: a required field is missing or empty."""


class InvalidConfigError(ValidationError):
    """Configuration value is invalid."""


# ---- Business Rule Errors ----

class ConflictError(CatalogError):
    """A live-uniqueness invariant would be violated."""

    def __init__(self, message: str, existing: Optional[dict] = None):
        details = {}
        if existing and existing.get("id"):
            details["existing_id"] = existing["id"]
        super().__init__(message, details)
        self.existing = existing or {}


class NotFoundError(CatalogError):
    """Referenced entity does not exist or has been retired."""

    def __init__(self, kind: str, message: str = "", entity_id: Optional[str] = None):
        msg = message or f"{kind.capitalize()} not found"
        super().__init__(msg, {"id": entity_id} if entity_id else None)
        self.kind = kind
        self.entity_id = entity_id


class StateError(CatalogError):
    """Operation is disallowed by the entity's lifecycle state."""


# ---- Infrastructure Errors ----

class InfrastructureError(CatalogError):
    """The storage layer or a downstream service failed."""


class DatabaseError(InfrastructureError):
    """Database operation failed."""


class SchemaMigrationRequiredError(DatabaseError):
    """The store lacks a column the requested write needs."""

    def __init__(self, table: str, column: str = "deleted_at"):
        super().__init__(
            f"Database schema missing '{column}' on {table}; run migrations",
            {"table": table, "column": column},
        )
        self.table = table
        self.column = column
