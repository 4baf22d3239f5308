"""Configuration package: settings, logging, and exceptions."""

from config.exceptions import (
    CatalogError,
    ValidationError,
    InvalidConfigError,
    ConflictError,
    NotFoundError,
    StateError,
    InfrastructureError,
    DatabaseError,
    SchemaMigrationRequiredError,
)
from config.logging_config import setup_logging
from config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "CatalogError",
    "ValidationError",
    "InvalidConfigError",
    "ConflictError",
    "NotFoundError",
    "StateError",
    "InfrastructureError",
    "DatabaseError",
    "SchemaMigrationRequiredError",
]
