"""Configuration settings loaded from .env file."""

from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings, loaded from .env file or NOVELSHELF_* variables.

    The revalidation webhook is optional: without a URL the notifier only
    logs the stale paths.
    """

    # Database
    sqlite_db_path: Path = Path("./data/catalog.db")
    schema_probe_enabled: bool = True  # False = always send the deleted_at predicate, rely on fallback

    # Revalidation
    revalidate_enabled: bool = True
    revalidate_url: Optional[str] = None
    revalidate_token: Optional[str] = None
    revalidate_timeout_seconds: float = 5.0

    # Logging
    log_dir: Path = Path("./data/logs")
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "NOVELSHELF_",
    }

    @field_validator("revalidate_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("revalidate_timeout_seconds must be > 0")
        return v

    @field_validator("revalidate_url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("revalidate_url must start with http:// or https://")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log_level: {v}")
        return level

    @field_validator("sqlite_db_path", "log_dir")
    @classmethod
    def ensure_parent_dirs(cls, v: Path) -> Path:
        v.parent.mkdir(parents=True, exist_ok=True)
        return v


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
