"""Author data model."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Author:
    """Represents a credited author."""
    id: Optional[str] = None
    name: str = ""
    slug: str = ""
    normalized_name: str = ""
    bio: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    deleted_at: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return self.deleted_at is None
