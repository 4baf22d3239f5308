"""Genre data model."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Genre:
    """Represents a genre tag. Retiring one leaves its novel links in place."""
    id: Optional[str] = None
    name: str = ""
    slug: str = ""
    description: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    deleted_at: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return self.deleted_at is None
