"""Chapter data model."""

from dataclasses import dataclass
from typing import Optional

from models.enums import LifecycleState


@dataclass
class Chapter:
    """Represents a single chapter of a novel."""
    id: Optional[str] = None
    novel_id: str = ""
    chapter_number: int = 0
    title: str = ""
    slug: str = ""
    normalized_title: str = ""
    content: str = ""
    content_hash: Optional[str] = None
    word_count: int = 0
    is_published: bool = False
    published_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    deleted_at: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return self.deleted_at is None

    @property
    def lifecycle_state(self) -> LifecycleState:
        if self.deleted_at is not None:
            return LifecycleState.RETIRED
        return LifecycleState.PUBLISHED if self.is_published else LifecycleState.DRAFT
