"""Novel data model."""

from dataclasses import dataclass, field
from typing import Optional

from models.enums import LifecycleState, NovelStatus


@dataclass
class Novel:
    """Represents a novel (work) and its metadata."""
    id: Optional[str] = None
    title: str = ""
    slug: str = ""
    normalized_title: str = ""
    description: Optional[str] = None
    cover_url: Optional[str] = None
    author_id: Optional[str] = None  # a novel may exist without an author
    status: NovelStatus = NovelStatus.DRAFT
    is_published: bool = False
    published_at: Optional[str] = None
    total_chapters: int = 0
    last_chapter_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    deleted_at: Optional[str] = None
    genre_ids: list[str] = field(default_factory=list)

    @property
    def is_live(self) -> bool:
        return self.deleted_at is None

    @property
    def lifecycle_state(self) -> LifecycleState:
        if self.deleted_at is not None:
            return LifecycleState.RETIRED
        return LifecycleState.PUBLISHED if self.is_published else LifecycleState.DRAFT


@dataclass
class NovelGenre:
    """Association row between a novel and a genre."""
    novel_id: str = ""
    genre_id: str = ""
    created_at: Optional[str] = None
