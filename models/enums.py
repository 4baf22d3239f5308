"""Enumerations for catalog status and lifecycle tracking."""

from enum import Enum


class NovelStatus(str, Enum):
    DRAFT = "draft"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    HIATUS = "hiatus"
    DROPPED = "dropped"


class LifecycleState(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    RETIRED = "retired"


class EntityKind(str, Enum):
    AUTHOR = "author"
    GENRE = "genre"
    NOVEL = "novel"
    CHAPTER = "chapter"

    @property
    def table(self) -> str:
        return f"{self.value}s"

    @property
    def label(self) -> str:
        return self.value.capitalize()
