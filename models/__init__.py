"""Models package: database, dataclass entities, and enums."""

from models.database import Database, new_id
from models.author import Author
from models.genre import Genre
from models.novel import Novel, NovelGenre
from models.chapter import Chapter
from models.enums import NovelStatus, LifecycleState, EntityKind

__all__ = [
    "Database",
    "new_id",
    "Author",
    "Genre",
    "Novel",
    "NovelGenre",
    "Chapter",
    "NovelStatus",
    "LifecycleState",
    "EntityKind",
]
