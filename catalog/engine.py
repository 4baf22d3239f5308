"""Catalog facade: one object exposing every mutation operation."""

import logging
from typing import Optional

from catalog.authors import AuthorService
from catalog.chapters import ChapterService
from catalog.drift import SchemaDriftAdapter
from catalog.genres import GenreService
from catalog.novels import NovelService
from catalog.revalidation import Notifier, RevalidationNotifier
from config.settings import Settings
from models.author import Author
from models.chapter import Chapter
from models.database import Database
from models.genre import Genre
from models.novel import Novel

logger = logging.getLogger(__name__)


class Catalog:
    """Composes the entity services over one store, drift adapter and notifier.

    The operation names follow the editor surface: works are novels, so
    ``create_work`` and ``create_novel`` are the same operation.
    """

    def __init__(
        self,
        db: Optional[Database] = None,
        settings: Optional[Settings] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.settings = settings or Settings()
        self.db = db or Database(self.settings.sqlite_db_path)
        self.drift = SchemaDriftAdapter(self.db, probe=self.settings.schema_probe_enabled)
        self.notifier = notifier or RevalidationNotifier(self.settings)

        shared = dict(db=self.db, settings=self.settings, notifier=self.notifier, drift=self.drift)
        self.authors = AuthorService(**shared)
        self.genres = GenreService(**shared)
        self.novels = NovelService(**shared)
        self.chapters = ChapterService(**shared)

        # Authors
        self.create_author = self.authors.create_author
        self.update_author = self.authors.update_author
        self.retire_author = self.authors.retire_author
        # Genres
        self.create_genre = self.genres.create_genre
        self.update_genre = self.genres.update_genre
        self.retire_genre = self.genres.retire_genre
        # Novels
        self.create_novel = self.create_work = self.novels.create_novel
        self.update_novel = self.update_work = self.novels.update_novel
        self.publish_novel = self.publish_work = self.novels.publish_novel
        self.retire_novel = self.retire_work = self.novels.retire_novel
        # Chapters
        self.create_chapter = self.chapters.create_chapter
        self.update_chapter = self.chapters.update_chapter
        self.toggle_publish_chapter = self.chapters.toggle_publish_chapter
        self.retire_chapter = self.chapters.retire_chapter

    def migrate(self) -> None:
        """Run schema migrations and re-probe the retirement columns."""
        self.db.migrate()
        self.drift.forget()
        logger.info("Schema migrations applied to %s", self.db.db_path)

    def flush(self, timeout: Optional[float] = None) -> None:
        flush = getattr(self.notifier, "flush", None)
        if flush is not None:
            flush(timeout)

    # ---- Reads for the editor surface ----

    def list_authors(self, include_retired: bool = False) -> list[Author]:
        return self.db.list_authors(include_retired)

    def list_genres(self, include_retired: bool = False) -> list[Genre]:
        return self.db.list_genres(include_retired)

    def list_novels(self, include_retired: bool = False) -> list[Novel]:
        return self.db.list_novels(include_retired)

    def list_chapters(self, novel_id: str, include_retired: bool = False) -> list[Chapter]:
        return self.db.get_chapters(novel_id, include_retired)
