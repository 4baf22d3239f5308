"""Chapter mutations."""

import logging
import sqlite3
from typing import Optional

from catalog.allocator import ChapterNumberAllocator
from catalog.base import CatalogService
from catalog.content_guard import ContentHashGuard
from catalog.drift import RETIREMENT_COLUMN
from catalog.results import Result, mutation
from catalog.revalidation import chapter_paths
from config.exceptions import NotFoundError, StateError, ValidationError
from models.database import Database, new_id
from models.enums import EntityKind
from tools.text_utils import count_words, normalize_body, normalize_title

logger = logging.getLogger(__name__)


def chapter_slug(number: int) -> str:
    return f"chuong-{number}"


class ChapterService(CatalogService):
    """Create, edit, publish and retire chapters of live novels."""

    kind = EntityKind.CHAPTER

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.allocator = ChapterNumberAllocator(self.drift, self.validator)
        self.content_guard = ContentHashGuard(self.validator)

    def _load_with_novel(self, chapter_id: str, live: bool = False) -> tuple[dict, dict]:
        chapter = self._load(EntityKind.CHAPTER, chapter_id, live=live)
        novel = self._load(EntityKind.NOVEL, chapter["novel_id"], live=False)
        return chapter, novel

    def _refresh_novel_counters(self, conn: sqlite3.Connection, novel_id: str, now: str,
                                touch_last: bool = False) -> None:
        total = self.drift.count(conn, "chapters", "novel_id = ?", (novel_id,))
        fields = {"total_chapters": total, "updated_at": now}
        if touch_last:
            fields["last_chapter_at"] = now
        Database.update(conn, "novels", fields, "id = ?", (novel_id,))

    @mutation
    def create_chapter(
        self,
        novel_id: str,
        title: str,
        body: str,
        number: Optional[int] = None,
        visible: bool = False,
    ) -> Result:
        """Add a chapter to a live novel.

        The number is allocated when omitted (or non-positive). Both the
        number and the body fingerprint must be unused among the novel's
        live chapters.
        """
        if novel_id is None or not str(novel_id).strip():
            raise ValidationError("Novel ID is required")
        novel_id = str(novel_id).strip()
        if not title or not title.strip():
            raise ValidationError("Title is required")
        if not body or not body.strip():
            raise ValidationError("Content is required")
        title = title.strip()
        if number is not None:
            try:
                number = int(number)
            except (TypeError, ValueError):
                raise ValidationError("Chapter number must be an integer") from None

        try:
            novel = self._load(EntityKind.NOVEL, novel_id, live=False)
        except NotFoundError:
            raise NotFoundError("novel", "Novel not found", entity_id=novel_id) from None
        if novel.get(RETIREMENT_COLUMN):
            raise StateError("Cannot create chapters for a retired novel", {"novel_id": novel_id})

        chapter_number = self.allocator.allocate(novel_id, number)
        digest = self.content_guard.ensure_unique(novel_id, body)

        now = self._now()
        chapter_id = new_id()
        content = normalize_body(body)
        values = {
            "id": chapter_id,
            "novel_id": novel_id,
            "chapter_number": chapter_number,
            "title": title,
            "slug": chapter_slug(chapter_number),
            "normalized_title": normalize_title(title),
            "content": content,
            "content_hash": digest,
            "word_count": count_words(content),
            "created_at": now,
            "updated_at": now,
        }
        values.update(self.lifecycle.publish_fields(now) if visible else self.lifecycle.unpublish_fields())

        def recheck():
            self.validator.require_unique(
                EntityKind.CHAPTER, "chapter_number", chapter_number, scope={"novel_id": novel_id},
            )
            self.content_guard.ensure_unique(novel_id, body)

        with self._transaction(recheck) as conn:
            Database.insert(conn, "chapters", values)
            self._refresh_novel_counters(conn, novel_id, now, touch_last=True)

        logger.info("Created chapter %d of novel %s (%s)", chapter_number, novel_id, chapter_id)
        self._notify(chapter_paths(novel_id, novel["slug"], chapter_number))
        return Result.ok({"id": chapter_id, "chapter_number": chapter_number})

    @mutation
    def update_chapter(
        self,
        chapter_id: str,
        title: Optional[str] = None,
        body: Optional[str] = None,
        visible: Optional[bool] = None,
    ) -> Result:
        """Edit a live chapter's title, body or visibility.

        A new body must still differ from every other live chapter of the novel.
        """
        chapter_id = self._require_id(chapter_id, EntityKind.CHAPTER)
        chapter, novel = self._load_with_novel(chapter_id, live=True)
        if novel.get(RETIREMENT_COLUMN):
            raise StateError("Cannot modify a chapter of a retired novel", {"novel_id": novel["id"]})

        updates: dict = {}
        if title is not None:
            title = title.strip()
            if not title:
                raise ValidationError("Title cannot be empty")
            updates["title"] = title
            updates["normalized_title"] = normalize_title(title)
        if body is not None:
            if not body.strip():
                raise ValidationError("Content cannot be empty")
            content = normalize_body(body)
            updates["content"] = content
            updates["content_hash"] = self.content_guard.ensure_unique(
                chapter["novel_id"], body, exclude_id=chapter_id,
            )
            updates["word_count"] = count_words(content)

        now = self._now()
        if visible is not None:
            updates.update(self.lifecycle.visibility_fields(EntityKind.CHAPTER, chapter, visible, now, novel))
        if not updates:
            return Result.ok()
        updates["updated_at"] = now

        def recheck():
            if body is not None:
                self.content_guard.ensure_unique(chapter["novel_id"], body, exclude_id=chapter_id)

        with self._transaction(recheck) as conn:
            if not self.drift.update(conn, "chapters", updates, "id = ?", (chapter_id,)):
                # Retired after it was loaded
                raise NotFoundError("chapter", entity_id=chapter_id)

        logger.info("Updated chapter %s: %s", chapter_id, sorted(updates))
        self._notify(chapter_paths(novel["id"], novel["slug"], chapter["chapter_number"]))
        return Result.ok()

    @mutation
    def toggle_publish_chapter(self, chapter_id: str, visible: bool) -> Result:
        """Publish or unpublish a chapter; refused if it or its novel is retired."""
        chapter_id = self._require_id(chapter_id, EntityKind.CHAPTER)
        chapter, novel = self._load_with_novel(chapter_id)
        fields = self.lifecycle.visibility_fields(EntityKind.CHAPTER, chapter, bool(visible), self._now(), novel)

        with self._transaction() as conn:
            changed = self.drift.update(conn, "chapters", fields, "id = ?", (chapter_id,))
        if not changed:
            raise StateError("Cannot change publish status of a retired chapter", {"id": chapter_id})

        logger.info("Chapter %s %s", chapter_id, "published" if visible else "unpublished")
        self._notify(chapter_paths(novel["id"], novel["slug"], chapter["chapter_number"]))
        return Result.ok()

    @mutation
    def retire_chapter(self, chapter_id: str) -> Result:
        """Retire one chapter. The novel is untouched apart from its chapter count."""
        chapter_id = self._require_id(chapter_id, EntityKind.CHAPTER)
        chapter, novel = self._load_with_novel(chapter_id)
        self.lifecycle.ensure_retirable(EntityKind.CHAPTER, chapter)
        if novel.get(RETIREMENT_COLUMN):
            raise StateError("Cannot modify a chapter of a retired novel", {"novel_id": novel["id"]})
        self.drift.require_retirement("chapters")

        now = self._now()
        fields = self.lifecycle.retire_fields(EntityKind.CHAPTER, now)
        with self._transaction() as conn:
            changed = self.drift.update(conn, "chapters", fields, "id = ?", (chapter_id,))
            if not changed:
                raise StateError("Chapter is already retired", {"id": chapter_id})
            self._refresh_novel_counters(conn, novel["id"], now)

        logger.info("Retired chapter %d of novel %s", chapter["chapter_number"], novel["id"])
        self._notify(chapter_paths(novel["id"], novel["slug"], chapter["chapter_number"]))
        return Result.ok()
