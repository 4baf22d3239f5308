"""Novel (work) mutations, including retirement cascading to chapters."""

import logging
import sqlite3
from typing import Iterable, Optional

from catalog.base import UNSET, CatalogService
from catalog.results import Result, mutation
from catalog.revalidation import author_paths, novel_paths
from config.exceptions import NotFoundError, StateError, ValidationError
from models.database import Database, new_id
from models.enums import EntityKind, NovelStatus
from tools.text_utils import normalize_title, slugify, unique_slug

logger = logging.getLogger(__name__)


def _parse_status(status) -> Optional[NovelStatus]:
    if status is None:
        return None
    try:
        return NovelStatus(status)
    except ValueError:
        allowed = ", ".join(s.value for s in NovelStatus)
        raise ValidationError(f"Invalid status: {status} (expected one of {allowed})") from None


class NovelService(CatalogService):
    """Create, edit, publish and retire novels."""

    kind = EntityKind.NOVEL

    # ---- Checks ----

    def _check_author(self, author_id: Optional[str]) -> Optional[str]:
        if author_id is None or not str(author_id).strip():
            return None
        author_id = str(author_id).strip()
        self._require_live(EntityKind.AUTHOR, author_id, "Author not found")
        return author_id

    def _check_genres(self, genre_ids: Optional[Iterable[str]]) -> Optional[list[str]]:
        if genre_ids is None:
            return None
        cleaned = list(dict.fromkeys(str(g).strip() for g in genre_ids if g and str(g).strip()))
        for genre_id in cleaned:
            self._require_live(EntityKind.GENRE, genre_id, f"Genre not found: {genre_id}")
        return cleaned

    def _check_title(self, title: str, author_id: Optional[str], exclude_id: Optional[str] = None) -> None:
        # Only scoped by author: two authorless novels may share a title
        self.validator.require_unique(
            EntityKind.NOVEL, "title", title, scope={"author_id": author_id}, exclude_id=exclude_id,
        )

    def _derive_slug(self, title: str, novel_id: str) -> str:
        base = slugify(title) or f"novel-{novel_id[:8]}"
        rows = self.drift.select(
            "novels", "slug", ["(slug = ? OR slug LIKE ?)"], [base, f"{base}-%"],
        )
        return unique_slug(base, (r["slug"] for r in rows))

    @staticmethod
    def _replace_genres(conn: sqlite3.Connection, novel_id: str, genre_ids: list[str], now: str) -> None:
        conn.execute("DELETE FROM novel_genres WHERE novel_id = ?", (novel_id,))
        for genre_id in genre_ids:
            Database.insert(conn, "novel_genres", {"novel_id": novel_id, "genre_id": genre_id, "created_at": now})

    # ---- Operations ----

    @mutation
    def create_novel(
        self,
        title: str,
        description: Optional[str] = None,
        author_id: Optional[str] = None,
        status: Optional[str] = None,
        visible: bool = False,
        genre_ids: Optional[Iterable[str]] = None,
        cover_url: Optional[str] = None,
    ) -> Result:
        """Create a novel, optionally published and tagged.

        Duplicate titles are rejected only within one author's live novels.
        Returns the new id and derived slug.
        """
        if not title or not title.strip():
            raise ValidationError("Title is required")
        title = title.strip()
        novel_status = _parse_status(status) or NovelStatus.DRAFT
        author_id = self._check_author(author_id)
        if author_id:
            self._check_title(title, author_id)
        genres = self._check_genres(genre_ids) or []

        now = self._now()
        novel_id = new_id()
        slug = self._derive_slug(title, novel_id)
        values = {
            "id": novel_id,
            "title": title,
            "slug": slug,
            "normalized_title": normalize_title(title),
            "description": description.strip() if isinstance(description, str) else None,
            "cover_url": (cover_url or "").strip() or None,
            "author_id": author_id,
            "status": novel_status.value,
            "created_at": now,
            "updated_at": now,
        }
        values.update(self.lifecycle.publish_fields(now) if visible else self.lifecycle.unpublish_fields())

        def recheck():
            if author_id:
                self._check_title(title, author_id)
            self.validator.require_unique(EntityKind.NOVEL, "slug", slug)

        with self._transaction(recheck) as conn:
            Database.insert(conn, "novels", values)
            self._replace_genres(conn, novel_id, genres, now)

        logger.info("Created novel %s (%s) with %d genre(s)", novel_id, slug, len(genres))
        self._notify(novel_paths(novel_id, slug))
        return Result.ok({"id": novel_id, "slug": slug})

    @mutation
    def update_novel(
        self,
        novel_id: str,
        title: Optional[str] = None,
        description=UNSET,
        author_id=UNSET,
        status: Optional[str] = None,
        visible: Optional[bool] = None,
        cover_url=UNSET,
        genre_ids: Optional[Iterable[str]] = None,
    ) -> Result:
        """Partially update a live novel.

        ``genre_ids``, when given, replaces the whole association set.
        ``author_id=None`` detaches the author. The slug never changes.
        """
        novel_id = self._require_id(novel_id, EntityKind.NOVEL)
        current = self._load(EntityKind.NOVEL, novel_id)

        updates: dict = {}
        if title is not None:
            title = title.strip()
            if not title:
                raise ValidationError("Title cannot be empty")
            updates["title"] = title
            updates["normalized_title"] = normalize_title(title)
        if description is not UNSET:
            updates["description"] = description.strip() if isinstance(description, str) else None
        if author_id is not UNSET:
            updates["author_id"] = self._check_author(author_id)
        if status is not None:
            updates["status"] = _parse_status(status).value
        if cover_url is not UNSET:
            updates["cover_url"] = (cover_url or "").strip() or None

        now = self._now()
        if visible is not None:
            updates.update(self.lifecycle.visibility_fields(EntityKind.NOVEL, current, visible, now))
        genres = self._check_genres(genre_ids)

        if not updates and genres is None:
            return Result.ok()

        effective_title = updates.get("title", current["title"])
        effective_author = updates.get("author_id", current["author_id"])
        title_scope_changed = "title" in updates or "author_id" in updates

        def recheck():
            if title_scope_changed and effective_author:
                self._check_title(effective_title, effective_author, exclude_id=novel_id)

        recheck()

        logged = sorted(updates)
        updates["updated_at"] = now
        with self._transaction(recheck) as conn:
            if not self.drift.update(conn, "novels", updates, "id = ?", (novel_id,)):
                # Retired after it was loaded; the genre half rolls back with it
                raise NotFoundError("novel", entity_id=novel_id)
            if genres is not None:
                self._replace_genres(conn, novel_id, genres, now)

        logger.info("Updated novel %s: %s%s", novel_id, logged,
                    f" genres={len(genres)}" if genres is not None else "")
        paths = novel_paths(novel_id, current["slug"])
        if "author_id" in updates:
            for affected in {current["author_id"], updates["author_id"]} - {None}:
                row = self.drift.select_one("authors", "*", ["id = ?"], [affected], live_only=False)
                if row:
                    paths += author_paths(row["slug"])
        self._notify(paths)
        return Result.ok()

    @mutation
    def publish_novel(self, novel_id: str, visible: bool) -> Result:
        """Publish (``visible=True``) or unpublish a novel. Retired novels are refused."""
        novel_id = self._require_id(novel_id, EntityKind.NOVEL)
        current = self._load(EntityKind.NOVEL, novel_id, live=False)
        fields = self.lifecycle.visibility_fields(EntityKind.NOVEL, current, bool(visible), self._now())

        with self._transaction() as conn:
            changed = self.drift.update(conn, "novels", fields, "id = ?", (novel_id,))
        if not changed:
            raise StateError("Cannot change publish status of a retired novel", {"id": novel_id})

        logger.info("Novel %s %s", novel_id, "published" if visible else "unpublished")
        self._notify(novel_paths(novel_id, current["slug"]))
        return Result.ok()

    @mutation
    def retire_novel(self, novel_id: str) -> Result:
        """Retire a novel and every live chapter in one transaction."""
        novel_id = self._require_id(novel_id, EntityKind.NOVEL)
        current = self._load(EntityKind.NOVEL, novel_id, live=False)
        self.lifecycle.ensure_retirable(EntityKind.NOVEL, current)
        self.drift.require_retirement("chapters")
        self.drift.require_retirement("novels")

        chapter_numbers = [
            r["chapter_number"]
            for r in self.drift.select("chapters", "chapter_number", ["novel_id = ?"], [novel_id])
        ]
        with self._transaction() as conn:
            retired = self.lifecycle.retire_novel_cascade(conn, novel_id, self._now())

        paths = novel_paths(novel_id, current["slug"]) + [f"/admin/novels/{novel_id}/chapters"]
        paths += [f"/truyen/{current['slug']}/chuong-{n}" for n in chapter_numbers]
        self._notify(paths)
        return Result.ok({"id": novel_id, "chapters_retired": retired})
