"""Tests for the Database store and model conversions."""

import sqlite3

import pytest

from models.database import Database, new_id
from models.enums import EntityKind, LifecycleState, NovelStatus
from models.novel import NovelGenre


NOW = "2026-01-01T00:00:00+00:00"


def _author_row(name="Jane Doe", slug="jane-doe", **extra):
    row = {
        "id": new_id(), "name": name, "slug": slug, "normalized_name": name.lower(),
        "bio": None, "created_at": NOW, "updated_at": NOW,
    }
    row.update(extra)
    return row


class TestSchema:
    def test_migrated_store_has_retirement_columns(self, db):
        for table in ("authors", "genres", "novels", "chapters"):
            assert "deleted_at" in db.table_columns(table)

    def test_legacy_store_lacks_retirement_columns(self, legacy_db):
        for table in ("authors", "genres", "novels", "chapters"):
            assert "deleted_at" not in legacy_db.table_columns(table)

    def test_migrate_is_idempotent(self, db):
        db.migrate()
        db.migrate()
        assert "deleted_at" in db.table_columns("novels")

    def test_migrate_upgrades_legacy_store(self, legacy_db):
        legacy_db.migrate()
        assert "deleted_at" in legacy_db.table_columns("chapters")

    def test_unknown_table_rejected(self, db):
        with pytest.raises(ValueError):
            db.table_columns("users")


class TestLiveUniqueIndexes:
    def test_duplicate_live_slug_raises_integrity_error(self, db):
        with db.connect() as conn:
            Database.insert(conn, "authors", _author_row())
        with pytest.raises(sqlite3.IntegrityError):
            with db.connect() as conn:
                Database.insert(conn, "authors", _author_row(name="Other"))

    def test_retired_row_frees_slug(self, db):
        with db.connect() as conn:
            Database.insert(conn, "authors", _author_row(deleted_at=NOW))
        with db.connect() as conn:
            Database.insert(conn, "authors", _author_row())
        assert len(db.list_authors(include_retired=True)) == 2
        assert len(db.list_authors()) == 1


class TestConnect:
    def test_rollback_on_error(self, db):
        with pytest.raises(RuntimeError):
            with db.connect() as conn:
                Database.insert(conn, "authors", _author_row())
                raise RuntimeError("boom")
        assert db.list_authors() == []

    def test_update_returns_rowcount(self, db):
        row = _author_row()
        with db.connect() as conn:
            Database.insert(conn, "authors", row)
            changed = Database.update(conn, "authors", {"bio": "x"}, "id = ?", (row["id"],))
            missing = Database.update(conn, "authors", {"bio": "x"}, "id = ?", ("nope",))
        assert changed == 1
        assert missing == 0


class TestReads:
    def test_get_author_not_found_returns_none(self, db):
        assert db.get_author("missing") is None

    def test_novel_round_trip_through_catalog(self, catalog, sample_author, sample_genre):
        result = catalog.create_novel("Sky Harbor", author_id=sample_author, genre_ids=[sample_genre])
        novel = catalog.db.get_novel(result.data["id"])
        assert novel.title == "Sky Harbor"
        assert novel.status == NovelStatus.DRAFT
        assert novel.genre_ids == [sample_genre]
        assert novel.lifecycle_state == LifecycleState.DRAFT
        assert novel.is_live

    def test_novel_genre_links(self, catalog, sample_genre):
        novel_id = catalog.create_novel("Sky Harbor", genre_ids=[sample_genre]).data["id"]
        links = catalog.db.get_novel_genres(novel_id)
        assert [(link.novel_id, link.genre_id) for link in links] == [(novel_id, sample_genre)]
        assert isinstance(links[0], NovelGenre)
        assert links[0].created_at is not None

    def test_novel_without_genres(self, db):
        assert db.get_novel_genres("missing") == []

    def test_legacy_rows_read_as_live(self, legacy_db):
        with legacy_db.connect() as conn:
            Database.insert(conn, "authors", _author_row())
        authors = legacy_db.list_authors()
        assert len(authors) == 1
        assert authors[0].deleted_at is None


class TestEnums:
    def test_entity_kind_table_and_label(self):
        assert EntityKind.CHAPTER.table == "chapters"
        assert EntityKind.NOVEL.label == "Novel"

    def test_novel_status_values(self):
        assert NovelStatus("ongoing") is NovelStatus.ONGOING
        with pytest.raises(ValueError):
            NovelStatus("paused")
