"""Tests for novel (work) mutations."""

from models.enums import LifecycleState, NovelStatus


class TestCreateNovel:
    def test_create_defaults(self, catalog, sample_author):
        result = catalog.create_novel("  The Long Road ", author_id=sample_author)
        assert result.success
        novel = catalog.db.get_novel(result.data["id"])
        assert novel.title == "The Long Road"
        assert novel.slug == "the-long-road"
        assert novel.status == NovelStatus.DRAFT
        assert novel.lifecycle_state == LifecycleState.DRAFT
        assert novel.published_at is None

    def test_create_visible(self, catalog):
        novel_id = catalog.create_novel("Open Book", visible=True, status="ongoing").data["id"]
        novel = catalog.db.get_novel(novel_id)
        assert novel.is_published
        assert novel.published_at is not None
        assert novel.status == NovelStatus.ONGOING

    def test_title_required(self, catalog):
        assert catalog.create_novel(" ").error == "Title is required"

    def test_invalid_status(self, catalog):
        result = catalog.create_novel("X", status="paused")
        assert result.error.startswith("Invalid status: paused")

    def test_unknown_author(self, catalog):
        assert catalog.create_novel("X", author_id="ghost").error == "Author not found"

    def test_retired_author_rejected(self, catalog, sample_author):
        catalog.retire_author(sample_author)
        assert catalog.create_novel("X", author_id=sample_author).error == "Author not found"

    def test_unknown_genre(self, catalog):
        assert catalog.create_novel("X", genre_ids=["g-missing"]).error == "Genre not found: g-missing"

    def test_retired_genre_rejected(self, catalog, sample_genre):
        catalog.retire_genre(sample_genre)
        assert catalog.create_novel("X", genre_ids=[sample_genre]).error == f"Genre not found: {sample_genre}"

    def test_genres_deduplicated(self, catalog, sample_genre):
        novel_id = catalog.create_novel("X", genre_ids=[sample_genre, sample_genre]).data["id"]
        assert catalog.db.get_novel_genre_ids(novel_id) == [sample_genre]

    def test_duplicate_title_same_author(self, catalog, sample_author, sample_novel):
        result = catalog.create_novel("the long ROAD", author_id=sample_author)
        assert result.error == 'A novel with this title already exists for this author: "The Long Road"'

    def test_same_title_other_author(self, catalog, sample_novel):
        other = catalog.create_author("John Roe").data["id"]
        result = catalog.create_novel("The Long Road", author_id=other)
        assert result.success
        assert result.data["slug"] == "the-long-road-2"

    def test_same_title_without_author(self, catalog):
        first = catalog.create_novel("Untitled")
        second = catalog.create_novel("Untitled")
        assert first.success and second.success
        assert second.data["slug"] == "untitled-2"

    def test_symbol_title_gets_fallback_slug(self, catalog):
        result = catalog.create_novel("!!!")
        assert result.data["slug"] == f"novel-{result.data['id'][:8]}"

    def test_retired_novel_frees_title(self, catalog, sample_author, sample_novel):
        catalog.retire_novel(sample_novel)
        result = catalog.create_novel("The Long Road", author_id=sample_author)
        assert result.success
        assert result.data["slug"] == "the-long-road"


class TestUpdateNovel:
    def test_update_fields_keeps_slug(self, catalog, sample_novel):
        result = catalog.update_novel(sample_novel, title="A Longer Road", status="completed")
        assert result.to_dict() == {"success": True}
        novel = catalog.db.get_novel(sample_novel)
        assert novel.title == "A Longer Road"
        assert novel.slug == "the-long-road"
        assert novel.status == NovelStatus.COMPLETED

    def test_replace_genres(self, catalog, sample_novel, sample_genre):
        other = catalog.create_genre("Adventure").data["id"]
        catalog.update_novel(sample_novel, genre_ids=[sample_genre, other])
        assert set(catalog.db.get_novel_genre_ids(sample_novel)) == {sample_genre, other}
        catalog.update_novel(sample_novel, genre_ids=[])
        assert catalog.db.get_novel_genre_ids(sample_novel) == []

    def test_detach_author(self, catalog, sample_novel):
        assert catalog.update_novel(sample_novel, author_id=None).success
        assert catalog.db.get_novel(sample_novel).author_id is None

    def test_move_to_author_with_same_title(self, catalog, sample_novel):
        other = catalog.create_author("John Roe").data["id"]
        catalog.create_novel("The Long Road", author_id=other)
        result = catalog.update_novel(sample_novel, author_id=other)
        assert result.error == 'A novel with this title already exists for this author: "The Long Road"'

    def test_rename_self_is_fine(self, catalog, sample_novel):
        assert catalog.update_novel(sample_novel, title="THE LONG ROAD").success

    def test_visibility_through_update(self, catalog, sample_novel):
        catalog.update_novel(sample_novel, visible=True)
        assert catalog.db.get_novel(sample_novel).is_published

    def test_no_changes(self, catalog, notifier, sample_novel):
        before = len(notifier.calls)
        assert catalog.update_novel(sample_novel).success
        assert len(notifier.calls) == before

    def test_retired_novel_not_found(self, catalog, sample_novel):
        catalog.retire_novel(sample_novel)
        assert catalog.update_novel(sample_novel, title="x").error == "Novel not found"

    def test_author_change_notifies_author_pages(self, catalog, notifier, sample_novel):
        other = catalog.create_author("John Roe").data["id"]
        catalog.update_novel(sample_novel, author_id=other)
        assert "/tac-gia/jane-doe" in notifier.calls[-1]
        assert "/tac-gia/john-roe" in notifier.calls[-1]


class TestPublishNovel:
    def test_publish_and_unpublish(self, catalog, sample_novel):
        assert catalog.publish_novel(sample_novel, True).success
        novel = catalog.db.get_novel(sample_novel)
        assert novel.lifecycle_state == LifecycleState.PUBLISHED
        assert novel.published_at

        assert catalog.publish_work(sample_novel, False).success
        novel = catalog.db.get_novel(sample_novel)
        assert novel.lifecycle_state == LifecycleState.DRAFT
        assert novel.published_at is None

    def test_republish_restamps(self, catalog, sample_novel):
        catalog.publish_novel(sample_novel, True)
        with catalog.db.connect() as conn:
            conn.execute("UPDATE novels SET published_at = 'old' WHERE id = ?", (sample_novel,))
        catalog.publish_novel(sample_novel, True)
        assert catalog.db.get_novel(sample_novel).published_at != "old"

    def test_publish_retired_refused(self, catalog, sample_novel):
        catalog.retire_novel(sample_novel)
        result = catalog.publish_novel(sample_novel, True)
        assert result.error == "Cannot change publish status of a retired novel"

    def test_publish_unknown(self, catalog):
        assert catalog.publish_novel("ghost", True).error == "Novel not found"


class TestRetireNovel:
    def test_retire_empty_novel(self, catalog, sample_novel):
        result = catalog.retire_work(sample_novel)
        assert result.to_dict() == {"success": True, "data": {"id": sample_novel, "chapters_retired": 0}}
        assert catalog.list_novels() == []
        assert len(catalog.list_novels(include_retired=True)) == 1

    def test_retire_twice(self, catalog, sample_novel):
        catalog.retire_novel(sample_novel)
        assert catalog.retire_novel(sample_novel).error == "Novel is already retired"

    def test_retire_requires_migration(self, legacy_catalog):
        novel_id = legacy_catalog.create_novel("Legacy").data["id"]
        result = legacy_catalog.retire_novel(novel_id)
        assert result.error == "Database schema missing 'deleted_at' on chapters; run migrations"
        assert legacy_catalog.db.get_novel(novel_id).is_live


class TestUpdateRetiredMidway:
    def test_update_reports_not_found_and_keeps_genres(self, catalog, notifier, sample_novel,
                                                        sample_genre, retire_midway):
        before = len(notifier.calls)
        retire_midway(catalog.novels, "novels", sample_novel)

        result = catalog.update_novel(sample_novel, title="Renamed", genre_ids=[sample_genre])
        assert result.error == "Novel not found"
        assert catalog.db.get_novel(sample_novel).title == "The Long Road"
        assert catalog.db.get_novel_genre_ids(sample_novel) == []
        assert len(notifier.calls) == before
