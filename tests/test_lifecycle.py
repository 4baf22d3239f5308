"""Tests for lifecycle guards and the novel retirement cascade."""

import pytest

from catalog.lifecycle import LifecycleStateMachine, state_of
from config.exceptions import StateError
from models.enums import EntityKind, LifecycleState

NOW = "2026-01-01T00:00:00+00:00"


class TestStateOf:
    def test_states(self):
        assert state_of({"is_published": 0, "deleted_at": None}) is LifecycleState.DRAFT
        assert state_of({"is_published": 1, "deleted_at": None}) is LifecycleState.PUBLISHED
        assert state_of({"is_published": 1, "deleted_at": NOW}) is LifecycleState.RETIRED

    def test_missing_column_reads_as_live(self):
        assert state_of({"is_published": 0}) is LifecycleState.DRAFT


class TestGuards:
    def test_retired_entity_not_mutable(self):
        with pytest.raises(StateError, match="Cannot change publish status of a retired chapter"):
            LifecycleStateMachine.ensure_mutable(EntityKind.CHAPTER, {"id": "c", "deleted_at": NOW})

    def test_retired_parent_blocks_chapter(self):
        with pytest.raises(StateError, match="Cannot modify a chapter of a retired novel"):
            LifecycleStateMachine.ensure_mutable(
                EntityKind.CHAPTER, {"id": "c"}, parent={"id": "n", "deleted_at": NOW},
            )

    def test_already_retired(self):
        with pytest.raises(StateError, match="Author is already retired"):
            LifecycleStateMachine.ensure_retirable("author", {"id": "a", "deleted_at": NOW})


class TestFields:
    def test_publish_stamps_time(self):
        assert LifecycleStateMachine.publish_fields(NOW) == {"is_published": 1, "published_at": NOW}

    def test_unpublish_clears_time(self):
        assert LifecycleStateMachine.unpublish_fields() == {"is_published": 0, "published_at": None}

    def test_retire_named_entity(self):
        assert LifecycleStateMachine.retire_fields(EntityKind.GENRE, NOW) == {"deleted_at": NOW, "updated_at": NOW}

    def test_retire_publishable_clears_visibility(self):
        fields = LifecycleStateMachine.retire_fields(EntityKind.NOVEL, NOW)
        assert fields["is_published"] == 0
        assert fields["published_at"] is None

    def test_visibility_fields(self):
        machine = LifecycleStateMachine(drift=None)
        fields = machine.visibility_fields(EntityKind.NOVEL, {"id": "n"}, True, NOW)
        assert fields == {"is_published": 1, "published_at": NOW, "updated_at": NOW}


class TestCascade:
    def test_cascade_retires_chapters_then_novel(self, catalog, sample_novel):
        for n in range(3):
            catalog.create_chapter(sample_novel, f"Part {n}", f"Distinct body {n}", visible=True)

        with catalog.db.connect() as conn:
            retired = catalog.chapters.lifecycle.retire_novel_cascade(conn, sample_novel, NOW)

        assert retired == 3
        novel = catalog.db.get_novel(sample_novel)
        assert novel.deleted_at == NOW
        assert novel.total_chapters == 0
        chapters = catalog.db.get_chapters(sample_novel, include_retired=True)
        assert all(ch.deleted_at == NOW and not ch.is_published for ch in chapters)

    def test_cascade_on_retired_novel_rolls_back(self, catalog, sample_novel):
        catalog.retire_novel(sample_novel)
        with pytest.raises(StateError, match="Novel is already retired"):
            with catalog.db.connect() as conn:
                catalog.chapters.lifecycle.retire_novel_cascade(conn, sample_novel, "later")
        assert catalog.db.get_novel(sample_novel).deleted_at != "later"
