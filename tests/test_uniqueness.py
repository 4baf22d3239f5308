"""Tests for live-record uniqueness checks."""

import pytest

from catalog.drift import SchemaDriftAdapter
from catalog.uniqueness import UniquenessValidator
from config.exceptions import ConflictError
from models.enums import EntityKind


@pytest.fixture
def validator(db):
    return UniquenessValidator(SchemaDriftAdapter(db))


class TestNames:
    def test_case_insensitive_name_match(self, catalog, validator, sample_author):
        existing = validator.find_live(EntityKind.AUTHOR, "name", "JANE doe")
        assert existing is not None
        assert existing["id"] == sample_author

    def test_require_unique_message_names_existing(self, catalog, validator, sample_author):
        with pytest.raises(ConflictError) as exc:
            validator.require_unique("author", "name", "  jane DOE ")
        assert exc.value.message == 'Author name already exists: "Jane Doe"'
        assert exc.value.existing["id"] == sample_author

    def test_exclude_self(self, catalog, validator, sample_author):
        assert not validator.exists_live(EntityKind.AUTHOR, "name", "Jane Doe", exclude_id=sample_author)

    def test_retired_record_does_not_block(self, catalog, validator, sample_author):
        catalog.retire_author(sample_author)
        assert not validator.exists_live(EntityKind.AUTHOR, "name", "Jane Doe")

    def test_slug_is_exact(self, catalog, validator, sample_genre):
        assert validator.exists_live(EntityKind.GENRE, "slug", "fantasy")
        assert not validator.exists_live(EntityKind.GENRE, "slug", "Fantasy")


class TestScopedRules:
    def test_title_scoped_by_author(self, catalog, validator, sample_author, sample_novel):
        assert validator.exists_live(EntityKind.NOVEL, "title", "the long road", scope={"author_id": sample_author})
        other = catalog.create_author("Someone Else").data["id"]
        assert not validator.exists_live(EntityKind.NOVEL, "title", "The Long Road", scope={"author_id": other})

    def test_missing_scope_never_collides(self, catalog, validator, sample_novel):
        assert validator.find_live(EntityKind.NOVEL, "title", "The Long Road", scope={"author_id": None}) is None

    def test_unknown_rule(self, validator):
        with pytest.raises(ValueError, match="No uniqueness rule"):
            validator.rule(EntityKind.AUTHOR, "bio")


class TestLegacyStore:
    def test_checks_run_unscoped(self, legacy_catalog):
        first = legacy_catalog.create_genre("Mystery")
        assert first.success
        second = legacy_catalog.create_genre("mystery")
        assert not second.success
        assert second.error == 'Genre name already exists: "Mystery"'
