"""Shared pytest fixtures for the novelshelf test suite."""

import pytest


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite database path."""
    return tmp_path / "test_catalog.db"


@pytest.fixture
def db(tmp_db_path):
    """Return a migrated Database instance backed by a temp file."""
    from models.database import Database
    return Database(tmp_db_path)


@pytest.fixture
def legacy_db(tmp_path):
    """Return a store that has not run the retirement migration yet."""
    from models.database import Database
    return Database(tmp_path / "legacy.db", migrate=False)


# ---------------------------------------------------------------------------
# Settings fixture
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path, tmp_db_path):
    """Return a Settings instance with all paths pointing to tmp_path."""
    from config.settings import Settings
    return Settings(
        _env_file=None,
        sqlite_db_path=tmp_db_path,
        log_dir=tmp_path / "logs",
        revalidate_url=None,
    )


# ---------------------------------------------------------------------------
# Catalog fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def notifier():
    """Return an in-memory notifier that records stale paths."""
    from catalog.revalidation import RecordingNotifier
    return RecordingNotifier()


@pytest.fixture
def catalog(db, settings, notifier):
    """Return a Catalog over the migrated temp store."""
    from catalog.engine import Catalog
    return Catalog(db=db, settings=settings, notifier=notifier)


@pytest.fixture
def legacy_catalog(legacy_db, settings, notifier):
    """Return a Catalog over the un-migrated store."""
    from catalog.engine import Catalog
    return Catalog(db=legacy_db, settings=settings, notifier=notifier)


# ---------------------------------------------------------------------------
# Sample data fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_author(catalog):
    """Create and return the id of a live author."""
    result = catalog.create_author("Jane Doe", bio="Writes long sagas")
    assert result.success, result.error
    return result.data["id"]


@pytest.fixture
def sample_genre(catalog):
    result = catalog.create_genre("Fantasy")
    assert result.success, result.error
    return result.data["id"]


@pytest.fixture
def sample_novel(catalog, sample_author):
    """Create and return the id of a live draft novel by sample_author."""
    result = catalog.create_novel("The Long Road", author_id=sample_author)
    assert result.success, result.error
    return result.data["id"]


@pytest.fixture
def retire_midway(monkeypatch):
    """Make a service's next timestamp retire a row first, as a concurrent editor would."""
    def arrange(service, table, row_id):
        real_now = service._now

        def now():
            with service.db.connect() as conn:
                conn.execute(f"UPDATE {table} SET deleted_at = 'elsewhere' WHERE id = ?", (row_id,))
            return real_now()

        monkeypatch.setattr(service, "_now", now)
    return arrange
