"""SQLite database initialization, migrations and row access."""

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence

from models.author import Author
from models.chapter import Chapter
from models.enums import NovelStatus
from models.genre import Genre
from models.novel import Novel, NovelGenre

logger = logging.getLogger(__name__)

# Base schema. The deleted_at retirement columns are NOT part of it: they
# arrive through _MIGRATION_SQL, so a store opened with migrate=False looks
# like one that is still mid-rollout.
_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS authors (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    slug TEXT NOT NULL,
    normalized_name TEXT NOT NULL,
    bio TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS genres (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    slug TEXT NOT NULL,
    normalized_name TEXT NOT NULL,
    description TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS novels (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    slug TEXT NOT NULL,
    normalized_title TEXT NOT NULL,
    description TEXT,
    cover_url TEXT,
    author_id TEXT REFERENCES authors(id),
    status TEXT NOT NULL DEFAULT 'draft',
    is_published INTEGER NOT NULL DEFAULT 0,
    published_at TEXT,
    total_chapters INTEGER NOT NULL DEFAULT 0,
    last_chapter_at TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS novel_genres (
    novel_id TEXT NOT NULL REFERENCES novels(id),
    genre_id TEXT NOT NULL REFERENCES genres(id),
    created_at TEXT NOT NULL,
    PRIMARY KEY (novel_id, genre_id)
);

CREATE TABLE IF NOT EXISTS chapters (
    id TEXT PRIMARY KEY,
    novel_id TEXT NOT NULL REFERENCES novels(id),
    chapter_number INTEGER NOT NULL,
    title TEXT NOT NULL,
    slug TEXT NOT NULL,
    normalized_title TEXT NOT NULL,
    content TEXT NOT NULL,
    content_hash TEXT NOT NULL,
    word_count INTEGER NOT NULL DEFAULT 0,
    is_published INTEGER NOT NULL DEFAULT 0,
    published_at TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_novels_author ON novels(author_id);
CREATE INDEX IF NOT EXISTS idx_chapters_novel ON chapters(novel_id, chapter_number);
CREATE INDEX IF NOT EXISTS idx_novel_genres_genre ON novel_genres(genre_id);
"""

# Retirement columns and the live-uniqueness backstop (idempotent)
_MIGRATION_SQL = [
    "ALTER TABLE authors ADD COLUMN deleted_at TEXT",
    "ALTER TABLE genres ADD COLUMN deleted_at TEXT",
    "ALTER TABLE novels ADD COLUMN deleted_at TEXT",
    "ALTER TABLE chapters ADD COLUMN deleted_at TEXT",
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_authors_live_name "
    "ON authors(normalized_name) WHERE deleted_at IS NULL",
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_authors_live_slug "
    "ON authors(slug) WHERE deleted_at IS NULL",
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_genres_live_name "
    "ON genres(normalized_name) WHERE deleted_at IS NULL",
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_genres_live_slug "
    "ON genres(slug) WHERE deleted_at IS NULL",
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_novels_live_slug "
    "ON novels(slug) WHERE deleted_at IS NULL",
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_novels_live_title_author "
    "ON novels(normalized_title, author_id) WHERE deleted_at IS NULL AND author_id IS NOT NULL",
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_chapters_live_number "
    "ON chapters(novel_id, chapter_number) WHERE deleted_at IS NULL",
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_chapters_live_hash "
    "ON chapters(novel_id, content_hash) WHERE deleted_at IS NULL",
]

TABLES = ("authors", "genres", "novels", "novel_genres", "chapters")


def new_id() -> str:
    """Return a fresh 32-char hex identifier."""
    return uuid.uuid4().hex


class Database:
    """SQLite database manager for the catalog."""

    def __init__(self, db_path: str | Path, migrate: bool = True):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db(migrate)

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("PRAGMA journal_mode = WAL")
        return conn

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection wrapped in one transaction.

        Commits on normal exit, rolls back on any exception, always closes.
        """
        conn = self._get_conn()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _init_db(self, migrate: bool):
        with self.connect() as conn:
            conn.executescript(_CREATE_TABLES_SQL)
        if migrate:
            self.migrate()

    def migrate(self):
        """Apply idempotent schema migrations (retirement columns, unique indexes)."""
        with self.connect() as conn:
            for sql in _MIGRATION_SQL:
                try:
                    conn.execute(sql)
                except sqlite3.OperationalError as e:
                    logger.debug("Migration skipped (already applied): %s", e)
                except sqlite3.IntegrityError as e:
                    logger.warning("Migration could not be applied (%s): %s", sql, e)

    def table_columns(self, table: str) -> set[str]:
        if table not in TABLES:
            raise ValueError(f"Unknown table: {table}")
        with self.connect() as conn:
            rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
        return {r["name"] for r in rows}

    # ---- Generic access ----

    def fetch_all(self, sql: str, params: Sequence = ()) -> list[dict]:
        with self.connect() as conn:
            return [dict(r) for r in conn.execute(sql, tuple(params)).fetchall()]

    def fetch_one(self, sql: str, params: Sequence = ()) -> Optional[dict]:
        with self.connect() as conn:
            row = conn.execute(sql, tuple(params)).fetchone()
            return dict(row) if row else None

    @staticmethod
    def insert(conn: sqlite3.Connection, table: str, values: dict) -> None:
        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        conn.execute(
            f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
            tuple(values.values()),
        )

    @staticmethod
    def update(
        conn: sqlite3.Connection,
        table: str,
        values: dict,
        where: str,
        params: Sequence = (),
    ) -> int:
        assignments = ", ".join(f"{col} = ?" for col in values)
        cursor = conn.execute(
            f"UPDATE {table} SET {assignments} WHERE {where}",
            tuple(values.values()) + tuple(params),
        )
        return cursor.rowcount

    # ---- Author reads ----

    def get_author(self, author_id: str) -> Optional[Author]:
        row = self.fetch_one("SELECT * FROM authors WHERE id = ?", (author_id,))
        return _row_to_author(row) if row else None

    def list_authors(self, include_retired: bool = False) -> list[Author]:
        rows = self.fetch_all("SELECT * FROM authors ORDER BY name COLLATE NOCASE")
        return [_row_to_author(r) for r in rows if include_retired or not r.get("deleted_at")]

    # ---- Genre reads ----

    def get_genre(self, genre_id: str) -> Optional[Genre]:
        row = self.fetch_one("SELECT * FROM genres WHERE id = ?", (genre_id,))
        return _row_to_genre(row) if row else None

    def list_genres(self, include_retired: bool = False) -> list[Genre]:
        rows = self.fetch_all("SELECT * FROM genres ORDER BY name COLLATE NOCASE")
        return [_row_to_genre(r) for r in rows if include_retired or not r.get("deleted_at")]

    # ---- Novel reads ----

    def get_novel(self, novel_id: str) -> Optional[Novel]:
        row = self.fetch_one("SELECT * FROM novels WHERE id = ?", (novel_id,))
        if not row:
            return None
        novel = _row_to_novel(row)
        novel.genre_ids = self.get_novel_genre_ids(novel_id)
        return novel

    def list_novels(self, include_retired: bool = False) -> list[Novel]:
        rows = self.fetch_all("SELECT * FROM novels ORDER BY created_at, title")
        return [_row_to_novel(r) for r in rows if include_retired or not r.get("deleted_at")]

    def get_novel_genres(self, novel_id: str) -> list[NovelGenre]:
        rows = self.fetch_all(
            "SELECT * FROM novel_genres WHERE novel_id = ? ORDER BY created_at, genre_id",
            (novel_id,),
        )
        return [NovelGenre(novel_id=r["novel_id"], genre_id=r["genre_id"], created_at=r["created_at"]) for r in rows]

    def get_novel_genre_ids(self, novel_id: str) -> list[str]:
        return [link.genre_id for link in self.get_novel_genres(novel_id)]

    # ---- Chapter reads ----

    def get_chapter(self, chapter_id: str) -> Optional[Chapter]:
        row = self.fetch_one("SELECT * FROM chapters WHERE id = ?", (chapter_id,))
        return _row_to_chapter(row) if row else None

    def get_chapters(self, novel_id: str, include_retired: bool = False) -> list[Chapter]:
        rows = self.fetch_all(
            "SELECT * FROM chapters WHERE novel_id = ? ORDER BY chapter_number, created_at",
            (novel_id,),
        )
        return [_row_to_chapter(r) for r in rows if include_retired or not r.get("deleted_at")]


def _row_to_author(row: dict) -> Author:
    return Author(
        id=row["id"], name=row["name"], slug=row["slug"],
        normalized_name=row["normalized_name"], bio=row["bio"],
        created_at=row["created_at"], updated_at=row["updated_at"],
        deleted_at=row.get("deleted_at"),
    )


def _row_to_genre(row: dict) -> Genre:
    return Genre(
        id=row["id"], name=row["name"], slug=row["slug"],
        description=row["description"],
        created_at=row["created_at"], updated_at=row["updated_at"],
        deleted_at=row.get("deleted_at"),
    )


def _row_to_novel(row: dict) -> Novel:
    return Novel(
        id=row["id"], title=row["title"], slug=row["slug"],
        normalized_title=row["normalized_title"],
        description=row["description"], cover_url=row["cover_url"],
        author_id=row["author_id"], status=NovelStatus(row["status"]),
        is_published=bool(row["is_published"]),
        published_at=row["published_at"],
        total_chapters=row["total_chapters"],
        last_chapter_at=row["last_chapter_at"],
        created_at=row["created_at"], updated_at=row["updated_at"],
        deleted_at=row.get("deleted_at"),
    )


def _row_to_chapter(row: dict) -> Chapter:
    return Chapter(
        id=row["id"], novel_id=row["novel_id"],
        chapter_number=row["chapter_number"], title=row["title"],
        slug=row["slug"], normalized_title=row["normalized_title"],
        content=row["content"], content_hash=row["content_hash"],
        word_count=row["word_count"],
        is_published=bool(row["is_published"]),
        published_at=row["published_at"],
        created_at=row["created_at"], updated_at=row["updated_at"],
        deleted_at=row.get("deleted_at"),
    )
