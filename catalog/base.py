"""Shared plumbing for the catalog mutation services."""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterable, Iterator, Optional

from catalog.drift import RETIREMENT_COLUMN, SchemaDriftAdapter
from catalog.lifecycle import LifecycleStateMachine
from catalog.revalidation import Notifier, RevalidationNotifier
from catalog.uniqueness import UniquenessValidator
from config.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from config.settings import Settings
from models.database import Database
from models.enums import EntityKind

logger = logging.getLogger(__name__)


class _Unset:
    """Marker for "field not supplied" where None means "clear it"."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()


class CatalogService:
    """Base class for the per-entity services.

    Services are stateless between calls: every check and write goes to the
    store, and no locks are held across calls.
    """

    kind: EntityKind

    def __init__(
        self,
        db: Optional[Database] = None,
        settings: Optional[Settings] = None,
        notifier: Optional[Notifier] = None,
        drift: Optional[SchemaDriftAdapter] = None,
    ):
        self.settings = settings or Settings()
        self.db = db or Database(self.settings.sqlite_db_path)
        self.drift = drift or SchemaDriftAdapter(self.db, probe=self.settings.schema_probe_enabled)
        self.validator = UniquenessValidator(self.drift)
        self.lifecycle = LifecycleStateMachine(self.drift)
        self.notifier = notifier or RevalidationNotifier(self.settings)

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    @staticmethod
    def _require_id(value: Optional[str], kind: EntityKind) -> str:
        if value is None or not str(value).strip():
            raise ValidationError(f"{kind.label} ID is required")
        return str(value).strip()

    def _load(self, kind: EntityKind, entity_id: str, live: bool = True) -> dict:
        """Fetch a row by id.

        With ``live=True`` a retired row counts as missing; lifecycle
        operations pass ``live=False`` so they can explain their refusal.
        """
        row = self.drift.select_one(kind.table, "*", ["id = ?"], [entity_id], live_only=False)
        if row is None or (live and row.get(RETIREMENT_COLUMN)):
            raise NotFoundError(kind.value, entity_id=entity_id)
        return row

    def _require_live(self, kind: EntityKind, entity_id: str, message: str = "") -> dict:
        row = self.drift.select_one(kind.table, "*", ["id = ?"], [entity_id])
        if row is None:
            raise NotFoundError(kind.value, message, entity_id=entity_id)
        return row

    @contextmanager
    def _transaction(self, recheck: Optional[Callable[[], None]] = None) -> Iterator[sqlite3.Connection]:
        """One store transaction with storage errors translated.

        A unique-index violation means a concurrent writer won the
        check-then-insert race; ``recheck`` re-runs the pre-checks so the
        resulting ConflictError names the record that got there first.
        """
        try:
            with self.db.connect() as conn:
                yield conn
        except sqlite3.IntegrityError as e:
            logger.warning("Storage constraint rejected %s write: %s", self.kind.value, e)
            if recheck is not None:
                recheck()
            raise ConflictError(f"{self.kind.label} conflicts with an existing record") from e
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to write {self.kind.table}", {"error": str(e)}) from e

    def _notify(self, paths: Iterable[str]) -> None:
        try:
            self.notifier.notify(paths)
        except Exception as e:
            logger.warning("Revalidation notify failed: %s", e)
