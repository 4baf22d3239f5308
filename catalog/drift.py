"""Schema-drift tolerant reads over the retirement column.

Stores that have not run the retirement migration yet have no
``deleted_at`` column. Reads that ask for live rows degrade to an unscoped
query there and treat every returned row as live. Live-scoped updates
degrade the same way; retirement writes cannot degrade and report
:class:`SchemaMigrationRequiredError` instead.
"""

import logging
import sqlite3
from typing import Optional, Sequence

from config.exceptions import DatabaseError, SchemaMigrationRequiredError
from models.database import Database

logger = logging.getLogger(__name__)

RETIREMENT_COLUMN = "deleted_at"


def is_missing_retirement_column(error: Exception) -> bool:
    """True if the store rejected a query because deleted_at does not exist."""
    msg = str(error).lower()
    if RETIREMENT_COLUMN not in msg:
        return False
    return "no such column" in msg or "does not exist" in msg


class SchemaDriftAdapter:
    """Runs live-only queries, falling back when the retirement column is absent.

    The column probe runs once per table and is cached for the lifetime of
    the adapter. With ``probe=False`` the predicate is always sent and the
    cache is only filled by a failing query.
    """

    def __init__(self, db: Database, probe: bool = True):
        self.db = db
        self.probe = probe
        self._capabilities: dict[str, bool] = {}

    def supports_retirement(self, table: str) -> bool:
        cached = self._capabilities.get(table)
        if cached is not None:
            return cached
        if not self.probe:
            return True
        try:
            present = RETIREMENT_COLUMN in self.db.table_columns(table)
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to inspect table {table}", {"error": str(e)}) from e
        self._capabilities[table] = present
        if not present:
            logger.warning(
                "Table '%s' has no %s column; live checks run unscoped until migrated",
                table, RETIREMENT_COLUMN,
            )
        return present

    def require_retirement(self, table: str) -> None:
        """Raise unless ``table`` can record a retirement."""
        if not self.supports_retirement(table):
            raise SchemaMigrationRequiredError(table, RETIREMENT_COLUMN)

    def forget(self, table: Optional[str] = None) -> None:
        """Drop cached capabilities, e.g. after running migrations."""
        if table is None:
            self._capabilities.clear()
        else:
            self._capabilities.pop(table, None)

    def _mark_missing(self, table: str, error: Exception) -> None:
        if self._capabilities.get(table) is not False:
            logger.warning("Retrying query on '%s' without live filter: %s", table, error)
        self._capabilities[table] = False

    def select(
        self,
        table: str,
        columns: str | Sequence[str] = "*",
        where: Sequence[str] = (),
        params: Sequence = (),
        *,
        live_only: bool = True,
        exclude_id: Optional[str] = None,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict]:
        """Select rows from ``table`` where every clause in ``where`` holds.

        Returns plain dicts; rows read without the retirement column carry
        ``deleted_at=None``.
        """
        clauses = list(where)
        values = list(params)
        if exclude_id is not None:
            clauses.append("id != ?")
            values.append(exclude_id)

        filtered = live_only and self.supports_retirement(table)
        try:
            rows = self._run(table, columns, clauses, values, filtered, order_by, limit)
        except sqlite3.OperationalError as e:
            if not (filtered and is_missing_retirement_column(e)):
                raise DatabaseError(f"Query on {table} failed", {"error": str(e)}) from e
            self._mark_missing(table, e)
            try:
                rows = self._run(table, columns, clauses, values, False, order_by, limit)
            except sqlite3.Error as e2:
                raise DatabaseError(f"Query on {table} failed", {"error": str(e2)}) from e2
        except sqlite3.Error as e:
            raise DatabaseError(f"Query on {table} failed", {"error": str(e)}) from e

        for row in rows:
            row.setdefault(RETIREMENT_COLUMN, None)
        return rows

    def select_one(self, table: str, columns: str | Sequence[str] = "*", where: Sequence[str] = (),
                   params: Sequence = (), **kwargs) -> Optional[dict]:
        kwargs.setdefault("limit", 1)
        rows = self.select(table, columns, where, params, **kwargs)
        return rows[0] if rows else None

    # ---- Writes on the caller's connection ----

    @staticmethod
    def _scoped(where: str, filtered: bool) -> str:
        return f"{where} AND {RETIREMENT_COLUMN} IS NULL" if filtered else where

    def update(
        self,
        conn: sqlite3.Connection,
        table: str,
        values: dict,
        where: str,
        params: Sequence = (),
        *,
        live_only: bool = True,
    ) -> int:
        """UPDATE rows matching ``where``, narrowed to live rows where the store can tell.

        Returns the rowcount. A write that sets the retirement column itself
        cannot degrade and raises :class:`SchemaMigrationRequiredError`.
        """
        filtered = live_only and self.supports_retirement(table)
        try:
            return Database.update(conn, table, values, self._scoped(where, filtered), params)
        except sqlite3.OperationalError as e:
            if not is_missing_retirement_column(e):
                raise
            self._mark_missing(table, e)
            if RETIREMENT_COLUMN in values or not filtered:
                raise SchemaMigrationRequiredError(table, RETIREMENT_COLUMN) from e
            return Database.update(conn, table, values, where, params)

    def count(self, conn: sqlite3.Connection, table: str, where: str, params: Sequence = ()) -> int:
        """COUNT live rows matching ``where`` on the caller's connection."""
        filtered = self.supports_retirement(table)
        sql = f"SELECT COUNT(*) FROM {table} WHERE "
        try:
            return conn.execute(sql + self._scoped(where, filtered), tuple(params)).fetchone()[0]
        except sqlite3.OperationalError as e:
            if not (filtered and is_missing_retirement_column(e)):
                raise
            self._mark_missing(table, e)
            return conn.execute(sql + where, tuple(params)).fetchone()[0]

    def _run(self, table, columns, clauses, values, filtered, order_by, limit) -> list[dict]:
        cols = columns if isinstance(columns, str) else ", ".join(columns)
        conditions = list(clauses)
        if filtered:
            conditions.append(f"{RETIREMENT_COLUMN} IS NULL")
        sql = f"SELECT {cols} FROM {table}"
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        if order_by:
            sql += f" ORDER BY {order_by}"
        if limit is not None:
            sql += f" LIMIT {int(limit)}"
        return self.db.fetch_all(sql, values)
