"""Draft -> Published -> Retired transitions for catalog entities.

Retirement is terminal. Publishing re-stamps ``published_at`` on every call;
unpublishing and retiring clear it. Retiring a novel retires its live
chapters in the same transaction, chapters first.
"""

import logging
import sqlite3
from typing import Optional

from catalog.drift import SchemaDriftAdapter
from config.exceptions import StateError
from models.enums import EntityKind, LifecycleState

logger = logging.getLogger(__name__)

# Kinds that carry a visibility flag
_PUBLISHABLE = {EntityKind.NOVEL, EntityKind.CHAPTER}


def state_of(row: dict) -> LifecycleState:
    if row.get("deleted_at"):
        return LifecycleState.RETIRED
    return LifecycleState.PUBLISHED if row.get("is_published") else LifecycleState.DRAFT


class LifecycleStateMachine:
    """Guards and column updates for lifecycle transitions.

    The drift adapter is only needed for the retirement cascade.
    """

    def __init__(self, drift: Optional[SchemaDriftAdapter] = None):
        self.drift = drift

    # ---- Guards ----

    @staticmethod
    def ensure_mutable(kind: EntityKind, row: dict, parent: Optional[dict] = None) -> None:
        """Raise StateError if the entity, or a chapter's novel, is retired."""
        kind = EntityKind(kind)
        if state_of(row) is LifecycleState.RETIRED:
            raise StateError(
                f"Cannot change publish status of a retired {kind.value}",
                {"id": row.get("id")},
            )
        if parent is not None and state_of(parent) is LifecycleState.RETIRED:
            raise StateError(
                f"Cannot modify a {kind.value} of a retired novel",
                {"novel_id": parent.get("id")},
            )

    @staticmethod
    def ensure_retirable(kind: EntityKind, row: dict) -> None:
        kind = EntityKind(kind)
        if state_of(row) is LifecycleState.RETIRED:
            raise StateError(f"{kind.label} is already retired", {"id": row.get("id")})

    # ---- Column updates ----

    @staticmethod
    def publish_fields(now: str) -> dict:
        return {"is_published": 1, "published_at": now}

    @staticmethod
    def unpublish_fields() -> dict:
        return {"is_published": 0, "published_at": None}

    @staticmethod
    def retire_fields(kind: EntityKind, now: str) -> dict:
        fields = {"deleted_at": now, "updated_at": now}
        if EntityKind(kind) in _PUBLISHABLE:
            fields.update(is_published=0, published_at=None)
        return fields

    def visibility_fields(
        self,
        kind: EntityKind,
        row: dict,
        visible: bool,
        now: str,
        parent: Optional[dict] = None,
    ) -> dict:
        """Guard, then return the updates for publish (visible) or unpublish."""
        self.ensure_mutable(kind, row, parent)
        fields = self.publish_fields(now) if visible else self.unpublish_fields()
        fields["updated_at"] = now
        return fields

    # ---- Cascade ----

    def retire_novel_cascade(self, conn: sqlite3.Connection, novel_id: str, now: str) -> int:
        """Retire every live chapter, then the novel, on the caller's transaction.

        Returns the number of chapters retired. The caller owns the
        transaction, so a failure leaves neither half applied.
        """
        chapter_fields = self.retire_fields(EntityKind.CHAPTER, now)
        retired = self.drift.update(conn, "chapters", chapter_fields, "novel_id = ?", (novel_id,))
        novel_fields = self.retire_fields(EntityKind.NOVEL, now)
        novel_fields["total_chapters"] = 0
        if not self.drift.update(conn, "novels", novel_fields, "id = ?", (novel_id,)):
            # Raising here rolls the chapter half back too
            raise StateError("Novel is already retired", {"id": novel_id})
        logger.info("Retired novel %s with %d live chapter(s)", novel_id, retired)
        return retired
