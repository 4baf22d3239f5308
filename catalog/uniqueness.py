"""Live-record uniqueness checks, scoped per entity kind."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from catalog.drift import SchemaDriftAdapter
from config.exceptions import ConflictError
from models.enums import EntityKind
from tools.text_utils import normalize_name, normalize_title

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldRule:
    """How one unique field is stored, compared and reported."""
    column: str
    scope: tuple[str, ...] = ()
    transform: Optional[Callable[[Any], Any]] = None
    message: str = "{value} already exists"


_RULES: dict[tuple[EntityKind, str], FieldRule] = {
    (EntityKind.AUTHOR, "name"): FieldRule(
        "normalized_name", transform=normalize_name,
        message='Author name already exists: "{row[name]}"',
    ),
    (EntityKind.AUTHOR, "slug"): FieldRule("slug", message='Slug already exists: "{row[slug]}"'),
    (EntityKind.GENRE, "name"): FieldRule(
        "normalized_name", transform=normalize_name,
        message='Genre name already exists: "{row[name]}"',
    ),
    (EntityKind.GENRE, "slug"): FieldRule("slug", message='Slug already exists: "{row[slug]}"'),
    (EntityKind.NOVEL, "title"): FieldRule(
        "normalized_title", scope=("author_id",), transform=normalize_title,
        message='A novel with this title already exists for this author: "{row[title]}"',
    ),
    (EntityKind.NOVEL, "slug"): FieldRule("slug", message='Slug already exists: "{row[slug]}"'),
    (EntityKind.CHAPTER, "chapter_number"): FieldRule(
        "chapter_number", scope=("novel_id",), transform=int,
        message='Chapter {row[chapter_number]} already exists: "{row[title]}"',
    ),
    (EntityKind.CHAPTER, "content_hash"): FieldRule(
        "content_hash", scope=("novel_id",),
        message='This content is identical to Chapter {row[chapter_number]}: "{row[title]}"',
    ),
}


class UniquenessValidator:
    """Checks a candidate value against live (non-retired) records.

    Names compare case-insensitively through their stored normalized form;
    slugs, numbers and fingerprints compare exactly. Finding a duplicate is a
    normal outcome; only storage failures raise.
    """

    def __init__(self, drift: SchemaDriftAdapter):
        self.drift = drift

    @staticmethod
    def rule(kind: EntityKind | str, field: str) -> FieldRule:
        try:
            return _RULES[(EntityKind(kind), field)]
        except (KeyError, ValueError):
            raise ValueError(f"No uniqueness rule for {kind}.{field}") from None

    def find_live(
        self,
        kind: EntityKind | str,
        field: str,
        value: Any,
        scope: Optional[dict] = None,
        exclude_id: Optional[str] = None,
    ) -> Optional[dict]:
        """Return the live row already holding ``value``, or None."""
        kind = EntityKind(kind)
        rule = self.rule(kind, field)
        scope = scope or {}

        where = [f"{rule.column} = ?"]
        params = [rule.transform(value) if rule.transform else value]
        for key in rule.scope:
            scope_value = scope.get(key)
            if scope_value is None:
                # Unscoped records (e.g. novels without an author) never collide
                return None
            where.append(f"{key} = ?")
            params.append(scope_value)

        return self.drift.select_one(
            kind.table, "*", where, params, exclude_id=exclude_id, order_by="created_at",
        )

    def exists_live(self, kind, field, value, scope=None, exclude_id=None) -> bool:
        return self.find_live(kind, field, value, scope, exclude_id) is not None

    def require_unique(
        self,
        kind: EntityKind | str,
        field: str,
        value: Any,
        scope: Optional[dict] = None,
        exclude_id: Optional[str] = None,
    ) -> None:
        """Raise ConflictError naming the live record that already holds ``value``."""
        existing = self.find_live(kind, field, value, scope, exclude_id)
        if existing is not None:
            message = self.rule(kind, field).message.format(row=existing, value=value)
            logger.info("Uniqueness conflict on %s.%s: %s", EntityKind(kind).value, field, message)
            raise ConflictError(message, existing)
