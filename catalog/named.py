"""Create/update/retire for name+slug entities (authors and genres)."""

import logging
from typing import Optional

from catalog.base import UNSET, CatalogService
from config.exceptions import NotFoundError, StateError, ValidationError
from models.database import Database, new_id
from tools.text_utils import normalize_name, slugify

logger = logging.getLogger(__name__)


def _clean_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


class NamedEntityService(CatalogService):
    """Names unique case-insensitively and slugs unique exactly, among live rows."""

    detail_field: str  # free-text column: "bio" or "description"

    def paths_for(self, slug: Optional[str]) -> list[str]:
        raise NotImplementedError

    def _recheck(self, name: Optional[str] = None, slug: Optional[str] = None,
                 exclude_id: Optional[str] = None) -> None:
        if name is not None:
            self.validator.require_unique(self.kind, "name", name, exclude_id=exclude_id)
        if slug is not None:
            self.validator.require_unique(self.kind, "slug", slug, exclude_id=exclude_id)

    def _create(self, name: Optional[str], slug: Optional[str] = None, detail: Optional[str] = None) -> dict:
        if not name or not name.strip():
            raise ValidationError("Name is required")
        name = name.strip()
        slug = slugify(slug) if slug and slug.strip() else slugify(name)
        if not slug:
            raise ValidationError("Slug cannot be empty")

        self._recheck(name=name, slug=slug)

        now = self._now()
        entity_id = new_id()
        values = {
            "id": entity_id,
            "name": name,
            "slug": slug,
            "normalized_name": normalize_name(name),
            self.detail_field: _clean_optional(detail),
            "created_at": now,
            "updated_at": now,
        }
        with self._transaction(lambda: self._recheck(name=name, slug=slug)) as conn:
            Database.insert(conn, self.kind.table, values)

        logger.info("Created %s %s (%s)", self.kind.value, entity_id, slug)
        self._notify(self.paths_for(slug))
        return {"id": entity_id, "slug": slug}

    def _update(self, entity_id: Optional[str], name: Optional[str] = None,
                slug: Optional[str] = None, detail=UNSET) -> None:
        entity_id = self._require_id(entity_id, self.kind)
        current = self._load(self.kind, entity_id)

        updates: dict = {}
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Name cannot be empty")
            updates["name"] = name
            updates["normalized_name"] = normalize_name(name)
        if slug is not None:
            slug = slugify(slug)
            if not slug:
                raise ValidationError("Slug cannot be empty")
            updates["slug"] = slug
        if detail is not UNSET:
            updates[self.detail_field] = _clean_optional(detail)

        if not updates:
            return None

        self._recheck(name=updates.get("name"), slug=updates.get("slug"), exclude_id=entity_id)

        updates["updated_at"] = self._now()
        recheck = lambda: self._recheck(  # noqa: E731
            name=updates.get("name"), slug=updates.get("slug"), exclude_id=entity_id,
        )
        with self._transaction(recheck) as conn:
            changed = self.drift.update(conn, self.kind.table, updates, "id = ?", (entity_id,))
            if not changed:
                # Retired after it was loaded
                raise NotFoundError(self.kind.value, entity_id=entity_id)

        logger.info("Updated %s %s: %s", self.kind.value, entity_id, sorted(updates))
        paths = self.paths_for(current["slug"])
        if updates.get("slug"):
            paths += self.paths_for(updates["slug"])
        self._notify(paths)
        return None

    def _retire(self, entity_id: Optional[str]) -> None:
        entity_id = self._require_id(entity_id, self.kind)
        current = self._load(self.kind, entity_id, live=False)
        self.lifecycle.ensure_retirable(self.kind, current)
        self.drift.require_retirement(self.kind.table)

        fields = self.lifecycle.retire_fields(self.kind, self._now())
        with self._transaction() as conn:
            changed = self.drift.update(conn, self.kind.table, fields, "id = ?", (entity_id,))
        if not changed:
            raise StateError(f"{self.kind.label} is already retired", {"id": entity_id})

        logger.info("Retired %s %s", self.kind.value, entity_id)
        self._notify(self.paths_for(current["slug"]))
        return None
