"""Duplicate chapter body detection within one novel."""

from typing import Optional

from catalog.uniqueness import UniquenessValidator
from models.enums import EntityKind
from tools.text_utils import content_hash


class ContentHashGuard:
    """Rejects a chapter body that matches a live chapter of the same novel."""

    def __init__(self, validator: UniquenessValidator):
        self.validator = validator

    @staticmethod
    def fingerprint(body: str) -> str:
        return content_hash(body)

    def check_duplicate(self, novel_id: str, body: str, exclude_id: Optional[str] = None) -> Optional[dict]:
        return self.validator.find_live(
            EntityKind.CHAPTER, "content_hash", self.fingerprint(body),
            scope={"novel_id": novel_id}, exclude_id=exclude_id,
        )

    def ensure_unique(self, novel_id: str, body: str, exclude_id: Optional[str] = None) -> str:
        """Return the body fingerprint; raise ConflictError naming the matching chapter."""
        digest = self.fingerprint(body)
        self.validator.require_unique(
            EntityKind.CHAPTER, "content_hash", digest,
            scope={"novel_id": novel_id}, exclude_id=exclude_id,
        )
        return digest
