"""Sequential chapter-number allocation."""

import logging
from typing import Optional

from catalog.drift import SchemaDriftAdapter
from catalog.uniqueness import UniquenessValidator
from models.enums import EntityKind

logger = logging.getLogger(__name__)


class ChapterNumberAllocator:
    """Picks the chapter number for a new chapter of a novel.

    Without an explicit number the next number is the live maximum plus one.
    Retired chapters are invisible to that maximum, so the highest live
    number keeps counting up and a retired number is only reused when asked
    for explicitly.
    """

    def __init__(self, drift: SchemaDriftAdapter, validator: UniquenessValidator):
        self.drift = drift
        self.validator = validator

    def last_live_number(self, novel_id: str) -> int:
        row = self.drift.select_one(
            "chapters", "MAX(chapter_number) AS max_number", ["novel_id = ?"], [novel_id],
        )
        return (row or {}).get("max_number") or 0

    def allocate(self, novel_id: str, requested: Optional[int] = None) -> int:
        """Return the number to use, or raise ConflictError if ``requested`` is taken."""
        if requested is None or requested <= 0:
            number = self.last_live_number(novel_id) + 1
            logger.debug("Allocated chapter %d for novel %s", number, novel_id)
            return number

        self.validator.require_unique(
            EntityKind.CHAPTER, "chapter_number", requested, scope={"novel_id": novel_id},
        )
        return int(requested)
