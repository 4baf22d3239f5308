"""Author mutations."""

from typing import Optional

from catalog.base import UNSET
from catalog.named import NamedEntityService
from catalog.results import Result, mutation
from catalog.revalidation import author_paths
from models.enums import EntityKind


class AuthorService(NamedEntityService):
    """Create, edit and retire authors. Retiring an author leaves their novels alone."""

    kind = EntityKind.AUTHOR
    detail_field = "bio"

    def paths_for(self, slug: Optional[str]) -> list[str]:
        return author_paths(slug)

    @mutation
    def create_author(self, name: str, slug: Optional[str] = None, bio: Optional[str] = None) -> Result:
        """Create a live author; the slug is derived from the name when omitted."""
        return Result.ok(self._create(name, slug, bio))

    @mutation
    def update_author(self, author_id: str, name: Optional[str] = None,
                      slug: Optional[str] = None, bio=UNSET) -> Result:
        """Partially update an author. ``bio=None`` clears the biography."""
        self._update(author_id, name, slug, bio)
        return Result.ok()

    @mutation
    def retire_author(self, author_id: str) -> Result:
        self._retire(author_id)
        return Result.ok()
