"""Genre mutations."""

from typing import Optional

from catalog.base import UNSET
from catalog.named import NamedEntityService
from catalog.results import Result, mutation
from catalog.revalidation import genre_paths
from models.enums import EntityKind


class GenreService(NamedEntityService):
    """Create, edit and retire genres.

    Retiring a genre does not touch ``novel_genres``: novels keep their tags.
    """

    kind = EntityKind.GENRE
    detail_field = "description"

    def paths_for(self, slug: Optional[str]) -> list[str]:
        return genre_paths(slug)

    @mutation
    def create_genre(self, name: str, slug: Optional[str] = None, description: Optional[str] = None) -> Result:
        return Result.ok(self._create(name, slug, description))

    @mutation
    def update_genre(self, genre_id: str, name: Optional[str] = None,
                     slug: Optional[str] = None, description=UNSET) -> Result:
        self._update(genre_id, name, slug, description)
        return Result.ok()

    @mutation
    def retire_genre(self, genre_id: str) -> Result:
        self._retire(genre_id)
        return Result.ok()
