"""Catalog package: the content lifecycle and integrity engine."""

from catalog.allocator import ChapterNumberAllocator
from catalog.authors import AuthorService
from catalog.base import UNSET, CatalogService
from catalog.chapters import ChapterService
from catalog.content_guard import ContentHashGuard
from catalog.drift import SchemaDriftAdapter
from catalog.engine import Catalog
from catalog.genres import GenreService
from catalog.lifecycle import LifecycleStateMachine
from catalog.novels import NovelService
from catalog.results import Result, mutation
from catalog.revalidation import RecordingNotifier, RevalidationNotifier
from catalog.uniqueness import UniquenessValidator

__all__ = [
    "Catalog",
    "CatalogService",
    "AuthorService",
    "GenreService",
    "NovelService",
    "ChapterService",
    "ChapterNumberAllocator",
    "ContentHashGuard",
    "LifecycleStateMachine",
    "SchemaDriftAdapter",
    "UniquenessValidator",
    "RevalidationNotifier",
    "RecordingNotifier",
    "Result",
    "mutation",
    "UNSET",
]
