"""Tools package: pure text helpers shared by the catalog engine."""

from tools.text_utils import (
    slugify,
    normalize_name,
    normalize_title,
    normalize_body,
    content_hash,
    count_words,
    unique_slug,
)

__all__ = [
    "slugify",
    "normalize_name",
    "normalize_title",
    "normalize_body",
    "content_hash",
    "count_words",
    "unique_slug",
]
