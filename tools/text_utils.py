"""Text utilities: slugs, normalized titles, body fingerprints, word counts."""

import hashlib
import re
import unicodedata
from typing import Iterable


def _strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def slugify(text: str) -> str:
    """Turn free text into a URL-safe slug.

    Accents are decomposed and dropped, every run of characters outside
    ``[a-z0-9]`` becomes a single dash, and leading/trailing dashes are
    removed. Idempotent: ``slugify(slugify(x)) == slugify(x)``.
    """
    if not text:
        return ""
    slug = _strip_diacritics(text.strip().lower())
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def normalize_name(text: str) -> str:
    """Case-folded form of a display name; the key for case-insensitive uniqueness."""
    return text.strip().casefold() if text else ""


def normalize_title(text: str) -> str:
    """Lower-case, accent-free, single-spaced form of a title used for scoping."""
    if not text:
        return ""
    title = _strip_diacritics(text.strip().lower())
    return re.sub(r"\s+", " ", title).strip()


def normalize_body(text: str) -> str:
    """Trim surrounding whitespace and unify line endings to LF."""
    if not text:
        return ""
    return text.replace("\r\n", "\n").replace("\r", "\n").strip()


def content_hash(text: str) -> str:
    """SHA-256 fingerprint of the normalized chapter body."""
    return hashlib.sha256(normalize_body(text).encode("utf-8")).hexdigest()


def count_words(text: str) -> int:
    """Count whitespace-separated tokens."""
    return len(text.split()) if text else 0


def unique_slug(base: str, taken: Iterable[str]) -> str:
    """Return ``base`` or the first ``base-N`` (N >= 2) not already taken."""
    taken = set(taken)
    if base not in taken:
        return base
    n = 2
    while f"{base}-{n}" in taken:
        n += 1
    return f"{base}-{n}"
