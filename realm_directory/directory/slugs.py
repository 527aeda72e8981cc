"""
Realm name → slug normalization.

Blizzard realm slugs are lowercase, diacritic-free and hyphen-joined::

    normalize_realm_slug("Twisting Nether")  # → "twisting-nether"
    normalize_realm_slug("Área-52")          # → "area52"
    normalize_realm_slug("Mal'Ganis")        # → "malganis"

Hyphens inside a display name are dropped while spaces become hyphens, so
running the transform twice would strip the hyphens it just produced.  Input
that is already canonical is therefore returned as-is, which keeps
``normalize_realm_slug`` idempotent.
"""

from __future__ import annotations

import unicodedata

_REMOVED_CHARS = ("-", "'", "’")


def _strip_marks(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", value)
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    return unicodedata.normalize("NFC", stripped)


def is_canonical_slug(value: str) -> bool:
    """Return True if ``value`` already has canonical slug form."""
    if value != value.strip() or value != value.lower():
        return False
    if " " in value or "'" in value or "’" in value:
        return False
    if unicodedata.normalize("NFC", value) != value:
        return False
    return _strip_marks(value) == value


def normalize_realm_slug(name: str) -> str:
    """Map a human-entered realm name to its canonical slug.

    Args:
        name: Realm display name or slug, any Unicode.

    Returns:
        The canonical slug.  Already-canonical input is returned unchanged.
    """
    if is_canonical_slug(name):
        return name

    slug = name.strip().lower()
    for ch in _REMOVED_CHARS:
        slug = slug.replace(ch, "")
    slug = slug.strip().replace(" ", "-")
    return _strip_marks(slug).strip()
