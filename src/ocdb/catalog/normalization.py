"""Identity normalization used for venue duplicate detection."""

from __future__ import annotations

import re
import unicodedata

from ocdb.catalog.models import Venue

IDENTITY_SEPARATOR = "|"

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def normalize_identity(text: str) -> str:
    """Fold case, accents, whitespace and punctuation out of ``text``."""

    lowered = text.lower().strip()
    decomposed = unicodedata.normalize("NFD", lowered)
    stripped = "".join(char for char in decomposed if unicodedata.category(char) != "Mn")
    return _NON_ALNUM_RE.sub("", stripped)


def identity_key(name: str, city: str) -> str:
    """Return the comparison key for a ``(name, city)`` pair.

    The separator can never survive normalization, so keys for different
    pairs cannot collide through concatenation.
    """

    return f"{normalize_identity(name)}{IDENTITY_SEPARATOR}{normalize_identity(city)}"


def venue_identity(venue: Venue) -> str:
    return identity_key(venue.name, venue.city)
