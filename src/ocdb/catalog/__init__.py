"""Venue catalog: identity normalization, deduplication and storage."""

from .dedupe import BatchAdmission, Compaction, admit_batch, compact
from .models import Venue, VenueCandidate
from .normalization import identity_key, normalize_identity
from .service import CatalogService
from .store import VenueStore

__all__ = [
    "BatchAdmission",
    "CatalogService",
    "Compaction",
    "Venue",
    "VenueCandidate",
    "VenueStore",
    "admit_batch",
    "compact",
    "identity_key",
    "normalize_identity",
]
