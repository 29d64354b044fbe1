"""Application-level catalog actions layered over the venue store."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Iterable

from ocdb.catalog.dedupe import BatchAdmission, Compaction, admit_batch, compact
from ocdb.catalog.models import Venue, VenueCandidate
from ocdb.catalog.persistence import VenueBlobStorage
from ocdb.catalog.search import filter_venues
from ocdb.catalog.store import VenueStore

logger = logging.getLogger(__name__)

CLEANUP_EMPTY = "empty"
CLEANUP_CLEAN = "clean"
CLEANUP_DUPLICATES = "duplicates"


@dataclass(frozen=True, slots=True)
class CleanupPreview:
    status: str
    compaction: Compaction

    @property
    def removed_count(self) -> int:
        return self.compaction.removed_count

    @property
    def needs_confirmation(self) -> bool:
        return self.status == CLEANUP_DUPLICATES


class CatalogService:
    """Owns the venue store and exposes the operator's catalog actions."""

    def __init__(
        self,
        store: VenueStore,
        *,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._store = store
        self._id_factory = id_factory
        self._clock = clock

    @classmethod
    def from_storage(cls, storage: VenueBlobStorage, **kwargs) -> "CatalogService":
        """Load the persisted catalog once and save it after every change."""

        venues = storage.load()
        logger.info("Loaded %s venues from %s", len(venues), storage.db_path)
        store = VenueStore(venues, observers=[storage.save])
        return cls(store, **kwargs)

    @property
    def store(self) -> VenueStore:
        return self._store

    def venues(self) -> tuple[Venue, ...]:
        return self._store.snapshot()

    def ingest(self, candidates: Iterable[VenueCandidate | None]) -> BatchAdmission:
        options = {}
        if self._id_factory is not None:
            options["id_factory"] = self._id_factory
        if self._clock is not None:
            options["clock"] = self._clock

        with self._store.transaction() as store:
            admission = admit_batch(store.snapshot(), candidates, **options)
            store.append(admission.admitted)

        logger.info(
            "Batch ingested: admitted=%s rejected=%s malformed=%s",
            admission.admitted_count,
            admission.rejected_count,
            admission.malformed_count,
        )
        return admission

    def preview_cleanup(self) -> CleanupPreview:
        venues = self._store.snapshot()
        compaction = compact(venues)
        if not venues:
            status = CLEANUP_EMPTY
        elif compaction.removed_count == 0:
            status = CLEANUP_CLEAN
        else:
            status = CLEANUP_DUPLICATES
        return CleanupPreview(status=status, compaction=compaction)

    def apply_cleanup(self) -> int:
        """Compact the current store; the caller has already confirmed."""

        with self._store.transaction() as store:
            compaction = compact(store.snapshot())
            if compaction.removed_count:
                store.replace_all(compaction.result)

        logger.info("Cleanup removed %s duplicate venues", compaction.removed_count)
        return compaction.removed_count

    def resolve(self, id_prefix: str) -> Venue:
        return self._store.find_by_prefix(id_prefix)

    def delete(self, venue_id: str) -> bool:
        removed = self._store.remove(venue_id)
        if removed:
            logger.info("Deleted venue %s", venue_id)
        return removed

    def edit(
        self,
        venue_id: str,
        *,
        name: str | None = None,
        city: str | None = None,
        region_code: str | None = None,
        notes: str | None = None,
    ) -> Venue | None:
        """Apply an operator edit without re-running duplicate detection."""

        changes: dict[str, object] = {}
        for field_name, value in (("name", name), ("city", city), ("region_code", region_code)):
            if value is None:
                continue
            cleaned = value.strip()
            if not cleaned:
                raise ValueError(f"{field_name} cannot be empty")
            changes[field_name] = cleaned
        if notes is not None:
            changes["notes"] = notes

        if not changes:
            return self._store.get(venue_id)
        return self._store.update(venue_id, **changes)

    def search(self, query: str) -> list[Venue]:
        return filter_venues(self._store.snapshot(), query)
