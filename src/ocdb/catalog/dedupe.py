"""Batch admission and bulk compaction of venue records by identity key."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Callable, Iterable, Sequence
import uuid

from ocdb.catalog.models import UNKNOWN_REGION_CODE, Venue, VenueCandidate
from ocdb.catalog.normalization import identity_key, venue_identity

logger = logging.getLogger(__name__)


def _new_venue_id() -> str:
    return str(uuid.uuid4())


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(slots=True)
class AdmissionDecision:
    """Outcome of evaluating one identity key against the registry."""

    is_duplicate: bool
    reason: str | None
    key: str


class IdentityRegistry:
    """Keys already present in the store plus keys admitted during a batch."""

    def __init__(self, venues: Iterable[Venue] = ()) -> None:
        self._store_keys: set[str] = {venue_identity(venue) for venue in venues}
        self._batch_keys: set[str] = set()

    def evaluate(self, key: str) -> AdmissionDecision:
        if key in self._store_keys:
            return AdmissionDecision(is_duplicate=True, reason="store-match", key=key)
        if key in self._batch_keys:
            return AdmissionDecision(is_duplicate=True, reason="batch-match", key=key)

        self._batch_keys.add(key)
        return AdmissionDecision(is_duplicate=False, reason=None, key=key)


@dataclass(slots=True)
class BatchAdmission:
    """Partition of one extraction batch into admitted records and counts."""

    admitted: list[Venue] = field(default_factory=list)
    rejected_count: int = 0
    malformed_count: int = 0

    @property
    def admitted_count(self) -> int:
        return len(self.admitted)


@dataclass(slots=True)
class Compaction:
    """Store collapsed to one record per identity key."""

    result: list[Venue]
    removed: list[Venue]

    @property
    def removed_count(self) -> int:
        return len(self.removed)


def admit_batch(
    existing: Sequence[Venue],
    candidates: Iterable[VenueCandidate | None],
    *,
    id_factory: Callable[[], str] = _new_venue_id,
    clock: Callable[[], int] = _now_ms,
) -> BatchAdmission:
    """Admit candidates that duplicate neither the store nor earlier batch items.

    ``existing`` is only read. Candidates missing a name or city count as
    malformed, never as duplicates; the first occurrence of a key wins.
    """

    registry = IdentityRegistry(existing)
    admission = BatchAdmission()

    for candidate in candidates:
        if candidate is None or not candidate.is_complete:
            admission.malformed_count += 1
            continue

        decision = registry.evaluate(identity_key(candidate.name or "", candidate.city or ""))
        if decision.is_duplicate:
            logger.debug("Rejected duplicate candidate %r (%s)", candidate.name, decision.reason)
            admission.rejected_count += 1
            continue

        admission.admitted.append(_build_venue(candidate, venue_id=id_factory(), created_at=clock()))

    return admission


def _build_venue(candidate: VenueCandidate, *, venue_id: str, created_at: int) -> Venue:
    return Venue(
        id=venue_id,
        name=(candidate.name or "").strip(),
        city=(candidate.city or "").strip(),
        region_code=(candidate.region_code or "").strip() or UNKNOWN_REGION_CODE,
        social_handle=(candidate.social_handle or "").strip(),
        distance_km=candidate.distance_km or 0.0,
        travel_time=(candidate.travel_time or "").strip(),
        notes="",
        created_at=created_at,
    )


def compact(venues: Sequence[Venue]) -> Compaction:
    """Keep the earliest record for each identity key, in stored order."""

    seen: set[str] = set()
    result: list[Venue] = []
    removed: list[Venue] = []

    for venue in venues:
        key = venue_identity(venue)
        if key in seen:
            removed.append(venue)
            continue
        seen.add(key)
        result.append(venue)

    return Compaction(result=result, removed=removed)
