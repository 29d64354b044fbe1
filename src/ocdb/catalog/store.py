"""Ordered in-memory venue collection with change observers."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, fields, replace
import logging
import threading
from typing import Callable, Iterable, Iterator

from ocdb.catalog.models import Venue

logger = logging.getLogger(__name__)

StoreObserver = Callable[[tuple[Venue, ...]], None]

_IMMUTABLE_FIELDS = frozenset({"id", "created_at"})
_MUTABLE_FIELDS = frozenset(f.name for f in fields(Venue)) - _IMMUTABLE_FIELDS


@dataclass(slots=True)
class VenueNotFoundError(LookupError):
    """Raised when no venue matches an id or id prefix."""

    venue_id: str

    def __str__(self) -> str:
        return f"Venue not found (id={self.venue_id})"


@dataclass(slots=True)
class AmbiguousVenueIdError(LookupError):
    """Raised when an id prefix matches more than one venue."""

    prefix: str
    matches: int

    def __str__(self) -> str:
        return f"Venue id prefix is ambiguous (prefix={self.prefix}, matches={self.matches})"


class VenueStore:
    """Single-writer venue list; observers see every committed snapshot."""

    def __init__(self, venues: Iterable[Venue] = (), *, observers: Iterable[StoreObserver] = ()) -> None:
        self._venues: list[Venue] = list(venues)
        self._observers: list[StoreObserver] = list(observers)
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._venues)

    def __iter__(self) -> Iterator[Venue]:
        return iter(self.snapshot())

    def add_observer(self, observer: StoreObserver) -> None:
        self._observers.append(observer)

    def snapshot(self) -> tuple[Venue, ...]:
        with self._lock:
            return tuple(self._venues)

    @contextmanager
    def transaction(self) -> Iterator["VenueStore"]:
        """Hold the writer lock across a read-modify-write sequence."""

        with self._lock:
            yield self

    def get(self, venue_id: str) -> Venue | None:
        with self._lock:
            for venue in self._venues:
                if venue.id == venue_id:
                    return venue
        return None

    def find_by_prefix(self, prefix: str) -> Venue:
        needle = prefix.strip().lower().lstrip("#")
        if not needle:
            raise VenueNotFoundError(prefix)

        with self._lock:
            exact = [venue for venue in self._venues if venue.id.lower() == needle]
            if exact:
                return exact[0]
            matches = [venue for venue in self._venues if venue.id.lower().startswith(needle)]

        if not matches:
            raise VenueNotFoundError(prefix)
        if len(matches) > 1:
            raise AmbiguousVenueIdError(prefix=prefix, matches=len(matches))
        return matches[0]

    def append(self, records: Iterable[Venue]) -> None:
        new_records = list(records)
        if not new_records:
            return
        with self._lock:
            self._venues.extend(new_records)
            self._notify()

    def replace_all(self, records: Iterable[Venue]) -> None:
        with self._lock:
            self._venues = list(records)
            self._notify()

    def remove(self, venue_id: str) -> bool:
        with self._lock:
            remaining = [venue for venue in self._venues if venue.id != venue_id]
            if len(remaining) == len(self._venues):
                return False
            self._venues = remaining
            self._notify()
        return True

    def update(self, venue_id: str, **changes: object) -> Venue | None:
        """Replace mutable fields of one venue; identity is not re-checked."""

        forbidden = _IMMUTABLE_FIELDS.intersection(changes)
        if forbidden:
            raise ValueError(f"Cannot change immutable venue fields: {', '.join(sorted(forbidden))}")
        unknown = set(changes) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown venue fields: {', '.join(sorted(unknown))}")

        with self._lock:
            for index, venue in enumerate(self._venues):
                if venue.id != venue_id:
                    continue
                updated = replace(venue, **changes)
                self._venues[index] = updated
                self._notify()
                return updated
        return None

    def _notify(self) -> None:
        snapshot = tuple(self._venues)
        for observer in self._observers:
            observer(snapshot)
