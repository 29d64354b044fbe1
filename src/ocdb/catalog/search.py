"""Read-only filtering and region grouping for catalog listings."""

from __future__ import annotations

from typing import Iterable, Sequence

from ocdb.catalog.models import Venue

REGION_GROUPS = ("48", "47", "49")
OTHER_REGION_GROUP = "Outros"


def filter_venues(venues: Iterable[Venue], query: str) -> list[Venue]:
    """Case-insensitive substring match on name, city and region code."""

    needle = query.lower().strip()
    return [
        venue
        for venue in venues
        if needle in venue.name.lower() or needle in venue.city.lower() or needle in venue.region_code.lower()
    ]


def region_group(region_code: str) -> str:
    code = region_code.strip()
    return code if code in REGION_GROUPS else OTHER_REGION_GROUP


def group_by_region(venues: Iterable[Venue]) -> dict[str, list[Venue]]:
    """Bucket venues into the fixed region groups, each sorted by distance.

    Every group key is present, in display order, even when empty.
    """

    groups: dict[str, list[Venue]] = {code: [] for code in (*REGION_GROUPS, OTHER_REGION_GROUP)}
    for venue in venues:
        groups[region_group(venue.region_code)].append(venue)
    for items in groups.values():
        items.sort(key=lambda venue: venue.distance_km)
    return groups


def sort_by_distance(venues: Sequence[Venue]) -> list[Venue]:
    return sorted(venues, key=lambda venue: venue.distance_km)
