"""Canonical venue records and the validated view of extraction candidates."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Any, Mapping

logger = logging.getLogger(__name__)

UNKNOWN_REGION_CODE = "?"

_REGION_KEYS = ("ddd", "regionCode", "region_code")
_SOCIAL_KEYS = ("socialMedia", "social", "instagram")


@dataclass(frozen=True, slots=True)
class Venue:
    """One catalogued live-music venue."""

    id: str
    name: str
    city: str
    region_code: str = UNKNOWN_REGION_CODE
    social_handle: str = ""
    distance_km: float = 0.0
    travel_time: str = ""
    notes: str = ""
    created_at: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "city": self.city,
            "ddd": self.region_code,
            "socialMedia": self.social_handle,
            "distanceKm": self.distance_km,
            "travelTime": self.travel_time,
            "notes": self.notes,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Venue":
        """Rebuild a stored record, tolerating missing optional keys."""

        venue_id = _clean_text(payload.get("id"))
        name = _clean_text(payload.get("name"))
        city = _clean_text(payload.get("city"))
        if venue_id is None or name is None or city is None:
            raise ValueError("stored venue requires non-empty id, name and city")

        created_raw = payload.get("createdAt", 0)
        try:
            created_at = int(created_raw)
        except (TypeError, ValueError, OverflowError):
            created_at = 0

        return cls(
            id=venue_id,
            name=name,
            city=city,
            region_code=_first_text(payload, _REGION_KEYS) or UNKNOWN_REGION_CODE,
            social_handle=_first_text(payload, _SOCIAL_KEYS) or "",
            distance_km=_parse_distance(payload.get("distanceKm")) or 0.0,
            travel_time=_clean_text(payload.get("travelTime")) or "",
            notes=str(payload.get("notes") or ""),
            created_at=created_at,
        )

    @property
    def short_id(self) -> str:
        return self.id[:8]


@dataclass(frozen=True, slots=True)
class VenueCandidate:
    """Loosely-typed extraction item narrowed to explicit optional fields."""

    name: str | None = None
    city: str | None = None
    region_code: str | None = None
    social_handle: str | None = None
    distance_km: float | None = None
    travel_time: str | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.name and self.name.strip()) and bool(self.city and self.city.strip())

    @classmethod
    def from_payload(cls, payload: object) -> "VenueCandidate | None":
        """Validate one raw item; non-object items yield ``None``."""

        if not isinstance(payload, Mapping):
            logger.debug("Dropping non-object extraction item: %r", payload)
            return None

        return cls(
            name=_clean_text(payload.get("name")),
            city=_clean_text(payload.get("city")),
            region_code=_first_text(payload, _REGION_KEYS),
            social_handle=_first_text(payload, _SOCIAL_KEYS),
            distance_km=_parse_distance(payload.get("distanceKm")),
            travel_time=_clean_text(payload.get("travelTime")),
        )


def _clean_text(value: object) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None


def _first_text(payload: Mapping[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = _clean_text(payload.get(key))
        if value is not None:
            return value
    return None


def _parse_distance(value: object) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        text = value.strip().lower().removesuffix("km").strip().replace(",", ".")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    elif isinstance(value, (int, float)):
        number = float(value)
    else:
        return None

    if math.isnan(number) or math.isinf(number) or number < 0:
        return None
    return number
