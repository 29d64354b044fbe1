"""Defensive parsing of model output into venue candidates."""

from __future__ import annotations

import json
import logging
import re

from ocdb.catalog.models import VenueCandidate

logger = logging.getLogger(__name__)

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)
_WRAPPER_KEYS = ("venues", "casas", "items")


def _strip_code_fence(text: str) -> str:
    match = _CODE_FENCE_RE.match(text.strip())
    return match.group(1) if match else text.strip()


def parse_candidates(text: str | None) -> list[VenueCandidate | None]:
    """Turn raw reply text into candidates, one per array item.

    Unparsable or wrongly-shaped output yields an empty list. Non-object
    items are kept as ``None`` so they count as malformed downstream.
    """

    if not text or not text.strip():
        return []

    try:
        payload = json.loads(_strip_code_fence(text))
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse extraction reply as JSON: %s", exc)
        return []

    if isinstance(payload, dict):
        for key in _WRAPPER_KEYS:
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break
        else:
            logger.error("Extraction reply object has no venue list (keys=%s)", sorted(payload))
            return []

    if not isinstance(payload, list):
        logger.error("Extraction reply is not a list (got %s)", type(payload).__name__)
        return []

    return [VenueCandidate.from_payload(item) for item in payload]
