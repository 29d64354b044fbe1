"""Serialized screenshot ingestion: extraction followed by batch admission."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Awaitable, Callable, Protocol

from ocdb.catalog.models import VenueCandidate
from ocdb.catalog.service import CatalogService

logger = logging.getLogger(__name__)

IMAGE_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}


class VenueExtractor(Protocol):
    def extract_venues(self, image_bytes: bytes, *, mime_type: str = ...) -> list[VenueCandidate | None]:
        ...


@dataclass(frozen=True, slots=True)
class ScreenshotIngestResult:
    success: bool
    admitted_count: int = 0
    rejected_count: int = 0
    malformed_count: int = 0
    stage: str = "unknown"
    error: str | None = None

    @property
    def is_busy(self) -> bool:
        return self.stage == "busy"


class IngestGate:
    """Processing flag that allows one outstanding extraction at a time."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()

    @property
    def is_processing(self) -> bool:
        return self._lock.locked()

    @property
    def lock(self) -> asyncio.Lock:
        return self._lock


def mime_type_for(path: Path) -> str | None:
    return IMAGE_MIME_TYPES.get(path.suffix.lower())


async def run_screenshot_ingestion(
    image_bytes: bytes,
    *,
    service: CatalogService,
    extractor: VenueExtractor,
    gate: IngestGate,
    mime_type: str = "image/png",
    wait: bool = False,
) -> ScreenshotIngestResult:
    """Extract venues from one image and admit the non-duplicates.

    With ``wait=False`` a second call while one is outstanding returns a
    ``busy`` result instead of queueing. Extraction failures leave the
    store untouched.
    """

    if gate.is_processing and not wait:
        return ScreenshotIngestResult(success=False, stage="busy", error="Another screenshot is still processing")

    async with gate.lock:
        try:
            candidates = await asyncio.to_thread(extractor.extract_venues, image_bytes, mime_type=mime_type)
        except Exception as exc:
            logger.exception("Screenshot extraction failed")
            return ScreenshotIngestResult(success=False, stage="extract", error=str(exc))

        admission = service.ingest(candidates)

    return ScreenshotIngestResult(
        success=True,
        admitted_count=admission.admitted_count,
        rejected_count=admission.rejected_count,
        malformed_count=admission.malformed_count,
        stage="done",
    )


async def ingest_screenshot_file(
    file_path: Path,
    *,
    service: CatalogService,
    extractor: VenueExtractor,
    gate: IngestGate,
) -> ScreenshotIngestResult:
    mime_type = mime_type_for(file_path)
    if mime_type is None:
        return ScreenshotIngestResult(success=False, stage="read", error=f"Unsupported image type: {file_path.suffix}")

    try:
        image_bytes = file_path.read_bytes()
    except OSError as exc:
        return ScreenshotIngestResult(success=False, stage="read", error=f"Failed to read image: {exc}")

    return await run_screenshot_ingestion(
        image_bytes,
        service=service,
        extractor=extractor,
        gate=gate,
        mime_type=mime_type,
        wait=True,
    )


def build_folder_callback(
    *,
    service: CatalogService,
    extractor: VenueExtractor,
    gate: IngestGate,
) -> Callable[[Path], Awaitable[None]]:
    """Callback for the folder watcher that ingests and logs each screenshot."""

    async def _on_new_screenshot(file_path: Path) -> None:
        logger.info("Detected new screenshot: %s", file_path)
        result = await ingest_screenshot_file(file_path, service=service, extractor=extractor, gate=gate)
        if result.success:
            logger.info(
                "Ingested %s: admitted=%s rejected=%s malformed=%s",
                file_path.name,
                result.admitted_count,
                result.rejected_count,
                result.malformed_count,
            )
            return
        logger.error("Ingestion failed for %s (%s): %s", file_path.name, result.stage, result.error)

    return _on_new_screenshot
