from __future__ import annotations

import asyncio
import logging
from pathlib import Path
import threading

import pytest

from ocdb.automation.ingestion_service import (
    IngestGate,
    build_folder_callback,
    ingest_screenshot_file,
    run_screenshot_ingestion,
)
from ocdb.catalog.models import Venue, VenueCandidate
from ocdb.catalog.service import CatalogService
from ocdb.catalog.store import VenueStore


class _StaticExtractor:
    def __init__(self, candidates: list[VenueCandidate | None]) -> None:
        self._candidates = candidates
        self.calls: list[tuple[bytes, str]] = []

    def extract_venues(self, image_bytes: bytes, *, mime_type: str = "image/png") -> list[VenueCandidate | None]:
        self.calls.append((image_bytes, mime_type))
        return list(self._candidates)


class _FailingExtractor:
    def extract_venues(self, image_bytes: bytes, *, mime_type: str = "image/png") -> list[VenueCandidate | None]:
        raise RuntimeError("vision model unavailable")


class _BlockingExtractor:
    def __init__(self) -> None:
        self.release = threading.Event()

    def extract_venues(self, image_bytes: bytes, *, mime_type: str = "image/png") -> list[VenueCandidate | None]:
        self.release.wait(timeout=5.0)
        return [VenueCandidate(name="Arena", city="Tubarão")]


def _catalog() -> CatalogService:
    return CatalogService(VenueStore([Venue(id="k1", name="Clube X", city="Florianópolis", region_code="48")]))


@pytest.mark.asyncio
async def test_ingestion_admits_new_and_counts_duplicates() -> None:
    catalog = _catalog()
    extractor = _StaticExtractor(
        [
            VenueCandidate(name="Bar Ypê", city="Biguaçu"),
            VenueCandidate(name="clube x", city="FLORIANOPOLIS"),
            VenueCandidate(name="Sem cidade"),
            None,
        ]
    )

    result = await run_screenshot_ingestion(
        b"img",
        service=catalog,
        extractor=extractor,
        gate=IngestGate(),
        mime_type="image/jpeg",
    )

    assert result.success is True
    assert result.stage == "done"
    assert result.admitted_count == 1
    assert result.rejected_count == 1
    assert result.malformed_count == 2
    assert extractor.calls == [(b"img", "image/jpeg")]
    assert [venue.name for venue in catalog.venues()] == ["Clube X", "Bar Ypê"]


@pytest.mark.asyncio
async def test_extraction_failure_leaves_store_untouched() -> None:
    catalog = _catalog()
    gate = IngestGate()

    result = await run_screenshot_ingestion(b"img", service=catalog, extractor=_FailingExtractor(), gate=gate)

    assert result.success is False
    assert result.stage == "extract"
    assert "vision model unavailable" in (result.error or "")
    assert len(catalog.venues()) == 1
    assert gate.is_processing is False


@pytest.mark.asyncio
async def test_second_upload_while_processing_is_reported_busy() -> None:
    catalog = CatalogService(VenueStore())
    gate = IngestGate()
    extractor = _BlockingExtractor()

    first = asyncio.create_task(run_screenshot_ingestion(b"one", service=catalog, extractor=extractor, gate=gate))
    for _ in range(100):
        if gate.is_processing:
            break
        await asyncio.sleep(0.01)

    second = await run_screenshot_ingestion(b"two", service=catalog, extractor=extractor, gate=gate)
    extractor.release.set()
    first_result = await asyncio.wait_for(first, timeout=5.0)

    assert second.is_busy is True
    assert second.success is False
    assert first_result.admitted_count == 1
    assert len(catalog.venues()) == 1


@pytest.mark.asyncio
async def test_ingest_file_reads_supported_images(tmp_path: Path) -> None:
    screenshot = tmp_path / "agenda.JPG"
    screenshot.write_bytes(b"jpeg-bytes")
    extractor = _StaticExtractor([VenueCandidate(name="Santa Dose", city="Itajaí")])

    result = await ingest_screenshot_file(screenshot, service=_catalog(), extractor=extractor, gate=IngestGate())

    assert result.success is True
    assert extractor.calls == [(b"jpeg-bytes", "image/jpeg")]


@pytest.mark.asyncio
async def test_ingest_file_rejects_unsupported_or_missing_files(tmp_path: Path) -> None:
    extractor = _StaticExtractor([])
    notes = tmp_path / "notes.txt"
    notes.write_text("not an image", encoding="utf-8")

    unsupported = await ingest_screenshot_file(notes, service=_catalog(), extractor=extractor, gate=IngestGate())
    missing = await ingest_screenshot_file(
        tmp_path / "gone.png", service=_catalog(), extractor=extractor, gate=IngestGate()
    )

    assert unsupported.stage == "read"
    assert "Unsupported" in (unsupported.error or "")
    assert missing.stage == "read"
    assert missing.success is False
    assert extractor.calls == []


@pytest.mark.asyncio
async def test_folder_callback_ingests_and_logs(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    screenshot = tmp_path / "agenda.webp"
    screenshot.write_bytes(b"webp")
    catalog = _catalog()
    callback = build_folder_callback(
        service=catalog,
        extractor=_StaticExtractor([VenueCandidate(name="Toca", city="Lages")]),
        gate=IngestGate(),
    )

    with caplog.at_level(logging.INFO, logger="ocdb.automation.ingestion_service"):
        await callback(screenshot)

    assert [venue.name for venue in catalog.venues()] == ["Clube X", "Toca"]
    assert "Ingested agenda.webp: admitted=1" in caplog.text
