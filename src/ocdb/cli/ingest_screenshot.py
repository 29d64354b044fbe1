"""CLI command for screenshot ingestion with duplicate reporting."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from dotenv import load_dotenv

from ocdb.automation.ingestion_service import VenueExtractor, mime_type_for
from ocdb.catalog.persistence import DEFAULT_DB_PATH, VenueBlobStorage
from ocdb.catalog.service import CatalogService
from ocdb.extraction.config import ExtractionSettings
from ocdb.extraction.openrouter import ExtractionRequestError, OpenRouterVenueExtractor


def _collect_inputs(target: Path) -> list[Path]:
    if target.is_file():
        return [target]
    if target.is_dir():
        return sorted(path for path in target.iterdir() if path.is_file() and mime_type_for(path) is not None)
    return []


def main(argv: list[str] | None = None, *, extractor: VenueExtractor | None = None) -> int:
    parser = argparse.ArgumentParser(description="Extract venues from screenshots and admit the new ones")
    parser.add_argument("--image", required=True, help="Screenshot file or directory of screenshots")
    parser.add_argument("--db-path", default=DEFAULT_DB_PATH, help="SQLite catalog path")
    args = parser.parse_args(argv)

    source_path = Path(args.image)
    if not source_path.exists():
        print(json.dumps({"path": str(source_path), "error": "Image path does not exist"}, ensure_ascii=False, indent=2))
        return 2

    if extractor is None:
        load_dotenv()
        extractor = OpenRouterVenueExtractor(ExtractionSettings.from_env())

    files = _collect_inputs(source_path)

    results: list[dict[str, object]] = []
    errors: list[dict[str, str]] = []

    with VenueBlobStorage(args.db_path) as storage:
        catalog = CatalogService.from_storage(storage)

        for file_path in files:
            mime_type = mime_type_for(file_path)
            if mime_type is None:
                errors.append({"source_path": str(file_path), "error": f"Unsupported image type: {file_path.suffix}"})
                continue
            try:
                candidates = extractor.extract_venues(file_path.read_bytes(), mime_type=mime_type)
            except (OSError, ValueError, ExtractionRequestError) as exc:
                errors.append({"source_path": str(file_path), "error": str(exc)})
                continue

            admission = catalog.ingest(candidates)
            results.append(
                {
                    "source_path": str(file_path),
                    "admitted": [venue.to_dict() for venue in admission.admitted],
                    "admitted_count": admission.admitted_count,
                    "rejected_count": admission.rejected_count,
                    "malformed_count": admission.malformed_count,
                }
            )

        total = len(catalog.venues())

    payload = {
        "path": str(source_path),
        "processed": len(results),
        "catalog_size": total,
        "results": results,
        "errors": errors,
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0 if not errors else 1


if __name__ == "__main__":
    raise SystemExit(main())
