"""CLI entrypoint that ingests screenshots dropped into a folder, without the bot."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

from ocdb.automation.ingestion_service import IngestGate, build_folder_callback
from ocdb.automation.watcher import ScreenshotFolderWatcher
from ocdb.catalog.persistence import DEFAULT_DB_PATH, VenueBlobStorage
from ocdb.catalog.service import CatalogService
from ocdb.extraction.config import ExtractionSettings
from ocdb.extraction.openrouter import OpenRouterVenueExtractor


LOGGER = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Watch a folder and admit venues from new screenshots")
    parser.add_argument("--watch-dir", required=True, help="Directory receiving agenda screenshots")
    parser.add_argument("--db-path", default=DEFAULT_DB_PATH, help="SQLite catalog path")
    parser.add_argument("--debounce", type=float, default=2.0, help="Seconds a file must stay quiet before ingest")
    return parser.parse_args(argv)


async def _run_watcher(args: argparse.Namespace) -> int:
    watch_dir = Path(args.watch_dir)
    if not watch_dir.is_dir():
        LOGGER.error("watch-dir must exist and be a directory: %s", watch_dir)
        return 2

    try:
        extractor = OpenRouterVenueExtractor(ExtractionSettings.from_env())
    except ValueError as exc:
        LOGGER.error("Configuration error: %s", exc)
        return 2

    with VenueBlobStorage(args.db_path) as storage:
        catalog = CatalogService.from_storage(storage)
        watcher = ScreenshotFolderWatcher(
            watch_dir=watch_dir,
            callback=build_folder_callback(service=catalog, extractor=extractor, gate=IngestGate()),
            debounce_seconds=float(args.debounce),
        )
        await watcher.start()
        try:
            while True:
                await asyncio.sleep(1.0)
        finally:
            watcher.stop()
            LOGGER.info("Watcher stopped with %s venues in the catalog", len(catalog.venues()))


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    load_dotenv()
    args = _parse_args(argv)
    try:
        return asyncio.run(_run_watcher(args))
    except KeyboardInterrupt:
        LOGGER.info("Shutdown requested")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
