"""Automation services for screenshot ingestion workflows."""

from ocdb.automation.ingestion_service import (
    IngestGate,
    ScreenshotIngestResult,
    build_folder_callback,
    ingest_screenshot_file,
    run_screenshot_ingestion,
)
from ocdb.automation.watcher import DebouncedScreenshotHandler, ScreenshotFolderWatcher

__all__ = [
    "DebouncedScreenshotHandler",
    "IngestGate",
    "ScreenshotFolderWatcher",
    "ScreenshotIngestResult",
    "build_folder_callback",
    "ingest_screenshot_file",
    "run_screenshot_ingestion",
]
