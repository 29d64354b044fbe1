"""Watch a screenshots folder and hand each settled image to an async consumer."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
import threading
from typing import Awaitable, Callable

from watchdog.events import FileSystemEvent, PatternMatchingEventHandler
from watchdog.observers import Observer


LOGGER = logging.getLogger(__name__)

SCREENSHOT_PATTERNS = ["*.png", "*.jpg", "*.jpeg", "*.webp"]
PARTIAL_FILE_PATTERNS = ["*.tmp", "*.part", "*.crdownload", ".*", "*~"]

ScreenshotCallback = Callable[[Path], Awaitable[None]]


class DebouncedScreenshotHandler(PatternMatchingEventHandler):
    """Turn bursts of filesystem events into one queued path per screenshot.

    Screenshot tools often write a temporary file and rename it, or write the
    image in several chunks, so both creations and renames restart a per-path
    timer and only the quiet path is queued.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        queue: asyncio.Queue[Path],
        debounce_seconds: float = 2.0,
    ) -> None:
        super().__init__(
            patterns=SCREENSHOT_PATTERNS,
            ignore_patterns=PARTIAL_FILE_PATTERNS,
            ignore_directories=True,
            case_sensitive=False,
        )
        self._loop = loop
        self._queue = queue
        self._debounce_seconds = debounce_seconds
        self._pending: dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def on_created(self, event: FileSystemEvent) -> None:  # type: ignore[override]
        self._schedule(str(event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:  # type: ignore[override]
        # Only the final name matters; a rename away from a watched name is ignored.
        destination = str(getattr(event, "dest_path", "") or "")
        if destination and self._is_screenshot(destination):
            self._schedule(destination)

    def _is_screenshot(self, raw_path: str) -> bool:
        name = Path(raw_path).name.lower()
        if any(Path(name).match(pattern) for pattern in PARTIAL_FILE_PATTERNS):
            return False
        return any(Path(name).match(pattern) for pattern in SCREENSHOT_PATTERNS)

    def _schedule(self, raw_path: str) -> None:
        with self._lock:
            previous = self._pending.pop(raw_path, None)
            if previous is not None:
                previous.cancel()
            timer = threading.Timer(self._debounce_seconds, self._settle, args=(raw_path,))
            timer.daemon = True
            self._pending[raw_path] = timer
            timer.start()

    def _settle(self, raw_path: str) -> None:
        with self._lock:
            self._pending.pop(raw_path, None)
        self._loop.call_soon_threadsafe(self._queue.put_nowait, Path(raw_path))

    def close(self) -> None:
        with self._lock:
            timers = list(self._pending.values())
            self._pending.clear()
        for timer in timers:
            timer.cancel()


class ScreenshotFolderWatcher:
    """Feed screenshots dropped into a folder to an async callback, one at a time."""

    def __init__(
        self,
        watch_dir: str | Path,
        callback: ScreenshotCallback,
        debounce_seconds: float = 2.0,
    ) -> None:
        self._watch_dir = Path(watch_dir)
        self._callback = callback
        self._debounce_seconds = debounce_seconds
        self._queue: asyncio.Queue[Path] | None = None
        self._handler: DebouncedScreenshotHandler | None = None
        self._observer: Observer | None = None
        self._consumer_task: asyncio.Task[None] | None = None

    @property
    def watch_dir(self) -> Path:
        return self._watch_dir

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    async def _consume(self, queue: asyncio.Queue[Path]) -> None:
        while True:
            path = await queue.get()
            try:
                if path.exists():
                    await self._callback(path)
                else:
                    LOGGER.info("Screenshot vanished before processing: %s", path)
            except Exception:
                LOGGER.exception("Screenshot callback failed for %s", path)
            finally:
                queue.task_done()

    async def start(self) -> None:
        if self._observer is not None:
            return
        if not self._watch_dir.is_dir():
            raise ValueError(f"Watch directory is not a folder: {self._watch_dir}")

        queue: asyncio.Queue[Path] = asyncio.Queue()
        handler = DebouncedScreenshotHandler(
            loop=asyncio.get_running_loop(),
            queue=queue,
            debounce_seconds=self._debounce_seconds,
        )
        observer = Observer()
        observer.schedule(handler, str(self._watch_dir), recursive=False)
        observer.start()

        self._queue = queue
        self._handler = handler
        self._observer = observer
        self._consumer_task = asyncio.create_task(self._consume(queue))
        LOGGER.info("Watching %s for screenshots", self._watch_dir)

    def stop(self) -> None:
        observer, handler, consumer = self._observer, self._handler, self._consumer_task
        self._observer = self._handler = self._consumer_task = self._queue = None

        if observer is not None:
            observer.stop()
            observer.join(timeout=5.0)
        if handler is not None:
            handler.close()
        if consumer is not None:
            consumer.cancel()
        LOGGER.info("Stopped watching %s", self._watch_dir)
