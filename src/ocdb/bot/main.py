"""Production Telegram bot entrypoint with handler registration and polling."""

from __future__ import annotations

import asyncio
import logging
import sys

from dotenv import load_dotenv
from telegram.ext import Application

load_dotenv()

from ocdb.automation.ingestion_service import IngestGate, build_folder_callback
from ocdb.automation.watcher import ScreenshotFolderWatcher
from ocdb.bot.config import BotSettings
from ocdb.bot.handlers.callbacks import build_callback_handlers
from ocdb.bot.handlers.commands import build_command_handlers
from ocdb.bot.handlers.edit import build_edit_conversation_handler
from ocdb.bot.handlers.upload import build_upload_handler
from ocdb.catalog.persistence import VenueBlobStorage
from ocdb.catalog.service import CatalogService
from ocdb.extraction.config import ExtractionSettings
from ocdb.extraction.openrouter import OpenRouterVenueExtractor


logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)


def build_application(
    settings: BotSettings,
    *,
    storage: VenueBlobStorage,
    extractor: OpenRouterVenueExtractor,
) -> Application:
    """Build PTB Application with all handlers registered."""
    catalog = CatalogService.from_storage(storage)

    # Concurrent updates keep the bot responsive while an extraction is outstanding;
    # the ingest gate still allows only one at a time.
    application = Application.builder().token(settings.token).concurrent_updates(True).build()

    application.bot_data["storage"] = storage
    application.bot_data["catalog"] = catalog
    application.bot_data["extractor"] = extractor
    application.bot_data["ingest_gate"] = IngestGate()
    application.bot_data["page_size"] = settings.page_size

    # Edit conversation first so its /cancel and text replies take priority
    application.add_handler(build_edit_conversation_handler())

    for handler in build_command_handlers():
        application.add_handler(handler)

    application.add_handler(build_upload_handler())

    for handler in build_callback_handlers():
        application.add_handler(handler)

    logger.info("Registered all handlers: edit, commands, upload, callbacks")
    return application


async def _start_watcher(settings: BotSettings, application: Application) -> ScreenshotFolderWatcher | None:
    if not settings.watch_dir.is_dir():
        logger.warning("Watch directory does not exist, watcher disabled: %s", settings.watch_dir)
        return None

    callback = build_folder_callback(
        service=application.bot_data["catalog"],
        extractor=application.bot_data["extractor"],
        gate=application.bot_data["ingest_gate"],
    )
    watcher = ScreenshotFolderWatcher(watch_dir=settings.watch_dir, callback=callback)
    await watcher.start()
    return watcher


async def run_bot(settings: BotSettings, extraction_settings: ExtractionSettings) -> None:
    """Poll Telegram and watch the screenshots folder until cancelled."""
    storage = VenueBlobStorage(settings.db_path)
    application = build_application(
        settings,
        storage=storage,
        extractor=OpenRouterVenueExtractor(extraction_settings),
    )
    watcher: ScreenshotFolderWatcher | None = None

    try:
        async with application:
            await application.start()
            updater = application.updater
            if updater is None:
                raise RuntimeError("Bot updater is not initialized")
            await updater.start_polling(allowed_updates=["message", "callback_query"])

            watcher = await _start_watcher(settings, application)
            logger.info(
                "Bot polling started with %s venues. Press Ctrl+C to stop.",
                len(application.bot_data["catalog"].venues()),
            )

            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                logger.info("Received stop signal. Shutting down...")
            finally:
                if watcher is not None:
                    watcher.stop()
                await updater.stop()
                await application.stop()
    finally:
        storage.close()
        logger.info("Bot stopped cleanly.")


def main() -> None:
    """Main entrypoint for Telegram bot."""
    try:
        settings = BotSettings.from_env()
        extraction_settings = ExtractionSettings.from_env()
        logger.info(
            "Loaded bot config: db=%s, watch_dir=%s, model=%s",
            settings.db_path,
            settings.watch_dir,
            extraction_settings.model,
        )
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        sys.exit(1)

    try:
        asyncio.run(run_bot(settings, extraction_settings))
    except KeyboardInterrupt:
        logger.info("Bot interrupted by user.")
        sys.exit(0)


if __name__ == "__main__":
    main()
