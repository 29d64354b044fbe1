"""Telegram screenshot upload handler for venue ingestion."""

from __future__ import annotations

import asyncio
import logging

from telegram import Update
from telegram.error import NetworkError, TimedOut
from telegram.ext import ContextTypes, MessageHandler, filters

from ocdb.automation.ingestion_service import run_screenshot_ingestion
from ocdb.bot.handlers.config import ConfigError, resolve_catalog, resolve_gate, resolve_required
from ocdb.bot.handlers.renderers import EXTRACTION_FAILED_TEXT, format_ingest_summary


logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 20 * 1024 * 1024
BUSY_TEXT = "Ainda estou processando o print anterior. Aguarde e envie novamente."


def _resolve_image_source(message) -> tuple[object, int | None, str] | None:
    """Return (telegram object with get_file, size, mime type) for the upload."""
    photos = getattr(message, "photo", None)
    if photos:
        largest = photos[-1]
        return largest, getattr(largest, "file_size", None), "image/jpeg"

    document = getattr(message, "document", None)
    if document is not None:
        mime_type = document.mime_type or ""
        if mime_type.startswith("image/"):
            return document, document.file_size, mime_type
    return None


async def handle_screenshot_upload(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Download a screenshot, extract venues and admit the new ones."""
    message = update.message
    if message is None:
        return

    source = _resolve_image_source(message)
    if source is None:
        await message.reply_text("Envie um print (imagem) da agenda de shows.")
        return
    telegram_object, file_size, mime_type = source

    if file_size is not None and file_size > MAX_FILE_SIZE:
        await message.reply_text("Imagem muito grande. Tamanho máximo: 20 MB")
        return

    try:
        catalog = resolve_catalog(context)
        gate = resolve_gate(context)
        extractor = resolve_required(context, "extractor")
    except ConfigError as error:
        logger.error("Upload failed due to configuration error: %s", error)
        await message.reply_text("Processamento de prints temporariamente indisponível. Tente mais tarde.")
        return

    if gate.is_processing:
        await message.reply_text(BUSY_TEXT)
        return

    status_msg = await message.reply_text("Analisando print e eliminando duplicatas...")

    try:
        image_bytes = await _download_with_retry(telegram_object)
    except (NetworkError, TimedOut) as error:
        logger.warning("Screenshot download failed after retry: %s", error)
        await status_msg.edit_text("Erro de rede ao baixar a imagem. Tente novamente mais tarde.")
        return

    try:
        result = await run_screenshot_ingestion(
            image_bytes,
            service=catalog,
            extractor=extractor,
            gate=gate,
            mime_type=mime_type,
        )
    except Exception:
        logger.exception("Unexpected error while handling screenshot upload")
        await status_msg.edit_text(EXTRACTION_FAILED_TEXT)
        return

    # The batch is already admitted; a failed status edit must not rerun it.
    reply = BUSY_TEXT if result.is_busy else format_ingest_summary(result)
    try:
        await status_msg.edit_text(reply)
    except (NetworkError, TimedOut) as error:
        logger.warning("Could not edit status message, sending summary as a new reply: %s", error)
        await message.reply_text(reply)


async def _download(telegram_object) -> bytes:
    telegram_file = await telegram_object.get_file()
    return bytes(await telegram_file.download_as_bytearray())


async def _download_with_retry(telegram_object) -> bytes:
    """Download the upload, retrying once after a transient Telegram error."""
    try:
        return await _download(telegram_object)
    except (NetworkError, TimedOut) as error:
        logger.warning("Network error during screenshot download, retrying: %s", error)
    await asyncio.sleep(2)
    return await _download(telegram_object)


def build_upload_handler() -> MessageHandler:
    """Build screenshot upload message handler."""
    return MessageHandler(filters.PHOTO | filters.Document.IMAGE, handle_screenshot_upload)
