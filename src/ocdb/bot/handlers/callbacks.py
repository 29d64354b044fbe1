"""Callback handlers for confirmations and listing pagination."""

from __future__ import annotations

import logging

from telegram import Update
from telegram.ext import CallbackQueryHandler, ContextTypes

from ocdb.bot.handlers.config import ConfigError, resolve_catalog, resolve_page_size
from ocdb.bot.handlers.renderers import (
    CLEANUP_CANCEL,
    CLEANUP_CONFIRM,
    DELETE_CANCEL,
    DELETE_CONFIRM_PREFIX,
    VENUES_PAGE,
    VENUES_PAGE_PREFIX,
    build_pagination_keyboard,
    render_venues_page,
)
from ocdb.bot.handlers.sessions import listing_query

logger = logging.getLogger(__name__)


async def cleanup_confirm_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Apply the bulk cleanup after the operator confirmed it."""
    query = update.callback_query
    if query is None:
        return

    await query.answer()

    try:
        catalog = resolve_catalog(context)
    except ConfigError as error:
        logger.error("cleanup confirmation failed due to configuration error: %s", error)
        await query.edit_message_text("Limpeza temporariamente indisponível. Tente mais tarde.")
        return

    # Recomputed against the current store, which may have changed since the prompt.
    removed = catalog.apply_cleanup()
    if removed == 0:
        await query.edit_message_text("Nenhuma casa repetida encontrada. Seu banco está organizado!")
        return
    await query.edit_message_text(f"Sucesso! {removed} registros duplicados foram removidos.")


async def cleanup_cancel_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    del context
    query = update.callback_query
    if query is None:
        return

    await query.answer()
    await query.edit_message_text("Limpeza cancelada. Nada foi alterado.")


async def delete_confirm_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Delete the venue named in callback data (delete_confirm_<id>)."""
    query = update.callback_query
    if query is None or query.data is None:
        return

    await query.answer()

    venue_id = query.data.removeprefix(DELETE_CONFIRM_PREFIX)
    try:
        catalog = resolve_catalog(context)
    except ConfigError as error:
        logger.error("delete confirmation failed due to configuration error: %s", error)
        await query.edit_message_text("Remoção temporariamente indisponível. Tente mais tarde.")
        return

    if catalog.delete(venue_id):
        await query.edit_message_text("Casa removida da agenda.")
    else:
        await query.edit_message_text("Esta casa já não está no banco de dados.")


async def delete_cancel_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    del context
    query = update.callback_query
    if query is None:
        return

    await query.answer()
    await query.edit_message_text("Remoção cancelada.")


def parse_page_callback(data: str) -> tuple[str, int] | None:
    """Split ``venues_page_<session>_<page>`` into its session key and page."""
    if not data.startswith(VENUES_PAGE_PREFIX):
        return None
    session_key, _, page_raw = data.removeprefix(VENUES_PAGE_PREFIX).rpartition("_")
    if not session_key or not page_raw.isdigit():
        return None
    return session_key, int(page_raw)


async def venues_page_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Re-run the listing's search and show the requested page."""
    query = update.callback_query
    if query is None or query.data is None:
        return

    await query.answer()

    parsed = parse_page_callback(query.data)
    if parsed is None:
        await query.edit_message_text("Erro de navegação.")
        return
    session_key, page_num = parsed

    search_query = listing_query(context, session_key)
    if search_query is None:
        await query.edit_message_text("A lista expirou. Use /casas novamente.")
        return

    try:
        catalog = resolve_catalog(context)
        page_size = resolve_page_size(context)
    except ConfigError as error:
        logger.error("venues pagination failed due to configuration error: %s", error)
        await query.edit_message_text("Lista temporariamente indisponível. Tente mais tarde.")
        return

    # The store may have changed since the listing was opened.
    venues = catalog.search(search_query) if search_query else list(catalog.venues())
    if page_num * page_size >= len(venues):
        await query.edit_message_text("Página não existe.")
        return

    await query.edit_message_text(
        render_venues_page(venues=venues, search_query=search_query, page_num=page_num, page_size=page_size),
        reply_markup=build_pagination_keyboard(
            prefix=VENUES_PAGE,
            session_key=session_key,
            page_num=page_num,
            has_next=(page_num + 1) * page_size < len(venues),
        ),
    )


def build_callback_handlers() -> list[CallbackQueryHandler]:
    """Build all callback query handlers."""
    return [
        CallbackQueryHandler(cleanup_confirm_callback, pattern=f"^{CLEANUP_CONFIRM}$"),
        CallbackQueryHandler(cleanup_cancel_callback, pattern=f"^{CLEANUP_CANCEL}$"),
        CallbackQueryHandler(delete_confirm_callback, pattern=f"^{DELETE_CONFIRM_PREFIX}.+$"),
        CallbackQueryHandler(delete_cancel_callback, pattern=f"^{DELETE_CANCEL}$"),
        CallbackQueryHandler(venues_page_callback, pattern=rf"^{VENUES_PAGE_PREFIX}.+_\d+$"),
    ]
