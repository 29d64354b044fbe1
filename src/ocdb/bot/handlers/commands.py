"""Command handlers for /start, /help, /casas, /limpar, /remover and /relatorio."""

from __future__ import annotations

import asyncio
import logging
import time

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes

from ocdb.bot.handlers.config import ConfigError, resolve_catalog, resolve_page_size
from ocdb.bot.handlers.renderers import (
    CLEANUP_CANCEL,
    CLEANUP_CONFIRM,
    DELETE_CANCEL,
    DELETE_CONFIRM_PREFIX,
    VENUES_PAGE,
    build_confirmation_keyboard,
    build_pagination_keyboard,
    render_cleanup_prompt,
    render_venue_details,
    render_venues_page,
)
from ocdb.bot.handlers.sessions import chat_id_of, open_listing
from ocdb.catalog.service import CLEANUP_CLEAN, CLEANUP_EMPTY
from ocdb.catalog.store import AmbiguousVenueIdError, VenueNotFoundError
from ocdb.report.pdf import render_report_pdf, report_filename

logger = logging.getLogger(__name__)

EMPTY_CATALOG_TEXT = "Seu banco de dados está vazio!"
NO_DUPLICATES_TEXT = "Nenhuma casa repetida encontrada. Seu banco está organizado!"


def lookup_error_text(error: LookupError, id_prefix: str) -> str:
    if isinstance(error, AmbiguousVenueIdError):
        return f"Mais de uma casa começa com #{id_prefix}. Use mais caracteres do código."
    return f"Nenhuma casa encontrada com o código #{id_prefix}."


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command with usage instructions."""
    del context
    if update.message is None:
        return

    text = (
        "OCDB — O Caminho do Baile\n\n"
        "Envie um print da agenda de shows e eu cadastro as casas automaticamente, "
        "ignorando as que já estão no banco.\n\n"
        "Use:\n"
        "• /casas [busca] — listar casas por região\n"
        "• /limpar — unificar casas repetidas\n"
        "• /editar <código> — corrigir nome, cidade ou DDD\n"
        "• /remover <código> — remover uma casa\n"
        "• /relatorio — exportar PDF ordenado por distância\n"
        "• /help — ajuda"
    )
    await update.message.reply_text(text)


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command with detailed usage guidance."""
    del context
    if update.message is None:
        return

    text = (
        "Ajuda:\n\n"
        "Print da agenda — envie como foto ou arquivo de imagem.\n"
        "  Casas repetidas (mesmo nome na mesma cidade) são ignoradas.\n\n"
        "/casas [busca] — lista agrupada por DDD, da mais próxima para a mais distante\n"
        "  Exemplo: /casas biguaçu\n\n"
        "/limpar — procura casas repetidas e pede confirmação antes de unificar\n\n"
        "/editar <código> — o código aparece como #abcd1234 na lista\n"
        "/remover <código> — pede confirmação antes de remover\n\n"
        "/relatorio — PDF com nome, cidade, DDD, distância, viagem e Instagram\n"
        "/cancel — cancelar uma edição em andamento"
    )
    await update.message.reply_text(text)


async def venues_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /casas [query] with a paginated, region-grouped listing."""
    if update.message is None:
        return

    chat_id = chat_id_of(update)
    if chat_id is None:
        await update.message.reply_text("Não foi possível identificar o chat.")
        return

    try:
        catalog = resolve_catalog(context)
        page_size = resolve_page_size(context)
    except ConfigError as error:
        logger.error("/casas failed due to configuration error: %s", error)
        await update.message.reply_text("Lista temporariamente indisponível. Tente mais tarde.")
        return

    query_text = " ".join(context.args or []).strip()
    venues = catalog.search(query_text) if query_text else list(catalog.venues())

    if not venues:
        if query_text:
            await update.message.reply_text(f"Nenhuma casa encontrada para: {query_text}")
        else:
            await update.message.reply_text(EMPTY_CATALOG_TEXT)
        return

    session_key = open_listing(
        context,
        chat_id=chat_id,
        message_id=int(getattr(update.message, "message_id", 0)),
        query=query_text,
    )

    text = render_venues_page(venues=venues, search_query=query_text, page_num=0, page_size=page_size)
    reply_markup = build_pagination_keyboard(
        prefix=VENUES_PAGE,
        session_key=session_key,
        page_num=0,
        has_next=len(venues) > page_size,
    )
    await update.message.reply_text(text, reply_markup=reply_markup)


async def cleanup_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /limpar by previewing the compaction and asking to confirm."""
    if update.message is None:
        return

    try:
        catalog = resolve_catalog(context)
    except ConfigError as error:
        logger.error("/limpar failed due to configuration error: %s", error)
        await update.message.reply_text("Limpeza temporariamente indisponível. Tente mais tarde.")
        return

    preview = catalog.preview_cleanup()
    if preview.status == CLEANUP_EMPTY:
        await update.message.reply_text(EMPTY_CATALOG_TEXT)
        return
    if preview.status == CLEANUP_CLEAN:
        await update.message.reply_text(NO_DUPLICATES_TEXT)
        return

    await update.message.reply_text(
        render_cleanup_prompt(preview.compaction.removed),
        reply_markup=build_confirmation_keyboard(confirm_data=CLEANUP_CONFIRM, cancel_data=CLEANUP_CANCEL),
    )


async def delete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /remover <code> by asking for confirmation."""
    if update.message is None:
        return

    id_prefix = " ".join(context.args or []).strip().lstrip("#")
    if not id_prefix:
        await update.message.reply_text("Uso: /remover <código>\n\nExemplo: /remover 3f2a9c1b")
        return

    try:
        catalog = resolve_catalog(context)
    except ConfigError as error:
        logger.error("/remover failed due to configuration error: %s", error)
        await update.message.reply_text("Remoção temporariamente indisponível. Tente mais tarde.")
        return

    try:
        venue = catalog.resolve(id_prefix)
    except (VenueNotFoundError, AmbiguousVenueIdError) as error:
        await update.message.reply_text(lookup_error_text(error, id_prefix))
        return

    await update.message.reply_text(
        "Tem certeza que deseja remover esta casa de show da sua agenda?\n\n" + render_venue_details(venue),
        reply_markup=build_confirmation_keyboard(
            confirm_data=f"{DELETE_CONFIRM_PREFIX}{venue.id}",
            cancel_data=DELETE_CANCEL,
        ),
    )


async def report_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /relatorio by sending the catalog as a PDF document."""
    if update.message is None:
        return

    try:
        catalog = resolve_catalog(context)
    except ConfigError as error:
        logger.error("/relatorio failed due to configuration error: %s", error)
        await update.message.reply_text("Relatório temporariamente indisponível. Tente mais tarde.")
        return

    venues = catalog.venues()
    try:
        pdf_bytes = await asyncio.to_thread(render_report_pdf, venues)
    except Exception:
        logger.exception("Failed to render venue report")
        await update.message.reply_text("Não foi possível gerar o relatório. Tente mais tarde.")
        return

    await update.message.reply_document(
        document=pdf_bytes,
        filename=report_filename(int(time.time() * 1000)),
        caption=f"Relatório com {len(venues)} casas.",
    )


def build_command_handlers() -> list[CommandHandler]:
    """Build all command handlers."""
    return [
        CommandHandler("start", start_command),
        CommandHandler("help", help_command),
        CommandHandler("casas", venues_command),
        CommandHandler("limpar", cleanup_command),
        CommandHandler("remover", delete_command),
        CommandHandler("relatorio", report_command),
    ]
