"""Conversation flow for /editar venue corrections."""

from __future__ import annotations

import logging

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import (
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    ConversationHandler,
    MessageHandler,
    filters,
)

from ocdb.bot.handlers.commands import lookup_error_text
from ocdb.bot.handlers.config import ConfigError, resolve_catalog
from ocdb.bot.handlers.renderers import render_venue_details
from ocdb.catalog.store import AmbiguousVenueIdError, VenueNotFoundError


logger = logging.getLogger(__name__)

EDIT_SELECT_FIELD, EDIT_ENTER_VALUE = range(2)
EDIT_CALLBACK_PREFIX = "edit_field_"

EDITABLE_FIELDS = {
    "name": "Nome",
    "city": "Cidade",
    "region_code": "DDD",
}


async def edit_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    if update.message is None:
        logger.warning("/editar skipped: missing message update")
        return ConversationHandler.END

    id_prefix = " ".join(context.args or []).strip().lstrip("#")
    if not id_prefix:
        await update.message.reply_text("Uso: /editar <código>\n\nExemplo: /editar 3f2a9c1b")
        return ConversationHandler.END

    try:
        catalog = resolve_catalog(context)
    except ConfigError as error:
        logger.error("/editar failed due to configuration error: %s", error)
        await update.message.reply_text("Edição temporariamente indisponível. Tente mais tarde.")
        return ConversationHandler.END

    try:
        venue = catalog.resolve(id_prefix)
    except (VenueNotFoundError, AmbiguousVenueIdError) as error:
        await update.message.reply_text(lookup_error_text(error, id_prefix))
        return ConversationHandler.END

    context.user_data["edit_venue_id"] = venue.id
    reply_markup = InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton(text=label, callback_data=f"{EDIT_CALLBACK_PREFIX}{field_name}")
                for field_name, label in EDITABLE_FIELDS.items()
            ]
        ]
    )
    await update.message.reply_text(
        f"{render_venue_details(venue)}\n\nEscolha o campo a corrigir ou envie /cancel.",
        reply_markup=reply_markup,
    )
    return EDIT_SELECT_FIELD


async def edit_choose_field(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    query = update.callback_query
    if query is None or query.data is None:
        logger.warning("edit_choose_field skipped: missing callback_query update")
        return ConversationHandler.END

    await query.answer()
    field_name = query.data.removeprefix(EDIT_CALLBACK_PREFIX)
    if field_name not in EDITABLE_FIELDS:
        await query.edit_message_text("Campo inválido. Edição encerrada.")
        return ConversationHandler.END

    context.user_data["edit_field"] = field_name
    await query.edit_message_text(f"Envie o novo valor para {EDITABLE_FIELDS[field_name]} ou /cancel.")
    return EDIT_ENTER_VALUE


async def edit_save_value(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    if update.message is None:
        logger.warning("edit_save_value skipped: missing message update")
        return ConversationHandler.END

    venue_id = context.user_data.get("edit_venue_id")
    field_name = context.user_data.get("edit_field")
    if not venue_id or field_name not in EDITABLE_FIELDS:
        await update.message.reply_text("Sessão de edição expirou. Use /editar novamente.")
        return ConversationHandler.END

    value = (update.message.text or "").strip()
    if not value:
        await update.message.reply_text("O valor não pode ficar vazio. Tente novamente ou /cancel.")
        return EDIT_ENTER_VALUE

    try:
        catalog = resolve_catalog(context)
    except ConfigError as error:
        logger.error("edit_save_value failed due to configuration error: %s", error)
        await update.message.reply_text("Não foi possível salvar. Tente mais tarde.")
        return ConversationHandler.END

    # Edits are not re-checked for duplicates; /limpar handles collisions later.
    updated = catalog.edit(str(venue_id), **{field_name: value})
    context.user_data.pop("edit_venue_id", None)
    context.user_data.pop("edit_field", None)

    if updated is None:
        await update.message.reply_text("Esta casa já não está no banco de dados.")
        return ConversationHandler.END

    await update.message.reply_text(f"Registro atualizado.\n\n{render_venue_details(updated)}")
    return ConversationHandler.END


async def edit_cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    context.user_data.pop("edit_venue_id", None)
    context.user_data.pop("edit_field", None)
    if update.callback_query is not None:
        await update.callback_query.answer()
        await update.callback_query.edit_message_text("Edição cancelada.")
    else:
        if update.message is None:
            logger.warning("edit_cancel skipped: missing message and callback_query updates")
            return ConversationHandler.END
        await update.message.reply_text("Edição cancelada.")
    return ConversationHandler.END


def build_edit_conversation_handler() -> ConversationHandler:
    return ConversationHandler(
        entry_points=[CommandHandler("editar", edit_start)],
        states={
            EDIT_SELECT_FIELD: [
                CallbackQueryHandler(edit_choose_field, pattern=f"^{EDIT_CALLBACK_PREFIX}")
            ],
            EDIT_ENTER_VALUE: [
                MessageHandler(filters.TEXT & ~filters.COMMAND, edit_save_value)
            ],
        },
        fallbacks=[CommandHandler("cancel", edit_cancel)],
    )
