"""Per-user listing sessions that let pagination buttons replay a /casas search."""

from __future__ import annotations

from telegram import Update
from telegram.ext import ContextTypes

LISTING_SESSIONS_KEY = "venue_sessions"


def chat_id_of(update: Update) -> int | None:
    chat = getattr(update, "effective_chat", None)
    if chat is not None:
        return int(chat.id)
    chat_id = getattr(update.message, "chat_id", None)
    return int(chat_id) if chat_id is not None else None


def open_listing(context: ContextTypes.DEFAULT_TYPE, *, chat_id: int, message_id: int, query: str) -> str:
    """Remember the search behind a listing; older listings in the same chat expire."""

    sessions = context.user_data.get(LISTING_SESSIONS_KEY)
    if not isinstance(sessions, dict):
        sessions = {}
        context.user_data[LISTING_SESSIONS_KEY] = sessions

    chat_prefix = f"{chat_id}:"
    for key in [key for key in sessions if key.startswith(chat_prefix)]:
        del sessions[key]

    session_key = f"{chat_prefix}{message_id}"
    sessions[session_key] = {"query": query}
    return session_key


def listing_query(context: ContextTypes.DEFAULT_TYPE, session_key: str) -> str | None:
    """Search text of a live listing, or ``None`` once it has expired."""

    sessions = context.user_data.get(LISTING_SESSIONS_KEY)
    session = sessions.get(session_key) if isinstance(sessions, dict) else None
    if not isinstance(session, dict):
        return None
    return str(session.get("query") or "")
